"""
Django settings for the fintrack project.

Every deployment-specific value comes from the environment (a local .env
file is loaded first when present).
"""

import os
from datetime import timedelta
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

load_dotenv(BASE_DIR / ".env")


def env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def env_list(name: str, default: str = "") -> list[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


SECRET_KEY = os.getenv("SECRET_KEY", "django-insecure-change-me")

DEBUG = env_bool("DEBUG", False)

ALLOWED_HOSTS = env_list("ALLOWED_HOSTS", "localhost,127.0.0.1")


# Application definition

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "rest_framework",
    "drf_spectacular",
    "apps.exchange",
    "apps.finance",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "core.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "core.wsgi.application"


# Database

DATABASES = {
    "default": {
        "ENGINE": os.getenv("DB_ENGINE", "django.db.backends.sqlite3"),
        "NAME": os.getenv("DB_NAME", str(BASE_DIR / "db.sqlite3")),
        "USER": os.getenv("DB_USER", ""),
        "PASSWORD": os.getenv("DB_PASSWORD", ""),
        "HOST": os.getenv("DB_HOST", ""),
        "PORT": os.getenv("DB_PORT", ""),
    }
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

CACHES = {
    "default": {
        "BACKEND": os.getenv("CACHE_BACKEND", "django.core.cache.backends.locmem.LocMemCache"),
        "LOCATION": os.getenv("CACHE_LOCATION", "fintrack"),
    }
}


# Internationalization

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR / "staticfiles"


# REST framework

REST_FRAMEWORK = {
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "rest_framework.authentication.SessionAuthentication",
        "rest_framework.authentication.BasicAuthentication",
    ],
    "EXCEPTION_HANDLER": "core.exceptions.domain_exception_handler",
}

SPECTACULAR_SETTINGS = {
    "TITLE": "Fintrack API",
    "DESCRIPTION": "Multi-currency personal finance tracking: records, exchange rates and dashboard.",
    "VERSION": "1.0.0",
    "SERVE_INCLUDE_SCHEMA": False,
}


# Currencies and exchange rates

# All stored amounts and rates are normalized to this currency.
BASE_CURRENCY = os.getenv("BASE_CURRENCY", "USD").strip().upper()

# Used by the rate sync when no Currency rows are registered.
SUPPORTED_CURRENCIES = env_list(
    "SUPPORTED_CURRENCIES",
    "USD,EUR,JPY,GBP,AUD,ILS,JOD,KWD,BHD,OMR,QAR,SAR,AED",
)

RATE_SYNC_INTERVAL_HOURS = float(os.getenv("RATE_SYNC_INTERVAL_HOURS", "12"))
RATE_SYNC_LOCK_TIMEOUT = int(os.getenv("RATE_SYNC_LOCK_TIMEOUT", "600"))

EXCHANGERATE_URL = os.getenv("EXCHANGERATE_URL", "https://v6.exchangerate-api.com/v6")
EXCHANGERATE_API_KEY = os.getenv("EXCHANGERATE_API_KEY", "")

CURRENCY_BEACON_URL = os.getenv("CURRENCY_BEACON_URL", "https://api.currencybeacon.com/v1")
CURRENCY_BEACON_API_KEY = os.getenv("CURRENCY_BEACON_API_KEY", "")


# Market data

FINNHUB_URL = os.getenv("FINNHUB_URL", "https://finnhub.io/api/v1")
FINNHUB_API_KEY = os.getenv("FINNHUB_API_KEY", "")

COINGECKO_URL = os.getenv("COINGECKO_URL", "https://api.coingecko.com/api/v3")

# Seconds to wait between two market data calls (provider rate limits)
MARKET_DATA_REQUEST_DELAY = float(os.getenv("MARKET_DATA_REQUEST_DELAY", "1"))

# "live" (Finnhub + CoinGecko) or "mock"
MARKET_DATA_PROVIDER = os.getenv("MARKET_DATA_PROVIDER", "live").strip().lower()


# Celery

CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", "redis://localhost:6379/0")
CELERY_TASK_ALWAYS_EAGER = env_bool("CELERY_TASK_ALWAYS_EAGER", False)
CELERY_TIMEZONE = TIME_ZONE

CELERY_BEAT_SCHEDULE = {
    "sync-exchange-rates": {
        "task": "sync_exchange_rates",
        "schedule": timedelta(hours=RATE_SYNC_INTERVAL_HOURS),
    },
    "check-providers-health": {
        "task": "check_providers_health",
        "schedule": timedelta(hours=24),
    },
    "refresh-investment-prices": {
        "task": "refresh_investment_prices",
        "schedule": timedelta(hours=24),
    },
}


# Logging

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "WARNING",
    },
    "loggers": {
        "apps": {
            "level": LOG_LEVEL,
        },
        "core": {
            "level": LOG_LEVEL,
        },
    },
}
