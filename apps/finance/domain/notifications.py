"""
Texts of the notifications raised when a user records something.
"""

from typing import Tuple

RECORD_TITLES = {
    "income": "Income added",
    "expense": "Expense added",
    "saving": "Saving recorded",
    "investment": "Investment added",
}


def build_record_message(kind: str, label: str, amount, currency: str) -> Tuple[str, str]:
    """Return (title, message) for a newly created record."""
    title = RECORD_TITLES.get(kind, "Record added")
    if label:
        return title, f"{label}: {amount} {currency}"
    return title, f"{amount} {currency}"
