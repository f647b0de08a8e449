import signal
import threading

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from apps.exchange.application.factories import get_sync_service
from apps.exchange.application.sync import RateSyncScheduler
from apps.exchange.application.tasks import sync_exchange_rates
from apps.exchange.domain.errors import ExternalServiceError


class Command(BaseCommand):
    help = 'Synchronize exchange rates from the active providers'

    def add_arguments(self, parser):
        parser.add_argument(
            '--loop',
            action='store_true',
            help='Keep running and sync on a fixed interval until interrupted'
        )
        parser.add_argument(
            '--interval',
            dest='interval_hours',
            type=float,
            default=None,
            help='Hours between syncs in --loop mode (default: RATE_SYNC_INTERVAL_HOURS)'
        )
        parser.add_argument(
            '--async',
            dest='async_mode',
            action='store_true',
            help='Dispatch a Celery task instead of syncing in this process'
        )

    def handle(self, **options):
        if options['async_mode']:
            self.stdout.write('Dispatching Celery task...')
            task = sync_exchange_rates.delay()
            self.stdout.write(self.style.SUCCESS(f'Task dispatched with ID: {task.id}'))
            self.stdout.write('Use "celery -A core inspect active" to check task status')
            return

        if options['loop']:
            self._run_loop(options['interval_hours'] or settings.RATE_SYNC_INTERVAL_HOURS)
            return

        try:
            result = get_sync_service().sync_now()
        except ExternalServiceError as e:
            raise CommandError(f"Failed: {e}")

        if result.skipped:
            self.stdout.write(self.style.WARNING('A sync is already in progress'))
            return

        self.stdout.write(
            self.style.SUCCESS(
                f"Synced {result.rates_synced} rates from {result.provider_used}"
            )
        )
        if result.skipped_manual:
            self.stdout.write(f"Manual overrides kept: {', '.join(result.skipped_manual)}")
        if result.errors:
            self.stdout.write(self.style.WARNING(f"Provider errors: {len(result.errors)}"))

    def _run_loop(self, interval_hours: float):
        if interval_hours <= 0:
            raise CommandError('--interval must be positive')

        scheduler = RateSyncScheduler(get_sync_service(), interval_seconds=interval_hours * 3600)
        stopped = threading.Event()

        def _shutdown(signum, frame):
            stopped.set()

        signal.signal(signal.SIGTERM, _shutdown)
        signal.signal(signal.SIGINT, _shutdown)

        scheduler.start()
        self.stdout.write(self.style.SUCCESS(f'Syncing every {interval_hours}h. Ctrl+C to stop.'))
        stopped.wait()
        scheduler.stop(timeout=30)
        self.stdout.write(
            f'Stopped after {scheduler.cycles_run} cycle(s), {scheduler.cycles_failed} failed'
        )
