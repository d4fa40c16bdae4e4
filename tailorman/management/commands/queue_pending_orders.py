"""
Management command to queue unprocessed orders.

Orders are bound to stock where possible; the rest are grouped onto
production requests by universal SKU.

Usage:
    python manage.py queue_pending_orders
    python manage.py queue_pending_orders --no-stock
"""

from django.core.management.base import BaseCommand

from tailorman import tailor


class Command(BaseCommand):
    """Queue unprocessed orders command."""

    help = 'Binds unprocessed orders to stock or waitlists them on production requests'

    def add_arguments(self, parser):
        parser.add_argument(
            '--no-stock',
            action='store_true',
            help='Skip stock and send every order to production'
        )

    def handle(self, *args, **options):
        result = tailor.queue_pending_orders(use_stock=not options['no_stock'])

        for request in result.production_requests:
            self.stdout.write(f'{request.code} {request.sku} x{request.quantity}')
        self.stdout.write(
            self.style.SUCCESS(
                f'{len(result.allocated)} order(s) allocated from stock, '
                f'{len(result.waitlisted)} waitlisted on '
                f'{len(result.production_requests)} production request(s)'
            )
        )
