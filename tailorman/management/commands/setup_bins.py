"""
Management command to create the default storage and wash bins.

Usage:
    python manage.py setup_bins
    python manage.py setup_bins --dry-run
"""

from django.core.management.base import BaseCommand

from tailorman.models import Bin, BinType, Wash

DEFAULT_BINS = [
    {'code': 'STORAGE-Z1A', 'name': 'ZONE1-A', 'type': BinType.STORAGE, 'zone': 'ZONE1', 'capacity': 10},
    {'code': 'STORAGE-Z1B', 'name': 'ZONE1-B', 'type': BinType.STORAGE, 'zone': 'ZONE1', 'capacity': 10},
    {'code': 'WASH-IND-001', 'name': 'INDIGO', 'type': BinType.WASH, 'zone': 'WASH', 'wash': Wash.IND, 'capacity': 50},
    {'code': 'WASH-STA-001', 'name': 'STARDUST', 'type': BinType.WASH, 'zone': 'WASH', 'wash': Wash.STA, 'capacity': 50},
    {'code': 'WASH-ONX-001', 'name': 'ONYX', 'type': BinType.WASH, 'zone': 'WASH', 'wash': Wash.ONX, 'capacity': 50},
    {'code': 'WASH-JAG-001', 'name': 'JAGGER', 'type': BinType.WASH, 'zone': 'WASH', 'wash': Wash.JAG, 'capacity': 50},
]


class Command(BaseCommand):
    """Create default bins command."""

    help = 'Creates the default storage and wash bins (existing codes are left untouched)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show which bins would be created without creating them'
        )

    def handle(self, *args, **options):
        existing = set(Bin.objects.filter(
            code__in=[b['code'] for b in DEFAULT_BINS]
        ).values_list('code', flat=True))
        missing = [b for b in DEFAULT_BINS if b['code'] not in existing]

        if options['dry_run']:
            for attrs in missing:
                self.stdout.write(f"would create {attrs['code']} ({attrs['name']})")
            self.stdout.write(f'{len(missing)} bin(s) would be created')
            return

        for attrs in missing:
            Bin.objects.create(**attrs)
        self.stdout.write(
            self.style.SUCCESS(f'{len(missing)} bin(s) created, {len(existing)} already present')
        )
