# ABOUTME: Query management command to resolve a postal code to districts and representatives.
# ABOUTME: Debugging tool for checking the bundled datasets and the UK postcode lookup.

from django.core.management.base import BaseCommand, CommandError

from advocacy.constants import SUPPORTED_COUNTRIES
from advocacy.services import JurisdictionResolver


class Command(BaseCommand):
    help = 'Find districts and representatives for a postal code'

    def add_arguments(self, parser):
        parser.add_argument(
            'postal_code',
            type=str,
            help='Postal code (e.g., "10115", "75001", "M5V 2H1", "SW1A 1AA", "10001")'
        )
        parser.add_argument(
            '--country',
            type=str,
            default='DE',
            help='Country code: DE, FR, CA, UK or US (default: DE)',
        )

    def handle(self, *args, **options):
        country = options['country'].upper()
        if country not in SUPPORTED_COUNTRIES:
            raise CommandError(f"Unsupported country '{country}'. Choose one of: {', '.join(SUPPORTED_COUNTRIES)}")

        resolution = JurisdictionResolver().resolve(options['postal_code'], country)

        if not resolution.found:
            self.stdout.write(self.style.WARNING(f"No district found for {options['postal_code']} ({country})"))
            return

        precision = 'exact' if resolution.precise else 'broader region'
        self.stdout.write(self.style.SUCCESS(f'\n=== Districts ({len(resolution.districts)}, {precision}) ==='))
        for district in resolution.districts:
            region = f" [{district.region}]" if district.region else ''
            self.stdout.write(f"  {district.id}: {district.name}{region}")

        self.stdout.write(self.style.SUCCESS(f'\n=== Representatives ({len(resolution.representatives)}) ==='))
        for representative in resolution.representatives:
            email = f" <{representative.email}>" if representative.email else ''
            self.stdout.write(f"  {representative.name} ({representative.party}){email}")
