"""
Management command to build the Canadian datasets from the Represent API.

Writes three files into the Canadian data directory:
- mp-data.json: sitting Members of Parliament
- ridings-data.json: federal electoral districts with their FSAs
- postal-code-riding.json: FSA → riding mapping, probed postal code by postal code

The FSA probe is slow (one request per candidate postal code, throttled in
batches); --quick limits it to a sample of FSAs.
"""

import json
from pathlib import Path

import requests
from django.core.management.base import BaseCommand, CommandError

from advocacy.services.canada import CanadianDataRepository
from advocacy.services.canada_sync import SAMPLE_FSAS, CanadaDataFetcher, generate_all_fsas
from advocacy.services.datasets import get_data_dir


class Command(BaseCommand):
    help = 'Fetch Canadian MPs, ridings and the FSA → riding mapping from represent.opennorth.ca'

    def add_arguments(self, parser):
        parser.add_argument(
            '--quick',
            action='store_true',
            help='Only probe a sample of FSAs instead of every possible FSA',
        )
        parser.add_argument(
            '--mps-only',
            action='store_true',
            help='Refresh MPs and ridings but reuse the existing FSA mapping',
        )
        parser.add_argument(
            '--output',
            type=str,
            default=None,
            help='Output directory (default: the bundled Canadian data directory)',
        )
        parser.add_argument(
            '--delay',
            type=float,
            default=1.0,
            help='Seconds to wait between batches of postal code requests',
        )

    def handle(self, *args, **options):
        output_dir = Path(options['output']) if options['output'] else get_data_dir() / 'ca'
        fetcher = CanadaDataFetcher(batch_delay=options['delay'])

        try:
            self.stdout.write('Fetching federal electoral districts...')
            ridings = fetcher.fetch_ridings()
            self.stdout.write('Fetching House of Commons members...')
            mps = fetcher.fetch_mps(ridings)

            mapping_path = output_dir / 'postal-code-riding.json'
            if options['mps_only']:
                if not mapping_path.exists():
                    raise CommandError(f"--mps-only needs an existing FSA mapping at {mapping_path}")
                with mapping_path.open('r', encoding='utf-8') as mapping_file:
                    mapping = json.load(mapping_file)
                self.stdout.write(f'Reusing {len(mapping)} FSAs from {mapping_path}')
            else:
                fsas = list(SAMPLE_FSAS) if options['quick'] else generate_all_fsas()
                self.stdout.write(f'Probing {len(fsas)} FSAs...')
                mapping = fetcher.build_fsa_mapping(fsas)
        except requests.RequestException as exc:
            raise CommandError(f'Failed to fetch data from the Represent API: {exc}') from exc

        fetcher.attach_postal_codes(ridings, mapping)

        fetcher.write(output_dir, 'mp-data.json', mps)
        fetcher.write(output_dir, 'ridings-data.json', ridings)
        if not options['mps_only']:
            fetcher.write(output_dir, 'postal-code-riding.json', mapping)

        CanadianDataRepository.reset()

        missing_email = sum(1 for mp in mps if not mp['email'])
        self.stdout.write(self.style.SUCCESS(
            f'Saved {len(mps)} MPs, {len(ridings)} ridings and {len(mapping)} FSAs to {output_dir}'
        ))
        if missing_email:
            self.stdout.write(self.style.WARNING(f'{missing_email} MPs have no email address'))
