# ABOUTME: Imports a campaign's target list from a CSV, TSV or JSON file or a Google Sheet.
# ABOUTME: Validates every row first and only replaces the stored list when nothing is wrong.

from pathlib import Path

from django.core.management.base import BaseCommand, CommandError

from advocacy.models import Campaign
from advocacy.services.target_store import TargetSaveError, replace_campaign_targets
from advocacy.services.targets import TargetImport, TargetImportError, summarize_issues


class Command(BaseCommand):
    help = 'Replace the targets of a campaign with the rows of a file or Google Sheet'

    def add_arguments(self, parser):
        parser.add_argument('campaign', type=str, help='Campaign slug')
        parser.add_argument('source', type=str, help='Path to a .csv/.tsv/.json file or a Google Sheets URL')
        parser.add_argument(
            '--no-header',
            action='store_true',
            help='The first row is data, not column names',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Validate and report without saving',
        )

    def handle(self, *args, **options):
        try:
            campaign = Campaign.objects.get(slug=options['campaign'])
        except Campaign.DoesNotExist:
            raise CommandError(f"Campaign '{options['campaign']}' does not exist")

        source = options['source']
        try:
            if source.startswith(('http://', 'https://')):
                target_import = TargetImport.from_google_sheet(source)
            else:
                path = Path(source).expanduser()
                if not path.exists():
                    raise CommandError(f"File {path} does not exist")
                target_import = TargetImport.from_file(path.name, path.read_bytes())
        except TargetImportError as exc:
            raise CommandError(exc.message) from exc

        if options['no_header']:
            target_import.toggle_header(False)

        validation = target_import.validation
        self.stdout.write(
            f"{validation.total_rows} rows: {validation.valid_rows} valid, "
            f"{validation.skipped_rows} empty, {len(validation.issues)} with problems"
        )

        if validation.missing_required_columns:
            missing = ', '.join(validation.missing_required_columns)
            raise CommandError(f"No column maps to the required field(s): {missing}")

        for line in summarize_issues(validation.issues):
            self.stdout.write(self.style.WARNING(f"  {line}"))
        if validation.issues:
            raise CommandError("Fix the listed rows before importing")
        if not validation.targets:
            raise CommandError("No targets to import")

        if options['dry_run']:
            self.stdout.write(self.style.SUCCESS(f"Dry run: {validation.valid_rows} targets would be saved"))
            return

        try:
            created = replace_campaign_targets(campaign, validation.targets)
        except TargetSaveError as exc:
            raise CommandError(f"Saving failed, previous targets kept: {exc}") from exc

        self.stdout.write(self.style.SUCCESS(f"Saved {len(created)} targets for {campaign.slug}"))
