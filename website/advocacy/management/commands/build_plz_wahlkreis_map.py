import json
from pathlib import Path

from django.core.management.base import BaseCommand, CommandError
from tqdm import tqdm

from advocacy.geo import BoundaryIndex, map_postal_areas
from advocacy.services.datasets import get_data_dir
from advocacy.services.germany import GermanDataRepository


class Command(BaseCommand):
    """Assign every German postal code area to the Wahlkreis containing it."""

    help = (
        "Build plz-wahlkreis-geo.json from a PLZ polygon GeoJSON and a Wahlkreis boundary GeoJSON. "
        "Each PLZ is assigned to the Wahlkreis containing its centroid."
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "plz_geojson",
            help="GeoJSON FeatureCollection of postal code polygons (postcode/plz property).",
        )
        parser.add_argument(
            "wahlkreise_geojson",
            help="GeoJSON FeatureCollection of Wahlkreis boundaries (WKR_NR, WKR_NAME, LAND_NAME).",
        )
        parser.add_argument(
            "--output",
            default=None,
            help="Destination file (default: plz-wahlkreis-geo.json in the German data directory).",
        )
        parser.add_argument(
            "--force",
            action="store_true",
            help="Overwrite an existing output file.",
        )

    def handle(self, *args, **options):
        plz_path = Path(options["plz_geojson"]).expanduser()
        boundaries_path = Path(options["wahlkreise_geojson"]).expanduser()
        output_path = Path(options["output"]).expanduser() if options["output"] else (
            get_data_dir() / "de" / "plz-wahlkreis-geo.json"
        )

        for path in (plz_path, boundaries_path):
            if not path.exists():
                raise CommandError(f"Input file {path} does not exist")

        if output_path.exists() and not options["force"]:
            raise CommandError(f"Output file {output_path} already exists. Use --force to overwrite.")

        try:
            boundaries = BoundaryIndex.from_geojson(boundaries_path)
            with plz_path.open("r", encoding="utf-8") as plz_file:
                postal_features = json.load(plz_file).get("features", [])
        except json.JSONDecodeError as exc:
            raise CommandError(f"Input is not valid GeoJSON: {exc}") from exc

        if not len(boundaries):
            raise CommandError(f"No Wahlkreis boundaries found in {boundaries_path}")

        self.stdout.write(
            f"Mapping {len(postal_features)} PLZ areas onto {len(boundaries)} Wahlkreise..."
        )
        mapping, unmatched = map_postal_areas(
            postal_features,
            boundaries,
            progress=lambda features: tqdm(features, desc="PLZ", unit="plz"),
        )

        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(
            json.dumps(dict(sorted(mapping.items())), ensure_ascii=False, indent="\t"),
            encoding="utf-8",
        )
        GermanDataRepository.reset()

        self.stdout.write(self.style.SUCCESS(f"Saved {len(mapping)} PLZ mappings to {output_path}"))
        if unmatched:
            sample = ", ".join(unmatched[:50])
            self.stdout.write(self.style.WARNING(f"{len(unmatched)} PLZ without Wahlkreis: {sample}"))
