import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class AdvocacyConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'advocacy'

    def ready(self):
        """Load the bundled jurisdiction datasets once at startup."""
        from django.conf import settings

        if not getattr(settings, 'ADVOCACY_WARM_DATASETS', True):
            return

        from .services import (
            CanadianDataRepository,
            FrenchDataRepository,
            GermanDataRepository,
            UKDataRepository,
            USDataRepository,
        )

        logger.info("Warming jurisdiction datasets on startup...")
        try:
            GermanDataRepository.get_index()
            FrenchDataRepository.get_index()
            CanadianDataRepository.get_index()
            UKDataRepository.get_index()
            USDataRepository.get_index()
        except (OSError, ValueError) as e:
            logger.warning("Failed to warm jurisdiction datasets: %s", e)
            return
        logger.info("Jurisdiction datasets loaded")
