# ABOUTME: Persists a validated target list for a campaign, replacing the previous list.
# ABOUTME: Delete and batched inserts run in one transaction so a failure leaves the old list intact.

import logging
from typing import Dict, Iterable, List, Optional

from django.conf import settings
from django.db import DatabaseError, transaction

from ..models import Campaign, CampaignTarget

logger = logging.getLogger('advocacy.services')

DEFAULT_BATCH_SIZE = 500
OPTIONAL_TEXT_FIELDS = ('city', 'region', 'country_code', 'category', 'image_url')


class TargetSaveError(Exception):
    """Saving the target list failed; nothing was changed."""


def _to_float(value) -> Optional[float]:
    if value is None or str(value).strip() == '':
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def build_target(campaign: Campaign, row: Dict[str, str]) -> CampaignTarget:
    optional = {name: (row.get(name) or None) for name in OPTIONAL_TEXT_FIELDS}
    return CampaignTarget(
        campaign=campaign,
        name=row['name'],
        email=row['email'],
        postal_code=row['postal_code'],
        latitude=_to_float(row.get('latitude')),
        longitude=_to_float(row.get('longitude')),
        **optional,
    )


def replace_campaign_targets(
    campaign: Campaign,
    targets: Iterable[Dict[str, str]],
    batch_size: Optional[int] = None,
) -> List[CampaignTarget]:
    """
    Replace all targets of ``campaign`` with ``targets``.

    The old list is deleted and the new one inserted in sequential batches,
    all inside a single transaction: either every batch lands or the previous
    list is still in place.
    """
    batch_size = batch_size or getattr(settings, 'ADVOCACY_TARGET_BATCH_SIZE', DEFAULT_BATCH_SIZE)
    objects = [build_target(campaign, row) for row in targets]
    created: List[CampaignTarget] = []

    try:
        with transaction.atomic():
            deleted, _ = CampaignTarget.objects.filter(campaign=campaign).delete()
            for start in range(0, len(objects), batch_size):
                chunk = objects[start:start + batch_size]
                created.extend(CampaignTarget.objects.bulk_create(chunk))
                logger.debug(
                    "Inserted targets %s-%s for campaign %s",
                    start + 1, start + len(chunk), campaign.slug,
                )
    except DatabaseError as exc:
        logger.error("Failed to save targets for campaign %s: %s", campaign.slug, exc)
        raise TargetSaveError(str(exc) or "Failed to save targets.") from exc

    logger.info(
        "Replaced %s targets with %s for campaign %s", deleted, len(created), campaign.slug,
    )
    return created
