# ABOUTME: Test replacing a campaign's target list in the database.
# ABOUTME: A failing batch must leave the previous list untouched.

from unittest.mock import patch

from django.db import DatabaseError
from django.db.models.query import QuerySet
from django.test import TestCase, override_settings

from advocacy.models import Campaign, CampaignTarget
from advocacy.services.target_store import TargetSaveError, build_target, replace_campaign_targets


def make_rows(count, prefix='T'):
    return [
        {'name': f'{prefix}{index}', 'email': f'{prefix.lower()}{index}@example.org', 'postal_code': '10115'}
        for index in range(count)
    ]


class ReplaceCampaignTargetsTests(TestCase):

    def setUp(self):
        self.campaign = Campaign.objects.create(slug='universities', name='Universities', country='DE')
        replace_campaign_targets(self.campaign, make_rows(2, prefix='Old'))

    def test_replaces_existing_targets(self):
        created = replace_campaign_targets(self.campaign, make_rows(5), batch_size=2)

        self.assertEqual(len(created), 5)
        names = sorted(self.campaign.targets.values_list('name', flat=True))
        self.assertEqual(names, ['T0', 'T1', 'T2', 'T3', 'T4'])

    def test_other_campaigns_are_untouched(self):
        other = Campaign.objects.create(slug='ngos', name='NGOs', country='FR')
        replace_campaign_targets(other, make_rows(1, prefix='Ngo'))

        replace_campaign_targets(self.campaign, make_rows(1))

        self.assertEqual(other.targets.count(), 1)

    @override_settings(ADVOCACY_TARGET_BATCH_SIZE=2)
    def test_failed_batch_keeps_previous_list(self):
        original_bulk_create = QuerySet.bulk_create
        calls = []

        def flaky_bulk_create(queryset, objs, *args, **kwargs):
            calls.append(len(objs))
            if len(calls) == 2:
                raise DatabaseError('disk full')
            return original_bulk_create(queryset, objs, *args, **kwargs)

        with patch.object(QuerySet, 'bulk_create', flaky_bulk_create):
            with self.assertRaises(TargetSaveError):
                replace_campaign_targets(self.campaign, make_rows(5))

        self.assertEqual(calls, [2, 2])
        names = sorted(self.campaign.targets.values_list('name', flat=True))
        self.assertEqual(names, ['Old0', 'Old1'])

    def test_empty_list_clears_targets(self):
        self.assertEqual(replace_campaign_targets(self.campaign, []), [])
        self.assertEqual(self.campaign.targets.count(), 0)


class BuildTargetTests(TestCase):

    def setUp(self):
        self.campaign = Campaign.objects.create(slug='c', name='C', country='CA')

    def test_optional_fields_and_coordinates(self):
        target = build_target(self.campaign, {
            'name': 'A',
            'email': 'a@example.org',
            'postal_code': 'M5V 2H1',
            'city': 'Toronto',
            'region': '',
            'latitude': '43.64',
            'longitude': 'west',
        })

        self.assertEqual(target.city, 'Toronto')
        self.assertIsNone(target.region)
        self.assertEqual(target.latitude, 43.64)
        self.assertIsNone(target.longitude)
        self.assertIsNone(target.image_url)

    def test_saved_target_round_trips(self):
        replace_campaign_targets(self.campaign, [{
            'name': 'A', 'email': 'a@example.org', 'postal_code': 'M5V 2H1', 'category': 'NGO',
        }])

        target = CampaignTarget.objects.get(campaign=self.campaign)
        self.assertEqual(target.category, 'NGO')
        self.assertIsNone(target.latitude)
