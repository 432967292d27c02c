# ABOUTME: Test the read-only representative directory and the party exclusion policy.
# ABOUTME: Covers load-time filtering, zero-padded lookups and accent-insensitive ordering.

from dataclasses import dataclass

from django.test import SimpleTestCase

from advocacy.services.directory import (
    PartyExclusion,
    RepresentativeDirectory,
    collation_key,
    exclude_parties,
    normalize_district_id,
)


@dataclass(frozen=True)
class Rep:
    id: str
    name: str
    party: str
    district: str


def build(reps, **kwargs):
    return RepresentativeDirectory(reps, district_of=lambda rep: rep.district, district_width=3, **kwargs)


class NormalizeDistrictIdTests(SimpleTestCase):

    def test_pads_to_width(self):
        self.assertEqual(normalize_district_id('75', 3), '075')
        self.assertEqual(normalize_district_id(7, 3), '007')

    def test_blank_and_zero_ids_are_invalid(self):
        self.assertIsNone(normalize_district_id('', 3))
        self.assertIsNone(normalize_district_id('   ', 3))
        self.assertIsNone(normalize_district_id('000', 3))
        self.assertIsNone(normalize_district_id(None, 3))

    def test_without_width_keeps_value(self):
        self.assertEqual(normalize_district_id('2A', None), '2A')


class PartyExclusionTests(SimpleTestCase):

    def test_matches_case_insensitively(self):
        policy = exclude_parties('AfD')
        self.assertTrue(policy(Rep('1', 'A', 'afd', '001')))
        self.assertFalse(policy(Rep('2', 'B', 'SPD', '001')))

    def test_empty_policy_is_falsy(self):
        self.assertFalse(PartyExclusion([]))
        self.assertTrue(PartyExclusion(['AfD']))


class RepresentativeDirectoryTests(SimpleTestCase):

    def setUp(self):
        self.reps = [
            Rep('1', 'Zoe Zimmermann', 'SPD', '75'),
            Rep('2', 'Ümit Özdemir', 'GRÜNE', '075'),
            Rep('3', 'anna Becker', 'CDU', '075'),
            Rep('4', 'Karl Krause', 'AfD', '075'),
            Rep('5', 'Lena Lang', 'FDP', '000'),
            Rep('6', 'Otto Ohne', 'FDP', ''),
            Rep('7', 'Paul Peters', 'Linke', '76'),
        ]

    def test_drops_records_without_district_and_excluded_parties(self):
        directory = build(self.reps, exclude=exclude_parties('AfD'))

        ids = {rep.id for rep in directory.all()}
        self.assertEqual(ids, {'1', '2', '3', '7'})
        self.assertEqual(len(directory), 4)

    def test_find_by_district_pads_and_sorts_by_name(self):
        directory = build(self.reps, exclude=exclude_parties('AfD'))

        names = [rep.name for rep in directory.find_by_district('75')]
        self.assertEqual(names, ['anna Becker', 'Ümit Özdemir', 'Zoe Zimmermann'])
        self.assertEqual(directory.find_by_district(75), directory.find_by_district('075'))

    def test_unknown_district_returns_empty_list(self):
        directory = build(self.reps)

        self.assertEqual(directory.find_by_district('299'), [])
        self.assertEqual(directory.find_by_district(None), [])
        self.assertEqual(directory.find_by_district('0'), [])

    def test_every_representative_found_exactly_once_in_its_district(self):
        directory = build(self.reps, exclude=exclude_parties('AfD'))

        for rep in directory.all():
            matches = [found for found in directory.find_by_district(rep.district) if found == rep]
            self.assertEqual(len(matches), 1, rep)

    def test_results_are_copies(self):
        directory = build(self.reps)

        directory.find_by_district('075').clear()
        self.assertEqual(len(directory.find_by_district('075')), 4)

    def test_contains_and_district_ids(self):
        directory = build(self.reps)

        self.assertIn('75', directory)
        self.assertNotIn('000', directory)
        self.assertEqual(directory.district_ids(), ['075', '076'])

    def test_custom_order(self):
        directory = build(self.reps, order_by=lambda rep: int(rep.id), exclude=exclude_parties('AfD'))

        self.assertEqual([rep.id for rep in directory.find_by_district('075')], ['1', '2', '3'])


class CollationKeyTests(SimpleTestCase):

    def test_accents_and_case_are_folded(self):
        names = ['Zoe', 'Émile', 'anna', 'Éric', 'Ümit']
        self.assertEqual(sorted(names, key=collation_key), ['anna', 'Émile', 'Éric', 'Ümit', 'Zoe'])
