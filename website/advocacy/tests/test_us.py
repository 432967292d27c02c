# ABOUTME: Test US ZIP code → congressional district → House member and senator resolution.
# ABOUTME: Uses the bundled sample data plus a small in-memory index.

from django.test import SimpleTestCase

from advocacy.services import us
from advocacy.services.us import (
    CongressIndex,
    format_district_name,
    normalize_zip_code,
    ordinal_suffix,
    parse_district_id,
)


class ZipAndDistrictFormatTests(SimpleTestCase):

    def test_normalize_zip_code(self):
        self.assertEqual(normalize_zip_code('10001'), '10001')
        self.assertEqual(normalize_zip_code('10001-1234'), '10001')
        self.assertEqual(normalize_zip_code('2134'), '02134')
        self.assertIsNone(normalize_zip_code('abc'))
        self.assertIsNone(normalize_zip_code(None))

    def test_parse_district_id(self):
        self.assertEqual(parse_district_id('ca-12'), ('CA', 12))
        self.assertEqual(parse_district_id('AK-AL'), ('AK', 0))
        self.assertEqual(parse_district_id('WY-0'), ('WY', 0))

    def test_ordinal_suffix(self):
        suffixes = {n: ordinal_suffix(n) for n in [1, 2, 3, 4, 11, 12, 13, 21, 22, 23, 101, 111]}
        self.assertEqual(suffixes, {
            1: 'st', 2: 'nd', 3: 'rd', 4: 'th', 11: 'th', 12: 'th', 13: 'th',
            21: 'st', 22: 'nd', 23: 'rd', 101: 'st', 111: 'th',
        })

    def test_format_district_name(self):
        self.assertEqual(format_district_name('CA-12'), "California's 12th Congressional District")
        self.assertEqual(format_district_name('TX-22'), "Texas's 22nd Congressional District")
        self.assertEqual(format_district_name('AK-AL'), 'Alaska At-Large')
        self.assertEqual(format_district_name('WY-0'), 'Wyoming At-Large')
        self.assertEqual(format_district_name('ZZ-3'), "ZZ's 3rd Congressional District")


class CongressIndexTests(SimpleTestCase):

    def setUp(self):
        self.index = CongressIndex(
            zip_districts={'1234': 'VT-AL', '20001': ['DC-0'], '55555': [], '60601': ['IL-7', 'IL-5']},
            representatives=[
                {'id': 'r1', 'name': 'Vera Vermont', 'party': 'Democratic', 'district': 'VT-AL'},
                {'id': 'r2', 'name': 'Ian Seven', 'party': 'Democratic', 'district': 'IL-7'},
                {'id': 'r3', 'name': 'Ida Five', 'party': 'Democratic', 'district': 'IL-5'},
            ],
            senators=[
                {'id': 's1', 'name': 'Zed Junior', 'party': 'Democratic', 'stateCode': 'IL', 'stateRank': 'junior'},
                {'id': 's2', 'name': 'Amy Senior', 'party': 'Democratic', 'stateCode': 'IL', 'stateRank': 'senior'},
                {'id': 's3', 'name': 'Ann Vermont', 'party': 'Independent', 'stateCode': 'vt',
                 'stateRank': 'senior'},
            ],
        )

    def test_zip_keys_are_padded(self):
        district = self.index.find_district_by_zip_code('01234')

        self.assertEqual(district.district_id, 'VT-AL')
        self.assertEqual(district.district_number, 0)
        self.assertFalse(district.is_multi_district)

    def test_empty_district_list_is_ignored(self):
        self.assertIsNone(self.index.find_district_by_zip_code('55555'))
        self.assertIsNone(self.index.find_representative_by_zip_code('55555'))
        self.assertEqual(self.index.find_senators_by_zip_code('55555'), [])

    def test_multi_district_zip_keeps_listed_order(self):
        found = self.index.find_all_representatives_by_zip_code('60601')

        self.assertTrue(found.district.is_multi_district)
        self.assertEqual(found.district.district_id, 'IL-7')
        self.assertEqual([rep.name for rep in found.representatives], ['Ian Seven', 'Ida Five'])
        self.assertEqual(found.representative.name, 'Ian Seven')

    def test_senior_senator_comes_first(self):
        self.assertEqual([s.name for s in self.index.find_senators_by_state('il')], ['Amy Senior', 'Zed Junior'])

    def test_state_names_are_derived(self):
        self.assertEqual(self.index.find_representative_by_district('il-5').state, 'Illinois')
        self.assertEqual(self.index.find_senators_by_state('VT')[0].state, 'Vermont')

    def test_unknown_zip(self):
        found = self.index.find_all_representatives_by_zip_code('99999')

        self.assertIsNone(found.district)
        self.assertIsNone(found.representative)
        self.assertEqual(found.senators, [])


class BundledUSDataTests(SimpleTestCase):

    def test_single_district_zip(self):
        found = us.find_all_representatives_by_zip_code('10001')

        self.assertEqual(found.district.district_id, 'NY-12')
        self.assertEqual(found.representative.name, 'Jerrold Nadler')
        self.assertEqual(found.representative.email, '')
        self.assertEqual(found.representative.contact_form, 'https://nadler.house.gov/contact')
        self.assertEqual([s.name for s in found.senators], ['Charles E. Schumer', 'Kirsten Gillibrand'])

    def test_zip_spanning_two_districts(self):
        district = us.find_district_by_zip_code('78704')

        self.assertEqual(district.all_districts, ('TX-37', 'TX-35'))
        self.assertEqual(
            [rep.name for rep in us.find_all_representatives_by_zip_code('78704').representatives],
            ['Lloyd Doggett', 'Greg Casar'],
        )

    def test_at_large_district(self):
        found = us.find_all_representatives_by_zip_code('99501-1234')

        self.assertEqual(found.representative.district_number, 0)
        self.assertEqual([s.name for s in us.find_senators_by_state('ak')], ['Lisa Murkowski', 'Dan Sullivan'])

    def test_representative_without_district_is_dropped(self):
        names = {rep.name for rep in us.USDataRepository.get_index().house}
        self.assertNotIn('Vacant Seat', names)
        self.assertEqual(len(names), 5)
