# ABOUTME: Test the Represent API client and the offline Canadian dataset builder.
# ABOUTME: All HTTP traffic is mocked; batching and boundary selection are checked directly.

from unittest.mock import Mock, patch

import requests
from django.test import SimpleTestCase

from advocacy.services.canada_sync import (
    CanadaDataFetcher,
    generate_all_fsas,
    select_federal_boundary,
)
from advocacy.services.represent_api_client import RepresentAPI


def json_response(payload):
    response = Mock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


class RepresentAPITests(SimpleTestCase):

    @patch('advocacy.services.represent_api_client.requests.get')
    def test_fetch_paginated_follows_next(self, mock_get):
        mock_get.side_effect = [
            json_response({'objects': [{'name': 'A'}], 'meta': {'next': '/things/?limit=100&offset=100'}}),
            json_response({'objects': [{'name': 'B'}], 'meta': {'next': None}}),
        ]

        results = RepresentAPI.fetch_paginated('/things/')

        self.assertEqual([item['name'] for item in results], ['A', 'B'])
        first_call, second_call = mock_get.call_args_list
        self.assertEqual(first_call.args[0], 'https://represent.opennorth.ca/things/')
        self.assertEqual(first_call.kwargs['params'], {'limit': 100})
        self.assertEqual(second_call.args[0], 'https://represent.opennorth.ca/things/?limit=100&offset=100')
        self.assertIsNone(second_call.kwargs['params'])

    @patch('advocacy.services.represent_api_client.requests.get')
    def test_unknown_postcode_returns_none(self, mock_get):
        response = Mock()
        response.raise_for_status.side_effect = requests.HTTPError(response=Mock(status_code=404))
        mock_get.return_value = response

        self.assertIsNone(RepresentAPI.get_postcode('X0X0X0'))

    @patch('advocacy.services.represent_api_client.requests.get')
    def test_server_error_propagates(self, mock_get):
        response = Mock()
        response.raise_for_status.side_effect = requests.HTTPError(response=Mock(status_code=503))
        mock_get.return_value = response

        with self.assertRaises(requests.HTTPError):
            RepresentAPI.get_postcode('M5V2H1')


class SelectFederalBoundaryTests(SimpleTestCase):

    def test_latest_representation_order_wins(self):
        payload = {
            'boundaries_centroid': [
                {'boundary_set_name': 'Federal electoral district',
                 'url': '/boundaries/federal-electoral-districts/35075/', 'external_id': '35075'},
                {'boundary_set_name': 'Federal electoral district (2023 Representation Order)',
                 'url': '/boundaries/federal-electoral-districts-2023/35108/', 'external_id': '35108'},
            ],
        }

        self.assertEqual(select_federal_boundary(payload)['external_id'], '35108')

    def test_falls_back_to_concordance(self):
        payload = {
            'boundaries_centroid': [{'boundary_set_name': 'Toronto ward', 'url': '/boundaries/toronto-wards/1/'}],
            'boundaries_concordance': [
                {'boundary_set_name': 'Federal electoral district', 'url': '/x/', 'external_id': '35050'},
            ],
        }

        self.assertEqual(select_federal_boundary(payload)['external_id'], '35050')

    def test_no_federal_boundary(self):
        self.assertIsNone(select_federal_boundary({'boundaries_centroid': [], 'boundaries_concordance': None}))


class CanadaDataFetcherTests(SimpleTestCase):

    def test_generate_all_fsas(self):
        fsas = generate_all_fsas()

        self.assertEqual(len(fsas), 18 * 10 * 20)
        self.assertIn('M5V', fsas)
        self.assertNotIn('D1A', fsas)
        self.assertNotIn('A1D', fsas)

    @patch.object(RepresentAPI, 'get_house_of_commons_members')
    @patch.object(RepresentAPI, 'get_federal_boundaries')
    def test_ridings_and_mps(self, mock_boundaries, mock_members):
        mock_boundaries.return_value = [
            {'external_id': '24001', 'name': 'Abitibi--Temiscamingue',
             'metadata': {'FEDENAME': 'Abitibi—Témiscamingue', 'FEDFNAME': 'Abitibi—Témiscamingue'}},
        ]
        mock_members.return_value = [
            {'name': 'Sébastien Lemire', 'first_name': 'Sébastien', 'last_name': 'Lemire',
             'district_name': 'abitibi—témiscamingue', 'party_name': 'Bloc québécois', 'email': None},
            {'name': 'Nobody', 'district_name': 'Nowhere', 'party_name': 'liberal party of canada'},
        ]
        fetcher = CanadaDataFetcher()

        ridings = fetcher.fetch_ridings()
        mps = fetcher.fetch_mps(ridings)

        self.assertEqual(ridings[0]['province'], 'Quebec')
        self.assertEqual(ridings[0]['name'], 'Abitibi—Témiscamingue')
        self.assertEqual(mps[0]['ridingId'], '24001')
        self.assertEqual(mps[0]['party'], 'Bloc Québécois')
        self.assertEqual(mps[0]['email'], '')
        self.assertEqual(mps[1]['ridingId'], '')
        self.assertEqual(mps[1]['party'], 'Liberal')

    def test_build_fsa_mapping_in_batches(self):
        responses = {
            'M5V1A1': {'boundaries_centroid': [
                {'boundary_set_name': 'Federal electoral district', 'url': '/f/', 'external_id': '35108',
                 'name': 'Spadina—Harbourfront'},
            ], 'province': 'ON'},
            'M4W0A1': {'boundaries_centroid': [
                {'boundary_set_name': 'Federal electoral district', 'url': '/f/', 'external_id': '35050',
                 'name': 'Don Valley West'},
            ], 'province': 'ON'},
        }

        def fake_postcode(postal_code):
            if postal_code.startswith('K1A'):
                raise requests.ConnectionError('timeout')
            return responses.get(postal_code)

        sleep = Mock()
        fetcher = CanadaDataFetcher(batch_size=2, batch_delay=0.5, candidate_suffixes=('1A1', '0A1'), sleep=sleep)

        with patch.object(RepresentAPI, 'get_postcode', side_effect=fake_postcode):
            mapping = fetcher.build_fsa_mapping(['M5V', 'M4W', 'K1A'])

        self.assertEqual(mapping['M5V'], {'ridingId': '35108', 'ridingName': 'Spadina—Harbourfront', 'province': 'ON'})
        self.assertEqual(mapping['M4W']['ridingId'], '35050')
        self.assertNotIn('K1A', mapping)
        self.assertEqual(fetcher.stats, {'checked': 3, 'found': 2, 'errors': 2})
        sleep.assert_called_once_with(0.5)

    def test_attach_postal_codes(self):
        ridings = [{'id': '35050', 'postalCodes': ['M4W']}, {'id': '35108', 'postalCodes': []}]

        CanadaDataFetcher.attach_postal_codes(ridings, {
            'M5V': {'ridingId': '35108'}, 'M4W': {'ridingId': '35050'}, 'X0X': {'ridingId': '1'},
        })

        self.assertEqual(ridings[0]['postalCodes'], ['M4W'])
        self.assertEqual(ridings[1]['postalCodes'], ['M5V'])
