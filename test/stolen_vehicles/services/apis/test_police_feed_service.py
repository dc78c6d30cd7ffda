import ddt
import mock
import requests
import unittest

from unittest.mock import MagicMock

from stolen_vehicles.models.stolen_vehicle_record import StolenVehicleRecord
from stolen_vehicles.services.apis.police_feed_service import PoliceFeedService
from stolen_vehicles.services.constants.exceptions import FetchError

FEED = (
    'ABC123,Blue,Toyota,Corolla,2018,Saloon,2024-01-01,Auckland\r\n'
    'XYZ789,Red,Mazda,Demio,2009,Hatchback,2024-02-03,Wellington\r\n')


@ddt.ddt
class TestPoliceFeedService(unittest.TestCase):

    def setUp(self):
        self.feed_service = PoliceFeedService(
            feed_url='https://example.com/stolen.csv', timeout=5)
        self.feed_service.api = MagicMock(name='api')

        self.log_patcher = mock.patch(
            'stolen_vehicles.services.apis.police_feed_service.LOG')
        self.mocked_log = self.log_patcher.start()

    def tearDown(self):
        self.log_patcher.stop()

    def _mock_response(self, content: bytes, status_code: int = 200):
        response = MagicMock(name='response')
        response.content = content
        response.status_code = status_code
        response.ok = status_code < 400

        self.feed_service.api.get.return_value.result.return_value = response

        return response

    def test_fetch_records(self):
        self._mock_response(FEED.encode('utf-8'))

        records, skipped_rows = self.feed_service.fetch_records()

        self.feed_service.api.get.assert_called_with(
            'https://example.com/stolen.csv', timeout=5)

        self.assertEqual(skipped_rows, 0)
        self.assertEqual(records, [
            StolenVehicleRecord(
                plate='ABC123',
                colour='Blue',
                brand='Toyota',
                model='Corolla',
                year='2018',
                vehicle_type='Saloon',
                report_date='2024-01-01',
                place='Auckland'),
            StolenVehicleRecord(
                plate='XYZ789',
                colour='Red',
                brand='Mazda',
                model='Demio',
                year='2009',
                vehicle_type='Hatchback',
                report_date='2024-02-03',
                place='Wellington')])

    def test_parse_feed_keeps_first_row(self):
        """ The feed has no header, so the first row is a vehicle. """
        records, _ = self.feed_service.parse_feed(FEED)

        self.assertEqual(records[0].plate, 'ABC123')

    def test_parse_feed_with_quoted_fields(self):
        records, skipped_rows = self.feed_service.parse_feed(
            'ABC123,Blue,Toyota,"Corolla, GX",2018,Saloon,2024-01-01,"Auckland, NZ"\n')

        self.assertEqual(skipped_rows, 0)
        self.assertEqual(records[0].model, 'Corolla, GX')
        self.assertEqual(records[0].place, 'Auckland, NZ')

    @ddt.data(
        'ABC123,Blue,Toyota\n',
        'ABC123,Blue,Toyota,Corolla,2018,Saloon,2024-01-01,Auckland,extra\n',
    )
    def test_parse_feed_skips_malformed_rows(self, malformed_row):
        records, skipped_rows = self.feed_service.parse_feed(
            FEED + malformed_row + 'DEF456,White,Honda,Fit,2012,Hatchback,2024-03-01,Hamilton\n')

        self.assertEqual([record.plate for record in records],
                         ['ABC123', 'XYZ789', 'DEF456'])
        self.assertEqual(skipped_rows, 1)
        self.mocked_log.warning.assert_called_once()

    def test_parse_feed_ignores_blank_lines(self):
        records, skipped_rows = self.feed_service.parse_feed(FEED + '\n\n,,,\n')

        self.assertEqual(len(records), 2)
        self.assertEqual(skipped_rows, 0)

    def test_fetch_records_strips_byte_order_mark(self):
        self._mock_response(FEED.encode('utf-8-sig'))

        records, _ = self.feed_service.fetch_records()

        self.assertEqual(records[0].plate, 'ABC123')

    @ddt.data(404, 500, 503)
    def test_fetch_records_with_error_status(self, status_code):
        self._mock_response(b'', status_code=status_code)

        with self.assertRaises(FetchError) as context:
            self.feed_service.fetch_records()

        self.assertIn(str(status_code), str(context.exception))

    def test_fetch_records_with_network_failure(self):
        self.feed_service.api.get.return_value.result.side_effect = (
            requests.exceptions.ConnectionError('connection refused'))

        with self.assertRaises(FetchError):
            self.feed_service.fetch_records()

    def test_fetch_records_with_latin_1_row(self):
        self._mock_response(
            FEED.encode('utf-8') +
            'BAD1,Grèy,Ford,Focus,2011,Hatchback,2024-04-01,Nelson\n'.encode('latin-1'))

        records, skipped_rows = self.feed_service.fetch_records()

        self.assertEqual([record.plate for record in records],
                         ['ABC123', 'XYZ789', 'BAD1'])
        self.assertEqual(records[2].colour, 'Gr\ufffdy')
        self.assertEqual(skipped_rows, 0)
        self.mocked_log.warning.assert_called_once()

    def test_parse_feed_skips_row_with_oversized_field(self):
        records, skipped_rows = self.feed_service.parse_feed(
            FEED +
            'BIG,' + 'x' * 200000 + ',a,b,c,d,e,f\n' +
            'DEF456,White,Honda,Fit,2012,Hatchback,2024-03-01,Hamilton\n')

        self.assertEqual([record.plate for record in records],
                         ['ABC123', 'XYZ789', 'DEF456'])
        self.assertEqual(skipped_rows, 1)
        self.mocked_log.warning.assert_called_once()
