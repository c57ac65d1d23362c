import unittest
from unittest import mock

import requests

from postcodepack import PackLoadError, PostcodePackReader
from postcodepack.source import fetch_bytes, is_url, read_source

from packdata import pack_bytes, reference_entries

URL = 'https://example.com/postcodes.pack'


def response(content=b'', status=200):
    r = requests.Response()
    r.status_code = status
    r._content = content
    r.url = URL
    return r


class TestSource(unittest.TestCase):

    def test_is_url(self):
        self.assertTrue(is_url(URL))
        self.assertTrue(is_url('HTTP://example.com/x'))
        self.assertFalse(is_url('/tmp/postcodes.pack'))
        self.assertFalse(is_url(b'https://example.com'))

    def test_buffers_pass_through(self):
        for buf in [b'abc', bytearray(b'abc'), memoryview(b'abc')]:
            self.assertIs(buf, read_source(buf))

    def test_bad_source(self):
        with self.assertRaises(TypeError):
            read_source(42)

    @mock.patch('postcodepack.source.requests.get')
    def test_fetch(self, get):
        get.return_value = response(b'data')

        self.assertEqual(b'data', fetch_bytes(URL, timeout=5))
        get.assert_called_once_with(URL, timeout=5)

    @mock.patch('postcodepack.source.requests.get')
    def test_fetch_http_error(self, get):
        get.return_value = response(status=404)

        with self.assertRaises(PackLoadError) as cm:
            fetch_bytes(URL)

        self.assertIsInstance(cm.exception.__cause__, requests.HTTPError)
        self.assertEqual('load-error', cm.exception.kind)

    @mock.patch('postcodepack.source.requests.get')
    def test_fetch_connection_error(self, get):
        get.side_effect = requests.ConnectionError('no route')

        with self.assertRaises(PackLoadError) as cm:
            read_source(URL)

        self.assertIn(URL, str(cm.exception))
        self.assertIsInstance(cm.exception.__cause__, requests.ConnectionError)

    @mock.patch('postcodepack.source.requests.get')
    def test_reader_from_url(self, get):
        get.return_value = response(pack_bytes(reference_entries()))

        r = PostcodePackReader(URL, quiet=True)

        self.assertEqual('SW1A2AA', r.lookup_postcode('sw1a 2aa')[0])


if __name__ == '__main__':
    unittest.main()
