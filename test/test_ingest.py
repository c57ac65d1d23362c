import datetime
import os
import tempfile
import unittest

from postcodepack import IngestionError, NotFoundError, DataVersionError, PostcodePackReader, ingest

HEADER = 'pcd,pcd2,pcds,dointr,doterm,oscty,lat,long\n'

ROWS = [
    'CB2 3DS,CB2  3DS,CB2 3DS,198001,,E10000003,52.203244,0.123115',
    'CB2 3DT,CB2  3DT,CB2 3DT,198001,,E10000003,52.203511,0.123862',
    'CB1 1AA,CB1  1AA,CB1 1AA,202304,,E10000003,52.195256,0.141437',
    'CB1 1AB,CB1  1AB,CB1 1AB,198001,200512,E10000003,52.195999,0.141999',  # terminated
    'SW1A2AA,SW1A 2AA,SW1A 2AA,198001,,E13000001,51.503498,-0.127643',
    'SW1A2AB,SW1A 2AB,SW1A 2AB,198001,,E13000001,99.999999,0.000000',  # no location
    'GY1 1AA,GY1  1AA,GY1 1AA,198001,,L99999999,49.455000,-2.536000',  # excluded
    'AB1_1AA,AB1  1AA,AB1 1AA,198001,,S99999999,57.100000,-2.100000',  # malformed
    ',,,198001,,S99999999,57.100000,-2.100000',
]


class TestIngest(unittest.TestCase):

    def setUp(self):
        self.dir = tempfile.TemporaryDirectory()
        self.csv = os.path.join(self.dir.name, 'ONSPD_FEB_2025_UK.csv')

        with open(self.csv, 'w') as f:
            f.write(HEADER)
            f.write('\n'.join(ROWS) + '\n')

    def tearDown(self):
        self.dir.cleanup()

    def test_ingest(self):
        messages = []
        path, stats = ingest(self.csv, os.path.join(self.dir.name, 'out.pack'), exclude=['GY'],
                             cb=messages.append)

        self.assertEqual(9, stats.total)
        self.assertEqual(1, stats.terminated)
        self.assertEqual(1, stats.no_location)
        self.assertEqual(1, stats.excluded)
        self.assertEqual(2, stats.malformed)
        self.assertEqual(3, stats.outward)  # CB2, CB1, SW1A
        self.assertEqual(7, stats.written)
        self.assertEqual(datetime.date(2023, 4, 1), stats.last_updated)
        self.assertTrue(messages)

        r = PostcodePackReader(path, quiet=True)

        self.assertEqual(datetime.date(2023, 4, 1), r.last_updated.date())

        canonical, (lon, lat) = r.lookup_postcode('cb23ds')
        self.assertEqual('CB2 3DS', canonical)
        self.assertAlmostEqual(0.123115, lon, places=4)
        self.assertAlmostEqual(52.203244, lat, places=4)

        # The outward code is at the mean position of its postcodes
        _, (lon, lat) = r.lookup_postcode('CB2')
        self.assertAlmostEqual((0.123115 + 0.123862) / 2, lon, places=4)
        self.assertAlmostEqual((52.203244 + 52.203511) / 2, lat, places=4)

        for pc in ['CB1 1AB', 'SW1A 2AB', 'GY1 1AA']:
            with self.assertRaises(NotFoundError):
                r.lookup_postcode(pc)

    def test_default_path(self):
        cwd = os.getcwd()
        os.chdir(self.dir.name)
        try:
            path, stats = ingest(self.csv)
        finally:
            os.chdir(cwd)

        self.assertEqual(os.path.join(os.path.realpath(self.dir.name), 'ONSPD_FEB_2025_UK.pack'),
                         os.path.realpath(path))

    def test_version_1(self):
        path, stats = ingest(self.csv, os.path.join(self.dir.name, 'out.pack'), version=1)

        self.assertEqual(0, stats.outward)

        r = PostcodePackReader(path, quiet=True)
        self.assertEqual(1, r.version)
        self.assertEqual('CB1 1AA', r.lookup_postcode('CB11AA')[0])

        with self.assertRaises(DataVersionError):
            r.lookup_postcode('CB1')

    def test_latin1(self):
        with open(self.csv, 'a', encoding='latin1') as f:
            f.write('CB3 0AA,CB3  0AA,CB3 0AA,198001,,Caf\xe9,52.2,0.1\n')

        path, stats = ingest(self.csv, os.path.join(self.dir.name, 'out.pack'))

        self.assertEqual('CB3 0AA', PostcodePackReader(path, quiet=True).lookup_postcode('CB30AA')[0])

    def test_missing_column(self):
        with open(self.csv, 'w') as f:
            f.write('pcd,dointr,doterm,latitude,long\n')
            f.write('CB2 3DS,198001,,52.2,0.12\n')

        with self.assertRaises(IngestionError):
            ingest(self.csv, os.path.join(self.dir.name, 'out.pack'))

    def test_bad_location(self):
        with open(self.csv, 'a') as f:
            f.write('CB3 0AA,CB3  0AA,CB3 0AA,198001,,E1,north,0.1\n')

        with self.assertRaises(IngestionError):
            ingest(self.csv, os.path.join(self.dir.name, 'out.pack'))


if __name__ == '__main__':
    unittest.main()
