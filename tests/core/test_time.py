#!/usr/bin/env python3
"""Test suite for GNSS time systems"""

import unittest
from datetime import datetime

from pynavflow.core.time import GNSSTime


class TestGNSSTime(unittest.TestCase):
    """Test week / time of week representation"""

    def test_from_datetime(self):
        t = GNSSTime.from_datetime(datetime(2022, 6, 1, 12, 0, 0))
        self.assertEqual(t.week, 2212)
        self.assertAlmostEqual(t.tow, 302400.0)
        self.assertEqual(t.time_sys, 'GPS')

    def test_to_datetime_roundtrip(self):
        dt = datetime(2022, 6, 1, 13, 45, 30)
        self.assertEqual(GNSSTime.from_datetime(dt, 'GAL').to_datetime(), dt)

    def test_tow_normalization(self):
        t = GNSSTime(2212, 604800.0 + 10.0)
        self.assertEqual(t.week, 2213)
        self.assertAlmostEqual(t.tow, 10.0)
        t = GNSSTime(2212, -10.0)
        self.assertEqual(t.week, 2211)
        self.assertAlmostEqual(t.tow, 604790.0)

    def test_invalid_time_system(self):
        with self.assertRaises(ValueError):
            GNSSTime(2212, 0.0, 'TAI')

    def test_gps_seconds(self):
        t = GNSSTime.from_gps_seconds(2212 * 604800.0 + 302400.0)
        self.assertEqual(t, GNSSTime(2212, 302400.0))
        self.assertAlmostEqual(t.to_gps_seconds(), 2212 * 604800.0 + 302400.0)

    def test_arithmetic(self):
        t = GNSSTime(2212, 302400.0)
        later = t + 3600
        self.assertAlmostEqual(later - t, 3600.0)
        self.assertEqual(later - 3600, t)

    def test_comparisons(self):
        t1 = GNSSTime(2212, 100.0)
        t2 = GNSSTime(2212, 200.0)
        self.assertLess(t1, t2)
        self.assertGreaterEqual(t2, t1)
        with self.assertRaises(ValueError):
            t1 < GNSSTime(856, 200.0, 'BDS')

    def test_mixed_subtraction_rejected(self):
        with self.assertRaises(ValueError):
            GNSSTime(2212, 0.0) - GNSSTime(2212, 0.0, 'UTC')


class TestTimeConversion(unittest.TestCase):
    """Test conversions between time systems"""

    def test_gps_to_bds(self):
        bds = GNSSTime(2212, 302400.0).convert_to('BDS')
        self.assertEqual(bds.week, 856)
        self.assertAlmostEqual(bds.tow, 302386.0)

    def test_gps_to_utc(self):
        utc = GNSSTime(2212, 302400.0).convert_to('UTC', leap_seconds=18)
        self.assertEqual(utc.time_sys, 'UTC')
        self.assertAlmostEqual(utc.tow, 302382.0)
        self.assertEqual(utc.convert_to('GPS', leap_seconds=18), GNSSTime(2212, 302400.0))

    def test_gal_is_aligned_with_gps(self):
        gal = GNSSTime(2212, 302400.0).convert_to('GAL')
        self.assertEqual((gal.week, gal.tow), (2212, 302400.0))

    def test_same_system_copy(self):
        t = GNSSTime(2212, 1.0)
        self.assertEqual(t.convert_to('GPS'), t)
        self.assertIsNot(t.convert_to('GPS'), t)


if __name__ == '__main__':
    unittest.main()
