#!/usr/bin/env python3
"""Test suite for ephemeris records and the ephemeris store"""

import unittest
from dataclasses import FrozenInstanceError, fields
from datetime import datetime, timedelta

import numpy as np
import numpy.testing as npt

from pynavflow.core.constants import SYS_GAL, SYS_GLO, SYS_GPS, SYS_SBS
from pynavflow.core.data_structures import (
    GloEphemeris, GnssNavInfo, KeplerEphemeris, SbasEphemeris
)
from pynavflow.core.satellite_numbering import SatId
from pynavflow.core.time import GNSSTime

EPOCH = datetime(2022, 6, 1, 12, 0, 0)


def make_kepler(sat, epoch=EPOCH, **overrides):
    """Kepler record with zero parameters except the given ones"""
    names = [f.name for f in fields(KeplerEphemeris)][3:]
    values = {name: 0.0 for name in names}
    values.update(week=2212.0, toe=302400.0, sqrt_a=5153.63)
    values.update(overrides)
    time_sys = 'GAL' if sat.sys == SYS_GAL else 'GPS'
    return KeplerEphemeris(sat, epoch, time_sys, **values)


def make_glonass(sat, epoch=EPOCH):
    return GloEphemeris(sat, epoch, 'UTC', 1.2e-5, 0.0, 43200.0,
                        1.0e4, -2.1, 0.0, 0.0,
                        -1.5e4, 1.3, 9.3e-10, -7.0,
                        1.8e4, 0.5, -1.9e-9, 0.0)


class TestKeplerEphemeris(unittest.TestCase):
    """Test Keplerian ephemeris record"""

    def test_immutable(self):
        eph = make_kepler(SatId(SYS_GPS, 1))
        with self.assertRaises(FrozenInstanceError):
            eph.af0 = 1.0

    def test_equality(self):
        self.assertEqual(make_kepler(SatId(SYS_GPS, 1)), make_kepler(SatId(SYS_GPS, 1)))
        self.assertNotEqual(make_kepler(SatId(SYS_GPS, 1)),
                            make_kepler(SatId(SYS_GPS, 1), af0=1e-5))

    def test_times(self):
        eph = make_kepler(SatId(SYS_GPS, 1))
        self.assertEqual(eph.gnss_time(), GNSSTime(2212, 302400.0))
        self.assertEqual(eph.toe_time, GNSSTime(2212, 302400.0))

    def test_clock_and_orbit_helpers(self):
        eph = make_kepler(SatId(SYS_GPS, 1), af0=1e-5, af1=-5e-12)
        npt.assert_allclose(eph.clock_params, [1e-5, -5e-12, 0.0])
        self.assertAlmostEqual(eph.semi_major_axis, 5153.63 ** 2)

    def test_fit_interval_default(self):
        names = [f.name for f in fields(KeplerEphemeris)][3:-1]
        eph = KeplerEphemeris(SatId(SYS_GPS, 2), EPOCH, 'GPS', *([0.0] * len(names)))
        self.assertEqual(eph.fit_interval, 0.0)


class TestStateVectorEphemeris(unittest.TestCase):
    """Test GLONASS and SBAS records"""

    def test_glonass_units(self):
        eph = make_glonass(SatId(SYS_GLO, 1))
        npt.assert_allclose(eph.pos, [1.0e7, -1.5e7, 1.8e7])
        npt.assert_allclose(eph.vel, [-2100.0, 1300.0, 500.0])
        npt.assert_allclose(eph.acc, [0.0, 9.3e-7, -1.9e-6])
        self.assertEqual(eph.extra, ())

    def test_glonass_time_is_utc(self):
        t = make_glonass(SatId(SYS_GLO, 1)).gnss_time()
        self.assertEqual(t.time_sys, 'UTC')

    def test_sbas(self):
        eph = SbasEphemeris(SatId(SYS_SBS, 23), EPOCH, 'GPS', -9.2e-7, 0.0, 302336.0,
                            4.2e4, 0.0, 0.0, 0.0, 2.3e4, 0.0, 0.0, 32.0,
                            0.0, 0.0, 0.0, 0.0)
        npt.assert_allclose(eph.pos, [4.2e7, 2.3e7, 0.0])
        self.assertEqual(eph.ura, 32.0)


class TestGnssNavInfo(unittest.TestCase):
    """Test the per-satellite ephemeris store"""

    def setUp(self):
        self.nav = GnssNavInfo()
        self.g1 = SatId(SYS_GPS, 1)
        self.g5 = SatId(SYS_GPS, 5)
        for hour in range(3):
            for sat in (self.g5, self.g1):
                self.nav.insert(make_kepler(sat, EPOCH + timedelta(hours=hour), iode=float(hour)))

    def test_empty(self):
        nav = GnssNavInfo()
        self.assertEqual(len(nav), 0)
        self.assertEqual(nav.n_messages, 0)
        self.assertEqual(nav.satellites(), [])
        self.assertIsNone(nav.find_ephemeris(self.g1, GNSSTime(2212, 0.0)))

    def test_insert_keeps_order(self):
        self.assertEqual(len(self.nav), 2)
        self.assertEqual(self.nav.n_messages, 6)
        iodes = [eph.iode for eph in self.nav.broadcast_ephemeris[self.g1]]
        self.assertEqual(iodes, [0.0, 1.0, 2.0])
        self.assertEqual(self.nav.satellite_systems, SYS_GPS)

    def test_no_deduplication(self):
        eph = self.nav.broadcast_ephemeris[self.g1][0]
        self.nav.insert(eph)
        self.assertEqual(len(self.nav.broadcast_ephemeris[self.g1]), 4)

    def test_satellites_sorted_and_filtered(self):
        self.nav.insert(make_glonass(SatId(SYS_GLO, 3)))
        self.assertEqual([str(s) for s in self.nav.satellites()], ["G01", "G05", "R03"])
        self.assertEqual(self.nav.satellites(SYS_GLO), [SatId(SYS_GLO, 3)])
        self.assertEqual(self.nav.satellite_systems, SYS_GPS | SYS_GLO)

    def test_find_ephemeris_nearest(self):
        eph = self.nav.find_ephemeris(self.g5, GNSSTime(2212, 302400.0 + 3500.0))
        self.assertEqual(eph.epoch, EPOCH + timedelta(hours=1))

    def test_find_ephemeris_across_time_systems(self):
        self.nav.insert(make_glonass(SatId(SYS_GLO, 1)))
        self.nav.leap_seconds = 18
        eph = self.nav.find_ephemeris(SatId(SYS_GLO, 1), GNSSTime(2212, 302418.0))
        self.assertIsNotNone(eph)
        self.assertEqual(eph.epoch, EPOCH)

    def test_merge(self):
        other = GnssNavInfo(ionospheric_corrections={'GAL': (28.25, 0.078, 0.003, 0.0)},
                            leap_seconds=18)
        other.insert(make_kepler(SatId(SYS_GAL, 2)))
        self.nav.ionospheric_corrections['GPSA'] = (1.0, 2.0, 3.0, 4.0)
        self.nav.merge(other)
        self.assertEqual(self.nav.n_messages, 7)
        self.assertEqual(set(self.nav.ionospheric_corrections), {'GPSA', 'GAL'})
        self.assertEqual(self.nav.leap_seconds, 18)
        self.assertEqual(self.nav.satellite_systems, SYS_GPS | SYS_GAL)

    def test_to_dataframe(self):
        self.nav.insert(make_glonass(SatId(SYS_GLO, 1)))
        df = self.nav.to_dataframe()
        self.assertEqual(list(df.columns), ['sat', 'system', 'epoch', 'time_sys', 'type', 'health'])
        self.assertEqual(len(df), 7)
        self.assertEqual(list(df['sat'].unique()), ["G01", "G05", "R01"])
        self.assertEqual((df['type'] == 'GloEphemeris').sum(), 1)
        self.assertTrue(np.all(df.loc[df['system'] == 'G', 'time_sys'] == 'GPS'))


if __name__ == '__main__':
    unittest.main()
