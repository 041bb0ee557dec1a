from unittest import TestCase

import numpy as np

from fieldcad.constructs.measurement import MeasurementPath
from fieldcad.utils.geo import bearing, distance, distance_array, path_length, path_lengths


class TestDistance(TestCase):
    def test_zero_distance(self):
        a = (41.0082, 28.9784)
        self.assertEqual(distance(a, a), 0.0)

    def test_symmetric(self):
        a = (41.0082, 28.9784)
        b = (39.9334, 32.8597)
        self.assertAlmostEqual(distance(a, b), distance(b, a), places=6)

    def test_one_degree_of_latitude(self):
        # 6371 km * pi / 180
        self.assertAlmostEqual(distance((40.0, 30.0), (41.0, 30.0)), 111194.9, delta=0.1)

    def test_distance_array_matches_scalar(self):
        lats1 = np.array([41.0, 40.0])
        lngs1 = np.array([29.0, 30.0])
        lats2 = np.array([41.001, 41.0])
        lngs2 = np.array([29.001, 30.0])

        result = distance_array(lats1, lngs1, lats2, lngs2)

        self.assertAlmostEqual(result[0], distance((41.0, 29.0), (41.001, 29.001)), places=6)
        self.assertAlmostEqual(result[1], distance((40.0, 30.0), (41.0, 30.0)), places=6)


class TestBearing(TestCase):
    def test_cardinal_directions(self):
        here = (41.0, 29.0)
        self.assertAlmostEqual(bearing(here, (41.1, 29.0)), 0.0, places=6)
        self.assertAlmostEqual(bearing(here, (40.9, 29.0)), 180.0, places=6)
        self.assertAlmostEqual(bearing(here, (41.0, 29.1)), 90.0, delta=0.1)
        self.assertAlmostEqual(bearing(here, (41.0, 28.9)), 270.0, delta=0.1)

    def test_range(self):
        here = (41.0082, 28.9784)
        for lat, lng in [(41.0, 28.9), (41.1, 28.9), (40.0, 29.0), (41.0082, 28.9784)]:
            b = bearing(here, (lat, lng))
            self.assertGreaterEqual(b, 0.0)
            self.assertLess(b, 360.0)

    def test_reverse_bearing_over_short_distance(self):
        a = (41.0082, 28.9784)
        b = (41.0090, 28.9795)

        forward = bearing(a, b)
        reverse = bearing(b, a)

        self.assertAlmostEqual((reverse - forward) % 360.0, 180.0, delta=0.01)


class TestMeasurementPath(TestCase):
    def test_lengths(self):
        path = MeasurementPath()
        self.assertEqual(path.total_length, 0.0)
        self.assertEqual(path.segment_lengths, [])

        path.append(40.0, 30.0)
        path.append(41.0, 30.0)
        path.append(41.0, 31.0)

        self.assertEqual(len(path.segment_lengths), 2)
        self.assertAlmostEqual(path.total_length, sum(path.segment_lengths))
        self.assertEqual(path_lengths(path.points), path.segment_lengths)
        self.assertAlmostEqual(path_length(path.points), path.total_length)

    def test_clear(self):
        path = MeasurementPath()
        path.append(40.0, 30.0)
        path.append(41.0, 30.0)

        path.clear()

        self.assertEqual(len(path), 0)
        self.assertEqual(path.total_length, 0.0)
