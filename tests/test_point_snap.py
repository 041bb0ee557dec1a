from unittest import TestCase

from fieldcad.constructs.recorded_point import RecordedPoint
from fieldcad.snapping.point_snap import PointSnapper, nearest


def project(lat_lng):
    # 1e-5 degrees to one pixel, y growing downwards
    lat, lng = lat_lng
    return lng * 1e5, -lat * 1e5


class TestNearest(TestCase):
    def test_no_candidates(self):
        self.assertIsNone(nearest((41.0, 29.0), [], 15, project))

    def test_outside_threshold(self):
        # 20 pixels east of the click
        candidate = (41.0, 29.0002)
        self.assertIsNone(nearest((41.0, 29.0), [candidate], 15, project))

    def test_inside_threshold(self):
        # 10 pixels east of the click
        candidate = (41.0, 29.0001)
        self.assertEqual(nearest((41.0, 29.0), [candidate], 15, project), candidate)

    def test_threshold_is_strict(self):
        screen = {(41.0, 29.0): (0.0, 0.0), (41.0, 29.1): (15.0, 0.0)}
        self.assertIsNone(nearest((41.0, 29.0), [(41.0, 29.1)], 15, screen.__getitem__))

    def test_closest_wins_and_ties_go_first(self):
        a = RecordedPoint("a", "P-1", 41.0, 29.1)
        b = RecordedPoint("b", "P-2", 41.0, 28.9)
        c = RecordedPoint("c", "P-3", 41.0, 29.05)
        screen = {
            (41.0, 29.0): (100.0, 100.0),
            (41.0, 29.1): (110.0, 100.0),
            (41.0, 28.9): (90.0, 100.0),
            (41.0, 29.05): (105.0, 100.0),
        }

        self.assertIs(nearest((41.0, 29.0), [a, b], 15, screen.__getitem__), a)
        self.assertIs(nearest((41.0, 29.0), [b, a], 15, screen.__getitem__), b)
        self.assertIs(nearest((41.0, 29.0), [a, b, c], 15, screen.__getitem__), c)


class TestPointSnapper(TestCase):
    def setUp(self):
        self.points = [RecordedPoint("a", "P-1", 41.0, 29.0001)]

    def test_snaps_to_point(self):
        snapper = PointSnapper()
        self.assertEqual(snapper.snap((41.0, 29.0), self.points, project), (41.0, 29.0001))

    def test_passes_through_when_far(self):
        snapper = PointSnapper()
        self.assertEqual(snapper.snap((41.0, 28.99), self.points, project), (41.0, 28.99))

    def test_inactive(self):
        snapper = PointSnapper(active=False)
        self.assertEqual(snapper.snap((41.0, 29.0), self.points, project), (41.0, 29.0))

    def test_threshold_must_be_positive(self):
        with self.assertRaises(ValueError):
            PointSnapper(threshold_pixels=0)
