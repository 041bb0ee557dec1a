from unittest import TestCase

from fieldcad.constructs.recorded_point import PointBook, RecordedPoint
from fieldcad.constructs.stakeout import StakeoutSession


class TestPointBook(TestCase):
    def test_record_names_points(self):
        book = PointBook()

        p1 = book.record(41.0, 29.0)
        p2 = book.record(41.001, 29.001)
        custom = book.record(41.002, 29.002, name="BM-1")

        self.assertEqual([p.name for p in book], ["P-1", "P-2", "BM-1"])
        self.assertNotEqual(p1.id, p2.id)
        self.assertIn(custom.id, book)

    def test_remove_does_not_rename(self):
        book = PointBook()
        p1 = book.record(41.0, 29.0)
        book.record(41.001, 29.001)

        book.remove(p1.id)
        p3 = book.record(41.002, 29.002)

        self.assertEqual([p.name for p in book], ["P-2", "P-2"])
        self.assertEqual(book.get(p3.id), p3)
        self.assertIsNone(book.remove("missing"))

    def test_duplicate_id(self):
        book = PointBook([RecordedPoint("a", "P-1", 41.0, 29.0)])
        with self.assertRaises(ValueError):
            book.add(RecordedPoint("a", "P-2", 41.0, 29.0))

    def test_to_dataframe(self):
        book = PointBook(
            [
                RecordedPoint("a", "P-1", 41.0, 29.0),
                RecordedPoint("b", "P-2", 41.5, 29.5),
            ]
        )

        frame = book.to_dataframe()

        self.assertEqual(list(frame.columns), ["name", "latitude", "longitude"])
        self.assertEqual(frame.loc["b", "latitude"], 41.5)
        self.assertEqual(set(book.by_id()), {"a", "b"})


class TestStakeoutSession(TestCase):
    def test_target_removed(self):
        book = PointBook()
        target = book.record(41.0, 29.0)
        session = StakeoutSession(target.id, (41.0, 29.001))

        self.assertIsNotNone(session.reading(book))

        book.remove(target.id)
        self.assertIsNone(session.reading(book))

    def test_retarget(self):
        book = PointBook()
        east = book.record(41.0, 29.001)
        north = book.record(41.001, 29.0)
        session = StakeoutSession(east.id, (41.0, 29.0))

        self.assertAlmostEqual(session.reading(book).bearing_degrees, 90.0, delta=0.01)

        session.retarget(north.id)
        reading = session.reading(book)
        self.assertEqual(reading.target, north)
        self.assertAlmostEqual(reading.bearing_degrees, 0.0, places=6)
