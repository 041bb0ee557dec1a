from unittest import TestCase

from fieldcad.constructs.crs_definition import CrsDefinition, CrsKind, transverse_mercator
from fieldcad.crs.registry import CrsNotFoundError, CrsRegistry, default_registry


class TestCrsRegistry(TestCase):
    def setUp(self):
        self.registry = default_registry()

    def test_sentinels_are_registered(self):
        wgs84 = self.registry.lookup("WGS84")
        local = self.registry.lookup("local")

        self.assertEqual(wgs84.kind, CrsKind.GEOGRAPHIC)
        self.assertEqual(local.kind, CrsKind.LOCAL)
        self.assertEqual(local.projection_parameters, "")

    def test_ships_three_transverse_mercator_meridians(self):
        meridians = sorted(
            d.central_meridian
            for d in self.registry.projected()
            if d.central_meridian is not None and "GRS80" in d.projection_parameters
        )
        self.assertEqual(meridians, [27.0, 30.0, 33.0])

    def test_lookup_unknown_raises(self):
        with self.assertRaises(CrsNotFoundError) as ctx:
            self.registry.lookup("EPSG:0000")

        # config errors are KeyErrors so dict-style callers can catch them
        self.assertIsInstance(ctx.exception, KeyError)
        self.assertIn("EPSG:0000", str(ctx.exception))

    def test_find_transverse_mercator(self):
        self.assertEqual(self.registry.find_transverse_mercator(30).id, "EPSG:5254")
        self.assertIsNone(self.registry.find_transverse_mercator(36))

    def test_duplicate_ids_rejected(self):
        tm = transverse_mercator(30)
        with self.assertRaises(ValueError):
            CrsRegistry([tm, tm])

    def test_with_definitions_does_not_mutate(self):
        extended = self.registry.with_definitions(transverse_mercator(36))

        self.assertIn("TM36", extended)
        self.assertNotIn("TM36", self.registry)
        self.assertEqual(len(extended), len(self.registry) + 1)

    def test_to_pyproj(self):
        crs = self.registry.lookup("EPSG:5255").to_pyproj()
        self.assertTrue(crs.is_projected)

        with self.assertRaises(ValueError):
            self.registry.lookup("local").to_pyproj()

    def test_unparsable_parameters(self):
        broken = CrsDefinition("BROKEN", "Broken", CrsKind.PROJECTED, "+proj=nonexistent")
        with self.assertRaises(ValueError):
            broken.to_pyproj()
