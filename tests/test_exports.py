import io
from unittest import TestCase

from ezdxf import recover
from shapely.geometry import LineString, Point, Polygon

from fieldcad.constructs.crs_definition import CrsDefinition, CrsKind
from fieldcad.constructs.feature_collection import FeatureCollection
from fieldcad.constructs.geo_feature import GeoFeature
from fieldcad.constructs.recorded_point import PointBook, RecordedPoint
from fieldcad.crs.registry import CrsNotFoundError, default_registry
from fieldcad.export.coordinate_list import format_coordinate_list, to_coordinate_list
from fieldcad.export.dxf_writer import build_cad_export, encode_document, export_parcels, to_cad_document
from fieldcad.export.naming import export_filename
from fieldcad.export.zones import select_zone, zone_meridian
from tests import get_test_dir


def _square(lng: float, lat: float, size: float = 0.001) -> GeoFeature:
    ring = [(lng, lat), (lng + size, lat), (lng + size, lat + size), (lng, lat + size)]
    return GeoFeature(Polygon(ring), {})


class TestCoordinateList(TestCase):
    def setUp(self):
        self.book = PointBook(
            [
                RecordedPoint("a1", "P-1", 41.0, 29.0),
                RecordedPoint("b2", "P-2", 41.0082, 28.9784),
            ]
        )

    def test_wgs84_rows(self):
        rows = to_coordinate_list(self.book, "WGS84")
        text = format_coordinate_list(rows)

        self.assertEqual(len(rows), 2)
        self.assertEqual(
            text,
            "P-1 29.000000 41.000000\n"
            "P-2 28.978400 41.008200\n",
        )

    def test_projected_rows_use_three_decimals(self):
        book = PointBook([RecordedPoint("c3", "P-1", 41.0, 33.0)])

        rows = to_coordinate_list(book, "EPSG:5255")

        # on the central meridian the easting is the false easting
        self.assertEqual(rows[0].x, "500000.000")
        self.assertEqual(len(rows[0].y.split(".")[1]), 3)

    def test_empty_book(self):
        rows = to_coordinate_list(PointBook(), "EPSG:5255")

        self.assertEqual(rows, [])
        self.assertEqual(format_coordinate_list(rows), "")

    def test_rejects_local_and_unknown(self):
        with self.assertRaises(ValueError):
            to_coordinate_list(self.book, "local")
        with self.assertRaises(CrsNotFoundError):
            to_coordinate_list(self.book, "EPSG:1")

    def test_unprojectable_rows_are_flagged(self):
        broken = CrsDefinition("BROKEN", "Broken", CrsKind.PROJECTED, "+proj=nonexistent")
        registry = default_registry().with_definitions(broken)

        with self.assertLogs("fieldcad.georef.transform", level="WARNING"):
            rows = to_coordinate_list(self.book, "BROKEN", registry)

        self.assertTrue(all(row.degenerate for row in rows))
        self.assertEqual((rows[0].x, rows[0].y), ("29.000", "41.000"))
        self.assertFalse(any(row.degenerate for row in to_coordinate_list(self.book, "EPSG:5254")))


class TestCadDocument(TestCase):
    def test_single_point_document(self):
        book = PointBook([RecordedPoint("a1", "P-1", 41.0, 29.0)])

        dxf = to_cad_document(book, "WGS84")

        expected = (
            "  0\nSECTION\n  2\nHEADER\n  9\n$ACADVER\n  1\nAC1015\n  0\nENDSEC\n"
            "  0\nSECTION\n  2\nENTITIES\n"
            "  0\nPOINT\n  8\nRECORDED_POINTS\n 10\n29.0\n 20\n41.0\n 30\n0.0\n"
            "  0\nTEXT\n  8\nPOINT_NAMES\n 10\n29.5\n 20\n41.5\n 30\n0.0\n 40\n1.0\n  1\nP-1\n"
            "  0\nENDSEC\n  0\nEOF\n"
        )
        self.assertEqual(dxf, expected)

    def test_output_is_reproducible(self):
        book = PointBook([RecordedPoint("a1", "P-1", 41.0, 29.0)])

        self.assertEqual(to_cad_document(book, "EPSG:5254"), to_cad_document(book, "EPSG:5254"))

    def test_nothing_to_export(self):
        self.assertEqual(to_cad_document([], "EPSG:5255"), "")
        self.assertEqual(build_cad_export([], "EPSG:5255"), ("", 0))

    def test_features(self):
        features = [
            _square(31.4, 39.0),
            GeoFeature(LineString([(31.4, 39.0), (31.41, 39.01)]), {"layer": "ROADS"}),
            GeoFeature(Point(31.4, 39.0), {"name": "BM-1"}),
        ]

        dxf = to_cad_document(features, "EPSG:5254")

        self.assertIn("  0\nLWPOLYLINE\n  8\nPARSEL\n 90\n4\n 70\n1\n", dxf)
        self.assertIn("  0\nLWPOLYLINE\n  8\nROADS\n 90\n2\n 70\n0\n", dxf)
        self.assertIn("  0\nTEXT\n  8\nPOINT_NAMES\n", dxf)
        self.assertIn("  1\nBM-1\n", dxf)

    def test_document_reads_back(self):
        book = PointBook(
            [
                RecordedPoint("a1", "P-1", 41.0, 29.0),
                RecordedPoint("b2", "P-2", 41.001, 29.001),
            ]
        )
        dxf = to_cad_document(list(book) + [_square(29.0, 41.0)], "EPSG:5254")

        doc, _ = recover.read(io.BytesIO(encode_document(dxf)))
        msp = doc.modelspace()

        self.assertEqual(len(msp.query("POINT")), 2)
        self.assertEqual(len(msp.query("TEXT")), 2)
        parcels = msp.query("LWPOLYLINE")
        self.assertEqual(len(parcels), 1)
        self.assertTrue(parcels[0].closed)
        self.assertEqual(parcels[0].dxf.layer, "PARSEL")

    def test_encode_escapes_characters_outside_codepage(self):
        book = PointBook([RecordedPoint("a1", "Şantiye", 41.0, 29.0)])

        raw = encode_document(to_cad_document(book, "EPSG:5254"))

        # plain ASCII plus the escape for Ş
        raw.decode("ascii")
        self.assertIn(b"\\U+015E", raw.upper())
        self.assertIn(b"antiye\n", raw)

    def test_counts_unprojectable_coordinates(self):
        broken = CrsDefinition("BROKEN", "Broken", CrsKind.PROJECTED, "+proj=nonexistent")
        registry = default_registry().with_definitions(broken)
        items = [RecordedPoint("a1", "P-1", 41.0, 29.0), _square(29.0, 41.0)]

        with self.assertLogs("fieldcad.georef.transform", level="WARNING"):
            result = build_cad_export(items, "BROKEN", registry)

        # one point and four ring vertices
        self.assertEqual(result.degenerate, 5)
        self.assertIn(" 10\n29.0\n 20\n41.0\n", result.document)

    def test_projected_export_is_not_degenerate(self):
        book = PointBook([RecordedPoint("a1", "P-1", 41.0, 29.0)])

        self.assertEqual(build_cad_export(book, "EPSG:5254").degenerate, 0)


class TestZones(TestCase):
    def test_parcel_file_selects_tm30(self):
        parcels = FeatureCollection.from_geojson(
            (get_test_dir() / "test_assets" / "parcel.geojson").read_text()
        )

        self.assertEqual(zone_meridian(parcels), 30)
        self.assertEqual(select_zone(parcels).id, "EPSG:5254")

    def test_rounds_half_up(self):
        self.assertEqual(zone_meridian([_square(28.5, 40.0)]), 30)
        self.assertEqual(zone_meridian([_square(28.4, 40.0)]), 27)

    def test_mean_of_first_vertices(self):
        features = [_square(32.0, 40.0), _square(34.0, 40.0)]
        self.assertEqual(zone_meridian(features), 33)

    def test_constructs_missing_zone(self):
        crs = select_zone([_square(34.6, 36.5)])

        self.assertEqual(crs.id, "TM36")
        self.assertEqual(crs.central_meridian, 36.0)
        self.assertIn("+ellps=GRS80", crs.projection_parameters)

    def test_no_polygons_defaults_to_33(self):
        self.assertEqual(zone_meridian([GeoFeature(Point(40.0, 40.0), {})]), 33)


class TestExportParcels(TestCase):
    def test_export_parcel_file(self):
        parcels = FeatureCollection.from_geojson(
            (get_test_dir() / "test_assets" / "parcel.geojson").read_text()
        )

        result = export_parcels(parcels)

        self.assertEqual(result.crs.id, "EPSG:5254")
        self.assertEqual(result.degenerate, 0)
        self.assertEqual(result.document.count("\nLWPOLYLINE\n"), 2)
        self.assertEqual(result.document.count("\nPARSEL\n"), 2)

    def test_constructed_zone_is_usable(self):
        result = export_parcels([_square(34.6, 36.5)])

        self.assertEqual(result.crs.id, "TM36")
        self.assertIn("\nLWPOLYLINE\n", result.document)

    def test_no_polygons(self):
        self.assertIsNone(export_parcels([]))
        self.assertIsNone(export_parcels([GeoFeature(Point(31.4, 39.0), {})]))


class TestNaming(TestCase):
    def test_export_filename(self):
        self.assertEqual(export_filename("points", "EPSG:5255", ".txt"), "points_EPSG_5255.txt")
        self.assertEqual(export_filename("ada 101/7", "TM30", ".dxf"), "ada_101_7_TM30.dxf")
