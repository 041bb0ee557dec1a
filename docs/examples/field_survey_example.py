"""
# Field Survey Example

An example of placing a CAD drawing on the map, recording points, staking one out and exporting the results
"""


def main():
    import io

    import ezdxf

    """
    First, we need a drawing.
    Normally this would be a .dxf file handed over by the office; here we build a tiny site plan with ezdxf so the example is self-contained:
    """

    doc = ezdxf.new()
    doc.layers.add("WALLS", color=1)
    doc.layers.add("TREES", color=3)
    msp = doc.modelspace()
    msp.add_lwpolyline([(0, 0), (20, 0), (20, 12), (0, 12)], close=True, dxfattribs={"layer": "WALLS"})
    msp.add_circle((26, 6), 2.5, dxfattribs={"layer": "TREES"})

    stream = io.StringIO()
    doc.write(stream)

    """
    A `FieldSurvey` holds everything that happens during one session in the field.
    Opening a drawing parses it once and places it with the default local placement, which anchors the drawing origin at a fixed latitude and longitude:
    """

    from fieldcad.survey import ClickMode, FieldSurvey

    survey = FieldSurvey()
    layer = survey.open_drawing("site_plan.dxf", stream.getvalue())

    print(layer)
    print(layer.config)

    """
    The drawing units are treated as meters around the origin.
    If the drawing was made in a projected system like ITRF96 / TM30 we can say so, and shift it into place with the offset.
    Every change re-computes the features from the parsed entities; a bad value (like a zero scale) is rejected and the layer keeps its previous placement:
    """

    layer.reconfigure(crs_id="EPSG:5254", offset_x=412000, offset_y=4327000)

    try:
        layer.reconfigure(scale=0)
    except ValueError as e:
        print(e)

    for feature in layer.features:
        print(feature.properties["kind"], feature.layer, feature.properties["color"])

    """
    Sub-layers can be switched off without touching the features themselves:
    """

    layer.toggle_sublayer("TREES")
    print(f"{len(survey.visible_features())} of {len(layer.features)} features visible")

    """
    Map clicks are routed to the active tool.
    The survey doesn't know anything about the map widget, so we hand it the function that projects a latitude and longitude to screen pixels.
    Here we fake one with 1e-5 degrees to a pixel:
    """

    def project(lat_lng):
        lat, lng = lat_lng
        return lng * 1e5, -lat * 1e5

    survey.mode = ClickMode.RECORD
    survey.click(39.0912, 29.9951, project)
    survey.click(39.0915, 29.9957, project)

    """
    A click within 15 pixels of an existing point snaps onto it:
    """

    survey.click(39.09121, 29.99511, project)

    print(survey.points.to_dataframe())

    """
    The measure tool works the same way, but only adds to the measurement path:
    """

    survey.mode = ClickMode.MEASURE
    survey.click(39.0912, 29.9951, project)
    survey.click(39.0915, 29.9957, project)
    print(f"measured {survey.measurement.total_length:.2f} m")

    """
    Now let's walk to P-2. Each position update from the receiver refreshes the distance and bearing:
    """

    target = survey.points.points[1]
    survey.start_stakeout(target.id)

    for lat, lng in [(39.0905, 29.9940), (39.0911, 29.9950), (39.091499, 29.995699)]:
        survey.update_position(lat, lng)
        reading = survey.stakeout_reading()
        print(
            f"{reading.distance_meters:8.2f} m at {reading.bearing_degrees:6.1f} deg, arrived: {reading.arrived()}"
        )

    """
    Recorded points are exported in ITRF96 / TM33 by default. Let's switch to TM30 since that's the zone we're in:
    """

    survey.set_export_crs("EPSG:5254")

    points_txt = survey.export_points_text()
    print(points_txt.filename)
    print(points_txt.content)

    points_dxf = survey.export_points_dxf()
    print(points_dxf.filename, len(points_dxf.content))

    """
    Lastly, parcel polygons (for example from a cadastral lookup) can be exported to DXF.
    The zone is picked automatically from the parcels' longitude.
    fieldcad ships a small sample we can use:
    """

    from fieldcad import package_root

    sample = package_root() / "resources/parcels/sample_parcels.geojson"
    survey.add_parcels("ada 101", sample.read_text())

    parcel_dxf = survey.export_parcel_layer("ada 101")
    print(parcel_dxf.filename)


if __name__ == "__main__":
    main()
