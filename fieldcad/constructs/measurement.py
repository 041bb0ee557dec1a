from __future__ import annotations

from typing import Iterator, List, Tuple

from fieldcad.utils.geo import path_length, path_lengths

LatLng = Tuple[float, float]


class MeasurementPath:
    """
    An ordered path of clicked points whose length is being measured.

    Points can only be appended or cleared all at once. Segment lengths and the total
    length are derived from the points on every access.

    Examples:
        >>> path = MeasurementPath()
        >>> path.append(41.0, 29.0)
        >>> path.append(41.001, 29.0)
        >>> round(path.total_length, 1)
        111.2
    """

    def __init__(self):
        self._points: List[LatLng] = []

    def __len__(self):
        return len(self._points)

    def __iter__(self) -> Iterator[LatLng]:
        return iter(self._points)

    @property
    def points(self) -> List[LatLng]:
        return list(self._points)

    def append(self, lat: float, lng: float):
        self._points.append((lat, lng))

    def clear(self):
        self._points.clear()

    @property
    def segment_lengths(self) -> List[float]:
        return path_lengths(self._points)

    @property
    def total_length(self) -> float:
        return path_length(self._points)
