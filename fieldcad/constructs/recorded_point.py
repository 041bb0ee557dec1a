from __future__ import annotations

import uuid
from typing import Dict, Iterator, List, NamedTuple, Optional

import pandas as pd


class RecordedPoint(NamedTuple):
    """
    A ground point captured by the surveyor.

    Attributes:
        id: A unique identifier; stakeout sessions refer to points by this id
        name: The display name, e.g. "P-3"
        lat: Latitude in decimal degrees (WGS84)
        lng: Longitude in decimal degrees (WGS84)
    """

    id: str
    name: str
    lat: float
    lng: float

    @property
    def lat_lng(self):
        return self.lat, self.lng


def new_point_id() -> str:
    return uuid.uuid4().hex[:9]


class PointBook:
    """
    The ordered list of recorded points.

    Points are named "P-<n>" when recorded, where n is one more than the number of
    points currently in the book. Deleting a point does not rename the others.

    Examples:
        >>> book = PointBook()
        >>> p = book.record(41.0082, 28.9784)
        >>> p.name
        'P-1'
        >>> book.remove(p.id)
        >>> len(book)
        0
    """

    def __init__(self, points: Optional[List[RecordedPoint]] = None):
        self._points: List[RecordedPoint] = []
        for p in points or []:
            self.add(p)

    def __len__(self):
        return len(self._points)

    def __iter__(self) -> Iterator[RecordedPoint]:
        return iter(self._points)

    def __contains__(self, point_id: object) -> bool:
        return any(p.id == point_id for p in self._points)

    @property
    def points(self) -> List[RecordedPoint]:
        return list(self._points)

    def add(self, point: RecordedPoint) -> RecordedPoint:
        if point.id in self:
            raise ValueError(f"a point with id {point.id} is already recorded")
        self._points.append(point)
        return point

    def record(self, lat: float, lng: float, name: Optional[str] = None) -> RecordedPoint:
        """
        Record a new point at the given location.

        Args:
            lat: Latitude in decimal degrees
            lng: Longitude in decimal degrees
            name: Optional display name; defaults to "P-<n>"

        Returns:
            The new RecordedPoint
        """
        point = RecordedPoint(
            id=new_point_id(),
            name=name or f"P-{len(self._points) + 1}",
            lat=lat,
            lng=lng,
        )
        return self.add(point)

    def get(self, point_id: str) -> Optional[RecordedPoint]:
        for p in self._points:
            if p.id == point_id:
                return p
        return None

    def remove(self, point_id: str) -> Optional[RecordedPoint]:
        """Remove a point by id; returns the removed point, or None if it was not recorded."""
        point = self.get(point_id)
        if point is not None:
            self._points.remove(point)
        return point

    def clear(self):
        self._points.clear()

    def by_id(self) -> Dict[str, RecordedPoint]:
        return {p.id: p for p in self._points}

    def to_dataframe(self) -> pd.DataFrame:
        """
        The recorded points as a DataFrame indexed by point id.

        Returns:
            A DataFrame with 'name', 'latitude' and 'longitude' columns
        """
        return pd.DataFrame(
            {
                "name": [p.name for p in self._points],
                "latitude": [p.lat for p in self._points],
                "longitude": [p.lng for p in self._points],
            },
            index=pd.Index([p.id for p in self._points], name="id"),
        )
