from __future__ import annotations

from typing import NamedTuple, Optional, Tuple

from fieldcad.constructs.recorded_point import PointBook, RecordedPoint
from fieldcad.utils.geo import bearing, distance

# distance under which the target counts as reached, in meters
DEFAULT_ARRIVAL_METERS = 0.5


class StakeoutReading(NamedTuple):
    """
    Where the target is, seen from the last known position.

    Attributes:
        target: The target point
        distance_meters: Great-circle distance to the target
        bearing_degrees: Initial bearing to the target, clockwise from north, in [0, 360)
    """

    target: RecordedPoint
    distance_meters: float
    bearing_degrees: float

    def arrived(self, threshold_meters: float = DEFAULT_ARRIVAL_METERS) -> bool:
        return self.distance_meters <= threshold_meters


class StakeoutSession:
    """
    Navigation from the current position to a recorded target point.

    The session only holds the target's id and the latest position sample. Distance
    and bearing are recomputed on every call to `reading`, so they always reflect the
    current position and the current target.

    Args:
        target_point_id: The id of the RecordedPoint to walk to
        last_known_position: An optional initial (latitude, longitude) sample

    Examples:
        >>> session = StakeoutSession(target.id)
        >>> session.update_position(41.00812, 28.97851)
        >>> r = session.reading(book)
        >>> print(f"{r.distance_meters:.2f} m at {r.bearing_degrees:.1f} deg")
    """

    def __init__(
        self,
        target_point_id: str,
        last_known_position: Optional[Tuple[float, float]] = None,
    ):
        self.target_point_id = target_point_id
        self.last_known_position = last_known_position

    def __repr__(self):
        return (
            f"StakeoutSession(target_point_id={self.target_point_id!r}, "
            f"last_known_position={self.last_known_position})"
        )

    def update_position(self, lat: float, lng: float):
        self.last_known_position = (lat, lng)

    def retarget(self, target_point_id: str):
        self.target_point_id = target_point_id

    def reading(self, points: PointBook) -> Optional[StakeoutReading]:
        """
        Compute distance and bearing from the last known position to the target.

        Args:
            points: The point book the target id refers into

        Returns:
            A StakeoutReading, or None if there is no position yet or the target is no
            longer recorded
        """
        if self.last_known_position is None:
            return None
        target = points.get(self.target_point_id)
        if target is None:
            return None
        here = self.last_known_position
        return StakeoutReading(
            target=target,
            distance_meters=distance(here, target.lat_lng),
            bearing_degrees=bearing(here, target.lat_lng),
        )
