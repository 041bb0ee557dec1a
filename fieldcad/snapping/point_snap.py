import logging
import math
from typing import Callable, Optional, Sequence, Tuple, TypeVar

log = logging.getLogger(__name__)

# snapping radius used by the point capture tool, in screen pixels
DEFAULT_THRESHOLD_PIXELS = 15.0

LatLng = Tuple[float, float]
ProjectFn = Callable[[LatLng], Tuple[float, float]]

T = TypeVar("T")


def _lat_lng(candidate) -> LatLng:
    if isinstance(candidate, tuple) and not hasattr(candidate, "lat"):
        return candidate[0], candidate[1]
    return candidate.lat, candidate.lng


def nearest(
    click: LatLng,
    candidates: Sequence[T],
    threshold_pixels: float,
    project_fn: ProjectFn,
) -> Optional[T]:
    """
    Find the candidate closest to a click in screen space, if it is close enough.

    The click and every candidate are projected to pixels with `project_fn` (the map's
    latitude/longitude to screen projection) and compared by Euclidean distance. The
    closest candidate wins only if its distance is strictly less than the threshold.
    Ties go to the candidate that comes first.

    Args:
        click: The clicked location as (latitude, longitude)
        candidates: Objects with `lat` and `lng` attributes (e.g. RecordedPoint), or
            (latitude, longitude) tuples
        threshold_pixels: The snapping radius in pixels
        project_fn: Maps a (latitude, longitude) pair to (x, y) screen pixels

    Returns:
        The nearest candidate within the threshold, or None

    Examples:
        >>> project = lambda p: (p[1] * 1000, p[0] * 1000)
        >>> nearest((41.0, 29.0), [(41.0, 29.01)], 15, project)
        (41.0, 29.01)
        >>> nearest((41.0, 29.0), [(41.0, 29.02)], 15, project) is None
        True
    """
    if not candidates:
        return None

    cx, cy = project_fn(click)
    best: Optional[T] = None
    best_dist = math.inf

    for candidate in candidates:
        px, py = project_fn(_lat_lng(candidate))
        d = math.hypot(px - cx, py - cy)
        if d < best_dist:
            best, best_dist = candidate, d

    if best_dist < threshold_pixels:
        return best
    return None


class PointSnapper:
    """
    The snapping policy applied to map clicks while points are being captured.

    When active, a click close enough to an existing point is replaced by that point's
    exact location. FieldSurvey applies it to clicks that record new points; measure
    clicks are used as they come. When inactive, clicks pass through unchanged.

    Args:
        threshold_pixels: The snapping radius in screen pixels. Default is 15.
        active: Whether snapping starts enabled. Default is True.

    Examples:
        >>> snapper = PointSnapper()
        >>> lat, lng = snapper.snap((41.0, 29.0), book.points, map_view.project)
    """

    def __init__(self, threshold_pixels: float = DEFAULT_THRESHOLD_PIXELS, active: bool = True):
        if threshold_pixels <= 0:
            raise ValueError(f"threshold must be positive but got {threshold_pixels}")
        self.threshold_pixels = threshold_pixels
        self.active = active

    def snap(self, click: LatLng, candidates: Sequence, project_fn: ProjectFn) -> LatLng:
        """
        Resolve a click to the location that should be used.

        Returns:
            The nearest candidate's (latitude, longitude) when snapping is active and a
            candidate is in range; otherwise the click itself
        """
        if not self.active:
            return click
        hit = nearest(click, candidates, self.threshold_pixels, project_fn)
        if hit is None:
            return click
        snapped = _lat_lng(hit)
        log.debug(f"snapped click {click} to {snapped}")
        return snapped
