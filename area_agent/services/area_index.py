import logging
from typing import Iterable, List, Optional, Sequence

from area_agent.models.schemas import Area
from area_agent.services.geometry import point_in_polygon

logger = logging.getLogger(__name__)


def find_containing_area(point: Sequence[float], areas: Iterable[Area]) -> Optional[Area]:
    """
    Returns the first area, in the order given, whose outer ring contains the point.
    Areas without usable geometry are skipped. Overlapping areas resolve to whichever
    comes first.
    """
    for area in areas:
        ring = area.outer_ring()
        if not ring:
            continue
        if point_in_polygon(point, ring):
            return area
    return None


def find_all_containing_areas(point: Sequence[float], areas: Iterable[Area]) -> List[Area]:
    """Returns every area containing the point, in the order given."""
    matches = [area for area in areas if area.outer_ring() and point_in_polygon(point, area.outer_ring())]
    if len(matches) > 1:
        logger.warning(f"Point {tuple(point)} falls inside {len(matches)} overlapping areas: {[a.name for a in matches]}")
    return matches
