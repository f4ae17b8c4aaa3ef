from typing import Optional, Sequence, Tuple

LatLng = Tuple[float, float]


def point_in_polygon(point: Sequence[float], ring: Sequence[Sequence[float]]) -> bool:
    """
    Even-odd ray casting test for a (lat, lng) point against a ring of (lat, lng) pairs.

    The ring is treated as implicitly closed: the edge from the last vertex back to the
    first is always tested, so a duplicated closing vertex is harmless. Rings with fewer
    than 3 vertices contain nothing. Points lying exactly on an edge or vertex may fall
    either way.
    """
    n = len(ring)
    if n < 3:
        return False

    # Work in planar (x=lng, y=lat) space
    x = point[1]
    y = point[0]
    inside = False

    j = n - 1
    for i in range(n):
        yi, xi = ring[i][0], ring[i][1]
        yj, xj = ring[j][0], ring[j][1]
        # A horizontal edge never satisfies the first clause, so the division is safe
        if (yi > y) != (yj > y) and x < (xj - xi) * (y - yi) / (yj - yi) + xi:
            inside = not inside
        j = i

    return inside


def polygon_centroid(ring: Sequence[Sequence[float]]) -> Optional[LatLng]:
    """Vertex mean of a ring, used to anchor area labels. Returns None for an empty ring."""
    vertices = list(ring)
    if len(vertices) > 1 and tuple(vertices[0]) == tuple(vertices[-1]):
        vertices = vertices[:-1]
    if not vertices:
        return None

    lat_sum = sum(v[0] for v in vertices)
    lng_sum = sum(v[1] for v in vertices)
    return (lat_sum / len(vertices), lng_sum / len(vertices))
