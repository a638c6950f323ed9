"""
Planar geometry kernel for the fold simulator.

All functions are pure. Points are ``Point(x, y)`` named tuples in drawing
area units; polygons are lists of points.

Tolerances:
    0.0001  parallel lines / zero-length segments / hull angle ties
    0.001   segment parameter window for intersections
    0.5     point equality and hull deduplication
    1.0     "lies on crease" distance for polygon union
"""

import math
from functools import cmp_to_key
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple

import numpy as np

PARALLEL_EPSILON = 0.0001
ANGLE_EPSILON = 0.0001  # hull sort treats closer polar angles as collinear
SEGMENT_T_MIN = 0.001
SEGMENT_T_MAX = 0.999
POINT_EPSILON = 0.5


class Point(NamedTuple):
    """2D point or vector."""
    x: float
    y: float


class SegmentHit(NamedTuple):
    """Intersection of two segments with both parametric positions."""
    point: Point
    t: float
    u: float


class Bounds(NamedTuple):
    """Axis-aligned bounding box."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float


# ============ VECTOR MATH ============

def add(a: Point, b: Point) -> Point:
    return Point(a.x + b.x, a.y + b.y)


def sub(a: Point, b: Point) -> Point:
    return Point(a.x - b.x, a.y - b.y)


def scale(v: Point, s: float) -> Point:
    return Point(v.x * s, v.y * s)


def dot(a: Point, b: Point) -> float:
    return a.x * b.x + a.y * b.y


def length(v: Point) -> float:
    return math.sqrt(v.x * v.x + v.y * v.y)


def distance(a: Point, b: Point) -> float:
    return length(sub(a, b))


def normalize(v: Point) -> Point:
    """Unit vector, or the zero vector for near-zero input."""
    l = length(v)
    return scale(v, 1 / l) if l > PARALLEL_EPSILON else Point(0.0, 0.0)


def perp(v: Point) -> Point:
    return Point(-v.y, v.x)


def midpoint(a: Point, b: Point) -> Point:
    return Point((a.x + b.x) / 2, (a.y + b.y) / 2)


def lerp(a: Point, b: Point, t: float) -> Point:
    return Point(a.x + (b.x - a.x) * t, a.y + (b.y - a.y) * t)


def points_equal(a: Point, b: Point) -> bool:
    return distance(a, b) < POINT_EPSILON


def crease_angle(p1: Point, p2: Point) -> float:
    """Undirected angle of a segment in degrees, in [0, 180)."""
    angle = math.degrees(math.atan2(p2.y - p1.y, p2.x - p1.x))
    if angle < 0:
        angle += 180
    if angle >= 180:
        angle -= 180
    return angle


def angle_difference(a: float, b: float) -> float:
    """Smallest difference between two undirected angles, in [0, 90]."""
    diff = abs(a - b)
    return 180 - diff if diff > 90 else diff


# ============ SEGMENTS ============

def segment_intersect(a1: Point, a2: Point, b1: Point, b2: Point) -> Optional[SegmentHit]:
    """
    Intersect segments a1-a2 and b1-b2.

    Touches within 0.1% of either segment's endpoints do not count, so creases
    sharing an anchor are not reported as crossing there.

    Returns:
        SegmentHit, or None when parallel or not crossing inside both segments
    """
    d1 = sub(a2, a1)
    d2 = sub(b2, b1)
    cross = d1.x * d2.y - d1.y * d2.x
    if abs(cross) < PARALLEL_EPSILON:
        return None

    dp = sub(b1, a1)
    t = (dp.x * d2.y - dp.y * d2.x) / cross
    u = (dp.x * d1.y - dp.y * d1.x) / cross

    if SEGMENT_T_MIN < t < SEGMENT_T_MAX and SEGMENT_T_MIN < u < SEGMENT_T_MAX:
        return SegmentHit(add(a1, scale(d1, t)), t, u)
    return None


def segments_to_array(segments: Sequence[Tuple[Point, Point]]) -> np.ndarray:
    """Pack segments into an (n, 4) float array of x1, y1, x2, y2."""
    if not segments:
        return np.zeros((0, 4), dtype=np.float64)
    return np.array([(p1.x, p1.y, p2.x, p2.y) for p1, p2 in segments], dtype=np.float64)


def _intersect_arrays(a: np.ndarray, b: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Row-wise version of ``segment_intersect`` for paired (m, 4) arrays.

    Uses the same operation order as the scalar version so results agree
    bit for bit.

    Returns:
        (mask, x, y) where mask marks pairs that intersect
    """
    d1x = a[:, 2] - a[:, 0]
    d1y = a[:, 3] - a[:, 1]
    d2x = b[:, 2] - b[:, 0]
    d2y = b[:, 3] - b[:, 1]
    cross = d1x * d2y - d1y * d2x
    valid = np.abs(cross) >= PARALLEL_EPSILON

    safe_cross = np.where(valid, cross, 1.0)
    dpx = b[:, 0] - a[:, 0]
    dpy = b[:, 1] - a[:, 1]
    t = (dpx * d2y - dpy * d2x) / safe_cross
    u = (dpx * d1y - dpy * d1x) / safe_cross

    mask = (
        valid
        & (t > SEGMENT_T_MIN) & (t < SEGMENT_T_MAX)
        & (u > SEGMENT_T_MIN) & (u < SEGMENT_T_MAX)
    )
    x = a[:, 0] + d1x * t
    y = a[:, 1] + d1y * t
    return mask, x, y


def find_segment_intersections(segments: np.ndarray) -> List[Tuple[int, int, float, float]]:
    """
    All pairwise crossings of an (n, 4) segment array.

    Returns:
        List of (i, j, x, y) with i < j, ordered by i then j
    """
    n = len(segments)
    if n < 2:
        return []
    ii, jj = np.triu_indices(n, k=1)
    mask, x, y = _intersect_arrays(segments[ii], segments[jj])
    hits = np.nonzero(mask)[0]
    return [(int(ii[k]), int(jj[k]), float(x[k]), float(y[k])) for k in hits]


def find_crossings_with(segment: np.ndarray, others: np.ndarray) -> List[Tuple[int, float, float]]:
    """
    Crossings of one (4,) segment against an (n, 4) array.

    The new segment takes the ``a`` role, matching
    ``segment_intersect(new.p1, new.p2, other.p1, other.p2)``.

    Returns:
        List of (index, x, y) in index order
    """
    if len(others) == 0:
        return []
    repeated = np.broadcast_to(segment, others.shape)
    mask, x, y = _intersect_arrays(repeated, others)
    return [(int(k), float(x[k]), float(y[k])) for k in np.nonzero(mask)[0]]


def point_to_segment_distance(point: Point, start: Point, end: Point) -> float:
    """Distance from a point to the closest point of a segment."""
    dx = end.x - start.x
    dy = end.y - start.y
    len_sq = dx * dx + dy * dy
    if len_sq == 0:
        return distance(point, start)

    t = ((point.x - start.x) * dx + (point.y - start.y) * dy) / len_sq
    t = max(0.0, min(1.0, t))
    return distance(point, Point(start.x + t * dx, start.y + t * dy))


def clip_to_rect(point: Point, direction: Point, w: float, h: float) -> Optional[Tuple[Point, Point]]:
    """
    Clip the infinite line through ``point`` along ``direction`` to the
    rectangle [0, w] x [0, h].

    Returns:
        (p1, p2) ordered along the direction, or None if the line misses
    """
    edges = (
        (Point(0, 0), Point(1, 0), w),
        (Point(w, 0), Point(0, 1), h),
        (Point(0, h), Point(1, 0), w),
        (Point(0, 0), Point(0, 1), h),
    )

    hits: List[Point] = []
    for origin, edge_dir, edge_len in edges:
        cross = direction.x * edge_dir.y - direction.y * edge_dir.x
        if abs(cross) < PARALLEL_EPSILON:
            continue

        dp = sub(origin, point)
        t = (dp.x * edge_dir.y - dp.y * edge_dir.x) / cross
        hit = add(point, scale(direction, t))

        edge_t = dot(sub(hit, origin), edge_dir)
        if -SEGMENT_T_MIN <= edge_t <= edge_len + SEGMENT_T_MIN:
            hit = Point(max(0, min(w, hit.x)), max(0, min(h, hit.y)))
            if not any(distance(other, hit) < POINT_EPSILON for other in hits):
                hits.append(hit)

    if len(hits) < 2:
        return None
    hits.sort(key=lambda p: dot(sub(p, point), direction))
    return hits[0], hits[-1]


def clip_line_to_polygon(line_p1: Point, line_p2: Point, polygon: Sequence[Point]) -> Optional[Tuple[Point, Point]]:
    """
    Cyrus-Beck clip of a segment against a convex polygon.

    Returns:
        Clipped (p1, p2), or None when the segment lies outside
    """
    if len(polygon) < 3:
        return None

    t_min, t_max = 0.0, 1.0
    dx = line_p2.x - line_p1.x
    dy = line_p2.y - line_p1.y

    for i in range(len(polygon)):
        edge_p1 = polygon[i]
        edge_p2 = polygon[(i + 1) % len(polygon)]

        nx = edge_p2.y - edge_p1.y
        ny = edge_p1.x - edge_p2.x
        wx = line_p1.x - edge_p1.x
        wy = line_p1.y - edge_p1.y

        denom = nx * dx + ny * dy
        numer = -(nx * wx + ny * wy)

        if abs(denom) < PARALLEL_EPSILON:
            if numer < 0:
                return None
        else:
            t = numer / denom
            if denom < 0:
                t_min = max(t_min, t)
            else:
                t_max = min(t_max, t)
            if t_min > t_max:
                return None

    return (
        Point(line_p1.x + t_min * dx, line_p1.y + t_min * dy),
        Point(line_p1.x + t_max * dx, line_p1.y + t_max * dy),
    )


# ============ POLYGONS ============

def polygon_edges(polygon: Sequence[Point]) -> List[Tuple[Point, Point]]:
    return [(polygon[i], polygon[(i + 1) % len(polygon)]) for i in range(len(polygon))]


def polygon_area_signed(polygon: Sequence[Point]) -> float:
    """Shoelace area; positive for counter-clockwise winding."""
    if len(polygon) < 3:
        return 0.0
    area = 0.0
    for i in range(len(polygon)):
        j = (i + 1) % len(polygon)
        area += polygon[i].x * polygon[j].y
        area -= polygon[j].x * polygon[i].y
    return area / 2


def polygon_area(polygon: Sequence[Point]) -> float:
    return abs(polygon_area_signed(polygon))


def ensure_ccw(polygon: List[Point]) -> List[Point]:
    if len(polygon) < 3:
        return polygon
    if polygon_area_signed(polygon) < 0:
        return polygon[::-1]
    return polygon


def polygon_bounds(polygon: Sequence[Point]) -> Bounds:
    """Bounding box; the unit box for an empty polygon."""
    if not polygon:
        return Bounds(0, 0, 1, 1)
    xs = [p.x for p in polygon]
    ys = [p.y for p in polygon]
    return Bounds(min(xs), min(ys), max(xs), max(ys))


def normalize_polygon(polygon: List[Point], target_width: float, target_height: float,
                      padding: float = 0) -> List[Point]:
    """
    Uniformly scale and center a polygon inside a padded target box.

    Degenerate polygons (fewer than 3 points or a flat bounding box) are
    returned unchanged.
    """
    if len(polygon) < 3:
        return polygon

    bounds = polygon_bounds(polygon)
    w = bounds.max_x - bounds.min_x
    h = bounds.max_y - bounds.min_y
    if w < 0.001 or h < 0.001:
        return polygon

    avail_w = target_width - padding * 2
    avail_h = target_height - padding * 2
    factor = min(avail_w / w, avail_h / h)

    center_x = (bounds.min_x + bounds.max_x) / 2
    center_y = (bounds.min_y + bounds.max_y) / 2
    return [
        Point((p.x - center_x) * factor + target_width / 2,
              (p.y - center_y) * factor + target_height / 2)
        for p in polygon
    ]


def convex_hull(points: Sequence[Point]) -> List[Point]:
    """
    Graham scan hull, counter-clockwise.

    Points closer than 0.5 units (after angular sorting) are merged first.
    """
    if len(points) < 3:
        return list(points)

    start = min(points, key=lambda p: (p.y, p.x))

    def dist_sq(p: Point) -> float:
        return (p.x - start.x) ** 2 + (p.y - start.y) ** 2

    def by_polar_angle(a: Point, b: Point) -> float:
        angle_a = math.atan2(a.y - start.y, a.x - start.x)
        angle_b = math.atan2(b.y - start.y, b.x - start.x)
        # Angles within ANGLE_EPSILON count as collinear, nearest first
        if abs(angle_a - angle_b) < ANGLE_EPSILON:
            return dist_sq(a) - dist_sq(b)
        return angle_a - angle_b

    ordered = sorted(points, key=cmp_to_key(by_polar_angle))

    unique = [ordered[0]]
    for p in ordered[1:]:
        prev = unique[-1]
        if abs(p.x - prev.x) > POINT_EPSILON or abs(p.y - prev.y) > POINT_EPSILON:
            unique.append(p)

    if len(unique) < 3:
        return unique

    def cross(o: Point, a: Point, b: Point) -> float:
        return (a.x - o.x) * (b.y - o.y) - (a.y - o.y) * (b.x - o.x)

    hull = [unique[0], unique[1]]
    for p in unique[2:]:
        while len(hull) > 1 and cross(hull[-2], hull[-1], p) <= 0:
            hull.pop()
        hull.append(p)
    return hull


def polygon_intersection(subject: Sequence[Point], clip: Sequence[Point]) -> List[Point]:
    """
    Sutherland-Hodgman clip of ``subject`` by the convex polygon ``clip``.

    Both polygons must share the same winding (counter-clockwise).
    """
    if len(subject) < 3 or len(clip) < 3:
        return []

    output = list(subject)
    for edge_p1, edge_p2 in polygon_edges(clip):
        if not output:
            return []

        edge_dx = edge_p2.x - edge_p1.x
        edge_dy = edge_p2.y - edge_p1.y

        def inside(p: Point) -> bool:
            return edge_dx * (p.y - edge_p1.y) - edge_dy * (p.x - edge_p1.x) >= 0

        def intersect(p1: Point, p2: Point) -> Point:
            d1x = p2.x - p1.x
            d1y = p2.y - p1.y
            cross = d1x * edge_dy - d1y * edge_dx
            if abs(cross) < PARALLEL_EPSILON:
                return p1
            t = ((edge_p1.x - p1.x) * edge_dy - (edge_p1.y - p1.y) * edge_dx) / cross
            return Point(p1.x + t * d1x, p1.y + t * d1y)

        source = output
        output = []
        for current, following in polygon_edges(source):
            current_inside = inside(current)
            following_inside = inside(following)
            if current_inside:
                output.append(following if following_inside else intersect(current, following))
            elif following_inside:
                output.append(intersect(current, following))
                output.append(following)

    return output


def split_polygon(polygon: Sequence[Point], line_p1: Point, line_p2: Point) -> Dict[str, List[Point]]:
    """
    Split a polygon by the infinite line through two points.

    Vertices on the line go to both halves.

    Returns:
        {"left": [...], "right": [...]}
    """
    if len(polygon) < 3:
        return {"left": [], "right": []}

    a = -(line_p2.y - line_p1.y)
    b = line_p2.x - line_p1.x
    c = -(a * line_p1.x + b * line_p1.y)

    def side(p: Point) -> float:
        return a * p.x + b * p.y + c

    left: List[Point] = []
    right: List[Point] = []
    for current, following in polygon_edges(polygon):
        current_side = side(current)
        following_side = side(following)

        if current_side <= 0:
            left.append(current)
        if current_side >= 0:
            right.append(current)

        if (current_side < 0 < following_side) or (following_side < 0 < current_side):
            t = current_side / (current_side - following_side)
            crossing = lerp(current, following, t)
            left.append(crossing)
            right.append(crossing)

    return {"left": left, "right": right}


def reflect_point(point: Point, line_p1: Point, line_p2: Point) -> Point:
    """Mirror a point across the line through two points."""
    dx = line_p2.x - line_p1.x
    dy = line_p2.y - line_p1.y
    len2 = dx * dx + dy * dy
    if len2 < PARALLEL_EPSILON:
        return point

    t = ((point.x - line_p1.x) * dx + (point.y - line_p1.y) * dy) / len2
    proj_x = line_p1.x + t * dx
    proj_y = line_p1.y + t * dy
    return Point(2 * proj_x - point.x, 2 * proj_y - point.y)


def reflect_polygon(polygon: Sequence[Point], line_p1: Point, line_p2: Point) -> List[Point]:
    return [reflect_point(p, line_p1, line_p2) for p in polygon]


def polygon_union_along_crease(poly1: Sequence[Point], poly2: Sequence[Point],
                               crease_p1: Point, crease_p2: Point) -> List[Point]:
    """
    Merge two polygons that meet along a crease.

    If either polygon lies entirely on the crease the other is returned,
    otherwise the convex hull of both.
    """
    dx = crease_p2.x - crease_p1.x
    dy = crease_p2.y - crease_p1.y
    len2 = dx * dx + dy * dy

    def on_crease(p: Point) -> bool:
        if len2 < PARALLEL_EPSILON:
            return False
        cross = abs((p.x - crease_p1.x) * dy - (p.y - crease_p1.y) * dx)
        return cross / math.sqrt(len2) < 1

    if all(on_crease(p) for p in poly1):
        return list(poly2)
    if all(on_crease(p) for p in poly2):
        return list(poly1)
    return convex_hull(list(poly1) + list(poly2))
