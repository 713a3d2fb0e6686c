# planet_generator/octree.py

"""
================================================================================
SPATIAL INDEX (OCTREE)
================================================================================
A bounded 3D point store with box and radius range queries. It is used to find
vegetation near a surface position so ground effects (clearings, mounds) can
be applied to the faces around each spawn point.

Data Contract:
---------------
- Inputs (on initialization, first match wins):
    - bounds: explicit (min_xyz, max_xyz) corners.
    - size: half-extent of a cube centered on the origin.
    - points: an initial point set; the bounds are inferred from it.
    - capacity: points a leaf holds before it splits into 8 octants.
    - max_depth: below this depth leaves grow instead of splitting, so
      coincident points cannot recurse forever.
- Outputs:
    - insert() -> bool; queries -> lists of SpatialPoint.
- Side Effects: None outside the tree.
- Invariants: A node holds points only while it is a leaf; once split, its
  points live in its children. Points outside the root bounds are rejected.
================================================================================
"""

from typing import Any, NamedTuple, Optional

from . import config as DEFAULTS


class SpatialPoint(NamedTuple):
    x: float
    y: float
    z: float
    data: Any = None

    @property
    def position(self) -> tuple:
        return (self.x, self.y, self.z)


def _as_position(point) -> tuple:
    if len(point) < 3:
        raise ValueError(f"Expected a 3D point, got {point!r}")
    return (float(point[0]), float(point[1]), float(point[2]))


class _OctreeNode:
    __slots__ = ('min', 'max', 'depth', 'points', 'children')

    def __init__(self, minimum: tuple, maximum: tuple, depth: int):
        self.min = minimum
        self.max = maximum
        self.depth = depth
        self.points: Optional[list] = []
        self.children: Optional[list] = None

    def contains(self, p: tuple) -> bool:
        return all(self.min[i] <= p[i] <= self.max[i] for i in range(3))

    def center(self) -> tuple:
        return tuple((self.min[i] + self.max[i]) * 0.5 for i in range(3))

    def octant(self, p: tuple) -> int:
        c = self.center()
        index = 0
        if p[0] >= c[0]:
            index |= 1
        if p[1] >= c[1]:
            index |= 2
        if p[2] >= c[2]:
            index |= 4
        return index

    def intersects_box(self, q_min: tuple, q_max: tuple) -> bool:
        return all(self.min[i] <= q_max[i] and q_min[i] <= self.max[i] for i in range(3))

    def intersects_sphere(self, center: tuple, radius: float) -> bool:
        dist_sq = 0.0
        for i in range(3):
            if center[i] < self.min[i]:
                d = center[i] - self.min[i]
                dist_sq += d * d
            elif center[i] > self.max[i]:
                d = center[i] - self.max[i]
                dist_sq += d * d
        return dist_sq <= radius * radius


class SpatialIndex:
    """Octree over 3D points with optional payloads."""

    def __init__(self, bounds=None, size: float = None, points=None,
                 capacity: int = DEFAULTS.OCTREE_CAPACITY,
                 max_depth: int = DEFAULTS.OCTREE_MAX_DEPTH):
        if capacity < 1:
            raise ValueError(f"Octree capacity must be at least 1, got {capacity}")

        initial = [_as_position(p) for p in points] if points else []

        if bounds is not None:
            minimum, maximum = _as_position(bounds[0]), _as_position(bounds[1])
        elif size is not None:
            s = float(size)
            minimum, maximum = (-s, -s, -s), (s, s, s)
        elif initial:
            minimum = tuple(min(p[i] for p in initial) for i in range(3))
            maximum = tuple(max(p[i] for p in initial) for i in range(3))
        else:
            minimum, maximum = (-1.0, -1.0, -1.0), (1.0, 1.0, 1.0)

        if any(minimum[i] > maximum[i] for i in range(3)):
            raise ValueError(f"Octree bounds are inverted: min={minimum}, max={maximum}")

        self.capacity = capacity
        self.max_depth = max_depth
        self.root = _OctreeNode(minimum, maximum, 0)
        self._count = 0

        for p in initial:
            self.insert(p)

    @property
    def bounds(self) -> tuple:
        return self.root.min, self.root.max

    def __len__(self) -> int:
        return self._count

    def insert(self, point, data: Any = None) -> bool:
        """
        Stores a point. Returns False, leaving the tree unchanged, if the
        point lies outside the root bounds.
        """
        position = _as_position(point)
        if not self.root.contains(position):
            return False

        node = self.root
        while True:
            if node.children is None:
                if len(node.points) < self.capacity or node.depth >= self.max_depth:
                    node.points.append(SpatialPoint(*position, data))
                    self._count += 1
                    return True
                self._split(node)
            node = node.children[node.octant(position)]

    def _split(self, node: _OctreeNode):
        """Bisects every axis at the node midpoint and moves its points down."""
        c = node.center()
        children = []
        for i in range(8):
            minimum = tuple(c[axis] if i & (1 << axis) else node.min[axis] for axis in range(3))
            maximum = tuple(node.max[axis] if i & (1 << axis) else c[axis] for axis in range(3))
            children.append(_OctreeNode(minimum, maximum, node.depth + 1))

        for p in node.points:
            children[node.octant(p.position)].points.append(p)

        node.children = children
        node.points = None

    def _collect(self, should_visit, accept) -> list:
        found = []
        stack = [self.root]
        while stack:
            node = stack.pop()
            if not should_visit(node):
                continue
            if node.children is None:
                found.extend(p for p in node.points if accept(p))
            else:
                stack.extend(node.children)
        return found

    def query_box_bounds(self, minimum, maximum) -> list:
        q_min, q_max = _as_position(minimum), _as_position(maximum)
        return self._collect(
            lambda node: node.intersects_box(q_min, q_max),
            lambda p: all(q_min[i] <= p.position[i] <= q_max[i] for i in range(3))
        )

    def query_box(self, center, half_size: float) -> list:
        """Points inside the axis-aligned cube of the given half-size around center."""
        c = _as_position(center)
        return self.query_box_bounds(
            tuple(c[i] - half_size for i in range(3)),
            tuple(c[i] + half_size for i in range(3))
        )

    def query_radius(self, center, radius: float) -> list:
        """Points whose Euclidean distance to center is at most radius."""
        if radius < 0:
            return []
        c = _as_position(center)
        r_sq = radius * radius

        def within(p):
            dx, dy, dz = p.x - c[0], p.y - c[1], p.z - c[2]
            return dx * dx + dy * dy + dz * dz <= r_sq

        return self._collect(lambda node: node.intersects_sphere(c, radius), within)

    def min_distance_clear(self, center, distance: float) -> bool:
        """True if no stored point is strictly closer than distance."""
        c = _as_position(center)
        d_sq = distance * distance
        for p in self.query_radius(c, distance):
            dx, dy, dz = p.x - c[0], p.y - c[1], p.z - c[2]
            if dx * dx + dy * dy + dz * dz < d_sq:
                return False
        return True

    def all(self) -> list:
        return self._collect(lambda node: True, lambda p: True)

    def node_boxes(self) -> list:
        """(min, max, depth) of every node, for debugging tree shape."""
        boxes = []
        stack = [self.root]
        while stack:
            node = stack.pop()
            boxes.append((node.min, node.max, node.depth))
            if node.children is not None:
                stack.extend(node.children)
        return boxes

    def clear(self):
        self.root = _OctreeNode(self.root.min, self.root.max, 0)
        self._count = 0
