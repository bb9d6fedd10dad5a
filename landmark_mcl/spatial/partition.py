"""
Uniform grid space partition for nearest landmark lookup.

The world rectangle is cut into square cells of equal size. Each cell
holds references to the point entities that fall inside it, so a
nearest-neighbor query only has to scan the cells around the query
point instead of the whole map.
"""

import logging
import math
from typing import Dict, Generic, Iterable, List, Optional, Protocol, Tuple, TypeVar

from ..exceptions import InvalidGeometry

logger = logging.getLogger(__name__)


class PointEntity(Protocol):
    """Anything with a read-only id and world position."""

    @property
    def id(self) -> int: ...

    @property
    def x(self) -> float: ...

    @property
    def y(self) -> float: ...


T = TypeVar("T", bound=PointEntity)


class Partition2D(Generic[T]):
    """
    Grid index answering approximate nearest-point queries.

    The search expands ring by ring around the query cell: level 1 is the
    query cell itself, level 2 adds the 8 surrounding cells, level 3 the
    next 16, and so on up to ``search_levels``. It stops at the end of
    the first level that contains any entity, so the result is the
    nearest entity among the scanned cells, not necessarily the globally
    nearest one. An entity just outside the ring can be closer than the
    one returned (for example a point across the corner of a cell).
    Choose ``cell_size`` small relative to the landmark spacing when
    exact answers matter.

    Parameters
    ----------
    bounds : tuple
        World rectangle ``(x0, y0, x1, y1)`` with ``x0 < x1`` and ``y0 < y1``
    cell_size : float
        Width and height of a cell, positive
    max_dist : float
        Maximum search distance; ``search_levels = round(max_dist / cell_size)``

    Attributes
    ----------
    dim_x, dim_y : int
        Number of cells along each axis
    search_levels : int
        Number of ring levels a query may scan

    Examples
    --------
    >>> index = Partition2D((0, 0, 100, 100), cell_size=5, max_dist=50)
    >>> index.insert_all(landmarks)
    >>> nearest, distance, searched = index.find_nearest(12.0, 40.5)
    """

    def __init__(self, bounds, cell_size, max_dist):
        x0, y0, x1, y1 = (float(v) for v in bounds)
        if not (x0 < x1 and y0 < y1):
            raise InvalidGeometry(
                f"degenerate bounding rectangle ({x0}, {y0}, {x1}, {y1})"
            )
        if not cell_size > 0:
            raise InvalidGeometry(f"cell size must be positive, got {cell_size}")
        if not max_dist >= 0:
            raise InvalidGeometry(f"max search distance must be non-negative, got {max_dist}")

        self.x0, self.y0, self.x1, self.y1 = x0, y0, x1, y1
        self.cell_size = float(cell_size)
        self.max_dist = float(max_dist)

        self.dim_x = int(math.ceil((x1 - x0) / self.cell_size))
        self.dim_y = int(math.ceil((y1 - y0) / self.cell_size))
        # Round half up
        self.search_levels = int(math.floor(self.max_dist / self.cell_size + 0.5))

        # Sparse storage: a missing key is a cell that never received an entity
        self._cells: Dict[Tuple[int, int], List[T]] = {}
        self._count = 0

        logger.debug("Partition2D %dx%d cells of %.3f, %d search levels",
                     self.dim_x, self.dim_y, self.cell_size, self.search_levels)

    @property
    def bounds(self):
        return (self.x0, self.y0, self.x1, self.y1)

    def __len__(self):
        return self._count

    def contains(self, x, y):
        """True if (x, y) lies inside the world rectangle, edges included."""
        return self.x0 <= x <= self.x1 and self.y0 <= y <= self.y1

    def cell_of(self, x, y):
        """Cell index ``(cx, cy)`` of a point; may lie outside the grid."""
        return (int(math.floor((x - self.x0) / self.cell_size)),
                int(math.floor((y - self.y0) / self.cell_size)))

    def cell(self, cx, cy) -> Optional[List[T]]:
        """Entities of a cell, or None if nothing was ever stored there."""
        return self._cells.get((cx, cy))

    def _home_cell(self, x, y):
        """Cell a point inside the world is stored in."""
        cx, cy = self.cell_of(x, y)
        # Points on the upper/right edge belong to the last cell
        return min(cx, self.dim_x - 1), min(cy, self.dim_y - 1)

    def insert(self, entity: T):
        """
        Add a reference to a point entity.

        Raises
        ------
        InvalidGeometry
            If the entity lies outside the world rectangle
        """
        if not self.contains(entity.x, entity.y):
            raise InvalidGeometry(
                f"entity {entity.id} at ({entity.x}, {entity.y}) is outside "
                f"the world {self.bounds}"
            )
        self._cells.setdefault(self._home_cell(entity.x, entity.y), []).append(entity)
        self._count += 1

    def insert_all(self, entities: Iterable[T]):
        """
        Add a collection of entities in order.

        All entities are checked before any is stored, so a bad entity
        leaves the index unchanged.
        """
        entities = list(entities)
        for entity in entities:
            if not self.contains(entity.x, entity.y):
                raise InvalidGeometry(
                    f"entity {entity.id} at ({entity.x}, {entity.y}) is outside "
                    f"the world {self.bounds}"
                )
        for entity in entities:
            self.insert(entity)

    def clear(self):
        """Remove every entity from the index; the geometry is kept."""
        self._cells.clear()
        self._count = 0

    def _ring(self, cx, cy, radius):
        """Yield in-grid cells at Chebyshev distance ``radius`` from (cx, cy)."""
        i0 = max(cx - radius, 0)
        i1 = min(cx + radius, self.dim_x - 1)
        j0 = max(cy - radius, 0)
        j1 = min(cy + radius, self.dim_y - 1)

        for j in range(j0, j1 + 1):
            if abs(j - cy) == radius:
                # Top or bottom edge of the ring
                for i in range(i0, i1 + 1):
                    yield i, j
            else:
                for i in (cx - radius, cx + radius):
                    if i0 <= i <= i1:
                        yield i, j

    def find_nearest(self, x, y) -> Tuple[Optional[T], float, int]:
        """
        Find the nearest entity to (x, y) within the search levels.

        Parameters
        ----------
        x, y : float
            Query position in world coordinates; may be outside the world

        Returns
        -------
        nearest : entity or None
            Closest entity in the first ring level that had any
        distance : float
            Euclidean distance to it, or -1.0 if nothing was found
        searched : int
            Number of entities examined
        """
        if self.contains(x, y):
            cx, cy = self._home_cell(x, y)
        else:
            cx, cy = self.cell_of(x, y)
        nearest = None
        min_d2 = math.inf
        searched = 0

        for radius in range(self.search_levels):
            for cell_key in self._ring(cx, cy, radius):
                objects = self._cells.get(cell_key)
                if objects is None:
                    continue
                for obj in objects:
                    searched += 1
                    dx = x - obj.x
                    dy = y - obj.y
                    d2 = dx * dx + dy * dy
                    if d2 < min_d2:
                        min_d2 = d2
                        nearest = obj
            if nearest is not None:
                break

        if nearest is None:
            return None, -1.0, searched
        return nearest, math.sqrt(min_d2), searched
