"""
D-dimensional triangulation data structure with Bowyer-Watson construction.

`Tds` is a registry of vertices and maximal cells keyed by UUID. Cross references
between cells (neighbors) and from vertices to cells (incident cell) are stored
as UUIDs and always resolved through the registry.

The Delaunay triangulation is built by `bowyer_watson`, an incremental
insertion algorithm. It starts with a supercell enclosing all vertices, then
inserts each vertex in registration order. For each insertion, the "bad" cells
(those whose circumspheres strictly contain the new vertex) are removed, leaving
a cavity whose boundary facets are connected to the new vertex. Finally, cells
touching the supercell are discarded; if that leaves part of the convex hull
uncovered, the pass is repeated with a larger supercell. Neighbor and incidence
information is then recomputed. The in-circumsphere test is taken from
`geometry_core.py` and is exact by default.
"""
import json
import logging

import torch

from .cell import Cell
from .exceptions import (
    DimensionMismatchError,
    DuplicateCoordinatesError,
    IdentityCollisionError,
    InvalidTriangulationError,
)
from .geometry_core import DEFAULT_PREDICATE, affine_rank, get_orientation, orientation_exact
from .utilities import diagonal_matrix, find_extreme_coordinates
from .vertex import Vertex

logger = logging.getLogger(__name__)

SUPERCELL_MARGIN = 10.0 # Padding added to each side of the bounding box.
SUPERCELL_SCALE = 5.0 # Minimum padding as a multiple of the largest bounding-box side.
SUPERCELL_GROWTH = 10.0 # Padding factor applied when a supercell turns out too small.
SUPERCELL_ATTEMPTS = 8


class Tds:
    """
    Triangulation data structure: vertices and maximal cells identified by UUIDs.

    In 3 dimensions, for example, a 3-dimensional cell is a tetrahedron (the only
    kind of cell stored), a facet is a triangle given by a tetrahedron and its
    opposite vertex, and edges and vertices are likewise derived from cells.

    Args:
        points: Iterable of points (`Point`, tuples, lists or 1-D tensors). Each
                becomes a new vertex, registered in input order. Duplicate
                coordinates are kept here (only `add` rejects them); a warning is
                logged and `bowyer_watson` ignores the later copies.
        dimension (int, optional): Ambient dimension D. Inferred from the first
                point when omitted.

    Raises:
        DimensionMismatchError: If points of different dimensions are given.
    """

    def __init__(self, points=(), dimension: int | None = None):
        self.dimension = dimension
        self.vertices: dict = {}
        self.cells: dict = {}

        seen = set()
        duplicates = 0
        for vertex in Vertex.from_points(points):
            self._check_dimension(vertex)
            if vertex.point in seen:
                duplicates += 1
            seen.add(vertex.point)
            self._register(vertex)
        if duplicates:
            logger.warning("Tds constructed with %d duplicate point(s); they are kept but not triangulated.",
                           duplicates)

    @classmethod
    def delaunay(cls, points, dimension: int | None = None, predicate: str = DEFAULT_PREDICATE,
                 margin: float = SUPERCELL_MARGIN) -> "Tds":
        """Builds a `Tds` from `points` and triangulates it."""
        tds = cls(points, dimension=dimension)
        tds.bowyer_watson(predicate=predicate, margin=margin)
        return tds

    def _check_dimension(self, vertex: Vertex):
        if self.dimension is None:
            self.dimension = vertex.dim
        elif vertex.dim != self.dimension:
            raise DimensionMismatchError(
                f"Vertex has {vertex.dim} coordinates, triangulation is {self.dimension}-dimensional."
            )

    def _register(self, vertex: Vertex):
        if vertex.uuid in self.vertices:
            raise IdentityCollisionError(f"UUID {vertex.uuid} is already registered.")
        self.vertices[vertex.uuid] = vertex

    def add(self, vertex: Vertex):
        """
        Registers `vertex` unless a vertex with the same coordinates exists.

        Raises:
            DuplicateCoordinatesError: A registered vertex has identical coordinates.
            IdentityCollisionError: The vertex UUID is already registered.
            DimensionMismatchError: The vertex has the wrong number of coordinates.
        """
        if self.dimension is not None and vertex.dim != self.dimension:
            raise DimensionMismatchError(
                f"Vertex has {vertex.dim} coordinates, triangulation is {self.dimension}-dimensional."
            )
        if any(v.point == vertex.point for v in self.vertices.values()):
            raise DuplicateCoordinatesError(f"A vertex at {vertex.point.coords} already exists.")
        self._register(vertex)
        self._check_dimension(vertex)

    def number_of_vertices(self) -> int:
        return len(self.vertices)

    def number_of_cells(self) -> int:
        return len(self.cells)

    def dim(self) -> int:
        """min(number_of_vertices - 1, D); -1 for an empty triangulation."""
        n = self.number_of_vertices()
        if self.dimension is None:
            return n - 1
        return min(n - 1, self.dimension)

    def supercell(self, margin: float = SUPERCELL_MARGIN) -> Cell:
        """
        Creates a simplex strictly enclosing every registered vertex.

        The bounding box of the vertices is padded by `margin` on each side,
        giving corners `lo` and `hi`. The first supercell vertex is `lo`; vertex
        i+1 equals `lo` except on axis i, where it reaches lo_i + D * (hi_i - lo_i).
        Scaling the reach by D makes the corner simplex contain the whole padded
        box, so every vertex is strictly inside.

        Raises:
            DegenerateInputError: If no vertex is registered.
        """
        lo = find_extreme_coordinates(self.vertices, "min") - margin
        hi = find_extreme_coordinates(self.vertices, "max") + margin
        reach = self.dimension * (hi - lo)

        # Row i of diag(reach) + lo is the vertex displaced along axis i.
        axis_points = diagonal_matrix(reach) + lo
        points = [lo] + list(axis_points)
        return Cell(Vertex.from_points(points))

    @staticmethod
    def _cavity_boundary(bad_cells: list) -> list:
        """Facets of the bad cells that are not shared between two bad cells."""
        facet_counts = {}
        for cell in bad_cells:
            for facet in cell.facets():
                facet_counts[facet.key()] = facet_counts.get(facet.key(), 0) + 1
        return [facet for cell in bad_cells for facet in cell.facets() if facet_counts[facet.key()] == 1]

    def bowyer_watson(self, predicate: str = DEFAULT_PREDICATE, margin: float = SUPERCELL_MARGIN) -> list:
        """
        Computes the Delaunay triangulation of the registered vertices.

        The result replaces `self.cells`; neighbors and incident cells are then
        assigned. Vertices are inserted in registration order and cells are
        kept in creation order, so identical input gives an identical
        triangulation. A vertex whose coordinates repeat an earlier vertex is
        skipped.

        The supercell padding is at least `SUPERCELL_SCALE` times the largest
        side of the bounding box. A Delaunay cell whose circumsphere reaches a
        supercell vertex is never created, so after each pass the result is
        checked against the convex hull (`_covers_hull`). If part of the hull is
        missing, the padding grows by `SUPERCELL_GROWTH` and the construction
        is repeated, up to `SUPERCELL_ATTEMPTS` passes.

        Args:
            predicate (str): In-circumsphere predicate, "exact" (default) or "float".
            margin (float): Minimum supercell padding, see `supercell`.

        Returns:
            list[Cell]: The cells of the triangulation, empty if fewer than D+1
                        vertices are registered or if all vertices lie in a
                        lower-dimensional subspace.
        """
        orientation = get_orientation(predicate)

        if self.dimension is None or self.number_of_vertices() <= self.dimension \
                or affine_rank(v.point for v in self.vertices.values()) < self.dimension:
            logger.debug("bowyer_watson: %d vertices span less than %s dimensions, nothing to triangulate.",
                         self.number_of_vertices(), self.dimension)
            self.cells = {}
            self.assign_incident_cells()
            return []

        extent = find_extreme_coordinates(self.vertices, "max") - find_extreme_coordinates(self.vertices, "min")
        margin = max(margin, SUPERCELL_SCALE * extent.max().item())
        for attempt in range(SUPERCELL_ATTEMPTS):
            cells = self._insert_all(predicate, orientation, margin)
            if self._covers_hull(cells):
                break
            logger.debug("Supercell with margin %g lost hull cells (pass %d), enlarging.", margin, attempt + 1)
            margin *= SUPERCELL_GROWTH
        else:
            logger.warning("Triangulation does not cover the convex hull after %d passes (margin %g).",
                           SUPERCELL_ATTEMPTS, margin / SUPERCELL_GROWTH)

        self.cells = {c.uuid: c for c in cells}
        self.assign_neighbors()
        self.assign_incident_cells()
        logger.info("Triangulated %d vertices into %d cells (D=%d).",
                    self.number_of_vertices(), self.number_of_cells(), self.dimension)
        return list(self.cells.values())

    def _insert_all(self, predicate: str, orientation, margin: float) -> list:
        """One Bowyer-Watson pass over all vertices inside a supercell padded by `margin`."""
        supercell = self.supercell(margin)
        supercell_ids = set(supercell.vertex_uuids())
        cells = [supercell]

        inserted = set()
        for vertex in self.vertices.values():
            if vertex.point in inserted:
                logger.debug("Skipping duplicate vertex %s at %s", vertex.uuid, vertex.point.coords)
                continue
            inserted.add(vertex.point)

            bad_cells = [c for c in cells if c.circumsphere_contains(vertex, predicate)]
            if not bad_cells:
                continue

            boundary_facets = self._cavity_boundary(bad_cells)
            bad_ids = {c.uuid for c in bad_cells}
            cells = [c for c in cells if c.uuid not in bad_ids]

            for facet in boundary_facets:
                facet_vertices = facet.vertices()
                simplex = [v.point.coords for v in facet_vertices] + [vertex.point.coords]
                if orientation(simplex) == 0:
                    logger.debug("Skipping facet coplanar with vertex %s", vertex.uuid)
                    continue
                cells.append(Cell(facet_vertices + [vertex]))

            logger.debug("Inserted %s: %d bad cells, %d boundary facets, %d cells",
                         vertex.uuid, len(bad_cells), len(boundary_facets), len(cells))

        return [c for c in cells if not any(u in supercell_ids for u in c.vertex_uuids())]

    def _covers_hull(self, cells: list) -> bool:
        """
        Checks exactly that `cells` fill the convex hull of the registered vertices.

        Every vertex must be used, and every facet on the outside of the
        complex must be a supporting hyperplane: no vertex strictly on the
        opposite side from its cell. A missing hull cell always leaves such a
        facet behind.
        """
        points = list(dict.fromkeys(v.point for v in self.vertices.values()))
        if not cells or len({v.point for c in cells for v in c.vertices}) < len(points):
            return False

        facet_counts = {}
        for cell in cells:
            for facet in cell.facets():
                count, _ = facet_counts.get(facet.key(), (0, facet))
                facet_counts[facet.key()] = (count + 1, facet)

        for count, facet in facet_counts.values():
            if count > 1:
                continue
            base = [v.point.coords for v in facet.vertices()]
            inner = orientation_exact(base + [facet.vertex.point.coords])
            if any(orientation_exact(base + [p.coords]) == -inner for p in points):
                return False
        return True

    def assign_neighbors(self, cells=None):
        """
        Links cells sharing a facet.

        `neighbors[i]` of each cell becomes the UUID of the cell across the
        facet opposite `vertices[i]`, or `None` on the outer boundary. A cell
        without any neighbor keeps `neighbors = None`.

        Args:
            cells: Cells to link; defaults to all registered cells.

        Raises:
            InvalidTriangulationError: If a facet is shared by more than two cells.
        """
        cells = list(self.cells.values()) if cells is None else list(cells)

        facet_owners = {}
        for cell in cells:
            for i, facet in enumerate(cell.facets()):
                facet_owners.setdefault(facet.key(), []).append((cell, i))

        neighbors = {cell.uuid: [None] * cell.number_of_vertices() for cell in cells}
        for key, owners in facet_owners.items():
            if len(owners) > 2:
                raise InvalidTriangulationError(f"Facet {sorted(map(str, key))} is shared by {len(owners)} cells.")
            if len(owners) == 2:
                (a, i), (b, j) = owners
                neighbors[a.uuid][i] = b.uuid
                neighbors[b.uuid][j] = a.uuid

        for cell in cells:
            found = neighbors[cell.uuid]
            cell.neighbors = found if any(n is not None for n in found) else None

    def assign_incident_cells(self, vertices=None):
        """
        Records, for each vertex, the first registered cell that contains it.

        Vertices not used by any cell get `incident_cell = None`.

        Args:
            vertices: Vertices to update; defaults to all registered vertices.
        """
        vertices = list(self.vertices.values()) if vertices is None else list(vertices)
        pending = {v.uuid: v for v in vertices}
        for vertex in vertices:
            vertex.incident_cell = None
        for cell in self.cells.values():
            for v in cell.vertices:
                target = pending.pop(v.uuid, None)
                if target is not None:
                    target.incident_cell = cell.uuid
            if not pending:
                break

    def facets(self) -> list:
        """Every facet of the complex once, in cell order."""
        seen = set()
        result = []
        for cell in self.cells.values():
            for facet in cell.facets():
                key = facet.key()
                if key not in seen:
                    seen.add(key)
                    result.append(facet)
        return result

    def boundary_facets(self) -> list:
        """Facets on the outer boundary of the triangulation (no neighbor across them)."""
        result = []
        for cell in self.cells.values():
            for i, facet in enumerate(cell.facets()):
                if cell.neighbors is None or cell.neighbors[i] is None:
                    result.append(facet)
        return result

    def is_delaunay(self, predicate: str = DEFAULT_PREDICATE) -> bool:
        """True if no registered vertex is strictly inside the circumsphere of any cell."""
        for cell in self.cells.values():
            for vertex in self.vertices.values():
                if not cell.contains_vertex(vertex) and cell.circumsphere_contains(vertex, predicate):
                    return False
        return True

    def validate(self):
        """
        Checks the structural invariants of the registry.

        Raises:
            InvalidTriangulationError: If a cell is not maximal, references a
                vertex that is not registered, or if the neighbor relation is
                not symmetric.
        """
        for cell in self.cells.values():
            if cell.ambient_dim != self.dimension or not cell.is_maximal():
                raise InvalidTriangulationError(f"Cell {cell.uuid} is not a maximal {self.dimension}-simplex.")
            for v in cell.vertices:
                if self.vertices.get(v.uuid) is not v:
                    raise InvalidTriangulationError(f"Cell {cell.uuid} uses unregistered vertex {v.uuid}.")
            if cell.neighbors is None:
                continue
            if len(cell.neighbors) != cell.number_of_vertices():
                raise InvalidTriangulationError(f"Cell {cell.uuid} has a neighbor list of the wrong length.")
            for i, neighbor_id in enumerate(cell.neighbors):
                if neighbor_id is None:
                    continue
                neighbor = self.cells.get(neighbor_id)
                if neighbor is None:
                    raise InvalidTriangulationError(f"Cell {cell.uuid} has unknown neighbor {neighbor_id}.")
                shared = set(cell.vertex_uuids()) - {cell.vertices[i].uuid}
                opposite = [j for j, v in enumerate(neighbor.vertices) if v.uuid not in shared]
                if len(opposite) != 1 or neighbor.neighbors is None \
                        or neighbor.neighbors[opposite[0]] != cell.uuid:
                    raise InvalidTriangulationError(
                        f"Neighbor relation between {cell.uuid} and {neighbor_id} is not symmetric."
                    )

    def is_valid(self) -> bool:
        try:
            self.validate()
        except InvalidTriangulationError as e:
            logger.debug("Invalid triangulation: %s", e)
            return False
        return True

    def simplices(self) -> torch.Tensor:
        """
        Cells as a (M, D+1) long tensor of vertex indices in registration order.
        """
        width = (self.dimension or 0) + 1
        if not self.cells:
            return torch.empty((0, width), dtype=torch.long)
        index = {uuid: i for i, uuid in enumerate(self.vertices)}
        return torch.tensor([[index[u] for u in c.vertex_uuids()] for c in self.cells.values()],
                            dtype=torch.long)

    def to_dict(self) -> dict:
        """
        Serializable form: `vertices` and `cells` keyed by UUID string.

        A third field, `dimension`, is written as well so that a structure
        without vertices keeps its D. `from_dict` accepts data without it and
        then infers D from the first vertex.
        """
        return {
            "dimension": self.dimension,
            "vertices": {str(u): v.to_dict() for u, v in self.vertices.items()},
            "cells": {str(u): c.to_dict() for u, c in self.cells.items()},
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Tds":
        tds = cls(dimension=data.get("dimension"))
        for raw in data.get("vertices", {}).values():
            vertex = Vertex.from_dict(raw)
            tds._check_dimension(vertex)
            tds._register(vertex)
        for raw in data.get("cells", {}).values():
            cell = Cell.from_dict(raw, tds.vertices)
            tds.cells[cell.uuid] = cell
        return tds

    def to_json(self, **kwargs) -> str:
        return json.dumps(self.to_dict(), **kwargs)

    @classmethod
    def from_json(cls, text: str) -> "Tds":
        return cls.from_dict(json.loads(text))

    def __eq__(self, other):
        if not isinstance(other, Tds):
            return NotImplemented
        return self.vertices == other.vertices and self.cells == other.cells

    def __repr__(self):
        return f"Tds(dimension={self.dimension}, vertices={self.number_of_vertices()}, cells={self.number_of_cells()})"
