"""
Cells: simplices of 1..D+1 vertices, the building blocks of a triangulation.

A cell with D+1 vertices is maximal and has a well-defined circumsphere. The
triangulation data structure only registers maximal cells; lower dimensional
faces are derived from them (see `facet.py`).
"""
from dataclasses import dataclass, field
from uuid import UUID

from .circumcenter_calculations import compute_simplex_circumcenter, compute_simplex_circumradius
from .exceptions import (
    DegenerateInputError,
    DimensionMismatchError,
    InvalidTriangulationError,
    TooManyVerticesError,
    UndefinedCircumsphereError,
)
from .facet import Facet
from .geometry_core import DEFAULT_PREDICATE, get_predicate
from .utilities import make_uuid
from .vertex import Vertex


@dataclass
class Cell:
    """
    A simplex spanned by `vertices`.

    Attributes:
        vertices (list[Vertex]): 1..D+1 vertices, all of dimension D.
        data: Optional user payload.
        uuid (UUID): Identity token.
        neighbors (list[UUID | None] | None): `neighbors[i]` is the cell across the
            facet opposite `vertices[i]` (`None` on the outer boundary). The whole
            list is `None` until neighbors are assigned, and stays `None` for a
            cell with no neighbor at all.

    Raises:
        DegenerateInputError: If `vertices` is empty.
        DimensionMismatchError: If vertices of different dimensions are mixed.
        TooManyVerticesError: If there are more than D+1 vertices.
    """
    vertices: list
    data: object = None
    uuid: UUID = field(default_factory=make_uuid)
    neighbors: list | None = None

    def __post_init__(self):
        self.vertices = list(self.vertices)
        if not self.vertices:
            raise DegenerateInputError("A cell needs at least one vertex.")
        dim = self.vertices[0].dim
        if any(v.dim != dim for v in self.vertices):
            raise DimensionMismatchError("All vertices of a cell must have the same dimension.")
        if len(self.vertices) > dim + 1:
            raise TooManyVerticesError(
                f"A cell in {dim} dimensions holds at most {dim + 1} vertices, got {len(self.vertices)}."
            )

    @property
    def ambient_dim(self) -> int:
        """Dimension D of the space the vertices live in."""
        return self.vertices[0].dim

    def number_of_vertices(self) -> int:
        return len(self.vertices)

    def dim(self) -> int:
        """Dimension of the simplex: number of vertices minus one."""
        return len(self.vertices) - 1

    def is_maximal(self) -> bool:
        return len(self.vertices) == self.ambient_dim + 1

    def vertex_uuids(self) -> list:
        return [v.uuid for v in self.vertices]

    def contains_vertex(self, vertex) -> bool:
        return any(v.uuid == vertex.uuid for v in self.vertices)

    def contains_vertex_of(self, other: "Cell") -> bool:
        """True if this cell shares at least one vertex with `other`."""
        ids = set(self.vertex_uuids())
        return any(v.uuid in ids for v in other.vertices)

    def facets(self) -> list:
        """One facet per vertex, the i-th facet being opposite `vertices[i]`."""
        return [Facet(self, v) for v in self.vertices]

    def _points(self) -> list:
        return [v.point.coords for v in self.vertices]

    def _require_maximal(self):
        if not self.is_maximal():
            raise UndefinedCircumsphereError(
                f"Circumsphere needs {self.ambient_dim + 1} vertices, cell {self.uuid} has {len(self.vertices)}."
            )

    def circumsphere_contains(self, vertex, predicate: str = DEFAULT_PREDICATE) -> bool:
        """
        Checks whether `vertex` lies strictly inside this cell's circumsphere.

        Points on the sphere are not contained, so a vertex of the cell is never
        inside its own circumsphere.

        Args:
            vertex (Vertex | Point): The candidate.
            predicate (str): "exact" (rational arithmetic, default) or "float"
                             (float64 with `EPSILON` tolerance).

        Raises:
            UndefinedCircumsphereError: If the cell is not maximal.
        """
        self._require_maximal()
        point = vertex.point if isinstance(vertex, Vertex) else vertex
        return get_predicate(predicate)(point, self._points())

    def circumcenter(self):
        """Circumcenter as a float64 tensor of shape (D,)."""
        self._require_maximal()
        center = compute_simplex_circumcenter(self._points())
        if center is None:
            raise UndefinedCircumsphereError(f"Cell {self.uuid} is flat; it has no circumsphere.")
        return center

    def circumradius(self) -> float:
        self._require_maximal()
        radius = compute_simplex_circumradius(self._points())
        if radius is None:
            raise UndefinedCircumsphereError(f"Cell {self.uuid} is flat; it has no circumsphere.")
        return radius

    def to_dict(self) -> dict:
        return {
            "vertices": [str(u) for u in self.vertex_uuids()],
            "uuid": str(self.uuid),
            "neighbors": None if self.neighbors is None
            else [None if n is None else str(n) for n in self.neighbors],
            "data": self.data,
        }

    @classmethod
    def from_dict(cls, data: dict, vertices: dict) -> "Cell":
        """
        Rebuilds a cell, resolving its vertex UUIDs against `vertices` (UUID -> Vertex).
        """
        try:
            cell_vertices = [vertices[UUID(u)] for u in data["vertices"]]
        except KeyError as e:
            raise InvalidTriangulationError(f"Cell {data.get('uuid')} references unknown vertex {e}.") from e
        neighbors = data.get("neighbors")
        if neighbors is not None:
            neighbors = [None if n is None else UUID(n) for n in neighbors]
        return cls(cell_vertices, data=data.get("data"), uuid=UUID(data["uuid"]), neighbors=neighbors)
