"""
Vertices: a `Point` with a stable identity and an optional payload.
"""
from dataclasses import dataclass, field
from uuid import UUID

from .point import Point
from .utilities import make_uuid


@dataclass
class Vertex:
    """
    A point registered in a triangulation.

    Attributes:
        point (Point): Coordinates; never changed after construction.
        data: Optional user payload. The owner may reassign it.
        uuid (UUID): Identity token, generated once and never reused.
        incident_cell (UUID | None): Some cell containing this vertex, filled in
            by `Tds.assign_incident_cells`.
    """
    point: Point
    data: object = None
    uuid: UUID = field(default_factory=make_uuid)
    incident_cell: UUID | None = None

    def __post_init__(self):
        if not isinstance(self.point, Point):
            self.point = Point(self.point)

    @property
    def dim(self) -> int:
        return self.point.dim

    @classmethod
    def from_points(cls, points) -> list["Vertex"]:
        """One new vertex per point, in input order."""
        return [cls(p) for p in points]

    @staticmethod
    def into_dict(vertices) -> dict:
        """Maps each vertex UUID to its vertex, preserving input order."""
        return {v.uuid: v for v in vertices}

    def to_dict(self) -> dict:
        return {
            "point": self.point.to_list(),
            "uuid": str(self.uuid),
            "incident_cell": None if self.incident_cell is None else str(self.incident_cell),
            "data": self.data,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Vertex":
        incident = data.get("incident_cell")
        return cls(
            point=Point(data["point"]),
            data=data.get("data"),
            uuid=UUID(data["uuid"]),
            incident_cell=None if incident is None else UUID(incident),
        )
