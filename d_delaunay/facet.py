"""
Facets: the (D-1)-dimensional face of a cell opposite one of its vertices.

A facet is a view derived from a cell; the triangulation never stores facets.
"""
from .exceptions import FacetError


class Facet:
    """
    The face of `cell` that does not contain `vertex`.

    Args:
        cell (Cell): The cell the facet belongs to.
        vertex (Vertex): The vertex of `cell` opposite the facet.

    Raises:
        FacetError: If `vertex` is not one of the cell's vertices.
    """

    def __init__(self, cell, vertex):
        if not cell.contains_vertex(vertex):
            raise FacetError(f"Vertex {vertex.uuid} is not part of cell {cell.uuid}.")
        self.cell = cell
        self.vertex = vertex

    def vertices(self) -> list:
        """The cell's vertices except the excluded one, in cell order."""
        return [v for v in self.cell.vertices if v.uuid != self.vertex.uuid]

    def key(self) -> frozenset:
        """Order-independent identity of the facet: the UUIDs of its vertices."""
        return frozenset(v.uuid for v in self.vertices())

    def __eq__(self, other):
        if not isinstance(other, Facet):
            return NotImplemented
        return self.cell.uuid == other.cell.uuid and self.vertex.uuid == other.vertex.uuid

    def __hash__(self):
        return hash((self.cell.uuid, self.vertex.uuid))

    def __repr__(self):
        return f"Facet(cell={self.cell.uuid}, vertex={self.vertex.uuid})"
