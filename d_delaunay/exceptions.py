"""
Error types raised by the triangulation data structure.

Errors caused by bad input also derive from `ValueError`, matching the
`raise ValueError(...)` convention used for input validation elsewhere in the
package. `IdentityCollisionError` signals a broken UUID generator rather than
bad input and derives from `RuntimeError` instead.
"""


class DelaunayError(Exception):
    """Base class for all d_delaunay errors."""


class TooManyVerticesError(DelaunayError, ValueError):
    """A cell was given more than D+1 vertices."""


class UndefinedCircumsphereError(DelaunayError, ValueError):
    """Circumsphere requested for a cell that is not a maximal, non-degenerate simplex."""


class DuplicateCoordinatesError(DelaunayError, ValueError):
    """A vertex with identical coordinates is already registered."""


class DegenerateInputError(DelaunayError, ValueError):
    """Not enough vertices for the requested computation."""


class DimensionMismatchError(DelaunayError, ValueError):
    """Points or vertices of different dimensions were mixed."""


class InvalidTriangulationError(DelaunayError):
    """The registry does not describe a consistent simplicial complex."""


class IdentityCollisionError(DelaunayError, RuntimeError):
    """A UUID was issued twice."""


class FacetError(DelaunayError, ValueError):
    """The vertex excluded from a facet does not belong to the cell."""
