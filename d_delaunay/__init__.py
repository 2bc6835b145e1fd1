# d_delaunay package
# D-dimensional Delaunay triangulations built incrementally (Bowyer-Watson).

from .cell import Cell
from .exceptions import (
    DegenerateInputError,
    DelaunayError,
    DimensionMismatchError,
    DuplicateCoordinatesError,
    FacetError,
    IdentityCollisionError,
    InvalidTriangulationError,
    TooManyVerticesError,
    UndefinedCircumsphereError,
)
from .facet import Facet
from .geometry_core import EPSILON
from .point import Point
from .triangulation_data_structure import SUPERCELL_MARGIN, Tds
from .vertex import Vertex

__version__ = "0.1.1"
