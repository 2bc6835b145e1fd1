"""
Immutable D-dimensional point.
"""
from dataclasses import dataclass


@dataclass(frozen=True, order=True)
class Point:
    """
    A fixed-size tuple of coordinates.

    Equality, ordering and hashing are coordinate-wise (lexicographic), so two
    points with equal coordinates are interchangeable. Accepts any sequence,
    including tensors and arrays exposing `tolist()`.
    """
    coords: tuple

    def __post_init__(self):
        coords = self.coords
        if hasattr(coords, "tolist"):
            coords = coords.tolist()
        object.__setattr__(self, "coords", tuple(float(c) for c in coords))

    @property
    def dim(self) -> int:
        return len(self.coords)

    def __iter__(self):
        return iter(self.coords)

    def __len__(self):
        return len(self.coords)

    def to_list(self) -> list:
        return list(self.coords)
