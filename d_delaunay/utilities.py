"""
Small helpers shared by vertices, cells and the triangulation data structure.
"""
import uuid

import torch

from .exceptions import DegenerateInputError


def make_uuid() -> uuid.UUID:
    """Returns a fresh random (version 4) UUID."""
    return uuid.uuid4()


def find_extreme_coordinates(vertices, mode: str = "min") -> torch.Tensor:
    """
    Per-axis minimum or maximum coordinate over a collection of vertices.

    Args:
        vertices: Iterable of `Vertex` objects, or a mapping whose values are vertices.
        mode (str): "min" or "max".

    Returns:
        torch.Tensor: float64 tensor of shape (D,).

    Raises:
        DegenerateInputError: If there are no vertices.
        ValueError: If `mode` is not "min" or "max".
    """
    if hasattr(vertices, "values"):
        vertices = vertices.values()
    coords = [v.point.coords for v in vertices]
    if not coords:
        raise DegenerateInputError("Cannot find extreme coordinates of an empty vertex set.")
    points = torch.tensor(coords, dtype=torch.float64)
    if mode == "min":
        return torch.min(points, dim=0).values
    if mode == "max":
        return torch.max(points, dim=0).values
    raise ValueError(f"mode must be 'min' or 'max', got {mode!r}.")


def diagonal_matrix(values) -> torch.Tensor:
    """Square float64 matrix with `values` on the diagonal and zeros elsewhere."""
    return torch.diag(torch.as_tensor(values, dtype=torch.float64))
