"""
Computes circumcenters and circumradii of D-dimensional simplices.

The circumcenter is the center of the unique hypersphere passing through all
D+1 vertices of a non-degenerate D-simplex. It is found by solving the linear
system formed by the perpendicular bisector hyperplanes of the edges (x_0, x_i).

Degenerate simplices are detected with the orientation predicate from
`geometry_core.py` (float64 with `EPSILON`), in which case `None` is returned.
"""
import torch

from .geometry_core import EPSILON, orientation_float


def compute_simplex_circumcenter(simplex, tol: float = EPSILON) -> torch.Tensor | None:
    """
    Computes the circumcenter of a D-simplex.

    For every i in 1..D the circumcenter c satisfies
    2 (x_i - x_0) . c = |x_i|^2 - |x_0|^2, a DxD linear system solved in float64.

    Args:
        simplex: Sequence of D+1 points with D coordinates each (tuples, lists,
                 `Point` objects or tensors).
        tol (float, optional): Flatness tolerance passed to the orientation test.
                               Defaults to `EPSILON`.

    Returns:
        torch.Tensor | None: float64 tensor of shape (D,) with the circumcenter, or
                             `None` if the simplex is flat within `tol`.
    """
    if orientation_float(simplex, tol) == 0:
        return None
    rows = [p.coords if hasattr(p, "coords") else p for p in simplex]
    pts = torch.stack([torch.as_tensor(r, dtype=torch.float64) for r in rows])
    a_matrix = 2.0 * (pts[1:] - pts[0])
    sq_norms = torch.sum(pts**2, dim=1)
    b_vector = (sq_norms[1:] - sq_norms[0]).unsqueeze(1)
    solution = torch.linalg.solve(a_matrix, b_vector)
    return solution.squeeze(1)


def compute_simplex_circumradius(simplex, tol: float = EPSILON) -> float | None:
    """Distance from the circumcenter to the first vertex, or `None` for a flat simplex."""
    center = compute_simplex_circumcenter(simplex, tol)
    if center is None:
        return None
    first = simplex[0].coords if hasattr(simplex[0], "coords") else simplex[0]
    return torch.linalg.norm(center - torch.as_tensor(first, dtype=torch.float64)).item()
