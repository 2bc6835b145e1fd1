"""
Geometric predicates for D-dimensional Delaunay triangulation.

This module provides:
- A global EPSILON constant for the floating-point predicates.
- Determinant evaluation, exact (on `fractions.Fraction`) and in float64 with PyTorch.
- The orientation predicate of a D-simplex and the exact affine rank of a point set.
- The in-circumsphere predicate, in an exact and a floating-point flavour, behind
  a small registry (`get_predicate`) so the rest of the package never touches a
  determinant directly.

All predicates take plain coordinate sequences (tuples, lists or tensors of
length D) so they can be used without building `Point` or `Cell` objects.
"""
from fractions import Fraction

import torch

EPSILON = 1e-7 # Tolerance for the float64 predicates.
DEFAULT_PREDICATE = "exact"


def _as_coords(point) -> tuple:
    if hasattr(point, "coords"):
        point = point.coords
    if hasattr(point, "tolist"):
        point = point.tolist()
    return tuple(point)


def _check_simplex(simplex) -> list:
    """Converts a D-simplex to a list of coordinate tuples and checks its shape."""
    coords = [_as_coords(p) for p in simplex]
    if not coords:
        raise ValueError("A simplex needs at least one vertex.")
    dim = len(coords[0])
    if any(len(c) != dim for c in coords):
        raise ValueError("All simplex vertices must have the same dimension.")
    if len(coords) != dim + 1:
        raise ValueError(f"A {dim}-dimensional simplex needs {dim + 1} vertices, got {len(coords)}.")
    return coords


def det_exact(matrix) -> Fraction:
    """
    Determinant of a square matrix evaluated exactly.

    Entries are converted with `Fraction`, which represents every float
    without rounding, so the sign of the result is always correct. Uses
    Gaussian elimination with a row swap whenever the pivot is zero.

    Args:
        matrix: Square matrix as a sequence of rows of numbers.

    Returns:
        Fraction: The exact determinant.
    """
    a = [[Fraction(x) for x in row] for row in matrix]
    n = len(a)
    if any(len(row) != n for row in a):
        raise ValueError("Determinant requires a square matrix.")
    det = Fraction(1)
    for i in range(n):
        piv = next((r for r in range(i, n) if a[r][i] != 0), None)
        if piv is None:
            return Fraction(0)
        if piv != i:
            a[i], a[piv] = a[piv], a[i]
            det = -det
        pivot = a[i][i]
        det *= pivot
        for r in range(i + 1, n):
            factor = a[r][i] / pivot
            if factor != 0:
                for c in range(i, n):
                    a[r][c] -= factor * a[i][c]
    return det


def det_float(matrix) -> float:
    """Determinant of a square matrix in float64 using `torch.det`."""
    mat = torch.tensor(matrix, dtype=torch.float64)
    if mat.ndim != 2 or mat.shape[0] != mat.shape[1]:
        raise ValueError("Determinant requires a square matrix.")
    if mat.shape[0] == 0:
        return 1.0
    return torch.det(mat).item()


def _sign(value) -> int:
    return (value > 0) - (value < 0)


def orientation_exact(simplex) -> int:
    """
    Exact orientation of a D-simplex given by D+1 points in D dimensions.

    Returns the sign of det([p1 - p0; p2 - p0; ...; pD - p0]):
    1 for positive orientation, -1 for negative, 0 for a degenerate (flat) simplex.
    """
    coords = _check_simplex(simplex)
    base = [Fraction(x) for x in coords[0]]
    rows = [[Fraction(x) - b for x, b in zip(c, base)] for c in coords[1:]]
    return _sign(det_exact(rows))


def orientation_float(simplex, tol: float = EPSILON) -> int:
    """
    Float64 orientation of a D-simplex.

    Edge vectors are divided by their largest absolute coordinate before the
    determinant is taken, so `tol` is relative to the size of the simplex:
    determinants of the normalised edges within `tol` of zero count as flat.
    """
    coords = _check_simplex(simplex)
    pts = torch.tensor(coords, dtype=torch.float64)
    edges = pts[1:] - pts[0]
    if edges.numel():
        scale = edges.abs().max()
        if scale == 0:
            return 0
        edges = edges / scale
    det_val = det_float(edges.tolist())
    if abs(det_val) < tol:
        return 0
    return 1 if det_val > 0 else -1


def affine_rank(points) -> int:
    """
    Exact dimension of the affine hull of `points`; -1 for no points.

    D+1 points in general position give D, collinear points give 1, and so on.
    """
    coords = [_as_coords(p) for p in points]
    if not coords:
        return -1
    base = [Fraction(x) for x in coords[0]]
    rows = [[Fraction(x) - b for x, b in zip(c, base)] for c in coords[1:]]
    rank = 0
    for col in range(len(base)):
        piv = next((r for r in range(rank, len(rows)) if rows[r][col] != 0), None)
        if piv is None:
            continue
        rows[rank], rows[piv] = rows[piv], rows[rank]
        pivot = rows[rank][col]
        for r in range(rank + 1, len(rows)):
            factor = rows[r][col] / pivot
            if factor != 0:
                rows[r] = [a - factor * b for a, b in zip(rows[r], rows[rank])]
        rank += 1
    return rank


def _lifted_rows(p_check, coords):
    # Rows [x_i - p, |x_i - p|^2] with the candidate translated to the origin.
    p = [Fraction(x) for x in p_check]
    rows = []
    for c in coords:
        diff = [Fraction(x) - y for x, y in zip(c, p)]
        rows.append(diff + [sum(d * d for d in diff)])
    return rows


def in_circumsphere_exact(p_check, simplex) -> bool:
    """
    Checks exactly whether `p_check` lies strictly inside the circumsphere of `simplex`.

    The test evaluates the (D+1)x(D+1) determinant whose rows are the simplex
    vertices translated by `-p_check` and lifted by their squared norm. Its sign,
    corrected by the simplex orientation and by (-1)^D, is positive exactly when
    the point is strictly inside.

    Args:
        p_check: Candidate point (D coordinates).
        simplex: Sequence of D+1 points (D coordinates each).

    Returns:
        bool: True if strictly inside. False if on the sphere, outside, or if the
              simplex is flat (its circumsphere is undefined).
    """
    coords = _check_simplex(simplex)
    p_check = _as_coords(p_check)
    if len(p_check) != len(coords[0]):
        raise ValueError("Candidate point and simplex must have the same dimension.")
    orient = orientation_exact(coords)
    if orient == 0:
        return False
    lifted = det_exact(_lifted_rows(p_check, coords))
    parity = -1 if len(p_check) % 2 else 1
    return parity * orient * _sign(lifted) > 0


def in_circumsphere_float(p_check, simplex, tol: float = EPSILON) -> bool:
    """
    Float64 version of `in_circumsphere_exact`.

    The lifted determinant grows with the coordinate scale to the power D+2, so
    the translated vertices are first divided by their largest absolute
    coordinate. `tol` therefore applies to a configuration of unit size
    whatever the input scale. Determinants within `tol` of zero are treated
    as "on the sphere", hence not contained. Faster than the exact predicate
    but can misclassify nearly cospherical configurations.
    """
    coords = _check_simplex(simplex)
    p_check = _as_coords(p_check)
    if len(p_check) != len(coords[0]):
        raise ValueError("Candidate point and simplex must have the same dimension.")
    orient = orientation_float(coords, tol)
    if orient == 0:
        return False
    diffs = torch.tensor(coords, dtype=torch.float64) - torch.tensor(p_check, dtype=torch.float64)
    diffs = diffs / diffs.abs().max()
    rows = torch.cat([diffs, (diffs * diffs).sum(dim=1, keepdim=True)], dim=1)
    lifted = det_float(rows.tolist())
    parity = -1 if len(p_check) % 2 else 1
    return parity * orient * lifted > tol


PREDICATES = {
    "exact": in_circumsphere_exact,
    "float": in_circumsphere_float,
}

ORIENTATIONS = {
    "exact": orientation_exact,
    "float": orientation_float,
}


def get_predicate(name: str = DEFAULT_PREDICATE):
    """Returns the in-circumsphere callable registered under `name` ("exact" or "float")."""
    try:
        return PREDICATES[name]
    except KeyError:
        raise ValueError(f"Unknown predicate {name!r}; expected one of {sorted(PREDICATES)}.") from None


def get_orientation(name: str = DEFAULT_PREDICATE):
    """Returns the orientation callable matching the predicate `name`."""
    try:
        return ORIENTATIONS[name]
    except KeyError:
        raise ValueError(f"Unknown predicate {name!r}; expected one of {sorted(ORIENTATIONS)}.") from None
