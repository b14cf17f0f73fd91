"""Finite-difference helpers and small linear algebra checks.

Operators never fall back to these on their own; wire them in explicitly,
e.g. through :func:`finite_difference_problem`.
"""

from __future__ import annotations

from typing import Callable

import numpy as np

from .errors import InvalidParameterError
from .operator import Problem

Array = np.ndarray
Objective = Callable[[Array], float]


def approx_grad(fun: Objective, x: Array, eps: float = 1e-6) -> Array:
    """Compute a central-difference gradient approximation.

    Parameters
    ----------
    fun:
        Objective function returning a scalar given x.
    x:
        Point where the gradient is approximated.
    eps:
        Perturbation size for finite differences.
    """
    if eps <= 0:
        raise InvalidParameterError("eps must be positive")
    x = np.asarray(x, dtype=float).copy()
    grad = np.zeros_like(x, dtype=float)
    for i in range(x.size):
        ei = np.zeros_like(x)
        ei[i] = eps
        grad[i] = (fun(x + ei) - fun(x - ei)) / (2.0 * eps)
    return grad


def approx_hessian(fun: Objective, x: Array, eps: float = 1e-4) -> Array:
    """Approximate the Hessian using second-order central differences."""
    if eps <= 0:
        raise InvalidParameterError("eps must be positive")
    x = np.asarray(x, dtype=float)
    n = x.size
    hess = np.zeros((n, n), dtype=float)
    fx = fun(x)
    for i in range(n):
        ei = np.zeros_like(x)
        ei[i] = eps
        hess[i, i] = (fun(x + ei) - 2 * fx + fun(x - ei)) / (eps**2)
        for j in range(i + 1, n):
            ej = np.zeros_like(x)
            ej[j] = eps
            value = (
                fun(x + ei + ej) - fun(x + ei - ej) - fun(x - ei + ej) + fun(x - ei - ej)
            ) / (4 * eps**2)
            hess[i, j] = value
            hess[j, i] = value
    return hess


def finite_difference_problem(
    fun: Objective, grad_eps: float = 1e-6, hess_eps: float = 1e-4
) -> Problem:
    """Build a :class:`Problem` whose derivatives are finite-difference approximations.

    Each gradient costs ``2 n`` and each Hessian ``2 n^2 + 1`` calls of
    ``fun``; those calls are not part of the executor's cost count.
    """
    return Problem(
        fun=fun,
        grad=lambda x: approx_grad(fun, x, grad_eps),
        hess=lambda x: approx_hessian(fun, x, hess_eps),
    )


def is_pos_def(mat: Array, tol: float = 1e-12) -> bool:
    """Check if a matrix is positive definite via eigenvalues."""
    mat = np.asarray(mat, dtype=float)
    sym = 0.5 * (mat + mat.T)
    return bool(np.all(np.linalg.eigvalsh(sym) > tol))


__all__ = ["approx_grad", "approx_hessian", "finite_difference_problem", "is_pos_def"]
