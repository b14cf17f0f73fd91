"""Closed-form test functions for exercising solvers.

The Rosenbrock functions use the chained n-dimensional form
``sum_i (a - x_i)^2 + b (x_{i+1} - x_i^2)^2`` whose minimum is at
``x = (a, a^2, ...)``; for ``a = 1`` that is the all-ones vector.
"""

from __future__ import annotations

import numpy as np

from .operator import Operator


def rosenbrock(x: np.ndarray, a: float = 1.0, b: float = 100.0) -> float:
    x = np.asarray(x, dtype=float)
    return float(np.sum((a - x[:-1]) ** 2 + b * (x[1:] - x[:-1] ** 2) ** 2))


def rosenbrock_derivative(x: np.ndarray, a: float = 1.0, b: float = 100.0) -> np.ndarray:
    x = np.asarray(x, dtype=float)
    grad = np.zeros_like(x)
    inner = x[1:] - x[:-1] ** 2
    grad[:-1] += -2.0 * (a - x[:-1]) - 4.0 * b * x[:-1] * inner
    grad[1:] += 2.0 * b * inner
    return grad


def rosenbrock_hessian(x: np.ndarray, a: float = 1.0, b: float = 100.0) -> np.ndarray:
    x = np.asarray(x, dtype=float)
    n = x.size
    hess = np.zeros((n, n))
    diag = np.zeros(n)
    diag[:-1] += 2.0 + 12.0 * b * x[:-1] ** 2 - 4.0 * b * x[1:]
    diag[1:] += 2.0 * b
    hess[np.arange(n), np.arange(n)] = diag
    off = -4.0 * b * x[:-1]
    hess[np.arange(n - 1), np.arange(1, n)] = off
    hess[np.arange(1, n), np.arange(n - 1)] = off
    return hess


def sphere(x: np.ndarray) -> float:
    return float(np.sum(np.asarray(x, dtype=float) ** 2))


def sphere_derivative(x: np.ndarray) -> np.ndarray:
    return 2.0 * np.asarray(x, dtype=float)


class Rosenbrock(Operator):
    """Rosenbrock function as an operator with analytic derivatives."""

    def __init__(self, a: float = 1.0, b: float = 100.0) -> None:
        self.a = a
        self.b = b

    def apply(self, param: np.ndarray) -> float:
        return rosenbrock(param, self.a, self.b)

    def gradient(self, param: np.ndarray) -> np.ndarray:
        return rosenbrock_derivative(param, self.a, self.b)

    def hessian(self, param: np.ndarray) -> np.ndarray:
        return rosenbrock_hessian(param, self.a, self.b)


__all__ = [
    "Rosenbrock",
    "rosenbrock",
    "rosenbrock_derivative",
    "rosenbrock_hessian",
    "sphere",
    "sphere_derivative",
]
