"""Landweber example: least-squares solution of a small linear system.

Minimizes ``||A x - y||^2`` for ``A = [[4, 1], [1, 3]]`` and ``y = [1, 2]``
with a fixed step length, and compares the result with the solution of the
normal equations.
"""

from __future__ import annotations

import numpy as np

from optloop import Executor, Landweber, Operator


class LeastSquares(Operator):
    def __init__(self, a: np.ndarray, y: np.ndarray) -> None:
        self.a = a
        self.y = y

    def apply(self, param: np.ndarray) -> float:
        residual = self.a @ param - self.y
        return float(residual @ residual)

    def gradient(self, param: np.ndarray) -> np.ndarray:
        return 2.0 * self.a.T @ (self.a @ param - self.y)


def main() -> None:
    a = np.array([[4.0, 1.0], [1.0, 3.0]])
    y = np.array([1.0, 2.0])

    res = Executor(
        LeastSquares(a, y), Landweber(0.01), np.zeros(2), max_iters=1000
    ).run()

    expected = np.linalg.solve(a.T @ a, a.T @ y)
    print(res)
    print(f"Landweber solution: {res.state.param}")
    print(f"Normal equations:   {expected}")


if __name__ == "__main__":
    main()
