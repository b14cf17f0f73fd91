"""Trust-region example: dogleg steps on an ill-conditioned quadratic.

The initial radius is smaller than the Newton step, so the first iterations
follow the dogleg path to the region boundary before the radius has grown
enough for a full Newton step.
"""

from __future__ import annotations

import numpy as np

from optloop import Dogleg, Executor, Problem, TrustRegion


def main() -> None:
    a = np.diag([1.0, 10.0])
    problem = Problem(
        fun=lambda x: float(0.5 * x @ a @ x),
        grad=lambda x: a @ x,
        hess=lambda x: a,
    )
    solver = TrustRegion(Dogleg(), radius=3.0, max_radius=100.0)
    res = Executor(problem, solver, np.array([10.0, 1.0]), max_iters=50).run()

    print(res)
    print(f"Final radius: {solver.radius}")


if __name__ == "__main__":
    main()
