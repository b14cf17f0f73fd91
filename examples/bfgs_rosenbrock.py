"""BFGS example: minimizing the Rosenbrock function.

Runs BFGS with a strong Wolfe line search from the classic starting point
``[-1.2, 1.0]``, logging every iteration and writing the parameter vectors
to a temporary directory (every third iteration, plus each new best).
"""

from __future__ import annotations

import logging
import tempfile

import numpy as np

from optloop import (
    BFGS,
    Executor,
    LoggingObserver,
    ObserverMode,
    StrongWolfeLineSearch,
    WriteToFile,
)
from optloop.logging import configure_logging
from optloop.testfunctions import Rosenbrock


def main() -> None:
    configure_logging(level=logging.INFO)
    init_param = np.array([-1.2, 1.0])
    solver = BFGS(np.eye(init_param.size), StrongWolfeLineSearch())

    with tempfile.TemporaryDirectory() as outdir:
        res = (
            Executor(Rosenbrock(a=1.0, b=100.0), solver, init_param, max_iters=100)
            .add_observer(LoggingObserver("bfgs"), ObserverMode.ALWAYS)
            .add_observer(WriteToFile(outdir, "param"), ObserverMode.every(3))
            .add_observer(WriteToFile(outdir, "best"), ObserverMode.NEW_BEST)
            .run()
        )

    print(res)
    print(f"Minimizer found: {res.state.best_param}")


if __name__ == "__main__":
    main()
