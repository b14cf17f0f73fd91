"""optloop - a generic engine for iterative numerical optimization.

Example
-------
>>> import numpy as np
>>> from optloop import BFGS, Executor, StrongWolfeLineSearch
>>> from optloop.testfunctions import Rosenbrock
>>> solver = BFGS(np.eye(2), StrongWolfeLineSearch())
>>> res = Executor(Rosenbrock(), solver, np.array([-1.2, 1.0]), max_iters=200).run()
>>> bool(np.allclose(res.state.param, np.ones(2), atol=1e-4))
True
"""

__version__ = "0.1.0"

from .backend import ArrayBackend, NumpyBackend, TorchBackend, get_backend
from .errors import (
    ImpossibleStateError,
    InvalidParameterError,
    NotImplementedOperatorError,
    NumericalFailureError,
    OptloopError,
)
from .executor import Executor, ExecutorConfig, OptimizationResult
from .observers import (
    LoggingObserver,
    Observer,
    ObserverMode,
    Observers,
    WriteToFile,
    WriteToFileSerializer,
)
from .operator import OpWrapper, Operator, Problem
from .solver import (
    BFGS,
    BacktrackingLineSearch,
    Dogleg,
    Landweber,
    LineSearch,
    Newton,
    Solver,
    SteepestDescent,
    StrongWolfeLineSearch,
    TrustRegion,
    TrustRegionSubproblem,
)
from .state import IterData, IterState, TerminationReason

__all__ = [
    "__version__",
    # Array backends
    "ArrayBackend",
    "NumpyBackend",
    "TorchBackend",
    "get_backend",
    # Errors
    "ImpossibleStateError",
    "InvalidParameterError",
    "NotImplementedOperatorError",
    "NumericalFailureError",
    "OptloopError",
    # Engine
    "Executor",
    "ExecutorConfig",
    "IterData",
    "IterState",
    "OpWrapper",
    "Operator",
    "OptimizationResult",
    "Problem",
    "TerminationReason",
    # Observers
    "LoggingObserver",
    "Observer",
    "ObserverMode",
    "Observers",
    "WriteToFile",
    "WriteToFileSerializer",
    # Solvers
    "BFGS",
    "BacktrackingLineSearch",
    "Dogleg",
    "Landweber",
    "LineSearch",
    "Newton",
    "Solver",
    "SteepestDescent",
    "StrongWolfeLineSearch",
    "TrustRegion",
    "TrustRegionSubproblem",
]
