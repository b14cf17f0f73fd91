"""Optimization algorithms that plug into :class:`optloop.Executor`."""

from .base import LineSearch, Solver, TrustRegionSubproblem
from .gradient_descent import SteepestDescent
from .landweber import Landweber
from .line_search import BacktrackingLineSearch, StrongWolfeLineSearch, run_line_search
from .newton import Newton
from .quasi_newton import BFGS
from .trust_region import Dogleg, TrustRegion

__all__ = [
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
    "run_line_search",
]
