"""Solver contract shared by every algorithm driven by the executor."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Any, Optional

from ..errors import InvalidParameterError
from ..operator import OpWrapper
from ..state import IterData, IterState, TerminationReason


class Solver(ABC):
    """One optimization algorithm.

    The executor calls :meth:`init` once, then :meth:`next_iter` until
    :meth:`terminate_internal` reports a terminal reason. Solvers read the
    current point from ``state`` and report what they computed through an
    :class:`IterData`; they never mutate ``state`` themselves.
    """

    name: str = "Solver"

    def init(self, op: OpWrapper, state: IterState) -> Optional[IterData]:
        """Prepare the run; the returned data, if any, is merged into state."""
        return None

    @abstractmethod
    def next_iter(self, op: OpWrapper, state: IterState) -> IterData:
        """Compute one iteration."""

    def terminate(self, state: IterState) -> TerminationReason:
        """Algorithm-specific stopping rule."""
        return TerminationReason.NOT_TERMINATED

    def terminate_internal(self, state: IterState) -> TerminationReason:
        reason = self.terminate(state)
        if reason.terminated:
            return reason
        if state.iter >= state.max_iters:
            return TerminationReason.MAX_ITERS_REACHED
        return TerminationReason.NOT_TERMINATED

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class LineSearch(Solver):
    """Solver searching for a step length along a fixed direction.

    The direction must be set before every nested run. The state the line
    search runs on starts at the current point of the outer solver.
    """

    def __init__(self) -> None:
        self.search_direction: Optional[Any] = None
        self.init_alpha = 1.0

    def set_search_direction(self, direction: Any) -> None:
        self.search_direction = direction

    def set_init_alpha(self, alpha: float) -> None:
        if not alpha > 0:
            raise InvalidParameterError("initial step length must be positive")
        self.init_alpha = float(alpha)


class TrustRegionSubproblem(Solver):
    """Solver for the step of one trust-region iteration.

    The result ``param`` of a subproblem run is the step itself, not the new
    point.
    """

    def __init__(self) -> None:
        self.radius = math.nan

    def set_radius(self, radius: float) -> None:
        self.radius = float(radius)


__all__ = ["LineSearch", "Solver", "TrustRegionSubproblem"]
