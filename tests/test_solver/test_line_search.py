import numpy as np
import pytest

from optloop import (
    BacktrackingLineSearch,
    Executor,
    ImpossibleStateError,
    InvalidParameterError,
    Observer,
    OpWrapper,
    Problem,
    StrongWolfeLineSearch,
    TerminationReason,
)
from optloop.solver import run_line_search


def square():
    return Problem(fun=lambda x: float(x @ x), grad=lambda x: 2 * x)


class Alphas(Observer):
    def __init__(self):
        self.values = []

    def observe_iter(self, state, kv):
        self.values.append(kv.get("alpha"))


def test_backtracking_halves_until_armijo():
    op = OpWrapper(square())
    state = run_line_search(
        op,
        BacktrackingLineSearch(),
        np.array([1.0]),
        np.array([-2.0]),
        cost=1.0,
        grad=np.array([2.0]),
    )
    assert np.allclose(state.param, [0.0])
    assert state.cost == 0.0
    assert state.iter == 2
    assert state.termination_reason is TerminationReason.LINE_SEARCH_CONDITION_MET
    assert op.counts()["cost"] == 2
    assert op.counts()["gradient"] == 0


def test_backtracking_evaluates_missing_start_values():
    op = OpWrapper(square())
    run_line_search(op, BacktrackingLineSearch(), np.array([1.0]), np.array([-2.0]))
    assert op.counts()["cost"] == 3
    assert op.counts()["gradient"] == 1


def test_backtracking_gives_up_after_max_trials():
    op = OpWrapper(square())
    linesearch = BacktrackingLineSearch(rho=0.9, max_trials=2)
    state = run_line_search(op, linesearch, np.array([1.0]), np.array([-100.0]))
    assert state.termination_reason is TerminationReason.MAX_ITERS_REACHED
    assert state.iter == 2


def test_strong_wolfe_zooms_into_bracket():
    linesearch = StrongWolfeLineSearch()
    alphas = Alphas()
    linesearch.set_search_direction(np.array([-2.0]))
    res = (
        Executor(square(), linesearch, np.array([1.0]), ctrlc=False)
        .add_observer(alphas)
        .run()
    )
    assert res.state.termination_reason is TerminationReason.LINE_SEARCH_CONDITION_MET
    assert np.allclose(res.state.param, [0.0])
    assert alphas.values == [0.0, 0.5]


def test_strong_wolfe_expands_bracket():
    linesearch = StrongWolfeLineSearch()
    alphas = Alphas()
    linesearch.set_search_direction(np.array([-0.1]))
    res = (
        Executor(square(), linesearch, np.array([10.0]), ctrlc=False)
        .add_observer(alphas)
        .run()
    )
    assert res.state.termination_reason is TerminationReason.LINE_SEARCH_CONDITION_MET
    assert alphas.values == [1.0, 2.0, 4.0, 8.0, 16.0]
    assert np.allclose(res.state.param, [8.4])
    assert res.state.has_grad


def test_strong_wolfe_conditions_hold_on_random_quadratic(rng):
    m = rng.standard_normal((4, 4))
    a = m @ m.T + np.eye(4)
    problem = Problem(fun=lambda x: float(0.5 * x @ a @ x), grad=lambda x: a @ x)
    x0 = rng.standard_normal(4)
    g0 = a @ x0
    direction = -g0
    linesearch = StrongWolfeLineSearch(c1=1e-4, c2=0.9)
    state = run_line_search(OpWrapper(problem), linesearch, x0, direction)

    assert state.termination_reason is TerminationReason.LINE_SEARCH_CONDITION_MET
    alpha = float((state.param - x0) @ direction / (direction @ direction))
    slope = float(g0 @ direction)
    assert state.cost <= problem.apply(x0) + 1e-4 * alpha * slope
    assert abs(float(problem.gradient(state.param) @ direction)) <= -0.9 * slope


def test_zero_direction_ends_immediately():
    op = OpWrapper(square())
    state = run_line_search(op, StrongWolfeLineSearch(), np.array([1.0]), np.zeros(1))
    assert state.termination_reason is TerminationReason.LINE_SEARCH_CONDITION_MET
    assert np.allclose(state.param, [1.0])


@pytest.mark.parametrize("linesearch", [BacktrackingLineSearch(), StrongWolfeLineSearch()])
def test_ascent_direction_is_rejected(linesearch):
    with pytest.raises(InvalidParameterError, match="descent direction"):
        run_line_search(OpWrapper(square()), linesearch, np.array([1.0]), np.array([1.0]))


def test_direction_must_be_set():
    with pytest.raises(ImpossibleStateError):
        Executor(square(), BacktrackingLineSearch(), np.array([1.0]), ctrlc=False).run()


def test_parameter_validation():
    with pytest.raises(InvalidParameterError):
        StrongWolfeLineSearch(c1=0.9, c2=0.1)
    with pytest.raises(InvalidParameterError):
        BacktrackingLineSearch(rho=1.0)
    with pytest.raises(InvalidParameterError):
        BacktrackingLineSearch(max_trials=0)
    with pytest.raises(InvalidParameterError):
        BacktrackingLineSearch().set_init_alpha(0.0)


def test_initial_step_length_is_used():
    linesearch = BacktrackingLineSearch()
    linesearch.set_init_alpha(0.5)
    op = OpWrapper(square())
    state = run_line_search(op, linesearch, np.array([1.0]), np.array([-2.0]))
    assert state.iter == 1
    assert np.allclose(state.param, [0.0])
