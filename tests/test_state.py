import math

import numpy as np
import pytest

from optloop import ImpossibleStateError, IterData, IterState, TerminationReason


def test_iter_data_is_sparse_builder():
    data = IterData().param(np.ones(2)).cost(3)
    assert np.allclose(data.get_param(), 1.0)
    assert data.get_cost() == 3.0
    assert data.get_grad() is None
    assert data.get_hessian() is None
    assert data.kv(alpha=0.5).get_kv() == {"alpha": 0.5}


def test_initial_state():
    state = IterState([1.0, 2.0], max_iters=10)
    assert isinstance(state.param, np.ndarray)
    assert state.iter == 0
    assert math.isinf(state.cost) and math.isinf(state.best_cost)
    assert not state.has_grad and not state.has_hessian
    assert state.termination_reason is TerminationReason.NOT_TERMINATED
    assert not state.is_terminated()


def test_absent_optional_fields_fail_loudly():
    state = IterState(np.zeros(2), max_iters=1)
    with pytest.raises(ImpossibleStateError):
        state.get_grad()
    with pytest.raises(ImpossibleStateError):
        state.get_hessian()
    assert state.get_grad_or_none() is None


def test_update_merges_only_present_fields():
    state = IterState(np.zeros(2), max_iters=5)
    state.update(IterData().param(np.ones(2)).cost(4.0).grad(np.ones(2)))
    state.update(IterData().param(np.full(2, 2.0)))
    assert np.allclose(state.param, 2.0)
    assert np.allclose(state.prev_param, 1.0)
    assert state.cost == 4.0
    assert np.allclose(state.get_grad(), 1.0)
    assert not state.has_hessian


def test_best_updates_only_on_strict_improvement():
    state = IterState(np.zeros(1), max_iters=5)
    assert state.update(IterData().param(np.array([1.0])).cost(2.0))
    assert not state.update(IterData().param(np.array([2.0])).cost(2.0))
    assert not state.update(IterData().param(np.array([3.0])).cost(5.0))
    assert state.best_cost == 2.0
    assert np.allclose(state.best_param, 1.0)
    assert state.prev_cost == 2.0 and state.cost == 5.0
    assert state.update(IterData().param(np.array([4.0])).cost(1.0))
    assert np.allclose(state.best_param, 4.0)
    assert state.prev_best_cost == 2.0


def test_param_only_update_leaves_best_untouched():
    state = IterState(np.zeros(1), max_iters=5)
    assert not state.update(IterData().param(np.array([1.0])))
    assert np.allclose(state.best_param, 0.0)


def test_termination_reason_is_sticky():
    state = IterState(np.zeros(1), max_iters=5)
    state.set_termination_reason(TerminationReason.NO_CHANGE_IN_COST)
    assert state.is_terminated()
    state.set_termination_reason(TerminationReason.NO_CHANGE_IN_COST)
    with pytest.raises(ImpossibleStateError):
        state.set_termination_reason(TerminationReason.NOT_TERMINATED)


def test_snapshot_is_independent():
    state = IterState(np.zeros(2), max_iters=5)
    state.update(IterData().cost(1.0))
    snap = state.snapshot()
    state.update(IterData().cost(0.5))
    assert snap.cost == 1.0
    assert snap.param is not state.param


def test_termination_reason_text():
    assert not TerminationReason.NOT_TERMINATED.terminated
    assert TerminationReason.MAX_ITERS_REACHED.terminated
    assert str(TerminationReason.NO_CHANGE_IN_COST) == "No change in cost function value"
