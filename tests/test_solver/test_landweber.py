import numpy as np
import torch

from optloop import Executor, IterState, Landweber, OpWrapper, Problem, TerminationReason

A = np.array([[4.0, 1.0], [1.0, 3.0]])
Y = np.array([1.0, 2.0])


def least_squares():
    return Problem(
        fun=lambda x: float((A @ x - Y) @ (A @ x - Y)),
        grad=lambda x: 2.0 * A.T @ (A @ x - Y),
    )


def test_single_step_formula():
    op = OpWrapper(Problem(fun=lambda x: 0.0, grad=lambda x: np.array([2.0, -4.0])))
    state = IterState(np.array([1.0, 1.0]), max_iters=1)
    data = Landweber(0.5).next_iter(op, state)
    assert np.allclose(data.get_param(), [0.0, 3.0])
    assert data.get_cost() is None
    assert op.counts()["gradient"] == 1


def test_least_squares_solution():
    res = Executor(least_squares(), Landweber(0.01), np.array([1.2, 1.2]), max_iters=1000).run()
    assert np.allclose(res.state.param, [1.0 / 11.0, 7.0 / 11.0], atol=1e-8)
    assert res.state.termination_reason is TerminationReason.MAX_ITERS_REACHED
    assert res.counts["gradient"] == 1000
    assert res.counts["cost"] == 0


def test_torch_parameters():
    a = torch.tensor(A)
    y = torch.tensor(Y)
    problem = Problem(fun=lambda x: 0.0, grad=lambda x: 2.0 * a.T @ (a @ x - y))
    res = Executor(problem, Landweber(0.01), torch.zeros(2, dtype=torch.float64), max_iters=1000).run()
    assert isinstance(res.state.param, torch.Tensor)
    assert torch.allclose(res.state.param, torch.tensor([1.0 / 11.0, 7.0 / 11.0], dtype=torch.float64))


def test_single_step_componentwise_for_random_inputs(rng):
    for _ in range(10):
        omega = float(rng.uniform(1e-3, 2.0))
        param = rng.standard_normal(5)
        grad = rng.standard_normal(5)
        op = OpWrapper(Problem(fun=lambda x: 0.0, grad=lambda x: grad))
        data = Landweber(omega).next_iter(op, IterState(param, max_iters=1))
        assert np.allclose(data.get_param(), param - omega * grad)


def test_least_squares_from_origin():
    res = Executor(least_squares(), Landweber(0.01), np.zeros(2), max_iters=1000).run()
    expected = np.linalg.solve(A.T @ A, A.T @ Y)
    assert np.allclose(res.state.param, expected, atol=1e-8)
