"""Tests for logging utilities."""

import logging
from io import StringIO

import numpy as np

from optloop import Executor, Landweber, Problem
from optloop.logging import configure_logging, get_logger, set_log_level


def test_get_logger_returns_logger():
    logger = get_logger("test_module")
    assert isinstance(logger, logging.Logger)
    assert logger.name.startswith("optloop.")


def test_get_logger_caching():
    assert get_logger("test_module") is get_logger("test_module")


def test_get_logger_keeps_package_prefix():
    assert get_logger("optloop.executor").name == "optloop.executor"
    assert get_logger().name == "optloop"


def test_set_log_level_string():
    logger = get_logger("test_module")
    set_log_level("DEBUG")
    assert logger.level == logging.DEBUG
    set_log_level("ERROR")
    assert logger.level == logging.ERROR


def test_configure_logging_redirects_output():
    stream = StringIO()
    configure_logging(level=logging.DEBUG, stream=stream)
    get_logger("test_module").debug("Debug message")
    assert "Debug message" in stream.getvalue()


def test_logger_does_not_propagate():
    assert get_logger("test_module").propagate is False


def test_executor_logs_run_summary():
    stream = StringIO()
    get_logger("optloop.executor")
    configure_logging(level=logging.INFO, stream=stream)
    problem = Problem(fun=lambda x: float(x @ x), grad=lambda x: 2 * x)
    Executor(problem, Landweber(0.1), np.array([1.0]), max_iters=3).run()
    output = stream.getvalue()
    assert "Landweber: starting run" in output
    assert "MAX_ITERS_REACHED" in output
