"""Tests for the convselect exception hierarchy."""
from __future__ import annotations

import pytest

from convselect.exceptions import (
    CandidateNotFoundError,
    ConfigInvariantError,
    ConfigurationError,
    ConvSelectError,
    InvalidProblemError,
    KernelExecutionError,
)


class TestHierarchy:
    """Every error derives from ConvSelectError."""

    @pytest.mark.parametrize("exc_type", [
        InvalidProblemError,
        ConfigInvariantError,
        CandidateNotFoundError,
        KernelExecutionError,
        ConfigurationError,
    ])
    def test_subclass_of_base(self, exc_type: type) -> None:
        assert issubclass(exc_type, ConvSelectError)

    def test_candidate_not_found_is_invariant_error(self) -> None:
        assert issubclass(CandidateNotFoundError, ConfigInvariantError)

    def test_invalid_problem_is_value_error(self) -> None:
        assert issubclass(InvalidProblemError, ValueError)


class TestContext:
    """Context dicts and messages."""

    def test_base_repr_includes_context(self) -> None:
        err = ConvSelectError("boom", context={"a": 1})
        assert repr(err) == "ConvSelectError('boom', context={'a': 1})"

    def test_base_repr_without_context(self) -> None:
        assert repr(ConvSelectError("boom")) == "ConvSelectError('boom')"

    def test_invalid_problem(self) -> None:
        err = InvalidProblemError("batch", 0)
        assert err.context == {"field": "batch", "value": 0}
        assert "batch" in str(err)

    def test_candidate_not_found_message(self) -> None:
        err = CandidateNotFoundError("k3", problem="fwd nhwc G1")
        assert str(err) == "Candidate 'k3' not found in catalog for problem fwd nhwc G1"
        assert err.kernel_id == "k3"

    def test_kernel_execution_wraps_cause(self) -> None:
        cause = MemoryError("oom")
        err = KernelExecutionError("k0", cause, problem="p")
        assert err.__cause__ is cause
        assert err.original_error is cause
        assert err.context["error_type"] == "MemoryError"
        assert err.context["error_message"] == "oom"

    def test_configuration_error(self) -> None:
        err = ConfigurationError("bad", config_key="k", expected="bool", got=3)
        assert err.context == {"config_key": "k", "expected": "bool", "got": 3}
