"""
convselect Exception Hierarchy

Inapplicable problems and stale configurations are reported as booleans,
never raised. The exceptions below cover invariant violations, invalid
inputs and execution failures.
"""
from __future__ import annotations

from typing import Any, Optional


class ConvSelectError(Exception):
    """Base exception for all convselect errors.

    Attributes:
        message: What went wrong.
        context: Problem, candidate and value details for diagnostics.
    """

    def __init__(
        self,
        message: str,
        *,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __repr__(self) -> str:
        """Repr with the context dict appended."""
        ctx_str = f", context={self.context}" if self.context else ""
        return f"{self.__class__.__name__}({self.message!r}{ctx_str})"


class InvalidProblemError(ConvSelectError, ValueError):
    """Raised when a problem descriptor violates its own invariants.

    Attributes:
        field_name: The offending descriptor field.
        value: The rejected value.
    """

    def __init__(
        self,
        field_name: str,
        value: Any,
        *,
        message: Optional[str] = None,
    ) -> None:
        self.field_name = field_name
        self.value = value

        if message is None:
            message = f"Invalid problem field '{field_name}': {value!r}"

        super().__init__(
            message,
            context={"field": field_name, "value": value},
        )


class ConfigInvariantError(ConvSelectError):
    """Raised on a configuration-invariant violation.

    This signals an upstream logic defect and is never retried:
    - The catalog returned no candidates for a family that passed
      family-level applicability
    - No candidate accepted a problem that passed family-level applicability
    - An uninitialized performance config was used for invocation

    Attributes:
        problem: Summary of the problem being solved.
        kernel_id: Candidate identity involved, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        problem: Optional[str] = None,
        kernel_id: Optional[str] = None,
    ) -> None:
        self.problem = problem
        self.kernel_id = kernel_id

        super().__init__(
            message,
            context={"problem": problem, "kernel_id": kernel_id},
        )


class CandidateNotFoundError(ConfigInvariantError):
    """Raised when a config's identity is missing from the live catalog at invoke time."""

    def __init__(
        self,
        kernel_id: str,
        *,
        problem: Optional[str] = None,
        message: Optional[str] = None,
    ) -> None:
        if message is None:
            message = f"Candidate '{kernel_id}' not found in catalog"
            if problem:
                message = f"{message} for problem {problem}"

        super().__init__(message, problem=problem, kernel_id=kernel_id)


class KernelExecutionError(ConvSelectError):
    """Raised when the execution backend fails to run a candidate.

    Wraps the original exception with the candidate and problem that
    were being executed. No retry happens at this layer.

    Attributes:
        kernel_id: The candidate that failed.
        problem: Summary of the problem being executed.
        original_error: The underlying exception.
    """

    def __init__(
        self,
        kernel_id: str,
        original_error: BaseException,
        *,
        problem: Optional[str] = None,
        message: Optional[str] = None,
    ) -> None:
        self.kernel_id = kernel_id
        self.problem = problem
        self.original_error = original_error

        if message is None:
            message = f"Kernel '{kernel_id}' execution failed: {original_error}"

        super().__init__(
            message,
            context={
                "kernel_id": kernel_id,
                "problem": problem,
                "error_type": type(original_error).__name__,
                "error_message": str(original_error),
            },
        )
        self.__cause__ = original_error


class ConfigurationError(ConvSelectError):
    """Raised when solver options are invalid."""

    def __init__(
        self,
        message: str,
        *,
        config_key: Optional[str] = None,
        expected: Optional[Any] = None,
        got: Optional[Any] = None,
    ) -> None:
        self.config_key = config_key
        self.expected = expected
        self.got = got

        super().__init__(
            message,
            context={
                "config_key": config_key,
                "expected": expected,
                "got": got,
            },
        )
