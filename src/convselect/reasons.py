"""
convselect Reason Codes

Why the convolution family, or one candidate in it, cannot run a problem.
Family-level codes come from the first failing precondition; candidate
codes carry the identity of the candidate that refused.

Exports the ReasonCategory enum, the Reason record, one constant per
code, the ALL_REASON_CODES table and the make_reason() factory.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum, unique
from typing import Any


@unique
class ReasonCategory(str, Enum):
    """What kind of constraint a rejection comes from."""

    HARDWARE = "hardware"
    DTYPE = "dtype"
    SHAPE = "shape"
    LAYOUT = "layout"
    POLICY = "policy"
    CANDIDATE = "candidate"


@dataclass(frozen=True, slots=True)
class Reason:
    """One rejection.

    Attributes:
        code: Constant from this module, e.g. TARGET_UNSUPPORTED.
        message: Detail for humans, including the offending value.
        category: Derived from the code by make_reason().
        kernel_id: Candidate that refused, for candidate-level codes.
    """

    code: str
    message: str
    category: ReasonCategory
    kernel_id: str | None = None

    def __str__(self) -> str:
        if self.kernel_id is None:
            return f"[{self.code}] {self.message}"
        return f"[{self.code}:{self.kernel_id}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "code": self.code,
            "category": self.category.value,
            "message": self.message,
        }
        if self.kernel_id is not None:
            d["kernel_id"] = self.kernel_id
        return d

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Reason:
        """Inverse of to_dict(); 'kernel_id' is optional."""
        return cls(
            code=d["code"],
            message=d["message"],
            category=ReasonCategory(d["category"]),
            kernel_id=d.get("kernel_id"),
        )


# =============================================================================
# Family-level Reason Codes
# =============================================================================

FAMILY_DISABLED = "FAMILY_DISABLED"
"""The convolution family is switched off by options."""

DETERMINISM_REQUIRED = "DETERMINISM_REQUIRED"
"""Deterministic execution is mandated and this family may not be deterministic."""

MIXED_DTYPE_UNSUPPORTED = "MIXED_DTYPE_UNSUPPORTED"
"""Input, weight and output element types differ."""

DIRECTION_UNSUPPORTED = "DIRECTION_UNSUPPORTED"
"""Only the forward direction is implemented."""

SPATIAL_DIMS_UNSUPPORTED = "SPATIAL_DIMS_UNSUPPORTED"
"""Problem is not exactly 2-D spatial."""

LAYOUT_UNSUPPORTED = "LAYOUT_UNSUPPORTED"
"""Declared source layout is not channel-last."""

TARGET_UNSUPPORTED = "TARGET_UNSUPPORTED"
"""Device target is not in the allow-list."""

DTYPE_UNSUPPORTED = "DTYPE_UNSUPPORTED"
"""No enabled instantiation exists for the element type."""

NO_APPLICABLE_CANDIDATE = "NO_APPLICABLE_CANDIDATE"
"""Every candidate in the catalog rejected the problem."""


# =============================================================================
# Candidate-level Reason Codes
# =============================================================================

CONV_STRIDE_UNSUPPORTED = "CONV_STRIDE_UNSUPPORTED"
"""Convolution stride other than 1 on some spatial axis."""

CANDIDATE_PROBE_REJECTED = "CANDIDATE_PROBE_REJECTED"
"""The candidate's own support probe rejected the derived arguments."""


ALL_REASON_CODES: dict[str, ReasonCategory] = {
    FAMILY_DISABLED: ReasonCategory.POLICY,
    DETERMINISM_REQUIRED: ReasonCategory.POLICY,
    MIXED_DTYPE_UNSUPPORTED: ReasonCategory.DTYPE,
    DIRECTION_UNSUPPORTED: ReasonCategory.SHAPE,
    SPATIAL_DIMS_UNSUPPORTED: ReasonCategory.SHAPE,
    LAYOUT_UNSUPPORTED: ReasonCategory.LAYOUT,
    TARGET_UNSUPPORTED: ReasonCategory.HARDWARE,
    DTYPE_UNSUPPORTED: ReasonCategory.DTYPE,
    NO_APPLICABLE_CANDIDATE: ReasonCategory.CANDIDATE,
    CONV_STRIDE_UNSUPPORTED: ReasonCategory.SHAPE,
    CANDIDATE_PROBE_REJECTED: ReasonCategory.CANDIDATE,
}


def make_reason(code: str, message: str, kernel_id: str | None = None) -> Reason:
    """Build a Reason, looking the category up in ALL_REASON_CODES.

    Args:
        code: One of the code constants above.
        message: Detail for humans.
        kernel_id: Refusing candidate, for candidate-level codes.

    Raises:
        ValueError: If code is not a known reason code.
    """
    try:
        category = ALL_REASON_CODES[code]
    except KeyError:
        raise ValueError(f"Unknown reason code: {code}") from None
    return Reason(code=code, message=message, category=category, kernel_id=kernel_id)
