"""Tests for rejection reason codes."""
from __future__ import annotations

import json

import pytest

from convselect import reasons as rc
from convselect.reasons import ALL_REASON_CODES, Reason, ReasonCategory, make_reason


class TestReasonCodes:
    """Code table integrity."""

    def test_codes_are_screaming_snake_case(self) -> None:
        for code in ALL_REASON_CODES:
            assert code == code.upper()
            assert " " not in code

    def test_module_constants_registered(self) -> None:
        for name in ("FAMILY_DISABLED", "TARGET_UNSUPPORTED", "CONV_STRIDE_UNSUPPORTED"):
            assert getattr(rc, name) in ALL_REASON_CODES


class TestMakeReason:
    """Factory with category lookup."""

    def test_category_lookup(self) -> None:
        reason = make_reason(rc.TARGET_UNSUPPORTED, "gfx1030")
        assert reason.category is ReasonCategory.HARDWARE
        assert str(reason) == "[TARGET_UNSUPPORTED] gfx1030"

    def test_unknown_code(self) -> None:
        with pytest.raises(ValueError, match="Unknown reason code"):
            make_reason("NOT_A_CODE", "x")

    def test_json(self) -> None:
        reason = make_reason(rc.DTYPE_UNSUPPORTED, "float16")
        assert json.loads(reason.to_json())["category"] == "dtype"
        assert Reason.from_dict(reason.to_dict()) == reason

    def test_candidate_reason_carries_identity(self) -> None:
        reason = make_reason(rc.CANDIDATE_PROBE_REJECTED, "probe", kernel_id="k3")
        assert str(reason) == "[CANDIDATE_PROBE_REJECTED:k3] probe"
        assert reason.to_dict()["kernel_id"] == "k3"
        assert Reason.from_dict(reason.to_dict()) == reason

    def test_family_reason_omits_identity(self) -> None:
        reason = make_reason(rc.FAMILY_DISABLED, "off")
        assert "kernel_id" not in reason.to_dict()
