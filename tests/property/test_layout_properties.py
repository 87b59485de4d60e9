"""Property-based tests for the layout transform.

Checks that every logical axis keeps its own extent and stride through
the native permutation, across random problem shapes.
"""
from __future__ import annotations

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from convselect.layout import (
    INPUT_AXES,
    NATIVE_AXIS_ORDER,
    OUTPUT_AXES,
    WEIGHT_AXES,
    derive,
    packed_strides,
)
from convselect.models.shape import permute
from fixtures.conv import make_problem

small = st.integers(min_value=1, max_value=64)


@st.composite
def problems(draw):
    groups = draw(st.integers(min_value=1, max_value=8))
    return make_problem(
        groups=groups,
        batch=draw(small),
        in_channels=groups * draw(small),
        out_channels=draw(small),
        in_height=draw(small),
        in_width=draw(small),
        out_height=draw(small),
        out_width=draw(small),
        filter_height=draw(st.integers(min_value=1, max_value=7)),
        filter_width=draw(st.integers(min_value=1, max_value=7)),
    )


def _source_extents(problem):
    c = problem.channels_per_group
    return {
        "input": (problem.groups, problem.batch, problem.in_height, problem.in_width, c),
        "weight": (
            problem.groups, problem.out_channels,
            problem.filter_height, problem.filter_width, c,
        ),
        "output": (
            problem.groups, problem.batch,
            problem.out_height, problem.out_width, problem.out_channels,
        ),
    }


_AXES = {"input": INPUT_AXES, "weight": WEIGHT_AXES, "output": OUTPUT_AXES}


@pytest.mark.property
class TestLayoutProperties:
    """Invariants of derive() over random shapes."""

    @given(problems())
    @settings(max_examples=200)
    def test_axis_keeps_extent_and_stride(self, problem) -> None:
        args = derive(problem)
        for name, extents in _source_extents(problem).items():
            shape = getattr(args, name)
            strides = packed_strides(extents)
            for axis, extent, stride in zip(_AXES[name], extents, strides):
                assert shape.extent_of(axis) == extent
                assert shape.stride_of(axis) == stride

    @given(problems())
    def test_axes_follow_native_order(self, problem) -> None:
        args = derive(problem)
        assert args.input.axes == permute(INPUT_AXES, NATIVE_AXIS_ORDER)
        assert args.weight.axes == permute(WEIGHT_AXES, NATIVE_AXIS_ORDER)
        assert args.output.axes == permute(OUTPUT_AXES, NATIVE_AXIS_ORDER)

    @given(problems())
    def test_channel_stride_is_innermost(self, problem) -> None:
        args = derive(problem)
        assert args.input.stride_of("C") == 1
        assert args.weight.stride_of("C") == 1
        assert args.output.stride_of("K") == 1

    @given(problems())
    def test_group_stride_spans_tensor(self, problem) -> None:
        args = derive(problem)
        for shape in (args.input, args.weight, args.output):
            assert shape.stride_of("G") * shape.extent_of("G") == shape.element_count

    @given(problems())
    def test_derive_is_deterministic(self, problem) -> None:
        assert derive(problem) == derive(problem)
