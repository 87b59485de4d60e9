"""
convselect Layout Transform

Derives accelerator-native extents and strides from a problem descriptor.

Strides are computed as row-major strides of the *source* ordering
(group, batch-or-out-channel, spatial-1, spatial-2, channel) first, and
only then is the native permutation applied, to extents and strides
together. The kernel ABI takes lengths in (G, N|K, C, H, W) order with
strides describing the channel-last memory.
"""
from __future__ import annotations

import logging
from typing import Final

from convselect.models.problem import ProblemDescriptor
from convselect.models.shape import ConvArgs, ShapeTuple

logger = logging.getLogger(__name__)

INPUT_AXES: Final[tuple[str, ...]] = ("G", "N", "H", "W", "C")
WEIGHT_AXES: Final[tuple[str, ...]] = ("G", "K", "Y", "X", "C")
OUTPUT_AXES: Final[tuple[str, ...]] = ("G", "N", "H", "W", "K")

# Position i of the native tuple takes source position NATIVE_AXIS_ORDER[i]:
# the trailing three axes rotate so the channel axis precedes the spatial ones.
NATIVE_AXIS_ORDER: Final[tuple[int, ...]] = (0, 1, 4, 2, 3)


def packed_strides(extents: tuple[int, ...]) -> tuple[int, ...]:
    """Row-major strides for extents: exclusive suffix products, innermost 1."""
    strides = [1] * len(extents)
    for i in range(len(extents) - 2, -1, -1):
        strides[i] = strides[i + 1] * extents[i + 1]
    return tuple(strides)


def source_shape(extents: tuple[int, ...], axes: tuple[str, ...]) -> ShapeTuple:
    """Packed ShapeTuple in source order."""
    return ShapeTuple(extents=extents, strides=packed_strides(extents), axes=axes)


def derive(problem: ProblemDescriptor) -> ConvArgs:
    """Derive native input/weight/output shapes and conv parameters.

    Args:
        problem: Problem to describe.

    Returns:
        ConvArgs with all three ShapeTuples in native order.
    """
    g = problem.groups
    c = problem.channels_per_group

    input_src = source_shape(
        (g, problem.batch, problem.in_height, problem.in_width, c), INPUT_AXES
    )
    weight_src = source_shape(
        (g, problem.out_channels, problem.filter_height, problem.filter_width, c),
        WEIGHT_AXES,
    )
    output_src = source_shape(
        (g, problem.batch, problem.out_height, problem.out_width, problem.out_channels),
        OUTPUT_AXES,
    )

    args = ConvArgs(
        input=input_src.permuted(NATIVE_AXIS_ORDER),
        weight=weight_src.permuted(NATIVE_AXIS_ORDER),
        output=output_src.permuted(NATIVE_AXIS_ORDER),
        conv_strides=problem.conv_stride,
        dilations=problem.dilation,
        left_pads=problem.pad_left,
        right_pads=problem.pad_right,
    )

    logger.debug(
        "Derived native shapes: in=%s/%s wei=%s/%s out=%s/%s",
        args.input.extents,
        args.input.strides,
        args.weight.extents,
        args.weight.strides,
        args.output.extents,
        args.output.strides,
    )
    return args
