"""
convselect Shape Models

Derived, immutable extent/stride bundles handed to candidate kernels.

This module provides:
- ShapeTuple: 5-D extents, strides and axis labels for one tensor
- ConvArgs: Input/weight/output ShapeTuples plus convolution parameters
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator

RANK = 5


@dataclass(frozen=True, slots=True)
class ShapeTuple:
    """Extents and strides of one tensor.

    stride[i] always addresses the logical axis labelled axes[i] with
    extent extents[i], whatever physical position that axis occupies.

    Attributes:
        extents: Axis sizes.
        strides: Element strides, paired index-for-index with extents.
        axes: Logical axis label per position (e.g. "G", "N", "C").
    """

    extents: tuple[int, ...]
    strides: tuple[int, ...]
    axes: tuple[str, ...]

    def __post_init__(self) -> None:
        if not (len(self.extents) == len(self.strides) == len(self.axes) == RANK):
            raise ValueError(
                f"ShapeTuple needs {RANK} extents, strides and axes, got "
                f"{len(self.extents)}/{len(self.strides)}/{len(self.axes)}"
            )
        if len(set(self.axes)) != RANK:
            raise ValueError(f"Duplicate axis labels: {self.axes}")

    def permuted(self, order: tuple[int, ...]) -> ShapeTuple:
        """Reorder extents, strides and labels in lockstep.

        Args:
            order: Position i of the result takes source position order[i].

        Returns:
            New ShapeTuple in the permuted order.
        """
        return ShapeTuple(
            extents=permute(self.extents, order),
            strides=permute(self.strides, order),
            axes=permute(self.axes, order),
        )

    def extent_of(self, axis: str) -> int:
        """Size of the logical axis with the given label."""
        return self.extents[self.axes.index(axis)]

    def stride_of(self, axis: str) -> int:
        """Stride of the logical axis with the given label."""
        return self.strides[self.axes.index(axis)]

    def __iter__(self) -> Iterator[tuple[str, int, int]]:
        """Iterate (axis, extent, stride) triples."""
        return iter(zip(self.axes, self.extents, self.strides))

    @property
    def element_count(self) -> int:
        count = 1
        for extent in self.extents:
            count *= extent
        return count

    def to_dict(self) -> dict[str, Any]:
        return {
            "extents": list(self.extents),
            "strides": list(self.strides),
            "axes": list(self.axes),
        }


def permute(values: tuple, order: tuple[int, ...]) -> tuple:
    """Apply an index permutation to a tuple.

    Raises:
        ValueError: If order is not a permutation of range(len(values)).
    """
    if sorted(order) != list(range(len(values))):
        raise ValueError(f"{order} is not a permutation of {len(values)} positions")
    return tuple(values[i] for i in order)


@dataclass(frozen=True, slots=True)
class ConvArgs:
    """Invocation arguments shared by probe and execution request.

    Attributes:
        input: Input tensor shape in accelerator-native order.
        weight: Weight tensor shape in accelerator-native order.
        output: Output tensor shape in accelerator-native order.
        conv_strides: Convolution stride (h, w).
        dilations: Filter dilation (h, w).
        left_pads: Leading input padding (h, w).
        right_pads: Trailing input padding (h, w).
    """

    input: ShapeTuple
    weight: ShapeTuple
    output: ShapeTuple
    conv_strides: tuple[int, int]
    dilations: tuple[int, int]
    left_pads: tuple[int, int]
    right_pads: tuple[int, int]

    @property
    def has_unit_strides(self) -> bool:
        return all(s == 1 for s in self.conv_strides)

    @property
    def groups(self) -> int:
        return self.input.extent_of("G")

    @property
    def batch(self) -> int:
        return self.input.extent_of("N")

    @property
    def out_channels(self) -> int:
        return self.output.extent_of("K")

    @property
    def channels_per_group(self) -> int:
        return self.input.extent_of("C")

    @property
    def in_channels(self) -> int:
        """Total input channels C across all groups."""
        return self.groups * self.channels_per_group

    @property
    def input_spatial(self) -> tuple[int, int]:
        """(Hi, Wi)"""
        return (self.input.extent_of("H"), self.input.extent_of("W"))

    @property
    def output_spatial(self) -> tuple[int, int]:
        """(Ho, Wo)"""
        return (self.output.extent_of("H"), self.output.extent_of("W"))

    @property
    def filter_spatial(self) -> tuple[int, int]:
        """(Y, X)"""
        return (self.weight.extent_of("Y"), self.weight.extent_of("X"))

    def to_dict(self) -> dict[str, Any]:
        return {
            "input": self.input.to_dict(),
            "weight": self.weight.to_dict(),
            "output": self.output.to_dict(),
            "conv_strides": list(self.conv_strides),
            "dilations": list(self.dilations),
            "left_pads": list(self.left_pads),
            "right_pads": list(self.right_pads),
        }
