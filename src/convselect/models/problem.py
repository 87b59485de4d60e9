"""
convselect Problem Descriptor

Immutable description of one convolution problem instance: shapes,
element types, declared layout and direction. Output extents are taken
as given and assumed consistent with the input, filter, stride, dilation
and padding (see from_nchw() to derive them).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import torch

from convselect.dtypes import dtype_to_str, str_to_dtype
from convselect.enums import Direction, TensorLayout
from convselect.exceptions import InvalidProblemError

_POSITIVE_FIELDS = (
    "groups",
    "batch",
    "in_channels",
    "out_channels",
    "in_height",
    "in_width",
    "out_height",
    "out_width",
    "filter_height",
    "filter_width",
)


def _pair(value: int | tuple[int, int]) -> tuple[int, int]:
    if isinstance(value, int):
        return (value, value)
    return (int(value[0]), int(value[1]))


def conv_output_size(
    size: int,
    filter_size: int,
    stride: int,
    dilation: int,
    pad: int,
    pad_right: int | None = None,
) -> int:
    """Standard convolution output extent along one axis."""
    if pad_right is None:
        pad_right = pad
    return (size + pad + pad_right - dilation * (filter_size - 1) - 1) // stride + 1


@dataclass(frozen=True, slots=True)
class ProblemDescriptor:
    """Convolution problem descriptor.

    Immutable (frozen) for hashability and thread safety.

    Attributes:
        groups: Group count G
        batch: Batch size N
        in_channels: Total input channels C (across all groups)
        out_channels: Output channels K
        in_height, in_width: Input spatial extents (Hi, Wi)
        out_height, out_width: Output spatial extents (Ho, Wo)
        filter_height, filter_width: Filter extents (Y, X)
        conv_stride: Convolution stride per spatial axis (h, w)
        dilation: Filter dilation per spatial axis (h, w)
        pad_left: Leading padding per spatial axis (h, w)
        pad_right: Trailing padding per spatial axis; defaults to pad_left
        in_dtype: Input element type
        weight_dtype: Weight element type; defaults to in_dtype
        out_dtype: Output element type; defaults to in_dtype
        layout: Declared source layout of the activations
        direction: Convolution direction
        spatial_dims: Number of spatial dimensions
    """

    groups: int
    batch: int
    in_channels: int
    out_channels: int
    in_height: int
    in_width: int
    out_height: int
    out_width: int
    filter_height: int
    filter_width: int
    conv_stride: tuple[int, int] = (1, 1)
    dilation: tuple[int, int] = (1, 1)
    pad_left: tuple[int, int] = (0, 0)
    pad_right: tuple[int, int] | None = None
    in_dtype: torch.dtype = torch.int8
    weight_dtype: torch.dtype | None = None
    out_dtype: torch.dtype | None = None
    layout: TensorLayout = TensorLayout.NHWC
    direction: Direction = Direction.FORWARD
    spatial_dims: int = 2

    def __post_init__(self) -> None:
        for name in _POSITIVE_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise InvalidProblemError(name, value)

        if self.in_channels % self.groups != 0:
            raise InvalidProblemError(
                "in_channels",
                self.in_channels,
                message=(
                    f"in_channels {self.in_channels} is not divisible "
                    f"by groups {self.groups}"
                ),
            )

        object.__setattr__(self, "conv_stride", _pair(self.conv_stride))
        object.__setattr__(self, "dilation", _pair(self.dilation))
        object.__setattr__(self, "pad_left", _pair(self.pad_left))
        if self.pad_right is None:
            object.__setattr__(self, "pad_right", self.pad_left)
        else:
            object.__setattr__(self, "pad_right", _pair(self.pad_right))
        if self.weight_dtype is None:
            object.__setattr__(self, "weight_dtype", self.in_dtype)
        if self.out_dtype is None:
            object.__setattr__(self, "out_dtype", self.in_dtype)

        for name in ("conv_stride", "dilation"):
            if any(v <= 0 for v in getattr(self, name)):
                raise InvalidProblemError(name, getattr(self, name))
        for name in ("pad_left", "pad_right"):
            if any(v < 0 for v in getattr(self, name)):
                raise InvalidProblemError(name, getattr(self, name))

    @classmethod
    def from_nchw(
        cls,
        input_shape: tuple[int, int, int, int],
        weight_shape: tuple[int, int, int, int],
        *,
        groups: int = 1,
        conv_stride: int | tuple[int, int] = 1,
        dilation: int | tuple[int, int] = 1,
        padding: int | tuple[int, int] = 0,
        pad_right: int | tuple[int, int] | None = None,
        dtype: torch.dtype = torch.int8,
        layout: TensorLayout = TensorLayout.NHWC,
        direction: Direction = Direction.FORWARD,
    ) -> ProblemDescriptor:
        """Build a descriptor from classic (N, C, H, W) / (K, C/G, Y, X) shapes.

        Output extents are derived with the standard convolution formula.

        Args:
            input_shape: (N, C, Hi, Wi) regardless of the declared layout.
            weight_shape: (K, C/G, Y, X).
            groups: Group count.
            conv_stride: Stride per spatial axis.
            dilation: Dilation per spatial axis.
            padding: Leading (and by default trailing) padding per axis.
            pad_right: Trailing padding when it differs from padding.
            dtype: Element type for input, weight and output.
            layout: Declared activation layout.
            direction: Convolution direction.

        Returns:
            New ProblemDescriptor.
        """
        n, c, hi, wi = input_shape
        k, _, y, x = weight_shape
        stride = _pair(conv_stride)
        dil = _pair(dilation)
        left = _pair(padding)
        right = left if pad_right is None else _pair(pad_right)

        return cls(
            groups=groups,
            batch=n,
            in_channels=c,
            out_channels=k,
            in_height=hi,
            in_width=wi,
            out_height=conv_output_size(hi, y, stride[0], dil[0], left[0], right[0]),
            out_width=conv_output_size(wi, x, stride[1], dil[1], left[1], right[1]),
            filter_height=y,
            filter_width=x,
            conv_stride=stride,
            dilation=dil,
            pad_left=left,
            pad_right=right,
            in_dtype=dtype,
            layout=layout,
            direction=direction,
        )

    @property
    def dtype(self) -> torch.dtype:
        """Element type of the input tensor."""
        return self.in_dtype

    @property
    def channels_per_group(self) -> int:
        """Input channels seen by each group (C / G)."""
        return self.in_channels // self.groups

    @property
    def is_2d(self) -> bool:
        return self.spatial_dims == 2

    @property
    def has_uniform_dtype(self) -> bool:
        """Whether input, weight and output share one element type."""
        return self.in_dtype == self.weight_dtype == self.out_dtype

    def summary(self) -> str:
        """Compact one-line description for logs and error contexts."""
        return (
            f"{self.direction.value} {self.layout.value} "
            f"G{self.groups} N{self.batch} C{self.in_channels} K{self.out_channels} "
            f"{self.in_height}x{self.in_width}->{self.out_height}x{self.out_width} "
            f"f{self.filter_height}x{self.filter_width} "
            f"s{self.conv_stride[0]}x{self.conv_stride[1]} "
            f"d{self.dilation[0]}x{self.dilation[1]} "
            f"p{self.pad_left[0]}x{self.pad_left[1]}/{self.pad_right[0]}x{self.pad_right[1]} "
            f"{dtype_to_str(self.in_dtype)}"
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON compatibility."""
        return {
            "groups": self.groups,
            "batch": self.batch,
            "in_channels": self.in_channels,
            "out_channels": self.out_channels,
            "in_height": self.in_height,
            "in_width": self.in_width,
            "out_height": self.out_height,
            "out_width": self.out_width,
            "filter_height": self.filter_height,
            "filter_width": self.filter_width,
            "conv_stride": list(self.conv_stride),
            "dilation": list(self.dilation),
            "pad_left": list(self.pad_left),
            "pad_right": list(self.pad_right),
            "in_dtype": dtype_to_str(self.in_dtype),
            "weight_dtype": dtype_to_str(self.weight_dtype),
            "out_dtype": dtype_to_str(self.out_dtype),
            "layout": self.layout.value,
            "direction": self.direction.value,
            "spatial_dims": self.spatial_dims,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> ProblemDescriptor:
        """Deserialize from dictionary.

        Args:
            d: Dict produced by to_dict().

        Returns:
            New ProblemDescriptor instance.
        """
        return cls(
            groups=d["groups"],
            batch=d["batch"],
            in_channels=d["in_channels"],
            out_channels=d["out_channels"],
            in_height=d["in_height"],
            in_width=d["in_width"],
            out_height=d["out_height"],
            out_width=d["out_width"],
            filter_height=d["filter_height"],
            filter_width=d["filter_width"],
            conv_stride=tuple(d["conv_stride"]),
            dilation=tuple(d["dilation"]),
            pad_left=tuple(d["pad_left"]),
            pad_right=tuple(d["pad_right"]),
            in_dtype=str_to_dtype(d["in_dtype"]),
            weight_dtype=str_to_dtype(d["weight_dtype"]),
            out_dtype=str_to_dtype(d["out_dtype"]),
            layout=TensorLayout(d["layout"]),
            direction=Direction(d["direction"]),
            spatial_dims=d.get("spatial_dims", 2),
        )
