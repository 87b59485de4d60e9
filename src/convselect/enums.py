"""
convselect Core Enumerations

Type-safe enums for convolution direction and tensor layout.
All enums inherit from (str, Enum) for JSON serialization compatibility.

This module provides:
- Direction: Convolution direction (forward, backward-data, backward-weight)
- TensorLayout: Declared source memory layout (channel-last, channel-first)
"""
from __future__ import annotations

from enum import Enum, unique


@unique
class Direction(str, Enum):
    """Convolution direction.

    Members:
        FORWARD: y = conv(x, w)
        BACKWARD_DATA: dx from dy and w
        BACKWARD_WEIGHT: dw from dy and x
    """

    FORWARD = "fwd"
    BACKWARD_DATA = "bwd"
    BACKWARD_WEIGHT = "wrw"

    @property
    def is_forward(self) -> bool:
        """Whether this is the forward direction."""
        return self is Direction.FORWARD


@unique
class TensorLayout(str, Enum):
    """Declared source layout of the activation tensors.

    Members:
        NHWC: Channel-last (batch, height, width, channel)
        NCHW: Channel-first (batch, channel, height, width)
    """

    NHWC = "NHWC"
    NCHW = "NCHW"

    @property
    def is_channel_last(self) -> bool:
        """Whether the channel axis is innermost."""
        return self is TensorLayout.NHWC
