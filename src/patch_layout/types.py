"""Shared type definitions for patch-layout.

Enums and small geometry types used across the input model, the layout
pipeline, and the output views. Enum values are the wire strings used in
JSON documents.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in world coordinates."""

    x: float
    y: float
    width: float
    height: float

    def contains(self, x: float, y: float, margin: float = 0) -> bool:
        return (
            self.x - margin <= x <= self.x + self.width + margin
            and self.y - margin <= y <= self.y + self.height + margin
        )

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


class Role(Enum):
    Time = "time"
    Identity = "identity"
    State = "state"
    Operator = "operator"
    Render = "render"
    Io = "io"


class DensityMode(Enum):
    Overview = "overview"
    Normal = "normal"
    Detail = "detail"

    @classmethod
    def default(cls) -> DensityMode:
        return cls.Normal


class PortDirection(Enum):
    Input = "input"
    Output = "output"


class BusDirection(Enum):
    Publish = "publish"
    Subscribe = "subscribe"


class OverflowReason(Enum):
    TooLong = "tooLong"
    DensityCollapsed = "densityCollapsed"
    Culled = "culled"


class ConnectorStyle(Enum):
    Straight = "straight"
    Elbow = "elbow"
    Curve = "curve"


class MetaNodeKind(Enum):
    Single = "single"  # one block
    Scc = "scc"  # collapsed cycle
