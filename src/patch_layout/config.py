"""Centralized configuration for patch-layout.

Every constant and fixed table the layout core reads lives on
:class:`LayoutConfig`, which is passed into ``compute_layout`` explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from patch_layout.types import DensityMode, Role


@dataclass(frozen=True)
class BlockSize:
    """Fixed block size for one density mode."""

    w: int
    h: int
    ports_visible: bool


def _default_role_columns() -> dict[Role, int]:
    return {
        Role.Time: 0,
        Role.Identity: 0,
        Role.Io: 0,
        Role.State: 1,
        Role.Operator: 1,
        Role.Render: 2,
    }


def _default_role_priority() -> dict[Role, int]:
    return {
        Role.Time: 0,
        Role.Identity: 1,
        Role.Io: 2,
        Role.State: 3,
        Role.Operator: 4,
        Role.Render: 5,
    }


def _default_block_sizes() -> dict[DensityMode, BlockSize]:
    return {
        DensityMode.Overview: BlockSize(w=260, h=36, ports_visible=False),
        DensityMode.Normal: BlockSize(w=300, h=56, ports_visible=True),
        DensityMode.Detail: BlockSize(w=340, h=96, ports_visible=True),
    }


@dataclass
class LayoutConfig:
    """Configuration for the layout pipeline."""

    # Connectors
    lmax: float = 220
    top_padding: int = 28
    port_row_height: int = 18
    port_rail_offset: int = 8
    cull_margin: float = 100

    # Grid
    col_gap: int = 40
    v_gap: int = 12
    cluster_gap: int = 24

    # Proximity
    y_snap: float = 48
    move_budget_per_pass: int = 20
    max_proximity_iterations: int = 3
    min_improvement_epsilon: float = 10

    # Fixed tables
    role_columns: dict[Role, int] = field(default_factory=_default_role_columns)
    role_priority: dict[Role, int] = field(default_factory=_default_role_priority)
    block_sizes: dict[DensityMode, BlockSize] = field(default_factory=_default_block_sizes)
