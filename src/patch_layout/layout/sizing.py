"""Block sizing: a fixed lookup per density mode."""

from __future__ import annotations

from patch_layout.config import BlockSize, LayoutConfig
from patch_layout.ir.graph import LayoutBlockData
from patch_layout.types import DensityMode


def measure_block(block: LayoutBlockData, density: DensityMode, config: LayoutConfig) -> BlockSize:
    """Size of ``block`` at ``density``. All blocks share one size per density."""
    return config.block_sizes[density]
