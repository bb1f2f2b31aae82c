"""Role -> column policy."""

from __future__ import annotations

from patch_layout.config import LayoutConfig
from patch_layout.types import Role


def role_to_column(role: Role, config: LayoutConfig) -> int:
    return config.role_columns[role]


def column_to_roles(column: int, config: LayoutConfig) -> list[Role]:
    """Roles placed in a column, in role-priority order."""
    roles = [role for role, col in config.role_columns.items() if col == column]
    return sorted(roles, key=lambda r: (config.role_priority[r], r.value))
