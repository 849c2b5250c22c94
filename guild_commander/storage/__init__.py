"""Role persistence."""

from .role_store import RoleStore, SqliteRoleStore

__all__ = ["RoleStore", "SqliteRoleStore"]
