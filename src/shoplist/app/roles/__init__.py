"""Role lookups and role routes."""

from .resolver import RoleResolver

__all__ = ["RoleResolver"]
