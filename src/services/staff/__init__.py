"""Staff directory services."""

from .service import StaffService

__all__ = ["StaffService"]
