"""Role change request services."""

from .repository import RoleChangeRequestRepository
from .workflow import RoleChangeWorkflow, build_resolution_message

__all__ = [
    "RoleChangeRequestRepository",
    "RoleChangeWorkflow",
    "build_resolution_message",
]
