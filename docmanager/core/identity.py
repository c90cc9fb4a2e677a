"""
Caller identity supplied by the external auth layer.

Dependencies: None (pure domain layer)
System role: Opaque caller reference stamped onto jobs
"""

import enum
import uuid
from dataclasses import dataclass


class UserRole(str, enum.Enum):
    """Roles issued by the auth layer."""

    ADMIN = "admin"
    EDITOR = "editor"
    VIEWER = "viewer"


@dataclass(frozen=True)
class CallerIdentity:
    """Authenticated caller: id and role."""

    id: uuid.UUID
    role: UserRole
