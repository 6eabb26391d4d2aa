"""Caller roles and the confidentiality capability shared by every read path."""
from enum import Enum
from typing import FrozenSet, Protocol

from pydantic import BaseModel, Field

from sentinela.core.exceptions import ConfidentialAccessError


class UserRole(str, Enum):
    """Roles assigned to system users."""
    ADMIN_GERAL = "admin_geral"
    PONTO_FOCAL = "ponto_focal"
    GESTOR = "gestor"
    USUARIO = "usuario"


PRIVILEGED_ROLES: FrozenSet[UserRole] = frozenset(
    {UserRole.ADMIN_GERAL, UserRole.GESTOR, UserRole.PONTO_FOCAL}
)


class CallerContext(BaseModel):
    """Authenticated caller as supplied by the authentication layer."""
    user_id: int = Field(..., description="Identifier of the calling user", ge=1)
    role: UserRole = Field(..., description="Role of the calling user")

    model_config = {"frozen": True}


class _ConfidentialRecord(Protocol):
    id: int
    is_confidential: bool


def can_view_confidential(role: UserRole) -> bool:
    """Whether a role may see confidential people and their media."""
    return role in PRIVILEGED_ROLES


def ensure_can_view(record: _ConfidentialRecord, caller: CallerContext) -> None:
    """Single-record access check for confidential people.

    Args:
        record: Person (or anything carrying ``id`` and ``is_confidential``)
        caller: Caller requesting the record

    Raises:
        ConfidentialAccessError: If the record is confidential and the caller's
            role is not privileged
    """
    if not record.is_confidential:
        return
    if not can_view_confidential(caller.role):
        raise ConfidentialAccessError(
            "You do not have permission to access this confidential record",
            details={"record_id": record.id, "role": caller.role.value},
        )
