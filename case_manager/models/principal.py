"""Principal: the resolved identity a request acts as."""

from dataclasses import dataclass
from typing import Any

from case_manager.access.tenancy import normalize_tenant_id
from case_manager.core.logging_config import get_security_logger
from case_manager.models.role import Role

security_logger = get_security_logger()


@dataclass(frozen=True)
class Principal:
    """
    Immutable request identity, built once from validated token claims.

    Passed explicitly into every core call; nothing reads tenant or user
    context from ambient request state.

    Attributes:
        role: The user's role
        home_tenant: Centre as supplied by the auth collaborator (may be
            malformed; see tenant_id)
        username: Written into created_by / updated_by
    """

    role: Role
    home_tenant: Any
    username: str

    def __post_init__(self):
        if self.role == Role.APP_ADMIN and self.home_tenant is not None:
            raise ValueError("App Admin principals cannot have a home centre")

    @classmethod
    def from_claims(cls, username: str, role: Any, center_id: Any) -> "Principal":
        """
        Build a principal from token claims.

        App Admin's centre claim is discarded; App Admin has no home centre.

        Raises:
            ValueError: If the role claim is not a known role
        """
        resolved = Role.parse(role)
        home_tenant = None if resolved == Role.APP_ADMIN else center_id
        principal = cls(role=resolved, home_tenant=home_tenant, username=username)

        if principal.has_integrity_fault:
            security_logger.warning(
                "Principal %s with role %s has no valid centre; all tenant-scoped access will match nothing",
                username,
                resolved.label,
            )
        return principal

    @property
    def tenant_id(self) -> int | None:
        """Normalised home centre, or None when missing or malformed"""
        return normalize_tenant_id(self.home_tenant)

    @property
    def has_integrity_fault(self) -> bool:
        """True when a centre-bound role has no usable centre"""
        return self.role != Role.APP_ADMIN and self.tenant_id is None

    def __repr__(self) -> str:
        return f"<Principal(username='{self.username}', role={self.role.label}, tenant_id={self.tenant_id})>"
