"""Role enum for role-based access control."""

from enum import Enum as PyEnum


class Role(int, PyEnum):
    """
    User roles, keyed by the numeric user_type carried in tokens and on
    employee records.

    Roles:
    1. APP_ADMIN - Global access to every centre; has no home centre
    2. HQ - All modules except centre management, within its own centre
    3. ORG_ADMIN - Full CRUD within own centre; sees only centre-level staff
    4. ORG_EXECUTIVE - Read-only within own centre, except the file manager
    5. CASEWORKER - Applicants and file manager within own centre

    The numbers are identifiers, not a ranking. What a role may do is looked
    up in the capability table, never derived from the code.
    """

    APP_ADMIN = 1
    HQ = 2
    ORG_ADMIN = 3
    ORG_EXECUTIVE = 4
    CASEWORKER = 5

    @property
    def label(self) -> str:
        if self is Role.HQ:
            return "HQ"
        return self.name.replace("_", " ").title()

    @classmethod
    def parse(cls, value) -> "Role":
        """
        Resolve a role from a token claim (int or numeric string).

        Raises:
            ValueError: If the value is not a known role code
        """
        if isinstance(value, bool):
            raise ValueError(f"Invalid role: {value!r}")
        try:
            return cls(int(str(value).strip()))
        except (TypeError, ValueError):
            raise ValueError(f"Invalid role: {value!r}")
