"""User roles and their privilege ranking."""

from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """
    Closed set of account roles.

    Declaration order carries no meaning; privilege comparisons go through
    ``rank`` (backed by ``_ROLE_RANKS``) so reordering members cannot change
    who outranks whom.
    """

    SUPER_ADMIN = "SuperAdmin"
    ADMIN = "Admin"
    MANAGER = "Manager"
    USER = "User"

    @property
    def rank(self) -> int:
        return _ROLE_RANKS[self]

    def outranks(self, other: Role) -> bool:
        return self.rank > other.rank

    def at_least(self, other: Role) -> bool:
        return self.rank >= other.rank

    @classmethod
    def parse(cls, value: str | int | Role) -> Role:
        """
        Accept a role value ("Admin"), a member name ("ADMIN", "super_admin"),
        or a legacy integer code (1 = SuperAdmin ... 4 = User).

        Raises ValueError for anything else.
        """

        if isinstance(value, Role):
            return value

        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return _LEGACY_CODES[value]
            except KeyError:
                raise ValueError(f"Unknown role code: {value!r}") from None

        text = str(value).strip()
        if text.isdigit():
            return cls.parse(int(text))

        for role in cls:
            if text == role.value or text.upper() == role.name or text.lower() == role.value.lower():
                return role
        raise ValueError(f"Unknown role: {value!r}")


_ROLE_RANKS: dict[Role, int] = {
    Role.SUPER_ADMIN: 4,
    Role.ADMIN: 3,
    Role.MANAGER: 2,
    Role.USER: 1,
}

_LEGACY_CODES: dict[int, Role] = {
    1: Role.SUPER_ADMIN,
    2: Role.ADMIN,
    3: Role.MANAGER,
    4: Role.USER,
}
