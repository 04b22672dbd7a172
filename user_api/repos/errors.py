from __future__ import annotations

EMAIL_CONSTRAINT = "email"
ROLE_CONSTRAINT = "role"


class StoreIntegrityError(Exception):
    """A store refused a write because it would break a declared constraint.

    ``constraint`` names what tripped: EMAIL_CONSTRAINT for the unique
    email, ROLE_CONSTRAINT for a reference to a role the store does not
    hold, or the raw constraint text when the driver reports something else.
    """

    def __init__(self, constraint: str, detail: str = "") -> None:
        self.constraint = constraint
        self.detail = detail
        super().__init__(f"integrity violation on {constraint}: {detail}".rstrip(": "))
