# svue_api/schemas/auth.py
from __future__ import annotations

from pydantic import BaseModel, field_serializer


class AuthToken(BaseModel):
    """
    Everything needed to talk to StudentVue on behalf of one user.

    Only ever leaves the process encrypted (see ``svue_api.utils.token_crypto``).
    """

    username: str
    password: str
    cookie: str | None = None
    # epoch milliseconds; past this the token is refused
    expiry: int
    district_url: str

    def is_empty(self) -> bool:
        return not self.username or not self.password

    @field_serializer("expiry")
    def _expiry_as_string(self, value: int) -> str:
        return str(value)

    def __repr__(self) -> str:
        return f"AuthToken(username={self.username!r}, district_url={self.district_url!r}, expiry={self.expiry})"

    __str__ = __repr__
