"""Gateway token authentication."""

from __future__ import annotations

from collections.abc import MutableMapping
from dataclasses import dataclass

from .base import AuthStrategy


@dataclass(slots=True)
class TokenAuth(AuthStrategy):
    """Send an already issued gateway token as the Basic auth password.

    The gateway ignores the user name on token-authenticated calls, so it
    defaults to an empty string.
    """

    token: str
    username: str = ""

    def apply(self, headers: MutableMapping[str, str]) -> None:
        from requests.auth import _basic_auth_str

        headers["Authorization"] = _basic_auth_str(self.username, self.token)

    def update_token(self, token: str) -> None:
        self.token = token
