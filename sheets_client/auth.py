"""Credential provider contract.

The identity provider lives outside this package; the client only needs a
current bearer token and a hook to refresh it before each request.
"""

import os
from typing import Protocol


class TokenProvider(Protocol):
    def get_access_token(self) -> str | None: ...

    async def refresh_if_needed(self) -> None: ...

    def sign_out(self) -> None: ...


class StaticTokenProvider:
    """Fixed token, e.g. handed over by an external OAuth flow via the environment."""

    def __init__(self, token: str | None = None):
        self._token = token

    @classmethod
    def from_env(cls, var: str = "ELECTION_ACCESS_TOKEN") -> "StaticTokenProvider":
        return cls(os.getenv(var) or None)

    def get_access_token(self) -> str | None:
        return self._token

    async def refresh_if_needed(self) -> None:
        return None

    def sign_out(self) -> None:
        self._token = None
