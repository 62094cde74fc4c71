"""Registry credentials."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

import docker

from .errors import AuthEncodeError


@dataclass(frozen=True)
class AuthConfig:
    """Credentials sent to the registry with every push.

    Field names on the wire follow the engine's auth structure
    (`serveraddress` rather than `server_address`).
    """

    username: str = ""
    password: str = ""
    email: str = ""
    auth: str = ""
    server_address: str = ""

    def as_dict(self) -> Dict[str, str]:
        fields = {
            "username": self.username,
            "password": self.password,
            "email": self.email,
            "auth": self.auth,
            "serveraddress": self.server_address,
        }
        return {k: v for k, v in fields.items() if v}

    def value(self) -> str:
        """Return the URL-safe base64 JSON used as the X-Registry-Auth header."""
        try:
            return docker.auth.encode_header(self.as_dict()).decode("ascii")
        except (TypeError, ValueError) as e:
            raise AuthEncodeError(f"Failed to encode registry credentials: {e}") from e

    def has_credentials(self) -> bool:
        return bool(self.username and self.password)


def new_auth_config(username: str, password: str, email: str, auth: str, registry: str) -> AuthConfig:
    return AuthConfig(username=username, password=password, email=email, auth=auth, server_address=registry)
