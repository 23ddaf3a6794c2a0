# Overview: Static bearer-token identity provider; maps tokens to (user_login, roles).

"""
Identity provider

Credential checking is not this service's job. Callers present a bearer
token; the provider turns it into a login and a set of roles, and the
person behind the login is looked up in our own table.

The bundled provider reads API_TOKENS from configuration:

    API_TOKENS="tok-admin=manager1:admin,tok-guest=alice:guest"

Roles are separated by "|" ("tok=bob:admin|guest").
"""

from __future__ import annotations

from dataclasses import dataclass

from flask import current_app

ROLE_ADMIN = "admin"
ROLE_GUEST = "guest"
KNOWN_ROLES = frozenset({ROLE_ADMIN, ROLE_GUEST})


class TokenTableError(ValueError):
    """API_TOKENS is malformed."""


@dataclass(frozen=True)
class Identity:
    user_login: str
    roles: frozenset

    def has_role(self, *roles: str) -> bool:
        return bool(self.roles.intersection(roles))


def parse_token_table(raw) -> dict[str, Identity]:
    """
    Parse the token table. A mapping is accepted as-is (token -> (login, roles)).

    Raises:
        TokenTableError: On an entry without a login or with an unknown role
    """
    if not raw:
        return {}

    if isinstance(raw, dict):
        entries = [(token, login, list(roles)) for token, (login, roles) in raw.items()]
    else:
        entries = []
        for chunk in raw.split(","):
            chunk = chunk.strip()
            if not chunk:
                continue
            token, sep, rest = chunk.partition("=")
            login, _, roles = rest.partition(":")
            if not sep or not token.strip() or not login.strip():
                raise TokenTableError(f"Malformed API_TOKENS entry: '{chunk}'")
            entries.append((token.strip(), login.strip(), [r.strip() for r in roles.split("|") if r.strip()]))

    table = {}
    for token, login, roles in entries:
        unknown = set(roles) - KNOWN_ROLES
        if unknown:
            raise TokenTableError(f"Unknown role(s) for '{login}': {', '.join(sorted(unknown))}")
        table[token] = Identity(user_login=login, roles=frozenset(roles))
    return table


def resolve_token(token: str) -> Identity | None:
    """Identity for a bearer token, or None when the token is unknown."""
    if not token:
        return None
    table = parse_token_table(current_app.config.get("API_TOKENS"))
    return table.get(token)
