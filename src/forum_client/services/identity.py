"""Best-effort anonymous voter identity.

The voter identifier is the caller's public IP address, taken from the first
``X-Forwarded-For`` entry or the connection peer. When neither holds a usable
address the caller is keyed by a random ``user_`` token that the caller keeps
in the ``user_identifier`` cookie, so the same device keeps voting under the
same name. This is a duplicate-vote heuristic, not authentication: devices
behind one address share an identity and anyone can pick a token.
"""

from __future__ import annotations

import ipaddress
import logging
import re
import secrets
import string
from collections.abc import Mapping
from dataclasses import dataclass

from forum_client.core.settings import settings

# Configure logger for this module
logger = logging.getLogger(__name__)

USER_IDENTIFIER_KEY = "user_identifier"
FORWARDED_FOR_HEADER = "x-forwarded-for"
FALLBACK_TOKEN_PREFIX = "user_"
_TOKEN_ALPHABET = string.ascii_lowercase + string.digits
_TOKEN_LENGTH = 9
_TOKEN_PATTERN = re.compile(rf"{FALLBACK_TOKEN_PREFIX}[a-z0-9]{{{_TOKEN_LENGTH}}}")


def generate_fallback_token() -> str:
    """Return a new ``user_`` prefixed random identifier."""
    suffix = "".join(secrets.choice(_TOKEN_ALPHABET) for _ in range(_TOKEN_LENGTH))
    return f"{FALLBACK_TOKEN_PREFIX}{suffix}"


def is_fallback_token(value: str | None) -> bool:
    return bool(value) and _TOKEN_PATTERN.fullmatch(value) is not None  # type: ignore[arg-type]


def _normalise_ip(candidate: str | None) -> str | None:
    if not candidate:
        return None
    try:
        return str(ipaddress.ip_address(candidate.strip()))
    except ValueError:
        return None


@dataclass(frozen=True)
class VoterIdentity:
    """Resolved identifier, plus a token the caller must now store, if any."""

    identifier: str
    issued_token: str | None = None


class IdentityResolver:
    """Resolves the identifier used to key a caller's votes."""

    def __init__(self, *, trust_forwarded_for: bool | None = None) -> None:
        self.trust_forwarded_for = (
            settings.trust_forwarded_for if trust_forwarded_for is None else trust_forwarded_for
        )

    def client_address(self, headers: Mapping[str, str], peer: str | None) -> str | None:
        """Return the caller's IP address, or None when it cannot be determined."""
        if self.trust_forwarded_for:
            forwarded = headers.get(FORWARDED_FOR_HEADER, "")
            address = _normalise_ip(forwarded.split(",")[0])
            if address:
                return address
        return _normalise_ip(peer)

    def resolve(
        self,
        headers: Mapping[str, str],
        peer: str | None,
        cookies: Mapping[str, str],
    ) -> VoterIdentity:
        """Return the caller's voter identity. Never raises."""
        address = self.client_address(headers, peer)
        if address:
            return VoterIdentity(address)

        token = cookies.get(USER_IDENTIFIER_KEY)
        if is_fallback_token(token):
            return VoterIdentity(token)  # type: ignore[arg-type]

        token = generate_fallback_token()
        logger.info("No client address available, issuing voter token %s", token)
        return VoterIdentity(token, issued_token=token)


def get_identity_resolver() -> IdentityResolver:
    """Return a new identity resolver instance."""
    return IdentityResolver()


def resolve_voter_identity(
    headers: Mapping[str, str],
    peer: str | None,
    cookies: Mapping[str, str],
) -> VoterIdentity:
    """Resolve the voter identity with the configured resolver."""
    return get_identity_resolver().resolve(headers, peer, cookies)
