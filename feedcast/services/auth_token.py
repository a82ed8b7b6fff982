"""Auth token codec.

Tokens are the base64 encoding of ``"<userId>:<username>:<issuedAtMillis>"``.
They are issued by the login flow and sent by clients over the realtime
socket as ``{"type": "auth", "token": ...}`` so the room can tag the
connection with a user id.

Provides:
- ``encode_token(user_id, username, issued_at_ms)``
- ``decode_token(token)``: raises ``AuthDecodeError`` on malformed input.
"""

from __future__ import annotations

import base64
import binascii
import time
from dataclasses import dataclass

from feedcast.exceptions import AuthDecodeError


@dataclass(frozen=True)
class AuthToken:
    """Decoded token fields."""

    user_id: str
    username: str
    issued_at_ms: int | None


def encode_token(user_id: str | int, username: str, issued_at_ms: int | None = None) -> str:
    """Build a token for *user_id* / *username*, stamped with the current time by default."""
    if issued_at_ms is None:
        issued_at_ms = int(time.time() * 1000)
    raw = f"{user_id}:{username}:{issued_at_ms}"
    return base64.b64encode(raw.encode("utf-8")).decode("ascii")


def decode_token(token: str) -> AuthToken:
    """Decode *token* into its user id, username and issue time.

    The first field is the user id and the last is the issue timestamp, so
    usernames containing ``:`` survive a round trip. A token carrying only a
    user id is accepted with an empty username and no timestamp.
    """
    if not isinstance(token, str) or not token:
        raise AuthDecodeError("Token must be a non-empty string")

    # Embedded whitespace and missing padding are accepted.
    compact = "".join(token.split())
    if not compact:
        raise AuthDecodeError("Token must be a non-empty string")
    compact += "=" * (-len(compact) % 4)

    try:
        raw = base64.b64decode(compact, validate=True).decode("utf-8")
    except (binascii.Error, ValueError) as exc:
        raise AuthDecodeError(f"Token is not valid base64 text: {exc}") from exc

    parts = raw.split(":")
    user_id = parts[0].strip()
    if not user_id:
        raise AuthDecodeError("Token carries no user id")

    if len(parts) == 1:
        return AuthToken(user_id=user_id, username="", issued_at_ms=None)
    if len(parts) == 2:
        return AuthToken(user_id=user_id, username=parts[1], issued_at_ms=None)

    issued_raw = parts[-1]
    try:
        issued_at_ms = int(issued_raw)
    except ValueError as exc:
        raise AuthDecodeError(f"Token issue time {issued_raw!r} is not an integer") from exc

    return AuthToken(user_id=user_id, username=":".join(parts[1:-1]), issued_at_ms=issued_at_ms)
