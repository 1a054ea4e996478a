"""
Decode bearer credentials into claims without contacting the network.

The server signs credentials as HS256 JWTs carrying a `user_id` claim and a
registered `exp` claim. The client never holds the signing secret, so it only
reads the payload; trust comes from the server rejecting forged tokens.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict

import jwt

from ballknowledge.auth.errors import MalformedCredential


@dataclass(frozen=True)
class Claims:
    """Decoded claims of a credential."""

    subject: str
    expires_at: float  # epoch seconds, fractional NumericDates kept as given
    raw: Dict[str, Any] = field(default_factory=dict, compare=False)


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def decode(credential: str) -> Claims:
    """
    Parse the claims embedded in a credential.

    Raises
    ------
    MalformedCredential
        If the credential is not a string, is not a JWT, or lacks a subject
        or a numeric expiry.
    """
    if not isinstance(credential, str) or not credential:
        raise MalformedCredential("Credential must be a non-empty string")

    try:
        payload = jwt.decode(
            credential,
            options={
                "verify_signature": False,
                "verify_exp": False,
                "verify_iat": False,
                "verify_nbf": False,
                "verify_aud": False,
                "verify_iss": False,
            },
        )
    except jwt.PyJWTError as exc:
        raise MalformedCredential(f"Cannot decode credential: {exc}") from exc

    subject = payload.get("user_id") or payload.get("sub")
    if not subject:
        raise MalformedCredential("Credential has no subject claim")

    exp = payload.get("exp")
    # bool is an int subclass; a boolean expiry is not a timestamp
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        raise MalformedCredential("Credential has no numeric 'exp' claim")

    return Claims(subject=str(subject), expires_at=exp, raw=payload)


def is_expired(claims: Claims, now: int) -> bool:
    """True iff the credential expires at or before `now` (epoch ms)."""
    return claims.expires_at * 1000 <= now
