"""Continuation token encoding and decoding.

A continuation token is the encrypted form of a plain payload describing the
last row of the previous page:

    <fingerprint>_<id>                       (sorted by id only)
    <fingerprint>_<id>_<sort field>_<value>  (custom sort)

The payload is encrypted with AES-SIV, which is deterministic: the same
secret and payload always produce the same token, with no dependency on time
or process state. Tokens therefore survive restarts and can be checked by any
instance holding the secret. The authentication tag makes any tampering,
truncation or foreign key fail decoding.

Example:
    codec = TokenCodec("s3cret")
    token = codec.encode(CursorState("9f...", "42").to_payload())
    state = CursorState.from_payload(codec.decode(token), expected_fingerprint="9f...")
"""

from __future__ import annotations

import base64
import binascii
import hashlib
from dataclasses import dataclass
from urllib.parse import unquote

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESSIV

from cursor_pagination.core.exceptions import (
    FingerprintMismatchError,
    MalformedTokenError,
    TokenError,
)
from cursor_pagination.infra.logging import get_lazy_logger

logger = get_lazy_logger(__name__)

SEPARATOR = "_"

# Binds tokens to this payload scheme; bump when the payload layout changes
_ASSOCIATED_DATA = [b"cursor-pagination:v1"]


def _escape(value: str) -> str:
    return value.replace("%", "%25").replace(SEPARATOR, "%5F")


def _unescape(value: str) -> str:
    return unquote(value)


class TokenCodec:
    """Reversible, URL-safe encryption of continuation token payloads.

    Args:
        secret: Caller-supplied secret; a 512-bit AES-SIV key is derived from it
    """

    __slots__ = ("_cipher",)

    def __init__(self, secret: str | bytes) -> None:
        if isinstance(secret, str):
            secret = secret.encode("utf-8")
        if not secret:
            msg = "Continuation token secret must not be empty"
            raise ValueError(msg)
        self._cipher = AESSIV(hashlib.sha512(secret).digest())

    def encode(self, payload: str) -> str:
        """Encrypt a plain payload into an opaque URL-safe token.

        Raises:
            TokenError: If the payload is empty
        """
        if not payload:
            msg = "Error encrypting token"
            raise TokenError(msg, details={"reason": "empty payload"})
        encrypted = self._cipher.encrypt(payload.encode("utf-8"), _ASSOCIATED_DATA)
        return base64.urlsafe_b64encode(encrypted).decode("ascii").rstrip("=")

    def decode(self, token: str) -> str:
        """Decrypt an opaque token back into its plain payload.

        Raises:
            TokenError: If the token is not valid for this codec
        """
        if not token:
            msg = "Error decrypting token"
            raise TokenError(msg, details={"reason": "empty token"})
        try:
            padded = token + "=" * (-len(token) % 4)
            raw = base64.b64decode(padded.encode("ascii"), altchars=b"-_", validate=True)
            return self._cipher.decrypt(raw, _ASSOCIATED_DATA).decode("utf-8")
        except (binascii.Error, ValueError, InvalidTag) as e:
            logger.warning("Error decrypting continuation token: %s", type(e).__name__)
            msg = "Error decrypting token"
            raise TokenError(msg) from e


@dataclass(slots=True, frozen=True)
class CursorState:
    """Decoded continuation token payload.

    All values are kept as strings here; typing them is the job of the
    field registry when the keyset query is built.

    Attributes:
        fingerprint: Fingerprint of the filter/sort the token was issued for
        last_id: String form of the last row's unique id
        sort_field: Custom sort field name, None when sorting by id only
        sort_value: String form of the last row's sort field value
    """

    fingerprint: str
    last_id: str
    sort_field: str | None = None
    sort_value: str | None = None

    @property
    def is_sorted(self) -> bool:
        """Whether the token was issued for a custom sort."""
        return self.sort_field is not None

    def to_payload(self) -> str:
        """Render the plain payload string."""
        parts = [self.fingerprint, _escape(self.last_id)]
        if self.sort_field is not None:
            parts.extend([_escape(self.sort_field), _escape(self.sort_value or "")])
        return SEPARATOR.join(parts)

    @classmethod
    def from_payload(cls, payload: str, expected_fingerprint: str) -> CursorState:
        """Parse a plain payload, checking its fingerprint first.

        Args:
            payload: Decrypted token payload
            expected_fingerprint: Fingerprint of the current filter/sort

        Raises:
            FingerprintMismatchError: Token was issued for another filter/sort
            MalformedTokenError: Payload has neither 2 nor 4 parts
        """
        params = payload.split(SEPARATOR)

        if params[0] != expected_fingerprint:
            raise FingerprintMismatchError(expected=expected_fingerprint, actual=params[0])

        if len(params) not in (2, 4):
            logger.error("Unexpected continuation token length: %d", len(params))
            msg = f"Continuation token was expected to have 2 or 4 parts, but got {len(params)}"
            raise MalformedTokenError(msg, parts=len(params))

        if len(params) == 2:
            return cls(fingerprint=params[0], last_id=_unescape(params[1]))

        return cls(
            fingerprint=params[0],
            last_id=_unescape(params[1]),
            sort_field=_unescape(params[2]),
            sort_value=_unescape(params[3]),
        )


__all__ = ["CursorState", "SEPARATOR", "TokenCodec"]
