"""
Reversible obfuscation of privacy-sensitive identifiers.

Union ids, open ids and mnemonics sent in federated-binding flows must never
appear as plaintext in logs or URLs.  They are sealed with AES-256-GCM under
a key derived from the caller's credential secret:

    token = base64( nonce[12] || ciphertext || tag[16] )

This is a confidentiality measure only and never stands in for signing.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import os

from Crypto.Cipher import AES

from xasset_core.errors import InvalidInput, ObfuscationFailed

_NONCE_BYTES = 12
_TAG_BYTES = 16


class ObfuscationSecret:
    """
    Shared secret bound to the caller's credential configuration.

    Kept as its own type so it cannot be confused with an account's
    signing key.
    """

    __slots__ = ("_key",)

    def __init__(self, secret: str):
        if not isinstance(secret, str) or not secret:
            raise InvalidInput("obfuscation secret must be a non-empty string")
        self._key = hashlib.sha256(secret.encode("utf-8")).digest()

    def __repr__(self) -> str:
        return "ObfuscationSecret(***)"

    def __eq__(self, other) -> bool:
        return isinstance(other, ObfuscationSecret) and self._key == other._key

    def __hash__(self) -> int:
        return hash(self._key)


def _as_secret(secret) -> ObfuscationSecret:
    if isinstance(secret, ObfuscationSecret):
        return secret
    return ObfuscationSecret(secret)


def obscure(plaintext: str, secret: ObfuscationSecret) -> str:
    """Seal ``plaintext``. Raises ObfuscationFailed on any cipher error."""
    key = _as_secret(secret)._key
    try:
        data = plaintext.encode("utf-8")
        nonce = os.urandom(_NONCE_BYTES)
        cipher = AES.new(key, AES.MODE_GCM, nonce=nonce)
        ciphertext, tag = cipher.encrypt_and_digest(data)
    except (AttributeError, UnicodeEncodeError, ValueError) as exc:
        raise ObfuscationFailed(f"cannot obscure field: {exc}", operation="obscure") from exc
    return base64.b64encode(nonce + ciphertext + tag).decode("ascii")


def reveal(token: str, secret: ObfuscationSecret) -> str:
    """
    Open a token produced by ``obscure``.

    Fails closed: a wrong secret, truncated or tampered token raises
    ObfuscationFailed and never yields partial plaintext.
    """
    key = _as_secret(secret)._key
    try:
        raw = base64.b64decode(token, validate=True)
    except (binascii.Error, TypeError, ValueError) as exc:
        raise ObfuscationFailed("token is not valid base64", operation="reveal") from exc
    if len(raw) < _NONCE_BYTES + _TAG_BYTES:
        raise ObfuscationFailed("token too short", operation="reveal")
    nonce, body, tag = raw[:_NONCE_BYTES], raw[_NONCE_BYTES:-_TAG_BYTES], raw[-_TAG_BYTES:]
    try:
        cipher = AES.new(key, AES.MODE_GCM, nonce=nonce)
        data = cipher.decrypt_and_verify(body, tag)
        return data.decode("utf-8")
    except (ValueError, UnicodeDecodeError) as exc:
        raise ObfuscationFailed("token authentication failed", operation="reveal") from exc


class FieldObfuscator:
    """Obscure/reveal bound to one credential secret."""

    def __init__(self, secret: ObfuscationSecret):
        self._secret = _as_secret(secret)

    def obscure(self, plaintext: str) -> str:
        return obscure(plaintext, self._secret)

    def reveal(self, token: str) -> str:
        return reveal(token, self._secret)

    def obscure_fields(self, fields: dict[str, str]) -> dict[str, str]:
        """Obscure every value of ``fields``; all or nothing."""
        return {name: self.obscure(value) for name, value in fields.items()}

    def __repr__(self) -> str:
        return "FieldObfuscator(***)"
