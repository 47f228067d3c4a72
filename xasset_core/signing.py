"""
Request signing for the XAsset client.

Every authenticated operation signs a message formed by concatenating the
operation's numeric fields and a freshly issued nonce, in a fixed,
operation-specific order.  That order is part of the wire contract: the
``SIGN_FIELDS`` registry is append-only.

Signatures are hex-encoded DER ECDSA (P-256) over SHA-256 of the message.
Nonces are fresh per call; replay rejection belongs to the remote verifier.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from types import MappingProxyType

from ecdsa import BadSignatureError
from ecdsa.der import UnexpectedDER
from ecdsa.util import sigdecode_der, sigencode_der

from xasset_core.account import Account
from xasset_core.crypto_utils import (
    derive_address,
    generate_nonce,
    load_private_key,
    load_public_key,
)
from xasset_core.errors import InvalidInput, SignatureFailed

# operation -> ordered numeric fields preceding the nonce
SIGN_FIELDS = MappingProxyType({
    "get_stoken": (),
    "create_asset": ("asset_id",),
    "alter_asset": ("asset_id",),
    "publish_asset": ("asset_id",),
    "freeze_asset": ("asset_id",),
    "grant_asset": ("asset_id",),
    "transfer_asset": ("asset_id",),
    "consume_shard": ("asset_id",),
    "lock_shard": ("asset_id",),
    "freeze_shard": ("asset_id",),
    "unfreeze_shard": ("asset_id",),
    "compose_consume": ("asset_id",),
    "compose_grant": ("asset_id",),
    "grant_box_consume": ("box_asset_id",),
    "grant_box_grant": ("real_asset_id",),
})


@dataclass(frozen=True)
class SignedMessage:
    """A detached signature plus the nonce it consumed."""
    operation: str
    address: str
    public_key: str
    signature: str
    nonce: int

    def form_fields(self, prefix: str = "", nonce_key: str = "nonce") -> dict[str, str]:
        """``addr`` / ``sign`` / ``pkey`` / ``nonce`` form entries."""
        return {
            f"{prefix}addr": self.address,
            f"{prefix}sign": self.signature,
            f"{prefix}pkey": self.public_key,
            nonce_key: str(self.nonce),
        }


def build_message(*fields: int, nonce: int) -> bytes:
    """Decimal concatenation of ``fields`` followed by ``nonce``."""
    parts = []
    for value in (*fields, nonce):
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidInput(f"signing fields must be integers, got {value!r}")
        parts.append(f"{value:d}")
    return "".join(parts).encode("ascii")


def message_for(operation: str, nonce: int, **fields: int) -> bytes:
    """Build ``operation``'s canonical signing message."""
    try:
        order = SIGN_FIELDS[operation]
    except KeyError:
        raise InvalidInput(f"no signing layout for {operation!r}", operation=operation) from None
    missing = [name for name in order if name not in fields]
    if missing:
        raise InvalidInput(
            f"missing signing fields: {', '.join(missing)}", operation=operation,
        )
    try:
        return build_message(*(fields[name] for name in order), nonce=nonce)
    except InvalidInput as exc:
        exc.operation = operation
        raise


def sign(private_key: str, message: bytes, operation: str = "sign") -> str:
    """
    Sign ``message`` with a JSON-encoded private key.

    Raises SignatureFailed on a malformed key or primitive error.
    """
    try:
        sk = load_private_key(private_key)
    except ValueError as exc:
        raise SignatureFailed(f"malformed signing key: {exc}", operation=operation) from exc
    try:
        sig = sk.sign_deterministic(message, hashfunc=hashlib.sha256, sigencode=sigencode_der)
    except (ValueError, ArithmeticError) as exc:
        raise SignatureFailed(f"signature primitive failed: {exc}", operation=operation) from exc
    return sig.hex()


def verify(public_key: str, message: bytes, signature: str) -> bool:
    try:
        vk = load_public_key(public_key)
        return vk.verify(
            bytes.fromhex(signature), message,
            hashfunc=hashlib.sha256, sigdecode=sigdecode_der,
        )
    except (TypeError, ValueError, BadSignatureError, UnexpectedDER):
        return False


def check_signing_key(account: Account, operation: str = "sign") -> None:
    """
    Raise SignatureFailed unless ``account`` holds a usable key whose
    public key and address match the account's own fields.
    """
    try:
        sk = load_private_key(account.private_key)
    except (TypeError, ValueError) as exc:
        raise SignatureFailed(f"malformed signing key: {exc}", operation=operation) from exc
    vk = sk.get_verifying_key()
    try:
        declared = load_public_key(account.public_key)
    except (TypeError, ValueError) as exc:
        raise SignatureFailed(f"malformed public key: {exc}", operation=operation) from exc
    if declared.to_string() != vk.to_string():
        raise SignatureFailed("public key does not match the signing key", operation=operation)
    if account.address != derive_address(vk):
        raise SignatureFailed("address does not match the signing key", operation=operation)


def sign_operation(account: Account, operation: str, **fields: int) -> SignedMessage:
    """Issue a fresh nonce and sign ``operation``'s canonical message."""
    check_signing_key(account, operation=operation)
    nonce = generate_nonce()
    message = message_for(operation, nonce, **fields)
    signature = sign(account.private_key, message, operation=operation)
    return SignedMessage(
        operation=operation,
        address=account.address,
        public_key=account.public_key,
        signature=signature,
        nonce=nonce,
    )
