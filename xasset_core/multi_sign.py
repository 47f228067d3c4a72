"""
Multi-party signing for the XAsset client.

Operations that move an asset between two accounts (e.g. granting a box
asset) need independent signatures from each party, each over its own
message with its own nonce, composed into one request.

Composition is all-or-nothing: every signer's key is checked before any
signature is produced, and any failure aborts the whole composition.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from xasset_core.account import Account
from xasset_core.errors import SignatureFailed
from xasset_core.signing import SignedMessage, check_signing_key, sign_operation


@dataclass
class SignerEntry:
    """One party in a multi-signed request."""
    role: str              # e.g. "user", "create"
    account: Account
    operation: str         # key into SIGN_FIELDS
    fields: dict[str, int] = field(default_factory=dict)
    form_prefix: str = ""  # prefix for addr/sign/pkey form keys
    nonce_key: str = "nonce"


@dataclass
class MultiSignature:
    """Ordered signatures produced by ``compose``."""
    entries: list[SignerEntry]
    signatures: list[SignedMessage]

    def by_role(self, role: str) -> SignedMessage:
        for entry, sig in zip(self.entries, self.signatures):
            if entry.role == role:
                return sig
        raise KeyError(role)

    def form_fields(self) -> dict[str, str]:
        out: dict[str, str] = {}
        for entry, sig in zip(self.entries, self.signatures):
            out.update(sig.form_fields(prefix=entry.form_prefix, nonce_key=entry.nonce_key))
        return out


def compose(entries: list[SignerEntry], operation: str = "multi_sign") -> MultiSignature:
    """
    Sign every entry or none of them.

    Raises SignatureFailed naming the offending role; no partial
    MultiSignature is ever returned.
    """
    if not entries:
        raise SignatureFailed("no signers supplied", operation=operation)
    roles = [e.role for e in entries]
    if len(roles) != len(set(roles)):
        raise SignatureFailed("duplicate signer roles", operation=operation)

    for entry in entries:
        try:
            check_signing_key(entry.account, operation=entry.operation)
        except SignatureFailed as exc:
            raise SignatureFailed(
                f"signer {entry.role!r} has an invalid key: {exc.message}",
                operation=operation,
            ) from exc

    signatures = []
    for entry in entries:
        try:
            signatures.append(sign_operation(entry.account, entry.operation, **entry.fields))
        except SignatureFailed as exc:
            raise SignatureFailed(
                f"signer {entry.role!r} failed: {exc.message}", operation=operation,
            ) from exc
    return MultiSignature(entries=list(entries), signatures=signatures)
