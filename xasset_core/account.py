"""
Account value for the XAsset client.

An account is the matched triple (address, public key, private key) plus
the optional mnemonic it was derived from.  It is caller-owned: the core
never persists it and its repr never exposes key material.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from xasset_core.errors import InvalidInput


@dataclass(frozen=True)
class Account:
    address: str
    public_key: str     # JSON-encoded P-256 public key
    private_key: str = field(repr=False)   # JSON-encoded P-256 private key
    mnemonic: Optional[str] = field(default=None, repr=False)

    def __repr__(self) -> str:
        return f"Account({self.address})"

    def to_dict(self) -> dict:
        d = {
            "address": self.address,
            "public_key": self.public_key,
            "private_key": self.private_key,
        }
        if self.mnemonic:
            d["mnemonic"] = self.mnemonic
        return d

    @classmethod
    def from_dict(cls, data: dict) -> Account:
        """Build an account supplied externally in the same shape."""
        missing = [k for k in ("address", "public_key", "private_key") if not data.get(k)]
        if missing:
            raise InvalidInput(f"account is missing fields: {', '.join(missing)}")
        return cls(
            address=data["address"],
            public_key=data["public_key"],
            private_key=data["private_key"],
            mnemonic=data.get("mnemonic") or None,
        )

    def public_view(self) -> dict:
        """Fields safe to embed in a request or a log line."""
        return {"address": self.address, "public_key": self.public_key}
