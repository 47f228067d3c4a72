"""
Error taxonomy for the XAsset client core.

Every failure surfaced by the core is one of a closed set of kinds:

  - InvalidInput         – caller supplied an out-of-range code or bad field
  - InvalidMnemonic      – word membership / count / checksum failure
  - KeyDerivationFailed  – the elliptic-curve step errored (fatal)
  - SignatureFailed      – malformed signing key or primitive error
  - ObfuscationFailed    – any cipher error while obscuring / revealing
  - TransportError       – non-200 or unreachable remote (retry-eligible)
  - MalformedResponse    – body does not decode to the expected schema
  - RemoteRejected       – remote answered with a non-success errno

Only ``TransportError`` is safe to retry blindly.
"""

from __future__ import annotations

from typing import Optional


class XassetError(Exception):
    """Base class carrying the operation name and remote correlation ids."""

    retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        operation: Optional[str] = None,
        request_id: Optional[str] = None,
        trace_id: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.request_id = request_id
        self.trace_id = trace_id

    def __str__(self) -> str:
        parts = [self.message]
        if self.operation:
            parts.append(f"[operation: {self.operation}]")
        if self.request_id:
            parts.append(f"[request_id: {self.request_id}]")
        if self.trace_id:
            parts.append(f"[trace_id: {self.trace_id}]")
        return " ".join(parts)

    def to_dict(self) -> dict:
        return {
            "kind": type(self).__name__,
            "message": self.message,
            "operation": self.operation,
            "request_id": self.request_id,
            "trace_id": self.trace_id,
            "retryable": self.retryable,
        }


class InvalidInput(XassetError, ValueError):
    """Out-of-range strength/language code or malformed request field."""


class InvalidMnemonic(XassetError, ValueError):
    """Mnemonic failed word-list membership, word count or checksum."""


class KeyDerivationFailed(XassetError):
    """Entropy or curve dependency corruption. Never retried."""


class SignatureFailed(XassetError):
    """Signing key malformed or the signature primitive failed."""


class ObfuscationFailed(XassetError):
    """Field obfuscation failed closed."""


class TransportError(XassetError):
    """Remote unreachable or HTTP status other than 200."""

    retryable = True

    def __init__(self, message: str, *, http_status: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.http_status = http_status

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["http_status"] = self.http_status
        return d


class MalformedResponse(XassetError):
    """HTTP 200 whose body does not parse against the expected schema."""


class RemoteRejected(XassetError):
    """Remote service answered with a non-success error code."""

    def __init__(self, code: int, message: str = "", **kwargs):
        super().__init__(message or f"remote rejected operation with errno {code}", **kwargs)
        self.code = code

    def __str__(self) -> str:
        return f"{super().__str__()} [errno: {self.code}]"

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["code"] = self.code
        return d
