"""
Cryptographic helpers for the XAsset client.

Thin wrappers over the supplied primitives (``ecdsa`` for NIST P-256,
``pycryptodome`` for RIPEMD-160) plus the encodings the remote service
expects:

  - SHA-256 / double-SHA-256 / RIPEMD-160 / Hash160
  - Base58 / Base58Check (Bitcoin alphabet)
  - JSON key encoding ``{"Curvname":"P-256","X":..,"Y":..,"D":..}``
  - Address derivation
  - Nonce and asset-id generation
"""

from __future__ import annotations

import hashlib
import json
import secrets
import time

from Crypto.Hash import RIPEMD160
from ecdsa import NIST256p, SigningKey, VerifyingKey
from ecdsa.errors import MalformedPointError

CURVE = NIST256p
CURVE_NAME = "P-256"
ADDRESS_VERSION = 1  # NIST P-256

_B58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_B58_INDEX = {c: i for i, c in enumerate(_B58_ALPHABET)}

_MAX_INT63 = (1 << 63) - 1


# ===================================================================
#  Hashing
# ===================================================================

def sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def sha256d(data: bytes) -> bytes:
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()


def ripemd160(data: bytes) -> bytes:
    return RIPEMD160.new(data).digest()


def hash160(data: bytes) -> bytes:
    """RIPEMD-160 of SHA-256."""
    return ripemd160(sha256(data))


# ===================================================================
#  Base58
# ===================================================================

def base58_encode(data: bytes) -> str:
    n = int.from_bytes(data, "big")
    out = []
    while n > 0:
        n, rem = divmod(n, 58)
        out.append(_B58_ALPHABET[rem])
    pad = len(data) - len(data.lstrip(b"\x00"))
    return _B58_ALPHABET[0] * pad + "".join(reversed(out))


def base58_decode(s: str) -> bytes:
    n = 0
    for ch in s:
        if ch not in _B58_INDEX:
            raise ValueError(f"Invalid base58 character: {ch!r}")
        n = n * 58 + _B58_INDEX[ch]
    body = n.to_bytes((n.bit_length() + 7) // 8, "big") if n else b""
    pad = len(s) - len(s.lstrip(_B58_ALPHABET[0]))
    return b"\x00" * pad + body


def base58check_encode(payload: bytes) -> str:
    return base58_encode(payload + sha256d(payload)[:4])


def base58check_decode(s: str) -> bytes:
    raw = base58_decode(s)
    if len(raw) < 4:
        raise ValueError("Base58Check string too short")
    payload, checksum = raw[:-4], raw[-4:]
    if sha256d(payload)[:4] != checksum:
        raise ValueError("Base58Check checksum mismatch")
    return payload


# ===================================================================
#  Keys & addresses
# ===================================================================

def _point_bytes(vk: VerifyingKey) -> bytes:
    """Uncompressed SEC1 point: 0x04 || X || Y."""
    return b"\x04" + vk.to_string()


def public_key_json(vk: VerifyingKey) -> str:
    point = vk.pubkey.point
    return json.dumps(
        {"Curvname": CURVE_NAME, "X": point.x(), "Y": point.y()},
        separators=(",", ":"),
    )


def private_key_json(sk: SigningKey) -> str:
    point = sk.get_verifying_key().pubkey.point
    return json.dumps(
        {"Curvname": CURVE_NAME, "X": point.x(), "Y": point.y(), "D": sk.privkey.secret_multiplier},
        separators=(",", ":"),
    )


def _load_key_object(raw: str) -> dict:
    try:
        obj = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError("key is not valid JSON") from exc
    if not isinstance(obj, dict):
        raise ValueError("key must be a JSON object")
    if obj.get("Curvname") != CURVE_NAME:
        raise ValueError(f"unsupported curve: {obj.get('Curvname')!r}")
    return obj


def load_public_key(raw: str) -> VerifyingKey:
    """Parse a JSON public key. Raises ValueError on any malformation."""
    obj = _load_key_object(raw)
    x, y = obj.get("X"), obj.get("Y")
    if not isinstance(x, int) or not isinstance(y, int) or x < 0 or y < 0:
        raise ValueError("public key coordinates must be non-negative integers")
    try:
        return VerifyingKey.from_string(
            x.to_bytes(32, "big") + y.to_bytes(32, "big"), curve=CURVE,
        )
    except (OverflowError, MalformedPointError) as exc:
        raise ValueError("public key is not a point on P-256") from exc


def load_private_key(raw: str) -> SigningKey:
    """
    Parse a JSON private key.

    The embedded X/Y must match the point derived from D so that a
    mismatched triple is never used for signing.
    """
    obj = _load_key_object(raw)
    d = obj.get("D")
    if not isinstance(d, int) or isinstance(d, bool) or not 1 <= d < CURVE.order:
        raise ValueError("private scalar out of range")
    sk = SigningKey.from_secret_exponent(d, curve=CURVE)
    point = sk.get_verifying_key().pubkey.point
    if obj.get("X") != point.x() or obj.get("Y") != point.y():
        raise ValueError("private key does not match its public point")
    return sk


def derive_address(vk: VerifyingKey) -> str:
    """Checksummed address: base58(version || Hash160(point) || checksum)."""
    payload = bytes([ADDRESS_VERSION]) + hash160(_point_bytes(vk))
    return base58check_encode(payload)


def address_from_public_key(raw: str) -> str:
    return derive_address(load_public_key(raw))


def is_valid_address(address: str) -> bool:
    try:
        payload = base58check_decode(address)
    except ValueError:
        return False
    return len(payload) == 21 and payload[0] == ADDRESS_VERSION


# ===================================================================
#  Nonces & ids
# ===================================================================

def generate_nonce() -> int:
    """Fresh positive 63-bit nonce. Uniqueness is enforced remotely."""
    nonce = 0
    while nonce == 0:
        nonce = secrets.randbits(63)
    return nonce


def gen_asset_id(app_id: int) -> int:
    """
    Generate an asset id for ``app_id``.

    Upper bits are the millisecond clock, the low 20 bits mix the app id
    with fresh randomness so concurrent creators do not collide.
    """
    if app_id < 0:
        raise ValueError("app_id must be non-negative")
    ms = int(time.time() * 1000)
    mix = sha256(f"{app_id}#{secrets.randbits(64)}".encode())
    low = int.from_bytes(mix[:4], "big") & 0xFFFFF
    return ((ms << 20) | low) & _MAX_INT63
