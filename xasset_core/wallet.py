"""
Wallet derivation for the XAsset client.

Creates new accounts or recovers existing ones from a mnemonic phrase:

  - BIP-39 mnemonic encoding (English / Simplified Chinese)
  - 12 / 18 / 24 word strength tiers
  - PBKDF2-HMAC-SHA512 seed derivation
  - NIST P-256 key derivation and checksummed address

The entropy -> account direction is deterministic; only ``create_account``
draws fresh entropy.
"""

from __future__ import annotations

import hashlib
import logging
import os

from ecdsa import SigningKey
from ecdsa.errors import MalformedPointError
from mnemonic import Mnemonic

from xasset_core.account import Account
from xasset_core.crypto_utils import (
    CURVE,
    derive_address,
    private_key_json,
    public_key_json,
)
from xasset_core.errors import InvalidInput, InvalidMnemonic, KeyDerivationFailed
from xasset_core.wordlist import (
    MnemonicLanguage,
    MnemonicStrength,
    coder_for,
    is_member,
)

logger = logging.getLogger("xasset_wallet")

# Shared with the service's wallet tooling so phrases stay portable.
_SEED_PASSWORD = "jingbo is handsome!"
_SEED_ITERATIONS = 2048
_SEED_BYTES = 40

_ENTROPY_BYTES = {tier.entropy_bits // 8 for tier in MnemonicStrength}


# ===================================================================
#  Seed & key derivation
# ===================================================================

def mnemonic_to_seed(mnemonic: str, password: str = _SEED_PASSWORD) -> bytes:
    """Derive the 40-byte key seed from a mnemonic phrase."""
    phrase = Mnemonic.normalize_string(mnemonic)
    salt = Mnemonic.normalize_string("mnemonic" + password)
    return hashlib.pbkdf2_hmac(
        "sha512", phrase.encode("utf-8"), salt.encode("utf-8"),
        _SEED_ITERATIONS, dklen=_SEED_BYTES,
    )


def derive_keypair(seed: bytes) -> SigningKey:
    """
    Map a seed onto a P-256 private scalar in [1, n-1].

    Raises KeyDerivationFailed if the curve step errors.
    """
    if not seed:
        raise KeyDerivationFailed("empty seed", operation="derive_keypair")
    n = CURVE.order
    d = int.from_bytes(seed, "big") % (n - 1) + 1
    try:
        return SigningKey.from_secret_exponent(d, curve=CURVE)
    except (ValueError, ArithmeticError, MalformedPointError) as exc:
        raise KeyDerivationFailed(
            f"elliptic-curve key derivation failed: {exc}", operation="derive_keypair",
        ) from exc


def _account_from_phrase(phrase: str, operation: str) -> Account:
    sk = derive_keypair(mnemonic_to_seed(phrase))
    try:
        vk = sk.get_verifying_key()
        return Account(
            address=derive_address(vk),
            public_key=public_key_json(vk),
            private_key=private_key_json(sk),
            mnemonic=phrase,
        )
    except (ValueError, ArithmeticError, MalformedPointError) as exc:
        raise KeyDerivationFailed(
            f"public key derivation failed: {exc}", operation=operation,
        ) from exc


# ===================================================================
#  Public operations
# ===================================================================

def account_from_entropy(entropy: bytes, language: MnemonicLanguage) -> Account:
    """Deterministically build the account encoded by ``entropy``."""
    lang = MnemonicLanguage.from_code(language)
    if len(entropy) not in _ENTROPY_BYTES:
        raise InvalidInput(
            f"entropy must be one of {sorted(_ENTROPY_BYTES)} bytes, got {len(entropy)}",
            operation="account_from_entropy",
        )
    phrase = coder_for(lang).to_mnemonic(bytes(entropy))
    return _account_from_phrase(phrase, "account_from_entropy")


def create_account(strength: MnemonicStrength, language: MnemonicLanguage) -> Account:
    """
    Create a brand-new account with a mnemonic of the requested tier.

    Both codes are validated before any entropy is drawn.
    """
    tier = MnemonicStrength.from_code(strength)
    lang = MnemonicLanguage.from_code(language)
    entropy = os.urandom(tier.entropy_bits // 8)
    account = account_from_entropy(entropy, lang)
    logger.debug("created account %s (%d words, %s)", account.address, tier.word_count, lang.name)
    return account


def validate_mnemonic(mnemonic: str, language: MnemonicLanguage) -> list[str]:
    """
    Check word count, word-list membership and checksum.

    Returns the normalised word list; raises InvalidMnemonic otherwise.
    """
    lang = MnemonicLanguage.from_code(language)
    words = (mnemonic or "").split()
    if MnemonicStrength.from_word_count(len(words)) is None:
        raise InvalidMnemonic(
            f"mnemonic has {len(words)} words, expected 12, 18 or 24",
            operation="recover_account",
        )
    unknown = sum(1 for w in words if not is_member(w, lang))
    if unknown:
        raise InvalidMnemonic(
            f"{unknown} word(s) not in the {lang.name.lower()} word list",
            operation="recover_account",
        )
    try:
        coder_for(lang).to_entropy(words)
    except (ValueError, LookupError) as exc:
        raise InvalidMnemonic(
            f"mnemonic checksum mismatch: {exc}", operation="recover_account",
        ) from exc
    return words


def recover_account(mnemonic: str, language: MnemonicLanguage) -> Account:
    """Re-derive the account ``create_account`` produced for ``mnemonic``."""
    words = validate_mnemonic(mnemonic, language)
    return _account_from_phrase(" ".join(words), "recover_account")
