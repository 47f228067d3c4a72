"""
Mnemonic word tables and language inference.

The English and Simplified Chinese BIP-39 tables are loaded once at import
time, frozen, and shared read-only by every caller.  ``infer_language``
is a heuristic selector for which decode path to try; it never validates.
"""

from __future__ import annotations

from enum import IntEnum
from types import MappingProxyType
from typing import Optional

from mnemonic import Mnemonic

from xasset_core.errors import InvalidInput


class MnemonicStrength(IntEnum):
    """Word-count tier. Values are the boundary codes."""
    WEAK = 1     # 12 words
    MEDIUM = 2   # 18 words
    STRONG = 3   # 24 words

    @property
    def word_count(self) -> int:
        return _WORD_COUNTS[self]

    @property
    def entropy_bits(self) -> int:
        return self.word_count * 32 // 3

    @classmethod
    def from_code(cls, code: int) -> MnemonicStrength:
        return _coerce(cls, code, "strength")

    @classmethod
    def from_word_count(cls, count: int) -> Optional[MnemonicStrength]:
        for tier, n in _WORD_COUNTS.items():
            if n == count:
                return tier
        return None


class MnemonicLanguage(IntEnum):
    """Mnemonic language. Values are the boundary codes."""
    CHINESE = 1
    ENGLISH = 2

    @property
    def bip39_name(self) -> str:
        return _BIP39_NAMES[self]

    @classmethod
    def from_code(cls, code: int) -> MnemonicLanguage:
        return _coerce(cls, code, "language")


_WORD_COUNTS = {
    MnemonicStrength.WEAK: 12,
    MnemonicStrength.MEDIUM: 18,
    MnemonicStrength.STRONG: 24,
}

_BIP39_NAMES = {
    MnemonicLanguage.CHINESE: "chinese_simplified",
    MnemonicLanguage.ENGLISH: "english",
}


def _coerce(enum_cls, code, what: str):
    if isinstance(code, enum_cls):
        return code
    if isinstance(code, bool) or not isinstance(code, int):
        raise InvalidInput(f"{what} code must be an integer, got {code!r}")
    try:
        return enum_cls(code)
    except ValueError:
        allowed = "/".join(str(m.value) for m in enum_cls)
        raise InvalidInput(f"{what} code {code} out of range (expected {allowed})") from None


# ===================================================================
#  Immutable tables
# ===================================================================

def _load_tables():
    coders = {lang: Mnemonic(lang.bip39_name) for lang in MnemonicLanguage}
    words = {lang: frozenset(coder.wordlist) for lang, coder in coders.items()}
    return MappingProxyType(coders), MappingProxyType(words)


_CODERS, _TABLES = _load_tables()


def coder_for(language: MnemonicLanguage) -> Mnemonic:
    """BIP-39 encoder/decoder bound to ``language``'s word table."""
    return _CODERS[MnemonicLanguage.from_code(language)]


def words_for(language: MnemonicLanguage) -> frozenset[str]:
    return _TABLES[MnemonicLanguage.from_code(language)]


def is_member(word: str, language: MnemonicLanguage) -> bool:
    return word in words_for(language)


def infer_language(phrase: str) -> Optional[MnemonicLanguage]:
    """
    Guess the language of ``phrase`` from its first token only.

    Returns None (unknown) for empty input or a token that appears in
    neither table.  No well-formedness check is performed here.
    """
    tokens = (phrase or "").split()
    if not tokens:
        return None
    first = tokens[0]
    if first in _TABLES[MnemonicLanguage.ENGLISH]:
        return MnemonicLanguage.ENGLISH
    if first in _TABLES[MnemonicLanguage.CHINESE]:
        return MnemonicLanguage.CHINESE
    return None


def infer_language_code(phrase: str) -> int:
    """Boundary form of ``infer_language``: 1/2, or 0 when unknown."""
    lang = infer_language(phrase)
    return int(lang) if lang is not None else 0
