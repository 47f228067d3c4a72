"""
Shared pytest fixtures for the XAsset test suite.
"""

import pytest

from xasset_core.obfuscator import FieldObfuscator, ObfuscationSecret
from xasset_core.wallet import account_from_entropy
from xasset_core.wordlist import MnemonicLanguage


@pytest.fixture
def user_account():
    """Deterministic English-mnemonic account for the consuming user."""
    return account_from_entropy(b"\x02" * 16, MnemonicLanguage.ENGLISH)


@pytest.fixture
def creator_account():
    """Deterministic Chinese-mnemonic account for the asset creator."""
    return account_from_entropy(b"\x03" * 32, MnemonicLanguage.CHINESE)


@pytest.fixture
def obfuscator():
    """Field obfuscator bound to a fixed credential secret."""
    return FieldObfuscator(ObfuscationSecret("test-secret-access-key"))
