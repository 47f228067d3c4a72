"""
XAsset client core - authentication for digital-asset service requests.

Key features:
- BIP-39 mnemonic accounts (English / Simplified Chinese, 12/18/24 words)
- NIST P-256 request signing with fresh per-call nonces
- All-or-nothing multi-party signature composition
- AES-GCM obfuscation of privacy-sensitive identifiers
- Uniform response classification with remote correlation ids
"""

__version__ = "1.0.0"
__all__ = [
    "errors",
    "crypto_utils",
    "wordlist",
    "account",
    "wallet",
    "signing",
    "multi_sign",
    "obfuscator",
    "envelope",
    "config",
    "logging_config",
    "forms",
    "client",
]
