"""
Test suite for xasset_core.crypto_utils — hashing, encodings and key formats.

Covers:
  - SHA-256 / double-SHA-256 / RIPEMD-160 / Hash160
  - Base58 encode / decode and Base58Check checksum verification
  - JSON key loading and rejection of malformed / mismatched keys
  - Address derivation and validation
  - Nonce and asset-id generation
"""

import hashlib
import json
import unittest

from ecdsa import NIST256p, SigningKey

from xasset_core.crypto_utils import (
    base58_decode,
    base58_encode,
    base58check_decode,
    base58check_encode,
    derive_address,
    gen_asset_id,
    generate_nonce,
    hash160,
    is_valid_address,
    load_private_key,
    load_public_key,
    private_key_json,
    public_key_json,
    ripemd160,
    sha256,
    sha256d,
)


class TestHashFunctions(unittest.TestCase):

    def test_sha256_known_vector(self):
        self.assertEqual(sha256(b"hello"), hashlib.sha256(b"hello").digest())

    def test_sha256d_double_hash(self):
        single = hashlib.sha256(b"data").digest()
        self.assertEqual(sha256d(b"data"), hashlib.sha256(single).digest())

    def test_ripemd160_empty_vector(self):
        self.assertEqual(ripemd160(b"").hex(), "9c1185a5c5e9fc54612808977ee8f548b2258d31")

    def test_hash160_length(self):
        self.assertEqual(len(hash160(b"key")), 20)


class TestBase58(unittest.TestCase):

    def test_known_vector(self):
        self.assertEqual(base58_encode(b"hello world"), "StV1DL6CwTryKyV")

    def test_leading_zeros(self):
        data = b"\x00\x00\x01\x02"
        encoded = base58_encode(data)
        self.assertTrue(encoded.startswith("11"))
        self.assertEqual(base58_decode(encoded), data)

    def test_empty(self):
        self.assertEqual(base58_encode(b""), "")
        self.assertEqual(base58_decode(""), b"")

    def test_invalid_character(self):
        with self.assertRaises(ValueError):
            base58_decode("0OIl")

    def test_check_detects_corruption(self):
        encoded = base58check_encode(b"\x01payload")
        self.assertEqual(base58check_decode(encoded), b"\x01payload")
        corrupted = encoded[:-1] + ("2" if encoded[-1] != "2" else "3")
        with self.assertRaises(ValueError):
            base58check_decode(corrupted)


class TestKeys(unittest.TestCase):

    def setUp(self):
        self.sk = SigningKey.from_secret_exponent(123456789, curve=NIST256p)
        self.vk = self.sk.get_verifying_key()

    def test_private_round_trip(self):
        raw = private_key_json(self.sk)
        self.assertEqual(load_private_key(raw).privkey.secret_multiplier, 123456789)

    def test_public_round_trip(self):
        raw = public_key_json(self.vk)
        self.assertEqual(load_public_key(raw).to_string(), self.vk.to_string())

    def test_compact_json(self):
        self.assertNotIn(" ", private_key_json(self.sk))

    def test_rejects_non_json(self):
        with self.assertRaises(ValueError):
            load_private_key("not json")

    def test_rejects_wrong_curve(self):
        obj = json.loads(private_key_json(self.sk))
        obj["Curvname"] = "P-384"
        with self.assertRaises(ValueError):
            load_private_key(json.dumps(obj))

    def test_rejects_out_of_range_scalar(self):
        obj = json.loads(private_key_json(self.sk))
        obj["D"] = NIST256p.order
        with self.assertRaises(ValueError):
            load_private_key(json.dumps(obj))

    def test_rejects_mismatched_point(self):
        obj = json.loads(private_key_json(self.sk))
        obj["X"] += 1
        with self.assertRaises(ValueError):
            load_private_key(json.dumps(obj))

    def test_rejects_point_off_curve(self):
        obj = json.loads(public_key_json(self.vk))
        obj["Y"] += 1
        with self.assertRaises(ValueError):
            load_public_key(json.dumps(obj))


class TestAddress(unittest.TestCase):

    def test_valid_address(self):
        vk = SigningKey.generate(curve=NIST256p).get_verifying_key()
        addr = derive_address(vk)
        self.assertTrue(is_valid_address(addr))
        self.assertEqual(base58check_decode(addr)[0], 1)

    def test_deterministic(self):
        vk = SigningKey.from_secret_exponent(42, curve=NIST256p).get_verifying_key()
        self.assertEqual(derive_address(vk), derive_address(vk))

    def test_invalid_address(self):
        self.assertFalse(is_valid_address("not-an-address"))
        self.assertFalse(is_valid_address(base58check_encode(b"\x02" + b"\x00" * 20)))


class TestIds(unittest.TestCase):

    def test_nonce_positive_63_bit(self):
        for _ in range(200):
            n = generate_nonce()
            self.assertGreater(n, 0)
            self.assertLess(n, 1 << 63)

    def test_nonces_distinct(self):
        nonces = [generate_nonce() for _ in range(1000)]
        self.assertEqual(len(set(nonces)), 1000)

    def test_asset_id_positive(self):
        aid = gen_asset_id(1000)
        self.assertGreater(aid, 0)
        self.assertLess(aid, 1 << 63)

    def test_asset_ids_distinct(self):
        ids = {gen_asset_id(7) for _ in range(100)}
        self.assertGreater(len(ids), 95)

    def test_asset_id_rejects_negative_app(self):
        with self.assertRaises(ValueError):
            gen_asset_id(-1)


if __name__ == "__main__":
    unittest.main()
