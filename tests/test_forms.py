"""
Test suite for xasset_core.forms — request form bodies.

Covers:
  - Signed single-party forms verify against the canonical message
  - Input validation raising InvalidInput before anything is signed
  - grant_box two-party body and all-or-nothing behaviour
  - compose_shard per-shard signatures and ast_list layout
  - Obscured-identifier forms never carry plaintext
"""

import json
import unittest
from unittest.mock import patch

from xasset_core import forms
from xasset_core.account import Account
from xasset_core.errors import InvalidInput, SignatureFailed
from xasset_core.obfuscator import FieldObfuscator, ObfuscationSecret
from xasset_core.signing import message_for, verify
from xasset_core.wallet import account_from_entropy
from xasset_core.wordlist import MnemonicLanguage


def _account(seed_byte: int) -> Account:
    return account_from_entropy(bytes([seed_byte]) * 16, MnemonicLanguage.ENGLISH)


def _verifies(account: Account, operation: str, form: dict, prefix: str = "",
              nonce_key: str = "nonce", **fields) -> bool:
    msg = message_for(operation, int(form[nonce_key]), **fields)
    return verify(account.public_key, msg, form[f"{prefix}sign"])


class TestSingleSigner(unittest.TestCase):

    def setUp(self):
        self.acc = _account(3)

    def test_get_stoken(self):
        form = forms.get_stoken(self.acc)
        self.assertEqual(form["addr"], self.acc.address)
        self.assertTrue(_verifies(self.acc, "get_stoken", form))

    def test_create_asset_generates_id(self):
        form = forms.create_asset(self.acc, 110381, 100, {"title": "藏品", "type": 1})
        aid = int(form["asset_id"])
        self.assertGreater(aid, 0)
        self.assertTrue(_verifies(self.acc, "create_asset", form, asset_id=aid))
        self.assertEqual(json.loads(form["asset_info"])["title"], "藏品")
        self.assertNotIn("user_id", form)

    def test_create_asset_explicit_id(self):
        form = forms.create_asset(self.acc, 1, 5, {"t": 1}, asset_id=777, user_id=9,
                                  file_hash="abc")
        self.assertEqual(form["asset_id"], "777")
        self.assertEqual(form["user_id"], "9")
        self.assertEqual(form["file_hash"], "abc")

    def test_create_asset_needs_app_id(self):
        with self.assertRaises(InvalidInput):
            forms.create_asset(self.acc, 0, 5, {"t": 1})

    def test_create_asset_needs_info(self):
        with self.assertRaises(InvalidInput):
            forms.create_asset(self.acc, 1, 5, {})

    def test_publish_asset(self):
        form = forms.publish_asset(self.acc, 4242)
        self.assertEqual(form["asset_id"], "4242")
        self.assertTrue(_verifies(self.acc, "publish_asset", form, asset_id=4242))

    def test_freeze_rejects_bad_id(self):
        for bad in (0, -5, "12", True, None):
            with self.assertRaises(InvalidInput):
                forms.freeze_asset(self.acc, bad)

    def test_grant_asset_fresh_shard_id(self):
        a = forms.grant_asset(self.acc, 10, "toAddr")
        b = forms.grant_asset(self.acc, 10, "toAddr")
        self.assertNotEqual(a["shard_id"], b["shard_id"])
        self.assertGreater(int(a["shard_id"]), 0)
        self.assertTrue(_verifies(self.acc, "grant_asset", a, asset_id=10))

    def test_grant_asset_explicit_shard(self):
        form = forms.grant_asset(self.acc, 10, "toAddr", shard_id=5, to_user_id=3)
        self.assertEqual(form["shard_id"], "5")
        self.assertEqual(form["to_userid"], "3")

    def test_grant_asset_requires_recipient(self):
        with self.assertRaises(InvalidInput):
            forms.grant_asset(self.acc, 10, "  ")

    def test_transfer_asset(self):
        form = forms.transfer_asset(self.acc, 10, 20, "toAddr")
        self.assertEqual(form["shard_id"], "20")
        self.assertTrue(_verifies(self.acc, "transfer_asset", form, asset_id=10))

    def test_consume_shard_prefix(self):
        form = forms.consume_shard(self.acc, 10, 20)
        self.assertEqual(form["user_addr"], self.acc.address)
        self.assertTrue(_verifies(self.acc, "consume_shard", form, prefix="user_", asset_id=10))

    def test_rejects_non_account(self):
        with self.assertRaises(InvalidInput):
            forms.get_stoken(self.acc.to_dict())

    def test_validation_precedes_signing(self):
        with patch("xasset_core.forms.sign_operation") as sign_op:
            with self.assertRaises(InvalidInput):
                forms.transfer_asset(self.acc, 10, 0, "toAddr")
            sign_op.assert_not_called()


class TestGrantBox(unittest.TestCase):

    def setUp(self):
        self.user = _account(4)
        self.creator = _account(5)

    def test_body(self):
        form = forms.grant_box(self.user, self.creator, 111, 222, "tok", user_id=8)
        self.assertEqual(form["box_asset_id"], "111")
        self.assertEqual(form["real_asset_id"], "222")
        self.assertEqual(form["user_id"], "8")
        self.assertEqual(form["user_addr"], self.user.address)
        self.assertEqual(form["create_addr"], self.creator.address)
        self.assertTrue(_verifies(self.user, "grant_box_consume", form, prefix="user_",
                                  nonce_key="consume_nonce", box_asset_id=111))
        self.assertTrue(_verifies(self.creator, "grant_box_grant", form, prefix="create_",
                                  nonce_key="grant_nonce", real_asset_id=222))

    def test_invalid_creator_key(self):
        broken = Account(self.creator.address, self.creator.public_key, "not json")
        with patch("xasset_core.multi_sign.sign_operation") as sign_op:
            with self.assertRaises(SignatureFailed):
                forms.grant_box(self.user, broken, 111, 222, "tok")
            sign_op.assert_not_called()

    def test_requires_token(self):
        with self.assertRaises(InvalidInput):
            forms.grant_box(self.user, self.creator, 111, 222, "")


class TestComposeShard(unittest.TestCase):

    def setUp(self):
        self.acc = _account(6)
        self.user = _account(7)

    def test_body(self):
        consume = [(100, 1), (100, 2), (200, 9)]
        form = forms.compose_shard(self.acc, self.user, consume, 300, 1, "tok")
        ast_list = json.loads(form["ast_list"])
        self.assertEqual([(a["asset_id"], a["shard_id"]) for a in ast_list], consume)
        self.assertEqual(len({a["nonce"] for a in ast_list} | {int(form["nonce"])}), 4)
        for item in ast_list:
            msg = message_for("compose_consume", item["nonce"], asset_id=item["asset_id"])
            self.assertTrue(verify(self.acc.public_key, msg, item["sign"]))
        self.assertTrue(_verifies(self.acc, "compose_grant", form, asset_id=300))
        self.assertEqual(form["uaddr"], self.user.address)
        self.assertEqual(form["addr"], self.acc.address)

    def test_empty_consume_list(self):
        with self.assertRaises(InvalidInput):
            forms.compose_shard(self.acc, self.user, [], 300, 1, "tok")

    def test_bad_shard_pair(self):
        with self.assertRaises(InvalidInput):
            forms.compose_shard(self.acc, self.user, [(100, 0)], 300, 1, "tok")


class TestObscuredForms(unittest.TestCase):

    def setUp(self):
        self.fo = FieldObfuscator(ObfuscationSecret("sk"))

    def test_bind_by_union_id(self):
        form = forms.bind_by_union_id(self.fo, "union-1", "abandon about")
        self.assertEqual(set(form), {"union_id", "mnemonic"})
        self.assertNotIn("union-1", form["union_id"])
        self.assertEqual(self.fo.reveal(form["mnemonic"]), "abandon about")

    def test_bdbox_register(self):
        form = forms.bdbox_register(self.fo, "open-1", "key-1")
        self.assertEqual(self.fo.reveal(form["open_id"]), "open-1")
        self.assertEqual(self.fo.reveal(form["app_key"]), "key-1")

    def test_bdbox_bind(self):
        form = forms.bdbox_bind(self.fo, "open-1", "key-1", "m")
        self.assertEqual(set(form), {"open_id", "app_key", "mnemonic"})

    def test_scene_list_addr(self):
        form = forms.scene_list_addr(self.fo, "u")
        self.assertEqual(self.fo.reveal(form["union_id"]), "u")

    def test_get_addr_by_union_id_requires_value(self):
        with self.assertRaises(InvalidInput):
            forms.get_addr_by_union_id(self.fo, "")


if __name__ == "__main__":
    unittest.main()
