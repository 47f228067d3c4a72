"""
Form bodies for representative XAsset operations.

Each builder validates its inputs, signs (or obscures) what the operation
requires and returns the ``dict[str, str]`` body of a form-encoded POST.
URL-encoding and transport are left to the caller.
"""

from __future__ import annotations

import json
from typing import Any, Optional, Sequence

from xasset_core.account import Account
from xasset_core.crypto_utils import gen_asset_id, generate_nonce
from xasset_core.errors import InvalidInput
from xasset_core.multi_sign import SignerEntry, compose
from xasset_core.obfuscator import FieldObfuscator
from xasset_core.signing import sign_operation


def _require_id(operation: str, name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidInput(f"{name} must be a positive integer, got {value!r}", operation=operation)
    return value


def _require_str(operation: str, name: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInput(f"{name} must be a non-empty string", operation=operation)
    return value


def _require_account(operation: str, name: str, account: Any) -> Account:
    if not isinstance(account, Account):
        raise InvalidInput(f"{name} must be an Account", operation=operation)
    return account


# ===================================================================
#  Single-signer operations
# ===================================================================

def get_stoken(account: Account) -> dict[str, str]:
    op = "get_stoken"
    _require_account(op, "account", account)
    return sign_operation(account, op).form_fields()


def create_asset(
    account: Account,
    app_id: int,
    amount: int,
    asset_info: dict,
    price: int = 0,
    asset_id: int = 0,
    view_type: int = 0,
    asset_param: str = "",
    user_id: int = 0,
    file_hash: str = "",
) -> dict[str, str]:
    """Asset id is generated from ``app_id`` when not supplied."""
    op = "create_asset"
    _require_account(op, "account", account)
    if not isinstance(asset_info, dict) or not asset_info:
        raise InvalidInput("asset_info must be a non-empty mapping", operation=op)
    if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
        raise InvalidInput("amount must be a non-negative integer", operation=op)
    if asset_id == 0:
        asset_id = gen_asset_id(_require_id(op, "app_id", app_id))
    _require_id(op, "asset_id", asset_id)

    signed = sign_operation(account, op, asset_id=asset_id)
    form = {
        "asset_id": str(asset_id),
        "price": str(price),
        "amount": str(amount),
        "asset_info": json.dumps(asset_info, separators=(",", ":"), ensure_ascii=False),
        "view_type": str(view_type),
        "param": asset_param,
    }
    form.update(signed.form_fields())
    if user_id > 0:
        form["user_id"] = str(user_id)
    if file_hash:
        form["file_hash"] = file_hash
    return form


def publish_asset(account: Account, asset_id: int, is_evidence: int = 0) -> dict[str, str]:
    op = "publish_asset"
    _require_account(op, "account", account)
    _require_id(op, "asset_id", asset_id)
    form = {"asset_id": str(asset_id), "is_evidence": str(is_evidence)}
    form.update(sign_operation(account, op, asset_id=asset_id).form_fields())
    return form


def freeze_asset(account: Account, asset_id: int) -> dict[str, str]:
    op = "freeze_asset"
    _require_account(op, "account", account)
    _require_id(op, "asset_id", asset_id)
    form = {"asset_id": str(asset_id)}
    form.update(sign_operation(account, op, asset_id=asset_id).form_fields())
    return form


def grant_asset(
    account: Account,
    asset_id: int,
    to_addr: str,
    shard_id: int = 0,
    price: int = 0,
    addr: Optional[str] = None,
    shard_param: str = "",
    to_user_id: int = 0,
) -> dict[str, str]:
    """
    First grant of a shard after publishing.  An unspecified shard id is
    replaced by a fresh unique value.
    """
    op = "grant_asset"
    _require_account(op, "account", account)
    _require_id(op, "asset_id", asset_id)
    _require_str(op, "to_addr", to_addr)
    if isinstance(shard_id, bool) or not isinstance(shard_id, int):
        raise InvalidInput("shard_id must be an integer", operation=op)
    if shard_id < 1:
        shard_id = generate_nonce()

    form = {
        "asset_id": str(asset_id),
        "shard_id": str(shard_id),
        "price": str(price),
        "to_addr": to_addr,
        "param": shard_param,
    }
    form.update(sign_operation(account, op, asset_id=asset_id).form_fields())
    if addr:
        form["addr"] = addr
    if to_user_id > 0:
        form["to_userid"] = str(to_user_id)
    return form


def transfer_asset(
    account: Account,
    asset_id: int,
    shard_id: int,
    to_addr: str,
    price: int = 0,
    to_user_id: int = 0,
) -> dict[str, str]:
    op = "transfer_asset"
    _require_account(op, "account", account)
    _require_id(op, "asset_id", asset_id)
    _require_id(op, "shard_id", shard_id)
    _require_str(op, "to_addr", to_addr)
    form = {
        "asset_id": str(asset_id),
        "shard_id": str(shard_id),
        "price": str(price),
        "to_addr": to_addr,
    }
    form.update(sign_operation(account, op, asset_id=asset_id).form_fields())
    if to_user_id > 0:
        form["to_userid"] = str(to_user_id)
    return form


def consume_shard(user_account: Account, asset_id: int, shard_id: int) -> dict[str, str]:
    op = "consume_shard"
    _require_account(op, "user_account", user_account)
    _require_id(op, "asset_id", asset_id)
    _require_id(op, "shard_id", shard_id)
    form = {"asset_id": str(asset_id), "shard_id": str(shard_id)}
    form.update(sign_operation(user_account, op, asset_id=asset_id).form_fields(prefix="user_"))
    return form


# ===================================================================
#  Multi-signer operations
# ===================================================================

def grant_box(
    user_account: Account,
    creator_account: Account,
    box_asset_id: int,
    real_asset_id: int,
    token: str,
    user_id: int = 0,
) -> dict[str, str]:
    """
    Open a box: the user consumes the box asset and the creator grants the
    real asset, in one request carrying both signatures.
    """
    op = "grant_box"
    _require_account(op, "user_account", user_account)
    _require_account(op, "creator_account", creator_account)
    _require_id(op, "box_asset_id", box_asset_id)
    _require_id(op, "real_asset_id", real_asset_id)
    _require_str(op, "token", token)

    multi = compose([
        SignerEntry("user", user_account, "grant_box_consume",
                    {"box_asset_id": box_asset_id}, form_prefix="user_", nonce_key="consume_nonce"),
        SignerEntry("create", creator_account, "grant_box_grant",
                    {"real_asset_id": real_asset_id}, form_prefix="create_", nonce_key="grant_nonce"),
    ], operation=op)

    form = {
        "real_asset_id": str(real_asset_id),
        "box_asset_id": str(box_asset_id),
        "token": token,
        "user_id": str(user_id),
    }
    form.update(multi.form_fields())
    return form


def compose_shard(
    account: Account,
    user_account: Account,
    consume_list: Sequence[tuple[int, int]],
    asset_id: int,
    strg_no: int,
    token: str,
) -> dict[str, str]:
    """
    Burn ``consume_list`` shards (``(asset_id, shard_id)`` pairs) owned by
    ``account`` to compose a new shard of ``asset_id``.  Each consumed shard
    is signed with its own nonce.
    """
    op = "compose_shard"
    _require_account(op, "account", account)
    _require_account(op, "user_account", user_account)
    _require_id(op, "asset_id", asset_id)
    _require_str(op, "token", token)
    if not consume_list:
        raise InvalidInput("consume_list must not be empty", operation=op)

    entries = []
    for i, (shard_asset_id, shard_id) in enumerate(consume_list):
        _require_id(op, "consume asset_id", shard_asset_id)
        _require_id(op, "consume shard_id", shard_id)
        entries.append(SignerEntry(f"consume_{i}", account, "compose_consume",
                                   {"asset_id": shard_asset_id}))
    entries.append(SignerEntry("grant", account, "compose_grant", {"asset_id": asset_id}))
    multi = compose(entries, operation=op)

    ast_list = [
        {
            "asset_id": shard_asset_id,
            "shard_id": shard_id,
            "nonce": sig.nonce,
            "sign": sig.signature,
        }
        for (shard_asset_id, shard_id), sig in zip(consume_list, multi.signatures)
    ]
    grant = multi.by_role("grant")
    return {
        "asset_id": str(asset_id),
        "strg_no": str(strg_no),
        "nonce": str(grant.nonce),
        "addr": grant.address,
        "pkey": grant.public_key,
        "sign": grant.signature,
        "uaddr": user_account.address,
        "upkey": user_account.public_key,
        "ast_list": json.dumps(ast_list, separators=(",", ":")),
        "token": token,
    }


# ===================================================================
#  Obscured-identifier operations
# ===================================================================

def scene_list_addr(obfuscator: FieldObfuscator, union_id: str) -> dict[str, str]:
    _require_str("scene_list_addr", "union_id", union_id)
    return obfuscator.obscure_fields({"union_id": union_id})


def get_addr_by_union_id(obfuscator: FieldObfuscator, union_id: str) -> dict[str, str]:
    _require_str("get_addr_by_union_id", "union_id", union_id)
    return obfuscator.obscure_fields({"union_id": union_id})


def bind_by_union_id(obfuscator: FieldObfuscator, union_id: str, mnemonic: str) -> dict[str, str]:
    op = "bind_by_union_id"
    _require_str(op, "union_id", union_id)
    _require_str(op, "mnemonic", mnemonic)
    return obfuscator.obscure_fields({"union_id": union_id, "mnemonic": mnemonic})


def bdbox_register(obfuscator: FieldObfuscator, open_id: str, app_key: str) -> dict[str, str]:
    op = "bdbox_register"
    _require_str(op, "open_id", open_id)
    _require_str(op, "app_key", app_key)
    return obfuscator.obscure_fields({"open_id": open_id, "app_key": app_key})


def bdbox_bind(
    obfuscator: FieldObfuscator, open_id: str, app_key: str, mnemonic: str,
) -> dict[str, str]:
    op = "bdbox_bind"
    _require_str(op, "open_id", open_id)
    _require_str(op, "app_key", app_key)
    _require_str(op, "mnemonic", mnemonic)
    return obfuscator.obscure_fields(
        {"open_id": open_id, "app_key": app_key, "mnemonic": mnemonic},
    )
