"""
Asynchronous HTTP client for the XAsset service.

Posts the form bodies built in ``xasset_core.forms`` and runs every reply
through the response trust envelope.  The client never retries: a
``TransportError`` is handed back to the caller, who owns the retry policy.

Usage:
    async with AssetClient(load_config("xasset.toml")) as cli:
        env = await cli.publish_asset(account, asset_id)
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Sequence

import aiohttp

from xasset_core import forms
from xasset_core.account import Account
from xasset_core.config import XassetConfig
from xasset_core.envelope import ResponseEnvelope, classify_response
from xasset_core.errors import ObfuscationFailed, TransportError
from xasset_core.obfuscator import FieldObfuscator

logger = logging.getLogger("xasset_client")

# operation -> URI
API_PATHS = {
    "get_stoken": "/xasset/file/v1/getstoken",
    "create_asset": "/xasset/horae/v1/create",
    "publish_asset": "/xasset/horae/v1/publish",
    "freeze_asset": "/xasset/horae/v1/freeze",
    "grant_asset": "/xasset/damocles/v1/grant",
    "transfer_asset": "/xasset/damocles/v1/transfer",
    "consume_shard": "/xasset/damocles/v1/consume",
    "grant_box": "/xasset/damocles/v1/grantbox",
    "compose_shard": "/xasset/damocles/v1/compose",
    "scene_list_addr": "/xasset/scene/v1/listaddr",
    "bdbox_register": "/xasset/did/v1/bdboxregister",
    "bdbox_bind": "/xasset/did/v1/bdboxbind",
    "bind_by_union_id": "/xasset/did/v1/bindbyunionid",
    "get_addr_by_union_id": "/xasset/did/v1/getaddrbyunionid",
}


class AssetClient:
    """Thin aiohttp wrapper around the XAsset HTTP API."""

    def __init__(
        self,
        config: XassetConfig,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.config = config
        self._session = session
        self._owns_session = session is None
        self._obfuscator: Optional[FieldObfuscator] = None

    # ── lifecycle ────────────────────────────────────────────────

    async def __aenter__(self) -> AssetClient:
        await self._get_session()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.config.endpoint.timeout_seconds)
            self._session = aiohttp.ClientSession(
                timeout=timeout,
                headers={"User-Agent": self.config.endpoint.user_agent},
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()

    @property
    def obfuscator(self) -> FieldObfuscator:
        if self._obfuscator is None:
            self._obfuscator = FieldObfuscator(self.config.credentials.obfuscation_secret())
        return self._obfuscator

    # ── transport ────────────────────────────────────────────────

    async def post(self, operation: str, form: dict[str, str]) -> ResponseEnvelope:
        """POST ``form`` for ``operation`` and classify the reply."""
        url = self.config.endpoint.host.rstrip("/") + API_PATHS[operation]
        session = await self._get_session()
        try:
            async with session.post(url, data=form) as resp:
                body = await resp.read()
                status = resp.status
                headers = dict(resp.headers)
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.warning(
                "post request xasset failed. [url: %s] [err: %s]", url, exc,
                extra={"operation": operation},
            )
            raise TransportError(
                f"request failed: {exc}", operation=operation,
            ) from exc
        return classify_response(operation, status, body, headers=headers, url=url)

    # ── signed operations ────────────────────────────────────────

    async def get_stoken(self, account: Account) -> ResponseEnvelope:
        return await self.post("get_stoken", forms.get_stoken(account))

    async def create_asset(self, account: Account, amount: int, asset_info: dict,
                           **kwargs) -> ResponseEnvelope:
        form = forms.create_asset(
            account, self.config.credentials.app_id, amount, asset_info, **kwargs,
        )
        return await self.post("create_asset", form)

    async def publish_asset(self, account: Account, asset_id: int,
                            is_evidence: int = 0) -> ResponseEnvelope:
        return await self.post("publish_asset", forms.publish_asset(account, asset_id, is_evidence))

    async def freeze_asset(self, account: Account, asset_id: int) -> ResponseEnvelope:
        return await self.post("freeze_asset", forms.freeze_asset(account, asset_id))

    async def grant_asset(self, account: Account, asset_id: int, to_addr: str,
                          **kwargs) -> ResponseEnvelope:
        return await self.post("grant_asset", forms.grant_asset(account, asset_id, to_addr, **kwargs))

    async def transfer_asset(self, account: Account, asset_id: int, shard_id: int,
                             to_addr: str, **kwargs) -> ResponseEnvelope:
        form = forms.transfer_asset(account, asset_id, shard_id, to_addr, **kwargs)
        return await self.post("transfer_asset", form)

    async def consume_shard(self, user_account: Account, asset_id: int,
                            shard_id: int) -> ResponseEnvelope:
        return await self.post("consume_shard", forms.consume_shard(user_account, asset_id, shard_id))

    async def grant_box(self, user_account: Account, creator_account: Account,
                        box_asset_id: int, real_asset_id: int, token: str,
                        user_id: int = 0) -> ResponseEnvelope:
        # signatures are composed before anything is sent
        form = forms.grant_box(
            user_account, creator_account, box_asset_id, real_asset_id, token, user_id,
        )
        return await self.post("grant_box", form)

    async def compose_shard(self, account: Account, user_account: Account,
                            consume_list: Sequence[tuple[int, int]], asset_id: int,
                            strg_no: int, token: str) -> ResponseEnvelope:
        form = forms.compose_shard(account, user_account, consume_list, asset_id, strg_no, token)
        return await self.post("compose_shard", form)

    # ── obscured-identifier operations ───────────────────────────

    async def scene_list_addr(self, union_id: str) -> ResponseEnvelope:
        return await self.post("scene_list_addr", forms.scene_list_addr(self.obfuscator, union_id))

    async def get_addr_by_union_id(self, union_id: str) -> ResponseEnvelope:
        form = forms.get_addr_by_union_id(self.obfuscator, union_id)
        return await self.post("get_addr_by_union_id", form)

    async def bind_by_union_id(self, union_id: str, mnemonic: str) -> ResponseEnvelope:
        form = forms.bind_by_union_id(self.obfuscator, union_id, mnemonic)
        return await self.post("bind_by_union_id", form)

    async def bdbox_bind(self, open_id: str, app_key: str, mnemonic: str) -> ResponseEnvelope:
        form = forms.bdbox_bind(self.obfuscator, open_id, app_key, mnemonic)
        return await self.post("bdbox_bind", form)

    async def bdbox_register(self, open_id: str, app_key: str) -> tuple[ResponseEnvelope, str]:
        """
        Register a federated identity.

        Returns the envelope and the revealed mnemonic; a mnemonic that
        cannot be revealed raises ObfuscationFailed carrying the remote ids.
        """
        env = await self.post("bdbox_register", forms.bdbox_register(self.obfuscator, open_id, app_key))
        try:
            mnemonic = self.obfuscator.reveal(env.get("mnemonic") or "")
        except ObfuscationFailed as exc:
            logger.warning(
                "get resp succ but cannot decode mnemonic. [request_id: %s] [trace_id: %s]",
                env.request_id, env.trace_id,
                extra={"operation": "bdbox_register", "request_id": env.request_id,
                       "trace_id": env.trace_id},
            )
            raise ObfuscationFailed(
                exc.message, operation="bdbox_register",
                request_id=env.request_id or None, trace_id=env.trace_id or None,
            ) from exc
        return env, mnemonic
