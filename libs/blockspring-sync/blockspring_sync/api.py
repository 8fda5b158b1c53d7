"""HTTP client for the Blockspring block endpoints."""

from __future__ import annotations

import logging
from typing import Any, Callable

import httpx
from pydantic import ValidationError

from blockspring_core.errors import (
    FetchFailed,
    NotFoundOrForbidden,
    TemplateFetchFailed,
    TransportError,
    Unauthenticated,
    UnsupportedLanguage,
)
from blockspring_core.models import Block
from blockspring_core.settings import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, user_agent

logger = logging.getLogger(__name__)

CredentialsProvider = Callable[[], tuple[str | None, str]]


class BlockspringAPI:
    """Fetch, create and update blocks; fetch language templates.

    Credentials are resolved on every request and forwarded as the
    `api_key` query parameter. Failed calls are never retried.
    """

    def __init__(
        self,
        credentials: CredentialsProvider,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ):
        self.credentials = credentials
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport
        self.headers = {"User-Agent": user_agent(), "Accept": "application/json"}

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        _user, key = self.credentials()
        logger.debug(f"{method} {self.base_url}{path}")
        with httpx.Client(
            base_url=self.base_url,
            headers=self.headers,
            timeout=self.timeout,
            transport=self.transport,
        ) as client:
            resp = client.request(method, path, params={"api_key": key}, **kwargs)
        logger.debug(f"{method} {path} -> {resp.status_code}")
        return resp

    @staticmethod
    def _parse_block(resp: httpx.Response) -> Block:
        try:
            data = resp.json()
            if not isinstance(data, dict):
                raise ValueError("expected a JSON object")
            return Block.from_dict(data)
        except (ValueError, ValidationError) as e:
            raise FetchFailed(f"Server returned malformed block data: {e}") from e

    def fetch_block(self, block_id: str) -> Block:
        try:
            resp = self._request("GET", f"/cli/blocks/{block_id}")
        except httpx.HTTPError as e:
            raise TransportError(str(e)) from e

        if resp.status_code == 200:
            return self._parse_block(resp)
        if resp.status_code == 404:
            raise NotFoundOrForbidden(
                "That block does not exist or you don't have permission to access it"
            )
        raise FetchFailed("Could not get block data from server")

    def fetch_template(self, language: str) -> Block:
        try:
            resp = self._request("GET", f"/cli/templates/{language}")
        except httpx.HTTPError as e:
            raise TemplateFetchFailed(str(e)) from e

        if resp.status_code == 404:
            raise UnsupportedLanguage(f"The language '{language}' is not supported by Blockspring.")
        if resp.status_code != 200:
            raise TemplateFetchFailed(
                f"Could not get the '{language}' template from server (status {resp.status_code})"
            )
        try:
            return self._parse_block(resp)
        except FetchFailed as e:
            raise TemplateFetchFailed(str(e)) from e

    def create_or_update_block(self, block: Block, force: bool = False) -> Block:
        """POST to the collection for new blocks, to the item once an id exists."""
        if block.config.id:
            path = f"/cli/blocks/{block.config.id}"
        else:
            path = "/cli/blocks"
        try:
            resp = self._request("POST", path, json=block.to_payload(force=force))
        except httpx.HTTPError as e:
            raise TransportError(str(e)) from e

        if resp.status_code == 200:
            return self._parse_block(resp)
        if resp.status_code == 401:
            raise Unauthenticated("You must be logged in to push a block")
        if resp.status_code == 404:
            raise NotFoundOrForbidden(
                "That block does not exist or you don't have permission to push to it"
            )
        raise TransportError(f"Push failed: server responded with status {resp.status_code}")
