"""httpx-based Slack client for Incoming Webhooks and file uploads."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from notify_slack.slack.sanitize import sanitize_headers
from notify_slack.types.slack import PostFileParam, PostTextParam, UploadURLParam

logger = logging.getLogger(__name__)

SLACK_API_URL = "https://slack.com/api"
DEFAULT_TIMEOUT = 30.0


class SlackError(Exception):
    """Slack rejected a request or could not be reached."""


class SlackClient:
    """Lightweight Slack client.

    Posting text goes to an Incoming Webhook URL; uploading a file goes
    through the Web API and needs a bot/user token. Use as an async context
    manager so the connection pool is released::

        async with SlackClient.for_webhook(url) as client:
            await client.post_text(PostTextParam(text="deployed"))

    An ``http_client`` passed in is borrowed, not closed.
    """

    def __init__(
        self,
        *,
        url: str | None = None,
        token: str | None = None,
        http_client: httpx.AsyncClient | None = None,
        api_url: str = SLACK_API_URL,
    ) -> None:
        self.url = httpx.URL(url) if url else None
        self._token = token or ""
        self._api_url = api_url.rstrip("/")
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=DEFAULT_TIMEOUT)

    @classmethod
    def for_webhook(
        cls, url: str, *, http_client: httpx.AsyncClient | None = None,
    ) -> SlackClient:
        """Client for posting text to an Incoming Webhook."""
        if not url:
            raise ValueError("client: missing url")
        try:
            parsed = httpx.URL(url)
        except httpx.InvalidURL as exc:
            raise ValueError(f"failed to parse url: {url}: {exc}") from exc
        if not parsed.scheme or not parsed.host:
            raise ValueError(f"failed to parse url: {url}")
        return cls(url=url, http_client=http_client)

    @classmethod
    def for_file(
        cls,
        token: str,
        *,
        http_client: httpx.AsyncClient | None = None,
        api_url: str = SLACK_API_URL,
    ) -> SlackClient:
        """Client for uploading files through the Web API."""
        if not token:
            raise ValueError("provide Slack token")
        return cls(token=token, http_client=http_client, api_url=api_url)

    async def __aenter__(self) -> SlackClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _post(self, url: str | httpx.URL, **kwargs: Any) -> httpx.Response:
        request = self._client.build_request("POST", url, **kwargs)
        logger.debug(
            "POST %s headers=%s", request.url, sanitize_headers(dict(request.headers)),
        )
        try:
            resp = await self._client.send(request)
        except httpx.HTTPError as exc:
            raise SlackError(f"request to {request.url.host} failed: {exc}") from exc
        logger.debug("response %d from %s", resp.status_code, request.url.host)
        return resp

    def _auth_headers(self) -> dict[str, str]:
        if not self._token:
            raise SlackError("provide Slack token")
        return {"Authorization": f"Bearer {self._token}"}

    @staticmethod
    def _api_result(resp: httpx.Response) -> dict[str, Any]:
        if resp.status_code != httpx.codes.OK:
            raise SlackError(f"status code: {resp.status_code}; body: {resp.text}")
        try:
            data = resp.json()
        except ValueError as exc:
            raise SlackError(f"response returned from slack is not json: body: {resp.text}") from exc
        if not isinstance(data, dict) or not data.get("ok"):
            raise SlackError(f"response has failed; body: {resp.text}")
        return data

    # -- Public API -------------------------------------------------------

    async def post_text(self, param: PostTextParam) -> None:
        """Post a message to the webhook. Empty text is not sent."""
        if not param.text:
            return
        if self.url is None:
            raise SlackError("client: missing url")

        resp = await self._post(self.url, json=param.to_payload())
        if resp.status_code != httpx.codes.OK:
            raise SlackError(f"status code: {resp.status_code}; body: {resp.text}")

    async def get_upload_url_external(self, param: UploadURLParam) -> tuple[str, str]:
        """Reserve an upload slot. Returns ``(upload_url, file_id)``."""
        if not param.filename:
            raise SlackError("provide filename")
        if param.length == 0:
            raise SlackError("provide length")

        form = {"filename": param.filename, "length": str(param.length)}
        if param.snippet_type:
            form["snippet_type"] = param.snippet_type

        resp = await self._post(
            f"{self._api_url}/files.getUploadURLExternal",
            data=form,
            headers=self._auth_headers(),
        )
        data = self._api_result(resp)
        return data.get("upload_url", ""), data.get("file_id", "")

    async def upload_to_url(self, upload_url: str, filename: str, content: bytes) -> None:
        """Send the file body to the URL returned by get_upload_url_external."""
        resp = await self._post(upload_url, files={"file": (filename, content)})
        if resp.status_code != httpx.codes.OK:
            raise SlackError(f"status code: {resp.status_code}; body: {resp.text}")

    async def complete_upload_external(
        self, file_id: str, title: str, channel_id: str = "",
    ) -> None:
        """Finish the upload and share it to *channel_id* when given."""
        form = {"files": json.dumps([{"id": file_id, "title": title}])}
        if channel_id:
            form["channel_id"] = channel_id

        resp = await self._post(
            f"{self._api_url}/files.completeUploadExternal",
            data=form,
            headers=self._auth_headers(),
        )
        self._api_result(resp)

    async def post_file(self, param: PostFileParam, content: bytes) -> None:
        """Upload *content* as a file (or snippet, with ``snippet_type``)."""
        upload_url, file_id = await self.get_upload_url_external(UploadURLParam(
            filename=param.filename,
            length=len(content),
            snippet_type=param.snippet_type,
        ))
        await self.upload_to_url(upload_url, param.filename, content)
        await self.complete_upload_external(file_id, param.filename, param.channel_id)
        logger.info("uploaded %s (%d bytes)", param.filename, len(content))
