"""Slack remote client implementation.

Uses the official Slack Python SDK: the async Web API client for requests
and Socket Mode (aiohttp transport) for real-time events.
Reference: https://github.com/slackapi/python-slack-sdk
"""

import asyncio
from collections.abc import AsyncIterator, Mapping, Sequence
from datetime import datetime
from typing import Any

import aiohttp
from slack_sdk.errors import SlackApiError
from slack_sdk.socket_mode.aiohttp import SocketModeClient
from slack_sdk.socket_mode.request import SocketModeRequest
from slack_sdk.socket_mode.response import SocketModeResponse
from slack_sdk.web.async_client import AsyncWebClient

from ...events.models import RemoteEvent
from ..base import (
    DEFAULT_CHANNEL_TYPES,
    RemoteClient,
    RemoteConnectionError,
    RequestError,
)
from ..models import Channel, Message, User

# Errors raised by the SDK or its transport for a failed call
_REQUEST_ERRORS = (SlackApiError, aiohttp.ClientError, asyncio.TimeoutError)

# Message subtypes that do not carry a new message
_SEPARATE_SUBTYPES = frozenset({"message_changed", "message_deleted", "message_replied"})


def parse_timestamp(ts: str) -> datetime | None:
    """Convert a Slack "seconds.micros" timestamp, None if malformed."""
    try:
        return datetime.fromtimestamp(float(ts))
    except (TypeError, ValueError, OverflowError):
        return None


def channel_from_api(raw: Mapping[str, Any]) -> Channel:
    """Build a Channel from a conversations.list record."""
    return Channel(
        key=raw["id"],
        name=raw.get("name") or "",
        is_member=bool(raw.get("is_member", False)),
        is_private=bool(raw.get("is_private", False)),
        num_members=int(raw.get("num_members") or 0),
        is_im=bool(raw.get("is_im", False)),
        is_mpim=bool(raw.get("is_mpim", False)),
    )


def user_from_api(raw: Mapping[str, Any]) -> User:
    """Build a User from a users.list member record."""
    profile = raw.get("profile") or {}
    return User(
        key=raw["id"],
        name=raw.get("name") or "",
        real_name=raw.get("real_name") or profile.get("real_name") or "",
        email=profile.get("email") or "",
        title=profile.get("title") or "",
        deleted=bool(raw.get("deleted", False)),
    )


def message_from_api(raw: Mapping[str, Any]) -> Message | None:
    """Build a Message from a history record, None if its timestamp is unusable.

    The sender is the poster's username when Slack provides one (bots),
    otherwise the user key; the session resolves keys to names.
    """
    ts = raw.get("ts") or ""
    timestamp = parse_timestamp(ts)
    if timestamp is None:
        return None
    user_key = raw.get("user") or ""
    return Message(
        timestamp=timestamp,
        sender=raw.get("username") or user_key,
        text=raw.get("text") or "",
        user_key=user_key,
        ts=ts,
    )


def event_from_api(raw: Mapping[str, Any]) -> RemoteEvent:
    """Wrap a raw Events API payload; an untyped payload keeps its fallback key.

    Message events get a parsed ``timestamp`` next to the raw ``ts``. Edited,
    deleted and similar messages become "message_<subtype>".
    """
    event_type = raw.get("type") or ""
    data = dict(raw)
    if event_type == "message":
        if raw.get("subtype") in _SEPARATE_SUBTYPES:
            event_type = f"message_{raw['subtype']}"
        data["timestamp"] = parse_timestamp(raw.get("ts") or "")
    return RemoteEvent(type=event_type, data=data)


class SlackRemoteClient(RemoteClient):
    """Slack remote client.

    Hidden design decisions:
    - Web API client initialization and the optional "d" cookie
    - Socket Mode envelope acknowledgement
    - Cursor pagination and record format conversion
    - Slack returns history newest first; it is reversed here
    """

    def __init__(
        self,
        api_token: str,
        app_token: str = "",
        cookie: str = "",
        **client_kwargs: Any
    ):
        """Initialize the Slack client.

        Args:
            api_token: User or bot token (xoxp-/xoxb-/xoxc-)
            app_token: App-level token for Socket Mode (xapp-)
            cookie: Optional value of the "d" cookie sent on every request
            **client_kwargs: Additional kwargs for AsyncWebClient
        """
        headers = dict(client_kwargs.pop("headers", None) or {})
        if cookie:
            headers["Cookie"] = f"d={cookie}"
        self._app_token = app_token
        self._web = AsyncWebClient(token=api_token, headers=headers, **client_kwargs)
        self._self_id: str | None = None

    async def identify(self) -> str:
        if self._self_id is None:
            try:
                response = await self._web.auth_test()
            except _REQUEST_ERRORS as e:
                raise RequestError("auth.test", str(e)) from e
            self._self_id = response["user_id"]
        return self._self_id

    async def connect(self) -> AsyncIterator[RemoteEvent]:
        if not self._app_token:
            raise RemoteConnectionError("Socket Mode requires an app token (xapp-...)")

        incoming: asyncio.Queue[RemoteEvent] = asyncio.Queue()

        async def on_request(client: SocketModeClient, request: SocketModeRequest) -> None:
            await client.send_socket_mode_response(
                SocketModeResponse(envelope_id=request.envelope_id)
            )
            if request.type == "events_api":
                await incoming.put(event_from_api(request.payload.get("event") or {}))

        socket = SocketModeClient(app_token=self._app_token, web_client=self._web)
        socket.socket_mode_request_listeners.append(on_request)

        try:
            self_id = await self.identify()
            await socket.connect()
        except (RequestError, *_REQUEST_ERRORS, OSError) as e:
            await socket.close()
            raise RemoteConnectionError(f"could not connect: {e}") from e

        try:
            yield RemoteEvent(type="connected", data={"self_id": self_id})
            while True:
                yield await incoming.get()
        finally:
            await socket.disconnect()
            await socket.close()

    async def get_channels(
        self,
        cursor: str = "",
        page_size: int = 1000,
        types: Sequence[str] = DEFAULT_CHANNEL_TYPES,
    ) -> tuple[list[Channel], str]:
        try:
            response = await self._web.conversations_list(
                cursor=cursor or None,
                limit=page_size,
                types=",".join(types),
                exclude_archived=True,
            )
        except _REQUEST_ERRORS as e:
            raise RequestError("loading channels", str(e)) from e

        channels = [channel_from_api(raw) for raw in response.get("channels") or []]
        next_cursor = (response.get("response_metadata") or {}).get("next_cursor") or ""
        return channels, next_cursor

    async def get_users(self) -> list[User]:
        users: list[User] = []
        cursor = ""
        while True:
            try:
                response = await self._web.users_list(cursor=cursor or None, limit=1000)
            except _REQUEST_ERRORS as e:
                raise RequestError("loading users", str(e)) from e
            users.extend(user_from_api(raw) for raw in response.get("members") or [])
            cursor = (response.get("response_metadata") or {}).get("next_cursor") or ""
            if not cursor:
                return users

    async def get_history(self, channel_key: str, limit: int = 100) -> list[Message]:
        try:
            response = await self._web.conversations_history(channel=channel_key, limit=limit)
        except _REQUEST_ERRORS as e:
            raise RequestError("loading history", str(e)) from e

        messages = []
        for raw in reversed(response.get("messages") or []):
            message = message_from_api(raw)
            if message is not None:
                messages.append(message)
        return messages

    async def post_message(self, channel_key: str, text: str) -> None:
        try:
            await self._web.chat_postMessage(channel=channel_key, text=text)
        except _REQUEST_ERRORS as e:
            raise RequestError("posting message", str(e)) from e

    async def mark_read(self, channel_key: str, timestamp: str) -> None:
        try:
            await self._web.conversations_mark(channel=channel_key, ts=timestamp)
        except _REQUEST_ERRORS as e:
            raise RequestError("marking read", str(e)) from e

    async def close(self) -> None:
        session = getattr(self._web, "session", None)
        if session is not None and not session.closed:
            await session.close()
