import asyncio
from dataclasses import dataclass
from typing import List, Optional

import aiohttp
from slack_sdk.errors import SlackClientError
from slack_sdk.web.async_client import AsyncWebClient

from errors import IdentityResolutionError, TransportFetchError, TransportPostError

SLACKBOT_USER_ID = "USLACKBOT"

# slack_sdk wraps API-level failures; aiohttp/timeouts surface raw from the async client
_CLIENT_ERRORS = (SlackClientError, aiohttp.ClientError, asyncio.TimeoutError)

PAGE_SIZE = 1000


@dataclass(frozen=True)
class Message:
    author: str
    text: Optional[str] = None


@dataclass(frozen=True)
class Channel:
    id: str
    name: str
    is_member: bool = False
    is_archived: bool = False


@dataclass(frozen=True)
class User:
    id: str
    name: str
    real_name: Optional[str] = None
    deleted: bool = False
    is_bot: bool = False

    @property
    def display_name(self) -> str:
        return self.real_name or self.name or "Unknown"


class SlackTransport:
    """Narrow async wrapper over the Slack Web API calls the bot needs."""

    def __init__(self, client: AsyncWebClient):
        self.client = client

    async def fetch_recent_messages(self, channel_id: str, limit: int) -> List[Message]:
        """Most recent messages in a conversation, newest first (Slack's order)."""
        try:
            resp = await self.client.conversations_history(channel=channel_id, limit=limit)
        except _CLIENT_ERRORS as e:
            raise TransportFetchError(f"history fetch failed for {channel_id}: {e!r}", cause=e) from e

        msgs = resp.get("messages", []) or []
        return [Message(author=m.get("user") or m.get("bot_id") or "unknown", text=m.get("text")) for m in msgs]

    async def post_message(self, channel_id: str, text: str) -> None:
        try:
            await self.client.chat_postMessage(channel=channel_id, text=text)
        except _CLIENT_ERRORS as e:
            raise TransportPostError(f"post failed for {channel_id}: {e!r}", cause=e) from e

    async def list_channels(self, types: str = "public_channel", exclude_archived: bool = True) -> List[Channel]:
        chans = await self._paginate(
            "channels",
            self.client.conversations_list,
            types=types,
            exclude_archived=exclude_archived,
        )
        return [
            Channel(
                id=c["id"],
                name=c.get("name") or "",
                is_member=bool(c.get("is_member")),
                is_archived=bool(c.get("is_archived")),
            )
            for c in chans
        ]

    async def list_users(self) -> List[User]:
        members = await self._paginate("members", self.client.users_list)
        return [
            User(
                id=u["id"],
                name=u.get("name") or "",
                real_name=u.get("real_name") or (u.get("profile") or {}).get("real_name"),
                deleted=bool(u.get("deleted")),
                is_bot=bool(u.get("is_bot")),
            )
            for u in members
        ]

    async def open_dm(self, user_id: str) -> str:
        """Channel id of the 1:1 conversation with a user (opened if needed)."""
        try:
            resp = await self.client.conversations_open(users=user_id)
        except _CLIENT_ERRORS as e:
            raise TransportFetchError(f"could not open DM with {user_id}: {e!r}", cause=e) from e

        channel_id = (resp.get("channel") or {}).get("id")
        if not channel_id:
            raise TransportFetchError(f"conversations.open returned no channel for {user_id}")
        return channel_id

    async def resolve_self_identity(self) -> str:
        try:
            resp = await self.client.auth_test()
        except _CLIENT_ERRORS as e:
            raise IdentityResolutionError(f"auth.test failed: {e!r}", cause=e) from e

        user_id = resp.get("user_id")
        if not user_id:
            raise IdentityResolutionError("auth.test returned no user_id")
        return user_id

    async def _paginate(self, key: str, method, **kwargs) -> List[dict]:
        items: List[dict] = []
        cursor = None
        while True:
            try:
                resp = await method(limit=PAGE_SIZE, cursor=cursor, **kwargs)
            except _CLIENT_ERRORS as e:
                raise TransportFetchError(f"{key} listing failed: {e!r}", cause=e) from e

            items.extend(resp.get(key, []) or [])
            cursor = (resp.get("response_metadata") or {}).get("next_cursor")
            if not cursor:
                return items
