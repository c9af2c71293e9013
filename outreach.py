import logging
import random
from typing import Awaitable, Callable, Iterable, List, Optional

from config import Settings
from context import assemble_context
from errors import BotError
from llm import TAG_INSTRUCTION
from slack_read import SLACKBOT_USER_ID, Channel, User

logger = logging.getLogger(__name__)


def eligible_channels(channels: Iterable[Channel]) -> List[Channel]:
    return [c for c in channels if c.is_member and not c.is_archived]


def eligible_users(users: Iterable[User], self_id: Optional[str]) -> List[User]:
    return [
        u for u in users
        if not u.deleted
        and not u.is_bot
        and u.id != SLACKBOT_USER_ID
        and u.id != self_id
    ]


def channel_prompt(context: str, channel_name: str) -> str:
    if not context:
        return f"Start a new conversation suitable for channel #{channel_name}."
    return "\n".join([
        TAG_INSTRUCTION,
        f"Here are the most recent messages in a public Slack channel #{channel_name}.",
        context,
        "Continue the existing conversation or start a new conversation relevant to the channel topic.",
    ])


def dm_prompt(context: str, user_name: str) -> str:
    if not context:
        return (
            f"You have no conversation history with {user_name}. "
            "Start a new conversation which may or may not be work-related."
        )
    return "\n".join([
        f"Here are the most recent messages in a DM with {user_name}. "
        "Continue the existing conversation or start a new conversation.",
        context,
    ])


class Outreach:
    """Proactive posts: pick a target, draft an opener, post it right away."""

    def __init__(
        self,
        transport,
        generator,
        settings: Settings,
        self_id: Optional[str] = None,
        rng: Optional[random.Random] = None,
    ):
        self.transport = transport
        self.generator = generator
        self.settings = settings
        self.self_id = self_id
        self.rng = rng or random.Random()

    async def post_to_random_channel(self) -> Optional[str]:
        channels = await self.transport.list_channels(types="public_channel", exclude_archived=True)
        pool = eligible_channels(channels)
        logger.info("Post to random public_channel: %d channels, %d eligible", len(channels), len(pool))
        if not pool:
            logger.info("No channels (or all filtered)")
            return None

        channel = self.rng.choice(pool)
        logger.info("Preparing to post in public_channel: %s", channel.name)
        context = await assemble_context(self.transport, channel.id, self.settings.history_limit)

        reply = await self.generator.generate_reply(channel_prompt(context, channel.name or "Unknown"))
        if not reply:
            logger.info("Not making any post this interval.")
            return None

        logger.info("Interval post to public_channel: %s\n%s", channel.name, reply)
        await self.transport.post_message(channel.id, reply)
        return reply

    async def message_random_user(self) -> Optional[str]:
        users = await self.transport.list_users()
        pool = eligible_users(users, self.self_id)
        logger.info("Post to random im: %d users, %d eligible", len(users), len(pool))
        if not pool:
            logger.info("No users (or all filtered)")
            return None

        user = self.rng.choice(pool)
        logger.info("Preparing to post in im: %s", user.display_name)
        channel_id = await self.transport.open_dm(user.id)
        context = await assemble_context(self.transport, channel_id, self.settings.history_limit)

        reply = await self.generator.generate_reply(dm_prompt(context, user.display_name))
        if not reply:
            logger.info("Not making any post this interval.")
            return None

        logger.info("Interval post to im: %s\n%s", user.display_name, reply)
        await self.transport.post_message(channel_id, reply)
        return reply

    async def run_tick(self, name: str, job: Callable[[], Awaitable[Optional[str]]]) -> None:
        # a failed tick is abandoned; the timer must keep firing
        try:
            await job()
        except BotError as e:
            logger.error("outreach %s abandoned: %s", name, e)
        except Exception:
            logger.exception("outreach %s crashed", name)
