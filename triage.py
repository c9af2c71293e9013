import asyncio
import logging
import random
from typing import Optional

from config import Settings
from context import assemble_context
from errors import BotError
from llm import TAG_INSTRUCTION
from pacing import friendly_time, random_delay_ms, wait_ms

logger = logging.getLogger(__name__)

DM_PREAMBLE = "Here are the most recent messages in a Slack DM."
CHANNEL_PREAMBLE = "Here are the most recent messages in a Slack channel."
MENTION_PREAMBLE = "You were mentioned in this message:"

# subtyped events that are still a person talking (attachment with text, "also send to channel")
HUMAN_SUBTYPES = frozenset({"file_share", "thread_broadcast"})


def mention_token(self_id: Optional[str]) -> Optional[str]:
    # no identity yet -> no token -> nothing can match
    return f"<@{self_id}>" if self_id else None


def is_dm(event: dict) -> bool:
    return event.get("channel_type") == "im"


class InboundTriage:
    """
    Decides whether an incoming message deserves a reply, drafts it, and posts it
    after a human-looking pause.

    Concurrent events are independent: each handle() call owns its own delay, and
    replies to the same channel are not deduplicated.
    """

    def __init__(
        self,
        transport,
        generator,
        settings: Settings,
        self_id: Optional[str] = None,
        rng: Optional[random.Random] = None,
        sleep=asyncio.sleep,
    ):
        self.transport = transport
        self.generator = generator
        self.settings = settings
        self.self_id = self_id
        self.rng = rng or random.Random()
        self.sleep = sleep

    def should_ignore(self, event: dict) -> bool:
        # Ignore bot messages + non-human subtypes (edits, joins, etc.) and our own posts
        if event.get("bot_id"):
            return True
        subtype = event.get("subtype")
        if subtype and subtype not in HUMAN_SUBTYPES:
            return True
        return bool(self.self_id) and event.get("user") == self.self_id

    async def build_prompt(self, event: dict) -> Optional[str]:
        channel_id = event["channel"]

        if is_dm(event):
            context = await assemble_context(self.transport, channel_id, self.settings.history_limit)
            return "\n".join([DM_PREAMBLE, context])

        token = mention_token(self.self_id)
        text = event.get("text")
        if token and isinstance(text, str) and token in text:
            context = await assemble_context(self.transport, channel_id, self.settings.history_limit)
            return "\n".join([
                TAG_INSTRUCTION,
                CHANNEL_PREAMBLE,
                context,
                MENTION_PREAMBLE,
                text,
            ])

        return None

    async def handle(self, event: dict) -> Optional[str]:
        """Run one triage pass. Returns the posted reply, or None if nothing was sent."""
        channel_id = event.get("channel")
        logger.info("Message event in %s %s: %s", event.get("channel_type"), channel_id, event.get("text"))

        if not channel_id or self.should_ignore(event):
            logger.info("  ignoring...")
            return None

        try:
            prompt = await self.build_prompt(event)
            if not prompt:
                logger.info("  ignoring...")
                return None

            reply = await self.generator.generate_reply(prompt)
            if not reply:
                logger.info("    no response needed...")
                return None

            delay = random_delay_ms(self.settings.reply_delay_min, self.settings.reply_delay_max, self.rng)
            logger.info("responding in %s.\n%s", friendly_time(delay), reply)
            await wait_ms(delay, self.sleep)
            await self.transport.post_message(channel_id, reply)
            return reply
        except BotError as e:
            logger.error("triage aborted for %s: %s", channel_id, e)
            return None
