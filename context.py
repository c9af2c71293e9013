from typing import Iterable

from config import HISTORY_LIMIT
from slack_read import Message


def render_context(messages: Iterable[Message]) -> str:
    """
    Render newest-first messages as an oldest-first transcript.
    Text-less messages (joins, file shares without a caption) are dropped.
    """
    lines = [f"{m.author}: {m.text}" for m in messages if m.text]
    lines.reverse()
    return "\n".join(lines)


async def assemble_context(transport, channel_id: str, limit: int = HISTORY_LIMIT) -> str:
    # "" is a real answer (no history); fetch errors propagate to the caller
    msgs = await transport.fetch_recent_messages(channel_id, limit)
    return render_context(msgs)
