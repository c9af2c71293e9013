import logging
from typing import Optional

from openai import AsyncOpenAI, OpenAIError

from config import DEFAULT_MODEL, DEFAULT_ROLE
from errors import InferenceError

logger = logging.getLogger(__name__)

END_SENTINEL = "end"

TAG_INSTRUCTION = "If you want to tag a user from the conversation, use the syntax <@USER_ID>."

STYLE_PROMPT = """
Respond with a Slack message that fits the entire conversation.
Pay attention to any asks of you or questions that aren't adequately answered. Prioritize more recent messages.
Don't explain that you'll respond, simply respond as if you were already a participant in the conversation.
Avoid generic or robotic replies. Be professional, yet casual. You're discussing with peers.
To reference a participant, tag them with the syntax <@USER_ID>.
If the conversation has reached a natural end, reply with exactly one word: end.
""".strip()


def build_system_prompt(role: str) -> str:
    return f"You are a {role}, a real team member."


def interpret_completion(content: Optional[str]) -> Optional[str]:
    """Trimmed reply, or None when the model has nothing to add."""
    text = (content or "").strip()
    if not text or text == END_SENTINEL:
        return None
    return text


class ResponseGenerator:
    def __init__(self, client: AsyncOpenAI, role: str = DEFAULT_ROLE, model: str = DEFAULT_MODEL):
        self.client = client
        self.role = role
        self.model = model

    def build_messages(self, prompt: str) -> list[dict]:
        # the style rules ride in the assistant slot, ahead of the user turn
        return [
            {"role": "system", "content": build_system_prompt(self.role)},
            {"role": "assistant", "content": STYLE_PROMPT},
            {"role": "user", "content": prompt},
        ]

    async def generate_reply(self, prompt: str) -> Optional[str]:
        try:
            resp = await self.client.chat.completions.create(
                model=self.model,
                messages=self.build_messages(prompt),
            )
        except OpenAIError as e:
            raise InferenceError(f"chat completion failed: {e!r}", cause=e) from e

        if not getattr(resp, "choices", None):
            raise InferenceError("chat completion returned no choices")

        reply = interpret_completion(resp.choices[0].message.content)
        if reply is None:
            logger.debug("model signalled no reply")
        return reply
