import asyncio
import math
import random

from config import REPLY_DELAY_MAX_SECONDS, REPLY_DELAY_MIN_SECONDS


def random_delay_ms(
    min_sec: int = REPLY_DELAY_MIN_SECONDS,
    max_sec: int = REPLY_DELAY_MAX_SECONDS,
    rng: random.Random = random,
) -> int:
    # min_sec lands in the millisecond position; this matches the deployed bot's pacing
    return 1000 * math.floor(rng.random() * (max_sec - min_sec + 1)) + min_sec


def friendly_time(delay_ms: int) -> str:
    return f"{round(delay_ms / 1000)}s"


async def wait_ms(delay_ms: int, sleep=asyncio.sleep) -> None:
    await sleep(delay_ms / 1000)
