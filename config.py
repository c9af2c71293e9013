import logging
import math
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from errors import ConfigError

DEFAULT_ROLE = "software developer"
DEFAULT_MODEL = "gpt-4o"

# -- Activity pacing (documented constants, overridable per profile) --
HISTORY_LIMIT = 20
REPLY_DELAY_MIN_SECONDS = 15
REPLY_DELAY_MAX_SECONDS = 300
CHANNEL_OUTREACH_HOURS = 1
DM_OUTREACH_HOURS = 3


@dataclass(frozen=True)
class Settings:
    slack_token: str
    slack_app_token: str
    openai_api_key: str
    slack_signing_secret: Optional[str] = None
    role: str = DEFAULT_ROLE
    model: str = DEFAULT_MODEL
    history_limit: int = HISTORY_LIMIT
    reply_delay_min: int = REPLY_DELAY_MIN_SECONDS
    reply_delay_max: int = REPLY_DELAY_MAX_SECONDS
    channel_outreach_hours: float = CHANNEL_OUTREACH_HOURS
    dm_outreach_hours: float = DM_OUTREACH_HOURS
    log_level: str = "INFO"


def dotenv_path(profile: Optional[str]) -> str:
    return f".env.{profile}" if profile else ".env"


def _required(env: Mapping[str, str], *names: str) -> str:
    for name in names:
        value = (env.get(name) or "").strip()
        if value:
            return value
    raise ConfigError(f"{names[0]} missing")


def _number(env: Mapping[str, str], name: str, default, cast=int):
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = cast(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number, got {raw!r}", cause=e) from e
    if not math.isfinite(value):
        raise ConfigError(f"{name} must be a finite number, got {raw!r}")
    if value < 0:
        raise ConfigError(f"{name} must not be negative")
    return value


def settings_from_env(env: Mapping[str, str]) -> Settings:
    delay_min = _number(env, "REPLY_DELAY_MIN", REPLY_DELAY_MIN_SECONDS)
    delay_max = _number(env, "REPLY_DELAY_MAX", REPLY_DELAY_MAX_SECONDS)
    if delay_min > delay_max:
        raise ConfigError("REPLY_DELAY_MIN must not exceed REPLY_DELAY_MAX")

    log_level = (env.get("LOG_LEVEL") or "INFO").strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigError(f"LOG_LEVEL must be a logging level name, got {log_level!r}")

    history_limit = _number(env, "HISTORY_LIMIT", HISTORY_LIMIT)
    if history_limit < 1:
        raise ConfigError("HISTORY_LIMIT must be at least 1")

    channel_hours = _number(env, "CHANNEL_OUTREACH_HOURS", CHANNEL_OUTREACH_HOURS, float)
    dm_hours = _number(env, "DM_OUTREACH_HOURS", DM_OUTREACH_HOURS, float)
    if not channel_hours or not dm_hours:
        raise ConfigError("outreach intervals must be greater than zero")

    return Settings(
        slack_token=_required(env, "SLACK_USER_TOKEN", "SLACK_BOT_TOKEN"),
        slack_app_token=_required(env, "SLACK_APP_TOKEN"),
        openai_api_key=_required(env, "OPENAI_API_KEY"),
        slack_signing_secret=(env.get("SLACK_SIGNING_SECRET") or "").strip() or None,
        role=(env.get("ROLE") or "").strip() or DEFAULT_ROLE,
        model=(env.get("OPENAI_MODEL") or "").strip() or DEFAULT_MODEL,
        history_limit=history_limit,
        reply_delay_min=delay_min,
        reply_delay_max=delay_max,
        channel_outreach_hours=channel_hours,
        dm_outreach_hours=dm_hours,
        log_level=log_level,
    )


def load_settings(profile: Optional[str] = None) -> Settings:
    """
    Load `.env` (or `.env.<profile>`) into the process environment, then build Settings.
    Variables already set in the environment win over the file.
    """
    load_dotenv(dotenv_path(profile))
    return settings_from_env(os.environ)
