from typing import Optional


class BotError(Exception):
    """Base exception for the bot. Carries the underlying cause when there is one."""

    def __init__(self, message: str, *, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class ConfigError(BotError):
    pass


class TransportFetchError(BotError):
    """Listing or history retrieval failed."""


class TransportPostError(BotError):
    """Sending a message failed."""


class InferenceError(BotError):
    """The model call failed or returned something we can't use."""


class IdentityResolutionError(BotError):
    """auth.test failed at startup; mentions can't be told apart without it."""
