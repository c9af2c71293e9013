"""Shared fakes for the bot tests."""

import random

import pytest

from config import Settings


class FakeTransport:
    """In-memory stand-in for SlackTransport. History is stored newest first, like Slack."""

    def __init__(self, history=None, channels=None, users=None):
        self.history = history or {}
        self.channels = channels or []
        self.users = users or []
        self.fetches = []
        self.posts = []
        self.opened = []
        self.fetch_error = None
        self.post_error = None
        self.list_error = None

    async def fetch_recent_messages(self, channel_id, limit):
        self.fetches.append((channel_id, limit))
        if self.fetch_error:
            raise self.fetch_error
        return list(self.history.get(channel_id, []))[:limit]

    async def post_message(self, channel_id, text):
        if self.post_error:
            raise self.post_error
        self.posts.append((channel_id, text))

    async def list_channels(self, types="public_channel", exclude_archived=True):
        if self.list_error:
            raise self.list_error
        return list(self.channels)

    async def list_users(self):
        if self.list_error:
            raise self.list_error
        return list(self.users)

    async def open_dm(self, user_id):
        self.opened.append(user_id)
        return f"D{user_id}"


class FakeGenerator:
    def __init__(self, reply="Sounds good, I'll take a look.", error=None):
        self.reply = reply
        self.error = error
        self.prompts = []

    async def generate_reply(self, prompt):
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return self.reply


class SleepRecorder:
    def __init__(self):
        self.calls = []

    async def __call__(self, seconds):
        self.calls.append(seconds)


@pytest.fixture
def settings():
    return Settings(
        slack_token="xoxp-test",
        slack_app_token="xapp-test",
        openai_api_key="sk-test",
    )


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def sleep():
    return SleepRecorder()
