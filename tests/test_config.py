import os

import pytest

from config import DEFAULT_MODEL, DEFAULT_ROLE, dotenv_path, load_settings, settings_from_env
from errors import ConfigError

BASE_ENV = {
    "SLACK_USER_TOKEN": "xoxp-1",
    "SLACK_APP_TOKEN": "xapp-1",
    "OPENAI_API_KEY": "sk-1",
}


class TestSettingsFromEnv:
    def test_defaults(self):
        s = settings_from_env(BASE_ENV)
        assert s.role == DEFAULT_ROLE == "software developer"
        assert s.model == DEFAULT_MODEL
        assert s.history_limit == 20
        assert (s.reply_delay_min, s.reply_delay_max) == (15, 300)
        assert (s.channel_outreach_hours, s.dm_outreach_hours) == (1, 3)
        assert s.slack_signing_secret is None
        assert s.log_level == "INFO"

    def test_overrides(self):
        s = settings_from_env({
            **BASE_ENV,
            "ROLE": "data scientist",
            "OPENAI_MODEL": "gpt-4o-mini",
            "HISTORY_LIMIT": "10",
            "REPLY_DELAY_MIN": "5",
            "REPLY_DELAY_MAX": "60",
            "DM_OUTREACH_HOURS": "0.5",
            "LOG_LEVEL": "debug",
        })
        assert s.role == "data scientist"
        assert s.model == "gpt-4o-mini"
        assert s.history_limit == 10
        assert (s.reply_delay_min, s.reply_delay_max) == (5, 60)
        assert s.dm_outreach_hours == 0.5
        assert s.log_level == "DEBUG"

    def test_bot_token_fallback(self):
        env = {**BASE_ENV, "SLACK_BOT_TOKEN": "xoxb-1"}
        del env["SLACK_USER_TOKEN"]
        assert settings_from_env(env).slack_token == "xoxb-1"

    def test_settings_are_immutable(self):
        s = settings_from_env(BASE_ENV)
        with pytest.raises(AttributeError):
            s.role = "manager"

    @pytest.mark.parametrize("missing", ["SLACK_USER_TOKEN", "SLACK_APP_TOKEN", "OPENAI_API_KEY"])
    def test_missing_required(self, missing):
        env = {k: v for k, v in BASE_ENV.items() if k != missing}
        with pytest.raises(ConfigError, match=missing):
            settings_from_env(env)

    @pytest.mark.parametrize("env", [
        {"HISTORY_LIMIT": "twenty"},
        {"HISTORY_LIMIT": "0"},
        {"REPLY_DELAY_MIN": "-1"},
        {"REPLY_DELAY_MIN": "400"},
        {"CHANNEL_OUTREACH_HOURS": "0"},
        {"CHANNEL_OUTREACH_HOURS": "nan"},
        {"DM_OUTREACH_HOURS": "inf"},
        {"DM_OUTREACH_HOURS": "-inf"},
    ])
    def test_invalid_numbers(self, env):
        with pytest.raises(ConfigError):
            settings_from_env({**BASE_ENV, **env})


class TestLoadSettings:
    def test_profile_path(self):
        assert dotenv_path(None) == ".env"
        assert dotenv_path("staging") == ".env.staging"

    def test_loads_profile_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(os, "environ", {})
        (tmp_path / ".env.staging").write_text(
            "SLACK_USER_TOKEN=xoxp-staging\n"
            "SLACK_APP_TOKEN=xapp-staging\n"
            "OPENAI_API_KEY=sk-staging\n"
            "ROLE=QA engineer\n"
        )
        (tmp_path / ".env").write_text("ROLE=should not load\n")

        s = load_settings("staging")
        assert s.slack_token == "xoxp-staging"
        assert s.role == "QA engineer"

    def test_environment_wins_over_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(os, "environ", {**BASE_ENV, "ROLE": "tech lead"})
        (tmp_path / ".env").write_text("ROLE=designer\n")

        assert load_settings().role == "tech lead"


class TestLogLevel:
    @pytest.mark.parametrize("raw, expected", [("debug", "DEBUG"), (" warning ", "WARNING"), ("", "INFO")])
    def test_accepts_level_names(self, raw, expected):
        assert settings_from_env({**BASE_ENV, "LOG_LEVEL": raw}).log_level == expected

    @pytest.mark.parametrize("raw", ["BASICCONFIG", "verbose", "LOGGER"])
    def test_rejects_anything_else(self, raw):
        with pytest.raises(ConfigError, match="LOG_LEVEL"):
            settings_from_env({**BASE_ENV, "LOG_LEVEL": raw})
