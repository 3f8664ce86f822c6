"""Tests for the configuration management subsystem."""

import datetime
import logging
import os
import stat
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from kick.config import Config
from kick.constants import DEFAULT_COMMIT_MESSAGE, NONCE_PATH
from kick.git_wrapper import GitError


def test_config_defaults() -> None:
    """Verifies that the configuration initializes with sensible defaults."""
    conf = Config()
    assert conf.debug is False
    assert conf.nonce is False
    assert conf.fetch_all is True
    assert conf.pull_all is True
    assert conf.push_all is True
    assert conf.sync_tags is True
    assert conf.commit_message == DEFAULT_COMMIT_MESSAGE == "up"
    assert conf.remotes == []


def test_from_env_empty_environment_keeps_defaults() -> None:
    assert Config.from_env({}) == Config()


def test_from_env_applies_sentinels() -> None:
    """Verifies that each variable is honoured when set to its sentinel."""
    conf = Config.from_env(
        {
            "KICK_MESSAGE": "sync",
            "KICK_NONCE": "1",
            "KICK_FETCH_ALL": "0",
            "KICK_PULL_ALL": "0",
            "KICK_PUSH_ALL": "0",
            "KICK_SYNC_TAGS": "0",
        }
    )
    assert conf.commit_message == "sync"
    assert conf.nonce is True
    assert conf.fetch_all is False
    assert conf.pull_all is False
    assert conf.push_all is False
    assert conf.sync_tags is False


def test_from_env_empty_message_is_honoured() -> None:
    """An explicitly empty message means "commit without -m"."""
    assert Config.from_env({"KICK_MESSAGE": ""}).commit_message == ""


@pytest.mark.parametrize("value", ["true", "yes", "", "2", " 1"])
def test_from_env_ignores_other_values(
    value: str, caplog: pytest.LogCaptureFixture
) -> None:
    """Verifies that non-sentinel values leave defaults alone and are reported."""
    caplog.set_level(logging.WARNING)

    conf = Config.from_env({"KICK_NONCE": value, "KICK_PUSH_ALL": value})

    assert conf.nonce is False
    assert conf.push_all is True
    assert "Ignoring KICK_NONCE" in caplog.text
    assert "Ignoring KICK_PUSH_ALL" in caplog.text


def test_nonce_env_is_opt_in_only() -> None:
    """KICK_NONCE=0 is not a recognised sentinel; the default stays off."""
    assert Config.from_env({"KICK_NONCE": "0"}).nonce is False


def test_from_env_reads_process_environment(mocker: MagicMock) -> None:
    mocker.patch.dict(os.environ, {"KICK_SYNC_TAGS": "0"}, clear=True)
    assert Config.from_env().sync_tags is False


def test_flags_override_environment() -> None:
    """Verifies the cascading merge logic (Defaults -> Environment -> Flags)."""
    environ = {"KICK_MESSAGE": "from-env", "KICK_PULL_ALL": "0", "KICK_PUSH_ALL": "0"}

    conf = Config.load(environ, commit_message="from-flag", pull_all=True)

    assert conf.commit_message == "from-flag"  # Flag beats environment
    assert conf.pull_all is True  # Flag beats environment
    assert conf.push_all is False  # Environment beats default


def test_unset_flags_leave_lower_tiers() -> None:
    conf = Config.load({"KICK_SYNC_TAGS": "0"}, sync_tags=None, debug=None)
    assert conf.sync_tags is False
    assert conf.debug is False


def test_apply_flags_rejects_unknown_keys() -> None:
    with pytest.raises(ValueError, match="Unknown config keys: remotes, verbose"):
        Config().apply_flags(verbose=True, remotes=["origin"])


def test_query_remotes_replaces_cache() -> None:
    """Verifies that each query replaces (not extends) the remote list."""
    repo = MagicMock()
    conf = Config(remotes=["stale"])

    repo.remote_names.return_value = ["origin", "backup"]
    assert conf.query_remotes(repo) == ["origin", "backup"]
    assert conf.remotes == ["origin", "backup"]

    repo.remote_names.return_value = []
    conf.query_remotes(repo)
    assert conf.remotes == []


def test_query_remotes_propagates_failure() -> None:
    repo = MagicMock()
    repo.remote_names.side_effect = GitError("boom", ["remote"], 128)
    conf = Config(remotes=["origin"])

    with pytest.raises(GitError):
        conf.query_remotes(repo)

    assert conf.remotes == ["origin"]


def test_ensure_nonce_writes_utc_timestamp(tmp_path: Path) -> None:
    """Verifies that the marker holds an RFC 3339 UTC timestamp."""
    when = datetime.datetime(2024, 5, 6, 7, 8, 9, tzinfo=datetime.timezone.utc)

    path = Config().ensure_nonce(tmp_path, now=when)

    assert path == tmp_path / NONCE_PATH
    assert path.read_text() == "2024-05-06T07:08:09Z"
    assert not stat.S_IMODE(path.stat().st_mode) & 0o022


def test_ensure_nonce_converts_to_utc(tmp_path: Path) -> None:
    offset = datetime.timezone(datetime.timedelta(hours=2))
    when = datetime.datetime(2024, 5, 6, 9, 0, 0, tzinfo=offset)

    Config().ensure_nonce(tmp_path, now=when)

    assert (tmp_path / NONCE_PATH).read_text() == "2024-05-06T07:00:00Z"


def test_ensure_nonce_truncates_and_advances(tmp_path: Path) -> None:
    """Verifies that re-running replaces the old timestamp with a later one."""
    marker = tmp_path / NONCE_PATH
    marker.write_text("x" * 100)

    first = datetime.datetime(2024, 1, 1, tzinfo=datetime.timezone.utc)
    Config().ensure_nonce(tmp_path, now=first)
    first_value = marker.read_text()

    Config().ensure_nonce(tmp_path, now=first + datetime.timedelta(seconds=1))
    second_value = marker.read_text()

    parse = datetime.datetime.fromisoformat
    assert first_value == "2024-01-01T00:00:00Z"
    assert parse(second_value) > parse(first_value)


def test_ensure_nonce_defaults_to_cwd_and_now(
    tmp_path: Path, mocker: MagicMock
) -> None:
    mocker.patch.object(Path, "cwd", return_value=tmp_path)
    before = datetime.datetime.now(datetime.timezone.utc).replace(microsecond=0)

    Config().ensure_nonce()

    written = datetime.datetime.fromisoformat((tmp_path / NONCE_PATH).read_text())
    assert written.tzinfo is not None
    assert written >= before


def test_ensure_nonce_propagates_write_errors(tmp_path: Path) -> None:
    with pytest.raises(OSError):
        Config().ensure_nonce(tmp_path / "missing")
