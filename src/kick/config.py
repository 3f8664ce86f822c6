import datetime
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

from .constants import (
    APP_NAME,
    COMMIT_MESSAGE_ENV,
    DEFAULT_COMMIT_MESSAGE,
    ENV_DISABLE,
    ENV_ENABLE,
    FETCH_ALL_ENV,
    NONCE_ENV,
    NONCE_FILE_MODE,
    NONCE_PATH,
    NONCE_TIMESTAMP_FORMAT,
    PULL_ALL_ENV,
    PUSH_ALL_ENV,
    SYNC_TAGS_ENV,
)
from .git_wrapper import GitRepo

logger = logging.getLogger(APP_NAME)

# Boolean settings that may be switched by environment variables.
# KICK_NONCE is opt-in only; the others accept both sentinels.
_BOOL_ENV: dict[str, tuple[str, tuple[str, ...]]] = {
    "nonce": (NONCE_ENV, (ENV_ENABLE,)),
    "fetch_all": (FETCH_ALL_ENV, (ENV_ENABLE, ENV_DISABLE)),
    "pull_all": (PULL_ALL_ENV, (ENV_ENABLE, ENV_DISABLE)),
    "push_all": (PUSH_ALL_ENV, (ENV_ENABLE, ENV_DISABLE)),
    "sync_tags": (SYNC_TAGS_ENV, (ENV_ENABLE, ENV_DISABLE)),
}


def parse_env_flag(
    name: str, value: str | None, accepted: tuple[str, ...]
) -> bool | None:
    """Interprets a boolean environment variable.

    Args:
        name (str): The variable name, used for the warning message.
        value (str | None): The raw value, or None if unset.
        accepted (tuple[str, ...]): The sentinel values this variable honours.

    Returns:
        bool | None: True/False for a recognised sentinel, None to leave the
                     setting untouched.
    """
    if value is None:
        return None
    if value in accepted:
        return value == ENV_ENABLE
    logger.warning(
        f"Ignoring {name}={value!r}; expected one of {', '.join(accepted)}."
    )
    return None


@dataclass
class Config:
    """Sync behaviour for a single kick invocation.

    Attributes:
        debug (bool): Stream git output and log every command.
        nonce (bool): Rewrite the nonce marker so a commit always happens.
        fetch_all (bool): Fetch tags from every remote.
        pull_all (bool): Pull from every remote.
        push_all (bool): Push to every remote (and push tags per remote).
        sync_tags (bool): Fetch and push tags after the branch sync.
        commit_message (str): The commit message. Empty means no `-m`.
        remotes (list[str]): Remote names from the most recent query.
    """

    debug: bool = False
    nonce: bool = False
    fetch_all: bool = True
    pull_all: bool = True
    push_all: bool = True
    sync_tags: bool = True
    commit_message: str = DEFAULT_COMMIT_MESSAGE
    remotes: list[str] = field(default_factory=list)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Config":
        """Builds a Config from the defaults overlaid with environment variables.

        Args:
            environ (Mapping[str, str] | None): The environment to read.
                                                 Defaults to os.environ.

        Returns:
            Config: The populated configuration object.
        """
        if environ is None:
            environ = os.environ

        updates: dict[str, Any] = {}

        if COMMIT_MESSAGE_ENV in environ:
            updates["commit_message"] = environ[COMMIT_MESSAGE_ENV]

        for attr, (name, accepted) in _BOOL_ENV.items():
            value = parse_env_flag(name, environ.get(name), accepted)
            if value is not None:
                updates[attr] = value

        return replace(cls(), **updates)

    def apply_flags(self, **flags: Any) -> "Config":
        """Returns a copy with command-line values layered on top.

        Args:
            **flags: Field values from the CLI. None means the flag was not given.

        Returns:
            Config: The updated configuration object.

        Raises:
            ValueError: If a flag does not name a configuration field.
        """
        valid_keys = {f.name for f in fields(self)} - {"remotes"}
        invalid_keys = set(flags) - valid_keys
        if invalid_keys:
            raise ValueError(f"Unknown config keys: {', '.join(sorted(invalid_keys))}")

        return replace(self, **{k: v for k, v in flags.items() if v is not None})

    @classmethod
    def load(cls, environ: Mapping[str, str] | None = None, **flags: Any) -> "Config":
        """Loads and merges configuration from defaults, environment and flags."""
        return cls.from_env(environ).apply_flags(**flags)

    def query_remotes(self, repo: GitRepo) -> list[str]:
        """Replaces the cached remote list with the repository's remotes.

        Args:
            repo (GitRepo): The repository to query.

        Returns:
            list[str]: The discovered remote names.

        Raises:
            GitError: If `git remote` fails.
        """
        self.remotes = repo.remote_names()
        logger.debug(f"remotes: {self.remotes}")
        return self.remotes

    def ensure_nonce(
        self, directory: Path | None = None, now: datetime.datetime | None = None
    ) -> Path:
        """Writes the current UTC time to the nonce marker, truncating it.

        Args:
            directory (Path | None, optional): Where to place the marker.
                                               Defaults to the current directory.
            now (datetime.datetime | None, optional): The timestamp to record.
                                                      Defaults to the current time.

        Returns:
            Path: The marker file path.

        Raises:
            OSError: If the marker cannot be written.
        """
        if now is None:
            now = datetime.datetime.now(datetime.timezone.utc)
        path = (directory if directory is not None else Path.cwd()) / NONCE_PATH
        stamp = now.astimezone(datetime.timezone.utc).strftime(NONCE_TIMESTAMP_FORMAT)

        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, NONCE_FILE_MODE)
        with os.fdopen(fd, "w") as f:
            f.write(stamp)

        logger.debug(f"nonce: {path} <- {stamp}")
        return path
