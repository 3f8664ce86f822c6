"""Global constants for kick.

This module defines the application identity, the default sync behaviour and
the names of the environment variables that can override it.
"""

# --- Identity ---
APP_NAME = "kick"
"""str: The human-readable application name."""

VERSION = "0.0.25"
"""str: The release version reported by `kick -version`."""

# --- Commit ---
DEFAULT_COMMIT_MESSAGE = "up"
"""str: The commit message used when none is configured."""

# --- Nonce ---
NONCE_PATH = ".kick"
"""str: The nonce marker file, relative to the working directory."""

NONCE_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
"""str: RFC 3339 (UTC) layout written into the nonce marker."""

NONCE_FILE_MODE = 0o644
"""int: Permissions for a newly created nonce marker."""

# --- Environment ---
COMMIT_MESSAGE_ENV = "KICK_MESSAGE"
"""str: Overrides the commit message; an empty value drops `-m`."""

NONCE_ENV = "KICK_NONCE"
"""str: Set to "1" to refresh the nonce marker before staging."""

FETCH_ALL_ENV = "KICK_FETCH_ALL"
"""str: "1"/"0" toggles fetching tags from every remote."""

PULL_ALL_ENV = "KICK_PULL_ALL"
"""str: "1"/"0" toggles pulling from every remote."""

PUSH_ALL_ENV = "KICK_PUSH_ALL"
"""str: "1"/"0" toggles pushing (and tag pushing) to every remote."""

SYNC_TAGS_ENV = "KICK_SYNC_TAGS"
"""str: "1"/"0" toggles fetching and pushing tags."""

ENV_ENABLE = "1"
"""str: Sentinel value that switches a boolean setting on."""

ENV_DISABLE = "0"
"""str: Sentinel value that switches a boolean setting off."""
