"""Static configuration for forumrelay.

All user-editable settings (database, tagging, command trigger, message
overrides, logging) live in a single JSON file for quick edits without
touching Python.
"""

import json
import os

from core.config import DEFAULT_TAG_PREFIX

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

CONFIG_PATH = os.environ.get("FORUMRELAY_CONFIG", os.path.join(PROJECT_ROOT, "config.json"))


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(
            f"Config file not found: {CONFIG_PATH} (copy config.example.json to get started)"
        )

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _resolve_path(path: str) -> str:
    if os.path.isabs(path):
        return path
    return os.path.join(PROJECT_ROOT, path)


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Where to store the SQLite database holding rules and the forum directory.
_database = _CONFIG.get("database", {})
DB_PATH = _resolve_path(_database.get("path", "forumrelay.db"))

# Tagging mirrors the forum's own switch: when off, tag suffixes are hidden
# from status output.
_tagging = _CONFIG.get("tagging", {})
TAGGING_ENABLED = bool(_tagging.get("enabled", False))
TAG_PREFIX = _tagging.get("prefix", DEFAULT_TAG_PREFIX)

# Chat messages starting with the trigger are treated as rule commands.
_commands = _CONFIG.get("commands", {})
COMMAND_TRIGGER = _commands.get("trigger", "/forum")

# Per-key overrides for the reply catalog.
MESSAGES = _CONFIG.get("messages", {})

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
