"""Persistent JSON config helpers.

Stores hidden-file preference, search result cap, data-directory override and
sidebar favourite folders. Malformed or missing values fall back to
defaults.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from platformdirs import user_config_dir, user_data_dir

logger = logging.getLogger(__name__)

APP_NAME = "seeker"
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
DEFAULT_DATA_DIR = Path(user_data_dir(APP_NAME, appauthor=False))
CONFIG_PATH = DEFAULT_CONFIG_PATH

DEFAULT_SEARCH_RESULT_LIMIT = 5_000
DEFAULT_SIDEBAR_FOLDERS: tuple[tuple[str, str], ...] = (
    ("Documents", "Documents"),
    ("Desktop", "Desktop"),
    ("Downloads", "Downloads"),
    ("Music", "Music"),
    ("Pictures", "Pictures"),
    ("Movies", "Movies"),
)


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.warning("ignoring unreadable config %s: %s", CONFIG_PATH, exc)
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Filesystem/serialization errors are logged and otherwise ignored to keep
    runtime behavior non-fatal when config cannot be written.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except (OSError, TypeError, ValueError) as exc:
        logger.warning("could not write config %s: %s", CONFIG_PATH, exc)


def load_show_hidden() -> bool:
    """Return persisted hidden-file visibility preference.

    Only explicit boolean values are accepted; any other type falls back to
    ``False``.
    """
    value = load_config().get("show_hidden")
    return bool(value) if isinstance(value, bool) else False


def save_show_hidden(show_hidden: bool) -> None:
    """Persist hidden-file visibility preference as a boolean."""
    config = load_config()
    config["show_hidden"] = bool(show_hidden)
    save_config(config)


def load_search_result_limit() -> int:
    """Return the global-search result cap, defaulting to 5,000."""
    value = load_config().get("search_result_limit")
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        return DEFAULT_SEARCH_RESULT_LIMIT
    return value


def load_data_dir() -> Path:
    """Return the application-private data directory.

    A non-empty string ``data_dir`` in config overrides the platform default.
    """
    value = load_config().get("data_dir")
    if isinstance(value, str) and value.strip():
        return Path(value.strip()).expanduser()
    return DEFAULT_DATA_DIR


def load_sidebar_folders() -> list[tuple[str, str]]:
    """Load sidebar favourites as ``(label, home-relative folder)`` pairs.

    Entries must be two-item lists of non-empty strings; invalid entries are
    dropped. A missing or non-list value yields the default folders.
    """
    value = load_config().get("sidebar_folders")
    if not isinstance(value, list):
        return list(DEFAULT_SIDEBAR_FOLDERS)

    folders: list[tuple[str, str]] = []
    for raw in value:
        if not isinstance(raw, list) or len(raw) != 2:
            continue
        label, folder = raw
        if not isinstance(label, str) or not isinstance(folder, str):
            continue
        if not label.strip() or not folder.strip():
            continue
        folders.append((label.strip(), folder.strip()))
    return folders


def save_sidebar_folders(folders: list[tuple[str, str]]) -> None:
    """Persist sidebar favourites in normalized list-of-pairs form."""
    config = load_config()
    config["sidebar_folders"] = [[label, folder] for label, folder in folders if label and folder]
    save_config(config)
