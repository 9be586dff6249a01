"""Where photoingest looks for its per-user config file."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from platformdirs import user_config_dir

APP_NAME = "photoingest"
# No vendor directory level on Windows
APPAUTHOR: Literal[False] = False

CONFIG_FILENAME = "config.yaml"
CONFIG_DIR_ENV = "PHOTOINGEST_CONFIG_DIR"


def config_dir() -> Path:
    """
    Directory holding ``config.yaml``. Never created here.

    ``$PHOTOINGEST_CONFIG_DIR`` wins when set; otherwise the platformdirs
    location (``~/.config/photoingest`` on Linux).
    """
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return Path(user_config_dir(APP_NAME, APPAUTHOR))


def default_config_file() -> Path:
    return config_dir() / CONFIG_FILENAME
