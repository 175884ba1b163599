# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Idempotent .env loading for ``!env`` config values.

Credentials referenced from the YAML config with ``!env`` usually live
in a ``.env`` file rather than the shell environment.  Two locations are
read, in order:

1. ``~/.config/s3presign/.env`` (XDG config directory)
2. ``.env`` in the current working directory

Variables already present in the environment, including those set by
the first file, are not overwritten by later files.
"""

import logging
from pathlib import Path


logger = logging.getLogger(__name__)

_dotenv_loaded = False


def load_dotenv_once() -> None:
    """Load .env files on first call; later calls do nothing."""
    global _dotenv_loaded
    if _dotenv_loaded:
        return

    from dotenv import load_dotenv

    from s3presign.config import get_dotenv_path

    candidates = [get_dotenv_path(), Path.cwd() / ".env"]
    for env_file in candidates:
        if env_file.exists():
            load_dotenv(env_file)
            logger.debug("Loaded .env from %s", env_file)

    _dotenv_loaded = True


def reset_dotenv_state() -> None:
    """Reset the dotenv loaded state. For testing only."""
    global _dotenv_loaded
    _dotenv_loaded = False
