#!/usr/bin/env python3
"""
Environment variable loader with .env file support.

Loads KEY=VALUE pairs from a .env file in the project root without
overriding variables that are already set.
"""

import os
from pathlib import Path
from typing import Dict, Optional
import logging

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent.parent


def parse_env_line(line: str) -> Optional[tuple]:
    """
    Parse a single .env line.

    Returns:
        (key, value) tuple, or None for blank lines and comments
    """
    line = line.strip()
    if not line or line.startswith('#'):
        return None

    if '=' not in line:
        raise ValueError(f"expected KEY=VALUE, got: {line}")

    key, value = line.split('=', 1)
    key = key.strip()
    value = value.strip()

    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        value = value[1:-1]

    return key, value


def load_env_file(env_file_path: str = ".env", root: Optional[Path] = None) -> Dict[str, str]:
    """
    Load environment variables from .env file if it exists.

    Args:
        env_file_path: Path to .env file relative to the project root
        root: Override project root (tests)

    Returns:
        Variables that were actually set
    """
    env_path = (root or PROJECT_ROOT) / env_file_path

    if not env_path.exists():
        logger.debug(f"No .env file found at {env_path}")
        return {}

    loaded = {}
    with open(env_path, 'r', encoding='utf-8') as f:
        for line_num, line in enumerate(f, 1):
            try:
                parsed = parse_env_line(line)
            except ValueError as e:
                logger.warning(f"Invalid .env format at line {line_num}: {e}")
                continue

            if parsed is None:
                continue

            key, value = parsed
            # Environment wins over .env
            if key not in os.environ:
                os.environ[key] = value
                loaded[key] = value
                logger.debug(f"Loaded {key} from .env")
            else:
                logger.debug(f"Skipped {key} (already in environment)")

    logger.info(f"Loaded {len(loaded)} variables from {env_path}")
    return loaded
