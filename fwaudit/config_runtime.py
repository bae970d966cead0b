"""Runtime configuration for fwaudit - centralized configuration management."""

import copy
import json
import os
from pathlib import Path
from typing import Any

from fwaudit.utils.logging import logger

DEFAULTS = {
    "github": {
        "api_base": "https://api.github.com",
        "raw_base": "https://raw.githubusercontent.com",
        "token": "",
    },
    "timeouts": {
        "url_fetch": 10,
    },
    "limits": {
        "preview_chars": 500,
        "practice_snippet_chars": 200,
        "topic_preview": 5,
        "snippet_batch_size": 5,
        "related_practices": 2,
        "max_concurrency": 5,
    },
}


def load_runtime_config(root: str = ".") -> dict[str, Any]:
    """
    Load runtime configuration from .fwaudit/config.json and environment variables.

    Config priority (highest to lowest):
    1. Environment variables (FWAUDIT_{SECTION}_{KEY})
    2. .fwaudit/config.json file
    3. Built-in defaults

    Args:
        root: Root directory to look for config file

    Returns:
        Configuration dictionary with merged values
    """
    cfg = copy.deepcopy(DEFAULTS)

    path = Path(root) / ".fwaudit" / "config.json"
    try:
        if path.exists():
            with open(path, encoding="utf-8") as f:
                user = json.load(f)

            if isinstance(user, dict):
                for section in cfg:
                    if section in user and isinstance(user[section], dict):
                        for key, value in user[section].items():
                            if key in cfg[section] and isinstance(value, type(cfg[section][key])):
                                cfg[section][key] = value
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Could not load config file from {path}: {err}", path=path, err=e)

    for section in cfg:
        for key in cfg[section]:
            env_var = f"FWAUDIT_{section.upper()}_{key.upper()}"
            if env_var in os.environ:
                value = os.environ[env_var]
                try:
                    if isinstance(cfg[section][key], int):
                        cfg[section][key] = int(value)
                    else:
                        cfg[section][key] = value
                except ValueError as e:
                    logger.warning(
                        "Invalid value for environment variable {var}: '{value}' - {err}",
                        var=env_var,
                        value=value,
                        err=e,
                    )

    if not cfg["github"]["token"]:
        cfg["github"]["token"] = os.environ.get("GITHUB_TOKEN", "")

    return cfg
