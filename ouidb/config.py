from __future__ import annotations

import argparse
import tomllib
from pathlib import Path
from typing import Any, Dict

from ouidb.log import get_logger

logger = get_logger("config")


def load_config() -> Dict[str, Any]:
    """
    Load configuration from:
    1. ~/.ouidb.toml
    2. ./ouidb.toml

    Later files override earlier ones.
    """
    paths = [
        Path.home() / ".ouidb.toml",
        Path("ouidb.toml"),
    ]

    config: Dict[str, Any] = {}
    for path in paths:
        if path.exists():
            try:
                with path.open("rb") as f:
                    data = tomllib.load(f)
            except (OSError, tomllib.TOMLDecodeError) as e:
                logger.warning("failed to load config %s: %s", path, e)
                continue
            _deep_update(config, data)

    return config


def _deep_update(target: Dict[str, Any], source: Dict[str, Any]) -> None:
    for key, value in source.items():
        if isinstance(value, dict) and key in target and isinstance(target[key], dict):
            _deep_update(target[key], value)
        else:
            target[key] = value


def apply_config(parser: argparse.ArgumentParser, config: Dict[str, Any]) -> None:
    """
    Apply configuration values to the argument parser defaults.

    Example config:
    [global]
    manuf = "/usr/share/wireshark/manuf"

    [dump]
    output = "manuf.bin"

    ``[global]`` is applied first, then every other section is flattened
    on top of it.
    """
    defaults: Dict[str, Any] = {}
    if isinstance(config.get("global"), dict):
        defaults.update(config["global"])
    for section, values in config.items():
        if section == "global":
            continue
        if isinstance(values, dict):
            defaults.update(values)

    parser.set_defaults(**defaults)
    # Sub-command parsers keep their own defaults; push matching keys down.
    for action in parser._actions:
        if isinstance(action, argparse._SubParsersAction):
            for subparser in action.choices.values():
                known = {a.dest for a in subparser._actions}
                sub_defaults = {k: v for k, v in defaults.items() if k in known}
                if sub_defaults:
                    subparser.set_defaults(**sub_defaults)
