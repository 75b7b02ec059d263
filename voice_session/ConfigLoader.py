"""Loads session settings from the JSON configuration file.

Example config/voice_session.json:
    {
        "recognition": {"language": "pt-PT", "continuous": true},
        "forwarding": {"separator": " "}
    }
"""
import json
import logging
from pathlib import Path
from typing import Dict, Union

from voice_session.types import DEFAULT_LANGUAGE, SessionConfig

DEFAULT_SEPARATOR = ' '


def load_config_dict(config_path: Union[str, Path]) -> Dict:
    """Load configuration from JSON file.

    Args:
        config_path: Path to voice_session.json

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the top level is not a JSON object
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path, 'r', encoding='utf-8') as f:
        config = json.load(f)

    if not isinstance(config, dict):
        raise ValueError(f"Config file must contain a JSON object: {config_path}")
    return config


def session_config_from_dict(config: Dict) -> SessionConfig:
    """Build a SessionConfig from the 'recognition' section; missing keys use defaults."""
    recognition = config.get('recognition', {})
    language = recognition.get('language', DEFAULT_LANGUAGE)
    continuous = recognition.get('continuous', True)

    if not isinstance(continuous, bool):
        raise ValueError(f"recognition.continuous must be true or false, got {continuous!r}")

    return SessionConfig(language=language, continuous=continuous)


def forwarding_separator(config: Dict) -> str:
    separator = config.get('forwarding', {}).get('separator', DEFAULT_SEPARATOR)
    if not isinstance(separator, str):
        raise ValueError(f"forwarding.separator must be a string, got {separator!r}")
    return separator


def load_config(config_path: Union[str, Path]) -> SessionConfig:
    """Load a SessionConfig from a JSON file."""
    session_config = session_config_from_dict(load_config_dict(config_path))
    logging.debug(
        f"Loaded config from {config_path}: language={session_config.language}, "
        f"continuous={session_config.continuous}"
    )
    return session_config
