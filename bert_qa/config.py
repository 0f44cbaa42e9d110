"""
Configuration module for the BERT QA system.

This module provides a Config class for loading and accessing configuration values
from a YAML file, with built-in defaults and support for environment variable
substitution (values written as ``${VAR}``).
"""

import copy
import os
from pathlib import Path
import yaml
import logging
from dotenv import load_dotenv
from bert_qa.exceptions import ConfigurationError

DEFAULT_CONFIG_PATH = "./config/config.yaml"

MODEL_FILE_NAME = "bert-large-uncased-whole-word-masking-finetuned-squad.onnx"

DEFAULTS = {
    'LOGGING': {
        'LEVEL': 'INFO',
        'LOG_FILE': 'logs/bert_qa.log',
    },
    'MODEL': {
        'URL': f"https://storage.yandexcloud.net/dotnet4/{MODEL_FILE_NAME}",
        'PATH': MODEL_FILE_NAME,
        'INPUT_NAMES': {
            'INPUT_IDS': 'input_ids',
            'ATTENTION_MASK': 'input_mask',
            'TOKEN_TYPE_IDS': 'segment_ids',
        },
    },
    'DOWNLOAD': {
        'RETRY_DELAY': 5,
        'CHUNK_SIZE': 1024 * 1024,
        'TIMEOUT': 60,
    },
    'TOKENIZER': {
        'NAME': 'bert-large-uncased-whole-word-masking-finetuned-squad',
        'FILE': None,
    },
    'ANSWER': {
        'MAX_ANSWER_TOKENS': None,
    },
}


def _merge(base: dict, override: dict) -> dict:
    """Recursively merge ``override`` on top of a copy of ``base``."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _substitute_env(value):
    """Replace ``${VAR}`` strings with environment values, walking dicts and lists."""
    if isinstance(value, dict):
        return {k: _substitute_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute_env(v) for v in value]
    if isinstance(value, str) and value.startswith('${') and value.endswith('}'):
        return os.getenv(value[2:-1])
    return value


class Config:
    """
    Provides access to configuration values loaded from a dictionary.

    Values missing from the dictionary fall back to DEFAULTS.
    Supports nested access using dot notation (e.g., 'MODEL.PATH').
    """
    def __init__(self, config_data: dict = None):
        """
        Initialize the Config object.

        Args:
            config_data: Dictionary containing configuration data.
        """
        self.logger = logging.getLogger(self.__class__.__name__)
        self.logger.debug(f"Called Config.__init__(config_data={config_data})")
        self._config = _merge(DEFAULTS, config_data or {})

    def get_nested(self, path: str, default=None):
        """
        Retrieve a nested configuration value using dot notation.

        Args:
            path: Configuration path using dot notation (e.g., 'LOGGING.LEVEL').
            default: Value to return if the path does not exist.

        Returns:
            The configuration value at the specified path, or the default if not found.
        """
        current = self._config
        for key in path.split('.'):
            if isinstance(current, dict) and key in current:
                current = current[key]
            else:
                self.logger.debug(f"Config.get_nested({path}) not found, returning default={default!r}")
                return default
        if current is None:
            return default
        self.logger.debug(f"Config.get_nested({path}) -> {current!r}")
        return current

def get_config(config_path: str = None) -> Config:
    """
    Load configuration from a YAML file and return a Config object.

    When no path is given and the default file does not exist, the built-in
    defaults are returned.

    Args:
        config_path: Path to the configuration YAML file.

    Returns:
        Config: An instance of the Config class with loaded configuration data.

    Raises:
        FileNotFoundError: If an explicitly given configuration file does not exist.
        ConfigurationError: If the file does not contain a mapping.
        yaml.YAMLError: If the configuration file is invalid YAML.
    """
    logger = logging.getLogger(__name__)
    logger.info(f"Called get_config(config_path={config_path})")
    load_dotenv()

    if config_path is None:
        config_path = Path(DEFAULT_CONFIG_PATH)
        if not config_path.exists():
            logger.warning(f"No configuration file at {config_path}, using defaults")
            return Config({})
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        config_data = yaml.safe_load(f) or {}

    if not isinstance(config_data, dict):
        raise ConfigurationError(f"Configuration file must contain a mapping: {config_path}")

    return Config(_substitute_env(config_data))
