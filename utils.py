# utils.py
"""
Utility functions for the particle application.

This module provides helper functions, such as logging setup and
configuration loading, that are used across different parts of the
application but do not belong to the physics core or the renderer.
"""
import copy
import logging
import logging.handlers
import json
import os
from typing import Dict, Any

# --- Data Contracts ---
#
# setup_logging(config: Dict[str, Any]) -> None:
#   - Inputs:
#     - config: A dictionary containing a "logging" key with "level",
#       "format", and "log_file" sub-keys. A null "log_file" disables
#       file logging.
#   - Outputs: None
#   - Side Effects: Configures the root Python logger. Creates a log
#     directory if it doesn't exist. Sets up a console handler and a
#     rotating file handler.
#
# load_config(path: str) -> Dict[str, Any]:
#   - Raises FileNotFoundError / json.JSONDecodeError after logging them.
#
# apply_preset(config: Dict[str, Any], name: Optional[str]) -> Dict[str, Any]:
#   - Outputs: A new config where the named preset's sections have been
#     merged over the base sections. The input is not modified.
#   - Raises ValueError if the preset does not exist.

def setup_logging(config: Dict[str, Any]) -> None:
    """
    Configures the logging system from a configuration dictionary.

    Sets up logging to the console and, unless disabled, a rotating file.
    """
    log_config = config.get('logging', {})
    log_level = log_config.get('level', 'INFO').upper()
    log_format = log_config.get('format', '%(asctime)s - %(levelname)s - %(message)s')
    log_file_path = log_config.get('log_file', 'logs/particles.log')

    logger = logging.getLogger()
    logger.setLevel(log_level)

    # Clear existing handlers to avoid duplication
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(log_format)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file_path:
        log_dir = os.path.dirname(log_file_path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        # Rotates when the log reaches 1MB, keeps 5 backup logs.
        file_handler = logging.handlers.RotatingFileHandler(
            log_file_path, maxBytes=1024*1024, backupCount=5
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logging.info("Logging system initialized.")
    logging.debug(f"Log level set to {log_level}.")
    logging.debug(f"Log file path: {log_file_path or 'disabled'}")

def load_config(path: str) -> Dict[str, Any]:
    """Loads a JSON configuration file."""
    logging.info(f"Loading configuration from {path}...")
    try:
        with open(path, 'r') as f:
            config = json.load(f)
        logging.info("Configuration loaded successfully.")
        return config
    except FileNotFoundError:
        logging.error(f"Configuration file not found at {path}.")
        raise
    except json.JSONDecodeError:
        logging.error(f"Error decoding JSON from {path}.")
        raise

def apply_preset(config: Dict[str, Any], name) -> Dict[str, Any]:
    """
    Merges a named preset over the base configuration.

    A preset is a dictionary of section name -> overrides, e.g.
    {"simulation_parameters": {"speed_bound": 10.0}}. Keys not mentioned in
    the preset keep their base values.
    """
    merged = copy.deepcopy(config)
    if not name:
        return merged

    presets = config.get('presets', {})
    if name not in presets:
        msg = (
            f"Configuration error: unknown preset '{name}'. "
            f"Available presets: {', '.join(sorted(presets)) or 'none'}."
        )
        logging.critical(msg)
        raise ValueError(msg)

    for section, overrides in presets[name].items():
        merged.setdefault(section, {}).update(overrides)

    logging.info(f"Preset '{name}' applied.")
    return merged
