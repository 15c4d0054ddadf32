"""
Environment-specific logging configuration
"""
import logging
import os
from typing import Dict, Any

LOGGING_PROFILES: Dict[str, Dict[str, Any]] = {
    # Warnings and failed renders only
    "production": {
        "default_level": "WARNING",
        "console_format": "%(levelname)s - %(message)s",
        "log_requests": False,
        "quiet_loggers": ["services.asset_fetcher", "services.font_loader", "httpx", "PIL"],
    },
    "development": {
        "default_level": "INFO",
        "console_format": "%(asctime)s - %(levelname)s - %(message)s",
        "log_requests": True,
        "quiet_loggers": ["PIL"],
    },
    # Everything, with the emitting file and line
    "debug": {
        "default_level": "DEBUG",
        "console_format": "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s",
        "log_requests": True,
        "quiet_loggers": [],
    },
}


def detect_environment() -> str:
    if os.getenv("DEBUG", "false").lower() == "true":
        return "debug"
    if os.getenv("RENDER") is not None or os.getenv("ENV") == "production":
        return "production"
    return "development"


def get_logging_config() -> Dict[str, Any]:
    """Logging profile for the current environment; LOG_LEVEL overrides its level"""
    environment = detect_environment()
    config = dict(LOGGING_PROFILES[environment], environment=environment)

    level_override = os.getenv("LOG_LEVEL")
    if level_override:
        config["default_level"] = level_override.upper()
    return config


def apply_logging_config(config: Dict[str, Any] = None) -> Dict[str, Any]:
    """Install a single console handler on the root logger"""
    if config is None:
        config = get_logging_config()

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(config["console_format"]))

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(getattr(logging, config["default_level"], logging.INFO))

    for name in config.get("quiet_loggers", []):
        logging.getLogger(name).setLevel(logging.WARNING)

    return config
