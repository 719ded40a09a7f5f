"""Logging utilities for the Confluence client.

The library logs through a single application logger; nothing is configured
on import so that host applications keep control of their handlers. The
command-line entry point calls :func:`setup_logging`.
"""

import logging

LOGGER_NAME = "confluence-simple-client"


def setup_logging(level: int = logging.WARNING) -> logging.Logger:
    """
    Configure root and client logging for command-line use.

    Args:
        level: The minimum logging level to display (default: WARNING)

    Returns:
        The configured client logger
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers to prevent duplication
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    formatter = logging.Formatter("%(levelname)s - %(name)s - %(message)s")
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    return logger


def mask_sensitive(value: str | None, keep_chars: int = 2) -> str:
    """Masks credentials before they reach a log line.

    Args:
        value: The string to mask
        keep_chars: Number of characters to keep visible at start and end

    Returns:
        Masked string with most characters replaced by asterisks
    """
    if not value:
        return "Not Provided"
    if len(value) <= keep_chars * 2:
        return "*" * len(value)
    return f"{value[:keep_chars]}{'*' * (len(value) - keep_chars * 2)}{value[-keep_chars:]}"


def log_config_param(
    logger: logging.Logger,
    param: str,
    value: str | int | float | bool | None,
    sensitive: bool = False,
) -> None:
    """Logs a Confluence configuration parameter, masking if sensitive."""
    if sensitive:
        display_value = mask_sensitive(None if value is None else str(value))
    else:
        display_value = "Not Provided" if value is None else str(value)
    logger.info(f"Confluence {param}: {display_value}")
