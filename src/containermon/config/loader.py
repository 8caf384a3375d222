"""
Reading config.toml from disk.

Only parsing and the top-level shape are checked here: `[monitor]` must be
a table and `[[channels]]` an array of tables. Value validation happens in
`config.validators`.
"""

import logging
import tomllib
from pathlib import Path
from typing import Any, Dict

from ..validation import ErrorSeverity, ValidationError, handle_config_error

logger = logging.getLogger(__name__)

KNOWN_SECTIONS = ("monitor", "channels")


def load_toml_file(file_path: Path, description: str = "configuration file") -> Dict[str, Any]:
    """
    Parse a TOML file into a dict.

    Raises:
        FileNotFoundError: If `file_path` does not exist
        tomllib.TOMLDecodeError: If the file is not valid TOML
    """
    file_path = Path(file_path)
    if not file_path.is_file():
        logger.error(f"{description} not found: {file_path}")
        raise FileNotFoundError(f"{description} not found: {file_path}")

    logger.info(f"Reading {description}: {file_path}")
    try:
        with file_path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        handle_config_error(
            error=e,
            context=f"parsing {file_path.name}",
            severity=ErrorSeverity.CRITICAL,
            reraise=True,
            logger=logger,
        )
        raise


def load_main_config(config_path: Path) -> Dict[str, Any]:
    """
    Load config.toml and check its top-level layout.

    Unknown top-level tables are ignored with a warning so a typo such as
    `[monitr]` does not silently fall back to defaults.

    Returns:
        Dict with `monitor` (dict) and `channels` (list) keys, each
        present only if the file defines it.
    """
    data = load_toml_file(config_path, "main configuration file")

    for key in data:
        if key not in KNOWN_SECTIONS:
            logger.warning(f"Ignoring unknown section [{key}] in {config_path}")

    sections: Dict[str, Any] = {}
    if "monitor" in data:
        if not isinstance(data["monitor"], dict):
            raise ValidationError("[monitor] must be a table", field_name="monitor")
        sections["monitor"] = data["monitor"]
    if "channels" in data:
        if not isinstance(data["channels"], list):
            raise ValidationError("channels must be declared as [[channels]] tables", field_name="channels")
        sections["channels"] = data["channels"]
    return sections
