"""Runtime configuration.

Settings come from defaults, then an optional JSON file, then environment
variables (``NEXUS_STATE_FILE``, ``NEXUS_LOG_LEVEL``, ``NEXUS_GUILD_ID``).
"""

# Nexus Bracket
# Copyright (C) 2025  Nexus Bracket developers
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from nexusbracket.constants import (
    DEFAULT_GUILD_ID,
    DEFAULT_LOG_LEVEL,
    DEFAULT_STATE_FILE,
    ENV_GUILD_ID,
    ENV_LOG_LEVEL,
    ENV_STATE_FILE,
    INFO_PREVIEW_LIMIT,
    SHORT_CODE_PREFIX,
)
from nexusbracket.exceptions import InvalidConfigurationException
from nexusbracket.utils import setup_logger

logger = setup_logger(__name__)


@dataclass
class BotConfig:
    """Settings of one bot process.

    Attributes
    ----------
    state_file : str
        Where the JSON snapshot is kept.
    log_level : str
        Logging level name.
    log_file : str or None
        Optional log file in addition to stderr.
    guild_id : str
        Guild used by the console when none is given.
    short_code_prefix : str
        Prefix of tournament short codes.
    info_preview_limit : int
        How many entrants ``info`` lists.
    seed : int or None
        Fixed random seed, for reproducible brackets.
    """

    state_file: str = DEFAULT_STATE_FILE
    log_level: str = DEFAULT_LOG_LEVEL
    log_file: Optional[str] = None
    guild_id: str = DEFAULT_GUILD_ID
    short_code_prefix: str = SHORT_CODE_PREFIX
    info_preview_limit: int = INFO_PREVIEW_LIMIT
    seed: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BotConfig":
        """Build a config from a mapping, ignoring unknown keys.

        Raises:
            InvalidConfigurationException: If a value has the wrong type
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning(f"Ignoring unknown configuration keys: {', '.join(unknown)}")

        config = cls(**{k: v for k, v in data.items() if k in known})
        config.validate()
        return config

    def validate(self) -> None:
        if not isinstance(self.state_file, str) or not self.state_file.strip():
            raise InvalidConfigurationException("state_file must be a non-empty string")
        if not isinstance(logging.getLevelName(str(self.log_level).upper()), int):
            raise InvalidConfigurationException(f"Unknown log level: {self.log_level}")
        if not isinstance(self.short_code_prefix, str) or not self.short_code_prefix:
            raise InvalidConfigurationException("short_code_prefix must be a non-empty string")
        if (
            isinstance(self.info_preview_limit, bool)
            or not isinstance(self.info_preview_limit, int)
            or self.info_preview_limit < 1
        ):
            raise InvalidConfigurationException("info_preview_limit must be a positive integer")
        if self.seed is not None and (
            isinstance(self.seed, bool) or not isinstance(self.seed, int)
        ):
            raise InvalidConfigurationException("seed must be an integer")
        if not isinstance(self.guild_id, str) or not self.guild_id:
            raise InvalidConfigurationException("guild_id must be a non-empty string")


def load_configuration(config_file: Optional[str]) -> Optional[dict]:
    """Load configuration from JSON file.

    Args:
        config_file: Path to configuration file

    Returns:
        Configuration dictionary or None
    """
    if not config_file:
        return None

    config_path = Path(config_file)
    if not config_path.exists():
        logger.error("Configuration file not found: %s", config_file)
        return None

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config = json.load(f)
    except (OSError, ValueError) as e:
        logger.error("Failed to load configuration: %s", e)
        return None

    if not isinstance(config, dict):
        logger.error("Configuration file %s does not contain an object", config_file)
        return None
    logger.info("Loaded configuration from: %s", config_file)
    return config


def load_config(
    config_file: Optional[str] = None, environ: Optional[Mapping[str, str]] = None
) -> BotConfig:
    """Resolve the effective configuration.

    Args:
        config_file: Optional JSON file
        environ: Environment mapping; defaults to ``os.environ``

    Returns:
        Validated BotConfig

    Raises:
        InvalidConfigurationException: If a value is invalid
    """
    environ = os.environ if environ is None else environ
    data: Dict[str, Any] = dict(load_configuration(config_file) or {})

    overrides = {
        ENV_STATE_FILE: "state_file",
        ENV_LOG_LEVEL: "log_level",
        ENV_GUILD_ID: "guild_id",
    }
    for variable, key in overrides.items():
        value = environ.get(variable)
        if value:
            data[key] = value

    return BotConfig.from_dict(data)
