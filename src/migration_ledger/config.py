"""Configuration loading and management for Migration Ledger.

Configuration sources are merged in priority order:
    1. Defaults (defined in MigrationConfig)
    2. Project config (./migration-ledger.toml)
    3. Explicit config file
    4. Environment variables (MIGRATION_LEDGER_* prefix)
    5. CLI overrides (passed as kwargs)

Only the command line layer calls ``load_config``; the checkpoint store and
norm detector take explicit parameters.

Example:
    >>> config = load_config(lookback_window=3)
    >>> config.lookback_window
    3
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, get_type_hints

from .exceptions import ConfigFileError, ConfigurationError, InvalidConfigError

SEVERITIES = ("error", "warning", "info")

ENV_PREFIX = "MIGRATION_LEDGER_"
PROJECT_CONFIG_NAME = "migration-ledger.toml"


@dataclass(frozen=True)
class MigrationConfig:
    """Configuration captured by checkpoints and used by the CLI.

    Attributes:
        Storage:
            output_dir: Directory holding ``checkpoints/`` and the manifest
            project_root: Project root recorded in checkpoint files

        Checkpoint capture:
            rules_enabled: Rule ids active when findings were produced
            fail_on: Severities that fail an audit run

        Norm detection:
            lookback_window: Consecutive zero checkpoints required for a norm
            checkpoint_limit: Most recent checkpoints loaded for detection

        Output control:
            list_limit: Default number of checkpoints listed
    """

    output_dir: str = ".migration-ledger"
    project_root: str = "."

    rules_enabled: list[str] = field(default_factory=list)
    fail_on: list[str] = field(default_factory=lambda: ["error"])

    lookback_window: int = 5
    checkpoint_limit: int = 50

    list_limit: int = 10

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.lookback_window < 1:
            raise InvalidConfigError("lookback_window", self.lookback_window, "must be at least 1")
        if self.checkpoint_limit < 1:
            raise InvalidConfigError("checkpoint_limit", self.checkpoint_limit, "must be at least 1")
        if self.list_limit < 1:
            raise InvalidConfigError("list_limit", self.list_limit, "must be at least 1")

        for severity in self.fail_on:
            if severity not in SEVERITIES:
                raise InvalidConfigError(
                    "fail_on", severity, f"expected one of {', '.join(SEVERITIES)}"
                )

        if len(set(self.rules_enabled)) != len(self.rules_enabled):
            raise InvalidConfigError("rules_enabled", self.rules_enabled, "duplicate rule ids")


DEFAULT_CONFIG = MigrationConfig()


def load_config(config_file: Optional[Path] = None, **overrides) -> MigrationConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags); ``None``
            values are ignored so unset CLI options keep lower layers.

    Returns:
        Validated MigrationConfig instance

    Raises:
        ConfigFileError: If a config file is missing or unparsable
        InvalidConfigError: If a value fails validation
        ConfigurationError: If an unknown key is present
    """
    merged: dict[str, Any] = {}

    project_config = Path.cwd() / PROJECT_CONFIG_NAME
    if project_config.exists():
        merged.update(_load_toml_file(project_config))

    if config_file is not None:
        if not config_file.exists():
            raise ConfigFileError(config_file, "file not found")
        merged.update(_load_toml_file(config_file))

    merged.update(_load_env_vars())
    merged.update({k: v for k, v in overrides.items() if v is not None})

    unknown = sorted(set(merged) - set(MigrationConfig.__dataclass_fields__))
    if unknown:
        raise ConfigurationError(
            f"Unknown configuration keys: {', '.join(unknown)}",
            details={"keys": ", ".join(unknown)},
        )

    for key in ("rules_enabled", "fail_on"):
        if key in merged:
            value = merged[key]
            if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
                raise InvalidConfigError(key, value, "expected a list of strings")
            merged[key] = list(value)

    return MigrationConfig(**merged)


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from MIGRATION_LEDGER_* environment variables.

    Supported environment variables:
        MIGRATION_LEDGER_OUTPUT_DIR: str
        MIGRATION_LEDGER_PROJECT_ROOT: str
        MIGRATION_LEDGER_LOOKBACK_WINDOW: int
        MIGRATION_LEDGER_CHECKPOINT_LIMIT: int
        MIGRATION_LEDGER_LIST_LIMIT: int

    List fields are only configurable through TOML.
    """
    type_hints = get_type_hints(MigrationConfig)

    result: dict[str, Any] = {}

    for field_name in MigrationConfig.__dataclass_fields__:
        env_key = f"{ENV_PREFIX}{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is int:
            try:
                result[field_name] = int(env_value)
            except ValueError:
                raise InvalidConfigError(env_key, env_value, "expected an integer") from None
        elif type_hint is str:
            result[field_name] = env_value

    return result


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict.

    Raises:
        ConfigFileError: If the file cannot be read or parsed
    """
    try:
        # Python 3.11+ has tomllib in stdlib
        import tomllib
    except ModuleNotFoundError:
        import tomli as tomllib  # type: ignore

    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigFileError(path, str(e)) from e
