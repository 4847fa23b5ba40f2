"""
roster_config -- single public entrypoint for engine configuration.

Responsibility:
    ``get_active_config()`` is the only way a run obtains its
    configuration.  It merges the packaged defaults, an optional user YAML
    file and keyword overrides, validates the result and returns a frozen
    ``EngineConfig``.

Audit relevance:
    Every successful call emits a ``ROSTER_CONFIG_TRACE`` log entry with
    the configuration checksum, so each run can be tied back to the exact
    settings it ran with.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from roster_config.loader import (
    DEFAULTS_PATH,
    compute_checksum,
    deep_merge,
    load_yaml_file,
    parse_engine_config,
)
from roster_config.schema import EngineConfig, RosterLayout, TableSchema

_logger = logging.getLogger("roster_kernel.config")


def get_active_config(
    path: Path | str | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> EngineConfig:
    """Build the run's ``EngineConfig``.

    Args:
        path: Optional YAML file merged over the packaged defaults.
        overrides: Optional values merged last (CLI flags, tests).

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ConfigurationError: If the merged configuration is invalid.
    """
    data = load_yaml_file(DEFAULTS_PATH)
    if path is not None:
        data = deep_merge(data, load_yaml_file(Path(path)))
    if overrides:
        data = deep_merge(data, overrides)

    checksum = compute_checksum(data)
    config = parse_engine_config(data, checksum=checksum)

    _logger.info(
        "ROSTER_CONFIG_TRACE",
        extra={
            "trace_type": "ROSTER_CONFIG_TRACE",
            "checksum": checksum,
            "config_path": str(path) if path is not None else None,
            "dry_run": config.dry_run,
            "table_count": len(config.tables),
            "roster_tabs": list(config.roster.tabs),
        },
    )
    return config


__all__ = [
    "EngineConfig",
    "RosterLayout",
    "TableSchema",
    "get_active_config",
]
