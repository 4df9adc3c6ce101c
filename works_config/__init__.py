"""
works_config -- single public entrypoint for workflow configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Returns a frozen ``WorkflowConfig``.

Architecture position:
    Configuration.  Sits above ``works_kernel`` and below
    ``works_services``.  The kernel MUST NEVER import from ``works_config``.

Failure modes:
    - ``FileNotFoundError`` -- the requested configuration file is missing.
    - ``ValueError`` -- schema or structural validation failures.

Audit relevance:
    Every successful ``get_active_config()`` call emits a ``CONFIG_TRACE``
    log entry with the config_id, version and checksum.
"""

from __future__ import annotations

from pathlib import Path

from works_config.loader import load_yaml_file, parse_workflow_config
from works_config.schema import WorkflowConfig
from works_kernel.logging_config import get_logger

_logger = get_logger("config")

_DEFAULT_CONFIG_FILE = Path(__file__).parent / "defaults" / "workflow.yaml"

__all__ = ["WorkflowConfig", "get_active_config"]


def get_active_config(config_path: Path | str | None = None) -> WorkflowConfig:
    """Load, validate and return the workflow configuration.

    Args:
        config_path: Override path to a YAML file.  Defaults to the
            packaged ``works_config/defaults/workflow.yaml``.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If configuration validation fails.
    """
    path = Path(config_path) if config_path is not None else _DEFAULT_CONFIG_FILE
    config = parse_workflow_config(load_yaml_file(path))
    _logger.info(
        "CONFIG_TRACE",
        extra={
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "config_path": str(path),
        },
    )
    return config
