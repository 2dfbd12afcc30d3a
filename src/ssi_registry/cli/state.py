"""Persistence of the deployed system between CLI invocations."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from ..contracts.deployment import SSIDeployment
from ..core.config import get_config
from ..core.exceptions import ConfigException

logger = logging.getLogger(__name__)


def resolve_state_path(path: str | Path | None) -> Path:
    return Path(path) if path else get_config().state_file


def load_deployment(path: str | Path | None = None) -> SSIDeployment:
    """Load the system saved by ``ssi-registry init``.

    Raises:
        ConfigException: If no state file exists or it cannot be parsed.
    """
    state_path = resolve_state_path(path)
    if not state_path.exists():
        raise ConfigException(f"No state file at {state_path}; run 'ssi-registry init' first")
    try:
        data = json.loads(state_path.read_text(encoding="utf-8"))
        return SSIDeployment.from_dict(data)
    except (json.JSONDecodeError, KeyError) as e:
        raise ConfigException(f"Corrupt state file {state_path}: {e}") from e


def save_deployment(deployment: SSIDeployment, path: str | Path | None = None) -> Path:
    state_path = resolve_state_path(path)
    state_path.parent.mkdir(parents=True, exist_ok=True)
    state_path.write_text(json.dumps(deployment.to_dict(), indent=2), encoding="utf-8")
    logger.debug(f"Saved state to {state_path}")
    return state_path
