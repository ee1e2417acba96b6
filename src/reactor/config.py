"""Runtime configuration for the update engine."""

import logging
import os
from dataclasses import dataclass
from typing import Final

from reactor import __version__

logger = logging.getLogger(__name__)

# Wait before self-promotion so a just-spawned sibling can release its handles
DEFAULT_PROMOTION_DELAY: Final = 1.0

DEFAULT_REQUEST_TIMEOUT: Final = 30.0

DEFAULT_CHUNK_SIZE: Final = 64 * 1024

USER_AGENT: Final = f"reactor-updater/{__version__}"

PROMOTION_DELAY_ENV: Final = "REACTOR_PROMOTION_DELAY"
REQUEST_TIMEOUT_ENV: Final = "REACTOR_REQUEST_TIMEOUT"
SHOW_PROGRESS_ENV: Final = "REACTOR_SHOW_PROGRESS"

_FALSE_VALUES: Final = {"0", "false", "no", "off"}


@dataclass
class ReactorConfig:
    """Tunables for promotion timing, networking and progress reporting."""

    promotion_delay: float = DEFAULT_PROMOTION_DELAY
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    chunk_size: int = DEFAULT_CHUNK_SIZE
    show_progress: bool = True
    user_agent: str = USER_AGENT

    @classmethod
    def from_env(cls) -> "ReactorConfig":
        """Build a configuration, honouring ``REACTOR_*`` environment overrides."""
        config = cls()
        config.promotion_delay = _float_from_env(PROMOTION_DELAY_ENV, config.promotion_delay)
        config.request_timeout = _float_from_env(REQUEST_TIMEOUT_ENV, config.request_timeout)
        show_progress = os.environ.get(SHOW_PROGRESS_ENV)
        if show_progress is not None:
            config.show_progress = show_progress.strip().lower() not in _FALSE_VALUES
        return config


def _float_from_env(variable: str, default: float) -> float:
    raw = os.environ.get(variable)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not a number", variable, raw)
        return default
    if value < 0:
        logger.warning("Ignoring %s=%r: must not be negative", variable, raw)
        return default
    return value
