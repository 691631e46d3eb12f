"""Core infrastructure components."""

from trailsync.core.config import Settings, get_settings
from trailsync.core.database import (
    close_db,
    get_engine,
    get_session_factory,
    init_db,
)
from trailsync.core.logging import (
    get_logger,
    get_run_id,
    set_run_id,
    setup_logging,
)

__all__ = [
    "Settings",
    "close_db",
    "get_engine",
    "get_logger",
    "get_run_id",
    "get_session_factory",
    "get_settings",
    "init_db",
    "set_run_id",
    "setup_logging",
]
