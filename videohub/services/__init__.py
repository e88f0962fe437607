"""Services package exports."""

from videohub.services.logging_service import configure_logging, get_logger
from videohub.services.session_manager import SessionManager

__all__ = [
    "SessionManager",
    "configure_logging",
    "get_logger",
]
