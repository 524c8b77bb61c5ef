from .logger import (
    clear_request_id,
    get_logger,
    get_request_id,
    log_stage,
    request_context,
    set_request_id,
    setup_logging,
)

__all__ = [
    "clear_request_id",
    "get_logger",
    "get_request_id",
    "log_stage",
    "request_context",
    "set_request_id",
    "setup_logging",
]
