from .logger import log_debug, log_error, log_info, log_success, log_warning, setup_logging
from .output import print_json

__all__ = [
    "log_debug",
    "log_error",
    "log_info",
    "log_success",
    "log_warning",
    "print_json",
    "setup_logging",
]
