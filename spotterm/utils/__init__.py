# spotterm/utils/__init__.py
"""
Utilities package
Common helpers and logging functions
"""

from .logger import (
    get_logger,
    configure_from_settings,
    setup_logging,
    reconfigure_logging_for_session,
    get_current_log_file
)
from .helpers import (
    format_duration,
    format_time,
    truncate_string,
    generate_state,
    split_redirect_uri
)

__all__ = [
    # Logger exports
    'get_logger',
    'configure_from_settings',
    'setup_logging',
    'reconfigure_logging_for_session',
    'get_current_log_file',

    # Helper exports
    'format_duration',
    'format_time',
    'truncate_string',
    'generate_state',
    'split_redirect_uri'
]
