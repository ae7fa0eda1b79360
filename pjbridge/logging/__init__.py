"""
Unified logging package: one line format for all bridge log output.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

from pjbridge.logging.unified_logging import (
    NO_ENDPOINT,
    UNIFIED_DATE_FMT,
    UNIFIED_FORMAT_STR,
    EndpointFilter,
    UnifiedFormatter,
    create_unified_formatter,
    setup_logging,
)

__all__ = [
    "NO_ENDPOINT",
    "UNIFIED_DATE_FMT",
    "UNIFIED_FORMAT_STR",
    "EndpointFilter",
    "UnifiedFormatter",
    "create_unified_formatter",
    "setup_logging",
]
