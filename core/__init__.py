"""
Issue Tracker Core Library.

This package provides the core functionality for the Issue Tracker,
including database management, models, repositories, and logging.

Usage:
    # Database
    from core.db import DatabaseManager
    from core.models import Issue
    from core.repositories import IssueRepository

    # Config
    from core.config import get_settings, Settings

    # Logging
    from core.logging import get_logger, configure_logging
"""

__version__ = "1.0.0"

# Users should import directly from submodules:
#   from core.db import DatabaseManager
#   from core.config import get_settings
#   from core.logging import get_logger
