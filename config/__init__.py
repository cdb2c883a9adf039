"""Configuration module for the application.

Supports multiple environments:
- development (default)
- staging
- production

Usage:
    from config import config

    # Access config values
    page_size = config.CHAT_PAGE_SIZE
    radius_km = config.SEARCH_RADIUS_KM

    # Check environment
    if config.IS_DEV:
        logging.getLogger(__name__).info("dev mode")

Set environment via:
- FLASK_ENV=production
- APP_ENV=staging
"""
from .settings import config, Config, get_env

__all__ = ['config', 'Config', 'get_env']
