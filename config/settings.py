"""Application configuration settings.

This module centralizes all configuration values loaded from:
1. config.base.yaml (shared defaults)
2. config.{env}.yaml (environment-specific: dev, staging, prod)
3. config.local.yaml (local overrides, git-ignored)
4. Environment variables (highest priority)

Default environment is 'development' (DEV).

Usage:
    from config.settings import config

    # Access config values
    page_size = config.CHAT_PAGE_SIZE
    radius = config.SEARCH_RADIUS_KM

    # Check current environment
    env = config.ENV  # 'development', 'staging', or 'production'
"""
import os
from pathlib import Path
from typing import Optional, Any, Dict
import yaml


# Environment name mappings
ENV_ALIASES = {
    'dev': 'development',
    'development': 'development',
    'staging': 'staging',
    'stage': 'staging',
    'prod': 'production',
    'production': 'production',
}

# Default environment
DEFAULT_ENV = 'development'


class Config:
    """Centralized application configuration.

    Loads configuration from YAML files based on environment.

    Priority (highest to lowest):
    1. Environment variables
    2. config.local.yaml (for local development overrides)
    3. config.{env}.yaml (environment-specific: dev, staging, prod)
    4. config.base.yaml (shared defaults)

    Environment is determined by:
    1. FLASK_ENV environment variable
    2. APP_ENV environment variable
    3. Default: 'development'
    """

    _config_data: Dict[str, Any] = {}
    _loaded: bool = False
    _current_env: str = DEFAULT_ENV

    def __init__(self):
        if not Config._loaded:
            self._load_config()

    @classmethod
    def _get_environment(cls) -> str:
        """Determine current environment from env vars or default to dev."""
        env = os.getenv('FLASK_ENV') or os.getenv('APP_ENV') or DEFAULT_ENV
        env = env.lower().strip()
        return ENV_ALIASES.get(env, DEFAULT_ENV)

    def _load_config(self):
        """Load configuration from YAML files based on environment."""
        config_dir = Path(__file__).parent
        Config._current_env = self._get_environment()

        Config._config_data = {}

        # 1. Load base config (shared defaults)
        base_config_path = config_dir / 'config.base.yaml'
        if base_config_path.exists():
            with open(base_config_path, 'r') as f:
                Config._config_data = yaml.safe_load(f) or {}

        # 2. Load environment-specific config
        env_config_map = {
            'development': 'config.dev.yaml',
            'staging': 'config.staging.yaml',
            'production': 'config.prod.yaml',
        }
        env_config_file = env_config_map.get(Config._current_env, 'config.dev.yaml')
        env_config_path = config_dir / env_config_file

        if env_config_path.exists():
            with open(env_config_path, 'r') as f:
                env_data = yaml.safe_load(f) or {}
                Config._config_data = self._deep_merge(Config._config_data, env_data)

        # 3. Load local overrides (not in git)
        local_config_path = config_dir / 'config.local.yaml'
        if local_config_path.exists():
            with open(local_config_path, 'r') as f:
                local_data = yaml.safe_load(f) or {}
                Config._config_data = self._deep_merge(Config._config_data, local_data)

        Config._loaded = True

    def _deep_merge(self, base: dict, override: dict) -> dict:
        """Deep merge two dictionaries."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result

    def _get_yaml_value(self, *keys, default=None) -> Any:
        """Get a nested value from YAML config."""
        value = Config._config_data
        for key in keys:
            if isinstance(value, dict):
                value = value.get(key)
            else:
                return default
            if value is None:
                return default
        return value

    def _get_int(self, env_name: str, *keys, default: int) -> int:
        env_val = os.getenv(env_name)
        if env_val:
            return int(env_val)
        return int(self._get_yaml_value(*keys, default=default))

    def _get_float(self, env_name: str, *keys, default: float) -> float:
        env_val = os.getenv(env_name)
        if env_val:
            return float(env_val)
        return float(self._get_yaml_value(*keys, default=default))

    def _get_bool(self, env_name: str, *keys, default: bool) -> bool:
        env_val = os.getenv(env_name, '').lower()
        if env_val:
            return env_val in ('1', 'true', 'yes')
        return bool(self._get_yaml_value(*keys, default=default))

    @classmethod
    def reload(cls):
        """Reload configuration (useful for testing)."""
        cls._loaded = False
        cls._config_data = {}
        instance = cls()
        return instance

    # ==========================================================================
    # Environment Info
    # ==========================================================================

    @property
    def CURRENT_ENV(self) -> str:
        """Current environment name."""
        return Config._current_env

    @property
    def IS_DEV(self) -> bool:
        """Check if running in development environment."""
        return Config._current_env == 'development'

    @property
    def IS_STAGING(self) -> bool:
        """Check if running in staging environment."""
        return Config._current_env == 'staging'

    @property
    def IS_PROD(self) -> bool:
        """Check if running in production environment."""
        return Config._current_env == 'production'

    # ==========================================================================
    # Application Settings
    # ==========================================================================

    @property
    def DEBUG(self) -> bool:
        """Flask debug mode."""
        return self._get_bool('FLASK_DEBUG', 'app', 'debug', default=False)

    @property
    def ENV(self) -> str:
        """Application environment (development, staging, production)."""
        return Config._current_env

    @property
    def PORT(self) -> int:
        """Server port."""
        return self._get_int('PORT', 'app', 'port', default=5000)

    @property
    def APP_NAME(self) -> str:
        """Application name."""
        return os.getenv('APP_NAME') or self._get_yaml_value('app', 'name', default='Rehab Rentals API')

    @property
    def APP_VERSION(self) -> str:
        """Application version."""
        return self._get_yaml_value('app', 'version', default='1.0.0')

    # ==========================================================================
    # Security Settings
    # ==========================================================================

    @property
    def JWT_SECRET(self) -> Optional[str]:
        """JWT secret key for token signing. Required in production."""
        return os.getenv('JWT_SECRET') or self._get_yaml_value('security', 'jwt', 'secret')

    @property
    def JWT_ALGORITHM(self) -> str:
        """JWT algorithm (default: HS256)."""
        return os.getenv('JWT_ALGORITHM') or self._get_yaml_value('security', 'jwt', 'algorithm', default='HS256')

    @property
    def ACCESS_TOKEN_EXPIRE_MINUTES(self) -> int:
        """Access token expiry in minutes."""
        return self._get_int('ACCESS_TOKEN_MINUTES', 'security', 'jwt', 'access_token_expire_minutes', default=10080)

    # ==========================================================================
    # Database Settings
    # ==========================================================================

    @property
    def MONGO_URI(self) -> str:
        """MongoDB connection URI."""
        return os.getenv('MONGO_URI') or self._get_yaml_value('database', 'mongo_uri', default='mongodb://localhost:27017')

    @property
    def MONGO_DB_NAME(self) -> str:
        """Database holding every marketplace collection."""
        return os.getenv('MONGO_DB') or self._get_yaml_value('database', 'name', default='rehab_db')

    @property
    def MONGO_TIMEOUT_MS(self) -> int:
        """Timeout applied to server selection, connect and socket operations."""
        return self._get_int('MONGO_TIMEOUT_MS', 'database', 'timeout_ms', default=5000)

    # ==========================================================================
    # Chat Settings
    # ==========================================================================

    @property
    def CHAT_PAGE_SIZE(self) -> int:
        """Messages returned per history page."""
        return self._get_int('CHAT_PAGE_SIZE', 'chat', 'page_size', default=20)

    @property
    def TYPING_TTL_SECONDS(self) -> float:
        """Age after which a typing flag is treated as cleared."""
        return self._get_float('TYPING_TTL_SECONDS', 'chat', 'typing_ttl_seconds', default=5)

    @property
    def CHAT_MEDIA_PREFIX(self) -> str:
        """Path prefix for uploaded chat media."""
        return self._get_yaml_value('chat', 'media_prefix', default='chat_media')

    # ==========================================================================
    # Search Settings
    # ==========================================================================

    @property
    def SEARCH_RADIUS_KM(self) -> float:
        """Proximity search radius in kilometers."""
        return self._get_float('SEARCH_RADIUS_KM', 'search', 'radius_km', default=50)

    @property
    def SEARCH_RESULT_LIMIT(self) -> int:
        """Max listings per keyword query (and per geohash range)."""
        return self._get_int('SEARCH_RESULT_LIMIT', 'search', 'result_limit', default=20)

    @property
    def AUTOCOMPLETE_LIMIT(self) -> int:
        """Max titles returned by autocomplete."""
        return self._get_int('AUTOCOMPLETE_LIMIT', 'search', 'autocomplete_limit', default=5)

    @property
    def SEARCH_DEBOUNCE_MS(self) -> int:
        """Quiet period before a typed search term is queried."""
        return self._get_int('SEARCH_DEBOUNCE_MS', 'search', 'debounce_ms', default=300)

    @property
    def GEOHASH_PRECISION(self) -> int:
        """Characters of geohash stored on each listing."""
        return self._get_int('GEOHASH_PRECISION', 'search', 'geohash_precision', default=10)

    # ==========================================================================
    # Reviews / Upload Settings
    # ==========================================================================

    @property
    def REVIEWS_PAGE_SIZE(self) -> int:
        """Reviews returned per page."""
        return self._get_int('REVIEWS_PAGE_SIZE', 'reviews', 'page_size', default=5)

    @property
    def MAX_UPLOAD_SIZE_MB(self) -> int:
        """Maximum file upload size in MB."""
        return self._get_int('MAX_UPLOAD_SIZE_MB', 'upload', 'max_file_size_mb', default=10)

    # ==========================================================================
    # CORS Settings
    # ==========================================================================

    @property
    def CORS_ORIGINS(self) -> str:
        """Allowed CORS origins."""
        return os.getenv('CORS_ORIGINS') or self._get_yaml_value('cors', 'origins', default='*')

    @property
    def CORS_ORIGINS_LIST(self) -> list:
        """Get CORS origins as a list."""
        origins = self.CORS_ORIGINS
        if origins == '*':
            return ['*']
        return [o.strip() for o in origins.split(',') if o.strip()]

    # ==========================================================================
    # Logging Settings
    # ==========================================================================

    @property
    def LOG_LEVEL(self) -> str:
        """Logging level."""
        env_val = os.getenv('LOG_LEVEL')
        if env_val:
            return env_val.upper()
        if self.LOG_DEBUG:
            return 'DEBUG'
        return self._get_yaml_value('logging', 'level', default='INFO')

    @property
    def LOG_DEBUG(self) -> bool:
        """Enable debug logging (verbose)."""
        return self._get_bool('LOG_DEBUG', 'logging', 'debug', default=False)

    @property
    def LOG_PATTERN(self) -> str:
        """Log format pattern."""
        env_val = os.getenv('LOG_PATTERN')
        if env_val:
            return env_val
        return self._get_yaml_value('logging', 'pattern', default='%(message)s')

    @property
    def LOG_INCLUDE_DATETIME(self) -> bool:
        return self._get_bool('LOG_INCLUDE_DATETIME', 'logging', 'include_datetime', default=False)

    @property
    def LOG_INCLUDE_NAME(self) -> bool:
        return self._get_bool('LOG_INCLUDE_NAME', 'logging', 'include_name', default=False)

    @property
    def LOG_INCLUDE_LEVEL(self) -> bool:
        return self._get_bool('LOG_INCLUDE_LEVEL', 'logging', 'include_level', default=True)

    @property
    def LOG_DATE_FORMAT(self) -> str:
        """Date format for logs."""
        return self._get_yaml_value('logging', 'date_format', default='%H:%M:%S')

    @property
    def LOG_FORMAT(self) -> str:
        """Build log format string based on config options."""
        pattern = self.LOG_PATTERN
        if pattern and pattern != '%(message)s':
            return pattern

        parts = []
        if self.LOG_INCLUDE_DATETIME:
            parts.append('%(asctime)s')
        if self.LOG_INCLUDE_NAME:
            parts.append('%(name)s')
        if self.LOG_INCLUDE_LEVEL:
            parts.append('%(levelname)s')
        parts.append('%(message)s')

        return ' - '.join(parts) if len(parts) > 1 else parts[0]

    # ==========================================================================
    # Validation Methods
    # ==========================================================================

    def validate_required(self) -> None:
        """Validate that required configuration values are set.

        Raises RuntimeError if required values are missing in production.
        """
        errors = []

        if self.IS_PROD:
            if not self.JWT_SECRET:
                errors.append('JWT_SECRET environment variable is required in production')
            if not self.MONGO_URI or self.MONGO_URI == 'mongodb://localhost:27017':
                errors.append('MONGO_URI should be set to production database in production')
            if self.CORS_ORIGINS == '*':
                errors.append('CORS_ORIGINS should not be "*" in production')

        if errors:
            raise RuntimeError('Configuration errors:\n' + '\n'.join(f'  - {e}' for e in errors))

    def to_dict(self) -> Dict[str, Any]:
        """Export current configuration as dictionary (for debugging)."""
        return {
            'environment': {
                'current': self.CURRENT_ENV,
                'is_dev': self.IS_DEV,
                'is_staging': self.IS_STAGING,
                'is_prod': self.IS_PROD,
            },
            'app': {
                'debug': self.DEBUG,
                'port': self.PORT,
                'name': self.APP_NAME,
                'version': self.APP_VERSION,
            },
            'security': {
                'jwt_algorithm': self.JWT_ALGORITHM,
                'access_token_expire_minutes': self.ACCESS_TOKEN_EXPIRE_MINUTES,
                'jwt_secret_set': bool(self.JWT_SECRET),
            },
            'database': {
                'mongo_uri': '***' if self.MONGO_URI else None,
                'name': self.MONGO_DB_NAME,
                'timeout_ms': self.MONGO_TIMEOUT_MS,
            },
            'chat': {
                'page_size': self.CHAT_PAGE_SIZE,
                'typing_ttl_seconds': self.TYPING_TTL_SECONDS,
                'media_prefix': self.CHAT_MEDIA_PREFIX,
            },
            'search': {
                'radius_km': self.SEARCH_RADIUS_KM,
                'result_limit': self.SEARCH_RESULT_LIMIT,
                'autocomplete_limit': self.AUTOCOMPLETE_LIMIT,
                'debounce_ms': self.SEARCH_DEBOUNCE_MS,
                'geohash_precision': self.GEOHASH_PRECISION,
            },
            'cors': {
                'origins': self.CORS_ORIGINS,
            },
            'logging': {
                'level': self.LOG_LEVEL,
            },
        }


# Singleton config instance
config = Config()


# =============================================================================
# Convenience exports
# =============================================================================

def get_env() -> str:
    return config.ENV
