"""
Configuration Management for StarScope

🔧 Environment-aware settings for component scoping and logging.
"""

import json
import logging
import logging.handlers
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union


class Environment(Enum):
    """Application environments"""
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


class DuplicateScopePolicy(str, Enum):
    """What a host does when a sibling scope is mounted twice."""
    RAISE = "raise"
    WARN = "warn"


@dataclass
class ScopeConfig:
    """Component scoping configuration"""
    duplicate_scope: DuplicateScopePolicy = DuplicateScopePolicy.RAISE
    strict_declarations: bool = False
    max_flush_iterations: int = 100


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_path: Optional[str] = None
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5


@dataclass
class StarScopeConfig:
    """Complete StarScope configuration"""
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = False
    base_path: str = "/components"
    session_timeout: int = 3600  # seconds a session host may sit idle; 0 keeps it forever

    scope: ScopeConfig = field(default_factory=ScopeConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def for_environment(cls, environment: Environment) -> 'StarScopeConfig':
        """Create configuration for specific environment"""
        config = cls(environment=environment)

        if environment == Environment.DEVELOPMENT:
            config.debug = True
            config.logging.level = "DEBUG"

        elif environment == Environment.TESTING:
            config.scope.strict_declarations = True
            config.logging.level = "WARNING"

        elif environment == Environment.PRODUCTION:
            config.debug = False
            config.logging.level = "INFO"

        return config

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'StarScopeConfig':
        """Create configuration from dictionary"""
        environment = Environment(config_dict.get("environment", Environment.DEVELOPMENT.value))
        config = cls.for_environment(environment)

        if "debug" in config_dict:
            config.debug = bool(config_dict["debug"])
        if "base_path" in config_dict:
            config.base_path = config_dict["base_path"]
        if "session_timeout" in config_dict:
            config.session_timeout = int(config_dict["session_timeout"])

        for key, value in config_dict.get("scope", {}).items():
            if key == "duplicate_scope":
                value = DuplicateScopePolicy(value)
            if hasattr(config.scope, key):
                setattr(config.scope, key, value)

        for key, value in config_dict.get("logging", {}).items():
            if hasattr(config.logging, key):
                setattr(config.logging, key, value)

        return config

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> 'StarScopeConfig':
        """Load configuration from a JSON or YAML file"""
        config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        if config_path.suffix == '.json':
            with open(config_path) as f:
                config_dict = json.load(f)
        elif config_path.suffix in ('.yml', '.yaml'):
            try:
                import yaml
            except ImportError:
                raise ImportError("PyYAML is required for YAML configuration files")
            with open(config_path) as f:
                config_dict = yaml.safe_load(f) or {}
        else:
            raise ValueError(f"Unsupported configuration file format: {config_path.suffix}")

        return cls.from_dict(config_dict)

    @classmethod
    def from_environment(cls) -> 'StarScopeConfig':
        """Create configuration from environment variables"""
        env_name = os.getenv('STARSCOPE_ENV', 'development')
        config = cls.for_environment(Environment(env_name))

        if os.getenv('STARSCOPE_DEBUG'):
            config.debug = os.getenv('STARSCOPE_DEBUG').lower() == 'true'

        if os.getenv('STARSCOPE_SESSION_TIMEOUT'):
            config.session_timeout = int(os.getenv('STARSCOPE_SESSION_TIMEOUT'))

        if os.getenv('STARSCOPE_DUPLICATE_SCOPE'):
            config.scope.duplicate_scope = DuplicateScopePolicy(os.getenv('STARSCOPE_DUPLICATE_SCOPE').lower())

        if os.getenv('STARSCOPE_STRICT_DECLARATIONS'):
            config.scope.strict_declarations = os.getenv('STARSCOPE_STRICT_DECLARATIONS').lower() == 'true'

        if os.getenv('STARSCOPE_LOG_LEVEL'):
            config.logging.level = os.getenv('STARSCOPE_LOG_LEVEL').upper()

        return config

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary"""
        return {
            "environment": self.environment.value,
            "debug": self.debug,
            "base_path": self.base_path,
            "session_timeout": self.session_timeout,
            "scope": {
                "duplicate_scope": self.scope.duplicate_scope.value,
                "strict_declarations": self.scope.strict_declarations,
                "max_flush_iterations": self.scope.max_flush_iterations,
            },
            "logging": {
                "level": self.logging.level,
                "format": self.logging.format,
                "file_path": self.logging.file_path,
                "max_file_size": self.logging.max_file_size,
                "backup_count": self.logging.backup_count,
            },
        }


# Global configuration management
_current_config: Optional[StarScopeConfig] = None


def set_config(config: Optional[StarScopeConfig]):
    """Set the global configuration (``None`` resets to environment defaults)"""
    global _current_config
    _current_config = config


def get_config() -> StarScopeConfig:
    """Get the current global configuration"""
    global _current_config

    if _current_config is None:
        _current_config = StarScopeConfig.from_environment()

    return _current_config


def configure_logging(config: Optional[StarScopeConfig] = None) -> logging.Logger:
    """Attach handlers to the ``starscope`` logger according to ``config.logging``"""
    config = config or get_config()
    logger = logging.getLogger("starscope")
    logger.setLevel(config.logging.level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(config.logging.format)
    stream = logging.StreamHandler()
    stream.setFormatter(formatter)
    logger.addHandler(stream)

    if config.logging.file_path:
        Path(config.logging.file_path).parent.mkdir(parents=True, exist_ok=True)
        rotating = logging.handlers.RotatingFileHandler(
            config.logging.file_path,
            maxBytes=config.logging.max_file_size,
            backupCount=config.logging.backup_count,
        )
        rotating.setFormatter(formatter)
        logger.addHandler(rotating)

    return logger


__all__ = [
    "Environment", "DuplicateScopePolicy", "ScopeConfig", "LoggingConfig", "StarScopeConfig",
    "set_config", "get_config", "configure_logging",
]
