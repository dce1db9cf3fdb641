"""
Centralized Configuration Module

All application constants, logging configuration, and settings.
Import from here instead of hardcoding values.

Settings backed by environment variables are re-read every time
load_environment() runs, so an --env-file given on the command line
reaches them.
"""

import os
import logging
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

# ============================================================================
# Environment Loading
# ============================================================================

def load_environment(env_file: Optional[str] = None):
    """
    Load environment variables from .env file and refresh the settings below.

    Args:
        env_file: Optional path to .env file. If None, uses default .env
    """
    if env_file:
        env_path = Path(env_file)
        if env_path.exists():
            load_dotenv(env_path, override=True)
            logging.getLogger(__name__).info(f"Loaded environment from: {env_file}")
        else:
            logging.getLogger(__name__).warning(f"Environment file not found: {env_file}")
    else:
        # Reload default .env
        load_dotenv(override=True)

    refresh_settings()


def refresh_settings():
    """Re-read every environment backed setting"""
    for settings in (AppConfig, ManagementDefaults, InventoryConfig, LogConfig):
        settings.reload()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


# ============================================================================
# Application Constants
# ============================================================================

class AppConfig:
    """Application-wide configuration constants"""

    # Application Info
    APP_NAME = "bmctl"
    APP_VERSION = "1.0.0"
    APP_DESCRIPTION = "Drive baremetal hosts through power and virtual media operations over Redfish"

    # Default Values
    DEFAULT_OUTPUT_FORMAT = "list"

    # Timeouts
    API_TIMEOUT: int
    K8S_TIMEOUT: int

    @classmethod
    def reload(cls):
        cls.API_TIMEOUT = int(os.getenv("API_TIMEOUT", "30"))
        cls.K8S_TIMEOUT = int(os.getenv("K8S_TIMEOUT", "30"))


class ManagementDefaults:
    """Default out-of-band management settings"""

    TYPE: str
    INSECURE: bool
    USE_PROXY: bool
    SYSTEM_ACTION_RETRIES: int
    SYSTEM_REBOOT_DELAY: int

    @classmethod
    def reload(cls):
        cls.TYPE = os.getenv("BMC_MANAGEMENT_TYPE", "redfish")
        cls.INSECURE = _env_bool("BMC_INSECURE")
        cls.USE_PROXY = _env_bool("BMC_USE_PROXY")
        cls.SYSTEM_ACTION_RETRIES = int(os.getenv("BMC_SYSTEM_ACTION_RETRIES", "30"))
        cls.SYSTEM_REBOOT_DELAY = int(os.getenv("BMC_SYSTEM_REBOOT_DELAY", "30"))


class InventoryConfig:
    """Where host documents are read from"""

    # Local YAML documents (file or directory)
    DOCUMENTS_PATH: str

    # Kubernetes BareMetalHost resources
    K8S_API_SERVER: str
    K8S_TOKEN: str
    K8S_NAMESPACE: str
    K8S_VERIFY_SSL: bool

    @classmethod
    def reload(cls):
        cls.DOCUMENTS_PATH = os.getenv("BMC_DOCUMENTS_PATH", "")
        cls.K8S_API_SERVER = os.getenv("K8S_API_SERVER", "")
        cls.K8S_TOKEN = os.getenv("K8S_TOKEN", "")
        cls.K8S_NAMESPACE = os.getenv("K8S_NAMESPACE", "metal3")
        cls.K8S_VERIFY_SSL = _env_bool("K8S_VERIFY_SSL", "true")

    @classmethod
    def is_kubernetes_configured(cls) -> bool:
        """Check if a Kubernetes document source is configured"""
        return all([cls.K8S_API_SERVER, cls.K8S_TOKEN])


# ============================================================================
# Logging Configuration
# ============================================================================

class LogConfig:
    """Logging configuration"""

    # Log Format
    LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

    # Detailed format with thread and file/line
    DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(threadName)s %(filename)s:%(lineno)d] - %(message)s"

    LOG_LEVEL: str
    LOG_FILE: Optional[str]
    LOG_FILE_MAX_BYTES: int
    LOG_FILE_BACKUP_COUNT: int

    @classmethod
    def reload(cls):
        cls.LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING").upper()
        cls.LOG_FILE = os.getenv("LOG_FILE")  # Optional
        cls.LOG_FILE_MAX_BYTES = int(os.getenv("LOG_FILE_MAX_BYTES", "10485760"))  # 10MB
        cls.LOG_FILE_BACKUP_COUNT = int(os.getenv("LOG_FILE_BACKUP_COUNT", "5"))


def setup_logging(verbose: bool = False, log_file: Optional[str] = None):
    """
    Configure application logging.

    Args:
        verbose: Enable verbose (DEBUG) logging
        log_file: Optional log file path
    """
    # Determine log level
    if verbose:
        log_level = logging.DEBUG
    else:
        log_level = getattr(logging, LogConfig.LOG_LEVEL, logging.WARNING)

    # Choose format
    log_format = LogConfig.DETAILED_FORMAT if verbose else LogConfig.LOG_FORMAT

    # Configure root logger
    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt=LogConfig.LOG_DATE_FORMAT
    )

    # Add file handler if specified
    if log_file or LogConfig.LOG_FILE:
        from logging.handlers import RotatingFileHandler

        file_path = log_file or LogConfig.LOG_FILE
        file_handler = RotatingFileHandler(
            file_path,
            maxBytes=LogConfig.LOG_FILE_MAX_BYTES,
            backupCount=LogConfig.LOG_FILE_BACKUP_COUNT
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(logging.Formatter(log_format, LogConfig.LOG_DATE_FORMAT))
        logging.getLogger().addHandler(file_handler)
        logger.info(f"Logging to file: {file_path}")

    # Suppress noisy loggers
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("kubernetes").setLevel(logging.WARNING)

    logger.info(f"Logging configured: level={logging.getLevelName(log_level)}")


# Initialize logger for this module
logger = logging.getLogger(__name__)


# ============================================================================
# Validation
# ============================================================================

def validate_config(documents_path: Optional[str] = None):
    """
    Validate configuration on startup.
    Raises ValueError if critical configuration is missing.

    Args:
        documents_path: Document path given on the command line, overrides BMC_DOCUMENTS_PATH
    """
    errors = []
    documents_path = documents_path or InventoryConfig.DOCUMENTS_PATH

    if ManagementDefaults.SYSTEM_ACTION_RETRIES < 0:
        errors.append(f"BMC_SYSTEM_ACTION_RETRIES must be >= 0 (got {ManagementDefaults.SYSTEM_ACTION_RETRIES})")
    if ManagementDefaults.SYSTEM_REBOOT_DELAY < 0:
        errors.append(f"BMC_SYSTEM_REBOOT_DELAY must be >= 0 (got {ManagementDefaults.SYSTEM_REBOOT_DELAY})")

    # At least one document source must be available
    if not documents_path and not InventoryConfig.is_kubernetes_configured():
        errors.append("No host document source configured (set BMC_DOCUMENTS_PATH or K8S_API_SERVER/K8S_TOKEN)")
    elif documents_path and not Path(documents_path).exists():
        errors.append(f"Documents path does not exist: {documents_path}")

    if InventoryConfig.K8S_API_SERVER and not InventoryConfig.K8S_TOKEN:
        errors.append("K8S_API_SERVER configured but K8S_TOKEN is missing")

    # Raise errors if any
    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        raise ValueError(error_msg)

    logger.info(f"Configuration validated: management type '{ManagementDefaults.TYPE}'")


# ============================================================================
# Export commonly used configs
# ============================================================================

# Load environment on module import
load_environment()

# Export for convenience
__all__ = [
    'AppConfig',
    'ManagementDefaults',
    'InventoryConfig',
    'LogConfig',
    'load_environment',
    'refresh_settings',
    'setup_logging',
    'validate_config',
]
