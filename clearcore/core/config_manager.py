"""
Configuration Manager for the ClearCore Client

Handles loading, validation, and management of client configuration
from YAML files. Provides type-safe access to connection and motor
settings with validation and default fallbacks.

Author: ClearCore Client Development
Created: October 2026
"""

import os
import yaml
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union, List
from dataclasses import dataclass

from .exceptions import (
    ConfigurationError,
    ConfigurationNotFoundError,
    ConfigurationValidationError
)

logger = logging.getLogger(__name__)

VALID_CONNECTIONS = ('tcp', 'serial')
MAX_DEVICE_INDEX = 9


@dataclass
class ConnectionConfig:
    """Configuration for the controller connection"""
    connection: str = "tcp"  # "tcp" or "serial"
    host: str = "192.168.1.100"
    port: int = 8888
    serial_port: str = "/dev/ttyACM0"
    baudrate: int = 115200
    queue_size: int = 10
    request_timeout: Optional[float] = None  # seconds, None waits forever
    poll_interval: float = 0.25  # seconds


@dataclass
class MotorConfig:
    """Configuration for a single motor axis"""
    id: int
    scale: int  # controller units per user unit


class ConfigManager:
    """
    Centralized configuration management for the ClearCore client

    Features:
    - YAML configuration file loading
    - Type-safe configuration access
    - Configuration validation
    - Default value handling
    - Environment variable overrides
    - Reload skipped when the file is unchanged
    """

    def __init__(self, config_file: Union[str, Path]):
        self.config_file = Path(config_file)
        self._config_data: Dict[str, Any] = {}
        self._file_mtime: Optional[float] = None
        self._validated = False

        # Load configuration
        self.reload()

    def reload(self) -> bool:
        """
        Reload configuration from file

        Returns:
            True if reload successful
        """
        try:
            if not self.config_file.exists():
                raise ConfigurationNotFoundError(
                    f"Configuration file not found: {self.config_file}"
                )

            # Check if file has changed
            current_mtime = self.config_file.stat().st_mtime
            if self._file_mtime == current_mtime and self._config_data:
                logger.debug("Configuration file unchanged, skipping reload")
                return True

            with open(self.config_file, 'r', encoding='utf-8') as file:
                self._config_data = yaml.safe_load(file) or {}

            self._file_mtime = current_mtime
            self._validated = False

            self._apply_env_overrides()
            self.validate()

            logger.info(f"Configuration loaded from {self.config_file}")
            return True

        except ConfigurationError:
            # Re-raise our own errors without wrapping
            raise
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {self.config_file}: {e}")
        except Exception as e:
            raise ConfigurationError(f"Failed to load configuration: {e}")

    def _apply_env_overrides(self):
        """Apply environment variable overrides to configuration"""
        env_mappings = {
            'CLEARCORE_HOST': 'controller.host',
            'CLEARCORE_PORT': 'controller.port',
            'CLEARCORE_SERIAL_PORT': 'controller.serial_port',
            'CLEARCORE_LOG_LEVEL': 'system.log_level',
        }

        for env_var, config_path in env_mappings.items():
            env_value = os.getenv(env_var)
            if env_value is not None:
                self._set_nested_value(config_path, env_value)
                logger.debug(f"Applied environment override: {config_path} = {env_value}")

    def _set_nested_value(self, path: str, value: Any):
        """Set a nested configuration value using dot notation"""
        keys = path.split('.')
        current = self._config_data

        for key in keys[:-1]:
            if not isinstance(current.get(key), dict):
                current[key] = {}
            current = current[key]

        # Convert string values to appropriate types
        if isinstance(value, str):
            if value.lower() in ('true', 'false'):
                value = value.lower() == 'true'
            elif value.isdigit():
                value = int(value)
            elif value.replace('.', '', 1).isdigit():
                value = float(value)

        current[keys[-1]] = value

    def validate(self) -> bool:
        """
        Validate configuration values

        Returns:
            True if validation successful

        Raises:
            ConfigurationValidationError: If validation fails
        """
        self._validate_system_config()
        self._validate_controller_config()
        self._validate_motor_config()

        self._validated = True
        logger.debug("Configuration validation successful")
        return True

    def _validate_system_config(self):
        """Validate system configuration section"""
        valid_log_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        log_level = self.get('system.log_level', 'INFO')
        if log_level not in valid_log_levels:
            raise ConfigurationValidationError(
                f"Invalid log level '{log_level}'. Must be one of: {valid_log_levels}"
            )

    def _validate_controller_config(self):
        """Validate controller connection configuration"""
        controller = self.get('controller', {})
        if not isinstance(controller, dict):
            raise ConfigurationValidationError("'controller' section must be a mapping")

        connection = controller.get('connection', 'tcp')
        if connection not in VALID_CONNECTIONS:
            raise ConfigurationValidationError(
                f"Invalid connection '{connection}'. Must be one of: {list(VALID_CONNECTIONS)}"
            )

        if connection == 'tcp':
            if not controller.get('host'):
                raise ConfigurationValidationError("Controller host not specified")
            port = controller.get('port')
            if not isinstance(port, int) or port < 1 or port > 65535:
                raise ConfigurationValidationError(
                    f"Invalid controller port {port}. Must be between 1-65535"
                )
        elif not controller.get('serial_port'):
            raise ConfigurationValidationError("Controller serial_port not specified")

        queue_size = controller.get('queue_size', 10)
        if not isinstance(queue_size, int) or queue_size < 1:
            raise ConfigurationValidationError(
                f"Invalid queue_size {queue_size}. Must be a positive integer"
            )

        request_timeout = controller.get('request_timeout')
        if request_timeout is not None and (
                not isinstance(request_timeout, (int, float)) or request_timeout <= 0):
            raise ConfigurationValidationError(
                f"Invalid request_timeout {request_timeout}. Must be positive or null"
            )

        poll_interval = controller.get('poll_interval', 0.25)
        if not isinstance(poll_interval, (int, float)) or poll_interval <= 0:
            raise ConfigurationValidationError(
                f"Invalid poll_interval {poll_interval}. Must be positive"
            )

        h_bridge_scale = controller.get('h_bridge_scale', 32700)
        if not isinstance(h_bridge_scale, int) or h_bridge_scale <= 0:
            raise ConfigurationValidationError(
                f"Invalid h_bridge_scale {h_bridge_scale}. Must be a positive integer"
            )

    def _validate_motor_config(self):
        """Validate motor list"""
        motors = self.get('motors', [])
        if not isinstance(motors, list) or not motors:
            raise ConfigurationValidationError("'motors' must be a non-empty list")

        seen_ids = set()
        for motor in motors:
            if not isinstance(motor, dict):
                raise ConfigurationValidationError(f"Invalid motor entry: {motor}")
            for field in ('id', 'scale'):
                if field not in motor:
                    raise ConfigurationValidationError(
                        f"Missing field '{field}' in motor configuration: {motor}"
                    )

            motor_id = motor['id']
            if not isinstance(motor_id, int) or not 0 <= motor_id <= MAX_DEVICE_INDEX:
                raise ConfigurationValidationError(
                    f"Invalid motor id {motor_id}. Must be 0-{MAX_DEVICE_INDEX}"
                )
            if motor_id in seen_ids:
                raise ConfigurationValidationError(f"Duplicate motor id {motor_id}")
            seen_ids.add(motor_id)

            scale = motor['scale']
            if not isinstance(scale, int) or scale <= 0:
                raise ConfigurationValidationError(
                    f"Invalid scale {scale} for motor {motor_id}. Must be a positive integer"
                )

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation

        Args:
            key: Configuration key in dot notation (e.g., 'controller.host')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        try:
            keys = key.split('.')
            value = self._config_data

            for k in keys:
                value = value[k]

            return value

        except (KeyError, TypeError):
            return default

    def get_connection_config(self) -> ConnectionConfig:
        """Get typed controller connection configuration"""
        controller = self.get('controller', {})
        defaults = ConnectionConfig()

        request_timeout = controller.get('request_timeout', defaults.request_timeout)
        return ConnectionConfig(
            connection=controller.get('connection', defaults.connection),
            host=str(controller.get('host', defaults.host)),
            port=int(controller.get('port', defaults.port)),
            serial_port=str(controller.get('serial_port', defaults.serial_port)),
            baudrate=int(controller.get('baudrate', defaults.baudrate)),
            queue_size=int(controller.get('queue_size', defaults.queue_size)),
            request_timeout=float(request_timeout) if request_timeout is not None else None,
            poll_interval=float(controller.get('poll_interval', defaults.poll_interval))
        )

    def get_motor_configs(self) -> List[MotorConfig]:
        """Get typed motor configurations in file order"""
        return [
            MotorConfig(id=int(motor['id']), scale=int(motor['scale']))
            for motor in self.get('motors', [])
        ]

    def get_log_level(self) -> str:
        """Get configured log level"""
        return self.get('system.log_level', 'INFO')

    def get_summary(self) -> Dict[str, Any]:
        """Get configuration summary for logging/debugging"""
        connection = self.get_connection_config()
        return {
            'config_file': str(self.config_file),
            'validated': self._validated,
            'log_level': self.get_log_level(),
            'connection': connection.connection,
            'endpoint': (f"{connection.host}:{connection.port}"
                         if connection.connection == 'tcp' else connection.serial_port),
            'motor_count': len(self.get_motor_configs()),
        }
