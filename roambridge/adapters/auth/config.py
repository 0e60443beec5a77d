"""
Configuration adapters for the Roam bridge.

These adapters provide credentials and session settings without handling
browser sessions themselves.
"""

import os
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from ...core.domain import DEFAULT_BASE_URL, Credentials, SessionConfig
from ...core.exceptions import ConfigurationError
from ...core.validation import ConfigurationValidator, InvalidConfigurationError, ValidationResult

_TRUE_VALUES = {'1', 'true', 'yes', 'on'}


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == '':
        return default
    return value.strip().lower() in _TRUE_VALUES


class EnvironmentConfigAdapter:
    """Configuration adapter that reads from environment variables and .env files"""

    def __init__(self, validate_on_access: bool = False, load_env_file: bool = True,
                 overrides: Optional[Dict[str, Any]] = None):
        """
        Args:
            validate_on_access: Run the detailed validator when credentials are read
            load_env_file: Load a .env file into the environment first
            overrides: SessionConfig fields that take precedence over the environment
        """
        if load_env_file:
            load_dotenv()
        self.validator = ConfigurationValidator()
        self.validate_on_access = validate_on_access
        self.overrides = {k: v for k, v in (overrides or {}).items() if v is not None}

    def _raw_credentials(self) -> Dict[str, str]:
        return {
            'workspace_id': self.overrides.get('workspace_id') or os.getenv('ROAM_GRAPH', ''),
            'login': os.getenv('ROAM_EMAIL', ''),
            'password': os.getenv('ROAM_PASSWORD', '')
        }

    def _raw_settings(self) -> Dict[str, Any]:
        return {
            'run_headless': _env_bool('ROAM_HEADLESS', True),
            'working_directory': os.getenv('ROAM_WORKING_DIR') or None,
            'skip_download': _env_bool('ROAM_SKIP_DOWNLOAD', False),
            'base_url': os.getenv('ROAM_BASE_URL') or DEFAULT_BASE_URL,
            'timeout_ms': os.getenv('ROAM_TIMEOUT_MS', '60000'),
            'export_timeout_seconds': os.getenv('ROAM_EXPORT_TIMEOUT', '60'),
        }

    def get_credentials(self) -> Credentials:
        """Get credentials from environment variables with validation"""
        credentials = self._raw_credentials()

        if self.validate_on_access:
            result = self.validator.validate_credentials(credentials)
            if not result.valid:
                raise InvalidConfigurationError(result)

        if not all(credentials.values()):
            raise ConfigurationError(
                "Roam credentials not found. "
                "Set ROAM_GRAPH, ROAM_EMAIL and ROAM_PASSWORD environment variables"
            )

        return Credentials(**credentials)

    def get_session_config(self) -> SessionConfig:
        """Get session settings from environment, with overrides applied"""
        settings = self._raw_settings()
        try:
            settings['timeout_ms'] = int(settings['timeout_ms'])
            settings['export_timeout_seconds'] = float(settings['export_timeout_seconds'])
        except ValueError as e:
            raise ConfigurationError(f"Invalid timeout setting: {e}") from e

        for key, value in self.overrides.items():
            if key in settings:
                settings[key] = value

        return SessionConfig(**settings)

    def validate_config_detailed(self) -> ValidationResult:
        """
        Perform detailed configuration validation with helpful error messages.

        Returns:
            ValidationResult with detailed feedback
        """
        settings = self._raw_settings()
        settings.update({k: v for k, v in self.overrides.items() if k in settings})
        return self.validator.validate_complete_configuration(self._raw_credentials(), settings)
