"""
Validation framework for the Roam bridge configuration.

Provides detailed validation with clear error messages and suggestions
for credentials and session settings, before any browser is launched.
"""

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse


@dataclass
class ValidationError:
    """Represents a validation error with detailed context"""
    field: str
    value: Any
    message: str
    suggestion: Optional[str] = None
    code: Optional[str] = None

    def __str__(self) -> str:
        result = f"Invalid {self.field}: {self.message}"
        if self.suggestion:
            result += f" (Suggestion: {self.suggestion})"
        return result


@dataclass
class ValidationResult:
    """Result of validation operation"""
    valid: bool
    errors: List[ValidationError]
    warnings: List[str]

    @property
    def success(self) -> bool:
        return self.valid

    def get_error_summary(self) -> str:
        """Get human-readable summary of all errors"""
        if not self.errors:
            return "No validation errors"

        summary = f"Found {len(self.errors)} validation error(s):\n"
        for i, error in enumerate(self.errors, 1):
            summary += f"  {i}. {error}\n"

        if self.warnings:
            summary += f"\nWarnings ({len(self.warnings)}):\n"
            for i, warning in enumerate(self.warnings, 1):
                summary += f"  {i}. {warning}\n"

        return summary.strip()


class InvalidConfigurationError(Exception):
    """Exception raised when configuration validation fails"""

    def __init__(self, validation_result: ValidationResult):
        self.validation_result = validation_result
        super().__init__(validation_result.get_error_summary())


_GRAPH_NAME_PATTERN = re.compile(r'^[A-Za-z0-9_-]+$')
_ENV_NAMES = {
    'workspace_id': 'ROAM_GRAPH',
    'login': 'ROAM_EMAIL',
    'password': 'ROAM_PASSWORD',
}


class ConfigurationValidator:
    """Validates Roam bridge configuration with detailed error reporting"""

    def validate_credentials(self, credentials: Dict[str, str]) -> ValidationResult:
        """
        Validate credential configuration.

        Args:
            credentials: Dictionary containing workspace_id, login, password

        Returns:
            ValidationResult with detailed feedback
        """
        errors = []
        warnings = []

        for field, env_name in _ENV_NAMES.items():
            if not credentials.get(field):
                errors.append(ValidationError(
                    field=field,
                    value=None,
                    message="is required",
                    suggestion=f"Set {env_name} environment variable",
                    code="MISSING_CREDENTIAL"
                ))

        workspace_id = credentials.get('workspace_id', '')
        if workspace_id and not _GRAPH_NAME_PATTERN.match(workspace_id):
            errors.append(ValidationError(
                field="workspace_id",
                value=workspace_id,
                message="contains invalid characters",
                suggestion="Use the graph name as it appears in the URL after '#/app/'",
                code="INVALID_GRAPH_NAME"
            ))

        login = credentials.get('login', '')
        if login and '@' not in login:
            warnings.append("Login does not look like an email address - Roam logs in by email")

        return ValidationResult(
            valid=len(errors) == 0,
            errors=errors,
            warnings=warnings
        )

    def validate_session_settings(self, settings: Dict[str, Any]) -> ValidationResult:
        """
        Validate browser and file-system settings.

        Args:
            settings: Dictionary with base_url, working_directory, timeout_ms

        Returns:
            ValidationResult with detailed feedback
        """
        errors = []
        warnings = []

        base_url = settings.get('base_url')
        if base_url:
            parsed = urlparse(base_url)
            if parsed.scheme not in ('http', 'https') or not parsed.netloc:
                errors.append(ValidationError(
                    field="base_url",
                    value=base_url,
                    message="must be an absolute http(s) URL",
                    suggestion="Use 'https://roamresearch.com/#/app/'",
                    code="INVALID_BASE_URL"
                ))

        working_directory = settings.get('working_directory')
        if working_directory:
            path = Path(working_directory).expanduser()
            if not path.is_dir():
                errors.append(ValidationError(
                    field="working_directory",
                    value=working_directory,
                    message="does not exist or is not a directory",
                    suggestion="Create the directory or unset ROAM_WORKING_DIR to use the temp directory",
                    code="MISSING_WORKING_DIRECTORY"
                ))
            elif not os.access(path, os.R_OK | os.W_OK):
                errors.append(ValidationError(
                    field="working_directory",
                    value=working_directory,
                    message="must be readable and writable",
                    code="WORKING_DIRECTORY_NOT_WRITABLE"
                ))

        timeout = settings.get('timeout_ms')
        if timeout is not None:
            try:
                timeout_int = int(timeout)
                if timeout_int < 1000:
                    warnings.append(f"Timeout {timeout_int}ms is very short - the login page may not load in time")
                elif timeout_int > 300000:  # 5 minutes
                    warnings.append(f"Timeout {timeout_int}ms is very long - failures will take long to surface")
            except (TypeError, ValueError):
                errors.append(ValidationError(
                    field="timeout_ms",
                    value=timeout,
                    message="must be a number (milliseconds)",
                    suggestion="Use values like 30000 (30 seconds) or 60000 (1 minute)",
                    code="INVALID_TIMEOUT_FORMAT"
                ))

        return ValidationResult(
            valid=len(errors) == 0,
            errors=errors,
            warnings=warnings
        )

    def validate_complete_configuration(
        self,
        credentials: Dict[str, str],
        settings: Dict[str, Any]
    ) -> ValidationResult:
        """Validate credentials and session settings together"""
        cred_result = self.validate_credentials(credentials)
        settings_result = self.validate_session_settings(settings)

        return ValidationResult(
            valid=cred_result.valid and settings_result.valid,
            errors=cred_result.errors + settings_result.errors,
            warnings=cred_result.warnings + settings_result.warnings
        )
