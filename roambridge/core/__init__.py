"""
Core domain layer

Contains the domain models, port interfaces, failure taxonomy, query text
builders and services that are independent of the browser and file system.
"""

from .domain import (
    Credentials,
    SessionConfig,
    SessionState,
    ExportArtifact,
    ProgressUpdate
)

from .query_bridge import QueryBridge, DELETE_SAFETY_CEILING
from .services import RoamGraphService

from .ports import (
    BrowserSessionPort,
    RemoteGraphApiPort,
    ExportLocatorPort,
    ArchiveExtractorPort,
    ExportPipelinePort,
    ImportPipelinePort,
    ProgressReportingPort,
    ConfigurationPort
)

from .exceptions import (
    RoamDomainError,
    ConfigurationError,
    SessionError,
    LoginFailure,
    MenuItemNotFound,
    RemoteApiUnavailable,
    UnsafeQueryResult,
    ExportError,
    ExportNotFound,
    ArchiveParseFailure,
    BlockImportError,
    UploadTargetMissing
)

__all__ = [
    # Domain models
    'Credentials',
    'SessionConfig',
    'SessionState',
    'ExportArtifact',
    'ProgressUpdate',

    # Services
    'QueryBridge',
    'DELETE_SAFETY_CEILING',
    'RoamGraphService',

    # Ports
    'BrowserSessionPort',
    'RemoteGraphApiPort',
    'ExportLocatorPort',
    'ArchiveExtractorPort',
    'ExportPipelinePort',
    'ImportPipelinePort',
    'ProgressReportingPort',
    'ConfigurationPort',

    # Exceptions
    'RoamDomainError',
    'ConfigurationError',
    'SessionError',
    'LoginFailure',
    'MenuItemNotFound',
    'RemoteApiUnavailable',
    'UnsafeQueryResult',
    'ExportError',
    'ExportNotFound',
    'ArchiveParseFailure',
    'BlockImportError',
    'UploadTargetMissing'
]
