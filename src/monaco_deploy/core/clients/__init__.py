# src/monaco_deploy/core/clients/__init__.py
"""
Clients consumidos pelo engine: protocolos por tipo de config e
implementações em memória (dry-run e testes).
"""

from .base import (
    ApiResponse,
    ApiResponseError,
    AutomationClient,
    BucketClient,
    ClassicConfigClient,
    ClientSet,
    DocumentClient,
    OpenPipelineClient,
    RemoteObject,
    SettingsClient,
    SettingsObject,
)
from .memory import (
    InMemoryAutomationClient,
    InMemoryBucketClient,
    InMemoryClassicClient,
    InMemoryDocumentClient,
    InMemoryOpenPipelineClient,
    InMemorySettingsClient,
    in_memory_client_set,
)

__all__ = [
    "ApiResponse",
    "ApiResponseError",
    "AutomationClient",
    "BucketClient",
    "ClassicConfigClient",
    "ClientSet",
    "DocumentClient",
    "OpenPipelineClient",
    "RemoteObject",
    "SettingsClient",
    "SettingsObject",
    "InMemoryAutomationClient",
    "InMemoryBucketClient",
    "InMemoryClassicClient",
    "InMemoryDocumentClient",
    "InMemoryOpenPipelineClient",
    "InMemorySettingsClient",
    "in_memory_client_set",
]
