# src/monaco_deploy/core/model/__init__.py
"""
Modelo de dados do monaco-deploy: coordenadas, tipos de config, configs
e entidades resolvidas.
"""

from .config import Config, Template
from .coordinate import Coordinate
from .entity import (
    ID_PROPERTY,
    NAME_PROPERTY,
    SCOPE_PROPERTY,
    DuplicateEntityError,
    EntityMap,
    PropertyValue,
    ResolvedEntity,
    is_property_value,
)
from .types import (
    AUTOMATION_RESOURCES,
    DOCUMENT_KINDS,
    KNOWN_APIS,
    AutomationType,
    BucketType,
    ClassicApi,
    ClassicApiType,
    ConfigType,
    DocumentType,
    OpenPipelineType,
    SettingsType,
    classic_api,
)

__all__ = [
    "Config",
    "Template",
    "Coordinate",
    "ID_PROPERTY",
    "NAME_PROPERTY",
    "SCOPE_PROPERTY",
    "DuplicateEntityError",
    "EntityMap",
    "PropertyValue",
    "ResolvedEntity",
    "is_property_value",
    "AUTOMATION_RESOURCES",
    "DOCUMENT_KINDS",
    "KNOWN_APIS",
    "AutomationType",
    "BucketType",
    "ClassicApi",
    "ClassicApiType",
    "ConfigType",
    "DocumentType",
    "OpenPipelineType",
    "SettingsType",
    "classic_api",
]
