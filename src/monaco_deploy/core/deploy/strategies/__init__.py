# src/monaco_deploy/core/deploy/strategies/__init__.py
"""
Estratégias de upsert, uma por variante de tipo de config.

`STRATEGIES` é a tabela única de despacho usada pelo engine; `CLIENT_FIELDS`
indica qual client do `ClientSet` cada variante exige.
"""

from typing import Callable, Dict, Type

from monaco_deploy.core.model.entity import ResolvedEntity
from monaco_deploy.core.model.types import (
    AutomationType,
    BucketType,
    ClassicApiType,
    DocumentType,
    OpenPipelineType,
    SettingsType,
)

from .automation import deploy_automation
from .base import DeployRequest
from .bucket import deploy_bucket
from .classic import deploy_classic
from .document import deploy_document
from .openpipeline import deploy_openpipeline
from .settings import deploy_settings

Strategy = Callable[[DeployRequest], ResolvedEntity]

STRATEGIES: Dict[Type, Strategy] = {
    ClassicApiType: deploy_classic,
    SettingsType: deploy_settings,
    AutomationType: deploy_automation,
    DocumentType: deploy_document,
    BucketType: deploy_bucket,
    OpenPipelineType: deploy_openpipeline,
}

CLIENT_FIELDS: Dict[Type, str] = {
    ClassicApiType: "classic",
    SettingsType: "settings",
    AutomationType: "automation",
    DocumentType: "document",
    BucketType: "bucket",
    OpenPipelineType: "openpipeline",
}

__all__ = ["DeployRequest", "Strategy", "STRATEGIES", "CLIENT_FIELDS"]
