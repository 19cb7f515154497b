# src/monaco_deploy/core/deploy/strategies/settings.py
"""
Upsert de objetos Settings 2.0.

O objeto é identificado pelo external id derivado da coordenada (ou pelo
`origin_object_id`, quando a config foi baixada de um ambiente). Objetos
que referenciam um bucket recebem o tier longo de retry para qualquer
falha: buckets recém-criados levam tempo até ficarem utilizáveis.
"""

from __future__ import annotations

from monaco_deploy.core.clients.base import SettingsClient, SettingsObject
from monaco_deploy.core.exceptions import ValidationError
from monaco_deploy.core.identity import external_id_for_coordinate
from monaco_deploy.core.model.entity import SCOPE_PROPERTY, ResolvedEntity
from monaco_deploy.core.model.types import BucketType, SettingsType

from ..retry import RetryTier
from .base import DeployRequest


UNKNOWN_NAME_PREFIX = "[UNKNOWN NAME]"


def references_bucket(request: DeployRequest) -> bool:
    return any(c.type == BucketType.kind for c in request.config.referenced_coordinates())


def deploy_settings(request: DeployRequest) -> ResolvedEntity:
    config_type: SettingsType = request.config.type  # type: ignore[assignment]
    client: SettingsClient = request.clients.settings  # type: ignore[assignment]

    scope = request.properties.get(SCOPE_PROPERTY)
    if scope is None or scope == "":
        raise ValidationError(
            message=f"settings config for schema {config_type.schema_id!r} requires a `scope` property",
            coordinate=request.coordinate,
        )

    obj = SettingsObject(
        coordinate=request.coordinate,
        schema_id=config_type.schema_id,
        schema_version=config_type.schema_version,
        scope=str(scope),
        content=request.payload,
        external_id=external_id_for_coordinate(request.coordinate),
        origin_object_id=request.config.origin_object_id,
    )

    force_tier = RetryTier.LONG if references_bucket(request) else None
    remote = request.call(config_type.schema_id, lambda: client.upsert_settings(obj), force_tier=force_tier)

    name = request.name()
    if name is None:
        name = f"{UNKNOWN_NAME_PREFIX}{remote.id}"
        request.ctx.add_warning(
            coordinate=request.coordinate,
            message=f"failed to extract name for settings object {remote.id}, using {name!r}",
        )

    return request.entity(entity_id=remote.id, name=name)
