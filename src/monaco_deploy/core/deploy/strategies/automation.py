# src/monaco_deploy/core/deploy/strategies/automation.py
"""Upsert de recursos de automação (workflows, calendários, regras de agendamento)."""

from __future__ import annotations

from monaco_deploy.core.clients.base import AutomationClient
from monaco_deploy.core.identity import uuid_from_config_id
from monaco_deploy.core.model.entity import ResolvedEntity
from monaco_deploy.core.model.types import AutomationType

from .base import DeployRequest


def deploy_automation(request: DeployRequest) -> ResolvedEntity:
    config_type: AutomationType = request.config.type  # type: ignore[assignment]
    client: AutomationClient = request.clients.automation  # type: ignore[assignment]

    object_id = request.config.origin_object_id or uuid_from_config_id(
        request.coordinate.project, request.coordinate.config_id
    )
    remote = request.call(
        config_type.resource, lambda: client.upsert(config_type.resource, object_id, request.payload)
    )

    name = request.name() or request.coordinate.config_id
    return request.entity(entity_id=remote.id, name=name)
