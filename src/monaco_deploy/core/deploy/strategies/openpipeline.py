# src/monaco_deploy/core/deploy/strategies/openpipeline.py
"""Upsert de configurações de OpenPipeline, uma por tipo de pipeline."""

from __future__ import annotations

from monaco_deploy.core.clients.base import OpenPipelineClient
from monaco_deploy.core.model.entity import ResolvedEntity
from monaco_deploy.core.model.types import OpenPipelineType

from .base import DeployRequest


def deploy_openpipeline(request: DeployRequest) -> ResolvedEntity:
    config_type: OpenPipelineType = request.config.type  # type: ignore[assignment]
    client: OpenPipelineClient = request.clients.openpipeline  # type: ignore[assignment]

    remote = request.call(
        "openpipeline", lambda: client.upsert(config_type.pipeline_kind, request.payload)
    )
    return request.entity(entity_id=remote.id, name=config_type.pipeline_kind)
