# src/monaco_deploy/core/deploy/strategies/document.py
"""
Upsert de documentos (dashboards, notebooks, launchpads).

O documento é encontrado pelo `origin_object_id` ou pelo external id
derivado da coordenada. Payloads de dashboard com `tiles` em forma de
lista pertencem a dashboards clássicos e são rejeitados antes de qualquer
chamada remota.
"""

from __future__ import annotations

import json

from monaco_deploy.core.clients.base import DocumentClient
from monaco_deploy.core.exceptions import ValidationError
from monaco_deploy.core.identity import external_id_for_coordinate
from monaco_deploy.core.model.entity import ResolvedEntity
from monaco_deploy.core.model.types import DocumentType

from .base import DeployRequest


def _reject_classic_dashboard(request: DeployRequest, config_type: DocumentType) -> None:
    if config_type.document_kind != "dashboard" or not request.payload:
        return
    content = json.loads(request.payload)
    if isinstance(content, dict) and isinstance(content.get("tiles"), list):
        raise ValidationError(
            message="dashboard document payload looks like a classic dashboard (`tiles` is a list)",
            coordinate=request.coordinate,
            hint="Use o tipo clássico `dashboard` para este payload.",
        )


def deploy_document(request: DeployRequest) -> ResolvedEntity:
    config_type: DocumentType = request.config.type  # type: ignore[assignment]
    client: DocumentClient = request.clients.document  # type: ignore[assignment]

    name = request.require_name(f"{config_type.document_kind} document")
    _reject_classic_dashboard(request, config_type)

    external_id = external_id_for_coordinate(request.coordinate)
    remote = request.call(
        config_type.document_kind,
        lambda: client.upsert(
            external_id=external_id,
            name=name,
            kind=config_type.document_kind,
            private=config_type.private,
            payload=request.payload,
            object_id=request.config.origin_object_id or None,
        ),
    )
    return request.entity(entity_id=remote.id, name=name)
