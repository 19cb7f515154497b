# src/monaco_deploy/core/deploy/strategies/bucket.py
"""Upsert de buckets; o nome do bucket é também o seu id."""

from __future__ import annotations

from monaco_deploy.core.clients.base import BucketClient
from monaco_deploy.core.identity import bucket_name_for_coordinate
from monaco_deploy.core.model.entity import ResolvedEntity

from .base import DeployRequest


def deploy_bucket(request: DeployRequest) -> ResolvedEntity:
    client: BucketClient = request.clients.bucket  # type: ignore[assignment]

    bucket_name = request.config.origin_object_id or bucket_name_for_coordinate(
        request.coordinate,
        sanitize=request.ctx.settings.features.sanitize_bucket_names,
    )
    remote = request.call("bucket", lambda: client.upsert(bucket_name, request.payload))
    return request.entity(entity_id=remote.id, name=bucket_name)
