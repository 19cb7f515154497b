# tests/core/deploy/test_strategy_platform.py
"""
Testes das estratégias de Settings, documentos, automações, buckets e
OpenPipeline.

Os testes asseguram que:
- objetos Settings são identificados pelo external id da coordenada
- Settings que referenciam buckets recebem o tier longo de retry
- dashboards com `tiles` em lista são rejeitados sem chamada remota
- automações usam o UUID derivado do projeto e config id (ou o id de origem)
- nomes de bucket gerados respeitam a feature flag de sanitização
"""

import json

import pytest

try:
    from monaco_deploy.core.clients import ApiResponse
    from monaco_deploy.core.deploy.context import DeployContext
    from monaco_deploy.core.deploy.engine import DeploymentEngine
    from monaco_deploy.core.exceptions import ValidationError
    from monaco_deploy.core.identity import external_id_for_coordinate, uuid_from_config_id
    from monaco_deploy.core.model import (
        AutomationType,
        BucketType,
        Coordinate,
        DocumentType,
        OpenPipelineType,
        ResolvedEntity,
        SettingsType,
    )
    from monaco_deploy.core.parameter import ReferenceParameter, ValueParameter
    from monaco_deploy.core.settings import FeatureFlags
except Exception as e:  # noqa: BLE001
    DeploymentEngine = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing deploy strategies. Implement:\n"
            "- src/monaco_deploy/core/deploy/strategies/*.py\n"
            f"Import error: {_IMPORT_ERR}"
        )


# ----------------------------------------------------------------------
# Settings 2.0
# ----------------------------------------------------------------------

def _settings_config(make_config, *, name="Rule", scope="environment", extra=None):
    parameters = {}
    if name is not None:
        parameters["name"] = ValueParameter(name)
    if scope is not None:
        parameters["scope"] = ValueParameter(scope)
    parameters.update(extra or {})
    return make_config(
        "rule",
        config_type=SettingsType("builtin:alerting.profile", "1.2"),
        parameters=parameters,
        template='{"enabled": true}',
    )


def test_settings_upsert_uses_external_id(make_config, clients, ctx):
    _require_imports()
    config = _settings_config(make_config)

    entity = DeploymentEngine(clients=clients, ctx=ctx).deploy(config)

    stored = clients.settings.objects[entity.id]
    assert stored.external_id == external_id_for_coordinate(config.coordinate)
    assert stored.scope == "environment"
    assert stored.schema_version == "1.2"
    assert json.loads(stored.content) == {"enabled": True}
    assert entity.entity_name == "Rule"


def test_settings_redeploy_hits_same_object(make_config, clients, ctx):
    _require_imports()
    first = DeploymentEngine(clients=clients, ctx=ctx).deploy(_settings_config(make_config))
    second = DeploymentEngine(clients=clients, ctx=ctx).deploy(_settings_config(make_config))

    assert first.id == second.id
    assert len(clients.settings.objects) == 1


def test_settings_requires_scope(make_config, clients, ctx):
    _require_imports()
    with pytest.raises(ValidationError):
        DeploymentEngine(clients=clients, ctx=ctx).deploy(_settings_config(make_config, scope=None))
    assert clients.settings.calls == []


def test_settings_without_name_uses_placeholder(make_config, clients, ctx):
    _require_imports()
    config = _settings_config(make_config, name=None)

    entity = DeploymentEngine(clients=clients, ctx=ctx).deploy(config)

    assert entity.entity_name == f"[UNKNOWN NAME]{entity.id}"
    assert str(config.coordinate) in ctx.warnings


def test_settings_referencing_bucket_retry_any_failure(make_config, clients, ctx):
    """
    Verifica o tier forçado para Settings que referenciam buckets.

    Invariantes:
        - uma falha não reconhecida é repetida (tier longo)
        - a segunda tentativa conclui o deploy
    """
    _require_imports()
    bucket = Coordinate("proj", "bucket", "logs")
    ctx.entities.put(ResolvedEntity(coordinate=bucket, entity_name="proj_logs", properties={"id": "proj_logs"}))
    config = _settings_config(make_config, extra={"bucket": ReferenceParameter(bucket, "id")})
    clients.settings.fail_next("upsert_settings", ApiResponse(400, "bucket proj_logs does not exist"))

    DeploymentEngine(clients=clients, ctx=ctx).deploy(config)

    assert clients.settings.operations() == ["upsert_settings", "upsert_settings"]
    assert any(e.get("tier") == "long" for e in ctx.events)


# ----------------------------------------------------------------------
# Documentos
# ----------------------------------------------------------------------

def test_document_upsert(make_config, clients, ctx):
    _require_imports()
    config = make_config("overview", config_type=DocumentType("dashboard", private=True), template='{"tiles": {}}')

    entity = DeploymentEngine(clients=clients, ctx=ctx).deploy(config)

    record = clients.document.objects[entity.id]
    assert record["external_id"] == external_id_for_coordinate(config.coordinate)
    assert record["private"] is True
    assert record["name"] == "overview"


def test_classic_dashboard_payload_is_rejected(make_config, clients, ctx):
    _require_imports()
    config = make_config("overview", config_type=DocumentType("dashboard"), template='{"tiles": []}')

    with pytest.raises(ValidationError):
        DeploymentEngine(clients=clients, ctx=ctx).deploy(config)
    assert clients.document.calls == []


def test_notebook_with_tiles_list_is_accepted(make_config, clients, ctx):
    _require_imports()
    config = make_config("nb", config_type=DocumentType("notebook"), template='{"tiles": []}')
    assert DeploymentEngine(clients=clients, ctx=ctx).deploy(config).id is not None


# ----------------------------------------------------------------------
# Automações, buckets e OpenPipeline
# ----------------------------------------------------------------------

def test_automation_uses_config_id_uuid(make_config, clients, ctx):
    _require_imports()
    config = make_config("wf", config_type=AutomationType("workflow"))

    entity = DeploymentEngine(clients=clients, ctx=ctx).deploy(config)

    assert entity.id == uuid_from_config_id("proj", "wf")
    assert ("workflow", entity.id) in clients.automation.objects


def test_automation_uses_origin_object_id(make_config, clients, ctx):
    _require_imports()
    config = make_config("wf", config_type=AutomationType("workflow"), origin_object_id="origin-1")
    assert DeploymentEngine(clients=clients, ctx=ctx).deploy(config).id == "origin-1"


def test_bucket_name_from_coordinate(make_config, clients, ctx):
    _require_imports()
    config = make_config("p_logs", config_type=BucketType(), project="0proj")

    entity = DeploymentEngine(clients=clients, ctx=ctx).deploy(config)

    assert entity.id == "0proj_p_logs"
    assert entity.entity_name == "0proj_p_logs"


def test_bucket_name_sanitized_with_flag(make_config, clients, fast_settings):
    _require_imports()
    ctx = DeployContext.new(environment="env", settings=fast_settings(features=FeatureFlags(sanitize_bucket_names=True)))
    config = make_config("logs", config_type=BucketType(), project="0proj")

    entity = DeploymentEngine(clients=clients, ctx=ctx).deploy(config)

    assert entity.id == "proj_logs"
    assert "proj_logs" in clients.bucket.objects


def test_openpipeline_by_kind(make_config, clients, ctx):
    _require_imports()
    config = make_config("logs", config_type=OpenPipelineType("logs"), parameters={}, template='{"id": "logs"}')

    entity = DeploymentEngine(clients=clients, ctx=ctx).deploy(config)

    assert entity.id == "logs"
    assert clients.openpipeline.objects == {"logs": '{"id": "logs"}'}
