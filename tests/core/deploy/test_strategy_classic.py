# tests/core/deploy/test_strategy_classic.py
"""
Testes da estratégia de upsert de APIs clássicas.

Este módulo valida os três caminhos da estratégia clássica:
- APIs de configuração única (sempre update do objeto único)
- APIs de nome único (correspondência por nome, criação quando ausente)
- APIs sem nome único (identidade por UUID derivado da coordenada)

Também valida as regras de escopo para APIs filhas de outra config e a
exigência da propriedade `name`.

Decisões arquiteturais:
    - O deploy é exercitado via DeploymentEngine com clients em memória
    - As chamadas remotas são verificadas por `client.calls`

Limites explícitos:
    - Não valida a política de retry (ver test_retry.py)
"""

import pytest

try:
    from monaco_deploy.core.deploy.engine import DeploymentEngine
    from monaco_deploy.core.exceptions import ValidationError
    from monaco_deploy.core.identity import uuid_from_coordinate
    from monaco_deploy.core.model import ClassicApiType, classic_api
    from monaco_deploy.core.parameter import ValueParameter
except Exception as e:  # noqa: BLE001
    DeploymentEngine = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing deploy engine. Implement:\n"
            "- src/monaco_deploy/core/deploy/engine.py\n"
            "- src/monaco_deploy/core/deploy/strategies/classic.py\n"
            f"Import error: {_IMPORT_ERR}"
        )


def _classic(make_config, api, config_id="cfg", name="My Config", **params):
    parameters = {"name": ValueParameter(name)} if name is not None else {}
    parameters.update({k: ValueParameter(v) for k, v in params.items()})
    template = '{"name": "{{ name }}"}' if name is not None else "{}"
    return make_config(config_id, config_type=ClassicApiType(api), parameters=parameters, template=template)


# ----------------------------------------------------------------------
# Nome único
# ----------------------------------------------------------------------

def test_unique_name_creates_when_absent(make_config, clients, ctx):
    _require_imports()
    entity = DeploymentEngine(clients=clients, ctx=ctx).deploy(_classic(make_config, "management-zone"))

    assert clients.classic.operations() == ["list", "upsert_by_name"]
    assert entity.entity_name == "My Config"
    assert entity.properties["name"] == "My Config"
    assert entity.id is not None


def test_unique_name_updates_existing(make_config, clients, ctx):
    _require_imports()
    clients.classic.seed(classic_api("management-zone"), "mz-1", "My Config")

    entity = DeploymentEngine(clients=clients, ctx=ctx).deploy(_classic(make_config, "management-zone"))

    assert clients.classic.calls[-1] == ("upsert_by_entity_id", "management-zone", "mz-1", "My Config")
    assert entity.id == "mz-1"


def test_unique_name_duplicates_update_first_and_warn(make_config, clients, ctx):
    """
    Verifica o comportamento com objetos remotos de mesmo nome.

    Invariantes:
        - o primeiro objeto listado é atualizado
        - um warning lista todos os ids duplicados
    """
    _require_imports()
    api = classic_api("management-zone")
    clients.classic.seed(api, "mz-1", "My Config")
    clients.classic.seed(api, "mz-2", "My Config")
    config = _classic(make_config, "management-zone")

    entity = DeploymentEngine(clients=clients, ctx=ctx).deploy(config)

    assert entity.id == "mz-1"
    assert ctx.warnings[str(config.coordinate)] == [
        "Found 2 configs with same name: mz-1, mz-2. Please delete duplicates."
    ]


def test_app_detection_rules_are_prepended(make_config, clients, ctx):
    _require_imports()
    DeploymentEngine(clients=clients, ctx=ctx).deploy(_classic(make_config, "app-detection-rule"))

    assert clients.classic.calls[-1] == ("upsert_by_name", "app-detection-rule", "My Config", {"position": "PREPEND"})


def test_log_metrics_are_keyed_by_name(make_config, clients, ctx):
    _require_imports()
    entity = DeploymentEngine(clients=clients, ctx=ctx).deploy(
        _classic(make_config, "calculated-metrics-log", name="log.metric")
    )

    assert clients.classic.calls[-1] == ("upsert_by_entity_id", "calculated-metrics-log", "log.metric", "log.metric")
    assert entity.id == "log.metric"


def test_missing_name_fails_before_remote_calls(make_config, clients, ctx):
    _require_imports()
    with pytest.raises(ValidationError):
        DeploymentEngine(clients=clients, ctx=ctx).deploy(_classic(make_config, "management-zone", name=None))
    assert clients.classic.calls == []


# ----------------------------------------------------------------------
# Configuração única e APIs filhas
# ----------------------------------------------------------------------

def test_single_configuration_is_always_updated(make_config, clients, ctx):
    _require_imports()
    entity = DeploymentEngine(clients=clients, ctx=ctx).deploy(_classic(make_config, "data-privacy"))

    assert clients.classic.operations() == ["upsert_by_entity_id"]
    assert entity.id == "data-privacy"


def test_child_api_requires_scope(make_config, clients, ctx):
    _require_imports()
    with pytest.raises(ValidationError):
        DeploymentEngine(clients=clients, ctx=ctx).deploy(_classic(make_config, "key-user-actions-web"))


def test_child_api_is_deployed_under_scope(make_config, clients, ctx):
    _require_imports()
    config = _classic(make_config, "key-user-actions-web", scope="APPLICATION-0123456789ABCDEF")

    DeploymentEngine(clients=clients, ctx=ctx).deploy(config)

    assert ("key-user-actions-web", "APPLICATION-0123456789ABCDEF") in clients.classic.objects
    assert clients.classic.calls[0] == ("list", "key-user-actions-web", "APPLICATION-0123456789ABCDEF")


def test_share_settings_name_is_optional(make_config, clients, ctx):
    _require_imports()
    config = _classic(make_config, "dashboard-share-settings", name=None, scope="dashboard-id")

    entity = DeploymentEngine(clients=clients, ctx=ctx).deploy(config)

    assert entity.entity_name == "cfg"


# ----------------------------------------------------------------------
# Nome não único
# ----------------------------------------------------------------------

def test_non_unique_uses_coordinate_uuid(make_config, clients, ctx):
    _require_imports()
    config = _classic(make_config, "alerting-profile")

    entity = DeploymentEngine(clients=clients, ctx=ctx).deploy(config)

    assert entity.id == uuid_from_coordinate(config.coordinate)


def test_non_unique_uses_uuid_config_id_verbatim(make_config, clients, ctx):
    _require_imports()
    config_id = "0e2d3a1c-4b5f-4c1e-8a2b-9f0e1d2c3b4a"
    entity = DeploymentEngine(clients=clients, ctx=ctx).deploy(
        _classic(make_config, "alerting-profile", config_id=config_id)
    )
    assert entity.id == config_id


def test_non_unique_updates_single_same_name_object(make_config, clients, ctx):
    """
    Verifica a adoção do único objeto remoto de mesmo nome.

    Invariantes:
        - com a feature flag ativa, o objeto existente é atualizado
        - nenhum AmbiguousMatchWarning é registrado
    """
    _require_imports()
    clients.classic.seed(classic_api("alerting-profile"), "existing", "My Config")

    entity = DeploymentEngine(clients=clients, ctx=ctx).deploy(_classic(make_config, "alerting-profile"))

    assert entity.id == "existing"
    assert ctx.ambiguous_matches == []


def test_non_unique_known_id_among_same_named_is_kept(make_config, clients, ctx):
    _require_imports()
    config = _classic(make_config, "alerting-profile")
    known = uuid_from_coordinate(config.coordinate)
    api = classic_api("alerting-profile")
    clients.classic.seed(api, known, "My Config")
    clients.classic.seed(api, "other", "My Config")

    entity = DeploymentEngine(clients=clients, ctx=ctx).deploy(config)

    assert entity.id == known
    assert ctx.ambiguous_matches == []


def test_non_unique_renamed_known_id_adopts_single_same_named(make_config, clients, ctx):
    """
    Verifica que o UUID conhecido só conta entre objetos de mesmo nome.

    Invariantes:
        - o objeto com o UUID conhecido foi renomeado remotamente
        - o único objeto de mesmo nome é atualizado
    """
    _require_imports()
    config = _classic(make_config, "alerting-profile")
    api = classic_api("alerting-profile")
    clients.classic.seed(api, uuid_from_coordinate(config.coordinate), "Old Name")
    clients.classic.seed(api, "other", "My Config")

    entity = DeploymentEngine(clients=clients, ctx=ctx).deploy(config)

    assert entity.id == "other"
    assert ctx.ambiguous_matches == []


def test_non_unique_renamed_known_id_with_several_same_named_warns(make_config, clients, ctx):
    _require_imports()
    config = _classic(make_config, "alerting-profile")
    known = uuid_from_coordinate(config.coordinate)
    api = classic_api("alerting-profile")
    clients.classic.seed(api, known, "Old Name")
    clients.classic.seed(api, "one", "My Config")
    clients.classic.seed(api, "two", "My Config")

    entity = DeploymentEngine(clients=clients, ctx=ctx).deploy(config)

    assert entity.id == known
    assert len(ctx.ambiguous_matches) == 1
    assert ctx.ambiguous_matches[0].matching_ids == ("one", "two")


def test_non_unique_multiple_matches_record_ambiguity(make_config, clients, ctx):
    _require_imports()
    api = classic_api("alerting-profile")
    clients.classic.seed(api, "one", "My Config")
    clients.classic.seed(api, "two", "My Config")
    config = _classic(make_config, "alerting-profile")

    entity = DeploymentEngine(clients=clients, ctx=ctx).deploy(config)

    known = uuid_from_coordinate(config.coordinate)
    assert entity.id == known
    assert len(ctx.ambiguous_matches) == 1
    warning = ctx.ambiguous_matches[0]
    assert warning.matching_ids == ("one", "two")
    assert warning.chosen_id == known
    assert str(config.coordinate) in ctx.warnings


def test_non_unique_flag_off_does_not_adopt(make_config, clients, fast_settings):
    _require_imports()
    from monaco_deploy.core.deploy.context import DeployContext
    from monaco_deploy.core.settings import FeatureFlags

    settings = fast_settings(features=FeatureFlags(update_non_unique_by_name_if_single_one_exists=False))
    ctx = DeployContext.new(environment="env", settings=settings)
    clients.classic.seed(classic_api("alerting-profile"), "existing", "My Config")
    config = _classic(make_config, "alerting-profile")

    entity = DeploymentEngine(clients=clients, ctx=ctx).deploy(config)

    assert entity.id == uuid_from_coordinate(config.coordinate)
    assert len(ctx.ambiguous_matches) == 1


def test_non_unique_name_declared_twice_does_not_adopt(make_config, clients, ctx):
    _require_imports()
    clients.classic.seed(classic_api("alerting-profile"), "existing", "My Config")
    ctx.duplicate_names = {("alerting-profile", "My Config")}
    config = _classic(make_config, "alerting-profile")

    entity = DeploymentEngine(clients=clients, ctx=ctx).deploy(config)

    assert entity.id == uuid_from_coordinate(config.coordinate)
