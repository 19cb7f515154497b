# tests/core/deploy/test_runner.py
"""
Testes do run controller (deploy de ambientes completos).

Este módulo valida as políticas de execução por ambiente:
- stop-on-error: a primeira falha encerra o ambiente
- continue-on-error: falhas são registradas e dependentes (diretos e
  transitivos) falham sem chamada remota
- dry-run: clients em memória, sem parada antecipada
- cancelamento: configs restantes são reportadas como canceladas

E a execução de vários ambientes:
- ambientes são independentes entre si
- resultados preservam a ordem de entrada, em sequência ou em paralelo

Decisões arquiteturais:
    - Falhas remotas são roteirizadas com `fail_next` nos clients em memória
    - Todas as configs usam a API `management-zone` (nome único)

Limites explícitos:
    - Não valida estratégias individualmente (ver test_strategy_*.py)
"""

import pytest

try:
    from monaco_deploy.core.clients import ApiResponse, in_memory_client_set
    from monaco_deploy.core.deploy.cancellation import CancellationToken
    from monaco_deploy.core.deploy.runner import deploy_all, deploy_environment, duplicate_classic_names
    from monaco_deploy.core.errors import CYCLIC_DEPENDENCY, MISSING_REFERENCE, PERMANENT_API_ERROR
    from monaco_deploy.core.exceptions import (
        CyclicDependencyError,
        DeploymentCancelledError,
        MissingReferenceError,
        PermanentAPIError,
        ValidationError,
    )
    from monaco_deploy.core.model import ClassicApiType, Coordinate
    from monaco_deploy.core.parameter import ReferenceParameter, ValueParameter
except Exception as e:  # noqa: BLE001
    deploy_environment = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing run controller. Implement:\n"
            "- src/monaco_deploy/core/deploy/runner.py (deploy_environment, deploy_all)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def _coord(config_id):
    return Coordinate("proj", "management-zone", config_id)


def _config(make_config, config_id, *refs, skip=False, name=None):
    parameters = {"name": ValueParameter(name or config_id)}
    for ref in refs:
        parameters[f"ref_{ref}"] = ReferenceParameter(_coord(ref), "id")
    return make_config(config_id, parameters=parameters, skip=skip)


def _fail_first_list(clients):
    clients.classic.fail_next("list", ApiResponse(400, "Invalid payload"))


def _ids(coordinates):
    return [c.config_id for c in coordinates]


# ----------------------------------------------------------------------
# Políticas de erro
# ----------------------------------------------------------------------

def test_happy_path_registers_every_config(make_config, clients, fast_settings):
    _require_imports()
    configs = [_config(make_config, "b", "a"), _config(make_config, "a")]

    result = deploy_environment("env", configs, clients, fast_settings())

    assert result.ok
    assert _ids(result.order) == ["a", "b"]
    assert len(result.entities) == 2
    b = result.entities.get(_coord("b"))
    assert b.properties["ref_a"] == result.entities.get(_coord("a")).id
    assert len(result.settings_hash) == 64


def test_stop_on_error_stops_environment(make_config, clients, fast_settings):
    """
    Verifica a política padrão stop-on-error.

    Invariantes:
        - apenas a primeira falha é registrada
        - configs posteriores não são tentadas
    """
    _require_imports()
    _fail_first_list(clients)
    configs = [_config(make_config, "a"), _config(make_config, "b")]

    result = deploy_environment("env", configs, clients, fast_settings())

    assert not result.ok
    assert len(result.errors) == 1
    assert isinstance(result.errors[0], PermanentAPIError)
    assert result.errors[0].coordinate == _coord("a")
    assert len(result.entities) == 0
    assert clients.classic.operations() == ["list"]


def test_continue_on_error_skips_dependents_transitively(make_config, clients, fast_settings):
    """
    Verifica a política continue-on-error.

    Invariantes:
        - `b` (depende de `a`) e `c` (depende de `b`) falham sem chamada remota
        - `d`, independente, é implantada
        - cada config é registrada exatamente uma vez
    """
    _require_imports()
    _fail_first_list(clients)
    configs = [
        _config(make_config, "a"),
        _config(make_config, "b", "a"),
        _config(make_config, "c", "b"),
        _config(make_config, "d"),
    ]

    result = deploy_environment("env", configs, clients, fast_settings(continue_on_error=True))

    assert [type(e) for e in result.errors] == [PermanentAPIError, MissingReferenceError, MissingReferenceError]
    assert [e.coordinate.config_id for e in result.errors] == ["a", "b", "c"]
    assert "depends on failed config(s) proj:management-zone:a" in result.errors[1].message
    assert [e.coordinate.config_id for e in result.entities] == ["d"]
    assert clients.classic.operations() == ["list", "list", "upsert_by_name"]


def test_continue_on_error_records_validation_failure_once(make_config, clients, fast_settings):
    _require_imports()
    configs = [
        make_config("x", parameters={}, template="{}"),
        _config(make_config, "y"),
    ]

    result = deploy_environment("env", configs, clients, fast_settings(continue_on_error=True))

    assert len(result.errors) == 1
    assert isinstance(result.errors[0], ValidationError)
    assert result.errors[0].coordinate == _coord("x")
    assert [e.coordinate.config_id for e in result.entities] == ["y"]
    assert clients.classic.operations() == ["list", "upsert_by_name"]


def test_reference_to_skipped_config_fails(make_config, clients, fast_settings):
    _require_imports()
    configs = [_config(make_config, "a", skip=True), _config(make_config, "b", "a")]

    result = deploy_environment("env", configs, clients, fast_settings(continue_on_error=True))

    assert result.entities.is_skipped(_coord("a"))
    assert len(result.errors) == 1
    assert isinstance(result.errors[0], MissingReferenceError)
    assert "skipped" in result.errors[0].message


def test_payloads_are_serializable(make_config, clients, fast_settings):
    _require_imports()
    _fail_first_list(clients)
    configs = [_config(make_config, "a"), _config(make_config, "b", "a")]

    result = deploy_environment("env", configs, clients, fast_settings(continue_on_error=True))
    payloads = [p.to_dict() for p in result.error_payloads()]

    assert [p["type"] for p in payloads] == [PERMANENT_API_ERROR, MISSING_REFERENCE]
    assert payloads[0]["details"]["status_code"] == 400
    assert payloads[1]["coordinate"] == "proj:management-zone:b"


# ----------------------------------------------------------------------
# Ciclos
# ----------------------------------------------------------------------

def test_cycle_stops_environment_by_default(make_config, clients, fast_settings):
    _require_imports()
    configs = [_config(make_config, "x", "y"), _config(make_config, "y", "x"), _config(make_config, "free")]

    result = deploy_environment("env", configs, clients, fast_settings())

    assert len(result.errors) == 1
    assert isinstance(result.errors[0], CyclicDependencyError)
    assert len(result.entities) == 0
    assert clients.classic.calls == []


def test_cycle_does_not_block_other_components_when_continuing(make_config, clients, fast_settings):
    _require_imports()
    configs = [_config(make_config, "x", "y"), _config(make_config, "y", "x"), _config(make_config, "free")]

    result = deploy_environment("env", configs, clients, fast_settings(continue_on_error=True))

    assert result.error_payloads()[0].type == CYCLIC_DEPENDENCY
    assert [e.coordinate.config_id for e in result.entities] == ["free"]


# ----------------------------------------------------------------------
# Dry-run, cancelamento e warnings
# ----------------------------------------------------------------------

def test_dry_run_never_touches_given_clients(make_config, clients, fast_settings):
    _require_imports()
    configs = [_config(make_config, "b", "a"), _config(make_config, "a")]

    result = deploy_environment("env", configs, clients, fast_settings(dry_run=True))

    assert result.ok
    assert len(result.entities) == 2
    assert clients.classic.calls == []


def test_cancelled_token_reports_remaining_configs(make_config, clients, fast_settings):
    _require_imports()
    token = CancellationToken()
    token.cancel("operator abort")
    configs = [_config(make_config, "a"), _config(make_config, "b")]

    result = deploy_environment("env", configs, clients, fast_settings(), cancellation=token)

    assert [type(e) for e in result.errors] == [DeploymentCancelledError, DeploymentCancelledError]
    assert [e.message for e in result.errors] == ["operator abort", "operator abort"]
    assert clients.classic.calls == []


def test_unknown_reference_is_warned_and_fails_resolution(make_config, clients, fast_settings):
    _require_imports()
    configs = [_config(make_config, "a", "ghost")]

    result = deploy_environment("env", configs, clients, fast_settings(continue_on_error=True))

    assert "references unknown configuration" in result.warnings["proj:management-zone:a"][0]
    assert isinstance(result.errors[0], MissingReferenceError)


def test_duplicate_classic_names(make_config):
    _require_imports()
    configs = [
        _config(make_config, "a", name="Same"),
        _config(make_config, "b", name="Same"),
        _config(make_config, "c", name="Other"),
        make_config("d", config_type=ClassicApiType("auto-tag"), parameters={"name": ValueParameter("Same")}),
    ]
    assert duplicate_classic_names(configs) == {("management-zone", "Same")}


# ----------------------------------------------------------------------
# Vários ambientes
# ----------------------------------------------------------------------

@pytest.mark.parametrize("parallel", [False, True])
def test_environments_are_independent(make_config, fast_settings, parallel):
    """
    Verifica que a falha de um ambiente não afeta os demais.

    Invariantes:
        - a ordem dos resultados segue a ordem de entrada
        - stop-on-error se aplica por ambiente
    """
    _require_imports()
    failing = in_memory_client_set()
    failing.classic.fail_next("list", ApiResponse(400, "Invalid payload"))
    healthy = in_memory_client_set()

    result = deploy_all(
        {
            "staging": [_config(make_config, "a")],
            "production": [_config(make_config, "a")],
        },
        {"staging": failing, "production": healthy},
        fast_settings(parallel_environments=parallel),
    )

    assert list(result.environments) == ["staging", "production"]
    assert not result.environments["staging"].ok
    assert result.environments["production"].ok
    assert list(result.errors) == ["staging"]
    assert result.environments["staging"].run_id == result.environments["production"].run_id


def test_missing_clients_for_environment_raise(make_config, fast_settings):
    _require_imports()
    with pytest.raises(KeyError):
        deploy_all({"env": [_config(make_config, "a")]}, {}, fast_settings())


def test_dry_run_does_not_require_clients(make_config, fast_settings):
    _require_imports()
    result = deploy_all({"env": [_config(make_config, "a")]}, {}, fast_settings(dry_run=True))
    assert result.ok
