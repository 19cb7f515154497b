# src/monaco_deploy/core/deploy/runner.py
"""
Run controller: deploy de ambientes completos.

Responsabilidades:
    - construir e ordenar o grafo de cada ambiente
    - percorrer as configs na ordem topológica, chamando o engine
    - registrar cada config exatamente uma vez (implantada, pulada ou com erro)
    - aplicar a política de erro

Políticas:
    - stop-on-error (padrão): a primeira falha encerra o ambiente; os erros
      acumulados até ali são devolvidos
    - continue-on-error: falhas são registradas e a execução prossegue; toda
      config que depende, direta ou transitivamente, de uma config com falha
      recebe MissingReferenceError sem nenhuma chamada remota
    - dry-run: clients em memória e execução sem parada antecipada

Concorrência:
    - dentro de um ambiente o deploy é sequencial
    - ambientes distintos podem rodar em paralelo (ThreadPoolExecutor), cada
      um com seu grafo, EntityMap e lista de erros
"""

from __future__ import annotations

import logging
import uuid
from collections import Counter
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Set, Tuple

from monaco_deploy.core.clients.base import ClientSet
from monaco_deploy.core.clients.memory import in_memory_client_set
from monaco_deploy.core.errors import DeployErrorPayload, error_payload
from monaco_deploy.core.exceptions import (
    AmbiguousMatchWarning,
    DeployException,
    DeploymentCancelledError,
    MissingReferenceError,
)
from monaco_deploy.core.graph.builder import build_graph
from monaco_deploy.core.model.config import Config
from monaco_deploy.core.model.coordinate import Coordinate
from monaco_deploy.core.model.entity import NAME_PROPERTY, EntityMap
from monaco_deploy.core.model.types import ClassicApiType
from monaco_deploy.core.parameter.value import ValueParameter
from monaco_deploy.core.settings.settings import DeploySettings

from .cancellation import CancellationToken
from .context import DeployContext
from .engine import DeploymentEngine


logger = logging.getLogger(__name__)


@dataclass
class EnvironmentResult:
    """Resultado do deploy de um ambiente."""

    environment: str
    entities: EntityMap
    errors: List[DeployException] = field(default_factory=list)
    ambiguous_matches: List[AmbiguousMatchWarning] = field(default_factory=list)
    warnings: Dict[str, List[str]] = field(default_factory=dict)
    events: List[Dict[str, Any]] = field(default_factory=list)
    order: List[Coordinate] = field(default_factory=list)
    run_id: str = ""
    settings_hash: str = ""

    @property
    def ok(self) -> bool:
        return not self.errors

    def error_payloads(self) -> List[DeployErrorPayload]:
        return [error_payload(e) for e in self.errors]


@dataclass
class RunResult:
    """Resultado agregado de uma execução sobre vários ambientes."""

    environments: Dict[str, EnvironmentResult] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return all(r.ok for r in self.environments.values())

    @property
    def errors(self) -> Dict[str, List[DeployException]]:
        return {env: list(r.errors) for env, r in self.environments.items() if r.errors}


def duplicate_classic_names(configs: Sequence[Config]) -> Set[Tuple[str, str]]:
    """Pares (api, nome) declarados com nome literal por mais de uma config."""
    counter: Counter = Counter()
    for config in configs:
        if not isinstance(config.type, ClassicApiType):
            continue
        name = config.parameters.get(NAME_PROPERTY)
        if isinstance(name, ValueParameter):
            counter[(config.type.api, str(name.value))] += 1
    return {key for key, count in counter.items() if count > 1}


def _wrap_unexpected(config: Config, exc: Exception) -> DeployException:
    wrapped = DeployException(
        message=f"failed to deploy config: {exc}",
        coordinate=config.coordinate,
        details={"exception_class": exc.__class__.__name__},
    )
    wrapped.__cause__ = exc
    return wrapped


def deploy_environment(
    environment: str,
    configs: Sequence[Config],
    clients: ClientSet,
    settings: DeploySettings,
    *,
    cancellation: Optional[CancellationToken] = None,
    run_id: Optional[str] = None,
) -> EnvironmentResult:
    """
    Implanta todas as configs de um ambiente.

    Args:
        environment (str): Nome do ambiente.
        configs (Sequence[Config]): Configs validadas do ambiente.
        clients (ClientSet): Clients do ambiente (ignorados em dry-run).
        settings (DeploySettings): Settings efetivos.
        cancellation (Optional[CancellationToken]): Token de cancelamento.
        run_id (Optional[str]): Identificador da execução.

    Returns:
        EnvironmentResult: Entidades, erros, warnings e eventos do ambiente.

    Raises:
        ValueError: Coordenadas duplicadas no ambiente.
    """
    ctx = DeployContext.new(
        environment=environment,
        settings=settings,
        cancellation=cancellation,
        run_id=run_id,
    )
    ctx.duplicate_names = duplicate_classic_names(configs)
    if settings.dry_run:
        clients = in_memory_client_set()

    result = EnvironmentResult(
        environment=environment,
        entities=ctx.entities,
        ambiguous_matches=ctx.ambiguous_matches,
        warnings=ctx.warnings,
        events=ctx.events,
        run_id=ctx.run_id,
        settings_hash=settings.settings_hash,
    )

    graph = build_graph(
        environment,
        configs,
        ignore_skipped_configs=settings.features.ignore_skipped_configs,
    )
    for source, target in graph.unknown_references:
        ctx.add_warning(
            coordinate=source,
            message=f"Configuration {source} references unknown configuration {target}",
        )

    stop_on_error = not (settings.continue_on_error or settings.dry_run)
    plan = graph.independently_sorted()
    result.errors.extend(plan.errors)
    for err in plan.errors:
        ctx.log(level="error", message=str(err))
    if plan.errors and stop_on_error:
        return result

    ordered = plan.ordered
    result.order = [c.coordinate for c in ordered]
    engine = DeploymentEngine(clients=clients, ctx=ctx)
    failed: Set[Coordinate] = set()

    for index, config in enumerate(ordered):
        coordinate = config.coordinate

        if ctx.cancellation.cancelled:
            _cancel_remaining(ctx, result, ordered[index:])
            break

        failed_deps = [c for c in config.referenced_coordinates() if c in failed]
        if failed_deps:
            err: DeployException = MissingReferenceError(
                message=(
                    f"config depends on failed config(s) {', '.join(str(c) for c in failed_deps)}"
                    " and was not deployed"
                ),
                coordinate=coordinate,
                referenced=failed_deps[0],
            )
            result.errors.append(err)
            failed.add(coordinate)
            ctx.log(level="error", message=err.message, coordinate=coordinate)
            continue

        try:
            entity = engine.deploy(config)
        except DeployException as e:
            err = e
        except Exception as e:  # wrapped with its coordinate and reported
            err = _wrap_unexpected(config, e)
        else:
            ctx.entities.put(entity)
            continue

        result.errors.append(err)
        failed.add(coordinate)
        ctx.log(level="error", message=f"failed to deploy config: {err.message}", coordinate=coordinate)

        if isinstance(err, DeploymentCancelledError):
            _cancel_remaining(ctx, result, ordered[index + 1:])
            break
        if stop_on_error:
            break

    return result


def _cancel_remaining(ctx: DeployContext, result: EnvironmentResult, remaining: Sequence[Config]) -> None:
    reason = ctx.cancellation.reason or "deployment cancelled"
    for config in remaining:
        result.errors.append(DeploymentCancelledError(message=reason, coordinate=config.coordinate))
    if remaining:
        ctx.log(level="warning", message=f"{reason}: {len(remaining)} config(s) not deployed")


def deploy_all(
    configs_by_environment: Mapping[str, Sequence[Config]],
    clients_by_environment: Mapping[str, ClientSet],
    settings: DeploySettings,
    *,
    cancellation: Optional[CancellationToken] = None,
) -> RunResult:
    """
    Implanta vários ambientes, em sequência ou em paralelo.

    Cada ambiente é independente: a política stop-on-error se aplica dentro
    do ambiente e não interrompe os demais.

    Raises:
        KeyError: Ambiente sem ClientSet correspondente (exceto em dry-run).
    """
    run_id = uuid.uuid4().hex
    token = cancellation or CancellationToken()
    environments = list(configs_by_environment)

    def clients_for(env: str) -> ClientSet:
        if settings.dry_run:
            return clients_by_environment.get(env) or ClientSet()
        return clients_by_environment[env]

    result = RunResult()

    if settings.parallel_environments and len(environments) > 1:
        with ThreadPoolExecutor(max_workers=min(settings.max_workers, len(environments))) as executor:
            future_map = {
                executor.submit(
                    deploy_environment,
                    env,
                    configs_by_environment[env],
                    clients_for(env),
                    settings,
                    cancellation=token,
                    run_id=run_id,
                ): env
                for env in environments
            }
            collected: Dict[str, EnvironmentResult] = {}
            for future in as_completed(future_map):
                collected[future_map[future]] = future.result()
        for env in environments:
            result.environments[env] = collected[env]
    else:
        for env in environments:
            result.environments[env] = deploy_environment(
                env,
                configs_by_environment[env],
                clients_for(env),
                settings,
                cancellation=token,
                run_id=run_id,
            )

    for env, env_result in result.environments.items():
        if env_result.errors:
            logger.error("environment %s finished with %d error(s)", env, len(env_result.errors))
        else:
            logger.info("environment %s deployed %d config(s)", env, len(env_result.entities))

    return result
