# src/monaco_deploy/core/parameter/resolve.py
"""
Resolução das propriedades de uma config.

Fluxo:
    1. Validação das referências (autorreferência, alvo ausente, alvo pulado)
    2. Ordenação dos parâmetros da própria config (Kahn determinístico por nome)
    3. Resolução na ordem obtida, acumulando as propriedades já resolvidas

Decisões arquiteturais:
    - Parâmetros que referenciam outros parâmetros da mesma config são
      resolvidos depois deles
    - Empates são resolvidos por ordem lexicográfica do nome do parâmetro
    - A propriedade `name` é sempre convertida para string

Invariantes:
    - A mesma config e o mesmo EntityMap produzem as mesmas propriedades
    - Nenhuma chamada remota é feita

Limites explícitos:
    - Não renderiza o template
    - Não registra entidades no EntityMap
"""

from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Set, Tuple

from monaco_deploy.core.exceptions import MissingReferenceError, ResolutionError
from monaco_deploy.core.model.config import Config
from monaco_deploy.core.model.entity import NAME_PROPERTY, EntityMap, PropertyValue

from .base import Parameter, ResolveContext


def validate_references(config: Config, entities: EntityMap) -> None:
    """
    Valida as referências de todos os parâmetros de uma config.

    Raises:
        ResolutionError: Parâmetro referenciando a si mesmo.
        MissingReferenceError: Config referenciada ausente ou marcada como skip.
    """
    for name in sorted(config.parameters):
        for ref in config.parameters[name].references():
            if ref.config == config.coordinate:
                if ref.property == name:
                    raise ResolutionError(
                        message=f"parameter `{name}` is referencing itself",
                        coordinate=config.coordinate,
                        parameter=name,
                    )
                continue

            entity = entities.get(ref.config)
            if entity is None:
                raise MissingReferenceError(
                    message=f"parameter `{name}` references config {ref.config}, which was not found",
                    coordinate=config.coordinate,
                    parameter=name,
                    referenced=ref.config,
                    property=ref.property,
                )
            if entity.skip:
                raise MissingReferenceError(
                    message=f"parameter `{name}` is referencing skipped config {ref.config}",
                    coordinate=config.coordinate,
                    parameter=name,
                    referenced=ref.config,
                    property=ref.property,
                )


def sort_parameters(config: Config) -> List[Tuple[str, Parameter]]:
    """
    Ordena os parâmetros de uma config respeitando dependências internas.

    Raises:
        ResolutionError: Se houver ciclo entre parâmetros da mesma config.
    """
    params = config.parameters
    deps: Dict[str, Set[str]] = {}
    for name, param in params.items():
        deps[name] = {
            ref.property
            for ref in param.references()
            if ref.config == config.coordinate and ref.property in params and ref.property != name
        }

    incoming: Dict[str, int] = {name: len(d) for name, d in deps.items()}
    dependents: Dict[str, Set[str]] = {name: set() for name in params}
    for name, d in deps.items():
        for dep in d:
            dependents[dep].add(name)

    ready: List[str] = sorted(name for name, c in incoming.items() if c == 0)
    ordered: List[str] = []

    while ready:
        name = ready.pop(0)
        ordered.append(name)
        for child in sorted(dependents[name]):
            incoming[child] -= 1
            if incoming[child] == 0:
                ready.append(child)
                ready.sort()

    if len(ordered) != len(params):
        remaining = sorted(set(params) - set(ordered))
        raise ResolutionError(
            message=f"cyclic references between parameters {remaining}",
            coordinate=config.coordinate,
            details={"parameters": remaining},
        )

    return [(name, params[name]) for name in ordered]


def resolve_properties(
    config: Config,
    entities: EntityMap,
    *,
    environment: Optional[Mapping[str, str]] = None,
    environment_name: str = "",
) -> Dict[str, PropertyValue]:
    """
    Resolve todas as propriedades de uma config.

    Args:
        config (Config): Config a resolver.
        entities (EntityMap): Entidades já implantadas ou puladas no ambiente.
        environment (Optional[Mapping[str, str]]): Variáveis visíveis a parâmetros de ambiente.
        environment_name (str): Nome do ambiente alvo.

    Returns:
        Dict[str, PropertyValue]: Propriedades resolvidas, por nome de parâmetro.

    Raises:
        ResolutionError: Falha de resolução (inclui MissingReferenceError).
    """
    validate_references(config, entities)

    resolved: Dict[str, PropertyValue] = {}
    for name, param in sort_parameters(config):
        ctx = ResolveContext(
            coordinate=config.coordinate,
            parameter_name=name,
            entities=entities,
            resolved_properties=resolved,
            environment=environment or {},
            environment_name=environment_name,
        )
        resolved[name] = param.resolve(ctx)

    if NAME_PROPERTY in resolved and not isinstance(resolved[NAME_PROPERTY], str):
        value = resolved[NAME_PROPERTY]
        resolved[NAME_PROPERTY] = ("true" if value else "false") if isinstance(value, bool) else str(value)

    return resolved
