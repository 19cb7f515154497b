# src/monaco_deploy/core/deploy/strategies/classic.py
"""
Upsert de configs de APIs clássicas.

Três caminhos, escolhidos pelo descritor da API:

- Configuração única: sempre update do objeto único da API.
- Nome único: lista objetos existentes e casa por nome. Havendo mais de um
  objeto com o mesmo nome, o primeiro encontrado é atualizado e um warning
  é registrado (a escolha depende da ordem devolvida pela plataforma).
  Sem correspondência, um novo objeto é criado.
- Nome não único: a identidade é um UUID derivado da coordenada (ou o
  próprio config id, quando já é UUID ou id de entidade monitorada). Ver
  `_upsert_non_unique` para as regras de correspondência.
"""

from __future__ import annotations

from typing import List, Optional

from monaco_deploy.core.clients.base import ClassicConfigClient, RemoteObject
from monaco_deploy.core.exceptions import AmbiguousMatchWarning, ValidationError
from monaco_deploy.core.identity import is_me_id, is_uuid, uuid_from_coordinate
from monaco_deploy.core.model.entity import SCOPE_PROPERTY, ResolvedEntity
from monaco_deploy.core.model.types import ClassicApi, ClassicApiType

from .base import DeployRequest


NAME_OPTIONAL_APIS = frozenset({"dashboard-share-settings"})


def deploy_classic(request: DeployRequest) -> ResolvedEntity:
    config_type: ClassicApiType = request.config.type  # type: ignore[assignment]
    api = config_type.descriptor
    client: ClassicConfigClient = request.clients.classic  # type: ignore[assignment]

    scope = _scope(request, api)

    if api.id in NAME_OPTIONAL_APIS:
        name = request.name() or request.coordinate.config_id
    else:
        name = request.require_name(f"classic API {api.id!r}")

    if api.single_configuration:
        remote = request.call(
            api.id, lambda: client.upsert_by_entity_id(api, api.id, name, request.payload, scope=scope)
        )
    elif api.non_unique_name:
        remote = _upsert_non_unique(request, client, api, name, scope)
    else:
        remote = _upsert_unique(request, client, api, name, scope)

    return request.entity(entity_id=remote.id, name=name)


def _scope(request: DeployRequest, api: ClassicApi) -> Optional[str]:
    if not api.has_parent:
        return None
    scope = request.properties.get(SCOPE_PROPERTY)
    if scope is None or scope == "":
        raise ValidationError(
            message=f"API {api.id!r} requires a `scope` property referencing its parent {api.parent!r}",
            coordinate=request.coordinate,
        )
    return str(scope)


def _upsert_unique(
    request: DeployRequest,
    client: ClassicConfigClient,
    api: ClassicApi,
    name: str,
    scope: Optional[str],
) -> RemoteObject:
    existing = request.call(api.id, lambda: client.list(api, scope=scope))
    matches = [o for o in existing if o.name == name]

    if len(matches) > 1:
        request.ctx.add_warning(
            coordinate=request.coordinate,
            message=(
                f"Found {len(matches)} configs with same name: {', '.join(o.id for o in matches)}. "
                f"Please delete duplicates."
            ),
        )

    if matches:
        target = matches[0].id
        return request.call(
            api.id, lambda: client.upsert_by_entity_id(api, target, name, request.payload, scope=scope)
        )

    if api.id == "calculated-metrics-log":
        # log metrics are keyed by their name
        return request.call(
            api.id, lambda: client.upsert_by_entity_id(api, name, name, request.payload, scope=scope)
        )

    query = {"position": "PREPEND"} if api.id == "app-detection-rule" else None
    return request.call(
        api.id, lambda: client.upsert_by_name(api, name, request.payload, scope=scope, query=query)
    )


def non_unique_entity_id(request: DeployRequest) -> str:
    config = request.config
    if config.origin_object_id:
        return config.origin_object_id
    config_id = config.coordinate.config_id
    if is_uuid(config_id) or is_me_id(config_id):
        return config_id
    return uuid_from_coordinate(config.coordinate)


def _upsert_non_unique(
    request: DeployRequest,
    client: ClassicConfigClient,
    api: ClassicApi,
    name: str,
    scope: Optional[str],
) -> RemoteObject:
    """
    Regras de correspondência para APIs sem nome único:

    - o UUID conhecido está entre os objetos de mesmo nome, ou nenhum
      objeto tem o mesmo nome → PUT no UUID conhecido
    - exatamente um objeto tem o mesmo nome, a feature flag de update está
      ativa e nenhuma outra config declara o mesmo nome → update desse objeto
    - caso contrário → PUT no UUID conhecido e registro de AmbiguousMatchWarning
    """
    entity_id = non_unique_entity_id(request)
    existing = request.call(api.id, lambda: client.list(api, scope=scope))
    same_name: List[RemoteObject] = [o for o in existing if o.name == name]

    def put(target: str) -> RemoteObject:
        return request.call(
            api.id, lambda: client.upsert_by_entity_id(api, target, name, request.payload, scope=scope)
        )

    if not same_name or any(o.id == entity_id for o in same_name):
        return put(entity_id)

    flags = request.ctx.settings.features
    duplicated_in_project = (api.id, name) in request.ctx.duplicate_names
    if len(same_name) == 1 and flags.update_non_unique_by_name_if_single_one_exists and not duplicated_in_project:
        return put(same_name[0].id)

    request.ctx.record_ambiguous_match(
        AmbiguousMatchWarning(
            coordinate=request.coordinate,
            name=name,
            matching_ids=tuple(o.id for o in same_name),
            chosen_id=entity_id,
        )
    )
    return put(entity_id)
