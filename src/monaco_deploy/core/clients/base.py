# src/monaco_deploy/core/clients/base.py
"""
Contratos de clients por tipo de config.

O core não implementa transporte HTTP, autenticação nem rate limiting:
recebe, por ambiente, um conjunto de clients (`ClientSet`) que satisfazem
os protocolos abaixo. Conformidade é verificada por duck typing
(`@runtime_checkable`), sem herança obrigatória.

Convenções:
    - Métodos devolvem objetos já interpretados (`RemoteObject`)
    - Qualquer resposta não 2xx é sinalizada com `ApiResponseError`, que
      carrega a resposta completa para a classificação de retry
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Protocol, runtime_checkable

from monaco_deploy.core.model.coordinate import Coordinate
from monaco_deploy.core.model.types import ClassicApi


@dataclass(frozen=True)
class ApiResponse:
    status_code: int
    body: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        return json.loads(self.body) if self.body else None

    def is_client_error(self) -> bool:
        return 400 <= self.status_code < 500

    def is_server_error(self) -> bool:
        return 500 <= self.status_code < 600


class ApiResponseError(Exception):
    """Resposta não 2xx devolvida pela plataforma remota."""

    def __init__(self, response: ApiResponse, *, api: str = "", operation: str = "") -> None:
        self.response = response
        self.api = api
        self.operation = operation
        super().__init__(f"{operation or 'request'} on {api or 'api'} failed with HTTP {response.status_code}: {response.body}")


@dataclass(frozen=True)
class RemoteObject:
    """Objeto remoto identificado pela plataforma."""

    id: str
    name: str = ""


@dataclass(frozen=True)
class SettingsObject:
    """Objeto Settings 2.0 pronto para upsert."""

    coordinate: Coordinate
    schema_id: str
    schema_version: str
    scope: str
    content: str
    external_id: str
    origin_object_id: str = ""


@runtime_checkable
class ClassicConfigClient(Protocol):
    """
    APIs clássicas.

    - list: objetos existentes (opcionalmente sob um objeto pai, via `scope`)
    - upsert_by_name: cria um novo objeto com o nome informado (POST)
    - upsert_by_entity_id: cria ou atualiza o objeto com o id informado (PUT);
      APIs de configuração única são endereçadas pelo próprio id da API
    """

    def list(self, api: ClassicApi, *, scope: Optional[str] = None) -> List[RemoteObject]: ...

    def read_by_name(self, api: ClassicApi, name: str, *, scope: Optional[str] = None) -> Optional[RemoteObject]: ...

    def read_by_id(self, api: ClassicApi, entity_id: str, *, scope: Optional[str] = None) -> Optional[Dict[str, Any]]: ...

    def upsert_by_name(
        self,
        api: ClassicApi,
        name: str,
        payload: str,
        *,
        scope: Optional[str] = None,
        query: Optional[Mapping[str, str]] = None,
    ) -> RemoteObject: ...

    def upsert_by_entity_id(
        self,
        api: ClassicApi,
        entity_id: str,
        name: str,
        payload: str,
        *,
        scope: Optional[str] = None,
    ) -> RemoteObject: ...

    def delete(self, api: ClassicApi, entity_id: str, *, scope: Optional[str] = None) -> None: ...


@runtime_checkable
class SettingsClient(Protocol):
    def list_known_settings(self, schema_id: str) -> Dict[str, SettingsObject]: ...

    def upsert_settings(self, obj: SettingsObject) -> RemoteObject: ...


@runtime_checkable
class AutomationClient(Protocol):
    def upsert(self, resource: str, object_id: str, payload: str) -> RemoteObject: ...


@runtime_checkable
class DocumentClient(Protocol):
    """Upsert por `object_id` (quando conhecido) ou por `external_id`."""

    def upsert(
        self,
        *,
        external_id: str,
        name: str,
        kind: str,
        private: bool,
        payload: str,
        object_id: Optional[str] = None,
    ) -> RemoteObject: ...


@runtime_checkable
class BucketClient(Protocol):
    def upsert(self, bucket_name: str, payload: str) -> RemoteObject: ...


@runtime_checkable
class OpenPipelineClient(Protocol):
    def upsert(self, kind: str, payload: str) -> RemoteObject: ...


@dataclass
class ClientSet:
    """Clients disponíveis para um ambiente; tipos sem client falham na validação."""

    classic: Optional[ClassicConfigClient] = None
    settings: Optional[SettingsClient] = None
    automation: Optional[AutomationClient] = None
    document: Optional[DocumentClient] = None
    bucket: Optional[BucketClient] = None
    openpipeline: Optional[OpenPipelineClient] = None
