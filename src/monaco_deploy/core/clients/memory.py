# src/monaco_deploy/core/clients/memory.py
"""
Clients em memória.

Implementam os protocolos de `base.py` sem rede: usados pelo modo dry-run
e pelos testes. Todas as chamadas são registradas em `calls`, e falhas
podem ser roteirizadas por operação com `fail_next`, permitindo exercitar
a política de retry de forma determinística.

Ids gerados são estáveis (UUIDv5 sobre a operação e um contador local).
"""

from __future__ import annotations

import uuid
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, DefaultDict, Dict, List, Mapping, Optional, Tuple

from monaco_deploy.core.identity import UUID_NAMESPACE
from monaco_deploy.core.model.types import ClassicApi

from .base import ApiResponse, ApiResponseError, ClientSet, RemoteObject, SettingsObject


class _RecordingClient:
    def __init__(self) -> None:
        self.calls: List[Tuple[Any, ...]] = []
        self._failures: DefaultDict[str, List[ApiResponse]] = defaultdict(list)
        self._counter = 0

    def fail_next(self, operation: str, *responses: ApiResponse) -> None:
        """Faz as próximas chamadas de `operation` falharem com as respostas dadas, em ordem."""
        self._failures[operation].extend(responses)

    def _record(self, operation: str, *args: Any, api: str = "") -> None:
        self.calls.append((operation,) + args)
        queued = self._failures.get(operation)
        if queued:
            raise ApiResponseError(queued.pop(0), api=api, operation=operation)

    def _new_id(self, *parts: str) -> str:
        self._counter += 1
        return str(uuid.uuid5(UUID_NAMESPACE, "/".join(parts + (str(self._counter),))))

    def operations(self) -> List[str]:
        return [c[0] for c in self.calls]


@dataclass
class _StoredObject:
    id: str
    name: str
    payload: str


class InMemoryClassicClient(_RecordingClient):
    def __init__(self) -> None:
        super().__init__()
        self.objects: Dict[Tuple[str, str], Dict[str, _StoredObject]] = {}

    def _bucket(self, api: ClassicApi, scope: Optional[str]) -> Dict[str, _StoredObject]:
        return self.objects.setdefault((api.id, scope or ""), {})

    def seed(self, api: ClassicApi, entity_id: str, name: str, payload: str = "{}", *, scope: Optional[str] = None) -> None:
        self._bucket(api, scope)[entity_id] = _StoredObject(entity_id, name, payload)

    def list(self, api: ClassicApi, *, scope: Optional[str] = None) -> List[RemoteObject]:
        self._record("list", api.id, scope, api=api.id)
        return [RemoteObject(o.id, o.name) for o in self._bucket(api, scope).values()]

    def read_by_name(self, api: ClassicApi, name: str, *, scope: Optional[str] = None) -> Optional[RemoteObject]:
        self._record("read_by_name", api.id, name, api=api.id)
        for o in self._bucket(api, scope).values():
            if o.name == name:
                return RemoteObject(o.id, o.name)
        return None

    def read_by_id(self, api: ClassicApi, entity_id: str, *, scope: Optional[str] = None) -> Optional[Dict[str, Any]]:
        self._record("read_by_id", api.id, entity_id, api=api.id)
        o = self._bucket(api, scope).get(entity_id)
        if o is None:
            return None
        return {"id": o.id, "name": o.name, "payload": o.payload}

    def upsert_by_name(
        self,
        api: ClassicApi,
        name: str,
        payload: str,
        *,
        scope: Optional[str] = None,
        query: Optional[Mapping[str, str]] = None,
    ) -> RemoteObject:
        self._record("upsert_by_name", api.id, name, dict(query or {}), api=api.id)
        entity_id = self._new_id(api.id, scope or "", name)
        self._bucket(api, scope)[entity_id] = _StoredObject(entity_id, name, payload)
        return RemoteObject(entity_id, name)

    def upsert_by_entity_id(
        self,
        api: ClassicApi,
        entity_id: str,
        name: str,
        payload: str,
        *,
        scope: Optional[str] = None,
    ) -> RemoteObject:
        self._record("upsert_by_entity_id", api.id, entity_id, name, api=api.id)
        self._bucket(api, scope)[entity_id] = _StoredObject(entity_id, name, payload)
        return RemoteObject(entity_id, name)

    def delete(self, api: ClassicApi, entity_id: str, *, scope: Optional[str] = None) -> None:
        self._record("delete", api.id, entity_id, api=api.id)
        self._bucket(api, scope).pop(entity_id, None)


class InMemorySettingsClient(_RecordingClient):
    def __init__(self) -> None:
        super().__init__()
        self.objects: Dict[str, SettingsObject] = {}

    def list_known_settings(self, schema_id: str) -> Dict[str, SettingsObject]:
        self._record("list_known_settings", schema_id, api=schema_id)
        return {oid: o for oid, o in self.objects.items() if o.schema_id == schema_id}

    def upsert_settings(self, obj: SettingsObject) -> RemoteObject:
        self._record("upsert_settings", obj.schema_id, obj.external_id, api=obj.schema_id)
        if obj.origin_object_id and obj.origin_object_id in self.objects:
            object_id = obj.origin_object_id
        else:
            object_id = next(
                (oid for oid, o in self.objects.items() if o.external_id == obj.external_id),
                "",
            ) or self._new_id(obj.schema_id, obj.external_id)
        self.objects[object_id] = obj
        return RemoteObject(object_id)


class InMemoryAutomationClient(_RecordingClient):
    def __init__(self) -> None:
        super().__init__()
        self.objects: Dict[Tuple[str, str], str] = {}

    def upsert(self, resource: str, object_id: str, payload: str) -> RemoteObject:
        self._record("upsert", resource, object_id, api=resource)
        self.objects[(resource, object_id)] = payload
        return RemoteObject(object_id)


class InMemoryDocumentClient(_RecordingClient):
    def __init__(self) -> None:
        super().__init__()
        self.objects: Dict[str, Dict[str, Any]] = {}

    def upsert(
        self,
        *,
        external_id: str,
        name: str,
        kind: str,
        private: bool,
        payload: str,
        object_id: Optional[str] = None,
    ) -> RemoteObject:
        self._record("upsert", kind, external_id, object_id, api=kind)
        record = {"external_id": external_id, "name": name, "kind": kind, "private": private, "payload": payload}

        if object_id and object_id in self.objects:
            self.objects[object_id] = record
            return RemoteObject(object_id, name)

        matches = [oid for oid, d in self.objects.items() if d["external_id"] == external_id]
        if len(matches) > 1:
            raise ApiResponseError(
                ApiResponse(409, f"found {len(matches)} documents with external id {external_id}"),
                api=kind,
                operation="upsert",
            )
        doc_id = matches[0] if matches else self._new_id(kind, external_id)
        self.objects[doc_id] = record
        return RemoteObject(doc_id, name)


class InMemoryBucketClient(_RecordingClient):
    def __init__(self) -> None:
        super().__init__()
        self.objects: Dict[str, str] = {}

    def upsert(self, bucket_name: str, payload: str) -> RemoteObject:
        self._record("upsert", bucket_name, api="bucket")
        self.objects[bucket_name] = payload
        return RemoteObject(bucket_name, bucket_name)


class InMemoryOpenPipelineClient(_RecordingClient):
    def __init__(self) -> None:
        super().__init__()
        self.objects: Dict[str, str] = {}

    def upsert(self, kind: str, payload: str) -> RemoteObject:
        self._record("upsert", kind, api="openpipeline")
        self.objects[kind] = payload
        return RemoteObject(kind, kind)


def in_memory_client_set() -> ClientSet:
    """ClientSet completo em memória (usado pelo modo dry-run)."""
    return ClientSet(
        classic=InMemoryClassicClient(),
        settings=InMemorySettingsClient(),
        automation=InMemoryAutomationClient(),
        document=InMemoryDocumentClient(),
        bucket=InMemoryBucketClient(),
        openpipeline=InMemoryOpenPipelineClient(),
    )
