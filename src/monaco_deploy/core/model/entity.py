# src/monaco_deploy/core/model/entity.py
"""
ResolvedEntity e EntityMap — resultado propagado entre deploys.

Após o deploy (ou o skip) de uma config, o engine registra um
`ResolvedEntity` no `EntityMap` do ambiente. Configs posteriores que
referenciam essa config leem dali as propriedades resolvidas, inclusive o
`id` atribuído pela plataforma remota.

Invariantes:
    - Cada coordenada é inserida no máximo uma vez por execução
    - Após um deploy bem-sucedido, `properties["id"]` está sempre presente
    - Valores de propriedade são sempre `str | bool | int | float`

Limites explícitos:
    - Não persiste estado entre execuções do processo
    - Não é compartilhado entre ambientes
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Union

from .coordinate import Coordinate


PropertyValue = Union[str, bool, int, float]

ID_PROPERTY = "id"
NAME_PROPERTY = "name"
SCOPE_PROPERTY = "scope"


def is_property_value(value: object) -> bool:
    return isinstance(value, (str, bool, int, float))


class DuplicateEntityError(RuntimeError):
    """Uma coordenada foi registrada duas vezes no mesmo EntityMap (erro de programação)."""


@dataclass(frozen=True)
class ResolvedEntity:
    coordinate: Coordinate
    entity_name: str
    properties: Mapping[str, PropertyValue] = field(default_factory=dict)
    skip: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))

    @property
    def id(self) -> Optional[str]:
        value = self.properties.get(ID_PROPERTY)
        return None if value is None else str(value)


class EntityMap:
    """Mapa write-once coordenada → ResolvedEntity de um ambiente."""

    def __init__(self, environment: str = "") -> None:
        self.environment = environment
        self._entities: Dict[Coordinate, ResolvedEntity] = {}

    def put(self, entity: ResolvedEntity) -> None:
        if entity.coordinate in self._entities:
            raise DuplicateEntityError(
                f"entity for {entity.coordinate} already registered in environment {self.environment!r}"
            )
        self._entities[entity.coordinate] = entity

    def get(self, coordinate: Coordinate) -> Optional[ResolvedEntity]:
        return self._entities.get(coordinate)

    def get_property(self, coordinate: Coordinate, name: str) -> Optional[PropertyValue]:
        entity = self._entities.get(coordinate)
        if entity is None or entity.skip:
            return None
        return entity.properties.get(name)

    def is_skipped(self, coordinate: Coordinate) -> bool:
        entity = self._entities.get(coordinate)
        return entity is not None and entity.skip

    def deployed(self) -> List[ResolvedEntity]:
        return [e for e in self._entities.values() if not e.skip]

    def skipped(self) -> List[ResolvedEntity]:
        return [e for e in self._entities.values() if e.skip]

    def __contains__(self, coordinate: object) -> bool:
        return coordinate in self._entities

    def __iter__(self) -> Iterator[ResolvedEntity]:
        return iter(list(self._entities.values()))

    def __len__(self) -> int:
        return len(self._entities)
