# src/monaco_deploy/core/parameter/base.py
"""
Contrato canônico de Parameter.

Um parâmetro é uma fonte nomeada de valor para o template de uma config.
Ele sabe se resolver a partir de um `ResolveContext` e declara as
referências (config + propriedade) das quais depende, que alimentam o grafo
de dependências e a ordenação de parâmetros dentro de uma config.

Princípios fundamentais:
    - Parâmetros são imutáveis e sem estado
    - A resolução depende apenas do contexto recebido (nenhum estado global)
    - O valor resolvido é sempre `str | bool | int | float`

Invariantes:
    - `references()` é determinístico e não depende da resolução
    - `resolve()` nunca faz chamadas remotas

Limites explícitos:
    - Não ordena parâmetros (ver `resolve.py`)
    - Não renderiza templates
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Mapping, Tuple

from monaco_deploy.core.model.coordinate import Coordinate
from monaco_deploy.core.model.entity import EntityMap, PropertyValue, is_property_value


@dataclass(frozen=True, order=True)
class ParameterReference:
    """Referência a uma propriedade (`property`) de uma config (`config`)."""

    config: Coordinate
    property: str

    def __str__(self) -> str:
        return f"{self.config}:{self.property}"


@dataclass(frozen=True)
class ResolveContext:
    """
    Contexto de resolução de um parâmetro.

    Campos:
    - coordinate: config dona do parâmetro
    - parameter_name: nome do parâmetro em resolução
    - entities: EntityMap do ambiente (configs já implantadas ou puladas)
    - resolved_properties: propriedades da própria config já resolvidas
    - environment: variáveis visíveis a parâmetros de ambiente
    - environment_name: nome do ambiente alvo
    """

    coordinate: Coordinate
    parameter_name: str
    entities: EntityMap
    resolved_properties: Mapping[str, PropertyValue] = field(default_factory=dict)
    environment: Mapping[str, str] = field(default_factory=dict)
    environment_name: str = ""


class Parameter(ABC):
    """Interface de um parâmetro resolvível."""

    @abstractmethod
    def resolve(self, ctx: ResolveContext) -> PropertyValue:
        raise NotImplementedError

    def references(self) -> Tuple[ParameterReference, ...]:
        return ()


def ensure_property_value(value: object, *, what: str) -> PropertyValue:
    """Valida que `value` é um PropertyValue; caso contrário levanta ValueError."""
    if not is_property_value(value):
        raise ValueError(f"{what} must be str, bool, int or float, got {type(value).__name__}")
    return value  # type: ignore[return-value]
