# src/monaco_deploy/core/model/config.py
"""
Config e Template — unidades declarativas de deploy.

Uma `Config` chega ao core já validada pelos loaders externos (manifest e
projetos não são responsabilidade deste pacote) e é somente leitura a partir
daí. Ela combina:
    - a coordenada que a identifica no ambiente
    - o tipo (variante fechada de `types.py`)
    - o template do payload
    - os parâmetros nomeados que serão resolvidos antes do render

Invariantes:
    - `parameters` é exposto como mapeamento imutável
    - `references()` lista cada referência uma única vez, na ordem de declaração

Limites explícitos:
    - Não resolve parâmetros (ver `core.parameter.resolve`)
    - Não renderiza templates (ver `core.template`)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, List, Mapping

from .coordinate import Coordinate
from .types import ConfigType

if TYPE_CHECKING:
    from monaco_deploy.core.parameter.base import Parameter, ParameterReference


@dataclass(frozen=True)
class Template:
    """Template do payload (JSON com placeholders) identificado por `id`."""

    id: str
    content: str


@dataclass(frozen=True, eq=False)
class Config:
    coordinate: Coordinate
    type: ConfigType
    template: Template
    parameters: Mapping[str, "Parameter"] = field(default_factory=dict)
    skip: bool = False
    environment: str = ""
    group: str = ""
    origin_object_id: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))

    def references(self) -> List["ParameterReference"]:
        seen = set()
        refs: List["ParameterReference"] = []
        for parameter in self.parameters.values():
            for ref in parameter.references():
                if ref not in seen:
                    seen.add(ref)
                    refs.append(ref)
        return refs

    def referenced_coordinates(self) -> List[Coordinate]:
        """Coordenadas de outras configs das quais esta config depende."""
        coords: List[Coordinate] = []
        for ref in self.references():
            if ref.config != self.coordinate and ref.config not in coords:
                coords.append(ref.config)
        return coords

    def __repr__(self) -> str:
        return f"Config({self.coordinate}, type={self.type!r}, skip={self.skip})"
