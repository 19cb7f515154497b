# src/monaco_deploy/core/model/coordinate.py
"""
Coordinate — identificador canônico de uma config.

Uma config é identificada de forma única, dentro de um ambiente, pela tripla
(project, type, config_id). Coordenadas são imutáveis, hasheáveis e
ordenáveis lexicograficamente, podendo ser usadas como chave de mapas e
como nó do grafo de dependências.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, order=True)
class Coordinate:
    project: str
    type: str
    config_id: str

    def __post_init__(self) -> None:
        for name in ("project", "type", "config_id"):
            value = getattr(self, name)
            if not isinstance(value, str):
                raise TypeError(f"Coordinate.{name} must be str, got {type(value).__name__}")
        if not self.type or not self.config_id:
            raise ValueError("Coordinate.type and Coordinate.config_id must be non-empty")

    def __str__(self) -> str:
        return f"{self.project}:{self.type}:{self.config_id}"

    def match(self, project: str, type: str, config_id: str) -> bool:
        return (self.project, self.type, self.config_id) == (project, type, config_id)
