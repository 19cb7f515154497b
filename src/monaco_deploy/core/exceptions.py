"""
monaco-deploy — Canonical Exceptions

Este módulo define as exceções tipadas levantadas durante o planejamento,
a resolução e o deploy de configs.

Objetivo:
- Permitir que engine e estratégias levantem exceções semânticas tipadas
- Facilitar o mapeamento determinístico para DeployErrorPayload
- Carregar sempre a coordenada da config de origem

Regras:
- Exceções carregam apenas dados estruturados (serializáveis) em `details`
- Mensagens são curtas e humanas
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from monaco_deploy.core.model.coordinate import Coordinate
from monaco_deploy.core.model.entity import DuplicateEntityError


@dataclass(eq=False)
class DeployException(Exception):
    """Base class para exceções de deploy.

    Importante:
    - `coordinate` identifica a config de origem (None apenas para erros
      que não pertencem a uma config, como ciclos envolvendo várias)
    - Não embedar stack trace em `details`
    """

    message: str
    coordinate: Optional[Coordinate] = None
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def __str__(self) -> str:
        if self.coordinate is None:
            return self.message
        return f"{self.coordinate}: {self.message}"


# ---------------------------------------------------------------------------
# Resolução de parâmetros
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class ResolutionError(DeployException):
    """Um parâmetro não pôde ser resolvido."""

    parameter: Optional[str] = None


@dataclass(eq=False)
class MissingReferenceError(ResolutionError):
    """Referência para config ausente, pulada, com falha, ou propriedade inexistente."""

    referenced: Optional[Coordinate] = None
    property: Optional[str] = None


# ---------------------------------------------------------------------------
# Validação / Render
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class ValidationError(DeployException):
    """Config inválida para o tipo (ex.: nome ausente). Nenhuma chamada remota é feita."""


@dataclass(eq=False)
class RenderError(DeployException):
    """Template não renderiza ou o resultado não é JSON válido."""


# ---------------------------------------------------------------------------
# Grafo
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class CyclicDependencyError(DeployException):
    """O grafo de referências de um ambiente contém um ciclo."""

    cycle: Tuple[Coordinate, ...] = ()
    environment: str = ""


# ---------------------------------------------------------------------------
# API remota
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class RemoteApiError(DeployException):
    """Base para falhas de chamada remota; carrega a última resposta observada."""

    status_code: Optional[int] = None
    body: str = ""
    api: str = ""


@dataclass(eq=False)
class TransientAPIError(RemoteApiError):
    """Falha remota classificada como transitória (elegível a retry)."""


@dataclass(eq=False)
class PermanentAPIError(RemoteApiError):
    """Falha remota não recuperável, ou orçamento de retry esgotado."""


# ---------------------------------------------------------------------------
# Execução
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class DeploymentCancelledError(DeployException):
    """A execução foi cancelada (abort ou deadline) antes de concluir a config."""


@dataclass(frozen=True)
class AmbiguousMatchWarning:
    """Registro não fatal: vários objetos remotos compartilham o nome da config.

    O engine reivindica `chosen_id` e reporta todos os ids pré-existentes.
    """

    coordinate: Coordinate
    name: str
    matching_ids: Tuple[str, ...]
    chosen_id: str

    @property
    def message(self) -> str:
        return (
            f"{len(self.matching_ids)} entities with name {self.name!r} exist - "
            f"using known id {self.chosen_id!r}; pre-existing ids: {', '.join(self.matching_ids)}"
        )

    def __str__(self) -> str:
        return f"{self.coordinate}: {self.message}"


__all__ = [
    "DeployException",
    "ResolutionError",
    "MissingReferenceError",
    "ValidationError",
    "RenderError",
    "CyclicDependencyError",
    "RemoteApiError",
    "TransientAPIError",
    "PermanentAPIError",
    "DeploymentCancelledError",
    "DuplicateEntityError",
    "AmbiguousMatchWarning",
]
