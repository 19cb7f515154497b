# src/monaco_deploy/core/deploy/context.py
"""
DeployContext — contexto de execução do deploy de um ambiente.

O DeployContext é a estrutura compartilhada entre o run controller, o
engine e as estratégias durante o deploy de um ambiente. Ele é o único
meio permitido de:
- acessar o EntityMap do ambiente (resultados de configs anteriores)
- ler os settings efetivos da execução
- registrar eventos estruturados e warnings não fatais por config
- verificar cancelamento

Princípios fundamentais:
- Isolamento por ambiente (cada ambiente possui seu próprio contexto)
- Nenhum componente acessa estado global para comunicação indireta
- Eventos são espelhados no `logging` padrão para o operador
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Set, Tuple

from monaco_deploy.core.exceptions import AmbiguousMatchWarning
from monaco_deploy.core.model.coordinate import Coordinate
from monaco_deploy.core.model.entity import EntityMap
from monaco_deploy.core.settings.settings import DeploySettings

from .cancellation import CancellationToken


logger = logging.getLogger(__name__)


@dataclass
class DeployContext:
    """
    Contexto de execução do deploy de um ambiente.

    Campos canônicos:
    - run_id: identificador único da execução
    - created_at: timestamp UTC de criação do contexto
    - environment: nome do ambiente alvo
    - settings: settings efetivos
    - entities: EntityMap do ambiente
    - cancellation: token de cancelamento
    - duplicate_names: pares (api, nome) declarados por mais de uma config
    - warnings: warnings por coordenada
    - ambiguous_matches: registros de objetos remotos com nomes repetidos
    - events: log estruturado de eventos
    """

    run_id: str
    created_at: str
    environment: str
    settings: DeploySettings
    entities: EntityMap
    cancellation: CancellationToken = field(default_factory=CancellationToken)
    duplicate_names: Set[Tuple[str, str]] = field(default_factory=set)

    warnings: Dict[str, List[str]] = field(default_factory=dict)
    ambiguous_matches: List[AmbiguousMatchWarning] = field(default_factory=list)
    events: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def new(
        cls,
        *,
        environment: str,
        settings: DeploySettings,
        cancellation: Optional[CancellationToken] = None,
        run_id: Optional[str] = None,
    ) -> "DeployContext":
        return cls(
            run_id=run_id or uuid.uuid4().hex,
            created_at=datetime.now(timezone.utc).isoformat(),
            environment=environment,
            settings=settings,
            entities=EntityMap(environment),
            cancellation=cancellation or CancellationToken(),
        )

    # -----------------------------
    # Logging & warnings
    # -----------------------------
    def log(self, *, level: str, message: str, coordinate: Optional[Coordinate] = None, **extra: Any) -> None:
        event = {
            "run_id": self.run_id,
            "environment": self.environment,
            "coordinate": None if coordinate is None else str(coordinate),
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        self.events.append(event)

        logger.log(
            getattr(logging, level.upper(), logging.INFO),
            "[%s] %s%s",
            self.environment,
            "" if coordinate is None else f"{coordinate}: ",
            message,
        )

    def add_warning(self, *, coordinate: Coordinate, message: str) -> None:
        self.warnings.setdefault(str(coordinate), []).append(message)
        self.log(level="warning", message=message, coordinate=coordinate)

    def record_ambiguous_match(self, warning: AmbiguousMatchWarning) -> None:
        self.ambiguous_matches.append(warning)
        self.add_warning(coordinate=warning.coordinate, message=warning.message)
