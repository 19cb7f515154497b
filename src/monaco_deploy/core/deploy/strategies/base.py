# src/monaco_deploy/core/deploy/strategies/base.py
"""
Entrada comum das estratégias de upsert.

Uma estratégia recebe um `DeployRequest` com a config, as propriedades já
resolvidas, o payload renderizado, os clients do ambiente e o contexto, e
devolve o `ResolvedEntity` a registrar no EntityMap.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional, TypeVar

from monaco_deploy.core.clients.base import ClientSet
from monaco_deploy.core.exceptions import ValidationError
from monaco_deploy.core.model.config import Config
from monaco_deploy.core.model.entity import ID_PROPERTY, NAME_PROPERTY, PropertyValue, ResolvedEntity

from ..context import DeployContext
from ..retry import RetryTier, call_with_retry_on_known_timing_issue


T = TypeVar("T")


@dataclass(frozen=True)
class DeployRequest:
    config: Config
    properties: Dict[str, PropertyValue]
    payload: str
    clients: ClientSet
    ctx: DeployContext

    @property
    def coordinate(self):
        return self.config.coordinate

    def call(self, api_id: str, fn: Callable[[], T], *, force_tier: Optional[RetryTier] = None) -> T:
        """Executa uma chamada remota com cancelamento e retry de timing conhecido."""
        self.ctx.cancellation.raise_if_cancelled(self.coordinate)
        return call_with_retry_on_known_timing_issue(
            fn,
            ctx=self.ctx,
            coordinate=self.coordinate,
            api_id=api_id,
            force_tier=force_tier,
        )

    def name(self) -> Optional[str]:
        value = self.properties.get(NAME_PROPERTY)
        return None if value is None else str(value)

    def require_name(self, what: str) -> str:
        name = self.name()
        if not name:
            raise ValidationError(
                message=f"{what} config requires a `name` property",
                coordinate=self.coordinate,
                hint="Declare o parâmetro `name` na config.",
            )
        return name

    def entity(self, *, entity_id: str, name: str) -> ResolvedEntity:
        properties = dict(self.properties)
        properties[ID_PROPERTY] = entity_id
        properties[NAME_PROPERTY] = name
        return ResolvedEntity(coordinate=self.coordinate, entity_name=name, properties=properties)
