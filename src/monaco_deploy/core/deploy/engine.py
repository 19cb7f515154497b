# src/monaco_deploy/core/deploy/engine.py
"""
Engine de deploy de uma config.

Máquina de estados por config:

    Pending → (skip?) Skipped
            → Resolving → Rendering → Dispatch por tipo → Upsert → Success
            → Failure (qualquer etapa)

Decisões arquiteturais:
    - Despacho por tipo em um único ponto (`STRATEGIES`)
    - Falhas de resolução, validação e render ocorrem antes de qualquer
      chamada remota
    - O engine não registra no EntityMap; o run controller é o único
      escritor, garantindo uma inserção por coordenada

Limites explícitos:
    - Não ordena configs
    - Não decide política de erro (stop/continue)
"""

from __future__ import annotations

from monaco_deploy.core.clients.base import ClientSet
from monaco_deploy.core.exceptions import ValidationError
from monaco_deploy.core.model.config import Config
from monaco_deploy.core.model.entity import ResolvedEntity
from monaco_deploy.core.parameter.resolve import resolve_properties
from monaco_deploy.core.template import render_template

from .context import DeployContext
from .strategies import CLIENT_FIELDS, STRATEGIES, DeployRequest


class DeploymentEngine:
    """Executa o deploy de configs individuais de um ambiente."""

    def __init__(self, *, clients: ClientSet, ctx: DeployContext):
        self.clients = clients
        self.ctx = ctx

    def skipped_entity(self, config: Config) -> ResolvedEntity:
        return ResolvedEntity(
            coordinate=config.coordinate,
            entity_name=config.coordinate.config_id,
            properties={},
            skip=True,
        )

    def deploy(self, config: Config) -> ResolvedEntity:
        """
        Implanta uma config e retorna a entidade resolvida.

        Raises:
            DeployException: Qualquer falha tipada de resolução, validação,
                render ou API remota; DeploymentCancelledError em cancelamento.
        """
        coordinate = config.coordinate
        self.ctx.cancellation.raise_if_cancelled(coordinate)

        if config.skip:
            self.ctx.log(level="info", message="skipping config", coordinate=coordinate)
            return self.skipped_entity(config)

        strategy = STRATEGIES.get(type(config.type))
        if strategy is None:
            raise ValidationError(
                message=f"unsupported config type {type(config.type).__name__}",
                coordinate=coordinate,
            )

        properties = resolve_properties(
            config,
            self.ctx.entities,
            environment=self.ctx.settings.environment,
            environment_name=self.ctx.environment,
        )
        client_field = CLIENT_FIELDS[type(config.type)]
        if getattr(self.clients, client_field) is None:
            raise ValidationError(
                message=f"no {client_field} client configured for environment {self.ctx.environment!r}",
                coordinate=coordinate,
                hint="Forneça o client correspondente no ClientSet do ambiente.",
            )

        payload = render_template(
            config.template.content,
            properties,
            coordinate=coordinate,
            template_id=config.template.id,
        )

        self.ctx.log(level="debug", message="deploying config", coordinate=coordinate)
        entity = strategy(
            DeployRequest(
                config=config,
                properties=properties,
                payload=payload,
                clients=self.clients,
                ctx=self.ctx,
            )
        )
        self.ctx.log(
            level="info",
            message=f"deployed config as {entity.id!r}",
            coordinate=coordinate,
            entity_id=entity.id,
        )
        return entity
