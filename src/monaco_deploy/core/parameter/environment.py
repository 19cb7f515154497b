# src/monaco_deploy/core/parameter/environment.py
"""
Parâmetro de variável de ambiente.

A variável é lida do mapeamento `environment` do `ResolveContext`, preenchido
a partir de `DeploySettings.environment`. Nunca consulta `os.environ`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from monaco_deploy.core.exceptions import ResolutionError
from monaco_deploy.core.model.entity import PropertyValue

from .base import Parameter, ResolveContext, ensure_property_value


@dataclass(frozen=True)
class EnvironmentVariableParameter(Parameter):
    name: str
    default: Optional[PropertyValue] = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("environment variable name must be non-empty")
        if self.default is not None:
            ensure_property_value(self.default, what="environment parameter default")

    def resolve(self, ctx: ResolveContext) -> PropertyValue:
        value = ctx.environment.get(self.name)
        if value is not None:
            return value
        if self.default is not None:
            return self.default
        raise ResolutionError(
            message=f"environment variable `{self.name}` not set",
            coordinate=ctx.coordinate,
            parameter=ctx.parameter_name,
            details={"variable": self.name},
            hint=f"Defina a variável de ambiente `{self.name}` ou declare um default.",
        )
