# src/monaco_deploy/core/parameter/reference.py
"""
Parâmetro de referência.

Lê uma propriedade de outra config (via EntityMap) ou da própria config
(via propriedades já resolvidas no mesmo ciclo de resolução).

Regras:
    - config alvo ausente do EntityMap → MissingReferenceError
    - config alvo marcada como skip → MissingReferenceError
    - propriedade ausente → default, se configurado; senão MissingReferenceError
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from monaco_deploy.core.exceptions import MissingReferenceError
from monaco_deploy.core.model.coordinate import Coordinate
from monaco_deploy.core.model.entity import PropertyValue

from .base import Parameter, ParameterReference, ResolveContext, ensure_property_value


def lookup_reference(
    ctx: ResolveContext,
    ref: ParameterReference,
    default: Optional[PropertyValue] = None,
) -> PropertyValue:
    """Resolve uma referência contra o contexto; compartilhado por Reference e Compound."""
    if ref.config == ctx.coordinate:
        if ref.property in ctx.resolved_properties:
            return ctx.resolved_properties[ref.property]
        if default is not None:
            return default
        raise MissingReferenceError(
            message=f"property `{ref.property}` of the same config is not resolved",
            coordinate=ctx.coordinate,
            parameter=ctx.parameter_name,
            referenced=ref.config,
            property=ref.property,
        )

    entity = ctx.entities.get(ref.config)
    if entity is None:
        raise MissingReferenceError(
            message=f"referenced config {ref.config} not found",
            coordinate=ctx.coordinate,
            parameter=ctx.parameter_name,
            referenced=ref.config,
            property=ref.property,
        )
    if entity.skip:
        raise MissingReferenceError(
            message=f"referencing skipped config {ref.config}",
            coordinate=ctx.coordinate,
            parameter=ctx.parameter_name,
            referenced=ref.config,
            property=ref.property,
        )
    if ref.property in entity.properties:
        return entity.properties[ref.property]
    if default is not None:
        return default
    raise MissingReferenceError(
        message=f"property `{ref.property}` of config {ref.config} not found",
        coordinate=ctx.coordinate,
        parameter=ctx.parameter_name,
        referenced=ref.config,
        property=ref.property,
    )


@dataclass(frozen=True)
class ReferenceParameter(Parameter):
    config: Coordinate
    property: str
    default: Optional[PropertyValue] = None

    def __post_init__(self) -> None:
        if not self.property:
            raise ValueError("referenced property must be non-empty")
        if self.default is not None:
            ensure_property_value(self.default, what="reference parameter default")

    @property
    def reference(self) -> ParameterReference:
        return ParameterReference(config=self.config, property=self.property)

    def references(self) -> Tuple[ParameterReference, ...]:
        return (self.reference,)

    def resolve(self, ctx: ResolveContext) -> PropertyValue:
        return lookup_reference(ctx, self.reference, self.default)
