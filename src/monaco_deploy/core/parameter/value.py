# src/monaco_deploy/core/parameter/value.py
"""Parâmetro literal."""

from __future__ import annotations

from dataclasses import dataclass

from monaco_deploy.core.model.entity import PropertyValue

from .base import Parameter, ResolveContext, ensure_property_value


@dataclass(frozen=True)
class ValueParameter(Parameter):
    value: PropertyValue

    def __post_init__(self) -> None:
        ensure_property_value(self.value, what="value parameter")

    def resolve(self, ctx: ResolveContext) -> PropertyValue:
        return self.value
