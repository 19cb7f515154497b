# src/monaco_deploy/core/parameter/compound.py
"""
Parâmetro composto.

Combina uma string de formato com uma ou mais referências. Cada referência
é resolvida primeiro (qualquer falha falha o composto) e a string de
formato é renderizada com os valores, acessíveis pelo nome da propriedade
referenciada: `format="{{ firstName }} {{ lastName }}"`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Sequence, Tuple

import jinja2

from monaco_deploy.core.exceptions import ResolutionError
from monaco_deploy.core.model.entity import PropertyValue
from monaco_deploy.core.template import render_format

from .base import Parameter, ParameterReference, ResolveContext
from .reference import lookup_reference


@dataclass(frozen=True)
class CompoundParameter(Parameter):
    format: str
    refs: Tuple[ParameterReference, ...]

    def __init__(self, format: str, refs: Sequence[ParameterReference]) -> None:
        items = tuple(refs)
        names = [r.property for r in items]
        duplicated = sorted({n for n in names if names.count(n) > 1})
        if duplicated:
            raise ValueError(f"compound parameter references the property name(s) {duplicated} more than once")
        object.__setattr__(self, "format", format)
        object.__setattr__(self, "refs", items)

    def references(self) -> Tuple[ParameterReference, ...]:
        return self.refs

    def resolve(self, ctx: ResolveContext) -> PropertyValue:
        values: Dict[str, PropertyValue] = {}
        for ref in self.refs:
            values[ref.property] = lookup_reference(ctx, ref)

        try:
            return render_format(self.format, values)
        except jinja2.TemplateError as e:
            raise ResolutionError(
                message=f"failed to render compound format {self.format!r}: {e}",
                coordinate=ctx.coordinate,
                parameter=ctx.parameter_name,
            ) from e
