# src/monaco_deploy/core/parameter/sequence.py
"""
Parâmetro de lista.

Resolve para uma única string com cada elemento codificado em JSON e
separados por `", "`, pronta para uso em templates na forma
`"values": [{{ values }}]`. O resultado é marcado como `RawJson` para não
ser escapado novamente no render.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Sequence, Tuple

from monaco_deploy.core.model.entity import PropertyValue
from monaco_deploy.core.template import RawJson

from .base import Parameter, ResolveContext, ensure_property_value


@dataclass(frozen=True)
class ListParameter(Parameter):
    values: Tuple[PropertyValue, ...]

    def __init__(self, values: Sequence[PropertyValue]) -> None:
        items = tuple(values)
        for item in items:
            ensure_property_value(item, what="list parameter element")
        object.__setattr__(self, "values", items)

    def resolve(self, ctx: ResolveContext) -> PropertyValue:
        return RawJson(", ".join(json.dumps(v, ensure_ascii=False) for v in self.values))
