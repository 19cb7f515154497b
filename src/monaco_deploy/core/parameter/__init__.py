# src/monaco_deploy/core/parameter/__init__.py
"""
Modelo de parâmetros do monaco-deploy.

Variantes disponíveis:
    - ValueParameter                → literal
    - EnvironmentVariableParameter  → variável de ambiente (com default opcional)
    - ReferenceParameter            → propriedade de outra config (ou da própria)
    - ListParameter                 → lista de literais
    - CompoundParameter             → string de formato + referências
"""

from .base import Parameter, ParameterReference, ResolveContext
from .compound import CompoundParameter
from .environment import EnvironmentVariableParameter
from .reference import ReferenceParameter, lookup_reference
from .resolve import resolve_properties, sort_parameters, validate_references
from .sequence import ListParameter
from .value import ValueParameter

__all__ = [
    "Parameter",
    "ParameterReference",
    "ResolveContext",
    "CompoundParameter",
    "EnvironmentVariableParameter",
    "ReferenceParameter",
    "ListParameter",
    "ValueParameter",
    "lookup_reference",
    "resolve_properties",
    "sort_parameters",
    "validate_references",
]
