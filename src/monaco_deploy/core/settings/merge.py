# src/monaco_deploy/core/settings/merge.py
"""
Deep-merge de settings de deploy (defaults + overrides locais).

Política:
    - seção (dict) → merge recursivo por chave
    - valor folha → sobrescrito pelo override
    - `int` e `float` são intercambiáveis (`wait_seconds: 2` sobre `2.5`)
    - `bool` não é numérico; qualquer outra troca de tipo é conflito
    - `null` no override remove o valor e restaura o default da dataclass

Invariantes:
    - Nenhum input é mutado
    - Conflitos informam o caminho completo da chave (ex.: `retry.short.wait_seconds`)
"""

from copy import deepcopy
from typing import Any, Dict, Mapping

from .errors import SettingsTypeConflictError


def _kind(value: Any) -> str:
    if isinstance(value, Mapping):
        return "section"
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return "number"
    return type(value).__name__


def _merge_value(path: str, base: Any, override: Any) -> Any:
    if isinstance(base, Mapping) and isinstance(override, Mapping):
        return _merge_section(path, base, override)
    if _kind(base) != _kind(override):
        raise SettingsTypeConflictError(
            f"Conflito de tipo em '{path}': {type(base).__name__} vs {type(override).__name__}"
        )
    return deepcopy(override)


def _merge_section(path: str, base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    result: Dict[str, Any] = deepcopy(dict(base))
    for key, value in override.items():
        key_path = f"{path}.{key}" if path else str(key)
        if value is None:
            result.pop(key, None)
        elif result.get(key) is None:
            result[key] = deepcopy(value)
        else:
            result[key] = _merge_value(key_path, result[key], value)
    return result


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Aplica `override` sobre `base` e retorna um novo dicionário.

    Raises:
        SettingsTypeConflictError: Raiz não-dict ou troca de tipo em alguma chave.
    """
    if not isinstance(base, Mapping) or not isinstance(override, Mapping):
        raise SettingsTypeConflictError(
            f"Deep-merge requer dicts no nível raiz, recebido: "
            f"{type(base).__name__} vs {type(override).__name__}"
        )
    return _merge_section("", base, override)
