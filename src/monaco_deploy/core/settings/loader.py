# src/monaco_deploy/core/settings/loader.py
"""
Carregamento dos settings de deploy a partir de arquivos.

Camadas, da menor para a maior prioridade:
    1. defaults (obrigatório)
    2. local (opcional; ignorado quando o arquivo não existe)
    3. overrides explícitos (`extra_paths`), na ordem recebida; devem existir

Limites explícitos:
    - Não converte o dicionário em `DeploySettings` (ver `settings.py`)
    - Não lê variáveis de ambiente
"""

from pathlib import Path
from typing import Any, Callable, Dict, IO, Optional, Sequence
import json

import yaml  # PyYAML

from .merge import deep_merge
from .errors import (
    InvalidSettingsRootTypeError,
    SettingsNotFoundError,
    UnsupportedSettingsFormatError,
)


_PARSERS: Dict[str, Callable[[IO[str]], Any]] = {
    ".yaml": yaml.safe_load,
    ".yml": yaml.safe_load,
    ".json": json.load,
}


def read_settings_file(path: Path) -> Dict[str, Any]:
    """
    Lê um arquivo de settings; arquivo vazio vale `{}`.

    Raises:
        SettingsNotFoundError: Arquivo inexistente.
        UnsupportedSettingsFormatError: Extensão fora de YAML/JSON.
        InvalidSettingsRootTypeError: Raiz que não é um mapeamento.
    """
    if not path.exists():
        raise SettingsNotFoundError(f"Arquivo de settings não encontrado: {path}")

    parser = _PARSERS.get(path.suffix.lower())
    if parser is None:
        raise UnsupportedSettingsFormatError(f"Formato não suportado: {path.suffix}")

    with path.open("r", encoding="utf-8") as f:
        data = parser(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidSettingsRootTypeError(
            f"Settings root deve ser dict em {path}, recebido: {type(data).__name__}"
        )
    return data


def load_settings(
    *,
    defaults_path: str,
    local_path: Optional[str] = None,
    extra_paths: Sequence[str] = (),
) -> Dict[str, Any]:
    """
    Resolve os settings efetivos aplicando cada camada via `deep_merge`.

    Raises:
        SettingsNotFoundError: Defaults ou algum `extra_paths` inexistente.
        SettingsTypeConflictError: Conflito de tipo entre camadas.
    """
    layers = [Path(defaults_path)]
    if local_path is not None and Path(local_path).exists():
        layers.append(Path(local_path))
    layers.extend(Path(p) for p in extra_paths)

    effective: Dict[str, Any] = {}
    for layer in layers:
        effective = deep_merge(effective, read_settings_file(layer))
    return effective
