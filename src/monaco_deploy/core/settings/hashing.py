# src/monaco_deploy/core/settings/hashing.py
"""
Hashing canônico dos settings efetivos de uma execução de deploy.

O hash representa a identidade estrutural dos settings e é registrado
no contexto de deploy para rastreabilidade entre execuções.

Política de hashing:
    - Serialização JSON canônica (chaves ordenadas, separadores compactos)
    - Codificação UTF-8
    - SHA-256

Limites explícitos:
    - O mapeamento de variáveis de ambiente nunca participa do hash
"""

import hashlib
import json
from typing import Any, Dict


def compute_settings_hash(settings: Dict[str, Any]) -> str:
    """
    Gera um hash determinístico (SHA-256, hexadecimal) dos settings efetivos.

    Args:
        settings (Dict[str, Any]): Settings resolvidos, como dicionário puro.

    Returns:
        str: Hash hexadecimal de 64 caracteres.

    Raises:
        TypeError: Se o objeto fornecido não for um dicionário.
    """

    if not isinstance(settings, dict):
        raise TypeError(
            f"Settings para hashing devem ser dict, recebido: {type(settings).__name__}"
        )

    canonical_json = json.dumps(
        settings,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )

    return hashlib.sha256(canonical_json.encode("utf-8")).hexdigest()
