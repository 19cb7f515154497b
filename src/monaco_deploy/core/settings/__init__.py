# src/monaco_deploy/core/settings/__init__.py
"""
Camada de settings do monaco-deploy.

Este pacote carrega, mescla e valida os settings de uma execução de deploy
e os expõe como um objeto explícito (`DeploySettings`), consumido pelo
engine e pelo run controller.

Responsabilidades do pacote:
    - Carregamento de arquivos de settings (defaults + overrides locais)
    - Resolução via deep-merge determinístico
    - Conversão validada para `DeploySettings`
    - Hash canônico para rastreabilidade

Limites explícitos:
    - Não lê manifests ou projetos de config
    - Não resolve credenciais
"""

from .errors import (
    InvalidSettingsRootTypeError,
    InvalidSettingsValueError,
    SettingsError,
    SettingsNotFoundError,
    SettingsTypeConflictError,
    UnsupportedSettingsFormatError,
)
from .hashing import compute_settings_hash
from .loader import load_settings
from .merge import deep_merge
from .settings import DeploySettings, FeatureFlags, RetrySetting, RetrySettings

__all__ = [
    "DeploySettings",
    "FeatureFlags",
    "RetrySetting",
    "RetrySettings",
    "SettingsError",
    "SettingsNotFoundError",
    "UnsupportedSettingsFormatError",
    "InvalidSettingsRootTypeError",
    "SettingsTypeConflictError",
    "InvalidSettingsValueError",
    "compute_settings_hash",
    "deep_merge",
    "load_settings",
]
