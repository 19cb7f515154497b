# src/monaco_deploy/core/settings/settings.py
"""
DeploySettings — objeto explícito de settings de uma execução de deploy.

Todos os comportamentos configuráveis do engine (política de erro, dry-run,
feature flags, orçamentos de retry e o mapeamento de variáveis de ambiente
usado por parâmetros) são lidos deste objeto. Nenhum componente do core
consulta `os.environ` ou flags globais diretamente.

Decisões arquiteturais:
    - Dataclasses imutáveis (frozen), construídas a partir do dicionário
      resolvido por `load_settings` ou do ambiente do processo
    - Validação fail-fast de tipos e faixas na construção
    - O mapeamento `environment` não participa de `to_dict()` nem do hash

Invariantes:
    - `max_retries >= 0` e `wait_seconds >= 0` para todo tier de retry
    - `max_workers >= 1`

Este módulo existe para garantir que a execução seja reproduzível a partir
de um único objeto de settings, sem estado global.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional

from .errors import InvalidSettingsValueError
from .hashing import compute_settings_hash


_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}

RETRY_TIERS = ("short", "normal", "long", "very_long")

# Environment variables read by DeploySettings.from_env
ENV_CONTINUE_ON_ERROR = "MONACO_CONTINUE_ON_ERROR"
ENV_DRY_RUN = "MONACO_DRY_RUN"
ENV_PARALLEL_ENVIRONMENTS = "MONACO_PARALLEL_ENVIRONMENTS"
ENV_FEAT_IGNORE_SKIPPED_CONFIGS = "MONACO_FEAT_IGNORE_SKIPPED_CONFIGS"
ENV_FEAT_UPDATE_NON_UNIQUE_BY_NAME = "MONACO_FEAT_UPDATE_NON_UNIQUE_BY_NAME"
ENV_FEAT_SANITIZE_BUCKET_NAMES = "MONACO_FEAT_SANITIZE_BUCKET_NAMES"


@dataclass(frozen=True)
class RetrySetting:
    """Orçamento de um tier de retry: número máximo de novas tentativas e espera fixa."""

    max_retries: int
    wait_seconds: float

    def __post_init__(self) -> None:
        if isinstance(self.max_retries, bool) or not isinstance(self.max_retries, int):
            raise InvalidSettingsValueError(f"max_retries deve ser int, recebido: {self.max_retries!r}")
        if self.max_retries < 0:
            raise InvalidSettingsValueError(f"max_retries deve ser >= 0, recebido: {self.max_retries}")
        if isinstance(self.wait_seconds, bool) or not isinstance(self.wait_seconds, (int, float)):
            raise InvalidSettingsValueError(f"wait_seconds deve ser numérico, recebido: {self.wait_seconds!r}")
        if self.wait_seconds < 0:
            raise InvalidSettingsValueError(f"wait_seconds deve ser >= 0, recebido: {self.wait_seconds}")

    def to_dict(self) -> Dict[str, Any]:
        return {"max_retries": self.max_retries, "wait_seconds": self.wait_seconds}


@dataclass(frozen=True)
class RetrySettings:
    """Orçamentos por tier, do mais curto ao mais longo."""

    short: RetrySetting = RetrySetting(max_retries=3, wait_seconds=2)
    normal: RetrySetting = RetrySetting(max_retries=3, wait_seconds=5)
    long: RetrySetting = RetrySetting(max_retries=3, wait_seconds=10)
    very_long: RetrySetting = RetrySetting(max_retries=5, wait_seconds=15)

    def for_tier(self, tier: str) -> RetrySetting:
        if tier not in RETRY_TIERS:
            raise KeyError(tier)
        return getattr(self, tier)

    def to_dict(self) -> Dict[str, Any]:
        return {tier: self.for_tier(tier).to_dict() for tier in RETRY_TIERS}

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "RetrySettings":
        data = dict(data or {})
        unknown = sorted(set(data) - set(RETRY_TIERS))
        if unknown:
            raise InvalidSettingsValueError(f"Tiers de retry desconhecidos: {unknown}")

        defaults = cls()
        tiers: Dict[str, RetrySetting] = {}
        for tier in RETRY_TIERS:
            raw = data.get(tier)
            if raw is None:
                tiers[tier] = defaults.for_tier(tier)
                continue
            if not isinstance(raw, Mapping):
                raise InvalidSettingsValueError(f"retry.{tier} deve ser dict, recebido: {type(raw).__name__}")
            base = defaults.for_tier(tier)
            tiers[tier] = RetrySetting(
                max_retries=raw.get("max_retries", base.max_retries),
                wait_seconds=raw.get("wait_seconds", base.wait_seconds),
            )
        return cls(**tiers)


@dataclass(frozen=True)
class FeatureFlags:
    """
    Feature flags que alteram o comportamento do deploy.

    - ignore_skipped_configs: configs com `skip` não entram no grafo de dependências
    - update_non_unique_by_name_if_single_one_exists: em APIs clássicas sem nome
      único, atualiza o único objeto remoto com o mesmo nome em vez de criar outro
    - sanitize_bucket_names: nomes de bucket gerados são ajustados às regras da plataforma
    """

    ignore_skipped_configs: bool = False
    update_non_unique_by_name_if_single_one_exists: bool = True
    sanitize_bucket_names: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ignore_skipped_configs": self.ignore_skipped_configs,
            "update_non_unique_by_name_if_single_one_exists": self.update_non_unique_by_name_if_single_one_exists,
            "sanitize_bucket_names": self.sanitize_bucket_names,
        }


@dataclass(frozen=True)
class DeploySettings:
    """
    Settings efetivos de uma execução de deploy.

    Campos:
    - continue_on_error: continua após falhas, pulando dependentes (padrão: para no primeiro erro)
    - dry_run: substitui todos os clients por clients em memória
    - parallel_environments: executa ambientes concorrentemente
    - max_workers: limite de threads quando `parallel_environments` está ativo
    - features: feature flags
    - retry: orçamentos de retry por tier
    - environment: variáveis visíveis a parâmetros de ambiente
    """

    continue_on_error: bool = False
    dry_run: bool = False
    parallel_environments: bool = False
    max_workers: int = 4
    features: FeatureFlags = field(default_factory=FeatureFlags)
    retry: RetrySettings = field(default_factory=RetrySettings)
    environment: Mapping[str, str] = field(default_factory=dict, repr=False, compare=False)

    def __post_init__(self) -> None:
        if isinstance(self.max_workers, bool) or not isinstance(self.max_workers, int) or self.max_workers < 1:
            raise InvalidSettingsValueError(f"max_workers deve ser int >= 1, recebido: {self.max_workers!r}")

    @classmethod
    def from_dict(
        cls,
        data: Optional[Mapping[str, Any]],
        *,
        environment: Optional[Mapping[str, str]] = None,
    ) -> "DeploySettings":
        """
        Constrói os settings a partir do dicionário resolvido por `load_settings`.

        Seções reconhecidas: `deploy`, `features`, `retry`. Chaves ausentes
        assumem os defaults da dataclass.

        Raises:
            InvalidSettingsValueError: Para tipos inválidos ou faixas fora do permitido.
        """
        data = dict(data or {})
        deploy_cfg = _section(data, "deploy")
        features_cfg = _section(data, "features")

        defaults = FeatureFlags()
        features = FeatureFlags(
            ignore_skipped_configs=_as_bool(
                features_cfg.get("ignore_skipped_configs", defaults.ignore_skipped_configs),
                "features.ignore_skipped_configs",
            ),
            update_non_unique_by_name_if_single_one_exists=_as_bool(
                features_cfg.get(
                    "update_non_unique_by_name_if_single_one_exists",
                    defaults.update_non_unique_by_name_if_single_one_exists,
                ),
                "features.update_non_unique_by_name_if_single_one_exists",
            ),
            sanitize_bucket_names=_as_bool(
                features_cfg.get("sanitize_bucket_names", defaults.sanitize_bucket_names),
                "features.sanitize_bucket_names",
            ),
        )

        return cls(
            continue_on_error=_as_bool(deploy_cfg.get("continue_on_error", False), "deploy.continue_on_error"),
            dry_run=_as_bool(deploy_cfg.get("dry_run", False), "deploy.dry_run"),
            parallel_environments=_as_bool(
                deploy_cfg.get("parallel_environments", False), "deploy.parallel_environments"
            ),
            max_workers=deploy_cfg.get("max_workers", 4),
            features=features,
            retry=RetrySettings.from_dict(_section(data, "retry")),
            environment=dict(environment or {}),
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "DeploySettings":
        """
        Constrói os settings a partir de variáveis de ambiente do processo.

        O mesmo mapeamento é exposto em `environment` para a resolução de
        parâmetros de ambiente.
        """
        env = dict(os.environ if environ is None else environ)
        defaults = FeatureFlags()
        return cls(
            continue_on_error=_env_bool(env, ENV_CONTINUE_ON_ERROR, False),
            dry_run=_env_bool(env, ENV_DRY_RUN, False),
            parallel_environments=_env_bool(env, ENV_PARALLEL_ENVIRONMENTS, False),
            features=FeatureFlags(
                ignore_skipped_configs=_env_bool(
                    env, ENV_FEAT_IGNORE_SKIPPED_CONFIGS, defaults.ignore_skipped_configs
                ),
                update_non_unique_by_name_if_single_one_exists=_env_bool(
                    env,
                    ENV_FEAT_UPDATE_NON_UNIQUE_BY_NAME,
                    defaults.update_non_unique_by_name_if_single_one_exists,
                ),
                sanitize_bucket_names=_env_bool(
                    env, ENV_FEAT_SANITIZE_BUCKET_NAMES, defaults.sanitize_bucket_names
                ),
            ),
            environment=env,
        )

    def with_environment(self, environment: Mapping[str, str]) -> "DeploySettings":
        return replace(self, environment=dict(environment))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "deploy": {
                "continue_on_error": self.continue_on_error,
                "dry_run": self.dry_run,
                "parallel_environments": self.parallel_environments,
                "max_workers": self.max_workers,
            },
            "features": self.features.to_dict(),
            "retry": self.retry.to_dict(),
        }

    @property
    def settings_hash(self) -> str:
        return compute_settings_hash(self.to_dict())


def _section(data: Mapping[str, Any], key: str) -> Dict[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise InvalidSettingsValueError(f"Seção '{key}' deve ser dict, recebido: {type(value).__name__}")
    return dict(value)


def _as_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    raise InvalidSettingsValueError(f"'{key}' deve ser bool, recebido: {value!r}")


def _env_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None:
        return default
    normalized = raw.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise InvalidSettingsValueError(f"{name} deve ser booleano (true/false), recebido: {raw!r}")
