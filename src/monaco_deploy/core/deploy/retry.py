# src/monaco_deploy/core/deploy/retry.py
"""
Retry para problemas de timing conhecidos da plataforma remota.

A plataforma é eventualmente consistente: um objeto recém-criado pode não
estar visível para a próxima chamada que o referencia. Algumas respostas
de erro são reconhecidas como transitórias e a chamada é repetida com um
orçamento fixo (tier) de tentativas e espera.

Decisões arquiteturais:
    - Regras são avaliadas em ordem; cada regra associa um predicado
      (resposta + id da API) a um tier
    - Quando várias regras casam, vence o tier de maior precedência
      (short < normal < long < very_long)
    - Resposta sem regra correspondente é falha permanente imediata
    - Esperas respeitam o token de cancelamento

Invariantes:
    - A chamada é feita no máximo `1 + max_retries` vezes
    - Ao esgotar o orçamento, a última resposta é preservada no erro

Limites explícitos:
    - Não faz backoff exponencial
    - Não reclassifica falhas durante as novas tentativas
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Sequence, TypeVar, Union

from monaco_deploy.core.clients.base import ApiResponse, ApiResponseError
from monaco_deploy.core.exceptions import DeploymentCancelledError, PermanentAPIError, TransientAPIError
from monaco_deploy.core.model.coordinate import Coordinate

from .context import DeployContext


T = TypeVar("T")


class RetryTier(str, Enum):
    SHORT = "short"
    NORMAL = "normal"
    LONG = "long"
    VERY_LONG = "very_long"

    @property
    def precedence(self) -> int:
        return _PRECEDENCE.index(self)


_PRECEDENCE = [RetryTier.SHORT, RetryTier.NORMAL, RetryTier.LONG, RetryTier.VERY_LONG]


@dataclass(frozen=True)
class RetryRule:
    name: str
    tier: RetryTier
    predicate: Callable[[ApiResponse, str], bool]

    def matches(self, response: ApiResponse, api_id: str) -> bool:
        return bool(self.predicate(response, api_id))


def _body_contains(*fragments: str) -> Callable[[ApiResponse, str], bool]:
    return lambda r, _api: all(f in r.body for f in fragments)


def _failed(r: ApiResponse) -> bool:
    return r.is_client_error() or r.is_server_error()


APPLICATION_CHILD_APIS = frozenset({
    "key-user-actions-mobile",
    "key-user-actions-web",
    "user-session-properties-mobile",
})

DEFAULT_RULES: Sequence[RetryRule] = (
    RetryRule("unique-name-conflict", RetryTier.NORMAL, _body_contains("must have a unique name")),
    RetryRule("invalid-metric-selector", RetryTier.NORMAL, _body_contains("Metric selector", "invalid")),
    RetryRule("invalid-entity-selector", RetryTier.NORMAL, _body_contains("Entity selector is invalid")),
    RetryRule(
        "slo-management-zone-not-found",
        RetryTier.NORMAL,
        _body_contains("SLO validation failed", "Management-Zone not found"),
    ),
    RetryRule("unknown-management-zone", RetryTier.NORMAL, _body_contains("Unknown management zone")),
    RetryRule("credential-not-available", RetryTier.NORMAL, _body_contains("credential-vault", "was not available")),
    RetryRule(
        "synthetic-or-credential-not-ready",
        RetryTier.NORMAL,
        lambda r, api: (api.startswith("synthetic-") or api == "credential-vault")
        and (r.status_code == 404 or r.is_server_error()),
    ),
    RetryRule(
        "network-zones-disabled",
        RetryTier.NORMAL,
        lambda r, api: api == "network-zone" and r.is_client_error() and "network zones are disabled" in r.body,
    ),
    RetryRule("unknown-request-attribute", RetryTier.LONG, _body_contains("must specify a known request attribute")),
    RetryRule(
        "calculated-metric-application-not-ready",
        RetryTier.VERY_LONG,
        lambda r, api: api.startswith("calculated-metrics") and _failed(r),
    ),
    RetryRule(
        "synthetic-monitor-server-error",
        RetryTier.VERY_LONG,
        lambda r, api: api == "synthetic-monitor" and r.is_server_error(),
    ),
    RetryRule(
        "application-not-ready",
        RetryTier.VERY_LONG,
        lambda r, api: api.startswith("application-") and (r.is_server_error() or r.status_code in (404, 409)),
    ),
    RetryRule(
        "app-detection-rule-not-ready",
        RetryTier.VERY_LONG,
        lambda r, api: api == "app-detection-rule" and _failed(r),
    ),
    RetryRule(
        "application-child-not-ready",
        RetryTier.VERY_LONG,
        lambda r, api: api in APPLICATION_CHILD_APIS and _failed(r),
    ),
    RetryRule("unknown-application", RetryTier.VERY_LONG, _body_contains("Unknown application(s)")),
)


def classify(response: ApiResponse, api_id: str, rules: Sequence[RetryRule] = DEFAULT_RULES) -> Optional[RetryTier]:
    """Tier de maior precedência entre as regras que casam, ou None."""
    matched = [rule.tier for rule in rules if rule.matches(response, api_id)]
    if not matched:
        return None
    return max(matched, key=lambda t: t.precedence)


def classify_error(
    error: ApiResponseError,
    *,
    coordinate: Coordinate,
    api_id: str,
    rules: Sequence[RetryRule] = DEFAULT_RULES,
    force_tier: Optional[RetryTier] = None,
) -> Union[TransientAPIError, PermanentAPIError]:
    """
    Converte uma falha remota em TransientAPIError (com tier em `details`) ou PermanentAPIError.

    `force_tier` eleva o tier mínimo e torna elegível a retry qualquer falha.
    """
    response = error.response
    tier = classify(response, api_id, rules)
    if force_tier is not None and (tier is None or force_tier.precedence > tier.precedence):
        tier = force_tier

    fields = dict(
        coordinate=coordinate,
        status_code=response.status_code,
        body=response.body,
        api=api_id,
    )
    if tier is None:
        return PermanentAPIError(message=f"failed to deploy config: {error}", **fields)
    return TransientAPIError(
        message=f"known timing issue on {api_id} (HTTP {response.status_code})",
        details={"tier": tier.value},
        **fields,
    )


def call_with_retry_on_known_timing_issue(
    call: Callable[[], T],
    *,
    ctx: DeployContext,
    coordinate: Coordinate,
    api_id: str,
    rules: Sequence[RetryRule] = DEFAULT_RULES,
    force_tier: Optional[RetryTier] = None,
) -> T:
    """
    Executa `call` e repete conforme o tier da falha, se ela for conhecida.

    Args:
        call (Callable[[], T]): Chamada remota sem argumentos.
        ctx (DeployContext): Contexto (settings de retry, cancelamento, log).
        coordinate (Coordinate): Config em deploy.
        api_id (str): Id da API/schema usado na classificação.
        rules (Sequence[RetryRule]): Regras de classificação.
        force_tier (Optional[RetryTier]): Tier mínimo aplicado a qualquer falha.

    Returns:
        T: Resultado da primeira chamada bem-sucedida.

    Raises:
        PermanentAPIError: Falha não reconhecida ou orçamento esgotado.
        DeploymentCancelledError: Cancelamento durante a espera.
    """
    try:
        return call()
    except ApiResponseError as e:
        classified = classify_error(e, coordinate=coordinate, api_id=api_id, rules=rules, force_tier=force_tier)
        if isinstance(classified, PermanentAPIError):
            raise classified from e
        transient: TransientAPIError = classified

    tier = RetryTier(transient.details["tier"])
    budget = ctx.settings.retry.for_tier(tier.value)
    last = transient

    for attempt in range(1, budget.max_retries + 1):
        ctx.log(
            level="warning",
            message=(
                f"failed to deploy config due to a known timing issue (HTTP {last.status_code}), "
                f"retrying in {budget.wait_seconds}s ({attempt}/{budget.max_retries})"
            ),
            coordinate=coordinate,
            tier=tier.value,
        )
        if ctx.cancellation.wait(budget.wait_seconds):
            raise DeploymentCancelledError(message=ctx.cancellation.reason, coordinate=coordinate) from last

        try:
            return call()
        except ApiResponseError as e:
            response = e.response
            last = TransientAPIError(
                message=f"known timing issue on {api_id} (HTTP {response.status_code})",
                coordinate=coordinate,
                details={"tier": tier.value},
                status_code=response.status_code,
                body=response.body,
                api=api_id,
            )
            last.__cause__ = e

    raise PermanentAPIError(
        message=f"dependency of config {coordinate} was not available after {budget.max_retries} retries",
        coordinate=coordinate,
        details={"tier": tier.value, "retries": budget.max_retries},
        status_code=last.status_code,
        body=last.body,
        api=api_id,
    ) from last
