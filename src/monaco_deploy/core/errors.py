"""
monaco-deploy — Canonical Error Structures

Este módulo define o payload canônico de erro de uma execução de deploy.
Erros fazem parte do resultado da execução e devem ser:

- explícitos
- serializáveis
- rastreáveis até a config de origem
- acionáveis
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from monaco_deploy.core.exceptions import (
    CyclicDependencyError,
    DeployException,
    DeploymentCancelledError,
    MissingReferenceError,
    PermanentAPIError,
    RemoteApiError,
    RenderError,
    ResolutionError,
    TransientAPIError,
    ValidationError,
)


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DeployErrorPayload:
    """
    Payload canônico de erro.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - coordinate: coordenada da config de origem (`project:type:config_id`)
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador
    """

    type: str
    message: str
    details: Dict[str, Any]
    coordinate: Optional[str] = None
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro
# ---------------------------------------------------------------------------

# Grafo
CYCLIC_DEPENDENCY = "CYCLIC_DEPENDENCY"

# Resolução
RESOLUTION_ERROR = "RESOLUTION_ERROR"
MISSING_REFERENCE = "MISSING_REFERENCE"

# Validação / Render
VALIDATION_ERROR = "VALIDATION_ERROR"
RENDER_ERROR = "RENDER_ERROR"

# API remota
TRANSIENT_API_ERROR = "TRANSIENT_API_ERROR"
PERMANENT_API_ERROR = "PERMANENT_API_ERROR"

# Execução
DEPLOYMENT_CANCELLED = "DEPLOYMENT_CANCELLED"
ENGINE_EXECUTION_ERROR = "ENGINE_EXECUTION_ERROR"

# Ordem importa: subclasses antes das bases.
_CATALOG = (
    (CyclicDependencyError, CYCLIC_DEPENDENCY),
    (MissingReferenceError, MISSING_REFERENCE),
    (ResolutionError, RESOLUTION_ERROR),
    (ValidationError, VALIDATION_ERROR),
    (RenderError, RENDER_ERROR),
    (TransientAPIError, TRANSIENT_API_ERROR),
    (PermanentAPIError, PERMANENT_API_ERROR),
    (DeploymentCancelledError, DEPLOYMENT_CANCELLED),
)

_DEFAULT_HINTS = {
    CYCLIC_DEPENDENCY: "Remova a referência circular entre as configs listadas em details.cycle.",
    MISSING_REFERENCE: "Verifique se a config referenciada existe, não está marcada como skip e foi implantada.",
    RESOLUTION_ERROR: "Verifique os parâmetros da config e as variáveis de ambiente necessárias.",
    VALIDATION_ERROR: "Corrija a definição da config antes de reexecutar o deploy.",
    RENDER_ERROR: "Verifique o template: placeholders devem existir e o resultado deve ser JSON válido.",
    PERMANENT_API_ERROR: "Inspecione a resposta da API em details.body.",
    DEPLOYMENT_CANCELLED: "A execução foi cancelada; reexecute o deploy.",
}


def error_type_of(exc: BaseException) -> str:
    for cls, code in _CATALOG:
        if isinstance(exc, cls):
            return code
    return ENGINE_EXECUTION_ERROR


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def error_payload(exc: BaseException) -> DeployErrorPayload:
    """Converte qualquer exceção em DeployErrorPayload (serializável, acionável).

    Regras:
    - DeployException: usa coordinate/details/hint carregados pela exceção
    - Outras exceções: encapsuladas como ENGINE_EXECUTION_ERROR sem stack trace
    """
    code = error_type_of(exc)

    if isinstance(exc, DeployException):
        details = dict(exc.details or {})
        if isinstance(exc, CyclicDependencyError):
            details.setdefault("cycle", [str(c) for c in exc.cycle])
            details.setdefault("environment", exc.environment)
        if isinstance(exc, MissingReferenceError) and exc.referenced is not None:
            details.setdefault("referenced", str(exc.referenced))
            if exc.property is not None:
                details.setdefault("property", exc.property)
        if isinstance(exc, RemoteApiError):
            details.setdefault("status_code", exc.status_code)
            details.setdefault("api", exc.api)
            if exc.body:
                details.setdefault("body", exc.body)

        return DeployErrorPayload(
            type=code,
            message=exc.message or "Erro de deploy",
            details=details,
            coordinate=None if exc.coordinate is None else str(exc.coordinate),
            hint=exc.hint or _DEFAULT_HINTS.get(code),
        )

    return DeployErrorPayload(
        type=ENGINE_EXECUTION_ERROR,
        message=str(exc) or "Erro inesperado durante o deploy",
        details={"exception_class": exc.__class__.__name__},
        hint="Verifique o log técnico e a definição da config",
    )
