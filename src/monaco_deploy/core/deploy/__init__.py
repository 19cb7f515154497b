# src/monaco_deploy/core/deploy/__init__.py
"""
Deploy de configs: contexto, engine por config, retry, estratégias por tipo
e o run controller por ambiente.
"""

from .cancellation import CancellationToken
from .context import DeployContext
from .engine import DeploymentEngine
from .retry import DEFAULT_RULES, RetryRule, RetryTier, call_with_retry_on_known_timing_issue, classify
from .runner import EnvironmentResult, RunResult, deploy_all, deploy_environment

__all__ = [
    "CancellationToken",
    "DeployContext",
    "DeploymentEngine",
    "DEFAULT_RULES",
    "RetryRule",
    "RetryTier",
    "call_with_retry_on_known_timing_issue",
    "classify",
    "EnvironmentResult",
    "RunResult",
    "deploy_all",
    "deploy_environment",
]
