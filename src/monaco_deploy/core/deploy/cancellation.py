# src/monaco_deploy/core/deploy/cancellation.py
"""
Token de cancelamento cooperativo.

Combina um sinal explícito (`cancel()`) com um deadline opcional. O run
controller verifica o token entre configs, as estratégias entre chamadas
remotas, e a política de retry o usa para esperas interrompíveis.
"""

from __future__ import annotations

import threading
import time
from typing import Optional

from monaco_deploy.core.exceptions import DeploymentCancelledError
from monaco_deploy.core.model.coordinate import Coordinate


class CancellationToken:
    def __init__(self, *, timeout_seconds: Optional[float] = None) -> None:
        self._event = threading.Event()
        self._reason = ""
        self._deadline = None if timeout_seconds is None else time.monotonic() + timeout_seconds

    def cancel(self, reason: str = "deployment aborted") -> None:
        if not self._event.is_set():
            self._reason = reason
            self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self.cancel("deployment deadline exceeded")
            return True
        return False

    @property
    def reason(self) -> str:
        return self._reason

    def raise_if_cancelled(self, coordinate: Optional[Coordinate] = None) -> None:
        if self.cancelled:
            raise DeploymentCancelledError(message=self._reason, coordinate=coordinate)

    def wait(self, seconds: float) -> bool:
        """Espera até `seconds`; retorna True se o token foi cancelado durante a espera."""
        if seconds <= 0:
            return self.cancelled
        timeout = seconds
        if self._deadline is not None:
            timeout = max(0.0, min(timeout, self._deadline - time.monotonic()))
        self._event.wait(timeout)
        return self.cancelled
