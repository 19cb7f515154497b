# src/monaco_deploy/report/summary.py
"""
Resumo tabular de uma execução de deploy (pandas).

Uma linha por config registrada: implantada, pulada, com erro ou
cancelada. A tabela é ordenada por ambiente e coordenada para ser
determinística.
"""

from __future__ import annotations

from typing import Any, Dict, List, Union

import pandas as pd

from monaco_deploy.core.deploy.runner import EnvironmentResult, RunResult
from monaco_deploy.core.errors import error_type_of
from monaco_deploy.core.exceptions import DeploymentCancelledError


SUMMARY_COLUMNS: List[str] = [
    "environment",
    "coordinate",
    "project",
    "type",
    "config_id",
    "status",
    "entity_id",
    "error_type",
    "message",
]

STATUSES = ("deployed", "skipped", "failed", "cancelled")


def _rows(result: EnvironmentResult) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []

    for entity in result.entities:
        c = entity.coordinate
        rows.append(
            {
                "environment": result.environment,
                "coordinate": str(c),
                "project": c.project,
                "type": c.type,
                "config_id": c.config_id,
                "status": "skipped" if entity.skip else "deployed",
                "entity_id": entity.id,
                "error_type": None,
                "message": None,
            }
        )

    for err in result.errors:
        c = err.coordinate
        rows.append(
            {
                "environment": result.environment,
                "coordinate": None if c is None else str(c),
                "project": None if c is None else c.project,
                "type": None if c is None else c.type,
                "config_id": None if c is None else c.config_id,
                "status": "cancelled" if isinstance(err, DeploymentCancelledError) else "failed",
                "entity_id": None,
                "error_type": error_type_of(err),
                "message": err.message,
            }
        )

    return rows


def summary_frame(result: Union[RunResult, EnvironmentResult]) -> pd.DataFrame:
    """Constrói o DataFrame de resumo de um ambiente ou de uma execução completa."""
    envs = [result] if isinstance(result, EnvironmentResult) else list(result.environments.values())

    rows: List[Dict[str, Any]] = []
    for env in envs:
        rows.extend(_rows(env))

    df = pd.DataFrame(rows, columns=SUMMARY_COLUMNS)
    if df.empty:
        return df
    return df.sort_values(["environment", "coordinate"], na_position="first", kind="mergesort").reset_index(drop=True)


def status_counts(df: pd.DataFrame) -> pd.DataFrame:
    """Contagem de configs por ambiente e status (colunas fixas em `STATUSES`)."""
    if df.empty:
        return pd.DataFrame(columns=list(STATUSES), dtype="int64")
    counts = df.groupby(["environment", "status"]).size().unstack(fill_value=0)
    return counts.reindex(columns=list(STATUSES), fill_value=0).astype("int64")
