"""
src/monaco_deploy/report/report_md.py

Gerador canônico de `report.md` de uma execução de deploy.

Regras:
- O report é derivado EXCLUSIVAMENTE do RunResult.
- Não infere e não recalcula nada que não esteja registrado.
- Mesmo RunResult => mesmo report.md (ordenação estável).

Estrutura mínima obrigatória:
# Deployment Report

## Summary
## Environments
## Errors
## Warnings
## Execution Metadata
"""

from __future__ import annotations

import json
from typing import Any, List

from monaco_deploy.core.deploy.runner import RunResult

from .summary import STATUSES, status_counts, summary_frame


REQUIRED_SECTIONS: List[str] = [
    "# Deployment Report",
    "## Summary",
    "## Environments",
    "## Errors",
    "## Warnings",
    "## Execution Metadata",
]


def _as_pretty_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, sort_keys=True, indent=2)


def _require_result(result: RunResult) -> RunResult:
    if not isinstance(result, RunResult):
        raise ValueError("RunResult is required to generate report.md")
    return result


def generate_report_md(result: RunResult) -> str:
    """Gera o conteúdo completo do report.md a partir do RunResult."""
    result = _require_result(result)

    df = summary_frame(result)
    counts = status_counts(df)
    envs = sorted(result.environments)

    lines: List[str] = []

    lines.append("# Deployment Report\n")

    lines.append("## Summary")
    lines.append(f"- **Environments**: `{len(envs)}`")
    lines.append(f"- **Status**: `{'success' if result.ok else 'failed'}`")
    for status in STATUSES:
        total = int(counts[status].sum()) if status in counts.columns else 0
        lines.append(f"- **{status}**: `{total}`")
    lines.append("")

    lines.append("## Environments")
    if envs:
        lines.append("| environment | " + " | ".join(STATUSES) + " |")
        lines.append("|---" * (len(STATUSES) + 1) + "|")
        for env in envs:
            row = counts.loc[env] if env in counts.index else None
            values = [str(int(row[s])) if row is not None else "0" for s in STATUSES]
            lines.append(f"| {env} | " + " | ".join(values) + " |")
    else:
        lines.append("No environments recorded.")
    lines.append("")

    lines.append("## Errors")
    any_error = False
    for env in envs:
        payloads = result.environments[env].error_payloads()
        for p in sorted(payloads, key=lambda p: (p.coordinate or "", p.type)):
            any_error = True
            lines.append(f"- **{env}** `{p.coordinate or '-'}`: `{p.type}`: {p.message}")
            if p.hint:
                lines.append(f"  - hint: {p.hint}")
    if not any_error:
        lines.append("No errors recorded.")
    lines.append("")

    lines.append("## Warnings")
    any_warning = False
    for env in envs:
        for coordinate, messages in sorted(result.environments[env].warnings.items()):
            for message in messages:
                any_warning = True
                lines.append(f"- **{env}** `{coordinate}`: {message}")
    if not any_warning:
        lines.append("No warnings recorded.")
    lines.append("")

    lines.append("## Execution Metadata")
    metadata = {
        env: {
            "run_id": result.environments[env].run_id,
            "settings_hash": result.environments[env].settings_hash,
            "order": [str(c) for c in result.environments[env].order],
            "events": len(result.environments[env].events),
        }
        for env in envs
    }
    lines.append("```json")
    lines.append(_as_pretty_json(metadata))
    lines.append("```")

    content = "\n".join(lines)

    # sanity: ensure required sections exist
    for sec in REQUIRED_SECTIONS:
        if sec not in content:
            raise RuntimeError(f"Report generation failed: missing required section: {sec}")

    return content
