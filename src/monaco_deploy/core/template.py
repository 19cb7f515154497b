# src/monaco_deploy/core/template.py
"""
Render de templates de payload e de strings de formato.

Templates são documentos JSON com placeholders Jinja2 (`{{ name }}`). A forma
legada `{{ .name }}` também é aceita e normalizada antes do render.

Decisões arquiteturais:
    - `StrictUndefined`: placeholder sem propriedade correspondente é erro
    - Valores `str` são escapados para JSON (aspas, quebras de linha) antes
      de entrar no template; valores `RawJson` entram sem escape
    - O resultado deve ser JSON válido; template vazio gera payload vazio

Limites explícitos:
    - Não resolve parâmetros
    - Não faz chamadas remotas
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict, Mapping, Optional

import jinja2

from monaco_deploy.core.exceptions import RenderError
from monaco_deploy.core.model.coordinate import Coordinate


_LEGACY_PLACEHOLDER = re.compile(r"\{\{\s*\.([A-Za-z_][A-Za-z0-9_]*)\s*\}\}")

_ENV = jinja2.Environment(
    undefined=jinja2.StrictUndefined,
    autoescape=False,
    keep_trailing_newline=True,
)


class RawJson(str):
    """String já no formato JSON; inserida no template sem escape."""


def normalize_placeholders(text: str) -> str:
    return _LEGACY_PLACEHOLDER.sub(r"{{ \1 }}", text)


def escape_json_string(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)[1:-1]


def _template_value(value: Any) -> Any:
    if isinstance(value, RawJson):
        return str(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return escape_json_string(value)
    return value


def render_format(fmt: str, values: Mapping[str, Any]) -> str:
    """Renderiza uma string de formato (sem escape JSON).

    Raises:
        jinja2.TemplateError: Placeholder desconhecido ou sintaxe inválida.
    """
    return _ENV.from_string(normalize_placeholders(fmt)).render(**dict(values))


def render_template(
    content: str,
    properties: Mapping[str, Any],
    *,
    coordinate: Optional[Coordinate] = None,
    template_id: str = "",
) -> str:
    """
    Renderiza o template de uma config com suas propriedades resolvidas.

    Args:
        content (str): Conteúdo do template.
        properties (Mapping[str, Any]): Propriedades resolvidas da config.
        coordinate (Optional[Coordinate]): Coordenada usada nas mensagens de erro.
        template_id (str): Identificador do template (diagnóstico).

    Returns:
        str: Payload renderizado; string vazia para templates vazios.

    Raises:
        RenderError: Se o render falhar ou o resultado não for JSON válido.
    """
    values: Dict[str, Any] = {k: _template_value(v) for k, v in properties.items()}

    try:
        rendered = _ENV.from_string(normalize_placeholders(content)).render(**values)
    except jinja2.TemplateError as e:
        raise RenderError(
            message=f"failed to render template {template_id!r}: {e}",
            coordinate=coordinate,
            details={"template_id": template_id},
        ) from e

    if not rendered.strip():
        return ""

    try:
        json.loads(rendered)
    except json.JSONDecodeError as e:
        raise RenderError(
            message=f"rendered template {template_id!r} is not valid JSON: {e.msg} (line {e.lineno}, column {e.colno})",
            coordinate=coordinate,
            details={"template_id": template_id, "line": e.lineno, "column": e.colno},
        ) from e

    return rendered
