# src/monaco_deploy/core/identity.py
"""
Geração determinística de identificadores.

Identificadores derivados de coordenadas permitem que execuções repetidas
encontrem os mesmos objetos remotos, tornando o deploy idempotente.

Funções:
    - generate_external_id / external_id_for_coordinate → external id de Settings e documentos
    - uuid_from_coordinate → UUID estável para APIs clássicas sem nome único
    - uuid_from_config_id → UUID estável por projeto e config id (automações)
    - bucket_name_for_coordinate → nome de bucket gerado (opcionalmente sanitizado)
    - is_uuid / is_me_id → reconhecimento de ids já no formato da plataforma

Invariantes:
    - A mesma entrada sempre produz o mesmo identificador
    - External ids sempre começam com `monaco:` e têm no máximo 500 caracteres
    - Entradas distintas sem `$` produzem external ids distintos; `$` é o
      separador reservado entre namespace e id local
"""

from __future__ import annotations

import base64
import hashlib
import re
import uuid

from monaco_deploy.core.model.coordinate import Coordinate


EXTERNAL_ID_PREFIX = "monaco:"
MAX_EXTERNAL_ID_LENGTH = 500

# base64 expands every 3 bytes into 4 characters
_MAX_RAW_BYTES = ((MAX_EXTERNAL_ID_LENGTH - len(EXTERNAL_ID_PREFIX)) // 4) * 3
_MAX_COMPONENT_BYTES = (_MAX_RAW_BYTES - 1) // 2

MAX_BUCKET_NAME_LENGTH = 100

UUID_NAMESPACE = uuid.UUID("2a5c5e1a-6f1e-4c8e-9d3b-5d0f6f0b7e11")

_ME_ID = re.compile(r"^[A-Z][A-Z0-9_]*-[0-9A-F]{16}$")


def _encode(raw: str) -> str:
    return EXTERNAL_ID_PREFIX + base64.b64encode(raw.encode("utf-8")).decode("ascii")


def _shorten(component: str) -> str:
    if len(component.encode("utf-8")) > _MAX_COMPONENT_BYTES:
        return hashlib.sha256(component.encode("utf-8")).hexdigest()
    return component


def generate_external_id(namespace: str, local_id: str) -> str:
    """
    Gera o external id de um objeto a partir de um namespace e de um id local.

    Formato: `monaco:` + base64(`namespace$local_id`). Quando o resultado
    excederia 500 caracteres, todo componente maior que metade do orçamento
    é substituído pelo seu SHA-256 hexadecimal antes da codificação.

    Raises:
        ValueError: Se `namespace` ou `local_id` forem vazios.
    """
    if not namespace or not local_id:
        raise ValueError("namespace and local id must be non-empty to generate an external id")

    # `$` is a reserved separator; components containing it can collide
    raw = f"{namespace}${local_id}"
    if len(raw.encode("utf-8")) <= _MAX_RAW_BYTES:
        return _encode(raw)

    return _encode(f"{_shorten(namespace)}${_shorten(local_id)}")


def external_id_for_coordinate(coordinate: Coordinate) -> str:
    """External id de uma config: namespace `project$type` (ou `type` sem projeto)."""
    namespace = f"{coordinate.project}${coordinate.type}" if coordinate.project else coordinate.type
    return generate_external_id(namespace, coordinate.config_id)


def uuid_from_coordinate(coordinate: Coordinate) -> str:
    return str(uuid.uuid5(UUID_NAMESPACE, f"{coordinate.project}${coordinate.type}${coordinate.config_id}"))


def uuid_from_config_id(project: str, config_id: str) -> str:
    """UUID estável por projeto e config id, independente do tipo (automações)."""
    return str(uuid.uuid5(UUID_NAMESPACE, f"{project}${config_id}"))


def is_uuid(value: str) -> bool:
    try:
        parsed = uuid.UUID(value)
    except (ValueError, AttributeError, TypeError):
        return False
    return str(parsed) == value.lower()


def is_me_id(value: str) -> bool:
    """Reconhece ids de entidades monitoradas, como `APPLICATION-0123456789ABCDEF`."""
    return bool(_ME_ID.match(value or ""))


def bucket_name_for_coordinate(coordinate: Coordinate, *, sanitize: bool = False) -> str:
    """
    Nome de bucket gerado: `project_configid`.

    Com `sanitize=True`:
        - caracteres iniciais que não são letras minúsculas são removidos
        - caracteres na segunda posição que não são letras minúsculas ou dígitos são removidos
        - o resultado é limitado a 100 caracteres
    """
    name = f"{coordinate.project}_{coordinate.config_id}"
    if not sanitize:
        return name

    while name and not ("a" <= name[0] <= "z"):
        name = name[1:]
    while len(name) > 1 and not ("a" <= name[1] <= "z" or name[1].isdigit()):
        name = name[0] + name[2:]

    return name[:MAX_BUCKET_NAME_LENGTH]
