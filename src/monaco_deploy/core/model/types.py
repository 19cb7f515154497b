# src/monaco_deploy/core/model/types.py
"""
Tipos de config — variante fechada (tagged union).

Cada config pertence exatamente a um dos tipos abaixo. O engine despacha
a estratégia de upsert por tipo em um único ponto (`deploy.engine`), e a
adição de um novo tipo exige uma nova estratégia registrada lá.

Variantes:
    - ClassicApiType(api)                         → API clássica de configuração
    - SettingsType(schema_id, schema_version)     → objeto Settings 2.0
    - AutomationType(resource)                    → workflow | business-calendar | scheduling-rule
    - DocumentType(kind, private)                 → dashboard | notebook | launchpad
    - BucketType()                                → bucket do Grail
    - OpenPipelineType(kind)                      → configuração de OpenPipeline

Também define `ClassicApi`, o descritor de uma API clássica, e o registro
`KNOWN_APIS` com os comportamentos que alteram a estratégia de upsert
(configuração única, nome não único, API filha de outra config).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Dict, Optional, Union


AUTOMATION_RESOURCES = ("workflow", "business-calendar", "scheduling-rule")
DOCUMENT_KINDS = ("dashboard", "notebook", "launchpad")


@dataclass(frozen=True)
class ClassicApi:
    """
    Descritor de uma API clássica.

    - single_configuration: a API expõe um único objeto por ambiente (sempre update)
    - non_unique_name: objetos podem compartilhar o mesmo nome (identidade por UUID)
    - parent: id da API pai, quando o objeto vive sob um objeto de outra API
    """

    id: str
    single_configuration: bool = False
    non_unique_name: bool = False
    parent: Optional[str] = None

    @property
    def has_parent(self) -> bool:
        return self.parent is not None


def _apis(*apis: ClassicApi) -> Dict[str, ClassicApi]:
    return {api.id: api for api in apis}


KNOWN_APIS: Dict[str, ClassicApi] = _apis(
    ClassicApi("alerting-profile", non_unique_name=True),
    ClassicApi("network-zone"),
    ClassicApi("management-zone"),
    ClassicApi("auto-tag"),
    ClassicApi("dashboard", non_unique_name=True),
    ClassicApi("dashboard-share-settings", parent="dashboard"),
    ClassicApi("notification"),
    ClassicApi("extension"),
    ClassicApi("extension-elasticsearch", single_configuration=True),
    ClassicApi("anomaly-detection-metrics", non_unique_name=True),
    ClassicApi("anomaly-detection-disks"),
    ClassicApi("synthetic-location"),
    ClassicApi("synthetic-monitor"),
    ClassicApi("application-web"),
    ClassicApi("application-mobile"),
    ClassicApi("app-detection-rule"),
    ClassicApi("aws-credentials"),
    ClassicApi("kubernetes-credentials"),
    ClassicApi("azure-credentials"),
    ClassicApi("request-attributes"),
    ClassicApi("calculated-metrics-service"),
    ClassicApi("calculated-metrics-log"),
    ClassicApi("calculated-metrics-application-mobile"),
    ClassicApi("calculated-metrics-synthetic"),
    ClassicApi("calculated-metrics-application-web"),
    ClassicApi("conditional-naming-processgroup"),
    ClassicApi("conditional-naming-host"),
    ClassicApi("conditional-naming-service"),
    ClassicApi("maintenance-window"),
    ClassicApi("request-naming-service", non_unique_name=True),
    ClassicApi("slo"),
    ClassicApi("credential-vault"),
    ClassicApi("failure-detection-parametersets"),
    ClassicApi("failure-detection-rules"),
    ClassicApi("reports"),
    ClassicApi("frequent-issue-detection", single_configuration=True),
    ClassicApi("data-privacy", single_configuration=True),
    ClassicApi("hosts-auto-update", single_configuration=True),
    ClassicApi("anomaly-detection-applications", single_configuration=True),
    ClassicApi("anomaly-detection-services", single_configuration=True),
    ClassicApi("service-resource-naming", single_configuration=True),
    ClassicApi("key-user-actions-mobile", parent="application-mobile"),
    ClassicApi("key-user-actions-web", parent="application-web"),
    ClassicApi("user-session-properties-mobile", parent="application-mobile"),
)


def classic_api(api_id: str) -> ClassicApi:
    """Retorna o descritor da API; ids desconhecidos usam o comportamento padrão (nome único)."""
    return KNOWN_APIS.get(api_id) or ClassicApi(api_id)


@dataclass(frozen=True)
class ClassicApiType:
    kind: ClassVar[str] = "classic"

    api: str

    @property
    def descriptor(self) -> ClassicApi:
        return classic_api(self.api)


@dataclass(frozen=True)
class SettingsType:
    kind: ClassVar[str] = "settings"

    schema_id: str
    schema_version: str = ""


@dataclass(frozen=True)
class AutomationType:
    kind: ClassVar[str] = "automation"

    resource: str

    def __post_init__(self) -> None:
        if self.resource not in AUTOMATION_RESOURCES:
            raise ValueError(f"unknown automation resource {self.resource!r}, expected one of {AUTOMATION_RESOURCES}")


@dataclass(frozen=True)
class DocumentType:
    kind: ClassVar[str] = "document"

    document_kind: str
    private: bool = False

    def __post_init__(self) -> None:
        if self.document_kind not in DOCUMENT_KINDS:
            raise ValueError(f"unknown document kind {self.document_kind!r}, expected one of {DOCUMENT_KINDS}")


@dataclass(frozen=True)
class BucketType:
    kind: ClassVar[str] = "bucket"


@dataclass(frozen=True)
class OpenPipelineType:
    kind: ClassVar[str] = "openpipeline"

    pipeline_kind: str


ConfigType = Union[
    ClassicApiType,
    SettingsType,
    AutomationType,
    DocumentType,
    BucketType,
    OpenPipelineType,
]
