# tests/conftest.py
"""
Fixtures compartilhados para testes do monaco-deploy.

Este módulo define fixtures reutilizáveis que fornecem:
- settings determinísticos, com esperas de retry zeradas
- clients em memória (sem rede)
- contexto de deploy controlado (DeployContext)
- uma fábrica de configs mínimas

O objetivo destas fixtures é permitir testes do core (parâmetros, grafo,
engine, estratégias e run controller) sem depender de:
- rede ou clients HTTP reais
- variáveis de ambiente do processo
- arquivos de projeto ou manifests

Decisões arquiteturais:
    - Fixtures são mantidas simples e explícitas
    - Dados retornados são determinísticos e isolados por teste
    - Imports do core são realizados de forma lazy para
      melhorar a clareza de erros durante falhas

Invariantes:
    - Nenhuma fixture faz chamadas remotas
    - Nenhuma fixture lê `os.environ`
    - Nenhuma fixture espera tempo real (retry com `wait_seconds=0`)

Limites explícitos:
    - Não substituir testes de integração
    - Não conter lógica condicional complexa

Este módulo existe como infraestrutura de teste e não
como validação funcional do engine.
"""

import pytest


# =====================================================
# Settings fixtures
# =====================================================

@pytest.fixture
def project_like_settings_defaults_yaml() -> str:
    """
    YAML de settings padrão semelhante ao uso real do projeto.

    Representa o conteúdo típico de um arquivo `deploy.defaults.yaml`,
    base canônica sobre a qual settings locais são aplicados via deep-merge.

    Invariantes:
        - YAML sintaticamente válido
        - Contém as três seções reconhecidas (deploy, features, retry)
    """
    return """
deploy:
  continue_on_error: false
  dry_run: false
  parallel_environments: false
  max_workers: 4
features:
  ignore_skipped_configs: false
  update_non_unique_by_name_if_single_one_exists: true
  sanitize_bucket_names: false
retry:
  short:
    max_retries: 3
    wait_seconds: 2
  very_long:
    max_retries: 5
    wait_seconds: 15
""".lstrip()


@pytest.fixture
def project_like_settings_local_yaml() -> str:
    """
    YAML de overrides locais.

    Altera apenas a política de erro e o orçamento do tier `short`,
    permitindo validar que chaves não sobrescritas são preservadas.
    """
    return """
deploy:
  continue_on_error: true
retry:
  short:
    wait_seconds: 0.5
""".lstrip()


@pytest.fixture
def fast_settings():
    """
    Fábrica de DeploySettings sem espera real de retry.

    Todos os tiers mantêm `max_retries=2` e `wait_seconds=0`, o que
    permite exercitar a política de retry de forma determinística e rápida.
    Argumentos nomeados são repassados a `DeploySettings`.
    """
    from monaco_deploy.core.settings import DeploySettings, RetrySetting, RetrySettings

    zero = RetrySetting(max_retries=2, wait_seconds=0)
    retry = RetrySettings(short=zero, normal=zero, long=zero, very_long=zero)

    def _make(**kwargs):
        kwargs.setdefault("retry", retry)
        return DeploySettings(**kwargs)

    return _make


# =====================================================
# Deploy fixtures
# =====================================================

@pytest.fixture
def clients():
    """ClientSet completo em memória."""
    from monaco_deploy.core.clients import in_memory_client_set

    return in_memory_client_set()


@pytest.fixture
def ctx(fast_settings):
    """DeployContext do ambiente `test-env` com settings rápidos."""
    from monaco_deploy.core.deploy.context import DeployContext

    return DeployContext.new(environment="test-env", settings=fast_settings(), run_id="run-test")


@pytest.fixture
def make_config():
    """
    Fábrica de configs mínimas.

    Padrões:
        - projeto `proj`
        - tipo clássico `management-zone` (API de nome único)
        - template `{"name": "{{ name }}"}`
        - parâmetro `name` literal igual ao config id

    Decisões arquiteturais:
        - A coordenada é derivada do tipo (`type.api`, `schema_id`, etc.)
        - `parameters=None` aplica o parâmetro `name` padrão; `{}` não declara nenhum
    """
    from monaco_deploy.core.model import (
        AutomationType,
        BucketType,
        ClassicApiType,
        Config,
        Coordinate,
        DocumentType,
        OpenPipelineType,
        SettingsType,
        Template,
    )
    from monaco_deploy.core.parameter import ValueParameter

    def _type_name(config_type) -> str:
        if isinstance(config_type, ClassicApiType):
            return config_type.api
        if isinstance(config_type, SettingsType):
            return config_type.schema_id
        if isinstance(config_type, AutomationType):
            return config_type.resource
        if isinstance(config_type, DocumentType):
            return config_type.document_kind
        if isinstance(config_type, BucketType):
            return "bucket"
        if isinstance(config_type, OpenPipelineType):
            return "openpipeline"
        raise TypeError(config_type)

    def _make(
        config_id,
        *,
        config_type=None,
        project="proj",
        parameters=None,
        template='{"name": "{{ name }}"}',
        skip=False,
        origin_object_id="",
    ):
        config_type = config_type or ClassicApiType("management-zone")
        if parameters is None:
            parameters = {"name": ValueParameter(config_id)}
        return Config(
            coordinate=Coordinate(project, _type_name(config_type), config_id),
            type=config_type,
            template=Template(id=f"{config_id}.json", content=template),
            parameters=parameters,
            skip=skip,
            environment="test-env",
            origin_object_id=origin_object_id,
        )

    return _make
