# src/monaco_deploy/core/settings/errors.py
"""
Exceções canônicas da camada de settings do monaco-deploy.

Este módulo define a hierarquia oficial de exceções utilizadas durante
o carregamento, a resolução e a validação dos settings de uma execução
de deploy.

Princípios fundamentais:
    - Exceções são tipadas e semânticas
    - Erros estruturais são tratados como falhas fatais
    - Mensagens de erro são claras e direcionadas ao operador

Invariantes:
    - Todas as exceções de settings herdam de `SettingsError`
    - Nenhuma exceção aqui representa falha de deploy de uma config

Este módulo existe para garantir clareza e previsibilidade
no tratamento de erros de settings.
"""


class SettingsError(Exception):
    """
    Exceção base para erros relacionados aos settings de deploy.

    Permite captura genérica de falhas de settings e a distinção clara
    entre erros de configuração da ferramenta e erros de deploy.
    """


class SettingsNotFoundError(SettingsError):
    """
    Exceção levantada quando o arquivo de settings base não existe.

    Decisões arquiteturais:
        - O arquivo base é obrigatório quando informado
        - Nenhum arquivo é criado ou inferido automaticamente
    """


class UnsupportedSettingsFormatError(SettingsError):
    """
    Exceção levantada quando o formato do arquivo não é suportado.

    Formatos suportados:
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidSettingsRootTypeError(SettingsError):
    """Conteúdo raiz do arquivo de settings não é um dicionário."""


class SettingsTypeConflictError(SettingsError):
    """
    Exceção levantada quando ocorre conflito de tipos durante o deep-merge.

    Exemplo de conflito:
        - base:     {"deploy": {"continue_on_error": false}}
        - override: {"deploy": "yes"}

    Limites explícitos:
        - Não realiza coerção de tipos
        - Não tenta resolver conflitos automaticamente
    """


class InvalidSettingsValueError(SettingsError):
    """Valor de settings com tipo ou faixa inválida (ex.: retries negativos)."""
