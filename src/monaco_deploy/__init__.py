# src/monaco_deploy/__init__.py
"""
monaco-deploy — engine de deploy de configurações declarativas.

Este pacote raiz define o namespace público do monaco-deploy: um engine
que recebe configs já carregadas (coordenada, tipo, template e parâmetros),
resolve suas dependências e as implanta, em ordem, em um ou mais ambientes
remotos.

Princípios centrais:
    - As configs de um ambiente formam um DAG explícito de dependências
    - A ordem de deploy é determinística e reprodutível
    - Settings, resolução de parâmetros, deploy e relatório são
      responsabilidades separadas
    - Falhas são acumuladas com sua coordenada, nunca engolidas

Arquitetura em alto nível:
    - core.settings   → carregamento, merge, validação e hashing de settings
    - core.model      → coordenadas, tipos, configs e EntityMap
    - core.parameter  → parâmetros e resolução de propriedades
    - core.graph      → grafo de dependências, ordenação e ciclos
    - core.deploy     → engine por config, retry, estratégias e run controller
    - core.clients    → protocolos de clients e implementações em memória
    - report          → resumo tabular e report.md de uma execução

Limites explícitos:
    - Não lê projetos/manifests do disco
    - Não implementa clients HTTP reais
    - Não remove configs remotas
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
