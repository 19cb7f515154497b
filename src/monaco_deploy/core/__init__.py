# src/monaco_deploy/core/__init__.py
"""
Core do monaco-deploy.

Contém o modelo de configs, a resolução de parâmetros, o grafo de
dependências e o engine de deploy. Nenhum módulo do core depende de
`report`.
"""
