# src/monaco_deploy/core/graph/__init__.py
"""
Grafo de dependências por ambiente: construção, ordenação topológica
determinística, detecção de ciclos e export DOT.
"""

from .builder import DependencyGraph, SortedComponents, build_graph, sort_configs

__all__ = ["DependencyGraph", "SortedComponents", "build_graph", "sort_configs"]
