# src/monaco_deploy/core/graph/builder.py
"""
Construção e ordenação do grafo de dependências de um ambiente.

Cada config do ambiente é um nó. Para cada referência de parâmetro cujo
alvo também está no ambiente, existe uma aresta alvo → origem: a config
referenciada precisa ser implantada antes de quem a referencia.

Princípios fundamentais:
    - Um grafo por ambiente, construído a partir das configs validadas
    - A ordenação é determinística para a mesma entrada
    - Ciclos são reportados com as coordenadas envolvidas

Decisões arquiteturais:
    - Ordenação topológica via Kahn, com empates resolvidos pela ordem
      original de entrada das configs
    - Autorreferências (parâmetro apontando para a própria config) não
      geram aresta
    - Referências para coordenadas fora do ambiente não geram aresta; são
      registradas em log e falham mais tarde, na resolução
    - Componentes fracamente conexos podem ser ordenados de forma
      independente: um ciclo só bloqueia o componente em que ocorre

Invariantes:
    - Nenhuma config aparece antes das configs que ela referencia
    - Toda config de um componente acíclico aparece exatamente uma vez

Limites explícitos:
    - Não resolve parâmetros
    - Não executa deploys
    - Não decide política de erro (stop/continue)

Este módulo existe para garantir correção estrutural e previsibilidade
na ordem de deploy.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from monaco_deploy.core.exceptions import CyclicDependencyError
from monaco_deploy.core.model.config import Config
from monaco_deploy.core.model.coordinate import Coordinate


logger = logging.getLogger(__name__)


@dataclass
class DependencyGraph:
    """
    Grafo de dependências de um ambiente.

    Campos:
    - environment: nome do ambiente
    - configs: nós, na ordem original de entrada
    - dependencies: coordenada → coordenadas que ela referencia (no ambiente)
    - dependents: coordenada → coordenadas que a referenciam
    - unknown_references: (origem, alvo) para alvos fora do ambiente
    """

    environment: str
    configs: List[Config]
    dependencies: Dict[Coordinate, List[Coordinate]] = field(default_factory=dict)
    dependents: Dict[Coordinate, List[Coordinate]] = field(default_factory=dict)
    unknown_references: List[Tuple[Coordinate, Coordinate]] = field(default_factory=list)

    @property
    def coordinates(self) -> List[Coordinate]:
        return [c.coordinate for c in self.configs]

    def _position(self) -> Dict[Coordinate, int]:
        return {c.coordinate: i for i, c in enumerate(self.configs)}

    def edges(self) -> List[Tuple[Coordinate, Coordinate]]:
        """Arestas (alvo, origem), em ordem determinística."""
        pos = self._position()
        out: List[Tuple[Coordinate, Coordinate]] = []
        for target in self.coordinates:
            for source in sorted(self.dependents.get(target, []), key=pos.__getitem__):
                out.append((target, source))
        return out

    # ------------------------------------------------------------------
    # Ordenação
    # ------------------------------------------------------------------

    def _kahn(self, nodes: Sequence[Coordinate]) -> List[Coordinate]:
        pos = self._position()
        node_set = set(nodes)
        incoming: Dict[Coordinate, int] = {
            n: sum(1 for d in self.dependencies.get(n, []) if d in node_set) for n in nodes
        }

        ready: List[Coordinate] = sorted((n for n, c in incoming.items() if c == 0), key=pos.__getitem__)
        ordered: List[Coordinate] = []

        while ready:
            node = ready.pop(0)
            ordered.append(node)
            for child in self.dependents.get(node, []):
                if child not in node_set:
                    continue
                incoming[child] -= 1
                if incoming[child] == 0:
                    ready.append(child)
                    ready.sort(key=pos.__getitem__)

        return ordered

    def find_cycle(self, nodes: Optional[Iterable[Coordinate]] = None) -> Tuple[Coordinate, ...]:
        """
        Retorna um ciclo (origem → alvo → ... → origem) entre `nodes`, ou tupla vazia.

        A busca começa pelo primeiro nó na ordem de entrada e segue as
        referências, tornando o ciclo reportado determinístico.
        """
        pos = self._position()
        candidates = sorted(set(self.coordinates if nodes is None else nodes), key=pos.__getitem__)
        allowed = set(candidates)
        done: Set[Coordinate] = set()

        for start in candidates:
            if start in done:
                continue
            path: List[Coordinate] = [start]
            on_path: Set[Coordinate] = {start}
            stack: List[List[Coordinate]] = [
                [d for d in self.dependencies.get(start, []) if d in allowed]
            ]
            while stack:
                pending = stack[-1]
                if not pending:
                    stack.pop()
                    node = path.pop()
                    on_path.discard(node)
                    done.add(node)
                    continue
                nxt = pending.pop(0)
                if nxt in on_path:
                    return tuple(path[path.index(nxt):])
                if nxt in done:
                    continue
                path.append(nxt)
                on_path.add(nxt)
                stack.append([d for d in self.dependencies.get(nxt, []) if d in allowed])

        return ()

    def sorted_configs(self) -> List[Config]:
        """
        Ordena todas as configs do ambiente.

        Raises:
            CyclicDependencyError: Se o grafo contiver um ciclo.
        """
        ordered = self._kahn(self.coordinates)
        if len(ordered) != len(self.configs):
            remaining = [c for c in self.coordinates if c not in set(ordered)]
            raise self._cycle_error(remaining)

        by_coord = {c.coordinate: c for c in self.configs}
        return [by_coord[c] for c in ordered]

    def _cycle_error(self, remaining: Sequence[Coordinate]) -> CyclicDependencyError:
        cycle = self.find_cycle(remaining) or tuple(remaining)
        chain = " -> ".join(str(c) for c in cycle + cycle[:1])
        return CyclicDependencyError(
            message=f"cyclic dependency detected in environment {self.environment!r}: {chain}",
            cycle=cycle,
            environment=self.environment,
            details={"involved": [str(c) for c in remaining]},
        )

    # ------------------------------------------------------------------
    # Componentes
    # ------------------------------------------------------------------

    def components(self) -> List[List[Coordinate]]:
        """Componentes fracamente conexos, ordenados pelo primeiro nó na entrada."""
        seen: Set[Coordinate] = set()
        result: List[List[Coordinate]] = []
        pos = self._position()

        for start in self.coordinates:
            if start in seen:
                continue
            component: List[Coordinate] = []
            queue = [start]
            seen.add(start)
            while queue:
                node = queue.pop(0)
                component.append(node)
                for neighbour in self.dependencies.get(node, []) + self.dependents.get(node, []):
                    if neighbour not in seen:
                        seen.add(neighbour)
                        queue.append(neighbour)
            result.append(sorted(component, key=pos.__getitem__))

        return result

    def independently_sorted(self) -> "SortedComponents":
        """
        Ordena cada componente de forma independente.

        Componentes com ciclo geram um CyclicDependencyError e nenhuma de
        suas configs é agendada; os demais permanecem implantáveis.
        """
        by_coord = {c.coordinate: c for c in self.configs}
        sorted_components: List[List[Config]] = []
        errors: List[CyclicDependencyError] = []
        schedulable: List[Coordinate] = []

        for component in self.components():
            ordered = self._kahn(component)
            if len(ordered) != len(component):
                remaining = [c for c in component if c not in set(ordered)]
                errors.append(self._cycle_error(remaining))
                continue
            sorted_components.append([by_coord[c] for c in ordered])
            schedulable.extend(component)

        # global order across acyclic components, ties by input order
        ordered_all = [by_coord[c] for c in self._kahn(sorted(schedulable, key=self._position().__getitem__))]
        return SortedComponents(components=sorted_components, errors=errors, ordered=ordered_all)

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def to_dot(self) -> str:
        """Representação do grafo em notação DOT (Graphviz)."""
        lines = [f"digraph {json.dumps(self.environment or 'environment')} {{"]
        for coord in self.coordinates:
            lines.append(f"  {json.dumps(str(coord))};")
        for target, source in self.edges():
            lines.append(f"  {json.dumps(str(target))} -> {json.dumps(str(source))};")
        lines.append("}")
        return "\n".join(lines) + "\n"


@dataclass
class SortedComponents:
    """Componentes ordenados, erros de ciclo e a ordem global das configs agendáveis."""

    components: List[List[Config]]
    errors: List[CyclicDependencyError]
    ordered: List[Config] = field(default_factory=list)


def build_graph(
    environment: str,
    configs: Iterable[Config],
    *,
    ignore_skipped_configs: bool = False,
) -> DependencyGraph:
    """
    Constrói o grafo de dependências de um ambiente.

    Args:
        environment (str): Nome do ambiente.
        configs (Iterable[Config]): Configs do ambiente, na ordem de entrada.
        ignore_skipped_configs (bool): Exclui configs marcadas como skip do grafo.

    Returns:
        DependencyGraph: Grafo com arestas alvo → origem.

    Raises:
        ValueError: Se duas configs compartilharem a mesma coordenada.
    """
    nodes: List[Config] = []
    known: Set[Coordinate] = set()
    for config in configs:
        if ignore_skipped_configs and config.skip:
            continue
        if config.coordinate in known:
            raise ValueError(f"duplicate coordinate {config.coordinate} in environment {environment!r}")
        known.add(config.coordinate)
        nodes.append(config)

    graph = DependencyGraph(environment=environment, configs=nodes)
    for config in nodes:
        graph.dependencies.setdefault(config.coordinate, [])
        graph.dependents.setdefault(config.coordinate, [])

    for config in nodes:
        source = config.coordinate
        for target in config.referenced_coordinates():
            if target not in known:
                logger.warning(
                    "Configuration %s references unknown configuration %s in environment %s",
                    source,
                    target,
                    environment,
                )
                graph.unknown_references.append((source, target))
                continue
            if target not in graph.dependencies[source]:
                graph.dependencies[source].append(target)
                graph.dependents[target].append(source)

    return graph


def sort_configs(
    environment: str,
    configs: Iterable[Config],
    *,
    ignore_skipped_configs: bool = False,
) -> List[Config]:
    """Atalho: constrói o grafo e devolve a ordem topológica completa."""
    return build_graph(
        environment, configs, ignore_skipped_configs=ignore_skipped_configs
    ).sorted_configs()
