"""
PROJECT:
-------
selection-network

TITLE:
------
community_detector.py

MAIN OBJECTIVE:
---------------
This script detects communities in any weighted undirected graph with a single-level greedy
modularity optimization (the local-moving phase of Louvain), without super-node aggregation.

Dependencies:
-------------
- networkx
- community (python-louvain)
- dataclasses
- typing
- logging

MAIN FEATURES:
--------------
1) Index-addressed node arena (neighbors, strength, community) built once per run
2) Greedy local moves with a resolution parameter and an iteration cap
3) Deterministic tie-breaking (first candidate in node/neighbor insertion order)
4) Modularity of the resulting partition via python-louvain

Author:
-------
Antoine Lemor
"""

import networkx as nx
import community as community_louvain
from dataclasses import dataclass
from typing import Dict, List, Tuple
import logging

from selection_network.core.constants import DEFAULT_RESOLUTION, DEFAULT_MAX_ITERATIONS
from selection_network.core.exceptions import DetectionError
from selection_network.core.models import CommunityPartition

logger = logging.getLogger(__name__)


@dataclass
class NodeArena:
    """
    Per-node state addressed by a stable integer index.

    Every list has one slot per node, so a node cannot exist in one map and be missing in
    another. Community ids start as node indices, hence `community_weight` has one slot per
    node as well.
    """
    ids: List[str]
    neighbors: List[List[Tuple[int, float]]]
    strength: List[float]
    community: List[int]
    community_weight: List[float]

    @classmethod
    def from_graph(cls, graph: nx.Graph) -> 'NodeArena':
        ids = list(graph.nodes())
        index = {node: i for i, node in enumerate(ids)}
        neighbors = []
        strength = []

        for node in ids:
            links = []
            for other, data in graph.adj[node].items():
                if other == node:
                    continue
                weight = float(data.get('weight', 1.0))
                if weight < 0:
                    raise DetectionError(f"Negative edge weight between {node} and {other}")
                links.append((index[other], weight))
            neighbors.append(links)
            strength.append(sum(w for _, w in links))

        return cls(
            ids=ids,
            neighbors=neighbors,
            strength=strength,
            community=list(range(len(ids))),
            community_weight=list(strength)
        )

    def __len__(self) -> int:
        return len(self.ids)

    def move(self, node: int, target: int) -> None:
        current = self.community[node]
        self.community_weight[current] -= self.strength[node]
        self.community_weight[target] += self.strength[node]
        self.community[node] = target


class CommunityDetector:
    """
    Single-level greedy modularity optimization.

    Each pass visits every node in order and moves it to the neighbouring community with the
    largest positive gain:

        delta = resolution * (k_i,T - k_i,C - k_i * (Sigma_T - Sigma_C + k_i) / (2m))

    where k_i,X is the weight from the node into community X (excluding itself), Sigma_X the
    total strength of X (Sigma_C includes the node) and m the total edge weight. Passes repeat
    until none moves a node or the iteration cap is hit.

    There is no aggregation into super-nodes: the result is a local optimum of the first
    Louvain level only.
    """

    def __init__(self,
                 resolution: float = DEFAULT_RESOLUTION,
                 max_iterations: int = DEFAULT_MAX_ITERATIONS):
        if resolution <= 0:
            raise DetectionError(f"Resolution must be positive, got {resolution}")
        if max_iterations < 1:
            raise DetectionError(f"Iteration cap must be at least 1, got {max_iterations}")
        self.resolution = resolution
        self.max_iterations = max_iterations

    def detect(self, graph: nx.Graph) -> CommunityPartition:
        """
        Detect communities.

        Args:
            graph: Undirected graph with a 'weight' edge attribute (default 1.0)

        Returns:
            CommunityPartition with communities renumbered 0..k-1 in node order
        """
        if graph.is_directed():
            raise DetectionError("Community detection expects an undirected graph")
        if graph.number_of_nodes() == 0 or graph.number_of_edges() == 0:
            return CommunityPartition()

        arena = NodeArena.from_graph(graph)
        two_m = sum(arena.strength)
        if two_m <= 0:
            return CommunityPartition()

        total_moves = 0
        moves = 0
        iterations = 0

        for iterations in range(1, self.max_iterations + 1):
            moves = self._run_pass(arena, two_m)
            total_moves += moves
            if moves == 0:
                break

        assignments = self._renumber(arena)
        partition = CommunityPartition(
            assignments=assignments,
            iterations=iterations,
            moves=total_moves,
            converged=moves == 0,
            modularity=community_louvain.modularity(assignments, graph, weight='weight')
        )

        if not partition.converged:
            logger.warning(f"Community detection stopped at the iteration cap ({self.max_iterations})")
        logger.debug(
            f"Detected {partition.n_communities} communities in {iterations} passes "
            f"with modularity {partition.modularity:.3f}"
        )
        return partition

    def _run_pass(self, arena: NodeArena, two_m: float) -> int:
        moves = 0

        for node in range(len(arena)):
            current = arena.community[node]
            k_i = arena.strength[node]

            # Insertion order of this dict fixes the tie-break order
            links: Dict[int, float] = {}
            for other, weight in arena.neighbors[node]:
                target = arena.community[other]
                links[target] = links.get(target, 0.0) + weight

            k_i_current = links.get(current, 0.0)
            best, best_delta = current, 0.0

            for target, k_i_target in links.items():
                if target == current:
                    continue
                delta = self.resolution * (
                    k_i_target - k_i_current
                    - k_i * (arena.community_weight[target] - arena.community_weight[current] + k_i) / two_m
                )
                if delta > best_delta:
                    best, best_delta = target, delta

            if best != current:
                arena.move(node, best)
                moves += 1

        return moves

    @staticmethod
    def _renumber(arena: NodeArena) -> Dict[str, int]:
        labels: Dict[int, int] = {}
        assignments = {}
        for node, community in enumerate(arena.community):
            if community not in labels:
                labels[community] = len(labels)
            assignments[arena.ids[node]] = labels[community]
        return assignments


def detect_communities(graph: nx.Graph,
                       resolution: float = DEFAULT_RESOLUTION,
                       max_iterations: int = DEFAULT_MAX_ITERATIONS) -> CommunityPartition:
    """Convenience wrapper around CommunityDetector.detect()."""
    return CommunityDetector(resolution, max_iterations).detect(graph)
