"""
PROJECT:
-------
selection-network

TITLE:
------
bridge_cluster_detector.py

MAIN OBJECTIVE:
---------------
This script detects clusters of entities held together by bridge pairs only, re-running the
community detector on a graph built from the strongest cross-group co-selections.

Dependencies:
-------------
- networkx
- numpy
- typing
- logging

MAIN FEATURES:
--------------
1) PMI threshold on bridge pairs (median by default)
2) Edge weights mixing normalized voter count and normalized PMI
3) Community detection on the bridge graph
4) Ranking of clusters by groups spanned times distinct supporting voters

Author:
-------
Antoine Lemor
"""

import networkx as nx
import numpy as np
from typing import Dict, List, Optional
import logging

from selection_network.core.constants import (
    DEFAULT_BRIDGE_MIN_CLUSTER_SIZE, DEFAULT_BRIDGE_MIN_EDGES, DEFAULT_RESOLUTION,
    DEFAULT_MAX_ITERATIONS, BRIDGE_VOTER_WEIGHT, BRIDGE_PMI_WEIGHT
)
from selection_network.core.models import BridgePair, BridgeCluster, Entity
from selection_network.detectors.community_detector import CommunityDetector

logger = logging.getLogger(__name__)


class BridgeClusterDetector:
    """
    Communities of the bridge graph.

    Edge weight = 0.6 * voters / max voters + 0.4 * pmi / max pmi, both maxima taken over the
    bridges that pass the PMI threshold.
    """

    def __init__(self,
                 min_size: int = DEFAULT_BRIDGE_MIN_CLUSTER_SIZE,
                 min_edges: int = DEFAULT_BRIDGE_MIN_EDGES,
                 pmi_threshold: Optional[float] = None,
                 resolution: float = DEFAULT_RESOLUTION,
                 max_iterations: int = DEFAULT_MAX_ITERATIONS):
        self.min_size = min_size
        self.min_edges = min_edges
        self.pmi_threshold = pmi_threshold
        self.detector = CommunityDetector(resolution, max_iterations)

    def resolve_threshold(self, bridges: List[BridgePair]) -> float:
        """Explicit threshold, or the median PMI of all bridges."""
        if self.pmi_threshold is not None:
            return self.pmi_threshold
        return float(np.median([b.pmi for b in bridges]))

    def build_graph(self, bridges: List[BridgePair]) -> nx.Graph:
        """
        Weighted graph of the bridges passing the PMI threshold.

        Args:
            bridges: Bridge pairs

        Returns:
            Undirected graph; each edge keeps its BridgePair under 'bridge'
        """
        G = nx.Graph()
        if not bridges:
            return G

        threshold = self.resolve_threshold(bridges)
        selected = [b for b in bridges if b.pmi >= threshold]
        if not selected:
            return G

        max_voters = max(b.voter_count for b in selected)
        max_pmi = max(b.pmi for b in selected)

        for bridge in selected:
            voter_score = bridge.voter_count / max_voters
            pmi_score = max(bridge.pmi, 0.0) / max_pmi if max_pmi > 0 else 0.0
            G.add_edge(
                bridge.entity_a.id, bridge.entity_b.id,
                weight=BRIDGE_VOTER_WEIGHT * voter_score + BRIDGE_PMI_WEIGHT * pmi_score,
                bridge=bridge
            )

        logger.debug(
            f"Bridge graph: {len(selected)}/{len(bridges)} bridges at PMI >= {threshold:.3f}"
        )
        return G

    def detect(self, bridges: List[BridgePair]) -> List[BridgeCluster]:
        """
        Detect bridge clusters.

        Args:
            bridges: Bridge pairs, e.g. from BridgeMetrics.compute_bridges()

        Returns:
            BridgeClusters sorted by group count x distinct voters, highest first
        """
        G = self.build_graph(bridges)
        partition = self.detector.detect(G)
        if partition.is_empty():
            return []

        entities: Dict[str, Entity] = {}
        for _, _, bridge in G.edges(data='bridge'):
            entities[bridge.entity_a.id] = bridge.entity_a
            entities[bridge.entity_b.id] = bridge.entity_b

        clusters = []
        for members in partition.communities().values():
            if len(members) < self.min_size:
                continue

            edges = [bridge for _, _, bridge in G.subgraph(members).edges(data='bridge')]
            if len(edges) < self.min_edges:
                continue

            voters = {voter.id for bridge in edges for voter in bridge.voters}
            group_tags = []
            for m in members:
                for tag in entities[m].group_tags:
                    if tag not in group_tags:
                        group_tags.append(tag)

            clusters.append(BridgeCluster(
                id=-1,
                members=[entities[m] for m in members],
                edges=sorted(edges, key=lambda b: b.pmi, reverse=True),
                total_voter_count=len(voters),
                avg_pmi=float(np.mean([b.pmi for b in edges])) if edges else 0.0,
                group_tags=group_tags
            ))

        clusters.sort(key=lambda c: c.support_score, reverse=True)
        for rank, cluster in enumerate(clusters):
            cluster.id = rank

        logger.info(f"Bridge clusters: {len(clusters)} kept from {partition.n_communities} communities")
        return clusters


def detect_bridge_clusters(bridges: List[BridgePair],
                           min_size: int = DEFAULT_BRIDGE_MIN_CLUSTER_SIZE,
                           min_edges: int = DEFAULT_BRIDGE_MIN_EDGES,
                           pmi_threshold: Optional[float] = None) -> List[BridgeCluster]:
    """Convenience wrapper around BridgeClusterDetector.detect()."""
    return BridgeClusterDetector(min_size, min_edges, pmi_threshold).detect(bridges)
