"""
PROJECT:
-------
selection-network

TITLE:
------
weighted_graph_builder.py

MAIN OBJECTIVE:
---------------
This script builds the undirected weighted selection graph: every directed selection is folded
into one canonical edge carrying its directionality and an IDF-informed weight.

Dependencies:
-------------
- networkx
- typing
- logging

MAIN FEATURES:
--------------
1) Canonical deduplication of directed selections into undirected edges
2) Directionality detection (one-way vs mutual)
3) IDF weighting driven by the selected party, with a floor for popular entities
4) Export to networkx for community detection

Author:
-------
Antoine Lemor
"""

import networkx as nx
from typing import Dict, List, Optional, Any
import logging

from selection_network.core.constants import (
    IDF_WEIGHT_FLOOR, MUTUAL_EDGE_MULTIPLIER, ONE_WAY_EDGE_MULTIPLIER
)
from selection_network.core.models import (
    RelationDataset, WeightedEdge, WeightedGraph, canonical_pair
)
from selection_network.metrics.rarity_metrics import RarityMetrics

logger = logging.getLogger(__name__)


class WeightedGraphBuilder:
    """
    Builds the weighted undirected graph of the selection relation.

    Weighting:
    - mutual edge (both directions exist): 2 x max(floor, mean(idf(a), idf(b)))
    - one-way edge: 1 x max(floor, idf(selected))

    DETERMINISTIC: edges are emitted in the order their first directed relation is met.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize the WeightedGraphBuilder.

        Args:
            config: Configuration dictionary
        """
        self.config = config or {}
        self.config.setdefault('weight_floor', IDF_WEIGHT_FLOOR)

        logger.debug(f"WeightedGraphBuilder initialized with config: {self.config}")

    def build(self,
              dataset: RelationDataset,
              idf_map: Optional[Dict[str, float]] = None) -> WeightedGraph:
        """
        Build the weighted graph.

        Args:
            dataset: Relation dataset
            idf_map: Precomputed IDF map (computed from the dataset when omitted)

        Returns:
            WeightedGraph with deduplicated edges and the full IDF map
        """
        if idf_map is None:
            idf_map = RarityMetrics(dataset).build_idf_map()

        floor = self.config['weight_floor']
        edges: List[WeightedEdge] = []
        seen = set()

        for source_id, target_id in dataset.iter_relations():
            key = canonical_pair(source_id, target_id)
            if key in seen:
                continue
            seen.add(key)

            if dataset.has_relation(target_id, source_id):
                mean_idf = (idf_map.get(source_id, 0.0) + idf_map.get(target_id, 0.0)) / 2
                edge = WeightedEdge(key[0], key[1], 2, MUTUAL_EDGE_MULTIPLIER * max(floor, mean_idf))
            else:
                weight = ONE_WAY_EDGE_MULTIPLIER * max(floor, idf_map.get(target_id, 0.0))
                edge = WeightedEdge(key[0], key[1], 1, weight)
            edges.append(edge)

        graph = WeightedGraph(edges=edges, idf_map=dict(idf_map))
        stats = graph.get_statistics()
        logger.info(
            f"Weighted graph built: {stats['n_nodes']} nodes, {stats['n_edges']} edges "
            f"({stats['n_mutual_edges']} mutual)"
        )
        return graph

    def build_networkx(self, dataset: RelationDataset) -> nx.Graph:
        """Build the weighted graph directly as a networkx graph."""
        return self.build(dataset).to_networkx()


def build_weighted_graph(dataset: RelationDataset) -> WeightedGraph:
    """Convenience wrapper with default weighting."""
    return WeightedGraphBuilder().build(dataset)
