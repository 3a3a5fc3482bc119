"""
PROJECT:
-------
selection-network

TITLE:
------
__init__.py (metrics module)

MAIN OBJECTIVE:
---------------
This script initializes the metrics module, providing access to the statistics computed directly
from the relation dataset: rarity, the weighted graph, PMI, bridges and similarity.

Dependencies:
-------------
- selection_network.metrics.rarity_metrics
- selection_network.metrics.weighted_graph_builder
- selection_network.metrics.association_metrics
- selection_network.metrics.bridge_metrics
- selection_network.metrics.similarity_metrics

MAIN FEATURES:
--------------
1) Exports RarityMetrics for IDF and incoming rankings
2) Exports WeightedGraphBuilder for graph construction
3) Exports AssociationMetrics and BridgeMetrics for pair rankings
4) Exports SimilarityMetrics for shared-selection groupings

Author:
-------
Antoine Lemor
"""

from selection_network.metrics.rarity_metrics import RarityMetrics, build_idf_map, power_mean
from selection_network.metrics.weighted_graph_builder import WeightedGraphBuilder, build_weighted_graph
from selection_network.metrics.association_metrics import AssociationMetrics, compute_pmi_ranking
from selection_network.metrics.bridge_metrics import BridgeMetrics, compute_bridges
from selection_network.metrics.similarity_metrics import SimilarityMetrics

__all__ = [
    'RarityMetrics',
    'build_idf_map',
    'power_mean',
    'WeightedGraphBuilder',
    'build_weighted_graph',
    'AssociationMetrics',
    'compute_pmi_ranking',
    'BridgeMetrics',
    'compute_bridges',
    'SimilarityMetrics'
]
