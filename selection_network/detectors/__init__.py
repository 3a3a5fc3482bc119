"""
PROJECT:
-------
selection-network

TITLE:
------
__init__.py (detectors module)

MAIN OBJECTIVE:
---------------
This script initializes the detectors module, exposing community detection over weighted graphs,
cluster post-processing and bridge cluster detection.

Dependencies:
-------------
- selection_network.detectors.community_detector
- selection_network.detectors.cluster_postprocessor
- selection_network.detectors.bridge_cluster_detector

MAIN FEATURES:
--------------
1) Exports CommunityDetector (single-level greedy modularity)
2) Exports ClusterPostProcessor and detect_clusters
3) Exports BridgeClusterDetector

Author:
-------
Antoine Lemor
"""

from selection_network.detectors.community_detector import CommunityDetector, NodeArena, detect_communities
from selection_network.detectors.cluster_postprocessor import ClusterPostProcessor, detect_clusters
from selection_network.detectors.bridge_cluster_detector import BridgeClusterDetector, detect_bridge_clusters

__all__ = [
    'CommunityDetector',
    'NodeArena',
    'detect_communities',
    'ClusterPostProcessor',
    'detect_clusters',
    'BridgeClusterDetector',
    'detect_bridge_clusters'
]
