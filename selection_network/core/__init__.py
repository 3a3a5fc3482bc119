"""
PROJECT:
-------
selection-network

TITLE:
------
__init__.py (core module)

MAIN OBJECTIVE:
---------------
This script initializes the core module of the selection network framework, exposing the main
configuration, models and exceptions for use throughout the framework.

Dependencies:
-------------
- selection_network.core.config
- selection_network.core.models
- selection_network.core.exceptions

MAIN FEATURES:
--------------
1) Exports AnalysisConfig for configuration management
2) Exports all data models (Entity, RelationDataset, WeightedEdge, Cluster, etc.)
3) Exports the exception hierarchy
4) Provides clean API for core components

Author:
-------
Antoine Lemor
"""

from selection_network.core.config import AnalysisConfig
from selection_network.core.models import (
    Entity,
    RelationDataset,
    WeightedEdge,
    WeightedGraph,
    CommunityPartition,
    MemberRole,
    Cluster,
    PMIPair,
    BridgePair,
    BridgeCluster,
    CommonSelection,
    SimilarityGroup,
    SimilarityPair,
    IncomingStats,
    PartnerScore,
    EntityProfile,
    canonical_pair
)
from selection_network.core.exceptions import (
    SelectionNetworkError,
    ConfigurationError,
    DatasetError,
    GraphConstructionError,
    DetectionError
)

__all__ = [
    'AnalysisConfig',
    'Entity',
    'RelationDataset',
    'WeightedEdge',
    'WeightedGraph',
    'CommunityPartition',
    'MemberRole',
    'Cluster',
    'PMIPair',
    'BridgePair',
    'BridgeCluster',
    'CommonSelection',
    'SimilarityGroup',
    'SimilarityPair',
    'IncomingStats',
    'PartnerScore',
    'EntityProfile',
    'canonical_pair',
    'SelectionNetworkError',
    'ConfigurationError',
    'DatasetError',
    'GraphConstructionError',
    'DetectionError'
]
