"""
PROJECT:
-------
selection-network

TITLE:
------
config.py

MAIN OBJECTIVE:
---------------
This script manages the configuration settings for the selection network framework, providing
centralized parameters for the analysis pipeline with environment variable overrides.

Dependencies:
-------------
- os
- dataclasses
- typing

MAIN FEATURES:
--------------
1) Central configuration dataclass for all analysis parameters
2) Environment variable integration for flexible deployment
3) Default values for all configuration parameters
4) Validation and dictionary conversion

Author:
-------
Antoine Lemor
"""

import os
from dataclasses import dataclass, field
from typing import Dict, Optional, Any
from selection_network.core.constants import *
from selection_network.core.exceptions import ConfigurationError


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


@dataclass
class AnalysisConfig:
    """
    Central configuration for the analysis pipeline.
    Individual entry points take explicit parameters; this object only feeds the pipeline.
    """

    # Community detection
    resolution: float = field(default_factory=lambda: float(os.getenv("SN_RESOLUTION", str(DEFAULT_RESOLUTION))))
    max_iterations: int = field(default_factory=lambda: int(os.getenv("SN_MAX_ITERATIONS", str(DEFAULT_MAX_ITERATIONS))))

    # Cluster filtering
    min_cluster_size: int = field(default_factory=lambda: int(os.getenv("SN_MIN_CLUSTER_SIZE", str(DEFAULT_MIN_CLUSTER_SIZE))))
    min_cluster_density: float = field(default_factory=lambda: float(os.getenv("SN_MIN_CLUSTER_DENSITY", str(DEFAULT_MIN_CLUSTER_DENSITY))))

    # Pairwise association
    pmi_min_count: int = DEFAULT_PMI_MIN_COUNT

    # Bridges
    bridge_min_voters: int = DEFAULT_BRIDGE_MIN_VOTERS
    bridge_pmi_threshold: Optional[float] = None  # None = median PMI of all bridges
    bridge_min_cluster_size: int = DEFAULT_BRIDGE_MIN_CLUSTER_SIZE
    bridge_min_edges: int = DEFAULT_BRIDGE_MIN_EDGES

    # Similarity
    similarity_min_common: int = DEFAULT_SIMILARITY_MIN_COMMON
    similarity_top_n: int = DEFAULT_SIMILARITY_TOP_N
    similarity_pairs_limit: int = DEFAULT_SIMILARITY_PAIRS_LIMIT

    # Output
    verbose: bool = field(default_factory=lambda: _env_flag("SN_VERBOSE", False))

    def validate(self) -> bool:
        """Validate configuration consistency."""
        if self.resolution <= 0:
            raise ConfigurationError(f"Resolution must be positive, got {self.resolution}")
        if self.max_iterations < 1:
            raise ConfigurationError(f"Iteration cap must be at least 1, got {self.max_iterations}")
        if self.min_cluster_size < 1:
            raise ConfigurationError(f"Minimum cluster size must be at least 1, got {self.min_cluster_size}")
        if not 0 <= self.min_cluster_density <= 1:
            raise ConfigurationError(
                f"Minimum cluster density must be between 0 and 1, got {self.min_cluster_density}"
            )
        for name in ('pmi_min_count', 'bridge_min_voters', 'bridge_min_cluster_size',
                     'similarity_min_common', 'similarity_top_n', 'similarity_pairs_limit'):
            if getattr(self, name) < 1:
                raise ConfigurationError(f"{name} must be at least 1, got {getattr(self, name)}")
        if self.bridge_min_edges < 0:
            raise ConfigurationError(f"bridge_min_edges must be non-negative, got {self.bridge_min_edges}")

        return True

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return {
            'communities': {
                'resolution': self.resolution,
                'max_iterations': self.max_iterations
            },
            'clusters': {
                'min_size': self.min_cluster_size,
                'min_density': self.min_cluster_density
            },
            'pmi': {
                'min_count': self.pmi_min_count
            },
            'bridges': {
                'min_voters': self.bridge_min_voters,
                'pmi_threshold': self.bridge_pmi_threshold,
                'min_cluster_size': self.bridge_min_cluster_size,
                'min_edges': self.bridge_min_edges
            },
            'similarity': {
                'min_common': self.similarity_min_common,
                'top_n': self.similarity_top_n,
                'pairs_limit': self.similarity_pairs_limit
            },
            'verbose': self.verbose
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AnalysisConfig':
        """Build configuration from the nested layout produced by to_dict()."""
        communities = data.get('communities', {})
        clusters = data.get('clusters', {})
        pmi = data.get('pmi', {})
        bridges = data.get('bridges', {})
        similarity = data.get('similarity', {})

        config = cls()
        config.resolution = communities.get('resolution', config.resolution)
        config.max_iterations = communities.get('max_iterations', config.max_iterations)
        config.min_cluster_size = clusters.get('min_size', config.min_cluster_size)
        config.min_cluster_density = clusters.get('min_density', config.min_cluster_density)
        config.pmi_min_count = pmi.get('min_count', config.pmi_min_count)
        config.bridge_min_voters = bridges.get('min_voters', config.bridge_min_voters)
        config.bridge_pmi_threshold = bridges.get('pmi_threshold', config.bridge_pmi_threshold)
        config.bridge_min_cluster_size = bridges.get('min_cluster_size', config.bridge_min_cluster_size)
        config.bridge_min_edges = bridges.get('min_edges', config.bridge_min_edges)
        config.similarity_min_common = similarity.get('min_common', config.similarity_min_common)
        config.similarity_top_n = similarity.get('top_n', config.similarity_top_n)
        config.similarity_pairs_limit = similarity.get('pairs_limit', config.similarity_pairs_limit)
        config.verbose = data.get('verbose', config.verbose)
        return config
