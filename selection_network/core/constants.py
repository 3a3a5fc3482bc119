"""
PROJECT:
-------
selection-network

TITLE:
------
constants.py

MAIN OBJECTIVE:
---------------
This script defines global constants used throughout the selection network framework, including
weighting floors, community detection defaults, clustering thresholds and ranking caps.

Dependencies:
-------------
None

MAIN FEATURES:
--------------
1) Rarity weighting constants (IDF floor)
2) Community detection defaults (resolution, iteration cap)
3) Cluster filtering thresholds
4) Association and bridge scoring defaults
5) Similarity grouping defaults

Author:
-------
Antoine Lemor
"""

# Rarity weighting
# Minimum IDF contribution of an edge, so that edges between very popular
# entities still carry weight
IDF_WEIGHT_FLOOR = 0.1
MUTUAL_EDGE_MULTIPLIER = 2.0
ONE_WAY_EDGE_MULTIPLIER = 1.0

# Community detection (single-level greedy modularity)
DEFAULT_RESOLUTION = 1.0
DEFAULT_MAX_ITERATIONS = 100

# Cluster post-processing
DEFAULT_MIN_CLUSTER_SIZE = 3
DEFAULT_MIN_CLUSTER_DENSITY = 0.3
DOMINANT_TAG_COUNT = 2
ROLE_CORE = 'core'
ROLE_PERIPHERAL = 'peripheral'

# Pairwise association (PMI)
DEFAULT_PMI_MIN_COUNT = 2

# Bridges
DEFAULT_BRIDGE_MIN_VOTERS = 2
DEFAULT_BRIDGE_MIN_CLUSTER_SIZE = 3
DEFAULT_BRIDGE_MIN_EDGES = 2
BRIDGE_VOTER_WEIGHT = 0.6
BRIDGE_PMI_WEIGHT = 0.4

# Similarity
DEFAULT_SIMILARITY_MIN_COMMON = 2
DEFAULT_SIMILARITY_TOP_N = 20
DEFAULT_SIMILARITY_PAIRS_LIMIT = 2000
POWER_MEAN_EXPONENT = 3

# Pair enumeration is quadratic in the length of a chooser's list
LARGE_SELECTION_WARNING = 200

# Accepted keys for group tags in loader output
GROUP_TAG_KEYS = ('group_tags', 'groups', 'brand')
