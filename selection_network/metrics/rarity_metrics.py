"""
PROJECT:
-------
selection-network

TITLE:
------
rarity_metrics.py

MAIN OBJECTIVE:
---------------
This script computes rarity statistics of the selection relation: how many choosers exist, how
often each entity is selected, and the inverse selection frequency (IDF) derived from both.

Dependencies:
-------------
- numpy
- typing
- collections
- logging
- math

MAIN FEATURES:
--------------
1) Total voter and incoming-selection counts
2) IDF per entity (0 for entities nobody selects)
3) Incoming-selection ranking with per-group breakdown of the choosers
4) Power mean helper for aggregate rarity filters

Author:
-------
Antoine Lemor
"""

import math
import numpy as np
from typing import Dict, List, Iterable
from collections import defaultdict, Counter
import logging

from selection_network.core.models import RelationDataset, IncomingStats

logger = logging.getLogger(__name__)


def power_mean(values: Iterable[float], p: float = 3) -> float:
    """
    Power (generalized) mean: (mean(v^p))^(1/p).

    Args:
        values: Non-negative values
        p: Exponent; p=1 is the arithmetic mean, larger p leans towards the maximum

    Returns:
        Power mean, 0.0 for an empty input
    """
    arr = np.asarray(list(values), dtype=float)
    if arr.size == 0:
        return 0.0
    return float(np.mean(arr ** p) ** (1.0 / p))


class RarityMetrics:
    """
    Rarity of being selected.

    idf(e) = log2(total_voters / incoming_count(e)), where total_voters counts entities with
    at least one selection. Entities never selected carry no information and get 0.
    """

    def __init__(self, dataset: RelationDataset):
        self.dataset = dataset
        self._cache = {}

    @property
    def total_voters(self) -> int:
        if 'total_voters' not in self._cache:
            self._cache['total_voters'] = len(self.dataset.choosers())
        return self._cache['total_voters']

    def incoming_counts(self) -> Dict[str, int]:
        """Number of times each entity appears as a target."""
        if 'incoming' not in self._cache:
            counts = Counter()
            for _, target_id in self.dataset.iter_relations():
                counts[target_id] += 1
            self._cache['incoming'] = dict(counts)
        return self._cache['incoming']

    def incoming_count(self, entity_id: str) -> int:
        return self.incoming_counts().get(entity_id, 0)

    def idf(self, entity_id: str) -> float:
        return self.build_idf_map().get(entity_id, 0.0)

    def build_idf_map(self) -> Dict[str, float]:
        """
        IDF for every known entity.

        Returns:
            Dictionary entity id -> idf
        """
        if 'idf' in self._cache:
            return self._cache['idf']

        total_voters = self.total_voters
        incoming = self.incoming_counts()
        idf_map = {}

        for entity_id in self.dataset.entity_ids():
            count = incoming.get(entity_id, 0)
            if count > 0 and total_voters > 0:
                idf_map[entity_id] = math.log2(total_voters / count)
            else:
                idf_map[entity_id] = 0.0

        logger.debug(f"IDF computed for {len(idf_map)} entities over {total_voters} voters")
        self._cache['idf'] = idf_map
        return idf_map

    def compute_incoming_stats(self) -> List[IncomingStats]:
        """
        Rank selected entities by how often they are selected.

        Returns:
            IncomingStats sorted by count, highest first
        """
        known_tags = self.dataset.group_tags()

        by_group = defaultdict(Counter)
        for source_id, target_id in self.dataset.iter_relations():
            for tag in self.dataset.entity(source_id).group_tags:
                by_group[target_id][tag] += 1

        stats = []
        for entity_id, count in self.incoming_counts().items():
            breakdown = {tag: by_group[entity_id].get(tag, 0) for tag in known_tags}
            stats.append(IncomingStats(
                entity=self.dataset.entity(entity_id),
                count=count,
                by_group=breakdown
            ))

        stats.sort(key=lambda s: s.count, reverse=True)
        return stats


def build_idf_map(dataset: RelationDataset) -> Dict[str, float]:
    """Convenience wrapper around RarityMetrics.build_idf_map()."""
    return RarityMetrics(dataset).build_idf_map()
