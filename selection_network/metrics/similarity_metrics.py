"""
PROJECT:
-------
selection-network

TITLE:
------
similarity_metrics.py

MAIN OBJECTIVE:
---------------
This script groups choosers by the selections they share, either around a focal entity or across
the whole dataset, and ranks the groupings by overlap size and aggregate rarity.

Dependencies:
-------------
- numpy
- typing
- collections
- logging

MAIN FEATURES:
--------------
1) Similarity groups around a focal entity keyed by exact common-selection signature
2) Arithmetic and power-mean aggregate rarity of the common selections
3) Group filtering by required common selections
4) Dataset-wide similarity pairs ranked by the rarity of what they share

Author:
-------
Antoine Lemor
"""

import numpy as np
from typing import Dict, List, Optional, Tuple, Iterable
from collections import defaultdict
import logging

from selection_network.core.constants import (
    DEFAULT_SIMILARITY_MIN_COMMON, DEFAULT_SIMILARITY_TOP_N,
    DEFAULT_SIMILARITY_PAIRS_LIMIT, POWER_MEAN_EXPONENT
)
from selection_network.core.exceptions import ConfigurationError
from selection_network.core.models import (
    RelationDataset, CommonSelection, SimilarityGroup, SimilarityPair, canonical_pair
)
from selection_network.metrics.rarity_metrics import RarityMetrics, power_mean

logger = logging.getLogger(__name__)


def _check_min_common(min_common: int) -> None:
    if min_common < 1:
        raise ConfigurationError(f"min_common must be at least 1, got {min_common}")


class SimilarityMetrics:
    """
    Similarity of choosers through shared selections.

    Two choosers are similar when their selection lists share at least `min_common` entities;
    sharing rare entities (high IDF) counts for more than sharing popular ones.
    """

    def __init__(self,
                 dataset: RelationDataset,
                 idf_map: Optional[Dict[str, float]] = None):
        self.dataset = dataset
        self.idf_map = idf_map if idf_map is not None else RarityMetrics(dataset).build_idf_map()

    def _common_selections(self, ids: Iterable[str]) -> List[CommonSelection]:
        return [
            CommonSelection(entity=self.dataset.entity(i), idf=self.idf_map.get(i, 0.0))
            for i in ids
        ]

    def compute_similarity_groups(self,
                                  focal_id: str,
                                  min_common: int = DEFAULT_SIMILARITY_MIN_COMMON,
                                  top_n: int = DEFAULT_SIMILARITY_TOP_N) -> List[SimilarityGroup]:
        """
        Group the choosers that share selections with a focal entity.

        Choosers sharing exactly the same common selections form one group.

        Args:
            focal_id: Entity whose selections are compared
            min_common: Minimum number of shared selections
            top_n: Maximum number of groups returned

        Returns:
            Groups sorted by common count, then average IDF, highest first
        """
        _check_min_common(min_common)
        focal_selections = self.dataset.selections_of(focal_id)
        if len(focal_selections) < min_common:
            return []

        signatures: Dict[Tuple[str, ...], List[str]] = defaultdict(list)
        for chooser_id, target_ids in self.dataset.iter_selections():
            if chooser_id == focal_id or not target_ids:
                continue
            chosen = set(target_ids)
            common = tuple(t for t in focal_selections if t in chosen)
            if len(common) >= min_common:
                signatures[common].append(chooser_id)

        groups = []
        for common, member_ids in signatures.items():
            selections = self._common_selections(common)
            groups.append(SimilarityGroup(
                common_selections=selections,
                members=[self.dataset.entity(m) for m in member_ids],
                avg_idf=float(np.mean([c.idf for c in selections]))
            ))

        groups.sort(key=lambda g: (g.common_count, g.avg_idf), reverse=True)
        return groups[:top_n]

    def filter_groups(self,
                      groups: List[SimilarityGroup],
                      required_ids: Iterable[str],
                      p: float = POWER_MEAN_EXPONENT) -> Tuple[List[SimilarityGroup], Optional[float]]:
        """
        Keep the groups whose common selections contain every required id.

        Args:
            groups: Groups from compute_similarity_groups()
            required_ids: Selections that must all be shared
            p: Power mean exponent for the rarity of the required selections

        Returns:
            (filtered groups, power mean IDF of the required ids or None when nothing is required)
        """
        required = list(dict.fromkeys(required_ids))
        if not required:
            return list(groups), None

        filtered = [g for g in groups if set(required).issubset(g.common_ids())]
        rarity = power_mean([self.idf_map.get(i, 0.0) for i in required], p)
        return filtered, rarity

    def compute_similarity_pairs(self,
                                 min_common: int = DEFAULT_SIMILARITY_MIN_COMMON,
                                 limit: int = DEFAULT_SIMILARITY_PAIRS_LIMIT) -> List[SimilarityPair]:
        """
        Every pair of choosers sharing at least `min_common` selections.

        rare_score is the summed IDF of the shared selections.

        Args:
            min_common: Minimum number of shared selections
            limit: Maximum number of pairs returned

        Returns:
            Pairs sorted by rare score, then common count, highest first
        """
        _check_min_common(min_common)
        selected_by = defaultdict(list)
        for chooser_id, target_id in self.dataset.iter_relations():
            selected_by[target_id].append(chooser_id)

        shared_counts = defaultdict(int)
        for choosers in selected_by.values():
            for i in range(len(choosers)):
                for j in range(i + 1, len(choosers)):
                    shared_counts[canonical_pair(choosers[i], choosers[j])] += 1

        pairs = []
        for (id_a, id_b), count in shared_counts.items():
            if count < min_common:
                continue
            chosen_b = set(self.dataset.selections_of(id_b))
            common = [t for t in self.dataset.selections_of(id_a) if t in chosen_b]
            selections = self._common_selections(common)
            pairs.append(SimilarityPair(
                entity_a=self.dataset.entity(id_a),
                entity_b=self.dataset.entity(id_b),
                common_selections=selections,
                rare_score=sum(c.idf for c in selections)
            ))

        pairs.sort(key=lambda p: (p.rare_score, p.common_count), reverse=True)
        logger.info(f"Similarity pairs: {len(pairs)} found, keeping {min(len(pairs), limit)}")
        return pairs[:limit]
