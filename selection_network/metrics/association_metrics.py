"""
PROJECT:
-------
selection-network

TITLE:
------
association_metrics.py

MAIN OBJECTIVE:
---------------
This script scores the association strength of directly linked pairs with pointwise mutual
information (PMI), highlighting pairs that select each other more than their popularity predicts.

Dependencies:
-------------
- math
- typing
- collections
- logging

MAIN FEATURES:
--------------
1) Pair observation counts over both selection directions
2) Appearance counts per entity (as chooser and as target)
3) PMI ranking with cross-group flagging
4) Symmetric single-pair scoring and per-entity mutual pair lookup

Author:
-------
Antoine Lemor
"""

import math
from typing import Dict, List, Optional, Tuple
from collections import Counter
import logging

from selection_network.core.constants import DEFAULT_PMI_MIN_COUNT
from selection_network.core.models import RelationDataset, PMIPair, canonical_pair

logger = logging.getLogger(__name__)


class AssociationMetrics:
    """
    PMI over direct selections.

    PMI = log2(P(A,B) / (P(A) * P(B)))
    - P(A,B) = observations of the pair / total observations
    - P(A)   = appearances of A / (N * average observations per entity)

    A chooser appears once per entity it selects; a target appears once per time it is
    selected. High PMI = the pair occurs together more than expected.
    """

    def __init__(self, dataset: RelationDataset):
        self.dataset = dataset
        self._pair_counts: Optional[Dict[Tuple[str, str], int]] = None
        self._appearances: Optional[Dict[str, int]] = None

    def pair_counts(self) -> Dict[Tuple[str, str], int]:
        """Directed relations per canonical pair (1 or 2)."""
        if self._pair_counts is None:
            counts = Counter()
            for source_id, target_id in self.dataset.iter_relations():
                counts[canonical_pair(source_id, target_id)] += 1
            self._pair_counts = dict(counts)
        return self._pair_counts

    def appearance_counts(self) -> Dict[str, int]:
        if self._appearances is None:
            appearances = Counter()
            for source_id, target_ids in self.dataset.iter_selections():
                appearances[source_id] += len(target_ids)
                for target_id in target_ids:
                    appearances[target_id] += 1
            self._appearances = dict(appearances)
        return self._appearances

    @property
    def total_cooccurrences(self) -> int:
        return sum(self.pair_counts().values())

    def _pmi(self, id_a: str, id_b: str, count: int) -> float:
        total = self.total_cooccurrences
        n_entities = len(self.dataset)
        if total == 0 or n_entities == 0:
            return 0.0

        avg_per_entity = total / n_entities
        appearances = self.appearance_counts()
        p_ab = count / total
        p_a = appearances.get(id_a, 0) / (n_entities * avg_per_entity)
        p_b = appearances.get(id_b, 0) / (n_entities * avg_per_entity)

        if p_a == 0 or p_b == 0:
            return 0.0
        return math.log2(p_ab / (p_a * p_b))

    def score_pair(self, id_a: str, id_b: str) -> Optional[float]:
        """
        PMI of a single pair, independent of argument order.

        Returns:
            PMI, or None when the pair has no direct selection
        """
        key = canonical_pair(id_a, id_b)
        count = self.pair_counts().get(key)
        if count is None:
            return None
        return self._pmi(key[0], key[1], count)

    def compute_pmi_ranking(self, min_count: int = DEFAULT_PMI_MIN_COUNT) -> List[PMIPair]:
        """
        Rank directly linked pairs by PMI.

        Args:
            min_count: Minimum observations (1 = any link, 2 = mutual only)

        Returns:
            PMIPair list sorted by PMI, highest first
        """
        if self.total_cooccurrences == 0:
            logger.info("No selections, PMI ranking is empty")
            return []

        results = []
        for (id_a, id_b), count in self.pair_counts().items():
            if count < min_count:
                continue
            entity_a = self.dataset.entity(id_a)
            entity_b = self.dataset.entity(id_b)
            results.append(PMIPair(
                entity_a=entity_a,
                entity_b=entity_b,
                observation_count=count,
                pmi=self._pmi(id_a, id_b, count),
                cross_group=not entity_a.shares_group_with(entity_b)
            ))

        results.sort(key=lambda p: p.pmi, reverse=True)
        logger.info(f"PMI ranking: {len(results)} pairs with at least {min_count} observations")
        return results

    @staticmethod
    def mutual_pairs_for(entity_id: str, pairs: List[PMIPair]) -> List[PMIPair]:
        """Mutual pairs involving an entity, highest PMI first."""
        selected = [p for p in pairs if p.is_mutual and p.involves(entity_id)]
        return sorted(selected, key=lambda p: p.pmi, reverse=True)


def compute_pmi_ranking(dataset: RelationDataset,
                        min_count: int = DEFAULT_PMI_MIN_COUNT) -> List[PMIPair]:
    """Convenience wrapper around AssociationMetrics.compute_pmi_ranking()."""
    return AssociationMetrics(dataset).compute_pmi_ranking(min_count)
