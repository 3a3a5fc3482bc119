"""
PROJECT:
-------
selection-network

TITLE:
------
bridge_metrics.py

MAIN OBJECTIVE:
---------------
This script finds bridge pairs: entities from different groups that several distinct choosers
select together, scored by PMI over the population of choosers.

Dependencies:
-------------
- math
- typing
- collections
- logging

MAIN FEATURES:
--------------
1) Co-selection enumeration per chooser
2) Voter tracking per unordered pair
3) Cross-group and minimum-voter filtering
4) PMI over the chooser population, guarded against empty marginals

Author:
-------
Antoine Lemor
"""

import math
from typing import Dict, List, Optional, Tuple
from collections import defaultdict
import logging

from selection_network.core.constants import DEFAULT_BRIDGE_MIN_VOTERS, LARGE_SELECTION_WARNING
from selection_network.core.models import RelationDataset, BridgePair, canonical_pair
from selection_network.metrics.rarity_metrics import RarityMetrics

logger = logging.getLogger(__name__)


class BridgeMetrics:
    """
    Cross-group pairs selected together by several choosers.

    PMI = log2(P(A,B) / (P(A) * P(B))) with
    - P(A,B) = voters selecting both / total voters
    - P(A)   = incoming count of A / total voters
    """

    def __init__(self, dataset: RelationDataset, rarity: Optional[RarityMetrics] = None):
        self.dataset = dataset
        self.rarity = rarity or RarityMetrics(dataset)
        self._pair_voters = None

    def pair_voters(self) -> Dict[Tuple[str, str], List[str]]:
        """Canonical pair -> choosers that selected both, in chooser order."""
        if self._pair_voters is not None:
            return self._pair_voters

        pair_voters = defaultdict(list)
        for chooser_id, target_ids in self.dataset.iter_selections():
            if len(target_ids) > LARGE_SELECTION_WARNING:
                logger.warning(
                    f"Chooser {chooser_id} selects {len(target_ids)} entities; "
                    f"pair enumeration is quadratic in this list"
                )
            for i in range(len(target_ids)):
                for j in range(i + 1, len(target_ids)):
                    pair_voters[canonical_pair(target_ids[i], target_ids[j])].append(chooser_id)

        self._pair_voters = dict(pair_voters)
        return self._pair_voters

    def _pmi(self, id_a: str, id_b: str, voter_count: int) -> float:
        total_voters = self.rarity.total_voters
        if total_voters == 0:
            return 0.0

        p_ab = voter_count / total_voters
        p_a = self.rarity.incoming_count(id_a) / total_voters
        p_b = self.rarity.incoming_count(id_b) / total_voters
        if p_a > 0 and p_b > 0:
            return math.log2(p_ab / (p_a * p_b))
        return 0.0

    def compute_bridges(self, min_voters: int = DEFAULT_BRIDGE_MIN_VOTERS) -> List[BridgePair]:
        """
        Compute cross-group bridge pairs.

        Args:
            min_voters: Minimum number of distinct choosers selecting both

        Returns:
            BridgePair list sorted by PMI, highest first
        """
        results = []
        for (id_a, id_b), voters in self.pair_voters().items():
            if len(voters) < min_voters:
                continue

            entity_a = self.dataset.entity(id_a)
            entity_b = self.dataset.entity(id_b)
            if entity_a.shares_group_with(entity_b):
                continue

            results.append(BridgePair(
                entity_a=entity_a,
                entity_b=entity_b,
                voters=[self.dataset.entity(v) for v in voters],
                pmi=self._pmi(id_a, id_b, len(voters))
            ))

        results.sort(key=lambda b: b.pmi, reverse=True)
        logger.info(f"Bridges: {len(results)} cross-group pairs with at least {min_voters} voters")
        return results

    @staticmethod
    def bridges_for(entity_id: str, bridges: List[BridgePair]) -> List[BridgePair]:
        """Bridges involving an entity, highest PMI first."""
        selected = [b for b in bridges if b.involves(entity_id)]
        return sorted(selected, key=lambda b: b.pmi, reverse=True)


def compute_bridges(dataset: RelationDataset,
                    min_voters: int = DEFAULT_BRIDGE_MIN_VOTERS) -> List[BridgePair]:
    """Convenience wrapper around BridgeMetrics.compute_bridges()."""
    return BridgeMetrics(dataset).compute_bridges(min_voters)
