"""
PROJECT:
-------
selection-network

TITLE:
------
entity_profile.py

MAIN OBJECTIVE:
---------------
This script assembles the profile of a single entity from the dataset and from the rankings
computed over it: who it selects, who selects it, its mutual pairs, bridges and similar choosers.

Dependencies:
-------------
- typing
- collections
- logging

MAIN FEATURES:
--------------
1) Resolved outgoing and incoming selections
2) Mutual PMI partners and bridge partners seen from the entity
3) Incoming selections broken down by the choosers' group tags
4) Similarity groups around the entity

Author:
-------
Antoine Lemor
"""

from typing import List, Optional
from collections import Counter
import logging

from selection_network.core.constants import DEFAULT_SIMILARITY_MIN_COMMON, DEFAULT_SIMILARITY_TOP_N
from selection_network.core.models import (
    RelationDataset, EntityProfile, PartnerScore, PMIPair, BridgePair
)
from selection_network.metrics.association_metrics import AssociationMetrics
from selection_network.metrics.bridge_metrics import BridgeMetrics
from selection_network.metrics.similarity_metrics import SimilarityMetrics

logger = logging.getLogger(__name__)


class EntityProfiler:
    """Builds EntityProfile objects from precomputed rankings."""

    def __init__(self,
                 dataset: RelationDataset,
                 pmi_pairs: List[PMIPair],
                 bridges: List[BridgePair],
                 similarity: Optional[SimilarityMetrics] = None,
                 similarity_min_common: int = DEFAULT_SIMILARITY_MIN_COMMON,
                 similarity_top_n: int = DEFAULT_SIMILARITY_TOP_N):
        self.dataset = dataset
        self.pmi_pairs = pmi_pairs
        self.bridges = bridges
        self.similarity = similarity
        self.similarity_min_common = similarity_min_common
        self.similarity_top_n = similarity_top_n

        self._known_tags = dataset.group_tags()

    def profile(self, entity_id: str) -> Optional[EntityProfile]:
        """
        Profile of one entity.

        Args:
            entity_id: Entity to describe

        Returns:
            EntityProfile, or None for an unknown id
        """
        entity = self.dataset.entity(entity_id)
        if entity is None:
            return None

        selected = [self.dataset.entity(t) for t in self.dataset.selections_of(entity_id)]
        selected_by = [
            self.dataset.entity(source_id)
            for source_id, target_ids in self.dataset.iter_selections()
            if entity_id in target_ids
        ]

        incoming_by_group = Counter()
        for chooser in selected_by:
            incoming_by_group.update(chooser.group_tags)

        mutual_pairs = [
            PartnerScore(partner=pair.partner_of(entity_id), pmi=pair.pmi)
            for pair in AssociationMetrics.mutual_pairs_for(entity_id, self.pmi_pairs)
        ]
        bridges = [
            PartnerScore(
                partner=bridge.partner_of(entity_id),
                pmi=bridge.pmi,
                voter_count=bridge.voter_count,
                voters=list(bridge.voters)
            )
            for bridge in BridgeMetrics.bridges_for(entity_id, self.bridges)
        ]

        groups = []
        if self.similarity is not None:
            groups = self.similarity.compute_similarity_groups(
                entity_id, self.similarity_min_common, self.similarity_top_n
            )

        return EntityProfile(
            entity=entity,
            selected=selected,
            selected_by=selected_by,
            mutual_pairs=mutual_pairs,
            bridges=bridges,
            incoming_by_group={tag: incoming_by_group.get(tag, 0) for tag in self._known_tags},
            similarity_groups=groups
        )
