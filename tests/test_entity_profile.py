#!/usr/bin/env python3
"""
Tests for EntityProfiler.
"""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

import unittest

from selection_network.core.models import Entity, RelationDataset
from selection_network.metrics.association_metrics import AssociationMetrics
from selection_network.metrics.bridge_metrics import BridgeMetrics
from selection_network.metrics.similarity_metrics import SimilarityMetrics
from selection_network.analysis.entity_profile import EntityProfiler


class TestEntityProfiler(unittest.TestCase):
    """Test suite for EntityProfiler."""

    def setUp(self):
        entities = [
            Entity('a', 'A', ('imas',)),
            Entity('b', 'B', ('imas',)),
            Entity('c', 'C', ('deremas',)),
            Entity('x', 'X', ('imas',)),
            Entity('y', 'Y', ('deremas',)),
        ]
        self.dataset = RelationDataset(entities, {
            'a': ['b', 'x', 'y'],
            'b': ['a', 'x', 'y'],
            'c': ['a', 'x'],
        })
        pmi_pairs = AssociationMetrics(self.dataset).compute_pmi_ranking(min_count=1)
        bridges = BridgeMetrics(self.dataset).compute_bridges(min_voters=2)
        self.profiler = EntityProfiler(
            self.dataset, pmi_pairs, bridges, SimilarityMetrics(self.dataset)
        )

    def test_selections(self):
        profile = self.profiler.profile('a')

        self.assertEqual([e.id for e in profile.selected], ['b', 'x', 'y'])
        self.assertEqual([e.id for e in profile.selected_by], ['b', 'c'])
        self.assertEqual(profile.incoming_count, 2)

    def test_incoming_by_group(self):
        """Every known group is reported, including groups with no chooser."""
        self.assertEqual(self.profiler.profile('a').incoming_by_group, {'imas': 1, 'deremas': 1})
        self.assertEqual(self.profiler.profile('y').incoming_by_group, {'imas': 2, 'deremas': 0})

    def test_mutual_pairs(self):
        profile = self.profiler.profile('a')

        self.assertEqual([p.partner.id for p in profile.mutual_pairs], ['b'])
        self.assertIsNotNone(profile.mutual_pairs[0].pmi)
        self.assertIsNone(profile.mutual_pairs[0].voter_count)
        self.assertEqual(self.profiler.profile('c').mutual_pairs, [])

    def test_bridges(self):
        """x and y are from different groups and both selected by a and b."""
        profile = self.profiler.profile('x')

        self.assertEqual([p.partner.id for p in profile.bridges], ['y'])
        self.assertEqual(profile.bridges[0].voter_count, 2)
        self.assertEqual([v.id for v in profile.bridges[0].voters], ['a', 'b'])

    def test_similarity_groups(self):
        profile = self.profiler.profile('a')

        self.assertEqual(len(profile.similarity_groups), 1)
        self.assertEqual(profile.similarity_groups[0].common_ids(), ['x', 'y'])
        self.assertEqual([m.id for m in profile.similarity_groups[0].members], ['b'])

    def test_without_similarity(self):
        profiler = EntityProfiler(self.dataset, [], [])
        profile = profiler.profile('a')

        self.assertEqual(profile.similarity_groups, [])
        self.assertEqual(profile.mutual_pairs, [])

    def test_unknown_entity(self):
        self.assertIsNone(self.profiler.profile('missing'))

    def test_to_dict(self):
        data = self.profiler.profile('x').to_dict()

        self.assertEqual(data['id'], 'x')
        self.assertEqual(data['incoming_count'], 3)
        self.assertEqual(data['bridges'][0]['voter_count'], 2)
        self.assertEqual(data['selected'], [])


if __name__ == '__main__':
    unittest.main(verbosity=2)
