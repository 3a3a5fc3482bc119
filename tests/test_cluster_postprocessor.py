#!/usr/bin/env python3
"""
Tests for ClusterPostProcessor and detect_clusters.

Tests verify size and density filtering, core/peripheral roles, dominant tags and ranking.
"""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

import unittest

from selection_network.core.exceptions import DetectionError
from selection_network.core.models import (
    Entity, RelationDataset, WeightedEdge, WeightedGraph, CommunityPartition
)
from selection_network.detectors.cluster_postprocessor import ClusterPostProcessor, detect_clusters


def make_dataset(tags, selections):
    entities = [Entity(entity_id, f"Entity {entity_id}", tuple(t)) for entity_id, t in tags.items()]
    return RelationDataset(entities, selections)


class TestDetectClusters(unittest.TestCase):
    """End-to-end clustering from a relation dataset."""

    def test_three_clique(self):
        """Three entities selecting each other form one complete cluster."""
        dataset = make_dataset(
            {'1': ['imas'], '2': ['imas'], '3': ['imas']},
            {'1': ['2', '3'], '2': ['1', '3'], '3': ['1', '2']}
        )
        clusters = detect_clusters(dataset, min_size=3, min_density=0.3)

        self.assertEqual(len(clusters), 1)
        cluster = clusters[0]
        self.assertEqual(cluster.size, 3)
        self.assertEqual(len(cluster.edges), 3)
        self.assertEqual(cluster.density, 1.0)
        self.assertGreater(cluster.total_weight, 0)
        self.assertGreater(cluster.core_density, 0)
        self.assertEqual(cluster.id, 0)

    def test_minimum_size(self):
        dataset = make_dataset(
            {'1': [], '2': [], '3': [], '4': [], '5': []},
            {'1': ['2'], '2': ['1'], '3': ['4', '5'], '4': ['3', '5'], '5': ['3', '4']}
        )

        clusters_min3 = detect_clusters(dataset, min_size=3, min_density=0)
        clusters_min4 = detect_clusters(dataset, min_size=4, min_density=0)

        self.assertTrue(any(c.size == 3 for c in clusters_min3))
        self.assertFalse(any(c.size >= 4 for c in clusters_min4))

    def test_minimum_density(self):
        dataset = make_dataset(
            {'1': [], '2': [], '3': [], '4': []},
            {'1': ['2'], '2': ['1'], '3': ['4'], '4': ['3']}
        )
        self.assertEqual(detect_clusters(dataset, min_size=3, min_density=0.9), [])

    def test_empty_selections(self):
        """Entities without selections yield no cluster."""
        dataset = make_dataset(
            {'1': [], '2': [], '3': [], '4': [], '5': []},
            {'1': [], '2': [], '3': [], '4': [], '5': []}
        )
        self.assertEqual(detect_clusters(dataset, min_size=3, min_density=0), [])

    def test_dominant_tags(self):
        dataset = make_dataset(
            {'1': ['imas'], '2': ['imas'], '3': ['imas'], '4': ['deremas']},
            {'1': ['2', '3', '4'], '2': ['1', '3', '4'], '3': ['1', '2', '4'], '4': ['1', '2', '3']}
        )
        clusters = detect_clusters(dataset, min_size=3, min_density=0)

        self.assertGreaterEqual(len(clusters), 1)
        self.assertEqual(clusters[0].dominant_group_tags[0], 'imas')
        self.assertLessEqual(len(clusters[0].dominant_group_tags), 2)

    def test_peripheral_member(self):
        """An entity hanging off a dense group by a one-way selection is peripheral."""
        dataset = make_dataset(
            {'1': ['imas'], '2': ['imas'], '3': ['imas'], '4': ['imas'], '5': ['imas'],
             '6': ['deremas']},
            {
                '1': ['2', '3', '4', '5'],
                '2': ['1', '3', '4', '5'],
                '3': ['1', '2', '4', '5'],
                '4': ['1', '2', '3', '5'],
                '5': ['1', '2', '3', '4'],
                '6': ['1'],
            }
        )
        clusters = detect_clusters(dataset, min_size=3, min_density=0.3)

        self.assertEqual(len(clusters), 1)
        cluster = clusters[0]
        self.assertEqual(sorted(cluster.members), ['1', '2', '3', '4', '5', '6'])
        roles = {r.id: r for r in cluster.member_roles}
        self.assertLess(roles['6'].coreness, roles['1'].coreness)
        self.assertLess(roles['6'].degree, roles['1'].degree)
        self.assertEqual(cluster.peripheral_members, ['6'])
        self.assertEqual(sorted(cluster.core_members), ['1', '2', '3', '4', '5'])

    def test_cluster_invariants(self):
        """Clusters respect the thresholds and never share members."""
        dataset = make_dataset(
            {str(i): [] for i in range(1, 9)},
            {
                '1': ['2', '3'], '2': ['1', '3'], '3': ['1', '2', '4'],
                '4': ['5', '6'], '5': ['4', '6'], '6': ['4', '5'],
                '7': ['8'], '8': ['7'],
            }
        )
        clusters = detect_clusters(dataset, min_size=3, min_density=0.3)

        seen = set()
        for cluster in clusters:
            self.assertGreaterEqual(cluster.size, 3)
            self.assertGreaterEqual(cluster.density, 0.3)
            for role in cluster.member_roles:
                self.assertGreaterEqual(role.coreness, 0.0)
                self.assertLessEqual(role.coreness, 1.0)
            self.assertTrue(seen.isdisjoint(cluster.members))
            seen.update(cluster.members)


class TestClusterPostProcessor(unittest.TestCase):
    """Post-processing of an explicit partition."""

    def setUp(self):
        self.dataset = make_dataset(
            {'a': ['x'], 'b': ['x'], 'c': ['y'], 'd': ['z'], 'e': [], 'f': [], 'g': []},
            {}
        )
        self.graph = WeightedGraph(
            edges=[
                WeightedEdge('a', 'b', 1, 1.0),
                WeightedEdge('a', 'c', 1, 1.0),
                WeightedEdge('a', 'd', 1, 1.0),
                WeightedEdge('b', 'c', 1, 1.0),
                WeightedEdge('e', 'f', 2, 0.5),
                WeightedEdge('f', 'g', 2, 0.5),
                WeightedEdge('e', 'g', 2, 0.5),
            ],
            idf_map={}
        )
        self.partition = CommunityPartition(
            assignments={'a': 0, 'b': 0, 'c': 0, 'd': 0, 'e': 1, 'f': 1, 'g': 1}
        )
        self.processor = ClusterPostProcessor(min_size=3, min_density=0.3)

    def test_roles(self):
        """Members at or above the middle coreness are core."""
        clusters = self.processor.process(self.graph, self.partition, self.dataset)
        cluster = clusters[0]

        self.assertEqual(cluster.members, ['a', 'b', 'c', 'd'])
        self.assertEqual(cluster.core_members, ['a', 'b', 'c'])
        self.assertEqual(cluster.peripheral_members, ['d'])
        self.assertAlmostEqual(cluster.density, 4 / 6)
        self.assertEqual(cluster.core_density, 1.0)

        roles = {r.id: r for r in cluster.member_roles}
        self.assertEqual(roles['a'].coreness, 1.0)
        self.assertAlmostEqual(roles['b'].coreness, 2 / 3)
        self.assertAlmostEqual(roles['d'].coreness, 1 / 3)
        self.assertEqual(roles['a'].degree, 3)
        self.assertEqual(roles['a'].name, 'Entity a')

    def test_equal_coreness_all_core(self):
        """Ties at the threshold all go to the core."""
        clusters = self.processor.process(self.graph, self.partition, self.dataset)
        triangle = clusters[1]

        self.assertEqual(sorted(triangle.core_members), ['e', 'f', 'g'])
        self.assertEqual(triangle.peripheral_members, [])

    def test_ranked_by_total_weight(self):
        clusters = self.processor.process(self.graph, self.partition, self.dataset)

        self.assertEqual([c.id for c in clusters], [0, 1])
        self.assertEqual(clusters[0].total_weight, 4.0)
        self.assertEqual(clusters[1].total_weight, 1.5)

    def test_dominant_tags(self):
        clusters = self.processor.process(self.graph, self.partition, self.dataset)

        self.assertEqual(clusters[0].dominant_group_tags, ['x', 'y'])
        self.assertEqual(clusters[1].dominant_group_tags, [])

    def test_density_filter(self):
        clusters = ClusterPostProcessor(min_size=3, min_density=0.9).process(
            self.graph, self.partition, self.dataset
        )
        self.assertEqual([c.size for c in clusters], [3])

    def test_partition_must_cover_graph(self):
        partition = CommunityPartition(assignments={'a': 0, 'b': 0})
        with self.assertRaises(DetectionError):
            self.processor.process(self.graph, partition, self.dataset)

    def test_empty_partition(self):
        self.assertEqual(self.processor.process(self.graph, CommunityPartition(), self.dataset), [])

    def test_to_dict(self):
        cluster = self.processor.process(self.graph, self.partition, self.dataset)[0]
        data = cluster.to_dict()

        self.assertEqual(data['core_members'], ['a', 'b', 'c'])
        self.assertEqual(len(data['edges']), 4)
        self.assertEqual(data['member_roles'][0]['role'], 'core')


if __name__ == '__main__':
    unittest.main(verbosity=2)
