#!/usr/bin/env python3
"""
Integration tests for AnalysisPipeline.

Tests verify the full batch run, exports and determinism on unchanged input.
"""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

import json
import unittest
import pandas as pd

from selection_network import AnalysisConfig, RelationDataset, AnalysisPipeline, run_analysis
from selection_network.core.exceptions import ConfigurationError


def sample_data():
    """Two tight groups plus a few choosers linking them."""
    return {
        'entities': {
            '1': {'name': 'Haruka', 'brand': ['imas']},
            '2': {'name': 'Chihaya', 'brand': ['imas']},
            '3': {'name': 'Miki', 'brand': ['imas']},
            '4': {'name': 'Uzuki', 'brand': ['deremas']},
            '5': {'name': 'Rin', 'brand': ['deremas']},
            '6': {'name': 'Mio', 'brand': ['deremas']},
            '7': {'name': 'Kotori', 'brand': []},
            '8': {'name': 'Chihiro', 'brand': []},
        },
        'selections': {
            '1': ['2', '3'],
            '2': ['1', '3'],
            '3': ['1', '2', '4'],
            '4': ['5', '6'],
            '5': ['4', '6'],
            '6': ['4', '5', '99'],
            '7': ['1', '4'],
            '8': ['1', '4', '2'],
        },
    }


class TestAnalysisPipeline(unittest.TestCase):
    """Test suite for AnalysisPipeline."""

    def setUp(self):
        self.dataset = RelationDataset.from_dict(sample_data())
        self.config = AnalysisConfig(pmi_min_count=1, bridge_min_voters=2, verbose=False)

    def test_full_run(self):
        pipeline = AnalysisPipeline(self.config)
        results = pipeline.run(self.dataset)

        self.assertEqual(results.data_statistics['n_entities'], 8)
        self.assertEqual(results.data_statistics['n_orphans'], 1)
        self.assertEqual(len(results.idf_map), 8)
        self.assertEqual(results.incoming_stats[0].entity.id, '4')
        self.assertGreater(len(results.weighted_graph.edges), 0)
        self.assertEqual(set(results.partition.assignments), set(results.weighted_graph.nodes()))
        self.assertGreaterEqual(len(results.clusters), 2)
        self.assertGreater(len(results.pmi_pairs), 0)
        self.assertEqual([b.key for b in results.bridges], [('1', '4'), ('2', '4')])
        self.assertEqual(results.entity_profiles, {})
        self.assertIs(pipeline.results, results)

    def test_clusters_follow_groups(self):
        results = run_analysis(self.dataset, self.config)
        member_sets = [set(c.members) for c in results.clusters]

        self.assertIn({'4', '5', '6'}, member_sets)
        for cluster in results.clusters:
            self.assertGreaterEqual(cluster.size, self.config.min_cluster_size)
            self.assertGreaterEqual(cluster.density, self.config.min_cluster_density)

    def test_profiles(self):
        results = run_analysis(self.dataset, self.config, with_profiles=True)

        self.assertEqual(set(results.entity_profiles), set(self.dataset.entity_ids()))
        profile = results.entity_profiles['4']
        self.assertEqual([b.partner.id for b in profile.bridges], ['1', '2'])
        self.assertEqual(profile.incoming_by_group, {'imas': 1, 'deremas': 2})

    def test_summary(self):
        pipeline = AnalysisPipeline(self.config)
        self.assertIsNone(pipeline.get_results_summary())

        pipeline.run(self.dataset)
        summary = pipeline.get_results_summary()

        self.assertEqual(summary['pipeline_id'], pipeline.pipeline_id)
        self.assertEqual(summary['results_count']['bridges'], 2)
        self.assertEqual(summary['key_findings']['most_selected']['id'], '4')
        self.assertIn('heaviest_cluster', summary['key_findings'])

    def test_to_dict_is_json_serializable(self):
        results = run_analysis(self.dataset, self.config, with_profiles=True)
        data = results.to_dict()

        self.assertIn('metadata', data)
        self.assertEqual(data['config']['pmi']['min_count'], 1)
        json.dumps(data)

    def test_frames(self):
        frames = run_analysis(self.dataset, self.config).to_frames()

        self.assertIsInstance(frames['incoming'], pd.DataFrame)
        self.assertIn('by_imas', frames['incoming'].columns)
        self.assertEqual(len(frames['bridges']), 2)
        self.assertEqual(set(frames['cluster_members']['role']) - {'core', 'peripheral'}, set())
        self.assertEqual(list(frames['similarity_pairs'].columns),
                         ['entity_a', 'entity_b', 'common_count', 'rare_score'])

    def test_deterministic(self):
        """Two runs on the same input give identical output apart from run metadata."""
        first = run_analysis(self.dataset, self.config, with_profiles=True)
        second = run_analysis(RelationDataset.from_dict(sample_data()), self.config, with_profiles=True)

        self.assertEqual(first.to_dict(include_metadata=False), second.to_dict(include_metadata=False))

    def test_empty_dataset(self):
        dataset = RelationDataset.from_dict({
            'entities': {str(i): {'name': f'E{i}'} for i in range(5)},
            'selections': {str(i): [] for i in range(5)},
        })
        results = run_analysis(dataset, self.config)

        self.assertEqual(results.clusters, [])
        self.assertEqual(results.pmi_pairs, [])
        self.assertEqual(results.bridges, [])
        self.assertEqual(results.bridge_clusters, [])
        self.assertTrue(results.partition.is_empty())
        self.assertTrue(results.to_frames()['incoming'].empty)

    def test_invalid_config(self):
        with self.assertRaises(ConfigurationError):
            AnalysisPipeline(AnalysisConfig(resolution=-1.0))


if __name__ == '__main__':
    unittest.main(verbosity=2)
