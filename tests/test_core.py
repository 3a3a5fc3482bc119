"""
Unit tests for the core layer: configuration, dataset normalization and models.
"""

import os
import pytest
import sys
from pathlib import Path
from unittest.mock import patch

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from selection_network.core.config import AnalysisConfig
from selection_network.core.models import (
    Entity, RelationDataset, WeightedEdge, WeightedGraph, CommunityPartition, canonical_pair
)
from selection_network.core.exceptions import (
    ConfigurationError, DatasetError, GraphConstructionError, SelectionNetworkError
)


class TestConfig:
    """Test configuration."""

    def test_default_config(self):
        """Test default configuration."""
        config = AnalysisConfig()

        assert config.resolution == 1.0
        assert config.max_iterations == 100
        assert config.min_cluster_size == 3
        assert config.min_cluster_density == 0.3
        assert config.pmi_min_count == 2
        assert config.bridge_min_voters == 2
        assert config.bridge_pmi_threshold is None
        assert config.similarity_top_n == 20
        assert config.similarity_pairs_limit == 2000

    def test_environment_overrides(self):
        """Test environment variables feed the defaults."""
        with patch.dict(os.environ, {'SN_RESOLUTION': '0.5', 'SN_MIN_CLUSTER_SIZE': '4',
                                     'SN_VERBOSE': 'true'}):
            config = AnalysisConfig()

        assert config.resolution == 0.5
        assert config.min_cluster_size == 4
        assert config.verbose is True

    def test_config_validation(self):
        """Test configuration validation."""
        config = AnalysisConfig()
        assert config.validate()

        config.resolution = 0
        with pytest.raises(ConfigurationError):
            config.validate()

        config = AnalysisConfig(min_cluster_density=1.5)
        with pytest.raises(ConfigurationError):
            config.validate()

        config = AnalysisConfig(similarity_top_n=0)
        with pytest.raises(ConfigurationError):
            config.validate()

    def test_config_to_dict(self):
        """Test configuration export and reload."""
        config = AnalysisConfig(resolution=0.8, bridge_pmi_threshold=1.5)
        config_dict = config.to_dict()

        assert 'communities' in config_dict
        assert 'bridges' in config_dict
        assert config_dict['communities']['resolution'] == 0.8

        restored = AnalysisConfig.from_dict(config_dict)
        assert restored.resolution == 0.8
        assert restored.bridge_pmi_threshold == 1.5

    def test_exception_hierarchy(self):
        """All errors derive from the package base error."""
        assert issubclass(ConfigurationError, SelectionNetworkError)
        assert issubclass(DatasetError, SelectionNetworkError)
        assert issubclass(GraphConstructionError, SelectionNetworkError)


class TestDataset:
    """Test dataset normalization."""

    @pytest.fixture
    def entities(self):
        return [
            Entity('1', 'A', ('imas',)),
            Entity('2', 'B', ('imas',)),
            Entity('3', 'C', ('deremas',)),
        ]

    def test_orphans_are_skipped_and_counted(self, entities):
        """Unknown targets and choosers are dropped."""
        dataset = RelationDataset(entities, {
            '1': ['2', '99'],
            '42': ['1'],
        })

        assert dataset.selections_of('1') == ('2',)
        assert '42' not in dataset
        assert dataset.orphan_count == 2
        assert dataset.get_statistics()['n_orphans'] == 2

    def test_self_selection_and_duplicates_dropped(self, entities):
        """Self-selections vanish and repeated targets keep their first position."""
        dataset = RelationDataset(entities, {'1': ['1', '3', '2', '3']})

        assert dataset.selections_of('1') == ('3', '2')
        assert not dataset.has_relation('1', '1')

    def test_duplicate_entity_rejected(self, entities):
        """Duplicate ids are an error."""
        with pytest.raises(DatasetError):
            RelationDataset(entities + [Entity('1', 'A again')], {})

    def test_non_list_selections_rejected(self, entities):
        """Selections must be lists."""
        with pytest.raises(DatasetError):
            RelationDataset(entities, {'1': '2'})

    def test_choosers_and_group_tags(self, entities):
        """Only entities with a non-empty list are choosers."""
        dataset = RelationDataset(entities, {'1': ['2'], '2': []})

        assert dataset.choosers() == ['1']
        assert dataset.group_tags() == ['imas', 'deremas']
        assert len(dataset) == 3

    def test_from_dict(self):
        """Loader layout with 'brand' tags and integer ids."""
        dataset = RelationDataset.from_dict({
            'entities': {
                1: {'name': 'A', 'brand': ['imas']},
                2: {'name': 'B', 'brand': ['deremas']},
            },
            'selections': {1: [2]},
        })

        assert dataset.entity('1').group_tags == ('imas',)
        assert dataset.has_relation('1', '2')

    def test_from_dict_scalar_tag(self):
        """A single tag given as a string is one tag, not a sequence of characters."""
        dataset = RelationDataset.from_dict({
            'entities': {1: {'name': 'A', 'brand': 'imas'}, 2: {'name': 'B'}},
            'selections': {1: [2]},
        })

        assert dataset.entity('1').group_tags == ('imas',)
        assert dataset.entity('2').group_tags == ()

    def test_from_dict_requires_entities(self):
        with pytest.raises(DatasetError):
            RelationDataset.from_dict({'selections': {}})


class TestModels:
    """Test graph models."""

    def test_canonical_pair(self):
        assert canonical_pair('b', 'a') == ('a', 'b')
        assert canonical_pair('a', 'b') == ('a', 'b')

    def test_edge_invariants(self):
        """Edges must be canonical, positive and one-way or mutual."""
        edge = WeightedEdge('a', 'b', 2, 1.5)
        assert edge.is_mutual
        assert edge.key == ('a', 'b')

        with pytest.raises(GraphConstructionError):
            WeightedEdge('b', 'a', 1, 1.0)
        with pytest.raises(GraphConstructionError):
            WeightedEdge('a', 'a', 1, 1.0)
        with pytest.raises(GraphConstructionError):
            WeightedEdge('a', 'b', 3, 1.0)
        with pytest.raises(GraphConstructionError):
            WeightedEdge('a', 'b', 1, 0.0)

    def test_graph_to_networkx(self):
        """Networkx export keeps weights and node order."""
        graph = WeightedGraph(
            edges=[WeightedEdge('b', 'c', 1, 0.5), WeightedEdge('a', 'b', 2, 2.0)],
            idf_map={}
        )
        G = graph.to_networkx()

        assert graph.nodes() == ['b', 'c', 'a']
        assert list(G.nodes()) == ['b', 'c', 'a']
        assert G['a']['b']['weight'] == 2.0
        assert G['a']['b']['directionality'] == 2
        assert graph.total_weight() == 2.5

    def test_partition_communities(self):
        partition = CommunityPartition(assignments={'a': 0, 'b': 1, 'c': 0})

        assert partition.communities() == {0: ['a', 'c'], 1: ['b']}
        assert partition.n_communities == 2
        assert not partition.is_empty()
        assert CommunityPartition().is_empty()
