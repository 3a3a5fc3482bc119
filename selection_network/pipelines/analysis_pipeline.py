"""
PROJECT:
-------
selection-network

TITLE:
------
analysis_pipeline.py

MAIN OBJECTIVE:
---------------
This script orchestrates every analysis of the selection network in a single batch over one
immutable dataset snapshot, and collects the results in JSON-serializable and tabular forms.

Dependencies:
-------------
- typing
- dataclasses
- datetime
- pandas
- logging
- tqdm
- uuid
- time

MAIN FEATURES:
--------------
1) Ordered execution of rarity, graph, clustering, PMI, bridge and similarity stages
2) Per-entity profiles with progress reporting
3) Result summary, dictionary export and pandas frames for tabular consumers
4) Deterministic results on unchanged input (metadata aside)

Author:
-------
Antoine Lemor
"""

from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field
from datetime import datetime
import pandas as pd
import logging
from tqdm import tqdm
import uuid
import time

from selection_network.core.config import AnalysisConfig
from selection_network.core.models import (
    RelationDataset, WeightedGraph, CommunityPartition, Cluster, PMIPair, BridgePair,
    BridgeCluster, SimilarityPair, IncomingStats, EntityProfile
)
from selection_network.metrics.rarity_metrics import RarityMetrics
from selection_network.metrics.weighted_graph_builder import WeightedGraphBuilder
from selection_network.metrics.association_metrics import AssociationMetrics
from selection_network.metrics.bridge_metrics import BridgeMetrics
from selection_network.metrics.similarity_metrics import SimilarityMetrics
from selection_network.detectors.community_detector import CommunityDetector
from selection_network.detectors.cluster_postprocessor import ClusterPostProcessor
from selection_network.detectors.bridge_cluster_detector import BridgeClusterDetector
from selection_network.analysis.entity_profile import EntityProfiler

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResults:
    """
    Complete results of one pipeline execution.
    """
    # Execution metadata
    pipeline_id: str
    execution_timestamp: datetime
    execution_duration: float  # seconds
    config_used: AnalysisConfig

    # Data statistics
    data_statistics: Dict[str, Any]

    # Results
    idf_map: Dict[str, float]
    incoming_stats: List[IncomingStats]
    weighted_graph: WeightedGraph
    partition: CommunityPartition
    clusters: List[Cluster]
    pmi_pairs: List[PMIPair]
    bridges: List[BridgePair]
    bridge_clusters: List[BridgeCluster]
    similarity_pairs: List[SimilarityPair]
    entity_profiles: Dict[str, EntityProfile] = field(default_factory=dict)

    def get_summary(self) -> Dict[str, Any]:
        """Get summary of pipeline results."""
        return {
            'pipeline_id': self.pipeline_id,
            'execution': {
                'timestamp': self.execution_timestamp.isoformat(),
                'duration_seconds': self.execution_duration
            },
            'data': self.data_statistics,
            'results_count': {
                'ranked_entities': len(self.incoming_stats),
                'edges': len(self.weighted_graph.edges),
                'communities': self.partition.n_communities,
                'clusters': len(self.clusters),
                'pmi_pairs': len(self.pmi_pairs),
                'bridges': len(self.bridges),
                'bridge_clusters': len(self.bridge_clusters),
                'similarity_pairs': len(self.similarity_pairs),
                'entity_profiles': len(self.entity_profiles)
            },
            'key_findings': self._extract_key_findings()
        }

    def _extract_key_findings(self) -> Dict[str, Any]:
        findings = {}

        if self.incoming_stats:
            top = self.incoming_stats[0]
            findings['most_selected'] = {'id': top.entity.id, 'count': top.count}

        if self.clusters:
            heaviest = self.clusters[0]
            findings['heaviest_cluster'] = {
                'id': heaviest.id,
                'size': heaviest.size,
                'total_weight': heaviest.total_weight,
                'dominant_group_tags': heaviest.dominant_group_tags
            }

        if self.pmi_pairs:
            top_pair = self.pmi_pairs[0]
            findings['strongest_pair'] = {
                'pair': [top_pair.entity_a.id, top_pair.entity_b.id],
                'pmi': top_pair.pmi
            }

        if self.bridge_clusters:
            top_bridge = self.bridge_clusters[0]
            findings['widest_bridge_cluster'] = {
                'id': top_bridge.id,
                'group_tags': top_bridge.group_tags,
                'total_voter_count': top_bridge.total_voter_count
            }

        return findings

    def to_dict(self, include_metadata: bool = True) -> Dict[str, Any]:
        """
        JSON-serializable export.

        Args:
            include_metadata: Include run id, timestamp and duration (these differ between runs)
        """
        data = {
            'config': self.config_used.to_dict(),
            'data_statistics': dict(self.data_statistics),
            'idf': dict(self.idf_map),
            'ranking': [s.to_dict() for s in self.incoming_stats],
            'graph': self.weighted_graph.to_dict(),
            'partition': self.partition.to_dict(),
            'clusters': [c.to_dict() for c in self.clusters],
            'pmi_pairs': [p.to_dict() for p in self.pmi_pairs],
            'bridges': [b.to_dict() for b in self.bridges],
            'bridge_clusters': [c.to_dict() for c in self.bridge_clusters],
            'similarity_pairs': [p.to_dict() for p in self.similarity_pairs],
            'entity_profiles': {k: v.to_dict() for k, v in self.entity_profiles.items()}
        }
        if include_metadata:
            data['metadata'] = {
                'pipeline_id': self.pipeline_id,
                'execution_timestamp': self.execution_timestamp.isoformat(),
                'execution_duration': self.execution_duration
            }
        return data

    def to_frames(self) -> Dict[str, pd.DataFrame]:
        """Tabular views of the rankings."""
        incoming_rows = []
        for s in self.incoming_stats:
            row = {'id': s.entity.id, 'name': s.entity.name,
                   'group_tags': ','.join(s.entity.group_tags), 'count': s.count}
            row.update({f'by_{tag}': n for tag, n in s.by_group.items()})
            incoming_rows.append(row)

        pmi_rows = [{
            'entity_a': p.entity_a.id, 'name_a': p.entity_a.name,
            'entity_b': p.entity_b.id, 'name_b': p.entity_b.name,
            'observation_count': p.observation_count, 'pmi': p.pmi,
            'cross_group': p.cross_group
        } for p in self.pmi_pairs]

        bridge_rows = [{
            'entity_a': b.entity_a.id, 'name_a': b.entity_a.name,
            'entity_b': b.entity_b.id, 'name_b': b.entity_b.name,
            'voter_count': b.voter_count, 'pmi': b.pmi
        } for b in self.bridges]

        member_rows = [{
            'cluster_id': c.id, 'id': r.id, 'name': r.name, 'role': r.role,
            'coreness': r.coreness, 'degree': r.degree, 'weight_sum': r.weight_sum
        } for c in self.clusters for r in c.member_roles]

        bridge_cluster_rows = [{
            'cluster_id': c.id, 'n_members': len(c.members), 'n_edges': len(c.edges),
            'group_tag_count': c.group_tag_count, 'total_voter_count': c.total_voter_count,
            'avg_pmi': c.avg_pmi
        } for c in self.bridge_clusters]

        similarity_rows = [{
            'entity_a': p.entity_a.id, 'entity_b': p.entity_b.id,
            'common_count': p.common_count, 'rare_score': p.rare_score
        } for p in self.similarity_pairs]

        return {
            'incoming': pd.DataFrame(incoming_rows) if incoming_rows else pd.DataFrame(columns=['id', 'name', 'group_tags', 'count']),
            'pmi_pairs': pd.DataFrame(pmi_rows, columns=['entity_a', 'name_a', 'entity_b', 'name_b',
                                                         'observation_count', 'pmi', 'cross_group']),
            'bridges': pd.DataFrame(bridge_rows, columns=['entity_a', 'name_a', 'entity_b', 'name_b',
                                                          'voter_count', 'pmi']),
            'cluster_members': pd.DataFrame(member_rows, columns=['cluster_id', 'id', 'name', 'role',
                                                                  'coreness', 'degree', 'weight_sum']),
            'bridge_clusters': pd.DataFrame(bridge_cluster_rows, columns=['cluster_id', 'n_members', 'n_edges',
                                                                          'group_tag_count', 'total_voter_count',
                                                                          'avg_pmi']),
            'similarity_pairs': pd.DataFrame(similarity_rows, columns=['entity_a', 'entity_b',
                                                                       'common_count', 'rare_score'])
        }


class AnalysisPipeline:
    """
    Complete orchestration pipeline for the selection network analyses.
    """

    def __init__(self, config: Optional[AnalysisConfig] = None):
        """Initialize the analysis pipeline."""
        self.config = config or AnalysisConfig()
        self.config.validate()
        self.pipeline_id = str(uuid.uuid4())
        self.results: Optional[AnalysisResults] = None

        logger.info(f"AnalysisPipeline initialized with ID: {self.pipeline_id}")

    def run(self, dataset: RelationDataset, with_profiles: bool = False) -> AnalysisResults:
        """
        Execute every analysis over the dataset.

        Args:
            dataset: Relation dataset snapshot
            with_profiles: Also build one EntityProfile per entity

        Returns:
            AnalysisResults
        """
        logger.info("Starting analysis pipeline execution...")
        start_time = time.time()
        execution_timestamp = datetime.now()
        config = self.config

        logger.info("Step 1: Rarity weighting...")
        rarity = RarityMetrics(dataset)
        idf_map = rarity.build_idf_map()
        incoming_stats = rarity.compute_incoming_stats()

        logger.info("Step 2: Building weighted graph...")
        graph = WeightedGraphBuilder().build(dataset, idf_map)

        logger.info("Step 3: Detecting communities...")
        detector = CommunityDetector(config.resolution, config.max_iterations)
        partition = detector.detect(graph.to_networkx())
        clusters = ClusterPostProcessor(
            config.min_cluster_size, config.min_cluster_density
        ).process(graph, partition, dataset)

        logger.info("Step 4: Scoring pairwise associations...")
        pmi_pairs = AssociationMetrics(dataset).compute_pmi_ranking(config.pmi_min_count)

        logger.info("Step 5: Detecting bridges and bridge clusters...")
        bridges = BridgeMetrics(dataset, rarity).compute_bridges(config.bridge_min_voters)
        bridge_clusters = BridgeClusterDetector(
            min_size=config.bridge_min_cluster_size,
            min_edges=config.bridge_min_edges,
            pmi_threshold=config.bridge_pmi_threshold,
            resolution=config.resolution,
            max_iterations=config.max_iterations
        ).detect(bridges)

        logger.info("Step 6: Computing similarity pairs...")
        similarity = SimilarityMetrics(dataset, idf_map)
        similarity_pairs = similarity.compute_similarity_pairs(
            config.similarity_min_common, config.similarity_pairs_limit
        )

        results = AnalysisResults(
            pipeline_id=self.pipeline_id,
            execution_timestamp=execution_timestamp,
            execution_duration=0.0,
            config_used=config,
            data_statistics=dataset.get_statistics(),
            idf_map=idf_map,
            incoming_stats=incoming_stats,
            weighted_graph=graph,
            partition=partition,
            clusters=clusters,
            pmi_pairs=pmi_pairs,
            bridges=bridges,
            bridge_clusters=bridge_clusters,
            similarity_pairs=similarity_pairs
        )

        if with_profiles:
            logger.info("Step 7: Building entity profiles...")
            results.entity_profiles = self.build_entity_profiles(dataset, results, similarity)

        results.execution_duration = time.time() - start_time
        self.results = results

        logger.info(f"Pipeline execution completed in {results.execution_duration:.2f} seconds")
        logger.info(f"Detected: {len(clusters)} clusters, {len(pmi_pairs)} PMI pairs, "
                    f"{len(bridges)} bridges, {len(bridge_clusters)} bridge clusters")
        return results

    def build_entity_profiles(self,
                              dataset: RelationDataset,
                              results: AnalysisResults,
                              similarity: Optional[SimilarityMetrics] = None) -> Dict[str, EntityProfile]:
        """
        Profile every entity of the dataset.

        Args:
            dataset: Dataset the results were computed on
            results: Pipeline results providing PMI pairs and bridges
            similarity: Similarity metrics (built from the results' IDF map when omitted)

        Returns:
            Dictionary entity id -> EntityProfile
        """
        if similarity is None:
            similarity = SimilarityMetrics(dataset, results.idf_map)
        profiler = EntityProfiler(
            dataset, results.pmi_pairs, results.bridges, similarity,
            similarity_min_common=self.config.similarity_min_common,
            similarity_top_n=self.config.similarity_top_n
        )

        profiles = {}
        for entity_id in tqdm(dataset.entity_ids(), desc="Entity profiles",
                              disable=not self.config.verbose):
            profiles[entity_id] = profiler.profile(entity_id)
        return profiles

    def get_results_summary(self) -> Optional[Dict[str, Any]]:
        """Summary of the last run, if any."""
        if self.results is None:
            return None
        return self.results.get_summary()


def run_analysis(dataset: RelationDataset,
                 config: Optional[AnalysisConfig] = None,
                 with_profiles: bool = False) -> AnalysisResults:
    """Run the complete analysis pipeline."""
    return AnalysisPipeline(config).run(dataset, with_profiles=with_profiles)
