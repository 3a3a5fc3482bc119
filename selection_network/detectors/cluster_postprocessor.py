"""
PROJECT:
-------
selection-network

TITLE:
------
cluster_postprocessor.py

MAIN OBJECTIVE:
---------------
This script turns a raw community partition of the weighted selection graph into clusters:
it filters communities by size and density, then assigns core and peripheral roles to members.

Dependencies:
-------------
- networkx
- typing
- collections
- logging

MAIN FEATURES:
--------------
1) Size and density filtering of detected communities
2) Per-member degree, weight sum and coreness within the cluster
3) Median-threshold split into core and peripheral members
4) Core density and dominant group tags per cluster

Author:
-------
Antoine Lemor
"""

import networkx as nx
from typing import Dict, List, Optional
from collections import defaultdict, Counter
import logging

from selection_network.core.constants import (
    DEFAULT_MIN_CLUSTER_SIZE, DEFAULT_MIN_CLUSTER_DENSITY, DEFAULT_RESOLUTION,
    DEFAULT_MAX_ITERATIONS, DOMINANT_TAG_COUNT, ROLE_CORE, ROLE_PERIPHERAL
)
from selection_network.core.exceptions import DetectionError
from selection_network.core.models import (
    RelationDataset, WeightedGraph, WeightedEdge, CommunityPartition, Cluster, MemberRole
)
from selection_network.detectors.community_detector import CommunityDetector
from selection_network.metrics.weighted_graph_builder import WeightedGraphBuilder

logger = logging.getLogger(__name__)


class ClusterPostProcessor:
    """
    Filters communities and classifies their members.

    Coreness of a member is the mean of its degree and weight sum inside the cluster, each
    normalized by the cluster maximum. Members at or above the coreness found at the middle
    index of the descending ranking are core; ties at the threshold all go to core, so a
    cluster can have more than half of its members in the core.
    """

    def __init__(self,
                 min_size: int = DEFAULT_MIN_CLUSTER_SIZE,
                 min_density: float = DEFAULT_MIN_CLUSTER_DENSITY):
        self.min_size = min_size
        self.min_density = min_density

    def process(self,
                graph: WeightedGraph,
                partition: CommunityPartition,
                dataset: RelationDataset) -> List[Cluster]:
        """
        Build clusters from a partition of the weighted graph.

        Args:
            graph: Weighted graph the partition was computed on
            partition: Community assignments
            dataset: Dataset providing names and group tags

        Returns:
            Clusters sorted by total weight, heaviest first
        """
        if partition.is_empty() or not graph.edges:
            return []

        assignments = partition.assignments
        missing = [node for node in graph.nodes() if node not in assignments]
        if missing:
            raise DetectionError(f"Partition does not cover {len(missing)} graph nodes, e.g. {missing[0]}")

        G = graph.to_networkx()
        internal_edges: Dict[int, List[WeightedEdge]] = defaultdict(list)
        for edge in graph.edges:
            community = assignments[edge.endpoint_a]
            if assignments[edge.endpoint_b] == community:
                internal_edges[community].append(edge)

        clusters = []
        n_small = n_sparse = 0

        for community, members in partition.communities().items():
            if len(members) < self.min_size:
                n_small += 1
                continue

            density = nx.density(G.subgraph(members))
            if density < self.min_density:
                n_sparse += 1
                continue

            edges = internal_edges.get(community, [])
            roles = self._assign_roles(members, edges, dataset)
            core_members = [r.id for r in roles if r.role == ROLE_CORE]

            clusters.append(Cluster(
                id=-1,
                members=[r.id for r in roles],
                member_roles=roles,
                edges=edges,
                density=density,
                core_density=nx.density(G.subgraph(core_members)),
                total_weight=sum(edge.weight for edge in edges),
                dominant_group_tags=self._dominant_tags(members, dataset)
            ))

        clusters.sort(key=lambda c: c.total_weight, reverse=True)
        for rank, cluster in enumerate(clusters):
            cluster.id = rank

        logger.info(
            f"Clusters: {len(clusters)} kept, {n_small} below size {self.min_size}, "
            f"{n_sparse} below density {self.min_density}"
        )
        return clusters

    def _assign_roles(self,
                      members: List[str],
                      edges: List[WeightedEdge],
                      dataset: RelationDataset) -> List[MemberRole]:
        degree = {m: 0 for m in members}
        weight_sum = {m: 0.0 for m in members}
        for edge in edges:
            for endpoint in (edge.endpoint_a, edge.endpoint_b):
                degree[endpoint] += 1
                weight_sum[endpoint] += edge.weight

        max_degree = max(degree.values())
        max_weight = max(weight_sum.values())

        coreness = {}
        for m in members:
            norm_degree = degree[m] / max_degree if max_degree > 0 else 0.0
            norm_weight = weight_sum[m] / max_weight if max_weight > 0 else 0.0
            coreness[m] = (norm_degree + norm_weight) / 2

        ranked = sorted(coreness.values(), reverse=True)
        threshold = ranked[len(ranked) // 2]

        roles = []
        for m in members:
            entity = dataset.entity(m)
            roles.append(MemberRole(
                id=m,
                name=entity.name if entity else m,
                group_tags=entity.group_tags if entity else (),
                degree=degree[m],
                weight_sum=weight_sum[m],
                coreness=coreness[m],
                role=ROLE_CORE if coreness[m] >= threshold else ROLE_PERIPHERAL
            ))

        roles.sort(key=lambda r: r.coreness, reverse=True)
        return roles

    @staticmethod
    def _dominant_tags(members: List[str], dataset: RelationDataset) -> List[str]:
        counts = Counter()
        for m in members:
            entity = dataset.entity(m)
            if entity:
                counts.update(entity.group_tags)
        return [tag for tag, _ in counts.most_common(DOMINANT_TAG_COUNT)]


def detect_clusters(dataset: RelationDataset,
                    min_size: int = DEFAULT_MIN_CLUSTER_SIZE,
                    min_density: float = DEFAULT_MIN_CLUSTER_DENSITY,
                    resolution: float = DEFAULT_RESOLUTION,
                    max_iterations: int = DEFAULT_MAX_ITERATIONS,
                    graph: Optional[WeightedGraph] = None) -> List[Cluster]:
    """
    Weighted graph -> community detection -> cluster post-processing in one call.

    Args:
        dataset: Relation dataset
        min_size: Minimum members per cluster
        min_density: Minimum induced edge density per cluster
        resolution: Modularity resolution
        max_iterations: Cap on local-moving passes
        graph: Prebuilt weighted graph (built from the dataset when omitted)

    Returns:
        Clusters sorted by total weight, heaviest first
    """
    if graph is None:
        graph = WeightedGraphBuilder().build(dataset)
    partition = CommunityDetector(resolution, max_iterations).detect(graph.to_networkx())
    return ClusterPostProcessor(min_size, min_density).process(graph, partition, dataset)
