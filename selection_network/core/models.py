"""
PROJECT:
-------
selection-network

TITLE:
------
models.py

MAIN OBJECTIVE:
---------------
This script defines the core data models and structures used throughout the selection network
framework, including entities, the relation dataset, weighted edges, clusters and ranked pairs.

Dependencies:
-------------
- dataclasses
- typing
- collections
- logging
- networkx

MAIN FEATURES:
--------------
1) Entity and RelationDataset with input normalization (orphans, self-selections, duplicates)
2) WeightedEdge and WeightedGraph with canonical pair ordering
3) CommunityPartition, MemberRole and Cluster for community analysis
4) PMIPair, BridgePair and BridgeCluster for association rankings
5) SimilarityGroup, SimilarityPair, IncomingStats and EntityProfile for per-entity views

Author:
-------
Antoine Lemor
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any, Tuple, Iterator, Iterable
from collections import defaultdict
import logging
import networkx as nx

from selection_network.core.constants import GROUP_TAG_KEYS, ROLE_CORE, ROLE_PERIPHERAL
from selection_network.core.exceptions import DatasetError, GraphConstructionError

logger = logging.getLogger(__name__)


def canonical_pair(id_a: str, id_b: str) -> Tuple[str, str]:
    """Order an unordered pair so the same pair always yields the same key."""
    return (id_a, id_b) if id_a < id_b else (id_b, id_a)


@dataclass(frozen=True)
class Entity:
    """A node of the selection relation."""
    id: str
    name: str
    group_tags: Tuple[str, ...] = ()

    def shares_group_with(self, other: 'Entity') -> bool:
        """True when the two tag sets intersect."""
        return not set(self.group_tags).isdisjoint(other.group_tags)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'group_tags': list(self.group_tags)
        }


class RelationDataset:
    """
    Immutable snapshot of the selection relation.

    Selections referencing unknown entities are orphans: they are skipped and counted.
    Self-selections are dropped and repeated targets are kept once, at their first position.
    """

    def __init__(self,
                 entities: Iterable[Entity],
                 selections: Dict[str, Iterable[str]]):
        self._entities: Dict[str, Entity] = {}
        for entity in entities:
            if entity.id in self._entities:
                raise DatasetError(f"Duplicate entity id: {entity.id}")
            self._entities[entity.id] = entity

        self.orphan_count = 0
        self._selections: Dict[str, Tuple[str, ...]] = {}

        for source_id, target_ids in selections.items():
            if not isinstance(target_ids, (list, tuple)):
                raise DatasetError(f"Selections of {source_id} must be a list of ids")
            if source_id not in self._entities:
                self.orphan_count += 1
                logger.debug(f"Skipping selections of unknown chooser {source_id}")
                continue

            seen = set()
            cleaned = []
            for target_id in target_ids:
                if target_id not in self._entities:
                    self.orphan_count += 1
                    continue
                if target_id == source_id or target_id in seen:
                    continue
                seen.add(target_id)
                cleaned.append(target_id)
            self._selections[source_id] = tuple(cleaned)

        self._relations = frozenset(
            (source_id, target_id)
            for source_id, target_ids in self._selections.items()
            for target_id in target_ids
        )

        if self.orphan_count:
            logger.debug(f"Skipped {self.orphan_count} orphan selections")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RelationDataset':
        """
        Build a dataset from the loader's normalized layout.

        Args:
            data: {'entities': {id: {'name', 'group_tags'}}, 'selections': {id: [ids]}}

        Returns:
            RelationDataset
        """
        raw_entities = data.get('entities')
        if raw_entities is None:
            raise DatasetError("Dataset has no 'entities' mapping")

        entities = []
        for entity_id, attributes in raw_entities.items():
            name = attributes.get('name')
            if name is None:
                raise DatasetError(f"Entity {entity_id} has no name")
            tags: Iterable[str] = ()
            for key in GROUP_TAG_KEYS:
                if key in attributes:
                    tags = attributes[key] or ()
                    break
            if isinstance(tags, str):
                tags = (tags,)
            entities.append(Entity(id=str(entity_id), name=name, group_tags=tuple(tags)))

        selections = {}
        for source_id, target_ids in data.get('selections', {}).items():
            if not isinstance(target_ids, (list, tuple)):
                raise DatasetError(f"Selections of {source_id} must be a list of ids")
            selections[str(source_id)] = [str(t) for t in target_ids]

        return cls(entities, selections)

    @property
    def entities(self) -> Dict[str, Entity]:
        return dict(self._entities)

    def entity(self, entity_id: str) -> Optional[Entity]:
        return self._entities.get(entity_id)

    def entity_ids(self) -> List[str]:
        return list(self._entities)

    def selections_of(self, entity_id: str) -> Tuple[str, ...]:
        """Ordered selections of an entity (empty when it selects nobody)."""
        return self._selections.get(entity_id, ())

    def iter_selections(self) -> Iterator[Tuple[str, Tuple[str, ...]]]:
        """Iterate (chooser, selections) in input order."""
        return iter(self._selections.items())

    def iter_relations(self) -> Iterator[Tuple[str, str]]:
        """Iterate directed (source, target) relations in input order."""
        for source_id, target_ids in self._selections.items():
            for target_id in target_ids:
                yield source_id, target_id

    def has_relation(self, source_id: str, target_id: str) -> bool:
        return (source_id, target_id) in self._relations

    def group_tags(self) -> List[str]:
        """Distinct group tags in order of first appearance."""
        tags = {}
        for entity in self._entities.values():
            for tag in entity.group_tags:
                tags.setdefault(tag, None)
        return list(tags)

    def choosers(self) -> List[str]:
        """Entities with at least one outgoing selection."""
        return [entity_id for entity_id, targets in self._selections.items() if targets]

    def __len__(self) -> int:
        return len(self._entities)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._entities

    def get_statistics(self) -> Dict[str, Any]:
        return {
            'n_entities': len(self._entities),
            'n_choosers': len(self.choosers()),
            'n_relations': len(self._relations),
            'n_orphans': self.orphan_count
        }


@dataclass(frozen=True)
class WeightedEdge:
    """Undirected edge with directionality (1 = one-way, 2 = mutual) and IDF weight."""
    endpoint_a: str
    endpoint_b: str
    directionality: int
    weight: float

    def __post_init__(self):
        if not self.endpoint_a < self.endpoint_b:
            raise GraphConstructionError(
                f"Edge endpoints not in canonical order: {self.endpoint_a!r}, {self.endpoint_b!r}"
            )
        if self.directionality not in (1, 2):
            raise GraphConstructionError(f"Invalid directionality {self.directionality}")
        if not self.weight > 0:
            raise GraphConstructionError(f"Edge weight must be positive, got {self.weight}")

    @property
    def key(self) -> Tuple[str, str]:
        return (self.endpoint_a, self.endpoint_b)

    @property
    def is_mutual(self) -> bool:
        return self.directionality == 2

    def to_dict(self) -> Dict[str, Any]:
        return {
            'source': self.endpoint_a,
            'target': self.endpoint_b,
            'directionality': self.directionality,
            'weight': self.weight
        }


@dataclass
class WeightedGraph:
    """Deduplicated undirected edge list plus the IDF map it was weighted with."""
    edges: List[WeightedEdge]
    idf_map: Dict[str, float]

    def nodes(self) -> List[str]:
        """Edge endpoints in order of first appearance."""
        seen = {}
        for edge in self.edges:
            seen.setdefault(edge.endpoint_a, None)
            seen.setdefault(edge.endpoint_b, None)
        return list(seen)

    def total_weight(self) -> float:
        return sum(edge.weight for edge in self.edges)

    def to_networkx(self) -> nx.Graph:
        """Build an undirected networkx graph; node order follows edge order."""
        G = nx.Graph()
        for edge in self.edges:
            G.add_edge(edge.endpoint_a, edge.endpoint_b,
                       weight=edge.weight, directionality=edge.directionality)
        return G

    def get_statistics(self) -> Dict[str, Any]:
        return {
            'n_nodes': len(self.nodes()),
            'n_edges': len(self.edges),
            'n_mutual_edges': sum(1 for edge in self.edges if edge.is_mutual),
            'total_weight': self.total_weight()
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            'edges': [edge.to_dict() for edge in self.edges],
            'idf': dict(self.idf_map)
        }


@dataclass
class CommunityPartition:
    """Result of one community detection run."""
    assignments: Dict[str, int] = field(default_factory=dict)
    iterations: int = 0
    moves: int = 0
    converged: bool = True
    modularity: Optional[float] = None

    def communities(self) -> Dict[int, List[str]]:
        """Community id -> members, both in node order."""
        groups = defaultdict(list)
        for node, community_id in self.assignments.items():
            groups[community_id].append(node)
        return dict(groups)

    @property
    def n_communities(self) -> int:
        return len(set(self.assignments.values()))

    def is_empty(self) -> bool:
        return not self.assignments

    def to_dict(self) -> Dict[str, Any]:
        return {
            'assignments': dict(self.assignments),
            'n_communities': self.n_communities,
            'iterations': self.iterations,
            'moves': self.moves,
            'converged': self.converged,
            'modularity': self.modularity
        }


@dataclass
class MemberRole:
    """Connectivity of one member inside its cluster."""
    id: str
    name: str
    group_tags: Tuple[str, ...]
    degree: int
    weight_sum: float
    coreness: float
    role: str

    @property
    def is_core(self) -> bool:
        return self.role == ROLE_CORE

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'group_tags': list(self.group_tags),
            'degree': self.degree,
            'weight_sum': self.weight_sum,
            'coreness': self.coreness,
            'role': self.role
        }


@dataclass
class Cluster:
    """Community of the weighted graph that survived size and density filtering."""
    id: int
    members: List[str]
    member_roles: List[MemberRole]
    edges: List[WeightedEdge]
    density: float
    core_density: float
    total_weight: float
    dominant_group_tags: List[str]

    @property
    def core_members(self) -> List[str]:
        return [m.id for m in self.member_roles if m.role == ROLE_CORE]

    @property
    def peripheral_members(self) -> List[str]:
        return [m.id for m in self.member_roles if m.role == ROLE_PERIPHERAL]

    @property
    def size(self) -> int:
        return len(self.members)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'members': list(self.members),
            'member_roles': [m.to_dict() for m in self.member_roles],
            'core_members': self.core_members,
            'peripheral_members': self.peripheral_members,
            'edges': [edge.to_dict() for edge in self.edges],
            'density': self.density,
            'core_density': self.core_density,
            'total_weight': self.total_weight,
            'dominant_group_tags': list(self.dominant_group_tags)
        }


@dataclass
class PMIPair:
    """Unordered pair linked by at least one direct selection, scored by PMI."""
    entity_a: Entity
    entity_b: Entity
    observation_count: int
    pmi: float
    cross_group: bool

    @property
    def key(self) -> Tuple[str, str]:
        return canonical_pair(self.entity_a.id, self.entity_b.id)

    @property
    def is_mutual(self) -> bool:
        return self.observation_count == 2

    def involves(self, entity_id: str) -> bool:
        return entity_id in (self.entity_a.id, self.entity_b.id)

    def partner_of(self, entity_id: str) -> Entity:
        return self.entity_b if self.entity_a.id == entity_id else self.entity_a

    def to_dict(self) -> Dict[str, Any]:
        return {
            'entity_a': self.entity_a.to_dict(),
            'entity_b': self.entity_b.to_dict(),
            'observation_count': self.observation_count,
            'pmi': self.pmi,
            'cross_group': self.cross_group
        }


@dataclass
class BridgePair:
    """Cross-group pair selected together by several distinct choosers."""
    entity_a: Entity
    entity_b: Entity
    voters: List[Entity]
    pmi: float

    @property
    def voter_count(self) -> int:
        return len(self.voters)

    @property
    def key(self) -> Tuple[str, str]:
        return canonical_pair(self.entity_a.id, self.entity_b.id)

    def involves(self, entity_id: str) -> bool:
        return entity_id in (self.entity_a.id, self.entity_b.id)

    def partner_of(self, entity_id: str) -> Entity:
        return self.entity_b if self.entity_a.id == entity_id else self.entity_a

    def to_dict(self) -> Dict[str, Any]:
        return {
            'entity_a': self.entity_a.to_dict(),
            'entity_b': self.entity_b.to_dict(),
            'voter_count': self.voter_count,
            'voters': [v.to_dict() for v in self.voters],
            'pmi': self.pmi
        }


@dataclass
class BridgeCluster:
    """Community found on the graph of high-signal bridge pairs."""
    id: int
    members: List[Entity]
    edges: List[BridgePair]
    total_voter_count: int
    avg_pmi: float
    group_tags: List[str]

    @property
    def group_tag_count(self) -> int:
        return len(self.group_tags)

    @property
    def support_score(self) -> int:
        """Ranking key: groups spanned times distinct supporting voters."""
        return self.group_tag_count * self.total_voter_count

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'members': [m.id for m in self.members],
            'member_details': [m.to_dict() for m in self.members],
            'edges': [edge.to_dict() for edge in self.edges],
            'total_voter_count': self.total_voter_count,
            'avg_pmi': self.avg_pmi,
            'group_tags': list(self.group_tags),
            'group_tag_count': self.group_tag_count
        }


@dataclass(frozen=True)
class CommonSelection:
    """A selection shared by several choosers, with its rarity."""
    entity: Entity
    idf: float

    def to_dict(self) -> Dict[str, Any]:
        data = self.entity.to_dict()
        data['idf'] = self.idf
        return data


@dataclass
class SimilarityGroup:
    """Choosers sharing exactly the same common selections with a focal entity."""
    common_selections: List[CommonSelection]
    members: List[Entity]
    avg_idf: float

    @property
    def common_count(self) -> int:
        return len(self.common_selections)

    def common_ids(self) -> List[str]:
        return [c.entity.id for c in self.common_selections]

    def power_mean_idf(self, p: float = 3) -> float:
        """Power mean of the common selections' IDF; large p favours the rarest ones."""
        from selection_network.metrics.rarity_metrics import power_mean
        return power_mean([c.idf for c in self.common_selections], p)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'common_count': self.common_count,
            'avg_idf': self.avg_idf,
            'common_selections': [c.to_dict() for c in self.common_selections],
            'members': [m.to_dict() for m in self.members]
        }


@dataclass
class SimilarityPair:
    """Two choosers with overlapping selections."""
    entity_a: Entity
    entity_b: Entity
    common_selections: List[CommonSelection]
    rare_score: float

    @property
    def common_count(self) -> int:
        return len(self.common_selections)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'entity_a': self.entity_a.to_dict(),
            'entity_b': self.entity_b.to_dict(),
            'common_count': self.common_count,
            'rare_score': self.rare_score,
            'common_selections': [c.to_dict() for c in self.common_selections]
        }


@dataclass
class IncomingStats:
    """How often an entity is selected, broken down by its choosers' group tags."""
    entity: Entity
    count: int
    by_group: Dict[str, int]

    def to_dict(self) -> Dict[str, Any]:
        data = self.entity.to_dict()
        data['count'] = self.count
        data['by_group'] = dict(self.by_group)
        return data


@dataclass
class PartnerScore:
    """A partner in a pairwise ranking, seen from one entity."""
    partner: Entity
    pmi: Optional[float] = None
    voter_count: Optional[int] = None
    voters: List[Entity] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'partner': self.partner.to_dict(),
            'pmi': self.pmi
        }
        if self.voter_count is not None:
            data['voter_count'] = self.voter_count
            data['voters'] = [v.to_dict() for v in self.voters]
        return data


@dataclass
class EntityProfile:
    """Everything the engine knows about one entity."""
    entity: Entity
    selected: List[Entity]
    selected_by: List[Entity]
    mutual_pairs: List[PartnerScore]
    bridges: List[PartnerScore]
    incoming_by_group: Dict[str, int]
    similarity_groups: List[SimilarityGroup] = field(default_factory=list)

    @property
    def incoming_count(self) -> int:
        return len(self.selected_by)

    def to_dict(self) -> Dict[str, Any]:
        data = self.entity.to_dict()
        data.update({
            'selected': [e.to_dict() for e in self.selected],
            'selected_by': [e.to_dict() for e in self.selected_by],
            'mutual_pairs': [p.to_dict() for p in self.mutual_pairs],
            'bridges': [b.to_dict() for b in self.bridges],
            'incoming_count': self.incoming_count,
            'incoming_by_group': dict(self.incoming_by_group),
            'similarity_groups': [g.to_dict() for g in self.similarity_groups]
        })
        return data
