"""
PROJECT:
-------
selection-network

TITLE:
------
__init__.py

MAIN OBJECTIVE:
---------------
This script initializes the selection network framework, which analyses a directed "who selects
whom" relation: rarity weighting, weighted community detection, PMI and bridge rankings, and
shared-selection similarity.

Dependencies:
-------------
- selection_network.core
- selection_network.pipelines

MAIN FEATURES:
--------------
1) Exports the dataset model and configuration
2) Exports the batch analysis pipeline

Author:
-------
Antoine Lemor
"""

from selection_network.core.config import AnalysisConfig
from selection_network.core.models import Entity, RelationDataset
from selection_network.pipelines.analysis_pipeline import AnalysisPipeline, AnalysisResults, run_analysis

__version__ = '1.0.0'

__all__ = [
    'AnalysisConfig',
    'Entity',
    'RelationDataset',
    'AnalysisPipeline',
    'AnalysisResults',
    'run_analysis'
]
