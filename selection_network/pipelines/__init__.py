"""
PROJECT:
-------
selection-network

TITLE:
------
__init__.py (pipelines module)

MAIN OBJECTIVE:
---------------
This script initializes the pipelines module, exposing the batch analysis pipeline and its
results container.

Dependencies:
-------------
- selection_network.pipelines.analysis_pipeline

MAIN FEATURES:
--------------
1) Exports AnalysisPipeline for batch execution
2) Exports AnalysisResults for summaries, dictionary export and pandas frames
3) Exports run_analysis as a one-call entry point

Author:
-------
Antoine Lemor
"""

from selection_network.pipelines.analysis_pipeline import AnalysisPipeline, AnalysisResults, run_analysis

__all__ = [
    'AnalysisPipeline',
    'AnalysisResults',
    'run_analysis'
]
