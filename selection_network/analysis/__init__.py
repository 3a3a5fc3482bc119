"""
PROJECT:
-------
selection-network

TITLE:
------
__init__.py (analysis module)

MAIN OBJECTIVE:
---------------
This script initializes the analysis module, exposing the per-entity profile builder.

Dependencies:
-------------
- selection_network.analysis.entity_profile

MAIN FEATURES:
--------------
1) Exports EntityProfiler for per-entity views

Author:
-------
Antoine Lemor
"""

from selection_network.analysis.entity_profile import EntityProfiler

__all__ = ['EntityProfiler']
