"""
PROJECT:
-------
selection-network

TITLE:
------
exceptions.py

MAIN OBJECTIVE:
---------------
This script defines custom exception classes for the selection network framework, providing
structured error handling for configuration, input datasets, graph construction and detection.

Dependencies:
-------------
None

MAIN FEATURES:
--------------
1) Base SelectionNetworkError exception class
2) Configuration and dataset validation errors
3) Graph construction invariant errors
4) Community detection errors

Author:
-------
Antoine Lemor
"""


class SelectionNetworkError(Exception):
    """Base exception for selection network analysis."""
    pass


class ConfigurationError(SelectionNetworkError):
    """Configuration-related errors."""
    pass


class DatasetError(SelectionNetworkError):
    """Malformed relation dataset."""
    pass


class GraphConstructionError(SelectionNetworkError):
    """Weighted graph invariant violated."""
    pass


class DetectionError(SelectionNetworkError):
    """Community detection errors."""
    pass
