#!/usr/bin/env python3
"""
Core data models for the actions reporter.

Contains all data structures used throughout the application.
"""

from .run import RunRecord, ById, ByComposite, Identity
from .stats import WorkflowGroup, WorkflowStats

__all__ = ['RunRecord', 'ById', 'ByComposite', 'Identity', 'WorkflowGroup', 'WorkflowStats']
