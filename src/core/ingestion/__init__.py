"""
Run ingestion from CSV files and the GitHub Actions API.
"""

from .file_importer import parse_runs_csv, load_runs_csv
from .github_client import GitHubActionsClient, fetch_runs_sync, TIME_WINDOWS

__all__ = ['parse_runs_csv', 'load_runs_csv', 'GitHubActionsClient', 'fetch_runs_sync', 'TIME_WINDOWS']
