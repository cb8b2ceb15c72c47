#!/usr/bin/env python3
"""
GitHub Actions run ingestion.

Pages through the workflow-runs listing of a repository for a lookback
window, then inspects each run's job steps to spot runs that were mostly
skipped. Step-detail requests go out in fixed-size batches so only a bounded
number are in flight at once.
"""

import asyncio
import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

import aiohttp

from core.exceptions import InputValidationError, RemoteApiError, StepDetailError
from core.models.run import RunRecord, parse_timestamp

logger = logging.getLogger(__name__)

DEFAULT_API_URL = 'https://api.github.com'
DEFAULT_PAGE_SIZE = 100
DEFAULT_BATCH_SIZE = 5

TIME_WINDOWS = {
    '24h': 1,
    '7d': 7,
    '30d': 30,
}
DEFAULT_TIME_WINDOW = '24h'

# A run counts as skipped when more than this many of its steps were skipped
SKIPPED_STEPS_LIMIT = 1

ProgressCallback = Callable[[int, int], None]


def validate_request(token: Optional[str], repo: Optional[str]) -> Tuple[str, str]:
    """
    Check caller input before any request is made.

    Returns:
        (owner, repository name)

    Raises:
        InputValidationError: Missing token/repo or repo not in owner/repo form
    """
    if not token or not repo:
        raise InputValidationError("Please provide a Personal Access Token and a repository name.")

    parts = repo.split('/')
    if len(parts) != 2 or not all(part.strip() for part in parts):
        raise InputValidationError('Invalid repository format. Please use "owner/repo".', field='repo')

    owner, name = (part.strip() for part in parts)
    return owner, name


def window_start_date(time_window: str, now: Optional[datetime] = None) -> str:
    """
    First day (YYYY-MM-DD, UTC) of the lookback window.

    Unknown selectors fall back to the 24 hour window.
    """
    days = TIME_WINDOWS.get(time_window)
    if days is None:
        logger.warning(f"Unknown time window '{time_window}', using {DEFAULT_TIME_WINDOW}")
        days = TIME_WINDOWS[DEFAULT_TIME_WINDOW]

    now = now or datetime.now(timezone.utc)
    return (now.astimezone(timezone.utc) - timedelta(days=days)).date().isoformat()


def count_skipped_steps(jobs_payload: Dict[str, Any]) -> int:
    """Number of steps across all jobs whose conclusion is 'skipped'."""
    return sum(
        1
        for job in jobs_payload.get('jobs') or []
        for step in job.get('steps') or []
        if step.get('conclusion') == 'skipped'
    )


def run_duration_seconds(run: Dict[str, Any]) -> float:
    """Seconds from run start (or creation) to last update, never negative."""
    started = parse_timestamp(run.get('run_started_at') or run['created_at'])
    updated = parse_timestamp(run['updated_at'])
    duration = (updated - started).total_seconds()
    return duration if duration > 0 else 0


def run_to_record(run: Dict[str, Any], status: str) -> RunRecord:
    """Convert a workflow run payload to a RunRecord with the given status."""
    return RunRecord(
        id=run['id'],
        name=run['name'],
        status=status,
        branch=run.get('head_branch') or '',
        timestamp=run['created_at'],
        duration=run_duration_seconds(run),
        url=run.get('html_url')
    )


class GitHubActionsClient:
    """Async client for workflow runs with batched step-detail requests."""

    def __init__(self,
                 token: str,
                 api_url: str = DEFAULT_API_URL,
                 timeout: int = 30,
                 page_size: int = DEFAULT_PAGE_SIZE,
                 batch_size: int = DEFAULT_BATCH_SIZE,
                 session: Optional[aiohttp.ClientSession] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        """
        Initialize GitHub Actions client.

        Args:
            token: Personal access token, sent as a bearer credential
            api_url: API base URL
            timeout: Total request timeout in seconds
            page_size: Runs per listing page
            batch_size: Step-detail requests issued together
            session: Pre-built session (not closed by this client)
            clock: Returns the current time; used for the lookback window
        """
        self._token = token
        self.api_url = api_url.rstrip('/')
        self.timeout = timeout
        self.page_size = page_size
        self.batch_size = batch_size
        self.clock = clock or (lambda: datetime.now(timezone.utc))

        self._session = session
        self._owns_session = session is None

    async def __aenter__(self):
        """Async context manager entry."""
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        if self._session and self._owns_session:
            await self._session.close()
            self._session = None

    def _headers(self) -> Dict[str, str]:
        return {
            'Authorization': f"Bearer {self._token}",
            'Accept': 'application/vnd.github.v3+json',
            'User-Agent': 'actions-reporter/1.0'
        }

    def _require_session(self):
        if not self._session:
            raise RuntimeError("GitHubActionsClient must be used as async context manager")
        return self._session

    async def list_runs(self, owner: str, repo: str, since: str) -> List[Dict[str, Any]]:
        """
        Fetch every workflow run created on or after ``since``.

        Pages are requested until one comes back shorter than the page size.

        Raises:
            RemoteApiError: On any non-success response or transport failure
        """
        session = self._require_session()
        url = f"{self.api_url}/repos/{owner}/{repo}/actions/runs"

        runs: List[Dict[str, Any]] = []
        page = 1
        while True:
            params = {
                'created': f">={since}",
                'per_page': str(self.page_size),
                'page': str(page)
            }
            logger.debug(f"Fetching runs page {page} for {owner}/{repo}")
            try:
                async with session.get(url, params=params, headers=self._headers()) as response:
                    if not response.ok:
                        raise RemoteApiError(await self._error_detail(response), status=response.status, url=url)
                    data = await response.json()
            except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
                raise RemoteApiError(str(e) or e.__class__.__name__, url=url) from e

            if not isinstance(data, dict):
                raise RemoteApiError(f"unexpected runs listing payload: {type(data).__name__}", url=url)
            page_runs = data.get('workflow_runs') or []
            if not isinstance(page_runs, list):
                raise RemoteApiError("workflow_runs is not a list", url=url)

            runs.extend(page_runs)
            logger.info(f"Fetched page {page}: {len(page_runs)} runs ({len(runs)} total)")

            if len(page_runs) < self.page_size:
                return runs
            page += 1

    @staticmethod
    async def _error_detail(response) -> str:
        try:
            payload = await response.json(content_type=None)
        except (aiohttp.ClientError, ValueError):
            payload = None
        message = payload.get('message') if isinstance(payload, dict) else None
        return message or response.reason or f"HTTP {response.status}"

    async def classify_run(self, run: Dict[str, Any]) -> RunRecord:
        """
        Build a record for one run, reclassifying it as skipped when more than
        one of its steps was skipped.

        A failed step-detail request keeps the run's own conclusion.
        """
        status = run.get('conclusion') or 'in_progress'
        jobs_url = run.get('jobs_url')

        if jobs_url:
            session = self._require_session()
            try:
                async with session.get(jobs_url, headers=self._headers()) as response:
                    if response.ok:
                        jobs_payload = await response.json()
                        if count_skipped_steps(jobs_payload) > SKIPPED_STEPS_LIMIT:
                            status = 'skipped'
                    else:
                        logger.warning(f"Step details for run {run.get('id')} returned HTTP {response.status}")
            except (aiohttp.ClientError, asyncio.TimeoutError, ValueError, TypeError, AttributeError) as e:
                error = StepDetailError(run.get('id'), e)
                logger.error(f"{error.message}: {e}", extra={'context': error.context})

        return run_to_record(run, status)

    async def classify_runs(self, runs: List[Dict[str, Any]],
                            progress: Optional[ProgressCallback] = None) -> List[RunRecord]:
        """
        Classify runs in batches of ``batch_size``.

        Each batch is awaited as a whole before the next is issued; results
        keep input order.
        """
        records: List[RunRecord] = []
        total = len(runs)
        for start in range(0, total, self.batch_size):
            batch = runs[start:start + self.batch_size]
            records.extend(await asyncio.gather(*(self.classify_run(run) for run in batch)))
            logger.debug(f"Processed {len(records)}/{total} runs")
            if progress:
                progress(len(records), total)
        return records

    async def fetch_runs(self, repo: str, time_window: str = DEFAULT_TIME_WINDOW,
                         progress: Optional[ProgressCallback] = None) -> List[RunRecord]:
        """
        Fetch and classify all runs of ``owner/repo`` in the lookback window.

        Args:
            repo: Repository in owner/repo form
            time_window: '24h', '7d' or '30d'
            progress: Called with (processed, total) after each batch

        Returns:
            Run records in listing order

        Raises:
            InputValidationError: Bad token or repository, before any request
            RemoteApiError: The runs listing failed; nothing is returned
        """
        owner, name = validate_request(self._token, repo)
        since = window_start_date(time_window, self.clock())

        start_time = time.time()
        runs = await self.list_runs(owner, name, since)
        logger.info(f"Found {len(runs)} runs for {owner}/{name} since {since}")

        records = await self.classify_runs(runs, progress)
        logger.info(f"Classified {len(records)} runs in {time.time() - start_time:.2f}s")
        return records


def fetch_runs_sync(token: str,
                    repo: str,
                    time_window: str = DEFAULT_TIME_WINDOW,
                    api_url: str = DEFAULT_API_URL,
                    timeout: int = 30,
                    page_size: int = DEFAULT_PAGE_SIZE,
                    batch_size: int = DEFAULT_BATCH_SIZE,
                    progress: Optional[ProgressCallback] = None) -> List[RunRecord]:
    """
    Convenience function to fetch runs from synchronous code.

    Input is validated before an event loop or session is created.
    """
    validate_request(token, repo)

    async def _fetch():
        async with GitHubActionsClient(
            token=token,
            api_url=api_url,
            timeout=timeout,
            page_size=page_size,
            batch_size=batch_size
        ) as client:
            return await client.fetch_runs(repo, time_window, progress)

    return asyncio.run(_fetch())
