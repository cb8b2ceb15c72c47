import asyncio
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from core.config import ApplicationConfig, Config, GitHubConfig, StorageConfig  # noqa: E402
from core.container import Container  # noqa: E402
from core.kv_store import InMemoryKeyValueStore  # noqa: E402
from core.models.run import RunRecord  # noqa: E402
from core.ordering import GlobalOrder  # noqa: E402
from core.run_store import RunStore  # noqa: E402


class FakeResponse:
    """Stands in for an aiohttp response used as an async context manager."""

    def __init__(self, status: int = 200, payload: Any = None, reason: str = "OK", delay: float = 0.0) -> None:
        self.status = status
        self.payload = payload
        self.reason = reason
        self.delay = delay
        self.session: Optional["FakeSession"] = None

    @property
    def ok(self) -> bool:
        return self.status < 400

    async def json(self, content_type: Optional[str] = "application/json") -> Any:
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload

    async def __aenter__(self) -> "FakeResponse":
        if self.session is not None:
            self.session.in_flight += 1
            self.session.max_in_flight = max(self.session.max_in_flight, self.session.in_flight)
        if self.delay:
            await asyncio.sleep(self.delay)
        return self

    async def __aexit__(self, *exc_info) -> bool:
        if self.session is not None:
            self.session.in_flight -= 1
        return False


Route = Union[FakeResponse, Exception, Callable[[Optional[Dict[str, str]]], Union[FakeResponse, Exception]]]


class FakeSession:
    """Routes GET requests by URL to canned responses and records every call."""

    def __init__(self, routes: Dict[str, Route]) -> None:
        self.routes = routes
        self.calls: List[Dict[str, Any]] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False

    def get(self, url: str, params: Optional[Dict[str, str]] = None, headers: Optional[Dict[str, str]] = None):
        self.calls.append({"url": url, "params": params, "headers": headers})
        route = self.routes[url]
        result = route(params) if callable(route) and not isinstance(route, FakeResponse) else route
        if isinstance(result, Exception):
            raise result
        result.session = self
        return result

    async def close(self) -> None:
        self.closed = True


def make_run(name: str = "Build", status: str = "success", branch: str = "main",
             timestamp: str = "2024-01-01T10:00:00Z", duration: float = 10, **kwargs) -> RunRecord:
    return RunRecord(name=name, status=status, branch=branch, timestamp=timestamp, duration=duration, **kwargs)


def make_github_run(run_id: int, name: str = "CI", conclusion: Optional[str] = "success",
                    branch: str = "main", created_at: str = "2024-03-01T12:00:00Z",
                    started_at: Optional[str] = "2024-03-01T12:00:10Z",
                    updated_at: str = "2024-03-01T12:05:10Z") -> Dict[str, Any]:
    return {
        "id": run_id,
        "name": name,
        "conclusion": conclusion,
        "head_branch": branch,
        "created_at": created_at,
        "run_started_at": started_at,
        "updated_at": updated_at,
        "jobs_url": f"https://api.test/repos/octo/repo/actions/runs/{run_id}/jobs",
        "html_url": f"https://github.test/octo/repo/actions/runs/{run_id}",
    }


def make_jobs_payload(*step_conclusions: str) -> Dict[str, Any]:
    return {"jobs": [{"steps": [{"conclusion": conclusion} for conclusion in step_conclusions]}]}


@pytest.fixture
def kv_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def run_store(kv_store) -> RunStore:
    return RunStore(kv_store)


@pytest.fixture
def global_order(kv_store) -> GlobalOrder:
    return GlobalOrder(kv_store)


@pytest.fixture
def config() -> Config:
    return Config(
        storage=StorageConfig(backend="memory"),
        github=GitHubConfig(token=None, api_url="https://api.test"),
        app=ApplicationConfig(),
    )


@pytest.fixture
def container(config, kv_store, run_store, global_order) -> Container:
    container = Container()
    container.register_instance("config", config)
    container.register_instance("kv_store", kv_store)
    container.register_instance("run_store", run_store)
    container.register_instance("global_order", global_order)
    return container
