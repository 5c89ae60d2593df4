"""Shared pytest fixtures for all test modules."""

import os
import subprocess
import sys

import httpx
import pytest

from pvsadm.cloud.api import ENVIRONMENTS, CloudSession
from pvsadm.cloud.types import ResourceInstance


PROJECT_ROOT = os.path.normpath(os.path.join(os.path.dirname(__file__), ".."))

_CLI_SECRET_ENV_VARS = ("IBMCLOUD_API_KEY", "IC_API_KEY", "IBMCLOUD_ENV")


@pytest.fixture(scope="session")
def project_root():
    """Absolute path to the project root directory."""
    return PROJECT_ROOT


@pytest.fixture(scope="session")
def run_cli(project_root):
    """Return a callable that invokes the pvsadm CLI as a subprocess.

    IBM Cloud credentials are stripped from the environment unless passed
    explicitly through *env*.
    """

    def _run(*args, env=None):
        run_env = {k: v for k, v in os.environ.items() if k not in _CLI_SECRET_ENV_VARS}
        run_env.update(env or {})
        result = subprocess.run(
            [sys.executable, "-m", "pvsadm.pvsadm", *args],
            capture_output=True,
            text=True,
            cwd=project_root,
            env=run_env,
        )
        return result.returncode, result.stdout, result.stderr

    return _run


# ── Unit-test fixtures ──────────────────────────────────────────────


class FakeClock:
    """Virtual clock for the poller: sleeping advances time instantly."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def time(self):
        return self.now

    async def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
async def make_session():
    """Return a factory building a CloudSession over an httpx.MockTransport handler."""
    clients = []

    def _make(handler, environment="prod"):
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        clients.append(client)
        return CloudSession(client=client, token="test-token", endpoints=ENVIRONMENTS[environment])

    yield _make

    for client in clients:
        await client.aclose()


@pytest.fixture
def workspace():
    """A PowerVS workspace as returned by the Resource Controller."""
    return ResourceInstance(
        guid="7845d372-d4e1-46b8-91fc-41051c984601",
        name="upstream-core-lon04",
        crn="crn:v1:bluemix:public:power-iaas:lon04:a/abc123:7845d372-d4e1-46b8-91fc-41051c984601::",
        region_id="lon04",
    )
