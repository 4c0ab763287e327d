"""Pytest fixtures for integration tests against a live store.

This module provides fixtures for:
- Docker Compose lifecycle management (single-node Elasticsearch)
- Store client connections
- Per-test run identities and provisioned TSDS datastreams

Test subset execution:
    pytest -m integration              # Run only integration tests
    pytest -m "integration and not slow"

Set TSDSPROBE_URL to point at an already running store; Docker Compose is
only started when nothing answers there.
"""

import os
import subprocess
import time
from pathlib import Path
from typing import Generator, Optional

import pytest
import requests

from tsdsprobe.core.config import StoreConfig
from tsdsprobe.core.identity import RunIdentity, new_run_identity
from tsdsprobe.deployer.client import StoreClient
from tsdsprobe.deployer.provisioner import SchemaProvisioner
from tsdsprobe.testing.verifier import Verifier
from tsdsprobe.testing.writer import DocumentWriter

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent.parent

STORE_URL = os.getenv("TSDSPROBE_URL", "http://localhost:9200")
KEEP_RESOURCES = os.getenv("TSDSPROBE_KEEP_RESOURCES", "").lower() in {"1", "true", "yes"}


def is_docker_running() -> bool:
    """Check if Docker daemon is running."""
    try:
        result = subprocess.run(
            ["docker", "info"],
            capture_output=True,
            timeout=10,
        )
        return result.returncode == 0
    except (OSError, subprocess.SubprocessError):
        return False


def is_service_healthy(url: str, timeout: int = 5) -> bool:
    """Check if a service is healthy by making an HTTP request."""
    try:
        response = requests.get(url, timeout=timeout)
        return response.status_code == 200
    except requests.exceptions.RequestException:
        return False


def wait_for_service(
    check_fn,
    service_name: str,
    max_wait: int = 120,
    interval: int = 2,
) -> bool:
    """Wait for a service to become healthy."""
    start = time.time()
    while time.time() - start < max_wait:
        if check_fn():
            return True
        print(f"Waiting for {service_name}...")
        time.sleep(interval)
    return False


class DockerComposeManager:
    """Manager for Docker Compose lifecycle."""

    def __init__(self, compose_file: Path):
        self.compose_file = compose_file
        self.started = False

    def start(self) -> None:
        """Start Docker Compose services."""
        if self.started:
            return

        print(f"\nStarting Docker Compose from {self.compose_file}...")
        subprocess.run(
            ["docker", "compose", "-f", str(self.compose_file), "up", "-d"],
            check=True,
            cwd=self.compose_file.parent,
        )
        self.started = True

        print("Waiting for Elasticsearch...")
        if not wait_for_service(
            lambda: is_service_healthy(f"{STORE_URL}/_cluster/health?wait_for_status=yellow"),
            "Elasticsearch",
            max_wait=180,
        ):
            raise RuntimeError("Elasticsearch did not become healthy")

    def stop(self) -> None:
        """Stop Docker Compose services."""
        if not self.started:
            return

        print("\nStopping Docker Compose...")
        subprocess.run(
            ["docker", "compose", "-f", str(self.compose_file), "down", "-v"],
            check=True,
            cwd=self.compose_file.parent,
        )
        self.started = False


# Global Docker Compose manager (reused across test session)
_docker_manager: Optional[DockerComposeManager] = None


def get_docker_manager() -> DockerComposeManager:
    """Get or create the Docker Compose manager."""
    global _docker_manager
    if _docker_manager is None:
        _docker_manager = DockerComposeManager(PROJECT_ROOT / "docker-compose.yml")
    return _docker_manager


# =============================================================================
# Pytest Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def store_services() -> Generator[None, None, None]:
    """
    Session-scoped fixture that makes sure a store is reachable.

    Reuses a store already answering at TSDSPROBE_URL, otherwise starts the
    Docker Compose stack, otherwise skips.
    """
    if is_service_healthy(STORE_URL):
        yield
        return

    if not is_docker_running():
        pytest.skip(f"No store at {STORE_URL} and Docker is not running")

    manager = get_docker_manager()
    manager.start()

    yield

    # Optionally stop services (comment out to keep running for debugging)
    # manager.stop()


@pytest.fixture(scope="session")
def store_client(store_services) -> Generator[StoreClient, None, None]:
    """Session-scoped store client."""
    with StoreClient(StoreConfig(url=STORE_URL)) as client:
        yield client


@pytest.fixture(scope="function")
def provisioner(store_client: StoreClient) -> SchemaProvisioner:
    return SchemaProvisioner(store_client)


@pytest.fixture(scope="function")
def writer(store_client: StoreClient) -> DocumentWriter:
    return DocumentWriter(store_client)


@pytest.fixture(scope="function")
def verifier(store_client: StoreClient) -> Verifier:
    return Verifier(store_client)


@pytest.fixture(scope="function")
def run_identity(provisioner: SchemaProvisioner) -> Generator[RunIdentity, None, None]:
    """Fresh run identity; its resources are removed after the test."""
    identity = new_run_identity("tsdsprobe-it")
    yield identity
    if not KEEP_RESOURCES:
        provisioner.teardown(identity)


@pytest.fixture(scope="function")
def provisioned(provisioner: SchemaProvisioner, run_identity: RunIdentity) -> RunIdentity:
    """Run identity whose templates and datastream already exist."""
    provisioner.provision(run_identity)
    return run_identity


# =============================================================================
# Markers for test categorization
# =============================================================================


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test requiring a running store",
    )
    config.addinivalue_line(
        "markers",
        "elasticsearch: mark test as requiring Elasticsearch",
    )
    config.addinivalue_line(
        "markers",
        "slow: mark test as slow (may take > 30 seconds)",
    )
