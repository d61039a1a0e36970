"""Shared pytest fixtures for the Universal Dev Environment test suite.

Provides reusable fixtures for:
- Temporary project and home directories
- Settings pointing at an isolated cache
- An offline template cache (every download fails)
- Project configurations for each supported stack
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest

from universal_dev_env.cache import TemplateCache
from universal_dev_env.config import ProjectConfig, Settings
from universal_dev_env.scaffolder.templates import TemplateRenderer
from universal_dev_env.strategy import Strategy, select_configuration_strategy


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------

@pytest.fixture
def tmp_project_dir(tmp_path: Path) -> Path:
    """Temporary directory for generated projects (auto-cleanup)."""
    project_dir = tmp_path / "test-project"
    project_dir.mkdir()
    yield project_dir


@pytest.fixture
def tmp_git_repo(tmp_path: Path) -> Path:
    """Temporary directory initialised as a git repository."""
    repo_dir = tmp_path / "test-repo"
    repo_dir.mkdir()
    subprocess.run(["git", "init"], cwd=repo_dir, check=True, capture_output=True)
    yield repo_dir


# ---------------------------------------------------------------------------
# Settings & cache
# ---------------------------------------------------------------------------

@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings with home and cache directories under ``tmp_path``."""
    return Settings(
        home_dir=tmp_path / "home" / ".universal-dev-env",
        template_base_url="https://example.invalid/universal-dev-env/main",
    )


@pytest.fixture
def offline_cache(settings: Settings) -> TemplateCache:
    """A TemplateCache whose downloads always fail with a connection error."""
    cache = TemplateCache(settings)

    async def _fail(url: str) -> str:
        raise httpx.ConnectError("network unreachable", request=httpx.Request("GET", url))

    cache.fetch = _fail
    return cache


@pytest.fixture
def renderer() -> TemplateRenderer:
    return TemplateRenderer()


# ---------------------------------------------------------------------------
# Project configurations
# ---------------------------------------------------------------------------

@pytest.fixture
def make_config() -> Callable[..., ProjectConfig]:
    """Factory for ``ProjectConfig`` with sensible test defaults."""

    def _make(**overrides: Any) -> ProjectConfig:
        values: dict[str, Any] = {"project_name": "test-project", "project_type": "react"}
        values.update(overrides)
        return ProjectConfig(**values)

    return _make


@pytest.fixture
def plan() -> Callable[[ProjectConfig], Strategy]:
    return select_configuration_strategy


@pytest.fixture
def react_express_config(make_config) -> ProjectConfig:
    return make_config(project_name="shop", project_type="react", backend="express")


@pytest.fixture
def python_ml_config(make_config) -> ProjectConfig:
    return make_config(project_name="ml-lab", project_type="python", include_ml=True)


@pytest.fixture
def full_stack_config(make_config) -> ProjectConfig:
    return make_config(project_name="portal", project_type="full-stack")
