"""Configuration strategy selection.

Maps the user's ``(project_type, backend)`` choice to a ``Strategy``: how the
project is containerised, how it deploys, where the heavy tooling is installed
and which environment files to generate.  The mapping is a pure decision
table; unknown combinations fall back to the simplest strategy
(devcontainer / static / host) instead of raising.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from universal_dev_env.config import Backend, Feature, ProjectConfig, ProjectType


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class ContainerStrategy(str, Enum):
    DEVCONTAINER = "devcontainer"
    DOCKER = "docker"
    DOCKER_COMPOSE = "docker-compose"


class DeploymentStrategy(str, Enum):
    STATIC = "static"
    CONTAINERIZED = "containerized"
    SERVERLESS = "serverless"
    HYBRID = "hybrid"


class InstallLocation(str, Enum):
    HOST = "host"
    CONTAINER = "container"


class ConfigFormat(str, Enum):
    JSON = "json"
    YAML = "yaml"


# ---------------------------------------------------------------------------
# Strategy model
# ---------------------------------------------------------------------------

class IncludeTools(BaseModel):
    """Which tool groups belong in the environment."""

    model_config = ConfigDict(frozen=True)

    ai_clis: bool = False
    cloud_clis: bool = False
    heavy_tools: bool = False


class Strategy(BaseModel):
    """Derived container/deployment/tooling choices for a project."""

    model_config = ConfigDict(frozen=True)

    container_strategy: ContainerStrategy = Field(default=ContainerStrategy.DEVCONTAINER)
    deployment_strategy: DeploymentStrategy = Field(default=DeploymentStrategy.STATIC)
    install_location: InstallLocation = Field(default=InstallLocation.HOST)
    include_tools: IncludeTools = Field(default_factory=IncludeTools)
    environment_configs: list[str] = Field(default_factory=lambda: ["development"])
    config_format: ConfigFormat = Field(default=ConfigFormat.JSON)
    additional_configs: list[str] = Field(default_factory=list)

    @property
    def lightweight(self) -> bool:
        """``True`` when heavy CLIs live on the host rather than in the container."""
        return self.install_location == InstallLocation.CONTAINER


DEV = ["development"]
DEV_PROD = ["development", "production"]
DEV_STAGING_PROD = ["development", "staging", "production"]

# (container, deployment, install location, environments, config format)
_Row = tuple[ContainerStrategy, DeploymentStrategy, InstallLocation, list[str], ConfigFormat]

_DEFAULT_ROW: _Row = (
    ContainerStrategy.DEVCONTAINER,
    DeploymentStrategy.STATIC,
    InstallLocation.HOST,
    DEV,
    ConfigFormat.JSON,
)

_REACT_ROWS: dict[Backend, _Row] = {
    Backend.EXPRESS: (
        ContainerStrategy.DOCKER_COMPOSE,
        DeploymentStrategy.CONTAINERIZED,
        InstallLocation.CONTAINER,
        DEV_STAGING_PROD,
        ConfigFormat.JSON,
    ),
    Backend.NONE: _DEFAULT_ROW,
    Backend.NEXTJS: (
        ContainerStrategy.DOCKER,
        DeploymentStrategy.HYBRID,
        InstallLocation.CONTAINER,
        DEV_PROD,
        ConfigFormat.JSON,
    ),
    Backend.FIREBASE: (
        ContainerStrategy.DEVCONTAINER,
        DeploymentStrategy.SERVERLESS,
        InstallLocation.HOST,
        DEV_PROD,
        ConfigFormat.YAML,
    ),
    Backend.SERVERLESS: (
        ContainerStrategy.DEVCONTAINER,
        DeploymentStrategy.SERVERLESS,
        InstallLocation.HOST,
        DEV_PROD,
        ConfigFormat.YAML,
    ),
}

_PYTHON_ROW: _Row = (
    ContainerStrategy.DOCKER,
    DeploymentStrategy.CONTAINERIZED,
    InstallLocation.CONTAINER,
    DEV_PROD,
    ConfigFormat.YAML,
)

_FULL_STACK_ROW: _Row = (
    ContainerStrategy.DOCKER_COMPOSE,
    DeploymentStrategy.CONTAINERIZED,
    InstallLocation.CONTAINER,
    DEV_STAGING_PROD,
    ConfigFormat.JSON,
)


def _select_row(config: ProjectConfig) -> _Row:
    match config.project_type:
        case ProjectType.REACT:
            return _REACT_ROWS.get(config.backend, _DEFAULT_ROW)
        case ProjectType.PYTHON:
            return _PYTHON_ROW
        case ProjectType.FULL_STACK:
            return _FULL_STACK_ROW
        case _:
            return _DEFAULT_ROW


def select_configuration_strategy(config: ProjectConfig) -> Strategy:
    """Compute the ``Strategy`` for *config*.

    Pure and deterministic: the same config always yields an equal strategy.
    AI, cloud and heavy tooling are only included when tools are installed on
    the host; container installs stay lightweight.
    """
    container, deployment, location, environments, config_format = _select_row(config)
    on_host = location == InstallLocation.HOST

    additional: list[str] = []
    if config.project_type == ProjectType.PYTHON and config.include_ml:
        additional.extend(["jupyter", "conda"])
    if config.has_feature(Feature.PLAYWRIGHT):
        additional.append("playwright")

    return Strategy(
        container_strategy=container,
        deployment_strategy=deployment,
        install_location=location,
        include_tools=IncludeTools(
            ai_clis=on_host,
            cloud_clis=on_host,
            heavy_tools=on_host,
        ),
        environment_configs=list(environments),
        config_format=config_format,
        additional_configs=additional,
    )


# ---------------------------------------------------------------------------
# Port table
# ---------------------------------------------------------------------------

PORT_LABELS: dict[int, str] = {
    3000: "Application",
    3001: "API Server",
    5000: "Flask Server",
    5001: "Firebase Functions",
    5432: "PostgreSQL Database",
    6006: "TensorBoard",
    8000: "Python Server",
    8888: "Jupyter",
    9099: "Firebase Auth",
}


def get_project_ports(config: ProjectConfig) -> list[int]:
    """Return the ports a project listens on, primary port first."""
    if config.project_type == ProjectType.PYTHON:
        return [8000, 8888, 6006] if config.include_ml else [8000, 5000]
    if config.project_type == ProjectType.NODE:
        return [3000, 3001]
    if config.project_type == ProjectType.FULL_STACK:
        return [3000, 3001, 8000, 5432]
    if config.project_type == ProjectType.REACT:
        if config.backend == Backend.EXPRESS:
            return [3000, 3001, 5432]
        if config.backend == Backend.FIREBASE:
            return [3000, 5001, 9099]
    return [3000]


def get_port_labels(config: ProjectConfig) -> dict[int, str]:
    """Human-readable label for every port returned by :func:`get_project_ports`."""
    labels = dict(PORT_LABELS)
    if config.project_type == ProjectType.REACT:
        labels[3000] = "React Client"
        if config.backend == Backend.EXPRESS:
            labels[3001] = "Express Server"
    elif config.project_type == ProjectType.FULL_STACK:
        labels[3000] = "Frontend"
        labels[3001] = "Backend API"
    elif config.project_type == ProjectType.NODE:
        labels[3000] = "Node.js Server"
    return {port: labels.get(port, f"Port {port}") for port in get_project_ports(config)}


def primary_port(config: ProjectConfig) -> int:
    return get_project_ports(config)[0]
