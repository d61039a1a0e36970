"""``.devcontainer/devcontainer.json`` generation.

Starts from the universal devcontainer template (downloaded or bundled) and
layers the project's ports, VS Code extensions, container wiring, host-tool
features and AI persistence mounts on top of it.
"""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any

from universal_dev_env.config import BaseImage, Feature, ProjectConfig, ProjectType
from universal_dev_env.strategy import ContainerStrategy, Strategy, get_port_labels, get_project_ports

from .context import LAYOUT_FULL_STACK, LAYOUT_REACT_EXPRESS, compose_layout

RESOURCE_DIR = Path(__file__).resolve().parent.parent / "resources"

BASE_IMAGES: dict[BaseImage, str] = {
    BaseImage.DEBIAN: "mcr.microsoft.com/devcontainers/base:bookworm",
    BaseImage.ALPINE: "mcr.microsoft.com/devcontainers/base:alpine",
}

PYTHON_EXTENSIONS = ["ms-python.python", "ms-python.pylint", "ms-python.black-formatter"]
ML_EXTENSIONS = ["ms-toolsai.jupyter", "ms-python.vscode-pylance"]
REACT_EXTENSIONS = [
    "dsznajder.es7-react-js-snippets",
    "formulahendry.auto-rename-tag",
    "coenraads.bracket-pair-colorizer-2",
]
PLAYWRIGHT_EXTENSION = "ms-playwright.playwright"

GITHUB_CLI_FEATURE = "ghcr.io/devcontainers/features/github-cli:1"
GCLOUD_FEATURE = "ghcr.io/dhoeric/features/google-cloud-cli:1"
PYTHON_FEATURE = "ghcr.io/devcontainers/features/python:1"

AI_MOUNTS = [
    "source=${localEnv:HOME}${localEnv:USERPROFILE}/.config/claude-code,"
    "target=/home/vscode/.config/claude-code,type=bind",
    "source=${localEnv:HOME}${localEnv:USERPROFILE}/.config/gemini,"
    "target=/home/vscode/.config/gemini,type=bind",
]
AI_POST_CREATE = (
    "echo '🤖 AI Context created: .ai/ folder with context.md'"
    " && echo '💾 Claude/Gemini settings will persist across container rebuilds'"
)

_COMPOSE_SERVICES: dict[str, str] = {
    LAYOUT_REACT_EXPRESS: "client",
    LAYOUT_FULL_STACK: "frontend",
}


def load_universal_devcontainer(text: str | None = None) -> dict[str, Any]:
    """Parse the universal devcontainer template.

    Uses the bundled copy when *text* is ``None``.
    """
    if text is None:
        text = (RESOURCE_DIR / "devcontainer.universal.json").read_text(encoding="utf-8")
    return json.loads(text)


def _append_unique(items: list[str], extra: list[str]) -> None:
    for item in extra:
        if item not in items:
            items.append(item)


def generate_devcontainer_config(
    config: ProjectConfig,
    strategy: Strategy,
    base: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Return the devcontainer configuration for *config*.

    Args:
        config: User selections.
        strategy: Strategy computed for *config*.
        base: Universal devcontainer template; the bundled copy is used when
            omitted.  It is deep-copied, never mutated.

    Returns:
        A JSON-serialisable ``dict``.
    """
    data = copy.deepcopy(base if base is not None else load_universal_devcontainer())
    data.setdefault("customizations", {}).setdefault("vscode", {}).setdefault("extensions", [])
    data.setdefault("mounts", [])
    data.setdefault("containerEnv", {})
    data.setdefault("features", {})

    data["name"] = f"{config.project_name} Dev Environment"

    # -- Ports ---------------------------------------------------------------
    labels = get_port_labels(config)
    data["forwardPorts"] = get_project_ports(config)
    data["portsAttributes"] = {
        str(port): {"label": label, "onAutoForward": "notify"}
        for port, label in labels.items()
    }

    # -- VS Code extensions --------------------------------------------------
    extensions: list[str] = data["customizations"]["vscode"]["extensions"]
    if not config.has_feature(Feature.VSCODE_EXTENSIONS):
        extensions.clear()
    if config.project_type == ProjectType.PYTHON:
        _append_unique(extensions, PYTHON_EXTENSIONS)
        if config.include_ml:
            _append_unique(extensions, ML_EXTENSIONS)
    if config.project_type in (ProjectType.REACT, ProjectType.FULL_STACK):
        _append_unique(extensions, REACT_EXTENSIONS)

    # -- Playwright ----------------------------------------------------------
    if config.has_feature(Feature.PLAYWRIGHT):
        data["containerEnv"]["PLAYWRIGHT_BROWSERS_PATH"] = "/usr/bin"
        data["containerEnv"]["PLAYWRIGHT_CHROMIUM_EXECUTABLE_PATH"] = "/usr/bin/chromium"
        _append_unique(extensions, [PLAYWRIGHT_EXTENSION])

    # -- Dev container features ---------------------------------------------
    features: dict[str, Any] = data["features"]
    if config.project_type == ProjectType.PYTHON:
        features[PYTHON_FEATURE] = {"version": "3.11"}
    if strategy.include_tools.cloud_clis:
        if config.has_feature(Feature.GITHUB_CLI):
            features[GITHUB_CLI_FEATURE] = {}
        if config.has_feature(Feature.GCLOUD):
            features[GCLOUD_FEATURE] = {}
    else:
        features.pop(GITHUB_CLI_FEATURE, None)
        features.pop(GCLOUD_FEATURE, None)

    # -- Container wiring ----------------------------------------------------
    workspace = "/workspace"
    if strategy.container_strategy == ContainerStrategy.DOCKER_COMPOSE:
        workspace = "/app"
        data.pop("build", None)
        data["dockerComposeFile"] = "../docker-compose.yml"
        data["service"] = _COMPOSE_SERVICES.get(compose_layout(config), "app")
        data["workspaceFolder"] = workspace
        data["shutdownAction"] = "stopCompose"
    else:
        if strategy.container_strategy == ContainerStrategy.DOCKER:
            data["build"] = {"dockerfile": "../Dockerfile", "context": ".."}
        else:
            build = data.setdefault("build", {"dockerfile": "../Dockerfile.universal", "context": ".."})
            build.setdefault("args", {})["BASE_IMAGE"] = BASE_IMAGES[config.base_image]
        data["workspaceFolder"] = workspace
        data["workspaceMount"] = f"source=${{localWorkspaceFolder}},target={workspace},type=bind"

    # -- AI context ----------------------------------------------------------
    if config.ai_context:
        _append_unique(data["mounts"], AI_MOUNTS)
        data["containerEnv"]["AI_CONTEXT_DIR"] = f"{workspace}/.ai"
        data["containerEnv"]["AI_CONTEXT_FILE"] = f"{workspace}/.ai/context.md"
        existing = data.get("postCreateCommand")
        data["postCreateCommand"] = f"{existing} && {AI_POST_CREATE}" if existing else AI_POST_CREATE

    return data
