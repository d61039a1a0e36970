"""Template context shared by every generator.

``build_context`` flattens a ``ProjectConfig`` and its ``Strategy`` into the
plain dictionary the Jinja2 templates consume.  Keeping it in one place means
every template sees the same labels, ports and flags.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from universal_dev_env import __version__
from universal_dev_env.config import Backend, Feature, ProjectConfig, ProjectType
from universal_dev_env.strategy import Strategy, get_port_labels, get_project_ports


TYPE_DISPLAY: dict[ProjectType, str] = {
    ProjectType.REACT: "React",
    ProjectType.NODE: "Node.js",
    ProjectType.PYTHON: "Python",
    ProjectType.FULL_STACK: "Full-Stack",
    ProjectType.CUSTOM: "Custom",
}

BACKEND_DISPLAY: dict[Backend, str] = {
    Backend.NONE: "",
    Backend.EXPRESS: "Express",
    Backend.NEXTJS: "Next.js",
    Backend.FIREBASE: "Firebase",
    Backend.SERVERLESS: "Serverless",
}

# Compose layouts
LAYOUT_REACT_EXPRESS = "react-express"
LAYOUT_FULL_STACK = "full-stack"
LAYOUT_SINGLE = "single"


def compose_layout(config: ProjectConfig) -> str:
    """Service layout used by ``docker-compose.yml`` and the devcontainer."""
    if config.project_type == ProjectType.REACT and config.backend == Backend.EXPRESS:
        return LAYOUT_REACT_EXPRESS
    if config.project_type == ProjectType.FULL_STACK:
        return LAYOUT_FULL_STACK
    return LAYOUT_SINGLE


def stack_label(config: ProjectConfig) -> str:
    """``"react + express"`` style label used in prose."""
    if config.backend != Backend.NONE:
        return f"{config.project_type.value} + {config.backend.value}"
    return config.project_type.value


def project_focus(config: ProjectConfig) -> str:
    if config.project_type == ProjectType.PYTHON:
        return "Data science and machine learning" if config.include_ml else "Python application development"
    if config.project_type == ProjectType.REACT:
        if config.backend == Backend.NONE:
            return "Frontend development"
        return f"Frontend development with a {BACKEND_DISPLAY[config.backend]} backend"
    if config.project_type == ProjectType.FULL_STACK:
        return "End-to-end application development"
    if config.project_type == ProjectType.NODE:
        return "Backend API development"
    return "General development"


def build_context(config: ProjectConfig, strategy: Strategy) -> dict[str, Any]:
    """Return the rendering context for *config* under *strategy*."""
    ports = get_project_ports(config)
    labels = get_port_labels(config)
    layout = compose_layout(config)
    is_python = config.project_type == ProjectType.PYTHON
    is_react = config.project_type in (ProjectType.REACT, ProjectType.FULL_STACK)

    return {
        "project_name": config.project_name,
        "project_slug": config.project_slug,
        "project_type": config.project_type.value,
        "backend": config.backend.value,
        "type_display": TYPE_DISPLAY[config.project_type],
        "backend_display": BACKEND_DISPLAY[config.backend],
        "stack_label": stack_label(config),
        "focus": project_focus(config),
        "include_ml": config.include_ml,
        "features": [f.value for f in config.features],
        "has_playwright": config.has_feature(Feature.PLAYWRIGHT),
        "is_python": is_python,
        "is_node": not is_python,
        "is_react": is_react,
        "has_express": config.backend == Backend.EXPRESS or config.project_type == ProjectType.FULL_STACK,
        "has_database": layout != LAYOUT_SINGLE,
        "has_redis": layout == LAYOUT_FULL_STACK,
        "layout": layout,
        "ports": ports,
        "primary_port": ports[0],
        "port_labels": labels,
        "ports_summary": ", ".join(f"{labels[p]} ({p})" for p in ports),
        "container_strategy": strategy.container_strategy.value,
        "deployment_strategy": strategy.deployment_strategy.value,
        "install_location": strategy.install_location.value,
        "include_tools": strategy.include_tools,
        "environments": list(strategy.environment_configs),
        "config_format": strategy.config_format.value,
        "additional_configs": list(strategy.additional_configs),
        "version": __version__,
        "date": date.today().isoformat(),
    }
