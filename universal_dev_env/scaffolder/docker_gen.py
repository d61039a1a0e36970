"""Dockerfile and Docker Compose generation.

The ``generate_*`` functions are pure ``(config, strategy) -> str`` builders;
``DockerGenerator`` writes their output into a project according to the
strategy's container layout.
"""

from __future__ import annotations

import re
from pathlib import Path

from universal_dev_env.config import Backend, Feature, ProjectConfig, ProjectType
from universal_dev_env.strategy import ContainerStrategy, Strategy, get_project_ports
from universal_dev_env.utils import write_text

from .context import LAYOUT_FULL_STACK, LAYOUT_REACT_EXPRESS, build_context, compose_layout
from .templates import TemplateRenderer

_renderer: TemplateRenderer | None = None


def default_renderer() -> TemplateRenderer:
    """Shared renderer for the module-level generator functions."""
    global _renderer
    if _renderer is None:
        _renderer = TemplateRenderer()
    return _renderer


# ---------------------------------------------------------------------------
# Dockerfiles
# ---------------------------------------------------------------------------

_UNIVERSAL_EXPOSE = re.compile(r"EXPOSE 3000 3001 5000 5173 8000 8080 9000")
_UNIVERSAL_HEALTHCHECK = re.compile(
    r"curl -f http://localhost:3000/health \|\| curl -f http://localhost:3001/health"
)


def dockerfile_template(config: ProjectConfig) -> str:
    """Name of the Dockerfile template used for *config*."""
    if config.project_type == ProjectType.PYTHON:
        return "docker/Dockerfile.python.j2"
    if config.project_type == ProjectType.REACT and config.backend == Backend.NEXTJS:
        return "docker/Dockerfile.nextjs.j2"
    if config.has_feature(Feature.DOCKER_MULTI_STAGE):
        return "docker/Dockerfile.node-multistage.j2"
    return "docker/Dockerfile.node.j2"


def generate_dockerfile(
    config: ProjectConfig,
    strategy: Strategy,
    renderer: TemplateRenderer | None = None,
) -> str:
    """Return the project's application Dockerfile.

    ML packages are only baked into a Python image when the strategy allows
    heavy tools; container images never carry host tooling.
    """
    renderer = renderer or default_renderer()
    context = build_context(config, strategy)
    context["port"] = context["primary_port"]
    context["include_ml_packages"] = config.include_ml and strategy.include_tools.heavy_tools
    return renderer.render(dockerfile_template(config), context)


def generate_service_dockerfile(
    service_name: str,
    port: int,
    command: str = "start",
    renderer: TemplateRenderer | None = None,
) -> str:
    """Dockerfile for one Node service of a compose layout."""
    renderer = renderer or default_renderer()
    return renderer.render(
        "docker/Dockerfile.service.j2",
        {"service_name": service_name, "port": port, "command": command},
    )


def customize_dockerfile_for_project(content: str, config: ProjectConfig) -> str:
    """Point the universal Dockerfile's EXPOSE line and health check at the project ports.

    Content without the universal EXPOSE or health-check lines is returned
    unchanged.
    """
    ports = get_project_ports(config)
    updated = _UNIVERSAL_EXPOSE.sub(f"EXPOSE {' '.join(str(p) for p in ports)}", content)
    return _UNIVERSAL_HEALTHCHECK.sub(f"curl -f http://localhost:{ports[0]}/health", updated)


# ---------------------------------------------------------------------------
# Docker Compose
# ---------------------------------------------------------------------------


def generate_docker_compose(
    config: ProjectConfig,
    strategy: Strategy,
    renderer: TemplateRenderer | None = None,
) -> str:
    """Return ``docker-compose.yml`` text for *config*."""
    renderer = renderer or default_renderer()
    return renderer.render("docker-compose.yml.j2", build_context(config, strategy))


# (directory, port, npm script) per service of each compose layout
SERVICE_DIRS: dict[str, list[tuple[str, int, str]]] = {
    LAYOUT_REACT_EXPRESS: [("client", 3000, "start"), ("server", 3001, "dev")],
    LAYOUT_FULL_STACK: [("frontend", 3000, "start"), ("backend", 3001, "dev")],
}


class DockerGenerator:
    """Writes Dockerfiles and Compose files for a project."""

    def __init__(self, renderer: TemplateRenderer) -> None:
        self.renderer = renderer

    async def generate_all(
        self,
        output_dir: Path,
        config: ProjectConfig,
        strategy: Strategy,
    ) -> list[Path]:
        """Write the container files the strategy calls for.

        * ``docker`` writes a root ``Dockerfile``.
        * ``docker-compose`` writes ``docker-compose.yml`` plus one Dockerfile
          per service directory.
        * ``devcontainer`` writes nothing; the devcontainer builds from
          ``Dockerfile.universal``.

        Returns:
            List of written file paths.
        """
        written: list[Path] = []

        if strategy.container_strategy == ContainerStrategy.DOCKER:
            content = generate_dockerfile(config, strategy, self.renderer)
            written.append(await write_text(output_dir / "Dockerfile", content))

        elif strategy.container_strategy == ContainerStrategy.DOCKER_COMPOSE:
            compose = generate_docker_compose(config, strategy, self.renderer)
            written.append(await write_text(output_dir / "docker-compose.yml", compose))

            services = SERVICE_DIRS.get(compose_layout(config))
            if services is None:
                content = generate_dockerfile(config, strategy, self.renderer)
                written.append(await write_text(output_dir / "Dockerfile", content))
            else:
                for directory, port, command in services:
                    content = generate_service_dockerfile(directory, port, command, self.renderer)
                    written.append(await write_text(output_dir / directory / "Dockerfile", content))

        return written

    async def write_universal_dockerfile(
        self,
        output_dir: Path,
        content: str,
        config: ProjectConfig,
    ) -> Path:
        """Write ``Dockerfile.universal`` customised for the project's ports."""
        return await write_text(
            output_dir / "Dockerfile.universal",
            customize_dockerfile_for_project(content, config),
        )
