"""Per-type starter files, ``package.json`` and ``.env.<environment>`` files."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from universal_dev_env.config import Backend, Feature, ProjectConfig, ProjectType
from universal_dev_env.strategy import Strategy
from universal_dev_env.utils import dump_json, write_text

from .context import LAYOUT_FULL_STACK, LAYOUT_REACT_EXPRESS, build_context, compose_layout
from .docker_gen import default_renderer
from .templates import TemplateRenderer


REACT_DEPENDENCIES = {
    "react": "^18.2.0",
    "react-dom": "^18.2.0",
    "react-scripts": "5.0.1",
}

REACT_SCRIPTS = {
    "start": "react-scripts start",
    "build": "react-scripts build",
    "test": "react-scripts test",
    "dev": "npm start",
}

EXPRESS_SCRIPTS = {
    "start": "node server.js",
    "dev": "nodemon server.js",
    "test": "jest",
}


# ---------------------------------------------------------------------------
# package.json
# ---------------------------------------------------------------------------


def generate_package_json(config: ProjectConfig) -> dict[str, Any]:
    """Return the root ``package.json`` for a Node-family project."""
    package: dict[str, Any] = {
        "name": config.project_slug,
        "version": "1.0.0",
        "private": True,
        "scripts": {},
    }

    if config.project_type == ProjectType.REACT:
        if config.backend == Backend.NEXTJS:
            package["scripts"] = {"dev": "next dev", "build": "next build", "start": "next start"}
            package["dependencies"] = {
                "next": "^14.0.0",
                "react": "^18.2.0",
                "react-dom": "^18.2.0",
            }
        elif config.backend == Backend.EXPRESS:
            package["scripts"] = {
                "start": "npm run server",
                "dev": 'concurrently "npm run server" "npm run client"',
                "server": "cd server && npm run dev",
                "client": "cd client && npm start",
                "build": "cd client && npm run build",
                "compose": "docker compose up --build",
            }
            package["devDependencies"] = {"concurrently": "^8.0.0"}
        else:
            package["scripts"] = dict(REACT_SCRIPTS)
            package["dependencies"] = dict(REACT_DEPENDENCIES)
            if config.backend == Backend.FIREBASE:
                package["dependencies"]["firebase"] = "^10.0.0"
                package["scripts"]["emulators"] = "firebase emulators:start"
            elif config.backend == Backend.SERVERLESS:
                package["scripts"]["deploy"] = "serverless deploy"
                package["devDependencies"] = {"serverless": "^3.38.0"}

    elif config.project_type == ProjectType.NODE:
        package["scripts"] = dict(EXPRESS_SCRIPTS)
        package["dependencies"] = {"express": "^4.18.0"}
        package["devDependencies"] = {"nodemon": "^3.0.0"}

    elif config.project_type == ProjectType.FULL_STACK:
        package["scripts"] = {
            "start": "npm run server",
            "dev": 'concurrently "npm run server" "npm run client"',
            "server": "node backend/server.js",
            "client": "cd frontend && npm start",
            "build": "cd frontend && npm run build",
        }
        package["dependencies"] = {"express": "^4.18.0", "concurrently": "^8.0.0"}

    if config.has_feature(Feature.PLAYWRIGHT):
        package.setdefault("devDependencies", {})["@playwright/test"] = "^1.40.0"
        package["scripts"]["test:e2e"] = "playwright test"

    return package


def generate_service_package_json(config: ProjectConfig, service: str) -> dict[str, Any]:
    """``package.json`` for a compose service directory (client/server/frontend/backend)."""
    if service in ("client", "frontend"):
        return {
            "name": f"{config.project_slug}-{service}",
            "version": "1.0.0",
            "private": True,
            "scripts": dict(REACT_SCRIPTS),
            "dependencies": dict(REACT_DEPENDENCIES),
        }
    return {
        "name": f"{config.project_slug}-{service}",
        "version": "1.0.0",
        "private": True,
        "scripts": dict(EXPRESS_SCRIPTS),
        "dependencies": {"express": "^4.18.0", "pg": "^8.11.0"},
        "devDependencies": {"nodemon": "^3.0.0"},
    }


# ---------------------------------------------------------------------------
# Environment files
# ---------------------------------------------------------------------------


def generate_env_file(
    config: ProjectConfig,
    strategy: Strategy,
    environment: str,
    renderer: TemplateRenderer | None = None,
) -> str:
    """Return the contents of ``.env.<environment>``."""
    renderer = renderer or default_renderer()
    context = build_context(config, strategy)
    context["environment"] = environment
    return renderer.render("env.j2", context)


# ---------------------------------------------------------------------------
# Starter files
# ---------------------------------------------------------------------------


def starter_layout(config: ProjectConfig) -> list[tuple[str, str, int]]:
    """``(template prefix, output subdirectory, port)`` triples for *config*."""
    t, b = config.project_type, config.backend
    if t == ProjectType.REACT:
        if b == Backend.EXPRESS:
            return [("project/react", "client", 3000), ("project/express", "server", 3001)]
        if b == Backend.NEXTJS:
            return [("project/nextjs", "", 3000)]
        if b == Backend.FIREBASE:
            return [("project/react", "", 3000), ("project/firebase", "", 3000)]
        if b == Backend.SERVERLESS:
            return [("project/react", "", 3000), ("project/serverless", "", 3000)]
        return [("project/react", "", 3000)]
    if t == ProjectType.NODE:
        return [("project/node", "", 3000)]
    if t == ProjectType.PYTHON:
        return [("project/python", "", 8000)]
    if t == ProjectType.FULL_STACK:
        return [("project/react", "frontend", 3000), ("project/express", "backend", 3001)]
    return []


_SERVICE_PACKAGES: dict[str, tuple[str, ...]] = {
    LAYOUT_REACT_EXPRESS: ("client", "server"),
    LAYOUT_FULL_STACK: ("frontend", "backend"),
}


class ProjectFilesGenerator:
    """Writes starter sources, package manifests and environment files.

    Starter files never overwrite existing files, so re-running setup inside
    an existing project only fills in what is missing.
    """

    def __init__(self, renderer: TemplateRenderer) -> None:
        self.renderer = renderer

    async def write_starter_files(
        self,
        output_dir: Path,
        config: ProjectConfig,
        strategy: Strategy,
    ) -> tuple[list[Path], list[Path]]:
        """Render the per-type starter tree.  Returns ``(written, skipped)``."""
        context = build_context(config, strategy)
        written: list[Path] = []
        skipped: list[Path] = []

        layout = starter_layout(config)
        if config.has_feature(Feature.PLAYWRIGHT) and config.is_node_family:
            layout.append(("project/playwright", "", context["primary_port"]))

        for prefix, subdir, port in layout:
            ctx = {**context, "port": port}
            target = output_dir / subdir if subdir else output_dir
            done, existing = await self.renderer.render_tree(prefix, target, ctx, overwrite=False)
            written.extend(done)
            skipped.extend(existing)

        for service in _SERVICE_PACKAGES.get(compose_layout(config), ()):
            path = output_dir / service / "package.json"
            if path.exists():
                skipped.append(path)
                continue
            content = dump_json(generate_service_package_json(config, service))
            written.append(await write_text(path, content))

        return written, skipped

    async def write_package_json(self, output_dir: Path, config: ProjectConfig) -> Path | None:
        """Write ``package.json`` unless one already exists or the project is not Node-based."""
        path = output_dir / "package.json"
        if not config.is_node_family or path.exists():
            return None
        return await write_text(path, dump_json(generate_package_json(config)))

    async def write_env_files(
        self,
        output_dir: Path,
        config: ProjectConfig,
        strategy: Strategy,
    ) -> list[Path]:
        written: list[Path] = []
        for environment in strategy.environment_configs:
            content = generate_env_file(config, strategy, environment, self.renderer)
            written.append(await write_text(output_dir / f".env.{environment}", content))
        return written
