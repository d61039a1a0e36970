"""README and ``.ai/`` context document generation."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from universal_dev_env.config import Backend, ProjectConfig, ProjectType
from universal_dev_env.strategy import Strategy
from universal_dev_env.utils import write_text

from .context import build_context
from .docker_gen import default_renderer
from .templates import TemplateRenderer


# Project tree rows shown in the README, keyed by project type
_README_STRUCTURE: dict[str, list[tuple[str, str]]] = {
    "react": [("src/", "React source"), ("public/", "Static assets")],
    "react-express": [
        ("client/", "React frontend"),
        ("server/", "Express backend"),
        ("docker-compose.yml", "Service orchestration"),
    ],
    "react-nextjs": [("pages/", "Next.js pages"), ("Dockerfile", "Multi-stage build")],
    "react-firebase": [("src/", "React source"), ("firebase.json", "Firebase config")],
    "react-serverless": [("src/", "React source"), ("serverless.yml", "Serverless config")],
    "node": [("server.js", "Express server")],
    "python": [
        ("main.py", "Application entry point"),
        ("requirements.txt", "Python dependencies"),
        ("Dockerfile", "Application image"),
    ],
    "full-stack": [
        ("frontend/", "React frontend"),
        ("backend/", "Express backend"),
        ("docker-compose.yml", "Service orchestration"),
    ],
}

_PREFERENCES_STRUCTURE: dict[str, list[str]] = {
    "react-express": [
        "client/",
        "  src/",
        "    components/       # Reusable UI components",
        "    pages/            # Route-level components",
        "server/",
        "  routes/            # API route definitions",
        "  services/          # Business logic",
        "  db/                # Queries and migrations",
    ],
    "full-stack": [
        "frontend/",
        "  src/components/   # Reusable UI components",
        "backend/",
        "  routes/            # API route definitions",
        "  services/          # Business logic",
    ],
    "python": [
        "main.py             # Entry point",
        "src/                # Application package",
        "tests/              # pytest suite",
    ],
}

_NEXT_STEPS: dict[str, list[str]] = {
    "react-express": [
        "Set up database schema and API endpoints",
        "Connect the React client to the Express API",
    ],
    "full-stack": [
        "Set up database schema and API endpoints",
        "Wire the frontend to the backend API",
    ],
    "python": ["Add application modules under src/", "Write the first pytest tests"],
    "python-ml": [
        "Load and explore the dataset in a notebook",
        "Move reusable data processing into .py modules",
    ],
    "react": ["Build the first components", "Add routing and state management"],
    "node": ["Add API routes", "Add request validation and tests"],
}


def _variant_key(config: ProjectConfig) -> str:
    if config.project_type == ProjectType.REACT and config.backend != Backend.NONE:
        return f"react-{config.backend.value}"
    if config.project_type == ProjectType.PYTHON and config.include_ml:
        return "python-ml"
    return config.project_type.value


def _docs_context(config: ProjectConfig, strategy: Strategy) -> dict[str, Any]:
    context = build_context(config, strategy)
    key = _variant_key(config)
    rows = _README_STRUCTURE.get(key) or _README_STRUCTURE.get(config.project_type.value, [])
    context["structure"] = [
        {"path": path, "description": description} for path, description in rows
    ]
    context["next_steps"] = (
        _NEXT_STEPS.get(key)
        or _NEXT_STEPS.get(config.project_type.value)
        or ["Start building features"]
    )
    return context


# ---------------------------------------------------------------------------
# Pure generators
# ---------------------------------------------------------------------------


def generate_readme(
    config: ProjectConfig,
    strategy: Strategy,
    renderer: TemplateRenderer | None = None,
) -> str:
    """Return ``README.md`` for the project."""
    renderer = renderer or default_renderer()
    return renderer.render("README.md.j2", _docs_context(config, strategy))


def generate_ai_context(
    config: ProjectConfig,
    strategy: Strategy,
    renderer: TemplateRenderer | None = None,
) -> str:
    """Return ``.ai/context.md``: project overview, architecture and tooling notes."""
    renderer = renderer or default_renderer()
    return renderer.render("ai/context.md.j2", _docs_context(config, strategy))


def generate_recent_work(
    config: ProjectConfig,
    strategy: Strategy,
    renderer: TemplateRenderer | None = None,
) -> str:
    """Return ``.ai/recent-work.md`` seeded with the setup session."""
    renderer = renderer or default_renderer()
    return renderer.render("ai/recent-work.md.j2", _docs_context(config, strategy))


def generate_preferences(
    config: ProjectConfig,
    strategy: Strategy,
    renderer: TemplateRenderer | None = None,
) -> str:
    """Return ``.ai/preferences.md`` with per-stack coding standards."""
    renderer = renderer or default_renderer()
    context = _docs_context(config, strategy)
    context["structure"] = _PREFERENCES_STRUCTURE.get(
        _variant_key(config), _PREFERENCES_STRUCTURE.get(config.project_type.value, [])
    )
    return renderer.render("ai/preferences.md.j2", context)


# ---------------------------------------------------------------------------
# Writer
# ---------------------------------------------------------------------------


class DocsGenerator:
    """Writes README and AI context documents into a project."""

    AI_DOCS: dict[str, Any] = {
        "context.md": generate_ai_context,
        "recent-work.md": generate_recent_work,
        "preferences.md": generate_preferences,
    }

    def __init__(self, renderer: TemplateRenderer) -> None:
        self.renderer = renderer

    async def write_readme(self, output_dir: Path, config: ProjectConfig, strategy: Strategy) -> Path:
        return await write_text(output_dir / "README.md", generate_readme(config, strategy, self.renderer))

    async def write_ai_context(
        self,
        output_dir: Path,
        config: ProjectConfig,
        strategy: Strategy,
    ) -> list[Path]:
        """Write the ``.ai/`` folder.  Returns the written paths."""
        written: list[Path] = []
        for filename, generate in self.AI_DOCS.items():
            content = generate(config, strategy, self.renderer)
            written.append(await write_text(output_dir / ".ai" / filename, content))
        return written
