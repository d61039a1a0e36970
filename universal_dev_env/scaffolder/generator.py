"""Main scaffolding orchestrator.

Takes a ``ProjectConfig`` and writes a complete development environment into
a project directory: universal setup files, devcontainer configuration,
Dockerfiles or Compose files, environment files, starter sources,
``package.json``, README and the ``.ai/`` context folder.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import ValidationError

from universal_dev_env.cache import DownloadError, TemplateCache
from universal_dev_env.config import (
    Backend,
    Feature,
    ProjectConfig,
    ProjectType,
    Settings,
    UserInputError,
)
from universal_dev_env.installer import Installer
from universal_dev_env.strategy import (
    ContainerStrategy,
    InstallLocation,
    Strategy,
    select_configuration_strategy,
)
from universal_dev_env.utils import dump_json, make_executable, print_warning, write_text

from .context import compose_layout
from .devcontainer_gen import generate_devcontainer_config, load_universal_devcontainer
from .docker_gen import DockerGenerator, SERVICE_DIRS
from .docs_gen import DocsGenerator
from .project_files import ProjectFilesGenerator, starter_layout
from .templates import TemplateRenderer

SETUP_SCRIPT = "universal-setup.sh"
UNIVERSAL_DOCKERFILE = "Dockerfile.universal"
UNIVERSAL_DEVCONTAINER = "devcontainer.universal.json"

# Named templates accepted by ``uds template``
TEMPLATES: dict[str, tuple[ProjectType, Backend]] = {
    "react": (ProjectType.REACT, Backend.NONE),
    "node": (ProjectType.NODE, Backend.NONE),
    "python": (ProjectType.PYTHON, Backend.NONE),
    "full-stack": (ProjectType.FULL_STACK, Backend.NONE),
}


class ScaffoldError(Exception):
    """Raised when a file or directory cannot be written during scaffolding."""

    def __init__(self, message: str, path: str | Path | None = None) -> None:
        self.path = Path(path) if path else None
        super().__init__(message)


@dataclass
class ScaffoldResult:
    """Outcome of :meth:`ProjectGenerator.setup_project`."""

    root: Path
    strategy: Strategy
    written: list[Path] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


class ProjectGenerator:
    """Main scaffolding orchestrator.

    Given a ``ProjectConfig``, writes:
    - ``universal-setup.sh``, ``Dockerfile.universal`` and the universal
      devcontainer template (downloaded through the cache)
    - ``.devcontainer/devcontainer.json``
    - Dockerfile(s) and ``docker-compose.yml`` per the container strategy
    - ``.env.<environment>`` files
    - per-type starter files and ``package.json``
    - ``README.md`` and the ``.ai/`` context documents
    """

    def __init__(
        self,
        config: ProjectConfig,
        settings: Settings | None = None,
        cache: TemplateCache | None = None,
        installer: Installer | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.config = config
        self.settings = settings or Settings.from_env()
        self.cache = cache or TemplateCache(self.settings)
        self.installer = installer or Installer(self.settings, self.cache)
        self.renderer = renderer or TemplateRenderer()
        self.docker_gen = DockerGenerator(self.renderer)
        self.docs_gen = DocsGenerator(self.renderer)
        self.files_gen = ProjectFilesGenerator(self.renderer)

    # -- Public API --------------------------------------------------------

    def project_root(self, target_dir: str | Path, here: bool = False) -> Path:
        target = Path(target_dir)
        return target if here else target / self.config.project_name

    async def setup_project(
        self,
        target_dir: str | Path,
        here: bool = False,
        install_tools: bool = True,
    ) -> ScaffoldResult:
        """Scaffold the project.

        Args:
            target_dir: Parent directory of the new project, or the project
                itself when *here* is set.
            here: Scaffold into *target_dir* instead of a new subdirectory.
            install_tools: Allow installing AI CLIs on the host.

        Returns:
            A ``ScaffoldResult`` describing what was written.

        Raises:
            ScaffoldError: A file or directory could not be written.
        """
        root = self.project_root(target_dir, here)
        try:
            return await self._setup(root, install_tools)
        except OSError as exc:
            failed = exc.filename or root
            raise ScaffoldError(f"Setup failed writing {failed}: {exc.strerror or exc}", failed) from exc

    async def _setup(self, root: Path, install_tools: bool) -> ScaffoldResult:
        config = self.config

        # 1. Project directory
        await asyncio.to_thread(root.mkdir, parents=True, exist_ok=True)

        # 2. Strategy
        strategy = select_configuration_strategy(config)
        result = ScaffoldResult(root=root, strategy=strategy)

        # 3. Universal setup files
        base_devcontainer = await self._write_universal_files(root, result)

        # 4. Devcontainer configuration
        devcontainer = generate_devcontainer_config(config, strategy, base_devcontainer)
        result.written.append(
            await write_text(root / ".devcontainer" / "devcontainer.json", dump_json(devcontainer))
        )

        # 5. Dockerfiles / Compose
        result.written.extend(await self.docker_gen.generate_all(root, config, strategy))

        # 6. Environment files
        result.written.extend(await self.files_gen.write_env_files(root, config, strategy))

        # 7. Starter files
        written, skipped = await self.files_gen.write_starter_files(root, config, strategy)
        result.written.extend(written)
        result.skipped.extend(skipped)

        # 8. package.json
        package_json = await self.files_gen.write_package_json(root, config)
        if package_json is not None:
            result.written.append(package_json)
        elif config.is_node_family:
            result.skipped.append(root / "package.json")

        # 9. README
        result.written.append(await self.docs_gen.write_readme(root, config, strategy))

        # 10. AI context
        if config.ai_context:
            result.written.extend(await self.docs_gen.write_ai_context(root, config, strategy))

        # 11. AI CLIs on the host
        if (
            install_tools
            and config.has_feature(Feature.AI_CLI)
            and strategy.install_location == InstallLocation.HOST
        ):
            await self.installer.install_ai_clis()

        return result

    async def _write_universal_files(self, root: Path, result: ScaffoldResult) -> dict:
        """Fetch and write the universal setup files.

        Returns:
            The parsed universal devcontainer template.
        """
        use_cache = self.config.use_cache

        try:
            script = await self.cache.get_template(SETUP_SCRIPT, use_cache=use_cache)
        except DownloadError as exc:
            message = f"{SETUP_SCRIPT} unavailable, skipping: {exc}"
            print_warning(message)
            result.warnings.append(message)
        else:
            path = await write_text(root / SETUP_SCRIPT, script)
            make_executable(path)
            result.written.append(path)

        dockerfile = await self.cache.get_template(UNIVERSAL_DOCKERFILE, use_cache=use_cache)
        result.written.append(
            await self.docker_gen.write_universal_dockerfile(root, dockerfile, self.config)
        )

        devcontainer_text = await self.cache.get_template(UNIVERSAL_DEVCONTAINER, use_cache=use_cache)
        try:
            base = load_universal_devcontainer(devcontainer_text)
        except json.JSONDecodeError:
            message = f"Downloaded {UNIVERSAL_DEVCONTAINER} is not valid JSON, using bundled copy"
            print_warning(message)
            result.warnings.append(message)
            base = load_universal_devcontainer()
        result.written.append(await write_text(root / UNIVERSAL_DEVCONTAINER, dump_json(base)))
        return base


# ---------------------------------------------------------------------------
# Dry-run planning
# ---------------------------------------------------------------------------


def planned_files(config: ProjectConfig, strategy: Strategy | None = None) -> list[str]:
    """Relative paths ``setup_project`` would write for *config*.

    Starter files are listed by directory since their exact set depends on
    the template tree.
    """
    strategy = strategy or select_configuration_strategy(config)
    files = [
        SETUP_SCRIPT,
        UNIVERSAL_DOCKERFILE,
        UNIVERSAL_DEVCONTAINER,
        ".devcontainer/devcontainer.json",
    ]

    if strategy.container_strategy == ContainerStrategy.DOCKER:
        files.append("Dockerfile")
    elif strategy.container_strategy == ContainerStrategy.DOCKER_COMPOSE:
        files.append("docker-compose.yml")
        services = SERVICE_DIRS.get(compose_layout(config))
        if services is None:
            files.append("Dockerfile")
        else:
            files.extend(f"{directory}/Dockerfile" for directory, _, _ in services)

    files.extend(f".env.{environment}" for environment in strategy.environment_configs)

    for prefix, subdir, _ in starter_layout(config):
        label = prefix.split("/", 1)[1]
        files.append(f"{subdir}/ ({label} starter)" if subdir else f"./ ({label} starter)")

    if config.is_node_family:
        files.append("package.json")
    files.append("README.md")
    if config.ai_context:
        files.extend(f".ai/{name}" for name in DocsGenerator.AI_DOCS)
    return files


# ---------------------------------------------------------------------------
# Named templates
# ---------------------------------------------------------------------------


def template_config(name: str, directory: str | Path) -> ProjectConfig:
    """``ProjectConfig`` for a named template, named after *directory*.

    Raises:
        UserInputError: *name* is not one of :data:`TEMPLATES`, or *directory*
            has no usable name (the filesystem root).
    """
    if name not in TEMPLATES:
        raise UserInputError(f'Template "{name}" not found.')
    project_type, backend = TEMPLATES[name]
    try:
        return ProjectConfig(
            project_name=Path(directory).resolve().name,
            project_type=project_type,
            backend=backend,
        )
    except ValidationError as exc:
        raise UserInputError(f"Cannot name a project after directory {directory}") from exc


async def create_template(
    name: str,
    directory: str | Path = ".",
    renderer: TemplateRenderer | None = None,
) -> list[Path]:
    """Render the starter files of template *name* into *directory*.

    Existing files are left untouched.

    Returns:
        Written file paths.

    Raises:
        UserInputError: Unknown template name.
        ScaffoldError: A file could not be written.
    """
    config = template_config(name, directory)
    target = Path(directory)
    files_gen = ProjectFilesGenerator(renderer or TemplateRenderer())
    strategy = select_configuration_strategy(config)
    try:
        await asyncio.to_thread(target.mkdir, parents=True, exist_ok=True)
        written, _ = await files_gen.write_starter_files(target, config, strategy)
        package_json = await files_gen.write_package_json(target, config)
    except OSError as exc:
        failed = exc.filename or target
        raise ScaffoldError(f"Template creation failed writing {failed}: {exc.strerror or exc}", failed) from exc
    if package_json is not None:
        written.append(package_json)
    return written
