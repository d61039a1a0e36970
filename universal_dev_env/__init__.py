"""Universal Dev Environment -- development environment scaffolding.

Generates Dockerfiles, devcontainer configs, docker-compose files, README and
AI-context markdown, and git hooks from a handful of project options.

Quick usage::

    from universal_dev_env.config import ProjectConfig
    from universal_dev_env.scaffolder import ProjectGenerator

    config = ProjectConfig(project_name="my-app", project_type="react", backend="express")
    result = await ProjectGenerator(config).setup_project("/tmp/output")
"""

__version__ = "2.1.0"

__all__ = ["__version__"]
