"""Universal Dev Environment scaffolder -- generates development environments.

Takes a ``ProjectConfig`` and renders devcontainer, Docker, environment,
starter and documentation files into a project directory.

Quick usage::

    from universal_dev_env.config import ProjectConfig
    from universal_dev_env.scaffolder import ProjectGenerator

    config = ProjectConfig(project_name="my-app", project_type="react", backend="express")
    result = await ProjectGenerator(config).setup_project("/tmp/output")
"""

from universal_dev_env.scaffolder.generator import (
    ProjectGenerator,
    ScaffoldError,
    ScaffoldResult,
    create_template,
)
from universal_dev_env.scaffolder.templates import TemplateRenderer

__all__ = [
    "ProjectGenerator",
    "ScaffoldError",
    "ScaffoldResult",
    "TemplateRenderer",
    "create_template",
]
