"""AI agent role catalogue and per-project-type lookup tables."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class AgentRole(BaseModel):
    """One AI agent role offered to sessions on a project."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    description: str
    focus: list[str] = Field(default_factory=list)
    enabled: bool = False
    custom: bool = Field(default=False, description="Added by the user")
    customized: bool = Field(default=False, description="Default role edited by the user")

    @property
    def is_custom(self) -> bool:
        return self.custom or self.customized


DEFAULT_AGENT_ROLES: dict[str, AgentRole] = {
    "senior-software-engineer": AgentRole(
        name="👨‍💻 Senior Software Engineer",
        description=(
            "Focus on code quality, architecture, and implementation of new features. "
            "Review existing code in `src/`, `scripts/`, and `deployment/` to understand "
            "current practices. Ensure all new code is tested and documented."
        ),
        focus=["src/", "scripts/", "deployment/", "testing", "documentation"],
        enabled=True,
    ),
    "senior-data-scientist": AgentRole(
        name="📊 Senior Data Scientist",
        description=(
            "Analyze experimental results and model performance. Your primary focus is on "
            "the data in `experiments/`, `validation/`, and `reports/`. Use your analytical "
            "skills to identify trends, validate hypotheses, and suggest model improvements."
        ),
        focus=["experiments/", "validation/", "reports/", "data-analysis"],
        enabled=True,
    ),
    "devops-engineer": AgentRole(
        name="⚙️ DevOps/SysOps Engineer",
        description=(
            "Manage the project's infrastructure, deployment, and CI/CD pipelines. Review "
            "`Dockerfile`, `deployment/`, and any `.yaml` configuration files. Your goal is "
            "to ensure the system is scalable, reliable, and secure."
        ),
        focus=["Dockerfile", "deployment/", "ci-cd", "monitoring", "security"],
        enabled=True,
    ),
    "cybersecurity-analyst": AgentRole(
        name="🔒 Cybersecurity Analyst",
        description=(
            "Assess the security of the application and infrastructure. Review code for "
            "vulnerabilities, check dependencies, and analyze deployment configurations "
            "for security best practices."
        ),
        focus=["security-analysis", "vulnerability-assessment", "code-review"],
    ),
    "ai-research-scientist": AgentRole(
        name="🧠 AI/ML Research Scientist",
        description=(
            "Drive the core research forward. Your focus is on the models in `models/` and "
            "the theoretical documentation in `docs/` and `papers/`. Propose novel "
            "architectures and validation methodologies."
        ),
        focus=["models/", "papers/", "research", "theoretical-documentation"],
    ),
    "project-manager": AgentRole(
        name="📋 Project Manager",
        description=(
            "Track project status, milestones, and risks. Review `PROJECT_STATUS.md`, "
            "`README.md`, and commit history to understand the project's trajectory. Your "
            "role is to ensure tasks are clearly defined and progress is being made."
        ),
        focus=["project-status", "milestones", "documentation", "coordination"],
        enabled=True,
    ),
    "technical-writer": AgentRole(
        name="📝 Technical Writer",
        description=(
            "Improve and maintain project documentation. Review all `.md` files to ensure "
            "they are clear, accurate, and up-to-date. Your goal is to make the project "
            "easily understandable for new contributors."
        ),
        focus=["documentation", "readme", "guides", "api-docs"],
    ),
    "qa-engineer": AgentRole(
        name="🧪 QA Engineer",
        description=(
            "Develop and execute test plans. Review the `tests/` directory and create new "
            "tests for existing and new features. Your focus is on ensuring the correctness "
            "and robustness of the software."
        ),
        focus=["tests/", "test-plans", "quality-assurance", "automation"],
        enabled=True,
    ),
    "database-administrator": AgentRole(
        name="🗄️ Database Administrator (DBA)",
        description=(
            "Manage and optimize the project's databases. Review schema, migration and "
            "query code. Ensure data integrity, performance, and security."
        ),
        focus=["database-optimization", "data-integrity", "migrations"],
    ),
    "quantum-specialist": AgentRole(
        name="⚛️ Quantum Computing Specialist",
        description=(
            "Focus on the quantum-specific aspects of the project. Review any files related "
            "to quantum hardware and physics. Your role is to validate and advance the "
            "quantum methodologies."
        ),
        focus=["quantum-hardware", "quantum-physics", "specialized-algorithms"],
    ),
}


def default_roles() -> dict[str, AgentRole]:
    """Fresh, independently mutable copy of the default roles."""
    return {key: role.model_copy(deep=True) for key, role in DEFAULT_AGENT_ROLES.items()}


# ---------------------------------------------------------------------------
# Project-type lookup tables
# ---------------------------------------------------------------------------

# Agent project types extend the scaffolder's with non-code project kinds
AGENT_PROJECT_TYPES: dict[str, str] = {
    "react": "⚛️  React/Frontend",
    "node": "🟢 Node.js/Backend",
    "python": "🐍 Python/ML",
    "full-stack": "🔄 Full-Stack",
    "research": "🔬 Research/Academic",
    "infrastructure": "⚙️  DevOps/Infrastructure",
    "enterprise": "🏢 Enterprise/Business",
    "data-science": "📊 Data Science/Analytics",
}

LANGUAGES = {
    "react": "JavaScript/TypeScript",
    "node": "JavaScript/TypeScript",
    "python": "Python",
    "full-stack": "JavaScript + Backend",
    "research": "Python/R",
    "data-science": "Python",
    "infrastructure": "YAML/Shell/Go",
    "enterprise": "Mixed",
}

ARCHITECTURES = {
    "react": "Frontend SPA",
    "node": "Backend API",
    "python": "Application/Scripts",
    "full-stack": "Frontend + Backend",
    "research": "Research Pipeline",
    "data-science": "Data Processing Pipeline",
    "infrastructure": "Infrastructure as Code",
    "enterprise": "Enterprise Application",
}

CONTAINER_STRATEGIES = {
    "react": "DevContainer",
    "node": "Docker",
    "python": "DevContainer + Conda",
    "full-stack": "Docker Compose",
    "research": "DevContainer",
    "data-science": "DevContainer + ML Tools",
    "infrastructure": "Multi-container",
    "enterprise": "Orchestrated",
}

KEY_DIRECTORIES = {
    "react": ["src/", "public/", "tests/"],
    "node": ["src/", "routes/", "tests/"],
    "python": ["src/", "tests/", "scripts/", "docs/"],
    "full-stack": ["frontend/", "backend/", "tests/"],
    "research": ["experiments/", "papers/", "validation/", "docs/"],
    "data-science": ["notebooks/", "data/", "models/", "reports/"],
    "infrastructure": ["deployment/", "k8s/", "scripts/"],
    "enterprise": ["src/", "tests/", "docs/", "deployment/"],
}

FOCUSES = {
    "react": "Frontend development and user experience",
    "node": "Backend API development and server architecture",
    "python": "Application development and scripting",
    "full-stack": "End-to-end application development",
    "research": "Scientific research and experimentation",
    "data-science": "Data analysis and machine learning",
    "infrastructure": "System architecture and deployment",
    "enterprise": "Business application development",
}

PRIORITY_ROLES = {
    "react": ["senior-software-engineer", "qa-engineer", "technical-writer"],
    "node": ["senior-software-engineer", "devops-engineer", "cybersecurity-analyst"],
    "python": ["senior-data-scientist", "ai-research-scientist", "qa-engineer"],
    "full-stack": ["senior-software-engineer", "devops-engineer", "qa-engineer"],
    "research": ["ai-research-scientist", "senior-data-scientist", "technical-writer"],
    "data-science": ["senior-data-scientist", "ai-research-scientist", "database-administrator"],
    "infrastructure": ["devops-engineer", "cybersecurity-analyst", "database-administrator"],
    "enterprise": ["senior-software-engineer", "project-manager", "cybersecurity-analyst"],
}

RECOMMENDED_ROLES = {
    "react": "senior-software-engineer",
    "node": "senior-software-engineer",
    "python": "senior-data-scientist",
    "full-stack": "senior-software-engineer",
    "research": "ai-research-scientist",
    "data-science": "senior-data-scientist",
    "infrastructure": "devops-engineer",
    "enterprise": "project-manager",
}

ASSIGNMENT_GUIDES = {
    "react": [
        "**Frontend changes needed**: Senior Software Engineer",
        "**Component testing**: QA Engineer",
        "**Performance optimization**: Senior Software Engineer",
        "**Documentation updates**: Technical Writer",
    ],
    "python": [
        "**Data analysis/ML work**: Senior Data Scientist",
        "**Algorithm development**: AI/ML Research Scientist",
        "**Code optimization**: Senior Software Engineer",
        "**Research documentation**: Technical Writer",
    ],
    "node": [
        "**API development**: Senior Software Engineer",
        "**Database optimization**: Database Administrator",
        "**Deployment issues**: DevOps Engineer",
        "**Security concerns**: Cybersecurity Analyst",
    ],
    "research": [
        "**Research advancement**: AI/ML Research Scientist",
        "**Data analysis**: Senior Data Scientist",
        "**Documentation**: Technical Writer",
        "**Validation**: QA Engineer",
    ],
    "infrastructure": [
        "**Infrastructure changes**: DevOps Engineer",
        "**Security assessment**: Cybersecurity Analyst",
        "**Performance monitoring**: Database Administrator",
        "**Documentation**: Technical Writer",
    ],
}

DEFAULT_ASSIGNMENT_GUIDE = [
    "**Code changes needed**: Senior Software Engineer",
    "**Testing required**: QA Engineer",
    "**Documentation gaps**: Technical Writer",
    "**Planning/coordination**: Project Manager",
]


def project_language(project_type: str) -> str:
    return LANGUAGES.get(project_type, "Mixed")


def project_architecture(project_type: str) -> str:
    return ARCHITECTURES.get(project_type, "Custom")


def container_strategy(project_type: str) -> str:
    return CONTAINER_STRATEGIES.get(project_type, "DevContainer")


def key_directories(project_type: str) -> list[str]:
    return KEY_DIRECTORIES.get(project_type, ["src/", "tests/", "docs/"])


def project_focus(project_type: str) -> str:
    return FOCUSES.get(project_type, "General development")


def assignment_guide(project_type: str) -> list[str]:
    return ASSIGNMENT_GUIDES.get(project_type, DEFAULT_ASSIGNMENT_GUIDE)


def most_needed_roles(project_type: str, roles: dict[str, AgentRole]) -> str:
    """Display names of the enabled high-priority roles for *project_type* (max three)."""
    priorities = PRIORITY_ROLES.get(project_type, ["senior-software-engineer", "qa-engineer"])
    names = [roles[key].name for key in priorities if key in roles and roles[key].enabled]
    return ", ".join(names[:3])


def recommended_next_role(project_type: str, roles: dict[str, AgentRole]) -> str:
    """``"<key> (<name>)"`` of the role that should take the next session.

    Falls back to the first enabled role when the recommended one is disabled.
    """
    recommended = RECOMMENDED_ROLES.get(project_type, "senior-software-engineer")
    role = roles.get(recommended)
    if role is not None and role.enabled:
        return f"{recommended} ({role.name})"
    for key, candidate in roles.items():
        if candidate.enabled:
            return f"{key} ({candidate.name})"
    return "No roles enabled"
