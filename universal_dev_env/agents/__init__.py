"""AI agent roles, onboarding instructions and session handoffs."""

from universal_dev_env.agents.onboarding import (
    AgentConfig,
    add_role,
    build_agent_config,
    generate_agent_instructions,
    generate_session_handoff,
    load_agent_config,
    save_agent_config,
)
from universal_dev_env.agents.roles import DEFAULT_AGENT_ROLES, AgentRole

__all__ = [
    "AgentConfig",
    "AgentRole",
    "DEFAULT_AGENT_ROLES",
    "add_role",
    "build_agent_config",
    "generate_agent_instructions",
    "generate_session_handoff",
    "load_agent_config",
    "save_agent_config",
]
