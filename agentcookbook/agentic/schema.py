"""
Session Options - The Declarative Session Format
================================================

Options that configure one agent session. They are forwarded to the
agent service and also drive the consumer (turn ceiling, structured
output contract, sub-agent tool sets).

Options can be declared in YAML:

    model: opus
    allowed_tools: [Read, Glob, Grep, Task]
    permission_mode: bypassPermissions
    max_turns: 250

    output_contract:
      type: object
      properties:
        summary: {type: string}
        overallScore: {type: number}
      required: [summary, overallScore]

    agents:
      security-scanner:
        description: Deep security analysis for vulnerabilities
        prompt: You are a security expert...
        tools: [Read, Grep, Glob]
        model: sonnet

Options are frozen so the same instance can be handed to nested
sessions without any of them mutating it.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from agentcookbook.agentic.contract import OutputContract
from agentcookbook.settings import settings


class SubAgentDefinition(BaseModel):
    """
    A named sub-agent the main agent may delegate to.

    Purely descriptive: forwarded to the agent service. The consumer only
    records that a delegation happened and uses ``tools`` to recognise
    sub-agent tool names.

    Attributes:
        description: When the main agent should use this sub-agent
        prompt: System prompt for the sub-agent
        tools: Tools the sub-agent may use
        model: Optional model override (e.g. a cheaper model for narrow tasks)
    """

    description: str
    prompt: str = ""
    tools: list[str] = Field(default_factory=list)
    model: str | None = None

    model_config = {"frozen": True}


class AgentOptions(BaseModel):
    """Configuration accepted by a session at start."""

    model: str = Field(default_factory=lambda: settings.agent.default_model)
    allowed_tools: list[str] = Field(default_factory=list)
    max_turns: int = Field(default_factory=lambda: settings.agent.max_turns, gt=0)
    permission_mode: str | None = Field(default_factory=lambda: settings.agent.permission_mode)
    output_contract: dict[str, Any] | None = None
    agents: dict[str, SubAgentDefinition] = Field(default_factory=dict)
    cwd: str | None = None

    model_config = {"frozen": True}

    def contract(self) -> OutputContract | None:
        """Structured output contract, if one was declared."""
        if not self.output_contract:
            return None
        return OutputContract.from_schema(self.output_contract)

    def subagent_tools(self) -> frozenset[str]:
        """Union of all tool names declared by sub-agents."""
        tools: set[str] = set()
        for definition in self.agents.values():
            tools.update(definition.tools)
        return frozenset(tools)


def options_from_yaml(content: str) -> AgentOptions:
    """Parse session options from a YAML string."""
    data = yaml.safe_load(content) or {}
    if not isinstance(data, dict):
        raise ValueError("Session options YAML must be a mapping")
    return AgentOptions.model_validate(data)


def options_from_yaml_file(path: str | Path) -> AgentOptions:
    """Load session options from a YAML file."""
    with open(path) as f:
        return options_from_yaml(f.read())
