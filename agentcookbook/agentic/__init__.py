"""Cookbook agentic module - session options, consumer and runner.

Core Components:
- AgentOptions: Session configuration (model, tools, turns, contract, sub-agents)
- OutputContract: JSON Schema structured output validation
- SessionConsumer: Classifies streamed events and produces an Outcome
- run_session: Entry point used by the CLI recipes
"""

from agentcookbook.agentic.contract import OutputContract, build_model
from agentcookbook.agentic.runner import (
    BASIC_PROMPT,
    SessionResult,
    basic_options,
    review_options,
    review_prompt,
    run_session,
)
from agentcookbook.agentic.schema import (
    AgentOptions,
    SubAgentDefinition,
    options_from_yaml,
    options_from_yaml_file,
)
from agentcookbook.agentic.streaming import SessionConsumer

__all__ = [
    # Options
    "AgentOptions",
    "SubAgentDefinition",
    "options_from_yaml",
    "options_from_yaml_file",
    # Contract
    "OutputContract",
    "build_model",
    # Consumer
    "SessionConsumer",
    # Runner
    "run_session",
    "SessionResult",
    "BASIC_PROMPT",
    "basic_options",
    "review_options",
    "review_prompt",
]
