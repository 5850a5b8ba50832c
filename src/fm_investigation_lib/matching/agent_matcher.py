"""Resolve required agent roles against the agent directory.

Matching is deliberately asymmetric. A required name is a logical role
(``k8s-agent``) and directory entries may carry decorated names
(``k8s-agent-prod``), so a role matches an agent when:

1. the agent name equals the role exactly (case-sensitive), or
2. the role is a case-insensitive substring of the agent name.

Pass 1 runs over the whole directory before pass 2. The first agent in
directory order wins; there is no scoring. An agent name contained in the
role never matches.
"""

from typing import List, Optional, Sequence

from fm_investigation_lib.models import Agent, InvestigationTemplate


def resolve(required_name: str, agents: Sequence[Agent]) -> Optional[Agent]:
    """Return the directory agent that satisfies ``required_name``, if any.

    Example:
        >>> resolve("foo-agent", [Agent(name="bar"), Agent(name="foo-agent-prod")]).name
        'foo-agent-prod'
    """
    for agent in agents:
        if agent.name == required_name:
            return agent

    needle = required_name.lower()
    for agent in agents:
        if needle in agent.name.lower():
            return agent

    return None


def is_available(required_name: str, agents: Sequence[Agent]) -> bool:
    return resolve(required_name, agents) is not None


def available_required_agents(
    required_names: Sequence[str], agents: Sequence[Agent]
) -> List[str]:
    """Filter required names down to those with a directory match, order preserved."""
    return [name for name in required_names if is_available(name, agents)]


def is_template_available(template: InvestigationTemplate, agents: Sequence[Agent]) -> bool:
    """A template is startable when at least one required agent matches."""
    return any(is_available(name, agents) for name in template.required_agents)
