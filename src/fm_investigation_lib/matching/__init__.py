"""Agent matching"""

from fm_investigation_lib.matching.agent_matcher import (
    available_required_agents,
    is_available,
    is_template_available,
    resolve,
)

__all__ = [
    "resolve",
    "is_available",
    "available_required_agents",
    "is_template_available",
]
