"""
Static catalog of investigation templates.

The catalog is closed and defined at import time. Each entry names the agent
roles it needs in priority order; directory entries are matched against these
roles by the agent matcher, so decorated names such as ``k8s-agent-prod``
satisfy the ``k8s-agent`` role.
"""

import logging
from typing import Dict, List

from fm_investigation_lib.models import InvestigationTemplate, TemplateNotFound, UrgencyLevel

logger = logging.getLogger(__name__)


# Data-driven template schema - single source of truth
TEMPLATE_SCHEMA: List[Dict] = [
    {
        "id": "prod-incident",
        "name": "Production Incident",
        "description": "Immediate response for critical production issues",
        "required_agents": ["k8s-agent", "observability-agent", "promql-agent"],
        "urgency": UrgencyLevel.P0,
    },
    {
        "id": "perf-degradation",
        "name": "Performance Degradation",
        "description": "Analyze slow response times and resource usage",
        "required_agents": ["promql-agent", "observability-agent", "k8s-agent"],
        "urgency": UrgencyLevel.P1,
    },
    {
        "id": "deployment-rollback",
        "name": "Deployment Rollback",
        "description": "Investigate failed deployments and rollback",
        "required_agents": ["k8s-agent", "argo-rollouts-agent", "helm-agent"],
        "urgency": UrgencyLevel.P2,
    },
    {
        "id": "network-connectivity",
        "name": "Network Connectivity",
        "description": "Diagnose service mesh and network issues",
        "required_agents": ["cilium-debug-agent", "istio-agent", "kgateway-agent"],
        "urgency": UrgencyLevel.P1,
    },
    {
        "id": "security-alert",
        "name": "Security Alert",
        "description": "Investigate security incidents and vulnerabilities",
        "required_agents": ["k8s-agent", "cilium-debug-agent", "observability-agent"],
        "urgency": UrgencyLevel.P0,
    },
    {
        "id": "capacity-planning",
        "name": "Capacity Planning",
        "description": "Resource utilization analysis and scaling",
        "required_agents": ["promql-agent", "observability-agent", "k8s-agent"],
        "urgency": UrgencyLevel.P3,
    },
]

_TEMPLATES: List[InvestigationTemplate] = [
    InvestigationTemplate(**entry) for entry in TEMPLATE_SCHEMA
]
_TEMPLATES_BY_ID: Dict[str, InvestigationTemplate] = {t.id: t for t in _TEMPLATES}


def get_templates() -> List[InvestigationTemplate]:
    """Return all templates in catalog order."""
    return list(_TEMPLATES)


def get_template(template_id: str) -> InvestigationTemplate:
    """Look up a template by id.

    Raises:
        TemplateNotFound: If no template has this id
    """
    template = _TEMPLATES_BY_ID.get(template_id)
    if template is None:
        logger.warning(f"Template lookup failed: {template_id}")
        raise TemplateNotFound(template_id)
    return template
