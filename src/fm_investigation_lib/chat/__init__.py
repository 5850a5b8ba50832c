"""Chat integration"""

from .integrator import ChatIntegrator

__all__ = ["ChatIntegrator"]
