"""
Identity component - Authentication and role gates.
"""

from .component import run_guard_navigation, run_require_authenticated, run_require_role
from .models import GateInput, GateOutput, NavigationDecision, NavigationInput, RoleGateInput
from .ports import ClientSessionPort, IdentityProviderPort

__all__ = [
    # Entry points
    "run_guard_navigation",
    "run_require_authenticated",
    "run_require_role",
    # Models
    "GateInput",
    "GateOutput",
    "NavigationDecision",
    "NavigationInput",
    "RoleGateInput",
    # Ports
    "ClientSessionPort",
    "IdentityProviderPort",
]
