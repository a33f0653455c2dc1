"""
Capacity-gated admission shared by team membership and event registration.
"""

from .capacity_gate import Admission, AdmissionPolicy, CapacityGate

__all__ = ["Admission", "AdmissionPolicy", "CapacityGate"]
