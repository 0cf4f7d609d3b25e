"""
Rate limiting package for the gateway.

Holds the process-wide admission controller that every request draws from
before it is routed.
"""

from .admission import AdmissionController

__all__ = ["AdmissionController"]
