"""Distribution services: the job engine, its dispatch shell and wiring."""

from .container import ServiceContainer, build_services
from .dispatch import JOB_TYPE, DistributionService
from .distribution import AvailabilityChecker, HLSDistributionEngine

__all__ = [
    "JOB_TYPE",
    "AvailabilityChecker",
    "DistributionService",
    "HLSDistributionEngine",
    "ServiceContainer",
    "build_services",
]
