"""Rollout status checking for deployments created by one run."""

from statuscheck.errors import (
    DeploymentsNotStableError,
    DiscoveryError,
    RolloutFailedError,
    RolloutPollError,
    RolloutTimeoutError,
    StatusCheckCancelledError,
    StatusCheckError,
)
from statuscheck.labeller import Labeller
from statuscheck.resource import Deployment, Resource, Status
from statuscheck.status_check import run_status_check, status_check

__all__ = [
    "Deployment",
    "DeploymentsNotStableError",
    "DiscoveryError",
    "Labeller",
    "Resource",
    "RolloutFailedError",
    "RolloutPollError",
    "RolloutTimeoutError",
    "Status",
    "StatusCheckCancelledError",
    "StatusCheckError",
    "run_status_check",
    "status_check",
]
