"""
Exceptions raised by the status checker.
"""
from typing import Sequence


class StatusCheckError(Exception):
    """Base class for status check failures."""


class DiscoveryError(StatusCheckError):
    """Deployments owned by the current run could not be listed."""


class RolloutPollError(StatusCheckError):
    """A single rollout status poll failed. The monitor keeps polling."""


class RolloutFailedError(StatusCheckError):
    """The cluster reports the rollout itself as failed."""


class RolloutTimeoutError(StatusCheckError):
    """The deployment did not become ready within its deadline."""


class StatusCheckCancelledError(StatusCheckError):
    """The status check was cancelled before the deployment became ready."""


class DeploymentsNotStableError(StatusCheckError):
    """One or more deployments finished the status check with an error."""

    def __init__(self, resources: Sequence):
        self.resources = list(resources)
        lines = [f"{r} failed due to {r.status.error}" for r in self.resources]
        super().__init__("following deployments are not stable:\n" + "\n".join(lines))
