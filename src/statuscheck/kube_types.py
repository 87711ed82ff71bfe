"""
Type definitions for Kubernetes objects.
"""
from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass
class Deployment:
    """Kubernetes Deployment representation."""
    name: str
    namespace: str
    labels: Dict[str, str] = field(default_factory=dict)
    progress_deadline_seconds: Optional[int] = None


@dataclass
class RolloutStatus:
    """Deployment rollout status."""
    deployment: str
    namespace: str
    status: str  # "ready", "pending", "failed"
    message: str

    @property
    def done(self) -> bool:
        return self.status == "ready"

    @property
    def failed(self) -> bool:
        return self.status == "failed"
