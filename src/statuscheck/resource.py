"""
Resources whose rollout is tracked during a status check.

Every workload kind exposes the same small set of operations (display
identity, status update, mark done, is done) so the checker never needs to
know which kind it is looking at.
"""
import logging
import threading
from dataclasses import dataclass
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Status:
    """Latest observed rollout state of a resource."""
    details: str = ""
    error: Optional[BaseException] = None


class Resource(Protocol):
    name: str
    namespace: str
    kind: str
    deadline_s: float

    @property
    def status(self) -> Status: ...

    def update_status(self, details: str, error: Optional[BaseException] = None) -> None: ...

    def mark_done(self) -> None: ...

    def is_done(self) -> bool: ...


class Deployment:
    """Rollout state of an apps/v1 Deployment.

    Status and done are guarded by a per-resource lock: the monitor polling
    this deployment is the only writer, the reporter reads concurrently.
    """

    kind = "deployment"

    def __init__(self, name: str, namespace: str, deadline_s: float):
        self.name = name
        self.namespace = namespace
        self.deadline_s = deadline_s
        self._lock = threading.Lock()
        self._status = Status()
        self._done = False

    @property
    def status(self) -> Status:
        with self._lock:
            return self._status

    def update_status(self, details: str, error: Optional[BaseException] = None) -> None:
        with self._lock:
            if self._done:
                logger.debug(f"Ignoring status update for completed {self}: {details!r}")
                return
            self._status = Status(details=details, error=error)

    def mark_done(self) -> None:
        with self._lock:
            self._done = True

    def is_done(self) -> bool:
        with self._lock:
            return self._done

    def __str__(self) -> str:
        return f"{self.namespace}:{self.kind}/{self.name}"

    def __repr__(self) -> str:
        return f"Deployment(name={self.name!r}, namespace={self.namespace!r}, deadline_s={self.deadline_s!r})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, Deployment):
            return NotImplemented
        return (self.name, self.namespace, self.deadline_s, self.status, self.is_done()) == (
            other.name, other.namespace, other.deadline_s, other.status, other.is_done()
        )
