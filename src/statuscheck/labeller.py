"""
Run identity labels for deployments created by one invocation.
"""
import uuid
from typing import Dict

RUN_ID_LABEL = "statuscheck.dev/run-id"
MANAGED_BY_LABEL = "app.kubernetes.io/managed-by"


class Labeller:
    """Identifies the resources that belong to a single run."""

    def __init__(self, run_id: str = "", managed_by: str = "kube-status-check"):
        self._run_id = run_id or str(uuid.uuid4())
        self.managed_by = managed_by

    @property
    def run_id(self) -> str:
        return self._run_id

    def run_id_label(self) -> Dict[str, str]:
        return {RUN_ID_LABEL: self._run_id}

    def labels(self) -> Dict[str, str]:
        """Labels to apply to every resource deployed by this run."""
        return {MANAGED_BY_LABEL: self.managed_by, RUN_ID_LABEL: self._run_id}

    def run_id_selector(self) -> str:
        """Label selector matching resources of this run, e.g. ``statuscheck.dev/run-id=<id>``."""
        return f"{RUN_ID_LABEL}={self._run_id}"

    def owns(self, labels: Dict[str, str] | None) -> bool:
        return (labels or {}).get(RUN_ID_LABEL) == self._run_id

    def __repr__(self) -> str:
        return f"Labeller(run_id={self._run_id!r})"
