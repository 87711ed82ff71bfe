"""Shared fixtures: an in-memory cluster client and resource builders.

No cluster access. Rollout statuses are scripted per deployment.
"""

from __future__ import annotations

import threading
from typing import Dict, List, Optional, Union

import pytest

from statuscheck import resource
from statuscheck.kube_types import Deployment, RolloutStatus
from statuscheck.labeller import RUN_ID_LABEL, Labeller


class FakeKubeClient:
    """Stands in for KubeClient.

    ``rollouts`` maps a deployment name to the responses returned by
    successive ``rollout_status`` calls; the last one repeats. A response that
    is an exception is raised instead of returned.
    """

    def __init__(
        self,
        deployments: Optional[List[Deployment]] = None,
        rollouts: Optional[Dict[str, List[Union[RolloutStatus, Exception]]]] = None,
        list_error: Optional[Exception] = None,
    ):
        self.deployments = deployments or []
        self.rollouts = rollouts or {}
        self.list_error = list_error
        self.calls: Dict[str, int] = {}
        self._lock = threading.Lock()

    def list_deployments(self, namespace=None, label_selector=None):
        if self.list_error is not None:
            raise self.list_error
        return list(self.deployments)

    def rollout_status(self, deployment, namespace=None):
        with self._lock:
            n = self.calls.get(deployment, 0)
            self.calls[deployment] = n + 1
        responses = self.rollouts[deployment]
        response = responses[min(n, len(responses) - 1)]
        if isinstance(response, Exception):
            raise response
        return response


def ready(name: str, namespace: str = "test") -> RolloutStatus:
    return RolloutStatus(name, namespace, "ready", f'deployment "{name}" successfully rolled out')


def pending(name: str, namespace: str = "test") -> RolloutStatus:
    return RolloutStatus(
        name,
        namespace,
        "pending",
        f'Waiting for deployment "{name}" rollout to finish: 0 of 1 updated replicas are available...',
    )


def failed(name: str, namespace: str = "test") -> RolloutStatus:
    return RolloutStatus(name, namespace, "failed", f'deployment "{name}" exceeded its progress deadline')


def owned(labeller: Labeller, name: str, namespace: str = "test", deadline: Optional[int] = None) -> Deployment:
    return Deployment(
        name=name,
        namespace=namespace,
        labels={RUN_ID_LABEL: labeller.run_id},
        progress_deadline_seconds=deadline,
    )


def with_status(d: resource.Deployment, details: str, err: Optional[BaseException]) -> resource.Deployment:
    d.update_status(details, err)
    return d


def with_done(d: resource.Deployment, details: str, err: Optional[BaseException]) -> resource.Deployment:
    d.update_status(details, err)
    d.mark_done()
    return d


@pytest.fixture
def labeller() -> Labeller:
    return Labeller("")
