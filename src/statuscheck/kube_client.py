"""
Kubernetes client for rollout status operations.
"""
import logging
from typing import Any, List
from kubernetes import client, config
from kubernetes.client.rest import ApiException
from statuscheck.config import settings
from statuscheck.kube_types import Deployment, RolloutStatus

logger = logging.getLogger(__name__)

# Reason set on the Progressing condition once spec.progressDeadlineSeconds has elapsed.
PROGRESS_DEADLINE_EXCEEDED = "ProgressDeadlineExceeded"


class KubeClient:
    """Kubernetes client for status check operations."""

    def __init__(
        self,
        namespace: str,
        in_cluster: bool = True,
        context: str | None = None,
        apps_v1: Any = None,
        request_timeout: float | None = None,
    ):
        """
        Initialize Kubernetes client.

        Args:
            namespace: Default Kubernetes namespace
            in_cluster: Whether running inside cluster (default: True)
            context: Kubernetes context name (optional)
            apps_v1: Pre-built AppsV1Api; skips loading cluster configuration
            request_timeout: Seconds allowed per API request (default: settings)
        """
        self.namespace = namespace
        self.in_cluster = in_cluster
        self.request_timeout = request_timeout or settings.STATUS_CHECK_REQUEST_TIMEOUT_SECS

        if apps_v1 is not None:
            self.apps_v1 = apps_v1
            return

        try:
            if in_cluster:
                config.load_incluster_config()
            else:
                if context:
                    config.load_kube_config(context=context)
                else:
                    config.load_kube_config()

            self.apps_v1 = client.AppsV1Api()
            logger.info(f"✅ Kubernetes client initialized for namespace: {namespace}")

        except Exception as e:
            logger.error(f"❌ Failed to initialize Kubernetes client: {e}")
            raise

    def list_deployments(
        self, namespace: str | None = None, label_selector: str | None = None
    ) -> List[Deployment]:
        """
        Get deployments in a namespace.

        Args:
            namespace: Namespace to list (defaults to the client namespace)
            label_selector: Optional label selector for filtering

        Returns:
            List of Deployment objects
        """
        namespace = namespace or self.namespace
        try:
            deployments = self.apps_v1.list_namespaced_deployment(
                namespace=namespace,
                label_selector=label_selector,
                _request_timeout=self.request_timeout,
            )
        except ApiException as e:
            logger.error(f"Failed to list deployments in {namespace}: {e.status} {e.reason}")
            raise

        deployment_list = []
        for dep in deployments.items:
            spec = dep.spec
            deployment_list.append(Deployment(
                name=dep.metadata.name,
                namespace=dep.metadata.namespace,
                labels=dep.metadata.labels or {},
                progress_deadline_seconds=spec.progress_deadline_seconds if spec else None,
            ))

        logger.debug(f"Retrieved {len(deployment_list)} deployments from namespace {namespace}")
        return deployment_list

    def rollout_status(self, deployment: str, namespace: str | None = None) -> RolloutStatus:
        """
        Check deployment rollout status once, without watching.

        Args:
            deployment: Deployment name
            namespace: Namespace of the deployment (defaults to the client namespace)

        Returns:
            RolloutStatus object
        """
        namespace = namespace or self.namespace
        try:
            deployment_obj = self.apps_v1.read_namespaced_deployment(
                name=deployment,
                namespace=namespace,
                _request_timeout=self.request_timeout,
            )
        except ApiException as e:
            logger.debug(f"Failed to get rollout status for {namespace}/{deployment}: {e.status} {e.reason}")
            raise

        return rollout_status_from(deployment_obj)


def rollout_status_from(deployment_obj) -> RolloutStatus:
    """Classify a V1Deployment the same way ``kubectl rollout status --watch=false`` does."""
    name = deployment_obj.metadata.name
    generation = deployment_obj.metadata.generation or 0
    status = deployment_obj.status
    desired = deployment_obj.spec.replicas

    replicas = (status.replicas if status else None) or 0
    updated = (status.updated_replicas if status else None) or 0
    available = (status.available_replicas if status else None) or 0
    observed = (status.observed_generation if status else None) or 0

    def _status(state: str, message: str) -> RolloutStatus:
        return RolloutStatus(
            deployment=name,
            namespace=deployment_obj.metadata.namespace,
            status=state,
            message=message,
        )

    if generation > observed:
        return _status("pending", "Waiting for deployment spec update to be observed...")

    for cond in (status.conditions if status else None) or []:
        if cond.type == "Progressing" and cond.reason == PROGRESS_DEADLINE_EXCEEDED:
            return _status("failed", f'deployment "{name}" exceeded its progress deadline')

    waiting = f'Waiting for deployment "{name}" rollout to finish'
    if desired is not None and updated < desired:
        return _status("pending", f"{waiting}: {updated} out of {desired} new replicas have been updated...")
    if replicas > updated:
        return _status("pending", f"{waiting}: {replicas - updated} old replicas are pending termination...")
    if available < updated:
        return _status("pending", f"{waiting}: {available} of {updated} updated replicas are available...")

    return _status("ready", f'deployment "{name}" successfully rolled out')
