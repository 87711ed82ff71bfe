"""
Rollout status check for the deployments created by one run.

One monitor task per deployment polls its rollout status until it is ready,
fails, or runs out of time. A reporter task prints the deployments that are
still pending at a fixed interval, and every monitor prints a summary line
once its deployment is finished.
"""
import asyncio
import contextlib
import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Sequence, TextIO

from kubernetes.client.rest import ApiException

from statuscheck import resource
from statuscheck.config import settings
from statuscheck.errors import (
    DeploymentsNotStableError,
    DiscoveryError,
    RolloutFailedError,
    RolloutPollError,
    RolloutTimeoutError,
    StatusCheckCancelledError,
)
from statuscheck.labeller import Labeller
from statuscheck.resource import Resource

logger = logging.getLogger(__name__)

TAB_HEADER = " -"
WAITING_DETAILS = "waiting for rollout status"


# -----------------------------------------------------------------------------
# Discovery
# -----------------------------------------------------------------------------
def get_deadline(progress_deadline_s: Optional[float], global_deadline_s: float) -> float:
    """Effective deadline of one deployment: its own progress deadline, capped by the global one."""
    if progress_deadline_s and 0 < progress_deadline_s <= global_deadline_s:
        return float(progress_deadline_s)
    return float(global_deadline_s)


def get_deployments(client, namespace: str, labeller: Labeller, deadline_s: float) -> List[Resource]:
    """
    List the deployments in ``namespace`` created by the labeller's run.

    Args:
        client: KubeClient (or anything with the same ``list_deployments``)
        namespace: Namespace to look in
        labeller: Run identity used to select owned deployments
        deadline_s: Global deadline in seconds

    Returns:
        Resources in listing order, possibly empty

    Raises:
        DiscoveryError: the deployments could not be listed
    """
    try:
        deps = client.list_deployments(namespace=namespace, label_selector=labeller.run_id_selector())
    except Exception as e:
        raise DiscoveryError(f"could not fetch deployments: {e}") from e

    deployments: List[Resource] = []
    for d in deps:
        if d.namespace != namespace or not labeller.owns(d.labels):
            continue
        deadline = get_deadline(d.progress_deadline_seconds, deadline_s)
        deployments.append(resource.Deployment(d.name, d.namespace, deadline))
    return deployments


# -----------------------------------------------------------------------------
# Verdict and reporting
# -----------------------------------------------------------------------------
def get_deploy_status(resources: Sequence[Resource]) -> None:
    """Raise DeploymentsNotStableError listing every resource whose final status carries an error."""
    failed = [r for r in resources if r.status.error is not None]
    if failed:
        raise DeploymentsNotStableError(failed)


def print_status(resources: Sequence[Resource], out: TextIO) -> bool:
    """
    Print one line per resource that is still being checked.

    Returns True when nothing was printed, i.e. every resource is done.
    """
    all_done = True
    for r in resources:
        if r.is_done():
            continue
        all_done = False
        status = r.status
        msg = str(status.error) if status.error is not None else (status.details or WAITING_DETAILS)
        out.write(f"{TAB_HEADER} {r} {_trim_new_line(msg)}\n")
    return all_done


def print_status_check_summary(out: TextIO, r: Resource, pending: int, total: int) -> None:
    status = f"{TAB_HEADER} {r}"
    error = r.status.error
    if error is not None:
        status = f"{status} failed.{_pending_message(pending, total)} Error: {_trim_new_line(str(error))}."
    else:
        status = f"{status} is ready.{_pending_message(pending, total)}"
    out.write(status + "\n")


def _pending_message(pending: int, total: int) -> str:
    if pending > 0:
        return f" [{pending}/{total} deployment(s) still pending]"
    return ""


def _trim_new_line(msg: str) -> str:
    return msg[:-1] if msg.endswith("\n") else msg


# -----------------------------------------------------------------------------
# Monitoring
# -----------------------------------------------------------------------------
@dataclass
class _Counter:
    total: int
    pending: int
    failed: int = 0

    def mark_processed(self, error: Optional[BaseException]) -> int:
        if error is not None:
            self.failed += 1
        self.pending -= 1
        return self.pending


async def _wait_cancelled(cancelled: asyncio.Event, timeout: float) -> bool:
    """Sleep for ``timeout`` seconds; return True as soon as ``cancelled`` is set."""
    try:
        await asyncio.wait_for(cancelled.wait(), timeout=timeout)
    except asyncio.TimeoutError:
        return cancelled.is_set()
    return True


def _poll_error(e: Exception) -> RolloutPollError:
    if isinstance(e, ApiException):
        err = RolloutPollError(f"could not fetch rollout status: {e.status} {e.reason}")
    else:
        err = RolloutPollError(f"could not fetch rollout status: {e}")
    err.__cause__ = e
    return err


async def poll_rollout_status(
    client,
    r: Resource,
    poll_interval_s: float,
    cancelled: asyncio.Event,
    executor: Optional[Executor] = None,
) -> None:
    """
    Poll the rollout status of ``r`` until it is ready, fails, or its deadline passes.

    Any error raised by a single poll is recorded on the resource and
    retried. The resource is always marked done on return, including when
    the enclosing task is cancelled.
    """
    loop = asyncio.get_running_loop()
    # one last attempt after the deadline itself
    expires_at = loop.time() + r.deadline_s + poll_interval_s
    logger.debug(f"Checking rollout status of {r} (deadline {r.deadline_s:g}s)")
    try:
        while True:
            remaining = expires_at - loop.time()
            if remaining <= 0:
                err = RolloutTimeoutError(
                    f"deployment rollout status could not be fetched within {r.deadline_s:g}s"
                )
                r.update_status(str(err), err)
                return

            if await _wait_cancelled(cancelled, min(poll_interval_s, remaining)):
                err = StatusCheckCancelledError("status check cancelled")
                r.update_status(str(err), err)
                return

            remaining = expires_at - loop.time()
            if remaining <= 0:
                continue
            try:
                rollout = await asyncio.wait_for(
                    loop.run_in_executor(executor, client.rollout_status, r.name, r.namespace),
                    timeout=remaining,
                )
            except asyncio.TimeoutError:
                continue
            except Exception as e:
                err = _poll_error(e)
                logger.debug(f"{r}: {err}")
                r.update_status(str(err), err)
                continue

            if rollout.failed:
                err = RolloutFailedError(rollout.message)
                r.update_status(rollout.message, err)
                return
            r.update_status(rollout.message)
            if rollout.done:
                return
    except asyncio.CancelledError:
        err = StatusCheckCancelledError("status check cancelled")
        r.update_status(str(err), err)
        raise
    finally:
        r.mark_done()
        logger.debug(f"Finished checking {r}: {r.status}")


async def print_resource_status(
    resources: Sequence[Resource],
    out: TextIO,
    deadline_s: float,
    report_interval_s: float,
    cancelled: asyncio.Event,
) -> None:
    """Print pending resources every ``report_interval_s`` until all are done, cancelled, or ``deadline_s`` passes."""
    loop = asyncio.get_running_loop()
    expires_at = loop.time() + deadline_s
    while True:
        remaining = expires_at - loop.time()
        if remaining <= 0:
            return
        if await _wait_cancelled(cancelled, min(report_interval_s, remaining)):
            return
        if print_status(resources, out):
            return


# -----------------------------------------------------------------------------
# Entry points
# -----------------------------------------------------------------------------
async def status_check(
    client,
    namespace: str,
    labeller: Labeller,
    out: TextIO,
    deadline_s: Optional[float] = None,
    poll_interval_s: Optional[float] = None,
    report_interval_s: Optional[float] = None,
    cancelled: Optional[asyncio.Event] = None,
) -> None:
    """
    Wait for every deployment of the labeller's run in ``namespace`` to roll out.

    Args:
        client: KubeClient used to list deployments and read their rollout status
        namespace: Namespace to check
        labeller: Run identity selecting the deployments to check
        out: Sink for progress and summary lines
        deadline_s: Global deadline in seconds (default: settings)
        poll_interval_s: Interval between rollout status polls (default: settings)
        report_interval_s: Interval between progress reports (default: settings)
        cancelled: Event that stops the check when set

    Raises:
        DiscoveryError: the deployments could not be listed
        DeploymentsNotStableError: one or more deployments did not roll out
    """
    deadline_s = deadline_s or settings.STATUS_CHECK_DEADLINE_SECS
    poll_interval_s = poll_interval_s or settings.STATUS_CHECK_POLL_INTERVAL_SECS
    report_interval_s = report_interval_s or settings.STATUS_CHECK_REPORT_INTERVAL_SECS
    if cancelled is None:
        cancelled = asyncio.Event()

    resources = await asyncio.to_thread(get_deployments, client, namespace, labeller, deadline_s)
    if not resources:
        logger.info(f"No deployments found for run {labeller.run_id} in namespace {namespace}")
        return

    logger.info(f"Checking rollout status of {len(resources)} deployment(s) in namespace {namespace}")
    counter = _Counter(total=len(resources), pending=len(resources))

    async def monitor(r: Resource) -> None:
        await poll_rollout_status(client, r, poll_interval_s, cancelled, executor)
        pending = counter.mark_processed(r.status.error)
        print_status_check_summary(out, r, pending, counter.total)

    max_deadline = max(r.deadline_s for r in resources) + poll_interval_s
    # polls abandoned at their deadline must not hold up the caller
    executor = ThreadPoolExecutor(max_workers=len(resources), thread_name_prefix="rollout-status")
    reporter = asyncio.create_task(
        print_resource_status(resources, out, max_deadline, report_interval_s, cancelled)
    )
    try:
        async with asyncio.TaskGroup() as tg:
            for r in resources:
                tg.create_task(monitor(r))
    finally:
        executor.shutdown(wait=False, cancel_futures=True)
        reporter.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await reporter

    try:
        get_deploy_status(resources)
    except DeploymentsNotStableError:
        logger.warning(f"❌ {counter.failed}/{counter.total} deployment(s) in namespace {namespace} are not stable")
        raise
    logger.info(f"✅ All {counter.total} deployment(s) in namespace {namespace} are ready")


def run_status_check(
    client,
    namespace: str,
    labeller: Labeller,
    out: TextIO,
    deadline_s: Optional[float] = None,
    poll_interval_s: Optional[float] = None,
    report_interval_s: Optional[float] = None,
) -> None:
    """Blocking wrapper around :func:`status_check`."""
    asyncio.run(status_check(
        client,
        namespace,
        labeller,
        out,
        deadline_s=deadline_s,
        poll_interval_s=poll_interval_s,
        report_interval_s=report_interval_s,
    ))
