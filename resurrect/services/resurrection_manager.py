"""Resurrection request lifecycle and async restore orchestration."""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from ..config import settings
from ..errors import (
    ApprovalRejected,
    IntegrityCheckFailed,
    InvalidTransition,
    ProviderError,
    ProviderTransientError,
    RequestConflict,
    RequestNotFound,
    UnsupportedRestorationCombination,
    ValidationError,
    VersionConflict,
)
from ..models.restoration import (
    ApprovalRole,
    ApprovalStatus,
    AssetRestoreItem,
    AssetRestoreStatus,
    ErrorInfo,
    ProjectResurrectionRequest,
    RestorationEstimates,
    RestorationOptions,
    RestorationScope,
    RestorationStatus,
    ResurrectionSubmission,
    StaleOverrun,
)
from ..providers import BaseRestoreProvider, RestoreJobStatus, get_provider
from ..restoration.approvals import ApprovalPolicy, required_approvals
from ..restoration.estimator import estimate_restoration, select_assets
from ..restoration.formatting import summarize_estimates
from ..restoration.pricing import DEFAULT_PRICING, TierPricing
from ..restoration.state_machine import can_transition
from ..restoration.validator import validate_request
from .archive_catalog import ArchiveCatalog, demo_catalog
from .notifier import LoggingNotifier, Notifier
from .repository import InMemoryRequestRepository, RequestRepository
from .retry import call_with_retry

logger = logging.getLogger(__name__)

MILESTONES = {
    RestorationStatus.AWAITING_APPROVAL,
    RestorationStatus.RESTORING_METADATA,
    RestorationStatus.RESTORING_ASSETS,
    RestorationStatus.VERIFYING,
}


def _move(request: ProjectResurrectionRequest, target: RestorationStatus) -> None:
    if not can_transition(request.status, target):
        raise InvalidTransition(
            f"Cannot move request {request.id} from {request.status.value} to {target.value}"
        )
    request.status = target
    request.progress.phase = target


class ResurrectionManager:
    def __init__(
        self,
        repository: Optional[RequestRepository] = None,
        catalog: Optional[ArchiveCatalog] = None,
        provider: Optional[BaseRestoreProvider] = None,
        notifier: Optional[Notifier] = None,
        pricing: TierPricing = DEFAULT_PRICING,
        policy: Optional[ApprovalPolicy] = None,
        poll_interval: Optional[float] = None,
        retry_attempts: Optional[int] = None,
        retry_base_delay: Optional[float] = None,
        commit_attempts: Optional[int] = None,
        overrun_factor: Optional[float] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.repository = repository or InMemoryRequestRepository()
        self.catalog = catalog or demo_catalog()
        self.provider = provider or get_provider(settings.restore_provider)
        self.notifier = notifier or LoggingNotifier()
        self.pricing = pricing
        self.policy = policy or ApprovalPolicy.from_settings()
        self.poll_interval = (
            settings.poll_interval_seconds if poll_interval is None else poll_interval
        )
        self.retry_attempts = (
            settings.provider_retry_attempts if retry_attempts is None else retry_attempts
        )
        self.retry_base_delay = (
            settings.provider_retry_base_delay if retry_base_delay is None else retry_base_delay
        )
        self.commit_attempts = (
            settings.approval_commit_attempts if commit_attempts is None else commit_attempts
        )
        self.overrun_factor = settings.overrun_factor if overrun_factor is None else overrun_factor
        self._clock = clock or (lambda: datetime.now(tz=timezone.utc))
        self._tasks: dict[str, asyncio.Task] = {}
        self._progress_listeners: dict[str, list[Callable]] = {}

    # -- queries ---------------------------------------------------------

    def get_request(self, request_id: str) -> ProjectResurrectionRequest:
        request = self.repository.get(request_id)
        if request is None:
            raise RequestNotFound(f"Resurrection request not found: {request_id}")
        return request

    def list_requests(
        self,
        project_id: Optional[str] = None,
        status: Optional[RestorationStatus] = None,
    ) -> list[ProjectResurrectionRequest]:
        return self.repository.list(project_id=project_id, status=status)

    def add_progress_listener(self, request_id: str, callback: Callable) -> None:
        self._progress_listeners.setdefault(request_id, []).append(callback)

    def remove_progress_listener(self, request_id: str, callback: Callable) -> None:
        listeners = self._progress_listeners.get(request_id, [])
        if callback in listeners:
            listeners.remove(callback)
        if not listeners:
            self._progress_listeners.pop(request_id, None)

    async def preview_estimate(
        self, project_id: str, scope: RestorationScope, options: RestorationOptions
    ) -> RestorationEstimates:
        assets = await self.catalog.list_assets(project_id)
        return estimate_restoration(
            select_assets(assets, scope), options, scope.target_tier, self.pricing
        )

    # -- inbound actions -------------------------------------------------

    async def submit(self, submission: ResurrectionSubmission) -> ProjectResurrectionRequest:
        """Validate, estimate and derive approvals for a new request.

        Returns the request in ``awaiting_approval``, or in ``failed`` when
        estimation could not complete. Raises ValidationError without
        persisting anything, and RequestConflict when the project already
        has an open request.
        """
        project = await self.catalog.get_project(submission.project_id)
        existing = self.repository.find_open(project.id)
        if existing is not None:
            raise RequestConflict(
                f"Project {project.id} already has an open request ({existing.id})"
            )

        # speeds are checked against the tiers the selected assets actually live in
        load_error: Optional[Exception] = None
        selected = []
        try:
            assets = await self._call(self.catalog.list_assets, project.id)
            selected = select_assets(assets, submission.scope)
        except (ProviderError, ProviderTransientError) as e:
            load_error = e
        result = validate_request(
            submission, {a.storage_tier for a in selected}, self.pricing
        )
        if not result.valid:
            raise ValidationError(result.errors)

        request = ProjectResurrectionRequest(
            project_id=project.id,
            project_name=project.name,
            requested_by=submission.requested_by,
            reason=submission.reason,
            priority=submission.priority,
            scope=submission.scope,
            options=submission.restoration_options(),
        )
        request = self.repository.add(request)
        logger.info(f"Request {request.id} submitted for {project.name} by {request.requested_by}")
        request = await self._mutate(request.id, lambda r: _move(r, RestorationStatus.ESTIMATING))

        if load_error is not None:
            logger.warning(f"Could not load assets for request {request.id}: {load_error}")
            return await self._mutate(request.id, lambda r: self._fail(r, load_error))
        try:
            estimates = estimate_restoration(
                selected, request.options, request.scope.target_tier, self.pricing
            )
        except UnsupportedRestorationCombination as e:
            logger.warning(f"Estimation failed for request {request.id}: {e}")
            return await self._mutate(request.id, lambda r: self._fail(r, e))

        approvals = required_approvals(estimates, request.priority, self.policy)
        items = [
            AssetRestoreItem(
                asset_id=a.asset_id, storage_tier=a.storage_tier, size_bytes=a.size_bytes
            )
            for a in selected
        ]
        logger.info(f"Request {request.id} estimate: {summarize_estimates(estimates)}")

        def await_approval(r: ProjectResurrectionRequest) -> None:
            r.estimates = estimates
            r.approvals = approvals
            r.items = items
            r.progress.assets_total = len(items)
            r.progress.message = "Awaiting " + ", ".join(a.role.value for a in approvals)
            _move(r, RestorationStatus.AWAITING_APPROVAL)

        return await self._mutate(request.id, await_approval)

    async def record_approval(
        self,
        request_id: str,
        role: ApprovalRole,
        decision: ApprovalStatus,
        actor_id: str,
        comment: Optional[str] = None,
    ) -> ProjectResurrectionRequest:
        if decision == ApprovalStatus.PENDING:
            raise InvalidTransition("An approval decision must be approved or rejected")

        def apply(r: ProjectResurrectionRequest) -> None:
            if r.status != RestorationStatus.AWAITING_APPROVAL:
                raise InvalidTransition(
                    f"Request {r.id} is {r.status.value}, not awaiting approval"
                )
            record = r.approval_for(role)
            if record is None:
                raise InvalidTransition(f"{role.value} approval is not required for request {r.id}")
            if record.status != ApprovalStatus.PENDING:
                raise InvalidTransition(f"{role.value} has already {record.status.value} request {r.id}")

            record.status = decision
            record.approved_by = actor_id
            record.approved_at = self._clock()
            record.comment = comment

            if decision == ApprovalStatus.REJECTED:
                r.error = ErrorInfo.from_exception(ApprovalRejected(role, actor_id, comment))
                r.cancelled_by = actor_id
                _move(r, RestorationStatus.CANCELLED)
            elif r.fully_approved:
                r.restore_started_at = self._clock()
                _move(
                    r,
                    RestorationStatus.RESTORING_METADATA
                    if r.options.staged_restore
                    else RestorationStatus.RESTORING_ASSETS,
                )

        request = await self._mutate(request_id, apply)
        if request.status.is_executing:
            self._start_execution(request.id)
        return request

    async def cancel(self, request_id: str, actor_id: str) -> ProjectResurrectionRequest:
        """Cancel a request.

        Outside of execution the request is cancelled at once. While assets are
        restoring, no new restores are issued and the request moves to
        ``cancelled`` once the in-flight ones settle.
        """

        def apply(r: ProjectResurrectionRequest) -> None:
            if r.status.is_executing:
                if r.cancel_requested:
                    raise InvalidTransition(f"Cancellation of request {r.id} is already in progress")
                r.cancel_requested = True
                r.cancelled_by = actor_id
                r.progress.message = "Cancellation requested; waiting for in-flight restores"
            else:
                r.cancelled_by = actor_id
                _move(r, RestorationStatus.CANCELLED)

        request = await self._mutate(request_id, apply)
        if request.cancel_requested and not request.status.is_terminal:
            self._start_execution(request.id)
        return request

    async def resume_incomplete(self) -> int:
        """Pick up requests left mid-flight by a previous process."""
        resumed = 0
        for request in self.repository.list():
            if request.status.is_executing:
                self._start_execution(request.id)
                resumed += 1
            elif request.status == RestorationStatus.ESTIMATING:
                interrupted = ProviderError("Estimation was interrupted by a restart")
                await self._mutate(request.id, lambda r, e=interrupted: self._fail(r, e))
        if resumed:
            logger.info(f"Resumed {resumed} restoration(s)")
        return resumed

    async def join(self, request_id: str) -> None:
        task = self._tasks.get(request_id)
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)

    async def shutdown(self) -> None:
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    # -- execution -------------------------------------------------------

    def _start_execution(self, request_id: str) -> None:
        task = self._tasks.get(request_id)
        if task is not None and not task.done():
            return
        self._tasks[request_id] = asyncio.create_task(self._run_restoration(request_id))

    async def _run_restoration(self, request_id: str) -> None:
        try:
            request = self.get_request(request_id)
            if request.status == RestorationStatus.RESTORING_METADATA:
                request = await self._restore_metadata(request)
            if request.status == RestorationStatus.RESTORING_ASSETS:
                request = await self._restore_assets(request)
            if request.status == RestorationStatus.VERIFYING:
                await self._verify(request)
        except asyncio.CancelledError:
            logger.info(f"Execution of request {request_id} suspended")
            raise
        except InvalidTransition as e:
            logger.info(f"Execution of request {request_id} stopped: {e}")
        except (ProviderError, ProviderTransientError) as e:
            logger.warning(f"Restoration of request {request_id} failed: {e}")
            await self._fail_if_open(request_id, e)
        except Exception as e:
            logger.exception(f"Restoration of request {request_id} failed")
            await self._fail_if_open(request_id, e)
        finally:
            self._tasks.pop(request_id, None)

    async def _restore_metadata(self, request: ProjectResurrectionRequest) -> ProjectResurrectionRequest:
        if request.cancel_requested:
            return await self._finish_cancel(request.id)
        request = await self._watch_overrun(request)
        await self._call_watching_overrun(
            request.id,
            self.provider.restore_metadata,
            request.project_id,
            [item.asset_id for item in request.items],
        )
        request = await self._watch_overrun(self.get_request(request.id))
        if request.cancel_requested:
            return await self._finish_cancel(request.id)

        def metadata_done(r: ProjectResurrectionRequest) -> None:
            r.progress.message = "Metadata restored"
            _move(r, RestorationStatus.RESTORING_ASSETS)

        return await self._mutate(request.id, metadata_done)

    async def _restore_assets(self, request: ProjectResurrectionRequest) -> ProjectResurrectionRequest:
        def mark_active(r: ProjectResurrectionRequest) -> None:
            # HOT/WARM assets are already readable
            for item in r.items:
                if not item.storage_tier.requires_restore and item.status == AssetRestoreStatus.PENDING:
                    item.status = AssetRestoreStatus.RESTORED
            self._update_progress(r)

        request = await self._mutate(request.id, mark_active)

        for item in request.items:
            if item.status != AssetRestoreStatus.PENDING or item.job_handle:
                continue
            if self.get_request(request.id).cancel_requested:
                break
            handle = await self._call(
                self.provider.issue_restore, item.asset_id, item.storage_tier, request.options.tier
            )
            request = await self._mutate(request.id, self._set_handle(item.asset_id, handle))

        while True:
            request = self.get_request(request.id)
            outstanding = [
                i for i in request.items
                if i.status == AssetRestoreStatus.PENDING and i.job_handle
            ]
            if not outstanding:
                break

            results = {}
            for item in outstanding:
                results[item.asset_id] = await self._call(self.provider.poll_status, item.job_handle)
            request = await self._mutate(request.id, self._apply_poll_results(results))

            failed = [i for i in request.items if i.status == AssetRestoreStatus.FAILED]
            if failed and not request.cancel_requested:
                raise ProviderError(
                    f"{len(failed)} asset(s) failed to restore: "
                    + ", ".join(i.asset_id for i in failed[:5])
                )

            request = await self._watch_overrun(request)

            if any(i.status == AssetRestoreStatus.PENDING for i in request.items):
                await asyncio.sleep(self.poll_interval)

        if request.cancel_requested:
            return await self._finish_cancel(request.id)
        if any(i.status == AssetRestoreStatus.PENDING for i in request.items):
            raise ProviderError(f"Request {request.id} has assets that were never issued")

        if request.options.verify_integrity:
            return await self._mutate(
                request.id, lambda r: _move(r, RestorationStatus.VERIFYING)
            )
        return await self._mutate(request.id, self._complete)

    async def _verify(self, request: ProjectResurrectionRequest) -> ProjectResurrectionRequest:
        if request.cancel_requested:
            return await self._finish_cancel(request.id)
        request = await self._watch_overrun(request)
        ok = await self._call_watching_overrun(
            request.id, self.provider.verify_integrity, [item.asset_id for item in request.items]
        )
        request = await self._watch_overrun(self.get_request(request.id))
        if request.cancel_requested:
            return await self._finish_cancel(request.id)
        if not ok:
            error = IntegrityCheckFailed(f"Integrity verification failed for request {request.id}")
            return await self._mutate(request.id, lambda r: self._fail(r, error))
        return await self._mutate(request.id, self._complete)

    async def _finish_cancel(self, request_id: str) -> ProjectResurrectionRequest:
        def settle(r: ProjectResurrectionRequest) -> None:
            r.progress.message = "Cancelled; in-flight restores settled"
            _move(r, RestorationStatus.CANCELLED)

        return await self._mutate(request_id, settle)

    async def _flag_overrun(self, request_id: str, overrun: StaleOverrun) -> ProjectResurrectionRequest:
        def flag(r: ProjectResurrectionRequest) -> None:
            r.overrun = overrun

        request = await self._mutate(request_id, flag)
        logger.warning(
            f"Request {request_id} has run {overrun.elapsed_minutes:.0f} min against an "
            f"estimate of {overrun.estimated_minutes} min; flagged for operator attention"
        )
        await self._send("overrun", request, [request.requested_by])
        return request

    async def _watch_overrun(self, request: ProjectResurrectionRequest) -> ProjectResurrectionRequest:
        overrun = self._check_overrun(request)
        if overrun is None:
            return request
        return await self._flag_overrun(request.id, overrun)

    async def _call_watching_overrun(self, request_id: str, operation, *args):
        """Await a provider call, checking for an overrun every poll interval until it returns."""
        call = asyncio.create_task(self._call(operation, *args))
        try:
            while True:
                done, _ = await asyncio.wait({call}, timeout=self.poll_interval or None)
                if done:
                    return call.result()
                await self._watch_overrun(self.get_request(request_id))
        finally:
            if not call.done():
                call.cancel()

    def _check_overrun(self, request: ProjectResurrectionRequest) -> Optional[StaleOverrun]:
        if request.overrun or not request.restore_started_at or not request.estimates:
            return None
        estimated = request.estimates.total_restore_minutes
        if estimated <= 0:
            return None
        elapsed = (self._clock() - request.restore_started_at).total_seconds() / 60
        if elapsed <= self.overrun_factor * estimated:
            return None
        return StaleOverrun(
            flagged_at=self._clock(), elapsed_minutes=elapsed, estimated_minutes=estimated
        )

    # -- mutation helpers ------------------------------------------------

    async def _mutate(
        self,
        request_id: str,
        change: Callable[[ProjectResurrectionRequest], None],
    ) -> ProjectResurrectionRequest:
        """Apply ``change`` to the latest version and commit it with compare-and-swap."""
        for attempt in range(self.commit_attempts):
            current = self.get_request(request_id)
            if current.status.is_terminal:
                raise InvalidTransition(f"Request {request_id} is already {current.status.value}")
            updated = current.model_copy(deep=True)
            change(updated)
            try:
                saved = self.repository.save(updated, expected_version=current.version)
            except VersionConflict:
                logger.debug(f"Version conflict on request {request_id} (attempt {attempt + 1})")
                continue
            await self._after_commit(current.status, saved)
            return saved
        raise VersionConflict(
            f"Request {request_id} kept changing; gave up after {self.commit_attempts} attempts"
        )

    async def _fail_if_open(self, request_id: str, error: Exception) -> None:
        try:
            await self._mutate(request_id, lambda r: self._fail(r, error))
        except InvalidTransition:
            logger.info(f"Request {request_id} already finished; not recording failure: {error}")

    def _fail(self, request: ProjectResurrectionRequest, error: Exception) -> None:
        request.error = ErrorInfo.from_exception(error)
        request.progress.message = str(error)
        _move(request, RestorationStatus.FAILED)

    def _complete(self, request: ProjectResurrectionRequest) -> None:
        now = self._clock()
        _move(request, RestorationStatus.COMPLETED)
        request.completed_at = now
        request.progress.percent_complete = 100.0
        request.progress.message = "Restoration complete"
        if request.options.auto_re_archive_days > 0:
            request.re_archive_at = now + timedelta(days=request.options.auto_re_archive_days)

    @staticmethod
    def _set_handle(asset_id: str, handle: str) -> Callable[[ProjectResurrectionRequest], None]:
        def apply(r: ProjectResurrectionRequest) -> None:
            for item in r.items:
                if item.asset_id == asset_id:
                    item.job_handle = handle
        return apply

    def _apply_poll_results(
        self, results: dict[str, RestoreJobStatus]
    ) -> Callable[[ProjectResurrectionRequest], None]:
        def apply(r: ProjectResurrectionRequest) -> None:
            for item in r.items:
                status = results.get(item.asset_id)
                if status is None or item.status != AssetRestoreStatus.PENDING:
                    continue
                if status == RestoreJobStatus.RESTORED:
                    item.status = AssetRestoreStatus.RESTORED
                elif status == RestoreJobStatus.FAILED:
                    item.status = AssetRestoreStatus.FAILED
                    item.error = "Provider reported an unrecoverable restore failure"
            self._update_progress(r)
        return apply

    @staticmethod
    def _update_progress(request: ProjectResurrectionRequest) -> None:
        """Size-weighted percent complete; never moves backwards."""
        restored = [i for i in request.items if i.status == AssetRestoreStatus.RESTORED]
        restored_bytes = sum(i.size_bytes for i in restored)
        total_bytes = sum(i.size_bytes for i in request.items)
        if total_bytes > 0:
            percent = 100.0 * restored_bytes / total_bytes
        else:
            percent = 100.0 if request.items and len(restored) == len(request.items) else 0.0
        percent = min(max(percent, 0.0), 100.0)

        progress = request.progress
        if percent < progress.percent_complete:
            logger.warning(
                f"Request {request.id}: provider progress regressed from "
                f"{progress.percent_complete:.1f}% to {percent:.1f}%; keeping previous value"
            )
        else:
            progress.percent_complete = percent
        progress.assets_restored = len(restored)
        progress.assets_total = len(request.items)
        progress.bytes_restored = restored_bytes
        progress.message = f"Restored {len(restored)}/{len(request.items)} assets"

    # -- outbound --------------------------------------------------------

    async def _call(self, operation, *args):
        return await call_with_retry(
            operation, *args, attempts=self.retry_attempts, base_delay=self.retry_base_delay
        )

    async def _after_commit(
        self, previous: RestorationStatus, request: ProjectResurrectionRequest
    ) -> None:
        if request.status != previous:
            logger.info(f"Request {request.id}: {previous.value} -> {request.status.value}")
            if request.status.is_terminal:
                if request.options.notify_on_complete:
                    await self._send(
                        request.status.value, request, request.options.notify_on_complete
                    )
            elif request.status in MILESTONES and request.options.notify_on_milestone:
                await self._send(request.status.value, request, [request.requested_by])
        await self._notify_progress(request)

    async def _send(
        self, event: str, request: ProjectResurrectionRequest, recipients: list[str]
    ) -> None:
        try:
            await self.notifier.send(event, request, recipients)
        except Exception:
            logger.exception(f"Notification '{event}' for request {request.id} failed")

    async def _notify_progress(self, request: ProjectResurrectionRequest) -> None:
        listeners = self._progress_listeners.get(request.id, [])
        for cb in listeners:
            try:
                await cb(request)
            except Exception:
                logger.exception(f"Progress listener for request {request.id} failed")


# Singleton
resurrection_manager = ResurrectionManager()
