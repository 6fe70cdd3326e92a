"""Accept/reject saga across the notification sink, the roster store and the selection queue.

The three stores share no transaction. A transition is an ordered list of
non-reversible steps that stops at the first hard failure:

    notify  ->  roster_write (accept only)  ->  refresh

A failure after ``notify`` leaves the webhook delivered without a roster row.
Because the refresh replaces local state from upstream, the candidate is still
queued and the operator can re-attempt, which delivers the webhook a second time.
The roster write is skipped when ``(name, email)`` is on a fresh roster listing.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from functools import lru_cache

from opentelemetry import trace

from candidate_sync.core.datetimes import format_datetime
from candidate_sync.schemas.candidates import Candidate
from candidate_sync.schemas.roster import RosterEntry
from candidate_sync.schemas.transitions import Decision, TransitionOut, TransitionState
from candidate_sync.services.errors import SyncError, ValidationError
from candidate_sync.services.notifications import WebhookNotifier, get_notifier
from candidate_sync.services.roster import RosterRepository, get_roster_repository
from candidate_sync.services.selection import SelectionQueueRepository, get_selection_queue

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

STEP_VALIDATE = "validate"
STEP_NOTIFY = "notify"
STEP_ROSTER_WRITE = "roster_write"
STEP_REFRESH = "refresh"


def processing_key(email: str) -> str:
    return email.strip().casefold()


@dataclass(slots=True, frozen=True)
class TransitionRequest:
    candidate: Candidate
    decision: Decision


@dataclass(slots=True)
class TransitionOutcome:
    request: TransitionRequest
    state: TransitionState = TransitionState.IDLE
    completed_steps: list[str] = field(default_factory=list)
    failed_step: str | None = None
    error: str | None = None
    roster_entry: RosterEntry | None = None
    roster_entry_existed: bool = False
    refresh_errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.state in (TransitionState.ACCEPTED, TransitionState.REJECTED)

    @property
    def message(self) -> str:
        name = self.request.candidate.display_name
        if self.state is TransitionState.ACCEPTED:
            return f"{name} has been added to Candidate Details."
        if self.state is TransitionState.REJECTED:
            return f"{name} has been removed from selection."
        if self.state is TransitionState.FAILED:
            verb = "accept" if self.request.decision is Decision.ACCEPT else "reject"
            return f"Failed to {verb} candidate at step {self.failed_step}: {self.error}"
        return f"{name} is {self.state.value}."

    def to_out(self) -> TransitionOut:
        return TransitionOut(
            email=self.request.candidate.email,
            name=self.request.candidate.display_name,
            decision=self.request.decision,
            state=self.state,
            message=self.message,
            completed_steps=list(self.completed_steps),
            failed_step=self.failed_step,
            roster_entry_existed=self.roster_entry_existed,
            refresh_errors=list(self.refresh_errors),
        )


class TransitionOrchestrator:
    def __init__(
        self,
        selection: SelectionQueueRepository,
        roster: RosterRepository,
        notifier: WebhookNotifier,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.selection = selection
        self.roster = roster
        self.notifier = notifier
        self._clock = clock
        self._in_flight: set[str] = set()
        self.selected: Candidate | None = None

    @property
    def processing(self) -> frozenset[str]:
        return frozenset(self._in_flight)

    def is_processing(self, email: str) -> bool:
        return processing_key(email) in self._in_flight

    def select(self, candidate: Candidate | None) -> None:
        self.selected = candidate

    async def accept(self, candidate: Candidate) -> TransitionOutcome:
        return await self.dispatch(TransitionRequest(candidate=candidate, decision=Decision.ACCEPT))

    async def reject(self, candidate: Candidate) -> TransitionOutcome:
        return await self.dispatch(TransitionRequest(candidate=candidate, decision=Decision.REJECT))

    async def dispatch(self, request: TransitionRequest) -> TransitionOutcome:
        """Run one transition to completion or first failure.

        The in-flight marker is set before the first await and always cleared.
        It is advisory: callers check ``is_processing`` before dispatching.
        """
        outcome = TransitionOutcome(request=request)
        candidate = request.candidate
        key = processing_key(candidate.email)
        if key:
            self._in_flight.add(key)
        outcome.state = TransitionState.DISPATCHING
        step = STEP_VALIDATE

        with tracer.start_as_current_span("transition.dispatch") as span:
            span.set_attribute("transition.decision", request.decision.value)
            span.set_attribute("candidate.email", key)
            try:
                if not key:
                    raise ValidationError("candidate has no email to key the transition")
                outcome.completed_steps.append(STEP_VALIDATE)

                step = STEP_NOTIFY
                with tracer.start_as_current_span("transition.notify"):
                    await self.notifier.send(candidate, request.decision)
                outcome.completed_steps.append(STEP_NOTIFY)

                if request.decision is Decision.ACCEPT:
                    step = STEP_ROSTER_WRITE
                    with tracer.start_as_current_span("transition.roster_write"):
                        await self._write_roster(outcome)
                    outcome.completed_steps.append(STEP_ROSTER_WRITE)

                step = STEP_REFRESH
                with tracer.start_as_current_span("transition.refresh"):
                    await self._reconcile(outcome, key)
                outcome.completed_steps.append(STEP_REFRESH)

                if request.decision is Decision.ACCEPT:
                    outcome.state = TransitionState.ACCEPTED
                else:
                    outcome.state = TransitionState.REJECTED
                logger.info(
                    "transition completed email=%s decision=%s steps=%s",
                    key,
                    request.decision.value,
                    ",".join(outcome.completed_steps),
                )
            except SyncError as exc:
                outcome.state = TransitionState.FAILED
                outcome.failed_step = step
                outcome.error = str(exc)
                span.record_exception(exc)
                logger.error(
                    "transition failed email=%s decision=%s step=%s error=%s",
                    key,
                    request.decision.value,
                    step,
                    exc,
                )
            finally:
                if key:
                    self._in_flight.discard(key)

        return outcome

    async def _write_roster(self, outcome: TransitionOutcome) -> None:
        candidate = outcome.request.candidate
        entry = RosterEntry(
            name=candidate.display_name,
            email=candidate.email,
            phone_number=candidate.mobile,
            job_role_admin=candidate.job_role_candidate,
            datetime=format_datetime(self._clock()),
        )
        try:
            existed = await self.roster.contains(entry.name, entry.email, fresh=True)
        except SyncError as exc:
            logger.warning("roster duplicate check unavailable email=%s error=%s", candidate.email, exc)
            existed = False

        if existed:
            outcome.roster_entry_existed = True
            logger.warning("roster already holds email=%s; write skipped", candidate.email)
        else:
            await self.roster.create(entry)
        outcome.roster_entry = entry

    async def _reconcile(self, outcome: TransitionOutcome, key: str) -> None:
        if self.selected is not None and processing_key(self.selected.email) == key:
            self.selected = None

        repositories: list[SelectionQueueRepository | RosterRepository] = [self.selection]
        if outcome.request.decision is Decision.ACCEPT:
            repositories.append(self.roster)

        for repository in repositories:
            try:
                await repository.refresh()
            except SyncError as exc:
                outcome.refresh_errors.append(f"{repository.source.name}: {exc}")
                logger.warning("refresh failed source=%s error=%s", repository.source.name, exc)


@lru_cache
def get_orchestrator() -> TransitionOrchestrator:
    return TransitionOrchestrator(get_selection_queue(), get_roster_repository(), get_notifier())
