"""Message sequencer — timed, strictly sequential delivery of agent lines.

A *delivery chain* is the ordered list of utterances for one scene entry.
The first utterance starts typing after ``lead_in_ms``; each one types for
:meth:`TimingSettings.typing_duration` and is then appended to history in
the same callback that clears its typing token.  The next utterance starts
``spacing_ms`` after the previous append, so two utterances of one chain
never type at the same time.

Only one chain is alive per sequencer.  Starting a new chain supersedes the
old one: its pending calls are cancelled, its typing token is cleared and
its idle waiters are forgotten.

One-off replies (user-message answers, expert desk output) travel on a
separate lane via :meth:`MessageSequencer.reply` and are not superseded by
scene chains.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from functools import partial
from typing import TYPE_CHECKING
from uuid import uuid4

from agentic_migration.core.models import ChatMessage, Utterance

if TYPE_CHECKING:
    from agentic_migration.config import TimingSettings
    from agentic_migration.core.scheduler import ScheduledCall, Scheduler
    from agentic_migration.core.store import StateStore

logger = logging.getLogger(__name__)


def typing_label(agent: str) -> str:
    return f"{agent} is typing..."


def utterance_to_message(utterance: Utterance, timestamp: float) -> ChatMessage:
    return ChatMessage(
        id=uuid4().hex[:12],
        role=utterance.role,
        agent_name=utterance.agent,
        content=utterance.text,
        actions=utterance.actions,
        reasoning=utterance.reasoning,
        meta=utterance.meta,
        timestamp=timestamp,
    )


@dataclass
class _Chain:
    token: str
    generation: int | None
    remaining: list[Utterance]
    spacing_ms: float
    calls: list[ScheduledCall] = field(default_factory=list)
    waiters: list[Callable[[], None]] = field(default_factory=list)


class MessageSequencer:
    """Delivers utterances into the store through the scheduler."""

    def __init__(self, store: StateStore, scheduler: Scheduler, timing: TimingSettings) -> None:
        self._store = store
        self._scheduler = scheduler
        self._timing = timing
        self._chain: _Chain | None = None

    @property
    def busy(self) -> bool:
        """``True`` while a delivery chain still has utterances to append."""
        return self._chain is not None

    def deliver(
        self,
        sequence: list[Utterance],
        *,
        generation: int | None = None,
        spacing_ms: float | None = None,
    ) -> None:
        """Start a new delivery chain, superseding any chain in flight."""
        self.supersede()
        if not sequence:
            return
        chain = _Chain(
            token=f"chain-{uuid4().hex[:8]}",
            generation=generation,
            remaining=list(sequence),
            spacing_ms=self._timing.spacing_ms if spacing_ms is None else spacing_ms,
        )
        self._chain = chain
        logger.debug("Delivery chain %s: %d utterance(s)", chain.token, len(sequence))
        self._schedule(chain, self._timing.lead_in_ms, self._start_next, "start")

    def supersede(self) -> None:
        """Drop the chain in flight, if any."""
        chain = self._chain
        if chain is None:
            return
        self._chain = None
        for call in chain.calls:
            call.cancel()
        self._store.end_typing(chain.token, self._scheduler.now)
        if chain.remaining:
            logger.debug(
                "Chain %s superseded with %d undelivered utterance(s)",
                chain.token,
                len(chain.remaining),
            )

    def when_idle(self, callback: Callable[[], None]) -> None:
        """Run *callback* once the current chain has delivered everything.

        Runs immediately when no chain is in flight.  Waiters of a chain
        that gets superseded never run.
        """
        if self._chain is None:
            callback()
        else:
            self._chain.waiters.append(callback)

    def reply(
        self,
        utterance: Utterance,
        delay_ms: float,
        *,
        on_delivered: Callable[[ChatMessage], None] | None = None,
    ) -> None:
        """Type *utterance* for exactly *delay_ms*, then append it."""
        token = f"reply-{uuid4().hex[:8]}"
        self._store.begin_typing(token, typing_label(utterance.agent), self._scheduler.now)

        def _finish() -> None:
            message = utterance_to_message(utterance, self._scheduler.now)
            self._store.end_typing(token, self._scheduler.now)
            self._store.append_message(message)
            if on_delivered is not None:
                on_delivered(message)

        self._scheduler.call_later(delay_ms, _finish, label=f"{token}:finish")

    # ------------------------------------------------------------------
    # Chain steps
    # ------------------------------------------------------------------

    def _schedule(
        self, chain: _Chain, delay: float, step: Callable[[_Chain], None], name: str
    ) -> None:
        call = self._scheduler.call_later(
            delay,
            partial(step, chain),
            generation=chain.generation,
            label=f"{chain.token}:{name}",
        )
        chain.calls.append(call)

    def _start_next(self, chain: _Chain) -> None:
        if chain is not self._chain:
            return
        utterance = chain.remaining[0]
        self._store.begin_typing(chain.token, typing_label(utterance.agent), self._scheduler.now)
        self._schedule(chain, self._timing.typing_duration(utterance.text), self._finish, "finish")

    def _finish(self, chain: _Chain) -> None:
        if chain is not self._chain:
            return
        utterance = chain.remaining.pop(0)
        self._store.end_typing(chain.token, self._scheduler.now)
        self._store.append_message(utterance_to_message(utterance, self._scheduler.now))

        if chain.remaining:
            self._schedule(chain, chain.spacing_ms, self._start_next, "start")
            return

        self._chain = None
        for waiter in chain.waiters:
            waiter()
