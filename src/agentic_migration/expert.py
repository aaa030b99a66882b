"""Expert desk — consultant deliverables generated on demand.

Each expert action answers with a scripted assistant message on the reply
lane and, once that message lands, records an :class:`ExpertOutput` in the
snapshot's ``expert_outputs`` list.  Expert actions never change the
current scene.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING
from uuid import uuid4

from agentic_migration.core.models import ChatMessage, ExpertOutput, Utterance

if TYPE_CHECKING:
    from agentic_migration.config import TimingSettings
    from agentic_migration.core.sequencer import MessageSequencer
    from agentic_migration.core.store import StateStore

logger = logging.getLogger(__name__)

EXPERT_AGENT = "Expert Assistant"


@dataclass(frozen=True)
class Deliverable:
    title: str
    reply: str


DELIVERABLES: dict[str, Deliverable] = {
    "generate_agenda": Deliverable(
        title="Workshop Agenda (60 min)",
        reply=(
            "Drafted a 60-minute workshop agenda around the top used quote flows: Volume "
            "Discount tiers, the Discount > 15% approval path, and the Laptop Package bundle."
        ),
    ),
    "generate_test_plan": Deliverable(
        title="Parity Test Plan",
        reply=(
            "Generated CPQ vs RCA parity tests for the 30 most-used quote scenarios found in "
            "the scan, grouped by simple, bundle, and edge cases."
        ),
    ),
    "generate_recap": Deliverable(
        title="Client Recap Email",
        reply=(
            "Drafted the executive recap: Phase 1 scope approved at 78% of quote volume, "
            "rounding fix applied, and Approval translation is the next recommended item."
        ),
    ),
    "generate_checklist": Deliverable(
        title="Execution Checklist",
        reply=(
            "Turned the migration blueprint into run-ready tasks with owners for Sales Ops, "
            "Finance, and IT/Admin, sequenced by dependency."
        ),
    ),
    "analyze_changes": Deliverable(
        title="Change Analysis",
        reply=(
            "Compared against the last snapshot: no new price rules, 3 catalog edits by Sales "
            "Ops, and usage of the Partner Rebate rule is up 4%."
        ),
    ),
}


class ExpertDesk:
    """Handles the expert-tools action ids."""

    def __init__(
        self, store: StateStore, sequencer: MessageSequencer, timing: TimingSettings
    ) -> None:
        self._store = store
        self._sequencer = sequencer
        self._timing = timing

    def handles(self, action_id: str) -> bool:
        return action_id in DELIVERABLES

    def handle(self, action_id: str) -> bool:
        deliverable = DELIVERABLES.get(action_id)
        if deliverable is None:
            return False

        def _record(message: ChatMessage) -> None:
            self._store.add_expert_output(
                ExpertOutput(
                    id=uuid4().hex[:12],
                    action_id=action_id,
                    title=deliverable.title,
                    created_at=message.timestamp,
                )
            )

        logger.debug("Expert desk generating %s", deliverable.title)
        self._sequencer.reply(
            Utterance(agent=EXPERT_AGENT, text=deliverable.reply),
            self._timing.typing_duration(deliverable.reply),
            on_delivered=_record,
        )
        return True
