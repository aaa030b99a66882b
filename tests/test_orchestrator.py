"""Tests for the Orchestrator facade, driven on virtual time."""

from __future__ import annotations

import logging
from unittest.mock import patch

import pytest

from agentic_migration.config import OrchestratorSettings, TimingSettings
from agentic_migration.core.models import (
    AgentTask,
    CanvasState,
    MissionPatch,
    MissionState,
    StepStatus,
    TaskStep,
    Utterance,
)
from agentic_migration.expert import EXPERT_AGENT
from agentic_migration.orchestrator import USER_REPLY_TEXT, Orchestrator
from agentic_migration.scenes.catalog import build_catalog
from agentic_migration.scenes.models import SceneRecipe, TaskCue, TaskPlan
from agentic_migration.scenes.registry import SceneRegistry

CANONICAL_BUTTONS = [
    ("start_scan", "S3"),
    ("view_health", "S4"),
    ("view_deps", "S5"),
    ("gen_proposal", "S6_80"),
    ("approve_scope", "S7"),
    ("notify", "S8"),
    ("confirm_logic", "S9"),
    ("run_replays", "S11"),
    ("apply_fix", "S13"),
    ("run_qa", "S15"),
]

PROGRESS = {
    "S3": 20,
    "S4": 25,
    "S5": 30,
    "S6_80": 30,
    "S7": 38,
    "S8": 45,
    "S9": 55,
    "S11": 70,
    "S13": 85,
    "S15": 100,
}


def _idle() -> Orchestrator:
    orchestrator = Orchestrator()
    orchestrator.run_until_idle()
    return orchestrator


def _with_extra(*recipes: SceneRecipe) -> Orchestrator:
    registry = SceneRegistry([*build_catalog(), *recipes])
    orchestrator = Orchestrator(registry=registry)
    orchestrator.run_until_idle()
    return orchestrator


class TestInitialization:
    def test_opening_state(self) -> None:
        orchestrator = _idle()
        snapshot = orchestrator.get_snapshot()

        assert snapshot.scene_id == "S0"
        assert snapshot.mission == MissionState(
            phase="CPQ Reality", progress=0, parity="—", needs_confirmation=0, jobs_running=0
        )
        assert snapshot.canvas is not None
        assert snapshot.canvas.type == "scan_scope"
        scope = snapshot.canvas.data["scope"]
        assert len(scope) == 6
        assert all(entry["enabled"] for entry in scope)
        assert [m.agent_name for m in snapshot.messages] == ["Migration Agent", "Navigator Agent"]
        assert snapshot.messages[0].content.startswith("Welcome to Agentic Migration.")
        assert not snapshot.is_typing

    def test_messages_arrive_over_time(self) -> None:
        orchestrator = Orchestrator()
        assert orchestrator.get_snapshot().messages == []
        orchestrator.advance(100)
        snapshot = orchestrator.get_snapshot()
        assert snapshot.is_typing
        assert snapshot.typing_label == "Migration Agent is typing..."

    def test_start_is_idempotent(self) -> None:
        orchestrator = _idle()
        assert orchestrator.start() is False
        orchestrator.run_until_idle()
        assert len(orchestrator.get_snapshot().messages) == 2

    def test_autostart_disabled(self) -> None:
        orchestrator = Orchestrator(autostart=False)
        assert orchestrator.get_snapshot().scene_id == ""
        assert orchestrator.start() is True
        assert orchestrator.get_snapshot().scene_id == "S0"

    def test_custom_start_scene(self) -> None:
        orchestrator = Orchestrator(OrchestratorSettings(start_scene="S9"))
        assert orchestrator.get_snapshot().scene_id == "S9"


class TestScanScenario:
    def test_scan_task_choreography(self) -> None:
        orchestrator = _idle()
        assert orchestrator.advance_to_scene("S2")

        snapshot = orchestrator.get_snapshot()
        assert snapshot.task is not None
        assert [s.status for s in snapshot.task.steps] == [
            StepStatus.RUNNING,
            StepStatus.PENDING,
            StepStatus.PENDING,
        ]
        assert snapshot.mission.jobs_running == 1
        assert snapshot.mission.progress == 12

        orchestrator.advance(2500)
        snapshot = orchestrator.get_snapshot()
        assert [s.status for s in snapshot.task.steps] == [
            StepStatus.COMPLETED,
            StepStatus.COMPLETED,
            StepStatus.RUNNING,
        ]
        assert snapshot.canvas is not None
        assert snapshot.canvas.data["current_step"] == "Map dependencies"

        orchestrator.advance(2500)
        snapshot = orchestrator.get_snapshot()
        assert snapshot.task.is_complete
        assert snapshot.task.status == "Complete"

        orchestrator.run_until_idle()
        snapshot = orchestrator.get_snapshot()
        assert snapshot.scene_id == "S3"
        assert snapshot.mission.progress == 20
        assert snapshot.mission.jobs_running == 0
        assert snapshot.canvas is not None
        assert snapshot.canvas.type == "usage_radar"

    def test_auto_advance_after_last_scan_message(self) -> None:
        orchestrator = _idle()
        orchestrator.advance_to_scene("S2")
        orchestrator.run_until_idle()
        contents = [m.content for m in orchestrator.get_snapshot().messages]
        scanner_line = next(i for i, c in enumerate(contents) if c.startswith("On it."))
        radar_line = next(i for i, c in enumerate(contents) if c.startswith("Scan complete."))
        assert scanner_line < radar_line


class TestUserMessages:
    def test_fixed_reply(self) -> None:
        orchestrator = _idle()
        before = orchestrator.get_snapshot()

        message = orchestrator.submit_user_message("hello")
        assert message is not None
        snapshot = orchestrator.get_snapshot()
        assert snapshot.messages[-1].role == "user"
        assert snapshot.messages[-1].content == "hello"
        assert snapshot.typing_label == "Gemini 3 is typing..."

        orchestrator.advance(1999)
        assert len(orchestrator.get_snapshot().messages) == len(before.messages) + 1
        orchestrator.advance(1)

        snapshot = orchestrator.get_snapshot()
        assert len(snapshot.messages) == len(before.messages) + 2
        reply = snapshot.messages[-1]
        assert reply.role == "assistant"
        assert reply.agent_name == "Gemini 3"
        assert reply.content == USER_REPLY_TEXT
        assert snapshot.canvas == before.canvas
        assert snapshot.task == before.task
        assert not snapshot.is_typing

    def test_blank_message_recorded_as_given(self) -> None:
        orchestrator = _idle()
        message = orchestrator.submit_user_message("   ")

        snapshot = orchestrator.get_snapshot()
        assert len(snapshot.messages) == 3
        assert snapshot.messages[-1] == message
        assert message.role == "user"
        assert message.content == "   "

        orchestrator.advance(2000)
        assert orchestrator.get_snapshot().messages[-1].content == USER_REPLY_TEXT

    def test_reply_survives_scene_change(self) -> None:
        orchestrator = _idle()
        orchestrator.submit_user_message("hello")
        orchestrator.advance_to_scene("S4")
        orchestrator.run_until_idle()
        contents = [m.content for m in orchestrator.get_snapshot().messages]
        assert USER_REPLY_TEXT in contents

    def test_custom_reply_timing(self) -> None:
        settings = OrchestratorSettings(
            reply_agent="Helper", timing=TimingSettings(reply_delay_ms=10)
        )
        orchestrator = Orchestrator(settings)
        orchestrator.run_until_idle()
        orchestrator.submit_user_message("hi")
        orchestrator.advance(10)
        assert orchestrator.get_snapshot().messages[-1].agent_name == "Helper"


class TestTransitions:
    def test_canonical_walk(self) -> None:
        orchestrator = _idle()
        for action_id, landing in CANONICAL_BUTTONS:
            outcome = orchestrator.dispatch_action(action_id)
            assert outcome.kind == "transition"
            assert outcome.accepted
            orchestrator.run_until_idle()
            snapshot = orchestrator.get_snapshot()
            assert snapshot.scene_id == landing
            assert snapshot.mission.progress == PROGRESS[landing]

        snapshot = orchestrator.get_snapshot()
        assert snapshot.mission.phase == "Run"
        assert snapshot.mission.needs_confirmation == 1
        assert snapshot.canvas is not None
        assert snapshot.canvas.data == {"status": "SUCCESS"}
        assert orchestrator.inconsistencies == []

    def test_proposal_canvas_replaced_when_task_completes(self) -> None:
        orchestrator = _idle()
        orchestrator.advance_to_scene("S6_80")
        snapshot = orchestrator.get_snapshot()
        assert snapshot.canvas is not None
        assert snapshot.canvas.data["coverage"] == "Calculating..."
        orchestrator.advance(3500)
        snapshot = orchestrator.get_snapshot()
        assert snapshot.canvas.data["coverage"] == "78% of quote volume"

    def test_unknown_scene_is_noop(self, caplog: pytest.LogCaptureFixture) -> None:
        orchestrator = _idle()
        before = orchestrator.get_snapshot()
        with caplog.at_level(logging.WARNING, logger="agentic_migration.orchestrator"):
            assert orchestrator.advance_to_scene("S99") is False
        assert orchestrator.get_snapshot() == before
        assert "S99" in caplog.text

    def test_reentry_never_interleaves(self) -> None:
        orchestrator = _idle()
        orchestrator.advance_to_scene("S2")
        orchestrator.advance(2000)
        orchestrator.advance_to_scene("S2")
        orchestrator.run_until_idle()
        contents = [m.content for m in orchestrator.get_snapshot().messages]
        s2 = [c[:6] for c in contents if c.startswith(("Scanner,", "On it."))]
        # First entry got one line out before being superseded.
        assert s2 == ["Scanne", "Scanne", "On it."]

    def test_double_entry_delivers_once(self) -> None:
        orchestrator = _idle()
        orchestrator.advance_to_scene("S2")
        orchestrator.advance_to_scene("S2")
        orchestrator.run_until_idle()
        contents = [m.content for m in orchestrator.get_snapshot().messages]
        assert sum(c.startswith("On it.") for c in contents) == 1

    def test_leaving_cancels_task_and_auto_advance(self) -> None:
        orchestrator = _idle()
        orchestrator.advance_to_scene("S10")
        orchestrator.advance(1000)
        orchestrator.advance_to_scene("S9")
        orchestrator.run_until_idle()
        snapshot = orchestrator.get_snapshot()
        assert snapshot.scene_id == "S9"
        assert snapshot.task is not None
        assert snapshot.task.status == "Initializing..."

    def test_scene_change_clears_typing(self) -> None:
        orchestrator = _idle()
        orchestrator.advance_to_scene("S2")
        orchestrator.advance(200)
        assert orchestrator.get_snapshot().is_typing
        orchestrator.advance_to_scene("S4")
        assert not orchestrator.get_snapshot().is_typing

    def test_s0_resets_mission(self) -> None:
        orchestrator = _idle()
        orchestrator.advance_to_scene("S9")
        orchestrator.advance_to_scene("S0")
        assert orchestrator.get_snapshot().mission == MissionState()

    def test_snapshot_is_stable(self) -> None:
        orchestrator = _idle()
        first = orchestrator.get_snapshot()
        orchestrator.advance_to_scene("S5")
        orchestrator.run_until_idle()
        assert first.scene_id == "S0"
        assert len(first.messages) == 2


class TestDispatchAction:
    def test_canvas_route_run_scan(self) -> None:
        orchestrator = _idle()
        outcome = orchestrator.dispatch_action("run_scan")
        assert outcome.next_state == "S2"
        assert orchestrator.get_snapshot().scene_id == "S2"

    def test_canvas_route_confirm_intent(self) -> None:
        orchestrator = _idle()
        orchestrator.dispatch_action("confirm_intent")
        assert orchestrator.get_snapshot().scene_id == "S9"

    def test_explicit_next_state_param(self) -> None:
        orchestrator = _idle()
        outcome = orchestrator.dispatch_action("anything", {"next_state": "S4"})
        assert outcome.kind == "transition"
        assert orchestrator.get_snapshot().scene_id == "S4"

    def test_effect_button_becomes_notice(self) -> None:
        orchestrator = _idle()
        orchestrator.dispatch_action("view_scope")
        orchestrator.run_until_idle()
        outcome = orchestrator.dispatch_action("load_scan")
        assert outcome.kind == "effect"
        assert outcome.effect == "toast"
        snapshot = orchestrator.get_snapshot()
        assert snapshot.scene_id == "S1"
        assert snapshot.notices == ["toast: Load previous scan"]

    def test_unknown_action_ignored(self) -> None:
        orchestrator = _idle()
        before = orchestrator.get_snapshot()
        outcome = orchestrator.dispatch_action("does_not_exist")
        assert outcome.kind == "ignored"
        assert not outcome.accepted
        assert orchestrator.get_snapshot() == before

    def test_transition_to_unknown_scene_not_accepted(self) -> None:
        orchestrator = _idle()
        outcome = orchestrator.dispatch_action("x", {"next_state": "S99"})
        assert outcome.kind == "transition"
        assert not outcome.accepted
        assert orchestrator.get_snapshot().scene_id == "S0"

    def test_dispatch_is_journaled(self) -> None:
        orchestrator = _idle()
        orchestrator.dispatch_action("start_scan")
        entries = [e for e in orchestrator.store.journal if e.op == "dispatch_action"]
        assert entries[-1].data == {
            "action_id": "start_scan",
            "kind": "transition",
            "accepted": True,
        }

    def test_find_action(self) -> None:
        orchestrator = _idle()
        button = orchestrator.find_action("view_scope")
        assert button is not None
        assert button.next_state == "S1"
        assert orchestrator.find_action("nope") is None


class TestExpertDesk:
    def test_expert_output_recorded(self) -> None:
        orchestrator = _idle()
        outcome = orchestrator.dispatch_action("generate_recap")
        assert outcome.kind == "expert"
        assert outcome.accepted
        assert orchestrator.get_snapshot().typing_label == f"{EXPERT_AGENT} is typing..."

        orchestrator.run_until_idle()
        snapshot = orchestrator.get_snapshot()
        assert snapshot.scene_id == "S0"
        assert [o.title for o in snapshot.expert_outputs] == ["Client Recap Email"]
        assert snapshot.messages[-1].agent_name == EXPERT_AGENT
        assert snapshot.expert_outputs[0].created_at == snapshot.messages[-1].timestamp

    def test_output_waits_for_reply(self) -> None:
        orchestrator = _idle()
        orchestrator.dispatch_action("analyze_changes")
        assert orchestrator.get_snapshot().expert_outputs == []


class TestInconsistencies:
    def test_out_of_range_progress(self) -> None:
        orchestrator = _with_extra(
            SceneRecipe(scene_id="SX", mission=MissionPatch(progress=150))
        )
        assert orchestrator.advance_to_scene("SX")
        assert orchestrator.get_snapshot().mission.progress == 100
        assert [i.kind for i in orchestrator.inconsistencies] == ["progress_out_of_range"]

    def test_step_regression(self) -> None:
        task = AgentTask(
            id="t",
            title="T",
            status="Go",
            steps=[TaskStep(id="1", text="one", status=StepStatus.RUNNING)],
        )
        orchestrator = _with_extra(
            SceneRecipe(
                scene_id="SX",
                task=TaskPlan(
                    task=task, cues=[TaskCue(at_ms=100, steps={"1": StepStatus.PENDING})]
                ),
            )
        )
        orchestrator.advance_to_scene("SX")
        orchestrator.run_until_idle()
        snapshot = orchestrator.get_snapshot()
        assert snapshot.task is not None
        assert snapshot.task.steps[0].status == StepStatus.RUNNING
        assert [i.kind for i in orchestrator.inconsistencies] == ["step_regression"]


class TestFailedEntry:
    def test_rejected_scene_changes_nothing(self, caplog: pytest.LogCaptureFixture) -> None:
        broken = SceneRecipe(
            scene_id="SX",
            mission=MissionPatch(progress=99),
            canvas=CanvasState(type="hologram", title="Broken"),
            messages=[Utterance(agent="Agent", text="never")],
        )
        orchestrator = _with_extra(broken)
        before = orchestrator.get_snapshot()
        generation = orchestrator.scheduler.generation

        with caplog.at_level(logging.WARNING, logger="agentic_migration.orchestrator"):
            assert orchestrator.advance_to_scene("SX") is False

        orchestrator.run_until_idle()
        assert orchestrator.get_snapshot() == before
        assert orchestrator.scheduler.generation == generation
        assert "Scene 'SX' rejected, staying on 'S0'" in caplog.text
        assert not [r for r in caplog.records if r.levelno >= logging.ERROR]

    def test_rejected_scene_keeps_current_scene_running(self) -> None:
        broken = SceneRecipe(scene_id="SX", canvas=CanvasState(type="hologram", title="Broken"))
        orchestrator = _with_extra(broken)
        orchestrator.advance_to_scene("S2")
        orchestrator.advance(1000)

        assert orchestrator.advance_to_scene("SX") is False
        orchestrator.run_until_idle()

        snapshot = orchestrator.get_snapshot()
        assert snapshot.scene_id == "S3"
        assert snapshot.mission.progress == 20
        assert snapshot.mission.jobs_running == 0
        assert snapshot.canvas is not None
        assert snapshot.canvas.type == "usage_radar"

    def test_failure_midway_restores_last_good_state(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        orchestrator = _idle()
        before = orchestrator.get_snapshot()

        with (
            patch.object(orchestrator.tasks, "start", side_effect=RuntimeError("boom")),
            caplog.at_level(logging.ERROR, logger="agentic_migration.orchestrator"),
        ):
            assert orchestrator.advance_to_scene("S2") is False

        assert orchestrator.scheduler.pending() == []
        orchestrator.run_until_idle()
        after = orchestrator.get_snapshot()
        assert after.scene_id == "S0"
        assert after.mission == before.mission
        assert after.canvas == before.canvas
        assert after.task is None
        assert after.messages == before.messages
        assert "restoring last good state" in caplog.text

    def test_failure_keeps_reply_lane(self) -> None:
        broken = SceneRecipe(scene_id="SX", canvas=CanvasState(type="hologram", title="Broken"))
        orchestrator = _with_extra(broken)
        orchestrator.submit_user_message("hello")
        orchestrator.advance_to_scene("SX")
        assert orchestrator.get_snapshot().is_typing
        orchestrator.run_until_idle()
        snapshot = orchestrator.get_snapshot()
        assert snapshot.messages[-1].content == USER_REPLY_TEXT
        assert not snapshot.is_typing
