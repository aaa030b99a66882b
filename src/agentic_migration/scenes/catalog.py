"""The CPQ-to-RCA walkthrough scene table.

Canonical path::

    S0 -> S2 ~> S3 -> S4 -> S5 -> S6_80 -> S7 -> S8 -> S9 -> S10 ~> S11
       -> S12 ~> S13 -> S14 ~> S15

``->`` is a button choice, ``~>`` an auto-advance after the scene's task
completes.  S1 is a detour offered from S0.  S15 is the last scene and
advances nowhere.
"""

from agentic_migration.core.models import (
    ActionButton,
    AgentTask,
    MessageMeta,
    MissionPatch,
    StepStatus,
    TaskStep,
    Utterance,
)
from agentic_migration.scenes import canvases
from agentic_migration.scenes.models import AutoAdvance, SceneRecipe, TaskCue, TaskPlan

MIGRATION_AGENT = "Migration Agent"
NAVIGATOR = "Navigator Agent"
SCANNER = "Org Scanner Agent"
PLANNER = "Priority Planner Agent"
TRANSLATOR = "Logic Translator Agent"
PROVER = "Parity Prover Agent"
RUNNER = "Migration Runner Agent"

RUNNING = StepStatus.RUNNING
COMPLETED = StepStatus.COMPLETED


def _button(
    label: str, action_id: str, next_state: str | None = None, effect: str | None = None
) -> ActionButton:
    return ActionButton(label=label, action_id=action_id, next_state=next_state, effect=effect)


def _task(task_id: str, title: str, status: str, steps: list[str]) -> AgentTask:
    """A task whose first step is running and the rest pending."""
    return AgentTask(
        id=task_id,
        title=title,
        status=status,
        steps=[
            TaskStep(id=str(i), text=text, status=RUNNING if i == 1 else StepStatus.PENDING)
            for i, text in enumerate(steps, start=1)
        ],
    )


def _finish(at_ms: float, **extra: object) -> TaskCue:
    return TaskCue.model_validate(
        {"at_ms": at_ms, "status": "Complete", "complete_all": True, **extra}
    )


def _welcome() -> SceneRecipe:
    return SceneRecipe(
        scene_id="S0",
        title="Welcome",
        reset_mission=True,
        messages=[
            Utterance(
                agent=MIGRATION_AGENT,
                role="system",
                text=(
                    "Welcome to Agentic Migration. I am your Master Orchestrator. I've assembled "
                    "a specialized agent team to handle your CPQ to RCA transition."
                ),
            ),
            Utterance(
                agent=NAVIGATOR,
                text=(
                    "Hi Maya. I'm the Navigator. I'll guide the strategy. We migrate by priority: "
                    "usage-first, parity-proven. Ready to scan the org?"
                ),
                actions=[
                    _button("Start scan", "start_scan", "S2"),
                    _button("What will you scan?", "view_scope", "S1"),
                ],
            ),
        ],
        canvas=canvases.SCAN_SCOPE,
    )


def _scan_scope() -> SceneRecipe:
    return SceneRecipe(
        scene_id="S1",
        title="Scan scope",
        mission=MissionPatch(phase="Discover", progress=5),
        messages=[
            Utterance(
                agent=MIGRATION_AGENT,
                role="system",
                text="I'm deploying the Org Scanner Agent to map your metadata topology.",
            ),
            Utterance(
                agent=SCANNER,
                text=(
                    "I am ready. I can discover your entire CPQ implementation, including data "
                    "volume, metadata dependencies, and custom scripts. Shall we build the "
                    "inventory?"
                ),
                actions=[
                    _button("Scan Org", "scan_org", "S2"),
                    _button("Load previous scan", "load_scan", effect="toast"),
                ],
            ),
        ],
        canvas=canvases.SCAN_CONFIGURATION,
    )


def _scanning() -> SceneRecipe:
    return SceneRecipe(
        scene_id="S2",
        title="Scanning",
        mission=MissionPatch(progress=12, jobs_running=1),
        messages=[
            Utterance(
                agent=MIGRATION_AGENT,
                role="system",
                text=(
                    "Scanner, please proceed with the connection. Analyze usage frequency to "
                    "determine highest value targets."
                ),
            ),
            Utterance(
                agent=SCANNER,
                text=(
                    "On it. Connecting to Salesforce Metadata API now. I'll prioritize what "
                    "impacts quotes most."
                ),
                reasoning=[
                    "Connecting to Salesforce Metadata API...",
                    "Querying SBQQ__QuoteLine__c for usage frequency...",
                    "Identifying top 5 artifacts affecting Total Price.",
                ],
            ),
        ],
        canvas=canvases.scan_progress("Discover activity", 0.1),
        task=TaskPlan(
            task=_task(
                "task_scan_01",
                "Scanning CPQ Inventory",
                "Connecting...",
                ["Scan Product Objects", "Analyze Price Rules", "Map Dependencies"],
            ),
            cues=[
                TaskCue(
                    at_ms=2500,
                    status="Mapping dependencies...",
                    steps={"1": COMPLETED, "2": COMPLETED, "3": RUNNING},
                    canvas=canvases.scan_progress("Map dependencies", 0.6),
                ),
                _finish(5000),
            ],
            advance=AutoAdvance(at_ms=5000, scene_id="S3"),
        ),
    )


def _usage_radar() -> SceneRecipe:
    return SceneRecipe(
        scene_id="S3",
        title="Usage radar",
        mission=MissionPatch(progress=20, jobs_running=0),
        messages=[
            Utterance(
                agent=SCANNER,
                text=(
                    "Scan complete. I found 14 active CPQ artifacts. The 'Usage Radar' shows that "
                    "62% of your quote volume relies on just 5 complex Price Rules. We should "
                    "migrate those first."
                ),
                actions=[_button("View Inventory Health", "view_health", "S4")],
            )
        ],
        canvas=canvases.USAGE_RADAR,
    )


def _health_summary() -> SceneRecipe:
    # The health figures live in the usage radar summary tab; the canvas stays.
    return SceneRecipe(
        scene_id="S4",
        title="Health summary",
        mission=MissionPatch(progress=25),
        messages=[
            Utterance(
                agent=SCANNER,
                text=(
                    "The inventory scan is complete. I've identified the high-complexity "
                    "artifacts. Let's analyze the dependency chains next."
                ),
                actions=[_button("Analyze Dependencies", "view_deps", "S5")],
            )
        ],
    )


def _dependency_map() -> SceneRecipe:
    return SceneRecipe(
        scene_id="S5",
        title="Dependency map",
        mission=MissionPatch(progress=30),
        messages=[
            Utterance(
                agent=PLANNER,
                text=(
                    "I've mapped the dependencies. The Volume Discount logic feeds into the "
                    "Partner Rebate program. We must migrate them together to avoid breaking the "
                    "calculation chain."
                ),
                actions=[_button("Generate Phase 1 Proposal", "gen_proposal", "S6_80")],
            )
        ],
        canvas=canvases.DEPENDENCY_MAP,
    )


def _phase_proposal() -> SceneRecipe:
    return SceneRecipe(
        scene_id="S6_80",
        title="Phase 1 proposal (80% variant)",
        messages=[
            Utterance(
                agent=PLANNER,
                text=(
                    "Here’s a Phase 1 proposal covering ~78% of quote volume. It focuses on top "
                    "pricing + approvals + most-used bundles + primary document output."
                ),
                actions=[
                    _button("Approve Phase 1 scope", "approve_scope", "S7"),
                    _button("Edit scope", "edit_scope", effect="toast"),
                    _button("Explain why", "explain_scope", effect="toast"),
                ],
            )
        ],
        canvas=canvases.PHASE_SCOPE_GENERATING,
        task=TaskPlan(
            task=_task(
                "task_plan_01",
                "Analyzing Dependencies",
                "Tracing references...",
                ["Cluster Top 20 Artifacts", "Calculate Dependency Surface", "Project Coverage %"],
            ),
            cues=[
                TaskCue(
                    at_ms=1500,
                    status="Projecting coverage...",
                    steps={"1": COMPLETED, "2": RUNNING},
                ),
                _finish(3500, canvas=canvases.PHASE_SCOPE_PROPOSAL),
            ],
        ),
    )


def _stakeholder_confirm() -> SceneRecipe:
    return SceneRecipe(
        scene_id="S7",
        title="Stakeholder confirmation",
        mission=MissionPatch(progress=38),
        messages=[
            Utterance(
                agent=PLANNER,
                text=(
                    "Before we start, I found 3 stakeholders who own these rules. Should we "
                    "notify them?"
                ),
                actions=[
                    _button("Notify & Continue", "notify", "S8"),
                    _button("Skip notification", "skip_notify", "S8"),
                ],
            )
        ],
        canvas=canvases.STAKEHOLDER_CONFIRM,
    )


def _translation() -> SceneRecipe:
    return SceneRecipe(
        scene_id="S8",
        title="Translation canvas",
        mission=MissionPatch(phase="Convert", progress=45),
        messages=[
            Utterance(
                agent=MIGRATION_AGENT,
                role="system",
                text=(
                    "Planning complete. Logic Translator, please begin conversion for "
                    "'Volume Discount'."
                ),
            ),
            Utterance(
                agent=TRANSLATOR,
                text=(
                    "I'm translating the 'Volume Discount' bundle now. I’ve converted the Price "
                    "Rules to RCA Pricing Procedures. Please confirm the tier boundaries."
                ),
                actions=[
                    _button("Confirm Logic", "confirm_logic", "S9"),
                    _button("View Source Code", "view_source", effect="toast"),
                ],
                reasoning=[
                    "Analyzing SBQQ__DiscountSchedule__c structure...",
                    "Mapping Price Tiers to RCA Decision Matrix...",
                    "Detected custom script 'PartnerOverride' -> converting to conditional "
                    "logic block.",
                ],
            ),
        ],
        canvas=canvases.TRANSLATION_GENERATING,
        task=TaskPlan(
            task=_task(
                "task_trans_01",
                "Translating CPQ Logic",
                "Parsing Rules...",
                ["Parse Discount Schedule", "Map to Pricing Procedure", "Generate Test Plan"],
            ),
            cues=[
                TaskCue(
                    at_ms=1500,
                    status="Generating Blocks...",
                    steps={"1": COMPLETED, "2": RUNNING},
                ),
                _finish(3500, canvas=canvases.TRANSLATION_VOLUME_DISCOUNT),
            ],
        ),
    )


def _replay_suite() -> SceneRecipe:
    return SceneRecipe(
        scene_id="S9",
        title="Replay suite",
        mission=MissionPatch(phase="Verify", progress=55, needs_confirmation=0),
        messages=[
            Utterance(
                agent=PROVER,
                text=(
                    "Great. I captured your intent and generated a replay suite of 30 scenarios "
                    "based on real usage patterns. Ready to run parity replays now?"
                ),
                actions=[_button("Run replays", "run_replays", "S10")],
            )
        ],
        canvas=canvases.REPLAY_READY,
    )


def _replay_running() -> SceneRecipe:
    return SceneRecipe(
        scene_id="S10",
        title="Replay running",
        mission=MissionPatch(progress=60, parity="Running", jobs_running=1),
        messages=[
            Utterance(
                agent=PROVER,
                text=(
                    "Running parity replays now. I’ll show results live and explain any "
                    "differences."
                ),
                meta=MessageMeta(job_id="replay_001", status="running"),
            )
        ],
        canvas=canvases.REPLAY_RUNNING,
        task=TaskPlan(
            task=_task(
                "task_verify_01",
                "Running Parity Replays",
                "Initializing...",
                [
                    "Execute Scenario 1-10 (Simple)",
                    "Execute Scenario 11-25 (Bundles)",
                    "Execute Scenario 26-30 (Edge)",
                    "Compare Outputs",
                ],
            ),
            cues=[
                TaskCue(
                    at_ms=2000,
                    status="Comparing results...",
                    steps={"1": COMPLETED, "2": COMPLETED, "3": COMPLETED, "4": RUNNING},
                ),
                _finish(4000),
            ],
            advance=AutoAdvance(at_ms=4000, scene_id="S11"),
        ),
    )


def _diff_viewer() -> SceneRecipe:
    return SceneRecipe(
        scene_id="S11",
        title="Diff viewer",
        mission=MissionPatch(progress=70, parity="86% passing", jobs_running=0),
        messages=[
            Utterance(
                agent=PROVER,
                text=(
                    "Replay results: 26/30 passing. 4 differences found. All 4 are tied to "
                    "rounding behavior on bundle-related line items. I can propose a correction "
                    "and re-run only the failed cases."
                ),
                actions=[_button("Apply fix + re-run failed (4)", "apply_fix", "S12")],
                reasoning=[
                    "Analyzing 4 failures...",
                    "Root cause: CPQ rounds at line level, RCA defaulted to header level.",
                    "Proposed Fix: Set rounding mode to 'HALF_UP' per line.",
                ],
            )
        ],
        canvas=canvases.DIFF_VIEWER,
    )


def _apply_fix() -> SceneRecipe:
    return SceneRecipe(
        scene_id="S12",
        title="Apply fix and re-run",
        mission=MissionPatch(progress=78, parity="Re-running", jobs_running=1),
        messages=[
            Utterance(
                agent=PROVER,
                text=(
                    "Applied correction: align rounding sequence to CPQ outcome for bundle "
                    "component aggregation. Re-running the 4 failed cases now."
                ),
                meta=MessageMeta(job_id="replay_002", status="running"),
            )
        ],
        canvas=canvases.rerun_failed("Pending Start"),
        task=TaskPlan(
            task=_task(
                "task_fix_01",
                "Applying Logic Fix",
                "Refactoring...",
                ["Patch Pricing Procedure", "Hot-reload Replay Engine", "Re-queue Failed Cases"],
            ),
            cues=[
                TaskCue(
                    at_ms=2000,
                    status="Re-queueing...",
                    steps={"1": COMPLETED, "2": COMPLETED, "3": RUNNING},
                    canvas=canvases.rerun_failed("Running"),
                ),
                _finish(4500),
            ],
            advance=AutoAdvance(at_ms=4500, scene_id="S13"),
        ),
    )


def _parity_pass() -> SceneRecipe:
    return SceneRecipe(
        scene_id="S13",
        title="Parity pass summary",
        mission=MissionPatch(
            phase="Verify → Run", progress=85, parity="90% passing", jobs_running=0
        ),
        messages=[
            Utterance(
                agent=NAVIGATOR,
                text=(
                    "Great news: Volume Discount parity is now passing for this replay suite. "
                    "Phase 1 parity gate for pricing is at 90%. Next, I can run Phase 1 in QA and "
                    "stream progress with a rollback checkpoint."
                ),
                actions=[_button("Run QA", "run_qa", "S14")],
            )
        ],
        canvas=canvases.PARITY_REPORT,
    )


def _qa_run() -> SceneRecipe:
    return SceneRecipe(
        scene_id="S14",
        title="QA run",
        mission=MissionPatch(phase="Run", progress=90, jobs_running=1),
        messages=[
            Utterance(
                agent=MIGRATION_AGENT,
                role="system",
                text=(
                    "Parity verified. Runner Agent, please deploy to QA environment and execute "
                    "the suite."
                ),
            ),
            Utterance(
                agent=RUNNER,
                text=(
                    "Running Phase 1 in QA now. I’ll stream each step, show counts, and create a "
                    "rollback checkpoint."
                ),
                reasoning=[
                    "Initializing deployment pipeline...",
                    "Snapshotting QA environment for rollback...",
                    "Pushing Pricing Procedure 'Volume_Discount_v1'...",
                ],
            ),
        ],
        canvas=canvases.QA_TIMELINE,
        task=TaskPlan(
            task=_task(
                "task_qa_01",
                "Deploying Phase 1 to QA",
                "Starting deployment...",
                ["Snapshot QA Environment", "Deploy Pricing Procedures", "Execute Test Suite"],
            ),
            cues=[
                TaskCue(
                    at_ms=2500,
                    status="Deploying logic...",
                    steps={"1": COMPLETED, "2": COMPLETED, "3": RUNNING},
                ),
                _finish(5000),
            ],
            advance=AutoAdvance(at_ms=5000, scene_id="S15"),
        ),
    )


def _run_summary() -> SceneRecipe:
    return SceneRecipe(
        scene_id="S15",
        title="Run summary",
        mission=MissionPatch(progress=100, jobs_running=0, needs_confirmation=1),
        messages=[
            Utterance(
                agent=RUNNER,
                text=(
                    "QA run complete. Phase 1 pricing is deployed and parity-gated. I found 2 "
                    "optional field mappings I can suggest to improve completeness. Next "
                    "recommended item: Discount > 15% Approval translation."
                ),
                actions=[_button("Finish Demo", "finish", effect="toast")],
            )
        ],
        canvas=canvases.QA_SUMMARY,
    )


def build_catalog() -> list[SceneRecipe]:
    """Return every scene recipe, in narrative order."""
    return [
        _welcome(),
        _scan_scope(),
        _scanning(),
        _usage_radar(),
        _health_summary(),
        _dependency_map(),
        _phase_proposal(),
        _stakeholder_confirm(),
        _translation(),
        _replay_suite(),
        _replay_running(),
        _diff_viewer(),
        _apply_fix(),
        _parity_pass(),
        _qa_run(),
        _run_summary(),
    ]
