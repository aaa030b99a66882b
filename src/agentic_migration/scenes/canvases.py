"""Authored canvas payloads for the walkthrough scenes.

Field names inside ``data`` are part of the renderer contract checked by
:mod:`agentic_migration.core.canvas`; keep them exactly as they are.
"""

from agentic_migration.core.models import CanvasState

_REPLAY_SUITE = "Volume Discount — Phase 1"

SCAN_SCOPE = CanvasState(
    type="scan_scope",
    title="Connect & Scan",
    data={
        "connection_status": "Connected to Salesforce — Read-only scan mode",
        "window": "Last 90 days",
        "scope": [
            {"name": "Quotes + Quote Lines", "enabled": True},
            {"name": "Products + Price Books", "enabled": True},
            {"name": "Bundles + Options", "enabled": True},
            {"name": "Pricing (Price Rules, Discount Schedules)", "enabled": True},
            {"name": "Approvals", "enabled": True},
            {"name": "Quote Documents/Templates", "enabled": True},
        ],
        "note": "We’ll introduce RCA objects only after Phase 1 scope is set.",
    },
)

SCAN_CONFIGURATION = CanvasState(type="scan_scope", title="Scan Configuration", data={})

_SCAN_STEPPER = ["Discover activity", "Index rules", "Map dependencies", "Summarize health"]


def scan_progress(current_step: str, progress: float) -> CanvasState:
    return CanvasState(
        type="scan_progress",
        title="Scan in progress",
        data={
            "stepper": list(_SCAN_STEPPER),
            "current_step": current_step,
            "progress": progress,
            "counters": [],
        },
    )


def _row(name: str, kind: str, usage: str, complexity: str) -> dict[str, str]:
    return {"name": name, "type": kind, "usage": usage, "complexity": complexity}


def _area_card(
    area: str,
    icon: str,
    total: int,
    active: int,
    percent: int,
    coverage: str,
    count: str,
    insight: str,
    tab: str,
) -> dict[str, object]:
    return {
        "area": area,
        "icon": icon,
        "total_items": total,
        "active_items": active,
        "active_percent": percent,
        "usage_coverage": coverage,
        "usage_count": count,
        "insight": insight,
        "link_to_tab": tab,
    }


USAGE_RADAR = CanvasState(
    type="usage_radar",
    title="Usage Radar — Complexity vs. Impact",
    data={
        "tabs": [
            {"id": "summary", "label": "Summary"},
            {"id": "quotes", "label": "Quotes + Quote Lines"},
            {"id": "products", "label": "Products + Price Books"},
            {"id": "bundles", "label": "Bundles + Options"},
            {"id": "pricing", "label": "Pricing (Price Rules...)"},
            {"id": "approvals", "label": "Approvals"},
            {"id": "documents", "label": "Quote Documents"},
        ],
        "summary": {
            "stats": [
                {"label": "Total Artifacts", "value": "1,453", "trend": "Active"},
                {"label": "High Complexity", "value": "12", "trend": "Critical"},
                {"label": "Migration Effort", "value": "4 Weeks", "trend": "Est."},
            ],
            "area_cards": [
                _area_card(
                    "Volume Discount", "activity", 12, 9, 75, "62%", "8,942",
                    "High complexity, 3 scripts found", "pricing",
                ),
                _area_card(
                    "Approval Rules", "shield", 4, 2, 50, "22%", "3,168",
                    "Logic mixed with triggers", "approvals",
                ),
                _area_card(
                    "Product Bundles", "layers", 8, 5, 63, "41%", "5,904",
                    "Mostly standard structure", "bundles",
                ),
                _area_card(
                    "Quote Templates", "file-text", 3, 2, 67, "12%", "1,728",
                    "Visualforce pages detected", "documents",
                ),
                _area_card(
                    "Product Objects", "database", 1204, 434, 36, "100%", "14,400",
                    "Large SKU catalog", "products",
                ),
                _area_card(
                    "Pricing Scripts", "code", 5, 3, 60, "45%", "6,480",
                    "Custom QCP logic detected", "pricing",
                ),
            ],
            "top_priority": [
                _row("Volume Discount (Seat Tiers)", "Price Rule", "62% of Quotes", "High"),
                _row("Laptop Package Bundle", "Product Bundle", "310 Quotes/mo", "Medium"),
                _row("Partner Rebate Logic", "Price Rule", "45% of Quotes", "High"),
                _row("Discount > 15% Approval", "Approval Rule", "224 Triggers/mo", "Low"),
                _row("Enterprise Quote Template", "Quote Template", "12% of Quotes", "Medium"),
            ],
        },
        "quotes": [
            _row("SBQQ__QuoteLine__c", "Object", "1.2M Records", "Low"),
            _row("SBQQ__Quote__c", "Object", "145k Records", "Low"),
            _row("Quote Line Group", "Object", "45k Records", "Low"),
        ],
        "products": [
            _row("Hardware Family", "Product Family", "85 active SKUs", "Low"),
            _row("Software Licenses", "Product Family", "12 active SKUs", "Medium"),
            _row("Maintenance Packs", "Product Family", "4 active SKUs", "Low"),
        ],
        "bundles": [
            _row("Laptop Package Bundle", "Bundle", "Top 1 used", "Medium"),
            _row("Server Rack Config", "Bundle", "Top 2 used", "High"),
            _row("Workstation Setup", "Bundle", "Top 3 used", "Low"),
        ],
        "pricing": [
            _row("Volume Discount (Seat Tiers)", "Price Rule", "62% coverage", "High"),
            _row("Partner Rebate Logic", "Price Rule", "45% coverage", "High"),
            _row("Region Adjustment Script", "QCP Script", "100% coverage", "Critical"),
            _row("Distributor Margin", "Price Rule", "15% coverage", "Medium"),
        ],
        "approvals": [
            _row("Discount > 15%", "Approval Rule", "224 triggers", "Low"),
            _row("Payment Terms > Net30", "Approval Rule", "56 triggers", "Low"),
            _row("Legal Review (Custom)", "Approval Chain", "12 triggers", "Medium"),
        ],
        "documents": [
            _row("Enterprise Quote PDF v3", "Template", "Default", "Medium"),
            _row("Partner Quote PDF", "Template", "Secondary", "Low"),
            _row("Order Form (Signed)", "Content", "Rare", "Low"),
        ],
    },
)

DEPENDENCY_MAP = CanvasState(
    type="dependency_map",
    title="Dependency Graph — Volume Discount",
    data={
        "nodes": [
            {"id": "bundle", "label": "Laptop Package", "type": "Bundle"},
            {"id": "opt1", "label": "CPU Option", "type": "Option"},
            {"id": "opt2", "label": "RAM Option", "type": "Option"},
            {"id": "opt3", "label": "SSD Option", "type": "Option"},
            {"id": "field1", "label": "Seat Count", "type": "Field"},
            {"id": "field2", "label": "Region", "type": "Field"},
            {"id": "rule1", "label": "Volume Discount", "type": "Price Rule"},
            {"id": "rule2", "label": "Partner Rebate", "type": "Price Rule"},
            {"id": "pr1", "label": "Compat Rule", "type": "Product Rule"},
            {"id": "appr", "label": "Disc > 15%", "type": "Approval"},
            {"id": "doc", "label": "Quote PDF", "type": "Template"},
        ]
    },
)

PHASE_SCOPE_GENERATING = CanvasState(
    type="phase_scope_proposal",
    title="Phase 1 Scope Proposal (Generating...)",
    data={"coverage": "Calculating...", "included": []},
)

_TVR = ["Translate", "Verify", "Run"]

PHASE_SCOPE_PROPOSAL = CanvasState(
    type="phase_scope_proposal",
    title="Phase 1 Scope Proposal (Usage-first)",
    data={
        "coverage": "78% of quote volume",
        "included": [
            {"item": "Volume Discount (Seat Tiers)", "usage": "62% of quotes", "steps": _TVR},
            {"item": "Discount > 15% Approval", "usage": "224 triggers", "steps": _TVR},
            {"item": "Top 6 bundles by usage", "usage": "covers 41% of quotes", "steps": _TVR},
            {"item": "Enterprise Quote PDF v3", "usage": "12% of quotes", "steps": _TVR},
            {
                "item": "Data fix: Region__c completion",
                "usage": "6% of lines missing",
                "steps": ["Apply", "Verify"],
            },
        ],
    },
)

STAKEHOLDER_CONFIRM = CanvasState(
    type="stakeholder_confirm",
    title="Stakeholder Check",
    data={
        "teams": [
            {"team": "Sales Ops", "top_user": "Maya Cohen", "activity": "48 catalog edits"},
            {
                "team": "Finance (Billing)",
                "top_user": "Lina Park",
                "activity": "96 invoice-related touches",
            },
            {
                "team": "Finance (RevRec)",
                "top_user": "Jordan Wu",
                "activity": "Revenue schedule reviews",
            },
            {
                "team": "IT/Admin",
                "top_user": "Tom Reyes",
                "activity": "Deployments & integrations",
            },
        ]
    },
)

TRANSLATION_GENERATING = CanvasState(
    type="translation_canvas",
    title="Translation — Generating...",
    data={
        "cpq_side": {"name": "Loading...", "inputs": [], "plain_english": [], "evidence": []},
        "rca_side": {"construct": "Generating...", "blocks": []},
        "confirmations": [],
        "test_plan_preview": {"replay_sets": []},
    },
)

TRANSLATION_VOLUME_DISCOUNT = CanvasState(
    type="translation_canvas",
    title="Translation — Volume Discount (Seat Tiers)",
    data={
        "cpq_side": {
            "name": "Volume Discount Schedule",
            "inputs": ["SBQQ__Quantity__c", "SBQQ__ListPrice__c", "User.Segment__c"],
            "plain_english": [
                "If Quantity is between 10-49, apply 5% discount.",
                "If Quantity is 50+, apply 10% discount.",
                "Override: If User Segment is 'Partner', add extra 2%.",
            ],
            "evidence": [
                "Triggered on 62% of quotes",
                "98% matched standard tiers",
                "2% fell into partner override",
            ],
        },
        "rca_side": {
            "construct": "Pricing Procedure",
            "blocks": [
                "Load List Price",
                "Lookup Volume Discount Table",
                "Calc Tier Adjustment",
                "Check Partner Status",
                "Finalize Net Price",
            ],
        },
        "confirmations": [
            {
                "question": "Confirm Tiers",
                "fields": {
                    "Tier 1 Min": "10",
                    "Tier 1 %": "5.0",
                    "Tier 2 Min": "50",
                    "Tier 2 %": "10.0",
                },
            }
        ],
        "test_plan_preview": {
            "replay_sets": [
                "Verify base price (Qty < 10)",
                "Verify Tier 1 (Qty 10-49)",
                "Verify Tier 2 (Qty 50+)",
                "Verify Partner Override",
            ]
        },
    },
)

REPLAY_READY = CanvasState(
    type="replay_progress",
    title="Replay Suite Ready",
    data={"suite_name": _REPLAY_SUITE, "scenarios": 30, "status": "Ready"},
)

REPLAY_RUNNING = CanvasState(
    type="replay_progress",
    title="Parity Replays — Running",
    data={
        "suite_name": _REPLAY_SUITE,
        "scenarios": 30,
        "status": "Running",
        "live_log": ["Initializing..."],
    },
)


def _diff(row_id: int, field: str, cpq: str, rca: str, diff: str, cause: str) -> dict[str, object]:
    return {"id": row_id, "field": field, "cpq": cpq, "rca": rca, "diff": diff, "cause": cause}


DIFF_VIEWER = CanvasState(
    type="diff_viewer",
    title="Diff Viewer — Quote Q-10492 (Example)",
    data={
        "summary": {"passing": 26, "total": 30, "score": "86%"},
        "diffs": [
            _diff(1, "SBQQ__NetTotal__c", "1250.45", "1250.50", "+0.05", "Rounding Mode mismatch"),
            _diff(
                2, "SBQQ__CustomerPrice__c", "1125.40", "1125.45", "+0.05", "Rounding Mode mismatch"
            ),
            _diff(
                3, "SBQQ__PartnerPrice__c", "980.25", "980.30", "+0.05", "Rounding Mode mismatch"
            ),
            _diff(4, "SBQQ__ListPrice__c", "1500.00", "1500.00", "0.00", "Match"),
        ],
    },
)


def rerun_failed(status: str) -> CanvasState:
    return CanvasState(
        type="replay_progress",
        title="Re-run Failed Cases",
        data={"suite_name": "Re-run Failed Cases", "scenarios": 4, "status": status},
    )


PARITY_REPORT = CanvasState(
    type="run_summary",
    title="Parity Report — Volume Discount",
    data={
        "metrics": [
            {"label": "Scenarios Run", "value": "30", "trend": "+4 re-run"},
            {"label": "Parity Score", "value": "100%", "trend": "PASS"},
            {"label": "Critical Logic", "value": "Match", "trend": "OK"},
        ]
    },
)

QA_TIMELINE = CanvasState(
    type="run_timeline",
    title="AI Migration Run — QA",
    data={"current_step": "Deploy to QA"},
)

QA_SUMMARY = CanvasState(
    type="run_summary",
    title="QA Run Summary — Phase 1",
    data={"status": "SUCCESS"},
)
