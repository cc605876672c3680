"""Fixed semantic signal definitions and scoring constants."""

from riskgate.risk.types import SemanticSignal, SignalCategory

HIGH_RISK_THRESHOLD = 60

CONTRACT_RULE_SIGNAL = "high-tier-contract-pattern"
CONTRACT_RULE_WEIGHT = 70
CONTRACT_RULE_RATIONALE = "Matched explicit high-risk pattern from risk-policy contract."

SEMANTIC_SIGNALS: tuple[SemanticSignal, ...] = (
    SemanticSignal(
        category=SignalCategory.SEMANTIC_PUBLIC_API,
        signal="public-api-change",
        patterns=("**/src/index.ts", "**/*.d.ts", "app/api/**"),
        weight=20,
        rationale="Public API changes can impact downstream consumers.",
    ),
    SemanticSignal(
        category=SignalCategory.SEMANTIC_AUTH_PERMISSIONS,
        signal="auth-or-permissions-touchpoint",
        patterns=("**/auth/**", "**/permissions/**", "**/rbac/**", "**/policy/**"),
        weight=25,
        rationale="Auth and permission changes are security-sensitive.",
    ),
    SemanticSignal(
        category=SignalCategory.SEMANTIC_MIGRATION,
        signal="migration-change",
        patterns=("**/migrations/**", "**/*.sql", "db/schema.ts"),
        weight=20,
        rationale="Schema/migration changes are higher-risk to production data paths.",
    ),
    SemanticSignal(
        category=SignalCategory.SEMANTIC_WORKFLOW,
        signal="workflow-change",
        patterns=(".github/workflows/**", "scripts/**"),
        weight=15,
        rationale="Workflow changes can alter CI/CD and governance execution.",
    ),
)

# (metadata attribute, category, signal id prefix)
HISTORICAL_CATEGORIES: tuple[tuple[str, SignalCategory, str], ...] = (
    ("recent_flaky_tests", SignalCategory.HISTORY_FLAKY_TESTS, "flaky"),
    ("incident_tagged_files", SignalCategory.HISTORY_INCIDENTS, "incident"),
    ("prior_rollback_areas", SignalCategory.HISTORY_ROLLBACKS, "rollback"),
)
