"""Rule-based evidence tier classification.

Used when no AI classifier is configured, when the AI call fails, and as
the baseline in tests. Pure: no I/O, always completes.

Rules are evaluated in table order and the first match wins, so
system-generated signals (TIER_2) take precedence over policy-document
signals (TIER_1) even when both are present.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass

from compliance_scoring.evidence.schemas import (
    ClassificationIndicators,
    ClassificationResult,
    EvidenceTier,
)

# Characters of content scanned
MAX_SCAN_LENGTH = 5000

# ── TIER_2: system-generated ──────────────────────────────

STRUCTURED_EXTENSIONS = (".csv", ".json", ".xml", ".log")

SYSTEM_MARKERS = ("generated on:", "timestamp:", "system id:")

ISO_TIMESTAMP_RE = re.compile(r"\d{4}-\d{2}-\d{2}t\d{2}:\d{2}:\d{2}", re.IGNORECASE)
QUOTED_CSV_LINE_RE = re.compile(r'^".*",".*",".*"$', re.MULTILINE)
QUOTED_CSV_HEADER_RE = re.compile(r'^".*",".*"')
DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")

# ── TIER_1: policy documents ──────────────────────────────

POLICY_PATTERNS = (
    re.compile(r"policy\s+document", re.IGNORECASE),
    re.compile(r"version\s+\d+", re.IGNORECASE),
    re.compile(r"approved\s+by", re.IGNORECASE),
    re.compile(r"effective\s+date", re.IGNORECASE),
    re.compile(r"procedure", re.IGNORECASE),
)
POLICY_FILENAME_RE = re.compile(r"policy|procedure|guideline")
VERSION_RE = POLICY_PATTERNS[1]
APPROVAL_RE = POLICY_PATTERNS[2]

SELF_DECLARED_REASON = (
    "No formal structure or system-generated indicators found - classified as self-declared"
)


@dataclass(frozen=True)
class HeuristicRule:
    """One row of the tiering table.

    ``predicate`` and ``indicators`` receive the lower-cased content
    excerpt and the lower-cased filename.
    """

    name: str
    predicate: Callable[[str, str], bool]
    tier: EvidenceTier
    confidence: float
    reason: str
    indicators: Callable[[str, str], ClassificationIndicators]


def _is_system_generated(content: str, filename: str) -> bool:
    if filename.endswith(STRUCTURED_EXTENSIONS):
        return True
    if any(marker in content for marker in SYSTEM_MARKERS):
        return True
    return bool(ISO_TIMESTAMP_RE.search(content) or QUOTED_CSV_LINE_RE.search(content))


def _system_indicators(content: str, filename: str) -> ClassificationIndicators:
    return ClassificationIndicators(
        has_timestamps=bool(DATE_RE.search(content)),
        is_structured_data=bool(QUOTED_CSV_HEADER_RE.match(content)) or ".csv" in filename,
    )


def _is_policy_document(content: str, filename: str) -> bool:
    if any(pattern.search(content) for pattern in POLICY_PATTERNS):
        return True
    return bool(POLICY_FILENAME_RE.search(filename))


def _policy_indicators(content: str, filename: str) -> ClassificationIndicators:
    return ClassificationIndicators(
        has_version_control=bool(VERSION_RE.search(content)),
        has_approval_signatures=bool(APPROVAL_RE.search(content)),
    )


def _always(content: str, filename: str) -> bool:
    return True


def _no_indicators(content: str, filename: str) -> ClassificationIndicators:
    return ClassificationIndicators()


TIER_RULES: tuple[HeuristicRule, ...] = (
    HeuristicRule(
        name="system_generated",
        predicate=_is_system_generated,
        tier=EvidenceTier.TIER_2,
        confidence=0.7,
        reason="System-generated format detected (CSV, JSON, logs, or timestamped data)",
        indicators=_system_indicators,
    ),
    HeuristicRule(
        name="policy_document",
        predicate=_is_policy_document,
        tier=EvidenceTier.TIER_1,
        confidence=0.6,
        reason=(
            "Policy document format detected "
            "(formal policies, procedures, or versioned documents)"
        ),
        indicators=_policy_indicators,
    ),
    HeuristicRule(
        name="self_declared",
        predicate=_always,
        tier=EvidenceTier.TIER_0,
        confidence=0.5,
        reason=SELF_DECLARED_REASON,
        indicators=_no_indicators,
    ),
)


def match_rule(
    content: str,
    filename: str,
    rules: tuple[HeuristicRule, ...] = TIER_RULES,
    max_length: int = MAX_SCAN_LENGTH,
) -> HeuristicRule:
    """Return the first rule matching the content excerpt and filename."""
    content_lower = content[:max_length].lower()
    filename_lower = filename.lower()
    for rule in rules:
        if rule.predicate(content_lower, filename_lower):
            return rule
    return rules[-1]


def classify_with_heuristics(
    content: str,
    filename: str,
    rules: tuple[HeuristicRule, ...] = TIER_RULES,
    max_length: int = MAX_SCAN_LENGTH,
) -> ClassificationResult:
    """Classify a document from its content and filename alone.

    Args:
        content: Raw document text; only the first ``max_length`` characters
            are scanned.
        filename: Original upload filename.
        rules: Ordered rule table; the last rule should always match.
        max_length: Characters of content to scan.

    Returns:
        ClassificationResult from the first matching rule.
    """
    rule = match_rule(content, filename, rules, max_length)
    content_lower = content[:max_length].lower()
    return ClassificationResult(
        tier=rule.tier,
        confidence=rule.confidence,
        reason=rule.reason,
        indicators=rule.indicators(content_lower, filename.lower()),
    )
