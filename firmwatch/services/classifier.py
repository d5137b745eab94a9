"""Rule-based classification of posts into firmware issues.

Deterministic substring/regex matching against the keyword taxonomy; no I/O and
no state. The relevance gate and equipment resolution are hard gates (no match,
no issues); issue-type resolution is non-exclusive and falls back to "other".
"""

import logging
import re
from functools import lru_cache

from firmwatch.core.taxonomy import DEFAULT_TAXONOMY, FALLBACK_ISSUE_TYPE, Taxonomy
from firmwatch.schemas.issues import (
    UNKNOWN_FIRMWARE_VERSION,
    ClassifiedIssue,
    SeverityLevel,
)
from firmwatch.schemas.posts import SourcePost

logger = logging.getLogger(__name__)

# Body shorter than or equal to this falls back to the title for the description.
MIN_BODY_DESCRIPTION_LENGTH = 20
MAX_DESCRIPTION_LENGTH = 200
TRUNCATION_SUFFIX = "..."


@lru_cache(maxsize=8)
def _compile_patterns(patterns: tuple[str, ...]) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


def _first_keyword(content: str, keywords: tuple[str, ...]) -> str | None:
    """Return the first keyword that occurs in content, or None."""
    for keyword in keywords:
        if keyword in content:
            return keyword
    return None


def is_firmware_related(content: str, taxonomy: Taxonomy = DEFAULT_TAXONOMY) -> bool:
    """Relevance gate: True if any firmware-lifecycle keyword appears in content."""
    return _first_keyword(content, taxonomy.firmware_keywords) is not None


def resolve_equipment_type(content: str, taxonomy: Taxonomy = DEFAULT_TAXONOMY) -> str | None:
    """First equipment type (table order) with a keyword in content; None if nothing matches."""
    for equipment_type, keywords in taxonomy.equipment_keywords.items():
        if _first_keyword(content, keywords) is not None:
            return equipment_type
    return None


def extract_firmware_version(content: str, taxonomy: Taxonomy = DEFAULT_TAXONOMY) -> str:
    """
    Return the first N.N.N version found, or 'unknown'.

    Patterns are tried in priority order; a version prefixed by 'version', 'v'
    or 'firmware' beats an earlier bare N.N.N token.
    """
    for pattern in _compile_patterns(taxonomy.version_patterns):
        match = pattern.search(content)
        if match:
            return match.group(1) if match.groups() else match.group(0)
    return UNKNOWN_FIRMWARE_VERSION


def resolve_issue_types(
    content: str,
    taxonomy: Taxonomy = DEFAULT_TAXONOMY,
) -> list[tuple[str, str]]:
    """
    Return (issue_type, matched_keyword) for every category with a match, in table order.

    Falls back to a single ('other', '') when no category matches.
    """
    matched: list[tuple[str, str]] = []
    for issue_type, keywords in taxonomy.issue_type_keywords.items():
        keyword = _first_keyword(content, keywords)
        if keyword is not None:
            matched.append((issue_type, keyword))
    if not matched:
        return [(FALLBACK_ISSUE_TYPE, "")]
    return matched


def determine_severity(content: str, taxonomy: Taxonomy = DEFAULT_TAXONOMY) -> SeverityLevel:
    """Strict cascade: any high keyword → high; else any medium keyword → medium; else low."""
    if _first_keyword(content, taxonomy.high_severity_keywords) is not None:
        return "high"
    if _first_keyword(content, taxonomy.medium_severity_keywords) is not None:
        return "medium"
    return "low"


def extract_description(title: str, body: str) -> str:
    """First 200 chars of the body ('...' when truncated) if it is long enough, else the title."""
    if body and len(body) > MIN_BODY_DESCRIPTION_LENGTH:
        if len(body) > MAX_DESCRIPTION_LENGTH:
            return body[:MAX_DESCRIPTION_LENGTH] + TRUNCATION_SUFFIX
        return body
    return title


def classify_post(
    post: SourcePost,
    taxonomy: Taxonomy = DEFAULT_TAXONOMY,
) -> list[ClassifiedIssue]:
    """
    Classify one post. Returns one ClassifiedIssue per detected issue category, or [].

    All issues of a post share equipment type, firmware version, severity and
    description; they differ in issue_type and extracted_from.
    """
    content = f"{post.title} {post.body}".lower()

    gate_keyword = _first_keyword(content, taxonomy.firmware_keywords)
    if gate_keyword is None:
        return []

    equipment_type = resolve_equipment_type(content, taxonomy)
    if equipment_type is None:
        return []

    firmware_version = extract_firmware_version(content, taxonomy)
    severity = determine_severity(content, taxonomy)
    description = extract_description(post.title, post.body)

    return [
        ClassifiedIssue(
            post_id=post.id,
            equipment_type=equipment_type,
            firmware_version=firmware_version,
            issue_type=issue_type,
            severity=severity,
            description=description,
            # "other" has no category keyword; record the keyword that opened the gate.
            extracted_from=keyword or gate_keyword,
        )
        for issue_type, keyword in resolve_issue_types(content, taxonomy)
    ]


def classify_posts(
    posts: list[SourcePost],
    taxonomy: Taxonomy = DEFAULT_TAXONOMY,
) -> list[ClassifiedIssue]:
    """Classify a batch of posts and return all issues in post order."""
    issues: list[ClassifiedIssue] = []
    for post in posts:
        issues.extend(classify_post(post, taxonomy))
    logger.info(
        "Classified posts",
        extra={"post_count": len(posts), "issue_count": len(issues)},
    )
    return issues
