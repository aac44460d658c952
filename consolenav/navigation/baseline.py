"""The navigation hierarchy shipped with the console.

``reset_to_defaults`` replaces whatever an administrator configured with this
table. Deployments can point ``navigation.baseline_file`` at a YAML file with
the same shape (``sections:`` and ``pages:`` lists) to ship their own.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from pathlib import Path

import yaml

from consolenav.lib.exceptions import ValidationError
from consolenav.lib.hooks import NAVIGATION_BASELINE, hooks
from consolenav.navigation.records import PageEntryRecord, SectionRecord
from consolenav.navigation.refs import UNGROUPED_KEY


@dataclass(frozen=True)
class Baseline:
    sections: tuple[SectionRecord, ...]
    pages: tuple[PageEntryRecord, ...]


BASELINE_SECTIONS: tuple[SectionRecord, ...] = (
    SectionRecord("overview", "Overview", "layout-dashboard", 0),
    SectionRecord("content", "Content", "factory", 1),
    SectionRecord("revenue", "Revenue", "dollar-sign", 2),
    SectionRecord("audience", "Audience", "users", 3),
    SectionRecord("administration", "Administration", "settings", 4, collapsed_by_default=True),
)

BASELINE_PAGES: tuple[PageEntryRecord, ...] = (
    # Overview
    PageEntryRecord(
        "command-center", "Command Center", "/", "layout-dashboard", "dashboard.view",
        description="Network-wide metrics and live activity",
        section_key="overview", sort_order=0,
    ),
    PageEntryRecord(
        "analytics", "Analytics", "/analytics", "bar-chart-3", "analytics.view",
        description="Audience and revenue analytics",
        section_key="overview", sort_order=1, ai_action_label="Explain trends",
    ),
    PageEntryRecord(
        "my-tasks", "My Tasks", "/my-tasks", "check-square", "content.view",
        section_key="overview", sort_order=2,
    ),
    # Content
    PageEntryRecord(
        "content-factory", "Content Factory", "/content", "factory", "content.view",
        description="Turn episodes into articles, clips and posts",
        section_key="content", sort_order=0,
        primary_action_label="New Content", ai_action_label="Generate with AI",
    ),
    PageEntryRecord(
        "scheduler", "Scheduler", "/scheduler", "calendar", "content.view",
        section_key="content", sort_order=1, primary_action_label="Schedule Post",
    ),
    PageEntryRecord(
        "kanban", "Kanban Board", "/kanban", "kanban", "content.view",
        section_key="content", sort_order=2,
    ),
    PageEntryRecord(
        "moderation", "Moderation Queue", "/moderation", "shield-check", "content.edit",
        section_key="content", sort_order=3,
    ),
    PageEntryRecord(
        "campaigns", "Campaigns", "/campaigns", "megaphone", "content.view",
        section_key="content", sort_order=4, primary_action_label="New Campaign",
    ),
    PageEntryRecord(
        "newsletters", "Newsletters", "/newsletters", "mail", "content.view",
        section_key="content", sort_order=5,
        primary_action_label="New Newsletter", ai_action_label="Draft with AI",
    ),
    PageEntryRecord(
        "push-campaigns", "Push Campaigns", "/push-campaigns", "bell", "content.edit",
        section_key="content", sort_order=6,
    ),
    PageEntryRecord(
        "community", "Community", "/community", "message-circle", "content.view",
        section_key="content", sort_order=7,
    ),
    # Revenue
    PageEntryRecord(
        "monetization", "Monetization", "/monetization", "dollar-sign", "monetization.view",
        section_key="revenue", sort_order=0,
    ),
    PageEntryRecord(
        "sales", "Commercial CRM", "/sales", "briefcase", "sales.view",
        description="Advertiser deals and pipeline",
        section_key="revenue", sort_order=1,
        primary_action_label="New Deal", ai_action_label="Suggest prospects",
    ),
    PageEntryRecord(
        "ad-resizer", "Ad Resizer", "/ad-resizer", "image", "monetization.view",
        section_key="revenue", sort_order=2,
    ),
    # Audience
    PageEntryRecord(
        "network", "Podcast Network", "/network", "radio", "network.view",
        section_key="audience", sort_order=0,
    ),
    PageEntryRecord(
        "audience", "Audience Data", "/audience", "users", "audience.view",
        description="Subscribers, segments and engagement",
        section_key="audience", sort_order=1,
    ),
    # Administration
    PageEntryRecord(
        "customize", "Customize", "/customize", "palette", "customize.view",
        section_key="administration", sort_order=0,
    ),
    PageEntryRecord(
        "site-builder", "Site Builder", "/site-builder", "layout", "customize.edit",
        section_key="administration", sort_order=1, ai_action_label="Build with AI",
    ),
    PageEntryRecord(
        "users", "Users", "/users", "user-cog", "users.view",
        section_key="administration", sort_order=2, primary_action_label="Invite User",
    ),
    PageEntryRecord(
        "legal", "Legal Pages", "/legal-admin", "scale", "settings.view",
        section_key="administration", sort_order=3,
    ),
    PageEntryRecord(
        "settings", "Settings", "/settings", "settings", "settings.view",
        section_key="administration", sort_order=4,
    ),
)

DEFAULT_BASELINE = Baseline(sections=BASELINE_SECTIONS, pages=BASELINE_PAGES)


def validate_baseline(baseline: Baseline) -> Baseline:
    """Check a baseline satisfies the same invariants as the live hierarchy."""
    section_keys = [s.key for s in baseline.sections]
    duplicated = sorted(k for k, n in Counter(section_keys).items() if n > 1)
    if duplicated:
        raise ValidationError(f"Duplicate section keys in baseline: {', '.join(duplicated)}", field="key")
    if UNGROUPED_KEY in section_keys:
        raise ValidationError(f"'{UNGROUPED_KEY}' is reserved and cannot be a section key", field="key")

    for field in ("key", "route"):
        values = [getattr(p, field) for p in baseline.pages]
        duplicated = sorted(v for v, n in Counter(values).items() if n > 1)
        if duplicated:
            raise ValidationError(f"Duplicate page {field}s in baseline: {', '.join(duplicated)}", field=field)

    known = set(section_keys)
    for page in baseline.pages:
        if page.section_key is not None and page.section_key not in known:
            raise ValidationError(
                f"Baseline page '{page.key}' references unknown section '{page.section_key}'",
                field="section_key",
            )

    if len({s.sort_order for s in baseline.sections}) != len(baseline.sections):
        raise ValidationError("Baseline sections share a sort_order", field="sort_order")
    slots = Counter((p.section_key, p.sort_order) for p in baseline.pages)
    clashes = sorted(str(section or UNGROUPED_KEY) for (section, _), n in slots.items() if n > 1)
    if clashes:
        raise ValidationError(f"Baseline pages share a sort_order in: {', '.join(clashes)}", field="sort_order")

    return baseline


def load_baseline_file(path: Path | str) -> Baseline:
    """Read a baseline from YAML.

    Pages may use ``section_key: ungrouped`` (or omit it) for the implicit
    section. Sort orders default to the position in the file.
    """
    try:
        with open(path, "r") as f:
            raw = yaml.safe_load(f) or {}
    except OSError as e:
        raise ValidationError(f"Cannot read baseline file {path}: {e}", field="baseline_file") from e
    except yaml.YAMLError as e:
        raise ValidationError(f"Baseline file {path} is not valid YAML: {e}", field="baseline_file") from e

    if not isinstance(raw, dict):
        raise ValidationError(
            f"Baseline file {path} must be a mapping with 'sections' and 'pages'", field="baseline_file"
        )

    try:
        sections = tuple(
            SectionRecord(**{"sort_order": index, **item})
            for index, item in enumerate(raw.get("sections") or [])
        )
        pages = []
        positions: Counter = Counter()
        for item in raw.get("pages") or []:
            item = dict(item)
            if item.get("section_key") in (None, UNGROUPED_KEY):
                item["section_key"] = None
            section = item["section_key"]
            item.setdefault("sort_order", positions[section])
            positions[section] += 1
            pages.append(PageEntryRecord(**item))
    except (TypeError, KeyError) as e:
        raise ValidationError(f"Malformed baseline file {path}: {e}") from e

    return validate_baseline(Baseline(sections=sections, pages=tuple(pages)))


async def get_baseline(baseline_file: str | None = None) -> Baseline:
    """Return the baseline to restore, after the ``navigation_baseline`` filter."""
    baseline = load_baseline_file(baseline_file) if baseline_file else DEFAULT_BASELINE
    baseline = await hooks.apply_filters(NAVIGATION_BASELINE, baseline)
    return validate_baseline(baseline)
