"""Terminal rendering of records as tables."""

import shutil
import sys
import textwrap
from collections.abc import Sequence
from typing import Any

from slyft_cli.core.types import Asset, Job, Project


def is_tty() -> bool:
    """Check if stdout is a TTY (human) or pipe (LLM/machine)."""
    return sys.stdout.isatty()


def terminal_width() -> int:
    return shutil.get_terminal_size((80, 24)).columns


def table_output(
    headers: list[str],
    rows: list[list[str]],
    widths: list[int],
) -> None:
    """Print a formatted table for human output."""
    # Header
    header_line = "  ".join(h.ljust(w) for h, w in zip(headers, widths))
    print(header_line.rstrip())
    print("-" * len(header_line.rstrip()))

    # Rows; long cells wrap onto continuation lines
    for row in rows:
        cells = [textwrap.wrap(str(v), w) or [""] for v, w in zip(row, widths)]
        for i in range(max(len(c) for c in cells)):
            line = "  ".join((c[i] if i < len(c) else "").ljust(w) for c, w in zip(cells, widths))
            print(line.rstrip())


def details_output(title: str, pairs: list[tuple[str, Any]]) -> None:
    """Print a Key/Value table for a single record."""
    key_width = max([len("Key")] + [len(k) for k, _ in pairs])
    value_width = max(terminal_width() - key_width - 2, 20)
    print(f"\n---- {title} ----")
    table_output(
        ["Key", "Value"],
        [[k, "" if v is None else str(v)] for k, v in pairs],
        [key_width, value_width],
    )
    print()


# =============================================================================
# Single records
# =============================================================================


def display_project(project: Project) -> None:
    details_output(
        "Project Details",
        [
            ("Id", project.id),
            ("Name", project.name),
            ("Lock", project.lock),
            ("CreatedAt", project.created_at),
            ("UpdatedAt", project.updated_at),
        ],
    )


def display_asset(asset: Asset) -> None:
    details_output(
        "Asset Details",
        [
            ("Name", asset.name),
            ("ProjectId", asset.project_id),
            ("ProjectName", asset.project_name),
            ("Origin", asset.origin),
            ("CreatedAt", asset.created_at),
            ("UpdatedAt", asset.updated_at),
        ],
    )


def display_job(job: Job) -> None:
    pairs: list[tuple[str, Any]] = [
        ("Id", job.id),
        ("Kind", job.kind),
        ("Status", job.status),
        ("ProjectId", job.project_id),
        ("ProjectName", job.project_name),
        ("CreatedAt", job.created_at),
        ("UpdatedAt", job.updated_at),
        ("ResultMessage", job.results.message),
        ("ResultStatus", job.results.status),
    ]
    pairs.extend((f"ResultAssets[{i}]", a) for i, a in enumerate(job.results.assets))
    pairs.extend((f"ResultDetails[{i}]", d) for i, d in enumerate(job.results.details))
    details_output("Job Details", pairs)


# =============================================================================
# Collections
# =============================================================================


def display_projects(projects: Sequence[Project]) -> None:
    if not projects:
        print("No projects found")
        return
    if len(projects) == 1:
        display_project(projects[0])
        return
    print()
    table_output(
        ["Number", "ID", "Name"],
        [[str(i), str(p.id), p.name] for i, p in enumerate(projects, 1)],
        [6, 8, 40],
    )
    print()


def display_assets(assets: Sequence[Asset]) -> None:
    if not assets:
        print("No assets found")
        return
    if len(assets) == 1:
        display_asset(assets[0])
        return
    print()
    table_output(
        ["Number", "Name", "Project Name", "Origin"],
        [[str(i), a.name, a.project_name, a.origin] for i, a in enumerate(assets, 1)],
        [6, 36, 30, 12],
    )
    print()


def display_jobs(jobs: Sequence[Job]) -> None:
    if not jobs:
        print("No jobs found")
        return
    if len(jobs) == 1:
        display_job(jobs[0])
        return
    print()
    table_output(
        ["Number", "ID", "Kind", "Status", "Project Name"],
        [[str(i), str(j.id), j.kind, j.status, j.project_name] for i, j in enumerate(jobs, 1)],
        [6, 8, 10, 12, 30],
    )
    print()
