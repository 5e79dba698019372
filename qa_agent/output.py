"""Rich console output and file export for collaboration reports."""

import json
import logging
import re
from dataclasses import asdict
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel
from rich.rule import Rule
from rich.text import Text

from qa_agent.models import (
    AgentSpec,
    CollaborationReport,
    DebateRecord,
    PipelineRecord,
    Record,
)

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False)

EXPORT_FORMATS = ("md", "txt", "json")


def _slug(text: str, max_len: int = 40) -> str:
    """Convert text to a filename-safe slug."""
    slug = re.sub(r"[^\w\s-]", "", text.lower())
    slug = re.sub(r"[\s_-]+", "-", slug).strip("-")
    return slug[:max_len] or "untitled"


def _preview(text: str, words: int = 50) -> str:
    """Return first N words of a response."""
    all_words = text.split()
    preview = " ".join(all_words[:words])
    if len(all_words) > words:
        preview += "..."
    return preview


def _record_title(record: Record) -> str:
    if isinstance(record, DebateRecord):
        return f"Round {record.round} · {record.agent.label}"
    if isinstance(record, PipelineRecord):
        return f"Step {record.step} · {record.agent.label}"
    return f"{record.agent.label} · confidence {record.confidence}%"


def _record_text(record: Record) -> str:
    if isinstance(record, PipelineRecord):
        return record.output
    return record.response


def print_record(record: Record) -> None:
    """Print one intermediate record as a compact panel."""
    console.print(
        Panel(
            Text(_preview(_record_text(record))),
            title=f"[bold]{_record_title(record)}[/bold]",
            border_style="dim",
        )
    )


def print_records(report: CollaborationReport) -> None:
    console.print(Rule(f"[bold cyan]{report.mode.value.capitalize()} Records[/bold cyan]"))
    for record in report.records:
        print_record(record)
    for failure in report.failures:
        where = f"round {failure.round}" if failure.round else f"step {failure.step}" if failure.step else "call"
        console.print(f"  [red]FAIL[/red] {failure.agent.label} ({where}): {escape(failure.error)}")


def print_report(report: CollaborationReport) -> None:
    """Print the synthesized report to the console using Rich markdown."""
    console.print(Rule("[bold green]Synthesis[/bold green]"))
    console.print(
        Text(
            f"Mode: {report.mode.value} | "
            f"Agents: {len(report.agents)} | "
            f"Records: {len(report.records)} | "
            f"Failures: {len(report.failures)} | "
            f"Duration: {report.duration_sec:.1f}s",
            style="dim",
        )
    )
    console.print(Markdown(report.synthesis))


def _render_markdown(report: CollaborationReport, task: str | None) -> str:
    lines: list[str] = [
        f"# {report.mode.value.capitalize()} Collaboration: {report.input_text[:80]}",
        "",
        f"**Date:** {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
        f"**Task:** {task or 'custom'}",
        f"**Agents:** {', '.join(a.label for a in report.agents)}",
        f"**Duration:** {report.duration_sec:.1f}s",
        f"**Mode:** {report.mode.value}",
        "",
        "---",
        "",
        "## Input",
        "",
        report.input_text,
        "",
        "## Records",
        "",
    ]

    for record in report.records:
        lines.append(f"### {_record_title(record)}")
        lines.append("")
        if isinstance(record, PipelineRecord):
            lines.append(f"*Input:* {record.input}")
            lines.append("")
        lines.append(_record_text(record))
        lines.append("")

    if report.failures:
        lines.append("## Failures")
        lines.append("")
        for failure in report.failures:
            lines.append(f"- {failure.agent.label}: {failure.error}")
        lines.append("")

    lines += ["## Synthesis", "", report.synthesis, ""]
    return "\n".join(lines)


def _render_json(report: CollaborationReport, task: str | None) -> str:
    data = asdict(report)
    data["mode"] = report.mode.value
    data["task"] = task
    data["record_type"] = type(report.records[0]).__name__ if report.records else None
    return json.dumps(data, indent=2, ensure_ascii=False)


def save_report(
    report: CollaborationReport,
    output_dir: Path,
    task: str | None = None,
    fmt: str = "md",
) -> Path:
    """Save the report as ``{timestamp}_{slug}.{fmt}``.

    Args:
        report: The completed CollaborationReport.
        output_dir: Directory to save the file in.
        task: Task name; used for the slug when given, else the input text.
        fmt: "md" (full transcript), "txt" (synthesis only) or "json" (everything).

    Returns:
        Path to the saved file.
    """
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unsupported export format: {fmt!r} (expected one of: {', '.join(EXPORT_FORMATS)})")

    output_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    slug = _slug(task) if task else _slug(report.input_text)
    filepath = output_dir / f"{timestamp}_{slug}.{fmt}"

    if fmt == "md":
        content = _render_markdown(report, task)
    elif fmt == "json":
        content = _render_json(report, task)
    else:
        content = report.synthesis

    filepath.write_text(content, encoding="utf-8")
    logger.info("Report saved to: %s", filepath)
    return filepath


def save_single_output(text: str, output_dir: Path, task: str) -> Path:
    """Save a single-agent answer as ``{task}.txt``, overwriting earlier runs of the task."""
    output_dir.mkdir(parents=True, exist_ok=True)
    filename = re.sub(r"[^\w-]+", "_", task.strip()).strip("_") or "output"
    filepath = output_dir / f"{filename}.txt"
    filepath.write_text(text, encoding="utf-8")
    logger.info("Output saved to: %s", filepath)
    return filepath


def print_single_response(agent: AgentSpec, text: str) -> None:
    """Print a single agent's answer."""
    console.print(Rule(f"[bold green]{agent.label}[/bold green]"))
    console.print(Markdown(text))
