"""Append-only JSON Lines session log of past interactions."""

import json
import logging
from dataclasses import asdict
from datetime import datetime
from pathlib import Path

from qa_agent.models import AgentSpec, CallResult, CollaborationReport, SessionEntry

logger = logging.getLogger(__name__)


def entry_from_report(report: CollaborationReport, task: str) -> SessionEntry:
    """Summarize a collaboration run as one session entry."""
    return SessionEntry(
        timestamp=datetime.now().isoformat(timespec="seconds"),
        task=task,
        mode=report.mode.value,
        agents=[a.label for a in report.agents],
        input_text=report.input_text,
        output=report.synthesis,
        success=bool(report.records),
    )


def entry_from_result(agent: AgentSpec, result: CallResult, input_text: str, task: str) -> SessionEntry:
    """Record a single-agent call; a failed call stores its error as the output."""
    return SessionEntry(
        timestamp=datetime.now().isoformat(timespec="seconds"),
        task=task,
        mode="single",
        agents=[agent.label],
        input_text=input_text,
        output=result.text if result.success else result.error or "",
        success=result.success,
    )


class SessionStore:
    """One JSON object per line; entries are only ever appended."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def append(self, entry: SessionEntry) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(asdict(entry), ensure_ascii=False) + "\n")
        logger.debug("Session entry appended to %s", self.path)

    def load(self) -> list[SessionEntry]:
        """Read all entries. Malformed lines are skipped with a warning."""
        if not self.path.exists():
            return []

        entries: list[SessionEntry] = []
        with self.path.open("r", encoding="utf-8") as f:
            for line_no, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                try:
                    entries.append(SessionEntry(**json.loads(line)))
                except (json.JSONDecodeError, TypeError) as exc:
                    logger.warning("Skipping malformed session line %d in %s: %s", line_no, self.path, exc)
        return entries
