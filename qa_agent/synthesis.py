"""Final synthesis: reduce each strategy's records to one markdown report. No I/O."""

from qa_agent.models import AgentSpec, ConsensusRecord, DebateRecord, PipelineRecord

CONSENSUS_THRESHOLD = 75
PIPELINE_PREVIEW_CHARS = 200


def _preview(text: str, limit: int = PIPELINE_PREVIEW_CHARS) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


def synthesize_debate(records: list[DebateRecord]) -> str:
    """One subsection per agent holding only its latest response.

    Agents appear in the order they first responded; records are expected in
    round-major order so the last one seen per agent is its latest.
    """
    if not records:
        return "# Debate Synthesis\n\nNo responses were collected during the debate."

    latest: dict[AgentSpec, DebateRecord] = {}
    iterations: dict[AgentSpec, int] = {}
    for record in records:
        latest[record.agent] = record
        iterations[record.agent] = iterations.get(record.agent, 0) + 1

    rounds = max(r.round for r in records)
    parts: list[str] = ["# Debate Synthesis", ""]
    for agent, record in latest.items():
        count = iterations[agent]
        parts.append(f"## {agent.label}")
        parts.append("")
        parts.append(
            f"*Final position (round {record.round}, "
            f"{count} iteration{'s' if count != 1 else ''})*"
        )
        parts.append("")
        parts.append(record.response)
        parts.append("")

    parts.append("---")
    parts.append("")
    parts.append(
        f"Collected {len(records)} responses from {len(latest)} agents "
        f"over {rounds} round{'s' if rounds != 1 else ''}. "
        "Each section shows the agent's latest position after seeing the preceding discussion."
    )
    return "\n".join(parts)


def synthesize_pipeline(records: list[PipelineRecord]) -> str:
    """Every completed step as a preview, then the last step's full output."""
    if not records:
        return "# Pipeline Result\n\nNo pipeline steps completed."

    parts: list[str] = [
        "# Pipeline Result",
        "",
        f"Completed {len(records)} step{'s' if len(records) != 1 else ''}.",
        "",
    ]
    for record in records:
        parts.append(f"## Step {record.step}: {record.agent.label}")
        parts.append("")
        parts.append(f"**Input:** {record.input}")
        parts.append("")
        parts.append(f"**Output:** {_preview(record.output)}")
        parts.append("")

    parts.append("## Final Result")
    parts.append("")
    parts.append(records[-1].output)
    return "\n".join(parts)


def select_consensus(records: list[ConsensusRecord]) -> ConsensusRecord | None:
    """Return the first record scoring above the threshold, or None.

    The first qualifying record wins even if a later one scores higher.
    """
    for record in records:
        if record.confidence > CONSENSUS_THRESHOLD:
            return record
    return None


def synthesize_consensus(records: list[ConsensusRecord]) -> str:
    """Promote a confident answer, else present every view side by side."""
    if not records:
        return "# Consensus Result\n\nNo responses collected."

    chosen = select_consensus(records)
    if chosen is not None:
        return "\n".join([
            "# Consensus Result",
            "",
            f"*Consensus answer from {chosen.agent.label} "
            f"(confidence {chosen.confidence}%, {len(records)} responses considered)*",
            "",
            chosen.response,
        ])

    parts: list[str] = [
        "# Balanced Multi-Perspective View",
        "",
        f"No response exceeded {CONSENSUS_THRESHOLD}% confidence; "
        f"all {len(records)} perspectives are shown.",
        "",
    ]
    for record in records:
        parts.append(f"## {record.agent.label} (confidence {record.confidence}%)")
        parts.append("")
        parts.append(record.response)
        parts.append("")
    return "\n".join(parts).rstrip()
