"""Orchestrator: validate a collaboration request, run the strategy, synthesize."""

import logging
import time
from collections.abc import Callable

from config.config_loader import CollaborationConfig
from qa_agent.confidence import estimate_confidence
from qa_agent.models import AgentSpec, CallFailure, CollaborationMode, CollaborationReport, Record
from qa_agent.strategies import Caller, RecordCallback, run_consensus, run_debate, run_pipeline
from qa_agent.synthesis import synthesize_consensus, synthesize_debate, synthesize_pipeline

logger = logging.getLogger(__name__)


class CollaborationError(ValueError):
    """Raised for an invalid collaboration request, before any agent is called."""


def parse_mode(mode: CollaborationMode | str) -> CollaborationMode:
    """Accept a CollaborationMode or its value (case-insensitive)."""
    if isinstance(mode, CollaborationMode):
        return mode
    try:
        return CollaborationMode(str(mode).strip().lower())
    except ValueError:
        valid = ", ".join(m.value for m in CollaborationMode)
        raise CollaborationError(f"Unknown collaboration mode: {mode!r} (expected one of: {valid})") from None


def resolve_rounds(mode: CollaborationMode, rounds: int | None, settings: CollaborationConfig) -> int:
    """Return the round count to use, falling back to ``settings.rounds``.

    Raises:
        CollaborationError: For a debate whose rounds are outside 1..max_rounds.
    """
    effective = rounds if rounds is not None else settings.rounds
    if mode is CollaborationMode.DEBATE and not 1 <= effective <= settings.max_rounds:
        raise CollaborationError(
            f"Debate rounds must be between 1 and {settings.max_rounds}, got {effective}"
        )
    return effective


class Orchestrator:
    """Runs one collaboration per call; holds no state between runs.

    The caller (with its provider adapters) and the settings are injected, so
    several orchestrators can coexist with different configurations.
    """

    def __init__(
        self,
        caller: Caller,
        settings: CollaborationConfig,
        estimator: Callable[[str], int] = estimate_confidence,
    ) -> None:
        self._caller = caller
        self._settings = settings
        self._estimator = estimator

    async def run_collaboration(
        self,
        input_text: str,
        mode: CollaborationMode | str,
        agents: list[AgentSpec],
        rounds: int | None = None,
        on_record: RecordCallback | None = None,
    ) -> CollaborationReport:
        """Run a full collaboration and return the synthesized report.

        Raises:
            CollaborationError: Unknown mode, no agents, or rounds out of range.
        """
        collab_mode = parse_mode(mode)
        if not agents:
            raise CollaborationError("At least one agent is required")

        effective_rounds = resolve_rounds(collab_mode, rounds, self._settings)

        agent_list = list(agents)
        failures: list[CallFailure] = []
        start = time.monotonic()
        logger.info(
            "Starting %s collaboration with %d agents: %s",
            collab_mode.value, len(agent_list), ", ".join(a.label for a in agent_list),
        )

        records: list[Record]
        if collab_mode is CollaborationMode.DEBATE:
            debate_records = await run_debate(
                self._caller, agent_list, input_text, effective_rounds,
                on_record=on_record, on_failure=failures.append,
            )
            synthesis = synthesize_debate(debate_records)
            records = list(debate_records)
        elif collab_mode is CollaborationMode.PIPELINE:
            pipeline_records = await run_pipeline(
                self._caller, agent_list, input_text,
                on_record=on_record, on_failure=failures.append,
            )
            synthesis = synthesize_pipeline(pipeline_records)
            records = list(pipeline_records)
        else:
            consensus_records = await run_consensus(
                self._caller, agent_list, input_text,
                estimator=self._estimator,
                parallel=self._settings.parallel_consensus,
                on_record=on_record, on_failure=failures.append,
            )
            synthesis = synthesize_consensus(consensus_records)
            records = list(consensus_records)

        duration = time.monotonic() - start
        logger.info(
            "%s collaboration finished in %.1fs: %d records, %d failures",
            collab_mode.value.capitalize(), duration, len(records), len(failures),
        )

        return CollaborationReport(
            mode=collab_mode,
            input_text=input_text,
            agents=agent_list,
            records=records,
            synthesis=synthesis,
            failures=failures,
            duration_sec=duration,
        )
