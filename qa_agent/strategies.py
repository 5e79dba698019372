"""Strategy executors: debate rounds, pipeline chain, independent consensus calls."""

import asyncio
import logging
from collections.abc import Callable
from typing import Protocol

from qa_agent.confidence import estimate_confidence
from qa_agent.models import (
    AgentSpec,
    CallFailure,
    CallResult,
    ConsensusRecord,
    DebateRecord,
    PipelineRecord,
    Record,
)

logger = logging.getLogger(__name__)

# Debate: how many prior records each agent sees, and how much of each
DEBATE_CONTEXT_RECORDS = 2
DEBATE_CONTEXT_CHARS = 300

PIPELINE_INPUT_PREVIEW_CHARS = 100

RecordCallback = Callable[[Record], None]
FailureCallback = Callable[[CallFailure], None]


class Caller(Protocol):
    async def call(self, agent: AgentSpec, text: str) -> CallResult: ...


def _truncate(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


def _debate_prompt(input_text: str, recent: list[DebateRecord]) -> str:
    """Frame the original input with a digest of the most recent responses."""
    digest = "\n\n".join(
        f"{r.agent.label}: {_truncate(r.response, DEBATE_CONTEXT_CHARS)}" for r in recent
    )
    return (
        f"{input_text}\n\n"
        f"Previous perspectives:\n{digest}\n\n"
        "Now respond considering the above."
    )


def _pipeline_prompt(previous_output: str) -> str:
    return (
        "Refine and extend the following output from the previous step. "
        "Fix mistakes, fill gaps and keep what is already correct.\n\n"
        f"{previous_output}"
    )


def _report_failure(failure: CallFailure, on_failure: FailureCallback | None) -> None:
    if on_failure:
        on_failure(failure)


async def run_debate(
    caller: Caller,
    agents: list[AgentSpec],
    input_text: str,
    rounds: int,
    on_record: RecordCallback | None = None,
    on_failure: FailureCallback | None = None,
) -> list[DebateRecord]:
    """Run ``rounds`` sequential rounds, agents in list order within each round.

    From round 2 on, every agent sees the two most recent records. A failed
    call produces no record and does not stop the debate.

    Returns:
        Records in round-major, then agent order.
    """
    records: list[DebateRecord] = []

    for round_num in range(1, rounds + 1):
        logger.info("Starting debate round %d with %d agents", round_num, len(agents))
        succeeded = 0

        for agent in agents:
            recent = records[-DEBATE_CONTEXT_RECORDS:]
            if round_num == 1 or not recent:
                prompt = input_text
            else:
                prompt = _debate_prompt(input_text, recent)
                logger.debug(
                    "Round %d context for %s: %s",
                    round_num, agent.label, [r.agent.label for r in recent],
                )

            result = await caller.call(agent, prompt)
            if not result.success:
                _report_failure(
                    CallFailure(agent=agent, error=result.error or "unknown error", round=round_num),
                    on_failure,
                )
                continue

            record = DebateRecord(round=round_num, agent=agent, response=result.text or "")
            records.append(record)
            succeeded += 1
            if on_record:
                on_record(record)

        logger.info("Round %d complete: %d/%d agents succeeded", round_num, succeeded, len(agents))

    return records


async def run_pipeline(
    caller: Caller,
    agents: list[AgentSpec],
    input_text: str,
    on_record: RecordCallback | None = None,
    on_failure: FailureCallback | None = None,
) -> list[PipelineRecord]:
    """Chain agents: each step refines the full output of the previous one.

    Stops at the first failed step; only completed steps are returned.
    """
    records: list[PipelineRecord] = []
    current_input = input_text

    for step, agent in enumerate(agents, start=1):
        logger.info("Pipeline step %d/%d: %s", step, len(agents), agent.label)
        result = await caller.call(agent, current_input)
        if not result.success:
            _report_failure(
                CallFailure(agent=agent, error=result.error or "unknown error", step=step),
                on_failure,
            )
            logger.warning(
                "Pipeline halted at step %d/%d; %d step(s) completed",
                step, len(agents), len(records),
            )
            break

        output = result.text or ""
        record = PipelineRecord(
            step=step,
            agent=agent,
            input=_truncate(current_input, PIPELINE_INPUT_PREVIEW_CHARS),
            output=output,
        )
        records.append(record)
        if on_record:
            on_record(record)
        current_input = _pipeline_prompt(output)

    return records


async def run_consensus(
    caller: Caller,
    agents: list[AgentSpec],
    input_text: str,
    estimator: Callable[[str], int] = estimate_confidence,
    parallel: bool = True,
    on_record: RecordCallback | None = None,
    on_failure: FailureCallback | None = None,
) -> list[ConsensusRecord]:
    """Ask every agent the same input independently and score each answer.

    Failed calls are skipped. With ``parallel`` the calls run concurrently;
    records come back in ``agents`` order either way.
    """
    logger.info("Collecting consensus from %d agents (parallel=%s)", len(agents), parallel)

    if parallel:
        results = await asyncio.gather(*(caller.call(agent, input_text) for agent in agents))
    else:
        results = []
        for agent in agents:
            results.append(await caller.call(agent, input_text))

    records: list[ConsensusRecord] = []
    for agent, result in zip(agents, results):
        if not result.success:
            _report_failure(
                CallFailure(agent=agent, error=result.error or "unknown error"),
                on_failure,
            )
            continue
        response = result.text or ""
        record = ConsensusRecord(agent=agent, response=response, confidence=estimator(response))
        records.append(record)
        if on_record:
            on_record(record)

    logger.info("Consensus collected %d/%d responses", len(records), len(agents))
    return records
