"""Tests for qa_agent/orchestrator.py."""

import pytest

from config.config_loader import CollaborationConfig
from qa_agent.caller import AgentCaller
from qa_agent.models import AgentSpec, CollaborationMode, ConsensusRecord, DebateRecord, PipelineRecord
from qa_agent.orchestrator import CollaborationError, Orchestrator, parse_mode, resolve_rounds
from tests.conftest import MockAdapter, ScriptedCaller, fail, make_provider_config, ok


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("debate", CollaborationMode.DEBATE),
        ("Pipeline", CollaborationMode.PIPELINE),
        (" CONSENSUS ", CollaborationMode.CONSENSUS),
        (CollaborationMode.DEBATE, CollaborationMode.DEBATE),
    ],
)
def test_parse_mode(value, expected):
    assert parse_mode(value) is expected


def test_parse_mode_unknown():
    with pytest.raises(CollaborationError, match="Unknown collaboration mode"):
        parse_mode("Unknown")


async def test_unknown_mode_makes_no_calls(collaboration_config, three_agents):
    caller = ScriptedCaller()
    orchestrator = Orchestrator(caller, collaboration_config)
    with pytest.raises(CollaborationError):
        await orchestrator.run_collaboration("Q", "Unknown", three_agents)
    assert caller.calls == []


async def test_empty_agents_rejected(collaboration_config):
    caller = ScriptedCaller()
    orchestrator = Orchestrator(caller, collaboration_config)
    with pytest.raises(CollaborationError, match="At least one agent"):
        await orchestrator.run_collaboration("Q", CollaborationMode.CONSENSUS, [])
    assert caller.calls == []


@pytest.mark.parametrize("rounds", [0, 4])
async def test_debate_rounds_out_of_range(collaboration_config, three_agents, rounds):
    caller = ScriptedCaller()
    orchestrator = Orchestrator(caller, collaboration_config)
    with pytest.raises(CollaborationError, match="between 1 and 3"):
        await orchestrator.run_collaboration("Q", "debate", three_agents, rounds=rounds)
    assert caller.calls == []


def test_resolve_rounds(collaboration_config):
    assert resolve_rounds(CollaborationMode.DEBATE, None, collaboration_config) == 2
    assert resolve_rounds(CollaborationMode.DEBATE, 3, collaboration_config) == 3
    assert resolve_rounds(CollaborationMode.PIPELINE, 99, collaboration_config) == 99
    with pytest.raises(CollaborationError, match="got 99"):
        resolve_rounds(CollaborationMode.DEBATE, 99, collaboration_config)


def test_collaboration_error_is_value_error():
    assert issubclass(CollaborationError, ValueError)


async def test_debate_uses_configured_rounds(collaboration_config, agent_a, agent_b):
    caller = ScriptedCaller({
        agent_a: [ok("A1"), ok("A2 final")],
        agent_b: [ok("B1"), ok("B2 final")],
    })
    report = await Orchestrator(caller, collaboration_config).run_collaboration(
        "Q", "debate", [agent_a, agent_b],
    )
    assert report.mode is CollaborationMode.DEBATE
    assert len(report.records) == 4
    assert all(isinstance(r, DebateRecord) for r in report.records)
    assert f"## {agent_a.label}" in report.synthesis
    assert "A2 final" in report.synthesis
    assert "B2 final" in report.synthesis
    assert "A1" not in report.synthesis


async def test_debate_rounds_override(collaboration_config, agent_a):
    caller = ScriptedCaller()
    report = await Orchestrator(caller, collaboration_config).run_collaboration(
        "Q", "debate", [agent_a], rounds=3,
    )
    assert len(report.records) == 3


async def test_pipeline_middle_failure_scenario(collaboration_config, three_agents):
    a, b, c = three_agents
    caller = ScriptedCaller({a: ok("Verbatim first step output"), b: fail("HTTP 500")})
    report = await Orchestrator(caller, collaboration_config).run_collaboration(
        "Generate tests", "pipeline", three_agents,
    )
    assert len(report.records) == 1
    assert isinstance(report.records[0], PipelineRecord)
    assert report.synthesis.split("## Final Result", 1)[1].strip() == "Verbatim first step output"
    assert len(report.failures) == 1
    assert report.failures[0].agent == b
    assert report.failures[0].step == 2


async def test_consensus_scenario_80_60_40(collaboration_config, three_agents):
    scores = {"eighty": 80, "sixty": 60, "forty": 40}
    caller = ScriptedCaller({
        three_agents[0]: ok("eighty"),
        three_agents[1]: ok("sixty"),
        three_agents[2]: ok("forty"),
    })
    orchestrator = Orchestrator(caller, collaboration_config, estimator=lambda text: scores[text])
    report = await orchestrator.run_collaboration("Q", CollaborationMode.CONSENSUS, three_agents)

    assert [r.confidence for r in report.records] == [80, 60, 40]
    assert all(isinstance(r, ConsensusRecord) for r in report.records)
    assert report.synthesis.rstrip().endswith("eighty")
    assert "sixty" not in report.synthesis


async def test_consensus_sequential_setting(three_agents):
    settings = CollaborationConfig(parallel_consensus=False)
    caller = ScriptedCaller(delays={three_agents[0]: 0.02})
    await Orchestrator(caller, settings).run_collaboration("Q", "consensus", three_agents)
    assert caller.completed == three_agents


async def test_consensus_all_fail_reports_no_responses(collaboration_config, agent_a, agent_b):
    caller = ScriptedCaller({agent_a: fail(), agent_b: fail()})
    report = await Orchestrator(caller, collaboration_config).run_collaboration(
        "Q", "consensus", [agent_a, agent_b],
    )
    assert report.records == []
    assert len(report.failures) == 2
    assert "No responses collected." in report.synthesis


async def test_report_carries_input_and_agents(collaboration_config, three_agents):
    report = await Orchestrator(ScriptedCaller(), collaboration_config).run_collaboration(
        "Original input", "pipeline", three_agents,
    )
    assert report.input_text == "Original input"
    assert report.agents == three_agents
    assert report.agents is not three_agents
    assert report.duration_sec >= 0.0


async def test_on_record_callback_forwarded(collaboration_config, agent_a, agent_b):
    seen = []
    await Orchestrator(ScriptedCaller(), collaboration_config).run_collaboration(
        "Q", "consensus", [agent_a, agent_b], on_record=seen.append,
    )
    assert [r.agent for r in seen] == [agent_a, agent_b]


async def test_runs_are_independent(collaboration_config, agent_a, agent_b):
    orchestrator = Orchestrator(ScriptedCaller(), collaboration_config)
    first = await orchestrator.run_collaboration("Q1", "debate", [agent_a, agent_b], rounds=1)
    second = await orchestrator.run_collaboration("Q2", "debate", [agent_a], rounds=1)
    assert len(first.records) == 2
    assert len(second.records) == 1
    assert second.input_text == "Q2"


async def test_end_to_end_with_real_caller(collaboration_config):
    adapters = {
        "alpha": MockAdapter(make_provider_config("alpha"), reply="The data clearly supports option A."),
        "beta": MockAdapter(make_provider_config("beta"), reply=""),
    }
    agents = [AgentSpec("alpha", "a-1"), AgentSpec("beta", "b-1"), AgentSpec("gamma", "g-1")]
    report = await Orchestrator(AgentCaller(adapters), collaboration_config).run_collaboration(
        "Which option?", "consensus", agents,
    )
    assert [r.agent.provider for r in report.records] == ["alpha"]
    assert report.records[0].confidence == 75
    assert report.synthesis.startswith("# Balanced Multi-Perspective View")
    assert {f.agent.provider for f in report.failures} == {"beta", "gamma"}
