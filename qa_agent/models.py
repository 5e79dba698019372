"""Pure dataclasses for the collaboration pipeline. No logic, no deps."""

from dataclasses import dataclass, field
from enum import Enum


class CollaborationMode(str, Enum):
    DEBATE = "debate"
    PIPELINE = "pipeline"
    CONSENSUS = "consensus"


@dataclass(frozen=True)
class AgentSpec:
    provider: str          # key into the configured providers, e.g. "openai", "ollama"
    model: str             # model string sent to the provider

    @property
    def label(self) -> str:
        return f"{self.provider}/{self.model}"


@dataclass(frozen=True)
class CallResult:
    success: bool
    text: str | None = None
    error: str | None = None


@dataclass
class DebateRecord:
    round: int
    agent: AgentSpec
    response: str


@dataclass
class PipelineRecord:
    step: int
    agent: AgentSpec
    input: str             # truncated preview of what the step received
    output: str


@dataclass
class ConsensusRecord:
    agent: AgentSpec
    response: str
    confidence: int        # always within [25, 95]


Record = DebateRecord | PipelineRecord | ConsensusRecord


@dataclass
class CallFailure:
    agent: AgentSpec
    error: str
    round: int | None = None
    step: int | None = None


@dataclass
class CollaborationReport:
    mode: CollaborationMode
    input_text: str
    agents: list[AgentSpec]
    records: list[Record]
    synthesis: str
    failures: list[CallFailure] = field(default_factory=list)
    duration_sec: float = 0.0


@dataclass
class SessionEntry:
    timestamp: str         # ISO-8601
    task: str
    mode: str              # "single" or a CollaborationMode value
    agents: list[str]
    input_text: str
    output: str
    success: bool = True
