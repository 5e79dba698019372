"""Click CLI: config loading, agent selection, collaboration, export and session log."""

import asyncio
import logging
import sys
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from config.config_loader import AppConfig, load_config
from qa_agent import ollama_server
from qa_agent.caller import AgentCaller, build_adapters
from qa_agent.healthcheck import run_health_checks
from qa_agent.models import AgentSpec, CollaborationReport, Record
from qa_agent.orchestrator import CollaborationError, Orchestrator, parse_mode, resolve_rounds
from qa_agent.output import (
    EXPORT_FORMATS,
    print_records,
    print_report,
    print_single_response,
    save_report,
    save_single_output,
)
from qa_agent.prompts import INPUT_HINTS, build_prompt, resolve_task
from qa_agent.providers.ollama import DEFAULT_BASE_URL
from qa_agent.session import SessionStore, entry_from_report, entry_from_result

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False)

MODES = ("single", "debate", "pipeline", "consensus")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def parse_agents(agents_arg: str | list[str], config: AppConfig) -> list[AgentSpec]:
    """Parse ``provider[:model]`` entries into unique AgentSpecs, keeping order.

    Only the first colon separates provider and model, so ``ollama:gemma2:2b``
    selects model ``gemma2:2b``. A missing model means the provider's default.

    Raises:
        click.BadParameter: For an empty entry or a provider not in config.
    """
    entries = agents_arg.split(",") if isinstance(agents_arg, str) else list(agents_arg)
    agents: list[AgentSpec] = []
    for entry in entries:
        entry = entry.strip()
        if not entry:
            continue
        provider, _, model = entry.partition(":")
        provider = provider.strip()
        if provider not in config.providers:
            known = ", ".join(sorted(config.providers))
            raise click.BadParameter(f"Unknown provider '{provider}' (configured: {known})", param_hint="--agents")
        spec = AgentSpec(provider=provider, model=model.strip() or config.providers[provider].model)
        if spec in agents:
            logger.warning("Duplicate agent %s ignored", spec.label)
            continue
        agents.append(spec)

    if not agents:
        raise click.BadParameter("No agents selected", param_hint="--agents")
    return agents


def _ollama_base_url(config: AppConfig, provider: str) -> str:
    return config.providers[provider].base_url or DEFAULT_BASE_URL


async def _prepare_local_agents(config: AppConfig, agents: list[AgentSpec]) -> None:
    """Start the Ollama server for local agents and warn about models that aren't pulled."""
    for provider in dict.fromkeys(a.provider for a in agents):
        if config.providers[provider].sdk != "ollama":
            continue
        base_url = _ollama_base_url(config, provider)
        if not await ollama_server.ensure_running(base_url):
            console.print(
                f"[bold red]Error:[/bold red] Could not reach or start the Ollama server at {base_url}. "
                "Make sure Ollama is installed and runnable from the command line."
            )
            sys.exit(1)

        local_models = await ollama_server.list_local_models(base_url)
        if local_models:
            console.print(f"Local Ollama models: {', '.join(local_models)}")
        for agent in agents:
            if agent.provider == provider and local_models and agent.model not in local_models:
                console.print(
                    f"[yellow]Warning:[/yellow] model '{agent.model}' is not pulled locally "
                    f"(run 'ollama pull {agent.model}')"
                )


def _check_and_filter_agents(caller: AgentCaller, agents: list[AgentSpec]) -> list[AgentSpec]:
    """Run health checks, print results, and ask the user what to do on failures.

    Returns the agents that answered. Exits if the user declines to continue
    or no agent passes.
    """
    console.print("\n[bold]Checking agents...[/bold]")
    results: dict[str, tuple[bool, str]] = asyncio.run(run_health_checks(caller, agents))

    failed: list[str] = []
    for agent in agents:
        ok, err = results[agent.label]
        if ok:
            console.print(f"  [green]OK  [/green] {agent.label}")
        else:
            short_err = err.splitlines()[0][:120] if err else "unknown error"
            console.print(f"  [red]FAIL[/red] {agent.label}: {escape(short_err)}")
            failed.append(agent.label)

    if not failed:
        console.print()
        return agents

    working = [a for a in agents if a.label not in failed]
    if not working:
        console.print("\n[bold red]Error:[/bold red] No agents passed the health check.")
        sys.exit(1)

    console.print(f"\n[yellow]{len(failed)} agent(s) failed:[/yellow] {', '.join(failed)}")
    console.print(f"Working agents: {', '.join(a.label for a in working)}")

    if not click.confirm("Continue with working agents only?", default=True):
        sys.exit(0)

    console.print()
    return working


async def _run_single(
    caller: AgentCaller,
    agent: AgentSpec,
    prompt: str,
    output_dir: Path,
    task: str,
    session: SessionStore | None,
    user_input: str,
) -> Path:
    """Send the prompt to one agent and save the answer as ``{task}.txt``."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task(f"Processing with {agent.label}...", total=None)
        result = await caller.call(agent, prompt)

    if session is not None:
        session.append(entry_from_result(agent, result, user_input, task))

    if not result.success:
        console.print(f"\n[bold red]Task failed:[/bold red] {escape(result.error or '')}")
        sys.exit(1)

    saved = save_single_output(result.text or "", output_dir, task)
    print_single_response(agent, result.text or "")
    console.print(f"\n[dim]Output saved to: {saved}[/dim]")
    return saved


async def _run_collaboration(
    orchestrator: Orchestrator,
    agents: list[AgentSpec],
    prompt: str,
    mode: str,
    rounds: int | None,
) -> CollaborationReport:
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:

        def on_record(record: Record) -> None:
            progress.print(f"[green]OK[/green] {record.agent.label}")

        progress.add_task(f"Running {mode}...", total=None)
        return await orchestrator.run_collaboration(
            prompt, mode, agents, rounds=rounds, on_record=on_record,
        )


@click.command()
@click.argument("input_text", required=False)
@click.option("--file", "input_file", type=click.Path(exists=True, dir_okay=False), help="Read input from a file")
@click.option("--task", default="custom", show_default=True,
              help="Task name, e.g. bug_analyst, test_data_generator, scenario_priority")
@click.option("--mode", type=click.Choice(MODES, case_sensitive=False), default=None,
              help="single agent or a collaboration strategy (default: from config)")
@click.option("--agents", "agents_arg", default=None,
              help="Comma-separated provider[:model] list, e.g. openai:gpt-4,ollama:gemma2:2b")
@click.option("--rounds", default=None, type=int, help="Debate rounds (default: from config)")
@click.option("--output", "output_path", default=None, help="Output directory (default: from config)")
@click.option("--format", "export_format", type=click.Choice(EXPORT_FORMATS), default=None,
              help="Export format for collaboration reports (default: from config)")
@click.option("--session-file", default=None, help="Session log path (default: from config)")
@click.option("--no-session", is_flag=True, default=False, help="Don't append to the session log")
@click.option("--skip-health-check", is_flag=True, default=False,
              help="Skip the agent connectivity check at startup")
@click.option("--verbose", is_flag=True, help="Enable DEBUG-level logging")
def main(
    input_text: str | None,
    input_file: str | None,
    task: str,
    mode: str | None,
    agents_arg: str | None,
    rounds: int | None,
    output_path: str | None,
    export_format: str | None,
    session_file: str | None,
    no_session: bool,
    skip_health_check: bool,
    verbose: bool,
) -> None:
    """QA Agent -- send QA prompts to one or more LLMs and combine the answers.

    \b
    Examples:
      qa-agent "Login button does nothing on Safari" --task bug_analysis --mode single
      qa-agent --file scenarios.md --task scenario_priority --mode consensus
      qa-agent "Design checkout tests" --mode debate --rounds 3 --agents openai,claude
      qa-agent --file payload.json --task api_contract --mode pipeline --agents ollama:gemma2:2b,openai
    """
    if sys.platform == "win32":
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8", errors="replace")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8", errors="replace")

    load_dotenv()
    _setup_logging(verbose)

    try:
        config = load_config()
    except (FileNotFoundError, ValueError) as exc:
        console.print(f"[bold red]Config error:[/bold red] {escape(str(exc))}")
        sys.exit(1)

    effective_mode = (mode or config.collaboration.mode).lower()
    effective_output = Path(output_path) if output_path else config.defaults.output_dir
    effective_format = export_format or config.defaults.export_format
    session = None if no_session else SessionStore(
        Path(session_file) if session_file else config.defaults.session_file
    )

    agents = parse_agents(agents_arg or config.defaults.default_agents, config)
    missing = [a.label for a in agents if a.provider not in config.available_providers]
    if missing:
        console.print(f"[bold red]Error:[/bold red] No API key for: {', '.join(missing)}. Check .env.")
        sys.exit(1)

    task_key, template = resolve_task(task)
    if input_file:
        user_input = Path(input_file).read_text(encoding="utf-8").strip()
    elif input_text:
        user_input = input_text
    else:
        user_input = click.prompt(INPUT_HINTS[task_key])
    prompt = build_prompt(template, user_input)
    logger.debug("Task '%s' routed to template '%s'", task, task_key)

    if effective_mode != "single":
        try:
            resolve_rounds(parse_mode(effective_mode), rounds, config.collaboration)
        except CollaborationError as exc:
            console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
            sys.exit(1)

    caller = AgentCaller(build_adapters(config))
    asyncio.run(_prepare_local_agents(config, agents))
    if not skip_health_check:
        agents = _check_and_filter_agents(caller, agents)

    if effective_mode == "single":
        asyncio.run(_run_single(caller, agents[0], prompt, effective_output, task, session, user_input))
        return

    orchestrator = Orchestrator(caller, config.collaboration)
    try:
        report = asyncio.run(_run_collaboration(orchestrator, agents, prompt, effective_mode, rounds))
    except CollaborationError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        sys.exit(1)

    saved = save_report(report, effective_output, task=task, fmt=effective_format)
    if session is not None:
        session.append(entry_from_report(report, task))

    print_records(report)
    print_report(report)
    console.print(f"\n[dim]Saved to: {saved}[/dim]")


if __name__ == "__main__":
    main()
