"""Local Ollama server lifecycle: probe, start, wait, list models."""

import asyncio
import logging
import subprocess
import time

import httpx

logger = logging.getLogger(__name__)

_PROBE_TIMEOUT_SEC = 5.0

# Handle of the server this process launched. The server is left running
# on exit, so the handle is held rather than waited on.
_server_process: subprocess.Popen | None = None


async def is_running(base_url: str) -> bool:
    """True when the server answers GET /api/tags."""
    try:
        async with httpx.AsyncClient(timeout=_PROBE_TIMEOUT_SEC) as client:
            response = await client.get(f"{base_url.rstrip('/')}/api/tags")
            return response.is_success
    except httpx.HTTPError:
        return False


def start_server() -> subprocess.Popen:
    """Launch ``ollama serve`` detached in the background.

    The child gets its own session so it outlives the CLI and is not killed
    by Ctrl+C in the terminal.
    """
    logger.info("Starting Ollama server")
    return subprocess.Popen(
        ["ollama", "serve"],
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        start_new_session=True,
    )


async def wait_until_ready(base_url: str, timeout_sec: float = 15.0, interval_sec: float = 1.0) -> bool:
    """Poll until the server responds or ``timeout_sec`` elapses."""
    deadline = time.monotonic() + timeout_sec
    while time.monotonic() < deadline:
        if await is_running(base_url):
            return True
        await asyncio.sleep(interval_sec)
    return False


async def list_local_models(base_url: str) -> list[str]:
    """Names of locally pulled models. Empty list if the server can't be queried."""
    try:
        async with httpx.AsyncClient(timeout=_PROBE_TIMEOUT_SEC) as client:
            response = await client.get(f"{base_url.rstrip('/')}/api/tags")
            response.raise_for_status()
            data = response.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning("Could not list Ollama models: %s", exc)
        return []

    models = data.get("models") if isinstance(data, dict) else None
    if not isinstance(models, list):
        return []
    return [m["name"] for m in models if isinstance(m, dict) and "name" in m]


async def ensure_running(base_url: str, timeout_sec: float = 15.0) -> bool:
    """Start the server if it is not already up. Returns readiness."""
    global _server_process
    if await is_running(base_url):
        logger.info("Ollama server already running at %s", base_url)
        return True
    try:
        _server_process = start_server()
    except OSError as exc:
        logger.error("Could not launch 'ollama serve': %s", exc)
        return False
    return await wait_until_ready(base_url, timeout_sec=timeout_sec)
