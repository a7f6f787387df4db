"""
HTTP entry point for the release notes digest.

A scheduler (Cloud Scheduler, cron, ...) hits the trigger route; every hit
runs one full digest synchronously. The same server exposes the digest as
MCP tools.
"""

from __future__ import annotations

import asyncio
import os
from dataclasses import asdict, is_dataclass
from threading import Lock
from typing import Any, Callable, List, Optional, Tuple

from fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import Response

from gcp_release_digest.agent import (
    ConfigurationError,
    DigestConfig,
    DigestResult,
    ReleaseDigestAgent,
)
from gcp_release_digest.observability.logger import configure_logging, get_logger

configure_logging()
logger = get_logger("gcp_release_digest.app")


def _jsonable(x: Any) -> Any:
    if is_dataclass(x):
        return _jsonable(asdict(x))
    if hasattr(x, "value") and isinstance(getattr(x, "value"), str):
        return x.value
    if isinstance(x, dict):
        return {str(k): _jsonable(v) for k, v in x.items()}
    if isinstance(x, (list, tuple)):
        return [_jsonable(i) for i in x]
    return x


class DigestServer:
    """
    HTTP + MCP server around ``ReleaseDigestAgent``.

    Routes:
      - trigger route (``DIGEST_TRIGGER_PATH``, default ``/``), GET or POST:
        runs the digest, empty body; 200 on success, 500 when anything
        failed, 400 on configuration errors.

    Tools:
      - run_digest: run the digest and return the per-channel results.
      - list_products: products with notes of a type (or of the general channel).

    Configuration is read from the environment on every call.
    """

    def __init__(
        self,
        *,
        name: str = "gcp-release-digest",
        trigger_path: Optional[str] = None,
        config_loader: Callable[[], DigestConfig] = DigestConfig.from_env,
        agent_factory: Callable[[DigestConfig], ReleaseDigestAgent] = ReleaseDigestAgent,
        serialize_runs: bool = True,
    ) -> None:
        self._config_loader = config_loader
        self._agent_factory = agent_factory
        self._serialize = serialize_runs
        self._run_lock = Lock()
        self.trigger_path = trigger_path or os.getenv("DIGEST_TRIGGER_PATH", "/")

        self.mcp = FastMCP(name)
        self._register()

    # -----------------------------
    # digest
    # -----------------------------
    def _run_digest(self) -> DigestResult:
        config = self._config_loader()
        with self._agent_factory(config) as agent:
            return agent.run()

    def trigger(self) -> Tuple[int, Optional[DigestResult]]:
        """Run one digest. Returns the HTTP status code and the result."""
        try:
            if self._serialize:
                with self._run_lock:
                    result = self._run_digest()
            else:
                result = self._run_digest()
        except ConfigurationError as e:
            logger.error(f"Digest not started: {e}")
            return 400, None
        except Exception as e:
            logger.exception(f"Digest failed: {e}")
            return 500, None

        logger.info(f"Digest result: {result.summary()}")
        return (200 if result.success else 500), result

    def list_products(self, release_note_type: str = "") -> List[str]:
        config = self._config_loader()
        with self._agent_factory(config) as agent:
            return agent.list_products(release_note_type or None)

    # -----------------------------
    # routes and tools
    # -----------------------------
    def _register(self) -> None:
        server = self

        @self.mcp.custom_route(self.trigger_path, methods=["GET", "POST"])
        async def digest(request: Request) -> Response:
            logger.info(f"Digest triggered by {request.method} {request.url.path}")
            status_code, _ = await asyncio.to_thread(server.trigger)
            return Response(status_code=status_code)

        @self.mcp.tool
        def run_digest() -> dict[str, Any]:
            """
            Run the full digest: query release notes, summarize every product,
            post to the configured webhooks.

            Returns:
              {status_code, result}
            """
            status_code, result = server.trigger()
            if result is None:
                raise ValueError(f"Digest did not run (status {status_code}); check the server logs")
            return {"status_code": status_code, "result": _jsonable(result)}

        @self.mcp.tool
        def list_products(release_note_type: str = "") -> list[str]:
            """
            Products with release notes in the lookback window.

            Args:
              release_note_type: e.g. FEATURE or BREAKING_CHANGE; empty for the
                types routed to the general channel.
            """
            return server.list_products(release_note_type)

    # -----------------------------
    # run
    # -----------------------------
    def run(self) -> None:
        transport = os.getenv("MCP_TRANSPORT", "http").strip().lower()
        if transport == "http":
            host = os.getenv("DIGEST_HTTP_HOST", "0.0.0.0")
            port = int(os.getenv("DIGEST_HTTP_PORT") or os.getenv("PORT") or "8080")
            path = os.getenv("DIGEST_MCP_PATH", "/mcp")
            logger.info(f"Serving digest trigger on {host}:{port}{self.trigger_path}")
            self.mcp.run(transport=transport, host=host, port=port, path=path)
        else:
            self.mcp.run()


_server: Optional[DigestServer] = None


def get_app() -> DigestServer:
    """Return the process-wide server."""
    global _server
    if _server is None:
        _server = DigestServer()
    return _server


if __name__ == "__main__":
    get_app().run()
