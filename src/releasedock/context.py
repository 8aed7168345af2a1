from __future__ import annotations

import sys
import webbrowser
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

from . import prompts
from .client import ReleaseClient, ServiceClient
from .config import DEFAULT_TIMEOUT_S


def _warn(message: str) -> None:
    print(f"warning: {message}", file=sys.stderr)


def _client_factory(timeout_s: float) -> Callable[[str], ServiceClient]:
    def _make(server_url: str) -> ServiceClient:
        return ReleaseClient(server_url=server_url, timeout_s=timeout_s)

    return _make


@dataclass
class ExecutionContext:
    """
    Everything one command invocation needs besides the command itself.

    Built once by the caller and handed to every handler; tests swap in fakes.
    """

    session_path: Path | None = None
    timeout_s: float = DEFAULT_TIMEOUT_S
    client_factory: Callable[[str], ServiceClient] | None = None
    log: Callable[[str], None] = print
    warn: Callable[[str], None] = _warn
    confirm: Callable[[], bool] = prompts.confirm
    prompt_token: Callable[[], str | None] = prompts.request_access_token
    open_browser: Callable[[str], Any] = webbrowser.open
    work_dir: Path | None = None

    def new_client(self, server_url: str) -> ServiceClient:
        factory = self.client_factory or _client_factory(self.timeout_s)
        return factory(server_url)
