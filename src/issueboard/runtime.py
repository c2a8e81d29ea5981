"""Runtime helpers for issueboard CLI orchestration."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import Any

from .concurrency import BlockingRunner, ConcurrencyConfig
from .config import ClientConfig, load_config
from .http_client import HttpClient
from .logging import configure_logging, get_logger
from .resources import ApiClients

AsyncHandler = Callable[[ApiClients], Awaitable[int]]


def prepare_config(
    args: Any, *, loader: Callable[[str | None], ClientConfig] = load_config
) -> ClientConfig:
    """Load ClientConfig and apply command-line overrides."""
    cfg = loader(getattr(args, "config", None))
    base_url = getattr(args, "base_url", None)
    if base_url:
        cfg.base_url = base_url
    if getattr(args, "json_logs", False):
        cfg.logging_json_enabled = True
    level = getattr(args, "log_level", None)
    if level:
        cfg.logging_level = level
    configure_logging(json_logging=cfg.logging_json_enabled, level=cfg.logging_level)
    return cfg


def build_clients(cfg: ClientConfig) -> ApiClients:
    runner = BlockingRunner(ConcurrencyConfig(max_workers=cfg.max_workers))
    return ApiClients(http=HttpClient(base_url=cfg.base_url, runner=runner))


def execute_command(
    handler: AsyncHandler,
    cfg: ClientConfig,
    command: str,
    *,
    clients_factory: Callable[[ClientConfig], ApiClients] = build_clients,
) -> int:
    """Run one async command handler on a fresh event loop and close its clients."""
    logger = get_logger()
    clients = clients_factory(cfg)
    runner = clients.http.runner
    start = time.monotonic()

    async def _main() -> int:
        try:
            return await handler(clients)
        finally:
            clients.close()
            if runner is not None:
                runner.close()

    try:
        exit_code = asyncio.run(_main())
    except Exception as exc:
        logger.log_error(f"command {command} failed", exc, command=command)
        raise
    logger.log_performance(
        f"command_{command}", (time.monotonic() - start) * 1000, exit_code=exit_code
    )
    return exit_code


__all__ = ["build_clients", "execute_command", "prepare_config"]
