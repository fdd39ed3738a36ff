"""Process entry point: Telegram long-polling bot, or an interactive console session."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys

import httpx

from factkeeper.config.loader import load_config
from factkeeper.config.models import BotConfig
from factkeeper.domain.replies import MENU_LAYOUT, InboundEvent, KeyboardHint, Reply
from factkeeper.infrastructure.state_store import JsonFileStateStore
from factkeeper.infrastructure.telegram import TelegramError, TelegramTransport
from factkeeper.infrastructure.transport import parse_command
from factkeeper.observability.logging import setup_logging
from factkeeper.orchestration.runtime import BotRuntime

logger = logging.getLogger("factkeeper.cli")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Factkeeper bot")
    p.add_argument("--config", "-c", default=None, help="Path to bot YAML config (defaults apply without it)")
    p.add_argument("--storage", "-s", default=None, help="Override storage.path")
    p.add_argument("--console", action="store_true", help="Chat on stdin/stdout instead of Telegram")
    p.add_argument("--user-id", "-u", type=int, default=1, help="User ID for --console")
    return p.parse_args(argv)


class ConsoleReplySink:
    """Implements ReplySink by printing to stdout."""

    async def send(self, reply: Reply) -> None:
        print(f"Bot: {reply.text}")
        if reply.keyboard == KeyboardHint.SHOW_FIELD_MENU:
            print("     " + " | ".join(" ".join(f"[{b}]" for b in row) for row in MENU_LAYOUT))
        print()


async def run_interactive(runtime: BotRuntime, user_id: int) -> None:
    await runtime.dispatch(InboundEvent(user_id=user_id, kind=parse_command("/start"), text="/start"))
    while True:
        try:
            line = input("You: ").strip()
        except EOFError:
            break
        if not line:
            continue
        if line.lower() in ("quit", "exit", "q"):
            print("Goodbye.")
            break
        await runtime.dispatch(InboundEvent(user_id=user_id, kind=parse_command(line), text=line))


async def run_telegram(config: BotConfig, store: JsonFileStateStore, token: str) -> int:
    tg = config.telegram
    transport = TelegramTransport(token, base_url=tg.base_url, poll_timeout=tg.poll_timeout)
    try:
        try:
            me = await transport.check()
        except (TelegramError, httpx.HTTPError) as e:
            logger.error("Cannot start Telegram transport: %s", e)
            return 1
        logger.info("Connected as @%s", me.get("username", "?"))
        runtime = BotRuntime(config, store, transport)
        await runtime.serve(transport)
    finally:
        await transport.aclose()
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    setup_logging(config.logging.level)
    if args.storage:
        config.storage.path = args.storage
    store = JsonFileStateStore(config.storage.path, no_data_text=config.messages.no_data)

    if args.console:
        runtime = BotRuntime(config, store, ConsoleReplySink())
        asyncio.run(run_interactive(runtime, args.user_id))
        return 0

    token = os.environ.get(config.telegram.token_env, "")
    if not token:
        logger.error("%s is not set", config.telegram.token_env)
        return 1

    try:
        return asyncio.run(run_telegram(config, store, token))
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 0


if __name__ == "__main__":
    sys.exit(main())
