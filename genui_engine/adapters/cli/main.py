"""CLI adapter — streams a generated component for a prompt to stdout."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from genui_engine import create_service
from genui_engine.engine.errors import ConfigurationError
from genui_engine.engine.models import GenerateRequest


async def run_cli(
    prompt: str,
    session_id: str = "cli-default",
    model: str | None = None,
    database_path: str | None = None,
) -> int:
    service = create_service(database_path=database_path)
    await service.store.open()
    try:
        request = GenerateRequest(prompt=prompt, session_id=session_id, model=model)
        async for fragment in service.handle(request):
            print(fragment, end="", flush=True)
        print()
        return 0
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2
    finally:
        await service.store.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="genui-cli",
        description="Generate a UI component for a prompt and stream it to stdout.",
    )
    parser.add_argument("prompt", nargs="*", help="prompt text (read from stdin when omitted)")
    parser.add_argument("--model", choices=["gemini", "anthropic"], default=None)
    parser.add_argument("--session", default="cli-default", help="conversation/session id")
    parser.add_argument("--db", default=None, help="SQLite path, or :memory:")
    parser.add_argument("-v", "--verbose", action="store_true", help="log tool calls to stderr")
    return parser


def main() -> None:
    args = build_parser().parse_args()
    prompt = " ".join(args.prompt) if args.prompt else sys.stdin.read().strip()
    if not prompt:
        print("Usage: genui-cli <prompt>  OR  echo '<prompt>' | genui-cli", file=sys.stderr)
        sys.exit(1)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )
    sys.exit(asyncio.run(run_cli(prompt, args.session, args.model, args.db)))


if __name__ == "__main__":
    main()
