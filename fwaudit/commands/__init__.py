"""Shared plumbing for fwaudit commands."""

import asyncio
import sys
from collections.abc import Awaitable, Callable
from typing import Any

import click

from fwaudit.docs.index import DocumentationIndex
from fwaudit.ui import print_envelope


def run_operation(
    ctx: click.Context,
    operation: Callable[..., Awaitable[dict]],
    *args: Any,
    render: Callable[[dict], None] = print_envelope,
    **kwargs: Any,
) -> dict:
    """Run one operation coroutine against the context's index and print its envelope.

    Commands share the index placed in ``ctx.obj["index"]`` when present;
    otherwise a fresh one is built and its HTTP client closed afterwards.
    Exits with status 1 on an error envelope.
    """
    obj = ctx.find_root().ensure_object(dict)
    index = obj.get("index")
    owned = index is None
    if owned:
        index = DocumentationIndex()

    async def _run() -> dict:
        try:
            return await operation(index, *args, **kwargs)
        finally:
            if owned:
                await index.fetcher.aclose()

    envelope = asyncio.run(_run())
    render(envelope)
    if envelope.get("status") == "error":
        sys.exit(1)
    return envelope
