"""Helpers for driving the async core from synchronous callers."""

import asyncio
from typing import Any


def run_async(coro: Any) -> Any:
    """Run an async coroutine in a new event loop.

    This is useful for calling async functions from synchronous Flask routes.
    Creates a new event loop, runs the coroutine, and properly cleans up.

    Args:
        coro: An awaitable coroutine to execute

    Returns:
        The result of the coroutine

    Note:
        For CLI commands, prefer using asyncio.run() directly.
    """
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()
