"""
Backoff strategies used between polls.

A backoff is any callable taking (ctx, delay_seconds). Clients receive one as a
constructor argument so tests can replace the real wait with no_backoff.
"""

from typing import Callable

from .context import OperationContext

Backoff = Callable[[OperationContext, float], None]


def context_backoff(ctx: OperationContext, delay: float) -> None:
    """Wait for `delay` seconds, returning early (with an error) if ctx is cancelled"""
    ctx.wait(delay)


def no_backoff(ctx: OperationContext, delay: float) -> None:
    """Do not wait at all; still honours cancellation"""
    ctx.check()
