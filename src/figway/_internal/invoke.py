"""Invoke helpers — call sync or async callables uniformly.

Error handlers and lifecycle hooks can be ``def`` or ``async def``.
Any code that calls a user-provided callable goes through here so the
sync/async check lives in exactly one place.

Usage::

    from figway._internal.invoke import invoke

    result = await invoke(hook)
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *handler* and await the result if it is awaitable."""
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
