"""
Call Executor - runs a call plan against a live host instance.

Calls run strictly one at a time, in plan order. Each call moves through::

    pending → (lazy-evaluated) → argument-finalized → invoked → settled

The batch either completes or aborts on the first failure; there is no
retry and no partial-success reporting.

Suspension points are the lazy argument function and the target method;
either may return an awaitable. The instance and the options are shared by
reference across the whole batch, so a call may read state an earlier call
left on them.

Example::

    executor = CallExecutor()
    await executor.run(calls, server, options)
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Iterable
from dataclasses import replace
from typing import Any

from haute.core.errors import tag_error
from haute.core.logging import LogContext, get_logger
from haute.binding.models import Call, Lazy, as_element
from haute.binding.signature import apply_signature, attribution, resolve_method

logger = get_logger(__name__)


async def _settle(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class CallExecutor:
    """Executes calls sequentially, tagging and re-raising the first failure."""

    async def run(self, calls: Iterable[Call], instance: Any, *options: Any) -> None:
        """
        Execute ``calls`` against ``instance``.

        Args:
            calls: Plan produced by CallResolver
            instance: Host object whose methods are called
            *options: Extra values handed to lazy arguments and
                      directly-supplied callables

        Raises:
            Exception: The first error raised; invocation errors carry an
                       attribution prefix
        """
        calls = list(calls)
        instance_name = calls[0].instance_name if calls else None

        async with LogContext(instance=instance_name):
            for call in calls:
                await self._run_call(call, instance, options)

            logger.info("executor.completed", calls=len(calls))

    async def _run_call(self, call: Call, instance: Any, options: tuple[Any, ...]) -> None:
        args = call.args

        if call.is_lazy:
            args = await _settle(args.fn(instance, *options))

            if call.expands and isinstance(args, (list, tuple)):
                logger.debug(
                    "executor.lazy_expanded",
                    method=call.method_name,
                    file=call.file,
                    items=len(args),
                )
                for item in args:
                    # Explicit Lazy items are evaluated but never re-expanded
                    sub_call = replace(
                        call,
                        args=as_element(item),
                        element=True,
                        evaluated=not isinstance(item, Lazy),
                    )
                    await self._run_call(sub_call, instance, options)
                return

        if call.use_filename is not None:
            args = call.use_filename(args)

        if args is None:
            logger.debug("executor.call_skipped", method=call.method_name, file=call.file)
            return

        positional = apply_signature(call.signature, args)

        if isinstance(call.method, str):
            target = resolve_method(instance, call.method, call.instance_name)
            argv = positional
        else:
            target = call.method
            argv = [instance, *options, *positional]

        logger.debug(
            "executor.call_started",
            method=call.method_name,
            file=call.file,
            argc=len(positional),
        )

        try:
            await _settle(target(*argv))
        except Exception as err:
            tag_error(err, attribution(call))
            logger.error(
                "executor.call_failed",
                method=call.method_name,
                file=call.file,
                error=str(err),
                error_type=type(err).__name__,
            )
            raise


async def run(calls: Iterable[Call], instance: Any, *options: Any) -> None:
    """Shortcut for ``CallExecutor().run(calls, instance, *options)``."""
    await CallExecutor().run(calls, instance, *options)


def run_sync(calls: Iterable[Call], instance: Any, *options: Any) -> None:
    """Run a plan to completion from synchronous code."""
    asyncio.run(run(calls, instance, *options))


__all__ = ["CallExecutor", "run", "run_sync"]
