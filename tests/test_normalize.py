from __future__ import annotations

from types import MappingProxyType
from unittest.mock import AsyncMock

import pytest

from chainware.middleware.definition import HandlerKind, MiddlewareDefinition
from chainware.middleware.normalize import classify_handler, convert_to_middleware
from chainware.primitives.exceptions import InvalidHandlerError

# --- Test Handlers ---


async def auto_step(ctx) -> None:
    ctx.trail.append("auto")


async def full_step(ctx, next_handler) -> None:
    ctx.trail.append("full")
    await next_handler()


async def gate(ctx, next_handler) -> None:
    ctx.trail.append("gate")


class Unit:
    def __init__(self, meta=None) -> None:
        self.meta = meta

    async def process(self, ctx, next_handler) -> None:
        ctx.trail.append("unit")
        await next_handler()


class Steps:
    async def auto(self, ctx) -> None:
        ctx.trail.append("method")


# --- classify_handler ---


def test_classify_auto_handler() -> None:
    assert classify_handler(auto_step) is HandlerKind.AUTO_HANDLER


def test_classify_full_handler() -> None:
    assert classify_handler(full_step) is HandlerKind.HANDLER


def test_classify_middleware_object() -> None:
    assert classify_handler(Unit()) is HandlerKind.MIDDLEWARE


def test_classify_bound_method_ignores_self() -> None:
    assert classify_handler(Steps().auto) is HandlerKind.AUTO_HANDLER


def test_classify_lambda_arity() -> None:
    assert classify_handler(lambda ctx: None) is HandlerKind.AUTO_HANDLER
    assert classify_handler(lambda ctx, nxt: None) is HandlerKind.HANDLER


def test_classify_defaulted_parameter_not_counted() -> None:
    async def handler(ctx, next_handler=None) -> None:
        pass

    assert classify_handler(handler) is HandlerKind.AUTO_HANDLER


def test_classify_varargs_is_full_handler() -> None:
    async def handler(*args) -> None:
        pass

    assert classify_handler(handler) is HandlerKind.HANDLER


def test_classify_unsupported_shape_is_accepted() -> None:
    assert classify_handler(42) is HandlerKind.HANDLER


# --- convert_to_middleware ---


@pytest.mark.asyncio()
async def test_auto_handler_advances_after_completion(ctx) -> None:
    unit = convert_to_middleware(auto_step)
    next_fn = AsyncMock()

    await unit.process(ctx, next_fn)

    assert ctx.trail == ["auto"]
    next_fn.assert_awaited_once_with()


@pytest.mark.asyncio()
async def test_auto_handler_failure_skips_next(ctx) -> None:
    async def boom(ctx) -> None:
        raise ValueError("boom")

    unit = convert_to_middleware(boom)
    next_fn = AsyncMock()

    with pytest.raises(ValueError, match="boom"):
        await unit.process(ctx, next_fn)

    next_fn.assert_not_called()


@pytest.mark.asyncio()
async def test_full_handler_controls_next(ctx) -> None:
    unit = convert_to_middleware(gate)
    next_fn = AsyncMock()

    await unit.process(ctx, next_fn)

    assert ctx.trail == ["gate"]
    next_fn.assert_not_called()


@pytest.mark.asyncio()
async def test_full_handler_receives_continuation(ctx) -> None:
    unit = convert_to_middleware(full_step)
    next_fn = AsyncMock()

    await unit.process(ctx, next_fn)

    next_fn.assert_awaited_once_with()


def test_meta_is_attached_read_only() -> None:
    unit = convert_to_middleware(auto_step, {"name": "auto"})

    assert isinstance(unit, MiddlewareDefinition)
    assert unit.meta == {"name": "auto"}
    assert isinstance(unit.meta, MappingProxyType)
    assert unit.middleware == ()


def test_meta_is_snapshotted() -> None:
    meta = {"name": "auto"}
    unit = convert_to_middleware(auto_step, meta)
    meta["name"] = "changed"

    assert unit.meta == {"name": "auto"}


def test_middleware_object_returned_as_is() -> None:
    obj = Unit()
    assert convert_to_middleware(obj) is obj


def test_middleware_object_gets_meta_when_missing() -> None:
    obj = Unit()
    convert_to_middleware(obj, {"name": "unit"})
    assert obj.meta == {"name": "unit"}


def test_middleware_object_keeps_existing_meta() -> None:
    obj = Unit(meta={"name": "original"})
    convert_to_middleware(obj, {"name": "other"})
    assert obj.meta == {"name": "original"}


@pytest.mark.asyncio()
async def test_conversion_is_idempotent(ctx) -> None:
    once = convert_to_middleware(full_step, {"name": "full"})
    twice = convert_to_middleware(once)

    assert twice is once
    await twice.process(ctx, AsyncMock())
    assert ctx.trail == ["full"]


@pytest.mark.asyncio()
async def test_non_callable_fails_at_invocation(ctx) -> None:
    unit = convert_to_middleware(42)  # type: ignore[arg-type]

    with pytest.raises(InvalidHandlerError, match="not callable") as exc:
        await unit.process(ctx, AsyncMock())

    assert exc.value.handler == 42


@pytest.mark.asyncio()
async def test_sync_handler_fails_at_invocation(ctx) -> None:
    def sync_step(ctx) -> None:
        ctx.trail.append("sync")

    unit = convert_to_middleware(sync_step)  # type: ignore[arg-type]
    next_fn = AsyncMock()

    with pytest.raises(InvalidHandlerError, match="awaitable"):
        await unit.process(ctx, next_fn)

    next_fn.assert_not_called()
