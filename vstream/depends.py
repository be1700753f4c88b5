"""Binding of long-lived collaborators into a FastAPI app.

`Injected[T]` declares a parameter that receives whatever was bound for `T`
with `bind(app, T, value)`.
"""

from __future__ import annotations

from functools import cache
from typing import TYPE_CHECKING, Annotated, Any, Callable, TypeVar

from fastapi import Depends, FastAPI

T = TypeVar("T")


@cache
def _provider(tp: Any) -> Callable[[], Any]:
    async def provide() -> Any:
        raise RuntimeError(f"nothing bound for {tp!r}")

    provide.__name__ = f"provide_{getattr(tp, '__name__', 'dependency')}"
    return provide


def bind(app: FastAPI, tp: type[T], value: T) -> None:
    # async so FastAPI resolves it on the event loop, not in its threadpool
    async def provide_bound() -> T:
        return value

    app.dependency_overrides[_provider(tp)] = provide_bound


if TYPE_CHECKING:
    Injected = Annotated[T, ...]
else:

    class Injected:
        def __class_getitem__(cls, tp: Any) -> Any:
            return Annotated[tp, Depends(_provider(tp))]
