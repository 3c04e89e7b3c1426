import asyncio
from collections.abc import Coroutine, Iterable
from typing import Any, TypeVar

from haru.openapi import MediaType

T = TypeVar('T')

DEFAULT_MEDIA_TYPE = 'application/json'


def select_media_type(content: dict[str, MediaType] | None) -> MediaType | None:
    """Pick the JSON entry of a content map, else its first declared one."""
    if not content:
        return None
    return content.get(DEFAULT_MEDIA_TYPE) or next(iter(content.values()))


def is_success_code(code: str) -> bool:
    # '200', '201', '2XX'
    return len(code) == 3 and code[0] == '2'


async def run_in_order(coroutines: Iterable[Coroutine[Any, Any, T]]) -> list[T]:
    """Run ``coroutines`` as tasks of one group, results in input order.

    Tasks start in input order. The first failure cancels the tasks still
    running and is raised as itself rather than as an ``ExceptionGroup``.
    """
    try:
        async with asyncio.TaskGroup() as group:
            tasks = [group.create_task(coroutine) for coroutine in coroutines]
    except ExceptionGroup as e:
        error: BaseException = e
        while isinstance(error, BaseExceptionGroup):
            error = error.exceptions[0]
        raise error
    return [task.result() for task in tasks]
