"""Ordered "first successful strategy wins" evaluation.

The reference locator and segmenter both try a ladder of heuristics in a fixed
order. Each rung is a plain function registered under a name; this module only
walks the ladder so every rung can be tested on its own.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Sequence, Tuple, TypeVar

T = TypeVar("T")
Strategy = Tuple[str, Callable[..., Optional[T]]]

logger = logging.getLogger(__name__)


def _is_present(value: Any) -> bool:
    return value is not None


def first_success(
    strategies: Sequence[Strategy],
    *args: Any,
    accept: Callable[[Any], bool] = _is_present,
    **kwargs: Any,
) -> Optional[Tuple[str, Any]]:
    """Run ``strategies`` in order and return ``(name, value)`` of the first accepted one.

    Parameters
    ----------
    strategies: Sequence[Strategy]
        ``(name, callable)`` pairs. Every callable receives ``*args`` and
        ``**kwargs``.
    accept: Callable[[Any], bool], optional
        Predicate deciding whether a strategy succeeded. Defaults to
        "returned something other than ``None``".

    Returns
    -------
    tuple | None
        The winning strategy's name and value, or ``None`` when no strategy
        was accepted.
    """

    for name, fn in strategies:
        value = fn(*args, **kwargs)
        if accept(value):
            logger.debug("strategy %s succeeded", name)
            return name, value
    return None
