"""Format selection for a matched route.

Decides which custom format, if any, applies to a request. An explicit
format (for example from a ``.xml`` path suffix) always wins unless the
route scope forces a recheck. Otherwise the selectors are tried in the
order their formats were registered and the first one returning a truthy
value sets the format.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Mapping, MutableMapping
from typing import Any

from customformats.models import Selector

logger = logging.getLogger(__name__)

FORMAT_PARAM = "format"
"""Route parameter holding the request's format."""


def candidate_formats(
    selectors: Mapping[str, Selector], only: Collection[str] = ()
) -> list[str]:
    """Return the formats whose selectors should run, in registration order.

    Args:
        selectors: Selector map in registration order.
        only: Formats a route scope is restricted to. Empty means all.

    Returns:
        Format names to try.
    """
    if not only:
        return list(selectors)
    return [name for name in selectors if name in only]


def has_explicit_format(params: Mapping[str, Any]) -> bool:
    """Return True if ``params`` already names a format.

    A missing, None, or empty-string ``format`` is not explicit.
    """
    return bool(params.get(FORMAT_PARAM))


def select_format(
    request: Any,
    params: MutableMapping[str, Any],
    selectors: Mapping[str, Selector],
    only: Collection[str] = (),
    force: bool = False,
) -> MutableMapping[str, Any]:
    """Set ``params["format"]`` from the first matching selector.

    An explicit format short-circuits selection unless ``force`` is set.
    A ``format`` that is missing, None, or the empty string does not
    count as explicit. Selectors run synchronously, in order, each at
    most once, and the search stops at the first match. A selector
    matches when its return value is truthy: anything other than None,
    False, zero, or an empty value. Exceptions raised by a selector
    propagate to the caller.

    Args:
        request: The incoming request, passed to each selector.
        params: Route parameters. Updated in place.
        selectors: Selector map in registration order.
        only: Formats this route scope may select. Empty means all.
        force: Run the selectors even if a format is already set.

    Returns:
        ``params``, with ``format`` set if a selector matched.
    """
    if has_explicit_format(params) and not force:
        return params

    for name in candidate_formats(selectors, only):
        if selectors[name](request, params):
            logger.debug("Selector matched format %r", name)
            params[FORMAT_PARAM] = name
            break

    return params
