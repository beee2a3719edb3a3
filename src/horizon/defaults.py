"""Default values derived from schema metadata.

The resolver never reads field values, only the ``key`` and ``default``
metadata, so it accepts a schema class or any instance of one.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import horizon.schema

if TYPE_CHECKING:
    import horizon.store


def resolve_defaults(schema: Any, prefix: str = "") -> dict[str, str]:
    """Map every annotated leaf's dotted path to its declared default.

    Nested schemas are always descended into, using their own key as the
    next path segment. A nested field without a key contributes an empty
    segment: below the top level that doubles the separator
    (``server..ip``); at the top level the empty prefix is dropped, so its
    children get plain keys (``ip``) with no leading dot. Give every nested
    field a key.
    """
    result: dict[str, str] = {}
    for f in horizon.schema.walk(schema):
        path = horizon.schema.join(prefix, f.key)
        if f.default and f.key:
            result[path] = f.default
        if f.nested is not None:
            result.update(resolve_defaults(f.nested, path))
    return result


def apply_defaults(store: horizon.store.Store, schema: Any) -> None:
    """Seed *store* with the defaults of *schema*."""
    for key, value in resolve_defaults(schema).items():
        store.set_default(key, value)
