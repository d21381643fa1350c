"""Map flag kinds to minimal JSON-schema type descriptors.

Only the ``type`` keyword is emitted: no defaults, bounds, enumerations or
descriptions. Every tool's flag schema is sent to the calling agent, so the
flag name alone has to carry the meaning.
"""

from __future__ import annotations

from climcp.models import FlagDescriptor, FlagKind

_SCHEMA_TYPES: dict[FlagKind, str] = {
    FlagKind.BOOL: "boolean",
    FlagKind.STRING_ARRAY: "array",
    FlagKind.NUMBER_ARRAY: "array",
    FlagKind.INT: "number",
    FlagKind.UINT: "number",
    FlagKind.FLOAT: "number",
}


def flag_schema(flag: FlagDescriptor) -> dict[str, str]:
    """Return ``{"type": ...}`` for *flag*; unmapped kinds are strings.

    Example::

        >>> flag_schema(FlagDescriptor(name="per-page", kind="int64"))
        {'type': 'number'}
    """
    return {"type": _SCHEMA_TYPES.get(flag.kind, "string")}


def schema_property_name(flag_name: str) -> str:
    """Property name of a flag inside the ``flags`` object (``-`` becomes ``_``)."""
    return flag_name.replace("-", "_")
