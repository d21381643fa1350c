"""Canonical Pydantic models shared across all climcp modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into three groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`ServeSettings`, :class:`OutputConfig`, and :class:`GlobalConfig`.

**Command tree models** -- the read-only input of the bridge, produced by the
Click adapter or the manifest loader:
    :class:`FlagKind`, :class:`FlagDescriptor`, and :class:`CommandNode`.

**Bridge models** -- built at startup or per tool call:
    :class:`ToolDescriptor`, :class:`ResponseConfig`,
    :class:`ExecutionResult`, :class:`NavigationHints`, and
    :class:`PaginationMetadata`.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


DEFAULT_RESPONSE_LIMIT = 50000
"""Default response size in code points; balances usefulness vs token use."""

DEFAULT_DESCRIPTION_BUDGET = 100
"""Default character budget for the long-description part of a tool description."""


# --- Configuration ---


class ServeSettings(BaseModel):
    """Settings that shape the tools exposed by ``climcp serve``.

    Resolved by :func:`~climcp.config.resolve_settings` from (low to high
    precedence) defaults, the global config, ``./climcp.json``, ``CLIMCP_*``
    environment variables, and CLI flags.
    """

    tool_prefix: Optional[str] = Field(
        default=None,
        description="Tool name prefix; defaults to the root command name",
    )
    default_limit: int = Field(
        default=DEFAULT_RESPONSE_LIMIT,
        gt=0,
        description="Response limit used when a call does not pass one",
    )
    description_budget: int = Field(
        default=DEFAULT_DESCRIPTION_BUDGET,
        gt=3,
        description="Character budget for the long description",
    )
    include_examples: bool = Field(
        default=False,
        description="Append nearest Examples/Arguments help to descriptions",
    )
    timeout: Optional[float] = Field(
        default=None, description="Per-call timeout in seconds (None = unlimited)"
    )
    in_process: bool = Field(
        default=False, description="Run commands in-process instead of re-executing"
    )
    server_name: str = Field(default="climcp", description="MCP server name")


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/climcp/config.json``.

    Loaded and saved by :func:`~climcp.config.load_global_config` and
    :func:`~climcp.config.save_global_config`. See
    :func:`~climcp.config.resolve_settings` for the full precedence chain.
    """

    serve: ServeSettings = Field(default_factory=ServeSettings)
    output: OutputConfig = Field(default_factory=OutputConfig)


# --- Command tree ---


class FlagKind(str, enum.Enum):
    """Primitive kind of a command flag.

    The values follow the type names used by common flag libraries so that
    manifests written by hand (or dumped from another CLI) can name them
    directly. :meth:`parse` is total: unknown names become :attr:`STRING`.
    """

    BOOL = "bool"
    STRING = "string"
    INT = "int"
    UINT = "uint"
    FLOAT = "float"
    DURATION = "duration"
    STRING_ARRAY = "stringArray"
    NUMBER_ARRAY = "numberArray"

    @classmethod
    def parse(cls, value: Any) -> FlagKind:
        """Map a kind name (``"int64"``, ``"stringSlice"``, ...) to a member."""
        if isinstance(value, cls):
            return value
        return _KIND_ALIASES.get(str(value).strip(), cls.STRING)


_KIND_ALIASES: dict[str, FlagKind] = {
    "bool": FlagKind.BOOL,
    "boolean": FlagKind.BOOL,
    "string": FlagKind.STRING,
    "int": FlagKind.INT,
    "int8": FlagKind.INT,
    "int16": FlagKind.INT,
    "int32": FlagKind.INT,
    "int64": FlagKind.INT,
    "count": FlagKind.INT,
    "uint": FlagKind.UINT,
    "uint8": FlagKind.UINT,
    "uint16": FlagKind.UINT,
    "uint32": FlagKind.UINT,
    "uint64": FlagKind.UINT,
    "float": FlagKind.FLOAT,
    "float32": FlagKind.FLOAT,
    "float64": FlagKind.FLOAT,
    "number": FlagKind.FLOAT,
    "duration": FlagKind.DURATION,
    "stringArray": FlagKind.STRING_ARRAY,
    "stringSlice": FlagKind.STRING_ARRAY,
    "numberArray": FlagKind.NUMBER_ARRAY,
    "intSlice": FlagKind.NUMBER_ARRAY,
    "int32Slice": FlagKind.NUMBER_ARRAY,
    "int64Slice": FlagKind.NUMBER_ARRAY,
    "uintSlice": FlagKind.NUMBER_ARRAY,
    "float32Slice": FlagKind.NUMBER_ARRAY,
    "float64Slice": FlagKind.NUMBER_ARRAY,
}


class FlagDescriptor(BaseModel):
    """A single declared flag of a command.

    ``name`` is the kebab-case long name without leading dashes and is what
    appears on the command line (``--<name>``).
    """

    model_config = ConfigDict(frozen=True)

    name: str
    kind: FlagKind = FlagKind.STRING
    hidden: bool = False
    usage: str = ""
    default: Any = None
    shorthand: Optional[str] = None

    @field_validator("kind", mode="before")
    @classmethod
    def _parse_kind(cls, value: Any) -> FlagKind:
        return FlagKind.parse(value)


class CommandNode(BaseModel):
    """One node of the command tree.

    Leaf commands have ``runnable=True``; pure grouping nodes only hold
    children. ``inherited_flags`` are flags declared on an ancestor that the
    command also accepts (persistent flags).
    """

    name: str
    short: str = ""
    long: str = ""
    example: str = ""
    annotations: dict[str, str] = Field(default_factory=dict)
    flags: list[FlagDescriptor] = Field(default_factory=list)
    inherited_flags: list[FlagDescriptor] = Field(default_factory=list)
    children: list[CommandNode] = Field(default_factory=list)
    runnable: bool = False

    def lookup_flag(self, name: str) -> Optional[FlagDescriptor]:
        """Return the flag called *name* (local first, hidden included)."""
        for flag in self.flags:
            if flag.name == name:
                return flag
        for flag in self.inherited_flags:
            if flag.name == name:
                return flag
        return None

    def all_flags(self) -> list[FlagDescriptor]:
        """Local flags then inherited flags not shadowed by a local one."""
        local_names = {f.name for f in self.flags}
        return list(self.flags) + [
            f for f in self.inherited_flags if f.name not in local_names
        ]


# --- Bridge ---


class ToolDescriptor(BaseModel):
    """A leaf command exposed as a tool.

    ``parameters`` is the JSON-schema object sent as the tool's
    ``inputSchema``; ``path`` is the command path used to execute it.
    ``flag_options`` maps each ``flags`` property to the option it emits.
    """

    name: str
    description: str
    destructive: bool = True
    parameters: dict[str, Any]
    path: tuple[str, ...] = ()
    flag_options: dict[str, str] = Field(default_factory=dict)


class ResponseConfig(BaseModel):
    """Response-shaping options extracted from a tool call."""

    limit: int = DEFAULT_RESPONSE_LIMIT
    offset: int = 0


class ExecutionResult(BaseModel):
    """Combined output of one command invocation."""

    output: str = ""
    failed: bool = False
    exit_code: Optional[int] = None


class NavigationHints(BaseModel):
    """Pre-computed offsets for moving around truncated output.

    These are hints, not validated bounds: ``to_end`` and ``prev_page`` may
    be negative and must be clamped by the consumer.
    """

    to_beginning: int = 0
    to_end: int
    next_page: int
    prev_page: int


class PaginationMetadata(BaseModel):
    """Where the returned slice sits within the full command output."""

    total_size: int
    limit: int
    offset: int
    actual_start: int
    actual_end: int
    actual_size: int
    truncated: bool
    navigation_hints: Optional[NavigationHints] = None
    usage_guide: Optional[str] = None
