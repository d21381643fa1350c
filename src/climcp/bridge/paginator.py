"""Slice command output into a bounded page with navigation metadata.

Positions are counted in characters (Unicode code points), never bytes, so a
multi-byte character is never split. The calling agent cannot see the full
output, so every page reports where it sits and, when output was cut, offsets
for reaching the beginning, the end (where errors usually are) and the
neighbouring pages.
"""

from __future__ import annotations

from climcp.models import NavigationHints, PaginationMetadata, ResponseConfig

USAGE_GUIDE = (
    "To navigate: use 'to_end' to jump to the end where failures typically "
    "occur, 'next_page' for the next section, or a negative offset to read "
    "from the end (offset = -N returns the last N characters)."
)


def paginate(output: str, config: ResponseConfig) -> tuple[str, PaginationMetadata]:
    """Return the page of *output* selected by *config* and its metadata.

    A negative ``offset`` counts from the end like ``tail``. Out-of-range
    values are clamped, never rejected; ``limit`` and ``offset`` in the
    metadata echo what was requested.
    """
    total = len(output)
    if config.offset < 0:
        start = max(total + config.offset, 0)
    else:
        start = min(config.offset, total)
    end = min(start + max(config.limit, 0), total)

    page = output[start:end]
    truncated = start > 0 or end < total

    metadata = PaginationMetadata(
        total_size=total,
        limit=config.limit,
        offset=config.offset,
        actual_start=start,
        actual_end=end,
        actual_size=len(page),
        truncated=truncated,
    )
    if truncated:
        metadata.navigation_hints = NavigationHints(
            to_beginning=0,
            to_end=total - config.limit,
            next_page=end,
            prev_page=start - config.limit,
        )
        metadata.usage_guide = USAGE_GUIDE
    return page, metadata
