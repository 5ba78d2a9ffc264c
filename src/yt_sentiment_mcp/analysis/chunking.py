"""Fixed-size, order-preserving comment chunking."""

from __future__ import annotations

from collections.abc import Sequence

from ..models.video import Comment

COMMENT_CHUNK_SIZE = 100


def chunk_comments(
    comments: Sequence[Comment], size: int = COMMENT_CHUNK_SIZE,
) -> list[tuple[Comment, ...]]:
    """Split *comments* into contiguous chunks of *size*.

    Concatenating the chunks in order reproduces the input exactly. Only
    the last chunk may be shorter; an empty input yields no chunks.

    Raises:
        ValueError: If *size* is not positive.
    """
    if size < 1:
        raise ValueError(f"chunk size must be >= 1, got {size}")
    return [tuple(comments[i:i + size]) for i in range(0, len(comments), size)]
