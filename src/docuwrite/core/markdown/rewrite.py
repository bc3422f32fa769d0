from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from docuwrite.errors import DocuWriteError

from .blocks import StructuralBlock


@dataclass(frozen=True)
class Replacement:
    text: str
    output_ref: str


ReplacementProducer = Callable[[StructuralBlock, str], Replacement]


def rewrite_blocks(
    text: str,
    blocks: Sequence[StructuralBlock],
    produce: ReplacementProducer,
) -> str:
    """
    Replace each block's span with derived content, keeping later spans valid.

    Blocks must be ordered and non-overlapping over ``text``. For block ``i``
    the producer receives the block and its current span text. On success the
    replacement is spliced in, the block is marked ``succeeded`` with its
    ``output_ref``, its span is moved to cover the replacement, and the length
    delta is added to every block after ``i``. A producer raising
    ``DocuWriteError`` marks the block failed and leaves text and offsets
    untouched; the pass continues with the next block.

    Args:
        text: Snapshot the blocks were scanned from.
        blocks: Blocks to rewrite, mutated in place.
        produce: Callable returning the ``Replacement`` for one block.

    Returns:
        str: The rewritten text. Identical to ``text`` when nothing changed.
    """
    current = text
    for idx, block in enumerate(blocks):
        start, end = block.start_offset, block.end_offset
        try:
            replacement = produce(block, current[start:end])
        except DocuWriteError:
            block.succeeded = False
            continue

        current = current[:start] + replacement.text + current[end:]
        block.succeeded = True
        block.output_ref = replacement.output_ref
        block.end_offset = start + len(replacement.text)

        delta = len(replacement.text) - (end - start)
        if delta:
            for later in blocks[idx + 1:]:
                later.start_offset += delta
                later.end_offset += delta
    return current


__all__ = ["Replacement", "ReplacementProducer", "rewrite_blocks"]
