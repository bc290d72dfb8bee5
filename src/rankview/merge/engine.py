"""Rank-merge engine: folds one batch of rank changes into a ranked list.

A batch carries two kinds of records:

- insertions (``old_rank is None``): entries the session has never seen
- moves (``old_rank`` set): entries already in the list changing position

Placing an entry into a slot may evict the slot's occupant. When the
occupant itself has a pending move, it is carried on to its destination,
possibly evicting another occupant, and so on. Following these displacement
chains resolves swaps and longer rotations in a single pass with no
auxiliary storage beyond the entry currently in hand.

The engine never mutates the list it is given. The returned list is always
settled: ``result[i].rank == i + 1`` for every index.
"""

from collections.abc import Sequence

from loguru import logger

from ..entities.result import ChangeRecord, ResolvedResult
from ..errors import MalformedBatchError

Slot = ResolvedResult | None


def is_settled(results: Sequence[ResolvedResult | None]) -> bool:
    """Return True if every slot is occupied and ``rank == index + 1``."""
    return all(r is not None and r.rank == i + 1 for i, r in enumerate(results))


def merge(
    current: Sequence[ResolvedResult],
    total_length: int,
    changes: Sequence[ChangeRecord],
) -> list[ResolvedResult]:
    """Apply one batch of changes and return the new settled list.

    Args:
        current: Settled list before the batch
        total_length: Length of the list once the batch is applied
        changes: Change records in batch order

    Returns:
        A new list of ``total_length`` settled entries

    Raises:
        MalformedBatchError: If the batch cannot be applied without leaving
            gaps, duplicates or dropped entries
    """
    _validate_batch(current, total_length, changes)

    buffer: list[Slot] = list(current)
    buffer.extend([None] * (total_length - len(current)))

    insertions = [c for c in changes if c.is_insertion]
    # Insertion-ordered, so leftover moves run in batch order
    moves: dict[int, ChangeRecord] = {c.old_rank: c for c in changes if not c.is_insertion}
    placed: set[int] = set()

    for insertion in insertions:
        _place_and_resolve_chain(buffer, insertion, moves, placed)

    while moves:
        old_rank = next(iter(moves))
        move = moves.pop(old_rank)
        if buffer[old_rank - 1] is None:
            raise MalformedBatchError(
                "Move references an empty slot",
                details={"old_rank": old_rank, "rank": move.rank},
            )
        buffer[old_rank - 1] = None
        _place_and_resolve_chain(buffer, move, moves, placed)

    gaps = [i + 1 for i, slot in enumerate(buffer) if slot is None]
    if gaps:
        raise MalformedBatchError(
            "Batch leaves unoccupied ranks",
            details={"missing_ranks": gaps[:10], "total_length": total_length},
        )

    logger.debug(
        f"Merged batch: {len(insertions)} insertions, "
        f"{len(changes) - len(insertions)} moves, "
        f"length {len(current)} -> {total_length}"
    )
    return buffer  # type: ignore[return-value]


def _place_and_resolve_chain(
    buffer: list[Slot],
    item: ChangeRecord,
    moves: dict[int, ChangeRecord],
    placed: set[int],
) -> None:
    """Place ``item`` and carry every evicted occupant to its pending destination."""
    current: ChangeRecord | None = item

    while current is not None:
        target = current.rank - 1
        if target in placed:
            raise MalformedBatchError(
                "Two entries were placed at the same rank",
                details={"rank": current.rank, "path": current.path},
            )

        displaced = buffer[target]
        buffer[target] = current.resolve(rank=target + 1)
        placed.add(target)

        if displaced is None:
            current = None
        elif displaced.rank in moves:
            current = moves.pop(displaced.rank)
        else:
            raise MalformedBatchError(
                "Placement evicts an entry that has no destination",
                details={"rank": displaced.rank, "path": displaced.path, "evicted_by": current.path},
            )


def _validate_batch(
    current: Sequence[ResolvedResult],
    total_length: int,
    changes: Sequence[ChangeRecord],
) -> None:
    if not is_settled(current):
        raise MalformedBatchError(
            "Cannot merge into a list that is not settled",
            details={"length": len(current)},
        )

    if total_length < len(current):
        raise MalformedBatchError(
            "Batch shrinks the result list",
            details={"current_length": len(current), "total_length": total_length},
        )

    destinations: set[int] = set()
    sources: set[int] = set()
    for change in changes:
        if change.rank > total_length:
            raise MalformedBatchError(
                "Change rank is outside the result list",
                details={"rank": change.rank, "total_length": total_length},
            )
        if change.rank in destinations:
            raise MalformedBatchError(
                "Duplicate destination rank in batch",
                details={"rank": change.rank},
            )
        destinations.add(change.rank)

        if change.old_rank is None:
            continue
        if change.old_rank > len(current):
            raise MalformedBatchError(
                "Move references a rank that does not exist yet",
                details={"old_rank": change.old_rank, "current_length": len(current)},
            )
        if change.old_rank in sources:
            raise MalformedBatchError(
                "Duplicate source rank in batch",
                details={"old_rank": change.old_rank},
            )
        sources.add(change.old_rank)
