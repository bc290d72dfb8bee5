"""Rank deltas between two states of a query cursor."""

from pathlib import PurePath

from ..entities.result import ChangeRecord


def compute_changes(
    previous: dict[str, tuple[int, float]],
    ranked: list[tuple[str, float]],
) -> list[ChangeRecord]:
    """Changes a client holding ``previous`` must apply to reach ``ranked``.

    Entries whose rank and score are both unchanged are omitted. Paths
    absent from ``previous`` are emitted as insertions.

    Args:
        previous: ``path -> (rank, score)`` the client already holds
        ranked: Current ``(path, score)`` list, best first

    Returns:
        Change records in rank order
    """
    changes = []
    for rank, (path, score) in enumerate(ranked, start=1):
        old = previous.get(path)
        if old is not None and old == (rank, score):
            continue
        changes.append(
            ChangeRecord(
                rank=rank,
                old_rank=old[0] if old is not None else None,
                name=PurePath(path).name,
                path=path,
                score=score,
            )
        )
    return changes
