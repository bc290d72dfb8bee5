"""Result entities for a progressively delivered ranked result set."""

from pathlib import PurePath

from pydantic import BaseModel, Field, model_validator


class ResolvedResult(BaseModel):
    """A settled entry of a session's ranked list.

    Attributes:
        rank: 1-based position in the ranked list (``rank == index + 1``)
        name: Display name of the file
        path: Location of the file
        score: Relevance score reported by the backend
    """

    rank: int = Field(..., ge=1)
    name: str
    path: str
    score: float

    model_config = {"frozen": True}

    def with_rank(self, rank: int) -> "ResolvedResult":
        return self.model_copy(update={"rank": rank})


class ChangeRecord(BaseModel):
    """One change to the ranked list, as emitted by the backend.

    ``old_rank`` is None for an entry the session has never seen before.
    Otherwise the entry at ``old_rank`` moves to ``rank``; when both are
    equal only its payload (usually the score) changed.
    """

    rank: int = Field(..., ge=1)
    old_rank: int | None = Field(default=None, ge=1)
    name: str = ""
    path: str
    score: float

    model_config = {"frozen": True}

    @model_validator(mode="before")
    @classmethod
    def _default_name(cls, data):
        if isinstance(data, dict) and not data.get("name") and data.get("path"):
            data = {**data, "name": PurePath(data["path"]).name}
        return data

    @property
    def is_insertion(self) -> bool:
        return self.old_rank is None

    def resolve(self, rank: int | None = None) -> ResolvedResult:
        """Materialize the record as a settled entry."""
        return ResolvedResult(
            rank=rank if rank is not None else self.rank,
            name=self.name,
            path=self.path,
            score=self.score,
        )


class BatchResponse(BaseModel):
    """One response of the cursor-based query contract.

    Attributes:
        total_length: Length of the ranked list once this batch is applied
        changes: Ordered change records
        next_cursor: Token for the next request, None once the stream is exhausted
    """

    total_length: int = Field(..., ge=0, validation_alias="results_len")
    changes: list[ChangeRecord] = Field(default_factory=list, validation_alias="changed_results")
    next_cursor: str | None = Field(default=None, validation_alias="cursor_id")

    model_config = {"frozen": True, "populate_by_name": True}

    @property
    def is_terminal(self) -> bool:
        return self.next_cursor is None

    @property
    def insertions(self) -> list[ChangeRecord]:
        return [c for c in self.changes if c.is_insertion]

    @property
    def moves(self) -> list[ChangeRecord]:
        return [c for c in self.changes if not c.is_insertion]


class QueryRequest(BaseModel):
    """A request for the next batch of a query's result stream.

    ``cursor`` is None for the first request of a stream.
    """

    query_text: str
    cursor: str | None = None

    model_config = {"frozen": True}

    def to_payload(self) -> dict:
        """Render the wire body expected by the query endpoint."""
        return {"query": self.query_text, "cursor_id": self.cursor}
