"""Entities exchanged between the query backend and a session."""

from .result import BatchResponse, ChangeRecord, QueryRequest, ResolvedResult

__all__ = ["BatchResponse", "ChangeRecord", "QueryRequest", "ResolvedResult"]
