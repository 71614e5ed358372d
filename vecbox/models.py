"""
Data models for vector storage.
These define the shape of data flowing between the store, the embedding
provider and callers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from uuid import uuid4


@dataclass
class Document:
    """A piece of text plus its metadata. Search hits also carry a score."""
    page_content: str = ""
    metadata: dict[str, str] | None = None
    id: str | None = None
    similarity_score: float | None = None  # Only populated on search results

    def resolve_id(self) -> str:
        """Return the document id, generating one if the caller left it empty."""
        return self.id or uuid4().hex


@dataclass(frozen=True)
class VectorRecord:
    """One row destined for the vectors table, with the metadata that follows it."""
    id: str
    values: list[float]
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class QueryParameters:
    """Everything one add_documents call needs to bind two INSERT statements."""
    records: list[VectorRecord] = field(default_factory=list)
    vector_parameters: str = ""
    metadata_parameters: str = ""
    metadata_size: int = 0


class ResultStatus(str, Enum):
    OK = "ok"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass
class InsertResult:
    """Outcome of add_documents. Truthy only when every row was written."""
    status: ResultStatus = ResultStatus.OK
    vectors_written: int = 0
    metadata_written: int = 0
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.status is ResultStatus.OK

    def __bool__(self) -> bool:
        return self.ok


@dataclass
class SearchResult:
    """
    Outcome of a similarity search.

    Reads like a list of documents so callers that only want the hits can
    iterate it directly; status and error tell a complete result apart from
    a degraded one.
    """
    documents: list[Document] = field(default_factory=list)
    status: ResultStatus = ResultStatus.OK
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.status is ResultStatus.OK

    def __iter__(self):
        return iter(self.documents)

    def __len__(self) -> int:
        return len(self.documents)

    def __getitem__(self, index):
        return self.documents[index]
