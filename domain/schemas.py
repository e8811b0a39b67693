"""Pydantic models for taxonomy nodes, catalog payloads and import progress."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator


class TaxonomyNode(BaseModel):
    """One entry of the source code list (Thema-style field names on input)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    code: str = Field(..., alias="CodeValue", min_length=1, description="Unique code of the node.")
    description: str = Field(..., alias="CodeDescription", min_length=1)
    notes: str = Field(default="", alias="CodeNotes")
    parent_code: str = Field(
        default="",
        alias="CodeParent",
        description="Code of the parent node. Empty string means the node is a root.",
    )
    issue_number: int = Field(..., alias="IssueNumber")
    modified: str | int | float = Field(..., alias="Modified")

    @property
    def is_root(self) -> bool:
        return self.parent_code == ""


class ImportStatus(str, Enum):
    """Processing status of a node in the progress ledger."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class ProgressRecord(BaseModel):
    """Durable per-node progress entry, keyed by code."""

    code: str = Field(..., min_length=1)
    parent_code: str | None = None
    status: ImportStatus = ImportStatus.PENDING
    remote_id: int | None = None
    error: str | None = None
    retry_count: int = Field(default=0, ge=0)
    created_at: str | None = None
    updated_at: str | None = None

    @model_validator(mode="after")
    def _validate(self) -> "ProgressRecord":
        if self.status is ImportStatus.COMPLETED and self.remote_id is None:
            raise ValueError(f"Record {self.code!r}: status=completed requires remote_id")
        if self.status is not ImportStatus.COMPLETED and self.remote_id is not None:
            raise ValueError(f"Record {self.code!r}: remote_id is only allowed when status=completed")
        if self.status is ImportStatus.FAILED and not self.error:
            raise ValueError(f"Record {self.code!r}: status=failed requires an error message")
        return self


class CategoryUrl(BaseModel):
    path: str
    is_customized: bool = True


class CategoryPayload(BaseModel):
    """Category entity sent to the catalog create endpoint."""

    name: str
    description: str | None = None
    tree_id: int
    parent_id: int | None = None
    is_visible: bool = True
    url: CategoryUrl | None = None

    def to_request_json(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)


class NodeResult(BaseModel):
    """Terminal outcome of one node within a run."""

    code: str
    remote_id: int | None = None
    error: str | None = None
    cached: bool = Field(
        default=False,
        description="True when the node was already completed in the ledger and no remote call was made.",
    )

    @property
    def ok(self) -> bool:
        return self.error is None and self.remote_id is not None


class ImportReport(BaseModel):
    """Run-level outcome of an import."""

    total_input: int = 0
    results: list[NodeResult] = Field(default_factory=list)
    unresolved_codes: list[str] = Field(
        default_factory=list,
        description="Codes left without a terminal outcome because no processing order exists (cycle).",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.ok)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.ok)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def cached(self) -> int:
        return sum(1 for r in self.results if r.cached)

    @property
    def errors(self) -> dict[str, str]:
        return {r.code: r.error for r in self.results if r.error is not None}

    def result_for(self, code: str) -> NodeResult | None:
        for r in self.results:
            if r.code == code:
                return r
        return None
