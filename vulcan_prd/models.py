"""Data models for the registry, publish requests/results and remote objects (Pydantic)."""

from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RegistryEntry(BaseModel):
    """One published PRD as listed in registry.json."""

    product_name: str = Field(..., description="Human-readable product name; match key")
    domain: str = Field(..., description="Business domain, e.g. analytics")
    owner_team: str = Field(default="", description="Owning team")
    source_repo: str = Field(default="", description="Repository the PRD was published from")
    prd_path: str = Field(..., description="prds/{domain}/{slug}.md; match key")
    tags: List[str] = Field(default_factory=list, description="Free-form tags")
    created_at: str | None = Field(default=None, description="ISO-8601 UTC timestamp of first publish")
    updated_at: str | None = Field(default=None, description="ISO-8601 UTC timestamp of last publish")

    # Keys written by other tools survive a load/dump cycle
    model_config = ConfigDict(extra="allow")

    @field_validator("owner_team", "source_repo", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("tags", mode="before")
    @classmethod
    def _null_tags(cls, value: Any) -> Any:
        return [] if value is None else value

    def matches(self, prd_path: str, product_name: str) -> bool:
        """Same document: equal path, or equal product name across any path."""
        return self.prd_path == prd_path or self.product_name == product_name


class Registry(BaseModel):
    """registry.json: versioned, ordered list of entries."""

    version: str = "1"
    items: List[RegistryEntry] = Field(default_factory=list)

    model_config = ConfigDict(extra="allow")

    @field_validator("version", mode="before")
    @classmethod
    def _version_as_str(cls, value: Any) -> Any:
        # Hand-edited registries sometimes carry "version": 1
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class PublishRequest(BaseModel):
    """Input to publish()."""

    file: str = Field(..., description="Path to the PRD markdown file")
    domain: str
    product_name: str | None = None
    owner_team: str | None = None
    source_repo: str | None = None
    tags: List[str] | None = None
    prd_repo: str | None = Field(default=None, description='"owner/repo" or full GitHub URL')
    base_branch: str = "main"
    dry_run: bool = False


class PublishResult(BaseModel):
    """Outcome of publish(). Failures carry a single error message."""

    success: bool
    pr_url: str | None = None
    pr_number: int | None = None
    error: str | None = None
    dry_run: bool = False
    prd_path: str | None = None
    branch: str | None = None
    is_update: bool | None = None
    warnings: List[str] = Field(default_factory=list)


class FileChange(BaseModel):
    """One file write on the publish branch."""

    path: str
    content: str
    message: str


class PR(BaseModel):
    """Pull request as returned by the platform."""

    number: int
    title: str
    body: str = ""
    head_branch: str
    base_branch: str
    state: str
    html_url: str | None = None


class AccessReport(BaseModel):
    """Result of a token access preflight on a repository."""

    has_read: bool
    has_write: bool
    error: str | None = None
