"""
Core types mirroring the Slyft backend resources.

Every record is a snapshot of server state. Nothing here is mutated after
decoding; a fresh listing or poll always produces new instances.
"""

from dataclasses import asdict, dataclass, field
from typing import Any

# =============================================================================
# Project Types
# =============================================================================


@dataclass(frozen=True)
class Project:
    """A Slyft project, the workspace that owns assets and jobs."""

    id: int
    name: str
    lock: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def endpoint(self) -> str:
        return f"/v1/projects/{self.id}"

    @property
    def assets_url(self) -> str:
        return f"{self.endpoint}/assets"

    @property
    def assetstore_url(self) -> str:
        return f"{self.endpoint}/assetstore"

    @property
    def jobs_url(self) -> str:
        return f"{self.endpoint}/jobs"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Project":
        """Create from API response dict."""
        return cls(
            id=data["id"],
            name=data.get("name") or "",
            lock=data.get("lock"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# =============================================================================
# Asset Types
# =============================================================================


@dataclass(frozen=True)
class Asset:
    """A file uploaded to a project."""

    id: int
    name: str
    project_id: int
    project_name: str = ""
    origin: str = ""
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def endpoint(self) -> str:
        return f"/v1/projects/{self.project_id}/assets/{self.id}"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Asset":
        """Create from API response dict."""
        return cls(
            id=data["id"],
            name=data.get("name") or "",
            project_id=data["project_id"],
            project_name=data.get("project_name") or "",
            origin=data.get("origin") or "",
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# =============================================================================
# Job Types
# =============================================================================


PROCESSED = "processed"
FAILURE_STATUSES = frozenset({"failed", "error"})


@dataclass(frozen=True)
class JobResult:
    """Result payload attached to a job once the backend has worked on it."""

    message: str = ""
    status: int = 0
    assets: list[str] = field(default_factory=list)
    details: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "JobResult":
        """Create from the camel-cased ``results`` object of a job."""
        data = data or {}
        return cls(
            message=data.get("resultMessage") or "",
            status=data.get("resultStatus") or 0,
            assets=list(data.get("resultAssets") or []),
            details=list(data.get("resultDetails") or []),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "resultMessage": self.message,
            "resultStatus": self.status,
            "resultAssets": list(self.assets),
            "resultDetails": list(self.details),
        }


@dataclass(frozen=True)
class Job:
    """A build or validate run of a project."""

    id: int
    kind: str
    status: str
    project_id: int
    project_name: str = ""
    results: JobResult = field(default_factory=JobResult)
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def endpoint(self) -> str:
        return f"/v1/projects/{self.project_id}/jobs/{self.id}"

    @property
    def is_processed(self) -> bool:
        """Check if the backend finished the job successfully."""
        return self.status == PROCESSED

    @property
    def is_failed(self) -> bool:
        """Check if the backend reported the job as failed."""
        return self.status in FAILURE_STATUSES

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Job":
        """Create from API response dict."""
        return cls(
            id=data["id"],
            kind=data.get("kind") or "",
            status=data.get("status") or "",
            project_id=data["project_id"],
            project_name=data.get("project_name") or "",
            results=JobResult.from_dict(data.get("results")),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind,
            "status": self.status,
            "project_id": self.project_id,
            "project_name": self.project_name,
            "results": self.results.to_dict(),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
