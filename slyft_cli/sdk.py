"""
Slyft SDK - High-level client with nice ergonomics.

This layer provides a clean, typed interface for the Slyft backend.
Built on top of the core APIClient and the generic decoder; it never
prints, so the CLI decides how to show results.
"""

import base64
import builtins
import http.client
import logging
import mimetypes
import shutil
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

from slyft_cli.config import Settings
from slyft_cli.core.auth import Credentials, clear_credentials, read_credentials, save_credentials
from slyft_cli.core.client import (
    HTTP_CREATED,
    HTTP_NO_CONTENT,
    HTTP_OK,
    APIClient,
    APIError,
    TransportError,
    ValidationError,
    status_error,
)
from slyft_cli.core.response import decode, decode_one, expect_status
from slyft_cli.core.types import Asset, Job, Project
from slyft_cli.selection import read_user_int_input, select

logger = logging.getLogger(__name__)

JOB_KINDS = ("build", "validate")
POLL_INTERVAL = 5
DEFAULT_WAIT = 30

Display = Callable[[Sequence], None]


class SlyftClient:
    """
    High-level Slyft API client with typed methods.

    Example:
        client = SlyftClient(load_settings())

        project = client.projects.list()[0]
        job = client.jobs.create("build", project)
        outcome = client.jobs.wait_for_completion(job, wait=60)

    """

    def __init__(self, settings: Settings, api: APIClient | None = None):
        """
        Initialize the Slyft client.

        Args:
            settings: Process-wide settings
            api: Transport override, mainly for tests

        """
        self.settings = settings
        self._client = api or APIClient(
            settings.base_url,
            credentials=lambda: read_credentials(settings.credentials_path),
        )

        # Sub-clients for different resources
        self.users = UserOperations(self._client, settings.credentials_path)
        self.projects = ProjectOperations(self._client)
        self.assets = AssetOperations(self._client)
        self.jobs = JobOperations(self._client)


# =============================================================================
# User Operations
# =============================================================================


class UserOperations:
    """Sign in and out."""

    def __init__(self, client: APIClient, credentials_path: Path):
        self._client = client
        self.credentials_path = credentials_path

    def login(self, email: str, password: str) -> Credentials:
        """
        Sign in and persist the returned token triple.

        Returns:
            The stored Credentials

        """
        resp = self._client.send(
            "/v1/auth/sign_in",
            "POST",
            {"email": email, "password": password},
            authenticated=False,
        )
        with resp:
            expect_status(resp, HTTP_OK)
            creds = Credentials.from_headers(resp.headers)
        if not creds.good_for_login():
            raise APIError("Sign in succeeded but no token was returned", status=resp.status)
        save_credentials(creds, self.credentials_path)
        return creds

    def logout(self) -> bool:
        """Forget stored credentials."""
        return clear_credentials(self.credentials_path)

    def current(self) -> Credentials:
        """Read stored credentials."""
        return read_credentials(self.credentials_path)


# =============================================================================
# Project Operations
# =============================================================================


class ProjectOperations:
    """Operations for managing projects."""

    def __init__(self, client: APIClient):
        self._client = client

    def list(self, name: str = "") -> builtins.list[Project]:
        """
        List projects, optionally only those whose name contains ``name``.

        Args:
            name: Case-insensitive name fragment; empty keeps all

        Returns:
            Projects in server order

        """
        with self._client.get("/v1/projects") as resp:
            projects = decode(resp, HTTP_OK, Project, many=True)
        needle = name.strip().lower()
        if needle:
            projects = [p for p in projects if needle in p.name.lower()]
        return projects

    def get(self, project_id: int) -> Project:
        """Get a project by ID."""
        with self._client.get(f"/v1/projects/{project_id}") as resp:
            return decode_one(resp, HTTP_OK, Project)

    def create(self, name: str) -> Project:
        """Create a new project."""
        name = name.strip()
        if not name:
            raise ValidationError("A project needs a name")
        with self._client.post("/v1/projects", {"project": {"name": name}}) as resp:
            return decode_one(resp, HTTP_CREATED, Project)

    def choose(
        self,
        name: str,
        message: str,
        display: Display,
        read_choice: Callable[[str], int] = read_user_int_input,
    ) -> Project:
        """
        Pick one project whose name contains ``name``, asking when several match.

        Args:
            name: Case-insensitive name fragment; empty considers all projects
            message: Prompt text
            display: Renders the candidates
            read_choice: Reads the 1-based choice from the user

        Raises:
            NotFoundError: No project matches
            OutOfRangeError: The choice is not one of the listed numbers

        """
        return select(self.list(name), True, message, display, read_choice=read_choice, what="project")


# =============================================================================
# Asset Operations
# =============================================================================


def asset_payload(path: Path) -> dict:
    """Build the upload body: the file as a base64 data URL."""
    data = path.read_bytes()
    mime_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    encoded = base64.b64encode(data).decode("ascii")
    return {"asset": {"name": path.name, "asset": f"data:{mime_type};base64,{encoded}"}}


class AssetOperations:
    """Operations for managing assets (files)."""

    def __init__(self, client: APIClient):
        self._client = client

    def list(self, project: Project | None = None) -> builtins.list[Asset]:
        """
        List assets of ``project``, or all of the user's assets.

        Returns:
            Assets in server order

        """
        path = project.assets_url if project else "/v1/assets"
        with self._client.get(path) as resp:
            return decode(resp, HTTP_OK, Asset, many=True)

    def choose(
        self,
        project: Project | None,
        prompt: bool,
        message: str,
        display: Display,
        tail: int = 0,
        read_choice: Callable[[str], int] = read_user_int_input,
    ) -> Asset | None:
        """Show the assets of ``project`` (or all of them) and pick one, see ``select``."""
        return select(self.list(project), prompt, message, display, tail=tail, read_choice=read_choice, what="asset")

    def upload(self, file: str | Path, project: Project) -> Asset:
        """
        Upload a local file as a new asset.

        Args:
            file: Path of the file to upload
            project: Owning project

        Returns:
            The created Asset

        """
        path = Path(file)
        try:
            payload = asset_payload(path)
        except OSError as e:
            raise ValidationError(f"Cannot read {path}: {e.strerror or e}")
        with self._client.post(project.assets_url, payload) as resp:
            return decode_one(resp, HTTP_CREATED, Asset)

    def download(self, name: str, project: Project, destination: str | Path = ".") -> Path:
        """
        Download the asset called ``name`` into ``destination``.

        Returns:
            Path of the written file

        """
        target = Path(destination) / Path(name).name
        with self._client.get(project.assetstore_url, {"asset_name": name}) as resp:
            expect_status(resp, HTTP_OK)
            try:
                with open(target, "wb") as out:
                    shutil.copyfileobj(resp.stream, out)
            except http.client.HTTPException as e:
                raise TransportError(f"Failed to read asset body: {e}", status=resp.status)
            except OSError as e:
                raise APIError(f"Writing asset file failed: {e}")
        return target

    def delete(self, asset: Asset) -> bool:
        """Delete an asset."""
        with self._client.delete(asset.endpoint) as resp:
            if resp.status not in (HTTP_OK, HTTP_NO_CONTENT):
                raise status_error(resp.status, HTTP_NO_CONTENT)
        return True


# =============================================================================
# Job Operations
# =============================================================================


COMPLETED = "completed"
FAILED = "failed"
TIMED_OUT = "timed_out"
CANCELLED = "cancelled"


@dataclass(frozen=True)
class JobWaitResult:
    """How waiting for a job ended."""

    state: str
    job: Job
    polls: int = 0

    @property
    def completed(self) -> bool:
        return self.state == COMPLETED


class JobOperations:
    """Operations for creating and following jobs."""

    def __init__(self, client: APIClient):
        self._client = client
        self._cancelled = threading.Event()

    def list(self, project: Project | None = None) -> builtins.list[Job]:
        """List jobs of ``project``, or all of the user's jobs."""
        path = project.jobs_url if project else "/v1/jobs"
        with self._client.get(path) as resp:
            return decode(resp, HTTP_OK, Job, many=True)

    def choose(
        self,
        project: Project | None,
        prompt: bool,
        message: str,
        display: Display,
        read_choice: Callable[[str], int] = read_user_int_input,
    ) -> Job | None:
        """Show the jobs of ``project`` (or all of them) and pick one."""
        return select(self.list(project), prompt, message, display, read_choice=read_choice, what="job")

    def get(self, project_id: int, job_id: int) -> Job:
        """Get a job by ID."""
        with self._client.get(f"/v1/projects/{project_id}/jobs/{job_id}") as resp:
            return decode_one(resp, HTTP_OK, Job)

    def create(self, kind: str, project: Project) -> Job:
        """
        Start a build or validate job.

        Args:
            kind: "build" or "validate"
            project: Project to work on

        Returns:
            The Job as first reported by the server

        """
        if kind not in JOB_KINDS:
            raise ValidationError(f"Unknown job kind {kind!r}", details={"kinds": list(JOB_KINDS)})
        body = {"job": {"kind": kind, "project_id": project.id}}
        with self._client.post(project.jobs_url, body) as resp:
            job = decode_one(resp, HTTP_CREATED, Job)
        logger.debug("created job=%r", job)
        return job

    def cancel(self) -> None:
        """Interrupt a running wait_for_completion."""
        self._cancelled.set()

    def wait_for_completion(
        self,
        job: Job,
        wait: int = DEFAULT_WAIT,
        poll_interval: int = POLL_INTERVAL,
        sleep: Callable[[float], object] | None = None,
        on_poll: Callable[[Job | None], None] | None = None,
    ) -> JobWaitResult:
        """
        Poll ``job`` until it is processed, fails, or ``wait`` seconds are used up.

        Each round sleeps ``poll_interval`` first, then re-fetches the job. A
        failed fetch only costs that round.

        Args:
            job: The job returned by create()
            wait: Total budget in seconds
            poll_interval: Seconds between polls
            sleep: Suspension function; a truthy return means "cancelled"
            on_poll: Called after each poll with the fetched job (None on a miss)

        Returns:
            JobWaitResult; running out of budget is reported, not raised

        """
        self._cancelled.clear()
        if sleep is None:
            sleep = self._cancelled.wait
        remaining = wait
        polls = 0
        latest = job

        while remaining > 0:
            if sleep(poll_interval) or self._cancelled.is_set():
                logger.debug("waiting for job %d cancelled", job.id)
                return JobWaitResult(CANCELLED, latest, polls)
            remaining -= poll_interval
            polls += 1

            try:
                with self._client.get(job.endpoint) as resp:
                    fetched = decode_one(resp, HTTP_OK, Job)
            except APIError as e:
                logger.debug("poll %d of job %d missed: %s", polls, job.id, e.message)
                if on_poll:
                    on_poll(None)
                continue

            latest = fetched
            logger.debug("status=%s", fetched.status)
            if on_poll:
                on_poll(fetched)
            if fetched.is_processed:
                return JobWaitResult(COMPLETED, fetched, polls)
            if fetched.is_failed:
                return JobWaitResult(FAILED, fetched, polls)

        return JobWaitResult(TIMED_OUT, latest, polls)
