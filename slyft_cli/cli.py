"""
Slyft CLI - Command-line interface for the Slyft build service.

This layer provides the user-facing commands, using the SDK layer for all
operations. It handles:
- Argument parsing
- Falling back to the locked project when none is named
- Interactive choice between several matching records
- Reporting every error with a short note on what was being done
"""

import argparse
import contextlib
import getpass
import json
import signal
import sys
from collections.abc import Callable, Sequence
from typing import Any, NoReturn

from slyft_cli import __version__
from slyft_cli.config import ConfigError, load_settings, read_project_lock, setup_logging, write_project_lock
from slyft_cli.core.errors import APIError, CLIError
from slyft_cli.core.types import Asset, Job, Project
from slyft_cli.display import (
    display_asset,
    display_assets,
    display_job,
    display_jobs,
    display_project,
    display_projects,
    is_tty,
)
from slyft_cli.sdk import CANCELLED, COMPLETED, DEFAULT_WAIT, FAILED, TIMED_OUT, SlyftClient

# =============================================================================
# Output Helpers
# =============================================================================


def json_output(data: Any, pretty: bool = False) -> None:
    """Print JSON output."""
    indent = 2 if pretty or is_tty() else None
    print(json.dumps(data, indent=indent, default=str))


def report_error(context: str, error: CLIError) -> NoReturn:
    """Tell the user what went wrong while doing ``context`` and exit."""
    if is_tty():
        print(f"{context}: {error.message}", file=sys.stderr)
    else:
        json_output({"context": context, **error.to_dict()})
    sys.exit(1)


def show(record: Project | Asset | Job) -> None:
    """Print one record as a table, or as JSON when piped."""
    if not is_tty():
        json_output(record.to_dict())
    elif isinstance(record, Project):
        display_project(record)
    elif isinstance(record, Asset):
        display_asset(record)
    else:
        display_job(record)


def listing(display: Callable[[Sequence], None]) -> Callable[[Sequence], None]:
    """Wrap a table renderer so piped output becomes a JSON array instead."""

    def render(records: Sequence) -> None:
        if is_tty():
            display(records)
        else:
            json_output({"data": [r.to_dict() for r in records], "total_count": len(records)})

    return render


def candidates(display: Callable[[Sequence], None]) -> Callable[[Sequence], None]:
    """Wrap a table renderer for choices; when piped the table goes to stderr so stdout stays JSON."""

    def render(records: Sequence) -> None:
        if is_tty():
            display(records)
        else:
            with contextlib.redirect_stdout(sys.stderr):
                display(records)

    return render


def done(message: str, data: dict[str, Any]) -> None:
    """Confirm a finished action: a sentence on a TTY, ``data`` as JSON when piped."""
    if is_tty():
        print(message)
    else:
        json_output(data)


# =============================================================================
# Choosing records
# =============================================================================


def project_name(args: argparse.Namespace) -> str:
    """The --project option, or the locked project when it is blank."""
    name = (getattr(args, "project", None) or "").strip()
    return name or read_project_lock()


def choose_project(client: SlyftClient, name: str, message: str) -> Project:
    return client.projects.choose(name, message, candidates(display_projects))


def choose_asset(
    client: SlyftClient,
    project: Project | None,
    prompt: bool,
    message: str = "",
    tail: int = 0,
) -> Asset | None:
    display = candidates(display_assets) if prompt else listing(display_assets)
    return client.assets.choose(project, prompt, message, display, tail=tail)


def choose_job(client: SlyftClient, project: Project | None, prompt: bool, message: str = "") -> Job | None:
    display = candidates(display_jobs) if prompt else listing(display_jobs)
    return client.jobs.choose(project, prompt, message, display)


# =============================================================================
# User Commands
# =============================================================================


def cmd_user_login(client: SlyftClient, args: argparse.Namespace) -> None:
    """Sign in and store the session tokens."""
    email = (args.email or "").strip() or input("Email: ").strip()
    password = getpass.getpass("Password: ")
    try:
        creds = client.users.login(email, password)
    except CLIError as e:
        report_error("Logging in", e)
    done(f"Logged in as {creds.uid}", {"uid": creds.uid})


def cmd_user_logout(client: SlyftClient, _args: argparse.Namespace) -> None:
    """Forget the stored session tokens."""
    removed = client.users.logout()
    done("Logged out" if removed else "You were not logged in", {"logged_out": removed})


def cmd_user_show(client: SlyftClient, _args: argparse.Namespace) -> None:
    """Show who is logged in."""
    try:
        creds = client.users.current()
    except CLIError as e:
        report_error("Reading credentials", e)
    if not creds.good_for_login():
        report_error("Reading credentials", CLIError("Stored credentials are incomplete"))
    done(f"Logged in as {creds.uid}", {"uid": creds.uid})


# =============================================================================
# Project Commands
# =============================================================================


def cmd_project_list(client: SlyftClient, _args: argparse.Namespace) -> None:
    """List your projects."""
    try:
        projects = client.projects.list()
    except CLIError as e:
        report_error("Listing projects", e)
    listing(display_projects)(projects)


def cmd_project_create(client: SlyftClient, args: argparse.Namespace) -> None:
    """Create a new project."""
    try:
        project = client.projects.create(args.name)
    except CLIError as e:
        report_error("Creating the project", e)
    show(project)


def cmd_project_lock(client: SlyftClient, args: argparse.Namespace) -> None:
    """Make a project the default for the current directory."""
    try:
        project = choose_project(client, project_name(args), "Which project shall be locked: ")
    except CLIError as e:
        report_error("Choosing the project", e)
    path = write_project_lock(project.name)
    done(f"Locked project {project.name!r} in {path}", {"locked": project.name, "path": str(path)})


def wait_for_job(client: SlyftClient, job: Job, wait: int) -> None:
    """Poll until the job finishes or ``wait`` seconds have passed; Ctrl-C stops waiting."""
    human = is_tty()
    if human:
        print(f"Waiting ({wait}s) for job completion..", end="", flush=True)

    def tick(_job: Job | None) -> None:
        if human:
            print(".", end="", flush=True)

    previous = signal.signal(signal.SIGINT, lambda _signum, _frame: client.jobs.cancel())
    try:
        outcome = client.jobs.wait_for_completion(job, wait=wait, on_poll=tick)
    finally:
        signal.signal(signal.SIGINT, previous)
    if human:
        print()

    if outcome.state == FAILED:
        if human:
            display_job(outcome.job)
        report_error(
            "Running the job",
            APIError(
                f"Job {job.id} failed: {outcome.job.results.message or outcome.job.status}",
                details={"state": outcome.state, "job": outcome.job.to_dict()},
            ),
        )

    if not human:
        json_output({"state": outcome.state, "job": outcome.job.to_dict()})
    elif outcome.state == COMPLETED:
        display_job(outcome.job)
    elif outcome.state == TIMED_OUT:
        print(f"Job {job.id} did not complete in time. Please check manually using `slyft project status`")
    else:
        print(f"Stopped waiting for job {job.id}. Please check manually using `slyft project status`")

    if outcome.state == CANCELLED:
        sys.exit(130)


def run_job(client: SlyftClient, args: argparse.Namespace, kind: str) -> None:
    try:
        project = choose_project(client, project_name(args), f"{kind} project: ")
    except CLIError as e:
        report_error("Choosing a project", e)

    try:
        job = client.jobs.create(kind, project)
    except CLIError as e:
        report_error("Creating the job", e)

    if is_tty():
        display_job(job)
    if args.wait > 0:
        wait_for_job(client, job, args.wait)
    elif not is_tty():
        json_output(job.to_dict())


def cmd_project_build(client: SlyftClient, args: argparse.Namespace) -> None:
    """Build a project."""
    run_job(client, args, "build")


def cmd_project_validate(client: SlyftClient, args: argparse.Namespace) -> None:
    """Validate a project."""
    run_job(client, args, "validate")


def cmd_project_status(client: SlyftClient, args: argparse.Namespace) -> None:
    """Show the jobs of a project, or of all projects."""
    name = project_name(args)
    if args.all or not name:
        try:
            choose_job(client, None, False)
        except CLIError as e:
            report_error("Choosing the job", e)
        return

    try:
        project = choose_project(client, name, "Which project's jobs would you like to see: ")
    except CLIError as e:
        report_error("Choosing the project", e)

    try:
        job = choose_job(client, project, True, "Select a job id to show more details: ")
    except CLIError as e:
        report_error("Selecting the job", e)
    show(job)


# =============================================================================
# Asset Commands
# =============================================================================


def cmd_asset_add(client: SlyftClient, args: argparse.Namespace) -> None:
    """Upload a file to a project."""
    try:
        project = choose_project(client, project_name(args), "Add asset to: ")
    except CLIError as e:
        report_error("Choosing the project", e)

    try:
        asset = client.assets.upload(args.file.strip(), project)
    except CLIError as e:
        report_error("Creating asset", e)
    show(asset)


def cmd_asset_list(client: SlyftClient, args: argparse.Namespace) -> None:
    """List the assets of a project, or all of yours."""
    project = None
    if not args.all:
        try:
            project = choose_project(client, project_name(args), "Which project's assets would you like to see: ")
        except CLIError as e:
            report_error("Choosing the project", e)

    try:
        choose_asset(client, project, False)
    except CLIError as e:
        report_error("Choosing the asset", e)


def cmd_asset_get(client: SlyftClient, args: argparse.Namespace) -> None:
    """Download an asset into the current directory."""
    try:
        project = choose_project(client, project_name(args), "Download asset from: ")
    except CLIError as e:
        report_error("Choosing the project", e)

    name = args.file.strip()
    try:
        path = client.assets.download(name, project)
    except CLIError as e:
        report_error("Downloading asset", e)
    done(f"Downloaded {path}", {"downloaded": str(path)})


def cmd_asset_delete(client: SlyftClient, args: argparse.Namespace) -> None:
    """Remove one of the most recent assets."""
    name = project_name(args)
    try:
        if args.all:
            asset = choose_asset(client, None, True, "Which one shall be deleted: ")
        elif not name:
            asset = choose_asset(client, None, True, "Which one shall be deleted: ", tail=args.count)
        else:
            try:
                project = choose_project(client, name, "Which project's assets would you like to see: ")
            except CLIError as e:
                report_error("Choosing the project", e)
            asset = choose_asset(client, project, True, "Which one shall be removed: ", tail=args.count)
    except CLIError as e:
        report_error("Choosing the asset", e)

    try:
        client.assets.delete(asset)
    except CLIError as e:
        report_error("Deleting the asset", e)
    done(f"Deleted asset {asset.name}", {"deleted": asset.to_dict()})


# =============================================================================
# Main CLI
# =============================================================================


def add_project_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--project", "-p", default="", help="Name (or part of it) of a project")


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="slyft",
        description="Slyft CLI - Command-line interface for the Slyft build service",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment:
  SLYFTBACKEND      Backend base URL (required)
  DEBUGLEVEL        Log level (DEBUG, INFO, WARNING, ...)
  SLYFT_CONFIG_DIR  Where credentials are stored (default ~/.slyft)

Examples:
  slyft user login --email me@example.com
  slyft project lock -p demo
  slyft project asset add -f schema.asn1
  slyft project build --wait 60
""",
    )
    parser.add_argument("--version", "-v", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # ========== User ==========
    user = subparsers.add_parser("user", aliases=["account"], help="Account management")
    user.set_defaults(func=lambda _c, _a: user.print_help())
    user_sub = user.add_subparsers(dest="subcommand")

    u_login = user_sub.add_parser("login", help="Log in and store the session")
    u_login.add_argument("--email", "-e", help="Account email (prompted if missing)")
    u_login.set_defaults(func=cmd_user_login)

    u_logout = user_sub.add_parser("logout", help="Forget the stored session")
    u_logout.set_defaults(func=cmd_user_logout)

    u_show = user_sub.add_parser("show", help="Show who is logged in")
    u_show.set_defaults(func=cmd_user_show)

    # ========== Projects ==========
    project = subparsers.add_parser("project", aliases=["p"], help="Project management")
    project.set_defaults(func=lambda _c, _a: project.print_help())
    project_sub = project.add_subparsers(dest="subcommand")

    p_list = project_sub.add_parser("list", aliases=["ls"], help="List your projects")
    p_list.set_defaults(func=cmd_project_list)

    p_create = project_sub.add_parser("create", aliases=["c"], help="Create a project")
    p_create.add_argument("name", help="Project name")
    p_create.set_defaults(func=cmd_project_create)

    p_lock = project_sub.add_parser("lock", help="Use a project by default in this directory")
    add_project_option(p_lock)
    p_lock.set_defaults(func=cmd_project_lock)

    for kind, func in (("build", cmd_project_build), ("validate", cmd_project_validate)):
        p_job = project_sub.add_parser(kind, help=f"Start a {kind} job")
        add_project_option(p_job)
        p_job.add_argument(
            "--wait",
            "-w",
            type=int,
            default=DEFAULT_WAIT,
            help="Seconds to wait for job completion (0 to return at once)",
        )
        p_job.set_defaults(func=func)

    p_status = project_sub.add_parser("status", aliases=["s"], help="Show job status")
    status_group = p_status.add_mutually_exclusive_group()
    status_group.add_argument("--project", "-p", default="", help="Name (or part of it) of a project")
    status_group.add_argument("--all", "-a", action="store_true", help="Fetch details of all your jobs")
    p_status.set_defaults(func=cmd_project_status)

    # ========== Assets ==========
    asset = project_sub.add_parser("asset", aliases=["a"], help="Asset management")
    asset.set_defaults(func=lambda _c, _a: asset.print_help())
    asset_sub = asset.add_subparsers(dest="asset_command")

    a_add = asset_sub.add_parser("add", aliases=["a"], help="Add asset to a project")
    add_project_option(a_add)
    a_add.add_argument("--file", "-f", required=True, help="Path to the file which you want as an asset")
    a_add.set_defaults(func=cmd_asset_add)

    a_list = asset_sub.add_parser("list", aliases=["ls"], help="List your assets")
    list_group = a_list.add_mutually_exclusive_group()
    list_group.add_argument("--project", "-p", default="", help="Name (or part of it) of a project")
    list_group.add_argument("--all", "-a", action="store_true", help="Fetch details of all your assets")
    a_list.set_defaults(func=cmd_asset_list)

    a_get = asset_sub.add_parser("get", aliases=["g"], help="Download a single asset")
    add_project_option(a_get)
    a_get.add_argument("--file", "-f", required=True, help="Name of the asset to be downloaded")
    a_get.set_defaults(func=cmd_asset_get)

    a_delete = asset_sub.add_parser("delete", aliases=["d"], help="Remove an asset from a project")
    add_project_option(a_delete)
    delete_group = a_delete.add_mutually_exclusive_group()
    delete_group.add_argument("--all", "-a", action="store_true", help="Choose among all your assets")
    delete_group.add_argument(
        "--count",
        "-n",
        type=int,
        default=1,
        help="Choose among the last COUNT assets of the project",
    )
    a_delete.set_defaults(func=cmd_asset_delete)

    return parser


def main() -> None:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(0)

    try:
        settings = load_settings()
    except ConfigError as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)
    setup_logging(settings.log_level)

    client = SlyftClient(settings)

    # Run command (all subparsers have default funcs that print help)
    try:
        args.func(client, args)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(130)


if __name__ == "__main__":
    main()
