"""riskgate CLI - risk assessment and merge-policy gate commands."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

import click
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from riskgate import __version__
from riskgate.errors import ContractError, RiskGateError, SchemaError
from riskgate.gates.docs_drift import find_drift
from riskgate.gates.evidence import default_manifest_path, evidence_violations, load_manifest
from riskgate.gates.freshness import assert_all_checks_current, check_runs_from_payload
from riskgate.gates.preflight import run_preflight_gate
from riskgate.gates.types import ReviewState
from riskgate.policy.contract import load_contract, load_structured_file
from riskgate.reports import assessment_to_dict, render_assessment_markdown, write_preflight_report
from riskgate.review.adjudicate import filter_current_findings
from riskgate.review.auto_resolve import find_resolvable, threads_from_payload
from riskgate.review.normalize import normalize
from riskgate.review.rerun import PrComment, maybe_rerun_comment
from riskgate.review.types import RemediationConfig
from riskgate.risk.assessment import assess, compute_required_checks
from riskgate.risk.history import load_historical_metadata
from riskgate.utils.repo import ExecError, changed_files_since, current_revision, resolve_repo_root
from riskgate.utils.repo_config import RepoSettings, load_repo_settings

cli = typer.Typer(
    name="riskgate",
    help="riskgate - Risk-aware merge policy gate",
    no_args_is_help=True,
)
checks_app = typer.Typer(name="checks", help="Required check freshness commands", no_args_is_help=True)
evidence_app = typer.Typer(name="evidence", help="Browser evidence commands", no_args_is_help=True)
findings_app = typer.Typer(name="findings", help="Review finding commands", no_args_is_help=True)
threads_app = typer.Typer(name="threads", help="Review thread commands", no_args_is_help=True)
cli.add_typer(checks_app, name="checks")
cli.add_typer(evidence_app, name="evidence")
cli.add_typer(findings_app, name="findings")
cli.add_typer(threads_app, name="threads")
console = Console()

EXIT_INFRA = 1
EXIT_POLICY = 2

FilesArgument = typer.Argument(None, help="Changed files (default: git diff against --base)")
RepoRootOption = typer.Option(
    None,
    "--repo-root",
    help="Repository root path (default: detected from the current directory)",
)
RevisionOption = typer.Option(None, "--revision", help="Current revision (default: git rev-parse HEAD)")


def _version_option_callback(value: bool) -> None:
    """Handle eager --version option."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@cli.callback()
def _cli_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log gate decisions to stderr."),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show riskgate version and exit.",
        is_eager=True,
        callback=_version_option_callback,
    ),
) -> None:
    _ = version
    if verbose:
        package_logger = logging.getLogger("riskgate")
        package_logger.setLevel(logging.DEBUG)
        package_logger.addHandler(RichHandler(console=Console(stderr=True), show_path=False))


def _repo_root(override: Path | None) -> Path:
    try:
        return resolve_repo_root(Path.cwd(), override)
    except RuntimeError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(EXIT_INFRA) from exc


def _settings(repo_root: Path) -> RepoSettings:
    try:
        return load_repo_settings(repo_root)
    except RuntimeError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(EXIT_INFRA) from exc


def _resolve_files(repo_root: Path, files: list[str] | None, base: str) -> list[str]:
    if files:
        return [Path(f).as_posix() for f in files]
    try:
        return changed_files_since(repo_root, base)
    except (ExecError, OSError) as exc:
        console.print(f"[bold red]Error:[/bold red] could not list changed files: {exc}")
        raise typer.Exit(EXIT_INFRA) from exc


def _resolve_revision(repo_root: Path, revision: str | None) -> str:
    if revision:
        return revision
    try:
        return current_revision(repo_root)
    except (ExecError, OSError) as exc:
        console.print(f"[bold red]Error:[/bold red] could not resolve HEAD: {exc}")
        raise typer.Exit(EXIT_INFRA) from exc


def _load_contract_or_exit(repo_root: Path, settings: RepoSettings):
    try:
        return load_contract(repo_root, settings.contract_path)
    except (FileNotFoundError, ContractError) as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(EXIT_INFRA) from exc


def _read_json(path: Path) -> Any:
    try:
        return load_structured_file(path)
    except (FileNotFoundError, ContractError) as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(EXIT_INFRA) from exc


@cli.command(name="assess")
def assess_cmd(
    files: list[str] | None = FilesArgument,
    repo_root: Path | None = RepoRootOption,
    base: str | None = typer.Option(None, "--base", help="Base ref for changed-file detection"),
    as_json: bool = typer.Option(False, "--json", help="Print the assessment as JSON"),
) -> None:
    """Score changed files and print the risk tier with its explanation."""
    repo_root = _repo_root(repo_root)
    settings = _settings(repo_root)
    changed = _resolve_files(repo_root, files, base or settings.base_ref)
    contract = _load_contract_or_exit(repo_root, settings)
    try:
        historical = load_historical_metadata(repo_root, settings.metadata_path)
    except ContractError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(EXIT_INFRA) from exc

    assessment = assess(changed, contract, historical)
    required = list(contract.merge_policy[assessment.tier].required_checks)
    if as_json:
        typer.echo(json.dumps(assessment_to_dict(assessment, required), indent=2, sort_keys=True))
        return

    console.print(render_assessment_markdown(assessment), markup=False)
    console.print("Required checks:")
    for name in required:
        console.print(f"  - {name}", markup=False)


@cli.command(name="preflight")
def preflight_cmd(
    files: list[str] | None = FilesArgument,
    repo_root: Path | None = RepoRootOption,
    revision: str | None = RevisionOption,
    base: str | None = typer.Option(None, "--base", help="Base ref for changed-file detection"),
    review_state: Path | None = typer.Option(
        None,
        "--review-state",
        help="JSON file with the review-agent state, re-read on every poll",
    ),
    out: Path | None = typer.Option(None, "--out", "-o", help="Directory for PREFLIGHT_REPORT.json/.md"),
    timestamp_mode: str = typer.Option(
        "deterministic",
        "--timestamp-mode",
        help="Timestamp mode: deterministic or wallclock",
        click_type=click.Choice(["deterministic", "wallclock"]),
    ),
) -> None:
    """Run the preflight gate before CI fanout."""
    repo_root = _repo_root(repo_root)
    settings = _settings(repo_root)
    changed = _resolve_files(repo_root, files, base or settings.base_ref)
    head = _resolve_revision(repo_root, revision)

    poll_review = None
    if review_state is not None:
        state_path = review_state

        async def _poll_state_file(_revision: str) -> ReviewState | None:
            if not state_path.exists():
                return None
            data = json.loads(state_path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise SchemaError(f"{state_path.name} must hold a JSON object")
            return ReviewState.from_dict(data)

        poll_review = _poll_state_file

    try:
        result = asyncio.run(
            run_preflight_gate(
                changed_files=changed,
                current_revision=head,
                repo_root=repo_root,
                poll_review=poll_review,
                contract_path=settings.contract_path,
                metadata_path=settings.metadata_path,
                poll_interval_seconds=settings.poll_interval_seconds,
            )
        )
    except (FileNotFoundError, ContractError, json.JSONDecodeError) as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(EXIT_INFRA) from exc

    if out is not None:
        write_preflight_report(out, result, head, timestamp_mode)  # type: ignore[arg-type]
        console.print(f"[cyan]Report:[/cyan] {out / 'PREFLIGHT_REPORT.json'}")

    status = "[green]PASSED[/green]" if result.passed else "[red]FAILED[/red]"
    console.print(f"Preflight: {status} (tier {result.risk_tier})")
    console.print("Required checks:")
    for name in result.required_checks:
        console.print(f"  - {name}", markup=False)
    if not result.passed:
        for error in result.errors:
            console.print(f"[yellow]  - {error}[/yellow]")
        raise typer.Exit(EXIT_POLICY)


@cli.command(name="docs-drift")
def docs_drift_cmd(
    files: list[str] | None = FilesArgument,
    repo_root: Path | None = RepoRootOption,
    base: str | None = typer.Option(None, "--base", help="Base ref for changed-file detection"),
) -> None:
    """Fail when control-plane or covered paths change without docs."""
    repo_root = _repo_root(repo_root)
    settings = _settings(repo_root)
    changed = _resolve_files(repo_root, files, base or settings.base_ref)
    contract = _load_contract_or_exit(repo_root, settings)

    violations = find_drift(changed, contract)
    if not violations:
        console.print("[green]✓ No documentation drift[/green]")
        return
    for violation in violations:
        console.print(f"[bold red]Drift:[/bold red] {escape(violation.message)}")
    raise typer.Exit(EXIT_POLICY)


@checks_app.command(name="verify")
def checks_verify(
    files: list[str] | None = FilesArgument,
    checks: Path = typer.Option(..., "--checks", help="JSON file with reported check runs"),
    repo_root: Path | None = RepoRootOption,
    revision: str | None = RevisionOption,
    base: str | None = typer.Option(None, "--base", help="Base ref for changed-file detection"),
) -> None:
    """Verify every required check passed for the current revision."""
    repo_root = _repo_root(repo_root)
    settings = _settings(repo_root)
    changed = _resolve_files(repo_root, files, base or settings.base_ref)
    head = _resolve_revision(repo_root, revision)
    contract = _load_contract_or_exit(repo_root, settings)

    try:
        runs = check_runs_from_payload(_read_json(checks))
    except ContractError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(EXIT_INFRA) from exc

    try:
        historical = load_historical_metadata(repo_root, settings.metadata_path)
    except ContractError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(EXIT_INFRA) from exc

    required = compute_required_checks(changed, contract, historical)
    try:
        assert_all_checks_current(runs, required, head)
    except RiskGateError as exc:
        console.print(f"[bold red]{exc.reason_code}:[/bold red] {exc}")
        raise typer.Exit(EXIT_POLICY) from exc

    console.print(f"[green]✓ {len(required)} required check(s) current for {head}[/green]")


@evidence_app.command(name="verify")
def evidence_verify(
    manifest: Path | None = typer.Option(None, "--manifest", help="Evidence manifest path"),
    repo_root: Path | None = RepoRootOption,
    revision: str | None = RevisionOption,
) -> None:
    """Validate the browser evidence manifest for the current revision."""
    repo_root = _repo_root(repo_root)
    settings = _settings(repo_root)
    head = _resolve_revision(repo_root, revision)
    contract = _load_contract_or_exit(repo_root, settings)
    manifest_path = manifest or default_manifest_path(repo_root, head, settings.evidence_dir)

    try:
        loaded = load_manifest(manifest_path)
    except FileNotFoundError as exc:
        console.print(f"[bold red]Missing evidence:[/bold red] {manifest_path}")
        raise typer.Exit(EXIT_POLICY) from exc
    except ContractError as exc:
        console.print(f"[bold red]Malformed evidence:[/bold red] {exc}")
        raise typer.Exit(EXIT_POLICY) from exc

    violations = evidence_violations(loaded, contract, head)
    if violations:
        for violation in violations:
            console.print(f"[bold red]{violation.reason_code}:[/bold red] {violation}")
        raise typer.Exit(EXIT_POLICY)
    console.print(f"[green]✓ Browser evidence valid for {head}[/green]")


@findings_app.command(name="adjudicate")
def findings_adjudicate(
    input_path: Path = typer.Argument(..., help="JSON list of provider payloads"),
    revision: str = typer.Option(..., "--revision", help="Current revision"),
    include_stale: bool = typer.Option(
        False,
        "--include-stale",
        help="Keep findings reported against older revisions",
    ),
) -> None:
    """Normalize, filter, and de-duplicate reviewer findings; print JSON."""
    payload = _read_json(input_path)
    if isinstance(payload, dict):
        payload = [payload]
    if not isinstance(payload, list):
        console.print("[bold red]Error:[/bold red] findings input must be a list of provider payloads")
        raise typer.Exit(EXIT_INFRA)

    try:
        findings = normalize(payload)
    except ContractError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(EXIT_INFRA) from exc

    config = RemediationConfig(skip_stale_comments=not include_stale)
    adjudicated = filter_current_findings(findings, revision, config)
    typer.echo(json.dumps([finding.to_dict() for finding in adjudicated], indent=2, sort_keys=True))


@cli.command(name="rerun-comment")
def rerun_comment_cmd(
    revision: str = typer.Option(..., "--revision", help="Revision the rerun is for"),
    comments: Path | None = typer.Option(
        None,
        "--comments",
        help="JSON list of existing PR comments ({id, body, user})",
    ),
) -> None:
    """Print a rerun-request comment body unless one exists for the revision."""
    existing: list[PrComment] = []
    if comments is not None:
        raw = _read_json(comments)
        if not isinstance(raw, list):
            console.print("[bold red]Error:[/bold red] comments file must hold a JSON list")
            raise typer.Exit(EXIT_INFRA)
        existing = [
            PrComment(id=int(item.get("id", 0)), body=str(item.get("body", "")), user=str(item.get("user", "")))
            for item in raw
            if isinstance(item, dict)
        ]

    body = maybe_rerun_comment(existing, revision)
    if body is None:
        console.print(f"[dim]Rerun already requested for {revision}[/dim]")
        return
    typer.echo(body)


@threads_app.command(name="resolvable")
def threads_resolvable(
    input_path: Path = typer.Argument(..., help="JSON list of review threads"),
    bot_user: str | None = typer.Option(
        None,
        "--bot-user",
        help="Review bot login (default: settings bot_user, then the contract's reviewAgent)",
    ),
    repo_root: Path | None = RepoRootOption,
) -> None:
    """Print the ids of unresolved threads only the review bot commented on."""
    repo_root = _repo_root(repo_root)
    settings = _settings(repo_root)
    if bot_user is None:
        bot_user = settings.bot_user or _load_contract_or_exit(repo_root, settings).review_agent.bot_user

    try:
        threads = threads_from_payload(_read_json(input_path))
    except ContractError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(EXIT_INFRA) from exc

    for thread in find_resolvable(threads, bot_user):
        typer.echo(thread.id)


if __name__ == "__main__":
    cli()
