"""Command-line parsing into a validated AnalysisArgs."""

from __future__ import annotations

import argparse
import os
import platform
from pathlib import Path
from typing import Mapping, Optional, Sequence

from config import APP_VERSION, POLL_INTERVAL, POLL_TIMEOUT, SOOS_API_KEY_ENV_VAR, SOOS_API_URL, SOOS_CLIENT_ID_ENV_VAR
from core.errors import ValidationError
from core.models import AnalysisArgs, ExportFileType, ExportFormat, OnFailure
from core.text import ensure_value, split_patterns

LOG_LEVELS = ("DEBUG", "INFO", "WARN", "WARNING", "ERROR")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="soos-sast",
        description="Upload SARIF results to SOOS for Static Application Security Testing.",
    )

    creds = parser.add_argument_group("credentials")
    creds.add_argument("--api-key", help=f"SOOS API key (default: ${SOOS_API_KEY_ENV_VAR}).")
    creds.add_argument("--api-url", default=SOOS_API_URL, help="SOOS API base URL.")
    creds.add_argument("--client-id", help=f"SOOS client id (default: ${SOOS_CLIENT_ID_ENV_VAR}).")

    scan = parser.add_argument_group("scan")
    scan.add_argument("--project-name", required=True, help="Project name to create the scan under.")
    scan.add_argument("--branch-name", help="Branch being scanned.")
    scan.add_argument("--branch-uri", help="URI of the branch.")
    scan.add_argument("--build-version", help="Version of the build being scanned.")
    scan.add_argument("--build-uri", help="URI of the build.")
    scan.add_argument("--commit-hash", help="Commit being scanned.")
    scan.add_argument("--app-version", help="Version of the application being scanned.")
    scan.add_argument("--integration-name", default="SoosSast", help=argparse.SUPPRESS)
    scan.add_argument("--integration-type", default="Script", help=argparse.SUPPRESS)
    scan.add_argument(
        "--operating-environment",
        default=f"{platform.system()} {platform.machine()}".strip(),
        help="Operating environment reported with the scan.",
    )
    scan.add_argument("--script-version", default=APP_VERSION, help=argparse.SUPPRESS)

    search = parser.add_argument_group("file search")
    search.add_argument(
        "--source-code-path",
        default=os.getcwd(),
        help="The path to start searching for SAST files.",
    )
    search.add_argument(
        "--files-to-exclude",
        type=split_patterns,
        default=(),
        help="Comma separated files or patterns to exclude, eg: **/test.sarif.json, tmp/*.sarif.json",
    )
    search.add_argument(
        "--directories-to-exclude",
        type=split_patterns,
        default=(),
        help="Comma separated directories or patterns to exclude, eg: **/node_modules/**, build",
    )

    run = parser.add_argument_group("behaviour")
    run.add_argument("--log-level", default="INFO", type=str.upper, choices=LOG_LEVELS, help="Minimum log level.")
    run.add_argument("--verbose", action="store_true", help="Enable verbose debug logging.")
    run.add_argument(
        "--on-failure",
        default=OnFailure.CONTINUE_ON_FAILURE.value,
        choices=[o.value for o in OnFailure],
        help="Whether a failed scan should fail the build.",
    )
    run.add_argument("--no-wait", action="store_true", help="Do not wait for the scan to finish.")
    run.add_argument("--poll-interval", type=float, default=POLL_INTERVAL, help="Seconds between status checks.")
    run.add_argument("--poll-timeout", type=float, default=POLL_TIMEOUT, help="Maximum seconds to wait for the scan.")

    export = parser.add_argument_group("report export")
    export.add_argument("--export-format", choices=[f.value for f in ExportFormat], help="Report format to export.")
    export.add_argument("--export-file-type", choices=[t.value for t in ExportFileType], help="Report file type.")
    export.add_argument("--output-directory", default=os.getcwd(), help="Where to write exported reports.")

    return parser


def parse_args(
    argv: Optional[Sequence[str]] = None,
    *,
    env: Optional[Mapping[str, str]] = None,
) -> AnalysisArgs:
    ns = build_parser().parse_args(argv)
    return to_analysis_args(ns, env=os.environ if env is None else env)


def to_analysis_args(ns: argparse.Namespace, *, env: Mapping[str, str]) -> AnalysisArgs:
    api_key = ensure_value(ns.api_key or env.get(SOOS_API_KEY_ENV_VAR), "apiKey")
    client_id = ensure_value(ns.client_id or env.get(SOOS_CLIENT_ID_ENV_VAR), "clientId")
    project_name = ensure_value(ns.project_name, "projectName")

    if bool(ns.export_format) != bool(ns.export_file_type):
        raise ValidationError("--export-format and --export-file-type must be used together")
    if ns.poll_interval <= 0:
        raise ValidationError("--poll-interval must be positive")
    if ns.poll_timeout < 0:
        raise ValidationError("--poll-timeout must not be negative")

    return AnalysisArgs(
        api_key=api_key,
        api_url=ns.api_url,
        client_id=client_id,
        project_name=project_name,
        branch_name=ns.branch_name,
        branch_uri=ns.branch_uri,
        build_version=ns.build_version,
        build_uri=ns.build_uri,
        commit_hash=ns.commit_hash,
        app_version=ns.app_version,
        integration_name=ns.integration_name,
        integration_type=ns.integration_type,
        operating_environment=ns.operating_environment,
        script_version=ns.script_version,
        source_code_path=Path(ns.source_code_path),
        files_to_exclude=tuple(ns.files_to_exclude),
        directories_to_exclude=tuple(ns.directories_to_exclude),
        log_level=ns.log_level,
        verbose=ns.verbose,
        on_failure=OnFailure(ns.on_failure),
        wait=not ns.no_wait,
        poll_interval=ns.poll_interval,
        poll_timeout=ns.poll_timeout,
        export_format=ExportFormat(ns.export_format) if ns.export_format else None,
        export_file_type=ExportFileType(ns.export_file_type) if ns.export_file_type else None,
        output_directory=Path(ns.output_directory),
    )
