"""Immutable dataclasses and enums shared by discovery, upload and the API client.

Includes the discovery results (MatchedFile, DiscoveryResult), the scan
lifecycle models (ScanRequest, CreatedScan, ScanStatus) and the typed
run configuration produced by the CLI (AnalysisArgs).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple


SCAN_TYPE = "sast"


class ScanStatus(str, Enum):
    UNKNOWN = "Unknown"
    QUEUED = "Queued"
    RUNNING = "Running"
    INCOMPLETE = "Incomplete"
    COMPLETE = "Complete"
    FAILED = "Failed"
    ERROR = "Error"
    # Never reported by the API; produced locally when polling gives up.
    TIMEOUT = "Timeout"

    @classmethod
    def parse(cls, raw: Optional[str]) -> "ScanStatus":
        value = (raw or "").strip().lower()
        for status in cls:
            if status.value.lower() == value:
                return status
        return cls.UNKNOWN

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATUSES


_TERMINAL_STATUSES = frozenset({ScanStatus.COMPLETE, ScanStatus.FAILED, ScanStatus.ERROR})


class OnFailure(str, Enum):
    FAIL_THE_BUILD = "fail_the_build"
    CONTINUE_ON_FAILURE = "continue_on_failure"


class ExportFormat(str, Enum):
    SARIF = "Sarif"
    CYCLONE_DX = "CycloneDx"
    SPDX = "Spdx"
    SOOS_ISSUES = "SoosIssues"
    SOOS_PACKAGES = "SoosPackages"
    SOOS_VULNERABILITIES = "SoosVulnerabilities"


class ExportFileType(str, Enum):
    JSON = "Json"
    CSV = "Csv"
    HTML = "Html"
    XML = "Xml"

    @property
    def extension(self) -> str:
        return self.value.lower()


@dataclass(frozen=True)
class MatchedFile:
    name: str
    path: Path


@dataclass(frozen=True)
class DiscoveryResult:
    files: Tuple[MatchedFile, ...]
    truncated: bool = False


@dataclass(frozen=True)
class ScanRequest:
    """Metadata sent to the API when a scan is created."""

    client_id: str
    project_name: str
    branch_name: Optional[str] = None
    branch_uri: Optional[str] = None
    build_version: Optional[str] = None
    build_uri: Optional[str] = None
    commit_hash: Optional[str] = None
    app_version: Optional[str] = None
    integration_name: str = "SoosSast"
    integration_type: str = "Script"
    operating_environment: Optional[str] = None
    script_version: Optional[str] = None


@dataclass(frozen=True)
class CreatedScan:
    """Identifiers returned by the API for a newly created scan."""

    client_id: str
    project_hash: str
    branch_hash: str
    scan_id: str
    scan_url: str = ""
    scan_status_url: str = ""


@dataclass(frozen=True)
class AnalysisArgs:
    """Validated run configuration.

    Field groups:
    - Credentials: api_key, api_url, client_id
    - Scan metadata: project_name ... script_version
    - Discovery: source_code_path, files_to_exclude, directories_to_exclude
    - Behaviour: log_level, verbose, on_failure, wait, poll_*
    - Export: export_format, export_file_type, output_directory
    """

    api_key: str
    api_url: str
    client_id: str
    project_name: str

    branch_name: Optional[str] = None
    branch_uri: Optional[str] = None
    build_version: Optional[str] = None
    build_uri: Optional[str] = None
    commit_hash: Optional[str] = None
    app_version: Optional[str] = None
    integration_name: str = "SoosSast"
    integration_type: str = "Script"
    operating_environment: Optional[str] = None
    script_version: Optional[str] = None

    source_code_path: Path = field(default_factory=Path.cwd)
    files_to_exclude: Tuple[str, ...] = ()
    directories_to_exclude: Tuple[str, ...] = ()

    log_level: str = "INFO"
    verbose: bool = False
    on_failure: OnFailure = OnFailure.CONTINUE_ON_FAILURE
    wait: bool = True
    poll_interval: float = 10.0
    poll_timeout: float = 900.0

    export_format: Optional[ExportFormat] = None
    export_file_type: Optional[ExportFileType] = None
    output_directory: Path = field(default_factory=Path.cwd)

    def to_scan_request(self) -> ScanRequest:
        return ScanRequest(
            client_id=self.client_id,
            project_name=self.project_name,
            branch_name=self.branch_name,
            branch_uri=self.branch_uri,
            build_version=self.build_version,
            build_uri=self.build_uri,
            commit_hash=self.commit_hash,
            app_version=self.app_version,
            integration_name=self.integration_name,
            integration_type=self.integration_type,
            operating_environment=self.operating_environment,
            script_version=self.script_version,
        )
