"""Core protocol and interface definitions.

Defines the AnalysisApi protocol implemented by the SOOS API client and
by test fakes, so the runner can drive a scan without knowing the transport.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from core.models import CreatedScan, ExportFileType, ExportFormat, ScanRequest, ScanStatus

if TYPE_CHECKING:
    from sources.form_data import UploadForm


class AnalysisApi(Protocol):
    """Contract for the remote scan lifecycle."""
    async def create_scan(self, request: ScanRequest) -> CreatedScan:
        ...

    async def upload_scan_result(
        self,
        scan: CreatedScan,
        form: "UploadForm",
        *,
        has_more_than_maximum_files: bool,
    ) -> None:
        ...

    async def get_scan_status(self, status_url: str) -> ScanStatus:
        ...

    async def update_scan_status(
        self,
        scan: CreatedScan,
        *,
        status: ScanStatus,
        message: str,
    ) -> None:
        ...

    async def generate_formatted_report(
        self,
        scan: CreatedScan,
        *,
        export_format: ExportFormat,
        file_type: ExportFileType,
    ) -> bytes:
        ...
