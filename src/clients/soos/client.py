"""SOOS API client module: create scans, upload SAST results and track scan status.

This module provides a small async client covering the scan lifecycle used
by the runner: creating a scan, uploading the multipart SARIF form, reading
and updating the scan status, and requesting a formatted report.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

import httpx

from config import APP_NAME, APP_VERSION
from core.errors import ExternalServiceError
from core.models import CreatedScan, ExportFileType, ExportFormat, SCAN_TYPE, ScanRequest, ScanStatus
from sources.form_data import UploadForm

from .inputs import normalize_base_url, require_field

logger = logging.getLogger(__name__)


class SoosApiClient:
    """Async SOOS API client for SAST scans.

    Purpose:
      - create_scan(request) -> CreatedScan
      - upload_scan_result(scan, form, has_more_than_maximum_files=...)
      - get_scan_status(status_url) -> ScanStatus
      - update_scan_status(scan, status=..., message=...)
      - generate_formatted_report(scan, export_format=..., file_type=...) -> bytes

    Key behavior:
      - One short-lived httpx.AsyncClient per call.
      - No retries; any transport error or non-2xx response becomes ExternalServiceError.
    """

    JSON_ACCEPT = "application/json"
    API_KEY_HEADER = "x-soos-apikey"

    def __init__(
        self,
        *,
        api_key: str,
        api_url: str,
        timeout: float = 60.0,
        verify: bool = True,
    ) -> None:
        self._base_url = normalize_base_url(api_url)
        self._timeout = float(timeout)
        self._verify = bool(verify)
        self._headers = self._build_headers(api_key)

    async def create_scan(self, request: ScanRequest) -> CreatedScan:
        body = {
            "projectName": request.project_name,
            "branch": request.branch_name,
            "branchUri": request.branch_uri,
            "buildVersion": request.build_version,
            "buildUri": request.build_uri,
            "commitHash": request.commit_hash,
            "appVersion": request.app_version,
            "integrationName": request.integration_name,
            "integrationType": request.integration_type,
            "operatingEnvironment": request.operating_environment,
            "scriptVersion": request.script_version,
            "contributingDeveloperAudit": [],
        }

        async with self._create_client() as client:
            resp = await self._send(
                client,
                "POST",
                f"clients/{request.client_id}/scan-types/{SCAN_TYPE}/scans",
                json=body,
            )
        data = self._json(resp, context="create_scan")

        return CreatedScan(
            client_id=request.client_id,
            project_hash=require_field(data, "projectHash"),
            branch_hash=require_field(data, "branchHash"),
            scan_id=require_field(data, "analysisId", "scanId"),
            scan_url=str(data.get("scanUrl") or ""),
            scan_status_url=str(data.get("scanStatusUrl") or ""),
        )

    async def upload_scan_result(
        self,
        scan: CreatedScan,
        form: UploadForm,
        *,
        has_more_than_maximum_files: bool,
    ) -> None:
        data = form.data()
        data["hasMoreThanMaximumManifests"] = "true" if has_more_than_maximum_files else "false"

        async with self._create_client() as client:
            await self._send(client, "POST", self._scan_path(scan), data=data, files=form.files())

    async def get_scan_status(self, status_url: str) -> ScanStatus:
        async with self._create_client() as client:
            resp = await self._send(client, "GET", status_url)
        data = self._json(resp, context="get_scan_status")
        return ScanStatus.parse(data.get("status"))

    async def update_scan_status(
        self,
        scan: CreatedScan,
        *,
        status: ScanStatus,
        message: str,
    ) -> None:
        async with self._create_client() as client:
            await self._send(
                client,
                "PATCH",
                self._scan_path(scan),
                json={"status": status.value, "message": message},
            )

    async def generate_formatted_report(
        self,
        scan: CreatedScan,
        *,
        export_format: ExportFormat,
        file_type: ExportFileType,
    ) -> bytes:
        async with self._create_client() as client:
            resp = await self._send(
                client,
                "POST",
                f"{self._scan_path(scan)}/formatted-scans",
                json={"scanType": SCAN_TYPE, "format": export_format.value, "fileType": file_type.value},
            )
        return resp.content

    # --- HTTP helpers ---

    def _build_headers(self, api_key: str) -> dict[str, str]:
        return {
            "Accept": self.JSON_ACCEPT,
            "User-Agent": f"{APP_NAME}/{APP_VERSION}",
            self.API_KEY_HEADER: api_key,
        }

    def _create_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            headers=self._headers,
            timeout=self._timeout,
            verify=self._verify,
        )

    def _scan_path(self, scan: CreatedScan) -> str:
        return (
            f"clients/{scan.client_id}/projects/{scan.project_hash}"
            f"/branches/{scan.branch_hash}/scan-types/{SCAN_TYPE}/scans/{scan.scan_id}"
        )

    def _external(self, context: str, err: BaseException) -> ExternalServiceError:
        return ExternalServiceError(f"SOOS API request failed ({context}): {err}")

    def _raise_for_status(self, resp: httpx.Response, *, context: str) -> None:
        try:
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise self._external(context, e) from e

    def _json(self, resp: httpx.Response, *, context: str) -> Dict[str, Any]:
        try:
            data = resp.json()
        except ValueError as e:
            raise self._external(context, e) from e
        if not isinstance(data, dict):
            raise ExternalServiceError(f"SOOS API returned an unexpected body ({context})")
        return data

    async def _send(
        self,
        client: httpx.AsyncClient,
        method: str,
        url: str,
        *,
        json: Optional[Mapping[str, Any]] = None,
        data: Optional[Mapping[str, str]] = None,
        files: Optional[list] = None,
    ) -> httpx.Response:
        logger.debug("%s %s", method, url)
        try:
            resp = await client.request(method, url, json=json, data=data, files=files)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise self._external(f"{method} {url}", e) from e

        self._raise_for_status(resp, context=f"{method} {url}")
        return resp
