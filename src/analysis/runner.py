"""Scan lifecycle orchestration.

AnalysisRunner discovers SARIF files, creates a scan, uploads the files,
optionally waits for the final status and exports a report. `run()` is the
single place where fatal errors are caught and turned into an exit code.
"""

from __future__ import annotations

import logging
from typing import Optional

from analysis.exit_codes import EXIT_FAILURE, EXIT_SUCCESS, exit_code_for
from analysis.report import export_report
from config import MAX_MANIFESTS, SAST_FILE_PATTERN
from core.errors import ExternalServiceError, NoInputError, SastError
from core.interfaces import AnalysisApi
from core.models import AnalysisArgs, CreatedScan, DiscoveryResult, ScanStatus
from core.polling import wait_for_scan
from sources.form_data import prepare_upload
from sources.locator import FileLocator

logger = logging.getLogger(__name__)

SEPARATOR = "-" * 80


class AnalysisRunner:
    def __init__(
        self,
        args: AnalysisArgs,
        *,
        api: AnalysisApi,
        locator: Optional[FileLocator] = None,
        log: Optional[logging.Logger] = None,
    ) -> None:
        self._args = args
        self._api = api
        self._log = log or logger
        self._locator = locator or FileLocator(
            root=args.source_code_path,
            pattern=SAST_FILE_PATTERN,
            max_files=MAX_MANIFESTS,
            log=self._log,
        )

    async def run(self) -> int:
        scan: Optional[CreatedScan] = None
        try:
            discovery = await self._discover()

            scan = await self._create_scan()
            await self._upload(scan, discovery)

            if not self._args.wait:
                return EXIT_SUCCESS

            status = await self._wait(scan)
        except Exception as e:
            if scan is not None:
                await self._mark_scan_errored(scan)
            if isinstance(e, SastError):
                self._log.error("%s", e)
            else:
                self._log.error("Unexpected error: %s", e, exc_info=True)
            return EXIT_FAILURE

        # The scan has a final status now; an export failure must not change it
        if status == ScanStatus.COMPLETE and self._wants_export():
            try:
                await self._export(scan)
            except SastError as e:
                self._log.error("Report export failed: %s", e)

        return self._finish(scan, status)

    async def _discover(self) -> DiscoveryResult:
        discovery = await self._locator.find_files(
            files_to_exclude=self._args.files_to_exclude,
            directories_to_exclude=self._args.directories_to_exclude,
        )
        if not discovery.files:
            raise NoInputError("No SAST files found.")
        return discovery

    async def _create_scan(self) -> CreatedScan:
        args = self._args
        self._log.info("Starting SOOS SAST Analysis")
        self._log.info("Creating scan for project '%s'...", args.project_name)
        self._log.info("Branch Name: %s", args.branch_name)

        scan = await self._api.create_scan(args.to_scan_request())

        self._log.info("Project Hash: %s", scan.project_hash)
        self._log.info("Branch Hash: %s", scan.branch_hash)
        self._log.info("Scan Id: %s", scan.scan_id)
        self._log.info("Scan created successfully.")
        self._log.info(SEPARATOR)
        return scan

    async def _upload(self, scan: CreatedScan, discovery: DiscoveryResult) -> None:
        self._log.info("Uploading SAST Files")

        # Handles are closed on every exit path, including a failed upload
        with prepare_upload(discovery.files, root=self._locator.root) as form:
            await self._api.upload_scan_result(
                scan,
                form,
                has_more_than_maximum_files=discovery.truncated,
            )

        self._log.info(SEPARATOR)
        self._log.info("Scan results uploaded successfully. To see the results visit: %s", scan.scan_url)

    async def _wait(self, scan: CreatedScan) -> ScanStatus:
        if not scan.scan_status_url:
            raise ExternalServiceError("SOOS API did not return a scan status URL")

        self._log.info("Waiting for scan to complete...")
        return await wait_for_scan(
            self._api.get_scan_status,
            scan.scan_status_url,
            interval=self._args.poll_interval,
            timeout=self._args.poll_timeout,
            log=self._log,
        )

    def _wants_export(self) -> bool:
        return self._args.export_format is not None and self._args.export_file_type is not None

    async def _export(self, scan: CreatedScan) -> None:
        args = self._args
        await export_report(
            self._api,
            scan,
            project_name=args.project_name,
            export_format=args.export_format,
            file_type=args.export_file_type,
            output_directory=args.output_directory,
            log=self._log,
        )

    def _finish(self, scan: CreatedScan, status: ScanStatus) -> int:
        code = exit_code_for(status, self._args.on_failure)
        if status == ScanStatus.COMPLETE:
            self._log.info("Scan completed successfully.")
        elif status == ScanStatus.TIMEOUT:
            self._log.warning("Timed out waiting for scan results. See: %s", scan.scan_url)
        else:
            self._log.error("Scan finished with status '%s'. See: %s", status.value, scan.scan_url)

        if code != EXIT_SUCCESS:
            self._log.error("Failing the build (on-failure policy: %s).", self._args.on_failure.value)
        return code

    async def _mark_scan_errored(self, scan: CreatedScan) -> None:
        try:
            await self._api.update_scan_status(
                scan,
                status=ScanStatus.ERROR,
                message="Error while performing scan.",
            )
        except SastError as e:
            self._log.warning("Could not update scan status: %s", e)
