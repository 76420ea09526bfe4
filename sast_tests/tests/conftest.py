from pathlib import Path

import pytest

from core.errors import ExternalServiceError
from core.models import AnalysisArgs, CreatedScan, ScanStatus


class FakeAnalysisApi:
    """In-memory AnalysisApi recording every call."""

    def __init__(self, statuses=None, *, fail_on=None, report=b"REPORT"):
        self.statuses = list(statuses or [ScanStatus.COMPLETE])
        self.fail_on = {fail_on} if isinstance(fail_on, str) else set(fail_on or ())
        self.report = report
        self.calls = []
        self.uploaded = None

    def _maybe_fail(self, name):
        if name in self.fail_on:
            raise ExternalServiceError(f"{name} failed")

    async def create_scan(self, request):
        self.calls.append(("create_scan", request.project_name))
        self._maybe_fail("create_scan")
        return CreatedScan(
            client_id=request.client_id,
            project_hash="p1",
            branch_hash="b1",
            scan_id="s1",
            scan_url="https://app.example/scan/s1",
            scan_status_url="https://api.example/status/s1",
        )

    async def upload_scan_result(self, scan, form, *, has_more_than_maximum_files):
        self.calls.append(("upload_scan_result", has_more_than_maximum_files))
        self.uploaded = {
            "data": form.data(),
            "files": [(field, name, handle.read()) for field, (name, handle, _) in form.files()],
        }
        self._maybe_fail("upload_scan_result")

    async def get_scan_status(self, status_url):
        self.calls.append(("get_scan_status", status_url))
        self._maybe_fail("get_scan_status")
        if len(self.statuses) > 1:
            return self.statuses.pop(0)
        return self.statuses[0]

    async def update_scan_status(self, scan, *, status, message):
        self.calls.append(("update_scan_status", status, message))
        self._maybe_fail("update_scan_status")

    async def generate_formatted_report(self, scan, *, export_format, file_type):
        self.calls.append(("generate_formatted_report", export_format, file_type))
        self._maybe_fail("generate_formatted_report")
        return self.report

    def call_names(self):
        return [c[0] for c in self.calls]


@pytest.fixture
def fake_api_factory():
    return FakeAnalysisApi


@pytest.fixture
def write_sarif():
    def _write(root: Path, rel: str, content: str = "{}") -> Path:
        p = root / rel
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(content, encoding="utf-8")
        return p

    return _write


@pytest.fixture
def make_args(tmp_path):
    def _make(**overrides):
        values = dict(
            api_key="key",
            api_url="https://api.example/api/",
            client_id="client",
            project_name="demo",
            source_code_path=tmp_path,
            poll_interval=1.0,
            poll_timeout=30.0,
            output_directory=tmp_path / "out",
        )
        values.update(overrides)
        return AnalysisArgs(**values)

    return _make
