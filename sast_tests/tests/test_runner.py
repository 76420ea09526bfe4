import os

import pytest

import core.polling as polling_mod
from analysis.exit_codes import exit_code_for
from analysis.runner import AnalysisRunner
from core.models import ExportFileType, ExportFormat, OnFailure, ScanStatus
from sources.locator import FileLocator


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    t = {"now": 0.0}

    async def fake_sleep(seconds: float):
        t["now"] += seconds

    monkeypatch.setattr(polling_mod.time, "monotonic", lambda: t["now"])
    monkeypatch.setattr(polling_mod.asyncio, "sleep", fake_sleep)


@pytest.mark.parametrize(
    "status, policy, expected",
    [
        (ScanStatus.COMPLETE, OnFailure.FAIL_THE_BUILD, 0),
        (ScanStatus.COMPLETE, OnFailure.CONTINUE_ON_FAILURE, 0),
        (ScanStatus.FAILED, OnFailure.FAIL_THE_BUILD, 1),
        (ScanStatus.FAILED, OnFailure.CONTINUE_ON_FAILURE, 0),
        (ScanStatus.ERROR, OnFailure.FAIL_THE_BUILD, 1),
        (ScanStatus.TIMEOUT, OnFailure.FAIL_THE_BUILD, 1),
        (ScanStatus.TIMEOUT, OnFailure.CONTINUE_ON_FAILURE, 0),
    ],
)
def test_exit_code_for(status, policy, expected):
    assert exit_code_for(status, policy) == expected


@pytest.mark.asyncio
async def test_run_complete_uploads_and_exits_zero(tmp_path, make_args, fake_api_factory, write_sarif):
    write_sarif(tmp_path, "a/x.sarif.json", "X")
    write_sarif(tmp_path, "b/c/y.sarif.json", "Y")
    api = fake_api_factory([ScanStatus.INCOMPLETE, ScanStatus.INCOMPLETE, ScanStatus.COMPLETE])

    code = await AnalysisRunner(make_args(on_failure=OnFailure.CONTINUE_ON_FAILURE), api=api).run()

    assert code == 0
    assert api.call_names() == [
        "create_scan",
        "upload_scan_result",
        "get_scan_status",
        "get_scan_status",
        "get_scan_status",
    ]
    assert api.uploaded["data"] == {"parentFolder": "a", "parentFolder1": os.sep.join(["b", "c"])}
    assert api.uploaded["files"] == [("file", "x.sarif.json", b"X"), ("file1", "y.sarif.json", b"Y")]


@pytest.mark.asyncio
@pytest.mark.parametrize("policy, expected", [(OnFailure.FAIL_THE_BUILD, 1), (OnFailure.CONTINUE_ON_FAILURE, 0)])
async def test_run_failed_status_respects_policy(tmp_path, make_args, fake_api_factory, write_sarif, policy, expected):
    write_sarif(tmp_path, "x.sarif.json")
    api = fake_api_factory([ScanStatus.INCOMPLETE, ScanStatus.FAILED])

    code = await AnalysisRunner(make_args(on_failure=policy), api=api).run()

    assert code == expected
    assert "update_scan_status" not in api.call_names()


@pytest.mark.asyncio
async def test_run_timeout_fails_build(tmp_path, make_args, fake_api_factory, write_sarif):
    write_sarif(tmp_path, "x.sarif.json")
    api = fake_api_factory([ScanStatus.RUNNING])

    args = make_args(on_failure=OnFailure.FAIL_THE_BUILD, poll_interval=5.0, poll_timeout=12.0)
    code = await AnalysisRunner(args, api=api).run()

    assert code == 1
    assert api.call_names().count("get_scan_status") == 4


@pytest.mark.asyncio
async def test_run_no_files_fails_before_remote_calls(make_args, fake_api_factory):
    api = fake_api_factory()

    code = await AnalysisRunner(make_args(), api=api).run()

    assert code == 1
    assert api.calls == []


@pytest.mark.asyncio
async def test_run_upload_error_marks_scan_errored(tmp_path, make_args, fake_api_factory, write_sarif):
    write_sarif(tmp_path, "x.sarif.json")
    api = fake_api_factory(fail_on="upload_scan_result")

    code = await AnalysisRunner(make_args(), api=api).run()

    assert code == 1
    assert api.calls[-1] == ("update_scan_status", ScanStatus.ERROR, "Error while performing scan.")


@pytest.mark.asyncio
async def test_run_create_error_does_not_update_status(tmp_path, make_args, fake_api_factory, write_sarif):
    write_sarif(tmp_path, "x.sarif.json")
    api = fake_api_factory(fail_on="create_scan")

    code = await AnalysisRunner(make_args(), api=api).run()

    assert code == 1
    assert api.call_names() == ["create_scan"]


@pytest.mark.asyncio
async def test_run_status_update_failure_is_logged(tmp_path, make_args, fake_api_factory, write_sarif, caplog):
    write_sarif(tmp_path, "x.sarif.json")
    api = fake_api_factory(fail_on={"get_scan_status", "update_scan_status"})

    code = await AnalysisRunner(make_args(), api=api).run()

    assert code == 1
    assert api.call_names()[-1] == "update_scan_status"
    assert "Could not update scan status" in caplog.text


@pytest.mark.asyncio
async def test_run_no_wait_skips_polling(tmp_path, make_args, fake_api_factory, write_sarif):
    write_sarif(tmp_path, "x.sarif.json")
    api = fake_api_factory([ScanStatus.FAILED])

    code = await AnalysisRunner(make_args(wait=False, on_failure=OnFailure.FAIL_THE_BUILD), api=api).run()

    assert code == 0
    assert api.call_names() == ["create_scan", "upload_scan_result"]


@pytest.mark.asyncio
async def test_run_reports_truncation_flag(tmp_path, make_args, fake_api_factory, write_sarif):
    for i in range(3):
        write_sarif(tmp_path, f"r{i}.sarif.json")
    api = fake_api_factory()
    locator = FileLocator(root=tmp_path, pattern="**/*.sarif.json", max_files=2)

    code = await AnalysisRunner(make_args(), api=api, locator=locator).run()

    assert code == 0
    assert ("upload_scan_result", True) in api.calls
    assert [f[0] for f in api.uploaded["files"]] == ["file", "file1"]


@pytest.mark.asyncio
async def test_run_exports_report_after_complete(tmp_path, make_args, fake_api_factory, write_sarif):
    write_sarif(tmp_path, "x.sarif.json")
    api = fake_api_factory([ScanStatus.COMPLETE], report=b"<html/>")
    args = make_args(export_format=ExportFormat.SOOS_ISSUES, export_file_type=ExportFileType.HTML)

    code = await AnalysisRunner(args, api=api).run()

    assert code == 0
    assert api.call_names()[-1] == "generate_formatted_report"
    assert (tmp_path / "out" / "demo_sast_SoosIssues.html").read_bytes() == b"<html/>"


@pytest.mark.asyncio
async def test_run_skips_export_when_failed(tmp_path, make_args, fake_api_factory, write_sarif):
    write_sarif(tmp_path, "x.sarif.json")
    api = fake_api_factory([ScanStatus.FAILED])
    args = make_args(export_format=ExportFormat.SARIF, export_file_type=ExportFileType.JSON)

    await AnalysisRunner(args, api=api).run()

    assert "generate_formatted_report" not in api.call_names()


@pytest.mark.asyncio
async def test_run_export_failure_keeps_clean_result(tmp_path, make_args, fake_api_factory, write_sarif, caplog):
    write_sarif(tmp_path, "x.sarif.json")
    api = fake_api_factory([ScanStatus.COMPLETE], fail_on="generate_formatted_report")
    args = make_args(
        on_failure=OnFailure.CONTINUE_ON_FAILURE,
        export_format=ExportFormat.SARIF,
        export_file_type=ExportFileType.JSON,
    )

    code = await AnalysisRunner(args, api=api).run()

    assert code == 0
    assert "update_scan_status" not in api.call_names()
    assert "Report export failed" in caplog.text


@pytest.mark.asyncio
async def test_run_unwritable_output_directory_returns_exit_code(tmp_path, make_args, fake_api_factory, write_sarif):
    write_sarif(tmp_path, "x.sarif.json")
    blocker = tmp_path / "blocker"
    blocker.write_text("x", encoding="utf-8")
    api = fake_api_factory([ScanStatus.COMPLETE])
    args = make_args(
        on_failure=OnFailure.FAIL_THE_BUILD,
        export_format=ExportFormat.SARIF,
        export_file_type=ExportFileType.JSON,
        output_directory=blocker / "sub",
    )

    code = await AnalysisRunner(args, api=api).run()

    assert code == 0
    assert "update_scan_status" not in api.call_names()


@pytest.mark.asyncio
async def test_run_export_format_without_file_type_skips_export(tmp_path, make_args, fake_api_factory, write_sarif):
    write_sarif(tmp_path, "x.sarif.json")
    api = fake_api_factory([ScanStatus.COMPLETE])

    code = await AnalysisRunner(make_args(export_format=ExportFormat.SARIF), api=api).run()

    assert code == 0
    assert "generate_formatted_report" not in api.call_names()


@pytest.mark.asyncio
async def test_run_unexpected_error_marks_scan_errored(tmp_path, make_args, fake_api_factory, write_sarif, caplog):
    write_sarif(tmp_path, "x.sarif.json")

    class BrokenStatusApi(fake_api_factory):
        async def get_scan_status(self, status_url):
            raise RuntimeError("status exploded")

    api = BrokenStatusApi()

    code = await AnalysisRunner(make_args(), api=api).run()

    assert code == 1
    assert api.calls[-1] == ("update_scan_status", ScanStatus.ERROR, "Error while performing scan.")
    assert "status exploded" in caplog.text
