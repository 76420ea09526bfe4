"""Export of formatted scan reports.

Requests a formatted report for a finished scan and writes it to the
configured output directory under a sanitized, predictable file name.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Optional

from core.errors import ValidationError
from core.interfaces import AnalysisApi
from core.models import SCAN_TYPE, CreatedScan, ExportFileType, ExportFormat

logger = logging.getLogger(__name__)


def _sanitize_filename_stem(name: str) -> str:
    # Safe filename: trim, remove unsafe chars, replace spaces, limit length
    s = (name or "").strip()
    if not s:
        return "report"
    s = re.sub(r"[^\w\s-]", "", s, flags=re.UNICODE)
    s = s.strip().replace(" ", "_")
    return s[:80] if s else "report"


def report_filename(project_name: str, export_format: ExportFormat, file_type: ExportFileType) -> str:
    stem = _sanitize_filename_stem(project_name)
    return f"{stem}_{SCAN_TYPE}_{export_format.value}.{file_type.extension}"


def _safe_out_dir(output_directory: Path) -> Path:
    out_dir = Path(output_directory).expanduser().resolve()
    if out_dir.exists() and not out_dir.is_dir():
        raise ValidationError(f"Output directory is a file: {out_dir}")
    return out_dir


async def export_report(
    api: AnalysisApi,
    scan: CreatedScan,
    *,
    project_name: str,
    export_format: ExportFormat,
    file_type: ExportFileType,
    output_directory: Path,
    log: Optional[logging.Logger] = None,
) -> Path:
    log = log or logger
    out_dir = _safe_out_dir(output_directory)

    log.info("Generating %s report (%s)...", export_format.value, file_type.value)
    content = await api.generate_formatted_report(scan, export_format=export_format, file_type=file_type)

    out_path = out_dir / report_filename(project_name, export_format, file_type)
    try:
        out_dir.mkdir(parents=True, exist_ok=True)
        out_path.write_bytes(content)
    except OSError as e:
        raise ValidationError(f"Unable to write report to {out_path}: {e}") from e

    log.info("Report written to %s", out_path)
    return out_path
