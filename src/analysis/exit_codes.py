from __future__ import annotations

from core.models import OnFailure, ScanStatus

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


def exit_code_for(status: ScanStatus, on_failure: OnFailure) -> int:
    # Only a clean result is unconditionally successful
    if status == ScanStatus.COMPLETE:
        return EXIT_SUCCESS
    if on_failure == OnFailure.FAIL_THE_BUILD:
        return EXIT_FAILURE
    return EXIT_SUCCESS
