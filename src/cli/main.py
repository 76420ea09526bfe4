"""Entrypoint for the soos-sast command.

Loads .env, parses and validates arguments, configures logging, wires the
SOOS API client into the runner and returns the process exit code.
"""

from __future__ import annotations

import asyncio
import dataclasses
import json
import logging
from typing import Optional, Sequence

from dotenv import load_dotenv

from analysis.exit_codes import EXIT_FAILURE
from analysis.runner import SEPARATOR, AnalysisRunner
from cli.args import parse_args
from cli.logs import setup_logging
from clients.soos import SoosApiClient
from config import HTTP_TIMEOUT, HTTP_VERIFY
from core.errors import SastError
from core.models import AnalysisArgs
from core.text import mask_properties

logger = logging.getLogger("soos-sast")


def build_runner(args: AnalysisArgs) -> AnalysisRunner:
    api = SoosApiClient(
        api_key=args.api_key,
        api_url=args.api_url,
        timeout=HTTP_TIMEOUT,
        verify=HTTP_VERIFY,
    )
    return AnalysisRunner(args, api=api, log=logger)


def _log_configuration(args: AnalysisArgs) -> None:
    values = mask_properties(dataclasses.asdict(args), ["api_key"])
    logger.debug(json.dumps(values, indent=2, default=str))


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv(override=False)
    setup_logging()

    logger.info("Starting SOOS SAST Analysis")
    logger.info(SEPARATOR)
    try:
        logger.info("Parsing arguments")
        args = parse_args(argv)
        setup_logging(args.log_level, args.verbose)
        logger.info("Configuration read")
        _log_configuration(args)
        logger.info(SEPARATOR)

        runner = build_runner(args)
    except SastError as e:
        logger.error("Error on startup: %s", e)
        return EXIT_FAILURE

    return asyncio.run(runner.run())


if __name__ == "__main__":
    raise SystemExit(main())
