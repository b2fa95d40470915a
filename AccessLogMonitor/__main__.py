import sys
import logging
from argparse import ArgumentParser
from typing import List, Optional

from .config import Config
from .monitor import monitorAccessLogs
from .read import SourceUnavailable


def buildArgsParser() -> ArgumentParser:
    defaults = Config()
    argsParser = ArgumentParser(
        description="Monitor HTTP access logs: most visited sections and traffic spikes"
    )
    argsParser.add_argument("file", help="HTTP access log path, e.g. /var/log/access.log")
    argsParser.add_argument("--verbose", help="Print DEBUG lines", action="store_true")
    argsParser.add_argument(
        "--threshold",
        help="Alert when average hits per section within the traffic window exceed this",
        type=int,
        default=defaults.trafficThreshold,
    )
    argsParser.add_argument(
        "--traffic_window",
        help="Monitor traffic spikes over a window of x seconds",
        type=float,
        default=defaults.trafficWindow,
    )
    argsParser.add_argument(
        "--report_interval",
        help="Print most visited sections every x seconds",
        type=float,
        default=defaults.reportInterval,
    )
    argsParser.add_argument(
        "--report_limit",
        help="Number of most visited sections to print",
        type=int,
        default=defaults.reportLimit,
    )
    argsParser.add_argument(
        "--poll_interval",
        help="Check the file for new lines every x seconds",
        type=float,
        default=defaults.pollInterval,
    )
    return argsParser


def main(argv: Optional[List[str]] = None) -> int:
    """ Follow an access log, report on it and alert on traffic spikes until interrupted """
    argsParser = buildArgsParser()
    args = argsParser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.INFO)

    config = Config(
        reportInterval=args.report_interval,
        reportLimit=args.report_limit,
        trafficWindow=args.traffic_window,
        trafficThreshold=args.threshold,
        pollInterval=args.poll_interval,
    )
    try:
        config.validate()
    except ValueError as e:
        argsParser.error(str(e))

    try:
        return monitorAccessLogs(args.file, config)
    except SourceUnavailable as e:
        logging.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
