"""
Command line entry point: one pipeline run.

    python -m crime_watch --lat 51.5074 --lng -0.1278 --months 6 --threshold 30

Any flag left out is read from the environment / .env (see crime_watch.config).
Meant to be scheduled (cron, systemd timer); invocations must not overlap.
"""

import argparse
import logging
import os
import sys

from dotenv import find_dotenv, load_dotenv

from crime_watch.alerts import LoggingAlertSink
from crime_watch.config import ZERO_BASELINE_POLICIES, load_run_config, load_settings
from crime_watch.data.police_client import PoliceApiClient
from crime_watch.pipeline import CrimeAnomalyPipeline
from crime_watch.storage.cache import JsonFileCache
from crime_watch.utils.exceptions import CrimeWatchError
from crime_watch.utils.logger_config import enable_file_logging, set_level, setup_logger

logger = setup_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Flag crime categories deviating from their rolling baseline')
    parser.add_argument('--lat', dest='latitude', type=float, help='Latitude of the query point')
    parser.add_argument('--lng', dest='longitude', type=float, help='Longitude of the query point')
    parser.add_argument('--months', dest='month_count', type=int, help='Months in the baseline window')
    parser.add_argument('--threshold', dest='threshold_percent', type=float,
                        help='Alert when |deviation| exceeds this percentage')
    parser.add_argument('--cache-dir', dest='cache_dir', help='Directory for checkpoint and diagnostics')
    parser.add_argument('--zero-baseline', dest='zero_baseline', choices=ZERO_BASELINE_POLICIES,
                        help='How to treat categories with a zero average')
    parser.add_argument('--log-level', default='INFO', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    return parser


def main(argv=None) -> int:
    """
    Main execution function for a single watch run
    """
    args = build_parser().parse_args(argv)
    load_dotenv(find_dotenv(usecwd=True))
    set_level(getattr(logging, args.log_level))
    enable_file_logging()

    try:
        config = load_run_config(
            os.environ,
            latitude=args.latitude,
            longitude=args.longitude,
            month_count=args.month_count,
            threshold_percent=args.threshold_percent,
        )
        settings = load_settings(os.environ, cache_dir=args.cache_dir, zero_baseline=args.zero_baseline)

        logger.info(
            f'Running crime watch at ({config.latitude}, {config.longitude}) '
            f'over {config.month_count} months, threshold {config.threshold_percent}%'
        )
        pipeline = CrimeAnomalyPipeline(
            client=PoliceApiClient(settings.api_base_url, timeout=settings.request_timeout),
            cache=JsonFileCache(settings.cache_dir),
            sink=LoggingAlertSink(),
            zero_baseline=settings.zero_baseline,
            max_workers=settings.max_workers,
        )
        result = pipeline.run(config)

    except CrimeWatchError as e:
        logger.critical(f'Crime watch run failed: {str(e)}')
        return 1

    if result.skipped:
        logger.info('Nothing new upstream, run skipped')
    else:
        logger.info(f'Run complete: {len(result.alerts)} alert(s) over {", ".join(result.keys)}')
    return 0


if __name__ == '__main__':
    sys.exit(main())
