"""Command-line harness for shipping JSON lines to Log Analytics.

Reads one JSON object per line from the given file (or stdin), submits each
to the client, then drains the queue before exiting:

    python src/main.py events.jsonl
    tail -n 100 app.jsonl | python src/main.py

Configuration is read from the environment / `.env` (see `config.py`).
"""

from __future__ import annotations

import json
import sys
from collections.abc import Iterator
from typing import IO, Any

from config import load_config
from loganalytics import LogAnalyticsClient
from loganalytics.logging import configure_logging, get_logger


def _read_records(stream: IO[str]) -> Iterator[dict[str, Any]]:
    """Yield JSON objects from non-blank lines, skipping lines that are not objects."""
    logger = get_logger(__name__)
    for lineno, line in enumerate(stream, start=1):
        line = line.strip()
        if not line:
            continue
        try:
            record = json.loads(line)
        except json.JSONDecodeError as exc:
            logger.warning("skipping_invalid_json_line", line=lineno, error=str(exc))
            continue
        if not isinstance(record, dict):
            logger.warning("skipping_non_object_line", line=lineno)
            continue
        yield record


def run(argv: list[str]) -> int:
    """Ship records from `argv[0]` (or stdin) and return a process exit code."""
    cfg = load_config()
    configure_logging(level=cfg.logging.level, format=cfg.logging.format)
    logger = get_logger(__name__)

    client = LogAnalyticsClient.from_config(cfg.log_analytics)
    logger.info("shipping_started", url=client.url, log_name=client.log_name, workers=client.worker_count)
    submitted = 0
    try:
        if argv:
            with open(argv[0], encoding="utf-8") as fh:
                for record in _read_records(fh):
                    client.add(record)
                    submitted += 1
        else:
            for record in _read_records(sys.stdin):
                client.add(record)
                submitted += 1
    finally:
        client.finalize()
    logger.info("shipping_finished", submitted=submitted)
    return 0


def main() -> None:
    """CLI entrypoint for `python src/main.py` / the `loganalytics-ship` script."""
    sys.exit(run(sys.argv[1:]))


if __name__ == "__main__":
    main()
