"""Command-line entry point for the Log Forwarder."""

import argparse
import asyncio
import logging
import sys
import uuid

from forwarder.config import load_config
from forwarder.forwarder import handle
from forwarder.models import InvocationContext


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Forward a batch of log records to the New Relic Logs API"
    )
    parser.add_argument(
        "input",
        nargs="?",
        default="-",
        help="file holding the raw log payload ('-' reads stdin)",
    )
    parser.add_argument("--config", type=str, default=None, help="YAML config file")
    parser.add_argument("--function-name", type=str, default="log-forwarder")
    parser.add_argument("--invocation-id", type=str, default=None)
    parser.add_argument("--log-level", type=str, default="INFO")
    return parser.parse_args(argv)


def read_payload(path: str) -> bytes:
    if path == "-":
        return sys.stdin.buffer.read()
    with open(path, "rb") as f:
        return f.read()


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger = logging.getLogger(__name__)

    config = load_config(args.config)
    context = InvocationContext(
        function_name=args.function_name,
        invocation_id=args.invocation_id or str(uuid.uuid4()),
    )
    logger.info(
        "Forwarding logs: endpoint=%s, invocation=%s",
        config.endpoint,
        context.invocation_id,
    )

    try:
        asyncio.run(handle(read_payload(args.input), context, config))
    except KeyboardInterrupt:
        logger.info("Interrupted")
    return 0


if __name__ == "__main__":
    sys.exit(main())
