"""
Command-line interface for inspecting call contexts.

Shows the configured client-wide defaults and the effective context a call
override produces when merged on top of them.
"""

import argparse
import json
import logging
import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional, Tuple, Type, Union

import structlog

from rpccontext import __version__
from rpccontext.config import CallContextConfig, get_config
from rpccontext.httpjson.context import HttpJsonCallContext
from rpccontext.rpc.interface import ApiCallContext, UnsupportedCapabilityError
from rpccontext.rpc.retry import RetrySettings
from rpccontext.rpc.status import StatusCode
from rpccontext.streaming.context import StreamingCallContext

logger = structlog.get_logger(__name__)

TRANSPORTS = {
    "httpjson": HttpJsonCallContext,
    "streaming": StreamingCallContext,
}


def setup_logging(level: str = "INFO", json_format: bool = False) -> None:
    """Configure structured logging."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if json_format
            else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper()),
        stream=sys.stderr,
    )


def _check_type(
    key: str,
    value,
    expected: Union[type, Tuple[type, ...]],
    description: str,
) -> None:
    if not isinstance(value, expected) or isinstance(value, bool):
        raise ValueError(f"Context field {key} must be {description}, got {type(value).__name__}")


def _seconds(key: str, value) -> timedelta:
    _check_type(key, value, (int, float), "a number of seconds")
    return timedelta(seconds=value)


def load_context(
    data: dict,
    context_cls: Type[ApiCallContext] = HttpJsonCallContext,
) -> ApiCallContext:
    """
    Build a call context from its JSON description.

    Recognized keys: ``timeout_seconds``, ``deadline`` (ISO 8601),
    ``extra_headers``, ``retry_settings``, ``retryable_codes``,
    ``stream_wait_timeout_seconds`` and ``stream_idle_timeout_seconds``.

    Args:
        data: Decoded JSON object
        context_cls: Context type to build

    Returns:
        New context with the described fields set

    Raises:
        ValueError: On unknown keys or invalid values
    """
    context = context_cls.create_default()
    for key, value in data.items():
        if key == "timeout_seconds":
            context = context.with_timeout(_seconds(key, value))
        elif key == "deadline":
            _check_type(key, value, str, "an ISO 8601 string")
            context = context.with_deadline(datetime.fromisoformat(value))
        elif key == "extra_headers":
            _check_type(key, value, dict, "an object")
            context = context.with_extra_headers(value)
        elif key == "retry_settings":
            _check_type(key, value, dict, "an object")
            context = context.with_retry_settings(RetrySettings.from_dict(value))
        elif key == "retryable_codes":
            _check_type(key, value, list, "a list")
            context = context.with_retryable_codes({StatusCode(code) for code in value})
        elif key == "stream_wait_timeout_seconds":
            context = context.with_stream_wait_timeout(_seconds(key, value))
        elif key == "stream_idle_timeout_seconds":
            context = context.with_stream_idle_timeout(_seconds(key, value))
        else:
            raise ValueError(f"Unknown context field: {key}")
    return context


def _read_json(path: str) -> dict:
    with Path(path).open(encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object")
    return data


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="rpc-context",
        description="Inspect RPC call context defaults and merges",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: from configuration)",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Output logs in JSON format",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    subparsers.add_parser("show-config", help="Print the effective configuration")

    merge_parser = subparsers.add_parser(
        "merge",
        help="Merge a call override on top of a base context",
    )
    merge_parser.add_argument(
        "override",
        help="JSON file describing the call-site context",
    )
    merge_parser.add_argument(
        "--base",
        help="JSON file describing the base context (default: configured defaults)",
    )
    merge_parser.add_argument(
        "--transport",
        choices=sorted(TRANSPORTS),
        default="httpjson",
        help="Transport of the contexts (default: httpjson)",
    )

    return parser


def show_config(config: CallContextConfig) -> dict:
    """Get the configuration with its derived call defaults."""
    data = config.model_dump(mode="json")
    data["retry_settings"] = config.retry_settings.to_dict()
    return data


def merge_contexts(
    override_path: str,
    base_path: Optional[str],
    transport: str,
    config: CallContextConfig,
) -> dict:
    """
    Merge the override context on top of the base context.

    Returns:
        Dictionary view of the effective context
    """
    context_cls = TRANSPORTS[transport]
    if base_path:
        base = load_context(_read_json(base_path), context_cls)
    else:
        base = context_cls.from_config(config)
    override = load_context(_read_json(override_path), context_cls)

    logger.info("merging_contexts", transport=transport, base=base_path or "config")
    return base.merge(override).to_dict()


def main(argv: Optional[list] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        config = get_config()
    except ValueError as e:
        print(f"error: invalid configuration: {e}", file=sys.stderr)
        return 2

    setup_logging(args.log_level or config.log_level, args.log_json or config.log_json)

    try:
        if args.command == "show-config":
            result = show_config(config)
        else:
            result = merge_contexts(args.override, args.base, args.transport, config)
    except (OSError, TypeError, ValueError, UnsupportedCapabilityError) as e:
        logger.error("command_failed", command=args.command, error=str(e))
        print(f"error: {e}", file=sys.stderr)
        return 2

    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
