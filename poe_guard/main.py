import logging
import os
import sys
from typing import Optional, Sequence

from .check import run_check
from .config import build_parser, redact, settings_from_args, version_string
from .exceptions import ConfigurationError
from .logging_config import configure_logging
from .report import CheckResult, Status, unknown, write_result
from .unifi_client import UniFiClient

logger = logging.getLogger(__name__)


def main(argv: Optional[Sequence[str]] = None) -> int:
    # Configure logging early so settings warnings/errors are visible.
    # An invalid LOG_LEVEL is reported once settings are built.
    try:
        configure_logging(os.getenv("LOG_LEVEL") or "WARNING")
    except ValueError:
        configure_logging("WARNING")

    args = build_parser().parse_args(argv)
    if args.show_version:
        write_result(unknown(version_string()))
        return Status.UNKNOWN.value

    try:
        settings = settings_from_args(args)
    except ConfigurationError as exc:
        logger.error("Invalid configuration: %s", exc)
        write_result(unknown(f"Invalid configuration: {exc}"))
        return Status.UNKNOWN.value

    configure_logging(settings.log_level, settings.log_dir)
    logger.debug("Settings: %s", ", ".join(redact(settings)))

    client = UniFiClient(
        host=settings.host,
        username=settings.username,
        password=settings.password,
        port=settings.port,
        site=settings.site,
        verify_ssl=settings.verify_ssl,
        unifi_os=settings.unifi_os,
        timeout=settings.timeout,
    )

    result: CheckResult = run_check(settings, client)
    write_result(result, settings.output_path)
    return result.exit_code


if __name__ == "__main__":
    sys.exit(main())
