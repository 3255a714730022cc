"""Run a Distribute or Retract operation in-process, bypassing the job queue."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from src.hls_distribution.core.config import AppConfig
from src.hls_distribution.exceptions import HLSDistributionError
from src.hls_distribution.logging import configure_logging
from src.hls_distribution.schemas import parse_package, serialize_element
from src.hls_distribution.services import build_services


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Distribute or retract one package element.")
    parser.add_argument("operation", choices=["distribute", "retract"])
    parser.add_argument("package", type=Path, help="Path to a serialized package (JSON).")
    parser.add_argument("element_id", help="Identifier of the element inside the package.")
    parser.add_argument(
        "--check-availability",
        action="store_true",
        help="HEAD the public playlist URI after distributing.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    configure_logging()
    services = build_services(AppConfig.build_default())
    try:
        package = parse_package(args.package.read_text(encoding="utf-8"))
        if args.operation == "distribute":
            element = services.engine.distribute(
                package, args.element_id, args.check_availability
            )
        else:
            element = services.engine.retract(package, args.element_id)
    except (HLSDistributionError, OSError) as exc:
        print(f"{args.operation} failed: {exc}", file=sys.stderr)
        return 2
    finally:
        services.close()

    if element is None:
        print(f"{args.operation}: element '{args.element_id}' is not handled by this channel")
    else:
        print(serialize_element(element))
    return 0


if __name__ == "__main__":
    sys.exit(main())
