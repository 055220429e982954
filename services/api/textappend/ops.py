"""Operator CLI for the text append service.

Recovery after a breaker trip is manual: the service only ever disables
public access, and an operator re-enables it here once the cause is
understood. The shared resource is also created here, out of band, before
the first append.

Usage:
    textappend-ops status
    textappend-ops enable
    textappend-ops disable
    textappend-ops create-resource [--content TEXT]
"""

import argparse
import logging

from textappend.bootstrap import build_routing, build_store
from textappend.config import ServiceConfig, load_config
from textappend.exceptions import CollaboratorError

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="textappend-ops",
        description="Operator actions for the text append service",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config JSON (default: TEXTAPPEND_CONFIG_PATH or config.json)",
    )
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("status", help="Show public access and resource state")
    sub.add_parser("enable", help="Re-enable public access (manual recovery)")
    sub.add_parser("disable", help="Disable public access")
    create = sub.add_parser("create-resource", help="Create the shared resource if absent")
    create.add_argument("--content", default="", help="Initial content (default: empty)")
    return parser.parse_args(argv)


def _status(config: ServiceConfig) -> int:
    routing = build_routing(config)
    store = build_store(config)
    enabled = routing.is_public_access_enabled()
    metadata = store.probe_metadata(config.resource.key)
    print(f"Public access: {'enabled' if enabled else 'DISABLED'}")
    if metadata is None:
        print(f"Resource {config.resource.key}: not created")
    else:
        print(
            f"Resource {config.resource.key}: {metadata.size} bytes, "
            f"last modified {metadata.last_modified_at.isoformat()}"
        )
    return 0


def _create_resource(config: ServiceConfig, content: str) -> int:
    store = build_store(config)
    key = config.resource.key
    if store.probe_metadata(key) is not None:
        print(f"Resource {key} already exists, left unchanged")
        return 0
    store.write_all(key, content.encode("utf-8"))
    print(f"Created resource {key}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    args = parse_args(argv)
    config = load_config(args.config)

    try:
        if args.command == "status":
            return _status(config)
        if args.command == "enable":
            build_routing(config).enable_public_access()
            print("Public access enabled")
            return 0
        if args.command == "disable":
            build_routing(config).disable_public_access()
            print("Public access disabled")
            return 0
        return _create_resource(config, args.content)
    except CollaboratorError as e:
        logger.error("%s failed: %s", args.command, e)
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
