#!/usr/bin/env python3
"""CHAGEE API client - Module Entry Point.

Performs a single API call and prints the result envelope as JSON:
python -m chagee_client GET /api/user-client/customer/info
"""

import argparse
import asyncio
import json
import sys


def main() -> None:
    """Main entry point for the CHAGEE API client CLI."""
    parser = argparse.ArgumentParser(
        description="Call the CHAGEE API and print the result envelope",
        prog="chagee-client",
    )

    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version information",
    )
    parser.add_argument("method", nargs="?", choices=["GET", "POST", "get", "post"])
    parser.add_argument("path", nargs="?", help="API path or absolute URL")
    parser.add_argument("--body", help="JSON request body for POST calls")
    parser.add_argument("--base-url", help="Override the configured API base URL")
    parser.add_argument("--token", help="Bearer token for this call")

    args = parser.parse_args()

    if args.version:
        from chagee_client import __version__

        print(f"CHAGEE API client v{__version__}")
        return

    if not args.method or not args.path:
        parser.error("method and path are required")

    body = None
    if args.body:
        try:
            body = json.loads(args.body)
        except ValueError as e:
            parser.error(f"--body is not valid JSON: {e}")

    from chagee_client.config.settings import Settings
    from chagee_client.main import run_call, setup_logging
    from chagee_client.utils.exceptions import ConfigurationError

    settings = Settings()
    if args.base_url:
        # The override also satisfies the required CHAGEE_API_BASE check
        settings.api_base = args.base_url
    if args.token:
        settings.token = args.token
    setup_logging(settings)

    try:
        envelope = asyncio.run(run_call(settings, args.method, args.path, body=body))
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(2)

    print(json.dumps(envelope.model_dump(by_alias=True), indent=2, ensure_ascii=False))
    if not envelope.ok:
        sys.exit(1)


if __name__ == "__main__":
    main()
