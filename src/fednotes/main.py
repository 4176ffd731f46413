"""Unified entry point for fednotes.

Starts one of the interfaces:
- REST API server (default)
- CLI commands against a notes directory
"""

import argparse
import sys


def main():
    """Main entry point with interface selection."""
    parser = argparse.ArgumentParser(
        description="fednotes - file-backed markdown notes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Interfaces:
  api         Start the REST API server (default)
  cli         Run a CLI command (tree, search, config, tail)

Examples:
  fednotes                          # Start API server
  fednotes api --port 8080          # Start API on custom port
  fednotes cli tree                 # Print the notes tree
  fednotes cli search "todo"        # Search note contents
""",
    )

    parser.add_argument(
        "interface",
        nargs="?",
        default="api",
        choices=["api", "cli"],
        help="Which interface to start (default: api)",
    )

    parser.add_argument(
        "--host",
        default=None,
        help="Host to bind API server to (default: 127.0.0.1)",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port for API server (default: 7591)",
    )

    args, rest = parser.parse_known_args()

    if args.interface == "api":
        if rest:
            parser.error(f"unrecognized arguments: {' '.join(rest)}")

        import uvicorn

        from fednotes.core.config import (
            FEDNOTES_HOST,
            FEDNOTES_PORT,
            setup_logging,
            validate_notes_environment,
        )

        setup_logging()
        is_valid, message = validate_notes_environment()
        if not is_valid:
            print(f"ERROR: {message}")
            sys.exit(1)

        host = args.host or FEDNOTES_HOST or "127.0.0.1"
        port = args.port or FEDNOTES_PORT

        print(f"Starting fednotes API server on {host}:{port}")
        uvicorn.run(
            "fednotes.api.app:app",
            host=host,
            port=port,
            reload=False,
        )

    elif args.interface == "cli":
        from fednotes.interfaces.cli.app import run_cli

        run_cli(rest)


if __name__ == "__main__":
    main()
