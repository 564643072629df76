"""Command-line entry point: load a configuration and serve it."""

from __future__ import annotations

import sys

from .config import Config, ConfigError
from .manager import ServerManager
from .utils import GREEN, RED, RESET, YELLOW, ShutdownSignal

DEFAULT_CONFIG = "default.conf"


def main(argv: list[str] | None = None) -> int:
    """Run the server with an optional configuration path; return the exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    try:
        shutdown = ShutdownSignal()
    except OSError as exc:
        print(f"Failed to create pipe: {exc}", file=sys.stderr)
        return 1

    with shutdown:
        shutdown.install()

        if len(args) > 1:
            print(f"{YELLOW}Usage: hajserv <config_file>{RESET}", file=sys.stderr)
            return 1
        path = args[0] if args else DEFAULT_CONFIG

        config = Config()
        try:
            config.load(path)
        except ConfigError as exc:
            print(f"{RED}{exc}{RESET}", file=sys.stderr)
            print(f"{RED}Failed to load config file: {path}{RESET}", file=sys.stderr)
            return 1
        print(f"{GREEN}Config file loaded successfully!{RESET}")
        if config.get_global("log_level") == "debug":
            print(config.describe(), end="")

        manager = ServerManager(
            log_connections=config.get_global("log_connections") == "true",
            log_requests=config.get_global("log_requests") == "true",
        )
        for index in range(config.server_count()):
            manager.add_server(config.server_block(index))
        manager.start_servers(shutdown)
    return 0


if __name__ == "__main__":
    sys.exit(main())