"""Main entry point for the SOS matching service."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import json
import sys
import time
from pathlib import Path
from typing import Optional, Sequence, Tuple

from pydantic import ValidationError

from sos_matching.clients.exceptions import ClientConfigurationError
from sos_matching.config.environment import EnvironmentConfig
from sos_matching.config.exceptions import ConfigurationError
from sos_matching.config.loader import load_config, validate_config_file
from sos_matching.config.models import AppConfig
from sos_matching.logging import get_logger
from sos_matching.logging.config import configure_logging
from sos_matching.persistence.exceptions import PersistenceError

logger = get_logger(__name__, component="cli")


def load_runtime_config(
    config_path: Optional[Path], log_level_override: Optional[str]
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load configuration and settle the effective log level.

    Log level priority: CLI > LOG_LEVEL > config file > INFO.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config, env_config = load_config(config_path)

    if log_level_override:
        env_config.log_level = log_level_override
    elif not env_config.log_level:
        env_config.log_level = app_config.logging.level or "INFO"

    return app_config, env_config


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sos-matching",
        description="SOS Matching Service - matches emergency requests to volunteers and resources",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml if present, else built-in defaults)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config and environment)",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    serve = commands.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="0.0.0.0", help="Bind address (default: 0.0.0.0)")
    serve.add_argument("--port", type=int, default=3005, help="Port (default: 3005)")

    match = commands.add_parser("match", help="Run matching once for a request file and print the result")
    match.add_argument("--request", type=Path, required=True, help="JSON file with a MatchRequest")

    check = commands.add_parser("validate-config", help="Validate a configuration file and exit")
    check.add_argument("path", type=Path, help="Configuration file to validate")

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    args = _build_parser().parse_args(argv)

    if args.command == "validate-config":
        return 0 if validate_config_file(args.path) else 1

    start_time = time.time()

    try:
        app_config, env_config = load_runtime_config(args.config, args.log_level)
        configure_logging(
            level=env_config.log_level,
            format_type=app_config.logging.format,
            environment=env_config.environment,
        )

        logger.info(
            "SOS matching service starting",
            extra={
                "event": "service.starting",
                "command": args.command,
                "config_path": str(args.config) if args.config else None,
                "log_level": env_config.log_level,
            },
        )
        logger.info(
            "Configuration loaded",
            extra={
                "event": "config.loaded",
                "score_threshold": app_config.matching.score_threshold,
                "max_radius_km": app_config.matching.max_radius_km,
                "max_matches_per_request": app_config.matching.max_matches_per_request,
                "log_format": app_config.logging.format,
            },
        )

        if args.command == "serve":
            return _serve(app_config, env_config, args.host, args.port)
        return _match_once(app_config, env_config, args.request)

    except (ConfigurationError, ClientConfigurationError) as e:
        print(f"Configuration error:\n{e}", file=sys.stderr)
        return 1
    except PersistenceError as e:
        logger.error(
            f"Storage failure: {e}",
            exc_info=True,
            extra={"event": "service.fatal_error", "error_type": type(e).__name__},
        )
        return 1
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received", extra={"event": "service.keyboard_interrupt"})
        return 0
    finally:
        logger.info(
            "SOS matching service stopped",
            extra={"event": "service.stopping", "uptime_seconds": round(time.time() - start_time, 2)},
        )


def _serve(app_config: AppConfig, env_config: EnvironmentConfig, host: str, port: int) -> int:
    import uvicorn

    from sos_matching.api.app import create_app_from_config

    app = create_app_from_config(app_config, env_config)
    logger.info(
        f"Matching API listening on {host}:{port}",
        extra={"event": "service.serve.started", "host": host, "port": port},
    )
    # Logging is already configured; keep uvicorn from replacing the root handler
    uvicorn.run(app, host=host, port=port, log_config=None)
    return 0


def _match_once(app_config: AppConfig, env_config: EnvironmentConfig, request_file: Path) -> int:
    from sos_matching.clients.factory import build_clients
    from sos_matching.events.bus import LoggingEventBus
    from sos_matching.events.publisher import EventPublisher
    from sos_matching.persistence.database import close_database, init_database
    from sos_matching.pipeline.runner import MatchOrchestrator

    try:
        with open(request_file, "r", encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        print(f"Cannot read request file {request_file}: {e}", file=sys.stderr)
        return 1

    init_database(env_config.database_url)
    clients = build_clients(app_config)
    try:
        publisher = EventPublisher(LoggingEventBus(), app_config.queues)
        orchestrator = MatchOrchestrator.from_clients(app_config.matching, clients, publisher)
        try:
            result = orchestrator.match_request(payload)
        except ValidationError as e:
            print(f"Invalid match request in {request_file}:", file=sys.stderr)
            for err in e.errors():
                print(f"  - {'.'.join(str(p) for p in err['loc'])}: {err['msg']}", file=sys.stderr)
            return 1

        print(json.dumps(result.to_response(), indent=2))
        logger.info(
            "Manual match completed",
            extra={
                "event": "service.manual_match.completed",
                "matches_found": len(result.matches),
                "had_failures": result.had_failures,
                "skipped": result.skipped,
            },
        )
        return 0
    finally:
        clients.close()
        close_database()


if __name__ == "__main__":
    sys.exit(main())
