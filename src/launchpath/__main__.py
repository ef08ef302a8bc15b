"""CLI entry point for launchpath."""

from __future__ import annotations

import argparse
import asyncio
import sys

from launchpath.config import AppConfig, load_config
from launchpath.log import setup_logging
from launchpath.storage.database import Database
from launchpath.storage.system_repo import SystemRepository


def _add_config_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-c", "--config", default="config.yaml", help="Path to config file")
    parser.add_argument("-e", "--env", default=".env", help="Path to .env file")


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="launchpath",
        description="Conversational business builder served over SSE",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP server")
    _add_config_args(serve_parser)
    serve_parser.add_argument("--host", help="Override server.host")
    serve_parser.add_argument("--port", type=int, help="Override server.port")

    check_parser = subparsers.add_parser("config-check", help="Validate configuration")
    _add_config_args(check_parser)

    system_parser = subparsers.add_parser("new-system", help="Create a profile and an empty system")
    _add_config_args(system_parser)
    system_parser.add_argument("--situation", help="current_situation, e.g. complete_beginner")
    system_parser.add_argument("--time", dest="time_availability", help="time_availability, e.g. 5_to_15")
    system_parser.add_argument("--revenue-goal", help="revenue_goal, e.g. 5k_10k")
    system_parser.add_argument("--outreach", dest="outreach_comfort", help="outreach_comfort")
    system_parser.add_argument("--technical", dest="technical_comfort", help="technical_comfort")
    system_parser.add_argument("--blocker", dest="blockers", action="append", default=[], help="Repeatable")

    args = parser.parse_args()

    if args.command is None:
        args.command = "serve"
        args.config = "config.yaml"
        args.env = ".env"
        args.host = None
        args.port = None

    if args.command == "config-check":
        _check_config(args.config, args.env)
    elif args.command == "new-system":
        _new_system(args)
    elif args.command == "serve":
        _serve(args.config, args.env, args.host, args.port)


def _load_or_exit(config_path: str, env_path: str) -> AppConfig:
    try:
        return load_config(config_path, env_path)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        print("Copy config.example.yaml to config.yaml and .env.example to .env first")
        sys.exit(1)
    except Exception as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)


def _check_config(config_path: str, env_path: str) -> None:
    """Validate configuration and print summary."""
    config = _load_or_exit(config_path, env_path)
    print(f"Configuration valid: {config_path}")
    print(f"  Data directory: {config.data_dir}")
    print(f"  Storage: {config.storage.db_path}")
    print(f"  Anthropic: {'configured' if config.anthropic else 'MISSING'}")
    print(f"  Conversation model: {config.ai.model}")
    print(f"  Generation model: {config.ai.structured_model}")
    print(f"  Interpretation model: {config.ai.fast_model}")
    print(f"  Max tool rounds: {config.ai.max_tool_rounds}")
    print(f"  Quality retries: {config.workflows.max_quality_retries}")
    print(f"  Server: {config.server.host}:{config.server.port}")
    if not config.anthropic:
        sys.exit(1)


def _new_system(args: argparse.Namespace) -> None:
    config = _load_or_exit(args.config, args.env)
    setup_logging(config.log_level, config.json_logs)

    async def _create() -> str:
        db = Database(config.storage.db_path)
        await db.initialize()
        try:
            repo = SystemRepository(db)
            profile = await repo.create_profile(
                current_situation=args.situation,
                time_availability=args.time_availability,
                revenue_goal=args.revenue_goal,
                outreach_comfort=args.outreach_comfort,
                technical_comfort=args.technical_comfort,
                blockers=args.blockers,
            )
            system = await repo.create_system(profile.id)
            return system.id
        finally:
            await db.close()

    print(asyncio.run(_create()))


def _serve(config_path: str, env_path: str, host: str | None, port: int | None) -> None:
    """Load config and run the API under uvicorn."""
    import uvicorn

    from launchpath.app import LaunchPathApp
    from launchpath.server.api import create_api

    config = _load_or_exit(config_path, env_path)
    setup_logging(config.log_level, config.json_logs)

    try:
        app = LaunchPathApp(config)
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    uvicorn.run(
        create_api(app),
        host=host or config.server.host,
        port=port or config.server.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
