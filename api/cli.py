#!/usr/bin/env python3
"""CLI for Software Certificate Badges API management tasks.

Usage:
    python -m cli <command>

Commands:
    migrate         Run database migrations
    seed            Insert sample badge records (idempotent)
    create-api-key  Issue an API key and print it once
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from alembic.config import Config

from core.logger import configure_logging, get_logger

logger = get_logger(__name__)

API_DIR = Path(__file__).resolve().parent


def _get_alembic_config() -> Config:
    cfg = Config(str(API_DIR / "alembic.ini"))
    # Absolute so it works from any working directory
    cfg.set_main_option("script_location", str(API_DIR / "alembic"))
    return cfg


def load_seed_file(path: Path) -> dict[str, dict]:
    """Read seed records: a JSON object mapping commit_id to record fields."""
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict) or not all(
        isinstance(fields, dict) for fields in data.values()
    ):
        raise ValueError(f"{path} must map commit IDs to objects of record fields")
    return data


def cmd_migrate(target: str) -> int:
    """Run database migrations."""
    from alembic import command

    logger.info("migrations.started", target=target)
    command.upgrade(_get_alembic_config(), target)
    logger.info("migrations.complete")
    return 0


async def _seed(entries: dict[str, dict] | None) -> list[str]:
    from core.database import create_engine, create_session_maker, dispose_engine
    from services.badges_service import seed_badges

    engine = create_engine()
    try:
        session_maker = create_session_maker(engine)
        async with session_maker() as session:
            created = await seed_badges(session, entries)
            await session.commit()
        return created
    finally:
        await dispose_engine(engine)


def cmd_seed(file: str | None) -> int:
    """Insert sample records that do not exist yet."""
    from core.config import get_settings

    path = file or get_settings().seed_file_path
    entries = None
    if path:
        try:
            entries = load_seed_file(Path(path))
        except (OSError, ValueError) as e:
            logger.error("seed.file.invalid", path=path, error=str(e))
            return 1

    created = asyncio.run(_seed(entries))
    logger.info("seed.complete", created=len(created))
    for commit_id in created:
        print(commit_id)
    return 0


async def _create_api_key(name: str, read: bool, write: bool, delete: bool):
    from core.database import create_engine, create_session_maker, dispose_engine
    from schemas import APIKeyCreate
    from services.api_keys_service import create_api_key

    engine = create_engine()
    try:
        session_maker = create_session_maker(engine)
        async with session_maker() as session:
            created = await create_api_key(
                session,
                APIKeyCreate(
                    name=name, can_read=read, can_write=write, can_delete=delete
                ),
            )
            await session.commit()
        return created
    finally:
        await dispose_engine(engine)


def cmd_create_api_key(name: str, read: bool, write: bool, delete: bool) -> int:
    """Issue an API key. The raw key is printed once and never stored."""
    created = asyncio.run(_create_api_key(name, read, write, delete))
    print(f"id:  {created.id}")
    print(f"key: {created.key}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Software Certificate Badges API CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    migrate = subparsers.add_parser("migrate", help="Run database migrations")
    migrate.add_argument(
        "target", nargs="?", default="head", help="Target revision (default: head)"
    )

    seed = subparsers.add_parser("seed", help="Insert sample badge records")
    seed.add_argument(
        "--file", help="JSON file of records (default: SEED_FILE_PATH or built-in)"
    )

    create_key = subparsers.add_parser("create-api-key", help="Issue an API key")
    create_key.add_argument("--name", required=True, help="Label for the key")
    create_key.add_argument(
        "--read",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Allow listing records (default: on)",
    )
    create_key.add_argument(
        "--write",
        action=argparse.BooleanOptionalAction,
        default=False,
        help="Allow creating and editing records",
    )
    create_key.add_argument(
        "--delete",
        action=argparse.BooleanOptionalAction,
        default=False,
        help="Allow deleting records",
    )

    args = parser.parse_args(argv)

    if args.command == "migrate":
        return cmd_migrate(args.target)
    elif args.command == "seed":
        return cmd_seed(args.file)
    elif args.command == "create-api-key":
        return cmd_create_api_key(args.name, args.read, args.write, args.delete)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    configure_logging()
    sys.exit(main())
