"""アプリケーションのエントリポイント"""

import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path

from chatctx.application.services import (
    PeriodicCleanup,
    RepositoryContextCleanupService,
)
from chatctx.application.use_cases import CleanupExpiredContextsUseCase
from chatctx.config import Config, ConfigError, LoggingConfig, load_config
from chatctx.infrastructure.factory import create_conversation_repository
from chatctx.infrastructure.persistence import DatabaseManager, PersistenceError

# Default logging for early startup
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def configure_logging(config: LoggingConfig | None) -> None:
    """Configure logging based on config.

    Args:
        config: Logging configuration. If None, uses defaults.
    """
    if config is None:
        return

    root_logger = logging.getLogger()
    level = getattr(logging, config.level.upper(), logging.INFO)
    root_logger.setLevel(level)

    if root_logger.handlers:
        formatter = logging.Formatter(config.format)
        for handler in root_logger.handlers:
            handler.setFormatter(formatter)

    if config.loggers:
        for logger_name, logger_level in config.loggers.items():
            individual_logger = logging.getLogger(logger_name)
            individual_level = getattr(logging, logger_level.upper(), logging.INFO)
            individual_logger.setLevel(individual_level)
            logger.debug(
                "Set logger '%s' to level %s", logger_name, logger_level.upper()
            )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chatctx",
        description="Conversation context store maintenance",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("config.yaml"),
        help="Path to config.yaml (default: ./config.yaml)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("cleanup", help="Delete expired contexts once and exit")
    subparsers.add_parser("run", help="Delete expired contexts periodically")
    return parser


async def _open_database(config: Config) -> DatabaseManager | None:
    if config.storage.driver != "sqlite":
        return None
    assert config.storage.database_path is not None
    db_manager = DatabaseManager(config.storage.database_path)
    await db_manager.create_tables()
    return db_manager


async def run_cleanup_once(config: Config) -> int:
    """期限切れコンテキストを1回削除する

    Returns:
        削除したコンテキスト数
    """
    db_manager = await _open_database(config)
    try:
        repository = create_conversation_repository(config, db_manager)
        use_case = CleanupExpiredContextsUseCase(
            RepositoryContextCleanupService(repository)
        )
        return await use_case.execute()
    finally:
        if db_manager is not None:
            await db_manager.close()


async def run_periodic_cleanup(config: Config) -> None:
    """シグナルを受けるまで定期的にクリーンアップを実行する"""
    db_manager = await _open_database(config)
    try:
        repository = create_conversation_repository(config, db_manager)
        periodic_cleanup = PeriodicCleanup(
            cleanup_use_case=CleanupExpiredContextsUseCase(
                RepositoryContextCleanupService(repository)
            ),
            config=config.conversation,
        )

        logger.info(
            "Starting periodic cleanup (interval: %ds, retention: %d days)...",
            config.conversation.cleanup_interval_seconds,
            config.conversation.retention_days,
        )
        cleanup_task = asyncio.create_task(periodic_cleanup.start())

        stop_event = asyncio.Event()
        loop = asyncio.get_running_loop()

        def shutdown_handler() -> None:
            logger.info("Received shutdown signal...")
            stop_event.set()

        loop.add_signal_handler(signal.SIGINT, shutdown_handler)
        loop.add_signal_handler(signal.SIGTERM, shutdown_handler)

        await stop_event.wait()

        logger.info("Shutting down...")
        await periodic_cleanup.stop()
        await asyncio.gather(cleanup_task, return_exceptions=True)
    finally:
        if db_manager is not None:
            await db_manager.close()

    logger.info("Shutdown complete")


def main(argv: list[str] | None = None) -> int:
    """CLI を実行する

    Returns:
        終了コード
    """
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        logger.error("%s", e)
        return 1
    except ConfigError as e:
        logger.error("Failed to load config: %s", e)
        return 1

    configure_logging(config.logging)

    if config.storage.driver == "memory":
        # The memory store is process-local; a fresh CLI process never sees
        # contexts written by the bot.
        logger.error(
            "The '%s' command requires storage.driver 'sqlite', got 'memory'",
            args.command,
        )
        return 1

    try:
        if args.command == "cleanup":
            deleted = asyncio.run(run_cleanup_once(config))
            print(f"Deleted {deleted} expired contexts")
        else:
            asyncio.run(run_periodic_cleanup(config))
    except PersistenceError as e:
        logger.error("Storage error: %s", e)
        return 1
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    return 0


if __name__ == "__main__":
    sys.exit(main())
