"""
Demo runner: connect, insert one article, read the collection back, disconnect.

Every parameter (connection string, credentials, database, collection and the
document itself) comes from :class:`DemoConfig`.
"""

import argparse
import asyncio
import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from articles_demo.core.exceptions import ConfigurationError, DemoError, DisconnectError
from articles_demo.foundation.config import DemoConfig, load_config
from articles_demo.foundation.types import DemoStep
from articles_demo.foundation.logging import (
    get_logger, setup_logging, LogContext, generate_correlation_id, correlation_id
)
from articles_demo.infrastructure.database import (
    InsertAck, MongoConnection, connect_mongodb, select_database, select_collection,
    insert_document, find_documents, disconnect_mongodb
)


@dataclass
class DemoResult:
    """What one run produced."""
    ack: InsertAck
    documents: List[Dict[str, Any]] = field(default_factory=list)
    disconnected: bool = False


class DemoRunner:
    """
    Runs the demo sequence once.

    With ``release_on_error`` (the default) any failure or cancellation after
    connecting closes the session before the error propagates. Pass ``False``
    to leave the session open on failure instead.
    """

    def __init__(self, config: DemoConfig, release_on_error: bool = True):
        self.config = config
        self.release_on_error = release_on_error
        self.logger = get_logger(__name__, LogContext(component="DemoRunner"))

    def build_document(self) -> Dict[str, Any]:
        """Copy the configured document; it is inserted exactly as configured."""
        issues = self.config.validate_configuration()
        if issues:
            raise ConfigurationError(f"Invalid configuration: {'; '.join(issues)}", config_key="document")
        return copy.deepcopy(self.config.document)

    async def run(self) -> DemoResult:
        token = correlation_id.set(generate_correlation_id())
        try:
            return await self._run()
        finally:
            correlation_id.reset(token)

    async def _run(self) -> DemoResult:
        db_config = self.config.database
        document = self.build_document()

        self.logger.info("Connecting the MongoDB instance")
        connection = await connect_mongodb(
            db_config.connection_string,
            db_config.username,
            db_config.password,
            server_selection_timeout_ms=db_config.server_selection_timeout_ms,
        )
        self.logger.info("Connection to MongoDB established")

        try:
            self.logger.with_context(step=DemoStep.SELECT_DATABASE).info(
                f"Connecting the {db_config.database_name} database")
            database = select_database(connection, db_config.database_name)

            self.logger.with_context(step=DemoStep.SELECT_COLLECTION).info(
                f"Connecting the {db_config.collection_name} collection")
            collection = select_collection(database, db_config.collection_name)

            self.logger.info("Write a document inside the collection")
            ack = await insert_document(collection, document)

            documents = await find_documents(collection)
            self.logger.info("Find all documents inside the collection",
                             document_count=len(documents),
                             documents=documents)
        except BaseException:
            if self.release_on_error:
                await self._release(connection)
            raise

        self.logger.info("Disconnecting the MongoDB instance")
        disconnected = await disconnect_mongodb(connection)
        self.logger.info("Disconnected")

        return DemoResult(ack=ack, documents=documents, disconnected=disconnected)

    async def _release(self, connection: MongoConnection) -> None:
        """Close the session after a failed step; the step's error still propagates."""
        if not connection.is_connected:
            return
        try:
            await disconnect_mongodb(connection)
        except DisconnectError as e:
            self.logger.warning("Could not release connection after failure", error=str(e))


async def run_demo(config: Optional[DemoConfig] = None, release_on_error: bool = True) -> DemoResult:
    """Run the demo with ``config``, or with configuration loaded from the environment."""
    if config is None:
        config = load_config()
    return await DemoRunner(config, release_on_error=release_on_error).run()


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Insert an article into MongoDB and read the collection back")
    parser.add_argument('--config', help='Path to a YAML configuration file')
    parser.add_argument('--env-file', help='Path to a .env file with MONGODB_* settings')
    parser.add_argument('--log-level', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        help='Override the configured log level')
    parser.add_argument('--plain-logs', action='store_true',
                        help='Plain text log lines instead of JSON')
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    """Console entry point. Failures propagate and exit non-zero."""
    args = parse_args(argv)
    config = load_config(env_file=args.env_file, yaml_file=args.config)

    setup_logging(
        level=args.log_level or config.log_level,
        log_file=config.log_file,
        structured=config.structured_logging and not args.plain_logs,
    )
    logger = get_logger(__name__)

    try:
        result = asyncio.run(run_demo(config))
    except DemoError as e:
        logger.exception(f"Demo failed: {e}", error_code=e.error_code)
        raise

    logger.info("Demo completed successfully",
                inserted_id=result.ack.inserted_id,
                document_count=len(result.documents))


if __name__ == "__main__":
    main()
