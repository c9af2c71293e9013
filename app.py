import asyncio
import logging
import sys
from typing import List, Optional

from openai import AsyncOpenAI
from slack_bolt.adapter.socket_mode.async_handler import AsyncSocketModeHandler
from slack_bolt.async_app import AsyncApp

from config import Settings, load_settings
from errors import ConfigError, IdentityResolutionError
from llm import ResponseGenerator
from outreach import Outreach
from scheduler import OutreachScheduler
from slack_read import SlackTransport
from triage import InboundTriage

logger = logging.getLogger("slack_teammate")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str):
    numeric = logging.getLevelName(level)
    if not isinstance(numeric, int):
        numeric = logging.INFO
    logging.basicConfig(level=numeric, format=LOG_FORMAT)


# -- Slack App --
def create_app(settings: Settings) -> AsyncApp:
    # Socket Mode needs no signing secret; only verify when one is configured
    return AsyncApp(
        token=settings.slack_token,
        signing_secret=settings.slack_signing_secret,
        request_verification_enabled=bool(settings.slack_signing_secret),
        logger=logger,
    )


#---- Slack Event Handlers ---
def register_handlers(app: AsyncApp, triage: InboundTriage):
    # DMs and @-mentions both arrive as plain message events
    @app.event("message")
    async def handle_message_events(event):
        await triage.handle(event)

    @app.error
    async def handle_errors(error, body, logger):
        logger.exception(f"Unhandled error for event {(body or {}).get('event_id')}: {error}")


async def run(settings: Settings):
    app = create_app(settings)
    transport = SlackTransport(app.client)

    # -- Identity (once, before any mention checks) --
    self_id = await transport.resolve_self_identity()
    logger.info(f"Auth as {self_id}")

    # -- OpenAI Client --
    generator = ResponseGenerator(
        AsyncOpenAI(api_key=settings.openai_api_key),
        role=settings.role,
        model=settings.model,
    )

    triage = InboundTriage(transport, generator, settings, self_id=self_id)
    register_handlers(app, triage)

    outreach = Outreach(transport, generator, settings, self_id=self_id)
    scheduler = OutreachScheduler(outreach, settings)

    handler = AsyncSocketModeHandler(app, settings.slack_app_token)
    await handler.connect_async()
    logger.info("Slack bot is running!")

    # Fire off some posts on startup, then on the intervals
    scheduler.start()
    try:
        await asyncio.Event().wait()
    finally:
        scheduler.stop()
        await handler.close_async()


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    profile = argv[0] if argv else None

    try:
        settings = load_settings(profile)
    except ConfigError as e:
        configure_logging("INFO")
        logger.critical(f"Configuration error: {e}")
        return 2

    configure_logging(settings.log_level)
    try:
        asyncio.run(run(settings))
    except IdentityResolutionError as e:
        logger.critical(f"Could not resolve bot identity, refusing to start: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Shutting down")
    return 0


# --- Start the app ---
if __name__ == "__main__":
    sys.exit(main())
