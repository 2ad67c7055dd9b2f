"""Process entry point: HTTP server and delivery worker side by side.

Run with ``python -m backend.newsletter``. Both tasks share one application
context (and therefore one connection pool). The process exits as soon as
either task ends; restarting it is left to the supervisor.
"""

import asyncio
import logging

import uvicorn

from backend.newsletter.config import get_settings
from backend.newsletter.context import ApplicationContext
from backend.newsletter.delivery.worker import run_worker_until_stopped
from backend.newsletter.main import create_app
from backend.newsletter.telemetry import configure_logging

logger = logging.getLogger("backend.newsletter")


def report_exit(task: asyncio.Task) -> None:
    name = task.get_name()
    if task.cancelled():
        logger.info("%s was cancelled", name)
        return
    error = task.exception()
    if error is None:
        logger.info("%s has exited", name)
    else:
        logger.error("%s failed", name, exc_info=error)


async def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)

    context = ApplicationContext.from_settings(settings)
    server = uvicorn.Server(
        uvicorn.Config(
            create_app(context),
            host=settings.app_host,
            port=settings.app_port,
            log_config=None,
        )
    )

    api_task = asyncio.create_task(server.serve(), name="API")
    worker_task = asyncio.create_task(
        run_worker_until_stopped(context), name="Background worker"
    )

    try:
        done, pending = await asyncio.wait(
            {api_task, worker_task}, return_when=asyncio.FIRST_COMPLETED
        )
        for task in done:
            report_exit(task)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
    finally:
        context.close()


if __name__ == "__main__":
    asyncio.run(main())
