"""
Taskpoller CLI - run workers against a task queue server.

Examples:
    taskpoller run myapp.workers:resize_worker
    taskpoller run myapp.workers:ALL --poll-interval 0.5 --concurrency 4
    TASKPOLLER_SERVER_URL=http://conductor:8080/api taskpoller run myapp.workers:Resize
"""

import asyncio
import importlib
import inspect
import logging
import signal
from typing import List, Optional

import click

from taskpoller import __version__
from taskpoller.config import AppConfig
from taskpoller.core.errors import ConfigurationError, WorkerLoadError
from taskpoller.queue import create_queue
from taskpoller.worker import TaskManager, Worker

logger = logging.getLogger(__name__)


def load_workers(spec: str) -> List[Worker]:
    """
    Import workers named by a "module:attribute" spec.

    The attribute may be a Worker instance, a Worker subclass (instantiated
    with no arguments) or a list/tuple of Worker instances.
    """
    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name or not attr:
        raise WorkerLoadError(spec, "expected module:attribute")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise WorkerLoadError(spec, str(e)) from e

    try:
        target = getattr(module, attr)
    except AttributeError as e:
        raise WorkerLoadError(spec, f"module has no attribute {attr!r}") from e

    if isinstance(target, Worker):
        return [target]
    if inspect.isclass(target) and issubclass(target, Worker):
        return [target()]
    if isinstance(target, (list, tuple)) and target and all(isinstance(w, Worker) for w in target):
        return list(target)
    raise WorkerLoadError(spec, f"{type(target).__name__} is not a Worker")


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


async def run_workers(config: AppConfig, workers: List[Worker]) -> None:
    """Poll until SIGINT/SIGTERM, then stop and wait for in-flight iterations.

    Any queue type other than "http" gets a fresh, empty in-memory queue.
    """
    if config.queue == "http":
        client = create_queue("http", **config.server.model_dump())
    else:
        client = create_queue("memory")

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except (NotImplementedError, RuntimeError):
            # Windows event loops do not support signal handlers
            pass

    async with client:
        manager = TaskManager(client, workers, options=config.runner)
        manager.start_polling()
        try:
            await stop.wait()
            logger.info("Received stop signal")
        finally:
            manager.stop_polling()
            await manager.join()


@click.group()
@click.version_option(version=__version__, prog_name="taskpoller")
def cli():
    """Taskpoller - poll a task queue and run workers."""
    pass


@cli.command()
@click.argument("worker_specs", nargs=-1, required=True)
@click.option("--server-url", default=None, help="Queue server API root")
@click.option("--poll-interval", type=float, default=None, help="Seconds between polls")
@click.option("--domain", default=None, help="Task routing domain")
@click.option("--worker-id", default=None, help="Worker identity reported to the server")
@click.option("--concurrency", type=click.IntRange(min=1), default=None, help="Runners per worker")
@click.option(
    "--queue",
    "queue_type",
    type=click.Choice(["http", "memory"]),
    default=None,
    help="Queue client. 'memory' polls an empty in-process queue and only idles; use it to check that workers load.",
)
@click.option("--log-level", default=None, help="Logging level (DEBUG, INFO, ...)")
def run(
    worker_specs: tuple,
    server_url: Optional[str],
    poll_interval: Optional[float],
    domain: Optional[str],
    worker_id: Optional[str],
    concurrency: Optional[int],
    queue_type: Optional[str],
    log_level: Optional[str],
):
    """Run workers until interrupted.

    Examples:
        taskpoller run myapp.workers:resize_worker
        taskpoller run myapp.workers:ALL --domain staging
        taskpoller run myapp.workers:ALL --queue memory

    With --queue memory nothing is ever enqueued, so the runners start, poll
    and idle until interrupted.
    """
    try:
        config = AppConfig.from_env()
        runner = config.runner.merged(
            poll_interval=poll_interval, domain=domain, worker_id=worker_id, concurrency=concurrency
        )
        updates = {"runner": runner}
        if server_url:
            updates["server"] = config.server.model_copy(update={"server_url": server_url})
        if queue_type:
            updates["queue"] = queue_type
        if log_level:
            updates["log_level"] = log_level.upper()
        config = config.model_copy(update=updates)

        workers: List[Worker] = []
        for spec in worker_specs:
            workers.extend(load_workers(spec))
    except (ConfigurationError, WorkerLoadError) as e:
        raise click.ClickException(e.message) from e
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    configure_logging(config.log_level)
    names = ", ".join(w.task_def_name for w in workers)
    source = config.server.server_url if config.queue == "http" else "an empty in-memory queue"
    click.echo(f"Polling {source} for: {names}")

    try:
        asyncio.run(run_workers(config, workers))
    except ConfigurationError as e:
        raise click.ClickException(e.message) from e
    except KeyboardInterrupt:
        click.echo("Interrupted")


def main():
    cli()


if __name__ == "__main__":
    main()
