"""Worker for the swap lifecycle workflow.

Starts a Temporal worker with SwapLifecycleWorkflow and the activities of one
SwapBook registered on the configured task queue.

Usage::

    import asyncio
    from irswap.workflow.activities import SwapBook
    from irswap.workflow.worker import run_worker

    book = SwapBook()
    book.register("SWAP-001", contract)
    asyncio.run(run_worker(book))
"""

from __future__ import annotations

from temporalio.client import Client
from temporalio.worker import Worker

from irswap.infra.config import DEFAULT_TEMPORAL_CONFIG, TemporalConfig
from irswap.workflow.activities import SwapActivities, SwapBook
from irswap.workflow.swap_workflow import SwapLifecycleWorkflow


def build_worker(client: Client, book: SwapBook, task_queue: str) -> Worker:
    """Worker serving the lifecycle workflow for every swap in book."""
    activities = SwapActivities(book)
    return Worker(
        client,
        task_queue=task_queue,
        workflows=[SwapLifecycleWorkflow],
        activities=[
            activities.check_liquidation,
            activities.settle_swap_at_maturity,
        ],
    )


async def run_worker(
    book: SwapBook,
    config: TemporalConfig = DEFAULT_TEMPORAL_CONFIG,
) -> None:
    """Connect to Temporal and run the worker until interrupted."""
    from irswap.workflow.converter import IRSWAP_DATA_CONVERTER

    client = await Client.connect(
        config.target_host, namespace=config.namespace,
        data_converter=IRSWAP_DATA_CONVERTER,
    )
    await build_worker(client, book, config.task_queue).run()
