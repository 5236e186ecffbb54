"""
Worker command line.

Runs the maintenance sweeps outside the API process, e.g. from cron.

Commands:
=========
    reelcore-worker sweep [--page-size N] [--batch-size N] [--delay-ms N]
        Walk every active reel and invalidate those whose media is gone.
        Ctrl+C stops at the next chunk boundary; progress is kept.

    reelcore-worker counters
        Recompute category counters and correct drift.

    reelcore-worker prune-index
        Remove saved/liked/authored entries pointing at deleted reels.
"""

import argparse
import asyncio
import signal
from typing import Optional, Sequence

from reelcore.shared.adapters.blob_store import S3BlobStore
from reelcore.shared.core.logging import logger
from reelcore.shared.db import AsyncSessionLocal, close_db
from reelcore.worker.jobs import run_counter_reconciliation, run_index_cleanup
from reelcore.worker.pipelines.reconciliation_pipeline import ReconciliationPipeline


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="reelcore-worker",
        description="ReelCore maintenance sweeps",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    sweep = commands.add_parser("sweep", help="Reconcile media references")
    sweep.add_argument("--page-size", type=int, default=None)
    sweep.add_argument("--batch-size", type=int, default=None)
    sweep.add_argument("--delay-ms", type=int, default=None)

    commands.add_parser("counters", help="Correct category counter drift")
    commands.add_parser("prune-index", help="Remove dangling user index entries")
    return parser


async def _sweep(args: argparse.Namespace) -> None:
    cancel_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    loop.add_signal_handler(signal.SIGINT, cancel_event.set)

    try:
        async with AsyncSessionLocal() as session:
            pipeline = ReconciliationPipeline(session, S3BlobStore())
            report = await pipeline.run_full_sweep(
                page_size=args.page_size,
                batch_size=args.batch_size,
                inter_batch_delay_ms=args.delay_ms,
                cancel_event=cancel_event,
            )
    finally:
        loop.remove_signal_handler(signal.SIGINT)

    print(
        f"pages={report.pages} scanned={report.scanned} invalid={report.invalid} "
        f"invalidated={report.invalidated} cancelled={report.cancelled}"
    )


async def _run(args: argparse.Namespace) -> None:
    try:
        if args.command == "sweep":
            await _sweep(args)
        elif args.command == "counters":
            corrections = await run_counter_reconciliation(AsyncSessionLocal)
            print(f"corrected={len(corrections)}")
            for category, counts in corrections.items():
                print(f"  {category}: {counts['stored']} -> {counts['actual']}")
        elif args.command == "prune-index":
            removed = await run_index_cleanup(AsyncSessionLocal)
            print(f"removed={removed}")
    finally:
        await close_db()


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    logger.info("Worker command starting", command=args.command)
    asyncio.run(_run(args))


if __name__ == "__main__":
    main()
