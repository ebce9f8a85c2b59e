# ==============================================================================
# Replay Command
# ==============================================================================
"""
Replay a JSON-lines recording of host events through the engine.
"""

import json
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from clicksignals.cli.shared import C, I, setup_logging
from clicksignals.factory import get_session_store, get_sink
from clicksignals.infrastructure.sinks import RecordingSink
from clicksignals.replay import Replayer, ReplayError, load_records
from clicksignals.utils.config import get_settings


def replay(
    recording: Annotated[
        Path,
        typer.Argument(exists=True, dir_okay=False, readable=True, help="JSON-lines recording"),
    ],
    sink: Annotated[
        Optional[str],
        typer.Option("--sink", "-s", help="Sink: log, memory or kafka (default: DISPATCHER_SINK)"),
    ] = None,
    store: Annotated[
        Optional[str],
        typer.Option("--store", help="Session store: memory or valkey (default: DISPATCHER_STORE)"),
    ] = None,
    json_output: Annotated[
        bool, typer.Option("--json", "-j", help="Output summary as JSON")
    ] = False,
) -> None:
    """Replay recorded host events and summarize the emitted signals."""
    settings = get_settings()
    setup_logging(settings.log_level)

    try:
        records = load_records(recording)
    except ReplayError as e:
        print(f"{C.RED}{I.CROSS} Invalid recording: {e}{C.RESET}")
        raise typer.Exit(1)

    try:
        signal_sink = get_sink(sink, settings)
        session_store = get_session_store(store, settings)
    except ValueError as e:
        print(f"{C.RED}{I.CROSS} {e}{C.RESET}")
        raise typer.Exit(1)

    try:
        replayer = Replayer(signal_sink, store=session_store, settings=settings)
        replayer.run(records)
        summary = replayer.finish()
    finally:
        signal_sink.close()
        session_store.close()

    if isinstance(signal_sink, RecordingSink):
        summary["envelopes"] = signal_sink.envelopes
        summary["beacons"] = signal_sink.beacons

    if json_output:
        print(json.dumps(summary, indent=2, default=str))
        return

    print()
    print(f"{C.BOLD}Replay{C.RESET}  {C.DIM}{recording}{C.RESET}")
    print()
    print(f"  Records:    {C.WHITE}{summary['records']}{C.RESET}")
    print(f"  Session:    {C.WHITE}{summary['session_id'] or '-'}{C.RESET}")
    print(f"  Delivered:  {C.GREEN}{summary['delivered']}{C.RESET}")
    dropped_color = C.YELLOW if summary["dropped"] else C.WHITE
    failed_color = C.RED if summary["failed"] else C.WHITE
    print(f"  Dropped:    {dropped_color}{summary['dropped']}{C.RESET}")
    print(f"  Failed:     {failed_color}{summary['failed']}{C.RESET}")

    if summary["by_type"]:
        console = Console()
        table = Table(title="Signals by type", show_header=True, header_style="bold")
        table.add_column("Signal", justify="left")
        table.add_column("Delivered", justify="right")
        for signal_type, count in sorted(summary["by_type"].items()):
            table.add_row(signal_type, f"{count:,}")
        print()
        console.print(table)

    if isinstance(signal_sink, RecordingSink):
        print()
        for item in signal_sink.envelopes:
            print(f"  {I.ARROW} {item['kind']:<9} {json.dumps(item['payload'], default=str)}")
        for item in signal_sink.beacons:
            print(f"  {I.ARROW} beacon    {json.dumps(item['payload'], default=str)}")
    print()
