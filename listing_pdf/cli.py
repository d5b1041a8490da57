"""CLI entry point for listing PDF generation."""

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from rich.console import Console
from rich.status import Status

from .config import WHOLESALE_MODES, Settings, configure_logging
from .main import generate_listing_pdf
from .store import InMemoryContentStore


def main(argv: list[str] | None = None):
    settings = Settings.from_env()

    parser = argparse.ArgumentParser(
        prog="listing-pdf",
        description="Generate the PDF sheet for a directory listing.",
    )
    parser.add_argument(
        "--listing-id",
        required=True,
        help="Listing identifier",
    )
    parser.add_argument(
        "--source",
        type=Path,
        default=Path(settings.source_path) if settings.source_path else None,
        help="JSON export of listings (default: $LISTING_PDF_SOURCE)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Output PDF path (default: {title}_listing.pdf)",
    )
    parser.add_argument(
        "--wholesale-mode",
        choices=WHOLESALE_MODES,
        default=settings.wholesale_mode,
        help="Omit an empty Wholesale section, or show a placeholder",
    )
    parser.add_argument(
        "--no-qr-embed",
        action="store_true",
        help="Link the QR code image instead of downloading and embedding it",
    )
    args = parser.parse_args(argv)

    console = Console()
    if args.source is None:
        console.print("\n[bold red]Error:[/] --source or LISTING_PDF_SOURCE is required\n")
        sys.exit(1)

    configure_logging(settings.log_level)
    settings = replace(
        settings,
        wholesale_mode=args.wholesale_mode,
        embed_qr=settings.embed_qr and not args.no_qr_embed,
    )

    status = Status("", console=console)
    status.start()

    def on_progress(msg: str):
        status.update(f"[bold cyan]{msg}[/]")

    try:
        store = InMemoryContentStore.from_json(args.source)
        result = generate_listing_pdf(
            args.listing_id,
            store,
            settings,
            on_progress=on_progress,
        )
    except KeyboardInterrupt:
        status.stop()
        console.print("\n[yellow]Cancelled.[/]")
        sys.exit(1)
    except Exception as e:
        status.stop()
        console.print(f"\n[bold red]Error:[/] {e}\n")
        sys.exit(1)

    status.stop()
    if not result.ok:
        console.print(f"\n[bold red]Error:[/] {result.error}\n")
        sys.exit(1)

    output_path = args.output or Path(result.filename)
    output_path.write_bytes(result.pdf)
    note = " (simplified template)" if result.used_fallback else ""
    console.print(f"\n[bold green]Done![/] PDF saved to [bold]{output_path}[/]{note}\n")


if __name__ == "__main__":
    main()
