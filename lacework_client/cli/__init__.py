"""lacework-client CLI."""

from lacework_client.cli.commands import cli


def main() -> None:
    """Main entry point for the lacework-client CLI."""
    cli()


__all__ = ["cli", "main"]
