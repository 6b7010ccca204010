"""PaperTrader CLI main entry point."""

import click

from papertrader import __version__
from papertrader.cli.commands import account_group, market_group, trade_group
from papertrader.cli.context import CliContext


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="System config YAML (default: $PAPERTRADER_CONFIG, ./config/system.yaml, built-in)",
)
@click.pass_context
def main(ctx: click.Context, config_path: str | None):
    """PaperTrader - Paper Trading Simulator"""
    # Tests inject a prepared context through CliRunner.invoke(obj=...)
    if not isinstance(ctx.obj, CliContext):
        try:
            ctx.obj = CliContext.load(config_path)
        except (FileNotFoundError, ValueError) as e:
            raise click.ClickException(f"Invalid configuration: {e}") from e


# Register commands
main.add_command(account_group)
main.add_command(market_group)
main.add_command(trade_group)


if __name__ == "__main__":
    main()
