"""AppContext — shared Click context for all commands.

Created once by the root CLI group and passed to subcommands via
``@click.pass_obj``.  This is the only place that turns a failed
ServiceResult into a process exit status.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from maelstrom.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from collections.abc import Mapping

    from maelstrom.services.configuration import ConfigurationService, ServerIdentity
    from maelstrom.services.result import ServiceResult


class AppContext:
    """Output flags plus the raw setting options from the command line."""

    def __init__(
        self,
        output: OutputSettings,
        cli_options: Mapping[str, str | None],
        *,
        log_json: bool = False,
    ) -> None:
        self.output = output
        self.cli_options = dict(cli_options)

        from maelstrom.config.logging import configure_logging
        from maelstrom.services.telemetry import set_telemetry

        configure_logging(verbose=output.verbose, log_json=log_json)
        set_telemetry(output.verbose)

    def configuration_service(self) -> ConfigurationService:
        from maelstrom.services.configuration import ConfigurationService

        return ConfigurationService(cli_options=self.cli_options)

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: writes to stdout. Warnings go to stderr unless in JSON
          mode, where they are already part of the payload.
        * Failure: writes to stderr and exits with ``error.exit_code``.
        """
        output = format_result(result, settings=self.output)
        if result.ok:
            click.echo(output)
            if not self.output.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
            return

        click.echo(output, err=True)
        raise SystemExit(result.error.exit_code if result.error else 1)

    def load_identity(self) -> ServerIdentity:
        """Resolve the server identity or terminate the process.

        Entry point for server startup: failures are reported and exit
        non-zero; nothing is emitted on success.
        """
        result = self.configuration_service().resolve_identity()
        if not result.ok or result.identity is None:
            self.emit(result)
            raise SystemExit(1)
        for warning in result.warnings:
            click.echo(f"WARNING: {warning}", err=True)
        return result.identity
