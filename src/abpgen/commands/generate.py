"""``abpgen generate`` sub-command group."""

from __future__ import annotations

import typer

from abpgen.commands.controller import ControllerCommand
from abpgen.commands.crud import CrudCommand
from abpgen.commands.service import ServiceCommand

generate_app = typer.Typer(no_args_is_help=True)

GENERATE_COMMANDS = (
    CrudCommand(),
    ServiceCommand(),
    ControllerCommand(),
)

for _command in GENERATE_COMMANDS:
    _command.register(generate_app)
