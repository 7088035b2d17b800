import logging
from pathlib import Path
from typing import Annotated

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.theme import Theme
from typer import Argument, BadParameter, Exit, Option, Typer

from turingsim.engine import PAUSE_KEY, Engine, Status
from turingsim.keyboard import KeyboardSignal
from turingsim.turing_machine import Configuration, MalformedTransitionError, Tape, TransitionTable
from turingsim.validation import InvalidSymbolError, read_valid_input, validate

app = Typer(pretty_exceptions_show_locals=False)
theme = Theme({
    "success": "green",
    "warning": "orange3",
    "error": "red",
    "attention": "magenta2",
    "heading": "blue",
    "info": "dim cyan",
})
console = Console(theme=theme)
err_console = Console(theme=theme, stderr=True)

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def read_line() -> str:
    try:
        return console.input()
    except EOFError:
        return ""


def report_invalid(error: InvalidSymbolError) -> None:
    logger.debug("Rejected input: %s", error)
    err_console.print(
        "[error]Error: Invalid input string. Please enter a string that contains only the symbols '0' and '1'.",
        soft_wrap=True,
    )


def check_input(value: str | None) -> str | None:
    if value is None:
        return None
    try:
        return validate(value)
    except InvalidSymbolError as e:
        raise BadParameter(str(e)) from e


def format_table(table: TransitionTable) -> Table:
    view = Table("State", "Symbol", "Next state", "Write", "Move", title="Transition function")
    for (state, symbol), (out_state, out_symbol, direction) in table.items():
        view.add_row(state, symbol, out_state, out_symbol, direction.name)
    return view


def print_configuration(config: Configuration, *, color: bool = False) -> None:
    if color:
        console.print(f"{config:>}", highlight=False, soft_wrap=True)
    else:
        console.print(str(config), markup=False, highlight=False, soft_wrap=True)


@app.command()
def simulate(
    description: Annotated[
        Path,
        Argument(
            exists=True,
            dir_okay=False,
            readable=True,
            help="Path to the file describing the transition function, one 'state symbol state symbol L|R' per line.",
        ),
    ],
    *,
    input_string: Annotated[
        str | None,
        Option(
            "--input",
            "-i",
            callback=check_input,
            help="Input string to run on. The default will instead prompt for it.",
        ),
    ] = None,
    strict: Annotated[
        bool,
        Option(
            "--strict/--lenient",
            envvar="TURINGSIM_STRICT",
            help="Reject malformed or duplicate transition lines instead of skipping them.",
        ),
    ] = False,
    max_steps: Annotated[
        int | None,
        Option(
            "--max-steps",
            "-n",
            min=1,
            envvar="TURINGSIM_MAX_STEPS",
            help="Give up after this many transitions. The default will run until the machine halts.",
        ),
    ] = None,
    pause_key: Annotated[
        str,
        Option("--pause-key", help="Key that pauses the simulation and asks for a new input string."),
    ] = PAUSE_KEY,
    color: Annotated[bool, Option("--color/--no-color", help="Highlight the state and blanks in the trace.")] = False,
    show_table: Annotated[bool, Option("--table", help="Print the parsed transition function first.")] = False,
    verbose: Annotated[bool, Option("--verbose", "-v", help="Show debug messages.")] = False,
):
    configure_logging(verbose)
    try:
        table = TransitionTable.from_file(description, strict=strict)
    except MalformedTransitionError as e:
        err_console.print("[error]The description file is formatted incorrectly:[/]")
        err_console.print(str(e), highlight=False, markup=False)
        raise Exit(1) from e
    if show_table:
        console.print(format_table(table))

    if input_string is None:
        console.print(
            "Enter a string to be processed by the Turing Machine. "
            "Note: The string must contain only the symbols '0' and '1'.",
            highlight=False,
            soft_wrap=True,
        )
        input_string = read_valid_input(read_line, report_invalid)

    console.print(f"The input string is: {input_string}", highlight=False)
    console.print("The Turing Machine is now running...")
    console.print(
        f"To pause the simulation and enter a new input string, press the {pause_key} key.\n",
        highlight=False,
        markup=False,
    )

    with KeyboardSignal() as keyboard:

        def reseed() -> str:
            console.print("\n[attention]Turing Machine halted.[/]\nEnter a new input string to be processed.")
            with keyboard.line_mode():
                return read_valid_input(read_line, report_invalid)

        engine = Engine(
            table,
            Tape(input_string),
            poll=keyboard.poll,
            reseed=reseed,
            pause_key=pause_key,
            max_steps=max_steps,
        )
        try:
            status = engine.run(lambda config: print_configuration(config, color=color))
        except TimeoutError as e:
            console.print(f"[warning]The Turing Machine did not halt within {max_steps} steps.")
            raise Exit(1) from e

    match status:
        case Status.ACCEPTED:
            console.print("[success]String was accepted by the Turing Machine.")
        case _:
            console.print("[error]There is no transition out of this state.\nString was rejected by the Turing Machine.")


if __name__ == "__main__":
    app()
