from collections.abc import Callable

from turingsim.turing_machine import INPUT_ALPHABET


class InvalidSymbolError(ValueError):
    def __init__(self, symbol: str) -> None:
        super().__init__(f"Invalid symbol '{symbol}', input strings may only contain the symbols '0' and '1'")
        self.symbol = symbol


def validate(raw: str) -> str:
    """Strips all whitespace from `raw` and checks that only input symbols remain."""
    normalized = "".join(raw.split())
    for char in normalized:
        if char not in INPUT_ALPHABET:
            raise InvalidSymbolError(char)
    return normalized


def read_valid_input(read_line: Callable[[], str], on_error: Callable[[InvalidSymbolError], object]) -> str:
    while True:
        try:
            return validate(read_line())
        except InvalidSymbolError as e:
            on_error(e)
