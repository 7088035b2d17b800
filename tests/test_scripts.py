from pathlib import Path

import pytest
from typer.testing import CliRunner

from turingsim.keyboard import KeyboardSignal
from turingsim.scripts import app

runner = CliRunner()

EVEN_ONES = """\
// even number of 1s
0 0 0 0 R
0 1 1 1 R
1 0 1 0 R
1 1 0 1 R
0 B f B R   // accept on the blank after the input
"""


@pytest.fixture
def machine(tmp_path: Path) -> Path:
    path = tmp_path / "even_ones.tm"
    path.write_text(EVEN_ONES)
    return path


def test_missing_description_is_a_usage_error():
    result = runner.invoke(app, [])
    assert result.exit_code == 2


def test_nonexistent_description(tmp_path: Path):
    result = runner.invoke(app, [str(tmp_path / "missing.tm"), "--input", "0"])
    assert result.exit_code == 2


def test_accepted(machine: Path):
    result = runner.invoke(app, [str(machine), "--input", "0110"])
    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert "The input string is: 0110" in lines
    assert " [ q0 ] 0110" in lines
    assert "01 [ q1 ] 10" in lines
    assert "String was accepted by the Turing Machine." in lines
    assert "rejected" not in result.output


def test_rejected(machine: Path):
    result = runner.invoke(app, [str(machine), "--input", "1"])
    assert result.exit_code == 0, result.output
    assert result.output.splitlines()[-2:] == [
        "There is no transition out of this state.",
        "String was rejected by the Turing Machine.",
    ]


def test_prompts_until_input_is_valid(machine: Path):
    result = runner.invoke(app, [str(machine)], input="012\n1 1\n")
    assert result.exit_code == 0, result.output
    assert "Enter a string to be processed by the Turing Machine." in result.output
    assert "Error: Invalid input string." in result.output
    assert "The input string is: 11" in result.output
    assert "String was accepted by the Turing Machine." in result.output


def test_end_of_input_is_empty_string(machine: Path):
    result = runner.invoke(app, [str(machine)], input="")
    assert result.exit_code == 0, result.output
    assert "[ q0 ]" in result.output
    assert "String was accepted by the Turing Machine." in result.output


def test_invalid_input_option(machine: Path):
    result = runner.invoke(app, [str(machine), "--input", "0a1"])
    assert result.exit_code == 2


def test_strict_rejects_malformed_description(tmp_path: Path):
    path = tmp_path / "broken.tm"
    path.write_text("0 0 0 0 R\n0 1 f\n")
    lenient = runner.invoke(app, [str(path), "--input", "0"])
    assert lenient.exit_code == 0, lenient.output
    strict = runner.invoke(app, [str(path), "--input", "0", "--strict"])
    assert strict.exit_code == 1
    assert "Line 2" in strict.output


def test_max_steps(tmp_path: Path):
    path = tmp_path / "forever.tm"
    path.write_text("0 B 0 B R\n")
    result = runner.invoke(app, [str(path), "--input", "", "--max-steps", "3"])
    assert result.exit_code == 1
    assert "did not halt within 3 steps" in result.output


def test_show_table(machine: Path):
    result = runner.invoke(app, [str(machine), "--input", "", "--table"])
    assert result.exit_code == 0, result.output
    assert "Transition function" in result.output
    assert "Next state" in result.output


def test_bundled_increment_machine():
    path = Path(__file__).parent.parent / "machines" / "increment.tm"
    result = runner.invoke(app, [str(path), "--input", "1011", "--strict"])
    assert result.exit_code == 0, result.output
    assert " [ qf ] 1100" in result.output.splitlines()
    assert "String was accepted by the Turing Machine." in result.output


def test_pause_asks_for_new_input(machine: Path, monkeypatch: pytest.MonkeyPatch):
    pressed = iter([None, "h"])
    monkeypatch.setattr(KeyboardSignal, "poll", lambda self: next(pressed, None))
    result = runner.invoke(app, [str(machine), "--input", "1"], input="0 2\n0 1 1\n")
    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert "Turing Machine halted." in lines
    assert "Enter a new input string to be processed." in lines
    assert "Error: Invalid input string." in result.output
    assert " [ q0 ] 011" in lines
    assert lines.index(" [ q0 ] 011") > lines.index("Turing Machine halted.")
    assert "String was accepted by the Turing Machine." in lines


def test_color_trace_with_markup_symbols(tmp_path: Path):
    path = tmp_path / "brackets.tm"
    path.write_text("0 0 1 [ R\n1 0 2 / R\n2 0 3 ] R\n3 B f B R\n")
    result = runner.invoke(app, [str(path), "--input", "000", "--color"])
    assert result.exit_code == 0, result.output
    assert "[/]B [ qf ]" in result.output
    assert "String was accepted by the Turing Machine." in result.output
