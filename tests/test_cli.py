"""Tests for the command-line runner."""

import pandas as pd

import main

PROGRAM = """\
# Yearly fuel use of one car
distance = 10000 to 15000 miles
mpg = 20 to 30 miles / gallon
fuel = distance / mpg
"""


def write_program(tmp_path, text):
    path = tmp_path / "estimate.fermi"
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_main_runs_program_and_exports(tmp_path):
    program = write_program(tmp_path, PROGRAM)
    csv_path = tmp_path / "out" / "summary.csv"
    figures = tmp_path / "figures"
    log_path = tmp_path / "run.log"
    code = main.main(
        [
            program,
            "--samples", "500",
            "--seed", "1",
            "--csv", str(csv_path),
            "--figures", str(figures),
            "--log-file", str(log_path),
        ]
    )
    assert code == 0
    table = pd.read_csv(csv_path)
    assert list(table["name"]) == ["distance", "mpg", "fuel"]
    assert table.set_index("name").loc["fuel", "unit"] == "gallon"
    assert len(list(figures.glob("*.png"))) == 6
    assert "fuel = " in log_path.read_text(encoding="utf-8")


def test_main_reports_failed_statements(tmp_path):
    program = write_program(tmp_path, "a = 1 m\nb = a + 1 s\nc = a * 2\n")
    assert main.main([program, "--seed", "2"]) == 1


def test_main_parse_error(tmp_path):
    program = write_program(tmp_path, "a = (1 + \n")
    assert main.main([program]) == 1


def test_main_bad_inputs(tmp_path):
    assert main.main([str(tmp_path / "missing.fermi")]) == 2
    program = write_program(tmp_path, "a = 1\n")
    assert main.main([program, "--confidence", "1.5"]) == 2
