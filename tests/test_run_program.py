"""
Command line tests.
"""
from handheld.loader import load_file
from handheld.run_program import main
from handheld.vm import Instruction, Opcode

LOOPING = "nop +0\nacc +1\njmp +4\nacc +3\njmp -3\nacc -99\nacc +1\njmp -4\nacc +6\n"


def test_both_parts(tmp_path, capsys):
    src = tmp_path / "input.txt"
    src.write_text(LOOPING)
    assert main([str(src)]) == 0
    out = capsys.readouterr().out
    assert "Infinite loop detected at address: 1" in out
    assert "Accumulator value: 5" in out
    assert "Patched address 7: jmp -4 -> nop -4" in out
    assert "Accumulator value: 8" in out


def test_write_fixed(tmp_path, capsys):
    src = tmp_path / "input.txt"
    src.write_text(LOOPING)
    fixed = tmp_path / "fixed.txt"
    assert main([str(src), "--part", "2", "--write-fixed", str(fixed)]) == 0
    assert load_file(fixed)[7] == Instruction(Opcode.NOP, -4)


def test_terminating_program(tmp_path, capsys):
    src = tmp_path / "input.txt"
    src.write_text("nop +0\nacc +5\n")
    assert main([str(src)]) == 0
    out = capsys.readouterr().out
    assert "Program terminated normally" in out
    assert "No repair needed" in out
    assert "Accumulator value: 5" in out


def test_no_fix(tmp_path, capsys):
    src = tmp_path / "input.txt"
    src.write_text("nop +1\njmp +0\njmp -1\n")
    assert main([str(src), "--part", "2"]) == 0
    assert "No fix found" in capsys.readouterr().out


def test_malformed_listing(tmp_path):
    src = tmp_path / "input.txt"
    src.write_text("nop +0\nhalt\n")
    assert main([str(src)]) == 1


def test_missing_file(tmp_path):
    assert main([str(tmp_path / "nope.txt")]) == 1


def test_log_file(tmp_path):
    src = tmp_path / "input.txt"
    src.write_text(LOOPING)
    log_file = tmp_path / "logs" / "run.log"
    assert main([str(src), "-v", "--log-file", str(log_file)]) == 0
    assert "terminates with ACC=8" in log_file.read_text()
