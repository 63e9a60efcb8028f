"""
Loader for handheld program listings.

A listing is plain text, one instruction per line:

    nop +0
    acc +1
    jmp -4

The mnemonic is one of acc, jmp or nop. The operand is a decimal integer
with a mandatory sign. Blank lines are ignored; anything else that does not
match raises MalformedInstruction with the offending line number.
"""

import logging
import re
from pathlib import Path

from .vm import Instruction, MalformedInstruction, Opcode

log = logging.getLogger(__name__)

MNEMONICS = {op.value: op for op in Opcode}

OPERAND_RE = re.compile(r'[+-]\d+')


def parse_instruction(line, line_num=0):
    """Parse one listing line into an Instruction."""
    fields = line.split()
    if len(fields) != 2:
        raise MalformedInstruction("Expected '<mnemonic> <signed integer>'", line_num, line)
    mnemonic, operand = fields
    opcode = MNEMONICS.get(mnemonic)
    if opcode is None:
        raise MalformedInstruction(f"Unknown mnemonic {mnemonic!r}", line_num, line)
    if not OPERAND_RE.fullmatch(operand):
        raise MalformedInstruction(f"Operand {operand!r} is not a signed integer", line_num, line)
    return Instruction(opcode, int(operand))


def load_program(lines):
    program = []
    for line_num, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        program.append(parse_instruction(line, line_num))
    log.debug("Loaded %d instructions", len(program))
    return program


def load_file(path):
    with open(path, "r", encoding="utf-8") as f:
        return load_program(f)


def dump_program(program):
    """Render a program back to listing text."""
    return "".join(f"{instr}\n" for instr in program)


def write_file(path, program):
    Path(path).write_text(dump_program(program), encoding="utf-8")
