import logging
from dataclasses import dataclass
from enum import Enum

log = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Errors
# -----------------------------------------------------------------------------
class VMError(Exception):
    """Base class for errors raised while loading or running a program."""


class MalformedInstruction(VMError):
    """Raised when a record cannot be read as opcode + signed operand."""
    def __init__(self, message, line_num=0, line_text=""):
        self.line_num = line_num
        self.line_text = line_text
        super().__init__(f"Line {line_num}: {message}" if line_num else message)


class AddressOutOfRange(VMError):
    """Raised when the program counter leaves [0, len(program)]."""
    def __init__(self, address, size):
        self.address = address
        self.size = size
        super().__init__(f"Address {address} is outside program of {size} instructions")


# -----------------------------------------------------------------------------
# Instruction model
# -----------------------------------------------------------------------------
class Opcode(Enum):
    ACC = 'acc'  # ACC += operand
    JMP = 'jmp'  # PC += operand
    NOP = 'nop'  # operand ignored


# jmp <-> nop; acc has no counterpart
FLIPS = {Opcode.JMP: Opcode.NOP, Opcode.NOP: Opcode.JMP}


@dataclass(frozen=True)
class Instruction:
    opcode: Opcode
    operand: int

    @property
    def flippable(self):
        return self.opcode in FLIPS

    def flipped(self):
        """Return the jmp/nop counterpart of this instruction, same operand."""
        if not self.flippable:
            raise ValueError(f"Cannot flip {self}")
        return Instruction(FLIPS[self.opcode], self.operand)

    def __str__(self):
        return f"{self.opcode.value} {self.operand:+d}"


class StopReason(Enum):
    TERMINATED = 'TERMINATED'
    LOOP = 'LOOP'


@dataclass(frozen=True)
class RunOutcome:
    reason: StopReason
    # Repeated PC for LOOP, len(program) for TERMINATED.
    address: int

    @property
    def terminated(self):
        return self.reason is StopReason.TERMINATED

    @property
    def looped(self):
        return self.reason is StopReason.LOOP


# -----------------------------------------------------------------------------
# The Virtual Machine
# -----------------------------------------------------------------------------
class Processor:
    def __init__(self, program=None):
        # The program is borrowed, never copied: repairs patch it in place.
        self.program = program if program is not None else []
        # Registers: ACC (accumulator), PC (program counter)
        self.registers = {'ACC': 0, 'PC': 0}
        # Addresses executed this run, in first-visit order.
        self.visited = []
        self._seen = set()
        self.steps = 0

    @property
    def accumulator(self):
        return self.registers['ACC']

    @property
    def pc(self):
        return self.registers['PC']

    def load_program(self, program):
        self.program = program
        self.reset()

    def reset(self):
        self.registers['ACC'] = 0
        self.registers['PC'] = 0
        self.visited.clear()
        self._seen.clear()
        self.steps = 0

    def fetch(self):
        addr = self.registers['PC']
        if addr < 0 or addr >= len(self.program):
            raise AddressOutOfRange(addr, len(self.program))
        instr = self.program[addr]
        if not isinstance(instr, Instruction) or not isinstance(instr.opcode, Opcode) \
                or isinstance(instr.operand, bool) or not isinstance(instr.operand, int):
            raise MalformedInstruction(f"Invalid instruction at address {addr}: {instr!r}")
        return instr

    def execute(self, instruction):
        opcode = instruction.opcode
        operand = instruction.operand

        if opcode is Opcode.ACC:
            self.registers['ACC'] += operand
            self.registers['PC'] += 1
        elif opcode is Opcode.JMP:
            self.registers['PC'] += operand
        elif opcode is Opcode.NOP:
            self.registers['PC'] += 1

    def step(self):
        """Execute exactly one instruction and record its address."""
        instr = self.fetch()
        addr = self.registers['PC']
        self.visited.append(addr)
        self._seen.add(addr)
        self.execute(instr)
        self.steps += 1

    def run(self):
        """Step until the program terminates or an address repeats.

        Returns a RunOutcome. Landing exactly one past the last instruction
        is normal termination; any other address outside the program raises
        AddressOutOfRange.
        """
        size = len(self.program)
        while True:
            pc = self.registers['PC']
            if pc in self._seen:
                outcome = RunOutcome(StopReason.LOOP, pc)
                break
            if pc == size:
                outcome = RunOutcome(StopReason.TERMINATED, pc)
                break
            if pc < 0 or pc > size:
                raise AddressOutOfRange(pc, size)
            self.step()
        log.debug("Ran %d instructions: %s at %d, ACC=%d",
                  self.steps, outcome.reason.value, outcome.address, self.accumulator)
        return outcome
