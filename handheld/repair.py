import logging
from contextlib import contextmanager
from dataclasses import dataclass

from .vm import Instruction, MalformedInstruction, Processor

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Fix:
    address: int
    original: Instruction
    replacement: Instruction
    accumulator: int
    attempts: int


class Patch:
    """A single in-place instruction swap that can be kept or rolled back."""
    def __init__(self, program, address):
        self.program = program
        self.address = address
        self.original = program[address]
        self.replacement = self.original.flipped()
        self.kept = False

    def apply(self):
        self.program[self.address] = self.replacement

    def keep(self):
        self.kept = True

    def restore(self):
        self.program[self.address] = self.original


@contextmanager
def patched(program, address):
    """Flip the instruction at `address` for the duration of the block.

    The original instruction is put back on every exit, exceptions included,
    unless the block calls keep() on the yielded Patch.
    """
    patch = Patch(program, address)
    patch.apply()
    try:
        yield patch
    finally:
        if not patch.kept:
            patch.restore()


def repair(program, loop_history, processor=None):
    """Search for the single jmp/nop flip that makes `program` terminate.

    Candidates are tried in the order of `loop_history`, which should be the
    visit order of a looping run. Returns a Fix with the patch left in place,
    or None if no candidate terminates. Errors raised while running a
    candidate propagate after the candidate has been restored.
    """
    if processor is None:
        processor = Processor(program)
    else:
        processor.program = program

    attempts = 0
    for address in loop_history:
        instr = program[address]
        if not isinstance(instr, Instruction):
            raise MalformedInstruction(f"Invalid instruction at address {address}: {instr!r}")
        if not instr.flippable:
            continue
        attempts += 1
        with patched(program, address) as patch:
            processor.reset()
            outcome = processor.run()
            if outcome.terminated:
                patch.keep()
                log.info("Flipping %d (%s -> %s) terminates with ACC=%d after %d attempts",
                         address, patch.original, patch.replacement,
                         processor.accumulator, attempts)
                return Fix(address, patch.original, patch.replacement,
                           processor.accumulator, attempts)
            log.debug("Flipping %d still loops at %d", address, outcome.address)

    log.info("No fix found after %d attempts", attempts)
    return None


def find_fix(program, loop_history, processor=None):
    """Return the accumulator of the repaired program, or None."""
    fix = repair(program, loop_history, processor)
    return None if fix is None else fix.accumulator
