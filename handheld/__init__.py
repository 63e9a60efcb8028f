from .vm import (AddressOutOfRange, Instruction, MalformedInstruction, Opcode,
                 Processor, RunOutcome, StopReason, VMError)
from .loader import dump_program, load_file, load_program, parse_instruction
from .repair import Fix, find_fix, patched, repair
