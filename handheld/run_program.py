import argparse
import logging
import sys
import time

from .loader import load_file, write_file
from .logs import setup_logging
from .repair import repair
from .vm import Processor, VMError

log = logging.getLogger(__name__)


def report_loop(program):
    """Run once and describe where the program stops."""
    p = Processor(program)
    outcome = p.run()
    if outcome.looped:
        print(f"Infinite loop detected at address: {outcome.address}")
    else:
        print("Program terminated normally")
    print(f"Accumulator value: {p.accumulator}")
    return outcome


def report_fix(program, fixed_path=None):
    """Repair a looping program and describe the fix."""
    p = Processor(program)
    outcome = p.run()
    if outcome.terminated:
        log.warning("Program terminates without a fix")
        print("No repair needed")
        print(f"Accumulator value: {p.accumulator}")
        return None

    fix = repair(program, list(p.visited), p)
    if fix is None:
        print("No fix found")
        return None

    print(f"Patched address {fix.address}: {fix.original} -> {fix.replacement}")
    print(f"Accumulator value: {fix.accumulator}")
    if fixed_path:
        write_file(fixed_path, program)
        log.info("Wrote repaired program to %s", fixed_path)
    return fix


def timed(title, func, *args):
    print(f"{title}: \n----------")
    start = time.perf_counter()
    result = func(*args)
    print(f"Time Taken: {time.perf_counter() - start:.6f}s")
    print("----------")
    return result


def main(argv=None):
    parser = argparse.ArgumentParser(description="Run a handheld program, detect loops and repair them.")
    parser.add_argument("listing", help="Path to the program listing")
    parser.add_argument("--part", choices=["1", "2", "all"], default="all",
                        help="1: report the loop, 2: repair the program, all: both (default)")
    parser.add_argument("--write-fixed", metavar="PATH", help="Write the repaired listing to PATH")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="More log output (-vv for debug)")
    parser.add_argument("--log-file", metavar="PATH", help="Also write debug logs to PATH")
    args = parser.parse_args(argv)

    level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    setup_logging(level, args.log_file)

    try:
        program = load_file(args.listing)
        if args.part in ("1", "all"):
            timed("Part 1", report_loop, program)
        if args.part in ("2", "all"):
            timed("Part 2", report_fix, program, args.write_fixed)
    except OSError as e:
        log.error("%s", e)
        return 1
    except VMError as e:
        log.error("%s", e)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
