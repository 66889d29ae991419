import logging
import os

from errors import TallyError, TallyRuntimeError
from value import render

logger = logging.getLogger(__name__)


class VM:
    def __init__(self, bytecode_program, entry_file: str | None = None):
        self.consts = bytecode_program.consts
        self.instructions = bytecode_program.instructions
        self.debug = getattr(bytecode_program, "debug", [None] * len(self.instructions))

        self.ip = 0                 # instruction pointer (where we are)
        self.stack = []             # stack for values
        self.globals = {}           # global variables

        self.entry_file_path = os.path.normpath(os.path.abspath(entry_file)) if entry_file else None
        self.current_file_path = self.entry_file_path

        self.trace_enabled = False

    def _debug_at_ip(self, ip: int):
        if ip < 0 or ip >= len(self.debug):
            return None
        return self.debug[ip]

    def _location_for_ip(self, ip: int):
        dbg = self._debug_at_ip(ip) or {}
        file_path = dbg.get("file") or self.current_file_path
        line = dbg.get("line")
        return file_path, line

    def _runtime_error(self, e: Exception) -> TallyRuntimeError:
        file_path, line = self._location_for_ip(self.ip)
        return TallyRuntimeError(str(e), ip=self.ip, file=file_path, line=line)

    def check_ip(self, target: int):
        if not isinstance(target, int) or target < 0 or target >= len(self.instructions):
            raise Exception(f"Instruction pointer out of range: {target}")

    def pop(self):
        if not self.stack:
            raise Exception("Stack underflow")
        return self.stack.pop()

    def link_bytecode(self, bc):
        """Append another compiled program to this VM.

        The program's constants are copied into this VM's pool and its
        LOAD_CONST operands are shifted by the pool size before the copy.
        Returns the (start, end) instruction range of the linked code.
        """
        base_ip = len(self.instructions)
        base_const = self.consts.count

        # All or nothing: fail before the pool holds any of this program's constants.
        self.consts.reserve(bc.consts.count)
        for c in bc.consts:
            self.consts.append(c)

        for opcode, arg in bc.instructions:
            if opcode == "LOAD_CONST":
                self.instructions.append((opcode, arg + base_const))
                continue
            self.instructions.append((opcode, arg))

        bc_debug = getattr(bc, "debug", None)
        if bc_debug is None:
            bc_debug = [None] * len(bc.instructions)
        self.debug.extend(bc_debug)

        logger.debug("linked %d instructions at ip=%d, consts from %d", len(bc.instructions), base_ip, base_const)
        return base_ip, len(self.instructions)

    def run_range(self, start_ip: int, end_ip: int):
        saved_ip = self.ip
        self.ip = start_ip
        try:
            while self.ip < end_ip:
                halted = self.step()
                if halted:
                    break
        except TallyError:
            raise
        except Exception as e:
            raise self._runtime_error(e)
        finally:
            self.ip = saved_ip
            self.stack.clear()

    def step(self) -> bool:
        self.check_ip(self.ip)
        opcode, arg = self.instructions[self.ip]

        if self.trace_enabled:
            print(f"TRACE ip={self.ip:04d} {(opcode, arg)!r} stack={len(self.stack)}")

        if opcode == "SET_TRACE":
            self.trace_enabled = bool(arg)
            self.ip += 1
            return False

        if opcode == "LOAD_CONST":
            self.stack.append(self.consts.read(arg))
            self.ip += 1
            return False

        if opcode == "LOAD_NAME":
            name = arg
            if name not in self.globals:
                raise Exception(f"Undefined name: {name}")
            self.stack.append(self.globals[name])
            self.ip += 1
            return False

        if opcode == "STORE_NAME":
            self.globals[arg] = self.pop()
            self.ip += 1
            return False

        if opcode == "POP":
            self.pop()
            self.ip += 1
            return False

        if opcode in ("ADD", "SUB", "MUL", "DIV"):
            b = self.pop()
            a = self.pop()
            if opcode == "ADD":
                self.stack.append(a + b)
            elif opcode == "SUB":
                self.stack.append(a - b)
            elif opcode == "MUL":
                self.stack.append(a * b)
            else:
                if b == 0:
                    raise Exception("division by zero")
                self.stack.append(a / b)
            self.ip += 1
            return False

        if opcode == "NEGATE":
            self.stack.append(-self.pop())
            self.ip += 1
            return False

        if opcode == "WRITE":
            args = []
            for _ in range(arg):
                args.append(self.pop())
            args.reverse()
            print(" ".join(render(v) for v in args))
            self.ip += 1
            return False

        if opcode == "HALT":
            return True

        raise Exception(f"Unknown opcode: {opcode}")

    def run(self):
        try:
            while True:
                halted = self.step()
                if halted:
                    break
        except TallyError:
            raise
        except Exception as e:
            raise self._runtime_error(e)
