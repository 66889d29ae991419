from value import ValueStore, render


class BytecodeProgram:
    def __init__(self, max_consts: int | None = None):
        self.consts = ValueStore(max_capacity=max_consts)  # numeric literals, one slot per occurrence
        self.instructions = []   # list of (OPCODE, arg)
        self.debug = []          # list of debug dicts (e.g. {"file": str, "line": int}) aligned with instructions

    def add_const(self, value):
        # no reuse: every literal gets its own slot
        return self.consts.append(value)

    def emit(self, opcode, arg=None, debug=None):
        # returns instruction index
        self.instructions.append((opcode, arg))
        self.debug.append(debug)
        return len(self.instructions) - 1

    def release(self):
        self.consts.release()


def disassemble(bc) -> str:
    lines = ["CONSTS:"]
    for i, c in enumerate(bc.consts):
        lines.append(f"  [{i}] {render(c)}")

    lines.append("")
    lines.append("INSTRUCTIONS:")
    for i, (opcode, arg) in enumerate(bc.instructions):
        if arg is None:
            text = opcode
        else:
            text = f"{opcode} {arg}"
        if opcode == "LOAD_CONST":
            text += f" ({render(bc.consts.read(arg))})"
        lines.append(f"  {i:04d}  {text}")
    return "\n".join(lines)
