import logging

from bytecode import BytecodeProgram
from ast_nodes import Program, Assign, Literal, Var, Binary, Negate, Write, Trace, ExprStmt

logger = logging.getLogger(__name__)


class Compiler:
    def __init__(self, source_path: str | None = None, max_consts: int | None = None):
        self.bc = BytecodeProgram(max_consts=max_consts)
        self.source_path = source_path

    def _debug_for(self, node):
        line = getattr(node, "line", None)
        if self.source_path is None and line is None:
            return None
        dbg = {}
        if self.source_path is not None:
            dbg["file"] = self.source_path
        if line is not None:
            dbg["line"] = line
        return dbg

    def emit(self, opcode, arg=None, node=None):
        return self.bc.emit(opcode, arg, debug=self._debug_for(node))

    def compile(self, node):
        # entry point
        if not isinstance(node, Program):
            raise Exception("Compiler expects a Program node at the top")

        for stmt in node.statements:
            self.compile_stmt(stmt)

        self.emit("HALT", node=node)
        logger.debug(
            "compiled %s: %d instructions, %d constants",
            self.source_path or "<string>",
            len(self.bc.instructions),
            self.bc.consts.count,
        )
        return self.bc

    # -------- statements --------
    def compile_stmt(self, node):
        if isinstance(node, Trace):
            self.emit("SET_TRACE", bool(node.enabled), node)
            return

        if isinstance(node, Assign):
            # compile the value then store it
            self.compile_expr(node.value)
            self.emit("STORE_NAME", node.name, node)
            return

        if isinstance(node, Write):
            for arg in node.args:
                self.compile_expr(arg)
            self.emit("WRITE", len(node.args), node)
            return

        if isinstance(node, ExprStmt):
            # evaluate for errors, discard the result
            self.compile_expr(node.expr)
            self.emit("POP", node=node)
            return

        raise Exception(f"Unknown statement node: {node.__class__.__name__}")

    # -------- expressions --------
    def compile_expr(self, node):
        if isinstance(node, Literal):
            k = self.bc.add_const(node.value)
            self.emit("LOAD_CONST", k, node)
            return

        if isinstance(node, Var):
            self.emit("LOAD_NAME", node.name, node)
            return

        if isinstance(node, Binary):
            self.compile_expr(node.left)
            self.compile_expr(node.right)
            self.emit(self.binary_op_to_opcode(node.op), node=node)
            return

        if isinstance(node, Negate):
            self.compile_expr(node.expr)
            self.emit("NEGATE", node=node)
            return

        raise Exception(f"Unknown expression node: {node.__class__.__name__}")

    def binary_op_to_opcode(self, op):
        mapping = {
            "+": "ADD",
            "-": "SUB",
            "*": "MUL",
            "/": "DIV",
        }
        if op not in mapping:
            raise Exception(f"Unknown operator: {op}")
        return mapping[op]
