import logging
import os
import sys
import traceback

import colorama

from ast_nodes import ExprStmt, Write
from bytecode import disassemble
from compiler import Compiler
from lexer import Lexer
from parser import Parser
from vm import VM


USAGE = """Usage:
  python cli.py parse <file.tally>
  python cli.py build <file.tally>
  python cli.py run <file.tally>
  python cli.py repl
  (optional) --debug to show Python traceback
  (optional) --verbose to log constant pool activity
  (optional) --max-consts N to cap the constant pool"""


# Simple AST printer (so you can SEE what the parser built)
def ast_to_dict(node):
    if node is None:
        return None

    t = node.__class__.__name__
    d = {"type": t}

    if t == "Program":
        d["statements"] = [ast_to_dict(s) for s in node.statements]
    elif t == "Assign":
        d["name"] = node.name
        d["value"] = ast_to_dict(node.value)
    elif t == "Literal":
        d["value"] = node.value
    elif t == "Var":
        d["name"] = node.name
    elif t == "Binary":
        d["op"] = node.op
        d["left"] = ast_to_dict(node.left)
        d["right"] = ast_to_dict(node.right)
    elif t == "Negate":
        d["expr"] = ast_to_dict(node.expr)
    elif t == "Write":
        d["args"] = [ast_to_dict(a) for a in node.args]
    elif t == "Trace":
        d["enabled"] = node.enabled
    elif t == "ExprStmt":
        d["expr"] = ast_to_dict(node.expr)
    else:
        d["raw"] = str(node)

    return d


def pretty(obj, indent=0):
    sp = "  " * indent
    if isinstance(obj, dict):
        lines = []
        for k, v in obj.items():
            if isinstance(v, (dict, list)):
                lines.append(f"{sp}{k}:")
                lines.append(pretty(v, indent + 1))
            else:
                lines.append(f"{sp}{k}: {v}")
        return "\n".join(lines)
    if isinstance(obj, list):
        lines = []
        for item in obj:
            lines.append(f"{sp}-")
            lines.append(pretty(item, indent + 1))
        return "\n".join(lines)
    return f"{sp}{obj}"


def report_error(message):
    if sys.stdout.isatty():
        colorama.just_fix_windows_console()
        message = f"{colorama.Fore.RED}{message}{colorama.Style.RESET_ALL}"
    print(message)


def read_program(path):
    with open(path, "r", encoding="utf-8") as f:
        code = f.read()
    lexer = Lexer(code)
    parser = Parser(lexer)
    return parser.parse()


def cmd_parse(path):
    try:
        program = read_program(path)
    except Exception as e:
        report_error(f"Parse error: {e}")
        sys.exit(1)

    print(pretty(ast_to_dict(program)))


def cmd_build(path, max_consts=None):
    try:
        program = read_program(path)
        compiler = Compiler(source_path=os.path.abspath(path), max_consts=max_consts)
        bc = compiler.compile(program)
    except Exception as e:
        report_error(f"Build error: {e}")
        sys.exit(1)

    try:
        print(disassemble(bc))
    finally:
        bc.release()


def cmd_run(path, debug: bool = False, max_consts=None):
    bc = None
    try:
        program = read_program(path)

        abs_path = os.path.abspath(path)
        compiler = Compiler(source_path=abs_path, max_consts=max_consts)
        bc = compiler.compile(program)

        vm = VM(bc, entry_file=abs_path)
        vm.run()
    except Exception as e:
        if debug:
            traceback.print_exc()
        else:
            report_error(str(e))
        sys.exit(1)
    finally:
        if bc is not None:
            bc.release()


def cmd_repl(debug: bool = False, max_consts=None):
    # Create an initial empty VM and keep it alive across snippets.
    try:
        compiler = Compiler(source_path="<repl>", max_consts=max_consts)
        bc = compiler.compile(Parser(Lexer("")).parse())
        vm = VM(bc)
    except Exception as e:
        if debug:
            traceback.print_exc()
        else:
            report_error(f"REPL init error: {e}")
        sys.exit(1)

    print("Tally REPL. Type :q to quit.")

    try:
        while True:
            try:
                line = input("tally> ")
            except (EOFError, KeyboardInterrupt):
                print()
                break

            stripped = line.strip()
            if stripped in (":q", ":quit", "quit", "exit"):
                break
            if not stripped:
                continue

            snippet = None
            try:
                program = Parser(Lexer(line + "\n")).parse()

                # A lone expression is printed instead of discarded.
                if len(program.statements) == 1 and isinstance(program.statements[0], ExprStmt):
                    stmt = program.statements[0]
                    echo = Write([stmt.expr])
                    echo.line = stmt.line
                    program.statements = [echo]

                snippet = Compiler(source_path="<repl>").compile(program)
                start_ip, end_ip = vm.link_bytecode(snippet)
                vm.run_range(start_ip, end_ip)
            except Exception as e:
                if debug:
                    traceback.print_exc()
                else:
                    report_error(str(e))
            finally:
                if snippet is not None:
                    snippet.release()
    finally:
        bc.release()


def main():
    debug = False
    if "--debug" in sys.argv:
        debug = True
        sys.argv.remove("--debug")

    verbose = False
    if "--verbose" in sys.argv:
        verbose = True
        sys.argv.remove("--verbose")

    max_consts = None
    if "--max-consts" in sys.argv:
        i = sys.argv.index("--max-consts")
        try:
            max_consts = int(sys.argv[i + 1])
        except (IndexError, ValueError):
            print("--max-consts expects a positive integer")
            sys.exit(1)
        if max_consts <= 0:
            print("--max-consts expects a positive integer")
            sys.exit(1)
        del sys.argv[i : i + 2]

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if len(sys.argv) < 2:
        print(USAGE)
        sys.exit(1)

    cmd = sys.argv[1]

    if cmd == "repl":
        if len(sys.argv) != 2:
            print(USAGE)
            sys.exit(1)
        cmd_repl(debug=debug, max_consts=max_consts)
        return

    if len(sys.argv) != 3:
        print(USAGE)
        sys.exit(1)

    path = sys.argv[2]

    if cmd == "parse":
        cmd_parse(path)
    elif cmd == "build":
        cmd_build(path, max_consts=max_consts)
    elif cmd == "run":
        cmd_run(path, debug=debug, max_consts=max_consts)
    else:
        print(f"Unknown command: {cmd}")
        sys.exit(1)


if __name__ == "__main__":
    main()
