import os
import subprocess
import sys

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))


def run_cli(*args):
    return subprocess.run(
        [sys.executable, os.path.join(ROOT, "cli.py"), *args],
        text=True,
        capture_output=True,
        cwd=ROOT,
        timeout=10,
    )


def write_program(tmp_path, source):
    path = tmp_path / "prog.tally"
    path.write_text(source, encoding="utf-8")
    return str(path)


def test_run_prints_results(tmp_path):
    path = write_program(tmp_path, "a = 3\nb = 4.5\nwrite(a, b, a + b)\n")
    proc = run_cli("run", path)
    assert proc.returncode == 0, proc.stdout + proc.stderr
    assert proc.stdout == "3 4.5 7.5\n"


def test_build_lists_duplicate_constants(tmp_path):
    path = write_program(tmp_path, "write(3, 4.5, 3)\n")
    proc = run_cli("build", path)
    assert proc.returncode == 0, proc.stdout + proc.stderr
    assert "  [0] 3\n  [1] 4.5\n  [2] 3\n" in proc.stdout
    assert "0002  LOAD_CONST 2 (3)" in proc.stdout


def test_parse_dumps_tree(tmp_path):
    path = write_program(tmp_path, "x = -1\n")
    proc = run_cli("parse", path)
    assert proc.returncode == 0, proc.stdout + proc.stderr
    assert "type: Assign" in proc.stdout
    assert "type: Negate" in proc.stdout


def test_runtime_error_exits_nonzero(tmp_path):
    path = write_program(tmp_path, "write(1)\nwrite(nope)\n")
    proc = run_cli("run", path)
    assert proc.returncode == 1
    assert proc.stdout.startswith("1\nRuntime error: Undefined name: nope")
    assert "prog.tally:2" in proc.stdout


def test_max_consts_is_fatal(tmp_path):
    path = write_program(tmp_path, "write(1, 2, 3)\n")
    proc = run_cli("run", "--max-consts", "2", path)
    assert proc.returncode == 1
    assert "constant pool is full (2 slots)" in proc.stdout


def test_verbose_logs_growth_to_stderr(tmp_path):
    path = write_program(tmp_path, "write(1)\n")
    proc = run_cli("--verbose", "run", path)
    assert proc.returncode == 0
    assert proc.stdout == "1\n"
    assert "constant pool grow 0 -> 8" in proc.stderr


def test_usage_without_command():
    proc = run_cli()
    assert proc.returncode == 1
    assert "Usage:" in proc.stdout
