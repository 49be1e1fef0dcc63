"""
Tests for the Idem tooling around the core
===========================================
Formatter, call graph, source reading, configuration, call observers and
the command-line front end.

Usage:
    python -m pytest tests/test_tooling.py -v
"""
import sys
import os
import io
import logging
import shutil
import tempfile
import unittest
from contextlib import redirect_stdout, redirect_stderr

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from idem.lexer import Lexer
from idem.parser import Parser, ProgramNode
from idem.formatter import format_program, format_expression
from idem.graph import function_calls_graph
from idem.reader import SourceFileError, read_source
from idem.config import IdemConfig
from idem.interpreter import Interpreter
from idem.tracing import CallObserver, LoggingObserver, RecordingObserver
from idem.natives import NATIVE_REGISTRY, describe_all
from idem import cli


def _parse(source: str, path: str = "<input>") -> ProgramNode:
    return Parser(Lexer(source, path).tokenize()).parse()


# ─────────────────────────────────────────────
#  Formatter
# ─────────────────────────────────────────────

class TestFormatter(unittest.TestCase):
    """format_program renders canonical, re-parseable source."""

    PROGRAMS = [
        "main(){ print(add(2,3)) }",
        "main(){ if equal(2,2) { print(1) } else { print(0) } }",
        "f(a){ a } main(){ print(f(7)) }",
        "f(a, b){ if a { if b { 1 } } else { g(b, if 1 {} else { 2 }) } } g(x, y){} main(){}",
        "# comment\nmain()\n{\n  print( not(+0) )\n}",
    ]

    def test_round_trip(self):
        for source in self.PROGRAMS:
            with self.subTest(source=source):
                ast = _parse(source)
                self.assertEqual(_parse(format_program(ast)), ast)

    def test_formatting_is_idempotent(self):
        for source in self.PROGRAMS:
            with self.subTest(source=source):
                once = format_program(_parse(source))
                self.assertEqual(format_program(_parse(once)), once)

    def test_layout(self):
        ast = _parse("f(a){ a } main(){ if equal(f(1), 1) { print(1) } else { print(0) } }")
        self.assertEqual(
            format_program(ast),
            "f(a) {\n"
            "\ta\n"
            "}\n"
            "\n"
            "main() {\n"
            "\tif equal(f(1), 1) {\n"
            "\t\tprint(1)\n"
            "\t} else {\n"
            "\t\tprint(0)\n"
            "\t}\n"
            "}",
        )

    def test_empty_else_is_omitted(self):
        body = _parse("main(){ if 1 { 2 } }").statements[0].body
        self.assertEqual(format_expression(body), "if 1 {\n\t2\n}")

    def test_empty_body(self):
        self.assertEqual(format_program(_parse("main(){}")), "main() {\n\n}")


# ─────────────────────────────────────────────
#  Call Graph
# ─────────────────────────────────────────────

class TestGraph(unittest.TestCase):
    """function_calls_graph renders Graphviz digraph text."""

    def test_digraph_text(self):
        ast = _parse("f(a){ a } main(){ print(f(7)) }")
        self.assertEqual(
            str(function_calls_graph("t.id", ast)),
            'digraph "t.id" {\n'
            '\t"f" [label="f"];\n'
            '\t"main" [label="main"];\n'
            '\t"main" -> "print";\n'
            '\t"main" -> "f";\n'
            '}',
        )

    def test_edges_inside_branches(self):
        ast = _parse("main(){ if a() { b() } else { c(d()) } } a(){} b(){} c(x){} d(){}")
        graph = function_calls_graph("t", ast)
        self.assertEqual(
            [(e.source, e.destination) for e in graph.edges],
            [("main", "a"), ("main", "b"), ("main", "c"), ("main", "d")],
        )
        self.assertEqual([n.id for n in graph.nodes], ["main", "a", "b", "c", "d"])

    def test_repeated_calls_repeat_edges(self):
        graph = function_calls_graph("t", _parse("main(){ add(1, add(2, 3)) }"))
        self.assertEqual(len(graph.edges), 2)

    def test_identifiers_are_quoted(self):
        graph = function_calls_graph('say "hi"', _parse("a-b(){ 1 } main(){ a-b() }"))
        text = str(graph)
        self.assertTrue(text.startswith('digraph "say \\"hi\\"" {'))
        self.assertIn('\t"a-b" [label="a-b"];', text)
        self.assertIn('\t"main" -> "a-b";', text)


# ─────────────────────────────────────────────
#  Reader & Config
# ─────────────────────────────────────────────

class TestReader(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def _write(self, name: str, content: str) -> str:
        path = os.path.join(self.tmpdir, name)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
        return path

    def test_reads_id_file(self):
        path = self._write("a.id", "main(){}")
        self.assertEqual(read_source(path), "main(){}")

    def test_rejects_other_extensions(self):
        path = self._write("a.txt", "main(){}")
        with self.assertRaises(SourceFileError) as ctx:
            read_source(path)
        self.assertIn("file extension is not `.id`", str(ctx.exception))

    def test_custom_extension(self):
        path = self._write("a.idem", "main(){}")
        self.assertEqual(read_source(path, ".idem"), "main(){}")

    def test_missing_file(self):
        with self.assertRaises(SourceFileError):
            read_source(os.path.join(self.tmpdir, "missing.id"))


class TestConfig(unittest.TestCase):

    def test_defaults(self):
        config = IdemConfig.from_env({})
        self.assertEqual(config, IdemConfig())
        self.assertEqual(config.extension, ".id")
        self.assertTrue(config.validate_before_run)
        self.assertFalse(config.trace)
        self.assertIsNone(config.max_depth)

    def test_environment(self):
        config = IdemConfig.from_env({"IDEM_TRACE": "yes", "IDEM_MAX_DEPTH": "64"})
        self.assertTrue(config.trace)
        self.assertEqual(config.max_depth, 64)

    def test_bad_depth(self):
        with self.assertRaises(ValueError) as ctx:
            IdemConfig.from_env({"IDEM_MAX_DEPTH": "deep"})
        self.assertTrue(ctx.exception.__suppress_context__)
        with self.assertRaises(ValueError):
            IdemConfig.from_env({"IDEM_MAX_DEPTH": "0"})

    def test_overrides_skip_none(self):
        config = IdemConfig(trace=True).with_overrides(trace=None, max_depth=5)
        self.assertTrue(config.trace)
        self.assertEqual(config.max_depth, 5)


# ─────────────────────────────────────────────
#  Natives & Observers
# ─────────────────────────────────────────────

class TestNatives(unittest.TestCase):

    def test_table(self):
        arities = {name: info.arity for name, info in NATIVE_REGISTRY.items()}
        self.assertEqual(arities, {
            "or": 2, "and": 2, "xor": 2, "not": 1, "equal": 2,
            "add": 2, "sub": 2, "multiply": 2, "print": 1,
        })
        self.assertFalse(NATIVE_REGISTRY["print"].yields)

    def test_describe_all_lists_every_native(self):
        table = describe_all()
        for name in NATIVE_REGISTRY:
            self.assertIn(name, table)


class TestObservers(unittest.TestCase):

    SOURCE = "f(a){ a } main(){ print(f(7)) }"

    def test_recorded_events(self):
        observer = RecordingObserver()
        Interpreter(output_fn=lambda s: None, observer=observer).run(_parse(self.SOURCE))
        self.assertEqual(
            [(e.kind, e.name, e.depth) for e in observer.events],
            [("enter", "f", 1), ("exit", "f", 1), ("enter", "print", 1), ("exit", "print", 1)],
        )
        self.assertEqual(observer.events[0].arguments, (7,))
        self.assertEqual(observer.events[1].result, 7)
        self.assertIsNone(observer.events[3].result)

    def test_observers_do_not_change_output(self):
        source = "factorial(n) { if equal(n, 0) { 1 } else { multiply(n, factorial(sub(n, 1))) } } main() { print(factorial(6)) }"
        outputs = []
        for observer in (None, CallObserver(), RecordingObserver(), LoggingObserver()):
            output = []
            Interpreter(output_fn=output.append, observer=observer).run(_parse(source))
            outputs.append(output)
        self.assertEqual(outputs, [["720"]] * 4)

    def test_logging_observer(self):
        with self.assertLogs("idem.trace", level="DEBUG") as logs:
            Interpreter(output_fn=lambda s: None, observer=LoggingObserver()).run(_parse(self.SOURCE))
        self.assertEqual(len(logs.records), 4)
        self.assertIn("f(7)", logs.records[0].getMessage())


# ─────────────────────────────────────────────
#  CLI
# ─────────────────────────────────────────────

class TestCLI(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def _write(self, name: str, content: str) -> str:
        path = os.path.join(self.tmpdir, name)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
        return path

    def _main(self, *argv: str) -> tuple[int, str, str]:
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = cli.main(list(argv))
        return code, out.getvalue(), err.getvalue()

    def test_run(self):
        path = self._write("a.id", "main(){ print(add(2,3)) }")
        code, out, _ = self._main("run", path)
        self.assertEqual(code, 0)
        self.assertEqual(out, "5\n")

    def test_run_refuses_invalid_program(self):
        path = self._write("a.id", "main(){ g() }")
        code, out, err = self._main("run", path)
        self.assertEqual(code, 1)
        self.assertIn(f'{path}:1:9 unknown function "g"', out)
        self.assertIn("Issues were found", err)

    def test_run_without_validation_reports_runtime_error(self):
        path = self._write("a.id", "main(){ g() }")
        code, _, err = self._main("run", path, "--no-validate")
        self.assertEqual(code, 1)
        self.assertIn('unknown function "g"', err)

    def test_run_missing_main(self):
        path = self._write("a.id", "f(){ 1 }")
        code, _, err = self._main("run", path, "--no-validate")
        self.assertEqual(code, 1)
        self.assertIn('no "main" function', err)

    def test_syntax_error(self):
        path = self._write("a.id", "main) {}")
        code, _, err = self._main("validate", path)
        self.assertEqual(code, 1)
        self.assertEqual(err.strip(), f"{path}:1:5 expected an opening parenthesis")

    def test_wrong_extension(self):
        path = self._write("a.txt", "main(){}")
        code, _, err = self._main("run", path)
        self.assertEqual(code, 1)
        self.assertIn("file extension", err)

    def test_validate(self):
        path = self._write("a.id", "f(a){ 1 } main(){ }")
        code, out, _ = self._main("validate", path)
        self.assertEqual(code, 0)
        self.assertEqual(out.splitlines(), [
            f'{path}:1:3 variable "a" is never used',
            f'{path}:1:1 function "f" is never used',
        ])

    def test_validate_clean(self):
        path = self._write("a.id", "main(){ print(1) }")
        self.assertEqual(self._main("validate", path)[0], 0)

    def test_format_in_place(self):
        path = self._write("a.id", "main(){ print(1) }")
        self.assertEqual(self._main("format", "--check", path)[0], 1)
        self.assertEqual(self._main("format", path)[0], 0)
        self.assertEqual(read_source(path), "main() {\n\tprint(1)\n}\n")
        self.assertEqual(self._main("format", "--check", path)[0], 0)

    def test_display_functions(self):
        path = self._write("a.id", "main(){ print(1) }")
        code, out, _ = self._main("display", "functions", path)
        self.assertEqual(code, 0)
        self.assertIn('"main" -> "print";', out)

    def test_display_functions_to_file(self):
        path = self._write("a.id", "main(){ print(1) }")
        output = os.path.join(self.tmpdir, "calls.dot")
        self.assertEqual(self._main("display", "functions", path, "-o", output)[0], 0)
        with open(output, encoding="utf-8") as f:
            self.assertTrue(f.read().startswith(f'digraph "{path}" {{'))

    def test_natives(self):
        code, out, _ = self._main("natives")
        self.assertEqual(code, 0)
        self.assertIn("multiply", out)

    def test_trace(self):
        path = self._write("a.id", "main(){ print(1) }")
        with self.assertLogs("idem.trace", level=logging.INFO) as logs:
            code, out, _ = self._main("run", path, "--trace")
        self.assertEqual(code, 0)
        self.assertEqual(out, "1\n")
        self.assertTrue(any("print(1)" in r.getMessage() for r in logs.records))

    def test_no_command(self):
        self.assertEqual(self._main()[0], 1)


if __name__ == "__main__":
    unittest.main(verbosity=2)
