import unittest
import sys
import tempfile
from io import StringIO
from pathlib import Path
from unittest.mock import patch

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from kbgen import build_parser, main
from layout import KeyboardLayout

CORPUS_DIR = PROJECT_ROOT / "corpus" / "fr"
AZERTY_PATH = PROJECT_ROOT / "layouts" / "azerty.json"
QUICK_RUN = ["--population-size", "6", "--generations", "3", "--seed", "1", "--no-progress"]


class TestKbgenCLI(unittest.TestCase):

    def run_main(self, argv):
        with patch('sys.stdout', new_callable=StringIO) as stdout, patch('sys.stderr', new_callable=StringIO) as stderr:
            code = main(argv)
        return code, stdout.getvalue(), stderr.getvalue()

    def test_parser_defaults(self):
        args = build_parser().parse_args(["corpus", "layout.json"])
        self.assertEqual(args.corpus_dir, Path("corpus"))
        self.assertIsNone(args.max_generations)
        self.assertIsNone(args.seed)
        self.assertFalse(args.no_accents)

    def test_parser_options(self):
        args = build_parser().parse_args(["c", "l.json", "--generations", "7", "--mutation-rate", "0.5", "--workers", "2"])
        self.assertEqual(args.max_generations, 7)
        self.assertEqual(args.mutation_rate, 0.5)
        self.assertEqual(args.workers, 2)

    def test_optimize_run(self):
        code, out, err = self.run_main([str(CORPUS_DIR), str(AZERTY_PATH)] + QUICK_RUN)
        self.assertEqual(code, 0, err)
        self.assertIn("azerty", out)
        self.assertIn("(lower is better)", out)
        self.assertIn("generations: 3", out)

    def test_output_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            output = Path(tmp) / "optimized.json"
            code, _, err = self.run_main([str(CORPUS_DIR), str(AZERTY_PATH), "--output", str(output)] + QUICK_RUN)
            self.assertEqual(code, 0, err)
            optimized = KeyboardLayout.from_file(output)
            initial = KeyboardLayout.from_file(AZERTY_PATH)
            self.assertEqual(set(optimized.keys), set(initial.keys))
            self.assertEqual(set(optimized.chars), set(initial.chars))

    def test_missing_corpus(self):
        code, _, err = self.run_main(["/nonexistent/corpus", str(AZERTY_PATH)] + QUICK_RUN)
        self.assertEqual(code, 1)
        self.assertIn("Error:", err)

    def test_missing_layout(self):
        code, _, err = self.run_main([str(CORPUS_DIR), "/nonexistent/layout.json"] + QUICK_RUN)
        self.assertEqual(code, 1)
        self.assertIn("Error:", err)

    def test_invalid_parameter(self):
        code, _, err = self.run_main([str(CORPUS_DIR), str(AZERTY_PATH), "--mutation-rate", "2"] + QUICK_RUN)
        self.assertEqual(code, 1)
        self.assertIn("mutation_rate", err)

    def test_malformed_layout(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "bad.json"
            path.write_text('{"keys": {"a": {"row": 9, "column": 0, "finger": "LEFT_PINKY"}}}', encoding="utf-8")
            code, _, err = self.run_main([str(CORPUS_DIR), str(path)] + QUICK_RUN)
        self.assertEqual(code, 1)
        self.assertIn("Row must be one of", err)


if __name__ == '__main__':
    unittest.main()
