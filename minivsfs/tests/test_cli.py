from __future__ import annotations

import contextlib
import io
import tempfile
import unittest
from pathlib import Path

from minivsfs.cli import add_main, format_main
from minivsfs.tests.helpers import write_source


def run(func, argv):
    stdout, stderr = io.StringIO(), io.StringIO()
    with contextlib.redirect_stdout(stdout), contextlib.redirect_stderr(stderr):
        try:
            code = func(argv)
        except SystemExit as exc:
            code = exc.code
    return code, stdout.getvalue(), stderr.getvalue()


class FormatCommandTests(unittest.TestCase):
    def test_success_prints_summary_to_stdout(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            image_path = Path(tmpdir) / "image.img"
            code, out, err = run(
                format_main,
                ["--image", str(image_path), "--size-kib", "180", "--inodes", "128"],
            )
            self.assertEqual(code, 0)
            self.assertIn("45 blocks (180 KiB), 128 inodes", out)
            self.assertEqual(err, "")
            self.assertEqual(image_path.stat().st_size, 180 * 1024)

    def test_invalid_size_exits_with_one(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            image_path = Path(tmpdir) / "image.img"
            code, out, err = run(
                format_main,
                ["--image", str(image_path), "--size-kib", "181", "--inodes", "128"],
            )
            self.assertEqual(code, 1)
            self.assertIn("Error: Invalid size-kib", err)
            self.assertEqual(out, "")
            self.assertFalse(image_path.exists())

    def test_usage_errors_exit_with_one(self) -> None:
        code, _out, err = run(format_main, ["--size-kib", "180"])
        self.assertEqual(code, 1)
        self.assertIn("usage:", err)
        code, _out, _err = run(format_main, ["--image", "x", "--size-kib", "big", "--inodes", "128"])
        self.assertEqual(code, 1)

    def test_empty_image_name(self) -> None:
        code, _out, err = run(format_main, ["--image", "", "--size-kib", "180", "--inodes", "128"])
        self.assertEqual(code, 1)
        self.assertIn("No image filename provided", err)


class AddCommandTests(unittest.TestCase):
    def test_success_prints_summary_to_stderr(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            workdir = Path(tmpdir)
            image_path = workdir / "image.img"
            run(format_main, ["--image", str(image_path), "--size-kib", "180", "--inodes", "128"])
            source = write_source(workdir, "hello.txt", 5000)
            output = workdir / "out.img"
            code, out, err = run(
                add_main,
                ["--input", str(image_path), "--output", str(output), "--file", str(source)],
            )
            self.assertEqual(code, 0)
            self.assertEqual(out, "")
            self.assertIn("Added hello.txt -> inode 2, 2 blocks", err)
            self.assertEqual(output.stat().st_size, image_path.stat().st_size)

    def test_failure_exits_with_two(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            workdir = Path(tmpdir)
            image_path = workdir / "image.img"
            run(format_main, ["--image", str(image_path), "--size-kib", "180", "--inodes", "128"])
            source = write_source(workdir, "big.bin", 12 * 4096 + 1)
            output = workdir / "out.img"
            code, _out, err = run(
                add_main,
                ["--input", str(image_path), "--output", str(output), "--file", str(source)],
            )
            self.assertEqual(code, 2)
            self.assertIn("Error: File too large", err)
            self.assertFalse(output.exists())

    def test_missing_input_reports_system_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            workdir = Path(tmpdir)
            source = write_source(workdir, "a.txt", 1)
            code, _out, err = run(
                add_main,
                ["--input", str(workdir / "none.img"), "--output", str(workdir / "o.img"), "--file", str(source)],
            )
            self.assertEqual(code, 2)
            self.assertIn("No such file or directory", err)

    def test_usage_errors_exit_with_two(self) -> None:
        code, _out, err = run(add_main, ["--input", "a.img"])
        self.assertEqual(code, 2)
        self.assertIn("usage:", err)


class LauncherTests(unittest.TestCase):
    def test_dispatches_subcommands(self) -> None:
        from main import main

        with tempfile.TemporaryDirectory() as tmpdir:
            workdir = Path(tmpdir)
            image_path = workdir / "image.img"
            code, out, _err = run(
                main,
                ["mkfs", "--image", str(image_path), "--size-kib", "180", "--inodes", "128"],
            )
            self.assertEqual(code, 0)
            self.assertIn("created", out)
            source = write_source(workdir, "note.txt", 3)
            code, _out, err = run(
                main,
                ["add", "--input", str(image_path), "--output", str(image_path), "--file", str(source)],
            )
            self.assertEqual(code, 0)
            self.assertIn("Added note.txt -> inode 2, 1 blocks", err)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
