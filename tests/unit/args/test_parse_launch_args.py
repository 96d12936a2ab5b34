"""Tests for launch-argument parsing.

Covers flag vocabularies, lookahead handling for value-taking flags, and
positional launch-target resolution.
"""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from mudkip import __version__
from mudkip.args import (
    StartupOptions,
    help_text,
    parse_launch_args,
    parse_theme_value,
    parse_toggle_value,
)
from mudkip.targets import FileTarget, FolderTarget


class ValueVocabularyTests(unittest.TestCase):
    def test_theme_words_map_to_theme_ids(self) -> None:
        self.assertEqual(parse_theme_value("Dark"), "vscode-dark")
        self.assertEqual(parse_theme_value("vscode-dark"), "vscode-dark")
        self.assertEqual(parse_theme_value("LIGHT"), "vscode-light")
        self.assertEqual(parse_theme_value("vscode-light"), "vscode-light")
        self.assertIsNone(parse_theme_value("solarized"))

    def test_toggle_words_are_case_insensitive(self) -> None:
        for word in ("1", "true", "YES", "on", "Open", "enabled"):
            self.assertIs(parse_toggle_value(word), True, word)
        for word in ("0", "false", "no", "OFF", "closed", "close", "Disabled"):
            self.assertIs(parse_toggle_value(word), False, word)
        self.assertIsNone(parse_toggle_value("maybe"))


class ParseLaunchArgsTests(unittest.TestCase):
    def test_reads_startup_options_and_markdown_file_path(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            doc = Path(tmp) / "notes.md"
            doc.write_text("# test\n", encoding="utf-8")

            parsed = parse_launch_args(["--theme", "light", "--toc-open", "--watch=off", str(doc)])

            self.assertEqual(
                parsed.startup_options,
                StartupOptions(theme="vscode-light", toc_open=True, auto_refresh=False),
            )
            self.assertEqual(parsed.launch_target, FileTarget(doc.resolve()))
            self.assertFalse(parsed.exit_after_print)

    def test_option_values_are_not_treated_as_paths(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            doc = Path(tmp) / "notes.md"
            doc.write_text("x", encoding="utf-8")

            parsed = parse_launch_args(["--theme", "dark", "--watch", "on", str(doc)])

            self.assertEqual(parsed.startup_options.theme, "vscode-dark")
            self.assertIs(parsed.startup_options.auto_refresh, True)
            self.assertEqual(parsed.launch_target, FileTarget(doc.resolve()))

    def test_theme_without_value_does_not_consume_next_flag(self) -> None:
        with self.assertLogs("mudkip.args", level="WARNING") as logs:
            parsed = parse_launch_args(["--theme", "--toc-open"])

        self.assertIsNone(parsed.startup_options.theme)
        self.assertIs(parsed.startup_options.toc_open, True)
        self.assertTrue(any("--theme without a value" in line for line in logs.output))

    def test_trailing_theme_flag_is_ignored(self) -> None:
        parsed = parse_launch_args(["--dark", "--theme"])
        self.assertEqual(parsed.startup_options.theme, "vscode-dark")

    def test_unsupported_values_warn_and_leave_option_unset(self) -> None:
        with self.assertLogs("mudkip.args", level="WARNING") as logs:
            parsed = parse_launch_args(["--theme=sepia", "--toc=sideways", "--auto-refresh=sometimes"])

        self.assertTrue(parsed.startup_options.is_empty())
        self.assertEqual(len(logs.output), 3)

    def test_two_token_theme_with_bad_value_consumes_the_value(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            doc = Path(tmp) / "sepia"
            doc.mkdir()
            with self.assertLogs("mudkip.args", level="WARNING"):
                parsed = parse_launch_args(["--theme", str(doc)])

        self.assertIsNone(parsed.startup_options.theme)
        self.assertIsNone(parsed.launch_target)

    def test_bare_toc_and_watch_default_to_true(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            parsed = parse_launch_args(["--toc", "--watch", str(root)])

        self.assertIs(parsed.startup_options.toc_open, True)
        self.assertIs(parsed.startup_options.auto_refresh, True)
        self.assertEqual(parsed.launch_target, FolderTarget(root))

    def test_two_token_toggle_consumes_only_boolean_words(self) -> None:
        parsed = parse_launch_args(["--toc", "closed", "--auto-refresh", "off"])
        self.assertIs(parsed.startup_options.toc_open, False)
        self.assertIs(parsed.startup_options.auto_refresh, False)

    def test_negative_aliases(self) -> None:
        for flag in ("--toc-closed", "--toc-close", "--no-toc"):
            self.assertIs(parse_launch_args([flag]).startup_options.toc_open, False, flag)
        for flag in ("--no-watch", "--watch-off", "--no-auto-refresh"):
            self.assertIs(parse_launch_args([flag]).startup_options.auto_refresh, False, flag)

    def test_later_flags_override_earlier_ones(self) -> None:
        parsed = parse_launch_args(["--dark", "--light", "--toc=open", "--no-toc"])
        self.assertEqual(parsed.startup_options.theme, "vscode-light")
        self.assertIs(parsed.startup_options.toc_open, False)

    def test_help_marks_exit_and_resolves_no_target(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            doc = Path(tmp) / "notes.md"
            doc.write_text("x", encoding="utf-8")

            parsed = parse_launch_args(["--help", str(doc), "--dark"])

        self.assertTrue(parsed.exit_after_print)
        self.assertIsNone(parsed.launch_target)
        self.assertEqual(parsed.output, help_text())
        self.assertIsNone(parsed.startup_options.theme)

    def test_version_output(self) -> None:
        parsed = parse_launch_args(["-V"])
        self.assertTrue(parsed.exit_after_print)
        self.assertEqual(parsed.output, f"mudkip {__version__}")

    def test_first_resolvable_positional_wins(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            first = root / "first.md"
            second = root / "second.md"
            first.write_text("x", encoding="utf-8")
            second.write_text("x", encoding="utf-8")

            parsed = parse_launch_args([str(root / "missing.md"), str(first), str(second)])

        self.assertEqual(parsed.launch_target, FileTarget(first))

    def test_double_dash_makes_flag_like_tokens_positional(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            odd = root / "--dark.md"
            odd.write_text("x", encoding="utf-8")

            parsed = parse_launch_args(["--", "--dark.md", "--light"], cwd=root)

        self.assertIsNone(parsed.startup_options.theme)
        self.assertEqual(parsed.launch_target, FileTarget(odd))

    def test_unknown_flags_are_skipped(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            parsed = parse_launch_args(["--frobnicate", "-psn_0_12345", str(root)])

        self.assertEqual(parsed.launch_target, FolderTarget(root))
        self.assertTrue(parsed.startup_options.is_empty())

    def test_empty_arguments_give_empty_request(self) -> None:
        parsed = parse_launch_args([])
        self.assertIsNone(parsed.launch_target)
        self.assertTrue(parsed.startup_options.is_empty())
        self.assertFalse(parsed.exit_after_print)


class StartupOptionsTests(unittest.TestCase):
    def test_merged_over_prefers_explicit_fields(self) -> None:
        defaults = StartupOptions(theme="vscode-dark", toc_open=True, auto_refresh=True)
        merged = StartupOptions(theme="vscode-light").merged_over(defaults)
        self.assertEqual(merged, StartupOptions(theme="vscode-light", toc_open=True, auto_refresh=True))

    def test_wire_shape_omits_absent_fields(self) -> None:
        self.assertEqual(StartupOptions().to_wire(), {})
        self.assertEqual(
            StartupOptions(toc_open=False, auto_refresh=True).to_wire(),
            {"tocOpen": False, "autoRefresh": True},
        )


if __name__ == "__main__":
    unittest.main()
