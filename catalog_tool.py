import argparse
import os
import sys
from pathlib import Path
from typing import List, Optional

from catalog.compat import check_syntax, compile_mo
from catalog.differ import format_diff_stat
from catalog.errors import CatalogError, UsageError
from catalog.operations import compare, fuzzy_action_from_flags, msg_cat, msg_select, stat
from catalog.parser import is_json_content, parse_catalog
from catalog.serializer import OutputFormat
from catalog.state import EntryStateFilter
from catalog.stats import count_stats, format_msgfmt_statistics, format_stat_line
from utils.config import ConfigManager
from utils.logging_setup import get_logger, set_level

logger = get_logger("catalog_tool")

LOG_LEVEL_ENV = "CATALOG_HELPER_LOG_LEVEL"


def _add_output_options(parser: argparse.ArgumentParser):
    group = parser.add_argument_group("General options")
    group.add_argument("-o", "--output", default="-",
                       help="write output to file (use - for stdout); empty output overwrites file")
    group.add_argument("--json", action="store_true", help="output JSON instead of catalog text")


def _add_filter_options(parser: argparse.ArgumentParser):
    group = parser.add_argument_group("State filter")
    group.add_argument("--translated", action="store_true", help="select translated entries")
    group.add_argument("--untranslated", action="store_true", help="select untranslated entries")
    group.add_argument("--fuzzy", action="store_true", help="select fuzzy entries")
    group = parser.add_argument_group("Obsolete handling")
    group.add_argument("--with-obsolete", action="store_true", help="include obsolete entries (default)")
    group.add_argument("--no-obsolete", action="store_true", help="exclude obsolete entries")
    group = parser.add_argument_group("Single-state filter")
    group.add_argument("--only-same", action="store_true", help="only entries whose translation equals msgid")
    group.add_argument("--only-obsolete", action="store_true", help="only obsolete entries")
    group = parser.add_argument_group("Fuzzy handling")
    group.add_argument("--unset-fuzzy", action="store_true",
                       help="remove the fuzzy flag from selected entries, keeping translations")
    group.add_argument("--clear-fuzzy", action="store_true",
                       help="remove the fuzzy flag and clear translations of fuzzy entries")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="catalog_tool",
                                     description="Select, merge, compare and inspect gettext catalogs.")
    parser.add_argument("--log-level", help="override the configured log level (DEBUG, INFO, ...)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    select_parser = subparsers.add_parser("select", help="extract entries of a catalog by state and range")
    select_parser.add_argument("file", help="catalog text or catalog JSON file")
    select_parser.add_argument("--range", default="", help='entry range, e.g. "3,5,9-13"; omit to select all')
    select_parser.add_argument("--no-header", action="store_true", help="omit the header entry")
    _add_output_options(select_parser)
    _add_filter_options(select_parser)

    cat_parser = subparsers.add_parser("cat", help="merge catalogs, first occurrence of a message wins")
    cat_parser.add_argument("files", nargs="+", help="catalog text or catalog JSON files")
    _add_output_options(cat_parser)
    _add_filter_options(cat_parser)

    compare_parser = subparsers.add_parser("compare", help="write new and changed entries between two catalogs")
    compare_parser.add_argument("old", help="earlier catalog snapshot")
    compare_parser.add_argument("new", help="later catalog snapshot")
    compare_parser.add_argument("--no-header", action="store_true", help="omit the header entry")
    compare_parser.add_argument("--stat", action="store_true", help="only print the diff statistics")
    _add_output_options(compare_parser)

    stat_parser = subparsers.add_parser("stat", help="count entries by translation state")
    stat_parser.add_argument("files", nargs="+", help="catalog text or catalog JSON files")
    stat_parser.add_argument("--msgfmt", action="store_true", help="print in the msgfmt --statistics form")

    check_parser = subparsers.add_parser("check", help="check catalog syntax with an independent parser")
    check_parser.add_argument("files", nargs="+", help="catalog text files")
    check_parser.add_argument("--mo", help="compile the (single) checked catalog into this MO file")
    return parser


class CatalogTool:
    """Runs one catalog_tool command with settings from the configuration."""

    def __init__(self, config: Optional[ConfigManager] = None, stdout=None, stderr=None):
        self.config = config or ConfigManager()
        self.stdout = stdout or sys.stdout
        self.stderr = stderr or sys.stderr
        self.wrap_width = int(self.config.get("serializer.wrap_width", 79))
        self.json_indent = int(self.config.get("serializer.json_indent", 2))

    def run(self, args: argparse.Namespace) -> int:
        level = args.log_level or os.environ.get(LOG_LEVEL_ENV) or self.config.get("logging.level", "WARNING")
        try:
            set_level(level)
        except ValueError:
            self.stderr.write(f"error: unknown log level {level!r}\n")
            return 2
        handler = getattr(self, f"run_{args.command}")
        try:
            return handler(args)
        except UsageError as e:
            logger.debug(f"Usage error in {args.command}: {e}")
            self.stderr.write(f"error: {e}\n")
            return 2
        except CatalogError as e:
            logger.error(f"{args.command} failed: {e}")
            self.stderr.write(f"error: {e}\n")
            return 1
        except OSError as e:
            logger.error(f"{args.command} failed: {e}")
            self.stderr.write(f"error: {e}\n")
            return 1

    # Options

    @staticmethod
    def state_filter(args: argparse.Namespace) -> EntryStateFilter:
        return EntryStateFilter(
            translated=args.translated,
            untranslated=args.untranslated,
            fuzzy=args.fuzzy,
            with_obsolete=not args.no_obsolete,
            no_obsolete=args.no_obsolete,
            only_same=args.only_same,
            only_obsolete=args.only_obsolete,
        )

    @staticmethod
    def output_format(args: argparse.Namespace) -> OutputFormat:
        return OutputFormat.JSON if args.json else OutputFormat.PO

    def write_output(self, data: bytes, output: str):
        if output and output != "-":
            Path(output).write_bytes(data)
            logger.info(f"Wrote {len(data)} bytes to {output}")
            return
        buffer = getattr(self.stdout, "buffer", None)
        if buffer is not None:
            buffer.write(data)
            buffer.flush()
        else:
            self.stdout.write(data.decode("utf-8"))

    # Commands

    def run_select(self, args: argparse.Namespace) -> int:
        state_filter = self.state_filter(args)
        fuzzy_action = fuzzy_action_from_flags(args.unset_fuzzy, args.clear_fuzzy)
        data = Path(args.file).read_bytes()
        output = msg_select(data, range_expr=args.range, state_filter=state_filter,
                            output_format=self.output_format(args), no_header=args.no_header,
                            fuzzy_action=fuzzy_action, wrap_width=self.wrap_width,
                            json_indent=self.json_indent, source=args.file)
        self.write_output(output, args.output)
        return 0

    def run_cat(self, args: argparse.Namespace) -> int:
        state_filter = self.state_filter(args)
        fuzzy_action = fuzzy_action_from_flags(args.unset_fuzzy, args.clear_fuzzy)
        buffers = [Path(path).read_bytes() for path in args.files]
        output = msg_cat(buffers, state_filter=state_filter, output_format=self.output_format(args),
                         fuzzy_action=fuzzy_action, wrap_width=self.wrap_width,
                         json_indent=self.json_indent, sources=args.files)
        self.write_output(output, args.output)
        return 0

    def run_compare(self, args: argparse.Namespace) -> int:
        old_path = Path(args.old)
        old_data = old_path.read_bytes() if old_path.exists() else b""
        if not old_data:
            logger.info(f"{args.old} is missing or empty, every entry of {args.new} counts as new")
        diff_stat, output = compare(old_data, Path(args.new).read_bytes(), no_header=args.no_header,
                                    output_format=self.output_format(args), wrap_width=self.wrap_width,
                                    json_indent=self.json_indent, old_source=args.old, new_source=args.new)
        summary = format_diff_stat(diff_stat) or "Nothing changed."
        if args.stat:
            self.stdout.write(summary + "\n")
            return 0
        self.stderr.write(summary + "\n")
        self.write_output(output, args.output)
        return 0

    def run_stat(self, args: argparse.Namespace) -> int:
        for path in args.files:
            stats = stat(Path(path).read_bytes(), source=path)
            line = format_msgfmt_statistics(stats) if args.msgfmt else format_stat_line(stats)
            prefix = f"{path}: " if len(args.files) > 1 else ""
            self.stdout.write(f"{prefix}{line}\n")
        return 0

    def run_check(self, args: argparse.Namespace) -> int:
        if args.mo and len(args.files) != 1:
            raise UsageError("--mo requires exactly one input file")
        for path in args.files:
            data = Path(path).read_bytes()
            if is_json_content(data):
                raise UsageError(f"{path}: check expects catalog text, not JSON")
            catalog = parse_catalog(data, source=path)
            check_syntax(data)
            self.stdout.write(f"{path}: {format_msgfmt_statistics(count_stats(catalog))}\n")
            if args.mo:
                self.write_output(compile_mo(catalog), args.mo)
        return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    return CatalogTool().run(args)


if __name__ == "__main__":
    sys.exit(main())
