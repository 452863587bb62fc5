import argparse
import logging
import os
import sys

from git_log_parser import (
    EntryFormatError,
    HistorySourceError,
    load_entries_from_repo,
    parse_entries,
    parse_entries_json,
)
from graph_layout import calculate_layout, find_contract_violations
from graph_text_dump import dump_layout_json, format_layout
from settings import INPUT_FORMATS, OUTPUT_FORMATS, settings

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(filename)s:%(lineno)d - %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="lanegraph", description="Compute commit graph lanes for a history listing")
    parser.add_argument("--repo", default=".", help="git repository to read (default: current directory)")
    parser.add_argument("--rev", default="HEAD", help="revision to start from")
    parser.add_argument("--all", dest="all_refs", action="store_true", default=None, help="read all refs")
    parser.add_argument("--max-count", type=int, default=None, help="number of commits to read")
    parser.add_argument("--input", help="read entries from a file ('-' for stdin) instead of a repository")
    parser.add_argument("--input-format", choices=INPUT_FORMATS, default="text", help="format of --input")
    parser.add_argument("--format", dest="output_format", choices=OUTPUT_FORMATS, default=None)
    parser.add_argument("--id-length", type=int, default=None, help="id width in text output (0 = full)")
    return parser


def read_entries(args):
    if args.input:
        if args.input == "-":
            text = sys.stdin.read()
        else:
            with open(args.input, "r", encoding="utf-8") as f:
                text = f.read()
        if args.input_format == "json":
            return parse_entries_json(text)
        return parse_entries(text)

    all_refs = settings.get_all_refs() if args.all_refs is None else args.all_refs
    max_count = settings.get_max_count() if args.max_count is None else args.max_count
    return load_entries_from_repo(args.repo, rev=args.rev, max_count=max_count, all_refs=all_refs)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        entries = read_entries(args)
    except (EntryFormatError, HistorySourceError, OSError) as e:
        logging.error("Failed to read history: %s", e)
        return 1

    for problem in find_contract_violations(entries):
        logging.warning(problem)

    layout = calculate_layout(entries)

    output_format = args.output_format or settings.get_output_format()
    if output_format == "json":
        print(dump_layout_json(layout))
    else:
        id_length = settings.get_id_length() if args.id_length is None else args.id_length
        output = format_layout(layout, entries, id_length)
        if output:
            print(output)
    return 0


def configure_logging():
    # 根据环境变量设置日志级别
    log_level = logging.DEBUG if os.getenv("DEBUG") == "1" else logging.INFO

    # 配置日志
    logging.basicConfig(level=log_level, format=LOG_FORMAT)
    # add file handler
    if os.getenv("LOG_TO_FILE") == "1":
        file_handler = logging.FileHandler("lanegraph.log")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logging.getLogger().addHandler(file_handler)


def run():
    configure_logging()
    sys.exit(main())


if __name__ == "__main__":
    run()
