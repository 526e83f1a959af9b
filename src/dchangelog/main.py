"""Main CLI entry point for dchangelog."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import load_config
from .errors import ChangelogError, UsageError
from .logging_utils import configure_logging
from .merge import DEFAULT_MERGED_OUTPUT, merge_documents
from .render import render_document
from .vcs import GitRepository

logger = logging.getLogger(__name__)

PROG = "dchangelog"
COMMANDS = ("generate", "merge")

GENERATE_USAGE = f"Generate TSD: {PROG} generate --config=<jsonfile> --dest=<base_branch> --src=<target_branch>"
MERGE_USAGE = f"Merge PDF: {PROG} merge --folder=<folder>"

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_USAGE = 2


def usage_message() -> str:
    """Usage text listing every valid invocation."""
    return f"Error Usage\n{GENERATE_USAGE}\n{MERGE_USAGE}"


def create_parser() -> argparse.ArgumentParser:
    """Create command line argument parser."""
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Generate a Technical Specification Document from git changes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Examples:
  {PROG} generate --config=tsd.json --dest=main --src=feature/login
  {PROG} generate --config=tsd.json --dest=v1.0 --src=v1.1 --output-dir=docs
  {PROG} merge --folder=docs --output=release.pdf
        """,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command")

    generate = subparsers.add_parser("generate", help="Render a TSD PDF from a git diff")
    generate.add_argument("--config", help="JSON configuration file")
    generate.add_argument("--dest", help="Base revision for the diff")
    generate.add_argument("--src", help="Target revision for the diff")
    generate.add_argument(
        "--repo",
        default=".",
        help="Path inside the git repository (default: current directory)",
    )
    generate.add_argument(
        "--output-dir",
        default=".",
        help="Directory for the generated PDF (default: current directory)",
    )
    generate.add_argument(
        "--context",
        type=int,
        default=3,
        help="Number of context lines in diffs (default: 3)",
    )

    merge = subparsers.add_parser("merge", help="Merge every PDF in a folder into one")
    merge.add_argument("--folder", help="Folder containing PDFs to merge")
    merge.add_argument(
        "--output",
        default=DEFAULT_MERGED_OUTPUT,
        help=f"Merged PDF path (default: {DEFAULT_MERGED_OUTPUT})",
    )

    return parser


def validate_args(args: argparse.Namespace) -> None:
    """Validate command line arguments for the selected command."""
    if args.command == "generate":
        if not (args.config and args.dest and args.src):
            raise UsageError("generate requires --config, --dest and --src", GENERATE_USAGE)
        if args.context < 0:
            raise UsageError("--context cannot be negative", GENERATE_USAGE)
    elif args.command == "merge":
        if not args.folder:
            raise UsageError("merge requires --folder", MERGE_USAGE)
    else:
        raise UsageError("unknown command", f"{GENERATE_USAGE}\n{MERGE_USAGE}")


def run_generate(args: argparse.Namespace) -> Path:
    """Load config, collect changes and render the TSD."""
    print(f"Load config {args.config} ...")
    config = load_config(args.config)

    print(f"Fetching Git changes between {args.dest} and {args.src}")
    repo = GitRepository(args.repo, context_lines=args.context)
    logger.debug("Using %s", repo.validate_git_available())
    change_set = repo.collect_changes(args.dest, args.src)

    print("Generating TSD PDF...")
    output_path = render_document(config, change_set, output_dir=args.output_dir)
    print(f"TSD PDF generated successfully: {output_path}")
    return output_path


def run_merge(args: argparse.Namespace) -> Path:
    """Merge the PDFs of a folder."""
    print(f"Merging PDFs in folder: {args.folder}")
    result = merge_documents(args.folder, args.output)
    print(f"Merged PDF saved as: {result.output_path} ({len(result.inputs)} files, {result.page_count} pages)")
    return result.output_path


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    configure_logging()
    argv = list(sys.argv[1:] if argv is None else argv)

    if not argv or (argv[0] not in COMMANDS and argv[0] not in ("-h", "--help", "--version")):
        print(usage_message(), file=sys.stderr)
        return EXIT_USAGE

    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        validate_args(args)

        if args.command == "generate":
            run_generate(args)
        else:
            run_merge(args)

        return EXIT_OK

    except UsageError as e:
        print(f"Error Usage: {e.message}\n{e.usage}", file=sys.stderr)
        return EXIT_USAGE

    except ChangelogError as e:
        # Handle known dchangelog errors
        logger.debug("Run failed", extra={"error": e.to_dict()})
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_ERROR

    except Exception as e:
        # Handle unexpected errors
        logger.exception("Unexpected failure")
        print(f"Internal error: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
