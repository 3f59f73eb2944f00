import argparse
import logging
import sys
import textwrap

from . import DuplicateScanner, Processor, ScanSettings, InvalidRootError, ScanCancelled
from .report.output import Output, StandardOutput
from .utils.profiling import profile_main

EXIT_INVALID_ROOT = 1
EXIT_INTERRUPTED = 130


def positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer: {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='namedup',
        description='Find files under a directory that share both their name and their content, and estimate '
                    'how much space removing the extra copies would free.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent('''
            Examples:
              namedup /home/user/documents
              namedup --verbose --human-readable /mnt/backup
              echo /mnt/backup | namedup

            When ROOT is omitted it is read from standard input.
            ''').strip()
    )
    parser.add_argument(
        'root',
        nargs='?',
        metavar='ROOT',
        help='Directory to scan recursively (default: read one line from standard input)')
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Show digests and per-file sizes in the report and progress messages on standard error')
    parser.add_argument(
        '--human-readable',
        action='store_true',
        help='Show sizes in human-readable format (e.g., 1.00 MB instead of 1048576 bytes)')
    parser.add_argument(
        '--follow-symlinks',
        action='store_true',
        help='Include symbolic links that resolve to regular files outside ROOT (links to directories are never '
             'followed)')
    parser.add_argument(
        '--jobs',
        type=positive_int,
        metavar='N',
        help='Number of worker processes computing digests (default: number of CPUs)')
    parser.add_argument(
        '--log-file',
        metavar='PATH',
        help='Path to log file for operation logging')
    parser.add_argument(
        '--log-level',
        metavar='LEVEL',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Logging level for --log-file (DEBUG, INFO, WARNING, ERROR, CRITICAL). Defaults to INFO.')
    return parser


def configure_logging(verbose: bool, log_file: str | None, log_level: str | None):
    """Send warnings to standard error, and optionally everything at log_level to log_file."""
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.INFO if verbose else logging.WARNING)
    console.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    handlers: list[logging.Handler] = [console]

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(getattr(logging, log_level or 'INFO'))
        file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        handlers.append(file_handler)

    logging.basicConfig(
        level=min(handler.level for handler in handlers),
        handlers=handlers,
        force=True
    )


def read_root_from_stdin() -> str:
    print("Root directory: ", end="", flush=True)
    return sys.stdin.readline().rstrip('\r\n')


@profile_main
def namedup_main(argv: list[str] | None = None, output: Output | None = None) -> int:
    args = build_parser().parse_args(argv)

    configure_logging(args.verbose, args.log_file, args.log_level)

    root = args.root if args.root is not None else read_root_from_stdin()

    if output is None:
        output = StandardOutput()
    output.verbosity = 1 if args.verbose else 0
    output.use_bytes = not args.human_readable

    settings = ScanSettings(follow_symlinks=args.follow_symlinks)

    try:
        with Processor(args.jobs) as processor:
            report = DuplicateScanner(processor, settings).scan(root)
    except InvalidRootError as e:
        output.describe_invalid_root(e)
        return EXIT_INVALID_ROOT
    except (KeyboardInterrupt, ScanCancelled):
        print("Interrupted.", file=sys.stderr)
        return EXIT_INTERRUPTED

    output.describe_report(report)
    return 0


def main():
    sys.exit(namedup_main())


if __name__ == '__main__':
    main()
