"""CLI entry point for formspam."""

import sys
import json
import logging
import argparse
from pathlib import Path

from .errors import ConfigError, SignalError
from .spammer import Spammer, sample_forms


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='formspam',
        description='Fill an HTML form with random data and post it over and over',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Post to a form with at most 50 open requests
  python -m formspam spam fields.ffl --url https://example.com/signup --max-open 50

  # Take the settings from a run profile, override the timeout
  python -m formspam spam fields.ffl --profile run.json --timeout 5

  # Print 5 generated forms without sending them
  python -m formspam sample fields.ffl -n 5 --seed 42
        """
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    spam = subparsers.add_parser('spam', help='Post generated forms until interrupted')
    spam.add_argument('fields', type=Path,
                      help='Path to the FFL field file')
    spam.add_argument('-u', '--url', default=None,
                      help='URL the forms are posted to')
    spam.add_argument('-m', '--max-open', type=int, default=None,
                      help='Maximum number of open requests')
    spam.add_argument('-t', '--timeout', type=float, default=None,
                      help='Per-request timeout in seconds (default: 20)')
    spam.add_argument('--report-interval', type=float, default=None,
                      help='Seconds between progress lines (default: 10)')
    spam.add_argument('-p', '--profile', type=Path, default=None,
                      help='JSON run profile; flags take precedence')
    spam.add_argument('--seed', type=int, default=None,
                      help='Random seed for reproducible forms')
    spam.add_argument('-o', '--report-file', type=Path, default=None,
                      help='Also append progress lines to this file')
    chatter = spam.add_mutually_exclusive_group()
    chatter.add_argument('-v', '--verbose', action='store_true',
                         help='Show startup steps and info logging')
    chatter.add_argument('-q', '--quiet', action='store_true',
                         help='Only errors and the final summary')

    sample = subparsers.add_parser('sample', help='Print generated forms as JSON lines')
    sample.add_argument('fields', type=Path,
                        help='Path to the FFL field file')
    sample.add_argument('-n', '--count', type=int, default=1,
                        help='Number of forms to generate (default: 1)')
    sample.add_argument('--seed', type=int, default=None,
                        help='Random seed for reproducibility')

    return parser


def main(argv=None):
    """Main entry point."""
    args = build_parser().parse_args(argv)

    verbose = getattr(args, 'verbose', False)
    quiet = getattr(args, 'quiet', False)
    level = logging.WARNING
    if verbose:
        level = logging.INFO
    elif quiet:
        level = logging.ERROR
    logging.basicConfig(
        level=level,
        format="%(levelname)s:%(name)s:%(message)s",
    )

    if not args.fields.exists():
        print(f"ERROR: Field file not found: {args.fields}")
        sys.exit(1)

    try:
        if args.command == 'sample':
            for form in sample_forms(args.fields, args.count, args.seed):
                print(json.dumps(form, ensure_ascii=False))
            sys.exit(0)

        overrides = {
            'url': args.url,
            'max_open': args.max_open,
            'timeout': args.timeout,
            'report_interval': args.report_interval,
            'seed': args.seed,
        }
        spammer = Spammer(args.fields, args.profile, overrides,
                          report_path=args.report_file, verbose=verbose, quiet=quiet)
        spammer.run()
        sys.exit(0)
    except (ConfigError, SignalError) as e:
        print(f"ERROR: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
