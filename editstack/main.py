#!/usr/bin/env python3
"""Automation thinning tool.

Reads an automation lane saved in its JSON form, thins it with the same
command the editor uses, and writes the result.

Usage:
    editstack-thin lane.json [-o thinned.json] [--threshold 0.01] [-v]
    python -m editstack.main lane.json
"""
import argparse
import json
import logging
import sys
from pathlib import Path

from .core.settings import Settings
from .ops.thin import ThinLane
from .state import AutomationLane

logger = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(
        description='Thin an automation lane with Ramer-Douglas-Peucker')
    parser.add_argument('lane', type=str,
                        help='Path to a lane JSON file')
    parser.add_argument('-o', '--out', type=str, default=None,
                        help='Output path (default: print to stdout)')
    parser.add_argument('--threshold', type=float, default=None,
                        help='Tolerance in normalized units (default: from settings)')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Log progress')
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')

    in_path = Path(args.lane)
    if not in_path.exists():
        logger.error('Input not found: %s', in_path)
        return 2
    try:
        lane = AutomationLane.from_dict(json.loads(in_path.read_text()))
    except (ValueError, KeyError, TypeError) as e:
        logger.error('Could not read lane from %s: %s', in_path, e)
        return 1

    threshold = args.threshold
    if threshold is None:
        threshold = Settings().thin_threshold
    cmd = ThinLane.create(lane, threshold)
    cmd.execute()
    logger.info('%s', cmd.description)

    text = json.dumps(lane.to_dict(), indent=2)
    if args.out:
        Path(args.out).write_text(text)
        logger.info('wrote %s', args.out)
    else:
        print(text)
    return 0


if __name__ == '__main__':
    sys.exit(main())
