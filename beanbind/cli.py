"""Command line tool that binds a document to a type and writes it back."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from typing import BinaryIO

from . import codec, errors, logs
from .mapper import Mapper
from .utils.path import import_class

log = logs.get(__name__)


def parse_alias(value: str) -> tuple[str, str]:
    """Split ``TAG=module.Class`` into its parts."""
    try:
        alias, name = value.split('=', 1)
    except ValueError:
        raise argparse.ArgumentTypeError(f'expected TAG=module.Class, got {value!r}') from None
    if not alias or not name:
        raise argparse.ArgumentTypeError(f'expected TAG=module.Class, got {value!r}')
    return alias, name


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        'beanbind',
        description='decode a document into a type and encode it again',
    )
    parser.add_argument(
        'path',
        nargs='?',
        help='the document to read. reads from STDIN by default',
    )
    parser.add_argument(
        '-t',
        '--type',
        required=True,
        metavar='MODULE.CLASS',
        help='the type to decode the document into',
    )
    parser.add_argument(
        '-i',
        '--input-codec',
        default='json',
        help='codec of the input document (default: %(default)s)',
    )
    parser.add_argument(
        '-o',
        '--output-codec',
        default='json',
        help='codec of the output document (default: %(default)s)',
    )
    parser.add_argument(
        '-a',
        '--alias',
        action='append',
        dest='aliases',
        type=parse_alias,
        metavar='TAG=MODULE.CLASS',
        default=[],
        help='a type tag alias, may be given more than once',
    )
    parser.add_argument(
        '--skip-unknown',
        action='store_true',
        help='ignore keys that have no matching property',
    )
    parser.add_argument(
        '--omit-tag',
        action='store_true',
        help='never write type tags',
    )
    parser.add_argument(
        '-v',
        '--verbose',
        action='count',
        default=0,
        help='increase logging verbosity',
    )
    return parser


def convert(args: argparse.Namespace, input_fp: BinaryIO, output_fp: BinaryIO) -> None:
    cls = import_class(args.type)
    mapper = Mapper(
        args.input_codec,
        skip_unknown=args.skip_unknown,
        omit_tag=args.omit_tag,
        expected=cls,
    )
    for alias, name in args.aliases:
        mapper.add_alias(import_class(name), alias)

    value = mapper.decode(input_fp.read(), cls)
    log.debug('decoded: %r', value)

    mapper.codec = codec.create(args.output_codec)
    output_fp.write(mapper.encode(value))


def main(argv: Sequence[str] | None = None) -> int:
    args = create_parser().parse_args(argv)
    logs.init(args.verbose, log_exceptions=False)

    try:
        if args.path:
            with open(args.path, 'rb') as fp:
                convert(args, fp, sys.stdout.buffer)
        else:
            convert(args, sys.stdin.buffer, sys.stdout.buffer)
    except (errors.BeanBindError, ImportError, TypeError, ValueError) as exc:
        print(f'beanbind: {exc}', file=sys.stderr)
        return 1
    return 0
