"""Re-render JSON with the encoder's formatting policy.

    python -m jsonbind payload.json
    curl -s https://example.test/zones | python -m jsonbind --indent 4
"""

from __future__ import annotations

import argparse
import sys
from typing import Any

from . import __version__, errors, logs
from .codec.json import JsonDecoder, JsonEncoder
from .http import RequestTemplate, Response
from .mapper import MapperConfig
from .pretty import DEFAULT_INDENT

log = logs.get(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser('jsonbind')
    parser.add_argument(
        'path',
        nargs='?',
        help='a JSON file to read. reads from STDIN by default',
    )
    parser.add_argument(
        '-i',
        '--indent',
        type=int,
        default=DEFAULT_INDENT,
        help='spaces per object level, 0 for compact output (default: %(default)s)',
    )
    parser.add_argument(
        '-s',
        '--sort-keys',
        action='store_true',
        help='sort object keys',
    )
    parser.add_argument(
        '-v',
        '--verbose',
        action='count',
        default=0,
        help='increase logging verbosity',
    )
    parser.add_argument('-V', '--version', action='version', version=f'%(prog)s {__version__}')
    return parser.parse_args(argv)


def read_input(path: str | None) -> bytes:
    if path is None:
        return sys.stdin.buffer.read()
    with open(path, 'rb') as f:
        return f.read()


def render(data: bytes, indent: int = DEFAULT_INDENT, sort_keys: bool = False) -> str:
    """Decode *data* and encode it again with the given layout."""
    config = MapperConfig(indent=indent or None, sort_keys=sort_keys)
    value: Any = JsonDecoder(config=config).decode(Response(200, body=data), Any)

    template = RequestTemplate('POST')
    JsonEncoder(config=config).encode(value, Any, template)
    return template.body_text or ''


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logs.init(args.verbose)

    try:
        data = read_input(args.path)
    except OSError as exc:
        log.error('cannot read input: %s', exc)
        return 1
    log.debug('read %d bytes', len(data))

    try:
        text = render(data, args.indent, args.sort_keys)
    except (errors.DecodeError, errors.EncodeError) as exc:
        log.error('%s', exc)
        return 1

    print(text)
    return 0


if __name__ == '__main__':
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        pass
