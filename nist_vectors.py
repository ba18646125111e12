#!/usr/bin/env python3
'''
Parse NIST CAVP SHA3 .rsp files and check them against keccak.sha3.
'''

import argparse
import collections
import logging
import os
import re
import sys

from keccak import DIGEST_SIZES, sha3

logger = logging.getLogger(__name__)

Vector = collections.namedtuple('Vector', ['length', 'msg', 'md'])

RE_HEADER = re.compile(r"^\[L\s*=\s*(\d+)\]$")
RE_LEN = re.compile(r"^Len\s*=\s*(\d+)$")
RE_MSG = re.compile(r"^Msg\s*=\s*([0-9a-fA-F]*)$")
RE_MD = re.compile(r"^MD\s*=\s*([0-9a-fA-F]+)$")
RE_SIZE = re.compile(r"SHA3[-_](224|256|384|512)")


def size_from_filename(path):
    '''
    Digest size named in a file such as SHA3_256ShortMsg.rsp, or None.
    '''
    m = RE_SIZE.search(os.path.basename(path).upper())
    if not m:
        return None
    return int(m.group(1))


def parse_rsp(lines):
    '''
    Yield a Vector for every Len / Msg / MD triple in the lines.

    Msg is ignored when Len is 0: the files carry a "00" placeholder.
    '''
    length = None
    msg = None
    for lineno, line in enumerate(lines, 1):
        line = line.strip()
        if not line or line.startswith('#') or RE_HEADER.match(line):
            continue

        m = RE_LEN.match(line)
        if m:
            length = int(m.group(1))
            if length % 8:
                raise ValueError('line %d: Len = %d is not a whole number '
                                 'of bytes' % (lineno, length))
            msg = None
            continue

        m = RE_MSG.match(line)
        if m:
            if length is None:
                raise ValueError('line %d: Msg without Len' % lineno)
            msg = bytes.fromhex(m.group(1)) if length else b''
            if len(msg) != length // 8:
                raise ValueError('line %d: Msg holds %d bytes, Len says %d'
                                 % (lineno, len(msg), length // 8))
            continue

        m = RE_MD.match(line)
        if m:
            if msg is None:
                raise ValueError('line %d: MD without Msg' % lineno)
            yield Vector(length, msg, m.group(1).lower())
            length = None
            msg = None
            continue

        raise ValueError('line %d: unrecognised line %r' % (lineno, line))


def load_rsp(path):
    '''
    List of the Vectors in an .rsp file.
    '''
    with open(path, 'r') as f:
        return list(parse_rsp(f))


def validate_file(path, size=None):
    '''
    Check every vector of an .rsp file. Returns (passed, failures).
    '''
    if size is None:
        size = size_from_filename(path)
    if size not in DIGEST_SIZES:
        raise ValueError('Cannot tell the SHA3 digest size of %s' % path)

    passed = 0
    failures = []
    for vector in load_rsp(path):
        if sha3(vector.msg, size).hex() == vector.md:
            passed += 1
        else:
            failures.append(vector)
    logger.debug('%s: %d passed, %d failed', path, passed, len(failures))
    return passed, failures


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Check SHA3 against NIST CAVP .rsp test vectors.')
    parser.add_argument('files', metavar='FILE', nargs='+',
                        help='The .rsp files to check')
    parser.add_argument('-a', '--algorithm', type=int, choices=DIGEST_SIZES,
                        help='Digest size, when the file name does not say')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Log debug output')
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose
                        else logging.WARNING)

    status = 0
    for path in args.files:
        try:
            passed, failures = validate_file(path, args.algorithm)
        except (OSError, ValueError) as e:
            print(f"{path}: error: {e}", file=sys.stderr)
            status = 1
            continue
        print(f"{os.path.basename(path)}: {passed} passed, "
              f"{len(failures)} failed")
        for vector in failures:
            print(f"  FAIL Len = {vector.length}", file=sys.stderr)
        if failures:
            status = 1
    return status


if __name__ == "__main__":
    sys.exit(main())
