#!/usr/bin/env python3
'''
SHA3 checksum executable
'''

import argparse
import logging
import sys

from keccak import DIGEST_SIZES, hash_file, hash_stream, hex_digest


def main(argv=None):
    '''
    Main module.
    '''
    parser = argparse.ArgumentParser(description='Print SHA3 checksums.')
    parser.add_argument('files', metavar='FILE', nargs='*',
                        help="Files to hash; none or '-' reads stdin")
    parser.add_argument('-a', '--algorithm', type=int, default=256,
                        choices=DIGEST_SIZES,
                        help='Digest size in bits (default: 256)')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Log debug output')
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose
                        else logging.WARNING)

    status = 0
    for name in args.files or ['-']:
        if name == '-':
            res_hex = hex_digest(hash_stream(sys.stdin.buffer, args.algorithm))
        else:
            try:
                res_hex = hash_file(name, args.algorithm)
            except OSError as e:
                print(f"sha3sum: {name}: {e.strerror}", file=sys.stderr)
                status = 1
                continue
        print(f"{res_hex}  {name}")
    return status


if __name__ == "__main__":
    sys.exit(main())
