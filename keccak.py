'''
Keccak SHA3 family under FIPS 202 standard.

The 1600-bit state is kept as 25 unsigned 64-bit lanes in a numpy array,
lane (x, y) at flat index x + 5 * y.
'''

import logging

import numpy as np

logger = logging.getLogger(__name__)

STATE_BYTES = 200
LANE_BYTES = 8
LANE_BITS = 64
LANES = 25
ROUNDS = 24
DIGEST_SIZES = (224, 256, 384, 512)
CHUNK_SIZE = 65536

DOMAIN_SUFFIX = 0x06
PAD_LAST = 0x80

_LANE_DTYPE = np.dtype('<u8')


class HasherFinalizedError(RuntimeError):
    '''
    Raised when a Sha3Hasher is used after squeeze().
    '''


def parameters(size):
    '''
    Rate and capacity, in bytes, for a digest size in bits.
    '''
    if size not in DIGEST_SIZES:
        raise ValueError('Unsupported digest size %r, expected one of %s.'
                         % (size, ', '.join(map(str, DIGEST_SIZES))))
    capacity = 2 * (size // 8)
    return STATE_BYTES - capacity, capacity


def as_bytes(data):
    '''
    Copy a bytes-like object into bytes; anything else is a TypeError.
    '''
    return bytes(memoryview(data))


def hex_digest(digest):
    '''
    Lowercase hex string of a digest.
    '''
    return bytes(digest).hex()


def rol64(lanes, offsets):
    '''
    Rotate 64-bit lanes left, elementwise. A zero offset leaves the lane.
    '''
    offsets = np.asarray(offsets, dtype=np.uint64)
    back = (np.uint64(LANE_BITS) - offsets) % np.uint64(LANE_BITS)
    return (lanes << offsets) | (lanes >> back)


def rc(t):
    '''
    Round constant bit, FIPS 202 Algorithm 5.

    An 8-bit LFSR over x^8 + x^6 + x^5 + x^4 + 1, stepped t mod 255 times
    from 0b10000000; the output is the top bit.
    '''
    if t % 255 == 0:
        return 1
    R = 0b10000000
    for _ in range(t % 255):
        out = R & 1
        R >>= 1
        if out:
            R ^= 0b10001110
    return R >> 7


def round_constant(ir):
    '''
    64-bit round constant for round ir: bit 2^j - 1 is rc(j + 7 * ir).
    '''
    value = 0
    for j in range(7):
        value |= rc(j + 7 * ir) << (2**j - 1)
    return value


def rho_offsets():
    '''
    Rotation offsets of the rho step, indexed [x, y].
    '''
    offsets = np.zeros((5, 5), dtype=np.uint64)
    (x, y) = (1, 0)
    for t in range(24):
        offsets[x, y] = ((t + 1) * (t + 2) // 2) % LANE_BITS
        (x, y) = (y, (2 * x + 3 * y) % 5)
    return offsets


def _frozen(array):
    array.flags.writeable = False
    return array


ROUND_CONSTANTS = _frozen(
    np.array([round_constant(ir) for ir in range(ROUNDS)], dtype=np.uint64))
RHO_OFFSETS = _frozen(rho_offsets())

# new[x, y] = old[(x + 3y) % 5, x]
_X, _Y = np.meshgrid(np.arange(5), np.arange(5), indexing='ij')
PI_SOURCE = ((_X + 3 * _Y) % 5, _X)


class StateArray:
    '''
    State array for the KECCAK-f[1600] permutation.

    self.A is a (5, 5) uint64 array addressed A[x, y].
    '''
    def __init__(self, lanes=None):
        '''
        Build the state from 25 lanes in x + 5 * y order, or all zeros.
        '''
        if lanes is None:
            lanes = np.zeros(LANES, dtype=np.uint64)
        lanes = np.asarray(lanes, dtype=np.uint64)
        if lanes.shape != (LANES,):
            raise ValueError('State needs exactly %d lanes, got shape %r.'
                             % (LANES, lanes.shape))
        self.A = lanes.reshape(5, 5).T.copy()

    def lanes(self):
        '''
        Copy of the 25 lanes in x + 5 * y order.
        '''
        return self.A.T.flatten()

    def xor_block(self, block):
        '''
        XOR a little-endian block of whole lanes into the low-index lanes.
        '''
        if len(block) % LANE_BYTES or len(block) > STATE_BYTES:
            raise ValueError('Block of %d bytes is not a whole number of '
                             'lanes within the state.' % len(block))
        words = np.zeros(LANES, dtype=np.uint64)
        words[:len(block) // LANE_BYTES] = np.frombuffer(block,
                                                         dtype=_LANE_DTYPE)
        self.A ^= words.reshape(5, 5).T

    def squeeze(self, length):
        '''
        First length bytes of the state, lanes serialized little-endian.
        '''
        return self.lanes().astype(_LANE_DTYPE).tobytes()[:length]

    def theta(self):
        '''
        Step mapping theta.
        '''
        C = np.bitwise_xor.reduce(self.A, axis=1)
        D = np.roll(C, 1) ^ rol64(np.roll(C, -1), 1)
        self.A ^= D[:, np.newaxis]

    def rho(self):
        '''
        Step mapping rho.
        '''
        self.A = rol64(self.A, RHO_OFFSETS)

    def pi(self):
        '''
        Step mapping pi.
        '''
        # fancy indexing reads from the old array into a fresh one
        self.A = self.A[PI_SOURCE]

    def chi(self):
        '''
        Step mapping chi.
        '''
        A = self.A
        self.A = A ^ (~np.roll(A, -1, axis=0) & np.roll(A, -2, axis=0))

    def iota(self, ir):
        '''
        Step mapping iota.
        '''
        self.A[0, 0] ^= ROUND_CONSTANTS[ir]

    def Rnd(self, ir):
        '''
        Round function Rnd.
        '''
        self.theta()
        self.rho()
        self.pi()
        self.chi()
        self.iota(ir)


def keccak_f(state):
    '''
    KECCAK-f[1600]: 24 rounds over the state, in place.
    '''
    for ir in range(ROUNDS):
        state.Rnd(ir)
    return state


def pad(remainder, rate):
    '''
    SHA3 padding of the last partial block to a full rate-sized block.

    0x06 goes right after the message and 0x80 is XORed into the last
    byte; for a remainder of rate - 1 bytes both land on one byte (0x86).
    '''
    if len(remainder) >= rate:
        raise ValueError('Final block holds %d bytes, must be fewer than '
                         'the rate of %d.' % (len(remainder), rate))
    block = bytearray(rate)
    block[:len(remainder)] = remainder
    block[len(remainder)] ^= DOMAIN_SUFFIX
    block[rate - 1] ^= PAD_LAST
    return bytes(block)


def absorb_block(state, block):
    '''
    Absorb one rate-sized block: XOR into the state, then permute.
    '''
    state.xor_block(block)
    keccak_f(state)


def sha3(data, size=256):
    '''
    One-shot SHA3 digest of data; size is the digest size in bits.
    '''
    rate, _ = parameters(size)
    data = as_bytes(data)
    state = StateArray()
    # the last block always exists and may hold nothing but padding
    n = len(data) // rate + 1
    for i in range(n - 1):
        absorb_block(state, data[i * rate:(i + 1) * rate])
    absorb_block(state, pad(data[(n - 1) * rate:], rate))
    return state.squeeze(size // 8)


def sha3_224(data):
    return hex_digest(sha3(data, 224))


def sha3_256(data):
    return hex_digest(sha3(data, 256))


def sha3_384(data):
    return hex_digest(sha3(data, 384))


def sha3_512(data):
    return hex_digest(sha3(data, 512))


class Sha3Hasher:
    '''
    Incremental SHA3 session fed one rate-sized block at a time.

    The caller segments its input: every full block goes to absorb(), the
    remaining 0 <= n < rate bytes go to squeeze(), which pads, returns the
    digest and ends the session. An empty message is a single squeeze(b'').
    '''
    def __init__(self, rate, output_size):
        if output_size * 8 not in DIGEST_SIZES:
            raise ValueError('Unsupported output size of %r bytes.'
                             % (output_size,))
        if rate != STATE_BYTES - 2 * output_size:
            raise ValueError('Rate %r does not match an output size of %d '
                             'bytes, expected %d.'
                             % (rate, output_size,
                                STATE_BYTES - 2 * output_size))
        self.rate = rate
        self.output_size = output_size
        self._state = StateArray()
        self._finalized = False

    @classmethod
    def for_size(cls, size):
        '''
        Hasher for a digest size in bits.
        '''
        rate, _ = parameters(size)
        return cls(rate, size // 8)

    @property
    def finalized(self):
        return self._finalized

    def _check_open(self):
        if self._finalized:
            raise HasherFinalizedError('Hasher was already squeezed.')

    def absorb(self, block):
        '''
        Absorb exactly one block of self.rate bytes.
        '''
        self._check_open()
        block = as_bytes(block)
        if len(block) != self.rate:
            raise ValueError('absorb() takes exactly %d bytes, got %d.'
                             % (self.rate, len(block)))
        absorb_block(self._state, block)

    def squeeze(self, remainder=b''):
        '''
        Pad and absorb the final partial block, return the digest.
        '''
        self._check_open()
        remainder = as_bytes(remainder)
        block = pad(remainder, self.rate)
        absorb_block(self._state, block)
        self._finalized = True
        return self._state.squeeze(self.output_size)


def hash_chunks(chunks, size=256):
    '''
    SHA3 digest of the concatenation of arbitrarily sized byte chunks.

    Input is re-blocked through one rate-sized buffer and a count of the
    valid bytes in it; the buffer never holds a full unabsorbed block.
    '''
    hasher = Sha3Hasher.for_size(size)
    rate = hasher.rate
    buffer = bytearray(rate)
    have = 0
    blocks = 0
    for chunk in chunks:
        view = memoryview(chunk).cast('B')
        pos = 0
        while pos < len(view):
            take = min(rate - have, len(view) - pos)
            buffer[have:have + take] = view[pos:pos + take]
            have += take
            pos += take
            if have == rate:
                hasher.absorb(buffer)
                have = 0
                blocks += 1
    logger.debug('SHA3-%d absorbed %d full blocks, %d trailing bytes',
                 size, blocks, have)
    return hasher.squeeze(buffer[:have])


def read_chunks(fileobj, chunk_size=CHUNK_SIZE):
    '''
    Yield chunks from a binary file object until EOF.
    '''
    while True:
        chunk = fileobj.read(chunk_size)
        if not chunk:
            return
        yield chunk


def hash_stream(fileobj, size=256, chunk_size=CHUNK_SIZE):
    '''
    SHA3 digest of everything left in a binary file object.
    '''
    return hash_chunks(read_chunks(fileobj, chunk_size), size)


def hash_file(path, size=256):
    '''
    Hex SHA3 digest of a file's contents.
    '''
    logger.debug('Hashing %s with SHA3-%d', path, size)
    with open(path, 'rb') as f:
        return hex_digest(hash_stream(f, size))
