""" Node identifiers and the XOR distance metric that maps a pair of identifiers to a routing table bucket """
from __future__ import annotations

import hashlib
import os
import secrets
from collections.abc import Iterable
from typing import Any, List, Optional, Sequence, Union

from kadtable.dht.constants import ID_NBYTES, NUM_BUCKETS
from kadtable.utils.serializer import MSGPackSerializer

BinaryDHTID = bytes


class IdentifierGenerationError(RuntimeError):
    """The secure random source failed to produce a node identifier. A node cannot start without one."""


class DHTID(int):
    HASH_FUNC = hashlib.sha1
    HASH_NBYTES = ID_NBYTES  # SHA1 produces a 20-byte (aka 160bit) number
    RANGE = MIN, MAX = 0, 2 ** (HASH_NBYTES * 8)  # inclusive min, exclusive max

    def __new__(cls, value: int):
        assert cls.MIN <= value < cls.MAX, f"DHTID must be in [{cls.MIN}, {cls.MAX}) but got {value}"
        return super().__new__(cls, value)

    @classmethod
    def generate(cls, source: Optional[Any] = None) -> DHTID:
        """
        Generates a node identifier or derives a key identifier

        :param source: if provided, converts this value to bytes and uses SHA1 of those bytes as the identifier;
            by default, draws HASH_NBYTES bytes from a cryptographically secure random source
        :raises IdentifierGenerationError: if the operating system could not provide secure random bytes
        """
        if source is None:
            try:
                return cls.from_bytes(secrets.token_bytes(cls.HASH_NBYTES))
            except (OSError, NotImplementedError) as e:
                raise IdentifierGenerationError(f"Could not generate a random node id: {e}") from e
        source = MSGPackSerializer.dumps(source) if not isinstance(source, bytes) else source
        return cls.from_bytes(cls.HASH_FUNC(source).digest())

    def xor_distance(self, other: Union[DHTID, Sequence[DHTID]]) -> Union[int, List[int]]:
        """
        :param other: one or multiple DHTIDs. If given multiple DHTIDs as other, this function
         will compute distance from self to each of DHTIDs in other.
        :return: a number or a list of numbers whose binary representations equal bitwise xor between DHTIDs.
        """
        if isinstance(other, Iterable):
            return list(map(self.xor_distance, other))
        return int(self) ^ int(other)

    @classmethod
    def longest_common_prefix_length(cls, *ids: DHTID) -> int:
        ids_bits = [bin(uid)[2:].rjust(8 * cls.HASH_NBYTES, "0") for uid in ids]
        return len(os.path.commonprefix(ids_bits))

    def to_bytes(self, length=HASH_NBYTES, byteorder="big", *, signed=False) -> bytes:
        """A standard way to serialize DHTID into bytes"""
        return super().to_bytes(length, byteorder, signed=signed)

    @classmethod
    def from_bytes(cls, raw: bytes, byteorder="big", *, signed=False) -> DHTID:
        """reverse of to_bytes, accepts exactly HASH_NBYTES bytes"""
        assert len(raw) == cls.HASH_NBYTES, f"DHTID must be {cls.HASH_NBYTES} bytes long, got {len(raw)}"
        return DHTID(int.from_bytes(raw, byteorder=byteorder, signed=signed))

    def __repr__(self):
        return f"{self.__class__.__name__}({self.to_bytes().hex()})"

    def __bytes__(self):
        return self.to_bytes()


def get_bucket_index(first: Union[DHTID, BinaryDHTID], second: Union[DHTID, BinaryDHTID]) -> int:
    """
    Find the bucket that holds :second: in the routing table of :first: (or vice versa, the metric is symmetric).

    Scans the bitwise xor of both identifiers from the most significant bit of the first byte; if the first set bit
    has position p (0 is the highest bit), the bucket index is NUM_BUCKETS - 1 - p. Hence, bucket i holds all
    identifiers whose xor distance lies in [2 ** i, 2 ** (i + 1)). Identical identifiers fall into bucket 0.
    """
    first, second = bytes(first), bytes(second)
    assert len(first) == len(second) == ID_NBYTES, f"identifiers must be {ID_NBYTES} bytes long"
    for byte_index, (first_byte, second_byte) in enumerate(zip(first, second)):
        xor = first_byte ^ second_byte
        if xor:
            bit_index = 8 - xor.bit_length()  # position of the highest set bit within this byte
            return NUM_BUCKETS - (byte_index * 8 + bit_index) - 1
    return 0  # the ids are equal, only happens when comparing a node with itself


def generate_id_in_bucket(node_id: DHTID, index: int) -> DHTID:
    """Generate a random identifier that falls into bucket :index: of the routing table owned by :node_id:"""
    assert 0 <= index < NUM_BUCKETS, f"bucket index must be in [0, {NUM_BUCKETS}), got {index}"
    distance = 2**index | (secrets.randbits(index) if index > 0 else 0)
    return DHTID(int(node_id) ^ distance)
