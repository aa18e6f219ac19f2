import random

import pytest

from kadtable.dht.constants import NUM_BUCKETS
from kadtable.dht.id import DHTID, IdentifierGenerationError, generate_id_in_bucket, get_bucket_index


def test_ids_basic():
    for i in range(100):
        id1, id2 = DHTID.generate(), DHTID.generate()
        assert DHTID.MIN <= id1 < DHTID.MAX and DHTID.MIN <= id2 < DHTID.MAX
        assert DHTID.xor_distance(id1, id1) == DHTID.xor_distance(id2, id2) == 0
        assert DHTID.xor_distance(id1, id2) > 0 or (id1 == id2)
        assert DHTID.from_bytes(bytes(id1)) == id1 and DHTID.from_bytes(id2.to_bytes()) == id2
        assert len(bytes(id1)) == DHTID.HASH_NBYTES


def test_ids_from_keys():
    assert DHTID.generate("key") == DHTID.generate("key")
    assert DHTID.generate("key") != DHTID.generate("another key")
    assert DHTID.generate(b"raw") == DHTID.from_bytes(DHTID.HASH_FUNC(b"raw").digest())
    assert DHTID.generate(("tuple", 1)) == DHTID.generate(("tuple", 1))


def test_ids_wrong_length():
    with pytest.raises(AssertionError):
        DHTID.from_bytes(b"\x01" * 19)
    with pytest.raises(AssertionError):
        DHTID(DHTID.MAX)


def test_random_source_failure(monkeypatch):
    def _broken_token_bytes(nbytes):
        raise NotImplementedError("no entropy source")

    monkeypatch.setattr("kadtable.dht.id.secrets.token_bytes", _broken_token_bytes)
    with pytest.raises(IdentifierGenerationError):
        DHTID.generate()


def test_bucket_index_bit_order():
    zero = bytes(20)
    # the highest bit of the first byte is the largest distance
    assert get_bucket_index(zero, b"\x80" + bytes(19)) == NUM_BUCKETS - 1
    assert get_bucket_index(zero, b"\x01" + bytes(19)) == NUM_BUCKETS - 8
    assert get_bucket_index(zero, b"\x00\x80" + bytes(18)) == NUM_BUCKETS - 9
    # the lowest bit of the last byte is the smallest distance
    assert get_bucket_index(zero, bytes(19) + b"\x01") == 0
    assert get_bucket_index(zero, bytes(19) + b"\x02") == 1
    assert get_bucket_index(zero, bytes(19) + b"\xff") == 7
    # lower bits do not matter once a higher bit differs
    assert get_bucket_index(zero, b"\x10" + b"\xff" * 19) == NUM_BUCKETS - 4


def test_bucket_index_matches_distance():
    for i in range(1000):
        id1, id2 = DHTID.generate(), DHTID.generate()
        index = get_bucket_index(id1, id2)
        assert 2**index <= id1.xor_distance(id2) < 2 ** (index + 1)
        assert index == NUM_BUCKETS - 1 - DHTID.longest_common_prefix_length(id1, id2)


def test_bucket_index_symmetry():
    for i in range(100):
        id1, id2 = DHTID.generate(), DHTID.generate()
        assert get_bucket_index(id1, id2) == get_bucket_index(id2, id1)
        assert get_bucket_index(bytes(id1), bytes(id2)) == get_bucket_index(id1, id2)


def test_bucket_index_self():
    node_id = DHTID.generate()
    assert node_id.xor_distance(node_id) == 0
    assert get_bucket_index(node_id, node_id) == 0
    assert get_bucket_index(bytes(20), bytes(20)) == 0


def test_bucket_index_wrong_length():
    with pytest.raises(AssertionError):
        get_bucket_index(bytes(20), bytes(21))


def test_generate_id_in_bucket():
    node_id = DHTID.generate()
    for index in [0, 1, 7, 8, 80, NUM_BUCKETS - 1] + random.sample(range(NUM_BUCKETS), 10):
        for i in range(5):
            assert get_bucket_index(node_id, generate_id_in_bucket(node_id, index)) == index
    with pytest.raises(AssertionError):
        generate_id_in_bucket(node_id, NUM_BUCKETS)


def test_ids_depth():
    for i in range(100):
        ids = [random.randint(0, 4096) for i in range(random.randint(1, 256))]
        ours = DHTID.longest_common_prefix_length(*map(DHTID, ids))

        ids_bitstr = ["".join(bin(bite)[2:].rjust(8, "0") for bite in uid.to_bytes(20, "big")) for uid in ids]
        reference = len(shared_prefix(*ids_bitstr))
        assert reference == ours, f"ours {ours} != reference {reference}, ids: {ids}"


def shared_prefix(*strings: str):
    for i in range(min(map(len, strings))):
        if len(set(string[i] for string in strings)) != 1:
            return strings[0][:i]
    return min(strings, key=len)
