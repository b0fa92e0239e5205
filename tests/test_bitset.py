import pytest

from labkit.porcupine.bitset import Bitset


def test_new_bitset_is_empty():
    b = Bitset(100)
    assert b.popcount() == 0
    assert not any(b.get(i) for i in range(100))


def test_set_get_clear():
    b = Bitset(100)
    b.set(3)
    b.set(70)
    assert b.get(3)
    assert b.get(70)
    assert not b.get(4)
    b.clear(3)
    assert not b.get(3)
    assert b.get(70)


def test_set_returns_same_object_for_chaining():
    b = Bitset(10)
    assert b.set(1).set(2) is b
    assert b.get(1) and b.get(2)


def test_popcount_across_words():
    b = Bitset(128)
    for pos in (0, 63, 64, 127):
        b.set(pos)
    assert b.popcount() == 4


def test_clone_is_independent():
    b = Bitset(64).set(5)
    c = b.clone()
    assert c == b
    c.set(6)
    assert not b.get(6)
    assert c != b


def test_equality_requires_same_size():
    assert Bitset(64) != Bitset(128)
    assert Bitset(10) == Bitset(64)


def test_digest_matches_for_equal_sets():
    a = Bitset(200).set(1).set(150)
    b = Bitset(200).set(150).set(1)
    assert a == b
    assert a.digest() == b.digest()


def test_digest_restored_after_clear():
    b = Bitset(200).set(7)
    before = b.digest()
    b.set(190)
    b.clear(190)
    assert b.digest() == before


def test_empty_digest_is_zero():
    assert Bitset(128).digest() == 0


def test_out_of_range_raises():
    b = Bitset(10)
    with pytest.raises(IndexError):
        b.set(64)
    with pytest.raises(IndexError):
        b.get(-1)


def test_negative_size_rejected():
    with pytest.raises(ValueError):
        Bitset(-1)