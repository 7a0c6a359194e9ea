import pytest

from rtcutil.fixed_big_int import FixedBigInt

# Each step: (operation, argument, expected hex string afterwards).
SET_BIT_STEPS = [
    ("set", 0, "0000000000000000000000000000000000000000000000000000000000000001"),
    ("lsh", 1, "0000000000000000000000000000000000000000000000000000000000000002"),
    ("lsh", 0, "0000000000000000000000000000000000000000000000000000000000000002"),
    ("set", 10, "0000000000000000000000000000000000000000000000000000000000000402"),
    ("lsh", 20, "0000000000000000000000000000000000000000000000000000000040200000"),
    ("set", 80, "0000000000000000000000000000000000000000000100000000000040200000"),
    ("lsh", 4, "0000000000000000000000000000000000000000001000000000000402000000"),
    ("set", 130, "0000000000000000000000000000000400000000001000000000000402000000"),
    ("lsh", 64, "0000000000000004000000000010000000000004020000000000000000000000"),
    ("set", 7, "0000000000000004000000000010000000000004020000000000000000000080"),
    ("lsh", 129, "0000000004000000000000000000010000000000000000000000000000000000"),
]

ALL_ONES = "00000000" + "F" * 56


def _apply(bi, operation, argument):
    {"set": bi.set_bit, "lsh": bi.lsh}[operation](argument)


def test_fixed_big_int_set_bit():
    bi = FixedBigInt(224)
    for operation, argument, expected in SET_BIT_STEPS:
        _apply(bi, operation, argument)
        assert str(bi) == expected, (operation, argument)

    for _ in range(256):
        bi.lsh(1)
        bi.set_bit(0)
    assert str(bi) == ALL_ONES


def test_bit_reads_back_set_bits():
    bi = FixedBigInt(224)
    bi.set_bit(0)
    bi.set_bit(100)
    assert [bi.bit(i) for i in (0, 100, 1)] == [1, 1, 0]
    bi.lsh(1)
    assert [bi.bit(i) for i in (0, 1, 101)] == [0, 1, 1]


def test_out_of_range_bits_are_ignored():
    bi = FixedBigInt(224)
    before = str(bi)
    bi.set_bit(224)
    assert str(bi) == before
    assert bi.bit(224) == 0


@pytest.mark.parametrize("shift", [224, 1000])
def test_shift_beyond_width_clears(shift):
    bi = FixedBigInt(224)
    bi.set_bit(5)
    bi.lsh(shift)
    assert str(bi) == "0" * 64
    assert bi.bit(5) == 0