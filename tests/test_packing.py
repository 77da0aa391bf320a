import pytest

from learnbase.packing import pack_float, pack_u64, unpack_float, unpack_u64


@pytest.mark.parametrize("value", [0xDEADBEEF, 1, 0, (1 << 64) - 1])
def test_u64_round_trip(value):
    assert unpack_u64(pack_u64(value)) == value


def test_pack_u64_is_little_endian():
    assert pack_u64(1) == b"\x01" + b"\x00" * 7
    assert pack_u64(0xDEADBEEF) == b"\xef\xbe\xad\xde\x00\x00\x00\x00"


def test_pack_u64_length():
    assert len(pack_u64(12345)) == 8


def test_pack_u64_rejects_out_of_range():
    with pytest.raises(ValueError):
        pack_u64(-1)
    with pytest.raises(ValueError):
        pack_u64(1 << 64)


def test_unpack_u64_reads_first_eight_bytes():
    assert unpack_u64(pack_u64(7) + b"\xff\xff") == 7


def test_unpack_u64_short_input():
    with pytest.raises(ValueError):
        unpack_u64(b"\x01\x02")


def test_float_round_trip():
    x = 1.2011
    assert unpack_float(pack_float(x)) == x


def test_pack_float_bit_pattern():
    assert pack_float(1.0) == b"\x00" * 6 + b"\xf0\x3f"


def test_float_special_values():
    assert unpack_float(pack_float(float("inf"))) == float("inf")
    assert pack_float(float("-inf")) == b"\x00" * 6 + b"\xf0\xff"
    assert str(unpack_float(pack_float(float("nan")))) == "nan"


def test_unpack_float_short_input():
    with pytest.raises(ValueError):
        unpack_float(b"")