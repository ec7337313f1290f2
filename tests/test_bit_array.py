
import pytest
from hypothesis import given, strategies as st

from bf_xx.bit_array import BitArray
from bf_xx.errors import InvalidParameters, OutOfRange


class TestBitArray:
    def test_starts_empty(self):
        bits = BitArray(130)
        assert len(bits) == 130
        assert bits.count() == 0
        assert not any(bits.get(i) for i in range(130))

    def test_set_and_get(self):
        bits = BitArray(130)
        for i in (0, 63, 64, 129):
            bits.set(i)
        assert bits.get(0) and bits.get(63) and bits.get(64) and bits.get(129)
        assert not bits.get(1)
        assert not bits.get(128)
        assert bits.count() == 4

    def test_set_is_idempotent(self):
        bits = BitArray(64)
        bits.set(5)
        before = bits.to_bytes()
        bits.set(5)
        assert bits.to_bytes() == before
        assert bits.count() == 1

    @pytest.mark.parametrize("index", [-1, 100, 101, 10**6])
    def test_out_of_range(self, index):
        bits = BitArray(100)
        with pytest.raises(OutOfRange):
            bits.get(index)
        with pytest.raises(OutOfRange):
            bits.set(index)

    def test_out_of_range_is_an_index_error(self):
        with pytest.raises(IndexError) as excinfo:
            BitArray(8).get(8)
        assert excinfo.value.index == 8
        assert excinfo.value.size == 8

    @pytest.mark.parametrize("length", [0, -3, 1.5, True, "8"])
    def test_invalid_length(self, length):
        with pytest.raises(InvalidParameters):
            BitArray(length)

    def test_clear_all(self):
        bits = BitArray(200)
        for i in range(0, 200, 3):
            bits.set(i)
        bits.clear_all()
        assert bits.count() == 0
        assert len(bits) == 200
        bits.set(199)
        assert bits.get(199)

    def test_to_bytes_layout(self):
        bits = BitArray(70)
        bits.set(0)
        bits.set(65)
        data = bits.to_bytes()
        assert len(data) == 16
        assert data[0] == 0x01
        assert data[8] == 0x02

    @given(st.integers(1, 500), st.data())
    def test_from_bytes_restores_bits(self, length, data):
        indices = data.draw(st.sets(st.integers(0, length - 1), max_size=50))
        bits = BitArray(length)
        for i in indices:
            bits.set(i)

        restored = BitArray.from_bytes(bits.to_bytes(), length)
        assert len(restored) == length
        assert {i for i in range(length) if restored.get(i)} == indices

    def test_from_bytes_rejects_wrong_size(self):
        with pytest.raises(InvalidParameters):
            BitArray.from_bytes(b"\x00" * 7, 64)
        with pytest.raises(InvalidParameters):
            BitArray.from_bytes(b"\x00" * 16, 64)

    def test_from_bytes_checks_size_before_allocating(self):
        with pytest.raises(InvalidParameters):
            BitArray.from_bytes(b"", 1 << 40)
        with pytest.raises(InvalidParameters):
            BitArray.from_bytes(b"", 0)

    def test_from_bytes_rejects_bits_past_length(self):
        data = (1 << 10).to_bytes(8, "little")
        with pytest.raises(InvalidParameters):
            BitArray.from_bytes(data, 10)
        assert BitArray.from_bytes(data, 11).get(10)

    def test_copy_is_independent(self):
        bits = BitArray(64)
        bits.set(1)
        clone = bits.copy()
        clone.set(2)
        assert clone.get(1)
        assert not bits.get(2)
