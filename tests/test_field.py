"""
유한체 산술 테스트
==================

경계값(0, 1, M-1) 근처의 add / sub / mul / eq 와 바이트 인코딩을 확인한다.
"""

import pytest

from zkr1cs.field import (
    CURVE_ORDER, FIELD_BITS, FR, FR_BYTES,
    add, eq, fr_from_bytes, fr_to_bytes, mul, neg, sub, to_fr,
)

M = CURVE_ORDER


class TestArithmetic:
    def test_add_wraps(self):
        assert add(FR(M - 1), FR(1)) == FR(0)
        assert add(M - 1, 2) == FR(1)

    def test_sub_underflow_wraps(self):
        """0 - 1 은 M - 1 (부호 있는 언더플로 없음)"""
        assert int(sub(FR(0), FR(1))) == M - 1
        assert int(sub(3, 7)) == M - 4

    def test_mul(self):
        assert mul(FR(M - 1), FR(M - 1)) == FR(1)
        assert mul(0, 12345) == FR(0)
        assert mul(6, 7) == FR(42)

    def test_eq_is_modular(self):
        assert eq(FR(-1), FR(M - 1))
        assert eq(M, 0)
        assert not eq(1, 2)

    def test_neg(self):
        assert neg(FR(0)) == FR(0)
        assert int(neg(FR(1))) == M - 1

    def test_results_in_range(self):
        for x, y in [(0, 0), (M - 1, M - 1), (1, M - 1)]:
            for op in (add, sub, mul):
                assert 0 <= int(op(x, y)) < M


class TestConversion:
    def test_to_fr_passthrough(self):
        x = FR(5)
        assert to_fr(x) is x

    def test_to_fr_negative_int(self):
        assert to_fr(-1) == FR(M - 1)

    @pytest.mark.parametrize("bad", [True, "3", 1.5, None])
    def test_to_fr_rejects(self, bad):
        with pytest.raises(TypeError):
            to_fr(bad)

    def test_constants(self):
        assert FIELD_BITS == 254
        assert FR_BYTES == 32


class TestBytes:
    def test_boundaries(self):
        assert fr_to_bytes(FR(0)) == bytes(32)
        assert fr_from_bytes(fr_to_bytes(FR(M - 1))) == M - 1

    def test_big_endian(self):
        assert fr_to_bytes(FR(1))[-1] == 1
        assert fr_to_bytes(FR(256))[-2:] == b"\x01\x00"
