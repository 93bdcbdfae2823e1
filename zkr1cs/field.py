"""
R1CS 기반 모듈: 유한체(Finite Field) 산술
==========================================

회로, 제약(constraint), witness 전체가 공유하는 산술 단위를 정의한다.

**유한체 FR**:
  bn128 타원곡선의 스칼라 필드 (scalar field).
  - 위수(order) M ≈ 2^254, 소수체(prime field)
  - 모든 배선(wire) 값과 선형결합 계수는 [0, M) 범위의 FR 원소이다

**함수형 인터페이스**:
  add / sub / mul / eq 는 상태가 없는 순수 함수이며 [0, M) 안에서 닫혀 있다.
  sub 는 부호 있는 언더플로 없이 모듈러 연산으로 감싼다.
  모듈러스 M 에 의존하는 동작은 이 모듈에만 존재하므로,
  M 을 바꾸려면 FR.field_modulus 만 수정하면 된다.

사용 예시:
    >>> from zkr1cs.field import FR, add, sub
    >>> add(FR(3), FR(7))          # FR(10)
    >>> sub(FR(0), FR(1))          # FR(M - 1)
"""

from py_ecc.fields import bn128_FQ as FQ
from py_ecc import bn128


# ─────────────────────────────────────────────────────────────────────
# 유한체(Finite Field) FR
# ─────────────────────────────────────────────────────────────────────

class FR(FQ):
    """bn128 스칼라 필드 위의 유한체 원소.

    py_ecc의 FQ 클래스를 상속하여 +, -, *, /, ** 등의 필드 연산을 제공한다.
    음수 정수로 생성하면 자동으로 M 을 더해 [0, M) 로 정규화된다.

    예시:
        >>> FR(-1) == FR(CURVE_ORDER - 1)   # True
    """
    field_modulus = bn128.curve_order


# 곡선 위수 (필드 크기)
CURVE_ORDER = bn128.curve_order

# 필드 원소를 표현하는 데 필요한 비트 수 (RangeCheck 상한)
FIELD_BITS = CURVE_ORDER.bit_length()

# 직렬화 시 한 원소가 차지하는 바이트 수
FR_BYTES = (FIELD_BITS + 7) // 8


def to_fr(value):
    """정수 또는 FR 을 FR 로 변환한다."""
    if isinstance(value, FR):
        return value
    if isinstance(value, bool) or not isinstance(value, (int, FQ)):
        raise TypeError(f"FR 로 변환할 수 없는 값: {value!r}")
    return FR(int(value))


# ─────────────────────────────────────────────────────────────────────
# 함수형 산술 (4개 연산 모두 전역적으로 정의됨, 오류 없음)
# ─────────────────────────────────────────────────────────────────────

def add(x, y):
    """x + y (mod M)"""
    return to_fr(x) + to_fr(y)


def sub(x, y):
    """x - y (mod M). 0 - 1 은 M - 1 이 된다."""
    return to_fr(x) - to_fr(y)


def mul(x, y):
    """x · y (mod M)"""
    return to_fr(x) * to_fr(y)


def eq(x, y):
    """x ≡ y (mod M)"""
    return int(to_fr(x)) == int(to_fr(y))


def neg(x):
    """-x (mod M)"""
    return FR(0) - to_fr(x)


# ─────────────────────────────────────────────────────────────────────
# 바이트 인코딩
# ─────────────────────────────────────────────────────────────────────

def fr_to_bytes(x):
    """FR → 32바이트 빅엔디안"""
    return int(to_fr(x)).to_bytes(FR_BYTES, "big")


def fr_from_bytes(data):
    """32바이트 빅엔디안 → int (범위 검사는 호출자가 수행)"""
    return int.from_bytes(data, "big")
