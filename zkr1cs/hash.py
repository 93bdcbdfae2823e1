"""
해시 협력자 (Hash Collaborator)
================================

Hash 게이트와 Merkle 멤버십 게이트가 사용하는 `hash(values) -> FR` 기능.

산술화(arithmetization) 관점에서 해시는 블랙박스이다:
  R1CS 변환기는 해시 내부를 제약으로 분해하지 않고,
  witness 생성기가 계산한 다이제스트가 기대값과 같은지만 확인한다.
  따라서 결정론적이고 모든 입력에 대해 정의된 함수이기만 하면 된다.

**제공 구현**:
  | 이름     | 클래스       | 설명                                         |
  |----------|--------------|----------------------------------------------|
  | mimc7    | MiMCHash     | MiMC-7 순열 + Miyaguchi-Preneel 스펀지 (기본) |
  | sha256   | Sha256Hash   | SHA-256 → FR 축소 (Fiat-Shamir 챌린지 방식)   |

사용 예시:
    >>> h = MiMCHash()
    >>> h.hash([FR(1), FR(2)])
    >>> get_hash_function("sha256")([FR(1)])
"""

import hashlib

from zkr1cs.errors import StructuralError
from zkr1cs.field import FR, CURVE_ORDER, fr_to_bytes, to_fr


class HashFunction:
    """해시 협력자 인터페이스.

    서브클래스는 `name` 과 `hash(values)` 를 구현한다.
    `name` 은 회로 식별자와 증명 아티팩트에 기록되어
    역직렬화 시 같은 해시 함수를 다시 찾는 데 쓰인다.
    """

    name = None

    def hash(self, values):
        raise NotImplementedError

    def __call__(self, values):
        return self.hash(values)

    def __repr__(self):
        return f"{type(self).__name__}()"


# ─────────────────────────────────────────────────────────────────────
# MiMC-7
# ─────────────────────────────────────────────────────────────────────

MIMC_ROUNDS = 91
MIMC_EXPONENT = 7


def mimc_round_constants(seed=b"mimc7", rounds=MIMC_ROUNDS):
    """라운드 상수 c_0..c_{rounds-1} 를 생성한다.

    c_0 = 0, c_i = SHA-256(c_{i-1} 의 상태) mod M 으로 체이닝한다.
    """
    constants = [FR(0)]
    state = hashlib.sha256(seed).digest()
    for _ in range(rounds - 1):
        constants.append(FR(int.from_bytes(state, "big") % CURVE_ORDER))
        state = hashlib.sha256(state).digest()
    return constants


class MiMCHash(HashFunction):
    """MiMC-7 기반 필드 해시.

    순열 E_k(x):
        x ← (x + k + c_i)^7   (i = 0 .. 90)
        E_k(x) = x + k

    지수 7은 gcd(7, M-1) = 1 이므로 FR 위의 순열이다.
    (bn128 스칼라 필드는 M-1 이 3의 배수라 지수 3은 쓸 수 없다.)

    여러 입력은 Miyaguchi-Preneel 방식으로 흡수한다:
        h ← E_h(v) + h + v
    """

    name = "mimc7"

    def __init__(self, rounds=MIMC_ROUNDS):
        self.rounds = rounds
        self.constants = mimc_round_constants(rounds=rounds)

    def permute(self, x, k):
        x = to_fr(x)
        k = to_fr(k)
        for c in self.constants:
            x = (x + k + c) ** MIMC_EXPONENT
        return x + k

    def hash(self, values):
        h = FR(0)
        for v in values:
            v = to_fr(v)
            h = self.permute(v, h) + h + v
        return h


# ─────────────────────────────────────────────────────────────────────
# SHA-256
# ─────────────────────────────────────────────────────────────────────

class Sha256Hash(HashFunction):
    """각 입력을 32바이트 빅엔디안으로 이어 붙여 SHA-256 후 mod M."""

    name = "sha256"

    def hash(self, values):
        state = bytearray(b"zkr1cs")
        for v in values:
            state.extend(fr_to_bytes(v))
        digest = hashlib.sha256(bytes(state)).digest()
        return FR(int.from_bytes(digest, "big") % CURVE_ORDER)


HASH_FUNCTIONS = {
    MiMCHash.name: MiMCHash,
    Sha256Hash.name: Sha256Hash,
}

DEFAULT_HASH = MiMCHash.name


def get_hash_function(name):
    """이름으로 해시 함수 인스턴스를 반환한다."""
    try:
        return HASH_FUNCTIONS[name]()
    except KeyError:
        raise StructuralError(f"알 수 없는 해시 함수: {name!r}") from None
