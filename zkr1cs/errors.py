"""
예외 계층
=========

  - StructuralError: 전방 참조 배선, 잘못된 게이트 인자 수, 배선 수 불일치 등.
    구성/변환 시점에 즉시 발생하며 복구하지 않는다.
  - IncompleteWitnessError: witness 생성 중 입력 배선 값 누락.
    누락된 입력을 채워 다시 호출하면 된다.
  - SerializationError: 손상된 직렬화 데이터.

제약 위반(Violated)은 예외가 아니라 checker 의 결과값으로 보고된다.
"""


class ZKError(Exception):
    """zkr1cs 예외의 기반 클래스."""


class StructuralError(ZKError):
    pass


class IncompleteWitnessError(ZKError):

    def __init__(self, wire_id, message=None):
        self.wire_id = wire_id
        super().__init__(message or f"입력 배선 {wire_id} 의 값이 없습니다")


class SerializationError(ZKError):
    pass
