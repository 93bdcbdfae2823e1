"""
명령줄 진입점
=============

예제 회로를 만들고 증명을 생성해 파일로 쓴 뒤, 그 파일을 다시 읽어 검증한다.

실행:
    python -m zkr1cs.cli --circuit age_over_18 --input age=19
    python -m zkr1cs.cli --circuit merkle_membership --out merkle_proof.bin
    python -m zkr1cs.cli --list

종료 코드:
    0  Satisfied
    1  Violated
    2  구조 오류 / 입력 누락 / 직렬화 오류 / 잘못된 인자
"""

import argparse
import logging
import sys

from zkr1cs.errors import ZKError
from zkr1cs.example import EXAMPLES, get_example
from zkr1cs.hash import DEFAULT_HASH, HASH_FUNCTIONS, get_hash_function
from zkr1cs.prover import prove
from zkr1cs.r1cs import circuit_to_r1cs
from zkr1cs.serializers import deserialize_proof, serialize_proof
from zkr1cs.verifier import verify

EXIT_SATISFIED = 0
EXIT_VIOLATED = 1
EXIT_ERROR = 2


def parse_input(text):
    """'name=value' → (name, int)"""
    name, sep, value = text.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"name=value 형식이어야 합니다: {text!r}")
    try:
        return name, int(value, 0)
    except ValueError:
        raise argparse.ArgumentTypeError(f"정수가 아닙니다: {value!r}") from None


def build_parser():
    parser = argparse.ArgumentParser(
        prog="zkr1cs",
        description="예제 회로에 대한 R1CS 만족성 증명을 생성하고 검증한다",
    )
    parser.add_argument("--circuit", default="age_over_18", choices=sorted(EXAMPLES),
                        help="예제 회로 이름 (기본값: age_over_18)")
    parser.add_argument("--input", dest="inputs", action="append", type=parse_input,
                        default=[], metavar="NAME=VALUE",
                        help="입력 값 지정 (여러 번 사용 가능, 기본값을 덮어씀)")
    parser.add_argument("--hash", default=DEFAULT_HASH, choices=sorted(HASH_FUNCTIONS),
                        help=f"해시 협력자 (기본값: {DEFAULT_HASH})")
    parser.add_argument("--out", default="proof.bin",
                        help="증명 아티팩트 파일 경로 (기본값: proof.bin)")
    parser.add_argument("--list", action="store_true", help="예제 회로 목록 출력")
    parser.add_argument("-v", "--verbose", action="store_true", help="DEBUG 로그 출력")
    return parser


def run(args):
    example = get_example(args.circuit)
    circuit, wires = example.instantiate(get_hash_function(args.hash))
    r1cs = circuit_to_r1cs(circuit)

    values = example.defaults(circuit)
    values.update(dict(args.inputs))
    unknown = set(values) - set(wires)
    if unknown:
        raise ZKError(f"회로 '{example.name}' 에 없는 입력 이름: {sorted(unknown)}")

    print(f"[1] 회로 '{example.name}': 배선 {circuit.num_wires}개, "
          f"게이트 {len(circuit.gates)}개, 제약 {len(r1cs)}개")

    proof = prove(circuit, example.bind(wires, values), r1cs=r1cs)
    with open(args.out, "wb") as f:
        f.write(serialize_proof(proof))
    print(f"[2] 증명 아티팩트 저장: {args.out}")

    with open(args.out, "rb") as f:
        loaded = deserialize_proof(f.read())
    result = verify(circuit, loaded,
                    public_inputs=example.public_values(circuit, wires, values),
                    expected_outputs=example.expected_outputs(wires),
                    r1cs=r1cs)

    if result:
        print("[3] Satisfied")
        return EXIT_SATISFIED
    where = f"constraint {result.index}" if result.index is not None else result.reason
    print(f"[3] Violated ({where})")
    return EXIT_VIOLATED


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.list:
        for name, example in sorted(EXAMPLES.items()):
            print(f"{name:20s} {example.description}")
        return EXIT_SATISFIED

    try:
        return run(args)
    except (ZKError, KeyError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
