import pytest

from zkr1cs.circuit import Circuit
from zkr1cs.hash import MiMCHash, Sha256Hash


@pytest.fixture(scope="session")
def mimc():
    return MiMCHash()


@pytest.fixture(scope="session")
def sha256():
    return Sha256Hash()


@pytest.fixture
def mul_circuit():
    """a · b = c, c · d = e (ADD 가 없는 회로, 조작 테스트용)"""
    c = Circuit(name="mul_chain")
    a = c.private_input()
    b = c.private_input()
    d = c.public_input()
    ab = c.mul(a, b)
    e = c.mark_output(c.mul(ab, d))
    c.finalize()
    return c, {"a": a, "b": b, "d": d, "ab": ab, "e": e}


@pytest.fixture
def app():
    from app import create_app
    app = create_app({"ZKR1CS_MEMORY_DB": True, "TESTING": True})
    yield app


@pytest.fixture
def client(app):
    return app.test_client()
