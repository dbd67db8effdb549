import pytest

from specx import configure, predicates


@pytest.fixture(autouse=True)
def _configured():
    configure(predicates)
    yield
