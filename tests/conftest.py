import pytest

from core.data import SourceFile


@pytest.fixture
def make_csv():
    def _make(text: str, name: str = "sales.csv", encoding: str = "utf-8") -> SourceFile:
        return SourceFile(name=name, content=text.encode(encoding))

    return _make
