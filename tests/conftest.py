"""Shared fixtures."""

import zipfile
from pathlib import Path

import pytest

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def make_zip(tmp_path):
    """Build a zip archive from a mapping of entry name -> bytes or str."""

    def _make(entries: dict, name: str = "export.zip") -> Path:
        path = tmp_path / name
        with zipfile.ZipFile(path, "w") as zf:
            for entry_name, data in entries.items():
                if isinstance(data, str):
                    data = data.encode("utf-8")
                zf.writestr(entry_name, data)
        return path

    return _make


@pytest.fixture
def ios_transcript() -> str:
    return (FIXTURES / "ios-chat.txt").read_text()


@pytest.fixture
def android_transcript() -> str:
    return (FIXTURES / "android-chat.txt").read_text()
