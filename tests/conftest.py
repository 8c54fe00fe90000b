import sys
import textwrap

import pytest


@pytest.fixture
def fake_program(tmp_path):
    """Write a Python script and return the command that runs it."""
    def make(name, source):
        script = tmp_path / f"{name}.py"
        script.write_text(textwrap.dedent(source), encoding="utf-8")
        return [sys.executable, str(script)]
    return make
