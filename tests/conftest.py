from pathlib import Path

import pytest

from create_test_files import create_image
from image_tools import ToolError

class FakeImageTool:
    """Records every call and writes placeholder files instead of real images."""

    def __init__(self, required_executables=(), fail_resize=None, fail_optimize=()):
        self.required_executables = tuple(required_executables)
        self.fail_resize = fail_resize
        self.fail_optimize = set(fail_optimize)
        self.calls = []

    def resize(self, source, width, height, target):
        self.calls.append(("resize", Path(source), width, height, Path(target)))
        if self.fail_resize == (width, Path(target).name):
            raise ToolError("resize failed")
        Path(target).write_bytes(f"{width}x{height}".encode())

    def pack_ico(self, pngs, target):
        self.calls.append(("pack_ico", [Path(png) for png in pngs], Path(target)))
        Path(target).write_bytes(b"ico")

    def optimize(self, source, target):
        self.calls.append(("optimize", Path(source), Path(target)))
        if Path(source).name in self.fail_optimize:
            raise ToolError("optimize failed")
        Path(target).write_bytes(Path(source).read_bytes())

    def calls_to(self, operation):
        return [call for call in self.calls if call[0] == operation]

@pytest.fixture
def fake_tool():
    return FakeImageTool()

@pytest.fixture
def logo(tmp_path):
    return create_image(tmp_path / "logo.png", 1024, 1024)

@pytest.fixture
def output_root(tmp_path):
    root = tmp_path / "out"
    root.mkdir()
    return root
