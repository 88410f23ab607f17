import logging
import struct
import subprocess
from pathlib import Path
from typing import Protocol, Sequence

from PIL import Image, ImageOps, UnidentifiedImageError

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
MAGICK_EXECUTABLE = "magick"
PNGCRUSH_EXECUTABLE = "pngcrush"

_logger = logging.getLogger("favicon_generator.tools")

class ToolError(Exception):
    """Raised when an image tool call fails."""

class ImageTool(Protocol):
    required_executables: tuple[str, ...]

    def resize(self, source: Path, width: int, height: int, target: Path) -> None: ...

    def pack_ico(self, pngs: Sequence[Path], target: Path) -> None: ...

    def optimize(self, source: Path, target: Path) -> None: ...

class MagickTool:
    """Shells out to ImageMagick for resizing and ICO packing, and to pngcrush for optimization."""

    def __init__(self, magick: str = MAGICK_EXECUTABLE, pngcrush: str = PNGCRUSH_EXECUTABLE):
        self.magick = magick
        self.pngcrush = pngcrush
        self.required_executables = (magick, pngcrush)

    def _run(self, command: list[str]) -> None:
        _logger.debug("Running: %s", " ".join(command))
        try:
            result = subprocess.run(command, capture_output=True, text=True)
        except OSError as e:
            raise ToolError(f"Could not run {command[0]}: {e}") from e
        if result.returncode != 0:
            detail = result.stderr.strip() or result.stdout.strip()
            raise ToolError(f"{command[0]} exited with status {result.returncode}: {detail}")

    def resize(self, source: Path, width: int, height: int, target: Path) -> None:
        self._run([self.magick, str(source), "-resize", f"{width}x{height}", str(target)])

    def pack_ico(self, pngs: Sequence[Path], target: Path) -> None:
        self._run([self.magick, *(str(png) for png in pngs), str(target)])

    def optimize(self, source: Path, target: Path) -> None:
        self._run([self.pngcrush, "-brute", "-reduce", str(source), str(target)])

class PillowTool:
    """
    Does all the work in-process with Pillow; needs no external executables.

    optimize() is a single lossless zlib pass at the highest level. It does not
    search filter strategies or reduce bit depth the way pngcrush -brute -reduce
    does, so its files come out larger than MagickTool's.
    """

    required_executables: tuple[str, ...] = ()

    def resize(self, source: Path, width: int, height: int, target: Path) -> None:
        try:
            with Image.open(source) as img:
                resized = ImageOps.contain(img.convert("RGBA"), (width, height), Image.Resampling.LANCZOS)
                resized.save(target, format="PNG")
        except (OSError, UnidentifiedImageError) as e:
            raise ToolError(f"Could not resize {source}: {e}") from e

    def pack_ico(self, pngs: Sequence[Path], target: Path) -> None:
        try:
            write_ico(target, pngs)
        except (OSError, ValueError) as e:
            raise ToolError(f"Could not pack {target}: {e}") from e

    def optimize(self, source: Path, target: Path) -> None:
        try:
            with Image.open(source) as img:
                img.save(target, format="PNG", optimize=True, compress_level=9)
        except (OSError, UnidentifiedImageError) as e:
            raise ToolError(f"Could not optimize {source}: {e}") from e

BACKENDS = {
    "magick": MagickTool,
    "pillow": PillowTool,
}

def get_tool(name: str) -> ImageTool:
    try:
        return BACKENDS[name]()
    except KeyError:
        raise ValueError(f"Unknown image backend: {name}") from None

def png_size(data: bytes) -> tuple[int, int]:
    """Reads width and height from the IHDR chunk of PNG data."""
    if len(data) < 24 or not data.startswith(PNG_SIGNATURE) or data[12:16] != b"IHDR":
        raise ValueError("not a PNG file")
    return struct.unpack(">II", data[16:24])

def write_ico(target: Path, pngs: Sequence[Path]) -> None:
    """
    Writes an ICO container holding each PNG as a PNG-compressed frame,
    smallest first. Sizes of 256 and above are stored as 0 in the directory.
    """
    frames = []
    for png in pngs:
        data = Path(png).read_bytes()
        width, height = png_size(data)
        frames.append((width, height, data))
    if not frames:
        raise ValueError("no images to pack")
    frames.sort(key=lambda frame: (frame[0], frame[1]))

    header = struct.pack("<HHH", 0, 1, len(frames))
    entries = bytearray()
    blobs = bytearray()
    offset = 6 + 16 * len(frames)
    for width, height, data in frames:
        entries += struct.pack(
            "<BBBBHHII",
            0 if width >= 256 else width,
            0 if height >= 256 else height,
            0,  # palette colors
            0,  # reserved
            1,  # planes
            32,  # bits per pixel
            len(data),
            offset,
        )
        blobs += data
        offset += len(data)

    Path(target).write_bytes(header + entries + blobs)
