import argparse
import logging
import shutil
import sys
import tempfile
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from icon_catalog import FAVICON_ICO_NAME, SIZE_CATALOG, icon_count, icon_filename
from image_tools import BACKENDS, ImageTool, ToolError, get_tool

SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")

INSTALL_HINTS = {
    "magick": "ImageMagick",
    "pngcrush": "pngcrush",
}

_logger = logging.getLogger("favicon_generator")

class FaviconError(Exception):
    """Base class for errors that end a run."""

class UsageError(FaviconError):
    pass

class DependencyError(FaviconError):
    pass

class ConversionError(FaviconError):
    pass

@dataclass(frozen=True)
class GeneratedIcon:
    category: str
    size: int
    path: Path

@dataclass(frozen=True)
class GenerationResult:
    output_dir: Path
    icons: list[Path]
    ico_path: Path

class ColorFormatter(logging.Formatter):
    """Prefixes each message with a level symbol, coloured when writing to a terminal."""

    SYMBOLS = {
        logging.DEBUG: ("\033[2m", "·"),
        logging.INFO: ("\033[1;34m", "➤"),
        SUCCESS: ("\033[0;32m", "✔"),
        logging.WARNING: ("\033[1;33m", "!"),
        logging.ERROR: ("\033[0;31m", "✖"),
    }
    RESET = "\033[0m"

    def __init__(self, use_color: bool = True):
        super().__init__("%(message)s")
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        level = max((lvl for lvl in self.SYMBOLS if lvl <= record.levelno), default=logging.DEBUG)
        color, symbol = self.SYMBOLS[level]
        if self.use_color:
            return f"{color}{symbol}{self.RESET} {message}"
        return f"{symbol} {message}"

def validate_input(image_path: Optional[str]) -> Path:
    """Checks that an image path was given and points at an existing file."""
    if not image_path:
        raise UsageError("Please provide an image filename (e.g., favicon-generator logo.png)")
    path = Path(image_path)
    if not path.is_file():
        raise UsageError(f"Image file '{image_path}' not found!")
    if path.stem.startswith("."):
        # ".png" or ".logo.png" would land in a hidden output folder
        raise UsageError(f"Cannot name an output folder after '{path.name}', rename the image first")
    return path

def check_dependencies(tool: ImageTool) -> None:
    for executable in tool.required_executables:
        if shutil.which(executable) is None:
            package = INSTALL_HINTS.get(Path(executable).name, executable)
            raise DependencyError(
                f"{executable} is not installed. Install the '{package}' package "
                f"(e.g. sudo dnf install {package})"
            )

def output_dir_for(image_path: Path, output_root: Path = Path(".")) -> Path:
    """The output directory is named after the image with its extension stripped."""
    return Path(output_root) / Path(image_path).stem

def _run_all(func: Callable, items: list, jobs: int) -> list:
    if jobs > 1 and len(items) > 1:
        with ThreadPoolExecutor(max_workers=jobs) as pool:
            return list(pool.map(func, items))
    return [func(item) for item in items]

def render_icons(tool: ImageTool, source: Path, scratch_dir: Path, jobs: int = 1,
                 logger=None, on_step=None) -> list[GeneratedIcon]:
    """Renders one square PNG per catalog entry into scratch_dir."""
    logger = logger or _logger
    icons = []

    for category in SIZE_CATALOG:
        logger.info(f"Generating {category.prefix}* icons...")

        def render(size: int) -> GeneratedIcon:
            target = scratch_dir / icon_filename(category, size)
            try:
                tool.resize(source, size, size, target)
            except ToolError as e:
                raise ConversionError(
                    f"Failed to render {category.name} {size}x{size} from '{source}': {e}"
                ) from e
            if on_step:
                on_step()
            return GeneratedIcon(category.name, size, target)

        icons.extend(_run_all(render, list(category.sizes), jobs))
        logger.log(SUCCESS, f"{len(category.sizes)} {category.name} icons generated.")

    return icons

def pack_favicon_ico(tool: ImageTool, icons: list[GeneratedIcon], scratch_dir: Path, logger=None) -> Path:
    """Bundles the favicon-category PNGs, smallest first, into a single .ico."""
    logger = logger or _logger
    favicons = sorted((icon for icon in icons if icon.category == "favicon"), key=lambda icon: icon.size)
    target = scratch_dir / FAVICON_ICO_NAME

    logger.info(f"Generating {FAVICON_ICO_NAME}...")
    try:
        tool.pack_ico([icon.path for icon in favicons], target)
    except ToolError as e:
        raise ConversionError(f"Failed to pack {FAVICON_ICO_NAME}: {e}") from e
    logger.log(SUCCESS, f"{FAVICON_ICO_NAME} generated with {len(favicons)} sizes.")
    return target

def compress_icons(tool: ImageTool, scratch_dir: Path, output_dir: Path, jobs: int = 1,
                   logger=None, on_step=None) -> list[Path]:
    """
    Optimizes every PNG in scratch_dir into output_dir under the same name.
    A file the optimizer rejects is copied over uncompressed and reported as a warning.
    """
    logger = logger or _logger
    pngs = sorted(scratch_dir.glob("*.png"))

    logger.info("Compressing PNG files...")

    def compress(source: Path) -> Path:
        target = output_dir / source.name
        try:
            tool.optimize(source, target)
        except ToolError as e:
            logger.warning(f"Could not compress {source.name}, keeping it uncompressed: {e}")
            try:
                shutil.copy2(source, target)
            except OSError as copy_error:
                raise ConversionError(f"Cannot write to {output_dir}: {copy_error}") from copy_error
        if on_step:
            on_step()
        return target

    compressed = _run_all(compress, pngs, jobs)
    logger.log(SUCCESS, f"{len(compressed)} PNG files compressed.")
    return compressed

def finalize(scratch_dir: Path, output_dir: Path, logger=None) -> Path:
    logger = logger or _logger
    ico_path = output_dir / FAVICON_ICO_NAME
    try:
        shutil.move(str(scratch_dir / FAVICON_ICO_NAME), str(ico_path))
    except OSError as e:
        raise ConversionError(f"Cannot write to {output_dir}: {e}") from e
    logger.info(f"All icons saved in: {output_dir}")
    return ico_path

def generate_favicons(image_path, tool: ImageTool, output_root: Path = Path("."), jobs: int = 1,
                      keep_scratch: bool = False, logger=None, progress_callback=None) -> GenerationResult:
    """
    Runs the whole pipeline: validate, render, pack the .ico, compress, finalize.
    Nothing is written until validation has passed. progress_callback, if given,
    is called with (processed, total) after every step.
    """
    logger = logger or _logger
    source = validate_input(image_path)
    check_dependencies(tool)

    output_dir = output_dir_for(source, output_root)
    total = 2 * icon_count() + 2
    processed = 0
    lock = threading.Lock()

    def advance():
        nonlocal processed
        with lock:
            processed += 1
            if progress_callback:
                progress_callback(processed, total)

    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ConversionError(f"Cannot write to {output_dir}: {e}") from e
    scratch_dir = Path(tempfile.mkdtemp(prefix=f"favicon-gen-{source.stem}-"))
    logger.debug(f"Scratch directory: {scratch_dir}")

    try:
        icons = render_icons(tool, source, scratch_dir, jobs, logger, advance)
        pack_favicon_ico(tool, icons, scratch_dir, logger)
        advance()
        compressed = compress_icons(tool, scratch_dir, output_dir, jobs, logger, advance)
        ico_path = finalize(scratch_dir, output_dir, logger)
        advance()
    finally:
        if keep_scratch:
            logger.info(f"Scratch files kept in: {scratch_dir}")
        else:
            shutil.rmtree(scratch_dir, ignore_errors=True)

    logger.log(SUCCESS, "Icon generation complete! 🎉")
    return GenerationResult(output_dir, compressed, ico_path)

def configure_logging(verbose: bool = False) -> logging.Logger:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(ColorFormatter(use_color=sys.stderr.isatty()))
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, handlers=[handler])
    return _logger

def main(argv=None) -> int:
    """Main function to orchestrate favicon generation."""
    parser = argparse.ArgumentParser(description="Generate favicons and app icons from a single image")
    parser.add_argument("image", nargs="?", help="The source image, ideally square.")
    parser.add_argument("-o", "--output-root", type=Path, default=Path("."),
                        help="Directory in which the <image name>/ folder is created.")
    parser.add_argument("-b", "--backend", choices=sorted(BACKENDS), default="magick",
                        help="Image tool backend (default: magick).")
    parser.add_argument("-j", "--jobs", type=int, default=1, help="Worker threads for rendering and compression.")
    parser.add_argument("--keep-scratch", action="store_true", help="Keep the intermediate files.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every tool invocation.")
    args = parser.parse_args(argv)

    if args.jobs < 1:
        parser.error("--jobs must be at least 1")

    logger = configure_logging(args.verbose)

    try:
        generate_favicons(
            args.image,
            get_tool(args.backend),
            output_root=args.output_root,
            jobs=args.jobs,
            keep_scratch=args.keep_scratch,
            logger=logger,
        )
    except FaviconError as e:
        if args.image:
            logger.error(f"{args.image}: {e}")
        else:
            logger.error(e)
        return 1
    return 0

if __name__ == "__main__":
    sys.exit(main())
