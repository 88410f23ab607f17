from dataclasses import dataclass
from typing import Iterator

FAVICON_ICO_NAME = "favicon.ico"

@dataclass(frozen=True)
class Category:
    name: str
    prefix: str
    sizes: tuple[int, ...]

APPLE_SIZES = (57, 60, 72, 76, 83, 114, 120, 144, 152, 167, 180)

SIZE_CATALOG = (
    Category("favicon", "favicon-", (16, 32, 48, 64, 128, 192, 256, 512)),
    Category("apple-touch", "apple-touch-icon-", APPLE_SIZES),
    Category("apple-icon", "apple-icon-", APPLE_SIZES),
    Category("ms-tile", "ms-icon-", (70, 144, 150, 310)),
    Category("generic", "icon-", (16, 32, 96, 192)),
    Category("android-chrome", "android-chrome-", (36, 48, 72, 96, 144, 192, 512)),
    Category("web-manifest", "web-app-manifest-", (192, 512)),
)

def get_category(name: str) -> Category:
    """Looks up a catalog category by name, raising KeyError if it is unknown."""
    for category in SIZE_CATALOG:
        if category.name == name:
            return category
    raise KeyError(f"Unknown icon category: {name}")

FAVICON_ICO_SIZES = get_category("favicon").sizes

def icon_filename(category: Category, size: int) -> str:
    return f"{category.prefix}{size}x{size}.png"

def iter_icons() -> Iterator[tuple[Category, int]]:
    """Yields every (category, size) pair in catalog order."""
    for category in SIZE_CATALOG:
        for size in category.sizes:
            yield category, size

def icon_count() -> int:
    return sum(len(category.sizes) for category in SIZE_CATALOG)
