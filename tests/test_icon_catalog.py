import pytest

from icon_catalog import (
    FAVICON_ICO_SIZES, SIZE_CATALOG, get_category, icon_count, icon_filename, iter_icons,
)

def test_catalog_order_and_prefixes():
    assert [(c.name, c.prefix) for c in SIZE_CATALOG] == [
        ("favicon", "favicon-"),
        ("apple-touch", "apple-touch-icon-"),
        ("apple-icon", "apple-icon-"),
        ("ms-tile", "ms-icon-"),
        ("generic", "icon-"),
        ("android-chrome", "android-chrome-"),
        ("web-manifest", "web-app-manifest-"),
    ]

def test_catalog_sizes():
    assert get_category("favicon").sizes == (16, 32, 48, 64, 128, 192, 256, 512)
    assert get_category("apple-touch").sizes == (57, 60, 72, 76, 83, 114, 120, 144, 152, 167, 180)
    assert get_category("apple-icon").sizes == get_category("apple-touch").sizes
    assert get_category("ms-tile").sizes == (70, 144, 150, 310)
    assert get_category("generic").sizes == (16, 32, 96, 192)
    assert get_category("android-chrome").sizes == (36, 48, 72, 96, 144, 192, 512)
    assert get_category("web-manifest").sizes == (192, 512)

def test_all_sizes_are_positive_ints():
    for _, size in iter_icons():
        assert isinstance(size, int) and size > 0

def test_icon_count():
    assert icon_count() == 47
    assert len(list(iter_icons())) == 47

def test_filenames_are_unique():
    names = [icon_filename(category, size) for category, size in iter_icons()]
    assert len(set(names)) == len(names)

def test_icon_filename():
    assert icon_filename(get_category("ms-tile"), 310) == "ms-icon-310x310.png"
    assert icon_filename(get_category("web-manifest"), 192) == "web-app-manifest-192x192.png"

def test_favicon_ico_sizes_ascending():
    assert list(FAVICON_ICO_SIZES) == sorted(FAVICON_ICO_SIZES)
    assert len(FAVICON_ICO_SIZES) == 8

def test_unknown_category():
    with pytest.raises(KeyError):
        get_category("windows-tile")
