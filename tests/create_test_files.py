from pathlib import Path

from PIL import Image, ImageDraw

test_dir = Path("test_files")

sample_images = {
    "logo.png": (1024, 1024),
    "banner.png": (1200, 600),
    "small.jpg": (64, 64),
}

def create_image(path: Path, width: int, height: int) -> Path:
    """Draws a simple two-colour test pattern so resized output is not blank."""
    img = Image.new("RGBA", (width, height), (30, 60, 200, 255))
    draw = ImageDraw.Draw(img)
    draw.ellipse((width // 4, height // 4, width * 3 // 4, height * 3 // 4), fill=(250, 180, 20, 255))
    if path.suffix.lower() in (".jpg", ".jpeg"):
        img = img.convert("RGB")
    img.save(path)
    return path

if __name__ == "__main__":
    test_dir.mkdir(exist_ok=True)
    for file_name, (width, height) in sample_images.items():
        create_image(test_dir / file_name, width, height)
    print(f"Created {len(sample_images)} sample images in {test_dir}")
