"""Tests for the 1024x1024 image normalizer."""

from __future__ import annotations

from helpers import png_bytes
from PIL import Image

from chainmeta.assets.dimensions import TARGET_SIZE, needs_fix, normalize_image, normalize_images


def _write(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return path


def test_transparent_image_is_flattened_onto_white(tmp_path):
    path = _write(tmp_path / "tokens" / "a.png", png_bytes((255, 0, 0, 0), size=(200, 100), mode="RGBA"))

    assert normalize_image(path) is True

    with Image.open(path) as image:
        assert image.format == "PNG"
        assert image.size == (TARGET_SIZE, TARGET_SIZE)
        assert image.convert("RGB").getpixel((10, 10)) == (255, 255, 255)
        assert not needs_fix(image)


def test_fit_within_keeps_aspect_and_centres(tmp_path):
    path = _write(tmp_path / "b.png", png_bytes((0, 0, 255), size=(200, 100)))

    normalize_image(path)

    with Image.open(path) as image:
        rgb = image.convert("RGB")
        assert rgb.getpixel((512, 512)) == (0, 0, 255)
        assert rgb.getpixel((512, 10)) == (255, 255, 255)


def test_jpeg_content_is_rewritten_as_png_keeping_extension(tmp_path):
    path = tmp_path / "c.jpg"
    Image.new("RGB", (TARGET_SIZE, TARGET_SIZE), (0, 128, 0)).save(path, format="JPEG")

    normalize_image(path)

    with Image.open(path) as image:
        assert image.format == "PNG"
    assert not (tmp_path / "c.jpg.tmp").exists()


def test_second_run_changes_nothing(tmp_path):
    _write(tmp_path / "tokens" / "a.png", png_bytes((10, 20, 30, 128), size=(50, 50), mode="RGBA"))
    _write(tmp_path / "vaults" / "b.png", png_bytes((10, 20, 30), size=(TARGET_SIZE, TARGET_SIZE)))

    first = normalize_images(tmp_path)
    snapshot = (tmp_path / "tokens" / "a.png").read_bytes()
    second = normalize_images(tmp_path)

    assert (first.fixed, first.unchanged, first.failed) == (1, 1, 0)
    assert (second.fixed, second.unchanged, second.failed) == (0, 2, 0)
    assert (tmp_path / "tokens" / "a.png").read_bytes() == snapshot


def test_unreadable_image_is_counted_as_failure(tmp_path):
    _write(tmp_path / "broken.png", b"not an image")
    _write(tmp_path / "ok.png", png_bytes((1, 2, 3), size=(TARGET_SIZE, TARGET_SIZE)))

    report = normalize_images(tmp_path)

    assert report.failed == 1
    assert report.unchanged == 1
