"""
Tests for font file loading and caching.
"""

from services.font_loader import FONT_FILES, FontLoader, list_supported_families


def write_family(fonts_dir, family):
    for font_file in FONT_FILES[family]:
        (fonts_dir / font_file.file).write_bytes(f"{family}:{font_file.weight}".encode())


def test_loads_regular_and_bold_faces(tmp_path):
    write_family(tmp_path, "Poppins")
    loader = FontLoader(fonts_dir=tmp_path, default_family="Inter")

    fonts = loader.load_fonts("Poppins")

    assert [(f.name, f.weight, f.style) for f in fonts] == [
        ("Poppins", 400, "normal"),
        ("Poppins", 700, "normal"),
    ]
    assert fonts[1].data == b"Poppins:700"


def test_unknown_family_uses_default_files(tmp_path):
    write_family(tmp_path, "Inter")
    loader = FontLoader(fonts_dir=tmp_path, default_family="Inter")

    assert loader.get_font_files("Comic Sans") == FONT_FILES["Inter"]
    fonts = loader.load_fonts("Comic Sans")
    assert {f.data for f in fonts} == {b"Inter:400", b"Inter:700"}


def test_missing_family_files_fall_back_to_default(tmp_path):
    write_family(tmp_path, "Inter")
    loader = FontLoader(fonts_dir=tmp_path, default_family="Inter")

    fonts = loader.load_fonts("Roboto")

    assert [f.name for f in fonts] == ["Inter", "Inter"]


def test_partially_missing_family_keeps_readable_faces(tmp_path):
    (tmp_path / "Montserrat-Bold.ttf").write_bytes(b"bold")
    loader = FontLoader(fonts_dir=tmp_path, default_family="Inter")

    fonts = loader.load_fonts("Montserrat")

    assert [(f.name, f.weight) for f in fonts] == [("Montserrat", 700)]


def test_empty_family_means_default(tmp_path):
    write_family(tmp_path, "Inter")
    loader = FontLoader(fonts_dir=tmp_path, default_family="Inter")

    assert loader.load_fonts("") is loader.load_fonts("Inter")
    assert loader.load_fonts(None) is loader.load_fonts("Inter")


def test_unreadable_default_returns_empty(tmp_path):
    loader = FontLoader(fonts_dir=tmp_path, default_family="Inter")

    assert loader.load_fonts("Roboto") == []


def test_loaded_fonts_are_cached(tmp_path):
    write_family(tmp_path, "Open Sans")
    loader = FontLoader(fonts_dir=tmp_path, default_family="Inter")

    first = loader.load_fonts("Open Sans")
    for font_file in FONT_FILES["Open Sans"]:
        (tmp_path / font_file.file).unlink()

    assert loader.load_fonts("Open Sans") is first


def test_supported_families():
    assert list_supported_families() == ["Inter", "Roboto", "Open Sans", "Montserrat", "Poppins"]


def test_fallback_is_cached_under_requested_family(tmp_path, monkeypatch):
    write_family(tmp_path, "Inter")
    loader = FontLoader(fonts_dir=tmp_path, default_family="Inter")
    first = loader.load_fonts("Roboto")

    reads = []
    monkeypatch.setattr(loader, "_read_font", lambda font_file: reads.append(font_file) or b"")

    assert loader.load_fonts("Roboto") is first
    assert loader.load_fonts("Roboto") is loader.load_fonts("Inter")
    assert reads == []
