import pytest

from qrforge.app import (
    DISPLAY_HEIGHT,
    DISPLAY_WIDTH,
    MAX_TEXT_LENGTH,
    README,
    generate_qrcode,
    main,
    qrcode_boxes,
    read_text_from_file,
    render_text,
    write_text_to_file,
)
from qrforge.ecc import Ecc
from qrforge.qrcode import DataTooLongError, Mask, encode_text


def test_write_then_read_round_trip(tmp_path):
    path = tmp_path / "note.txt"
    write_text_to_file(path, "Hello, wörld")
    assert read_text_from_file(path) == "Hello, wörld"


def test_write_replaces_existing_content(tmp_path):
    path = tmp_path / "note.txt"
    write_text_to_file(path, "a much longer first text")
    write_text_to_file(path, "short")
    assert read_text_from_file(path) == "short"


def test_read_stops_at_nul(tmp_path):
    path = tmp_path / "note.txt"
    path.write_bytes(b"abc\0def")
    assert read_text_from_file(path) == "abc"


def test_read_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_text_from_file(tmp_path / "missing.txt")


def test_generate_matches_encoder_settings():
    qr = generate_qrcode("HELLO WORLD")
    expected = encode_text("HELLO WORLD", Ecc.LOW, 1, 40, Mask.AUTO, True)
    assert qr == expected
    assert qr.version == 1
    assert qr.size == 21


def test_generate_too_long_raises():
    with pytest.raises(DataTooLongError):
        generate_qrcode("a" * 3000)


def test_boxes_cover_dark_modules():
    qr = generate_qrcode("HELLO")
    boxes = list(qrcode_boxes(qr, 2))
    dark = sum(sum(row) for row in qr.modules)
    assert len(boxes) == dark
    assert all(b.width == 2 and b.height == 2 for b in boxes)


def test_boxes_are_centred():
    qr = generate_qrcode("HELLO")
    boxes = list(qrcode_boxes(qr, 2))
    # The top-left finder corner is always dark.
    assert min(b.x for b in boxes) == DISPLAY_WIDTH // 2 - qr.size
    assert min(b.y for b in boxes) == DISPLAY_HEIGHT // 2 - qr.size
    assert max(b.x + b.width for b in boxes) <= DISPLAY_WIDTH
    assert max(b.y + b.height for b in boxes) <= DISPLAY_HEIGHT


def test_boxes_reject_bad_scale():
    with pytest.raises(ValueError):
        list(qrcode_boxes(generate_qrcode("X"), 0))


def test_render_text_shape_and_content():
    qr = generate_qrcode("HELLO")
    lines = render_text(qr).split("\n")
    assert len(lines) == qr.size + 4
    assert len({len(line) for line in lines}) == 1
    dark = sum(sum(row) for row in qr.modules)
    assert render_text(qr).count("\u2588") == dark * 2


def test_main_generate_prints_code(capsys):
    assert main(["generate", "HELLO"]) == 0
    out = capsys.readouterr().out
    assert out == render_text(generate_qrcode("HELLO")) + "\n"


def test_main_generate_save_then_saved(tmp_path, capsys):
    path = tmp_path / "code.txt"
    assert main(["generate", "hello there", "--save", str(path)]) == 0
    first = capsys.readouterr().out
    assert read_text_from_file(path) == "hello there"
    assert main(["saved", str(path)]) == 0
    assert capsys.readouterr().out == first


def test_main_saved_relative_to_folder(tmp_path, capsys):
    write_text_to_file(tmp_path / "one.txt", "12345")
    assert main(["saved", "one.txt", "--folder", str(tmp_path)]) == 0
    assert capsys.readouterr().out == render_text(generate_qrcode("12345")) + "\n"


def test_main_saved_lists_txt_files(tmp_path, capsys):
    write_text_to_file(tmp_path / "b.txt", "B")
    write_text_to_file(tmp_path / "a.txt", "A")
    write_text_to_file(tmp_path / "c.dat", "C")
    assert main(["saved", "--folder", str(tmp_path)]) == 0
    assert capsys.readouterr().out.split() == ["a.txt", "b.txt"]


def test_main_saved_missing_file_fails(tmp_path, capsys):
    assert main(["saved", "nope.txt", "--folder", str(tmp_path)]) == 1
    assert "Failed to open file for reading" in capsys.readouterr().err


def test_main_generate_rejects_long_text():
    with pytest.raises(SystemExit):
        main(["generate", "x" * (MAX_TEXT_LENGTH + 1)])


def test_main_readme(capsys):
    assert main(["readme"]) == 0
    assert capsys.readouterr().out == README + "\n"