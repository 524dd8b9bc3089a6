"""Tests for the sketchpad."""

import base64
import io

import pytest
from PIL import Image

from talkorithm.board.whiteboard import COLORS, Tool, Whiteboard


@pytest.fixture
def board() -> Whiteboard:
    return Whiteboard(width=400, height=300, pixel_ratio=1.0)


def _decode(data_url: str) -> Image.Image:
    prefix, payload = data_url.split(",", 1)
    assert prefix == "data:image/png;base64"
    return Image.open(io.BytesIO(base64.b64decode(payload)))


def _alpha(board: Whiteboard, x: int, y: int) -> int:
    return board.image.getpixel((x, y))[3]


# -- Geometry ------------------------------------------------------------------


def test_minimum_size_enforced() -> None:
    board = Whiteboard(width=100, height=50, pixel_ratio=1.0)
    assert (board.width, board.height) == (320, 220)
    assert board.image.size == (320, 220)


def test_backing_scaled_by_pixel_ratio() -> None:
    board = Whiteboard(width=400, height=300, pixel_ratio=2.0)
    assert (board.width, board.height) == (400, 300)
    assert board.image.size == (800, 600)


def test_resize_keeps_dirty_flag(board: Whiteboard) -> None:
    board.pointer_down(10, 10)
    board.pointer_move(50, 50)
    board.resize(500, 400)
    assert board.has_content()
    assert board.image.size == (500, 400)


# -- Snapshot ------------------------------------------------------------------


def test_blank_board_has_no_snapshot(board: Whiteboard) -> None:
    assert not board.has_content()
    assert board.snapshot() is None


def test_pen_stroke_produces_png(board: Whiteboard) -> None:
    board.pointer_down(10, 10)
    board.pointer_move(100, 10)
    board.pointer_up(100, 10)

    snapshot = board.snapshot()
    assert snapshot is not None
    image = _decode(snapshot)
    assert image.format == "PNG"
    assert image.size == (400, 300)
    assert image.convert("RGBA").getpixel((50, 10))[3] == 255


def test_clear_resets_content(board: Whiteboard) -> None:
    board.pointer_down(10, 10)
    board.pointer_move(60, 60)
    board.clear()

    assert not board.has_content()
    assert board.snapshot() is None
    assert _alpha(board, 35, 35) == 0


def test_pointer_down_alone_is_not_content(board: Whiteboard) -> None:
    board.pointer_down(10, 10)
    board.pointer_up(10, 10)
    assert not board.has_content()


def test_move_without_down_draws_nothing(board: Whiteboard) -> None:
    board.pointer_move(10, 10)
    board.pointer_move(50, 50)
    assert not board.has_content()


# -- Tools ---------------------------------------------------------------------


def test_line_tool_draws_on_release_only(board: Whiteboard) -> None:
    board.set_tool(Tool.LINE)
    board.pointer_down(20, 20)
    board.pointer_move(200, 200)
    assert not board.has_content()

    board.pointer_up(20, 200)
    assert board.has_content()
    assert _alpha(board, 20, 110) == 255
    assert _alpha(board, 110, 110) == 0


def test_pointer_leave_ends_stroke(board: Whiteboard) -> None:
    board.set_tool("line")
    board.pointer_down(20, 20)
    board.pointer_leave(120, 20)
    assert _alpha(board, 70, 20) == 255

    board.pointer_move(300, 20)
    assert _alpha(board, 200, 20) == 0


def test_eraser_clears_pixels(board: Whiteboard) -> None:
    board.set_size(10)
    board.pointer_down(10, 50)
    board.pointer_move(200, 50)
    board.pointer_up(200, 50)
    assert _alpha(board, 100, 50) == 255

    board.set_tool(Tool.ERASE)
    board.pointer_down(100, 20)
    board.pointer_move(100, 80)
    board.pointer_up(100, 80)
    assert _alpha(board, 100, 50) == 0
    assert _alpha(board, 30, 50) == 255


def test_stroke_uses_selected_colour(board: Whiteboard) -> None:
    board.set_color("#dc2626")
    board.pointer_down(10, 10)
    board.pointer_move(100, 10)
    assert board.image.getpixel((50, 10)) == (0xDC, 0x26, 0x26, 255)


def test_set_color_switches_to_pen(board: Whiteboard) -> None:
    board.set_tool(Tool.ERASE)
    board.set_color(COLORS[1])
    assert board.tool is Tool.PEN
    assert board.color == COLORS[1]


def test_unknown_colour_rejected(board: Whiteboard) -> None:
    with pytest.raises(ValueError, match="Unknown colour"):
        board.set_color("#ffffff")


def test_unknown_tool_rejected(board: Whiteboard) -> None:
    with pytest.raises(ValueError):
        board.set_tool("spray")


@pytest.mark.parametrize(("requested", "expected"), [(1, 2), (2, 2), (6, 6), (10, 10), (40, 10)])
def test_stroke_size_clamped(board: Whiteboard, requested: int, expected: int) -> None:
    board.set_size(requested)
    assert board.size == expected


def test_defaults(board: Whiteboard) -> None:
    assert board.tool is Tool.PEN
    assert board.color == COLORS[0]
    assert board.size == 3
