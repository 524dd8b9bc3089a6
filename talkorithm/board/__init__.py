"""Drawing surface — the sketchpad sent with chat turns."""

from talkorithm.board.whiteboard import COLORS, Point, Tool, Whiteboard

__all__ = ["COLORS", "Point", "Tool", "Whiteboard"]
