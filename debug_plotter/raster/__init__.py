from .canvas import draw_hline, draw_vline, fill_rect, new_canvas
from .lines import draw_point, draw_polyline
from .text import draw_text, text_size

__all__ = [
    "draw_hline",
    "draw_point",
    "draw_polyline",
    "draw_text",
    "draw_vline",
    "fill_rect",
    "new_canvas",
    "text_size",
]
