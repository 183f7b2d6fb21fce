"""Screen-side pieces: viewport scrolling and frame composition."""

from .frame import compose_frame, describe_filetype
from .viewport import Viewport, content_col_to_render_col

__all__ = [
    "Viewport",
    "compose_frame",
    "content_col_to_render_col",
    "describe_filetype",
]
