"""Stock components."""

from termframe.components.box import Box, draw_border
from termframe.components.label import Label
from termframe.components.list_view import ListView, SelectItem
from termframe.components.text_input import TextInput

__all__ = [
    "Box",
    "Label",
    "ListView",
    "SelectItem",
    "TextInput",
    "draw_border",
]
