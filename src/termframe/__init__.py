"""termframe: terminal UI runtime with retained components and diff rendering."""

# Frame buffer
from termframe.buffer import Cell, FrameBuffer

# Components (re-exported from components package)
from termframe.components import Box, Label, ListView, SelectItem, TextInput

# Configuration
from termframe.config import TuiConfig, configure_logging

# Errors
from termframe.errors import (
    ComponentRenderError,
    DispatchError,
    FatalError,
    InitializationError,
    TermframeError,
)

# Focus
from termframe.focus import FocusManager, focus_order

# Input
from termframe.input import InputPoller, InputQueue

# Keys
from termframe.keys import KeyEvent, KeyId, matches_key, parse_key

# Layout
from termframe.layout import (
    Fixed,
    GridPanel,
    Panel,
    StackPanel,
    Weighted,
    distribute_tracks,
    hide,
    layout_tree,
    show,
)

# Component tree
from termframe.node import Node, collect_effectively_visible, walk_visible

# Notifications
from termframe.notifications import Notification, Notifications

# Rendering
from termframe.renderer import Renderer

# Screens and dialogs
from termframe.screens import Dialog, Screen, ScreenManager

# Stdin buffer
from termframe.stdin_buffer import StdinBuffer

# State store
from termframe.store import ActionContext, DispatchResult, HistoryEntry, Store

# Terminal
from termframe.terminal import ProcessTerminal, Terminal

# Core TUI
from termframe.tui import TUI

# Utilities
from termframe.utils import truncate_to_width, visible_width

__all__ = [
    # Frame buffer
    "Cell",
    "FrameBuffer",
    # Components
    "Box",
    "Label",
    "ListView",
    "SelectItem",
    "TextInput",
    # Configuration
    "TuiConfig",
    "configure_logging",
    # Errors
    "ComponentRenderError",
    "DispatchError",
    "FatalError",
    "InitializationError",
    "TermframeError",
    # Focus
    "FocusManager",
    "focus_order",
    # Input
    "InputPoller",
    "InputQueue",
    # Keys
    "KeyEvent",
    "KeyId",
    "matches_key",
    "parse_key",
    # Layout
    "Fixed",
    "GridPanel",
    "Panel",
    "StackPanel",
    "Weighted",
    "distribute_tracks",
    "hide",
    "layout_tree",
    "show",
    # Component tree
    "Node",
    "collect_effectively_visible",
    "walk_visible",
    # Notifications
    "Notification",
    "Notifications",
    # Rendering
    "Renderer",
    # Screens and dialogs
    "Dialog",
    "Screen",
    "ScreenManager",
    # Stdin buffer
    "StdinBuffer",
    # State store
    "ActionContext",
    "DispatchResult",
    "HistoryEntry",
    "Store",
    # Terminal
    "ProcessTerminal",
    "Terminal",
    # TUI core
    "TUI",
    # Utilities
    "truncate_to_width",
    "visible_width",
]
