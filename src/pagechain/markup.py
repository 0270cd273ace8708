"""
Markup rendering for html() commands.

Accepts plain HTML strings or any object implementing the __html__()
protocol (markupsafe.Markup, template fragments and the like).
"""

from typing import Any


def render_markup(fragment: Any) -> str:
    """
    Convert a UI fragment into an HTML string.

    Args:
        fragment: HTML string or object with an __html__() method

    Returns:
        HTML string

    Raises:
        TypeError: If the fragment cannot be rendered
    """
    if isinstance(fragment, str):
        return fragment

    render = getattr(fragment, "__html__", None)
    if callable(render):
        return str(render())

    raise TypeError(f"Cannot render {type(fragment).__name__} as HTML; pass a str or an object with __html__()")
