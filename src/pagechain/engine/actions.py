"""
Chain Actions

Leaf interactions run by Invoke commands. Each takes the chain's
ExecutionContext first; the Chain builder binds the remaining arguments.

Keyboard input goes through the page (frames have no keyboard of their
own). Everything else targets the current frame.
"""

import logging
from typing import Callable, Optional

from .commands import ExecutionContext
from .models import BrowserElement

logger = logging.getLogger(__name__)


SCROLL_SCRIPT = """([selector, x, y]) => {
    const scrollContainer = document.querySelector(selector);
    if (scrollContainer) {
        scrollContainer.scroll(x, y);
    }
}"""

ACTIVE_ELEMENT_SCRIPT = """() => {
    const ae = document.activeElement;
    if (ae && ae !== document.body) {
        const attributes = {};
        for (const name of ae.getAttributeNames()) {
            const val = ae.getAttribute(name);
            if (val !== null) {
                attributes[name] = val;
            }
        }
        return {
            tag: ae.tagName.toLowerCase(),
            text_content: ae.textContent,
            attributes,
        };
    }
    return null;
}"""

REMOVE_ELEMENT_SCRIPT = """([selector, deferred]) => {
    const el = selector ? document.querySelector(selector) : document.activeElement;
    if (el && el.parentElement) {
        if (deferred) {
            setTimeout(() => el.parentElement && el.parentElement.removeChild(el), 0);
        } else {
            el.parentElement.removeChild(el);
        }
    }
}"""

# Element.focus() only fires focus events when the window has focus, so
# they are dispatched by hand when focusing succeeded silently.
FOCUS_ELEMENT_SCRIPT = """(selector) => {
    const el = document.querySelector(selector);
    if (!el) {
        throw new Error(`focus_element: could not find element with selector ${selector}`);
    }
    let hasFocused = false;
    const onFocus = () => (hasFocused = true);
    el.addEventListener("focus", onFocus);
    el.focus();
    el.removeEventListener("focus", onFocus);
    if (!hasFocused && document.activeElement === el) {
        el.dispatchEvent(new FocusEvent("focusin", { bubbles: true, view: window, relatedTarget: null }));
        el.dispatchEvent(new FocusEvent("focus", { view: window, relatedTarget: null }));
    }
}"""


def modifier_keys(
    shift: bool = False,
    ctrl: bool = False,
    alt: bool = False,
    meta: bool = False,
) -> list[str]:
    """Playwright key names for the requested modifiers, in press order."""
    keys = []
    if shift:
        keys.append("Shift")
    if ctrl:
        keys.append("Control")
    if alt:
        keys.append("Alt")
    if meta:
        keys.append("Meta")
    return keys


async def press_key(
    context: ExecutionContext,
    key: str,
    modifiers: tuple[str, ...] = (),
    delay: Optional[float] = None,
) -> None:
    """
    Press a key while holding modifiers.

    Args:
        context: Chain execution context
        key: Playwright key name (e.g., "Tab", "ArrowDown", "a")
        modifiers: Modifier key names held around the press
        delay: Milliseconds between keydown and keyup
    """
    keyboard = context.page.keyboard

    for modifier in modifiers:
        await keyboard.down(modifier)

    try:
        if delay is None:
            await keyboard.press(key)
        else:
            await keyboard.press(key, delay=delay)
    finally:
        for modifier in modifiers:
            await keyboard.up(modifier)


async def click(context: ExecutionContext, selector: str) -> None:
    """
    Click an element in the current frame.

    Uses a real mouse click rather than element.click(), so focusable
    elements receive focus the way they would for a user.
    """
    await context.current_frame.click(selector)


async def scroll_to(context: ExecutionContext, selector: str, x: float, y: float) -> None:
    """Scroll the element matching `selector` to (x, y) once it appears."""
    frame = context.current_frame
    await frame.wait_for_selector(selector)
    await frame.evaluate(SCROLL_SCRIPT, [selector, x, y])


async def active_element(
    context: ExecutionContext,
    callback: Callable[[Optional[BrowserElement]], None],
) -> None:
    """
    Pass a snapshot of the focused element to `callback`.

    The callback receives None when nothing (or only <body>) has focus.
    """
    data = await context.current_frame.evaluate(ACTIVE_ELEMENT_SCRIPT)
    callback(BrowserElement.model_validate(data) if data else None)


async def remove_element(
    context: ExecutionContext,
    selector: Optional[str] = None,
    deferred: bool = False,
) -> None:
    """
    Remove an element from the DOM.

    Args:
        context: Chain execution context
        selector: Element to remove (default: the focused element)
        deferred: Remove on the page's next timer tick instead of immediately
    """
    await context.current_frame.evaluate(REMOVE_ELEMENT_SCRIPT, [selector or "", deferred])


async def focus_element(context: ExecutionContext, selector: str) -> None:
    """Focus the element matching `selector`; fails if it does not exist."""
    await context.current_frame.evaluate(FOCUS_ELEMENT_SCRIPT, selector)
