#!/usr/bin/env python3
from typing import Any, Dict

from rich.panel import Panel
from rich.text import Text

from ..config import Config


class Theme:
    @staticmethod
    def segment_style(name: str) -> str:
        styles = Config.PROMPT_STYLES
        return styles.get(name) or styles.get("default", "default")

    @staticmethod
    def message_style(name: str) -> str:
        return Config.MESSAGE_STYLES.get(name, "")

    @staticmethod
    def panel(
        renderable: Any,
        title: str = "",
        style: str = "default",
        *,
        fit: bool = True,
    ) -> Panel:
        panel_style = Config.PANEL_STYLES.get(style) or Config.PANEL_STYLES["default"]

        panel_kwargs: Dict[str, Any] = {
            "border_style": panel_style.get("border_style", "#888888"),
            "title_align": "left",
        }
        if panel_style.get("padding") is not None:
            panel_kwargs["padding"] = tuple(panel_style["padding"])

        title_value = Text(title) if title else None
        if fit:
            return Panel.fit(renderable, title=title_value, **panel_kwargs)
        return Panel(renderable, title=title_value, **panel_kwargs)
