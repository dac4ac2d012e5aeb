import logging
from typing import Dict, Optional

from homebudget.domain import Theme
from homebudget.events import DATA_CLEARED, THEME_CHANGED, Event, EventBus
from homebudget.storage import RecordRepository

logger = logging.getLogger(__name__)

PALETTES: Dict[Theme, Dict[str, str]] = {
    Theme.DARK: {
        "background": "#0F172A",
        "card": "#1E293B",
        "text": "#F1F5F9",
        "accent": "#8B5CF6",
        "secondary": "#94A3B8",
    },
    Theme.LIGHT: {
        "background": "#F8FAFC",
        "card": "#FFFFFF",
        "text": "#1E293B",
        "accent": "#3B82F6",
        "secondary": "#6B7280",
    },
}


class ThemeSettings:
    """Shared light/dark preference, loaded once and persisted on toggle."""

    def __init__(self, repo: RecordRepository, bus: Optional[EventBus] = None):
        self.repo = repo
        self.bus = bus
        self.theme = Theme.LIGHT
        self.loaded = False
        if bus is not None:
            bus.subscribe(DATA_CLEARED, self._on_cleared)

    @property
    def is_dark(self) -> bool:
        return self.theme is Theme.DARK

    def _on_cleared(self, event: Event, payload: dict) -> dict:
        # no stored preference means light
        self.theme = Theme.LIGHT
        return {"theme": self.theme.value}

    async def load(self) -> Theme:
        self.theme = await self.repo.load_theme()
        self.loaded = True
        return self.theme

    async def toggle(self) -> Theme:
        previous = self.theme
        self.theme = Theme.LIGHT if self.is_dark else Theme.DARK
        try:
            await self.repo.save_theme(self.theme)
        except Exception:
            self.theme = previous
            raise
        logger.info("Theme switched to %s", self.theme.value)
        if self.bus is not None:
            self.bus.publish(THEME_CHANGED, {"theme": self.theme.value})
        return self.theme

    def palette(self) -> Dict[str, str]:
        return PALETTES[self.theme]

    def plotly_template(self) -> str:
        return "plotly_dark" if self.is_dark else "plotly_white"
