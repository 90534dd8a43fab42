from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Protocol

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from ..config.settings import NAVIGATION_TIMEOUT_MS
from ..harvest.errors import NavigationError, WaitTimeout
from ..utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/121.0.0.0 Safari/537.36"
)


class PageDriver(Protocol):
    """Operations the harvester needs from one live page session."""

    def navigate(self, url: str, wait_until: str = "domcontentloaded", timeout_ms: Optional[int] = None) -> None: ...

    def wait_for(self, locator: str, state: str = "visible", timeout_ms: Optional[int] = None) -> None: ...

    def click(self, locator: str, timeout_ms: Optional[int] = None) -> None: ...

    def evaluate(self, script: str, arg: Any = None) -> Any: ...

    def fill(self, locator: str, value: str) -> None: ...

    def read_value(self, locator: str) -> Optional[str]: ...

    def wait_for_load_state(self, state: str = "networkidle", timeout_ms: Optional[int] = None) -> None: ...


class PlaywrightDriver:
    """PageDriver over a single Chromium page (``playwright.sync_api``).

    The browser starts on first use; ``close()`` or the context manager shuts
    it down.
    """

    def __init__(
        self,
        headless: bool = True,
        executable_path: Optional[Path] = None,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self.headless = headless
        self.executable_path = executable_path
        self.user_agent = user_agent
        self._pw = None
        self._browser = None
        self._page = None

    def __enter__(self) -> "PlaywrightDriver":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def page(self):
        self._ensure()
        return self._page

    def _ensure(self) -> None:
        if self._page is not None:
            return
        from playwright.sync_api import sync_playwright

        self._pw = sync_playwright().start()
        launch_kwargs = {"headless": self.headless}
        if self.executable_path:
            launch_kwargs["executable_path"] = str(self.executable_path)
        self._browser = self._pw.chromium.launch(**launch_kwargs)
        context = self._browser.new_context(user_agent=self.user_agent, locale="en-US")
        self._page = context.new_page()
        logger.debug("Browser started (headless=%s)", self.headless)

    def close(self) -> None:
        if self._browser:
            self._browser.close()
        if self._pw:
            self._pw.stop()
        self._browser = None
        self._pw = None
        self._page = None

    def navigate(self, url: str, wait_until: str = "domcontentloaded", timeout_ms: Optional[int] = None) -> None:
        try:
            self.page.goto(url, wait_until=wait_until, timeout=timeout_ms or NAVIGATION_TIMEOUT_MS)
        except PlaywrightError as exc:
            raise NavigationError(f"Could not load {url}: {exc}") from exc

    def wait_for(self, locator: str, state: str = "visible", timeout_ms: Optional[int] = None) -> None:
        try:
            self.page.wait_for_selector(locator, state=state, timeout=timeout_ms)
        except PlaywrightTimeoutError as exc:
            raise WaitTimeout(locator, state, timeout_ms) from exc

    def click(self, locator: str, timeout_ms: Optional[int] = None) -> None:
        try:
            self.page.click(locator, timeout=timeout_ms)
        except PlaywrightTimeoutError as exc:
            raise WaitTimeout(locator, "clickable", timeout_ms) from exc

    def evaluate(self, script: str, arg: Any = None) -> Any:
        return self.page.evaluate(script, arg)

    def fill(self, locator: str, value: str) -> None:
        self.page.fill(locator, value)

    def read_value(self, locator: str) -> Optional[str]:
        if self.page.query_selector(locator) is None:
            return None
        return self.page.input_value(locator)

    def wait_for_load_state(self, state: str = "networkidle", timeout_ms: Optional[int] = None) -> None:
        try:
            self.page.wait_for_load_state(state, timeout=timeout_ms)
        except PlaywrightTimeoutError as exc:
            raise WaitTimeout("page", state, timeout_ms) from exc
