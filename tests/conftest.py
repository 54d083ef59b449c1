"""
Shared fakes for Playwright-driven tests
"""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


class FakePage:
    """Page double resolving selectors from a dict"""

    def __init__(self, elements=None, body_text=""):
        self.elements = dict(elements or {})
        self.body_text = body_text
        self.queried = []

        self.goto = AsyncMock()
        self.wait_for_timeout = AsyncMock()
        self.wait_for_selector = AsyncMock()
        self.screenshot = AsyncMock()
        self.keyboard = MagicMock()
        self.keyboard.press = AsyncMock()

    async def query_selector(self, selector):
        self.queried.append(selector)
        return self.elements.get(selector)

    async def inner_text(self, selector):
        return self.body_text


def make_element(attributes=None, options=None, tag="INPUT"):
    """Element double with awaitable actions"""
    attributes = attributes or {}
    element = MagicMock()
    element.click = AsyncMock()
    element.fill = AsyncMock()
    element.select_option = AsyncMock()
    element.get_attribute = AsyncMock(side_effect=lambda name: attributes.get(name))
    element.query_selector_all = AsyncMock(return_value=options or [])
    element.evaluate = AsyncMock(return_value=tag)
    return element


def make_option(value):
    option = MagicMock()
    option.get_attribute = AsyncMock(return_value=value)
    return option


def make_playwright(page=None):
    """Playwright factory double: returns (factory, playwright, browser, context)"""
    context = MagicMock()
    context.new_page = AsyncMock(return_value=page or FakePage())
    context.close = AsyncMock()

    browser = MagicMock()
    browser.is_connected = MagicMock(return_value=True)
    browser.new_context = AsyncMock(return_value=context)
    browser.close = AsyncMock()

    playwright = MagicMock()
    playwright.chromium.launch = AsyncMock(return_value=browser)
    playwright.stop = AsyncMock()

    factory = MagicMock()
    factory.return_value.start = AsyncMock(return_value=playwright)
    return factory, playwright, browser, context


@pytest.fixture
def fake_page():
    return FakePage


@pytest.fixture
def element():
    return make_element


@pytest.fixture
def option():
    return make_option


@pytest.fixture
def playwright_double():
    return make_playwright
