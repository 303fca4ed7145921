"""
================================================================================
Headless Browser Page Renderer
================================================================================
Author      : Breno Farias da Silva
Created     : 2026-10-18
Description :
    This script provides a Browser class that renders pages with a headless
    Chromium instance driven by Playwright and returns the resulting HTML.
    Each worker thread owns one Browser, because the synchronous Playwright
    objects must stay on the thread that created them.

    Key features include:
        - Lazy browser launch on the first render
        - Navigation with a configurable timeout
        - Short wait for a readiness selector, tolerated on timeout
        - Full HTML snapshot after JavaScript execution
        - Safe cleanup of page, browser and Playwright instances

Usage:
    1. Create an instance (optionally with a Logger):
        browser = Browser(logger=logger)
    2. Render a page:
        html = browser.render(url, wait_selector="#productTitle", wait_timeout=8000)
    3. Close it when the worker is done:
        browser.close_browser()

Outputs:
    - Rendered HTML strings

Dependencies:
    - Python >= 3.8
    - playwright
    - colorama

Assumptions & Notes:
    - Navigation failures raise, so the caller can retry the request
    - A readiness selector that never shows up does not fail the render
"""

from colorama import Style  # Colorize terminal text output
from playwright.sync_api import sync_playwright, TimeoutError as PlaywrightTimeoutError  # Browser automation framework with timeout handling
from typing import Optional, Any  # Type hinting support for better code clarity


# Macros:
class BackgroundColors:  # Colors for the terminal
    CYAN = "\033[96m"  # Cyan
    GREEN = "\033[92m"  # Green
    YELLOW = "\033[93m"  # Yellow
    RED = "\033[91m"  # Red
    BOLD = "\033[1m"  # Bold


# Execution Constants:
VERBOSE = False  # Set to True to output verbose messages

# Browser Constants:
CHROME_EXECUTABLE_PATH = ""  # Bundled Chromium unless main() passes CHROME_EXECUTABLE_PATH from .env
HEADLESS = True  # Headless unless main() passes HEADLESS from .env
PAGE_LOAD_TIMEOUT = 120000  # Maximum time in milliseconds to wait for navigation
DEFAULT_WAIT_TIMEOUT = 7000  # Maximum time in milliseconds to wait for the readiness selector
VIEWPORT = {"width": 1920, "height": 1080}  # Standard Full HD viewport
LAUNCH_ARGS = ["--disable-blink-features=AutomationControlled", "--disable-dev-shm-usage", "--no-sandbox"]  # Anti-detection and container-friendly flags


# Classes Definitions:


class Browser:
    """
    Renders pages with a Playwright-driven Chromium and returns their HTML.
    """


    def __init__(self, logger: Optional[Any] = None, headless: bool = HEADLESS, executable_path: str = CHROME_EXECUTABLE_PATH) -> None:
        """
        Initializes the renderer without launching the browser yet.

        :param logger: Optional Logger instance for status messages
        :param headless: Whether to run Chromium headless
        :param executable_path: Optional custom Chrome executable path
        :return: None
        """

        self.logger = logger  # Store the logger for status messages
        self.headless: bool = headless  # Store the headless flag
        self.executable_path: str = executable_path  # Store the custom executable path
        self.playwright: Optional[Any] = None  # Placeholder for Playwright instance
        self.browser: Optional[Any] = None  # Placeholder for browser instance
        self.page: Optional[Any] = None  # Placeholder for page object


    def verbose_output(self, message: str) -> None:
        """
        Writes a message to the logger if VERBOSE is enabled.

        :param message: Message to write
        :return: None
        """

        if VERBOSE and self.logger is not None:  # Only chatty when asked to
            self.logger.write(message)


    def launch_browser(self) -> None:
        """
        Launches a headless Chromium browser and opens a page.

        :return: None
        """

        self.verbose_output(f"{BackgroundColors.GREEN}Launching Chromium browser...{Style.RESET_ALL}")
        self.playwright = sync_playwright().start()  # Start Playwright synchronous driver
        launch_options = {"headless": self.headless, "args": list(LAUNCH_ARGS)}  # Configure browser launch options
        if self.executable_path:  # Verify if custom Chrome executable path is provided
            launch_options["executable_path"] = self.executable_path  # Set custom executable path in launch options
            self.verbose_output(f"{BackgroundColors.GREEN}Using Chrome executable: {BackgroundColors.CYAN}{self.executable_path}{Style.RESET_ALL}")

        try:  # Release the driver if the launch fails
            self.browser = self.playwright.chromium.launch(**launch_options)  # Launch Chromium browser with configured options
            self.page = self.browser.new_page()  # Create new browser page/tab
            self.page.set_viewport_size(VIEWPORT)  # Set viewport dimensions
        except Exception:
            self.close_browser()  # Do not leak the driver process
            raise

        self.verbose_output(f"{BackgroundColors.GREEN}Browser launched successfully.{Style.RESET_ALL}")


    def load_page(self, url: str) -> None:
        """
        Navigates to a URL and waits for the DOM to be loaded.
        Raises on navigation errors and timeouts so the request can be retried.

        :param url: URL to navigate to
        :return: None
        """

        if self.page is None:  # Launch lazily on the first render
            self.launch_browser()

        self.verbose_output(f"{BackgroundColors.GREEN}Loading page: {BackgroundColors.CYAN}{url}{Style.RESET_ALL}")
        self.page.goto(url, timeout=PAGE_LOAD_TIMEOUT, wait_until="domcontentloaded")  # Navigate and wait for the DOM


    def wait_for_ready(self, selector: Optional[str], timeout: int) -> None:
        """
        Waits briefly for a readiness selector. A timeout is tolerated.

        :param selector: CSS selector signalling that the content is rendered
        :param timeout: Maximum wait in milliseconds
        :return: None
        """

        if not selector or self.page is None:  # Nothing to wait for
            return

        try:  # Attempt to wait for the readiness selector
            self.page.wait_for_selector(selector, timeout=timeout)  # Wait for the selector to attach
        except PlaywrightTimeoutError:  # Partial pages are still extracted
            self.verbose_output(f"{BackgroundColors.YELLOW}Readiness selector {BackgroundColors.CYAN}{selector}{BackgroundColors.YELLOW} not found, continuing anyway...{Style.RESET_ALL}")


    def get_rendered_html(self) -> str:
        """
        Gets the fully rendered HTML content after JavaScript execution.

        :return: Rendered HTML string
        """

        if self.page is None:  # Validate that page instance exists before extracting HTML
            raise RuntimeError("Page instance not initialized")

        return self.page.content()  # Extract fully rendered HTML content from page


    def render(self, url: str, wait_selector: Optional[str] = None, wait_timeout: int = DEFAULT_WAIT_TIMEOUT) -> str:
        """
        Loads a page, waits for its readiness selector and returns the rendered HTML.

        :param url: URL to render
        :param wait_selector: Optional CSS selector signalling readiness
        :param wait_timeout: Maximum wait for the selector in milliseconds
        :return: Rendered HTML string
        """

        self.load_page(url)  # Navigate, raising on failure
        self.wait_for_ready(wait_selector, wait_timeout)  # Short readiness wait
        return self.get_rendered_html()  # Snapshot the rendered DOM


    def close_browser(self) -> None:
        """
        Safely closes the page, browser and Playwright instances.

        :return: None
        """

        self.verbose_output(f"{BackgroundColors.GREEN}Closing browser...{Style.RESET_ALL}")
        try:  # Attempt to close browser resources with error handling
            if self.page:  # Verify if page instance exists before closing
                self.page.close()  # Close the browser page to release resources
            if self.browser:  # Verify if browser instance exists before closing
                self.browser.close()  # Close the browser to release resources
            if self.playwright:  # Verify if Playwright instance exists before stopping
                self.playwright.stop()  # Stop the Playwright instance
        except Exception as e:
            if self.logger is not None:  # Cleanup problems are reported, not raised
                self.logger.write(f"{BackgroundColors.YELLOW}Warning during browser close: {e}{Style.RESET_ALL}")
        finally:
            self.page = None  # Forget the closed page
            self.browser = None  # Forget the closed browser
            self.playwright = None  # Forget the stopped driver
