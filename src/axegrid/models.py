"""Centralized defaults and constants."""

# Grid
DEFAULT_REGION = "us-west-1"
DEFAULT_DATA_CENTER = "us-west"
DASHBOARD_URL_TEMPLATE = "https://app.saucelabs.com/tests/{id}"
ONDEMAND_HOST_TEMPLATE = "ondemand.{region}.saucelabs.com"
API_HOST_TEMPLATE = "api.{region}.saucelabs.com"
DEFAULT_HUB_PATH = "/wd/hub"
DEFAULT_PROBE_TIMEOUT = 10.0  # seconds

# Target
DEFAULT_TEST_URL = "https://webdriver.io/"

# Browser
DEFAULT_BROWSER_NAME = "chrome"
DEFAULT_BROWSER_VERSION = "latest"
DEFAULT_PLATFORM_NAME = "macOS 12"
DEFAULT_VIEWPORT = (2048, 1536)
NAVIGATION_TIMEOUT_MS = 30_000

TRANSPORT_PLAYWRIGHT = "playwright"
TRANSPORT_WEBDRIVER = "webdriver"
TRANSPORTS = (TRANSPORT_PLAYWRIGHT, TRANSPORT_WEBDRIVER)

# Audit engine
DEFAULT_RULE_TAGS = ("wcag2a", "wcag2aa")
RESULT_TYPES = ("violations", "passes", "incomplete", "inapplicable")
DEFAULT_AXE_VERSION = "4.10.2"
AXE_CDN_TEMPLATE = "https://cdnjs.cloudflare.com/ajax/libs/axe-core/{version}/axe.min.js"

# Output
DEFAULT_OUTPUT_DIR = ".tmp"
DEFAULT_OUTPUT_FILENAME = "axe-report.json"
SCREENSHOT_FILENAME = "violations-screenshot.png"
MAX_NODES_SHOWN = 3

# Publishing
RESULT_TAGS = ("accessibility", "axe-core")
FRAMEWORK_NAMES = {
    TRANSPORT_PLAYWRIGHT: "playwright-axe",
    TRANSPORT_WEBDRIVER: "webdriver-axe",
}
AUDIT_SCRIPT_TIMEOUT = 120  # seconds, async in-page axe.run over WebDriver
AXE_DOWNLOAD_TIMEOUT = 20  # seconds
