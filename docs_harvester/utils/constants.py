"""
Shared constants for the harvester.

Contains default configuration values and the selector/marker tables the
content and navigation heuristics are driven by. The tables are tuned to a
single documentation site's markup.
"""

# Default user agent string for the browser context
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)

# Extra headers sent with every request
DEFAULT_HEADERS = {
    "Accept-Language": "en-US,en;q=0.9",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}

DEFAULT_VIEWPORT = {"width": 1200, "height": 800}

# Default page load timeout in milliseconds (for Playwright)
DEFAULT_PAGE_TIMEOUT = 30000

# Attempts per page before it is reported as failed
DEFAULT_RETRIES = 3

# Backoff base in seconds; attempt N waits base * N
DEFAULT_RETRY_DELAY = 2.0

# Delay between successfully crawled pages in seconds
DEFAULT_CRAWL_DELAY = 2.0

DEFAULT_OUTPUT_DIR = "./output"

# Rendering strategies
STRATEGY_BASIC = "basic"
STRATEGY_ENHANCED = "enhanced"
STRATEGY_CLEAN = "clean"
PDF_STRATEGIES = (STRATEGY_BASIC, STRATEGY_ENHANCED, STRATEGY_CLEAN)
DEFAULT_STRATEGY = STRATEGY_ENHANCED

# Selector wait timeouts in milliseconds
PRIMARY_WAIT_TIMEOUT = 5000
FALLBACK_WAIT_TIMEOUT = 5000
BODY_TEXT_WAIT_TIMEOUT = 10000
NAVIGATION_WAIT_TIMEOUT = 10000

# Settle intervals in seconds
EXPAND_SETTLE = 0.8
EXPAND_FINAL_SETTLE = 1.0
STYLE_SETTLE = 1.0

# A region needs more text than this to be accepted as content
MIN_CONTENT_LENGTH = 100

# Primary region length above which the enhanced PDF keeps only that region
ISOLATE_PRIMARY_LENGTH = 1000

WORDS_PER_MINUTE = 200

PRIMARY_CONTENT_SELECTOR = "#markdown"

FALLBACK_CONTENT_SELECTORS = (
    "main",
    ".main-content",
    "article",
    ".content",
    ".post-content",
    ".article-content",
    '[role="main"]',
    ".prose",
    ".markdown-body",
)

# Removed from the page body before text extraction
CHROME_SELECTORS = (
    "nav", "header", "footer",
    ".nav", ".header", ".footer", ".sidebar", ".menu", ".navigation",
    ".breadcrumb", ".pagination",
    ".comments", ".comment", ".comment-section", ".comment-thread",
    ".comment-list", ".comment-form", ".comments-container",
    ".advertisement", ".ads",
    ".discussion", ".forum", ".chat", ".chat-box", ".chat-widget",
)

# Removed from the live document before an enhanced print; headers stay
PRINT_CHROME_SELECTORS = (
    "nav", ".nav", ".navigation", ".sidebar", ".menu", ".breadcrumb",
    ".pagination",
    ".comments", ".comment", ".comment-section", ".comment-thread",
    ".comment-list", ".comment-form", ".comments-container",
    ".advertisement", ".ads", ".social-share", ".related-posts",
    "footer", ".footer",
    ".discussion", ".forum", ".chat", ".chat-box", ".chat-widget",
)

# Never part of rendered text
INVISIBLE_TAGS = ("script", "style", "noscript", "template")

EXPANDABLE_SELECTORS = (
    ".MuiAccordionSummary-root",
    '[role="button"][aria-expanded]',
    ".accordion-header",
    ".collapse-header",
    '[data-toggle="collapse"]',
)

# Text is cut from the first occurrence of any marker to the end
BOILERPLATE_MARKERS = (
    "Login to track your progress",
    "Not sure where your gaps are?",
    "Schedule a mock interview",
    "Login to Join the Discussion",
    "Your account is free",
    "Sort By",
    "Questions",
    "Learn",
    "Links",
    "Legal",
    "Contact",
    "©",
    "All rights reserved",
)

# Sidebar navigation of the documentation site
NAVIGATION_CONTAINER_SELECTOR = (
    ".MuiDrawer-root.MuiDrawer-anchorLeft.MuiDrawer-docked.min-h-screen"
)
DOCS_ROOT_PREFIX = "/learn"
EXCLUDED_PATH_FRAGMENTS = ("/_next/", "/api/")
BACK_LINK_TEXT = "Back to Main"
BRAND_NAME = "Hello Interview"
