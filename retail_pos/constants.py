# retail_pos/constants.py
APP_NAME = "Kwiki Mart POS"

DATA_DIR = "data"
DB_FILE_NAME = "pos.db"

TABLE_SCHEMA_VERSION = "schema_version"
SCHEMA_VERSION = "1.0.0"

# ---- Business ----
BUSINESS_NAME = "Kwiki Mart"
BUSINESS_ADDRESS = "123 Main Street, City, State 12345"
BUSINESS_PHONE = "(555) 123-4567"
BUSINESS_EMAIL = "info@kwikimart.com"
BUSINESS_TAX_ID = "123-45-6789"

# 13% HST. Kept as a string so it parses exactly into Decimal.
DEFAULT_TAX_RATE = "0.13"

CURRENCY_CODE = "CAD"
CURRENCY_SYMBOL = "$"

# ---- Limits ----
MAX_LINE_QUANTITY = 1000
MAX_CART_LINES = 100
MAX_RECENT_TRANSACTIONS = 50

# ---- Enumerations ----
PAYMENT_METHODS: tuple[str, ...] = ("cash", "card", "digital", "check", "store_credit")

TRANSACTION_STATUSES: tuple[str, ...] = (
    "pending",
    "completed",
    "cancelled",
    "refunded",
    "partial_refund",
)

# ---- Catalog ----
DEFAULT_CATEGORY = "Uncategorized"

# ---- Receipts ----
TEMPLATES_DIR = "templates"
RECEIPT_TEMPLATE = "receipt.html"
