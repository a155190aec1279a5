# backend/modules/sales_reports/constants.py

"""
Constants for the sales reports module.

Centralizes limits, thresholds and placeholder labels.
"""

# Retrieval
DEFAULT_ORDER_BATCH_SIZE = 1000  # Cap of the indexed query tier

# Breakdown Limits
TOP_CUSTOMERS_LIMIT = 10
PEAK_HOURS_LIMIT = 5
ITEM_COMBINATION_LIMIT = 10
ITEM_COMBINATION_MAX_ITEMS = 3  # Distinct names forming a combination key
ITEM_COMBINATION_MIN_FREQUENCY = 2  # Combinations must repeat to be kept
ITEM_COMBINATION_SEPARATOR = " + "
DEFAULT_DETAILED_ORDER_LIMIT = 100

# Placeholder Labels
UNCATEGORIZED_LABEL = "Uncategorized"
UNKNOWN_LABEL = "Unknown"
ANONYMOUS_LABEL = "Anonymous"
UNKNOWN_STAFF_ID = "unknown"
ANONYMOUS_CUSTOMER_KEY = "anonymous"

# Insight Thresholds
PROFITABILITY_TREND_THRESHOLD = 5.0  # +/- revenue growth percentage
TABLE_UTILIZATION_THRESHOLD = 60.0
REPEAT_CUSTOMER_THRESHOLD = 30.0
COLLECTION_RATE_THRESHOLD = 90.0
PEAK_HOUR_CONCENTRATION_THRESHOLD = 25.0  # Share of orders in the busiest hour
TOP_ITEM_DEPENDENCY_THRESHOLD = 40.0  # Revenue share of the best seller

# Synthetic Data
SYNTHETIC_ORDERS_PER_DAY = (8, 20)
SYNTHETIC_ITEMS_PER_ORDER = (1, 4)
SYNTHETIC_MAX_DAYS = 92
SYNTHETIC_TAX_RATE = 0.05
SYNTHETIC_ORDER_NOTE = "Synthetic demonstration order"

# Report Layout (points)
PAGE_MARGIN = 40
PAGE_BOTTOM_THRESHOLD = 60  # Cursor below this starts a new page
SECTION_MIN_SPACE = 120  # Space a section title needs before its table
SECTION_SPACING = 18
FALLBACK_LINE_HEIGHT = 14
CREDIT_TRANSACTION_DISPLAY_LIMIT = 15
TABLE_DISPLAY_LIMIT = 10

# Export
EXPORT_FORMATS = ["csv", "xlsx"]

# Error Messages
ERROR_MESSAGES = {
    "invalid_date_range": "Invalid date range. End date must not be before start date.",
    "orders_unavailable": "Failed to fetch orders for analytics",
    "analytics_failed": "Failed to generate analytics",
    "report_failed": "Failed to generate report",
    "export_failed": "Failed to export analytics",
}
