"""Default configuration values."""

# Tasks in flight at the same time during dispatch
DEFAULT_BATCH_SIZE = 10

# How many failures are kept for display after a dispatch
MAX_ERROR_SAMPLES = 3

DEFAULT_CURRENCY = "ARS"
NO_SUPPLIER_NAME = "No supplier"

GENERIC_FAILURE_MESSAGE = "Unknown error"
AUTO_RETURN_NOTE = "Automatic post-event processing"
DISCARD_NOTE = "Post-event discard of partial leftovers"

# Return modes
RETURN_TO_GLOBAL = "to_global"
RETURN_TO_SUPPLIER = "to_supplier"
RETURN_AUTO = "auto"
RETURN_MODES = (RETURN_TO_GLOBAL, RETURN_TO_SUPPLIER, RETURN_AUTO)

# Ownership modes
PURCHASED = "purchased"
CONSIGNMENT = "consignment"

# Caches the caller must refetch after a successful run
ASSIGNMENT_CACHES = ["stock", "bars", "global-inventory", "recipes"]
RETURN_CACHES = ["stock", "global-inventory"]
DISCARD_CACHES = ["stock"]

# Inventory lot workbook columns
LOT_ID_COLUMN = "Lot ID"
PRODUCT_ID_COLUMN = "Product ID"
PRODUCT_NAME_COLUMN = "Product"
BRAND_COLUMN = "Brand"
VOLUME_COLUMN = "Volume"
SUPPLIER_ID_COLUMN = "Supplier ID"
SUPPLIER_NAME_COLUMN = "Supplier"
TOTAL_QUANTITY_COLUMN = "Total"
ALLOCATED_QUANTITY_COLUMN = "Allocated"
UNIT_COST_COLUMN = "Unit cost"
CURRENCY_COLUMN = "Currency"
OWNERSHIP_COLUMN = "Ownership"

# Optional plan columns (filled in by the operator)
PLAN_QUANTITY_COLUMN = "Quantity per bar"
PLAN_DIRECT_SALE_COLUMN = "Direct sale"
PLAN_PRICE_COLUMN = "Sale price"

# Bar stock workbook columns
BAR_ID_COLUMN = "Bar ID"
BAR_NAME_COLUMN = "Bar"
QUANTITY_COLUMN = "Quantity"
SELL_AS_WHOLE_UNIT_COLUMN = "Sell as whole unit"

LOT_REQUIRED_COLUMNS = [
    LOT_ID_COLUMN,
    PRODUCT_ID_COLUMN,
    PRODUCT_NAME_COLUMN,
    TOTAL_QUANTITY_COLUMN,
]

STOCK_REQUIRED_COLUMNS = [
    BAR_ID_COLUMN,
    PRODUCT_ID_COLUMN,
    SUPPLIER_ID_COLUMN,
    QUANTITY_COLUMN,
    OWNERSHIP_COLUMN,
]

# Every column the loaders know, in their canonical spelling
WORKBOOK_COLUMNS = [
    LOT_ID_COLUMN,
    PRODUCT_ID_COLUMN,
    PRODUCT_NAME_COLUMN,
    BRAND_COLUMN,
    VOLUME_COLUMN,
    SUPPLIER_ID_COLUMN,
    SUPPLIER_NAME_COLUMN,
    TOTAL_QUANTITY_COLUMN,
    ALLOCATED_QUANTITY_COLUMN,
    UNIT_COST_COLUMN,
    CURRENCY_COLUMN,
    OWNERSHIP_COLUMN,
    PLAN_QUANTITY_COLUMN,
    PLAN_DIRECT_SALE_COLUMN,
    PLAN_PRICE_COLUMN,
    BAR_ID_COLUMN,
    BAR_NAME_COLUMN,
    QUANTITY_COLUMN,
    SELL_AS_WHOLE_UNIT_COLUMN,
]

# Rows scanned for the header of an exported workbook
HEADER_SCAN_ROWS = 20

# Output columns for exported assignment files
ASSIGNMENT_OUTPUT_COLUMNS = [
    "Bar ID",
    "Bar",
    "Lot ID",
    "Product",
    "Supplier",
    "Quantity",
    "Direct sale",
    "Sale price (minor units)",
]

# Output columns for exported return files
RETURN_OUTPUT_COLUMNS = [
    "Bar ID",
    "Product ID",
    "Supplier ID",
    "Direct sale",
    "Quantity",
]

# Output directory for the command-line scripts
OUTPUT_DIR = "output"
