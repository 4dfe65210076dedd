APP_NAME = "Pharmacy Stock"
DATA_DIR = "data"
DB_FILE_NAME = "pharmacy.db"
LOG_DIR = "logs"
AUDIT_LOG_FILE_NAME = "stock_audit.log"

TABLE_SCHEMA_VERSION = "schema_version"
TABLE_DOCUMENTS = "documents"
SCHEMA_VERSION = "1.0.0"

# ---- document collections ----
KEY_PRODUCTS = "products"
KEY_PURCHASE_BILLS = "purchaseBills"
KEY_SALES_BILLS = "salesBills"
KEY_LAST_PURCHASE_BILL_NUMBER = "lastBillNumber"
KEY_LAST_SALES_BILL_NUMBER = "lastSalesBillNumber"
KEY_HISTORY = "history"
KEY_UNDO_STACK = "undoStack"
KEY_CUSTOMERS = "customers"
KEY_SUPPLIERS = "suppliers"

# ---- bill kinds ----
BILL_PURCHASE = "purchase"
BILL_SALES = "sales"

# ---- dates ----
EXPIRY_FORMAT = "MM-YYYY"
BILL_DATE_FORMAT = "%d-%m-%Y"
EXPIRY_HORIZON_MONTHS = 2

UNDO_DEPTH = 1
UNDO_HISTORY_ACTION = "Undid last stock adjustment."
