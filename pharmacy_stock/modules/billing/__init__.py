from .costing import CostingResult, compute_profit_and_margin, price_per_item, sales_line_amount, simple_margin
from .events import InventoryEvents
from .service import InventoryService, MutationResult, stock_deltas
from .validators import validate_purchase_bill, validate_sales_bill

__all__ = [
    "CostingResult",
    "compute_profit_and_margin",
    "price_per_item",
    "sales_line_amount",
    "simple_margin",
    "InventoryEvents",
    "InventoryService",
    "MutationResult",
    "stock_deltas",
    "validate_purchase_bill",
    "validate_sales_bill",
]
