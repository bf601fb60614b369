from .client import create_client, close_client, health_check
from .indexer import ensure_transactions_index, replace_all
from .query_builders import month_filter, q_listing, q_statistics, q_price_range, q_category_breakdown
from .executors import execute_listing, execute_statistics, execute_price_range, execute_category_breakdown, execute_combined
