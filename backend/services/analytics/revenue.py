"""
Revenue views: monthly split, categories, POS detail and summary.

Room revenue is attributed to the month a booking was made; POS revenue
to the day the transaction was created. POS line items in the food
category count as restaurant revenue and every other line item (or the
subtotal of a transaction without items) as services.
"""
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional

from services.analytics.metrics import (
    CategoryRevenue,
    bookings_booked_between,
    is_completed_sale,
    pos_revenue,
    revenue_breakdown,
    room_revenue,
    sales_between,
    split_pos_revenue,
)
from utils import MONTH_NAMES, in_window, month_bounds, months_between, round_half_up

TOP_PRODUCTS_LIMIT = 10
UNCATEGORIZED = "other"
UNKNOWN_PAYMENT_METHOD = "unknown"


@dataclass
class MonthlyRevenue:
    month: str
    year: int
    rooms: float
    restaurant: float
    spa: float
    other: float

    @property
    def total(self) -> float:
        return self.rooms + self.restaurant + self.spa + self.other


@dataclass
class PosCategoryRevenue:
    category: str
    category_name: str
    revenue: float
    transaction_count: int


@dataclass
class PaymentMethodShare:
    method: str
    amount: float
    count: int
    percentage: float


@dataclass
class TopProduct:
    id: str
    name: str
    category: str
    quantity_sold: int
    revenue: float
    price: float


@dataclass
class RevenueSummary:
    total_room_revenue: float
    total_pos_revenue: float
    total_revenue: float
    avg_transaction_value: float
    total_transactions: int
    tax_collected: float


def monthly_revenue(snapshot, start: date, end: date) -> List[MonthlyRevenue]:
    """
    Revenue split by source for every calendar month the window touches.

    Whole months are measured, so the first and last month include days
    outside [start, end].
    """
    months = []
    for year, month in months_between(start, end):
        month_start, month_end = month_bounds(year, month)
        bookings = bookings_booked_between(snapshot.bookings, month_start, month_end)
        split = split_pos_revenue(snapshot, sales_between(snapshot.pos_transactions, month_start, month_end))
        months.append(MonthlyRevenue(
            month=MONTH_NAMES[month - 1],
            year=year,
            rooms=room_revenue(bookings),
            restaurant=split["foods"],
            spa=split["services"],
            other=0.0,
        ))
    return months


def revenue_by_category(snapshot, start: Optional[date] = None, end: Optional[date] = None) -> List[CategoryRevenue]:
    """Rooms / Foods / Services / Other totals, zero categories dropped"""
    return revenue_breakdown(snapshot, start, end).categories()


def _completed_items(snapshot, start: Optional[date], end: Optional[date]):
    transactions = {
        t.id: t for t in snapshot.pos_transactions
        if is_completed_sale(t) and in_window(t.created_on, start, end)
    }
    return [item for item in snapshot.pos_transaction_items if item.transaction_id in transactions]


def pos_category_revenue(snapshot, start: Optional[date] = None, end: Optional[date] = None) -> List[PosCategoryRevenue]:
    """POS line-item revenue per product category, with distinct transaction counts"""
    products = snapshot.products_by_id()
    categories = snapshot.categories_by_id()

    revenue: Dict[str, float] = {}
    transactions: Dict[str, set] = {}
    for item in _completed_items(snapshot, start, end):
        product = products.get(item.product_id) if item.product_id else None
        category_id = (product.category_id if product else None) or UNCATEGORIZED
        revenue[category_id] = revenue.get(category_id, 0.0) + item.total_price
        transactions.setdefault(category_id, set()).add(item.transaction_id)

    result = []
    for category_id, amount in revenue.items():
        category = categories.get(category_id)
        result.append(PosCategoryRevenue(
            category=category_id,
            category_name=(category.name if category and category.name else category_id),
            revenue=amount,
            transaction_count=len(transactions[category_id]),
        ))
    return result


def payment_method_breakdown(snapshot, start: Optional[date] = None, end: Optional[date] = None) -> List[PaymentMethodShare]:
    """Completed POS takings per payment method with share of the total"""
    sales = sales_between(snapshot.pos_transactions, start, end)
    total = pos_revenue(sales)

    grouped: Dict[str, PaymentMethodShare] = {}
    for t in sales:
        method = t.payment_method or UNKNOWN_PAYMENT_METHOD
        share = grouped.setdefault(method, PaymentMethodShare(
            method=method[:1].upper() + method[1:],
            amount=0.0,
            count=0,
            percentage=0.0,
        ))
        share.amount += t.total
        share.count += 1

    for share in grouped.values():
        share.percentage = round_half_up(share.amount / total * 100, 1) if total > 0 else 0.0
    return list(grouped.values())


def top_products(
    snapshot,
    limit: int = TOP_PRODUCTS_LIMIT,
    start: Optional[date] = None,
    end: Optional[date] = None
) -> List[TopProduct]:
    """Best-selling POS products by revenue"""
    products = snapshot.products_by_id()
    categories = snapshot.categories_by_id()

    sold: Dict[str, List[float]] = {}
    for item in _completed_items(snapshot, start, end):
        product_id = item.product_id or UNCATEGORIZED
        totals = sold.setdefault(product_id, [0, 0.0])
        totals[0] += item.quantity
        totals[1] += item.total_price

    result = []
    for product_id, (quantity, amount) in sold.items():
        product = products.get(product_id)
        category_id = (product.category_id if product else None) or UNCATEGORIZED
        category = categories.get(category_id)
        result.append(TopProduct(
            id=product_id,
            name=(product.name if product and product.name else product_id),
            category=(category.name if category and category.name else category_id),
            quantity_sold=int(quantity),
            revenue=amount,
            price=product.price if product else 0.0,
        ))

    return sorted(result, key=lambda p: p.revenue, reverse=True)[:limit]


def revenue_summary(snapshot, start: Optional[date] = None, end: Optional[date] = None) -> RevenueSummary:
    bookings = bookings_booked_between(snapshot.bookings, start, end)
    sales = sales_between(snapshot.pos_transactions, start, end)

    rooms_total = room_revenue(bookings)
    pos_total = pos_revenue(sales)

    return RevenueSummary(
        total_room_revenue=rooms_total,
        total_pos_revenue=pos_total,
        total_revenue=rooms_total + pos_total,
        avg_transaction_value=round_half_up(pos_total / len(sales), 2) if sales else 0.0,
        total_transactions=len(sales),
        tax_collected=sum(t.tax for t in sales),
    )
