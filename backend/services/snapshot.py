"""
Point-in-time view of the collections an analytics request needs.

Every view is a pure function of a Snapshot plus its parameters. Loading
happens once per request: the requested collections are fetched
concurrently, decoded, and then handed to the analytics layer untouched.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from services.records import (
    Booking, Goal, Guest, PosCategory, PosProduct, PosTransaction,
    PosTransactionItem, Room, decode_collection,
)

logger = logging.getLogger(__name__)

ROOMS = "rooms"
BOOKINGS = "bookings"
POS_TRANSACTIONS = "pos_transactions"
POS_TRANSACTION_ITEMS = "pos_transaction_items"
POS_PRODUCTS = "pos_products"
POS_CATEGORIES = "pos_categories"
GUESTS = "guests"
GOALS = "goals"

COLLECTION_MODELS = {
    ROOMS: Room,
    BOOKINGS: Booking,
    POS_TRANSACTIONS: PosTransaction,
    POS_TRANSACTION_ITEMS: PosTransactionItem,
    POS_PRODUCTS: PosProduct,
    POS_CATEGORIES: PosCategory,
    GUESTS: Guest,
    GOALS: Goal,
}

# Collections behind the headline metrics (revenue, occupancy, ADR, RevPAR)
CORE_COLLECTIONS = (ROOMS, BOOKINGS, POS_TRANSACTIONS)
# Extra collections needed to break POS revenue down by product/category
POS_DETAIL_COLLECTIONS = (POS_TRANSACTION_ITEMS, POS_PRODUCTS, POS_CATEGORIES)


@dataclass
class Snapshot:
    rooms: List[Room] = field(default_factory=list)
    bookings: List[Booking] = field(default_factory=list)
    pos_transactions: List[PosTransaction] = field(default_factory=list)
    pos_transaction_items: List[PosTransactionItem] = field(default_factory=list)
    pos_products: List[PosProduct] = field(default_factory=list)
    pos_categories: List[PosCategory] = field(default_factory=list)
    guests: List[Guest] = field(default_factory=list)
    goals: List[Goal] = field(default_factory=list)
    decode_errors: Dict[str, int] = field(default_factory=dict)

    @property
    def total_rooms(self) -> int:
        """Room inventory, counted from the rooms collection"""
        return len(self.rooms)

    def rooms_by_id(self) -> Dict[str, Room]:
        return {room.id: room for room in self.rooms}

    def products_by_id(self) -> Dict[str, PosProduct]:
        return {product.id: product for product in self.pos_products}

    def categories_by_id(self) -> Dict[str, PosCategory]:
        return {category.id: category for category in self.pos_categories}

    def items_by_transaction(self) -> Dict[str, List[PosTransactionItem]]:
        grouped: Dict[str, List[PosTransactionItem]] = {}
        for item in self.pos_transaction_items:
            grouped.setdefault(item.transaction_id, []).append(item)
        return grouped


async def load_snapshot(db, collections: Iterable[str] = CORE_COLLECTIONS) -> Snapshot:
    """
    Fetch and decode collections into a Snapshot.

    Args:
        db: FirebaseClient (or any object with an async get_collection)
        collections: Collection names to load; others stay empty

    Returns:
        Snapshot with decode error counts per collection

    Raises:
        ValueError: Unknown collection name
        FirebaseAPIError: Any fetch failed
    """
    names = list(dict.fromkeys(collections))
    unknown = [name for name in names if name not in COLLECTION_MODELS]
    if unknown:
        raise ValueError(f"Unknown collections: {', '.join(unknown)}")

    raw_collections = await asyncio.gather(*(db.get_collection(name) for name in names))

    snapshot = Snapshot()
    for name, raw in zip(names, raw_collections):
        records, skipped = decode_collection(raw, COLLECTION_MODELS[name], name)
        setattr(snapshot, name, records)
        if skipped:
            snapshot.decode_errors[name] = skipped

    logger.debug(f"Loaded snapshot: {', '.join(f'{n}={len(getattr(snapshot, n))}' for n in names)}")
    return snapshot
