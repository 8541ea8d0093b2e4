# =============================================================================
# bridge_core/models/entities.py
# Value Types for Storefront Records
# =============================================================================
"""
Dataclasses for the records the services build themselves.

Collections are stored as plain JSON dicts; these types are used where
the data layer creates or interprets a record (cart, orders, stats,
enquiries, traffic logs) and are converted with ``to_record()``.
"""

from __future__ import annotations
import time
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


class SaveStatus(Enum):
    """Sync indicator shown in the admin surface."""
    IDLE = "idle"
    SAVING = "saving"
    SAVED = "saved"
    ERROR = "error"
    MIGRATING = "migrating"


class EnquiryStatus(Enum):
    UNREAD = "unread"
    READ = "read"
    ARCHIVED = "archived"


class AdminRole(Enum):
    OWNER = "owner"
    ADMIN = "admin"


class OrderStatus(Enum):
    PENDING_PAYMENT = "pending_payment"
    PAID = "paid"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentMethod(Enum):
    YOCO = "yoco"
    PAYFAST = "payfast"
    MANUAL_EFT = "manual_eft"


@dataclass
class CartItem:
    """A product line in the shopping cart."""
    id: str
    name: str
    price: float
    quantity: int = 1
    sku: str = ""
    isDirectSale: bool = False
    stockQuantity: Optional[int] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_product(cls, product: Dict[str, Any], quantity: int = 1) -> CartItem:
        known = {"id", "name", "price", "sku", "isDirectSale", "stockQuantity"}
        return cls(
            id=str(product["id"]),
            name=product.get("name", ""),
            price=float(product.get("price") or 0),
            quantity=quantity,
            sku=product.get("sku", ""),
            isDirectSale=bool(product.get("isDirectSale", False)),
            stockQuantity=product.get("stockQuantity"),
            extra={k: v for k, v in product.items() if k not in known},
        )

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> CartItem:
        record = dict(record)
        quantity = int(record.pop("quantity", 1))
        return cls.from_product(record, quantity)

    @property
    def line_total(self) -> float:
        return self.price * self.quantity

    def to_record(self) -> Dict[str, Any]:
        record = dict(self.extra)
        record.update({
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "quantity": self.quantity,
            "sku": self.sku,
            "isDirectSale": self.isDirectSale,
            "stockQuantity": self.stockQuantity,
        })
        return record


@dataclass
class OrderItem:
    id: str
    orderId: str
    productId: str
    productName: str
    quantity: int
    price: float

    def to_record(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Order:
    id: str
    customerName: str
    customerEmail: str
    shippingAddress: str
    total: float
    status: OrderStatus
    paymentMethod: PaymentMethod
    createdAt: int = field(default_factory=now_ms)
    userId: Optional[str] = None
    items: List[OrderItem] = field(default_factory=list)

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.userId,
            "customerName": self.customerName,
            "customerEmail": self.customerEmail,
            "shippingAddress": self.shippingAddress,
            "total": self.total,
            "status": self.status.value,
            "paymentMethod": self.paymentMethod.value,
            "createdAt": self.createdAt,
            "items": [item.to_record() for item in self.items],
        }


@dataclass
class ProductStats:
    """Per-product counters, upserted incrementally."""
    productId: str
    views: int = 0
    clicks: int = 0
    shares: int = 0
    totalViewTime: float = 0.0
    lastUpdated: int = field(default_factory=now_ms)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> ProductStats:
        return cls(
            productId=str(record["productId"]),
            views=int(record.get("views") or 0),
            clicks=int(record.get("clicks") or 0),
            shares=int(record.get("shares") or 0),
            totalViewTime=float(record.get("totalViewTime") or 0),
            lastUpdated=int(record.get("lastUpdated") or now_ms()),
        )

    def to_record(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Review:
    id: str
    productId: str
    userName: str
    rating: int
    comment: str
    createdAt: int = field(default_factory=now_ms)

    def to_record(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class TrafficEvent:
    """One row of the traffic log."""
    id: str
    type: str
    text: str
    time: str
    timestamp: int
    source: Optional[str] = None

    def to_record(self) -> Dict[str, Any]:
        record = asdict(self)
        if record["source"] is None:
            record.pop("source")
        return record
