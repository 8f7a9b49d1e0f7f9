"""Cart models with Decimal-based pricing."""
import copy
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

from chronos.services.models import Product
from chronos.services.money import add, multiply, to_decimal

TAX_RATE = Decimal("0.08")


@dataclass
class CartItem:
    """
    Single line in the cart, keyed by (product_id, selected_band).

    brand, model, price, images, in_stock and stock_count are a snapshot
    taken when the product was added; they are not refreshed afterwards.
    """
    product_id: int
    quantity: int
    selected_band: str = ""
    brand: str = ""
    model: str = ""
    price: Decimal = Decimal("0")
    images: List[str] = field(default_factory=list)
    in_stock: bool = False
    stock_count: int = 0

    def __post_init__(self):
        self.price = to_decimal(self.price)
        self.selected_band = self.selected_band or ""

    @property
    def key(self) -> tuple[int, str]:
        return (self.product_id, self.selected_band)

    @property
    def line_total(self) -> Decimal:
        """Price for all units of this line."""
        return multiply(self.price, self.quantity)

    @classmethod
    def from_product(cls, product: Product, product_id: int, quantity: int, selected_band: str = "") -> "CartItem":
        """New line with a snapshot of the product's display fields."""
        return cls(
            product_id=product_id,
            quantity=quantity,
            selected_band=selected_band,
            brand=product.brand,
            model=product.model,
            price=product.price,
            images=list(product.images),
            in_stock=product.in_stock,
            stock_count=product.stock_count,
        )

    def to_dict(self) -> dict:
        """Convert to the persisted (camelCase) shape."""
        return {
            "productId": self.product_id,
            "selectedBand": self.selected_band,
            "quantity": self.quantity,
            "brand": self.brand,
            "model": self.model,
            "price": str(self.price),
            "images": list(self.images),
            "inStock": self.in_stock,
            "stockCount": self.stock_count,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CartItem":
        """Create from the persisted shape; raises KeyError/ValueError/TypeError on bad data."""
        return cls(
            product_id=int(data["productId"]),
            quantity=int(data["quantity"]),
            selected_band=str(data.get("selectedBand") or ""),
            brand=data.get("brand") or "",
            model=data.get("model") or "",
            price=to_decimal(data.get("price")),
            images=list(data.get("images") or []),
            in_stock=bool(data.get("inStock", False)),
            stock_count=int(data.get("stockCount") or 0),
        )


@dataclass
class Cart:
    """Shopping cart; totals are always derived from the items."""
    items: List[CartItem] = field(default_factory=list)

    @property
    def subtotal(self) -> Decimal:
        return sum((item.line_total for item in self.items), Decimal("0"))

    @property
    def tax(self) -> Decimal:
        return multiply(self.subtotal, TAX_RATE)

    @property
    def total(self) -> Decimal:
        subtotal = self.subtotal
        return add(subtotal, multiply(subtotal, TAX_RATE))

    @property
    def item_count(self) -> int:
        """Total number of units in the cart."""
        return sum(item.quantity for item in self.items)

    def find(self, product_id: int, selected_band: str = "") -> Optional[CartItem]:
        return next(
            (item for item in self.items if item.key == (product_id, selected_band)),
            None,
        )

    def copy(self) -> "Cart":
        return copy.deepcopy(self)

    def to_dict(self) -> dict:
        """Convert to dictionary for storage; totals are included for readers of the raw JSON."""
        return {
            "items": [item.to_dict() for item in self.items],
            "subtotal": str(self.subtotal),
            "tax": str(self.tax),
            "total": str(self.total),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Cart":
        """
        Create from dictionary.

        Stored totals are ignored. Lines with a non-positive quantity are
        dropped and lines sharing a key are merged, so a hand-edited or
        stale document still yields a valid cart.
        """
        cart = cls()
        for raw_item in data.get("items") or []:
            item = CartItem.from_dict(raw_item)
            if item.quantity <= 0:
                continue
            existing = cart.find(*item.key)
            if existing:
                existing.quantity += item.quantity
            else:
                cart.items.append(item)
        return cart
