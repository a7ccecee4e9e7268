"""
Catalog and Cart Models

Pydantic projections of backend rows (products, categories, wilayas, site
settings, about-us content), the cart line item and the order draft sent to
the backend at checkout.
"""

from enum import Enum
from typing import Iterable, List, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class CatalogModel(BaseModel):
    """Base model for cached backend projections."""

    model_config = ConfigDict(
        populate_by_name=True, extra="ignore", coerce_numbers_to_str=True
    )


class ProductVariant(CatalogModel):
    id: str
    product_id: str
    size: str
    color_name: str
    color_hex: str
    quantity: int = 0


class ProductColor(CatalogModel):
    name: str
    hex: str


class Product(CatalogModel):
    """Product as shown in the storefront."""

    id: str
    name: str
    price: float
    discount_price: Optional[float] = None
    category: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    description: Optional[str] = None
    variants: List[ProductVariant] = Field(default_factory=list)
    sizes: List[str] = Field(default_factory=list)
    colors: List[ProductColor] = Field(default_factory=list)


class Category(CatalogModel):
    id: str
    name: str
    image_url: Optional[str] = None
    display_order: int = 0


class Wilaya(CatalogModel):
    """Delivery zone with its two delivery fees."""

    id: str
    name: str
    delivery_home: float
    delivery_post: float

    def delivery_fee(self, delivery_type: "DeliveryType") -> float:
        if delivery_type == DeliveryType.HOME:
            return self.delivery_home
        return self.delivery_post


class SiteSettings(CatalogModel):
    site_name: str
    logo_url: str
    favicon_url: Optional[str] = None
    primary_color: str
    secondary_color: str
    announcement_text: Optional[str] = None
    hero_image_url: Optional[str] = None
    hero_title: Optional[str] = None
    hero_subtitle: Optional[str] = None
    delivery_company_name: Optional[str] = None


class AboutFeature(CatalogModel):
    title: str
    description: str
    icon: Optional[str] = None


class AboutUsContent(CatalogModel):
    title: str
    content: str
    features: List[AboutFeature] = Field(default_factory=list)

    @field_validator("features", mode="before")
    @classmethod
    def default_features(cls, v):
        return v or []


class CartLineItem(CatalogModel):
    """
    One line of the shopping cart.

    A line is identified by ``(product_id, selected_size, selected_color)``;
    the same product in another size or colour is a separate line.
    """

    product_id: str = Field(validation_alias=AliasChoices("product_id", "id"))
    name: str = ""
    price: float
    discount_price: Optional[float] = None
    selected_size: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("selected_size", "selectedSize")
    )
    selected_color: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("selected_color", "selectedColor")
    )
    quantity: Optional[int] = Field(default=None, ge=0)
    images: List[str] = Field(default_factory=list)
    category: Optional[str] = None

    @property
    def identity(self) -> Tuple[str, Optional[str], Optional[str]]:
        return (self.product_id, self.selected_size, self.selected_color)

    @property
    def unit_price(self) -> float:
        """Discounted price when present, base price otherwise."""
        return self.discount_price if self.discount_price is not None else self.price

    @property
    def billed_quantity(self) -> int:
        """Quantity charged for; an absent quantity is one, zero stays zero."""
        return 1 if self.quantity is None else self.quantity

    @classmethod
    def from_product(
        cls,
        product: Product,
        size: Optional[str] = None,
        color: Optional[str] = None,
        quantity: int = 1,
    ) -> "CartLineItem":
        return cls(
            product_id=product.id,
            name=product.name,
            price=product.price,
            discount_price=product.discount_price,
            selected_size=size,
            selected_color=color,
            quantity=quantity,
            images=product.images,
            category=product.category,
        )


class DeliveryType(str, Enum):
    HOME = "home"
    POST = "post"


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class OrderItemDraft(BaseModel):
    """Order item row, snapshotting product name and unit price."""

    product_id: Optional[str]
    product_name: str
    price: float
    quantity: int = Field(ge=1)
    selected_size: Optional[str] = None
    selected_color: Optional[str] = None

    def to_row(self, order_id: str) -> dict:
        return {"order_id": order_id, **self.model_dump()}


class OrderDraft(BaseModel):
    """Customer order assembled at checkout; written once, never cached."""

    customer_first_name: str = Field(min_length=1)
    customer_last_name: str = Field(min_length=1)
    customer_phone: str = Field(min_length=1)
    wilaya_id: str
    municipality_name: str
    address: Optional[str] = None
    delivery_type: DeliveryType = DeliveryType.HOME
    total_price: float = Field(ge=0)
    instagram_account: Optional[str] = None
    items: List[OrderItemDraft] = Field(min_length=1)

    @field_validator("wilaya_id", mode="before")
    @classmethod
    def wilaya_id_as_string(cls, v):
        return str(v)

    @field_validator("instagram_account", "address", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @classmethod
    def from_cart(
        cls,
        items: Iterable[CartLineItem],
        wilaya: Wilaya,
        delivery_type: DeliveryType,
        *,
        first_name: str,
        last_name: str,
        phone: str,
        municipality_name: str,
        address: Optional[str] = None,
        instagram_account: Optional[str] = None,
    ) -> "OrderDraft":
        """
        Build an order from cart lines.

        Zero-quantity lines are skipped. The total is the discounted cart
        subtotal plus the wilaya's fee for the chosen delivery type.
        """
        order_items = [
            OrderItemDraft(
                product_id=line.product_id,
                product_name=line.name,
                price=line.unit_price,
                quantity=line.billed_quantity,
                selected_size=line.selected_size,
                selected_color=line.selected_color,
            )
            for line in items
            if line.billed_quantity > 0
        ]
        subtotal = sum(item.price * item.quantity for item in order_items)

        return cls(
            customer_first_name=first_name,
            customer_last_name=last_name,
            customer_phone=phone,
            wilaya_id=wilaya.id,
            municipality_name=municipality_name,
            address=address,
            delivery_type=delivery_type,
            total_price=subtotal + wilaya.delivery_fee(delivery_type),
            instagram_account=instagram_account,
            items=order_items,
        )

    def to_order_row(self) -> dict:
        row = self.model_dump(mode="json", exclude={"items"})
        row["status"] = OrderStatus.PENDING.value
        return row
