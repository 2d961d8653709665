"""Core data models for the EDD MCP server."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal, Union


# Loose upstream fields. EDD sends `false` in place of an absent value for
# several product fields, and a single string or a list for taxonomies.
Thumbnail = Union[str, bool, None]
TermField = Union[str, bool, list[str], None]
SaleDiscounts = Union[str, list[str], None]
LicenseSites = Union[list[str], dict[str, str], None]

# Predefined periods accepted by the stats endpoint's `date` parameter
StatsDatePreset = Literal[
    "today",
    "yesterday",
    "this_week",
    "last_week",
    "this_month",
    "last_month",
    "this_year",
]


class StatsType(Enum):
    """Statistic selector accepted by the stats endpoint."""
    SALES = "sales"
    EARNINGS = "earnings"


class RetryState(Enum):
    """States of a single logical request."""
    ATTEMPTING = "attempting"
    WAITING = "waiting"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class EDDClientConfig:
    """Connection settings for an EDD store API."""
    api_url: str
    api_key: str
    api_token: str

    def __post_init__(self):
        if not self.api_url.endswith("/"):
            object.__setattr__(self, "api_url", f"{self.api_url}/")

    def masked(self) -> dict[str, str]:
        """Return the settings with credentials partially hidden."""
        return {
            "api_url": self.api_url,
            "api_key": _mask(self.api_key),
            "api_token": _mask(self.api_token),
        }


def _mask(value: str, visible: int = 4) -> str:
    if len(value) <= visible:
        return "*" * len(value)
    return "*" * (len(value) - visible) + value[-visible:]


def terms_to_list(value: TermField) -> list[str]:
    """
    Normalize a taxonomy field to a list of names.

    Args:
        value: A single term, a list of terms, or False/None when unset

    Returns:
        List of term names (empty when unset)
    """
    if isinstance(value, bool) or value is None:
        return []
    if isinstance(value, str):
        return [value] if value else []
    return [str(v) for v in value]


@dataclass
class ProductInfo:
    id: int
    slug: str = ""
    title: str = ""
    create_date: str = ""
    modified_date: str = ""
    status: str = ""
    link: str | None = None
    permalink: str | None = None
    content: str | None = None
    excerpt: str | None = None
    thumbnail: Thumbnail = None
    category: TermField = None
    tags: TermField = None

    @property
    def thumbnail_url(self) -> str | None:
        if isinstance(self.thumbnail, str) and self.thumbnail:
            return self.thumbnail
        return None

    @property
    def categories(self) -> list[str]:
        return terms_to_list(self.category)

    @property
    def tag_names(self) -> list[str]:
        return terms_to_list(self.tags)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProductInfo":
        return cls(
            id=data.get("id"),
            slug=data.get("slug", ""),
            title=data.get("title", ""),
            create_date=data.get("create_date", ""),
            modified_date=data.get("modified_date", ""),
            status=data.get("status", ""),
            link=data.get("link"),
            permalink=data.get("permalink"),
            content=data.get("content"),
            excerpt=data.get("excerpt"),
            thumbnail=data.get("thumbnail"),
            category=data.get("category"),
            tags=data.get("tags"),
        )


@dataclass
class ProductLicensing:
    enabled: bool = False
    version: str | None = None
    exp_unit: str | None = None
    exp_length: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProductLicensing":
        return cls(
            enabled=bool(data.get("enabled", False)),
            version=data.get("version"),
            exp_unit=data.get("exp_unit"),
            exp_length=data.get("exp_length"),
        )


@dataclass
class Product:
    """A downloadable product as returned by the products endpoint."""
    info: ProductInfo
    pricing: dict[str, str] = field(default_factory=dict)
    licensing: ProductLicensing | None = None
    stats: dict[str, Any] = field(default_factory=dict)
    files: list[dict[str, Any]] = field(default_factory=list)
    notes: str | None = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def id(self) -> int:
        return self.info.id

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Product":
        licensing = data.get("licensing")
        return cls(
            info=ProductInfo.from_dict(data.get("info") or {}),
            pricing=data.get("pricing") or {},
            licensing=ProductLicensing.from_dict(licensing) if isinstance(licensing, dict) else None,
            stats=data.get("stats") or {},
            files=data.get("files") or [],
            notes=data.get("notes"),
            raw=data,
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the record exactly as the API sent it."""
        return self.raw


@dataclass
class CustomerInfo:
    id: str
    email: str = ""
    user_id: str | None = None
    username: str | None = None
    display_name: str | None = None
    customer_id: str | None = None
    first_name: str | None = None
    last_name: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CustomerInfo":
        return cls(
            id=data.get("id"),
            email=data.get("email", ""),
            user_id=data.get("user_id"),
            username=data.get("username"),
            display_name=data.get("display_name"),
            customer_id=data.get("customer_id"),
            first_name=data.get("first_name"),
            last_name=data.get("last_name"),
        )


@dataclass
class CustomerStats:
    total_purchases: int = 0
    total_spent: float = 0
    total_downloads: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CustomerStats":
        return cls(
            total_purchases=data.get("total_purchases", 0),
            total_spent=data.get("total_spent", 0),
            total_downloads=data.get("total_downloads"),
        )


@dataclass
class Customer:
    """A store customer with lifetime purchase stats."""
    info: CustomerInfo
    stats: CustomerStats = field(default_factory=CustomerStats)
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def name(self) -> str:
        if self.info.display_name:
            return self.info.display_name
        return f"{self.info.first_name or ''} {self.info.last_name or ''}".strip()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Customer":
        return cls(
            info=CustomerInfo.from_dict(data.get("info") or {}),
            stats=CustomerStats.from_dict(data.get("stats") or {}),
            raw=data,
        )

    def to_dict(self) -> dict[str, Any]:
        return self.raw


@dataclass
class SaleProduct:
    id: int
    name: str = ""
    price: float | None = None
    price_name: str | None = None
    quantity: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SaleProduct":
        return cls(
            id=data.get("id"),
            name=data.get("name", ""),
            price=data.get("price"),
            price_name=data.get("price_name"),
            quantity=data.get("quantity"),
        )


@dataclass
class SaleLicense:
    key: str
    is_local: bool | None = None
    exp_date: str | None = None
    sites: LicenseSites = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SaleLicense":
        return cls(
            key=data.get("key", ""),
            is_local=data.get("is_local"),
            exp_date=data.get("exp_date"),
            sites=data.get("sites"),
        )


@dataclass
class Sale:
    """A completed payment and the products it covered."""
    id: int
    total: float = 0
    email: str = ""
    date: str = ""
    key: str | None = None
    subtotal: float | None = None
    tax: float | None = None
    fees: Any = None
    gateway: str | None = None
    products: list[SaleProduct] = field(default_factory=list)
    discounts: SaleDiscounts = None
    licenses: list[SaleLicense] = field(default_factory=list)
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Sale":
        return cls(
            id=data.get("ID"),
            total=data.get("total", 0),
            email=data.get("email", ""),
            date=data.get("date", ""),
            key=data.get("key"),
            subtotal=data.get("subtotal"),
            tax=data.get("tax"),
            fees=data.get("fees"),
            gateway=data.get("gateway"),
            products=[SaleProduct.from_dict(p) for p in data.get("products") or []],
            discounts=data.get("discounts"),
            licenses=[SaleLicense.from_dict(lic) for lic in data.get("licenses") or []],
            raw=data,
        )

    def to_dict(self) -> dict[str, Any]:
        return self.raw


@dataclass
class Discount:
    """A discount code and its usage."""
    id: int
    name: str = ""
    code: str = ""
    amount: str = ""
    type: str = ""
    uses: int = 0
    status: str = ""
    min_price: str | None = None
    max_uses: int | None = None
    start_date: str | None = None
    exp_date: str | None = None
    product_requirements: list[int] = field(default_factory=list)
    requirement_condition: str | None = None
    global_discount: str | None = None
    single_use: str | None = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Discount":
        return cls(
            id=data.get("ID"),
            name=data.get("name", ""),
            code=data.get("code", ""),
            amount=data.get("amount", ""),
            type=data.get("type", ""),
            uses=data.get("uses", 0),
            status=data.get("status", ""),
            min_price=data.get("min_price"),
            max_uses=data.get("max_uses"),
            start_date=data.get("start_date"),
            exp_date=data.get("exp_date"),
            product_requirements=data.get("product_requirements") or [],
            requirement_condition=data.get("requirement_condition"),
            global_discount=data.get("global_discount"),
            single_use=data.get("single_use"),
            raw=data,
        )

    def to_dict(self) -> dict[str, Any]:
        return self.raw


@dataclass
class DownloadLog:
    """One file download event."""
    id: int
    product_id: int | None = None
    product_name: str = ""
    file_id: str = ""
    file_name: str | None = None
    user_id: int | None = None
    payment_id: int | None = None
    ip: str | None = None
    date: str = ""
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DownloadLog":
        return cls(
            id=data.get("ID"),
            product_id=data.get("product_id"),
            product_name=data.get("product_name", ""),
            file_id=data.get("file_id", ""),
            file_name=data.get("file_name"),
            user_id=data.get("user_id"),
            payment_id=data.get("payment_id"),
            ip=data.get("ip"),
            date=data.get("date", ""),
            raw=data,
        )

    def to_dict(self) -> dict[str, Any]:
        return self.raw


@dataclass
class ProductStat:
    """Sales or earnings figure for one product."""
    name: str
    value: float

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "value": self.value}


class ConfigError(Exception):
    """Raised when required configuration is missing or unreadable."""
    pass


class APIError(Exception):
    """Raised when API requests fail after retries."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class TransportError(APIError):
    """Network, DNS or timeout failure, or a body that is not JSON."""
    pass


class HTTPStatusError(APIError):
    """Non-2xx HTTP response."""
    pass


class ApplicationError(APIError):
    """Successful HTTP response whose body carries an `error` field."""
    pass
