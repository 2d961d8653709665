"""
Tool handlers for the EDD MCP server.

Each handler performs one client call and renders the result as the text
the agent receives: pretty-printed JSON, or a plain message for missing
arguments and lookups that found nothing. Argument names follow the tool
schema the agent sees, hence camelCase.
"""

import json
import re
from typing import Annotated, Any, Literal

from pydantic import Field

from ..client.edd_client import EDDClient
from ..core.models import Sale, Customer, StatsDatePreset


DATE_PATTERN = re.compile(r"^\d{8}$")

StatsTypeArg = Annotated[
    Literal["sales", "earnings"],
    Field(description="Type of stats: sales (count) or earnings (revenue)"),
]


def to_text(payload: Any) -> str:
    """Serialize a tool result the way every tool returns it."""
    return json.dumps(payload, indent=2)


def _date_error(name: str, value: str | None) -> str | None:
    if value is not None and not DATE_PATTERN.match(value):
        return f"Error: {name} must be in YYYYMMDD format"
    return None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class EDDToolHandlers:
    """The twelve EDD tools, bound to one client."""

    def __init__(self, client: EDDClient):
        self.client = client

    # ===== PRODUCTS =====

    def list_products(
        self,
        number: Annotated[int | None, Field(description="Number of products to return (default: all)")] = None,
    ) -> str:
        products = self.client.list_products(number=number)
        summary = [
            {
                "id": p.info.id,
                "title": p.info.title,
                "status": p.info.status,
                "pricing": p.pricing,
                "licensing": f"v{p.licensing.version}" if p.licensing and p.licensing.enabled else None,
            }
            for p in products
        ]
        return to_text({"count": len(products), "products": summary})

    def get_product(
        self,
        productId: Annotated[int, Field(description="The product ID to retrieve")],
    ) -> str:
        product = self.client.get_product(productId)
        if product is None:
            return f"Product {productId} not found"
        return to_text(product.to_dict())

    # ===== SALES =====

    def list_sales(
        self,
        number: Annotated[int | None, Field(description="Number of sales to return (default: 10)")] = None,
        page: Annotated[int | None, Field(description="Page number for pagination")] = None,
        email: Annotated[str | None, Field(description="Filter sales by customer email")] = None,
        startDate: Annotated[str | None, Field(description="Start date (YYYYMMDD format)")] = None,
        endDate: Annotated[str | None, Field(description="End date (YYYYMMDD format)")] = None,
    ) -> str:
        error = _date_error("startDate", startDate) or _date_error("endDate", endDate)
        if error:
            return error

        sales = self.client.list_sales(
            number=number if number is not None else 10,
            page=page,
            email=email,
            startdate=startDate,
            enddate=endDate,
        )
        return to_text({"count": len(sales), "sales": [_sale_summary(s) for s in sales]})

    def get_sale(
        self,
        saleId: Annotated[int | None, Field(description="Sale ID to retrieve")] = None,
        purchaseKey: Annotated[str | None, Field(description="Purchase key to retrieve")] = None,
    ) -> str:
        if saleId is None and not purchaseKey:
            return "Error: Either saleId or purchaseKey is required"

        if saleId is not None:
            sale = self.client.get_sale_by_id(saleId)
        else:
            sale = self.client.get_sale_by_key(purchaseKey)

        if sale is None:
            return "Sale not found"
        return to_text(sale.to_dict())

    # ===== CUSTOMERS =====

    def list_customers(
        self,
        number: Annotated[int | None, Field(description="Number of customers to return (default: 10)")] = None,
        page: Annotated[int | None, Field(description="Page number for pagination")] = None,
    ) -> str:
        customers = self.client.list_customers(
            number=number if number is not None else 10, page=page
        )
        return to_text({
            "count": len(customers),
            "customers": [_customer_summary(c) for c in customers],
        })

    def get_customer(
        self,
        customerId: Annotated[int | None, Field(description="Customer ID to retrieve")] = None,
        email: Annotated[str | None, Field(description="Customer email to retrieve")] = None,
    ) -> str:
        if customerId is None and not email:
            return "Error: Either customerId or email is required"

        if customerId is not None:
            customer = self.client.get_customer_by_id(customerId)
        else:
            customer = self.client.get_customer_by_email(email)

        if customer is None:
            return "Customer not found"
        return to_text(customer.to_dict())

    # ===== STATS =====

    def get_stats(
        self,
        type: StatsTypeArg,
        date: Annotated[StatsDatePreset | None, Field(description="Predefined date filter")] = None,
    ) -> str:
        stats = self.client.get_stats(type, date=date)
        result: dict[str, Any] = {"type": type}
        if date is not None:
            result["date"] = date
        result["stats"] = stats
        return to_text(result)

    def get_stats_by_date(
        self,
        type: StatsTypeArg,
        startDate: Annotated[str, Field(description="Start date in YYYYMMDD format (e.g., 20250101)")],
        endDate: Annotated[str, Field(description="End date in YYYYMMDD format (e.g., 20250131)")],
    ) -> str:
        error = _date_error("startDate", startDate) or _date_error("endDate", endDate)
        if error:
            return error

        stats = self.client.get_stats_by_date_range(type, startDate, endDate)
        total = sum(value for value in stats.values() if _is_number(value))
        return to_text({
            "type": type,
            "startDate": startDate,
            "endDate": endDate,
            "total": total,
            "daily": stats,
        })

    def get_stats_by_product(
        self,
        type: StatsTypeArg,
        productId: Annotated[int | None, Field(description="Specific product ID (omit for all products)")] = None,
    ) -> str:
        stats = self.client.get_stats_by_product(type, productId)
        return to_text({
            "type": type,
            "productId": productId if productId is not None else "all",
            "total": sum(item.value for item in stats),
            "products": [item.to_dict() for item in stats],
        })

    # ===== DISCOUNTS =====

    def list_discounts(
        self,
        number: Annotated[int | None, Field(description="Number of discounts to return")] = None,
    ) -> str:
        discounts = self.client.list_discounts(number=number)
        summary = [
            {
                "id": d.id,
                "code": d.code,
                "name": d.name,
                "amount": d.amount,
                "type": d.type,
                "uses": d.uses,
                "maxUses": d.max_uses,
                "status": d.status,
            }
            for d in discounts
        ]
        return to_text({"count": len(discounts), "discounts": summary})

    def get_discount(
        self,
        discountId: Annotated[int, Field(description="The discount ID to retrieve")],
    ) -> str:
        discount = self.client.get_discount(discountId)
        if discount is None:
            return f"Discount {discountId} not found"
        return to_text(discount.to_dict())

    # ===== DOWNLOAD LOGS =====

    def get_download_logs(
        self,
        number: Annotated[int | None, Field(description="Number of logs to return (default: 10)")] = None,
        productId: Annotated[int | None, Field(description="Filter by product ID")] = None,
        customerId: Annotated[int | None, Field(description="Filter by customer ID")] = None,
    ) -> str:
        logs = self.client.get_download_logs(
            number=number if number is not None else 10,
            product=productId,
            customer=customerId,
        )
        summary = [
            {
                "id": log.id,
                "productId": log.product_id,
                "productName": log.product_name,
                "fileName": log.file_name,
                "date": log.date,
                "paymentId": log.payment_id,
            }
            for log in logs
        ]
        return to_text({"count": len(logs), "logs": summary})


def _sale_summary(sale: Sale) -> dict[str, Any]:
    return {
        "id": sale.id,
        "email": sale.email,
        "total": sale.total,
        "date": sale.date,
        "gateway": sale.gateway,
        "products": [p.name for p in sale.products],
        "hasLicenses": len(sale.licenses) > 0,
        "discounts": sale.discounts or None,
    }


def _customer_summary(customer: Customer) -> dict[str, Any]:
    return {
        "id": customer.info.id,
        "email": customer.info.email,
        "name": customer.name,
        "totalPurchases": customer.stats.total_purchases,
        "totalSpent": customer.stats.total_spent,
    }
