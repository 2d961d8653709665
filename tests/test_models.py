"""Tests for core data models."""

import dataclasses

import pytest
from edd_mcp.core.models import (
    StatsType,
    RetryState,
    EDDClientConfig,
    Product,
    Customer,
    Sale,
    Discount,
    DownloadLog,
    ProductStat,
    APIError,
    TransportError,
    HTTPStatusError,
    ApplicationError,
    terms_to_list,
)


def test_stats_type_enum():
    """Test StatsType enum values."""
    assert StatsType.SALES.value == "sales"
    assert StatsType.EARNINGS.value == "earnings"
    assert StatsType("earnings") == StatsType.EARNINGS
    with pytest.raises(ValueError):
        StatsType("refunds")


def test_retry_state_enum():
    """Test the retry loop has exactly four states."""
    assert {s.value for s in RetryState} == {"attempting", "waiting", "succeeded", "exhausted"}


def test_config_adds_trailing_slash():
    """Test the API URL is normalized to end with a slash."""
    config = EDDClientConfig("https://example.com/edd-api", "key", "token")
    assert config.api_url == "https://example.com/edd-api/"


def test_config_keeps_existing_slash():
    config = EDDClientConfig("https://example.com/edd-api/", "key", "token")
    assert config.api_url == "https://example.com/edd-api/"


def test_config_is_immutable():
    config = EDDClientConfig("https://example.com/edd-api/", "key", "token")
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.api_key = "other"


def test_config_masked():
    """Test credentials are hidden except the last four characters."""
    config = EDDClientConfig("https://example.com/edd-api/", "abcdef123456", "abc")
    masked = config.masked()

    assert masked["api_url"] == "https://example.com/edd-api/"
    assert masked["api_key"] == "********3456"
    assert masked["api_token"] == "***"


@pytest.mark.parametrize(
    "value,expected",
    [
        (False, []),
        (None, []),
        ("", []),
        ("Plugins", ["Plugins"]),
        (["Plugins", "CRM"], ["Plugins", "CRM"]),
    ],
)
def test_terms_to_list(value, expected):
    assert terms_to_list(value) == expected


def test_product_from_dict_loose_fields():
    """Test product parsing tolerates false thumbnails and taxonomies."""
    data = {
        "info": {
            "id": 42,
            "slug": "wp-fusion",
            "title": "WP Fusion",
            "create_date": "2020-01-01",
            "modified_date": "2025-01-01",
            "status": "publish",
            "thumbnail": False,
            "category": ["Plugins", "CRM"],
            "tags": False,
        },
        "pricing": {"personal": "297.00"},
        "licensing": {"enabled": True, "version": "3.44.1", "exp_unit": "years", "exp_length": 1},
    }

    product = Product.from_dict(data)

    assert product.id == 42
    assert product.info.thumbnail is False
    assert product.info.thumbnail_url is None
    assert product.info.categories == ["Plugins", "CRM"]
    assert product.info.tag_names == []
    assert product.licensing.enabled is True
    assert product.licensing.version == "3.44.1"
    assert product.to_dict() is data


def test_product_thumbnail_url():
    product = Product.from_dict({"info": {"id": 1, "thumbnail": "https://example.com/t.png"}})
    assert product.info.thumbnail_url == "https://example.com/t.png"
    assert product.licensing is None


def test_customer_name_prefers_display_name():
    customer = Customer.from_dict({
        "info": {"id": "1", "email": "a@b.c", "display_name": "Ada", "first_name": "A", "last_name": "L"},
        "stats": {"total_purchases": 1, "total_spent": 10},
    })
    assert customer.name == "Ada"


def test_customer_name_from_first_and_last():
    customer = Customer.from_dict({"info": {"id": "1", "email": "a@b.c", "last_name": "Lovelace"}})
    assert customer.name == "Lovelace"
    assert customer.stats.total_purchases == 0


def test_sale_from_dict():
    """Test sale parsing maps ID and nested products and licenses."""
    data = {
        "ID": 123,
        "key": "purchase-key",
        "total": 647,
        "email": "buyer@example.com",
        "date": "2025-01-01",
        "products": [{"id": 1, "name": "WP Fusion", "price": 647}],
        "licenses": [{"key": "lic-1", "sites": ["example.com"]}],
        "discounts": None,
    }

    sale = Sale.from_dict(data)

    assert sale.id == 123
    assert sale.products[0].name == "WP Fusion"
    assert sale.licenses[0].sites == ["example.com"]
    assert sale.discounts is None
    assert sale.to_dict() == data


def test_discount_and_download_log_from_dict():
    discount = Discount.from_dict({"ID": 9, "code": "SPRING", "max_uses": 100})
    assert discount.id == 9
    assert discount.max_uses == 100
    assert discount.product_requirements == []

    log = DownloadLog.from_dict({"ID": 1, "product_id": 3, "product_name": "WP Fusion", "payment_id": 4})
    assert log.id == 1
    assert log.file_name is None


def test_product_stat_to_dict():
    assert ProductStat(name="wp-fusion", value=3).to_dict() == {"name": "wp-fusion", "value": 3}


def test_api_error_hierarchy():
    """Test the three failure kinds share APIError."""
    for cls in (TransportError, HTTPStatusError, ApplicationError):
        assert issubclass(cls, APIError)

    error = HTTPStatusError("HTTP 500: Internal Server Error", status_code=500)
    assert error.status_code == 500
    assert APIError("boom").status_code is None
