# tests/test_formatters.py
import pytest

from dex_api.services.formatters import (
    bigint_str,
    extract_tokens_from_pool,
    format_pool_data,
    format_trade_route,
    is_valid_sui_address,
    normalize_address,
    normalize_coin,
    parse_ticker,
    price_impact,
    to_base_units,
)

from fakes import POOL_1, SUI, USDC, make_pool


@pytest.mark.parametrize("value, expected", [
    ("1000n", "1000"),
    (1000, "1000"),
    (2.0, "2"),
    ("42", "42"),
    (None, "0"),
    ("", "0"),
])
def test_bigint_str(value, expected):
    assert bigint_str(value) == expected


def test_parse_ticker():
    assert parse_ticker(SUI) == "SUI"
    assert parse_ticker("") == "UNKNOWN"
    assert parse_ticker("0x2::sui::") == "UNKNOWN"


def test_sui_addresses():
    assert is_valid_sui_address("0x" + "a" * 64)
    assert is_valid_sui_address("A" * 64)
    assert not is_valid_sui_address("0x" + "a" * 63)
    assert not is_valid_sui_address("0x" + "g" * 64)
    assert not is_valid_sui_address(None)
    assert normalize_address("ab") == "0xab"
    assert normalize_address("0xab") == "0xab"


def test_to_base_units():
    assert to_base_units("1.5") == 1_500_000_000
    assert to_base_units(2) == 2_000_000_000
    assert to_base_units("0.1234567", decimals=6) == 123_456
    for bad in ("0", "-1", "abc", "NaN", "0.0000000001"):
        with pytest.raises(ValueError):
            to_base_units(bad)


def test_format_pool_data_strips_bigint_suffix():
    data = format_pool_data(make_pool(POOL_1, "SUI/USDC", [SUI, USDC]))
    assert data["lpCoinSupply"] == "1000000000000"
    assert data["coins"][SUI]["balance"] == "2000000000000"
    assert data["coins"][USDC]["decimals"] == 6
    assert format_pool_data(None) is None


def test_extract_tokens_from_pool():
    tokens = extract_tokens_from_pool(make_pool(POOL_1, "SUI/USDC", [SUI, USDC]))
    assert tokens == [
        {"type": SUI, "symbol": "SUI", "decimals": 9},
        {"type": USDC, "symbol": "USDC", "decimals": 6},
    ]
    assert extract_tokens_from_pool({"coins": None}) == []


def test_trade_route_and_price_impact():
    route = {
        "spotPrice": 2,
        "coinIn": {"type": SUI, "amount": "100n"},
        "coinOut": {"type": USDC, "amount": "190n"},
    }
    formatted = format_trade_route(route)
    assert formatted["coinIn"] == {"type": SUI, "amount": "100", "tradeFee": "0"}
    assert formatted["routes"] == []
    assert price_impact(route) == pytest.approx(0.05)
    assert price_impact({"coinIn": {"amount": "0n"}}) == 0


def test_normalize_coin():
    assert normalize_coin(SUI) == {"type": SUI, "symbol": "SUI", "name": "SUI", "decimals": 9}
    assert normalize_coin({"type": USDC, "decimals": 6})["symbol"] == "USDC"
    assert normalize_coin({"symbol": "X"}) is None
    assert normalize_coin("") is None
