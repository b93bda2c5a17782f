# tests/test_swap.py

import pytest

from fakes import CETUS, SUI, USDC, WALLET


def test_quote_exact_in(client, fake_sdk):
    res = client.get("/api/swap/quote", params={"coinInType": SUI, "coinOutType": USDC, "coinInAmount": "1000000000"})
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["route"]["coinIn"] == {"type": SUI, "amount": "1000000000", "tradeFee": "3000000"}
    assert data["route"]["coinOut"]["amount"] == "3430000000"
    # 1 - 3.43e9 / (1e9 * 3.5)
    assert data["priceImpact"] == pytest.approx(0.02)
    assert fake_sdk.requests[-1] == ("get_trade_route_given_amount_in", (SUI, USDC, 1000000000))


def test_quote_exact_out(client, fake_sdk):
    res = client.get("/api/swap/quote", params={
        "coinInType": SUI, "coinOutType": USDC, "coinOutAmount": "5000000", "slippage": "0.01",
    })
    assert res.status_code == 200
    assert fake_sdk.requests[-1] == ("get_trade_route_given_amount_out", (SUI, USDC, 5000000, 0.01))


def test_quote_is_not_cached(client, fake_sdk):
    params = {"coinInType": SUI, "coinOutType": USDC, "coinInAmount": "1000"}
    client.get("/api/swap/quote", params=params)
    client.get("/api/swap/quote", params=params)
    assert fake_sdk.calls["get_trade_route_given_amount_in"] == 2


@pytest.mark.parametrize("params", [
    {"coinInType": SUI, "coinOutType": USDC},
    {"coinInType": SUI, "coinInAmount": "1000"},
    {"coinInType": SUI, "coinOutType": USDC, "coinOutAmount": "1000"},
    {"coinInType": SUI, "coinOutType": USDC, "coinInAmount": "1.5"},
    {"coinInType": SUI, "coinOutType": USDC, "coinInAmount": "-3"},
])
def test_quote_bad_requests(client, params):
    res = client.get("/api/swap/quote", params=params)
    assert res.status_code == 400
    assert res.json()["success"] is False


def test_quote_no_route_404(client, fake_sdk):
    fake_sdk.route = None
    res = client.get("/api/swap/quote", params={"coinInType": SUI, "coinOutType": USDC, "coinInAmount": "1000"})
    assert res.status_code == 404


def test_protocols(client):
    res = client.get("/api/swap/protocols")
    assert res.status_code == 200
    protocols = res.json()["data"]
    assert "Aftermath" in protocols and "Cetus" in protocols


def test_volume_24h_cached(client, fake_sdk):
    assert client.get("/api/swap/volume24h").json()["data"] == {"volume": 987654.32}
    client.get("/api/swap/volume24h")
    assert fake_sdk.calls["get_router_volume_24h"] == 1


def test_tokens_accepts_object_and_string_entries(client, fake_sdk):
    fake_sdk.supported_coins = [SUI, {"type": USDC, "symbol": "USDC", "decimals": 6}, {"bogus": True}]
    res = client.get("/api/swap/tokens")
    assert res.status_code == 200
    assert res.json()["data"] == [SUI, USDC]


def test_search_by_symbol_and_type(client):
    assert client.get("/api/swap/search", params={"query": "cet"}).json()["data"] == [CETUS]
    assert client.get("/api/swap/search", params={"query": "0x2::"}).json()["data"] == [SUI]
    assert client.get("/api/swap/search").json() == {"success": True, "data": []}


def test_swap_transaction(client, fake_sdk):
    res = client.post("/api/swap/transaction", json={
        "fromToken": SUI, "toToken": USDC, "amount": "1.5", "walletAddress": WALLET,
    })
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["txBytes"] == "swap-tx-bytes"
    assert data["route"]["spotPrice"] == 3.5

    route_call = [r for r in fake_sdk.requests if r[0] == "get_trade_route_given_amount_in"][-1]
    assert route_call[1][2] == 1500000000
    name, args = fake_sdk.requests[-1]
    assert name == "get_trade_transaction"
    assert args[2] == 0.01


@pytest.mark.parametrize("amount", ["0", "-1", "abc", "0.0000000001"])
def test_swap_transaction_invalid_amount(client, fake_sdk, amount):
    res = client.post("/api/swap/transaction", json={
        "fromToken": SUI, "toToken": USDC, "amount": amount, "walletAddress": WALLET,
    })
    assert res.status_code == 400
    assert fake_sdk.calls["get_trade_transaction"] == 0


def test_swap_transaction_missing_fields(client):
    res = client.post("/api/swap/transaction", json={"fromToken": SUI, "amount": "1"})
    assert res.status_code == 400
    assert len(res.json()["validationErrors"]) >= 2


def test_swap_transaction_no_route(client, fake_sdk):
    fake_sdk.route = None
    res = client.post("/api/swap/transaction", json={
        "fromToken": SUI, "toToken": USDC, "amount": 2, "walletAddress": WALLET,
    })
    assert res.status_code == 404


def test_legacy_swap_alias(client, fake_sdk):
    res = client.post("/api/swap", json={
        "coinInType": SUI, "coinOutType": USDC, "amountIn": "0.25", "slippage": 0.02, "walletAddress": WALLET,
    })
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert body["txBytes"] == "swap-tx-bytes"
    assert body["data"]["txBytes"] == "swap-tx-bytes"
    assert fake_sdk.requests[-1][1][2] == 0.02


def test_legacy_token_endpoints(client):
    assert client.get("/api/supported-tokens").json() == [SUI, USDC, CETUS]
    assert client.get("/api/search-tokens", params={"query": "usdc"}).json() == [USDC]
    assert client.get("/api/search-tokens").json() == []
