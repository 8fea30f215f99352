"""Tests for the cart HTTP API."""

import uuid

import pytest


@pytest.fixture
def headphones(catalog):
    return catalog.add_product(name="Wireless Headphones", price="100000", stock=5)


@pytest.fixture
def cable(catalog):
    return catalog.add_product(name="USB Cable", price="2500.50", stock=10)


def add(client, headers, product, quantity):
    return client.post(
        "/api/cart/items", json={"productId": product.id, "quantity": quantity}, headers=headers
    )


def test_empty_cart(client, user_headers):
    response = client.get("/api/cart", headers=user_headers)

    assert response.status_code == 200
    assert response.json() == {"items": [], "total": 0, "itemCount": 0}


def test_cart_requires_user(client):
    assert client.get("/api/cart").status_code == 401


def test_add_items_and_total(client, user_headers, headphones, cable):
    assert add(client, user_headers, headphones, 1).status_code == 201
    assert add(client, user_headers, cable, 2).status_code == 201

    cart = client.get("/api/cart", headers=user_headers).json()

    assert cart["itemCount"] == 3
    assert cart["total"] == pytest.approx(105001.0)
    assert {item["product"]["name"] for item in cart["items"]} == {"Wireless Headphones", "USB Cable"}


def test_adding_same_product_merges_quantity(client, user_headers, headphones):
    add(client, user_headers, headphones, 1)
    add(client, user_headers, headphones, 2)

    cart = client.get("/api/cart", headers=user_headers).json()

    assert len(cart["items"]) == 1
    assert cart["items"][0]["quantity"] == 3


def test_merge_beyond_stock_is_rejected(client, user_headers, headphones):
    add(client, user_headers, headphones, 4)

    response = add(client, user_headers, headphones, 2)

    assert response.status_code == 400
    assert "Wireless Headphones" in response.json()["detail"]
    cart = client.get("/api/cart", headers=user_headers).json()
    assert cart["items"][0]["quantity"] == 4


def test_add_unknown_product(client, user_headers):
    response = client.post(
        "/api/cart/items", json={"productId": str(uuid.uuid4()), "quantity": 1}, headers=user_headers
    )

    assert response.status_code == 404


def test_add_rejects_zero_quantity(client, user_headers, headphones):
    assert add(client, user_headers, headphones, 0).status_code == 400


def test_carts_are_per_user(client, user_headers, headphones):
    add(client, user_headers, headphones, 1)

    other = client.get("/api/cart", headers={"X-User-Id": "user-2"}).json()

    assert other["items"] == []


def test_update_quantity(client, user_headers, headphones):
    add(client, user_headers, headphones, 1)
    item_id = client.get("/api/cart", headers=user_headers).json()["items"][0]["id"]

    response = client.put(f"/api/cart/items/{item_id}", json={"quantity": 5}, headers=user_headers)

    assert response.status_code == 200
    assert client.get("/api/cart", headers=user_headers).json()["itemCount"] == 5


def test_update_beyond_stock(client, user_headers, headphones):
    add(client, user_headers, headphones, 1)
    item_id = client.get("/api/cart", headers=user_headers).json()["items"][0]["id"]

    response = client.put(f"/api/cart/items/{item_id}", json={"quantity": 6}, headers=user_headers)

    assert response.status_code == 400


def test_update_someone_elses_item(client, user_headers, headphones):
    add(client, user_headers, headphones, 1)
    item_id = client.get("/api/cart", headers=user_headers).json()["items"][0]["id"]

    response = client.put(f"/api/cart/items/{item_id}", json={"quantity": 2}, headers={"X-User-Id": "user-2"})

    assert response.status_code == 404


def test_remove_item(client, user_headers, headphones, cable):
    add(client, user_headers, headphones, 1)
    add(client, user_headers, cable, 1)
    items = client.get("/api/cart", headers=user_headers).json()["items"]
    removed = next(item for item in items if item["product"]["id"] == cable.id)

    response = client.delete(f"/api/cart/items/{removed['id']}", headers=user_headers)

    assert response.status_code == 200
    remaining = client.get("/api/cart", headers=user_headers).json()["items"]
    assert [item["product"]["id"] for item in remaining] == [headphones.id]
    assert client.delete(f"/api/cart/items/{removed['id']}", headers=user_headers).status_code == 404


def test_clear_cart(client, user_headers, headphones, cable):
    add(client, user_headers, headphones, 1)
    add(client, user_headers, cable, 1)

    response = client.delete("/api/cart", headers=user_headers)

    assert response.status_code == 200
    assert client.get("/api/cart", headers=user_headers).json()["items"] == []
