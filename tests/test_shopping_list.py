"""
Tests for the shopping list: bulk add, purchase toggling, clearing purchased items.
"""

from test_fixtures import api, register_user


def add(client, headers, *items):
    r = client.post(api("/shopping"), json={"items": list(items)}, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()["items"]


def test_add_items_in_request_order(client, auth_headers):
    items = add(
        client,
        auth_headers,
        {"name": " Chicken breast ", "quantity": "500 g", "category": " Meat "},
        {"name": "Rice"},
    )

    assert [i["name"] for i in items] == ["Chicken breast", "Rice"]
    assert items[0]["category"] == "meat"
    assert items[1]["quantity"] == "1"
    assert items[1]["category"] == "general"
    assert items[1]["purchased"] is False
    assert items[0]["added_at"] == items[1]["added_at"]


def test_add_requires_items(client, auth_headers):
    r = client.post(api("/shopping"), json={"items": []}, headers=auth_headers)
    assert r.status_code == 400
    r = client.post(api("/shopping"), json={"items": [{"name": ""}]}, headers=auth_headers)
    assert r.status_code == 400


def test_list_filters_by_purchased(client, auth_headers):
    milk, eggs = add(client, auth_headers, {"name": "Milk"}, {"name": "Eggs", "purchased": True})

    everything = client.get(api("/shopping"), headers=auth_headers).json()["items"]
    assert {i["name"] for i in everything} == {"Milk", "Eggs"}

    pending = client.get(api("/shopping?purchased=false"), headers=auth_headers).json()["items"]
    assert [i["id"] for i in pending] == [milk["id"]]

    bought = client.get(api("/shopping?purchased=true"), headers=auth_headers).json()["items"]
    assert [i["id"] for i in bought] == [eggs["id"]]


def test_mark_item_purchased(client, auth_headers):
    (milk,) = add(client, auth_headers, {"name": "Milk", "category": "dairy"})

    r = client.put(api(f"/shopping/items/{milk['id']}"), json={"purchased": True}, headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["purchased"] is True
    assert r.json()["category"] == "dairy"

    r = client.put(api(f"/shopping/items/{milk['id']}"), json={"quantity": "2 l", "category": ""}, headers=auth_headers)
    assert r.json()["quantity"] == "2 l"
    assert r.json()["category"] == "general"


def test_delete_item(client, auth_headers):
    (milk,) = add(client, auth_headers, {"name": "Milk"})

    r = client.delete(api(f"/shopping/items/{milk['id']}"), headers=auth_headers)
    assert r.json() == {"message": "Item deleted successfully"}

    r = client.delete(api(f"/shopping/items/{milk['id']}"), headers=auth_headers)
    assert r.status_code == 404
    assert r.json()["error"]["message"] == "Item not found"


def test_clear_purchased(client, auth_headers):
    add(
        client,
        auth_headers,
        {"name": "Milk", "purchased": True},
        {"name": "Eggs", "purchased": True},
        {"name": "Bread"},
    )

    r = client.delete(api("/shopping?purchased=true"), headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["deleted_count"] == 2

    remaining = client.get(api("/shopping"), headers=auth_headers).json()["items"]
    assert [i["name"] for i in remaining] == ["Bread"]


def test_clear_requires_purchased_flag(client, auth_headers):
    add(client, auth_headers, {"name": "Bread"})

    for url in ("/shopping", "/shopping?purchased=false"):
        r = client.delete(api(url), headers=auth_headers)
        assert r.status_code == 400
        assert r.json()["error"]["code"] == "SERVICE_VALIDATION_ERROR"

    assert len(client.get(api("/shopping"), headers=auth_headers).json()["items"]) == 1


def test_shopping_lists_are_private(client, auth_headers):
    (milk,) = add(client, auth_headers, {"name": "Milk", "purchased": True})
    other_headers, _ = register_user(client, "emma")

    assert client.get(api("/shopping"), headers=other_headers).json()["items"] == []
    assert client.put(api(f"/shopping/items/{milk['id']}"), json={"purchased": False}, headers=other_headers).status_code == 404

    r = client.delete(api("/shopping?purchased=true"), headers=other_headers)
    assert r.json()["deleted_count"] == 0
    assert len(client.get(api("/shopping"), headers=auth_headers).json()["items"]) == 1


def test_shopping_requires_login(client):
    assert client.get(api("/shopping")).status_code == 401
