import pytest


@pytest.fixture
def context(api, headers):
    customer = api.create_customer(headers)
    stranger = api.create_customer(headers, name="Stranger", email="stranger@example.com", phone="777")
    order = api.create_order(headers, customer["id"])
    return {
        "order": order["id"],
        "customer": customer["id"],
        "mine": [a["id"] for a in customer["addresses"]],
        "foreign": stranger["addresses"][0]["id"],
    }


def _stored(client, headers, order_id):
    return client.get(f"/api/shipments/order/{order_id}", headers=headers).json()["data"]


class TestBulkShipments:
    def test_creates_one_per_entry(self, client, api, headers, context):
        r = client.post(
            "/api/shipments/bulk",
            json={
                "orderId": context["order"],
                "customerId": context["customer"],
                "shipments": [
                    api.shipment_body(context["mine"][0]),
                    api.shipment_body(context["mine"][1], courierService="UPS"),
                ],
            },
            headers=headers,
        )
        assert r.status_code == 201, r.text
        body = r.json()
        assert body["count"] == 2
        assert {s["shippingAddress"] for s in body["data"]} == set(context["mine"])
        assert len({s["trackingNumber"] for s in body["data"]}) == 2

        detail = client.get(f"/api/orders/{context['order']}", headers=headers).json()["data"]
        assert detail["shipmentCount"] == 2

    def test_bad_second_entry_keeps_the_first(self, client, api, headers, context):
        r = client.post(
            "/api/shipments/bulk",
            json={
                "orderId": context["order"],
                "customerId": context["customer"],
                "shipments": [
                    api.shipment_body(context["mine"][0]),
                    api.shipment_body(context["foreign"]),
                    api.shipment_body(context["mine"][1]),
                ],
            },
            headers=headers,
        )
        assert r.status_code == 404
        assert r.json()["status"] is False

        stored = _stored(client, headers, context["order"])
        assert len(stored) == 1
        assert stored[0]["shippingAddress"] == context["mine"][0]

    def test_atomic_batch_rolls_back_everything(self, client, api, headers, context):
        r = client.post(
            "/api/shipments/bulk",
            json={
                "orderId": context["order"],
                "customerId": context["customer"],
                "atomic": True,
                "shipments": [
                    api.shipment_body(context["mine"][0]),
                    api.shipment_body(context["foreign"]),
                ],
            },
            headers=headers,
        )
        assert r.status_code == 404
        assert _stored(client, headers, context["order"]) == []

    def test_empty_batch_is_400(self, client, headers, context):
        r = client.post(
            "/api/shipments/bulk",
            json={"orderId": context["order"], "customerId": context["customer"], "shipments": []},
            headers=headers,
        )
        assert r.status_code == 400

    def test_foreign_order_is_404_and_stores_nothing(self, client, api, headers, other_headers, context):
        r = client.post(
            "/api/shipments/bulk",
            json={
                "orderId": context["order"],
                "customerId": context["customer"],
                "shipments": [api.shipment_body(context["mine"][0])],
            },
            headers=other_headers,
        )
        assert r.status_code == 404
        assert _stored(client, headers, context["order"]) == []
