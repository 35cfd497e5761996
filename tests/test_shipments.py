import re

import pytest

from shipdesk.services.shipping import tracking

TRACKING_RE = re.compile(r"TRK\d{6}[A-Z0-9]{6}")


@pytest.fixture
def setup(api, headers):
    customer = api.create_customer(headers)
    order = api.create_order(headers, customer["id"])
    return {
        "customer": customer["id"],
        "order": order["id"],
        "addresses": [a["id"] for a in customer["addresses"]],
    }


class TestCreateShipment:
    def test_generates_tracking_number_and_snapshot(self, api, headers, setup):
        shipment = api.create_shipment(headers, setup["order"], setup["customer"], setup["addresses"][0])
        assert TRACKING_RE.fullmatch(shipment["trackingNumber"])
        assert shipment["status"] == "Pending"
        assert shipment["shippingAddress"] == setup["addresses"][0]
        assert shipment["shippingAddressDetails"]["fullAddress"] == "12 MG Road, Bengaluru, Karnataka - 560001"
        assert shipment["order"]["id"] == setup["order"]
        assert shipment["dispatchedAt"] is None

    def test_generated_numbers_are_unique(self, api, headers, setup):
        numbers = {
            api.create_shipment(headers, setup["order"], setup["customer"], setup["addresses"][0])["trackingNumber"]
            for _ in range(5)
        }
        assert len(numbers) == 5

    def test_generated_number_rerolls_on_collision(self, api, headers, setup, monkeypatch):
        taken = api.create_shipment(headers, setup["order"], setup["customer"], setup["addresses"][0])
        candidates = iter([taken["trackingNumber"], "TRK000001ABCDEF"])
        monkeypatch.setattr(tracking, "generate_tracking_number", lambda: next(candidates))

        shipment = api.create_shipment(headers, setup["order"], setup["customer"], setup["addresses"][1])
        assert shipment["trackingNumber"] == "TRK000001ABCDEF"

    def test_gives_up_after_max_attempts(self, client, api, headers, setup, monkeypatch):
        taken = api.create_shipment(headers, setup["order"], setup["customer"], setup["addresses"][0])
        calls = []

        def always_taken():
            calls.append(1)
            return taken["trackingNumber"]

        monkeypatch.setattr(tracking, "generate_tracking_number", always_taken)
        body = api.shipment_body(setup["addresses"][1], orderId=setup["order"], customerId=setup["customer"])
        r = client.post("/api/shipments", json=body, headers=headers)
        assert r.status_code == 409
        assert len(calls) == tracking.MAX_ATTEMPTS

        listing = client.get("/api/shipments", headers=headers).json()
        assert len(listing["data"]) == 1

    def test_supplied_duplicate_tracking_number_is_409(self, client, api, headers, setup):
        api.create_shipment(headers, setup["order"], setup["customer"], setup["addresses"][0], trackingNumber="AWB123")
        body = api.shipment_body(
            setup["addresses"][1], orderId=setup["order"], customerId=setup["customer"], trackingNumber="AWB123"
        )
        r = client.post("/api/shipments", json=body, headers=headers)
        assert r.status_code == 409

    def test_address_of_another_customer_is_404(self, client, api, headers, setup):
        other = api.create_customer(headers, name="Other", email="other@example.com", phone="555")
        body = api.shipment_body(
            other["addresses"][0]["id"], orderId=setup["order"], customerId=setup["customer"]
        )
        r = client.post("/api/shipments", json=body, headers=headers)
        assert r.status_code == 404
        assert client.get(f"/api/shipments/order/{setup['order']}", headers=headers).json()["count"] == 0

    def test_foreign_order_is_404(self, client, api, headers, other_headers, setup):
        body = api.shipment_body(setup["addresses"][0], orderId=setup["order"], customerId=setup["customer"])
        r = client.post("/api/shipments", json=body, headers=other_headers)
        assert r.status_code == 404
        assert r.json()["message"] == "Order not found or not authorized"

    @pytest.mark.parametrize(
        "override",
        [
            {"courierService": "Pigeon"},
            {"numberOfBoxes": 21},
            {"shippingCost": -1},
            {"trackingLink": "ftp://carrier.example/track"},
        ],
    )
    def test_invalid_fields_are_400(self, client, api, headers, setup, override):
        body = api.shipment_body(
            setup["addresses"][0], orderId=setup["order"], customerId=setup["customer"], **override
        )
        r = client.post("/api/shipments", json=body, headers=headers)
        assert r.status_code == 400


class TestUpdateShipment:
    def test_delivered_twice_keeps_first_timestamp(self, client, api, headers, setup):
        shipment = api.create_shipment(headers, setup["order"], setup["customer"], setup["addresses"][0])
        url = f"/api/shipments/{shipment['id']}"

        first = client.put(url, json={"status": "Delivered"}, headers=headers).json()["data"]
        assert first["deliveredAt"] is not None
        second = client.put(url, json={"status": "Delivered"}, headers=headers).json()["data"]
        assert second["deliveredAt"] == first["deliveredAt"]

    def test_dispatch_stamp_survives_later_statuses(self, client, api, headers, setup):
        shipment = api.create_shipment(headers, setup["order"], setup["customer"], setup["addresses"][0])
        url = f"/api/shipments/{shipment['id']}"

        dispatched = client.put(url, json={"status": "Dispatched"}, headers=headers).json()["data"]
        assert dispatched["dispatchedAt"] is not None
        client.put(url, json={"status": "In Transit"}, headers=headers)
        again = client.put(url, json={"status": "Dispatched"}, headers=headers).json()["data"]
        assert again["status"] == "Dispatched"
        assert again["dispatchedAt"] == dispatched["dispatchedAt"]

    def test_media_paths_are_appended(self, client, api, headers, setup):
        shipment = api.create_shipment(
            headers, setup["order"], setup["customer"], setup["addresses"][0], images=["images/a.png"]
        )
        url = f"/api/shipments/{shipment['id']}"
        client.put(url, json={"images": ["images/b.png"], "videos": ["videos/v.mp4"]}, headers=headers)
        data = client.put(url, json={"images": ["images/c.png"]}, headers=headers).json()["data"]
        assert data["images"] == ["images/a.png", "images/b.png", "images/c.png"]
        assert data["videos"] == ["videos/v.mp4"]

    def test_changing_address_resnapshots(self, client, api, headers, setup):
        shipment = api.create_shipment(headers, setup["order"], setup["customer"], setup["addresses"][0])
        r = client.put(
            f"/api/shipments/{shipment['id']}", json={"shippingAddress": setup["addresses"][1]}, headers=headers
        )
        data = r.json()["data"]
        assert data["shippingAddress"] == setup["addresses"][1]
        assert data["shippingAddressDetails"]["city"] == "Kolkata"

    def test_changing_to_foreign_address_is_404(self, client, api, headers, setup):
        shipment = api.create_shipment(headers, setup["order"], setup["customer"], setup["addresses"][0])
        other = api.create_customer(headers, name="Other", email="other@example.com", phone="555")
        r = client.put(
            f"/api/shipments/{shipment['id']}",
            json={"shippingAddress": other["addresses"][0]["id"]},
            headers=headers,
        )
        assert r.status_code == 404

    def test_order_scoped_update(self, client, api, headers, setup):
        shipment = api.create_shipment(headers, setup["order"], setup["customer"], setup["addresses"][0])
        other_order = api.create_order(headers, setup["customer"])

        r = client.put(
            f"/api/shipments/{other_order['id']}/{shipment['id']}", json={"notes": "x"}, headers=headers
        )
        assert r.status_code == 404

        r = client.put(
            f"/api/shipments/{setup['order']}/{shipment['id']}", json={"notes": "fragile"}, headers=headers
        )
        assert r.status_code == 200
        assert r.json()["data"]["notes"] == "fragile"


class TestShipmentReads:
    def test_courier_services(self, client, headers):
        r = client.get("/api/shipments/courier-services", headers=headers)
        assert r.json()["data"] == ["FedEx", "DHL", "UPS", "Blue Dart", "Delhivery", "India Post", "Other"]

    def test_list_filters(self, client, api, headers, setup):
        a = api.create_shipment(headers, setup["order"], setup["customer"], setup["addresses"][0])
        api.create_shipment(
            headers, setup["order"], setup["customer"], setup["addresses"][1],
            courierService="FedEx", receiverName="Meera",
        )

        r = client.get("/api/shipments", params={"courierService": "FedEx"}, headers=headers)
        assert [s["receiverName"] for s in r.json()["data"]] == ["Meera"]

        r = client.get("/api/shipments", params={"search": a["trackingNumber"]}, headers=headers)
        assert [s["id"] for s in r.json()["data"]] == [a["id"]]

        r = client.get("/api/shipments", params={"status": "Delivered"}, headers=headers)
        assert r.json()["pagination"]["total"] == 0

    def test_other_tenant_cannot_read_or_delete(self, client, api, headers, other_headers, setup):
        shipment = api.create_shipment(headers, setup["order"], setup["customer"], setup["addresses"][0])
        assert client.get(f"/api/shipments/{shipment['id']}", headers=other_headers).status_code == 404
        assert client.delete(f"/api/shipments/{shipment['id']}", headers=other_headers).status_code == 404
        assert client.get(f"/api/shipments/{shipment['id']}", headers=headers).status_code == 200

    def test_delete(self, client, api, headers, setup):
        shipment = api.create_shipment(headers, setup["order"], setup["customer"], setup["addresses"][0])
        assert client.delete(f"/api/shipments/{shipment['id']}", headers=headers).status_code == 200
        assert client.get(f"/api/shipments/{shipment['id']}", headers=headers).status_code == 404


class TestShipmentMedia:
    def test_upload_appends_to_shipment(self, client, api, headers, setup):
        shipment = api.create_shipment(headers, setup["order"], setup["customer"], setup["addresses"][0])
        r = client.post(
            f"/api/shipments/{shipment['id']}/media",
            files=[
                ("images", ("box.png", b"\x89PNG fake", "image/png")),
                ("videos", ("clip.mp4", b"fake video", "video/mp4")),
            ],
            headers=headers,
        )
        assert r.status_code == 200, r.text
        data = r.json()["data"]
        assert len(data["images"]) == 1
        assert data["images"][0].startswith("shipment-images/image-")
        assert data["videos"][0].startswith("shipment-videos/video-")

        served = client.get(f"/uploads/{data['images'][0]}")
        assert served.status_code == 200
        assert served.content == b"\x89PNG fake"

    def test_two_videos_rejected(self, client, api, headers, setup):
        shipment = api.create_shipment(headers, setup["order"], setup["customer"], setup["addresses"][0])
        r = client.post(
            f"/api/shipments/{shipment['id']}/media",
            files=[
                ("videos", ("a.mp4", b"a", "video/mp4")),
                ("videos", ("b.mp4", b"b", "video/mp4")),
            ],
            headers=headers,
        )
        assert r.status_code == 400
