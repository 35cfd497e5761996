def _primaries(client, headers, customer_id):
    r = client.get(f"/api/customers/{customer_id}/addresses", headers=headers)
    assert r.status_code == 200
    return [a for a in r.json()["data"] if a["isPrimary"]]


class TestCreateCustomer:
    def test_create_with_addresses(self, client, api, headers):
        customer = api.create_customer(headers)
        assert customer["name"] == "Asha Rao"
        assert len(customer["addresses"]) == 2
        first = customer["addresses"][0]
        assert first["isPrimary"] is True
        assert first["fullAddress"] == "12 MG Road, Bengaluru, Karnataka - 560001"

    def test_at_least_one_address_required(self, client, headers):
        r = client.post(
            "/api/customers",
            json={"name": "No Address", "email": "na@example.com", "phone": "1", "addresses": []},
            headers=headers,
        )
        assert r.status_code == 400
        assert r.json()["status"] is False

    def test_duplicate_email_within_tenant_is_409(self, client, api, headers):
        api.create_customer(headers)
        r = client.post(
            "/api/customers",
            json={
                "name": "Other", "email": "asha@example.com", "phone": "111",
                "addresses": [{"addressLine": "1 Main", "city": "Pune", "pinCode": "411001", "state": "MH"}],
            },
            headers=headers,
        )
        assert r.status_code == 409

    def test_same_email_allowed_for_another_tenant(self, api, headers, other_headers):
        api.create_customer(headers)
        api.create_customer(other_headers)

    def test_legacy_primary_key_is_accepted(self, api, headers):
        customer = api.create_customer(
            headers,
            addresses=[{"addressLine": "9 Hill Rd", "city": "Mumbai", "pinCode": "400050",
                        "state": "MH", "primary": True}],
        )
        assert customer["addresses"][0]["isPrimary"] is True


class TestPrimaryAddress:
    def test_only_one_primary_after_any_sequence_of_writes(self, client, api, headers):
        customer = api.create_customer(headers)
        cid = customer["id"]
        second = customer["addresses"][1]["id"]
        assert len(_primaries(client, headers, cid)) == 1

        r = client.post(
            f"/api/customers/{cid}/addresses",
            json={"addressLine": "7 Lake View", "city": "Chennai", "pinCode": "600001",
                  "state": "TN", "isPrimary": True},
            headers=headers,
        )
        assert r.status_code == 201
        third = r.json()["data"]["id"]
        assert [a["id"] for a in _primaries(client, headers, cid)] == [third]

        r = client.put(f"/api/customers/{cid}/addresses/{second}", json={"isPrimary": True}, headers=headers)
        assert r.status_code == 200
        assert [a["id"] for a in _primaries(client, headers, cid)] == [second]

        r = client.put(f"/api/customers/{cid}/addresses/{second}", json={"isPrimary": False}, headers=headers)
        assert r.status_code == 200
        assert _primaries(client, headers, cid) == []

    def test_detail_lists_primary_first(self, client, api, headers):
        customer = api.create_customer(headers)
        second = customer["addresses"][1]["id"]
        client.put(f"/api/customers/{customer['id']}/addresses/{second}", json={"isPrimary": True}, headers=headers)

        r = client.get(f"/api/customers/{customer['id']}", headers=headers)
        assert r.json()["data"]["addresses"][0]["id"] == second

    def test_editing_address_refreshes_full_address(self, client, api, headers):
        customer = api.create_customer(headers)
        addr = customer["addresses"][0]["id"]
        r = client.put(
            f"/api/customers/{customer['id']}/addresses/{addr}", json={"city": "Mysuru"}, headers=headers
        )
        assert r.json()["data"]["fullAddress"] == "12 MG Road, Mysuru, Karnataka - 560001"

    def test_duplicate_address_is_409(self, client, api, headers):
        customer = api.create_customer(headers)
        r = client.post(
            f"/api/customers/{customer['id']}/addresses",
            json={"addressLine": "12 MG Road", "city": "Bengaluru", "pinCode": "560001", "state": "Karnataka"},
            headers=headers,
        )
        assert r.status_code == 409


class TestUpsert:
    def test_reuses_customer_and_identical_address(self, client, api, headers):
        customer = api.create_customer(headers)
        r = client.post(
            "/api/customers/upsert",
            json={
                "name": "Asha Rao", "email": "", "phone": "9876543210",
                "address": [
                    {"addressLine": "44 Park Street", "city": "Kolkata", "pinCode": "700016",
                     "state": "West Bengal", "isPrimary": True},
                    {"addressLine": "3 Beach Rd", "city": "Goa", "pinCode": "403001", "state": "GA"},
                ],
            },
            headers=headers,
        )
        assert r.status_code == 200
        data = r.json()["data"]
        assert data["customer"]["id"] == customer["id"]
        assert data["addresses"][0]["id"] == customer["addresses"][1]["id"]
        assert data["addresses"][0]["isPrimary"] is True
        assert len(_primaries(client, headers, customer["id"])) == 1

        listing = client.get("/api/customers", headers=headers).json()
        assert listing["pagination"]["total"] == 1

    def test_creates_when_nothing_matches(self, client, headers):
        r = client.post(
            "/api/customers/upsert",
            json={"name": "Brand New", "phone": "5550001",
                  "address": [{"addressLine": "1 A St", "city": "Delhi", "pinCode": "110001", "state": "DL"}]},
            headers=headers,
        )
        assert r.status_code == 200
        assert r.json()["data"]["customer"]["email"] is None


class TestCustomerAccess:
    def test_other_tenant_gets_404(self, client, api, headers, other_headers):
        customer = api.create_customer(headers)
        r = client.get(f"/api/customers/{customer['id']}", headers=other_headers)
        assert r.status_code == 404
        assert r.json() == {"status": False, "message": "Customer not found or not authorized"}

    def test_list_is_scoped_and_searchable(self, client, api, headers, other_headers):
        api.create_customer(headers)
        api.create_customer(headers, name="Bilal Khan", email="bilal@example.com", phone="111222")
        api.create_customer(other_headers, name="Bilal Other", email="b2@example.com", phone="999")

        r = client.get("/api/customers", params={"search": "bilal"}, headers=headers)
        body = r.json()
        assert [c["name"] for c in body["data"]] == ["Bilal Khan"]
        assert body["pagination"] == {"page": 1, "limit": 10, "total": 1, "totalPages": 1}

    def test_bad_pagination_is_400(self, client, headers):
        assert client.get("/api/customers", params={"limit": 500}, headers=headers).status_code == 400
        assert client.get("/api/customers", params={"page": 0}, headers=headers).status_code == 400


class TestDeleteCustomer:
    def test_delete_without_orders(self, client, api, headers):
        customer = api.create_customer(headers)
        r = client.delete(f"/api/customers/{customer['id']}", headers=headers)
        assert r.status_code == 200
        assert client.get(f"/api/customers/{customer['id']}", headers=headers).status_code == 404

    def test_delete_with_orders_is_409(self, client, api, headers):
        customer = api.create_customer(headers)
        api.create_order(headers, customer["id"])
        r = client.delete(f"/api/customers/{customer['id']}", headers=headers)
        assert r.status_code == 409

    def test_delete_with_shipments_under_another_order_is_409(self, client, api, headers):
        receiver = api.create_customer(headers)
        buyer = api.create_customer(headers, name="B", email="b@example.com", phone="2")
        order = api.create_order(headers, buyer["id"])
        shipment = api.create_shipment(headers, order["id"], receiver["id"], receiver["addresses"][0]["id"])

        r = client.delete(f"/api/customers/{receiver['id']}", headers=headers)
        assert r.status_code == 409
        assert r.json()["status"] is False

        kept = client.get(f"/api/shipments/{shipment['id']}", headers=headers).json()["data"]
        assert kept["customer"]["id"] == receiver["id"]
