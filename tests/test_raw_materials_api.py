"""
/api/raw-materials tests

Material master data, in/out transaction logs and their effect on stock.
"""

import csv
import io


def receive(client, name, quantity, **extra):
    return client.post("/api/raw-materials/receive", json={"materialName": name, "quantity": quantity, **extra})


def use(client, name, quantity, **extra):
    return client.post("/api/raw-materials/use", json={"materialName": name, "quantity": quantity, **extra})


def material(client, name):
    for item in client.get("/api/raw-materials").json():
        if item["name"] == name:
            return item
    return None


def counters(client, name):
    item = material(client, name)
    return None if item is None else (item["received"], item["used"], item["inStock"])


class TestMaterials:
    def test_defaults_seeded_on_first_listing(self, client) -> None:
        names = [m["name"] for m in client.get("/api/raw-materials").json()]
        assert names == ["aluminium powder", "gypson powder", "lime", "sand", "soluble oil"]
        assert material(client, "sand")["unit"] == "tip"

    def test_create_with_opening_stock(self, client) -> None:
        response = client.post("/api/raw-materials", json={"name": "cement", "unit": "bag", "inStock": 5})
        assert response.status_code == 201
        body = response.json()
        assert (body["received"], body["used"], body["inStock"]) == (5, 0, 5)

    def test_duplicate_name_conflicts(self, client) -> None:
        client.post("/api/raw-materials", json={"name": "cement", "unit": "bag"})
        response = client.post("/api/raw-materials", json={"name": "cement", "unit": "kg"})
        assert response.status_code == 409
        assert response.json() == {"error": "Material already exists"}

    def test_rename_cascades_to_logs(self, client) -> None:
        created = client.post("/api/raw-materials", json={"name": "lime", "unit": "kg"}).json()
        receive(client, "lime", 10)
        use(client, "lime", 4)

        response = client.put(f"/api/raw-materials/{created['id']}", json={"name": "quicklime", "unit": "sack"})
        assert response.status_code == 200
        assert response.json()["unit"] == "sack"

        logs = client.get("/api/raw-materials/logs").json()
        assert {log["materialName"] for log in logs} == {"quicklime"}
        assert counters(client, "quicklime") == (10, 4, 6)
        assert client.get("/api/raw-materials/logs", params={"materialName": "lime"}).json() == []

    def test_rename_onto_existing_name_conflicts(self, client) -> None:
        lime = client.post("/api/raw-materials", json={"name": "lime", "unit": "kg"}).json()
        client.post("/api/raw-materials", json={"name": "sand", "unit": "tip"})
        response = client.patch(f"/api/raw-materials/{lime['id']}", json={"name": "sand"})
        assert response.status_code == 409
        assert material(client, "lime") is not None

    def test_delete_blocked_while_logs_exist(self, client) -> None:
        created = client.post("/api/raw-materials", json={"name": "lime", "unit": "kg"}).json()
        log = receive(client, "lime", 3).json()

        response = client.delete(f"/api/raw-materials/{created['id']}")
        assert response.status_code == 409
        assert response.json() == {"error": "Cannot delete material with existing logs"}

        client.delete(f"/api/raw-materials/logs/{log['id']}")
        assert client.delete(f"/api/raw-materials/{created['id']}").status_code == 200

    def test_unknown_material_is_404(self, client) -> None:
        assert client.put("/api/raw-materials/999", json={"unit": "kg"}).status_code == 404
        assert client.delete("/api/raw-materials/999").status_code == 404


class TestTransactions:
    def test_receive_creates_unknown_material(self, client) -> None:
        response = receive(client, "cement", 12.5, unit="bag", notes="truck 1")
        assert response.status_code == 201
        log = response.json()
        assert log["type"] == "in"
        assert log["unit"] == "bag"
        assert log["notes"] == "truck 1"
        assert counters(client, "cement") == (12.5, 0, 12.5)

    def test_log_takes_material_unit(self, client) -> None:
        client.post("/api/raw-materials", json={"name": "lime", "unit": "kg"})
        log = receive(client, "lime", 2, unit="tonne").json()
        assert log["unit"] == "kg"

    def test_use_reduces_stock(self, client) -> None:
        receive(client, "cement", 10)
        response = use(client, "cement", 2.5)
        assert response.status_code == 201
        assert response.json()["type"] == "out"
        assert counters(client, "cement") == (10, 2.5, 7.5)

    def test_overuse_rejected(self, client) -> None:
        receive(client, "cement", 10)
        response = use(client, "cement", 20)
        assert response.status_code == 400
        assert counters(client, "cement") == (10, 0, 10)
        assert len(client.get("/api/raw-materials/logs").json()) == 1

    def test_use_of_unknown_material_creates_nothing(self, client) -> None:
        response = use(client, "glass", 1)
        assert response.status_code == 404
        assert response.json() == {"error": "Material not found"}
        receive(client, "cement", 1)
        assert [m["name"] for m in client.get("/api/raw-materials").json()] == ["cement"]

    def test_generic_log_create(self, client) -> None:
        response = client.post(
            "/api/raw-materials/logs",
            json={"materialName": "sand", "type": "in", "quantity": "4", "unit": "tip"},
        )
        assert response.status_code == 201
        assert counters(client, "sand") == (4, 0, 4)

    def test_invalid_quantity_and_type(self, client) -> None:
        assert receive(client, "cement", 0).status_code == 400
        assert receive(client, "cement", "many").status_code == 400
        bad_type = client.post(
            "/api/raw-materials/logs",
            json={"materialName": "sand", "type": "sideways", "quantity": 1},
        )
        assert bad_type.status_code == 400

    def test_quantity_finer_than_three_decimals_rejected(self, client) -> None:
        for quantity in (0.0004, "1.0004"):
            response = receive(client, "cement", quantity)
            assert response.status_code == 400
            assert "quantity" in response.json()["error"]
        assert client.get("/api/raw-materials/logs").json() == []

        assert client.post("/api/raw-materials", json={"name": "lime", "unit": "kg", "inStock": 0.0005}).status_code == 400

        log = receive(client, "cement", 1.125).json()
        assert log["quantity"] == 1.125
        edit = client.put(f"/api/raw-materials/logs/{log['id']}", json={"quantity": 0.0001})
        assert edit.status_code == 400
        assert counters(client, "cement") == (1.125, 0, 1.125)

    def test_logs_filtered_by_date_only_upper_bound(self, client) -> None:
        receive(client, "cement", 1, date="2026-03-01T15:30:00")
        receive(client, "cement", 2, date="2026-03-02T08:00:00")

        logs = client.get("/api/raw-materials/logs", params={"dateTo": "2026-03-01"}).json()
        assert [log["quantity"] for log in logs] == [1]

    def test_logs_newest_first_and_filtered(self, client) -> None:
        receive(client, "cement", 1, date="2026-01-01T00:00:00")
        receive(client, "cement", 3, date="2026-03-01T00:00:00")
        use(client, "cement", 2, date="2026-02-01T00:00:00")

        logs = client.get("/api/raw-materials/logs").json()
        assert [log["quantity"] for log in logs] == [3, 2, 1]

        outs = client.get("/api/raw-materials/logs", params={"type": "out"}).json()
        assert [log["quantity"] for log in outs] == [2]


class TestLogEdits:
    def test_quantity_change_same_material(self, client) -> None:
        log = receive(client, "cement", 10).json()
        use(client, "cement", 4)

        response = client.put(f"/api/raw-materials/logs/{log['id']}", json={"quantity": 5})
        assert response.status_code == 200
        assert counters(client, "cement") == (5, 4, 1)

    def test_quantity_change_rejected_when_consumed(self, client) -> None:
        log = receive(client, "cement", 10).json()
        use(client, "cement", 4)

        response = client.put(f"/api/raw-materials/logs/{log['id']}", json={"quantity": 3})
        assert response.status_code == 400
        assert counters(client, "cement") == (10, 4, 6)

    def test_kind_flip(self, client) -> None:
        receive(client, "cement", 10)
        second = receive(client, "cement", 10).json()

        response = client.put(f"/api/raw-materials/logs/{second['id']}", json={"type": "out"})
        assert response.status_code == 200
        assert response.json()["type"] == "out"
        assert counters(client, "cement") == (10, 10, 0)

    def test_material_change_rolls_back_on_shortage(self, client) -> None:
        receive(client, "lime", 10)
        receive(client, "sand", 2)
        usage = use(client, "lime", 5).json()

        response = client.put(f"/api/raw-materials/logs/{usage['id']}", json={"materialName": "sand"})
        assert response.status_code == 400
        assert counters(client, "lime") == (10, 5, 5)
        assert counters(client, "sand") == (2, 0, 2)

    def test_material_change_moves_effect(self, client) -> None:
        receive(client, "lime", 10)
        receive(client, "sand", 2)
        usage = use(client, "lime", 5).json()

        response = client.put(
            f"/api/raw-materials/logs/{usage['id']}",
            json={"materialName": "sand", "quantity": 2, "notes": "moved"},
        )
        assert response.status_code == 200
        assert response.json()["materialName"] == "sand"
        assert response.json()["notes"] == "moved"
        assert counters(client, "lime") == (10, 0, 10)
        assert counters(client, "sand") == (2, 2, 0)

    def test_delete_out_log_returns_stock(self, client) -> None:
        receive(client, "cement", 10)
        usage = use(client, "cement", 4).json()
        assert client.delete(f"/api/raw-materials/logs/{usage['id']}").status_code == 200
        assert counters(client, "cement") == (10, 0, 10)

    def test_delete_in_log_clamps(self, client) -> None:
        receipt = receive(client, "cement", 10).json()
        use(client, "cement", 8)
        client.delete(f"/api/raw-materials/logs/{receipt['id']}")
        assert counters(client, "cement") == (0, 8, 0)

    def test_unknown_log_is_404(self, client) -> None:
        assert client.put("/api/raw-materials/logs/42", json={"quantity": 1}).json() == {"error": "Log not found"}
        assert client.delete("/api/raw-materials/logs/42").status_code == 404


class TestExport:
    def test_csv_has_summary_and_logs(self, client) -> None:
        receive(client, "cement", 10, notes="first load")
        use(client, "cement", 4)

        response = client.get("/api/raw-materials/export/csv")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        rows = list(csv.reader(io.StringIO(response.text)))
        assert rows[0] == ["Raw Materials Summary"]
        assert rows[1] == ["name", "unit", "received", "used", "in_stock"]
        assert rows[2][0] == "cement"
        assert ["Transaction Logs"] in rows
        log_rows = rows[rows.index(["Transaction Logs"]) + 2:]
        assert [row[2] for row in log_rows] == ["out", "in"]
