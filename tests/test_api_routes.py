from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import patch

from app.api.deps import get_publisher
from app.core.errors import InsufficientStockError, NotFoundError
from app.main import app
from app.models.inventory import TransactionType
from app.services.transaction_service import TransactionResult
from app.testing.testing_mocks import StalledPublisher

NOW = datetime(2026, 3, 2, 8, 0, tzinfo=timezone.utc)


def _result(transaction_type="add", quantity=25, from_location_id=None, to_location_id=2):
    txn = SimpleNamespace(
        id=1,
        component_id=1,
        from_location_id=from_location_id,
        to_location_id=to_location_id,
        quantity=quantity,
        transaction_type=TransactionType(transaction_type),
        notes=None,
        created_by=None,
        created_at=NOW,
    )
    item = SimpleNamespace(
        id=1,
        component_id=1,
        location_id=to_location_id or from_location_id,
        quantity=quantity,
        min_stock_level=5,
        is_low_stock=False,
        last_updated=NOW,
    )
    return TransactionResult(transaction=txn, items=[item], low_stock=[])


class TestTransactionRoutes:
    def test_add_returns_created_transaction(self, client):
        with patch('app.api.transactions.add_stock') as mock_add:
            mock_add.return_value = _result()

            response = client.post(
                "/api/transactions/add",
                json={"componentId": 1, "locationId": 2, "quantity": 25},
                headers={"X-User-Id": "7"},
            )

            assert response.status_code == 201
            body = response.json()
            assert body["success"] is True
            assert body["data"]["transaction"]["transactionType"] == "add"
            assert body["data"]["items"][0]["quantity"] == 25
            assert mock_add.call_args.kwargs["user_id"] == 7

    def test_zero_quantity_is_rejected(self, client):
        with patch('app.api.transactions.add_stock') as mock_add:
            response = client.post("/api/transactions/add", json={"componentId": 1, "locationId": 2, "quantity": 0})

            assert response.status_code == 422
            assert response.json()["error"]["code"] == "validation_error"
            mock_add.assert_not_called()

    def test_same_location_transfer_is_rejected(self, client):
        response = client.post(
            "/api/transactions/transfer",
            json={"componentId": 1, "fromLocationId": 2, "toLocationId": 2, "quantity": 5},
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "validation_error"

    def test_insufficient_stock_reports_details(self, client):
        with patch('app.api.transactions.consume_stock') as mock_consume:
            mock_consume.side_effect = InsufficientStockError(1, 2, requested=10, available=3)

            response = client.post("/api/transactions/consume", json={"componentId": 1, "locationId": 2, "quantity": 10})

            assert response.status_code == 409
            error = response.json()["error"]
            assert error["code"] == "insufficient_stock"
            assert error["details"]["available"] == 3

    def test_remove_is_served_by_consume(self, client):
        with patch('app.api.transactions.consume_stock') as mock_consume:
            mock_consume.return_value = _result("consume", 4, from_location_id=2, to_location_id=None)

            response = client.post("/api/transactions/remove", json={"componentId": 1, "locationId": 2, "quantity": 4})

            assert response.status_code == 201
            assert response.json()["data"]["transaction"]["transactionType"] == "consume"

    def test_tagged_body_dispatches_on_transaction_type(self, client):
        with patch('app.api.transactions.transfer_stock') as mock_transfer:
            mock_transfer.return_value = _result("transfer", 5, from_location_id=2, to_location_id=3)

            response = client.post(
                "/api/transactions",
                json={"transactionType": "transfer", "componentId": 1, "fromLocationId": 2, "toLocationId": 3, "quantity": 5},
            )

            assert response.status_code == 201
            assert mock_transfer.call_args.args == (1, 2, 3, 5)

    def test_unknown_transaction_type_is_rejected(self, client):
        response = client.post(
            "/api/transactions",
            json={"transactionType": "adjust", "componentId": 1, "locationId": 2, "quantity": 5},
        )
        assert response.status_code == 422

    def test_unexpected_failure_is_a_server_error(self, client):
        with patch('app.api.transactions.add_stock') as mock_add:
            mock_add.side_effect = RuntimeError("database went away")

            response = client.post("/api/transactions/add", json={"componentId": 1, "locationId": 2, "quantity": 1})

            assert response.status_code == 500
            assert response.json()["success"] is False

    def test_push_is_scheduled_after_the_response(self, client):
        with patch('app.api.transactions.add_stock') as mock_add, \
                patch('app.api.transactions.publish_change') as mock_publish:
            mock_add.return_value = _result()

            response = client.post("/api/transactions/add", json={"componentId": 1, "locationId": 2, "quantity": 25})

            assert response.status_code == 201
            # The engine call itself never waits on connected clients
            assert "publisher" not in mock_add.call_args.kwargs
            mock_publish.assert_called_once()
            assert mock_publish.call_args.args[1] is mock_add.return_value

    def test_stalled_push_does_not_fail_the_request(self, client):
        stalled = StalledPublisher()
        app.dependency_overrides[get_publisher] = lambda: stalled
        try:
            with patch('app.api.transactions.add_stock') as mock_add, \
                    patch('app.services.transaction_service.PUBLISH_TIMEOUT', 0.05):
                mock_add.return_value = _result()

                response = client.post("/api/transactions/add", json={"componentId": 1, "locationId": 2, "quantity": 25})

                assert response.status_code == 201
                assert stalled.calls == 1
        finally:
            app.dependency_overrides.clear()


class TestBarcodeRoutes:
    def test_unknown_barcode_is_not_found(self, client):
        with patch('app.api.barcodes.lookup_barcode') as mock_lookup:
            mock_lookup.side_effect = NotFoundError("No component found for barcode NOPE.")

            response = client.post("/api/barcode/lookup", json={"barcode": "NOPE"})

            assert response.status_code == 404
            assert response.json()["error"]["code"] == "not_found"

    def test_expiration_over_a_week_is_rejected(self, client):
        response = client.post("/api/barcodes/temporary", json={"purpose": "demo", "expirationHours": 169})
        assert response.status_code == 422


class TestInventoryRoutes:
    def test_missing_row_is_not_found(self, client):
        with patch('app.api.inventory.get_inventory_item') as mock_get:
            mock_get.side_effect = NotFoundError("No inventory for component 1 at location 2.")

            response = client.get("/api/inventory/1/2")

            assert response.status_code == 404

    def test_audit_report(self, client):
        with patch('app.api.inventory.audit_component') as mock_audit:
            mock_audit.return_value = {
                "componentId": 1,
                "consistent": False,
                "stored": {2: 10},
                "replayed": {2: 12},
                "discrepancies": [{"locationId": 2, "stored": 10, "replayed": 12}],
            }

            response = client.get("/api/inventory/audit/1")

            assert response.status_code == 200
            data = response.json()["data"]
            assert data["consistent"] is False
            assert data["discrepancies"][0]["replayed"] == 12


class TestCatalogRoutes:
    def test_clearing_a_required_column_is_rejected(self, client):
        response = client.put("/api/components/1", json={"description": None})

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "validation_error"
        assert error["details"]["fields"] == ["description"]


class TestDataExchangeRoutes:
    def test_unknown_csv_export_type(self, client):
        response = client.get("/api/export/csv", params={"type": "orders"})
        assert response.status_code == 400

    def test_csv_export_is_an_attachment(self, client):
        with patch('app.api.data_exchange.export_csv') as mock_export:
            mock_export.return_value = ("inventory_export_2026-03-02.csv", "Component Number\r\n217520\r\n")

            response = client.get("/api/export/csv", params={"type": "inventory"})

            assert response.status_code == 200
            assert response.headers["content-type"].startswith("text/csv")
            assert 'filename="inventory_export_2026-03-02.csv"' in response.headers["content-disposition"]
            mock_export.assert_called_once_with("inventory")

    def test_import_rejects_unsupported_files(self, client):
        response = client.post(
            "/api/import/inventory",
            files={"file": ("stock.pdf", b"%PDF-1.4", "application/pdf")},
        )
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "validation_error"

    def test_import_template_lists_expected_columns(self, client):
        response = client.get("/api/import/template")

        assert response.status_code == 200
        assert response.text.splitlines()[0].startswith("Part Number,Description,Quantity")
