# This project was developed with assistance from AI tools.
"""Tests for loan pricing REST endpoints."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from factories import loan_payload, make_matrix, make_matrix_document
from pricing_api.services.matrix_store import MatrixNotFoundError


@pytest.fixture
def mock_matrix():
    """Patch the store lookup to return the test matrix."""
    with patch("pricing_api.routes._matrix.get_pricing_matrix", new_callable=AsyncMock) as mock:
        mock.return_value = make_matrix()
        yield mock


@pytest.fixture
def mock_matrix_missing():
    with patch("pricing_api.routes._matrix.get_pricing_matrix", new_callable=AsyncMock) as mock:
        mock.side_effect = MatrixNotFoundError("acme", "dscr")
        yield mock


class TestLoanPricing:
    """POST /api/loan-pricing"""

    def test_returns_sorted_options(self, client, mock_matrix):
        resp = client.post(
            "/api/loan-pricing",
            json={"loan_program": "dscr", "lender_id": "test", "input": loan_payload()},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        rates = [r["final_rate"] for r in body["data"]]
        assert rates == sorted(rates)
        assert body["data"][0]["lender_id"] == "test"
        assert "fee_breakdown" in body["data"][0]

    def test_defaults_to_configured_lender(self, client, mock_matrix):
        resp = client.post(
            "/api/loan-pricing", json={"loan_program": "dscr", "input": loan_payload()}
        )
        assert resp.status_code == 200
        assert mock_matrix.await_args.args[1:] == ("visio", "dscr")

    def test_ineligible_returns_400_with_validation(self, client, mock_matrix):
        resp = client.post(
            "/api/loan-pricing",
            json={"loan_program": "dscr", "input": loan_payload(ltv=80, loan_amount=400000)},
        )
        assert resp.status_code == 400
        body = resp.json()
        assert body["success"] is False
        assert body["error"] == "Loan not eligible"
        assert body["validation"]["is_valid"] is False
        assert body["validation"]["findings"][0]["code"] == "LTV_TOO_HIGH"

    def test_no_options_returns_400(self, client, mock_matrix):
        resp = client.post(
            "/api/loan-pricing", json={"loan_program": "dscr", "input": loan_payload(fico=650)}
        )
        assert resp.status_code == 400
        assert resp.json()["error"] == "No valid loan options found for this scenario"

    def test_missing_matrix_returns_404_problem_details(self, client, mock_matrix_missing):
        resp = client.post(
            "/api/loan-pricing",
            json={"loan_program": "dscr", "lender_id": "acme", "input": loan_payload()},
            headers={"x-request-id": "req-123"},
        )
        assert resp.status_code == 404
        body = resp.json()
        assert body["title"] == "Not Found"
        assert body["request_id"] == "req-123"
        assert "acme" in body["detail"]
        assert body["type"] == "/problems/pricing-matrix-not-found"
        assert body["instance"] == "/api/loan-pricing"
        assert resp.headers["content-type"] == "application/problem+json"

    def test_invalid_stored_matrix_returns_500(self, client):
        document = make_matrix_document()
        del document["base_rates"]
        record = MagicMock()
        record.matrix = document
        with patch(
            "pricing_api.services.matrix_store.get_matrix_record", new_callable=AsyncMock
        ) as mock:
            mock.return_value = record
            resp = client.post(
                "/api/loan-pricing", json={"loan_program": "dscr", "input": loan_payload()}
            )
        assert resp.status_code == 500
        assert resp.json()["detail"] == "Stored pricing matrix is invalid"

    def test_computation_error_returns_500(self, client, mock_matrix):
        with patch(
            "pricing_api.services.pricing.calculate_pricing", side_effect=RuntimeError("boom")
        ):
            resp = client.post(
                "/api/loan-pricing", json={"loan_program": "dscr", "input": loan_payload()}
            )
        assert resp.status_code == 500
        assert resp.json()["error"] == "Unable to compute pricing"

    def test_malformed_input_returns_422(self, client, mock_matrix):
        resp = client.post(
            "/api/loan-pricing",
            json={"loan_program": "dscr", "input": {**loan_payload(), "fico": 9000}},
        )
        assert resp.status_code == 422
        body = resp.json()
        assert body["title"] == "Unprocessable Entity"
        assert body["type"] == "/problems/request-validation-failed"
        assert [e["field"] for e in body["errors"]] == ["input.fico"]

    def test_missing_input_returns_422(self, client, mock_matrix):
        resp = client.post("/api/loan-pricing", json={"loan_program": "dscr"})
        assert resp.status_code == 422


class TestValidateLoan:
    """POST /api/loan-pricing/validate"""

    def test_valid_loan(self, client, mock_matrix):
        resp = client.post(
            "/api/loan-pricing/validate", json={"loan_program": "dscr", "input": loan_payload()}
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["is_valid"] is True
        assert body["errors"] == []

    def test_invalid_loan_is_still_200(self, client, mock_matrix):
        resp = client.post(
            "/api/loan-pricing/validate",
            json={"loan_program": "dscr", "input": loan_payload(property_state="ND")},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["is_valid"] is False
        assert body["findings"][0]["code"] == "STATE_NOT_ELIGIBLE"
