"""Tests for the FastAPI webhook router."""
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from lxml import etree

from bluem_sdk import WebhookVerifier
from bluem_sdk.integrations.fastapi import create_webhook_router


@pytest.fixture
def received():
    return []


@pytest.fixture
def app_client(signing_material, received):
    app = FastAPI()
    verifier = WebhookVerifier(signing_material[1])
    app.include_router(create_webhook_router(verifier, handler=received.append), prefix="/bluem")
    return TestClient(app)


class TestWebhookRouter:
    """Tests for create_webhook_router."""

    def test_signed_update(self, app_client, sign_xml, mock_responses, received):
        """Should answer 200 and hand the update to the handler."""
        response = app_client.post(
            "/bluem/webhook",
            content=sign_xml(mock_responses["payment_status"]),
            headers={"Content-Type": "application/xml"},
        )

        assert response.status_code == 200
        assert len(received) == 1
        assert received[0].status_update.transaction_id == "xyz"

    def test_empty_post(self, app_client, received):
        response = app_client.post("/bluem/webhook", content=b"")

        assert response.status_code == 200
        assert received == []

    def test_get_rejected(self, app_client):
        assert app_client.get("/bluem/webhook").status_code == 400

    def test_unsigned_rejected(self, app_client, mock_responses, received):
        response = app_client.post("/bluem/webhook", content=mock_responses["payment_status"])

        assert response.status_code == 400
        assert received == []

    def test_garbage_signature_rejected(self, app_client, sign_xml, mock_responses, received):
        """Should answer 400 when the signature value cannot be decoded."""
        root = etree.fromstring(sign_xml(mock_responses["payment_status"]))
        root.find(".//{http://www.w3.org/2000/09/xmldsig#}SignatureValue").text = "!!!notbase64@@"
        body = etree.tostring(root)

        response = app_client.post("/bluem/webhook", content=body)

        assert response.status_code == 400
        assert received == []
