"""
Tests for the extraction API endpoints.
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from keihi.config import settings
from keihi.main import app
from keihi.services.ocr import OCRError


@pytest.fixture
def client():
    return TestClient(app)


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "running"


class TestExtractText:

    def test_fields_extracted(self, client):
        text = "ENEOS\n2024年12月10日\n給油\n合計金額 ¥4,950"
        response = client.post("/extract/text", json={"text": text})

        assert response.status_code == 200
        assert response.json() == {
            "date": "2024-12-10",
            "amount": 4950,
            "vendor": "ENEOS",
            "category": "ガソリン代",
        }

    def test_empty_text_returns_empty_record(self, client):
        response = client.post("/extract/text", json={"text": ""})

        assert response.status_code == 200
        assert response.json() == {"date": None, "amount": None, "vendor": None, "category": None}

    def test_missing_text_defaults_to_empty(self, client):
        response = client.post("/extract/text", json={})
        assert response.status_code == 200
        assert response.json()["amount"] is None

    def test_oversized_digit_run(self, client):
        response = client.post("/extract/text", json={"text": "¥" + "1" * 5000})
        assert response.status_code == 200
        assert response.json()["amount"] is None


class TestExtractImage:

    def test_rejects_non_image(self, client):
        response = client.post(
            "/extract/image",
            files={"file": ("notes.txt", b"hello", "text/plain")},
        )
        assert response.status_code == 400
        assert "Invalid file type" in response.json()["detail"]

    def test_rejects_large_upload(self, client, monkeypatch):
        monkeypatch.setattr(settings, "MAX_UPLOAD_MB", 0)
        response = client.post(
            "/extract/image",
            files={"file": ("receipt.jpg", b"\xff\xd8\xff" * 10, "image/jpeg")},
        )
        assert response.status_code == 400
        assert "File too large" in response.json()["detail"]

    def test_ocr_text_is_parsed(self, client):
        ocr_text = "タイムズ 渋谷第5\nR6.11.03\n駐車料金 ¥800"
        with patch("keihi.routers.extract.OCRService.extract_text_from_image", return_value=ocr_text):
            response = client.post(
                "/extract/image",
                files={"file": ("receipt.png", b"fake-png", "image/png")},
            )

        assert response.status_code == 200
        data = response.json()
        assert data["ocr_failed"] is False
        assert data["raw_text"] == ocr_text
        assert data["result"] == {
            "date": "2024-11-03",
            "amount": 800,
            "vendor": "タイムズ 渋谷第5",
            "category": "駐車場代",
        }

    def test_ocr_failure_returns_blank_form(self, client):
        with patch(
            "keihi.routers.extract.OCRService.extract_text_from_image",
            side_effect=OCRError("Unreadable image"),
        ):
            response = client.post(
                "/extract/image",
                files={"file": ("receipt.jpg", b"not-really-a-jpeg", "image/jpeg")},
            )

        assert response.status_code == 200
        data = response.json()
        assert data["ocr_failed"] is True
        assert data["raw_text"] == ""
        assert data["result"] == {"date": None, "amount": None, "vendor": None, "category": None}
