"""
API tests with FastAPI's TestClient (model and cameras mocked)
"""

import pytest
from fastapi.testclient import TestClient
from unittest.mock import Mock

import app as app_module
from drishti.utils.media import bytes_to_data_uri


@pytest.fixture
def client(mock_llm, mock_grabber):
    app_module.init_services(
        llm=mock_llm,
        frame_grabber=mock_grabber,
        run_side_effects_async=False,
        buzzer_player=Mock(),
    )
    yield TestClient(app_module.app)
    app_module.buzzer.stop()
    app_module.sentinel.shutdown()


class TestBasics:

    def test_root_and_health(self, client):
        assert client.get("/").json()["dashboard"] == "/dashboard"

        health = client.get("/health").json()
        assert health["status"] == "healthy"
        assert health["auto_scan_running"] is False

    def test_startup_writes_nothing_to_disk(self, client, monkeypatch, tmp_path):
        """
        Requirement: The server keeps all state in memory
        Test: Startup in an empty working directory creates no files or folders
        """
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(app_module.monitor, "start", Mock())

        with TestClient(app_module.app):
            pass

        assert list(tmp_path.iterdir()) == []
        assert not hasattr(app_module.settings, "DATA_DIR")

    def test_dashboard_page(self, client):
        response = client.get("/dashboard")
        assert response.status_code == 200
        assert "Drishti Sentinel" in response.text

    def test_login_accepts_any_credentials(self, client):
        response = client.post("/api/v1/login", json={"email": "guard@site.com", "password": "x"})

        assert response.status_code == 200
        assert response.json()["token"]

    def test_login_rejects_blank_fields(self, client):
        response = client.post("/api/v1/login", json={"email": " ", "password": "x"})
        assert response.status_code == 422


class TestZones:

    def test_list_zones(self, client):
        zones = client.get("/api/v1/zones").json()

        assert [z["id"] for z in zones] == ["zone-a", "zone-b"]
        assert zones[0]["type"] == "webcam"
        assert zones[1]["type"] == "ip-camera"

    def test_status_table(self, client):
        rows = client.get("/api/v1/zones/status").json()
        assert rows[0]["description"] == "Awaiting first scan."

    def test_silence_toggle(self, client):
        zone = client.post("/api/v1/zones/zone-a/silence").json()
        assert zone["alarm_silenced"] is True

    def test_switch_source(self, client):
        zone = client.post("/api/v1/zones/zone-b/source", json={"type": "webcam"}).json()

        assert zone["type"] == "webcam"
        assert zone["ip_address"] is None

    def test_switch_source_invalid_type(self, client):
        response = client.post("/api/v1/zones/zone-b/source", json={"type": "drone"})
        assert response.status_code == 422

    def test_unknown_zone_404(self, client):
        assert client.post("/api/v1/zones/zone-x/silence").status_code == 404
        assert client.post("/api/v1/zones/zone-x/scan", json={}).status_code == 404


class TestScanEndpoint:

    def test_scan_with_browser_frame(self, client, mock_llm, mock_grabber, frame_uri, feed_reply):
        """
        Requirement: The dashboard can send its own webcam frame for analysis
        Test: Frame is forwarded to the model and the camera is not read
        """
        mock_llm.generate_json.return_value = feed_reply(
            anomaly_type="fight", description="Two people fighting", risk_level="high", is_anomaly=True
        )

        response = client.post("/api/v1/zones/zone-a/scan", json={"frame_data_uri": frame_uri})

        body = response.json()
        assert response.status_code == 200
        assert body["status"] == "completed"
        assert body["alert"]["type"] == "fight"
        assert body["zone_status"]["status"] == "Anomaly Detected"
        mock_grabber.grab.assert_not_called()

        buzzer = client.get("/api/v1/buzzer").json()
        assert buzzer == {"zone_id": "zone-a", "active": True}

        stopped = client.delete("/api/v1/buzzer").json()
        assert stopped["active"] is False

    def test_repeated_scan_debounced(self, client, mock_llm, feed_reply):
        mock_llm.generate_json.return_value = feed_reply()

        client.post("/api/v1/zones/zone-b/scan", json={})
        response = client.post("/api/v1/zones/zone-b/scan", json={})

        assert response.json()["status"] == "debounced"
        assert mock_llm.generate_json.call_count == 1

    def test_source_switch_allows_immediate_scan(self, client, mock_llm, feed_reply):
        """
        Requirement: Switching a zone's camera clears its scan debounce
        Test: Scan, switch zone-b to webcam, scan again at once, both analyzed
        """
        mock_llm.generate_json.return_value = feed_reply()

        client.post("/api/v1/zones/zone-b/scan", json={})
        client.post("/api/v1/zones/zone-b/source", json={"type": "webcam"})
        response = client.post("/api/v1/zones/zone-b/scan", json={})

        assert response.json()["status"] == "completed"
        assert mock_llm.generate_json.call_count == 2

    def test_source_switch_keeps_other_zone_debounced(self, client, mock_llm, feed_reply):
        mock_llm.generate_json.return_value = feed_reply()

        client.post("/api/v1/zones/zone-a/scan", json={})
        client.post("/api/v1/zones/zone-b/source", json={"type": "webcam"})

        assert client.post("/api/v1/zones/zone-a/scan", json={}).json()["status"] == "debounced"


class TestAlertsEndpoints:

    def test_sos_and_alert_filters(self, client):
        sos = client.post("/api/v1/sos")
        assert sos.status_code == 201
        assert sos.json()["type"] == "SOS Signal"

        assert len(client.get("/api/v1/alerts").json()) == 1
        assert client.get("/api/v1/alerts", params={"zone_id": "zone-a"}).json() == []
        assert client.get("/api/v1/alerts/latest/all-zones").json()["risk_level"] == "critical"
        assert client.get("/api/v1/alerts/latest/zone-a").status_code == 404

        titles = [n["title"] for n in client.get("/api/v1/notifications").json()]
        assert "SOS ACTIVATED" in titles

    def test_alarm_sound(self, client):
        response = client.get("/api/v1/alarm.wav")

        assert response.status_code == 200
        assert response.headers["content-type"] == "audio/wav"
        assert response.content[:4] == b"RIFF"


class TestAnalysisEndpoints:

    def test_crowd_density(self, client, mock_llm):
        mock_llm.generate_json.return_value = {
            "head_count": 5,
            "density_category": "Medium",
            "description": "Small group at the gate.",
        }

        response = client.post("/api/v1/crowd-density", json={"zone_id": "zone-a"})

        assert response.status_code == 200
        assert response.json()["density_level"] == "medium"
        assert len(client.get("/api/v1/crowd-density/history").json()) == 1

    def test_crowd_density_model_failure_502(self, client, mock_llm):
        mock_llm.generate_json.side_effect = ValueError("Model reply is not valid JSON")

        response = client.post("/api/v1/crowd-density", json={"zone_id": "zone-a"})

        assert response.status_code == 502

    def test_face_match_upload(self, client, mock_llm, jpeg_bytes):
        mock_llm.generate_json.return_value = {
            "match_confidence_zone_a": 10,
            "match_confidence_zone_b": 92,
            "last_seen_timestamp_zone_b": "2024-05-01T11:00:00Z",
        }

        response = client.post(
            "/api/v1/face-match",
            files={"photo": ("suspect.jpg", jpeg_bytes, "image/jpeg")},
        )

        results = response.json()
        assert response.status_code == 200
        assert [r["match_found"] for r in results] == [False, True]
        assert results[1]["person_photo_data_uri"] == bytes_to_data_uri(jpeg_bytes)

    def test_face_match_rejects_non_image(self, client):
        response = client.post(
            "/api/v1/face-match",
            files={"photo": ("notes.txt", b"hello", "text/plain")},
        )
        assert response.status_code == 400

    def test_emergency_call(self, client):
        response = client.post("/api/v1/emergency-call", json={"event_description": "Fire in Zone B"})

        body = response.json()
        assert body["status"].startswith("Successfully initiated emergency call")
        assert body["confirmation_number"].startswith("call_")


class TestFlowEndpoints:

    def test_list_flows(self, client):
        assert "faceMatchFlow" in client.get("/api/v1/flows").json()

    def test_run_flow(self, client, mock_llm, frame_uri):
        mock_llm.generate_json.return_value = {"fire_detected": False, "confidence": 0.05}

        response = client.post(
            "/api/v1/flows/detectFireHazardsFlow",
            json={"photo_data_uri": frame_uri, "zone": "Zone B"},
        )

        assert response.json() == {"fire_detected": False, "confidence": 0.05}

    def test_run_flow_bad_input(self, client):
        response = client.post(
            "/api/v1/flows/detectFireHazardsFlow",
            json={"photo_data_uri": "nope", "zone": "Zone B"},
        )
        assert response.status_code == 422

    def test_unknown_flow(self, client):
        assert client.post("/api/v1/flows/teleportFlow", json={}).status_code == 404


class TestErrorLogging:
    """Every mapped API error is logged with its traceback"""

    @staticmethod
    def _error_records(caplog):
        return [r for r in caplog.records if r.name == "app" and r.levelname == "ERROR"]

    def test_crowd_density_flow_error_logged(self, client, mock_llm, caplog):
        """
        Requirement: Mapped errors are logged with exc_info
        Test: 502 from a bad model reply leaves an ERROR record with a traceback
        """
        mock_llm.generate_json.side_effect = ValueError("Model reply is not valid JSON")

        with caplog.at_level("ERROR"):
            response = client.post("/api/v1/crowd-density", json={"zone_id": "zone-a"})

        assert response.status_code == 502
        records = self._error_records(caplog)
        assert records
        assert records[-1].exc_info is not None

    def test_face_match_flow_error_logged(self, client, mock_llm, jpeg_bytes, caplog):
        mock_llm.generate_json.return_value = {"match_confidence_zone_a": 50}

        with caplog.at_level("ERROR"):
            response = client.post(
                "/api/v1/face-match",
                files={"photo": ("suspect.jpg", jpeg_bytes, "image/jpeg")},
            )

        assert response.status_code == 502
        assert self._error_records(caplog)[-1].exc_info is not None

    def test_emergency_call_flow_error_502(self, client, caplog):
        from drishti.flows import FlowError

        app_module.flows["emergencyCallFlow"] = Mock(
            side_effect=FlowError("emergencyCallFlow", "provider down")
        )

        with caplog.at_level("ERROR"):
            response = client.post("/api/v1/emergency-call", json={"event_description": "Fire"})

        assert response.status_code == 502
        assert self._error_records(caplog)[-1].exc_info is not None

    def test_emergency_call_unexpected_error_500(self, client, caplog):
        app_module.flows["emergencyCallFlow"] = Mock(side_effect=RuntimeError("socket closed"))

        with caplog.at_level("ERROR"):
            response = client.post("/api/v1/emergency-call", json={"event_description": "Fire"})

        assert response.status_code == 500
        assert response.json()["detail"] == "Emergency call failed: socket closed"
        assert self._error_records(caplog)[-1].exc_info is not None
