"""
Tests for the shared dashboard state

Requirements verified:
1. Alerts: newest first, capped at 50, latest-per-zone lookup
2. High-risk side effects: buzzer (respecting silence) and one emergency call
3. Zone configuration: silence toggle and webcam/IP camera switching
4. SOS: critical alert, all zones un-silenced, single alarm pulse
"""

import pytest
from unittest.mock import Mock

from drishti.flows import FlowError
from drishti.flows.schemas import EmergencyCallOutput
from drishti.services.sentinel_service import SentinelService
from drishti.state.models import ALL_ZONES, SOS_ALERT_TYPE


@pytest.fixture
def mock_call_flow():
    flow = Mock()
    flow.return_value = EmergencyCallOutput(
        status="Successfully initiated emergency call to 9597428005.",
        confirmation_number="call_abc",
    )
    return flow


@pytest.fixture
def service(mock_call_flow):
    svc = SentinelService(emergency_call_flow=mock_call_flow, run_side_effects_async=False)
    yield svc
    svc.shutdown()


def _add(service, risk_level="low", zone_id="zone-a", type="Loitering"):
    return service.add_alert(
        type=type,
        description="Person standing near the gate",
        risk_level=risk_level,
        zone_id=zone_id,
        location="Zone A",
    )


# ============ TEST 1: Alert list ============

class TestAlertList:
    """Alerts are stored newest first with a fixed cap"""

    def test_newest_alert_first(self, service):
        """
        Requirement: The latest alert is always at the top
        Test: Second alert added is alerts[0]
        """
        first = _add(service)
        second = _add(service, type="Fight")

        assert service.alerts[0].id == second.id
        assert service.alerts[1].id == first.id

    def test_alert_history_capped_at_50(self, service):
        """
        Requirement: Only the 50 most recent alerts are kept
        Test: 55 alerts leaves 50, oldest dropped
        """
        added = [_add(service) for _ in range(55)]

        assert len(service.alerts) == 50
        assert service.alerts[0].id == added[-1].id
        assert added[0].id not in {a.id for a in service.alerts}

    def test_alert_ids_unique(self, service):
        ids = {_add(service).id for _ in range(20)}
        assert len(ids) == 20

    def test_latest_alert_for_zone(self, service):
        """
        Requirement: Latest alert lookup is per zone
        Test: Zone B alert does not shadow the latest Zone A alert
        """
        zone_a = _add(service, zone_id="zone-a")
        _add(service, zone_id="zone-b")

        assert service.get_latest_alert_for_zone("zone-a").id == zone_a.id
        assert service.get_latest_alert_for_zone("zone-c") is None

    def test_maps_url_from_location(self, service):
        alert = _add(service)
        assert alert.maps_url.startswith("https://www.google.com/maps/search/?api=1&query=")
        assert "Zone+A" in alert.maps_url


# ============ TEST 2: High-risk side effects ============

class TestHighRiskAlerts:
    """High and critical alerts sound the buzzer and call emergency services"""

    def test_low_risk_has_no_side_effects(self, service, mock_call_flow):
        _add(service, risk_level="medium")

        assert service.buzzer_zone is None
        mock_call_flow.assert_not_called()

    def test_high_risk_sets_buzzer_and_calls_once(self, service, mock_call_flow):
        """
        Requirement: A new high-risk alert places exactly one emergency call
        Test: Buzzer is set for the zone and the call flow runs once
        """
        _add(service, risk_level="high", type="fight")

        assert service.buzzer_zone == "zone-a"
        mock_call_flow.assert_called_once()
        payload = mock_call_flow.call_args[0][0]
        assert payload["event_description"].startswith("High risk event: fight detected in Zone A.")

    def test_call_result_posted_as_notification(self, service):
        _add(service, risk_level="critical")

        titles = [n.title for n in service.notifications]
        assert "Emergency Call Service" in titles

    def test_silenced_zone_does_not_sound_buzzer(self, service, mock_call_flow):
        """
        Requirement: Silenced zones never sound the buzzer
        Test: Critical alert in a silenced zone still calls but leaves buzzer off
        """
        service.toggle_alarm_silence("zone-a")
        _add(service, risk_level="critical")

        assert service.buzzer_zone is None
        mock_call_flow.assert_called_once()

    def test_failed_call_posts_destructive_notification(self, service, mock_call_flow):
        mock_call_flow.side_effect = FlowError("emergencyCallFlow", "provider down")

        _add(service, risk_level="high")

        latest = service.notifications[0]
        assert latest.title == "Emergency Call Failed"
        assert latest.variant == "destructive"

    def test_buzzer_listeners_notified(self, service):
        listener = Mock()
        service.add_buzzer_listener(listener)

        _add(service, risk_level="high")
        service.set_buzzer_zone(None)

        assert [c.args[0] for c in listener.call_args_list] == ["zone-a", None]

    def test_async_side_effects_run_on_worker(self, mock_call_flow):
        svc = SentinelService(emergency_call_flow=mock_call_flow, run_side_effects_async=True)
        _add(svc, risk_level="high")
        svc._executor.shutdown(wait=True)

        mock_call_flow.assert_called_once()


# ============ TEST 3: Zone configuration ============

class TestZoneConfiguration:
    """Silence and camera source toggles"""

    def test_silencing_active_zone_stops_buzzer(self, service):
        _add(service, risk_level="high")
        assert service.buzzer_zone == "zone-a"

        zone = service.toggle_alarm_silence("zone-a")

        assert zone.alarm_silenced is True
        assert service.buzzer_zone is None

    def test_toggle_silence_twice_rearms(self, service):
        service.toggle_alarm_silence("zone-b")
        zone = service.toggle_alarm_silence("zone-b")
        assert zone.alarm_silenced is False

    def test_switch_zone_b_to_webcam_and_back(self, service):
        """
        Requirement: Switching back to IP camera restores the original address
        Test: webcam clears ip_address, ip-camera restores it
        """
        original_ip = service.get_zone_by_id("zone-b").ip_address

        webcam = service.toggle_zone_source("zone-b", "webcam")
        assert webcam.type == "webcam"
        assert webcam.ip_address is None
        assert webcam.device_index is not None

        ip_cam = service.toggle_zone_source("zone-b", "ip-camera")
        assert ip_cam.type == "ip-camera"
        assert ip_cam.ip_address == original_ip

    def test_zone_a_not_configurable(self, service):
        zone = service.toggle_zone_source("zone-a", "ip-camera")
        assert zone.type == "webcam"

    def test_unknown_source_type_rejected(self, service):
        with pytest.raises(ValueError):
            service.toggle_zone_source("zone-b", "drone")

    def test_unknown_zone_returns_none(self, service):
        assert service.toggle_alarm_silence("zone-x") is None
        assert service.get_zone_by_id("zone-x") is None

    def test_returned_zone_is_a_copy(self, service):
        zone = service.get_zone_by_id("zone-a")
        zone.alarm_silenced = True
        assert service.get_zone_by_id("zone-a").alarm_silenced is False


# ============ TEST 4: SOS ============

class TestSOS:
    """Manual SOS button"""

    def test_sos_creates_critical_alert(self, service):
        alert = service.handle_sos()

        assert alert.type == SOS_ALERT_TYPE
        assert alert.risk_level == "critical"
        assert alert.zone_id == ALL_ZONES
        assert alert.location == "Command Center"
        assert service.alerts[0].id == alert.id

    def test_sos_unsilences_every_zone(self, service):
        service.toggle_alarm_silence("zone-a")
        service.toggle_alarm_silence("zone-b")

        service.handle_sos()

        assert all(not z.alarm_silenced for z in service.zones)

    def test_sos_pulses_once_without_buzzer_loop(self, service, mock_call_flow):
        """
        Requirement: SOS plays one pulse instead of starting the buzzer
        Test: on_alarm_pulse called once, buzzer zone stays unset
        """
        pulse = Mock()
        service.on_alarm_pulse = pulse

        service.handle_sos()

        pulse.assert_called_once()
        assert service.buzzer_zone is None
        mock_call_flow.assert_called_once()
        assert service.notifications[0].title == "SOS ACTIVATED"


# ============ TEST 5: Zone status and processing ============

class TestZoneStatus:

    def test_default_status_rows(self, service):
        rows = service.zone_statuses()

        assert [r.zone_id for r in rows] == ["zone-a", "zone-b"]
        assert rows[0].status == "Monitoring..."
        assert rows[0].risk_level == "Normal"
        assert rows[0].description == "Awaiting first scan."

    def test_update_zone_status(self, service):
        service.update_zone_status("zone-a", status="Analyzing...")
        assert service.get_zone_status("zone-a").status == "Analyzing..."

    def test_try_begin_processing_is_exclusive(self, service):
        assert service.try_begin_processing("zone-a") is True
        assert service.try_begin_processing("zone-a") is False

        service.set_processing("zone-a", False)
        assert service.is_processing("zone-a") is False

    def test_notifications_capped(self, service):
        for i in range(60):
            service.notify(f"n{i}")
        assert len(service.notifications) == 50
        assert service.notifications[0].title == "n59"
