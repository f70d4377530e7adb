from unittest.mock import MagicMock, patch

import pytest
import requests

from domain.errors import TransportError
from domain.models import Coordinate
from services.geocoding import CityGeocoder, _redact_email


def _response(payload):
    mock_resp = MagicMock()
    mock_resp.json.return_value = payload
    mock_resp.raise_for_status.return_value = None
    return mock_resp


@patch("services.geocoding._session.get")
def test_geocode_returns_first_match(mock_get):
    mock_get.return_value = _response([{"lat": "48.8566", "lon": "2.3522", "display_name": "Paris"}])

    coordinate = CityGeocoder().geocode("Paris")

    assert coordinate == Coordinate(latitude=48.8566, longitude=2.3522)
    _, kwargs = mock_get.call_args
    assert kwargs["params"] == {"q": "Paris", "format": "json", "limit": 1}
    assert "User-Agent" in kwargs["headers"]


@patch("services.geocoding._session.get")
def test_geocode_returns_none_when_no_match(mock_get):
    mock_get.return_value = _response([])

    assert CityGeocoder().geocode("Atlantis") is None
    assert mock_get.call_count == 1


@patch("services.geocoding._session.get")
def test_geocode_wraps_network_errors(mock_get):
    mock_get.side_effect = requests.ConnectionError("boom")

    with pytest.raises(TransportError):
        CityGeocoder().geocode("Paris")
    # not retried at this layer
    assert mock_get.call_count == 1


@patch("services.geocoding._session.get")
def test_geocode_wraps_http_errors(mock_get):
    resp = _response([])
    resp.raise_for_status.side_effect = requests.HTTPError("503 Server Error")
    mock_get.return_value = resp

    with pytest.raises(TransportError):
        CityGeocoder().geocode("Paris")


def test_geocode_rejects_malformed_match():
    def fake_get(url, params=None, headers=None, timeout=None):
        return _response([{"lat": "not-a-number", "lon": "2.0"}])

    with pytest.raises(TransportError):
        CityGeocoder(http_get=fake_get).geocode("Paris")


def test_geocode_uses_configured_endpoint():
    seen = {}

    def fake_get(url, params=None, headers=None, timeout=None):
        seen["url"] = url
        seen["timeout"] = timeout
        return _response([{"lat": "1", "lon": "2"}])

    geocoder = CityGeocoder(base_url="http://nominatim.local/search", timeout=3.0, http_get=fake_get)
    assert geocoder.geocode("Springfield") == Coordinate(1.0, 2.0)
    assert seen == {"url": "http://nominatim.local/search", "timeout": 3.0}


def test_redact_email():
    assert _redact_email("app/1.0 (me@example.com)") == "app/1.0 <redacted>"
    assert _redact_email("app/1.0") == "app/1.0"
