from settings import DEFAULT_AMENITY_DENYLIST, DEFAULT_USER_AGENT, Settings, _as_list


def test_defaults(monkeypatch):
    for name in (
        "SEARCH_RADIUS_M",
        "RESULT_LIMIT",
        "AMENITY_DENYLIST",
        "RETRY_ATTEMPTS",
        "RETRY_DELAY_MS",
        "FETCH_TIMEOUT_MS",
    ):
        monkeypatch.delenv(name, raising=False)

    s = Settings()

    assert s.SEARCH_RADIUS_M == 50000
    assert s.RESULT_LIMIT == 20
    assert s.RETRY_ATTEMPTS == 3
    assert s.RETRY_DELAY_MS == 5000
    assert s.FETCH_TIMEOUT_MS == 60000
    assert s.AMENITY_DENYLIST == list(DEFAULT_AMENITY_DENYLIST)


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("SEARCH_RADIUS_M", "1500")
    monkeypatch.setenv("RESULT_LIMIT", "50")
    monkeypatch.setenv("AMENITY_DENYLIST", "bank, parking,,")
    monkeypatch.setenv("RETRY_ATTEMPTS", "5")
    monkeypatch.setenv("RETRY_DELAY_MS", "0")
    monkeypatch.setenv("FETCH_TIMEOUT_MS", "2000")
    monkeypatch.setenv("OVERPASS_URL", "http://overpass.local/api/interpreter")

    s = Settings()

    assert s.SEARCH_RADIUS_M == 1500
    assert s.RESULT_LIMIT == 50
    assert s.AMENITY_DENYLIST == ["bank", "parking"]
    assert s.RETRY_ATTEMPTS == 5
    assert s.RETRY_DELAY_MS == 0
    assert s.FETCH_TIMEOUT_MS == 2000
    assert s.OVERPASS_URL == "http://overpass.local/api/interpreter"


def test_helpers():
    assert _as_list("", ("a",)) == []
    assert _as_list(None, ("a", "b")) == ["a", "b"]


def test_overpass_user_agent_falls_back_to_nominatim_then_default(monkeypatch):
    monkeypatch.delenv("OVERPASS_USER_AGENT", raising=False)
    monkeypatch.setenv("NOMINATIM_USER_AGENT", "my-app/2.0")
    assert Settings().OVERPASS_USER_AGENT == "my-app/2.0"

    monkeypatch.delenv("NOMINATIM_USER_AGENT")
    assert Settings().OVERPASS_USER_AGENT == DEFAULT_USER_AGENT

    monkeypatch.setenv("OVERPASS_USER_AGENT", "overpass-only/1.0")
    assert Settings().OVERPASS_USER_AGENT == "overpass-only/1.0"
