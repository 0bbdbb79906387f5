"""Integration tests for the SwarmGrid REST API."""

import pytest
from fastapi.testclient import TestClient

from swarmgrid.api.app import create_app


@pytest.fixture
def client():
    app = create_app()
    yield TestClient(app)
    app.state.session_manager.close()


def _create(client, **settings):
    body = {"settings": {"random_seed": 42, "initial_agent_count": 30,
                         "grid_width": 6, "grid_height": 6, **settings}}
    resp = client.post("/api/simulation/sessions", json=body)
    assert resp.status_code == 200
    return resp.json()["id"]


class TestHealthCheck:
    def test_health(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}


class TestSessionLifecycle:
    def test_create_session_defaults(self, client):
        resp = client.post("/api/simulation/sessions", json={})
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "created"
        assert data["tick"] == 0
        assert data["agent_count"] == 50
        assert data["settings"]["grid_width"] == 20
        assert data["metrics"]["total_transactions"] == 0

    def test_create_session_from_preset(self, client):
        resp = client.post("/api/simulation/sessions", json={"preset": "static_market"})
        assert resp.status_code == 200
        assert resp.json()["settings"]["experiment_name"] == "static_market"

    def test_preset_with_overrides(self, client):
        resp = client.post("/api/simulation/sessions", json={
            "preset": "provider_heavy", "settings": {"initial_agent_count": 10},
        })
        data = resp.json()
        assert data["settings"]["provider_ratio"] == 0.7
        assert data["agent_count"] == 10

    def test_unknown_preset(self, client):
        resp = client.post("/api/simulation/sessions", json={"preset": "nope"})
        assert resp.status_code == 404

    def test_invalid_settings(self, client):
        resp = client.post("/api/simulation/sessions", json={"settings": {"grid_width": 0}})
        assert resp.status_code == 422

    def test_unknown_setting(self, client):
        resp = client.post("/api/simulation/sessions", json={"settings": {"bogus": 1}})
        assert resp.status_code == 422

    def test_list_sessions(self, client):
        _create(client)
        _create(client)
        resp = client.get("/api/simulation/sessions")
        assert resp.status_code == 200
        assert len(resp.json()) == 2

    def test_get_session_not_found(self, client):
        resp = client.get("/api/simulation/sessions/nonexistent")
        assert resp.status_code == 404

    def test_delete_session(self, client):
        sid = _create(client)
        resp = client.delete(f"/api/simulation/sessions/{sid}")
        assert resp.json()["deleted"] is True
        assert client.get(f"/api/simulation/sessions/{sid}").status_code == 404


class TestControls:
    def test_step(self, client):
        sid = _create(client)
        resp = client.post(f"/api/simulation/sessions/{sid}/step", json={"n": 4})
        assert resp.status_code == 200
        data = resp.json()
        assert data["tick"] == 4
        assert data["status"] == "paused"

    def test_step_validation(self, client):
        sid = _create(client)
        resp = client.post(f"/api/simulation/sessions/{sid}/step", json={"n": 0})
        assert resp.status_code == 422

    def test_start_pause(self, client):
        sid = _create(client, speed=0.5)
        resp = client.post(f"/api/simulation/sessions/{sid}/start")
        assert resp.json()["is_running"] is True
        assert client.post(f"/api/simulation/sessions/{sid}/step", json={"n": 1}).status_code == 409
        resp = client.post(f"/api/simulation/sessions/{sid}/pause")
        assert resp.json()["is_running"] is False
        assert resp.json()["status"] == "paused"

    def test_speed(self, client):
        sid = _create(client)
        resp = client.post(f"/api/simulation/sessions/{sid}/speed", json={"speed": 3.0})
        assert resp.json()["settings"]["speed"] == 3.0
        resp = client.post(f"/api/simulation/sessions/{sid}/speed", json={"speed": 0})
        assert resp.status_code == 422

    def test_reset(self, client):
        sid = _create(client)
        client.post(f"/api/simulation/sessions/{sid}/step", json={"n": 3})
        resp = client.post(f"/api/simulation/sessions/{sid}/reset")
        assert resp.json()["tick"] == 0
        assert resp.json()["status"] == "created"

    def test_patch_settings(self, client):
        sid = _create(client)
        client.post(f"/api/simulation/sessions/{sid}/step", json={"n": 2})
        resp = client.patch(f"/api/simulation/sessions/{sid}/settings",
                            json={"overrides": {"trade_probability": 0.8}})
        assert resp.status_code == 200
        assert resp.json()["tick"] == 2
        resp = client.patch(f"/api/simulation/sessions/{sid}/settings",
                            json={"overrides": {"grid_height": 4}})
        assert resp.json()["tick"] == 0
        assert resp.json()["settings"]["grid_height"] == 4

    def test_patch_settings_invalid(self, client):
        sid = _create(client)
        resp = client.patch(f"/api/simulation/sessions/{sid}/settings",
                            json={"overrides": {"hybrid_ratio": 0.9}})
        assert resp.status_code == 422

    def test_patch_non_integer_then_reset(self, client):
        sid = _create(client)
        resp = client.patch(f"/api/simulation/sessions/{sid}/settings",
                            json={"overrides": {"grid_width": 7.5}})
        assert resp.status_code == 422
        resp = client.post(f"/api/simulation/sessions/{sid}/reset")
        assert resp.status_code == 200
        assert resp.json()["settings"]["grid_width"] == 6

    def test_patch_structural_while_running(self, client):
        sid = _create(client, speed=0.5)
        client.post(f"/api/simulation/sessions/{sid}/start")
        resp = client.patch(f"/api/simulation/sessions/{sid}/settings",
                            json={"overrides": {"grid_width": 3}})
        assert resp.status_code == 409


class TestAgents:
    def test_list(self, client):
        sid = _create(client)
        resp = client.get(f"/api/agents/{sid}", params={"page_size": 10})
        data = resp.json()
        assert data["total"] == 30
        assert len(data["agents"]) == 10
        assert data["agents"][0]["id"] == "agent_0001"

    def test_filter_by_kind(self, client):
        sid = _create(client)
        data = client.get(f"/api/agents/{sid}", params={"kind": "hybrid"}).json()
        assert data["total"] == 6
        assert all(a["kind"] == "hybrid" for a in data["agents"])

    def test_bad_sort(self, client):
        sid = _create(client)
        assert client.get(f"/api/agents/{sid}", params={"sort": "age"}).status_code == 400

    def test_detail(self, client):
        sid = _create(client, trade_probability=1.0)
        client.post(f"/api/simulation/sessions/{sid}/step", json={"n": 5})
        resp = client.get(f"/api/agents/{sid}/agent_0001")
        assert resp.status_code == 200
        data = resp.json()
        assert data["kind"] == "provider"
        assert len(data["history"]) == data["trade_count"]

    def test_detail_unknown(self, client):
        sid = _create(client)
        assert client.get(f"/api/agents/{sid}/agent_9999").status_code == 404

    def test_unknown_session(self, client):
        assert client.get("/api/agents/missing").status_code == 404


class TestGrid:
    def test_grid(self, client):
        sid = _create(client)
        data = client.get(f"/api/grid/{sid}").json()
        assert data["width"] == 6 and data["height"] == 6
        assert len(data["cells"]) == 36
        assert sum(len(c["agents"]) for c in data["cells"]) == 30

    def test_occupied_only(self, client):
        sid = _create(client)
        data = client.get(f"/api/grid/{sid}", params={"occupied_only": True}).json()
        assert all(c["agents"] for c in data["cells"])

    def test_cell(self, client):
        sid = _create(client)
        resp = client.get(f"/api/grid/{sid}/cells/2/3")
        assert resp.json()["x"] == 2 and resp.json()["y"] == 3
        assert client.get(f"/api/grid/{sid}/cells/6/0").status_code == 404

    def test_resource_distribution(self, client):
        sid = _create(client)
        data = client.get(f"/api/grid/{sid}/resources/compute").json()
        assert len(data["distribution"]) == 6
        assert len(data["distribution"][0]) == 6
        assert data["placed"] == data["total"] == 1000

    def test_unknown_resource(self, client):
        sid = _create(client)
        assert client.get(f"/api/grid/{sid}/resources/bandwidth").status_code == 404


class TestMetrics:
    def test_current(self, client):
        sid = _create(client, trade_probability=1.0)
        client.post(f"/api/simulation/sessions/{sid}/step", json={"n": 5})
        data = client.get(f"/api/metrics/{sid}/current").json()
        assert data["tick"] == 5
        assert set(data["average_price"]) == {"compute", "storage", "data"}

    def test_ticks(self, client):
        sid = _create(client)
        client.post(f"/api/simulation/sessions/{sid}/step", json={"n": 5})
        data = client.get(f"/api/metrics/{sid}/ticks", params={"from_tick": 2, "to_tick": 4}).json()
        assert [m["tick"] for m in data] == [2, 3]

    def test_time_series(self, client):
        sid = _create(client)
        client.post(f"/api/simulation/sessions/{sid}/step", json={"n": 3})
        data = client.get(f"/api/metrics/{sid}/time-series/success_rate").json()
        assert data["ticks"] == [1, 2, 3]
        assert len(data["values"]) == 3

    def test_time_series_unknown_field(self, client):
        sid = _create(client)
        resp = client.get(f"/api/metrics/{sid}/time-series/nonsense")
        assert resp.status_code == 400

    def test_summary(self, client):
        sid = _create(client, trade_probability=1.0)
        client.post(f"/api/simulation/sessions/{sid}/step", json={"n": 10})
        data = client.get(f"/api/metrics/{sid}/summary").json()
        assert data["ticks"] == 10
        assert 0.0 <= data["success_rate"] <= 1.0
        assert data["peak_transactions_per_tick"] >= 0

    def test_price_trends(self, client):
        sid = _create(client)
        client.post(f"/api/simulation/sessions/{sid}/step", json={"n": 3})
        data = client.get(f"/api/metrics/{sid}/price-trends").json()
        assert set(data) == {"compute", "storage", "data"}
        assert {"average_price", "change_pct", "increasing"} <= set(data["compute"])


class TestTransactions:
    def test_recent(self, client):
        sid = _create(client, trade_probability=1.0)
        client.post(f"/api/simulation/sessions/{sid}/step", json={"n": 10})
        data = client.get(f"/api/transactions/{sid}").json()
        assert len(data["transactions"]) == min(5, data["total"])
        timestamps = [t["timestamp"] for t in data["transactions"]]
        assert timestamps == sorted(timestamps, reverse=True)

    def test_filter_success(self, client):
        sid = _create(client, trade_probability=1.0)
        client.post(f"/api/simulation/sessions/{sid}/step", json={"n": 10})
        data = client.get(f"/api/transactions/{sid}", params={"success": False, "limit": 100}).json()
        assert all(t["success"] is False for t in data["transactions"])

    def test_unknown_resource(self, client):
        sid = _create(client)
        resp = client.get(f"/api/transactions/{sid}", params={"resource_type": "gpu"})
        assert resp.status_code == 400

    def test_network(self, client):
        sid = _create(client, trade_probability=1.0)
        client.post(f"/api/simulation/sessions/{sid}/step", json={"n": 5})
        data = client.get(f"/api/transactions/{sid}/network").json()
        assert data["edge_count"] == len(data["edges"])


class TestExperiments:
    def test_presets(self, client):
        data = client.get("/api/experiments/presets").json()
        names = {p["name"] for p in data}
        assert "baseline" in names and "hybrid_market" in names

    def test_preset_detail(self, client):
        data = client.get("/api/experiments/presets/consumer_heavy").json()
        assert data["settings"]["consumer_ratio"] == 0.75

    def test_unknown_preset(self, client):
        assert client.get("/api/experiments/presets/nope").status_code == 404


class TestShutdown:
    def test_shutdown_stops_timers(self):
        app = create_app()
        with TestClient(app) as client:
            sid = _create(client, speed=0.5)
            client.post(f"/api/simulation/sessions/{sid}/start")
            session = app.state.session_manager.get_session(sid)
            assert session.is_running
        assert not session.is_running


class TestDefaultPreset:
    def test_env_default_preset(self, monkeypatch):
        monkeypatch.setenv("SWARMGRID_DEFAULT_PRESET", "static_market")
        app = create_app()
        client = TestClient(app)
        data = client.post("/api/simulation/sessions", json={}).json()
        assert data["settings"]["experiment_name"] == "static_market"
        assert data["agent_count"] == 80
