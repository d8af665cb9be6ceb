import pytest

from quickbite import create_app, db, socketio
from quickbite.config import TestingConfig


# ─── Fixtures ──────────────────────────────────────────────────────────────────
@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def socket_client(app, client):
    socket = socketio.test_client(app, flask_test_client=client)
    yield socket
    if socket.is_connected():
        socket.disconnect()


def _login(client, role, password):
    r = client.post("/api/auth/login", json={"role": role, "password": password})
    assert r.status_code == 200, f"Login failed: {r.get_json()}"
    return {"Authorization": f"Bearer {r.get_json()['accessToken']}"}


@pytest.fixture
def kitchen_headers(client):
    return _login(client, "kitchen", TestingConfig.KITCHEN_PASSWORD)


@pytest.fixture
def admin_headers(client):
    return _login(client, "admin", TestingConfig.ADMIN_PASSWORD)


# ─── Factories ─────────────────────────────────────────────────────────────────
@pytest.fixture
def make_customer(client):
    counter = {"n": 0}

    def make(**overrides):
        counter["n"] += 1
        body = {
            "name": "Asha",
            "email": f"asha{counter['n']}@example.com",
            "phone": "555-0100",
            "address": "1 Main St",
        }
        body.update(overrides)
        r = client.post("/api/customers", json=body)
        assert r.status_code == 201, r.get_json()
        return r.get_json()

    return make


@pytest.fixture
def make_menu_item(client):
    def make(**overrides):
        body = {"name": "Masala Dosa", "category": "South Indian", "price": 6.5}
        body.update(overrides)
        r = client.post("/api/menu-items", json=body)
        assert r.status_code == 201, r.get_json()
        return r.get_json()

    return make


@pytest.fixture
def make_order(client):
    counter = {"n": 0}

    def make(**overrides):
        counter["n"] += 1
        body = {
            "tokenNumber": f"TKN-T{counter['n']:03d}",
            "subtotal": 10,
            "finalAmount": 10,
            "deliveryMode": "Pickup",
        }
        body.update(overrides)
        r = client.post("/api/orders", json=body)
        assert r.status_code == 201, r.get_json()
        return r.get_json()

    return make
