from hotel_admin.dependencies.permission_store import get_permission_store_client, get_settings, reset_permission_store_client
from hotel_admin.external_services.permission_store_client import close_shared_clients


async def test_permission_store_client_follows_settings(monkeypatch):
    monkeypatch.setenv("PERMISSION_STORE_BASE_URL", "http://store.internal/api/")
    monkeypatch.setenv("PERMISSION_STORE_TOKEN", "configured-token")
    get_settings.cache_clear()
    try:
        client = get_permission_store_client()
        assert client.base_url == "http://store.internal/api"
        assert client.token == "configured-token"
        assert get_permission_store_client() is client

        override = get_permission_store_client(base_url="http://other.internal/api", token="cli-token")
        assert override.base_url == "http://other.internal/api"
        assert override.token == "cli-token"
    finally:
        get_settings.cache_clear()
        reset_permission_store_client()
        await close_shared_clients()


def test_debug_accepts_log_level_strings(monkeypatch):
    monkeypatch.setenv("DEBUG", "warning")
    get_settings.cache_clear()
    try:
        assert get_settings().debug is False
        assert get_settings().admin_role_name == "Admin"
    finally:
        get_settings.cache_clear()
