"""
Unit tests for credential caches.
"""
from client_agent.credentials import FileCredentialCache, MemoryCredentialCache


class TestMemoryCredentialCache:
    """Tests for MemoryCredentialCache."""

    def test_save_load_clear(self):
        cache = MemoryCredentialCache()
        assert cache.load() is None

        cache.save("TEST-AAAA-BBBB")
        assert cache.load() == "TEST-AAAA-BBBB"

        cache.clear()
        assert cache.load() is None


class TestFileCredentialCache:
    """Tests for FileCredentialCache."""

    def test_persists_between_instances(self, tmp_path):
        path = tmp_path / "client" / "access_key"
        FileCredentialCache(path).save("TEST-AAAA-BBBB")

        assert FileCredentialCache(path).load() == "TEST-AAAA-BBBB"

    def test_clear_removes_file(self, tmp_path):
        path = tmp_path / "access_key"
        cache = FileCredentialCache(path)
        cache.save("TEST-AAAA-BBBB")

        cache.clear()
        cache.clear()

        assert not path.exists()
        assert cache.load() is None

    def test_blank_file_is_no_key(self, tmp_path):
        path = tmp_path / "access_key"
        path.write_text("  \n")

        assert FileCredentialCache(path).load() is None
