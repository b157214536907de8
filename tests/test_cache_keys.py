"""Tests for cache key generation utilities."""

from skinproxy.cache.utils import CacheKeyGenerator


class TestCacheKeyGenerator:
    """Test cache key generation functionality."""

    def test_initialization(self):
        """Test CacheKeyGenerator initialization."""
        generator = CacheKeyGenerator()
        assert generator.namespace == ""
        assert generator.max_key_length == 2048

        generator = CacheKeyGenerator("skinproxy", max_key_length=100)
        assert generator.namespace == "skinproxy"
        assert generator.max_key_length == 100

    def test_entity_keys(self):
        """Entity keys are namespaced by kind and use identifiers verbatim."""
        generator = CacheKeyGenerator()

        assert generator.username("Notch") == "username:Notch"
        assert generator.profile("069a79f4-44e9-4726-a5be-fca90e38aeec") == (
            "profile:069a79f4-44e9-4726-a5be-fca90e38aeec"
        )
        assert generator.profile("069a79f444e94726a5befca90e38aeec") != (
            generator.profile("069a79f4-44e9-4726-a5be-fca90e38aeec")
        )
        assert generator.entity("username", "notch") != generator.username("Notch")

    def test_namespace_prefix(self):
        """Namespace is prepended to every key."""
        generator = CacheKeyGenerator("prod")

        assert generator.username("Notch") == "prod:username:Notch"
        assert generator.from_url("http://a/uuid/Notch") == (
            "prod:edge:http://a/uuid/Notch"
        )

    def test_url_keys(self):
        """Edge keys keep the full URL, query string included."""
        generator = CacheKeyGenerator()

        key = generator.from_url("https://skins.example.com/skin/Notch")
        assert key == "edge:https://skins.example.com/skin/Notch"

        assert generator.from_url("https://a/skin/Notch?x=1") != generator.from_url(
            "https://a/skin/Notch?x=2"
        )
        assert generator.from_url("https://a/skin/Notch?x=1") != generator.from_url(
            "https://a/skin/Notch"
        )
        assert generator.from_url("https://a/skin/Notch") != generator.from_url(
            "https://b/skin/Notch"
        )

    def test_long_keys_hashed(self):
        """Keys over the length limit are hashed deterministically."""
        generator = CacheKeyGenerator("ns", max_key_length=50)

        url = "https://skins.example.com/skin/" + "a" * 100
        key = generator.from_url(url)
        assert key.startswith("ns:edge:hash:")
        assert len(key) <= 50 + 32
        assert key == generator.from_url(url)
        assert key != generator.from_url(url + "b")

        assert generator.username("x" * 60).startswith("ns:username:hash:")
