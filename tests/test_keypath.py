"""Tests for key-path lookup over resource graphs."""
from pathlib import Path

import pytest

from surfgraph.formats.surf import parse_surf
from surfgraph.graph import Resource
from surfgraph.keypath import ResourceConfiguration
from surfgraph.model import Iri

SETTINGS = '''
*Settings:
  server = *Server:
    host = "localhost"
    port = 8080
    secure = true
    docs = <file:///var/www/site%20one>
    home = <https://example.com/>
    logDir = "/var/log"
  ;
  limits = {"max": 10, "name": "small"}
  tags = ["a", "b"]
;
'''


@pytest.fixture
def config():
    return ResourceConfiguration(parse_surf(SETTINGS))


# ========== Lookup Tests ==========

class TestLookup:
    def test_nested_property(self, config):
        assert config.find("server.port") == 8080
        assert config.get("server.host") == "localhost"

    def test_map_keys(self, config):
        assert config.find("limits.max") == 10

    def test_missing(self, config):
        assert config.find("missing") is None
        assert config.find("missing.port") is None
        assert config.find("server.port.value") is None
        assert config.find("tags.first") is None
        assert config.get("server.user", "nobody") == "nobody"

    def test_contains(self, config):
        assert "server.secure" in config
        assert "server.user" not in config

    def test_invalid_handle_segment(self, config):
        assert config.find("1x") is None
        assert config.find("server.not a handle") is None
        assert "server.1port" not in config
        assert config.find("limits.1x") is None

    @pytest.mark.parametrize("key", ["", "server.", ".port", "server..port"])
    def test_empty_segment(self, config, key):
        with pytest.raises(ValueError):
            config.find(key)

    def test_root_required(self):
        with pytest.raises(ValueError):
            ResourceConfiguration(None)

    def test_map_root(self):
        config = ResourceConfiguration({"a": {"b": 2}})
        assert config.find("a.b") == 2
        assert config.section_type is None

    def test_namespaced_handles(self):
        root = parse_surf('*ex/Settings:ex/name="x";', namespaces={"ex": "https://example.com/"})
        config = ResourceConfiguration(root, {"ex": "https://example.com/"})
        assert config.get_str("ex/name") == "x"
        assert config.section_type == "ex/Settings"


# ========== Typed Getter Tests ==========

class TestTypedGetters:
    def test_matching_types(self, config):
        assert config.get_str("server.host") == "localhost"
        assert config.get_int("server.port") == 8080
        assert config.get_bool("server.secure") is True

    def test_defaults(self, config):
        assert config.get_int("server.timeout", 30) == 30
        assert config.get_str("server.user") is None

    def test_mismatch(self, config):
        with pytest.raises(TypeError):
            config.get_int("server.host")
        with pytest.raises(TypeError):
            config.get_str("server.port")

    def test_bool_is_not_int(self, config):
        with pytest.raises(TypeError):
            config.get_int("server.secure")

    def test_path_from_string(self, config):
        assert config.get_path("server.logDir") == Path("/var/log")

    def test_path_from_file_iri(self, config):
        assert config.get_path("server.docs") == Path("/var/www/site one")

    def test_path_rejects_other_values(self, config):
        with pytest.raises(TypeError):
            config.get_path("server.home")
        with pytest.raises(TypeError):
            config.get_path("server.port")

    def test_path_default(self, config):
        assert config.get_path("server.cache", Path("/tmp")) == Path("/tmp")


# ========== Section Tests ==========

class TestSections:
    def test_resource_section(self, config):
        server = config.section("server")
        assert server.section_type == "Server"
        assert server.get_int("port") == 8080

    def test_map_section(self, config):
        limits = config.section("limits")
        assert limits.get_str("name") == "small"
        assert limits.section_type is None

    def test_non_section(self, config):
        assert config.section("server.port") is None
        assert config.section("missing") is None

    def test_root_type(self, config):
        assert config.section_type == "Settings"

    def test_unhandled_type_falls_back_to_tag(self):
        config = ResourceConfiguration(Resource(type_tag="https://example.com/Settings"))
        assert config.section_type == "https://example.com/Settings"

    def test_iri_values_pass_through(self, config):
        assert config.get("server.home") == Iri("https://example.com/")
