"""Tests for format configuration."""
import logging

import pytest
import yaml

from surfgraph.config import ConfigValidationError, SurfConfig


# ========== SurfConfig Tests ==========

class TestSurfConfig:
    def test_defaults(self):
        config = SurfConfig()
        assert config.namespaces == {}
        assert config.formatted is False
        assert config.indent == "\t"
        assert config.line_separator == "\n"
        assert config.sequence_separator_required is False

    def test_to_dict(self):
        config = SurfConfig(namespaces={"ex": "https://example.com/"}, formatted=True)
        d = config.to_dict()
        assert d["namespaces"] == {"ex": "https://example.com/"}
        assert d["formatted"] is True

    def test_from_dict(self):
        config = SurfConfig.from_dict({"indent": "  ", "sequence_separator_required": True})
        assert config.indent == "  "
        assert config.sequence_separator_required is True
        assert config.formatted is False

    def test_from_dict_null_namespaces(self):
        assert SurfConfig.from_dict({"namespaces": None}).namespaces == {}

    def test_unknown_key_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="surfgraph.config"):
            config = SurfConfig.from_dict({"colour": "blue"})
        assert config == SurfConfig()
        assert "colour" in caplog.text

    def test_aliases_by_namespace(self):
        config = SurfConfig(namespaces={"ex": "https://example.com/", "foo": "https://foo.example/"})
        assert config.aliases_by_namespace == {
            "https://example.com/": "ex",
            "https://foo.example/": "foo",
        }


# ========== Validation Tests ==========

class TestValidation:
    def test_valid(self):
        config = SurfConfig(namespaces={"ex": "https://example.com/"}, indent="    ", line_separator="\r\n")
        assert config.validate() is config

    def test_empty_indent_allowed(self):
        SurfConfig(indent="").validate()

    @pytest.mark.parametrize("alias", ["1ex", "e-x", "", "e x"])
    def test_bad_alias(self, alias):
        with pytest.raises(ConfigValidationError) as exc_info:
            SurfConfig(namespaces={alias: "https://example.com/"}).validate()
        assert len(exc_info.value.errors) == 1

    def test_namespace_without_trailing_slash(self):
        with pytest.raises(ConfigValidationError, match="must end with"):
            SurfConfig(namespaces={"ex": "https://example.com/ns"}).validate()

    def test_relative_namespace(self):
        with pytest.raises(ConfigValidationError):
            SurfConfig(namespaces={"ex": "example/"}).validate()

    def test_non_whitespace_indent(self):
        with pytest.raises(ConfigValidationError, match="Indent"):
            SurfConfig(indent="--").validate()

    def test_bad_line_separator(self):
        with pytest.raises(ConfigValidationError, match="line separator"):
            SurfConfig(line_separator="\n\n").validate()

    def test_non_boolean_switch(self):
        with pytest.raises(ConfigValidationError, match="formatted"):
            SurfConfig(formatted="yes").validate()

    def test_collects_all_errors(self):
        config = SurfConfig(namespaces={"1": "relative/"}, indent="x", line_separator="")
        with pytest.raises(ConfigValidationError) as exc_info:
            config.validate()
        assert len(exc_info.value.errors) == 4

    def test_is_value_error(self):
        assert issubclass(ConfigValidationError, ValueError)


# ========== Persistence Tests ==========

class TestPersistence:
    def test_save_load(self, tmp_path):
        path = tmp_path / "surf.yaml"
        config = SurfConfig(
            namespaces={"ex": "https://example.com/"},
            formatted=True,
            indent="  ",
            line_separator="\r\n",
            sequence_separator_required=True,
        )
        config.save(path)
        assert SurfConfig.load(path) == config

    def test_saved_file_is_yaml(self, tmp_path):
        path = tmp_path / "surf.yaml"
        SurfConfig(formatted=True).save(path)
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        assert data["formatted"] is True
        assert list(data) == ["namespaces", "formatted", "indent", "line_separator", "sequence_separator_required"]

    def test_load_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert SurfConfig.load(path) == SurfConfig()

    def test_load_non_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigValidationError):
            SurfConfig.load(path)

    def test_load_validates(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("namespaces:\n  ex: https://example.com/ns\n", encoding="utf-8")
        with pytest.raises(ConfigValidationError):
            SurfConfig.load(path)
