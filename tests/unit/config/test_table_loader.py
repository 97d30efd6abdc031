# SPDX-License-Identifier: Apache-2.0
"""Tests for binding table files."""

from __future__ import annotations

import warnings
from pathlib import Path

import pytest
import yaml

from eventbinder.config import (
    BindingTableConfig,
    ConfigVersionError,
    dump_binding_table,
    load_binding_table,
    load_binding_table_config,
    resolve_reference,
    write_binding_table,
)
from eventbinder.errors import HandlerDeclarationError, SymbolResolutionError
from eventbinder.generator import generate_binding_table
from tests.fakes.handlers import EventOne, EventTwo, Outer, SamplePresenter

SAMPLE_TABLE = """\
config_version: "1"
target: tests.fakes.handlers:SamplePresenter
bindings:
  - method: on_event1
    handles:
      - tests.fakes.handlers:EventOne
  - method: on_event2
    handles:
      - tests.fakes.handlers:EventOne
      - tests.fakes.handlers:EventTwo
"""


def _write(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "bindings.yaml"
    path.write_text(content)
    return path


class TestLoadBindingTable:
    """Test loading and validating table files."""

    @pytest.mark.config
    def test_load_valid_table(self, tmp_path):
        table = load_binding_table(_write(tmp_path, SAMPLE_TABLE))

        assert table.target is SamplePresenter
        assert [e.method_name for e in table] == ["on_event1", "on_event2"]
        assert table.entries[1].event_types == (EventOne, EventTwo)
        assert table.entries[1].passes_event is False

    @pytest.mark.config
    def test_generated_table_loads_back_unchanged(self, tmp_path):
        table = generate_binding_table(SamplePresenter)

        path = write_binding_table(table, tmp_path / "out" / "sample.yaml")

        assert path.exists()
        assert load_binding_table(path) == table

    @pytest.mark.config
    def test_dump_format(self):
        data = yaml.safe_load(dump_binding_table(generate_binding_table(SamplePresenter)))

        assert data["config_version"] == "1"
        assert data["target"] == "tests.fakes.handlers:SamplePresenter"
        assert [b["method"] for b in data["bindings"]] == ["on_event1", "on_event2", "on_event3"]

    @pytest.mark.config
    def test_kebab_case_version_key(self, tmp_path):
        content = SAMPLE_TABLE.replace("config_version", "config-version")

        config = load_binding_table_config(_write(tmp_path, content))

        assert config.config_version == "1"

    @pytest.mark.config
    def test_environment_variables_are_expanded(self, tmp_path, monkeypatch):
        monkeypatch.setenv("EB_HANDLERS", "tests.fakes.handlers")
        content = SAMPLE_TABLE.replace("tests.fakes.handlers", "${EB_HANDLERS}")

        table = load_binding_table(_write(tmp_path, content))

        assert table.target is SamplePresenter

    @pytest.mark.config
    def test_empty_handles_use_parameter_type(self, tmp_path):
        content = (
            'config_version: "1"\n'
            "target: tests.fakes.handlers:SamplePresenter\n"
            "bindings:\n"
            "  - method: on_event1\n"
        )

        table = load_binding_table(_write(tmp_path, content))

        assert table.entries[0].event_types == (EventOne,)

    @pytest.mark.config
    def test_rule_violations_are_reported(self, tmp_path):
        content = (
            'config_version: "1"\n'
            "target: tests.fakes.handlers:SamplePresenter\n"
            "bindings:\n"
            "  - method: refresh\n"
        )

        with pytest.raises(HandlerDeclarationError) as exc_info:
            load_binding_table(_write(tmp_path, content))

        assert exc_info.value.method_name == "refresh"


class TestTableFileErrors:
    """Test rejection of malformed table files."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_binding_table(tmp_path / "missing.yaml")

    def test_missing_version(self, tmp_path):
        content = SAMPLE_TABLE.replace('config_version: "1"\n', "")

        with pytest.raises(ConfigVersionError) as exc_info:
            load_binding_table_config(_write(tmp_path, content))

        assert "config_version missing" in str(exc_info.value)

    def test_version_too_old(self, tmp_path):
        content = SAMPLE_TABLE.replace('config_version: "1"', 'config_version: "0"')

        with pytest.raises(ConfigVersionError) as exc_info:
            load_binding_table_config(_write(tmp_path, content))

        assert "too old" in str(exc_info.value)

    def test_newer_version_warns(self, tmp_path):
        content = SAMPLE_TABLE.replace('config_version: "1"', 'config_version: "2"')

        with pytest.warns(UserWarning, match="best-effort"):
            config = load_binding_table_config(_write(tmp_path, content))

        assert config.config_version == "2"

    @pytest.mark.parametrize("raw", ["1", "1.0", "\"1.0\"", "\"01\""])
    def test_numeric_versions_are_normalized(self, tmp_path, raw):
        content = SAMPLE_TABLE.replace('config_version: "1"', f"config_version: {raw}")

        with warnings.catch_warnings():
            warnings.simplefilter("error")
            config = load_binding_table_config(_write(tmp_path, content))

        assert config.config_version == "1"

    def test_non_numeric_version(self, tmp_path):
        content = SAMPLE_TABLE.replace('config_version: "1"', "config_version: beta")

        with pytest.raises(ConfigVersionError) as exc_info:
            load_binding_table_config(_write(tmp_path, content))

        assert "Invalid config_version 'beta'" in str(exc_info.value)

    def test_unreadable_path(self, tmp_path):
        with pytest.raises(ValueError) as exc_info:
            load_binding_table_config(tmp_path)

        assert "Failed to load binding table" in str(exc_info.value)

    def test_non_mapping_root(self, tmp_path):
        with pytest.raises(ValueError) as exc_info:
            load_binding_table_config(_write(tmp_path, "- just\n- a list\n"))

        assert "dictionary at the root level" in str(exc_info.value)

    def test_invalid_yaml(self, tmp_path):
        with pytest.raises(ValueError) as exc_info:
            load_binding_table_config(_write(tmp_path, "target: [unclosed\n"))

        assert "Invalid YAML" in str(exc_info.value)

    def test_unknown_keys_are_rejected(self, tmp_path):
        content = SAMPLE_TABLE + "extra: true\n"

        with pytest.raises(ValueError) as exc_info:
            load_binding_table_config(_write(tmp_path, content))

        assert "Invalid binding table" in str(exc_info.value)

    def test_malformed_reference(self, tmp_path):
        content = SAMPLE_TABLE.replace(
            "target: tests.fakes.handlers:SamplePresenter", "target: SamplePresenter"
        )

        with pytest.raises(ValueError):
            load_binding_table_config(_write(tmp_path, content))

    def test_duplicate_methods(self, tmp_path):
        content = SAMPLE_TABLE.replace("method: on_event2", "method: on_event1")

        with pytest.raises(ValueError) as exc_info:
            load_binding_table_config(_write(tmp_path, content))

        assert "listed more than once: on_event1" in str(exc_info.value)

    def test_unresolvable_event(self, tmp_path):
        content = SAMPLE_TABLE.replace(
            "tests.fakes.handlers:EventTwo", "tests.fakes.handlers:EventThree"
        )

        with pytest.raises(SymbolResolutionError) as exc_info:
            load_binding_table(_write(tmp_path, content))

        assert exc_info.value.reference == "tests.fakes.handlers:EventThree"


class TestBindingTableConfig:
    """Test the pydantic model directly."""

    def test_defaults(self):
        config = BindingTableConfig(target="tests.fakes.handlers:EmptyPresenter")

        assert config.config_version == "1"
        assert config.bindings == []

    def test_invalid_method_name(self):
        with pytest.raises(ValueError):
            BindingTableConfig(
                target="tests.fakes.handlers:SamplePresenter",
                bindings=[{"method": "not a method"}],
            )


class TestResolveReference:
    """Test importing module:QualifiedName references."""

    def test_resolves_class(self):
        assert resolve_reference("tests.fakes.handlers:EventOne") is EventOne

    def test_resolves_nested_qualname(self):
        assert resolve_reference("tests.fakes.handlers:Outer.NestedPresenter") is Outer.NestedPresenter

    def test_missing_module(self):
        with pytest.raises(SymbolResolutionError):
            resolve_reference("tests.fakes.does_not_exist:Thing")

    def test_missing_attribute(self):
        with pytest.raises(SymbolResolutionError) as exc_info:
            resolve_reference("tests.fakes.handlers:Missing")

        assert "Cannot resolve 'tests.fakes.handlers:Missing'" in str(exc_info.value)

    def test_missing_separator(self):
        with pytest.raises(SymbolResolutionError):
            resolve_reference("tests.fakes.handlers.EventOne")
