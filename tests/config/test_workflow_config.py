"""
Tests for workflow configuration loading.

Covers:
- Schema types (WorkflowConfig) -- defaults and lookups
- Loader (parse_workflow_config) -- YAML dict parsing and validation
- End-to-end (get_active_config) -- packaged default and override files
"""

from __future__ import annotations

import pytest

from works_config import get_active_config
from works_config.loader import (
    compute_checksum,
    dump_yaml_file,
    load_yaml_file,
    parse_workflow_config,
)
from works_config.schema import WorkflowConfig
from works_kernel.domain.roles import Role


# =========================================================================
# 1. Schema
# =========================================================================


class TestWorkflowConfigSchema:
    def test_unconfigured_role_forwards_to_successor(self):
        config = WorkflowConfig()
        assert config.targets_for(Role.COMMISSIONER) == (Role.EEPH,)
        assert config.targets_for(Role.CDMA) == ()

    def test_designation_defaults_to_registry(self):
        assert WorkflowConfig().designation_for(Role.SEPH) == "SEPH"


# =========================================================================
# 2. Loader
# =========================================================================


class TestParseWorkflowConfig:
    def test_parses_targets_and_designations(self):
        config = parse_workflow_config({
            "config_id": "ward-office",
            "version": 3,
            "default_department": " Engineering ",
            "log_level": "debug",
            "forward_targets": {"commissioner": ["eeph", "SEPH"], "EEPH": ["SEPH"]},
            "designations": {"CDMA": "Commissioner & Director of Municipal Administration"},
        })

        assert config.config_id == "ward-office"
        assert config.version == 3
        assert config.default_department == "Engineering"
        assert config.log_level == "DEBUG"
        assert config.targets_for(Role.COMMISSIONER) == (Role.EEPH, Role.SEPH)
        assert config.designation_for(Role.CDMA).startswith("Commissioner &")

    def test_empty_document_uses_defaults(self):
        config = parse_workflow_config({})
        assert config.default_department == "Administration"
        assert config.forward_targets == ()

    def test_upstream_target_rejected(self):
        with pytest.raises(ValueError, match="not downstream"):
            parse_workflow_config({"forward_targets": {"SEPH": ["EEPH"]}})

    def test_unknown_role_rejected(self):
        with pytest.raises(ValueError, match="Unknown role"):
            parse_workflow_config({"forward_targets": {"Engineer": ["EEPH"]}})

    def test_blank_department_rejected(self):
        with pytest.raises(ValueError):
            parse_workflow_config({"default_department": "  "})

    def test_non_mapping_rejected(self):
        with pytest.raises(ValueError):
            parse_workflow_config(["not", "a", "mapping"])

    def test_checksum_is_deterministic(self):
        assert compute_checksum({"a": 1, "b": 2}) == compute_checksum({"b": 2, "a": 1})
        assert compute_checksum({"a": 1}) != compute_checksum({"a": 2})


# =========================================================================
# 3. End-to-end
# =========================================================================


class TestGetActiveConfig:
    def test_packaged_default(self):
        config = get_active_config()
        assert config.config_id == "default"
        assert config.targets_for(Role.COMMISSIONER) == (Role.EEPH, Role.SEPH, Role.ENCPH)
        assert config.targets_for(Role.ENCPH) == (Role.CDMA,)
        assert config.targets_for(Role.CDMA) == ()
        assert config.checksum

    def test_override_file(self, tmp_path):
        path = tmp_path / "workflow.yaml"
        dump_yaml_file(path, {"config_id": "test", "default_department": "Works"})
        config = get_active_config(path)
        assert config.config_id == "test"
        assert config.default_department == "Works"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_config(tmp_path / "absent.yaml")

    def test_config_trace_logged(self, captured_logs):
        get_active_config()
        traces = [r for r in captured_logs() if r["message"] == "CONFIG_TRACE"]
        assert traces[0]["config_id"] == "default"
        assert traces[0]["checksum"]

    def test_empty_yaml_file_loads_as_empty_mapping(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_yaml_file(path) == {}
