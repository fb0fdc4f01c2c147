"""
Configuration tests.

Defaults, environment overrides, validation and the singleton.
"""

import pytest
from pydantic import ValidationError

from gridzonal.config import AppConfig, debug_config, get_config, reset_config
from gridzonal.config.extraction_config import ExtractionConfig
from gridzonal.config.loader_config import LoaderConfig
from gridzonal.core.models.enums import BoundaryRule, MembershipPolicy


class TestExtractionConfigDefaults:

    def test_defaults(self, clean_env):
        config = ExtractionConfig.from_environment()
        assert config.default_aggregation == "mean"
        assert config.remove_missing is True
        assert config.membership_policy is MembershipPolicy.CENTROID
        assert config.boundary_rule is BoundaryRule.INCLUSIVE
        assert config.max_workers is None
        assert config.parallel_min_regions == 8

    def test_resolved_workers_falls_back_to_cpu_count(self, clean_env):
        assert ExtractionConfig().resolved_max_workers() >= 1
        assert ExtractionConfig(max_workers=3).resolved_max_workers() == 3


class TestExtractionConfigEnvironment:

    def test_overrides(self, clean_env):
        clean_env.setenv("GRIDZONAL_DEFAULT_AGGREGATION", "sum")
        clean_env.setenv("GRIDZONAL_REMOVE_MISSING", "false")
        clean_env.setenv("GRIDZONAL_MEMBERSHIP_POLICY", "all_touched")
        clean_env.setenv("GRIDZONAL_BOUNDARY_RULE", "exclusive")
        clean_env.setenv("GRIDZONAL_MAX_WORKERS", "2")
        clean_env.setenv("GRIDZONAL_PARALLEL_MIN_REGIONS", "50")
        config = ExtractionConfig.from_environment()
        assert config.default_aggregation == "sum"
        assert config.remove_missing is False
        assert config.membership_policy is MembershipPolicy.ALL_TOUCHED
        assert config.boundary_rule is BoundaryRule.EXCLUSIVE
        assert config.max_workers == 2
        assert config.parallel_min_regions == 50

    def test_unknown_aggregation_rejected(self, clean_env):
        clean_env.setenv("GRIDZONAL_DEFAULT_AGGREGATION", "mode")
        with pytest.raises(ValidationError):
            ExtractionConfig.from_environment()

    def test_unknown_policy_rejected(self, clean_env):
        clean_env.setenv("GRIDZONAL_MEMBERSHIP_POLICY", "nearest")
        with pytest.raises(ValidationError):
            ExtractionConfig.from_environment()

    @pytest.mark.parametrize("field,value", [
        ("max_workers", 0),
        ("parallel_min_regions", 0),
        ("weight_epsilon", 1.0),
        ("weight_epsilon", -0.1),
    ])
    def test_out_of_range_rejected(self, field, value):
        with pytest.raises(ValidationError):
            ExtractionConfig(**{field: value})


class TestLoaderConfig:

    def test_defaults(self, clean_env):
        config = LoaderConfig.from_environment()
        assert config.netcdf_engine is None
        assert config.log_source_metadata is False
        assert config.export_na_rep == "NA"

    def test_overrides(self, clean_env):
        clean_env.setenv("GRIDZONAL_NETCDF_ENGINE", "netcdf4")
        clean_env.setenv("GRIDZONAL_LOG_SOURCE_METADATA", "true")
        clean_env.setenv("GRIDZONAL_EXPORT_NA_REP", "")
        config = LoaderConfig.from_environment()
        assert config.netcdf_engine == "netcdf4"
        assert config.log_source_metadata is True
        assert config.export_na_rep == ""


class TestAppConfig:

    def test_log_level_uppercased(self, clean_env):
        clean_env.setenv("LOG_LEVEL", "debug")
        assert AppConfig.from_environment().log_level == "DEBUG"

    def test_invalid_log_level(self, clean_env):
        clean_env.setenv("LOG_LEVEL", "LOUD")
        with pytest.raises(ValidationError):
            AppConfig.from_environment()

    def test_debug_mode(self, clean_env):
        clean_env.setenv("DEBUG_MODE", "true")
        assert AppConfig.from_environment().debug_mode is True

    def test_singleton(self, clean_env):
        first = get_config()
        assert get_config() is first
        reset_config()
        assert get_config() is not first

    def test_debug_config_is_plain_dict(self, clean_env):
        snapshot = debug_config()
        assert snapshot["extraction"]["membership_policy"] == "centroid"
        assert snapshot["loader"]["export_na_rep"] == "NA"
