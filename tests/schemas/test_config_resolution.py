"""Test config resolution and validation with Pydantic."""

import pytest
from pydantic import ValidationError

from arenapat.schemas import ArenaSpecConfig, CLIConfig, InternalConfig, ParamConfig, UserConfig
from arenapat.schemas.resolve import deep_merge, resolve_config

pytestmark = pytest.mark.unit


class TestConfigResolution:
    """Test resolve_config() precedence and merging."""

    def test_resolve_config_all_defaults(self):
        """Resolving with no user/CLI overrides uses all ParamConfig defaults."""
        config = resolve_config(ParamConfig(), None, None)

        assert isinstance(config, InternalConfig)
        assert config.codec.header_version == 2
        assert config.codec.overwrite is False
        assert config.logging.level == "INFO"
        assert config.arena is None
        assert config.geometry() is None

    def test_user_config_overrides_param_config(self):
        """UserConfig values override ParamConfig defaults."""
        user = UserConfig(HEADER_VERSION=1, OVERWRITE=True)
        config = resolve_config(ParamConfig(), user, None)

        assert config.codec.header_version == 1
        assert config.codec.overwrite is True

    def test_cli_overrides_user(self):
        """Full precedence: CLI > User > Param."""
        user = UserConfig(HEADER_VERSION=1, LOG_LEVEL="warning")
        cli = CLIConfig(log_level="DEBUG")
        config = resolve_config(ParamConfig(), user, cli)

        assert config.logging.level == "DEBUG"
        assert config.codec.header_version == 1

    def test_dict_inputs(self):
        """Plain dicts are validated into their schemas."""
        config = resolve_config({}, {"HEADER_VERSION": "v1"}, {"overwrite": True})

        assert config.codec.header_version == 1
        assert config.codec.overwrite is True

    def test_cli_overrides_do_not_mutate_user(self):
        user = UserConfig.model_validate({"HEADER_VERSION": 1})
        resolve_config(ParamConfig(), user, CLIConfig(header_version=2))

        assert user.header_version == 1

    def test_nested_codec_overrides(self):
        """Advanced users may nest codec settings."""
        user = UserConfig(codec={"header_version": 1})
        config = resolve_config(ParamConfig(), user, None)

        assert config.codec.header_version == 1

    def test_invalid_header_version_rejected(self):
        with pytest.raises(ValidationError):
            resolve_config(ParamConfig(), UserConfig(HEADER_VERSION=3), None)

    def test_internal_config_is_frozen(self, internal_config):
        with pytest.raises(ValidationError):
            internal_config.codec = {"header_version": 1, "overwrite": False}


class TestArenaResolution:
    """Arena selection across layers."""

    def test_arena_by_name(self, make_config):
        config = make_config(ARENA="G41_2x12_ccw")

        geometry = config.geometry()
        assert geometry.name == "G41_2x12_ccw"
        assert config.arena.column_order == "ccw"

    def test_arena_dict_with_alias(self, make_config):
        config = make_config(ARENA={
            "generation": "G6",
            "num_rows": 2,
            "num_cols": 10,
            "panels_installed": [1, 2, 5, 9],
        })

        assert config.geometry().installed_columns == (1, 2, 5, 9)

    def test_user_arena_replaces_default(self):
        """Arena fields are never merged across layers."""
        param = ParamConfig(arena=ArenaSpecConfig(
            generation="G6", num_rows=2, num_cols=10, columns_installed=[0, 1],
            angle_offset_deg=18,
        ))
        config = resolve_config(param, UserConfig(ARENA="G4_4x12"), None)

        assert config.geometry().name == "G4_4x12"
        assert config.arena.columns_installed is None
        assert config.arena.angle_offset_deg == 0.0

    def test_default_arena_kept(self):
        param = ParamConfig(arena=ArenaSpecConfig.from_name("G6_2x10"))
        config = resolve_config(param, UserConfig(HEADER_VERSION=1), None)

        assert config.geometry().name == "G6_2x10"

    def test_arena_from_json_file(self, temp_dir):
        path = temp_dir / "arena.json"
        path.write_text(
            '{"name": "G6_2x8of10", "arena": {"generation": "G6", "num_rows": 2,'
            ' "num_cols": 10, "panels_installed": [0, 1, 2, 3, 4, 5, 6, 7]}}'
        )
        config = resolve_config(ParamConfig(), UserConfig(ARENA=str(path)), None)

        assert config.geometry().name == "G6_2x8of10"

    def test_g5_arena_rejected(self):
        with pytest.raises(ValidationError, match="G5 panels are deprecated"):
            UserConfig(ARENA="G5_2x10")

    def test_bad_arena_name_rejected(self):
        with pytest.raises(ValidationError, match="Not an arena name"):
            UserConfig(ARENA="round_one")


class TestUserConfigNormalization:
    """Forgiving user input."""

    def test_unknown_keys_ignored(self):
        user = UserConfig.model_validate({"HEADER_VERSION": 1, "RADAR_ID": "KHTX"})

        assert user.header_version == 1

    def test_field_names_accepted(self):
        user = UserConfig(header_version=2, log_level="info")

        assert user.header_version == 2
        assert user.log_level == "INFO"

    def test_overrides_only_set_fields(self):
        assert UserConfig().to_internal_overrides() == {}
        assert UserConfig(OVERWRITE=False).to_internal_overrides() == {
            "codec": {"overwrite": False}
        }

    def test_cli_overrides_only_set_fields(self):
        assert CLIConfig().to_internal_overrides() == {}
        assert CLIConfig(header_version=1).to_internal_overrides() == {
            "codec": {"header_version": 1}
        }


def test_deep_merge_nested():
    base = {"codec": {"header_version": 2, "overwrite": False}, "arena": None}
    merged = deep_merge(base, {"codec": {"overwrite": True}}, {"codec": {"header_version": 1}})

    assert merged == {"codec": {"header_version": 1, "overwrite": True}, "arena": None}
    assert base["codec"]["overwrite"] is False
