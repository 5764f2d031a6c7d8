import json

import pytest

from nexusbracket.config import BotConfig, load_config, load_configuration
from nexusbracket.exceptions import InvalidConfigurationException


def _write(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestLoadConfig:
    def test_defaults(self):
        config = load_config(None, environ={})
        assert config == BotConfig()
        assert config.state_file == "state.json"
        assert config.short_code_prefix == "NX"
        assert config.info_preview_limit == 20

    def test_file_values(self, tmp_path):
        path = _write(
            tmp_path / "bot.json",
            {"state_file": "data/nexus.json", "log_level": "debug", "seed": 5},
        )
        config = load_config(str(path), environ={})
        assert config.state_file == "data/nexus.json"
        assert config.log_level == "debug"
        assert config.seed == 5

    def test_environment_overrides_file(self, tmp_path):
        path = _write(tmp_path / "bot.json", {"state_file": "from-file.json"})
        environ = {
            "NEXUS_STATE_FILE": "from-env.json",
            "NEXUS_LOG_LEVEL": "WARNING",
            "NEXUS_GUILD_ID": "guild-9",
        }
        config = load_config(str(path), environ=environ)
        assert config.state_file == "from-env.json"
        assert config.log_level == "WARNING"
        assert config.guild_id == "guild-9"

    def test_missing_file_uses_defaults(self, tmp_path):
        assert load_configuration(str(tmp_path / "missing.json")) is None
        assert load_config(str(tmp_path / "missing.json"), environ={}) == BotConfig()

    def test_broken_file_uses_defaults(self, tmp_path):
        path = tmp_path / "bot.json"
        path.write_text("[1, 2", encoding="utf-8")
        assert load_configuration(str(path)) is None

        _write(path, ["not", "an", "object"])
        assert load_configuration(str(path)) is None

    def test_unknown_keys_are_ignored(self, tmp_path):
        path = _write(tmp_path / "bot.json", {"token": "secret", "guild_id": "g"})
        assert load_config(str(path), environ={}).guild_id == "g"


class TestValidation:
    @pytest.mark.parametrize(
        "data",
        [
            {"log_level": "LOUD"},
            {"info_preview_limit": 0},
            {"info_preview_limit": "20"},
            {"seed": "abc"},
            {"short_code_prefix": ""},
            {"state_file": "  "},
        ],
    )
    def test_invalid_values(self, data):
        with pytest.raises(InvalidConfigurationException):
            BotConfig.from_dict(data)

    def test_round_trip(self):
        config = BotConfig(state_file="x.json", seed=3)
        assert BotConfig.from_dict(config.to_dict()) == config
