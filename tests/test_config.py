import pytest
import yaml

from sarnews.config import Config, ConfigModel, load_config, save_config
from sarnews.config.models import TranslationConfig


def test_defaults():
    config = ConfigModel()

    assert config.refresh.cooldown_minutes == 10
    assert config.refresh.fetch_timeout == 10.0
    assert config.translation.batch_size == 100
    assert config.translation.delay_seconds == 0.5
    assert config.translation.targets == ["zh", "ms"]
    assert config.classifier.default_region == "sarawak"


def test_load_from_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        yaml.dump(
            {
                "postgres": {"host": "db", "database": "news"},
                "refresh": {"cooldown_minutes": 5},
                "translation": {"provider": "mock"},
            }
        )
    )

    config = load_config(path)

    assert config.postgres.host == "db"
    assert config.postgres.database == "news"
    assert config.refresh.cooldown_minutes == 5
    assert config.translation.provider == "mock"


def test_empty_file_uses_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("")

    assert load_config(path) == ConfigModel()


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")


def test_invalid_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("refresh: [unclosed")

    with pytest.raises(ValueError, match="Invalid YAML"):
        load_config(path)


def test_invalid_values(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump({"refresh": {"cooldown_minutes": -1}}))

    with pytest.raises(ValueError, match="Invalid configuration"):
        load_config(path)


def test_unknown_translation_target():
    with pytest.raises(ValueError):
        TranslationConfig(targets=["zh", "fr"])


def test_unknown_translation_provider():
    with pytest.raises(ValueError):
        TranslationConfig(provider="babelfish")


def test_save_round_trip(tmp_path):
    path = tmp_path / "nested" / "config.yaml"
    original = ConfigModel(refresh={"cooldown_minutes": 15}, translation={"provider": "openai"})

    save_config(original, path)

    assert load_config(path) == original


def test_config_path_from_environment(tmp_path, monkeypatch):
    path = tmp_path / "custom.yaml"
    save_config(ConfigModel(api={"port": 9000}), path)
    monkeypatch.setenv("SARNEWS_CONFIG", str(path))

    config = Config()

    assert config.config_path == path
    assert config.config.api.port == 9000


def test_secrets_resolved_from_environment(monkeypatch):
    config = Config.from_model(
        ConfigModel(
            postgres={"password_env": "TEST_DB_PASSWORD"},
            translation={"api_key_env": "TEST_OPENAI_KEY"},
        )
    )
    monkeypatch.setenv("TEST_DB_PASSWORD", "s3cret")
    monkeypatch.setenv("TEST_OPENAI_KEY", "sk-test")
    monkeypatch.setenv("CRON_SECRET", "  cron  ")
    monkeypatch.delenv("ADMIN_TOKEN", raising=False)

    assert config.get_db_config()["password"] == "s3cret"
    assert config.get_translation_config()["api_key"] == "sk-test"
    assert config.cron_secret == "cron"
    assert config.admin_token is None
