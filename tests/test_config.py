from notiapp_backend.config.loader import ConfigLoader, get_config, reset_config


def test_loads_configured_file(notiapp_config):
    config = get_config()
    assert config.config_file == str(notiapp_config)
    assert config.get("remote.backend") == "memory"
    assert config.get("schedules.missing_document_policy") == "ignore"
    assert config.get("server.port") == 8000
    assert config.get("missing.key", "fallback") == "fallback"


def test_default_config_is_created(tmp_path, monkeypatch):
    target = tmp_path / "nested" / "config.toml"
    monkeypatch.setenv("NOTIAPP_CONFIG", str(target))
    monkeypatch.setenv("FIREBASE_PROJECT_ID", "demo-project")
    reset_config()

    config = get_config()
    assert target.exists()
    assert config.get("remote.backend") == "firebase"
    assert config.get("firebase.project_id") == "demo-project"
    assert config.get("firebase.api_key") == ""
    assert config.get("schedules.collection") == "schedules"


def test_env_var_substitution_with_default(tmp_path, monkeypatch):
    config_file = tmp_path / "config.toml"
    config_file.write_text(
        '[firebase]\napi_key = "${NOTIAPP_TEST_KEY:fallback-key}"\n', encoding="utf-8"
    )
    monkeypatch.delenv("NOTIAPP_TEST_KEY", raising=False)
    assert ConfigLoader(str(config_file)).load()["firebase"]["api_key"] == "fallback-key"

    monkeypatch.setenv("NOTIAPP_TEST_KEY", "real-key")
    assert ConfigLoader(str(config_file)).load()["firebase"]["api_key"] == "real-key"


def test_yaml_config_and_set(tmp_path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("remote:\n  backend: memory\n", encoding="utf-8")
    config = ConfigLoader(str(config_file))
    config.load()
    assert config.get("remote.backend") == "memory"

    assert config.set("schedules.missing_document_policy", "error")
    reloaded = ConfigLoader(str(config_file))
    reloaded.load()
    assert reloaded.get("schedules.missing_document_policy") == "error"
