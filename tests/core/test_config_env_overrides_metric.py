import logging

from modcore.config import clear_config_cache, as_dict
from modcore import metrics


def test_env_override_metric_and_logging(monkeypatch, tmp_path, caplog):
    monkeypatch.setenv("MODHOST_CONFIG_DIR", str(tmp_path))
    monkeypatch.setenv("MODHOST__MODS__AUTO_RELOAD", "true")
    monkeypatch.setenv("MODHOST__MODS__ROOT", "/srv/mods")
    metrics.reset_for_tests()
    clear_config_cache()
    with caplog.at_level(logging.INFO, logger="modcore.config.loader"):
        cfg = as_dict()
    assert cfg["mods"]["auto_reload"] is True
    assert cfg["mods"]["root"] == "/srv/mods"
    counters = metrics.snapshot()["counters"]
    assert counters["env_override_total{path=mods.auto_reload}"] == 1
    assert "path=mods.root" in caplog.text
    assert "/srv/mods" not in caplog.text


def test_env_override_list_value(monkeypatch, tmp_path):
    monkeypatch.setenv("MODHOST_CONFIG_DIR", str(tmp_path))
    monkeypatch.setenv(
        "MODHOST__MODS__MANIFEST_NAMES", "mod.yaml,mod.json"
    )
    clear_config_cache()
    assert as_dict()["mods"]["manifest_names"] == ["mod.yaml", "mod.json"]
