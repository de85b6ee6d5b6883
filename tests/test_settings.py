from pathlib import Path

from lightbucket_relay import constants
from lightbucket_relay.settings import IniSettingsStore


def test_defaults_when_file_missing(tmp_path: Path) -> None:
    store = IniSettingsStore(tmp_path / "settings.cfg")

    assert store.get(constants.SETTING_BASE_URL) == constants.DEFAULT_LIGHTBUCKET_BASE_URL
    assert store.get(constants.SETTING_USERNAME) == ""
    assert store.get("Unknown") == ""


def test_set_notifies_listeners_with_field_name(tmp_path: Path) -> None:
    store = IniSettingsStore(tmp_path / "settings.cfg")
    seen: list[tuple[str, str]] = []
    store.add_listener(lambda name: seen.append((name, store.get(name))))

    store.set(constants.SETTING_USERNAME, "astro")

    assert seen == [(constants.SETTING_USERNAME, "astro")]


def test_set_same_value_does_not_notify(tmp_path: Path) -> None:
    store = IniSettingsStore(tmp_path / "settings.cfg")
    store.set(constants.SETTING_USERNAME, "astro")
    seen: list[str] = []
    store.add_listener(seen.append)

    store.set(constants.SETTING_USERNAME, "astro")

    assert seen == []


def test_removed_listener_is_not_called(tmp_path: Path) -> None:
    store = IniSettingsStore(tmp_path / "settings.cfg")
    seen: list[str] = []
    store.add_listener(seen.append)
    store.remove_listener(seen.append)
    store.remove_listener(seen.append)

    store.set(constants.SETTING_USERNAME, "astro")

    assert seen == []


def test_save_preserves_field_names(tmp_path: Path) -> None:
    path = tmp_path / "settings.cfg"
    store = IniSettingsStore(path)
    store.set(constants.SETTING_USERNAME, "astro")
    store.save()

    assert "LightbucketUsername = astro" in path.read_text(encoding="utf-8")
    assert IniSettingsStore(path).get(constants.SETTING_USERNAME) == "astro"
