import json
import locale
from datetime import datetime, timezone

from hookmanager.config import preferences
from hookmanager.config.preferences import (
    KEY_CHECKED, KEY_DOH, KEY_LATEST_CHECK, KEY_LATEST_VERSION,
    FreshnessStore, JsonPreferenceStore, MemoryPreferenceStore, apply_locale_defaults,
)
from hookmanager.core.models import FreshnessRecord


def test_missing_keys_read_as_defaults(freshness):
    assert freshness.read() == FreshnessRecord()


def test_json_store_survives_restart(tmp_path):
    path = tmp_path / 'prefs' / 'preferences.json'
    first = JsonPreferenceStore(str(path))
    FreshnessStore(first).record_success(7005, datetime(2026, 5, 4, tzinfo=timezone.utc))
    first.put(KEY_DOH, True)

    second = JsonPreferenceStore(str(path))
    record = FreshnessStore(second).read()

    assert record.checked is True
    assert record.latest_version_code == 7005
    assert record.last_checked_at == datetime(2026, 5, 4, tzinfo=timezone.utc)
    assert second.get(KEY_DOH) is True


def test_commit_writes_every_key_in_one_file(tmp_path):
    path = tmp_path / 'preferences.json'
    store = JsonPreferenceStore(str(path))
    store.commit({KEY_CHECKED: True, KEY_LATEST_CHECK: 100, KEY_LATEST_VERSION: 3})

    on_disk = json.loads(path.read_text(encoding='utf-8'))
    assert on_disk == {KEY_CHECKED: True, KEY_LATEST_CHECK: 100, KEY_LATEST_VERSION: 3}
    assert [p.name for p in tmp_path.iterdir()] == ['preferences.json']


def test_corrupt_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / 'preferences.json'
    path.write_text('{not json', encoding='utf-8')
    assert FreshnessStore(JsonPreferenceStore(str(path))).read() == FreshnessRecord()

    path.write_text('[1, 2, 3]', encoding='utf-8')
    assert JsonPreferenceStore(str(path)).get(KEY_CHECKED, False) is False


def test_unwritable_location_keeps_in_memory_state(tmp_path, caplog):
    blocker = tmp_path / 'not-a-dir'
    blocker.write_text('', encoding='utf-8')
    store = JsonPreferenceStore(str(blocker / 'preferences.json'))

    store.put(KEY_CHECKED, True)

    assert store.get(KEY_CHECKED) is True
    assert "Failed to save preferences" in caplog.text


def test_mark_checked_keeps_existing_fields(store):
    store.commit({KEY_CHECKED: True, KEY_LATEST_CHECK: 50, KEY_LATEST_VERSION: 9})
    FreshnessStore(store).mark_checked()
    assert store.get_many({KEY_LATEST_CHECK: 0, KEY_LATEST_VERSION: 0}) == {
        KEY_LATEST_CHECK: 50, KEY_LATEST_VERSION: 9,
    }


def test_locale_defaults_enable_doh_for_china():
    store = MemoryPreferenceStore()
    apply_locale_defaults(store, country='CN')
    assert store.get(KEY_DOH) is True


def test_locale_defaults_respect_existing_choice():
    store = MemoryPreferenceStore({KEY_DOH: False})
    apply_locale_defaults(store, country='CN')
    assert store.get(KEY_DOH) is False


def test_locale_defaults_leave_other_regions_alone():
    store = MemoryPreferenceStore()
    apply_locale_defaults(store, country='DE')
    assert not store.contains(KEY_DOH)


def test_locale_country_from_system_locale(monkeypatch):
    monkeypatch.setattr(locale, 'getlocale', lambda: ('zh_CN', 'UTF-8'))
    assert preferences.locale_country() == 'CN'

    monkeypatch.setattr(locale, 'getlocale', lambda: (None, None))
    monkeypatch.delenv('LC_ALL', raising=False)
    monkeypatch.setenv('LANG', 'en_US.UTF-8')
    assert preferences.locale_country() == 'US'

    monkeypatch.setenv('LANG', 'C')
    assert preferences.locale_country() == ''


def test_sub_second_check_time_reads_back_exactly(freshness):
    at = datetime(2026, 3, 1, 12, 0, 0, 900000, tzinfo=timezone.utc)
    freshness.record_success(1234, at)
    assert freshness.read().last_checked_at == at


class CountingStore(MemoryPreferenceStore):
    def __init__(self, values=None):
        super().__init__(values)
        self.writes = 0

    def _persist(self, values):
        self.writes += 1


def test_mark_checked_writes_only_when_flag_is_unset():
    store = CountingStore()
    freshness = FreshnessStore(store)

    freshness.mark_checked()
    freshness.mark_checked()

    assert store.get(KEY_CHECKED) is True
    assert store.writes == 1


def test_update_sees_current_values_and_can_skip():
    store = CountingStore({KEY_LATEST_VERSION: 3})
    seen = []

    def bump(current):
        seen.append(current)
        return {KEY_LATEST_VERSION: current[KEY_LATEST_VERSION] + 1}

    store.update(bump)
    store.update(lambda current: None)

    assert seen == [{KEY_LATEST_VERSION: 3}]
    assert store.get(KEY_LATEST_VERSION) == 4
    assert store.writes == 1
