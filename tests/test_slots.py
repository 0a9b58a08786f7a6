import pytest

from gymflow import db
from gymflow.models.setting import Setting, TIME_SLOTS_KEY, load_time_slots, save_time_slots
from gymflow.scheduling.slots import DEFAULT_TIME_SLOTS, clean_profile, default_profile, is_time_slot_settings


def test_default_profile_is_a_fresh_copy():
    profile = default_profile()
    profile["slots"].append("21:00")
    assert default_profile()["slots"] == DEFAULT_TIME_SLOTS
    assert default_profile()["working_hours"] == {"start": "10:00", "end": "20:00"}


@pytest.mark.parametrize("value", [
    None,
    [],
    {"slots": "10:00"},
    {"slots": ["10:00"], "working_hours": {"start": "10:00"}},
    {"slots": [1000], "working_hours": {"start": "10:00", "end": "20:00"}},
])
def test_rejects_malformed_settings(value):
    assert not is_time_slot_settings(value)
    with pytest.raises(ValueError):
        clean_profile(value)


def test_clean_profile_normalizes_and_sorts():
    value = {"slots": ["13:00:00", "10:00", "13:00"], "working_hours": {"start": "09:00:00", "end": "21:00"}}
    assert clean_profile(value) == {
        "slots": ["10:00", "13:00"],
        "working_hours": {"start": "09:00", "end": "21:00"},
    }


def test_clean_profile_rejects_backwards_hours():
    with pytest.raises(ValueError, match="end after"):
        clean_profile({"slots": ["10:00"], "working_hours": {"start": "18:00", "end": "10:00"}})


def test_load_falls_back_to_defaults(app):
    assert load_time_slots("normal") == default_profile()
    assert load_time_slots("holiday") == default_profile()


def test_load_unknown_profile(app):
    with pytest.raises(ValueError):
        load_time_slots("summer")


def test_profiles_are_stored_independently(app):
    holiday = {"slots": ["11:00", "12:00"], "working_hours": {"start": "11:00", "end": "15:00"}}
    save_time_slots("holiday", holiday)
    db.session.commit()

    assert load_time_slots("holiday") == holiday
    assert load_time_slots("normal") == default_profile()
    assert set(Setting.get_value(TIME_SLOTS_KEY)) == {"holiday"}


def test_corrupt_stored_profile_uses_defaults(app):
    Setting.set_value(TIME_SLOTS_KEY, {"normal": {"slots": "broken"}})
    db.session.commit()
    assert load_time_slots("normal") == default_profile()
