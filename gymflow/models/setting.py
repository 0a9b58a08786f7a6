from gymflow import db
from gymflow.scheduling.slots import default_profile, is_time_slot_settings, PROFILES
from datetime import datetime

TIME_SLOTS_KEY = 'time_slots'

class Setting(db.Model):
    """Key/value store for deployment settings (JSON values)"""
    __tablename__ = 'settings'

    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.String(50), unique=True, nullable=False)
    value = db.Column(db.JSON, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __init__(self, key, value):
        self.key = key
        self.value = value

    @classmethod
    def get_value(cls, key, default=None):
        setting = cls.query.filter_by(key=key).first()
        return setting.value if setting else default

    @classmethod
    def set_value(cls, key, value):
        """Create or replace a setting; the caller commits"""
        setting = cls.query.filter_by(key=key).first()
        if setting:
            setting.value = value
        else:
            setting = cls(key=key, value=value)
            db.session.add(setting)
        return setting

    def __repr__(self):
        return f'<Setting {self.key}>'


def load_time_slots(profile='normal'):
    """Returns the stored slot profile, or the built-in defaults when missing or invalid"""
    if profile not in PROFILES:
        raise ValueError(f'Unknown time slot profile: {profile}')
    stored = Setting.get_value(TIME_SLOTS_KEY) or {}
    value = stored.get(profile)
    if is_time_slot_settings(value):
        return value
    return default_profile()


def save_time_slots(profile, value):
    stored = dict(Setting.get_value(TIME_SLOTS_KEY) or {})
    stored[profile] = value
    return Setting.set_value(TIME_SLOTS_KEY, stored)
