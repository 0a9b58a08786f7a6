from gymflow.scheduling.availability import normalize_time, _as_date

# Days of the week constants (0 = Monday, 6 = Sunday)
MONDAY = 0
TUESDAY = 1
WEDNESDAY = 2
THURSDAY = 3
FRIDAY = 4
SATURDAY = 5
SUNDAY = 6

DAY_NAMES = {
    MONDAY: 'Monday',
    TUESDAY: 'Tuesday',
    WEDNESDAY: 'Wednesday',
    THURSDAY: 'Thursday',
    FRIDAY: 'Friday',
    SATURDAY: 'Saturday',
    SUNDAY: 'Sunday'
}


class WorkingHours:
    """An open/close window given as HH:MM strings"""

    def __init__(self, start, end):
        self.start = start
        self.end = end

    @classmethod
    def parse(cls, start, end):
        return cls(normalize_time(start), normalize_time(end))

    @classmethod
    def from_dict(cls, value):
        return cls.parse(value['start'], value['end'])

    @property
    def open_hour(self):
        return int(self.start.split(':')[0])

    @property
    def close_hour(self):
        return int(self.end.split(':')[0])

    def contains_hour(self, time):
        """Hour-granular check: open_hour <= hour < close_hour"""
        hour = int(normalize_time(time).split(':')[0])
        return self.open_hour <= hour < self.close_hour

    def contains(self, time):
        return self.start <= normalize_time(time) < self.end

    def __eq__(self, other):
        return isinstance(other, WorkingHours) and (self.start, self.end) == (other.start, other.end)

    def __hash__(self):
        return hash((self.start, self.end))

    def __repr__(self):
        return f'<WorkingHours {self.start}-{self.end}>'


def check_booking_window(date, time, hours, closed_weekday=SUNDAY, trainer_hours=None):
    """Field-level errors for a proposed booking time; empty dict when acceptable.

    Rejections are reported, never raised, so the form can show them beside
    the offending field.
    """
    errors = {}
    if not hours.contains_hour(time):
        errors['time'] = f'Appointments must be between {hours.start} and {hours.end}'
    elif trainer_hours is not None and not trainer_hours.contains(time):
        errors['time'] = (f'Trainer works between {trainer_hours.start} and {trainer_hours.end}')

    if closed_weekday is not None and _as_date(date).weekday() == closed_weekday:
        errors['date'] = f'No appointments can be booked on {DAY_NAMES[closed_weekday]}'

    return errors
