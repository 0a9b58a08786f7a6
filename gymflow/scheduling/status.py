from enum import Enum


class AppointmentStatus(str, Enum):
    """Lifecycle states of an appointment. Only SCHEDULED occupies a slot."""
    SCHEDULED = 'scheduled'
    IN_PROGRESS = 'in-progress'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'

    def __str__(self):
        return self.value

    @classmethod
    def coerce(cls, value):
        if isinstance(value, cls):
            return value
        return cls(value)


# Display order used by listings
STATUS_ORDER = {
    AppointmentStatus.SCHEDULED: 0,
    AppointmentStatus.IN_PROGRESS: 1,
    AppointmentStatus.COMPLETED: 2,
    AppointmentStatus.CANCELLED: 3,
}
