# Import all models here for easier imports elsewhere
from .member import Member
from .trainer import Trainer
from .service import Service
from .appointment import Appointment
from .payment import MemberPayment
from .setting import Setting
from .audit import AuditLog
