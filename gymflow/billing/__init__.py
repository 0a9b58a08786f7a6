from .payments import card_commission, payment_summary, split_payment
from .packages import (
    member_package_status,
    service_package_status,
    should_deactivate_member,
    remaining_sessions,
    package_report,
)
