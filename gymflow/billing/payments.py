from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal('0.01')
ZERO = Decimal('0')


def to_money(value):
    """Decimal rounded half-up to cents; accepts str, int, float or Decimal"""
    if value is None or value == '':
        return ZERO.quantize(CENT)
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def card_commission(credit_card_paid, rate):
    """Commission charged on the card share of a payment"""
    return to_money(to_money(credit_card_paid) * Decimal(str(rate)))


def package_total(services):
    return sum((to_money(service.price) for service in services), ZERO).quantize(CENT)


def payment_summary(services, credit_card_paid, cash_paid, commission=ZERO):
    """Totals shown before a payment is saved.

    The commission is charged on top of the card amount; only card + cash
    count towards the package price.
    """
    total = package_total(services)
    card = to_money(credit_card_paid)
    cash = to_money(cash_paid)
    commission = to_money(commission)
    applied = card + cash
    return {
        'total_amount': total,
        'applied_amount': applied,
        'remaining_amount': total - applied,
        'credit_card_with_commission': card + commission,
        'total_paid_with_commission': card + commission + cash,
        'commission': commission,
    }


def split_payment(services, credit_card_paid, cash_paid, commission=ZERO):
    """One record per selected package, shares proportional to package price.

    Each share is rounded to cents on its own, so the parts may differ from
    the whole by a cent. Commission is folded into each card share.
    """
    total = package_total(services)
    card = to_money(credit_card_paid)
    cash = to_money(cash_paid)
    commission = to_money(commission)

    records = []
    for service in services:
        price = to_money(service.price)
        ratio = price / total if total else ZERO
        package_commission = to_money(commission * ratio)
        records.append({
            'package_name': service.name,
            'credit_card_paid': to_money(card * ratio) + package_commission,
            'cash_paid': to_money(cash * ratio),
            'commission': package_commission,
        })
    return records
