"""
Platform fees charged on top of a service's base price.
"""

from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings

CENT = Decimal('0.01')


def _money(value):
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_fees(base_amount, has_scheduling_fee=True, commission_rate=None, scheduling_fee=None):
    """
    Returns ``base_amount``, ``commission``, ``scheduling_fee``, ``total_fees``
    and ``final_amount`` (base plus fees), all rounded to cents.
    """
    rate = Decimal(str(commission_rate if commission_rate is not None else settings.DEFAULT_COMMISSION_RATE))
    fee = Decimal(str(scheduling_fee if scheduling_fee is not None else settings.DEFAULT_SCHEDULING_FEE))

    base = _money(base_amount)
    commission = _money(base * rate)
    scheduling = _money(fee) if has_scheduling_fee else Decimal('0.00')
    total_fees = commission + scheduling

    return {
        'base_amount': base,
        'commission': commission,
        'commission_rate': rate,
        'scheduling_fee': scheduling,
        'total_fees': total_fees,
        'final_amount': base + total_fees,
    }
