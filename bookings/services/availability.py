"""
Weekly availability and per-date slot lookup.

``day_of_week`` follows the 0 = Sunday convention; Python's ``weekday()``
starts on Monday and is shifted accordingly.
"""

import datetime

from django.utils import timezone

from ..exceptions import SlotUnavailable
from ..models import Availability, ServiceRequest


def day_of_week(date):
    return (date.weekday() + 1) % 7


def occupied_times(provider, date, statuses=None, exclude_id=None):
    statuses = statuses or [
        status for status in ServiceRequest.Status.values
        if status not in (ServiceRequest.Status.CANCELLED, ServiceRequest.Status.REJECTED)
    ]
    qs = ServiceRequest.objects.filter(
        provider=provider,
        scheduled_date=date,
        scheduled_time__isnull=False,
        status__in=statuses,
    )
    if exclude_id:
        qs = qs.exclude(pk=exclude_id)
    return set(qs.values_list('scheduled_time', flat=True))


def ensure_slot_free(provider, date, time, exclude_id=None):
    """Raises ``SlotUnavailable`` when another live booking holds the slot."""
    taken = occupied_times(
        provider, date,
        statuses=ServiceRequest.OCCUPYING_STATUSES,
        exclude_id=exclude_id,
    )
    if time.replace(second=0, microsecond=0) in {t.replace(second=0, microsecond=0) for t in taken}:
        raise SlotUnavailable()


def weekly_schedule(provider):
    slots = Availability.objects.filter(provider=provider, is_active=True).order_by('day_of_week', 'start_time')
    by_day = {day: [] for day in range(7)}
    for slot in slots:
        by_day[slot.day_of_week].append({
            'id': slot.id,
            'start_time': slot.start_time.strftime('%H:%M'),
            'end_time': slot.end_time.strftime('%H:%M'),
        })

    return [
        {
            'day_of_week': day,
            'is_working_day': bool(by_day[day]),
            'time_slots': by_day[day],
        }
        for day in range(7)
    ]


def available_slots(provider, date, now=None):
    """
    Active slots of ``date``'s weekday, each flagged ``is_available``.

    A slot is unavailable when a non-cancelled, non-rejected booking of the
    provider starts at that time on that date, or when it already started.
    """
    now = now or timezone.localtime()
    taken = occupied_times(provider, date)

    slots = Availability.objects.filter(
        provider=provider,
        day_of_week=day_of_week(date),
        is_active=True,
    ).order_by('start_time')

    result = []
    for slot in slots:
        starts_at = timezone.make_aware(
            datetime.datetime.combine(date, slot.start_time),
            timezone.get_current_timezone(),
        )
        is_past = starts_at <= now
        is_booked = slot.start_time in taken
        result.append({
            'id': slot.id,
            'start_time': slot.start_time.strftime('%H:%M'),
            'end_time': slot.end_time.strftime('%H:%M'),
            'is_available': not (is_past or is_booked),
            'is_booked': is_booked,
        })
    return result
