# backend/app/services/slots/window.py
"""
Working-window resolution.

A staff member's weekday rule overrides the salon-wide rule for that day.
Missing staff start/end fall back to the salon's open/close times.
"""

from .intervals import combine_date_time, day_of, weekday_index
from .records import (
    SalonDayRule,
    StaffDayRule,
    Window,
    normalize_salon_rules,
    normalize_staff_rules,
)


def find_salon_rule(salon_rules: list[SalonDayRule], weekday: int) -> SalonDayRule | None:
    for rule in salon_rules:
        if rule.day_of_week == weekday:
            return rule
    return None


def find_staff_rule(staff_rules: list[StaffDayRule], staff_id, weekday: int) -> StaffDayRule | None:
    """First rule for (staff_id, weekday); later duplicates are ignored."""
    if not staff_id:
        return None
    staff_id = str(staff_id)
    for rule in staff_rules:
        if rule.staff_id == staff_id and rule.day_of_week == weekday:
            return rule
    return None


def salon_window(day, rule: SalonDayRule | None) -> Window | None:
    """Salon-wide window for the day, or None when closed."""
    if rule is None or rule.is_closed:
        return None
    start = combine_date_time(day, rule.open_time)
    end = combine_date_time(day, rule.close_time)
    if end <= start:
        return None
    return Window(start=start, end=end)


def staff_window(day, rule: StaffDayRule, salon_rule: SalonDayRule | None = None) -> Window | None:
    """Staff window for the day with salon fallback for missing bounds."""
    if rule.is_off:
        return None

    start_time = rule.start_time or (salon_rule.open_time if salon_rule else None)
    end_time = rule.end_time or (salon_rule.close_time if salon_rule else None)
    start = combine_date_time(day, start_time)
    end = combine_date_time(day, end_time)
    if end <= start:
        return None

    break_start = break_end = None
    if rule.break_start and rule.break_end:
        break_start = combine_date_time(day, rule.break_start)
        break_end = combine_date_time(day, rule.break_end)
        # inverted break -> no break
        if break_end <= break_start:
            break_start = break_end = None

    return Window(start=start, end=end, break_start=break_start, break_end=break_end)


def resolve_window(salon_rules, staff_rules, staff_id, day) -> Window | None:
    """
    Resolve the effective working window for a staff member on a date.

    Args:
        salon_rules: Salon weekday rules (records or raw rows)
        staff_rules: Staff weekday rules (records or raw rows)
        staff_id: Staff identifier; empty means salon-wide
        day: Calendar date (a datetime's date part is used)

    Returns:
        Window anchored to the date, or None when nobody works that day.
    """
    day = day_of(day)
    weekday = weekday_index(day)
    salon_rules = normalize_salon_rules(salon_rules)
    salon_rule = find_salon_rule(salon_rules, weekday)

    staff_rule = find_staff_rule(normalize_staff_rules(staff_rules), staff_id, weekday)
    if staff_rule is not None:
        return staff_window(day, staff_rule, salon_rule)

    return salon_window(day, salon_rule)
