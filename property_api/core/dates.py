from datetime import date


def month_start(day: date, months_back: int = 0) -> date:
    """
    First day of the month ``months_back`` months before ``day``'s month.

    month_start(date(2024, 3, 15), 11) == date(2023, 4, 1)
    """
    index = day.year * 12 + (day.month - 1) - months_back
    return date(index // 12, index % 12 + 1, 1)


def last_twelve_months_start(today: date | None = None) -> date:
    """Start of the rolling window covering the current month and the 11 before it"""
    return month_start(today or date.today(), 11)
