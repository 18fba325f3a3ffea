from datetime import date


def calculate_age(date_of_birth: date, today: date) -> int:
    """Whole years between ``date_of_birth`` and ``today``.

    One year is subtracted until the birthday has been reached this year. A
    29 February birthday therefore counts as reached on 1 March in
    non-leap years.
    """
    age = today.year - date_of_birth.year
    if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return age
