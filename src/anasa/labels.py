"""Human-readable labels for leave windows."""

from __future__ import annotations

LANGUAGES = ("el", "en")


def efficiency_label(leave_days: int, total_days: int, language: str = "el") -> str:
    """Describe a window as "spend *leave_days*, get *total_days* off".

    Greek is the default; ``language="en"`` gives the English wording.
    """
    if language not in LANGUAGES:
        msg = f"Unsupported language {language!r}. Supported: {', '.join(LANGUAGES)}"
        raise ValueError(msg)

    if language == "en":
        if leave_days == 0:
            return f"{total_days} free day{'s' if total_days != 1 else ''}"
        day_word = "day" if leave_days == 1 else "days"
        return f"Spend {leave_days} leave {day_word}, get {total_days} days off"

    if leave_days == 0:
        return f"{total_days} δωρεάν ημέρες"
    return f"Κάντε {leave_days} ημέρ{'ες' if leave_days > 1 else 'α'} {total_days}"
