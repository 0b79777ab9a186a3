"""Simple two-language (en/ar) translation helper."""

_STRINGS: dict[str, dict[str, str]] = {
    "Fajr": {"en": "Fajr", "ar": "الفجر"},
    "Sunrise": {"en": "Sunrise", "ar": "الشروق"},
    "Dhuhr": {"en": "Dhuhr", "ar": "الظهر"},
    "Asr": {"en": "Asr", "ar": "العصر"},
    "Maghrib": {"en": "Maghrib", "ar": "المغرب"},
    "Isha": {"en": "Isha", "ar": "العشاء"},
    "Qiyam": {"en": "Qiyam", "ar": "القيام"},
    "Pre-Fajr": {"en": "Pre-Fajr", "ar": "قبل الفجر"},
    "Post-Isha": {"en": "Post-Isha", "ar": "بعد العشاء"},
    "am": {"en": "AM", "ar": "ص"},
    "pm": {"en": "PM", "ar": "م"},
    "label_next": {"en": "Next prayer", "ar": "الصلاة القادمة"},
    "label_current": {"en": "Current", "ar": "الوقت الحالي"},
    "label_qibla": {"en": "Qibla", "ar": "القبلة"},
    "label_tomorrow": {"en": "tomorrow", "ar": "غداً"},
    "label_approximated": {
        "en": "approximated (high latitude)",
        "ar": "تقريبي (خط عرض مرتفع)",
    },
    "notify_title": {"en": "{name} Prayer Time", "ar": "حان وقت صلاة {name}"},
    "notify_body": {
        "en": "It's time for {name} prayer.",
        "ar": "حان الآن موعد صلاة {name}.",
    },
    "reminder_title": {
        "en": "{name} in {minutes} minutes",
        "ar": "{name} بعد {minutes} دقائق",
    },
    "reminder_body": {
        "en": "{name} prayer time is approaching. Prepare for prayer.",
        "ar": "اقترب موعد صلاة {name}. استعد للصلاة.",
    },
    "chart_title": {"en": "Prayer times", "ar": "مواقيت الصلاة"},
}


def t(key: str, lang: str) -> str:
    """Return the translated string for key in lang.

    Falls back to 'en', then to the key itself if not found.
    """
    entry = _STRINGS.get(key)
    if entry is None:
        return key
    return entry.get(lang) or entry.get("en") or key
