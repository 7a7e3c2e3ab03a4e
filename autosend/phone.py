import re
from autosend.config import COUNTRY_CODE

_NON_DIGITS = re.compile(r"[^0-9]")


def format_phone_number(phone, country_code=COUNTRY_CODE):
    """Turn a locally formatted number into the digits-only international form.

    Separators are stripped, a single national trunk "0" is dropped and the
    country code is prepended unless the number already starts with it.
    Nothing is validated; garbage in gives digits (or an empty body) out.
    """
    formatted = _NON_DIGITS.sub("", phone or "")
    if formatted.startswith("0"):
        formatted = formatted[1:]
    if not formatted.startswith(country_code):
        formatted = f"{country_code}{formatted}"
    return formatted
