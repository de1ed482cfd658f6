import re

_ACCOUNT_NAME_RE = re.compile(r"^[a-z1-5.]{1,12}$")


def is_valid_account_name(name: str) -> bool:
    """Account names are 1-12 chars of a-z, 1-5 and '.', never ending in '.'"""
    if not isinstance(name, str):
        return False
    return bool(_ACCOUNT_NAME_RE.match(name)) and not name.endswith(".")
