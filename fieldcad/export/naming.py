import re

_UNSAFE = re.compile(r"[^a-z0-9]", re.IGNORECASE)


def safe_stem(name: str) -> str:
    """Replace every character that is not an ASCII letter or digit with '_'."""
    return _UNSAFE.sub("_", name)


def export_filename(stem: str, crs_label: str, suffix: str) -> str:
    """
    Build the file name offered when saving an export.

    Examples:
        >>> export_filename("points", "EPSG:5255", ".txt")
        'points_EPSG_5255.txt'
        >>> export_filename("Parsel Sorgu 10:42", "TM30", ".dxf")
        'Parsel_Sorgu_10_42_TM30.dxf'
    """
    return f"{safe_stem(stem)}_{safe_stem(crs_label)}{suffix}"
