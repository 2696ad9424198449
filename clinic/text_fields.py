"""
Free-text helpers for table cells and legacy columns
"""

# characters where a collapsed preview may break its first line
_BREAK_CHARS = (" ", ",", ".", ";", ":", "-")

REFERRER_PARTS = ("referrer_name", "referrer_phone", "referrer_birth_year")
EMERGENCY_CONTACT_PARTS = ("emergency_contact_name", "emergency_contact_phone", "emergency_contact_relation")


def unpack_slash_field(value, names):
    """
    Split a legacy 'a / b / c' column into named parts.
    3+ segments fill the three names by position, 2 fill the first two,
    1 fills the first; missing names come back as ''.
    A blank segment keeps its position: '/ 010-1234-5678 / 1980' has no name.
    """
    result = {name: "" for name in names}
    if not value:
        return result
    parts = [p.strip() for p in str(value).split("/")]
    while parts and not parts[-1]:
        parts.pop()
    for name, part in zip(names, parts):
        result[name] = part
    return result


def summarize_text(value, width=30):
    """
    Two-line collapsed preview of a long cell value.
    Returns {"full", "first_line", "second_line", "truncated"}.
    """
    text = (value or "").strip()
    if not text:
        return {"full": "", "first_line": "-", "second_line": "", "truncated": False}
    if len(text) <= width:
        return {"full": text, "first_line": text, "second_line": "", "truncated": False}

    if "\n" in text:
        lines = text.split("\n")
        first = lines[0]
        second = f"{lines[1]}..." if len(lines) > 2 else lines[1]
        return {"full": text, "first_line": first, "second_line": second, "truncated": True}

    break_point = min(width, len(text) // 2)
    position = break_point
    i = break_point
    while i > break_point - 10 and i > 0:
        if text[i] in _BREAK_CHARS:
            position = i + 1
            break
        i -= 1

    first = text[:position].strip()
    if len(text) > position + width:
        second = f"{text[position:position + width - 3].strip()}..."
    else:
        second = text[position:].strip()
    return {"full": text, "first_line": first, "second_line": second, "truncated": True}


def summarize_areas(value):
    """'앞니, 어금니, 잇몸' -> {"items": [...], "summary": "앞니, 어금니 +1개"}"""
    items = [a.strip() for a in (value or "").split(",") if a.strip()]
    if not items:
        return {"items": [], "summary": "-"}
    if len(items) <= 2:
        return {"items": items, "summary": ", ".join(items)}
    return {"items": items, "summary": f"{', '.join(items[:2])} +{len(items) - 2}개"}


def format_won(amount):
    if amount is None or amount == "":
        return "-"
    return f"{int(amount):,}원"
