from __future__ import annotations

import re

from .contracts import SkinInfo

# e.g. "greensward" by Lappi (CC BY-SA 3.0)
_SKIN_INFO_RE = re.compile(r'"(.+)" by (.+) \((.+)\)', re.IGNORECASE)


class SkinInfoError(ValueError):
    pass


def parse_skin_info(text: str) -> SkinInfo:
    """
    Parse a skin description of the form '"<name>" by <author> (<license>)'.

    Only the first line that matches is used; surrounding text is ignored.
    """
    m = _SKIN_INFO_RE.search(text)
    if m is None:
        flat = text.replace("\n", "")
        raise SkinInfoError(f"name, author or license not found in msg: {flat}")
    return SkinInfo(name=m.group(1), author=m.group(2), license=m.group(3))
