import typing


def english_enumerate(
    items: typing.Iterable[str], conj: str = ", and ", limit: typing.Optional[int] = None
) -> str:
    """
    Join ``items`` the way an English sentence would ("a, b, and c").

    When ``limit`` is given, only the first ``limit`` items are spelled out and the
    rest is summarized as "N more".
    """
    buf: typing.List[str] = list(items)
    if limit is not None and len(buf) > limit:
        rest = len(buf) - limit
        buf = buf[:limit] + [f"{rest} more"]

    if not buf:
        return ""
    if len(buf) == 1:
        return buf[0]
    return ", ".join(buf[:-1]) + conj + buf[-1]
