"""
Multibyte backends. Each one measures and searches text in its own unit:
code points, strictly decoded characters of a configured codec, or
user-perceived characters (grapheme clusters).
"""
import unicodedata

ZWJ = "\u200d"


def _slice(seq, start: int, length: int | None):
    """substr() window: negative start counts from the end, negative length drops from the end."""
    size = len(seq)
    if start < 0:
        start = max(size + start, 0)
    if start > size:
        return seq[:0]
    if length is None:
        end = size
    elif length < 0:
        end = size + length
    else:
        end = start + length
    if end <= start:
        return seq[:0]
    return seq[start:end]


def _check_offset(offset: int) -> None:
    if offset < 0:
        raise ValueError(f"Offset {offset} must not be negative.")


class Adapter:
    """Interface every backend implements; results are None where the backend has no answer."""

    def __init__(self, **options):
        self.options = options

    def strlen(self, value):
        raise NotImplementedError

    def strpos(self, haystack, needle, offset: int = 0):
        raise NotImplementedError

    def strrpos(self, haystack, needle):
        raise NotImplementedError

    def substr(self, value, start: int, length: int | None = None):
        raise NotImplementedError


class CodePoint(Adapter):
    """Unicode code points. Invalid UTF-8 bytes become U+FFFD and count as one each."""

    @staticmethod
    def _text(value) -> str:
        if isinstance(value, (bytes, bytearray)):
            return bytes(value).decode("utf-8", errors="replace")
        return value

    def strlen(self, value) -> int:
        return len(self._text(value))

    def strpos(self, haystack, needle, offset: int = 0) -> int | None:
        haystack, needle = self._text(haystack), self._text(needle)
        _check_offset(offset)
        pos = haystack.find(needle, offset)
        return pos if pos >= 0 else None

    def strrpos(self, haystack, needle) -> int | None:
        pos = self._text(haystack).rfind(self._text(needle))
        return pos if pos >= 0 else None

    def substr(self, value, start: int, length: int | None = None) -> str:
        return _slice(self._text(value), start, length)


class Codec(Adapter):
    """
    Strict decoding with a configurable codec (``encoding`` option, utf-8 by
    default). Bytes that do not decode make every operation return None.
    """

    @property
    def encoding(self) -> str:
        return self.options.get("encoding") or "utf-8"

    def _text(self, value) -> str | None:
        if isinstance(value, (bytes, bytearray)):
            try:
                return bytes(value).decode(self.encoding)
            except UnicodeDecodeError:
                return None
        return value

    def strlen(self, value) -> int | None:
        text = self._text(value)
        return None if text is None else len(text)

    def strpos(self, haystack, needle, offset: int = 0) -> int | None:
        haystack, needle = self._text(haystack), self._text(needle)
        if haystack is None or needle is None:
            return None
        _check_offset(offset)
        pos = haystack.find(needle, offset)
        return pos if pos >= 0 else None

    def strrpos(self, haystack, needle) -> int | None:
        haystack, needle = self._text(haystack), self._text(needle)
        if haystack is None or needle is None:
            return None
        pos = haystack.rfind(needle)
        return pos if pos >= 0 else None

    def substr(self, value, start: int, length: int | None = None) -> str | None:
        text = self._text(value)
        return None if text is None else _slice(text, start, length)


def _is_regional_indicator(ch: str) -> bool:
    return 0x1F1E6 <= ord(ch) <= 0x1F1FF


def _extends(ch: str) -> bool:
    cp = ord(ch)
    return (
        ch == ZWJ
        or unicodedata.category(ch) in ("Mn", "Me", "Mc")
        or 0xFE00 <= cp <= 0xFE0F  # variation selectors
        or 0x1F3FB <= cp <= 0x1F3FF  # skin tone modifiers
    )


def graphemes(text: str) -> list[str]:
    """Split into user-perceived characters (simplified extended grapheme clusters)."""
    clusters: list[str] = []
    for ch in text:
        if clusters:
            last = clusters[-1]
            if (
                _extends(ch)
                or last.endswith(ZWJ)
                or (last == "\r" and ch == "\n")
                or (len(last) == 1 and _is_regional_indicator(last) and _is_regional_indicator(ch))
            ):
                clusters[-1] = last + ch
                continue
        clusters.append(ch)
    return clusters


class Grapheme(Adapter):
    """Grapheme clusters: "e" + combining acute is one character, so is a flag emoji."""

    @staticmethod
    def _clusters(value) -> list[str]:
        if isinstance(value, (bytes, bytearray)):
            value = bytes(value).decode("utf-8", errors="replace")
        return graphemes(value)

    def strlen(self, value) -> int:
        return len(self._clusters(value))

    def _positions(self, haystack, needle):
        hay, pin = self._clusters(haystack), self._clusters(needle)
        width = len(pin)
        return hay, [i for i in range(len(hay) - width + 1) if hay[i : i + width] == pin]

    def strpos(self, haystack, needle, offset: int = 0) -> int | None:
        hay, found = self._positions(haystack, needle)
        _check_offset(offset)
        return next((i for i in found if i >= offset), None)

    def strrpos(self, haystack, needle) -> int | None:
        _, found = self._positions(haystack, needle)
        return found[-1] if found else None

    def substr(self, value, start: int, length: int | None = None) -> str:
        return "".join(_slice(self._clusters(value), start, length))


ADAPTERS: dict[str, type[Adapter]] = {
    "codepoint": CodePoint,
    "codec": Codec,
    "grapheme": Grapheme,
}
