"""
UTF-8 helpers with swappable backends.

``Multibyte`` keeps named configurations (``{"default": {"adapter": "codepoint"}}``)
and forwards strlen/strpos/strrpos/substr to the adapter instance of the
requested configuration. The UTF-8 check itself needs no backend.
"""
import re

from storefront.core.config import settings
from storefront.g11n.adapters import ADAPTERS, Adapter

# Allowed sequences of a clean UTF-8 document; see https://www.w3.org/International/questions/qa-forms-utf-8
_UTF8_STRICT = re.compile(
    rb"(?:[\x09\x0A\x0D\x20-\x7E]"  # ASCII
    rb"|[\xC2-\xDF][\x80-\xBF]"  # non-overlong 2-byte
    rb"|\xE0[\xA0-\xBF][\x80-\xBF]"  # excluding overlongs
    rb"|[\xE1-\xEC\xEE\xEF][\x80-\xBF]{2}"  # straight 3-byte
    rb"|\xED[\x80-\x9F][\x80-\xBF]"  # excluding surrogates
    rb"|\xF0[\x90-\xBF][\x80-\xBF]{2}"  # planes 1-3
    rb"|[\xF1-\xF3][\x80-\xBF]{3}"  # planes 4-15
    rb"|\xF4[\x80-\x8F][\x80-\xBF]{2})*"  # plane 16
)
_NON_ASCII = re.compile(rb"[^\x09\x0A\x0D\x20-\x7E]")


class ConfigurationError(Exception):
    """Unknown configuration name or adapter."""


class Multibyte:
    _configurations: dict[str, dict] | None = None
    _instances: dict[str, Adapter] = {}

    @classmethod
    def config(cls, configurations: dict[str, dict] | None = None) -> dict[str, dict]:
        """Return the named configurations, or replace them (dropping cached adapters)."""
        if configurations is not None:
            cls._configurations = {name: dict(conf) for name, conf in configurations.items()}
            cls._instances = {}
        elif cls._configurations is None:
            cls._configurations = {"default": {"adapter": settings.multibyte_adapter}}
        return cls._configurations

    @classmethod
    def reset(cls) -> None:
        cls._configurations = None
        cls._instances = {}

    @classmethod
    def adapter(cls, name: str = "default") -> Adapter:
        if name in cls._instances:
            return cls._instances[name]
        conf = cls.config().get(name)
        if conf is None:
            raise ConfigurationError(f"Configuration `{name}` has not been defined.")
        options = dict(conf)
        adapter_name = options.pop("adapter", None)
        adapter_cls = ADAPTERS.get((adapter_name or "").lower())
        if adapter_cls is None:
            raise ConfigurationError(f"Could not find adapter `{adapter_name}` in configuration `{name}`.")
        cls._instances[name] = adapter_cls(**options)
        return cls._instances[name]

    @staticmethod
    def is_utf8(value: str | bytes, quick: bool = False) -> bool:
        """
        True if ``value`` is valid UTF-8.

        Quick mode only reports whether anything outside tab/newline/printable
        ASCII is present, i.e. whether the text is likely multibyte. Do not use
        it to validate integrity.
        """
        if isinstance(value, str):
            value = value.encode("utf-8", "surrogatepass")
        if quick:
            return _NON_ASCII.search(value) is not None
        return _UTF8_STRICT.fullmatch(value) is not None

    @classmethod
    def strlen(cls, value, name: str = "default"):
        return cls.adapter(name).strlen(value)

    @classmethod
    def strpos(cls, haystack, needle, offset: int = 0, name: str = "default"):
        """Position of the first ``needle`` at or after ``offset``, None when absent."""
        return cls.adapter(name).strpos(haystack, needle, offset)

    @classmethod
    def strrpos(cls, haystack, needle, name: str = "default"):
        # No offset: not every backend supports one
        return cls.adapter(name).strrpos(haystack, needle)

    @classmethod
    def substr(cls, value, start: int, length: int | None = None, name: str = "default"):
        return cls.adapter(name).substr(value, start, length)
