"""
Helmsman parser configuration.

ParserConfig is an immutable record consumed once, when a Parser is built.

Fields
- colorful: style help and fault output (rich styles); plain text otherwise.
- strict: unknown options and surplus positionals abort parsing instead of
  producing warnings.
- help_on_empty: print the global help when parse() receives no tokens.
- case_sensitive: compare command names and aliases case-sensitively.
- abbreviations: accepted for compatibility; option matching is always exact.
- version: program version; when set, "--version"/"-V" as the first token
  prints it.

Derive variants with _replace(); the result is validated like a fresh record.
"""
from collections import namedtuple


class ParserConfig(namedtuple("ParserConfig", (
    "colorful",
    "strict",
    "help_on_empty",
    "case_sensitive",
    "abbreviations",
    "version",
))):
    __slots__ = ()

    def __new__(
            cls,
            colorful=True,
            strict=False,
            help_on_empty=True,
            case_sensitive=True,
            abbreviations=False,
            version=None
    ):
        if version is not None:
            if not isinstance(version, str):
                raise TypeError("ParserConfig 'version' must be a string")
            elif not (version := version.strip()):
                raise ValueError("ParserConfig 'version' cannot be empty")
        return super().__new__(
            cls,
            bool(colorful),
            bool(strict),
            bool(help_on_empty),
            bool(case_sensitive),
            bool(abbreviations),
            version
        )

    def _replace(self, /, **changes):
        return type(self)(**(self._asdict() | changes))


ParserConfig.DEFAULT = ParserConfig()


__all__ = (
    "ParserConfig",
)
