"""
Helmsman parser: resolve a subcommand, tokenize its arguments, dispatch.

Flow of Parser.parse(tokens)
1. no tokens → global help when config.help_on_empty, otherwise nothing.
2. "--version"/"-V" first, with config.version set → print the version.
3. help ("--help"/"-h") first, or anywhere while the first token names no
   command → global help.
4. the first token selects a subcommand by name or alias (first match in
   registration order; case handling per config.case_sensitive). Unknown
   commands are reported (never raised), followed by the global help unless
   strict.
5. help among the remaining tokens → that subcommand's help, nothing parsed.
6. left-to-right scan with one lookahead slot:
   • "--name": Option (consumes the next token), then OptionalOption (consumes
     the next token only when it exists and does not start with '-'), then
     Flag (no token consumed).
   • "-x": Option, then Flag; OptionalOption is not reachable by short name.
   • "-xyz": every character must be a Flag; unknown characters fail in strict
     mode and are skipped otherwise.
   • anything else is queued as positional, matched to Arguments in
     registration order after the scan.
7. batch check of required options and arguments (one ValidationError).
8. subcommand-wide validate() (one ValidationError with every message).
9. execute() exactly once.

Faults
- Conversion and missing-value failures stop the scan at once.
- Unknown options and surplus positionals are fatal in strict mode and
  warnings otherwise.
- Any ArgumentParseException is rendered with the subcommand help to the
  console sink and then re-raised; the parser never exits the process.

Output goes to an injected rich Console so it can be captured in tests.
"""
import difflib
import logging
from collections.abc import Iterable

from rich.console import Console

from . import help as rendering
from .config import ParserConfig
from .faults import *
from .subcommands import Subcommand
from .utils import *

logger = logging.getLogger(__name__)

HELP_TOKENS = frozenset({"--help", "-h"})
VERSION_TOKENS = frozenset({"--version", "-V"})


class Parser:
    """
    Owns the registered subcommands and runs parse().

    Parameters
    - prog: str, program name used in help and fault headers.
    - config: ParserConfig, read once; never mutated.
    - console: rich Console receiving help, warnings and errors. Defaults to
      a stdout console honoring config.colorful.

    Usage constraint
    - parse() is synchronous and not re-entrant for a given subcommand:
      properties keep their values between calls and are shared state.
    """

    prog = mirror("prog")
    config = mirror("config")
    commands = mirror("commands")
    console = mirror("console")

    def __init__(self, prog, config=ParserConfig.DEFAULT, *, console=Unset):
        if not isinstance(prog, str):
            raise TypeError("Parser 'prog' must be a string")
        elif not prog.strip():
            raise ValueError("Parser 'prog' cannot be blank")
        if not isinstance(config, ParserConfig):
            raise TypeError("Parser 'config' must be a parser config")
        if not isinstance(console, Console | Unset):
            raise TypeError("Parser 'console' must be a rich console")

        self._prog = prog
        self._config = config
        self._console = coalesce(console, Console(no_color=not config.colorful, highlight=False))
        self._commands = []

    def __repr__(self):
        return "parser(prog=%r, commands=%r)" % (self._prog, [command.name for command in self._commands])

    def subcommands(self, *commands):
        """
        Register subcommands; resolution follows registration order.
        """
        for command in commands:
            if not isinstance(command, Subcommand):
                raise TypeError("subcommands() arguments must be subcommands")
        self._commands.extend(commands)

    # ── output ───────────────────────────────────────────────────────────

    def _report(self, fault):
        return trigger(fault, console=self._console, prog=self._prog, colorful=self._config.colorful)

    def _global_help(self):
        self._console.print(rendering.global_help(self._prog, self._commands, colorful=self._config.colorful))

    def _command_help(self, command):
        self._console.print(rendering.command_help(command, colorful=self._config.colorful))

    # ── resolution ───────────────────────────────────────────────────────

    def _find(self, token):
        for command in self._commands:
            if command.matches(token, case_sensitive=self._config.case_sensitive):
                return command
        return None

    def parse(self, tokens):
        """
        Parse `tokens` (argv without the program name) and run the selected
        subcommand.

        Raises
        - ArgumentParseException (or a subclass) when the selected subcommand
          cannot be populated; help has been printed by then.
        - TypeError when tokens is not an iterable of strings.
        """
        if isinstance(tokens, str) or not isinstance(tokens, Iterable):
            raise TypeError("parse() argument must be an iterable of strings")
        tokens = list(tokens)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("parse() argument must be an iterable of strings")

        if not tokens:
            if self._config.help_on_empty:
                self._global_help()
            return

        first, rest = tokens[0], tokens[1:]

        if self._config.version and first in VERSION_TOKENS:
            self._console.print(rendering.version(self._prog, self._config.version, colorful=self._config.colorful))
            return

        command = self._find(first)

        if first in HELP_TOKENS or (command is None and HELP_TOKENS.intersection(tokens)):
            self._global_help()
            return

        if command is None:
            suggestions = difflib.get_close_matches(
                first, [name for command in self._commands for name in (command.name, *command.aliases)], 1
            )
            self._report(UnknownCommandError(
                "unknown command %r" % first,
                title="unknown command",
                code=FaultCode.UNKNOWN_COMMAND,
                name=first,
                hint=("did you mean %r? " % suggestions[0] if suggestions else "")
                + "run '%s --help' to see available commands" % self._prog,
            ))
            if not self._config.strict:
                self._global_help()
            return

        logger.debug("resolved command %r from %r", command.name, first)

        if HELP_TOKENS.intersection(rest):
            self._command_help(command)
            return

        try:
            self._tokenize(command, rest)
            self._require(command)
            if errors := command.validate():
                raise ValidationError(
                    "; ".join(errors),
                    title="invalid arguments",
                    code=FaultCode.VALIDATION,
                    errors=tuple(errors),
                    hint="run '%s %s --help' to see the expected values" % (self._prog, command.name),
                )
            command.execute()
        except ArgumentParseException as exception:
            self._report(exception)
            self._command_help(command)
            raise

    # ── tokenization ─────────────────────────────────────────────────────

    def _tokenize(self, command, tokens):
        positionals = []
        index = 0
        while index < len(tokens):
            token = tokens[index]
            if token.startswith("--"):
                index = self._parse_long(command, token[2:], tokens, index)
            elif token.startswith("-") and len(token) > 1:
                index = self._parse_short(command, token[1:], tokens, index)
            else:
                positionals.append(token)
            index += 1
        self._parse_positionals(command, positionals)

    def _consume(self, option, spelled, tokens, index):
        """
        Feed the token after `index` to an option; return the new index.
        """
        if index + 1 >= len(tokens):
            raise MissingValueError(
                "missing value for option %s" % spelled,
                title="missing value",
                code=FaultCode.MISSING_VALUE,
                name=option.display,
                hint="pass a value after it (for example: %s <value>)" % spelled,
            )
        option.parse_value(tokens[index + 1])
        return index + 1

    def _parse_long(self, command, key, tokens, index):
        if option := command.find_option(long=key):
            return self._consume(option, "--" + key, tokens, index)

        if optional := command.find_optional(long=key):
            if index + 1 < len(tokens) and not tokens[index + 1].startswith("-"):
                optional.parse_value(tokens[index + 1])
                return index + 1
            optional.set_as_flag()
            return index

        if flag := command.find_flag(long=key):
            flag.set()
            return index

        self._unknown(command, "--" + key)
        return index

    def _parse_short(self, command, key, tokens, index):
        if len(key) > 1:
            for char in key:
                if flag := command.find_flag(short=char):
                    flag.set()
                elif self._config.strict:
                    raise UnknownOptionError(
                        "unknown flag -%s in %r" % (char, "-" + key),
                        title="unknown flag",
                        code=FaultCode.UNKNOWN_OPTION,
                        name="-" + char,
                        hint="combined short options may only contain flags; "
                             "run '%s %s --help' to see them" % (self._prog, command.name),
                    )
                else:
                    logger.debug("skipping unknown flag -%s in %r", char, "-" + key)
            return index

        if option := command.find_option(short=key):
            return self._consume(option, "-" + key, tokens, index)

        if flag := command.find_flag(short=key):
            flag.set()
            return index

        self._unknown(command, "-" + key)
        return index

    def _unknown(self, command, spelled):
        """
        Fail (strict) or warn (lenient) about an unmatched option token.
        """
        names = [
            name
            for property in (*command.options, *command.optionals, *command.flags)
            for name in ("--" + property.long, property.short and "-" + property.short)
            if name
        ]
        if suggestions := difflib.get_close_matches(spelled, names, 1):
            hint = "did you mean %r? you can also run '%s %s --help' to see all options" % (
                suggestions[0], self._prog, command.name
            )
        else:
            hint = "run '%s %s --help' to see all available options" % (self._prog, command.name)

        if self._config.strict:
            raise UnknownOptionError(
                "unknown option %s" % spelled,
                title="unknown option",
                code=FaultCode.UNKNOWN_OPTION,
                name=spelled,
                hint=hint,
            )
        self._report(UnknownOptionWarning(
            "unknown option %s" % spelled,
            title="unknown option ignored",
            code=FaultCode.UNKNOWN_OPTION_IGNORED,
            name=spelled,
            hint=hint,
        ))

    def _parse_positionals(self, command, positionals):
        arguments = command.arguments

        if len(positionals) > len(arguments):
            extra = tuple(positionals[len(arguments):])
            if self._config.strict:
                raise TooManyArgumentsError(
                    "too many arguments: %s" % ", ".join(extra),
                    title="too many arguments",
                    code=FaultCode.TOO_MANY_ARGUMENTS,
                    extra=extra,
                    hint="remove the extra values or run '%s %s --help' to see the expected usage" % (
                        self._prog, command.name
                    ),
                )
            self._report(TooManyArgumentsWarning(
                "ignoring extra arguments: %s" % ", ".join(extra),
                title="extra arguments ignored",
                code=FaultCode.EXTRA_ARGUMENTS_IGNORED,
                extra=extra,
            ))

        for argument, token in zip(arguments, positionals):
            argument.parse_value(token)

    def _require(self, command):
        """
        Report every required option and argument still absent, all at once.
        """
        options = [option for option in command.options if option.required and not option.present]
        arguments = [argument for argument in command.arguments if argument.required and not argument.present]
        if not options and not arguments:
            return

        parts = []
        if options:
            parts.append("missing required options: %s" % ", ".join(option.display for option in options))
        if arguments:
            parts.append("missing required arguments: %s" % ", ".join(argument.name for argument in arguments))
        raise ValidationError(
            "; ".join(parts),
            title="missing required values",
            code=FaultCode.VALIDATION,
            errors=tuple(property.error for property in (*options, *arguments)),
            missing=tuple(property.display for property in (*options, *arguments)),
            hint="run '%s %s --help' to see what is required" % (self._prog, command.name),
        )


__all__ = (
    "Parser",
)
