"""
Process mode flags parsed once from the command line.
"""
from dataclasses import dataclass, field, replace
from typing import Iterable, Tuple


_FLAG_ALIASES = {
    'multi': ('multi', 'm'),
    'silent': ('silent', 's'),
    'sandbox': ('sandbox',),
    'portable': ('portable', 'p'),
}


def _flag_name(arg: str) -> str:
    """``--Multi`` / ``-m`` -> ``multi`` / ``m``; anything else -> ''."""
    if arg.startswith('--'):
        return arg[2:].lower()
    if arg.startswith('-'):
        return arg[1:].lower()
    return ''


@dataclass(frozen=True)
class ProcessMode:
    """Immutable run flags.  ``args`` holds everything that was not a known flag."""

    multi_instance: bool = False
    portable: bool = False
    silent: bool = False
    sandbox: bool = False
    args: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def parse(cls, argv: Iterable[str]) -> "ProcessMode":
        """
        Parse presence-only flags, case-insensitively.

        Args:
            argv: Command line arguments without the program name

        Returns:
            ProcessMode with unrecognised arguments preserved in order
        """
        found = set()
        passthrough = []

        for arg in argv:
            name = _flag_name(arg)
            key = next((k for k, aliases in _FLAG_ALIASES.items() if name in aliases), None)
            if key is None:
                passthrough.append(arg)
            else:
                found.add(key)

        sandbox = 'sandbox' in found
        return cls(
            multi_instance='multi' in found,
            # Sandbox runs have no personal path to make portable
            portable='portable' in found and not sandbox,
            silent='silent' in found,
            sandbox=sandbox,
            args=tuple(passthrough),
        )

    def as_portable(self) -> "ProcessMode":
        return replace(self, portable=True)
