"""Using directive management for generated C# sources."""

from __future__ import annotations

import re

_USING = re.compile(r"^using\s+(?:static\s+)?(?P<name>[\w.]+)\s*;\s*$")


def _sort_key(directive: str) -> tuple[int, str]:
    match = _USING.match(directive)
    name = match.group("name") if match else directive
    is_system = name == "System" or name.startswith("System.")
    return (0 if is_system else 1, name.lower())


def add_using(text: str, namespace: str) -> str:
    """Add ``using <namespace>;`` to a compilation unit if it is missing.

    The leading block of using directives is kept ordered: ``System`` and
    ``System.*`` first, everything else alphabetically.

    Example:
        >>> add_using("using Kinetix.Test;\\n", "System")
        'using System;\\nusing Kinetix.Test;\\n'
    """
    lines = text.splitlines()

    start = 0
    while start < len(lines) and not lines[start].strip():
        start += 1
    end = start
    while end < len(lines) and _USING.match(lines[end].strip()):
        end += 1

    existing = [line.strip() for line in lines[start:end]]
    if any(_USING.match(line).group("name") == namespace for line in existing):  # type: ignore[union-attr]
        return text

    block = sorted([*existing, f"using {namespace};"], key=_sort_key)
    rest = lines[end:]
    if not existing and rest and rest[0].strip():
        # keep a blank line between the new block and the code
        rest = ["", *rest]
    return "\n".join([*lines[:start], *block, *rest]) + "\n"
