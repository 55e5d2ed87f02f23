"""
Similar-name suggestions for "unknown command" faults.

A candidate qualifies when its edit distance to the typed name is at most a
third of the typed name's length, or when it contains the typed name. Results
are ordered by distance (declaration order breaks ties), and names pointing
to a command that is already suggested are dropped, so a command and its
alias are never offered together.
"""
from .utils import Unset


def levenshtein(source, target):
    """Edit distance between two strings (insertions, deletions, substitutions)."""
    if len(source) < len(target):
        return levenshtein(target, source)

    if not target:
        return len(source)

    previous = range(len(target) + 1)
    for index, left in enumerate(source):
        current = [index + 1]
        for offset, right in enumerate(target):
            current.append(min(
                previous[offset + 1] + 1,
                current[offset] + 1,
                previous[offset] + (left != right),
            ))
        previous = current

    return previous[-1]


def find_similar_names(name, commands):
    """
    Return the names (and aliases) of commands similar to name.

    Parameters
    - name: the token that failed to match.
    - commands: a CommandCollection; names are resolved through it to detect
      aliases of the same command.
    """
    candidates = []
    for candidate in commands.get_names(include_aliases=True):
        distance = levenshtein(name, candidate)
        if distance <= len(name) / 3 or name in candidate:
            candidates.append((distance, candidate))
    candidates.sort(key=lambda pair: pair[0])

    names, seen = [], []
    for _, candidate in candidates:
        command = commands.get(candidate)
        if any(command is other for other in seen):
            continue
        seen.append(command)
        names.append(candidate)
    return names


def describe_suggestions(names, /, indent=Unset):
    """
    Render a "did you mean" block, or an empty string when there is nothing to suggest.
    """
    if not names:
        return ""
    indent = " " * 4 if indent is Unset else indent
    title = "did you mean this?" if len(names) == 1 else "did you mean one of these?"
    return "\n\n" + title + "\n" + "\n".join(indent + name for name in names)


__all__ = (
    "levenshtein",
    "find_similar_names",
    "describe_suggestions",
)
