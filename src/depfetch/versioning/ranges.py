"""Maven version range semantics on top of ``packaging.version``.

Candidates that are not parseable versions are ignored when matching a
range; an exact (non-range) spec is matched literally.
"""

from typing import List, Optional

from packaging import version


def is_range(spec: Optional[str]) -> bool:
    """Return True when ``spec`` uses Maven range notation."""
    return bool(spec) and any(char in spec for char in "[()]")


def pick_version(spec: str, candidates: List[str]) -> Optional[str]:
    """Select the version satisfying ``spec``.

    Exact specs must be listed among the candidates; ranges pick the highest
    matching candidate.
    """
    if not is_range(spec):
        return spec if spec in candidates else None
    matching = filter_by_range(spec, candidates)
    if not matching:
        return None
    matching.sort(key=lambda v: _parse(v) or version.Version("0"), reverse=True)
    return matching[0]


def filter_by_range(range_spec: str, candidates: List[str]) -> List[str]:
    """Filter candidates by a Maven version range such as ``[1.0,2.0)`` or ``[1.0,2.0),[3.0,)``."""
    range_spec = range_spec.strip()
    matching = set()
    for part in _split_ranges(range_spec):
        matching.update(_match_bracket_range(part, candidates))
    # Keep candidate order
    return [v for v in candidates if v in matching]


def _split_ranges(range_spec: str) -> List[str]:
    """Split a union of ranges into its bracketed parts."""
    ranges = []
    current = ""
    depth = 0
    for char in range_spec:
        if char in "[(":
            if depth == 0:
                current = char
            else:
                current += char
            depth += 1
        elif char in "])":
            depth -= 1
            current += char
            if depth == 0:
                ranges.append(current)
                current = ""
        elif depth > 0:
            current += char
    return ranges


def _parse(value: str) -> Optional[version.Version]:
    try:
        return version.Version(value)
    except version.InvalidVersion:
        return None


def _match_bracket_range(range_spec: str, candidates: List[str]) -> List[str]:
    """Match one bracketed range like ``[1.0,2.0)``, ``(,1.0]`` or ``[1.2]``."""
    inner = range_spec[1:-1] if len(range_spec) >= 2 else ""
    parts = inner.split(",")

    if len(parts) == 1:
        # [1.2] is a hard requirement for exactly that version
        base = parts[0].strip()
        base_ver = _parse(base)
        return [v for v in candidates if v == base or (base_ver is not None and _parse(v) == base_ver)]

    lower_str, upper_str = parts[0].strip(), parts[1].strip()
    lower = _parse(lower_str) if lower_str else None
    upper = _parse(upper_str) if upper_str else None
    if (lower_str and lower is None) or (upper_str and upper is None):
        return []
    lower_inclusive = range_spec.startswith("[")
    upper_inclusive = range_spec.endswith("]")

    matching = []
    for candidate in candidates:
        ver = _parse(candidate)
        if ver is None:
            continue
        if lower is not None:
            if lower_inclusive and ver < lower:
                continue
            if not lower_inclusive and ver <= lower:
                continue
        if upper is not None:
            if upper_inclusive and ver > upper:
                continue
            if not upper_inclusive and ver >= upper:
                continue
        matching.append(candidate)
    return matching
