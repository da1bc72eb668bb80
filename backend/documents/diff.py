"""
Positional line-by-line text comparison for the dashboard's diff checker.

Line i of the original is compared with line i of the changed text; there is
no alignment, so an inserted line shows every following line as modified.
"""
from dataclasses import dataclass, asdict
from typing import Dict, List


UNCHANGED = 'unchanged'
ADDED = 'added'
REMOVED = 'removed'
MODIFIED = 'modified'


@dataclass
class DiffLine:
    lineNumber: int
    type: str
    original: str
    changed: str

    def to_dict(self) -> dict:
        return asdict(self)


def diff_lines(original: str, changed: str) -> List[DiffLine]:
    """Compare two texts line by line. Either text empty yields no lines."""
    if not original or not changed:
        return []

    original_lines = original.split('\n')
    changed_lines = changed.split('\n')

    results = []
    for i in range(max(len(original_lines), len(changed_lines))):
        left = original_lines[i] if i < len(original_lines) else ''
        right = changed_lines[i] if i < len(changed_lines) else ''

        if left == right:
            kind = UNCHANGED
        elif not left:
            kind = ADDED
        elif not right:
            kind = REMOVED
        else:
            kind = MODIFIED
        results.append(DiffLine(lineNumber=i + 1, type=kind, original=left, changed=right))

    return results


def summarize(lines: List[DiffLine]) -> Dict[str, int]:
    counts = {ADDED: 0, REMOVED: 0, MODIFIED: 0, UNCHANGED: 0}
    for line in lines:
        counts[line.type] += 1
    return counts
