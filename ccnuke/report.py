from typing import Iterable, List

from ccnuke.models import AwsAccountResources, DeletionOutcome

HEADER = ["Resource", "Operation", "Status", "StatusMessage", "Error"]


def outcome_row(outcome: DeletionOutcome) -> List[str]:
    shown = outcome.for_display()
    return [
        f"{shown.type_name} - {shown.identifier}",
        shown.operation,
        shown.operation_status.value,
        shown.status_message,
        shown.error_text(),
    ]


def build_table(outcomes: Iterable[DeletionOutcome]) -> List[List[str]]:
    """Header row followed by one row per outcome, in the given order."""
    return [list(HEADER)] + [outcome_row(o) for o in outcomes]


def format_table(rows: List[List[str]]) -> str:
    widths = [max(len(row[i]) for row in rows) for i in range(len(rows[0]))]
    lines = []
    for n, row in enumerate(rows):
        lines.append(' | '.join(cell.ljust(w) for cell, w in zip(row, widths)).rstrip())
        if n == 0:
            lines.append('-+-'.join('-' * w for w in widths))
    return '\n'.join(lines)


def render_region(region: str, rows: List[List[str]]) -> None:
    print(f"\n=== Region: {region} ===")
    print(format_table(rows))
    print()


def render_inventory(account: AwsAccountResources) -> None:
    print('\n=== Resources that would be nuked ===')
    if not account.resources:
        print('  None')
        return
    for region, region_resources in account.resources.items():
        print(f"\nRegion: {region}")
        for resource in region_resources.resources:
            print(f"  {resource.type_name}:")
            for identifier in resource.identifiers:
                print(f"    - {identifier}")
