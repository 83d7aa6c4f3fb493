from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

GLOBAL_REGION = "global"
# us-east-1 is available in every account
DEFAULT_REGION = "us-east-1"

MAX_BATCH_SIZE = 50


class OperationStatus(str, Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    CANCEL_IN_PROGRESS = "CANCEL_IN_PROGRESS"
    CANCEL_COMPLETE = "CANCEL_COMPLETE"
    NOT_AVAILABLE = "Not Available"

    @classmethod
    def parse(cls, value: Optional[str]) -> "OperationStatus":
        try:
            return cls(value)
        except ValueError:
            return cls.NOT_AVAILABLE


@dataclass
class AwsResource:
    """All identifiers of one resource type found in one region."""
    type_name: str
    identifiers: List[str] = field(default_factory=list)

    def resource_name(self) -> str:
        return self.type_name

    def resource_identifiers(self) -> List[str]:
        return self.identifiers

    def max_batch_size(self) -> int:
        return MAX_BATCH_SIZE


@dataclass
class AwsRegionResource:
    resources: List[AwsResource] = field(default_factory=list)

    def add(self, type_name: str, identifiers: List[str]) -> None:
        """Attach identifiers, merging into an existing entry for the same type."""
        for resource in self.resources:
            if resource.type_name == type_name:
                resource.identifiers.extend(identifiers)
                return
        self.resources.append(AwsResource(type_name=type_name, identifiers=list(identifiers)))

    def map_resource_name_to_identifiers(self) -> Dict[str, List[str]]:
        """Resource type (lower-cased) to its identifiers, skipping empty types.

        For example: {"aws::logs::loggroup": ["testy", "westside"]}
        """
        mapping: Dict[str, List[str]] = {}
        for resource in self.resources:
            if resource.identifiers:
                mapping.setdefault(resource.type_name.lower(), []).extend(resource.identifiers)
        return mapping

    def count_of_resource_type(self, resource_type: str) -> int:
        return len(self.identifiers_for_resource_type(resource_type))

    def resource_type_present(self, resource_type: str) -> bool:
        return self.count_of_resource_type(resource_type) > 0

    def identifiers_for_resource_type(self, resource_type: str) -> List[str]:
        return self.map_resource_name_to_identifiers().get(resource_type.lower(), [])

    def total_count(self) -> int:
        return sum(len(r.identifiers) for r in self.resources)


@dataclass
class AwsAccountResources:
    resources: Dict[str, AwsRegionResource] = field(default_factory=dict)

    def get_region(self, region: str) -> AwsRegionResource:
        return self.resources.get(region, AwsRegionResource())

    def regions(self) -> List[str]:
        return list(self.resources)

    def total_count(self) -> int:
        return sum(r.total_count() for r in self.resources.values())


def truncate_text(s: str, max_len: int) -> str:
    return s if len(s) < max_len else s[:max_len]


@dataclass
class DeletionOutcome:
    """Result of deleting one identifier.

    Owned by the task that deletes the identifier until it is returned.
    """
    type_name: str
    identifier: str
    operation: str = ""
    operation_status: OperationStatus = OperationStatus.NOT_AVAILABLE
    status_message: str = ""
    error: Optional[Exception] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.operation_status == OperationStatus.SUCCESS

    def error_text(self) -> str:
        return "nil" if self.error is None else str(self.error)

    def for_display(self) -> "DeletionOutcome":
        return DeletionOutcome(
            type_name=self.type_name,
            identifier=self.identifier,
            operation=truncate_text(self.operation, 25),
            operation_status=self.operation_status,
            status_message=truncate_text(self.status_message, 60),
            error=self.error,
        )
