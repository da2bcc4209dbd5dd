"""Registration record data model for the annual gala sign-up."""
from dataclasses import dataclass, fields
from typing import Any, Dict

PROGRAM_TYPES = ("唱歌", "跳舞", "小品", "弹奏", "其他")
PARTICIPANT_SOLO = "单人"
PARTICIPANT_GROUP = "多人"
PARTICIPANT_COUNTS = (PARTICIPANT_SOLO, PARTICIPANT_GROUP)
DEPARTMENTS = ("研发", "生产", "质量", "客服", "销售", "市场", "人资", "财务")

# attribute -> local cache key (camelCase) / remote column (snake_case)
_CACHE_KEYS = {
    "employee_id": "employeeId",
    "name": "name",
    "department": "department",
    "program_name": "programName",
    "program_type": "programType",
    "participant_count": "participantCount",
    "participant_list": "participantList",
    "recommended_program": "recommendedProgram",
    "timestamp": "timestamp",
}


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


@dataclass
class RegistrationRecord:
    """One employee's program sign-up, keyed by employee_id."""

    employee_id: str
    name: str = ""
    department: str = ""
    program_name: str = ""
    program_type: str = PROGRAM_TYPES[0]
    participant_count: str = PARTICIPANT_SOLO
    participant_list: str = ""
    recommended_program: str = ""
    timestamp: str = ""

    def __post_init__(self):
        """Coerce text fields and validate the key."""
        for field in fields(self):
            setattr(self, field.name, _as_text(getattr(self, field.name)))

        self.employee_id = self.employee_id.strip()
        if not self.employee_id:
            raise ValueError("Employee ID cannot be empty")

    @property
    def is_group(self) -> bool:
        return self.participant_count == PARTICIPANT_GROUP

    @property
    def roster(self) -> str:
        """Participant list, only meaningful for group performances."""
        return self.participant_list if self.is_group else ""

    def to_cache_dict(self) -> Dict[str, str]:
        """Serialize for the local cache (camelCase keys)."""
        return {key: getattr(self, attr) for attr, key in _CACHE_KEYS.items()}

    @classmethod
    def from_cache_dict(cls, data: Dict[str, Any]) -> "RegistrationRecord":
        """
        Build a record from a local cache entry.

        Raises:
            ValueError: If the entry has no employee ID
        """
        return cls(**{attr: data.get(key) for attr, key in _CACHE_KEYS.items()})

    def to_row(self) -> Dict[str, str]:
        """Serialize for the remote table (snake_case columns)."""
        return {attr: getattr(self, attr) for attr in _CACHE_KEYS}

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "RegistrationRecord":
        """
        Build a record from a remote table row.

        Raises:
            ValueError: If the row has no employee_id column value
        """
        return cls(**{attr: row.get(attr) for attr in _CACHE_KEYS})
