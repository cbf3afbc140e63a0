"""Schema validation for snapshot payload sections."""

from typing import Dict, List

from propcheck.exceptions import SnapshotValidationError


REQUIRED_FIELDS: Dict[str, List[str]] = {
    "snapshot": ["player", "game", "stat", "line"],
    "player": ["id", "name", "team"],
    "team": ["abbrev"],
    "game": ["home_team", "away_team"],
    "game_logs": ["date", "opponent", "is_home"],
    "injuries": ["player_name", "team_side", "status"],
    "teammates": ["player", "game_logs"],
}


class SchemaValidationError(SnapshotValidationError):
    def __init__(self, table: str, message: str):
        self.table = table
        super().__init__(table, message)


def validate_table(name: str, rows: list) -> None:
    """Validate every row of a payload section has its required fields."""
    required = REQUIRED_FIELDS.get(name)
    if not required:
        return
    for idx, row in enumerate(rows):
        if not isinstance(row, dict):
            raise SchemaValidationError(name, f"row {idx} is not an object")
        missing = [field for field in required if field not in row]
        if missing:
            raise SchemaValidationError(
                name, f"row {idx} missing fields: {', '.join(missing)}"
            )
