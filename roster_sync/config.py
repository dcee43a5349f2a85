from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator


class GridSettings(BaseModel):
    """Checkbox grid layout: one person per row, one dated event per column."""

    date_row: int = 2
    event_name_row: Optional[int] = None
    first_column: int = 9
    event_label: Optional[str] = None
    placeholder_label: str = "Post event name here"
    volunteer: bool = False

    @model_validator(mode="after")
    def _needs_a_label(self) -> "GridSettings":
        if self.event_name_row is None and not self.event_label:
            raise ValueError("grid needs either event_name_row or event_label")
        return self


class TabSettings(BaseModel):
    name: str
    last_name_column: int = 3
    first_name_column: int = 4
    header_rows: int = 1
    id_column: Optional[int] = None
    sequence_column: Optional[int] = None
    status_column: Optional[int] = None
    detail_columns: Dict[str, int] = Field(default_factory=dict)
    required: bool = False
    feeder: bool = False
    target: bool = True
    grid: Optional[GridSettings] = None

    @property
    def data_start_row(self) -> int:
        return self.header_rows + 1


class DirectorySettings(TabSettings):
    name: str = "Directory"
    header_rows: int = 3
    id_column: Optional[int] = 1
    target: bool = False
    reference: Optional[Path] = None
    config_tab: str = "Config"
    config_cell: str = "B2"
    detail_columns: Dict[str, int] = Field(
        default_factory=lambda: {"gender": 5, "lineage": 6, "age": 8}
    )
    registration_date_column: Optional[int] = 21

    @field_validator("reference", mode="before")
    @classmethod
    def _expand_reference(cls, value: Optional[str | Path]) -> Optional[Path]:
        if value in (None, ""):
            return None
        return Path(value).expanduser().resolve()


class AttendanceLogSettings(BaseModel):
    name: str = "Attendance Log"
    header_rows: int = 1
    id_column: int = 1
    full_name_column: int = 2
    last_name_column: int = 3
    first_name_column: int = 4
    type_column: int = 5
    event_column: int = 6
    date_column: int = 7
    timestamp_column: int = 8
    status_column: int = 9
    remarks_column: int = 10
    notes_column: int = 11
    extra_column: int = 12
    logged_label: str = "Logged"

    @property
    def data_start_row(self) -> int:
        return self.header_rows + 1


class LogImportSettings(BaseModel):
    """Where unprocessed log rows land: the service grid, the event grid or the pastoral tab."""

    service_tab: str = "Sunday Service"
    event_tab: str = "Event Attendance"
    pastoral_tab: str = "Pastoral Check-In"
    event_count_row: Optional[int] = 4
    type_column: Optional[int] = 6
    pastoral_recent_column: int = 5
    pastoral_previous_column: int = 6
    pastoral_notes_column: int = 7
    pastoral_extra_column: int = 8


class StatsSettings(BaseModel):
    name: str = "Attendance Stats"
    header_rows: int = 2

    @property
    def data_start_row(self) -> int:
        return self.header_rows + 1


class GuestsSettings(BaseModel):
    name: str = "Guests"
    header_rows: int = 3
    first_column: int = 2
    service_tab: str = "Sunday Service"
    event_tab: str = "Event Attendance"
    intro_event: str = "Community Intro"

    @property
    def data_start_row(self) -> int:
        return self.header_rows + 1


def _default_tabs() -> List[TabSettings]:
    details = {"gender": 5, "lineage": 6, "age": 7}
    return [
        TabSettings(
            name="Event Attendance",
            header_rows=4,
            id_column=1,
            status_column=8,
            detail_columns=details,
            feeder=True,
            grid=GridSettings(date_row=2, event_name_row=3),
        ),
        TabSettings(
            name="Sunday Service",
            header_rows=3,
            id_column=1,
            status_column=8,
            detail_columns=details,
            feeder=True,
            grid=GridSettings(date_row=2, event_label="Sunday Service"),
        ),
        TabSettings(name="Appsheet Sunserv", last_name_column=2, first_name_column=3, sequence_column=1),
        TabSettings(name="Appsheet Event", last_name_column=2, first_name_column=3, sequence_column=1),
        TabSettings(name="Appsheet Pastoral", last_name_column=2, first_name_column=3, sequence_column=1),
        TabSettings(name="Pastoral Check-In", header_rows=3, feeder=True),
    ]


class Settings(BaseModel):
    workbook: Path
    directory: DirectorySettings = DirectorySettings()
    tabs: List[TabSettings] = Field(default_factory=_default_tabs)
    registry_order: List[str] = Field(
        default_factory=lambda: ["Event Attendance", "Sunday Service"]
    )
    attendance_log: AttendanceLogSettings = AttendanceLogSettings()
    log_import: LogImportSettings = LogImportSettings()
    stats: StatsSettings = StatsSettings()
    guests: GuestsSettings = GuestsSettings()
    today: Optional[date] = None

    @field_validator("workbook", mode="before")
    @classmethod
    def _expand_workbook(cls, value: str | Path) -> Path:
        return Path(value).expanduser().resolve()

    @model_validator(mode="after")
    def _known_registry_tabs(self) -> "Settings":
        names = {tab.name for tab in self.tabs}
        unknown = [name for name in self.registry_order if name not in names]
        if unknown:
            raise ValueError(f"registry_order names unknown tabs: {', '.join(unknown)}")
        return self

    def tab(self, name: str) -> Optional[TabSettings]:
        for tab in self.tabs:
            if tab.name == name:
                return tab
        return None

    @property
    def target_tabs(self) -> List[TabSettings]:
        return [tab for tab in self.tabs if tab.target]

    @property
    def grid_tabs(self) -> List[TabSettings]:
        return [tab for tab in self.tabs if tab.grid is not None]

    @property
    def status_tabs(self) -> List[TabSettings]:
        return [tab for tab in self.tabs if tab.status_column]

    @classmethod
    def load(cls, path: Path) -> "Settings":
        with path.open("r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh)
        return cls.model_validate(raw)


def find_config(explicit_path: Optional[Path]) -> Path:
    if explicit_path:
        return explicit_path
    cwd = Path.cwd()
    for candidate in (cwd / "config.yaml", cwd / "config.yml"):
        if candidate.exists():
            return candidate
    raise FileNotFoundError("Could not find config.yaml - pass --config explicitly.")
