from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Optional

from openpyxl.utils.cell import column_index_from_string, coordinate_from_string

from .config import Settings
from .errors import ConfigurationMissing, SourceNotFound
from .store import Source, TabularStore
from .workbook import WorkbookStore

logger = logging.getLogger(__name__)


@dataclass
class RosterApp:
    settings: Settings
    store: TabularStore
    today: date
    directory_store: TabularStore | None = None

    @classmethod
    def create(cls, settings: Settings, *, today: Optional[date] = None) -> "RosterApp":
        store = WorkbookStore(settings.workbook)
        return cls(
            settings=settings,
            store=store,
            today=today or settings.today or date.today(),
        )

    def directory_reference(self) -> Path:
        """
        Path of the Directory workbook: ``directory.reference`` from the
        config file, else the path written in the Config tab of the main
        workbook.
        """
        directory = self.settings.directory
        if directory.reference is not None:
            return directory.reference
        try:
            config_tab = self.store.open_source(directory.config_tab)
        except SourceNotFound as exc:
            raise ConfigurationMissing(
                "No directory reference configured and no "
                f"'{directory.config_tab}' tab to read it from"
            ) from exc
        column_letter, row = coordinate_from_string(directory.config_cell)
        cell = config_tab.read_region(row, column_index_from_string(column_letter), 1, 1)[0][0]
        text = cell.text.strip()
        if not text:
            raise ConfigurationMissing(
                f"Directory reference missing in {directory.config_tab}!{directory.config_cell}"
            )
        path = Path(text).expanduser()
        if not path.is_absolute():
            path = self.settings.workbook.parent / path
        return path

    def open_directory(self) -> Source:
        """The Directory tab; raises ``ConfigurationMissing`` when it cannot be opened."""
        if self.directory_store is None:
            path = self.directory_reference()
            if not path.exists():
                raise ConfigurationMissing(f"Directory workbook not found: {path}")
            logger.debug("Opening directory workbook %s", path)
            self.directory_store = WorkbookStore(path, read_only=True)
        try:
            return self.directory_store.open_source(self.settings.directory.name)
        except SourceNotFound as exc:
            raise ConfigurationMissing(
                f"Directory tab '{self.settings.directory.name}' not found"
            ) from exc

    def save(self) -> bool:
        save = getattr(self.store, "save", None)
        if save is None:
            return False
        return save()

    def close(self) -> None:
        for store in (self.store, self.directory_store):
            close = getattr(store, "close", None)
            if close is not None:
                close()
