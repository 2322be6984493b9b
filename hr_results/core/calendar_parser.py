"""Build the season calendar from the OW Points property file.

Only the >calendar ... >endcalendar block matters here. Each line in it
sets one detail of one event:

    1-FileName   2024/LakeBerryessa.xlsx
    1-CAT        1
    1-Date       2024-06-08
    1-Distance   1
    1-EventName  Lake Berryessa 1 Mile
    1-UniqueID   101
    1-Keywords   Berryessa
    1-Link       https://...

where '1' is the event number and the word after the '-' is the detail.
"""

import logging
import re

from .models import Calendar, CalendarEntry, NO_RESULTS
from .properties import PropertyEvaluator


logger = logging.getLogger('hr_results.calendar')

_LINE_RE = re.compile(r'^(\d+)-(\w+)\s*(.*)$')

# detail name (lowercase) -> CalendarEntry attribute
DETAIL_FIELDS = {
    'filename': 'file_name',
    'cat': 'cat',
    'date': 'date',
    'distance': 'distance',
    'eventname': 'event_name',
    'uniqueid': 'unique_id',
    'keywords': 'keywords',
    'link': 'link',
    'hrlink': 'hr_link',
}


class CalendarLineProcessor:
    """Accumulate calendar lines into CalendarEntry records."""

    def __init__(self, year: int):
        self.year = year
        self._details: dict[int, dict] = {}

    def __call__(self, line: str):
        self.process(line)

    def process(self, line: str):
        m = _LINE_RE.match(line)
        if not m:
            logger.warning(f"Unrecognized calendar line '{line}' - ignored")
            return
        key = int(m.group(1))
        detail, value = m.group(2), m.group(3).strip()
        details = self._details.setdefault(key, {'extra': {}})
        attr = DETAIL_FIELDS.get(detail.lower())
        if attr is None:
            logger.warning(f"Unknown calendar detail '{detail}' for event {key}")
            details['extra'][detail] = value
        else:
            details[attr] = value

    def build(self) -> Calendar:
        calendar = Calendar()
        for key, details in self._details.items():
            entry = CalendarEntry(key=key, **details)
            if not entry.file_name:
                entry.file_name = NO_RESULTS
            if entry.date and not entry.date.startswith(f'{self.year}-'):
                logger.warning(f"Event {key} ({entry.event_name}) has date "
                               f"'{entry.date}' outside of {self.year}")
            calendar.add(entry)
        return calendar


def load_calendar(path: str, year: int, macros: dict | None = None) -> Calendar:
    """Parse the calendar block of the OW property file at path.

    Args:
        path: Full path of the OW Points property file for the year.
        year: The OW season being processed.
        macros: Mapping used to expand {macros} in >include paths. Not modified.

    Returns:
        The season Calendar.

    Raises:
        PropertiesError: path (or a file it includes) can't be opened.
    """
    processor = CalendarLineProcessor(year)
    evaluator = PropertyEvaluator(dict(macros or {}), on_calendar_line=processor,
                                  assign=False)
    evaluator.evaluate_file(path)
    calendar = processor.build()
    logger.debug(f'Loaded {len(calendar)} calendar entries from {path}')
    return calendar
