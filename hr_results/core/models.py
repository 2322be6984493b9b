"""Data models for the human-readable results sync."""

import os
from dataclasses import dataclass, field


NO_RESULTS = 'NO RESULTS'


@dataclass
class SyncConfig:
    """Configuration for a single sync run, built once by the CLI."""
    app_dir: str              # directory holding sync_hr_results.py
    properties_dir: str       # directory holding the primary property file
    properties_file: str      # "properties.txt"
    source_data: str          # ".../SourceData"
    generated_files: str      # ".../GeneratedFiles/" (always ends with '/')
    year: int                 # OW season to process (e.g. 2024)
    year_being_processed: int  # the year we're running in
    debug: int = 0
    properties: dict = field(default_factory=dict)  # flat name -> value mapping

    def get(self, name: str, default: str = '') -> str:
        return self.properties.get(name, default)

    @property
    def hr_host(self) -> str:
        return self.get('hrHost', 'pacmasters@pacmasters.pairserver.com')

    @property
    def hr_dir_path(self) -> str:
        """Production directory holding this year's HR result files."""
        path = self.get('hrDirPath',
                        '/usr/home/pacmasters/public_html/pacificmasters.org/sites/'
                        'default/files/comp/points/OWPoints/hrResults/{owYear}')
        return path.replace('{owYear}', str(self.year))

    @property
    def hr_dir_url(self) -> str:
        """URL of the directory holding this year's HR result files."""
        url = self.get('hrDirURL',
                       'https://data.pacificmasters.org/points/OWPoints/hrResults/{owYear}/')
        url = url.replace('{owYear}', str(self.year))
        if not url.endswith('/'):
            url += '/'
        return url

    @property
    def ow_properties_path(self) -> str:
        """Full path of the OW Points property file holding the season calendar."""
        ow_dir = self.get('OWPropertiesDir',
                          os.path.join(self.app_dir, '..', '..', 'PMSOWPoints', 'SourceData'))
        name = self.get('OWPropertiesFile', '{owYear}-properties.txt')
        return os.path.join(ow_dir, name.replace('{owYear}', str(self.year)))

    @property
    def db_path(self) -> str:
        return self.get('dbPath', os.path.join(self.generated_files, 'results.db'))

    @property
    def db_type(self) -> str:
        """'mysql' for the production database, 'sqlite' for a local file."""
        default = 'mysql' if self.get('dbHost') else 'sqlite'
        return self.get('dbType', default).lower()

    @property
    def ssh_key_file(self) -> str | None:
        return self.get('sshKeyFile') or None


@dataclass
class CalendarEntry:
    """One open-water event from the season calendar."""
    key: int                  # event number, unique within the season
    file_name: str = NO_RESULTS  # partial path of the results we process, or NO_RESULTS
    cat: str = ''             # suit category, "1" or "2"
    date: str = ''            # "2024-06-08"
    distance: str = ''        # miles, e.g. "1" or "3.107"
    event_name: str = ''      # "Lake Berryessa 1 Mile"
    unique_id: str = ''
    keywords: str = ''        # substring of the event title in event_titles
    link: str = ''            # URL describing the event
    hr_link: str = ''         # HR results link generated by OW Points, if any
    extra: dict = field(default_factory=dict)

    @property
    def has_results(self) -> bool:
        return self.file_name != NO_RESULTS

    def hr_file_name(self, result_type: str = 'AG') -> str:
        """Simple name of the HR result page, e.g. Lake_Berryessa_1_Mile-cat1-AG.html"""
        event_name = ''.join('_' if c.isspace() else c for c in self.event_name)
        return f'{event_name}-cat{self.cat}-{result_type}.html'


class Calendar:
    """Season calendar: a list of entries plus key <-> file name indexes.

    Both indexes are derived from the entry list, so they always agree.
    """

    def __init__(self, entries=None):
        self._entries: dict[int, CalendarEntry] = {}
        self._file_by_key: dict[int, str] = {}
        self._key_by_file: dict[str, int] = {}
        for entry in entries or []:
            self.add(entry)

    def add(self, entry: CalendarEntry):
        """Add or replace the entry for entry.key."""
        self._entries[entry.key] = entry
        self._reindex()

    def _reindex(self):
        self._file_by_key = {k: e.file_name for k, e in self._entries.items()}
        # NO_RESULTS is shared by many entries so it can't map back to a key
        self._key_by_file = {e.file_name: k for k, e in self._entries.items()
                             if e.has_results}

    def get(self, key: int) -> CalendarEntry | None:
        return self._entries.get(key)

    def file_for(self, key: int) -> str | None:
        return self._file_by_key.get(key)

    def key_for(self, file_name: str) -> int | None:
        return self._key_by_file.get(file_name)

    def keys(self) -> list[int]:
        return list(self._entries)

    def __iter__(self):
        return iter(self._entries.values())

    def __len__(self):
        return len(self._entries)

    def __contains__(self, key):
        return key in self._entries


@dataclass
class ResultLink:
    """A row of the results_ow table linking an HR result page."""
    event_id: int
    event_date: str
    category: str             # "Cat 1"
    distance: str             # "1 Mile", "10km"
    results_type: str         # "Age Group+Overall"
    results_file: str         # absolute URL of the HR page
    remote: int = 1
