#!/usr/bin/env python3
"""Link human-readable open water results from the PMS results page.

Beginning in 2024 processing OW points also generates "human readable"
(HR) results for each event and pushes them to production. This script
makes sure every Age Group HR result in production for a year is linked
from the Open Water Event Results page, by adding a results_ow row for
any that aren't.

Usage:
    python sync_hr_results.py [year] [-dDEBUG] [-tPROPERTYFILE]
        [-sSOURCEDATADIR] [-gGENERATEDFILESDIR] [-h]
"""

import argparse
import datetime
import logging
import os
import re
import sys

# Add parent directory to path for imports (skip when frozen by PyInstaller)
if not getattr(sys, 'frozen', False):
    sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from hr_results.core.models import SyncConfig
from hr_results.core.properties import load_properties, PropertiesError
from hr_results.core.calendar_parser import load_calendar
from hr_results.core.reconciler import reconcile, print_sync_report
from hr_results.core.log_setup import init_logging
from hr_results.adapters.ssh_lister import SshFileLister
from hr_results.adapters.base import StoreError
from hr_results.adapters.mysql_store import MySqlResultStore
from hr_results.adapters.sqlite_store import SqliteResultStore


PROG = 'sync_hr_results.py'
APP_DIR = os.path.dirname(os.path.abspath(__file__))
APP_ROOT = os.path.dirname(APP_DIR)
FIRST_YEAR = 2008
LOG_FILE_NAME = 'HRResultsLog.txt'
DATE_TIME_FORMAT = '%a %b %d %Y %Z %I:%M:%S %p'

USAGE = f"""Usage:
\t{PROG} [year]
\t[-dDebugValue]
\t[-tPROPERTYFILE]
\t[-sSOURCEDATADIR]
\t[-gGENERATEDFILESDIR]
\t[-h]
where all arguments are optional:
\tyear
\t\twhere year is the year to process (default: the current year)
\t-dDebugValue - a value 0 or greater.  The larger the value, the more debug stuff printed to the log
\t-tPROPERTYFILE - the FULL PATH NAME of the properties.txt file.  The default is
\t\t{APP_DIR}/properties.txt
\t-sSOURCEDATADIR is the full path name of the SourceData directory
\t-gGENERATEDFILESDIR is the full path name of the GeneratedFiles directory
\t-h - display help text then quit

Handle human readable OW results that are produced by the OW points program but still need to
be linked to by the Open+Water+Event+Results page on our web site.
"""

logger = logging.getLogger('hr_results')


def parse_year(value: str, current_year: int) -> int:
    """Validate a year argument: four digits, FIRST_YEAR..current_year.

    Raises:
        ValueError: the year is malformed or out of range.
    """
    value = value.strip()
    if not re.fullmatch(r'\d\d\d\d', value):
        raise ValueError(f"Invalid value for the year to process ({value})")
    year = int(value)
    if year < FIRST_YEAR or year > current_year:
        raise ValueError(f"Invalid value for the year to process ({year})")
    return year


def build_parser() -> argparse.ArgumentParser:
    # A flag given without its value comes back as '', so main can count
    # it as an error instead of argparse exiting.
    parser = argparse.ArgumentParser(prog=PROG, add_help=False, exit_on_error=False,
                                     description='Link HR open water results')
    parser.add_argument('year', nargs='?', default=None, help='Year to process')
    parser.add_argument('-d', dest='debug', nargs='?', default='0', const='', help='Debug level')
    parser.add_argument('-t', dest='property_file', nargs='?', default=None, const='',
                        help='Full path of the properties.txt file')
    parser.add_argument('-s', dest='source_data', nargs='?', default=None, const='',
                        help='SourceData directory')
    parser.add_argument('-g', dest='generated_files', nargs='?', default=None, const='',
                        help='GeneratedFiles directory')
    # anything glued to -h (e.g. -h5) is ignored
    parser.add_argument('-h', dest='help', nargs='?', default=None, const='',
                        help='Show usage and quit')
    return parser


def build_config(args, year: int, now: datetime.datetime) -> SyncConfig:
    """Build the SyncConfig and seed the macros the property files may use."""
    generated_files = args.generated_files or os.path.join(APP_ROOT, 'GeneratedFiles')
    if not generated_files.endswith('/'):
        generated_files += '/'
    source_data = args.source_data or os.path.join(APP_ROOT, 'SourceData')
    if args.property_file:
        properties_dir = os.path.dirname(args.property_file)
        properties_file = os.path.basename(args.property_file)
    else:
        properties_dir, properties_file = APP_DIR, 'properties.txt'

    current_date_time = now.strftime(DATE_TIME_FORMAT)
    macros = {
        'currentDateTime': current_date_time,
        'currentDate': now.strftime('%Y-%m-%d'),
        'generateDate': current_date_time,
        'AppDirName': APP_DIR,
        'GeneratedFiles': generated_files,
        'SourceData': source_data,
        'YearBeingProcessed': str(now.year),
        'owYear': str(year),
    }
    return SyncConfig(
        app_dir=APP_DIR,
        properties_dir=properties_dir,
        properties_file=properties_file,
        source_data=source_data,
        generated_files=generated_files,
        year=year,
        year_being_processed=now.year,
        debug=int(args.debug),
        properties=macros,
    )


def read_properties(config: SyncConfig):
    """Load the property file into config and pick up values it may override.

    Raises:
        PropertiesError: a property file can't be opened.
        ValueError: the property file set an invalid owYear.
    """
    load_properties(config.properties_dir, config.properties_file, config.properties)
    config.source_data = config.get('SourceData', config.source_data)
    config.year = parse_year(config.get('owYear', str(config.year)),
                             config.year_being_processed)


def make_lister(config: SyncConfig):
    """The FileLister for the production host."""
    return SshFileLister(config.hr_host, config.hr_dir_path, config.ssh_key_file)


def open_store(config: SyncConfig):
    """Open the ResultStore named by the dbType property.

    'mysql' connects to the production database using dbHost, dbName,
    dbUser and dbPass; 'sqlite' opens (or creates) the file at dbPath.

    Raises:
        StoreError: the store can't be opened or dbType is unknown.
    """
    if config.db_type == 'mysql':
        return MySqlResultStore.open(config.get('dbHost'), config.get('dbName'),
                                     config.get('dbUser'), config.get('dbPass'))
    if config.db_type == 'sqlite':
        return SqliteResultStore.open(config.db_path)
    raise StoreError(f"Unknown dbType '{config.db_type}'")


def run_sync(config: SyncConfig, lister, store) -> dict:
    """List production, read the calendar and reconcile. Returns the report."""
    production_files = lister.list_files(config.year)
    calendar = load_calendar(config.ow_properties_path, config.year, config.properties)
    logger.info(f'Read {len(calendar)} calendar entries from {config.ow_properties_path}')
    return reconcile(calendar, production_files, store, config.hr_dir_url, config.year)


def main(argv=None) -> int:
    now = datetime.datetime.now().astimezone()
    try:
        args, unknown = build_parser().parse_known_args(argv)
    except argparse.ArgumentError as e:
        print(f"{PROG}:: FATAL ERROR:  {e}")
        print(f"{PROG}:: ABORT!:  1 errors found - giving up!")
        return 1

    if args.help is not None:
        print(USAGE)
        return 1        # non-zero because we didn't do anything useful

    num_errors = 0
    for arg in unknown:
        print(f"{PROG}:: FATAL ERROR:  Invalid flag: '{arg}'")
        num_errors += 1
    for flag, value in (('-d', args.debug), ('-t', args.property_file),
                        ('-s', args.source_data), ('-g', args.generated_files)):
        if value == '':
            print(f"{PROG}:: FATAL ERROR:  Invalid flag: '{flag}' (missing value)")
            num_errors += 1
    if args.debug and not re.fullmatch(r'[0-9]+', args.debug):
        print(f"{PROG}:: FATAL ERROR:  Invalid debug value: '{args.debug}'")
        num_errors += 1
    year = now.year
    if args.year is not None:
        try:
            year = parse_year(args.year, now.year)
        except ValueError as e:
            print(f"{PROG}:: FATAL ERROR:  {e}")
            num_errors += 1
    if num_errors > 0:
        print(f"{PROG}:: ABORT!:  {num_errors} errors found - giving up!")
        return 1

    config = build_config(args, year, now)
    log_path = os.path.join(config.generated_files, LOG_FILE_NAME)
    try:
        init_logging(log_path, config.debug)
    except OSError as e:
        print(f"{PROG}:: FATAL ERROR:  Unable to open the log file {log_path}: {e}")
        return 1

    echo = {'echo': True}
    logger.info(f"{PROG} started on {config.get('currentDateTime')}...", extra=echo)
    logger.info(f"  ...with the app root of '{APP_ROOT}'...", extra=echo)
    logger.info(f"  ...and reading properties from "
                f"'{os.path.join(config.properties_dir, config.properties_file)}'", extra=echo)

    try:
        read_properties(config)
    except (PropertiesError, ValueError) as e:
        logger.critical(f'{e} - ABORT!')
        return 1

    logger.info(f"  ...and the SourceData directory of '{config.source_data}'...", extra=echo)
    logger.info(f"  ...the OW year being processed set to: '{config.year}'", extra=echo)

    lister = make_lister(config)
    try:
        store = open_store(config)
    except StoreError as e:
        logger.critical(f'{e} - ABORT!')
        return 1
    try:
        report = run_sync(config, lister, store)
    except PropertiesError as e:
        logger.critical(f'{e} - ABORT!')
        return 1
    finally:
        store.close()

    print_sync_report(report)
    logger.info(f'{PROG} Done.', extra=echo)
    return 0


if __name__ == '__main__':
    sys.exit(main())
