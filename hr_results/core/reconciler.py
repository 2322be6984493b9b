"""Link published HR result files from the Open Water Event Results page.

For every calendar event with results:
  1. Work out the Age Group HR file name (the Overall page is linked from
     inside the Age Group page, so it is never installed separately).
  2. Confirm the file is in the production listing. If not, that's weird
     and we report it.
  3. Confirm results_ow has exactly one row for it. No row: install one.
     More than one row: report it for someone to take a look.
"""

import logging

from .distance import distance_for_humans
from .models import Calendar, CalendarEntry, ResultLink


logger = logging.getLogger('hr_results.reconciler')

RESULT_TYPE = 'AG'
RESULTS_TYPE_LABEL = 'Age Group+Overall'


def _echo(msg: str):
    logger.info(msg, extra={'echo': True})


def install_if_necessary(entry: CalendarEntry, file_name: str, store,
                         hr_dir_url: str, year: int) -> str:
    """Make sure results_ow links file_name, inserting a row if needed.

    Returns:
        One of 'already_installed', 'ambiguous', 'installed', 'install_failed'.
    """
    # match without the extension so either form of the stored path counts
    fragment = file_name[:-len('.html')] if file_name.endswith('.html') else file_name

    rows = store.find_installed(fragment, year)
    if len(rows) == 1:
        logger.info(f"Found ONE instance of '{fragment}' installed - NO INSTALLATION NECESSARY.")
        return 'already_installed'
    if len(rows) > 1:
        logger.error(f"Found {len(rows)} instances of '{fragment}' installed - TAKE A LOOK AT THIS!!")
        return 'ambiguous'

    _echo(f"Found ZERO instance of '{fragment}' installed - INSTALLATION UNDERWAY...")
    keyword = entry.keywords
    titles = store.find_event_titles(keyword)
    if not titles:
        logger.error(f"Didn't find any event_titles with the title like '{keyword}' - INSTALLATION FAILED!!")
        return 'install_failed'
    if len(titles) > 1:
        logger.error(f"Too many event_titles like '{keyword}' - INSTALLATION FAILED!!")
        return 'install_failed'

    try:
        hr_distance = distance_for_humans(entry.distance)
    except ValueError:
        logger.error(f"Invalid distance '{entry.distance}' for event {entry.key} - INSTALLATION FAILED!!")
        return 'install_failed'

    link = ResultLink(
        event_id=titles[0]['event_id'],
        event_date=entry.date,
        category=f'Cat {entry.cat}',
        distance=hr_distance,
        results_type=RESULTS_TYPE_LABEL,
        results_file=f'{hr_dir_url}{file_name}',
        remote=1,
    )
    store.insert_result(link)
    _echo(f"Installed '{link.results_file}' as event_id {link.event_id}.")
    return 'installed'


def reconcile(calendar: Calendar, production_files: list[str], store,
              hr_dir_url: str, year: int) -> dict:
    """Install links for every published HR result that isn't linked yet.

    Args:
        calendar: The season calendar.
        production_files: HR file names present in production for year.
        store: A ResultStore.
        hr_dir_url: URL of the production HR directory for year (ends in '/').
        year: The OW season being processed.

    Returns:
        Dict of lists of HR file names:
          checked, missing, already_installed, ambiguous, installed, install_failed
    """
    report = {
        'checked': [],
        'missing': [],
        'already_installed': [],
        'ambiguous': [],
        'installed': [],
        'install_failed': [],
    }
    published = set(production_files)

    for entry in calendar:
        # no results yet means no HR results generated yet either
        if not entry.has_results:
            continue

        file_name = entry.hr_file_name(RESULT_TYPE)
        report['checked'].append(file_name)
        if file_name not in published:
            logger.error(f"The HR file name '{file_name}' DOES NOT EXIST in the OW Points HR directory.")
            report['missing'].append(file_name)
            continue

        logger.info(f"The HR file name '{file_name}' exists in the OW Points HR directory.")
        outcome = install_if_necessary(entry, file_name, store, hr_dir_url, year)
        report[outcome].append(file_name)

    return report


def print_sync_report(report: dict):
    """Print a summary of a reconcile() report."""
    print(f"\nHR files checked: {len(report['checked'])}")
    print(f"  Already linked: {len(report['already_installed'])}")
    print(f"  Newly installed: {len(report['installed'])}")
    for name in report['installed']:
        print(f"    + {name}")

    problems = [
        ('Missing from production', report['missing']),
        ('Installed more than once', report['ambiguous']),
        ('Installation failed', report['install_failed']),
    ]
    for label, names in problems:
        if names:
            print(f"  {label}: {len(names)}")
            for name in names:
                print(f"    ! {name}")
