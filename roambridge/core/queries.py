"""
Datalog query text and daily-note naming.

Pure helpers: they only build strings and perform no I/O, so they can be
used and tested without a live session.
"""

from datetime import date
from typing import Optional


def _ordinal(day: int) -> str:
    if 11 <= day % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"


def daily_note_title(day: Optional[date] = None) -> str:
    """Title of the daily note page, e.g. 'October 17th, 2026'"""
    day = day or date.today()
    return f"{day.strftime('%B')} {_ordinal(day.day)}, {day.year}"


def daily_note_uid(day: Optional[date] = None) -> str:
    """Uid of the daily note page, e.g. '10-17-2026'"""
    day = day or date.today()
    return day.strftime('%m-%d-%Y')


# NOTE: text is interpolated as-is. Embedded double quotes are not escaped,
# so such text produces a malformed query.

def find_blocks_on_page(text: str, page_title: str) -> str:
    """
    Query for the uids of blocks whose text is exactly `text` on the page
    titled `page_title`. Meant to be used with deletion by query.
    """
    return f"""[:find ?uid
    :where [?b :block/string "{text}"]
           [?b :block/uid ?uid]
           [?b :block/page ?p]
           [?p :node/title "{page_title}"]]"""


def find_blocks_containing(text: str) -> str:
    """
    Query for all blocks containing `text`.

    Rows have the shape [uid, string, page title].
    """
    return f"""[:find ?uid ?string ?title
    :where [?b :block/string ?string]
           [(clojure.string/includes? ?string "{text}")]
           [?b :block/uid ?uid]
           [?b :block/page ?p]
           [?p :node/title ?title]]"""


def find_blocks_on_page_uid(page_uid: str) -> str:
    """Query for [string, uid] of every block on the page with uid `page_uid`"""
    return f"""[:find ?string ?uid
    :where [?p :block/uid "{page_uid}"]
           [?b :block/page ?p]
           [?b :block/string ?string]
           [?b :block/uid ?uid]]"""
