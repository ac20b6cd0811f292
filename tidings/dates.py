# Best-effort parsing of the many date formats found in feeds
import calendar, datetime, re, time, zoneinfo
from feedparser.datetimes import _parse_date as feedparser_parse_date

# (strptime format, length the input is truncated to or None)
# Formats carrying an offset come first, the naive ones are interpreted in
# the configured timezone
formats = [
  # ATOM, ISO 8601, RFC 3339
  ('%Y-%m-%dT%H:%M:%S%z', None),
  ('%Y-%m-%dT%H:%M:%S.%f%z', None),
  # RSS, RFC 1123, RFC 2822
  ('%a, %d %b %Y %H:%M:%S %z', None),
  # cookie, RFC 850
  ('%A, %d-%b-%Y %H:%M:%S %Z', None),
  ('%A, %d-%b-%y %H:%M:%S %Z', None),
  # RFC 822, RFC 1036
  ('%a, %d %b %y %H:%M:%S %z', None),
  ('%a, %d %b %Y %H:%M:%S %Z', None),
  # without timezone or with garbage after the time
  ('%a, %d %b %Y %H:%M:%S', 25),
  ('%a, %d %b %Y %I:%M:%S', 25),
  ('%a %b %d %Y %H:%M:%S', 24),
  ('%d %b %Y %H:%M:%S', 20),
  ('%Y-%m-%d %H:%M:%S', 19),
  ('%Y-%m-%dT%H:%M:%S', 19),
  ('%d/%m/%Y %H:%M:%S', 19),
  ('%a, %d %b %Y', 16),
  ('%Y-%m-%d', 10),
  ('%d-%m-%Y', 10),
  ('%m-%d-%Y', 10),
  ('%d.%m.%Y', 10),
  ('%m.%d.%Y', 10),
  ('%d/%m/%Y', 10),
  ('%m/%d/%Y', 10),
]

# year, month and day of ISO 8601 dates, feedparser normalizes them with
# mktime() so 2014-02-30 would silently become March 2
iso_date_re = re.compile(r'^(\d{4})-?(\d{2})(?:-?(\d{2}))?(?:[T ]|$)')

def get_timezone(name):
  try:
    return zoneinfo.ZoneInfo(name or 'UTC')
  except (zoneinfo.ZoneInfoNotFoundError, ValueError):
    return datetime.timezone.utc

def get_valid_date(fmt, value, tz):
  """Timestamp for value in format fmt, None if it does not match or the
  date does not exist (day 32, month 13, February 30...)"""
  if '%Z' in fmt:
    # strptime only accepts UTC, GMT and the local zone names for %Z
    tz = datetime.timezone.utc
  try:
    date = datetime.datetime.strptime(value, fmt)
  except ValueError:
    return None
  if date.tzinfo is None:
    date = date.replace(tzinfo=tz)
  return int(date.timestamp())

def is_calendar_date(value):
  """False for ISO 8601 dates that do not exist, like 2014-13-01"""
  m = iso_date_re.match(value)
  if not m:
    return True
  year, month, day = m.groups()
  try:
    datetime.date(int(year), int(month), int(day or 1))
  except ValueError:
    return False
  return True

def parse_date(value, timezone='UTC'):
  """Convert a feed date to epoch seconds, never fails.

  Falls back to the current time when nothing matches, as items are sorted
  by date downstream and need a usable value.
  """
  value = (value or '').strip()
  if value:
    tz = get_timezone(timezone)
    for fmt, length in formats:
      truncated = value[:length].strip() if length else value
      timestamp = get_valid_date(fmt, truncated, tz)
      if timestamp is not None and timestamp > 0:
        return timestamp
    # feedparser knows about more exotic formats (W3CDTF, asctime, Korean,
    # Greek, Hungarian...), its handlers return a 9-tuple in GMT
    timestamp = 0
    if is_calendar_date(value):
      try:
        parsed = feedparser_parse_date(value)
        if parsed:
          # rejects the day 32 a handler could still let through
          datetime.datetime(*parsed[:6])
          timestamp = calendar.timegm(parsed)
      except (TypeError, ValueError, OverflowError, IndexError):
        timestamp = 0
    if timestamp > 0:
      return timestamp
  return int(time.time())
