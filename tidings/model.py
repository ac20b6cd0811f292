# the canonical feed document model, whatever the source format
import time

rtl_languages = [
  'ar',  # Arabic (ar-**)
  'fa',  # Farsi (fa-**)
  'ur',  # Urdu (ur-**)
  'ps',  # Pashtu (ps-**)
  'syr', # Syriac (syr-**)
  'dv',  # Divehi (dv-**)
  'he',  # Hebrew (he-**)
  'yi',  # Yiddish (yi-**)
]

def is_rtl(language):
  """Return True if the language, e.g. ar-SA or he, is written right to left"""
  language = (language or '').lower()
  for prefix in rtl_languages:
    if language.startswith(prefix):
      return True
  return False

def format_date(timestamp):
  return time.strftime('%Y-%m-%d %H:%M:%S', time.gmtime(timestamp or 0))

class Feed:
  def __init__(self):
    self.id = ''
    self.title = ''
    self.description = ''
    self.feed_url = ''
    self.site_url = ''
    self.date = 0
    self.language = ''
    self.logo_url = ''
    self.items = []

  def __str__(self):
    out = [
      'Feed::id = %s' % self.id,
      'Feed::title = %s' % self.title,
      'Feed::feed_url = %s' % self.feed_url,
      'Feed::site_url = %s' % self.site_url,
      'Feed::date = %s' % format_date(self.date),
      'Feed::language = %s' % self.language,
      'Feed::description = %s' % self.description,
      'Feed::logo_url = %s' % self.logo_url,
      'Feed::items = %d items' % len(self.items),
    ]
    for item in self.items:
      out.append('----')
      out.append(str(item))
    return '\n'.join(out) + '\n'

  def __repr__(self):
    return '<Feed %r %d items>' % (self.feed_url, len(self.items))

  def get_items(self):
    return self.items

  def is_rtl(self):
    return is_rtl(self.language)

class Item:
  def __init__(self):
    self.id = ''
    self.title = ''
    self.url = ''
    self.author = ''
    self.date = 0
    self.content = ''
    self.enclosure_url = ''
    self.enclosure_type = ''
    self.language = ''

  def __str__(self):
    return '\n'.join([
      'Item::id = %s' % self.id,
      'Item::title = %s' % self.title,
      'Item::url = %s' % self.url,
      'Item::date = %s' % format_date(self.date),
      'Item::language = %s' % self.language,
      'Item::author = %s' % self.author,
      'Item::enclosure_url = %s' % self.enclosure_url,
      'Item::enclosure_type = %s' % self.enclosure_type,
      'Item::content = %d bytes' % len(self.content.encode('utf-8')),
    ])

  def __repr__(self):
    return '<Item %r>' % self.url

  def is_rtl(self):
    return is_rtl(self.language)
